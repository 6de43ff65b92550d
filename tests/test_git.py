import subprocess
from pathlib import Path

import pytest

from tests.conftest import run_git
from wt import git
from wt.errors import GitError, NotARepositoryError
from wt.repo import resolve_repo

PORCELAIN = """\
worktree /src/repo
HEAD 1111111111111111111111111111111111111111
branch refs/heads/main

worktree /src/repo-worktrees/feature-x
HEAD 2222222222222222222222222222222222222222
branch refs/heads/feature/x
locked reason here

worktree /src/repo-worktrees/detached
HEAD 3333333333333333333333333333333333333333
detached
prunable gitdir file points to non-existent location
"""


def test_parse_worktree_list_reads_every_block() -> None:
    worktrees = git.parse_worktree_list(PORCELAIN)

    assert [wt.path for wt in worktrees] == [
        Path("/src/repo"),
        Path("/src/repo-worktrees/feature-x"),
        Path("/src/repo-worktrees/detached"),
    ]
    assert [wt.branch for wt in worktrees] == ["main", "feature/x", git.DETACHED_BRANCH]
    assert worktrees[0].head == "1" * 40
    assert worktrees[1].locked
    assert worktrees[2].prunable
    assert not worktrees[0].locked


def test_parse_worktree_list_handles_crlf_and_missing_trailing_blank() -> None:
    output = "worktree /a\r\nHEAD abc\r\nbranch refs/heads/main\r\n\r\nworktree /b\r\nbare"

    worktrees = git.parse_worktree_list(output)

    assert len(worktrees) == 2
    assert worktrees[0].branch == "main"
    assert worktrees[1].bare


def test_parse_worktree_list_empty_output() -> None:
    assert git.parse_worktree_list("") == []


def test_run_git_raises_with_stderr(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        return subprocess.CompletedProcess(command, 128, stdout="", stderr="fatal: nope\n")

    monkeypatch.setattr(git.subprocess, "run", fake_run)

    with pytest.raises(GitError, match="fatal: nope") as excinfo:
        git.run_git("status")

    assert excinfo.value.command == ["git", "status"]


def test_run_git_reports_missing_binary(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        raise FileNotFoundError("git")

    monkeypatch.setattr(git.subprocess, "run", fake_run)

    with pytest.raises(GitError, match="failed to run git"):
        git.run_git("status")


def test_run_git_reports_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        raise subprocess.TimeoutExpired(command, 30)

    monkeypatch.setattr(git.subprocess, "run", fake_run)

    with pytest.raises(GitError, match="timed out"):
        git.run_git("status")


def test_list_remote_branches_strips_remote_and_dedupes(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    output = "origin\norigin/HEAD\norigin/main\norigin/feature/x\nupstream/main\n"
    monkeypatch.setattr(git, "run_git", lambda *args, **kwargs: output)

    assert git.list_remote_branches() == ["feature/x", "main"]


def test_list_local_branches_failure_adds_context(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing(*args: str, **kwargs: object) -> str:
        raise GitError(list(args), "boom")

    monkeypatch.setattr(git, "run_git", failing)

    with pytest.raises(GitError, match="listing local branches: boom"):
        git.list_local_branches()


def test_list_worktrees_in_fresh_repo(repo: Path) -> None:
    worktrees = git.list_worktrees()

    assert len(worktrees) == 1
    assert worktrees[0].path == repo
    assert worktrees[0].branch == "main"


def test_add_and_remove_worktree(repo: Path, tmp_path: Path) -> None:
    target = tmp_path / "linked"

    git.add_worktree(target, "feature", create_branch=True)

    branches = {wt.branch: wt.path for wt in git.list_worktrees()}
    assert branches["feature"].resolve() == target.resolve()
    assert git.branch_exists("feature")

    git.remove_worktree(target, force=False)

    assert not target.exists()
    assert [wt.branch for wt in git.list_worktrees()] == ["main"]


def test_add_worktree_from_base(repo: Path, tmp_path: Path) -> None:
    run_git(repo, "branch", "base-branch")

    git.add_worktree(tmp_path / "from-base", "new-branch", create_branch=True, base="base-branch")

    assert "new-branch" in git.list_local_branches()


def test_add_worktree_for_checked_out_branch_fails(repo: Path, tmp_path: Path) -> None:
    with pytest.raises(GitError, match="creating worktree"):
        git.add_worktree(tmp_path / "again", "main", create_branch=False)


def test_is_dirty_sees_untracked_files(repo: Path) -> None:
    assert not git.is_dirty(repo)

    (repo / "notes.txt").write_text("hello\n")

    assert git.is_dirty(repo)


def test_ahead_behind_without_upstream_is_zero(repo: Path) -> None:
    assert git.ahead_behind(repo) == (0, 0)


def test_branch_exists_and_local_branches(repo: Path) -> None:
    run_git(repo, "branch", "topic")

    assert git.branch_exists("topic")
    assert not git.branch_exists("missing")
    assert git.list_local_branches() == ["main", "topic"]
    assert git.list_remote_branches() == []


def test_resolve_repo_from_main_and_linked_worktree(repo: Path) -> None:
    info = resolve_repo()
    assert info.main_worktree == repo
    assert info.repo_name == "repo"
    assert info.worktrees_dir == repo.parent / "repo-worktrees"

    linked = info.worktrees_dir / "feature"
    git.add_worktree(linked, "feature", create_branch=True)

    from_linked = resolve_repo(linked)
    assert from_linked == info


def test_resolve_repo_outside_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    outside = tmp_path / "plain"
    outside.mkdir()
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))

    with pytest.raises(NotARepositoryError, match="not a git repository"):
        resolve_repo(outside)
