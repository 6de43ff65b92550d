from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path

from wt.errors import GitError

logger = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 30.0
DETACHED_BRANCH = "(detached)"


@dataclass
class Worktree:
    path: Path
    branch: str = ""
    head: str = ""
    bare: bool = False
    locked: bool = False
    prunable: bool = False


def run_git(*args: str, cwd: Path | None = None) -> str:
    """Run ``git`` and return its stdout, raising ``GitError`` on failure."""
    command = ["git", *args]
    logger.debug("running %s", " ".join(command))
    try:
        completed = subprocess.run(
            command,
            cwd=cwd,
            check=False,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except subprocess.TimeoutExpired as exc:
        raise GitError(list(args), "git command timed out") from exc
    except OSError as exc:
        raise GitError(list(args), f"failed to run git: {exc}") from exc

    if completed.returncode != 0:
        err = (
            completed.stderr.strip()
            or completed.stdout.strip()
            or f"git exited with status {completed.returncode}"
        )
        logger.debug("git failed (%d): %s", completed.returncode, err)
        raise GitError(list(args), err)

    return completed.stdout


def parse_worktree_list(output: str) -> list[Worktree]:
    """Parse ``git worktree list --porcelain`` output."""
    worktrees: list[Worktree] = []
    current: Worktree | None = None

    def flush() -> None:
        nonlocal current
        if current is not None:
            worktrees.append(current)
        current = None

    for raw_line in output.replace("\r\n", "\n").split("\n"):
        line = raw_line.strip()
        if not line:
            flush()
            continue

        if line.startswith("worktree "):
            flush()
            current = Worktree(path=Path(line.removeprefix("worktree ")))
            continue

        if current is None:
            continue

        if line.startswith("HEAD "):
            current.head = line.removeprefix("HEAD ")
        elif line.startswith("branch "):
            current.branch = line.removeprefix("branch ").removeprefix("refs/heads/")
        elif line == "bare":
            current.bare = True
        elif line == "detached":
            if not current.branch:
                current.branch = DETACHED_BRANCH
        elif line.startswith("locked"):
            current.locked = True
        elif line.startswith("prunable"):
            current.prunable = True

    flush()
    return worktrees


def list_worktrees(*, cwd: Path | None = None) -> list[Worktree]:
    try:
        output = run_git("worktree", "list", "--porcelain", cwd=cwd)
    except GitError as exc:
        raise exc.with_context("listing worktrees") from exc
    return parse_worktree_list(output)


def add_worktree(
    path: Path,
    branch: str,
    *,
    create_branch: bool,
    base: str | None = None,
    cwd: Path | None = None,
) -> None:
    """Create a worktree at ``path``.

    With ``create_branch`` a new branch is started from ``base`` (or HEAD);
    otherwise the existing ``branch`` is checked out.
    """
    args = ["worktree", "add"]
    if create_branch:
        args.extend(["-b", branch, str(path)])
        if base:
            args.append(base)
    else:
        args.extend([str(path), branch])

    try:
        run_git(*args, cwd=cwd)
    except GitError as exc:
        raise exc.with_context("creating worktree") from exc


def remove_worktree(path: Path, *, force: bool, cwd: Path | None = None) -> None:
    args = ["worktree", "remove"]
    if force:
        args.append("--force")
    args.append(str(path))

    try:
        run_git(*args, cwd=cwd)
    except GitError as exc:
        raise exc.with_context("removing worktree") from exc


def is_dirty(path: Path) -> bool:
    try:
        output = run_git("-C", str(path), "status", "--porcelain")
    except GitError as exc:
        raise exc.with_context("checking dirty state") from exc
    return bool(output.strip())


def ahead_behind(path: Path) -> tuple[int, int]:
    """Return commits ahead of and behind the upstream, ``(0, 0)`` without one."""
    try:
        output = run_git(
            "-C",
            str(path),
            "rev-list",
            "--left-right",
            "--count",
            "HEAD...@{upstream}",
        )
    except GitError as exc:
        message = str(exc)
        if "no upstream" in message or "unknown revision" in message:
            return 0, 0
        raise exc.with_context("checking ahead/behind") from exc

    parts = output.split()
    if len(parts) != 2:
        return 0, 0
    return int(parts[0]), int(parts[1])


def branch_exists(name: str, *, cwd: Path | None = None) -> bool:
    """Check for a local branch or a branch of that name on any remote."""
    try:
        run_git("show-ref", "--verify", "--quiet", f"refs/heads/{name}", cwd=cwd)
    except GitError:
        pass
    else:
        return True

    try:
        output = run_git("branch", "-r", "--list", f"*/{name}", cwd=cwd)
    except GitError as exc:
        raise exc.with_context("checking remote branches") from exc
    return bool(output.strip())


def list_local_branches(*, cwd: Path | None = None) -> list[str]:
    try:
        output = run_git("branch", "--format=%(refname:short)", cwd=cwd)
    except GitError as exc:
        raise exc.with_context("listing local branches") from exc
    return _parse_lines(output)


def list_remote_branches(*, cwd: Path | None = None) -> list[str]:
    """Remote branch names with the remote prefix stripped, deduplicated."""
    try:
        output = run_git("branch", "-r", "--format=%(refname:short)", cwd=cwd)
    except GitError as exc:
        raise exc.with_context("listing remote branches") from exc

    branches: set[str] = set()
    for line in _parse_lines(output):
        if line.endswith("/HEAD"):
            continue
        _, separator, name = line.partition("/")
        if separator:
            branches.add(name)
    return sorted(branches)


def _parse_lines(output: str) -> list[str]:
    return sorted(line.strip() for line in output.splitlines() if line.strip())
