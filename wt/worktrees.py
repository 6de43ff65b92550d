from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Sequence
from pathlib import Path

from wt import git
from wt.errors import (
    DirtyWorktreeError,
    GitError,
    NoBranchesError,
    WorktreeExistsError,
)
from wt.git import Worktree
from wt.models import Entry
from wt.names import sanitize_branch_name
from wt.rendering import WorktreeRow
from wt.repo import RepoInfo, ensure_worktrees_dir

logger = logging.getLogger(__name__)


def relative_path(info: RepoInfo, path: Path) -> str:
    return os.path.relpath(path, info.main_worktree.parent)


def is_main(info: RepoInfo, worktree: Worktree) -> bool:
    return worktree.path == info.main_worktree


def linked_worktrees(info: RepoInfo, worktrees: Iterable[Worktree]) -> list[Worktree]:
    return [worktree for worktree in worktrees if not is_main(info, worktree)]


def worktree_entries(
    info: RepoInfo, worktrees: Iterable[Worktree], *, include_main: bool = True
) -> list[Entry]:
    entries: list[Entry] = []
    for worktree in worktrees:
        main = is_main(info, worktree)
        if main and not include_main:
            continue
        entries.append(
            Entry(
                label=worktree.branch,
                value=str(worktree.path),
                detail=relative_path(info, worktree.path),
                primary=main,
            )
        )
    return entries


def find_worktree(worktrees: Iterable[Worktree], name: str) -> Worktree | None:
    """Find a worktree by branch name or by its directory name."""
    sanitized = sanitize_branch_name(name)
    for worktree in worktrees:
        if worktree.branch == name or worktree.path.name in {name, sanitized}:
            return worktree
    return None


def branch_entries(
    worktrees: Iterable[Worktree], *, local: bool = True, remote: bool = True
) -> list[Entry]:
    """Local branches, then remote-only branches.

    Branches that are already checked out in a worktree stay visible but are
    disabled.
    """
    checked_out = {worktree.branch for worktree in worktrees}
    entries: list[Entry] = []
    seen: set[str] = set()

    if local:
        for name in git.list_local_branches():
            seen.add(name)
            entries.append(_branch_entry(name, "local", checked_out))

    if remote:
        for name in git.list_remote_branches():
            if name in seen:
                continue
            seen.add(name)
            entries.append(_branch_entry(name, "remote", checked_out))

    if not entries:
        raise NoBranchesError()
    return entries


def base_entries(entries: Iterable[Entry]) -> list[Entry]:
    return [
        Entry(label=entry.label, value=entry.value, detail=entry.detail)
        for entry in entries
        if not entry.disabled
    ]


def _branch_entry(name: str, source: str, checked_out: set[str]) -> Entry:
    return Entry(
        label=name,
        value=name,
        detail=source,
        disabled=name in checked_out,
    )


def create_worktree(
    info: RepoInfo,
    worktrees: Iterable[Worktree],
    branch: str,
    *,
    base: str | None = None,
) -> Path:
    for worktree in worktrees:
        if worktree.branch == branch:
            raise WorktreeExistsError(branch, str(worktree.path))

    worktrees_dir = ensure_worktrees_dir(info)
    path = worktrees_dir / sanitize_branch_name(branch)

    create_branch = bool(base) or not git.branch_exists(branch)
    logger.debug(
        "adding worktree %s for %s (new branch: %s, base: %s)",
        path,
        branch,
        create_branch,
        base,
    )
    git.add_worktree(path, branch, create_branch=create_branch, base=base)
    return path


def remove_worktree(info: RepoInfo, worktree: Worktree, *, force: bool) -> None:
    if not force and git.is_dirty(worktree.path):
        raise DirtyWorktreeError(worktree.branch)

    git.remove_worktree(worktree.path, force=force)
    clean_empty_parents(worktree.path, info.worktrees_dir)


def clean_empty_parents(path: Path, stop_at: Path) -> None:
    """Remove empty directories above ``path``, stopping below ``stop_at``."""
    directory = path.parent
    while directory != stop_at and directory.is_relative_to(stop_at):
        try:
            if any(directory.iterdir()):
                return
            logger.debug("removing empty directory %s", directory)
            directory.rmdir()
        except OSError:
            return
        directory = directory.parent


def collect_status(info: RepoInfo, worktrees: Sequence[Worktree]) -> list[WorktreeRow]:
    rows: list[WorktreeRow] = []
    for worktree in worktrees:
        try:
            state = "dirty" if git.is_dirty(worktree.path) else "clean"
        except GitError as exc:
            logger.debug("status failed for %s: %s", worktree.path, exc)
            state = "error"

        ahead: int | None
        behind: int | None
        try:
            ahead, behind = git.ahead_behind(worktree.path)
        except GitError as exc:
            logger.debug("ahead/behind failed for %s: %s", worktree.path, exc)
            ahead = behind = None

        rows.append(
            WorktreeRow(
                branch=worktree.branch,
                path=relative_path(info, worktree.path),
                is_main=is_main(info, worktree),
                state=state,
                ahead=ahead,
                behind=behind,
            )
        )
    return rows


def list_rows(info: RepoInfo, worktrees: Iterable[Worktree]) -> list[WorktreeRow]:
    return [
        WorktreeRow(
            branch=worktree.branch,
            path=relative_path(info, worktree.path),
            is_main=is_main(info, worktree),
        )
        for worktree in worktrees
    ]
