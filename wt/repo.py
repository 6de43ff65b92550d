from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from wt.errors import GitError, NotARepositoryError
from wt.git import run_git

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepoInfo:
    main_worktree: Path
    worktrees_dir: Path
    repo_name: str


def resolve_repo(cwd: Path | None = None) -> RepoInfo:
    """Locate the main worktree and its sibling ``<name>-worktrees`` directory.

    Works from the main worktree as well as from inside any linked worktree,
    since both share the same git common directory.
    """
    base = cwd or Path.cwd()
    try:
        output = run_git("rev-parse", "--git-common-dir", cwd=base)
    except GitError as exc:
        raise NotARepositoryError(f"not a git repository: {exc}") from exc

    common_dir = Path(output.strip())
    if not common_dir.is_absolute():
        common_dir = base / common_dir
    common_dir = Path(os.path.normpath(common_dir))

    main_worktree = common_dir.parent
    repo_name = main_worktree.name
    info = RepoInfo(
        main_worktree=main_worktree,
        worktrees_dir=main_worktree.parent / f"{repo_name}-worktrees",
        repo_name=repo_name,
    )
    logger.debug("resolved repository %s", info)
    return info


def ensure_worktrees_dir(info: RepoInfo) -> Path:
    info.worktrees_dir.mkdir(parents=True, exist_ok=True)
    return info.worktrees_dir
