from __future__ import annotations


class WtError(Exception):
    """Base exception for everything the CLI reports as ``Error: ...``."""


class GitError(WtError):
    """Raised when a git subprocess fails."""

    def __init__(self, args: list[str], message: str) -> None:
        self.command = ["git", *args]
        super().__init__(message)

    def with_context(self, context: str) -> GitError:
        return GitError(self.command[1:], f"{context}: {self}")


class NotARepositoryError(WtError):
    pass


class WorktreeNotFoundError(WtError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'worktree "{name}" not found')


class WorktreeExistsError(WtError):
    def __init__(self, branch: str, path: str) -> None:
        self.branch = branch
        self.path = path
        super().__init__(f'worktree for branch "{branch}" already exists at {path}')


class DirtyWorktreeError(WtError):
    def __init__(self, branch: str) -> None:
        self.branch = branch
        super().__init__(
            f'worktree "{branch}" has uncommitted changes; '
            "use --force to remove anyway"
        )


class NoBranchesError(WtError):
    def __init__(self) -> None:
        super().__init__("no branches available")


class UnsupportedShellError(WtError):
    def __init__(self, shell: str) -> None:
        self.shell = shell
        super().__init__(f'unsupported shell "{shell}"; supported: bash, zsh, fish')
