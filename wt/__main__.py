from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import typer
from typer.completion import get_completion_script

from wt import __version__, git
from wt.console import LogLevel, setup_logging, stderr_console
from wt.errors import UnsupportedShellError, WorktreeNotFoundError, WtError
from wt.git import Worktree
from wt.rendering import render_status_table, render_worktree_table
from wt.repo import resolve_repo
from wt.shell import CD_SENTINEL, SUPPORTED_SHELLS, shell_function
from wt.tui import SelectorApp, select_entry
from wt.worktrees import (
    base_entries,
    branch_entries,
    collect_status,
    create_worktree,
    find_worktree,
    linked_worktrees,
    list_rows,
    remove_worktree,
    worktree_entries,
)

__all__ = [
    "SelectorApp",
    "cli",
    "run",
]

logger = logging.getLogger(__name__)

NO_WORKTREES_HINT = "Create one with: wt create <branch>"


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(f"wt {__version__}")
    raise typer.Exit()


@contextmanager
def _report_errors() -> Iterator[None]:
    try:
        yield
    except WtError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _emit_cd(path: Path | str) -> None:
    # The shell wrapper from `wt init` changes directory on this sentinel.
    typer.echo(f"{CD_SENTINEL}{path}", nl=False)


def _complete_worktree_branches(incomplete: str) -> list[str]:
    try:
        worktrees = git.list_worktrees()
    except WtError:
        return []
    return [wt.branch for wt in worktrees if wt.branch.startswith(incomplete)]


def _complete_linked_worktree_branches(incomplete: str) -> list[str]:
    try:
        info = resolve_repo()
        worktrees = git.list_worktrees()
    except WtError:
        return []
    return [
        wt.branch
        for wt in linked_worktrees(info, worktrees)
        if wt.branch.startswith(incomplete)
    ]


def _complete_branches_for_create(incomplete: str) -> list[str]:
    try:
        worktrees = git.list_worktrees()
    except WtError:
        return []
    checked_out = {wt.branch for wt in worktrees}

    suggestions: list[str] = []
    # A failing source only drops its own names.
    for list_branches in (git.list_local_branches, git.list_remote_branches):
        try:
            names = list_branches()
        except WtError as exc:
            logger.debug("branch completion skipped a source: %s", exc)
            continue
        for name in names:
            if name in checked_out or name in suggestions:
                continue
            if name.startswith(incomplete):
                suggestions.append(name)
    return suggestions


cli = typer.Typer(
    help="Create, manage, and switch between git worktrees.",
)


@cli.callback(invoke_without_command=True)
def run(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        envvar="WT_VERBOSE",
        help="Log git invocations and workflow steps to stderr.",
    ),
    log_level: LogLevel = typer.Option(
        LogLevel.WARNING,
        "--log-level",
        envvar="WT_LOG_LEVEL",
        case_sensitive=False,
        help="Log level used when --verbose is not given.",
    ),
    _version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """Pick a worktree interactively when no command is given."""
    setup_logging(log_level, verbose=verbose)
    if ctx.invoked_subcommand is not None:
        return

    with _report_errors():
        info = resolve_repo()
        worktrees = git.list_worktrees()
        if not linked_worktrees(info, worktrees):
            typer.echo(f"No worktrees found. {NO_WORKTREES_HINT}", err=True)
            return
        selected = select_entry(worktree_entries(info, worktrees), header="Worktrees")

    if selected is not None:
        _emit_cd(selected)


def _pick_branch(
    worktrees: list[Worktree], *, local_only: bool, remote_only: bool
) -> tuple[str, str | None] | None:
    entries = branch_entries(worktrees, local=not remote_only, remote=not local_only)
    branch = select_entry(entries, header="Branches")
    if branch is None:
        return None
    if git.branch_exists(branch):
        return branch, None

    logger.debug("branch %s does not exist yet, asking for a base", branch)
    base = select_entry(base_entries(entries), header="Base branch")
    if base is None:
        return None
    return branch, base


@cli.command()
def create(
    branch: str | None = typer.Argument(
        None,
        help="Branch to check out; picked interactively when omitted.",
        autocompletion=_complete_branches_for_create,
    ),
    base: str | None = typer.Option(
        None,
        "--base",
        help="Base branch/ref for new branch creation.",
    ),
    local: bool = typer.Option(
        False,
        "--local",
        help="Show only local branches in the interactive selector.",
    ),
    remote: bool = typer.Option(
        False,
        "--remote",
        help="Show only remote branches in the interactive selector.",
    ),
) -> None:
    """Create a new worktree in the sibling worktrees directory."""
    with _report_errors():
        info = resolve_repo()
        worktrees = git.list_worktrees()
        if branch is None:
            choice = _pick_branch(worktrees, local_only=local, remote_only=remote)
            if choice is None:
                return
            branch, base = choice
        path = create_worktree(info, worktrees, branch, base=base)

    typer.echo(f'Created worktree for branch "{branch}" at {path}', err=True)
    _emit_cd(path)


@cli.command()
def remove(
    name: str | None = typer.Argument(
        None,
        help="Branch or directory name; picked interactively when omitted.",
        autocompletion=_complete_linked_worktree_branches,
    ),
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Force removal even with uncommitted changes.",
    ),
) -> None:
    """Remove a worktree and its directory."""
    with _report_errors():
        info = resolve_repo()
        linked = linked_worktrees(info, git.list_worktrees())
        if not linked:
            typer.echo("No worktrees to remove.", err=True)
            return

        if name is not None:
            target = find_worktree(linked, name)
            if target is None:
                raise WorktreeNotFoundError(name)
        else:
            selected = select_entry(
                worktree_entries(info, linked, include_main=False),
                header="Worktrees",
            )
            if selected is None:
                return
            target = next(wt for wt in linked if str(wt.path) == selected)

        remove_worktree(info, target, force=force)

    typer.echo(f'Removed worktree "{target.branch}"', err=True)


@cli.command("list")
def list_command() -> None:
    """List all worktrees of the current repository."""
    with _report_errors():
        info = resolve_repo()
        worktrees = git.list_worktrees()

    if not linked_worktrees(info, worktrees):
        typer.echo(f"No additional worktrees. {NO_WORKTREES_HINT}", err=True)
        return
    stderr_console.print(render_worktree_table(list_rows(info, worktrees)))


@cli.command()
def status() -> None:
    """Show branch, clean/dirty state and ahead/behind counts per worktree."""
    with _report_errors():
        info = resolve_repo()
        rows = collect_status(info, git.list_worktrees())
    stderr_console.print(render_status_table(rows))


@cli.command()
def switch(
    name: str = typer.Argument(
        ...,
        help="Branch or directory name of the worktree.",
        autocompletion=_complete_worktree_branches,
    ),
) -> None:
    """Switch to a worktree by name."""
    with _report_errors():
        info = resolve_repo()
        worktrees = git.list_worktrees()
        target = find_worktree(worktrees, name)
        if target is None:
            typer.echo(f'Worktree "{name}" not found. Available worktrees:', err=True)
            for wt in linked_worktrees(info, worktrees):
                typer.echo(f"  {wt.branch}", err=True)
            raise WorktreeNotFoundError(name)

    _emit_cd(target.path)


@cli.command()
def init(
    shell: str = typer.Argument(..., help="One of: bash, zsh, fish."),
) -> None:
    """Output the shell function that lets wt change directory.

    Add to your shell config:
      eval "$(wt init bash)"   # .bashrc
      eval "$(wt init zsh)"    # .zshrc
      wt init fish | source    # config.fish
    """
    with _report_errors():
        code = shell_function(shell)
    typer.echo(code, nl=False)


@cli.command()
def completion(
    shell: str = typer.Argument(..., help="One of: bash, zsh, fish."),
) -> None:
    """Output the shell completion script."""
    with _report_errors():
        if shell not in SUPPORTED_SHELLS:
            raise UnsupportedShellError(shell)
    typer.echo(
        get_completion_script(prog_name="wt", complete_var="_WT_COMPLETE", shell=shell)
    )


if __name__ == "__main__":
    cli(prog_name="wt")
