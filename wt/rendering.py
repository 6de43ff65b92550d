from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from rich.style import Style
from rich.table import Table
from rich.text import Text

from wt.models import FilteredEntry, SelectionState

KEY_HINT = "↑/↓ navigate • enter select • esc cancel"
QUERY_PLACEHOLDER = "Type to filter..."


@dataclass(frozen=True)
class PickerTheme:
    cursor: str = "bold color(212)"
    highlight: str = "bold color(220)"
    dim: str = "color(241)"
    primary: str = "italic color(245)"
    prompt: str = "color(205)"
    disabled: str = "dim color(241)"
    disabled_marker: str = " [worktree]"


DEFAULT_THEME = PickerTheme()


@dataclass(frozen=True)
class WorktreeRow:
    branch: str
    path: str
    is_main: bool
    state: str = ""
    ahead: int | None = None
    behind: int | None = None


def highlight_label(
    label: str,
    positions: Iterable[int],
    *,
    base_style: str | Style = "",
    highlight_style: str | Style = "",
) -> Text:
    text = Text(label, style=base_style)
    for position in positions:
        if 0 <= position < len(label):
            text.stylize(highlight_style, position, position + 1)
    return text


def render_entry_line(
    item: FilteredEntry,
    *,
    is_cursor: bool,
    show_matches: bool,
    theme: PickerTheme = DEFAULT_THEME,
) -> Text:
    entry = item.entry
    if entry.disabled:
        return Text.assemble(
            "  ",
            (entry.label, theme.disabled),
            (theme.disabled_marker, theme.dim),
        )

    if is_cursor:
        base_style = theme.cursor
    elif entry.primary:
        base_style = theme.primary
    else:
        base_style = ""

    positions = item.match.positions if show_matches else ()
    label = highlight_label(
        entry.label,
        positions,
        base_style=base_style,
        highlight_style=theme.highlight,
    )

    line = Text()
    line.append("> " if is_cursor else "  ", style=theme.cursor if is_cursor else "")
    line.append_text(label)
    if entry.detail:
        line.append("  ")
        line.append(entry.detail, style=theme.primary if entry.primary else theme.dim)
    return line


def render_picker(
    state: SelectionState,
    *,
    header: str,
    theme: PickerTheme = DEFAULT_THEME,
) -> Text:
    """Paint the whole picker: header, query line, entries and key hint."""
    lines: list[Text] = [Text(f"  {header}", style=theme.prompt), Text()]

    if state.query:
        lines.append(Text.assemble(("  > ", theme.prompt), state.query, ("_", "blink")))
    else:
        lines.append(Text.assemble(("  > ", theme.prompt), (QUERY_PLACEHOLDER, theme.dim)))
    lines.append(Text())

    show_matches = bool(state.query)
    for index, item in enumerate(state.filtered):
        lines.append(
            render_entry_line(
                item,
                is_cursor=index == state.cursor and not item.entry.disabled,
                show_matches=show_matches,
                theme=theme,
            )
        )
    if not state.filtered:
        lines.append(Text("  No matches", style=theme.dim))

    lines.append(Text())
    lines.append(Text(f"  {KEY_HINT}", style=theme.dim))
    return Text("\n").join(lines)


def render_worktree_table(rows: Sequence[WorktreeRow]) -> Table:
    table = _plain_table("BRANCH", "PATH", "MAIN")
    for row in rows:
        table.add_row(row.branch, row.path, "*" if row.is_main else "")
    return table


def render_status_table(rows: Sequence[WorktreeRow]) -> Table:
    table = _plain_table("BRANCH", "PATH", "STATUS", "AHEAD", "BEHIND", "MAIN")
    for row in rows:
        table.add_row(
            row.branch,
            row.path,
            _status_text(row.state),
            _count_text(row.ahead),
            _count_text(row.behind),
            "*" if row.is_main else "",
        )
    return table


def _plain_table(*columns: str) -> Table:
    table = Table(box=None, pad_edge=False, show_edge=False, header_style="bold")
    for column in columns:
        table.add_column(column, no_wrap=True, overflow="fold")
    return table


def _status_text(state: str) -> Text:
    style = {"clean": "green", "dirty": "yellow", "error": "red"}.get(state, "")
    return Text(state, style=style)


def _count_text(value: int | None) -> str:
    return "-" if value is None else str(value)
