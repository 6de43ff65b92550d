from __future__ import annotations

from collections.abc import Iterable
from dataclasses import replace

from wt.models import (
    Cancel,
    Confirm,
    Entry,
    FilteredEntry,
    MoveDown,
    MoveUp,
    SelectionEvent,
    SelectionState,
    TextChanged,
)
from wt.search import fuzzy_match


def initial_state(entries: Iterable[Entry]) -> SelectionState:
    all_entries = tuple(entries)
    filtered = tuple(FilteredEntry(entry) for entry in all_entries)
    cursor: int | None = None
    if filtered:
        cursor = _first_selectable(filtered)
    return SelectionState(entries=all_entries, filtered=filtered, cursor=cursor)


def filter_entries(
    entries: Iterable[Entry], query: str
) -> tuple[FilteredEntry, ...]:
    if not query:
        return tuple(FilteredEntry(entry) for entry in entries)

    scored: list[FilteredEntry] = []
    for entry in entries:
        match = fuzzy_match(entry.label, query)
        if match.matched:
            scored.append(FilteredEntry(entry, match))

    # Stable sort: equal scores keep the order the entries were supplied in.
    scored.sort(key=lambda item: -item.match.score)
    return tuple(scored)


def transition(state: SelectionState, event: SelectionEvent) -> SelectionState:
    """Apply one input event and return the next state.

    Terminal states (selected or cancelled) are returned unchanged.
    """
    if not state.active:
        return state

    if isinstance(event, Cancel):
        return replace(state, status="cancelled")

    if isinstance(event, Confirm):
        if state.cursor is None or state.filtered[state.cursor].entry.disabled:
            return state
        return replace(state, status="selected")

    if isinstance(event, MoveUp):
        return replace(state, cursor=_step(state.filtered, state.cursor, -1))

    if isinstance(event, MoveDown):
        return replace(state, cursor=_step(state.filtered, state.cursor, 1))

    if isinstance(event, TextChanged):
        filtered = filter_entries(state.entries, event.query)
        return replace(
            state,
            query=event.query,
            filtered=filtered,
            cursor=_settle(filtered, state.cursor),
        )

    raise TypeError(f"Unknown selection event: {event!r}")


def selected_entry(state: SelectionState) -> Entry | None:
    if state.status != "selected" or state.cursor is None:
        return None
    return state.filtered[state.cursor].entry


def _first_selectable(filtered: tuple[FilteredEntry, ...]) -> int:
    for index, item in enumerate(filtered):
        if not item.entry.disabled:
            return index
    return 0


def _step(
    filtered: tuple[FilteredEntry, ...], cursor: int | None, direction: int
) -> int | None:
    """Walk from ``cursor`` to the next selectable entry in ``direction``.

    The cursor stays where it is when a boundary comes first.
    """
    if cursor is None or not filtered:
        return cursor

    index = cursor + direction
    while 0 <= index < len(filtered):
        if not filtered[index].entry.disabled:
            return index
        index += direction
    return cursor


def _settle(filtered: tuple[FilteredEntry, ...], cursor: int | None) -> int | None:
    if not filtered:
        return None

    settled = min(cursor or 0, len(filtered) - 1)
    if not filtered[settled].entry.disabled:
        return settled

    forward = _step(filtered, settled, 1)
    if forward != settled:
        return forward
    return _step(filtered, settled, -1)
