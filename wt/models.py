from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SelectionStatus = Literal["active", "selected", "cancelled"]


@dataclass(frozen=True)
class Match:
    matched: bool
    score: int = 0
    positions: tuple[int, ...] = ()


NO_MATCH = Match(matched=False)
EMPTY_MATCH = Match(matched=True)


@dataclass(frozen=True)
class Entry:
    """A picker candidate.

    ``label`` is what gets fuzzy-matched and displayed, ``value`` is what the
    caller gets back once the entry is selected.
    """

    label: str
    value: str
    detail: str = ""
    disabled: bool = False
    primary: bool = False


@dataclass(frozen=True)
class FilteredEntry:
    entry: Entry
    match: Match = EMPTY_MATCH


@dataclass(frozen=True)
class TextChanged:
    query: str


@dataclass(frozen=True)
class MoveUp:
    pass


@dataclass(frozen=True)
class MoveDown:
    pass


@dataclass(frozen=True)
class Confirm:
    pass


@dataclass(frozen=True)
class Cancel:
    pass


SelectionEvent = TextChanged | MoveUp | MoveDown | Confirm | Cancel


@dataclass(frozen=True)
class SelectionState:
    entries: tuple[Entry, ...]
    filtered: tuple[FilteredEntry, ...]
    cursor: int | None
    query: str = ""
    status: SelectionStatus = "active"

    @property
    def active(self) -> bool:
        return self.status == "active"
