from __future__ import annotations

from collections.abc import Iterable

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.events import Key, Paste
from textual.widgets import Static

from wt.models import (
    Cancel,
    Confirm,
    Entry,
    MoveDown,
    MoveUp,
    SelectionEvent,
    SelectionState,
    TextChanged,
)
from wt.rendering import DEFAULT_THEME, PickerTheme, render_picker
from wt.selection import initial_state, selected_entry, transition


class SelectorApp(App[str | None]):
    """Inline fuzzy picker.

    Keys are turned into selection events; every transition repaints the
    picker. The app exits with the chosen entry's value, or ``None`` when the
    user cancels.
    """

    CSS = """
    Screen:inline {
        height: auto;
    }

    #picker {
        height: auto;
    }
    """
    ENABLE_COMMAND_PALETTE = False
    BINDINGS = [
        Binding("up", "move_up", show=False, priority=True),
        Binding("down", "move_down", show=False, priority=True),
        Binding("enter", "confirm", show=False, priority=True),
        Binding("escape", "cancel", show=False, priority=True),
        Binding("ctrl+c", "cancel", show=False, priority=True),
    ]

    def __init__(
        self,
        entries: Iterable[Entry],
        *,
        header: str = "Worktrees",
        picker_theme: PickerTheme = DEFAULT_THEME,
    ) -> None:
        super().__init__()
        self._header = header
        self._picker_theme = picker_theme
        self._state = initial_state(entries)

    @property
    def selection(self) -> SelectionState:
        return self._state

    def compose(self) -> ComposeResult:
        yield Static(self._picker_text(), id="picker")

    def _picker_text(self) -> Text:
        return render_picker(
            self._state, header=self._header, theme=self._picker_theme
        )

    def _apply(self, event: SelectionEvent) -> None:
        self._state = transition(self._state, event)
        if self._state.status == "cancelled":
            self.exit(None)
            return
        if self._state.status == "selected":
            entry = selected_entry(self._state)
            self.exit(entry.value if entry is not None else None)
            return
        self.query_one("#picker", Static).update(self._picker_text())

    def _set_query(self, query: str) -> None:
        if query == self._state.query:
            return
        self._apply(TextChanged(query))

    def action_move_up(self) -> None:
        self._apply(MoveUp())

    def action_move_down(self) -> None:
        self._apply(MoveDown())

    def action_confirm(self) -> None:
        self._apply(Confirm())

    def action_cancel(self) -> None:
        self._apply(Cancel())

    def on_key(self, event: Key) -> None:
        if not self._state.active:
            return

        if event.key == "backspace":
            self._set_query(self._state.query[:-1])
            event.stop()
            return

        if event.key == "ctrl+u":
            self._set_query("")
            event.stop()
            return

        if event.character and event.character.isprintable():
            self._set_query(self._state.query + event.character)
            event.stop()

    def on_paste(self, event: Paste) -> None:
        sanitized = event.text.replace("\r", "").replace("\n", "")
        if not sanitized or not self._state.active:
            return
        self._set_query(self._state.query + sanitized)
        event.stop()


def select_entry(
    entries: Iterable[Entry],
    *,
    header: str,
    theme: PickerTheme = DEFAULT_THEME,
) -> str | None:
    """Run the picker inline on the terminal and return the chosen value."""
    return SelectorApp(entries, header=header, picker_theme=theme).run(inline=True)
