from __future__ import annotations

from typing import Optional, Sequence

from rich.text import Text
from textual.reactive import reactive
from textual.widgets import Static

from .datamodels import FeedGroup, NewsItem, SessionState, ViewMode

LIST_HINT = "[1-9] Switch  [Enter] Read  [s] Save  [c] Config  [o] Open  [q] Quit"
READING_HINT = "up/down Scroll  [q] Back"

# title, "via" line, blank separator
LINES_PER_ITEM = 3


class TabBar(Static):
    def show_tabs(self, groups: Sequence[FeedGroup], current_tab: int) -> None:
        key = (tuple(g.name for g in groups), current_tab)
        if key == getattr(self, "_last_drawn", None):
            return
        self._last_drawn = key

        text = Text()
        for i, group in enumerate(groups):
            label = f" {i + 1}.{group.name} "
            if i == current_tab:
                text.append(label, style="bold reverse")
            else:
                text.append(label, style="dim")
        self.update(text)


class NewsList(Static):
    """Scrolling list of headlines driven by a selection index."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._top_row = 0
        self._last_drawn: Optional[tuple] = None

    def _rows_that_fit(self) -> int:
        return max(1, self.size.height // LINES_PER_ITEM)

    def _follow_selection(self, selection: Optional[int], count: int) -> None:
        visible = self._rows_that_fit()
        if selection is None:
            self._top_row = 0
            return
        if selection < self._top_row:
            self._top_row = selection
        elif selection >= self._top_row + visible:
            self._top_row = selection - visible + 1
        self._top_row = max(0, min(self._top_row, max(0, count - visible)))

    def show_items(
        self, items: Sequence[NewsItem], selection: Optional[int], loading: bool
    ) -> None:
        self._follow_selection(selection, len(items))
        key = (tuple(items), selection, loading, self._top_row, self.size.height)
        if key == self._last_drawn:
            return
        self._last_drawn = key

        if loading:
            self.update(Text("⚡ Fetching feeds...", justify="center", style="bold"))
            return
        if not items:
            self.update(Text("No headlines available.", justify="center", style="italic"))
            return

        text = Text()
        end = min(len(items), self._top_row + self._rows_that_fit())
        for i in range(self._top_row, end):
            item = items[i]
            selected = i == selection
            marker = " █ " if selected else "   "
            text.append(f"{marker}{item.title}\n", style="bold reverse" if selected else "bold")
            text.append(f"      via {item.source}\n", style="italic dim")
            text.append("\n")
        self.update(text)


class ArticleView(Static):
    def show_article(self, article_text: str, scroll: int) -> None:
        key = (article_text, scroll)
        if key == getattr(self, "_last_drawn", None):
            return
        self._last_drawn = key
        lines = article_text.splitlines()
        self.update(Text("\n".join(lines[scroll:])))


class StatusBar(Static):
    status_message = reactive("")
    keybinding_hint = reactive("")

    def on_mount(self) -> None:
        self.update_display()

    def show_status(self, state: SessionState) -> None:
        self.status_message = state.status_message or ""
        self.keybinding_hint = (
            READING_HINT if state.view_mode is ViewMode.READING else LIST_HINT
        )

    def update_display(self) -> None:
        """Update the status bar display."""
        if self.status_message:
            self.update(Text(f" ✅ {self.status_message} "))
        else:
            self.update(Text(f" {self.keybinding_hint} "))

    def watch_status_message(self, status_message: str) -> None:
        self.update_display()

    def watch_keybinding_hint(self, keybinding_hint: str) -> None:
        self.update_display()
