from __future__ import annotations

import logging
import webbrowser
from typing import Any, Optional, Sequence

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Header

from .config import open_config_in_editor, save_bookmark
from .coordinator import RefreshCoordinator
from .datamodels import FeedGroup, ViewMode
from .fetcher import Fetcher
from .state import SharedState
from .widgets import ArticleView, NewsList, StatusBar, TabBar

logger = logging.getLogger("termnews")

FRAME_INTERVAL = 0.1


class TermNewsApp(App):
    TITLE = "TermNews"
    SUB_TITLE = "Feeds in your terminal"

    CSS = """
    Screen { background: $surface; color: $text; }
    TabBar { height: 3; border: round $accent; content-align: center middle; }
    #body { height: 1fr; padding: 0 1; }
    NewsList { height: 1fr; }
    ArticleView { height: 1fr; border: heavy $success; padding: 0 1; }
    StatusBar { height: 1; background: $accent; color: $text; content-align: center middle; }
    """

    BINDINGS = [
        Binding("q", "quit_or_back", "Quit"),
        Binding("escape,backspace", "back", "Back", show=False),
        Binding("down,j", "down", "Down", show=False),
        Binding("up,k", "up", "Up", show=False),
        Binding("enter", "read", "Read"),
        Binding("r", "refresh", "Refresh"),
        Binding("s", "save", "Save"),
        Binding("c", "edit_config", "Config"),
        Binding("o", "open_in_browser", "Open in browser"),
    ] + [Binding(str(n), f"switch_tab({n - 1})", show=False) for n in range(1, 10)]

    def __init__(
        self,
        groups: Sequence[FeedGroup],
        fetcher: Optional[Fetcher] = None,
        **kwargs: Any,
    ):
        super().__init__(**kwargs)
        self.groups = list(groups)
        self.shared = SharedState()
        # default spawner: daemon threads, never joined on exit
        self.coordinator = RefreshCoordinator(self.shared, self.groups, fetcher=fetcher)

    def compose(self) -> ComposeResult:
        yield Header()
        yield TabBar()
        with Vertical(id="body"):
            yield NewsList()
            yield ArticleView()
        yield StatusBar()

    def on_mount(self) -> None:
        logger.debug("Loading first tab: %s", self.groups[0].name)
        self.coordinator.request_refresh(0)
        self.render_state()
        self.set_interval(FRAME_INTERVAL, self.render_state)

    def render_state(self) -> None:
        """Copy the shared state under the lock, then draw the copy."""
        state = self.shared.snapshot()
        reading = state.view_mode is ViewMode.READING

        self.query_one(TabBar).show_tabs(self.groups, state.current_tab)
        news_list = self.query_one(NewsList)
        article_view = self.query_one(ArticleView)
        news_list.display = not reading
        article_view.display = reading
        if reading:
            article_view.show_article(state.article_text, state.scroll)
        else:
            news_list.show_items(state.items, state.selection, state.is_loading)
        self.query_one(StatusBar).show_status(state)

    def _view_mode(self) -> ViewMode:
        with self.shared.locked() as state:
            return state.view_mode

    # --- Actions ---
    def action_quit_or_back(self) -> None:
        if self._view_mode() is ViewMode.READING:
            self.coordinator.return_to_list()
        else:
            self.exit()

    def action_back(self) -> None:
        if self._view_mode() is ViewMode.READING:
            self.coordinator.return_to_list()

    def action_down(self) -> None:
        with self.shared.locked() as state:
            if state.view_mode is ViewMode.READING:
                state.scroll_down()
            else:
                state.next()

    def action_up(self) -> None:
        with self.shared.locked() as state:
            if state.view_mode is ViewMode.READING:
                state.scroll_up()
            else:
                state.previous()

    def action_switch_tab(self, index: int) -> None:
        if self._view_mode() is ViewMode.LIST:
            self.coordinator.switch_tab(index)

    def action_refresh(self) -> None:
        if self._view_mode() is ViewMode.LIST:
            self.coordinator.refresh()

    def action_read(self) -> None:
        if self._view_mode() is ViewMode.LIST:
            self.coordinator.open_selected_article()

    def action_save(self) -> None:
        with self.shared.locked() as state:
            if state.view_mode is not ViewMode.LIST:
                return
            item = state.selected_item()
        if item is None:
            return
        msg = save_bookmark(item)
        with self.shared.locked() as state:
            state.status_message = msg

    def action_edit_config(self) -> None:
        if self._view_mode() is not ViewMode.LIST:
            return
        msg = open_config_in_editor()
        with self.shared.locked() as state:
            state.status_message = msg

    def action_open_in_browser(self) -> None:
        with self.shared.locked() as state:
            if state.view_mode is not ViewMode.LIST:
                return
            item = state.selected_item()
        if item is not None and item.url:
            logger.debug("Opening %s in browser", item.url)
            webbrowser.open(item.url)
