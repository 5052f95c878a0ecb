from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Sequence

from .article import LOAD_FAILED_MESSAGE, LOADING_MESSAGE, load_article_text
from .datamodels import FeedGroup, NewsItem, ViewMode
from .fetcher import Fetcher
from .state import SharedState

logger = logging.getLogger("termnews")

Spawn = Callable[[Callable[[], None]], object]


def spawn_thread(work: Callable[[], None]) -> threading.Thread:
    thread = threading.Thread(target=work, daemon=True)
    thread.start()
    return thread


class RefreshCoordinator:
    """Starts background fetches and commits their results to the shared state.

    Each refresh carries the tab it was issued for and a token; its result is
    only committed if both still match the state when it completes.
    """

    def __init__(
        self,
        shared: SharedState,
        groups: Sequence[FeedGroup],
        fetcher: Optional[Fetcher] = None,
        spawn: Spawn = spawn_thread,
        load_article: Callable[[str], str] = load_article_text,
    ):
        self.shared = shared
        self.groups = list(groups)
        self.fetcher = fetcher or Fetcher()
        self.spawn = spawn
        self.load_article = load_article

    # --- Feed refresh ---
    def request_refresh(self, tab_index: int) -> None:
        with self.shared.locked() as state:
            state.refresh_token += 1
            token = state.refresh_token

        def _work() -> None:
            try:
                items = self.fetcher.get_items_for_tab(self.groups, tab_index)
            except Exception as e:
                logger.error("Refresh of tab %d failed: %s", tab_index, e)
                items = []
            self._commit_items(tab_index, token, items)

        self.spawn(_work)

    def _commit_items(self, tab_index: int, token: int, items: List[NewsItem]) -> None:
        with self.shared.locked() as state:
            if state.current_tab != tab_index or state.refresh_token != token:
                logger.debug(
                    "Discarding stale refresh for tab %d (token %d, current %d)",
                    tab_index,
                    token,
                    state.refresh_token,
                )
                return
            state.items = items
            state.is_loading = False
            state.selection = 0 if items else None

    def switch_tab(self, new_index: int) -> None:
        if not 0 <= new_index < len(self.groups):
            return
        with self.shared.locked() as state:
            if state.current_tab == new_index:
                return
            state.current_tab = new_index
            state.items = []
            state.selection = None
            state.is_loading = True
            state.status_message = None
        self.request_refresh(new_index)

    def refresh(self) -> None:
        with self.shared.locked() as state:
            state.status_message = "Refreshing..."
            tab_index = state.current_tab
        self.request_refresh(tab_index)

    # --- Reading mode ---
    def begin_article_load(self, url: str) -> None:
        with self.shared.locked() as state:
            state.is_loading = True
            state.view_mode = ViewMode.READING
            state.article_text = LOADING_MESSAGE
            state.scroll = 0
            state.status_message = None

        def _work() -> None:
            try:
                text = self.load_article(url)
            except Exception as e:
                logger.exception("Article loader failed for %s: %s", url, e)
                text = LOAD_FAILED_MESSAGE
            with self.shared.locked() as state:
                state.article_text = text
                state.is_loading = False

        self.spawn(_work)

    def open_selected_article(self) -> None:
        with self.shared.locked() as state:
            item = state.selected_item()
        if item is not None and item.url:
            self.begin_article_load(item.url)

    def return_to_list(self) -> None:
        with self.shared.locked() as state:
            state.view_mode = ViewMode.LIST
