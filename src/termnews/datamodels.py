from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple


# --- Data models ---
@dataclass(frozen=True)
class FeedGroup:
    name: str
    urls: Tuple[str, ...] = ()


@dataclass(frozen=True)
class NewsItem:
    title: str
    source: str
    tag: Optional[str] = None
    url: Optional[str] = None


class ViewMode(enum.Enum):
    LIST = "list"
    READING = "reading"


@dataclass
class SessionState:
    """Everything the UI shows, shared with background workers.

    Only touch it through ``SharedState.locked()``.
    """

    items: List[NewsItem] = field(default_factory=list)
    selection: Optional[int] = None
    is_loading: bool = True
    current_tab: int = 0
    view_mode: ViewMode = ViewMode.LIST
    article_text: str = ""
    scroll: int = 0
    status_message: Optional[str] = None
    refresh_token: int = 0

    def next(self) -> None:
        if not self.items:
            return
        if self.selection is None or self.selection >= len(self.items) - 1:
            self.selection = 0
        else:
            self.selection += 1
        self.status_message = None

    def previous(self) -> None:
        if not self.items:
            return
        if self.selection is None:
            self.selection = 0
        elif self.selection == 0:
            self.selection = len(self.items) - 1
        else:
            self.selection -= 1
        self.status_message = None

    def scroll_down(self) -> None:
        self.scroll += 1

    def scroll_up(self) -> None:
        self.scroll = max(0, self.scroll - 1)

    def selected_item(self) -> Optional[NewsItem]:
        if self.selection is None or self.selection >= len(self.items):
            return None
        return self.items[self.selection]

    def snapshot(self) -> SessionState:
        """Return a copy that is safe to read without the lock."""
        return replace(self, items=list(self.items))
