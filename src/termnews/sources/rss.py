from __future__ import annotations

import logging
from typing import List, Optional

import feedparser
import requests

from ..config import FEED_TAG, FEED_TIMEOUT, MAX_ITEMS_PER_FEED
from ..datamodels import NewsItem

logger = logging.getLogger("termnews")


class FeedError(Exception):
    """A single feed could not be fetched or parsed."""


class RSSSource:
    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def fetch(self, url: str) -> List[NewsItem]:
        """Fetch ``url`` and return up to MAX_ITEMS_PER_FEED items.

        Raises FeedError on network, HTTP or parse failures.
        """
        try:
            logger.debug("Fetching feed %s", url)
            resp = self.session.get(url, timeout=FEED_TIMEOUT)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise FeedError(f"{url}: {e}") from e

        feed = feedparser.parse(resp.content)
        if feed.bozo and not feed.entries:
            raise FeedError(f"{url}: {feed.get('bozo_exception', 'malformed feed')}")

        source = feed.feed.get("title", "")
        return [
            NewsItem(
                title=entry.get("title") or "No Title",
                source=source,
                tag=FEED_TAG,
                url=entry.get("link"),
            )
            for entry in feed.entries[:MAX_ITEMS_PER_FEED]
        ]

    def get_items(self, url: str) -> List[NewsItem]:
        """Like fetch(), but a failing feed just contributes nothing."""
        try:
            items = self.fetch(url)
        except FeedError as e:
            logger.debug("Dropping feed: %s", e)
            return []
        logger.debug("Fetched %d items from %s", len(items), url)
        return items
