from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Optional, Sequence

from .datamodels import FeedGroup, NewsItem
from .sources.rss import RSSSource

logger = logging.getLogger("termnews")


class Fetcher:
    def __init__(self, source: Optional[RSSSource] = None):
        self.source = source or RSSSource()

    def get_items_for_group(self, group: FeedGroup) -> List[NewsItem]:
        """Fetch every feed of ``group`` in parallel and merge what succeeded.

        Items are concatenated in the order the feeds finish.
        """
        if not group.urls:
            return []

        all_items: List[NewsItem] = []
        with ThreadPoolExecutor(max_workers=len(group.urls)) as executor:
            future_to_url = {
                executor.submit(self.source.get_items, url): url for url in group.urls
            }
            for future in as_completed(future_to_url):
                url = future_to_url[future]
                try:
                    all_items.extend(future.result())
                except Exception as e:
                    logger.error("Failed to fetch items for feed %s: %s", url, e)

        logger.info(
            "Loaded %d items for %s from %d feeds",
            len(all_items),
            group.name,
            len(group.urls),
        )
        return all_items

    def get_items_for_tab(
        self, groups: Sequence[FeedGroup], tab_index: int
    ) -> List[NewsItem]:
        if not 0 <= tab_index < len(groups):
            logger.warning("No feed group at index %d", tab_index)
            return []
        return self.get_items_for_group(groups[tab_index])
