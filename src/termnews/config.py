from __future__ import annotations

import logging
import os
import subprocess
import sys
import tomllib
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, List, Optional

from .datamodels import FeedGroup, NewsItem

# --- Configuration ---
FEED_TIMEOUT = 5
MAX_ITEMS_PER_FEED = 15
FEED_TAG = "RSS"

TEXT_WIDTH = 100
MIN_ARTICLE_CHARS = 50

LOCAL_CONFIG_PATH = Path("config.toml")
CONFIG_PATH = Path(os.path.expanduser("~/.config/termnews/config.toml"))
BOOKMARKS_FILE = Path("saved_news.md")

ARTICLE_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
}

DEFAULT_FEEDS = [
    FeedGroup(
        "Tech Hub",
        (
            "https://techcrunch.com/feed/",
            "https://www.theverge.com/rss/index.xml",
            "https://wired.com/feed/rss",
        ),
    ),
    FeedGroup(
        "World",
        (
            "http://feeds.bbci.co.uk/news/world/rss.xml",
            "https://www.aljazeera.com/xml/rss/all.xml",
        ),
    ),
    FeedGroup("Sports", ("https://www.espn.com/espn/rss/news",)),
    FeedGroup("Rust", ("https://blog.rust-lang.org/feed.xml",)),
]

CONFIG_TEMPLATE = """\
[[feeds]]
name = "Tech Hub"
urls = [
    "https://techcrunch.com/feed/",
    "https://www.theverge.com/rss/index.xml"
]

[[feeds]]
name = "Crypto"
urls = [
    "https://cointelegraph.com/rss"
]
"""

# --- Logging ---
logger = logging.getLogger("termnews")


def setup_logging(debug: bool = False) -> Optional[str]:
    """Configure logging."""
    if not debug:
        logging.basicConfig(level=logging.CRITICAL, handlers=[logging.NullHandler()])
        return None

    ts = datetime.now().strftime("%Y%m%dT%H%M%S")
    pid = os.getpid()
    debug_path = f"/tmp/termnews_debug_{ts}_{pid}.log"

    logging.basicConfig(
        level=logging.DEBUG,
        filename=debug_path,
        filemode="a",
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    logger.debug("Debug logging enabled to %s", debug_path)
    return debug_path


def parse_feed_groups(data: dict[str, Any]) -> List[FeedGroup]:
    """Turn a decoded ``[[feeds]]`` document into FeedGroups.

    Raises ValueError when an entry is missing its name or its urls list.
    """
    feeds = data.get("feeds")
    if not isinstance(feeds, list):
        raise ValueError("missing [[feeds]] table")
    groups = []
    for entry in feeds:
        name = entry.get("name") if isinstance(entry, dict) else None
        urls = entry.get("urls") if isinstance(entry, dict) else None
        if not isinstance(name, str) or not isinstance(urls, list):
            raise ValueError(f"invalid feed entry: {entry!r}")
        if not all(isinstance(u, str) for u in urls):
            raise ValueError(f"feed urls must be strings: {name}")
        groups.append(FeedGroup(name=name, urls=tuple(urls)))
    return groups


def _read_feed_groups(path: Path) -> Optional[List[FeedGroup]]:
    try:
        with open(path, "rb") as f:
            groups = parse_feed_groups(tomllib.load(f))
    except FileNotFoundError:
        return None
    except (OSError, tomllib.TOMLDecodeError, ValueError) as e:
        logger.error("Failed to load config from %s: %s", path, e)
        return None
    logger.info("Loaded %d feed groups from %s", len(groups), path)
    return groups


def config_candidates(explicit: Optional[Path] = None) -> List[Path]:
    candidates = [LOCAL_CONFIG_PATH, CONFIG_PATH]
    if explicit is not None:
        candidates.insert(0, explicit)
    return candidates


def load_config(paths: Optional[Iterable[Path]] = None) -> List[FeedGroup]:
    """Return the feed groups from the first usable config file, else defaults."""
    for path in paths if paths is not None else config_candidates():
        groups = _read_feed_groups(path)
        if groups:
            return groups
    logger.info("No usable config file found, using default feeds.")
    return list(DEFAULT_FEEDS)


def ensure_config_file_exists(path: Path = CONFIG_PATH) -> None:
    """Write the config template if the user's config file is not found."""
    if path.exists():
        return
    logger.info("Config file not found at %s, creating default.", path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(CONFIG_TEMPLATE)


def open_path(path: Path) -> None:
    """Open a local file with the platform's default application.

    Raises OSError when no opener is available.
    """
    target = str(path.resolve())
    if sys.platform == "win32":
        os.startfile(target)
    elif sys.platform == "darwin":
        subprocess.Popen(["open", target], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    else:
        subprocess.Popen(
            ["xdg-open", target], stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL
        )


def open_config_in_editor(path: Path = CONFIG_PATH) -> str:
    """Open the user config with the platform handler; return a status line."""
    try:
        ensure_config_file_exists(path)
    except OSError as e:
        logger.error("Failed to create default config file: %s", e)
        return "Failed to create config file."

    try:
        open_path(path)
    except OSError as e:
        logger.warning("No handler available to open %s: %s", path, e)
        return "Could not open config file."
    return "Opened config file."


def save_bookmark(item: NewsItem, path: Path = BOOKMARKS_FILE) -> str:
    """Append ``item`` to the bookmarks file as a markdown link."""
    if not item.url:
        return "No URL to save."
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(f"- [{item.title}]({item.url})\n")
    except OSError as e:
        logger.error("Failed to save bookmark to %s: %s", path, e)
        return "Failed to save file."
    return f'Saved: "{item.title}"'
