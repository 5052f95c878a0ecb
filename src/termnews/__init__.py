"""Terminal feed reader: tabs of RSS feeds and a distraction-free reading view."""

__version__ = "0.1.0"
