from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests


def make_rss(title: str, count: int, prefix: str = "Story") -> bytes:
    entries = "".join(
        f"""
        <item>
            <title>{prefix} {i}</title>
            <link>http://{prefix.lower()}.example.com/{i}</link>
        </item>"""
        for i in range(1, count + 1)
    )
    return f"""<?xml version="1.0" encoding="UTF-8"?>
        <rss version="2.0">
            <channel>
                <title>{title}</title>
                <link>http://example.com</link>
                <description>test feed</description>{entries}
            </channel>
        </rss>""".encode()


def make_response(content: bytes = b"", status_error: Exception | None = None) -> MagicMock:
    resp = MagicMock()
    resp.content = content
    if status_error is not None:
        resp.raise_for_status.side_effect = status_error
    return resp


@pytest.fixture
def feed_session():
    """A fake requests.Session serving feeds from a url -> bytes/exception map."""

    def build(routes: dict) -> MagicMock:
        session = MagicMock(spec=requests.Session)

        def get(url, timeout=None):
            result = routes[url]
            if isinstance(result, Exception):
                raise result
            return make_response(result)

        session.get.side_effect = get
        return session

    return build
