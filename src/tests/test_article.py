from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
import requests
from readability.readability import Unparseable

from termnews.article import (
    EMPTY_CONTENT_MESSAGE,
    EXTRACTION_FAILED_PREFIX,
    LOAD_FAILED_MESSAGE,
    MEDIA_MESSAGE,
    fetch_article,
    html_to_text,
    is_media_type,
    load_article_text,
    render_document,
)
from termnews.config import ARTICLE_HEADERS

LONG_PARAGRAPH = (
    "The council voted late on Tuesday to approve the new transit plan, which adds "
    "three bus lines, extends the light rail by four stations and funds a study of "
    "protected bike lanes along the waterfront corridor."
)

ARTICLE_HTML = f"""
<html>
  <head><title>Sample Article</title><script>var tracking = 1;</script></head>
  <body>
    <nav><a href="/">Home</a> <a href="/world">World</a></nav>
    <div id="content" class="article-body">
      <h1>Sample Article</h1>
      <p>{LONG_PARAGRAPH}</p>
      <p>{LONG_PARAGRAPH}</p>
      <p>{LONG_PARAGRAPH}</p>
      <p>{LONG_PARAGRAPH}</p>
    </div>
    <footer>Copyright</footer>
  </body>
</html>
"""


def _response(text="", content_type="text/html; charset=utf-8", url="http://final.example.com/a"):
    resp = MagicMock()
    resp.text = text
    resp.url = url
    resp.headers = {"content-type": content_type} if content_type else {}
    return resp


def _session(resp=None, error=None):
    session = MagicMock(spec=requests.Session)
    if error is not None:
        session.get.side_effect = error
    else:
        session.get.return_value = resp
    return session


@pytest.mark.parametrize(
    "content_type, expected",
    [
        ("image/png", True),
        ("image/jpeg", True),
        ("application/pdf", True),
        ("Application/PDF; qs=0.001", True),
        ("text/html; charset=utf-8", False),
        ("application/xhtml+xml", False),
        ("", False),
        (None, False),
    ],
)
def test_is_media_type(content_type, expected):
    assert is_media_type(content_type) is expected


def test_media_response_skips_extraction():
    session = _session(_response("\x89PNG...", content_type="image/png"))
    with patch("termnews.article.Document") as mock_document:
        assert fetch_article("http://example.com/pic.png", session=session) == MEDIA_MESSAGE
        mock_document.assert_not_called()


def test_fetch_sends_browser_user_agent():
    session = _session(_response("", content_type="application/pdf"))
    fetch_article("http://example.com/doc.pdf", session=session)
    session.get.assert_called_once_with("http://example.com/doc.pdf", headers=ARTICLE_HEADERS)


def test_extraction_uses_final_url():
    session = _session(_response(ARTICLE_HTML, url="http://redirected.example.com/story"))
    with patch("termnews.article.Document") as mock_document:
        doc = mock_document.return_value
        doc.title.return_value = "Sample Article"
        doc.summary.return_value = f"<div><p>{LONG_PARAGRAPH}</p></div>"
        fetch_article("http://example.com/short", session=session)

    mock_document.assert_called_once_with(ARTICLE_HTML, url="http://redirected.example.com/story")


def test_extracted_article_is_titled_and_wrapped():
    with patch("termnews.article.Document") as mock_document:
        doc = mock_document.return_value
        doc.title.return_value = "Transit Plan"
        doc.summary.return_value = f"<div><p>{LONG_PARAGRAPH * 3}</p></div>"
        text = render_document("<html></html>", "http://example.com")

    assert text.startswith("# Transit Plan\n\n")
    assert "The council voted late on Tuesday" in text
    assert max(len(line) for line in text.splitlines()) <= 100
    assert EMPTY_CONTENT_MESSAGE not in text


def test_short_extraction_reports_empty_content():
    with patch("termnews.article.Document") as mock_document:
        doc = mock_document.return_value
        doc.title.return_value = "Tiny"
        doc.summary.return_value = "<div><p>Subscribe to read.</p></div>"
        text = render_document("<html></html>", "http://example.com")

    assert text.startswith("# Tiny")
    assert EMPTY_CONTENT_MESSAGE in text
    assert "Subscribe to read." not in text


def test_failed_extraction_falls_back_to_raw_text():
    markup = "<html><body><p>Hello raw world</p><script>nope()</script></body></html>"
    with patch("termnews.article.Document") as mock_document:
        mock_document.return_value.summary.side_effect = Unparseable("no candidates")
        text = render_document(markup, "http://example.com")

    assert text.startswith(EXTRACTION_FAILED_PREFIX)
    assert "Hello raw world" in text
    assert "nope()" not in text


def test_readability_extracts_real_markup():
    text = render_document(ARTICLE_HTML, "http://example.com/story")

    assert text.startswith("# Sample Article")
    assert "The council voted late on Tuesday" in text
    assert "tracking" not in text
    assert EXTRACTION_FAILED_PREFIX not in text


def test_transport_error_propagates_from_fetch():
    session = _session(error=requests.ConnectionError("refused"))
    with pytest.raises(requests.RequestException):
        fetch_article("http://down.example.com", session=session)


def test_transport_error_becomes_failure_message():
    session = _session(error=requests.ConnectionError("refused"))
    assert load_article_text("http://down.example.com", session=session) == LOAD_FAILED_MESSAGE


def test_load_article_text_returns_rendered_text():
    session = _session(_response(ARTICLE_HTML))
    assert load_article_text("http://example.com", session=session).startswith("# Sample Article")


def test_html_to_text_blocks():
    markup = """
        <h2>Heading</h2>
        <p>First <a href="#">linked</a> paragraph.</p>
        <ul><li>one</li><li>two</li></ul>
        <style>p { color: red; }</style>
    """
    assert html_to_text(markup) == (
        "## Heading\n\nFirst linked paragraph.\n\n- one\n\n- two"
    )


def test_html_to_text_wraps_at_width():
    text = html_to_text(f"<p>{LONG_PARAGRAPH}</p>", width=40)
    lines = text.splitlines()
    assert len(lines) > 1
    assert all(len(line) <= 40 for line in lines)


def test_html_to_text_plain_fragment():
    assert html_to_text("just some text") == "just some text"


def test_html_to_text_keeps_text_outside_leaf_blocks():
    markup = (
        "<html><body><div>Intro sentence outside paragraphs.<p>Inner paragraph.</p></div>"
        "Trailing body text<p>Last.</p></body></html>"
    )
    assert html_to_text(markup) == (
        "Intro sentence outside paragraphs.\n\nInner paragraph.\n\nTrailing body text\n\nLast."
    )


def test_html_to_text_line_breaks_and_inline_text():
    markup = "<body><span>Line one</span><br><span>Line two</span><p>para</p></body>"
    assert html_to_text(markup) == "Line one\nLine two\n\npara"


def test_html_to_text_nested_lists():
    markup = "<ul><li>Parent<ul><li>Child</li></ul></li><li><p>Wrapped item</p></li></ul>"
    assert html_to_text(markup) == "- Parent\n\n- Child\n\n- Wrapped item"


def test_html_to_text_skips_comments():
    assert html_to_text("<p>Shown<!-- hidden --> text</p>") == "Shown text"


def test_raw_fallback_keeps_whole_page():
    markup = (
        "<html><body><nav>Menu</nav><div>Loose text<p>Body</p></div>"
        "<footer>Copyright 2024</footer></body></html>"
    )
    with patch("termnews.article.Document") as mock_document:
        mock_document.return_value.summary.side_effect = Unparseable("no candidates")
        text = render_document(markup, "http://example.com")

    for fragment in ("Menu", "Loose text", "Body", "Copyright 2024"):
        assert fragment in text
