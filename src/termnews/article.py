"""Turn an article URL into plain text for the reading view.

Three tiers, tried in order:

1. readability extracts the main content, which is rendered as text under
   the article title;
2. if readability gives up, the whole page is rendered as text behind a
   warning;
3. if the page can't be fetched at all, a fixed failure message is shown.

Media responses (PDFs, images) skip all of that and get an advisory.
"""
from __future__ import annotations

import logging
import textwrap
from typing import List, Optional

import requests
from bs4 import BeautifulSoup, NavigableString
from bs4.element import PreformattedString
from readability import Document
from readability.readability import Unparseable

from .config import ARTICLE_HEADERS, MIN_ARTICLE_CHARS, TEXT_WIDTH

logger = logging.getLogger("termnews")

MEDIA_MESSAGE = "⚠️  Media file. Press 'o' to open in browser."
EMPTY_CONTENT_MESSAGE = "⚠️  Empty content. Press 'o' to open in browser."
EXTRACTION_FAILED_PREFIX = "⚠️  Extraction failed. Raw text:\n\n"
LOAD_FAILED_MESSAGE = "Failed to load article."
LOADING_MESSAGE = "Loading article..."

MEDIA_TYPES = ("application/pdf", "image/")

BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "body", "dd", "div", "dl", "dt",
    "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2", "h3", "h4",
    "h5", "h6", "header", "hr", "html", "li", "main", "nav", "ol", "p", "pre",
    "section", "table", "td", "th", "tr", "ul",
}
HEADING_TAGS = {"h1": "#", "h2": "##", "h3": "###", "h4": "####", "h5": "#####", "h6": "######"}

# marks the end of a block element on the walk stack
_BLOCK_END = object()


class ExtractionError(Exception):
    """readability could not find an article in the page."""


def is_media_type(content_type: Optional[str]) -> bool:
    if not content_type:
        return False
    content_type = content_type.lower()
    return any(media in content_type for media in MEDIA_TYPES)


class _ParagraphBuilder:
    """Collects inline text and emits wrapped paragraphs at block boundaries."""

    def __init__(self, width: int):
        self.width = width
        self.paragraphs: List[str] = []
        self._parts: List[str] = []
        self._prefix = ""

    def add(self, text: str) -> None:
        self._parts.append(text)

    def line_break(self) -> None:
        self._parts.append("\n")

    def start(self, tag_name: str) -> None:
        self.flush()
        # a block without its own prefix inherits the enclosing one
        if tag_name in HEADING_TAGS:
            self._prefix = HEADING_TAGS[tag_name] + " "
        elif tag_name == "li":
            self._prefix = "- "

    def flush(self) -> None:
        lines = [" ".join(line.split()) for line in "".join(self._parts).split("\n")]
        lines = [line for line in lines if line]
        self._parts = []
        if lines:
            indent = " " * len(self._prefix)
            wrapped = [
                textwrap.fill(
                    line,
                    width=self.width,
                    initial_indent=self._prefix if i == 0 else indent,
                    subsequent_indent=indent,
                )
                for i, line in enumerate(lines)
            ]
            self.paragraphs.append("\n".join(wrapped))
            self._prefix = ""

    def end(self) -> None:
        self.flush()
        self._prefix = ""


def html_to_text(markup: str, width: int = TEXT_WIDTH) -> str:
    """Render HTML as paragraphs of plain text wrapped at ``width`` columns.

    Every text node is kept; block elements start a new paragraph and
    ``<br>`` starts a new line within one.
    """
    soup = BeautifulSoup(markup, "lxml")
    for tag in soup(["script", "style", "noscript", "template", "head"]):
        tag.decompose()

    builder = _ParagraphBuilder(width)
    stack = [soup]
    while stack:
        node = stack.pop()
        if node is _BLOCK_END:
            builder.end()
        elif isinstance(node, NavigableString):
            # comments, doctypes and the like
            if not isinstance(node, PreformattedString):
                builder.add(str(node))
        elif node.name == "br":
            builder.line_break()
        else:
            if node.name in BLOCK_TAGS:
                builder.start(node.name)
                stack.append(_BLOCK_END)
            stack.extend(reversed(node.contents))
    builder.flush()
    return "\n\n".join(builder.paragraphs)


def extract_readable(markup: str, url: str) -> tuple[str, str]:
    """Return ``(title, content_html)`` for the main content of the page."""
    try:
        doc = Document(markup, url=url)
        content = doc.summary(html_partial=True)
        title = doc.title()
    except (Unparseable, ValueError) as e:
        raise ExtractionError(str(e)) from e
    return title, content


def raw_text_fallback(markup: str) -> str:
    return EXTRACTION_FAILED_PREFIX + html_to_text(markup)


def render_document(markup: str, url: str) -> str:
    """Render fetched markup, falling back to the unfiltered page text."""
    try:
        title, content = extract_readable(markup, url)
    except ExtractionError as e:
        logger.debug("Readability failed for %s: %s", url, e)
        return raw_text_fallback(markup)

    heading = f"# {title}\n\n"
    text = html_to_text(content)
    if len(text.strip()) < MIN_ARTICLE_CHARS:
        return f"{heading}\n\n{EMPTY_CONTENT_MESSAGE}"
    return heading + text


def fetch_article(url: str, session: Optional[requests.Session] = None) -> str:
    """Fetch ``url`` and return its readable text.

    Transport errors propagate as ``requests.RequestException``.
    """
    http = session or requests
    logger.debug("Fetching article %s", url)
    resp = http.get(url, headers=ARTICLE_HEADERS)

    if is_media_type(resp.headers.get("content-type")):
        return MEDIA_MESSAGE

    return render_document(resp.text, resp.url)


def load_article_text(url: str, session: Optional[requests.Session] = None) -> str:
    try:
        return fetch_article(url, session=session)
    except requests.RequestException as e:
        logger.error("Failed to load article %s: %s", url, e)
        return LOAD_FAILED_MESSAGE
