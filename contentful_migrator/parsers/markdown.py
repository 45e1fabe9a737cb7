"""
HTML to Markdown conversion for rich-text notes fields.

Notes in the export were authored as HTML.  :func:`html_to_markdown` turns
them into Markdown with ``markdownify``; :func:`contains_html` uses
BeautifulSoup to tell HTML apart from text that is already plain.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup
from markdownify import markdownify

_EXTRA_BLANK_LINES = re.compile(r"\n{3,}")


def contains_html(text: str) -> bool:
    """True when ``text`` holds at least one HTML element."""
    if not text or "<" not in text:
        return False
    return BeautifulSoup(text, "html.parser").find() is not None


def html_to_markdown(html: str) -> str:
    if not html or not html.strip():
        return ""
    result = markdownify(html, heading_style="ATX", bullets="-")
    # markdownify leaves runs of blank lines around block elements
    return _EXTRA_BLANK_LINES.sub("\n\n", result).strip()
