"""HTML sanitization for user-written rating comments."""
from __future__ import annotations

import logging
from typing import Optional

import nh3

log = logging.getLogger(__name__)

ALLOWED_TAGS = {
    "a", "b", "blockquote", "br", "caption", "cite", "code", "col", "colgroup",
    "dd", "div", "dl", "dt", "em", "h1", "h2", "h3", "h4", "h5", "h6", "i",
    "img", "li", "ol", "p", "pre", "q", "small", "span", "strike", "strong",
    "sub", "sup", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "u", "ul",
}
ALLOWED_ATTRIBUTES = {
    "a": {"href", "title"},
    "blockquote": {"cite"},
    "img": {"src", "alt", "title", "width", "height"},
    "q": {"cite"},
    "td": {"colspan", "rowspan"},
    "th": {"colspan", "rowspan"},
}
ALLOWED_URL_SCHEMES = {"http", "https", "mailto"}


def sanitize_html(content: str) -> str:
    return nh3.clean(
        content,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        url_schemes=ALLOWED_URL_SCHEMES,
    ).strip()


def sanitize_comment(content: Optional[str], empty_fallback: str = "escape") -> Optional[str]:
    """Clean a comment, handling input that sanitizes down to nothing.

    ``<script>alert(1)</script>`` cleans to an empty string. With
    ``empty_fallback="escape"`` the trimmed original is kept as escaped text, so
    nothing executable survives and the comment is not silently dropped. With
    ``"empty"`` the comment becomes ``None``.
    """
    if content is None:
        return None
    trimmed = content.strip()
    if not trimmed:
        return None
    cleaned = sanitize_html(trimmed)
    if cleaned:
        return cleaned
    if empty_fallback == "escape":
        log.info("Comment emptied by sanitization; keeping escaped original text")
        return nh3.clean_text(trimmed)
    return None
