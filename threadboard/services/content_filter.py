"""Content filter contract and the default plain-text implementation."""

import html
from typing import Protocol


class ContentFilter(Protocol):
    """Turns raw submitted text into storable content."""

    def sanitize(self, raw: str) -> tuple[str, int]:
        """Return ``(content, printable_length)``; must not raise on malformed input."""
        ...


class PlainTextFilter:
    """
    Stores submissions as escaped plain text.

    Markup is never interpreted: every character is HTML-escaped and line
    breaks are normalized. Nothing is truncated; request size is bounded by
    the request schema. The printable length ignores whitespace and
    control characters so padding cannot satisfy a minimum length.
    """

    def sanitize(self, raw: str) -> tuple[str, int]:
        text = raw.replace("\r\n", "\n").replace("\r", "\n").strip()
        printable = sum(1 for ch in text if ch.isprintable() and not ch.isspace())
        return html.escape(text, quote=True), printable


_default_filter = PlainTextFilter()


def get_content_filter() -> ContentFilter:
    """Dependency returning the configured content filter."""
    return _default_filter
