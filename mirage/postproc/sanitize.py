"""Strips Markdown code fences the model sometimes wraps around HTML."""

from __future__ import annotations

import re

_LEADING_FENCE = re.compile(r"\A```html\s*", re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```\Z")


class ContentSanitizer:
    """Removes a leading ```html fence and a trailing ``` fence."""

    def sanitize(self, raw: str) -> str:
        """Return ``raw`` without fence markers or surrounding whitespace.

        Stripping repeats until nothing changes, so the result is stable under
        re-application even for doubly fenced output.
        """
        text = raw.strip()
        while True:
            cleaned = _LEADING_FENCE.sub("", text, count=1)
            cleaned = _TRAILING_FENCE.sub("", cleaned, count=1).strip()
            if cleaned == text:
                return cleaned
            text = cleaned


def sanitize(raw: str) -> str:
    return ContentSanitizer().sanitize(raw)


__all__ = ["ContentSanitizer", "sanitize"]
