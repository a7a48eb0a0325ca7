"""Tests for fence stripping."""

from __future__ import annotations

import pytest

from mirage.postproc.sanitize import ContentSanitizer, sanitize


def test_sanitize_strips_html_fence() -> None:
    assert sanitize("```html\nFOO\n```") == "FOO"


def test_sanitize_trims_whitespace_without_fences() -> None:
    assert sanitize("  <html></html>\n\n") == "<html></html>"


def test_sanitize_leaves_inner_fences_alone() -> None:
    raw = "```html\n<pre>```js\nx()\n```</pre>\n```"
    assert sanitize(raw) == "<pre>```js\nx()\n```</pre>"


def test_sanitize_only_strips_html_tagged_leading_fence() -> None:
    assert sanitize("```python\nprint()\n```") == "```python\nprint()"


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "```",
        "```html",
        "```html\n```html\n<p>x</p>\n```\n```",
        "  ```HTML\n<p>x</p>```  ",
        "<p>plain</p>",
        "\n```\n",
    ],
)
def test_sanitize_is_idempotent(raw: str) -> None:
    sanitizer = ContentSanitizer()
    once = sanitizer.sanitize(raw)
    assert sanitizer.sanitize(once) == once
