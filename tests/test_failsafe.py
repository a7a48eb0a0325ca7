"""Tests for fallback responses."""

from __future__ import annotations

from mirage.failsafe import (
    MISCONFIGURED_MESSAGE,
    build_error_page,
    misconfigured,
    unexpected_format,
    upstream_failure,
)


def test_error_page_is_inline_styled_and_escaped() -> None:
    page = build_error_page('<script>alert("x")</script>')

    assert page.status_code == 500
    assert page.content_type == "text/html; charset=utf-8"
    assert "<style" not in page.body
    assert 'style="' in page.body
    assert '<meta charset="utf-8">' in page.body
    assert "&lt;script&gt;" in page.body
    assert '<a href="/"' in page.body


def test_error_page_without_message_omits_detail() -> None:
    page = build_error_page()

    assert "Error:" not in page.body


def test_plain_text_failures() -> None:
    assert misconfigured().body == MISCONFIGURED_MESSAGE
    assert misconfigured().status_code == 500

    upstream = upstream_failure("status 503: busy", 503)
    assert upstream.status_code == 502
    assert upstream.body.endswith("Status: 503")

    shape = unexpected_format()
    assert shape.status_code == 500
    assert shape.content_type == "text/plain; charset=utf-8"
