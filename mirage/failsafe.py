"""Fallback responses used when a page cannot be generated."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from .models import HTML_CONTENT_TYPE, TEXT_CONTENT_TYPE, PageResponse

MISCONFIGURED_MESSAGE = (
    "AI service is not configured. Administrator needs to set the GEMINI_API_KEY secret."
)
SHAPE_ERROR_MESSAGE = "Received an unexpected response format from the AI model."

_env = Environment(
    loader=FileSystemLoader(str(Path(__file__).with_name("templates"))),
    autoescape=select_autoescape(["html", "j2"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def build_error_page(
    message: str | None = None,
    *,
    status_code: int = 500,
    title: str = "Internal Server Error",
    summary: str = "Sorry, something went wrong while asking the AI to build this page.",
) -> PageResponse:
    """Return an inline-styled HTML error page with ``message`` escaped into it."""
    body = _env.get_template("error_page.html.j2").render(
        status_code=status_code,
        title=title,
        summary=summary,
        message=message,
    )
    return PageResponse(status_code=status_code, body=body, content_type=HTML_CONTENT_TYPE)


def plain_error(message: str, *, status_code: int) -> PageResponse:
    return PageResponse(status_code=status_code, body=message, content_type=TEXT_CONTENT_TYPE)


def misconfigured() -> PageResponse:
    return plain_error(MISCONFIGURED_MESSAGE, status_code=500)


def upstream_failure(detail: str, status_code: int | None = None) -> PageResponse:
    if status_code is not None:
        message = f"Failed to get a response from the AI model. Status: {status_code}"
    else:
        message = f"Failed to get a response from the AI model: {detail}"
    return plain_error(message, status_code=502)


def unexpected_format() -> PageResponse:
    return plain_error(SHAPE_ERROR_MESSAGE, status_code=500)


__all__ = [
    "MISCONFIGURED_MESSAGE",
    "SHAPE_ERROR_MESSAGE",
    "build_error_page",
    "misconfigured",
    "plain_error",
    "unexpected_format",
    "upstream_failure",
]
