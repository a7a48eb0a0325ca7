"""Tests for the request pipeline."""

from __future__ import annotations

import asyncio
import http.client
import io
import json
from urllib.error import HTTPError

import pytest

from mirage.config import MirageConfig
from mirage.llm.client import GeminiClient, GenerationRequest
from mirage.models import (
    FailureKind,
    GenerationFailure,
    GenerationSuccess,
    InjectionConfig,
    InjectionStrategy,
    RequestContext,
)
from mirage.pipeline import RequestPipeline
from tests._fixtures.clients import PAGE, StubClient

ABOUT = RequestContext(method="GET", path="/about", user_agent="TestAgent/1.0")
FENCED_PAGE = f"```html\n{PAGE}\n```"


def _run(pipeline: RequestPipeline, ctx: RequestContext = ABOUT):
    return asyncio.run(pipeline.handle(ctx))


def _gemini(transport) -> GeminiClient:
    return GeminiClient(transport=transport)


@pytest.mark.parametrize("method", ["GET", "POST", "DELETE"])
@pytest.mark.parametrize("api_key", ["", "key"])
def test_favicon_is_answered_without_generation(method: str, api_key: str) -> None:
    client = StubClient()
    pipeline = RequestPipeline(MirageConfig(api_key=api_key), client=client)

    response = _run(pipeline, RequestContext(method, "/favicon.ico", "AnyAgent"))

    assert response.status_code == 204
    assert response.body == ""
    assert client.calls == []


def test_favicon_with_query_string_is_ignored() -> None:
    pipeline = RequestPipeline(MirageConfig(api_key="key"), client=StubClient())

    response = _run(pipeline, RequestContext("GET", "/favicon.ico?v=2"))

    assert response.status_code == 204


def test_missing_credential_returns_500_without_calling_api() -> None:
    client = StubClient()
    pipeline = RequestPipeline(MirageConfig(api_key=""), client=client)

    response = _run(pipeline)

    assert response.status_code == 500
    assert response.content_type == "text/plain; charset=utf-8"
    assert "GEMINI_API_KEY" in response.body
    assert client.calls == []


def test_successful_generation_strips_fences(gemini_envelope) -> None:
    def transport(request: GenerationRequest) -> bytes:
        return json.dumps(gemini_envelope(FENCED_PAGE)).encode("utf-8")

    pipeline = RequestPipeline(MirageConfig(api_key="key"), client=_gemini(transport))

    response = _run(pipeline)

    assert response.status_code == 200
    assert response.content_type == "text/html; charset=utf-8"
    assert response.body == PAGE


def test_successful_generation_injects_configured_snippets() -> None:
    config = MirageConfig(
        api_key="key",
        injection=InjectionConfig(analytics_id="G-TEST", ad_client_id="ca-pub-TEST"),
    )
    client = StubClient(GenerationSuccess(FENCED_PAGE))
    pipeline = RequestPipeline(config, client=client)

    response = _run(pipeline)

    assert response.status_code == 200
    body = response.body
    head_end = body.index("</head>")
    assert body.count("gtag/js?id=G-TEST") == 1
    assert body.count("adsbygoogle.js?client=ca-pub-TEST") == 1
    assert body.index("gtag/js?id=G-TEST") < body.index("adsbygoogle.js") < head_end
    # Structural injection keeps the prompt free of snippet markup.
    assert "googletagmanager" not in client.calls[0]["prompt"]


def test_prompt_strategy_sends_snippets_to_model_and_keeps_page() -> None:
    config = MirageConfig(
        api_key="key",
        injection=InjectionConfig(analytics_id="G-TEST"),
        strategy=InjectionStrategy.PROMPT,
    )
    client = StubClient(GenerationSuccess(PAGE))
    pipeline = RequestPipeline(config, client=client)

    response = _run(pipeline)

    assert response.body == PAGE
    assert "gtag/js?id=G-TEST" in client.calls[0]["prompt"]
    assert client.calls[0]["credential"] == "key"


def test_prompt_carries_request_details() -> None:
    client = StubClient()
    pipeline = RequestPipeline(MirageConfig(api_key="key"), client=client)

    _run(pipeline, RequestContext("POST", "/search?q=cats", "Bot/2.0"))

    prompt = client.calls[0]["prompt"]
    assert "POST" in prompt
    assert "/search?q=cats" in prompt
    assert "Bot/2.0" in prompt


def test_upstream_error_maps_to_502_with_status() -> None:
    def transport(request: GenerationRequest) -> bytes:
        raise HTTPError(request.url, 503, "Service Unavailable", hdrs=None, fp=io.BytesIO(b"busy"))

    pipeline = RequestPipeline(MirageConfig(api_key="key"), client=_gemini(transport))

    response = _run(pipeline)

    assert response.status_code == 502
    assert "503" in response.body
    assert response.content_type == "text/plain; charset=utf-8"


def test_network_failure_maps_to_502() -> None:
    client = StubClient(GenerationFailure(FailureKind.UPSTREAM, "request failed: timed out"))
    pipeline = RequestPipeline(MirageConfig(api_key="key"), client=client)

    response = _run(pipeline)

    assert response.status_code == 502
    assert "timed out" in response.body


def test_dropped_connection_maps_to_502(monkeypatch) -> None:
    def fake_urlopen(request, timeout=None):
        raise http.client.RemoteDisconnected("Remote end closed connection without response")

    monkeypatch.setattr("mirage.llm.client.urlopen", fake_urlopen)
    pipeline = RequestPipeline(MirageConfig(api_key="key"), client=GeminiClient())

    response = _run(pipeline)

    assert response.status_code == 502
    assert response.content_type == "text/plain; charset=utf-8"
    assert "Remote end closed connection" in response.body


def test_missing_candidates_maps_to_500() -> None:
    def transport(request: GenerationRequest) -> bytes:
        return b'{"usageMetadata": {}}'

    pipeline = RequestPipeline(MirageConfig(api_key="key"), client=_gemini(transport))

    response = _run(pipeline)

    assert response.status_code == 500
    assert "unexpected response format" in response.body


def test_unexpected_exception_becomes_html_error_page() -> None:
    client = StubClient(error=RuntimeError("kaboom <b>"))
    pipeline = RequestPipeline(MirageConfig(api_key="key"), client=client)

    response = _run(pipeline)

    assert response.status_code == 500
    assert response.content_type == "text/html; charset=utf-8"
    assert "kaboom &lt;b&gt;" in response.body
    assert "<b>" not in response.body
    assert 'style="' in response.body
