"""HTTP client for the Gemini text-generation API."""

from __future__ import annotations

import http.client
import json
from dataclasses import dataclass
from typing import Callable, Optional
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlencode
from urllib.request import Request, urlopen

from pydantic import ValidationError

from ..config import DEFAULT_BASE_URL, DEFAULT_MODEL, DEFAULT_TIMEOUT
from ..logging import get_logger
from ..models import FailureKind, GenerationFailure, GenerationResult, GenerationSuccess
from .schemas import GenerateContentRequest, GenerateContentResponse

_SUMMARY_LIMIT = 500


@dataclass
class GenerationRequest:
    """A single outbound call to the generation endpoint."""

    url: str
    body: bytes
    timeout: float


class GeminiClient:
    """Sends one prompt to Gemini and classifies the outcome.

    Failures are returned as :class:`GenerationFailure` values rather than
    raised, so callers can map each kind to a response without try/except.
    """

    def __init__(
        self,
        *,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        request_timeout: Optional[float] = DEFAULT_TIMEOUT,
        retries: int = 0,
        transport: Callable[[GenerationRequest], bytes] | None = None,
    ) -> None:
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.request_timeout = request_timeout or DEFAULT_TIMEOUT
        self.retries = max(0, retries)
        self._transport = transport or self._urllib_transport
        self.logger = get_logger("llm")

    def generate(self, prompt: str, credential: str) -> GenerationResult:
        """Generate page HTML for ``prompt`` using ``credential`` as the API key."""
        if not credential:
            return GenerationFailure(FailureKind.CONFIG, "missing credential")

        payload = GenerateContentRequest.from_prompt(prompt).model_dump(exclude_none=True)
        request = GenerationRequest(
            url=self.endpoint(credential),
            body=json.dumps(payload).encode("utf-8"),
            timeout=self.request_timeout,
        )

        attempts = self.retries + 1
        attempt = 0
        while True:
            attempt += 1
            self.logger.debug("Calling %s (attempt %d/%d)", self.model, attempt, attempts)
            try:
                raw = self._transport(request)
            except HTTPError as exc:
                detail = _read_error_body(exc)
                self.logger.error("Gemini API error (%s): %s", exc.code, detail)
                return GenerationFailure(
                    FailureKind.UPSTREAM,
                    f"status {exc.code}: {detail}",
                    status_code=exc.code,
                )
            except (URLError, http.client.HTTPException, OSError) as exc:
                reason = getattr(exc, "reason", None) or exc
                if attempt < attempts:
                    self.logger.warning("Gemini request failed (%s); retrying", reason)
                    continue
                self.logger.error("Gemini request failed: %s", reason)
                return GenerationFailure(FailureKind.UPSTREAM, f"request failed: {reason}")
            return self._parse(raw)

    def endpoint(self, credential: str) -> str:
        model = quote(self.model, safe="")
        return f"{self.base_url}/models/{model}:generateContent?{urlencode({'key': credential})}"

    def _parse(self, raw: bytes) -> GenerationResult:
        try:
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            summary = raw[:_SUMMARY_LIMIT].decode("utf-8", errors="replace")
            self.logger.error("Gemini API returned invalid JSON: %s", summary)
            return GenerationFailure(FailureKind.RESPONSE_SHAPE, f"invalid JSON: {summary}")

        try:
            envelope = GenerateContentResponse.model_validate(payload)
        except ValidationError:
            envelope = None
        text = envelope.first_text() if envelope is not None else None
        if text is None:
            summary = _summarise(payload)
            self.logger.error("Unexpected Gemini response structure: %s", summary)
            return GenerationFailure(FailureKind.RESPONSE_SHAPE, summary)
        return GenerationSuccess(text)

    @staticmethod
    def _urllib_transport(request: GenerationRequest) -> bytes:
        http_request = Request(
            request.url,
            data=request.body,
            headers={"Content-Type": "application/json"},
            method="POST",
        )
        with urlopen(http_request, timeout=request.timeout) as response:  # type: ignore[arg-type]
            return response.read()


def _read_error_body(exc: HTTPError) -> str:
    try:
        body = exc.read()
    except OSError:
        return str(exc.reason)
    text = body.decode("utf-8", errors="ignore").strip() if body else ""
    return text or str(exc.reason)


def _summarise(payload: object) -> str:
    text = json.dumps(payload, ensure_ascii=False, sort_keys=True)
    if len(text) > _SUMMARY_LIMIT:
        return text[:_SUMMARY_LIMIT] + "..."
    return text


__all__ = ["GeminiClient", "GenerationRequest"]
