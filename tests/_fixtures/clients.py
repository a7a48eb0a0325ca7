"""Stand-in generation clients shared by pipeline and service tests."""

from __future__ import annotations

from typing import Dict, List

from mirage.models import GenerationResult, GenerationSuccess

PAGE = '<html><head><meta charset="utf-8"></head><body><a href="/">Home</a></body></html>'


class StubClient:
    """Stands in for GeminiClient and records every call."""

    def __init__(self, result: GenerationResult | None = None, error: Exception | None = None) -> None:
        self.result = result or GenerationSuccess(PAGE)
        self.error = error
        self.calls: List[Dict[str, str]] = []

    def generate(self, prompt: str, credential: str) -> GenerationResult:
        self.calls.append({"prompt": prompt, "credential": credential})
        if self.error is not None:
            raise self.error
        return self.result
