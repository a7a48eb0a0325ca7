from __future__ import annotations

from typing import Callable

import pytest

from mirage.config import ENV_KEYS
from tests._fixtures.clients import StubClient


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep developer shell variables out of configuration tests."""
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def gemini_envelope() -> Callable[[str], dict]:
    def _build(text: str) -> dict:
        return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}

    return _build


@pytest.fixture
def stub_client() -> StubClient:
    """Provide a generation client that returns a fixed page."""
    return StubClient()
