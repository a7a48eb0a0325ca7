"""Core data models shared across mirage components."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

HTML_CONTENT_TYPE = "text/html; charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


@dataclass(frozen=True)
class RequestContext:
    """The parts of an inbound request that are forwarded to the model."""

    method: str
    path: str
    user_agent: str = "Unknown"


@dataclass(frozen=True)
class InjectionConfig:
    """Third-party identifiers whose snippets end up in the page head."""

    analytics_id: Optional[str] = None
    ad_client_id: Optional[str] = None

    def __post_init__(self) -> None:
        # Blank identifiers mean "not configured".
        object.__setattr__(self, "analytics_id", _blank_to_none(self.analytics_id))
        object.__setattr__(self, "ad_client_id", _blank_to_none(self.ad_client_id))

    @property
    def is_empty(self) -> bool:
        return self.analytics_id is None and self.ad_client_id is None


class InjectionStrategy(str, Enum):
    """How snippets reach the page head."""

    STRUCTURAL = "structural"
    PROMPT = "prompt"


class FailureKind(str, Enum):
    """Classification of a failed generation attempt."""

    CONFIG = "config"
    UPSTREAM = "upstream"
    RESPONSE_SHAPE = "response_shape"
    UNEXPECTED = "unexpected"


@dataclass(frozen=True)
class GenerationSuccess:
    html: str


@dataclass(frozen=True)
class GenerationFailure:
    kind: FailureKind
    message: str
    status_code: Optional[int] = None


GenerationResult = Union[GenerationSuccess, GenerationFailure]


@dataclass(frozen=True)
class PageResponse:
    """Final response handed back to the HTTP layer."""

    status_code: int
    body: str = ""
    content_type: Optional[str] = None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


__all__ = [
    "FailureKind",
    "GenerationFailure",
    "GenerationResult",
    "GenerationSuccess",
    "HTML_CONTENT_TYPE",
    "InjectionConfig",
    "InjectionStrategy",
    "PageResponse",
    "RequestContext",
    "TEXT_CONTENT_TYPE",
]
