"""Generation API adapters."""

from .client import GeminiClient, GenerationRequest

__all__ = ["GeminiClient", "GenerationRequest"]
