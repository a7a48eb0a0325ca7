"""Prompt construction for page generation."""

from .builder import PromptBuilder
from .constants import DEFAULT_CONSTRAINTS

__all__ = ["DEFAULT_CONSTRAINTS", "PromptBuilder"]
