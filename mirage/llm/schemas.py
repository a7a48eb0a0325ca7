"""Wire models for the Gemini ``generateContent`` endpoint."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class Part(BaseModel):
    text: Optional[str] = None


class Content(BaseModel):
    role: Optional[str] = None
    parts: List[Part] = Field(default_factory=list)


class GenerateContentRequest(BaseModel):
    contents: List[Content]

    @classmethod
    def from_prompt(cls, prompt: str) -> "GenerateContentRequest":
        """Single user turn carrying the prompt as its only part."""
        return cls(contents=[Content(role="user", parts=[Part(text=prompt)])])


class Candidate(BaseModel):
    content: Optional[Content] = None


class GenerateContentResponse(BaseModel):
    candidates: List[Candidate] = Field(default_factory=list)

    def first_text(self) -> Optional[str]:
        """Text of the first part of the first candidate, if the envelope has one."""
        if not self.candidates:
            return None
        content = self.candidates[0].content
        if content is None or not content.parts:
            return None
        return content.parts[0].text or None


__all__ = [
    "Candidate",
    "Content",
    "GenerateContentRequest",
    "GenerateContentResponse",
    "Part",
]
