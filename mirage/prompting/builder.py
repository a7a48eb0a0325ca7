"""Builds the page-generation prompt for the model."""

from __future__ import annotations

from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..models import RequestContext
from .constants import CONSTRAINT_TEXT, DEFAULT_CONSTRAINTS, TEMPLATE_NAMES


class PromptBuilder:
    """Renders a deterministic instruction string for a single request.

    The builder is a pure function of its inputs: identical request details,
    constraints and snippets always produce byte-identical prompts.
    """

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        language: str = "en",
    ) -> None:
        language = (language or "en").lower()
        if language not in TEMPLATE_NAMES:
            raise ValueError(
                f"Unsupported prompt language '{language}'. Choose from: {', '.join(TEMPLATE_NAMES)}"
            )
        self.language = language
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = self._create_env(self.templates_dir)

    def build(
        self,
        ctx: RequestContext,
        constraints: Sequence[str] = DEFAULT_CONSTRAINTS,
        snippets: Sequence[str] | None = None,
    ) -> str:
        """Render the prompt for ``ctx``.

        ``constraints`` are keys from ``DEFAULT_CONSTRAINTS`` (or literal
        requirement sentences); ``snippets`` is literal head markup the model is
        asked to embed when injection happens through the prompt.
        """
        template = self._env.get_template(TEMPLATE_NAMES[self.language])
        return template.render(
            method=ctx.method,
            path=ctx.path,
            user_agent=ctx.user_agent,
            constraints=self._describe_constraints(constraints),
            snippets=[snippet.strip() for snippet in snippets or () if snippet.strip()],
        ).strip()

    def _describe_constraints(self, constraints: Sequence[str]) -> list[str]:
        texts = CONSTRAINT_TEXT[self.language]
        # Unknown keys are treated as already-worded requirements.
        return [texts.get(item, item) for item in constraints]

    @staticmethod
    def _create_env(templates_dir: Path) -> Environment:
        directories = [str(templates_dir)]
        default_dir = str(Path(__file__).with_name("templates"))
        if default_dir not in directories:
            directories.append(default_dir)
        return Environment(
            loader=FileSystemLoader(directories),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )


__all__ = ["PromptBuilder"]
