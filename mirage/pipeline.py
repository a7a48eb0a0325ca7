"""Per-request pipeline: prompt, generate, sanitize, inject, respond."""

from __future__ import annotations

import asyncio
from enum import Enum
from urllib.parse import urlsplit

from . import failsafe
from .config import MirageConfig
from .llm.client import GeminiClient
from .logging import get_logger
from .models import (
    HTML_CONTENT_TYPE,
    FailureKind,
    GenerationFailure,
    GenerationResult,
    PageResponse,
    RequestContext,
)
from .postproc.inject import MarkupInjector
from .postproc.sanitize import ContentSanitizer
from .prompting.builder import PromptBuilder


class PipelineState(str, Enum):
    """Stages a request moves through; ERROR_RESPONDED absorbs any failure."""

    START = "start"
    PROMPT_BUILT = "prompt_built"
    GENERATED = "generated"
    SANITIZED = "sanitized"
    INJECTED = "injected"
    RESPONDED = "responded"
    ERROR_RESPONDED = "error_responded"


class RequestPipeline:
    """Turns one inbound request into one page response.

    Configuration and collaborators are fixed at construction; ``handle`` holds
    no state between calls, so concurrent requests are independent.
    """

    def __init__(
        self,
        config: MirageConfig,
        *,
        prompt_builder: PromptBuilder | None = None,
        client: GeminiClient | None = None,
        sanitizer: ContentSanitizer | None = None,
        injector: MarkupInjector | None = None,
    ) -> None:
        self.config = config
        self.prompt_builder = prompt_builder or PromptBuilder(language=config.prompt_language)
        self.client = client or GeminiClient(
            model=config.model,
            base_url=config.base_url,
            request_timeout=config.request_timeout,
            retries=config.retries,
        )
        self.sanitizer = sanitizer or ContentSanitizer()
        self.injector = injector or MarkupInjector(config.injection, config.strategy)
        self._ignored_paths = frozenset(config.ignored_paths)
        self.logger = get_logger("pipeline")

    async def handle(self, ctx: RequestContext) -> PageResponse:
        """Produce the response for ``ctx``; never raises."""
        state = PipelineState.START
        try:
            if self.is_ignored(ctx.path):
                self.logger.debug("Skipping generation for %s", ctx.path)
                return PageResponse(status_code=204)

            self.logger.info("Received %s request for %s", ctx.method, ctx.path)
            self.logger.debug("User-Agent: %s", ctx.user_agent)

            if not self.config.has_credential:
                self.logger.error("GEMINI_API_KEY is not configured.")
                state = PipelineState.ERROR_RESPONDED
                return failsafe.misconfigured()

            prompt = self.prompt_builder.build(ctx, snippets=self.injector.prompt_snippets())
            state = PipelineState.PROMPT_BUILT

            result = await self._generate(prompt)
            if isinstance(result, GenerationFailure):
                state = PipelineState.ERROR_RESPONDED
                return self._failure_response(ctx, result)
            state = PipelineState.GENERATED

            html = self.sanitizer.sanitize(result.html)
            state = PipelineState.SANITIZED

            html = self.injector.inject(html)
            state = PipelineState.INJECTED

            self.logger.info("Generated %d characters for %s", len(html), ctx.path)
            state = PipelineState.RESPONDED
            return PageResponse(status_code=200, body=html, content_type=HTML_CONTENT_TYPE)
        except Exception as exc:
            self.logger.exception("Error while handling %s %s (state=%s)", ctx.method, ctx.path, state.value)
            return failsafe.build_error_page(str(exc) or exc.__class__.__name__)

    def is_ignored(self, path: str) -> bool:
        return urlsplit(path).path in self._ignored_paths

    async def _generate(self, prompt: str) -> GenerationResult:
        # The blocking HTTP call runs in the default executor so other requests keep flowing.
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self.client.generate, prompt, self.config.api_key
        )

    def _failure_response(self, ctx: RequestContext, failure: GenerationFailure) -> PageResponse:
        self.logger.warning(
            "Generation failed for %s (%s): %s", ctx.path, failure.kind.value, failure.message
        )
        if failure.kind is FailureKind.CONFIG:
            return failsafe.misconfigured()
        if failure.kind is FailureKind.UPSTREAM:
            return failsafe.upstream_failure(failure.message, failure.status_code)
        if failure.kind is FailureKind.RESPONSE_SHAPE:
            return failsafe.unexpected_format()
        return failsafe.build_error_page(failure.message)


__all__ = ["PipelineState", "RequestPipeline"]
