"""FastAPI application that serves generated pages for every path."""

from __future__ import annotations

from typing import Callable

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import Response

from ..config import MirageConfig, load_config
from ..logging import get_logger
from ..models import RequestContext
from ..pipeline import RequestPipeline

ROUTE_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

logger = get_logger("service")


def _default_pipeline() -> RequestPipeline:
    return RequestPipeline(load_config())


def create_app(
    pipeline_factory: Callable[[], RequestPipeline] = _default_pipeline,
) -> FastAPI:
    """Create the FastAPI application bound to a single request pipeline."""
    app = FastAPI(
        title="mirage",
        version="1.0.0",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    # Built once: configuration is read-only for the process lifetime.
    app.state.pipeline = pipeline_factory()

    async def get_pipeline(request: Request) -> RequestPipeline:
        return request.app.state.pipeline

    @app.api_route("/{path:path}", methods=ROUTE_METHODS, include_in_schema=False)
    async def generate_page(
        request: Request,
        pipeline: RequestPipeline = Depends(get_pipeline),
    ) -> Response:
        page = await pipeline.handle(request_context(request))
        if page.status_code == 204:
            return Response(status_code=204)
        return Response(
            content=page.body,
            status_code=page.status_code,
            media_type=page.content_type,
        )

    return app


def request_context(request: Request) -> RequestContext:
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    return RequestContext(
        method=request.method,
        path=path,
        user_agent=request.headers.get("user-agent") or "Unknown",
    )


def run_service(config: MirageConfig) -> None:  # pragma: no cover - integration path
    if not config.has_credential:
        logger.warning(
            "API key not provided. Use --api-key or the GEMINI_API_KEY environment variable; "
            "every page request will answer 500 until it is set."
        )
    app = create_app(lambda: RequestPipeline(config))
    logger.info("mirage is running on http://%s:%d", config.host, config.port)
    # log_config=None keeps the handlers installed by configure_logging.
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)


__all__ = ["create_app", "request_context", "run_service"]
