"""Logging setup shared by the mirage CLI and the uvicorn server it runs."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List

_LOGGER_NAME = "mirage"

CONSOLE_FORMAT = "[%(name)s] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# uvicorn's own loggers; routed through the mirage handlers so one stream carries both.
SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger such as ``mirage.pipeline``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def _build_handlers(level: int, log_file: Path | None) -> List[logging.Handler]:
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    handlers: List[logging.Handler] = [stream_handler]

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(file_handler)
    return handlers


def _install(logger: logging.Logger, level: int, handlers: Iterable[logging.Handler]) -> None:
    logger.setLevel(level)
    logger.propagate = False
    # Repeated configuration in one process must not duplicate output.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        logger.addHandler(handler)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    server_loggers: Iterable[str] = SERVER_LOGGERS,
) -> logging.Logger:
    """Send mirage and server logs to the console and, optionally, ``log_file``.

    Records keep their logger name in the output, so request handling
    (``mirage.pipeline``), upstream calls (``mirage.llm``) and access lines
    (``uvicorn.access``) stay distinguishable in one stream. The server loggers
    stay at INFO unless ``verbose`` is set.
    """
    level = logging.DEBUG if verbose else logging.INFO
    handlers = _build_handlers(level, log_file)

    logger = logging.getLogger(_LOGGER_NAME)
    _install(logger, level, handlers)
    for name in server_loggers:
        _install(logging.getLogger(name), level, handlers)

    return logger


__all__ = ["CONSOLE_FORMAT", "SERVER_LOGGERS", "configure_logging", "get_logger"]
