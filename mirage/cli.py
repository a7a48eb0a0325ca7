"""CLI entrypoints for mirage commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict

from .config import PROMPT_LANGUAGES, ConfigError, MirageConfig, load_config
from .logging import configure_logging
from .models import InjectionStrategy
from .service import run_service


def _add_verbose_flag(parser: argparse.ArgumentParser, *, inherited: bool = False) -> None:
    # Subcommands suppress the default so a top-level -v is not reset to False.
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS if inherited else False,
        help="Log at DEBUG level, including user agents and upstream attempts.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mirage",
        description="Serve web pages that a generative model writes on demand for every request.",
    )
    _add_verbose_flag(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP server.",
    )
    _add_verbose_flag(serve_parser, inherited=True)
    serve_parser.add_argument(
        "--api-key",
        "--apiKey",
        "--key",
        dest="api_key",
        default=None,
        help="Gemini API key (falls back to GEMINI_API_KEY).",
    )
    serve_parser.add_argument("--host", default=None, help="Interface to bind (default 127.0.0.1).")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to listen on (default 3000).")
    serve_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a .mirage.yml file or a directory containing one.",
    )
    serve_parser.add_argument(
        "--analytics-id",
        default=None,
        help="Google Analytics measurement ID (falls back to GA_MEASUREMENT_ID).",
    )
    serve_parser.add_argument(
        "--ad-client-id",
        default=None,
        help="Google AdSense client ID (falls back to ADSENSE_CLIENT_ID).",
    )
    serve_parser.add_argument(
        "--strategy",
        choices=[item.value for item in InjectionStrategy],
        default=None,
        help="Inject snippets by rewriting the page head (structural) or through the prompt.",
    )
    serve_parser.add_argument("--model", default=None, help="Gemini model name.")
    serve_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for the generation API before answering 502.",
    )
    serve_parser.add_argument(
        "--retries",
        type=int,
        default=None,
        help="Extra attempts after a network-level failure (default 0).",
    )
    serve_parser.add_argument(
        "--language",
        choices=list(PROMPT_LANGUAGES),
        default=None,
        help="Language the prompt is written in.",
    )
    serve_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write logs to this file.",
    )

    return parser


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "api_key": args.api_key,
        "host": args.host,
        "port": args.port,
        "analytics_id": args.analytics_id,
        "ad_client_id": args.ad_client_id,
        "strategy": args.strategy,
        "model": args.model,
        "request_timeout": args.timeout,
        "retries": args.retries,
        "prompt_language": args.language,
    }


def resolve_config(args: argparse.Namespace) -> MirageConfig:
    return load_config(args.config, overrides=_overrides(args))


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for mirage commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=getattr(args, "log_file", None))

    if args.command == "serve":
        try:
            config = resolve_config(args)
        except ConfigError as exc:
            parser.exit(1, f"mirage serve failed: {exc}\n")

        run_service(config)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


if __name__ == "__main__":
    main(sys.argv[1:])
