"""Configuration loading for mirage (.mirage.yml, environment, CLI overrides)."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .models import InjectionConfig, InjectionStrategy

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_TIMEOUT = 30.0
DEFAULT_IGNORED_PATHS: Tuple[str, ...] = ("/favicon.ico",)
PROMPT_LANGUAGES: Tuple[str, ...] = ("en", "zh")

CONFIG_FILENAME = ".mirage.yml"

# Environment variable -> MirageConfig field.
ENV_KEYS: Dict[str, str] = {
    "GEMINI_API_KEY": "api_key",
    "GEMINI_MODEL": "model",
    "GEMINI_BASE_URL": "base_url",
    "GA_MEASUREMENT_ID": "analytics_id",
    "ADSENSE_CLIENT_ID": "ad_client_id",
    "MIRAGE_INJECTION_STRATEGY": "strategy",
    "MIRAGE_PROMPT_LANGUAGE": "prompt_language",
    "MIRAGE_REQUEST_TIMEOUT": "request_timeout",
}


class ConfigError(RuntimeError):
    """Raised when configuration cannot be parsed or holds invalid values."""


@dataclass(frozen=True)
class MirageConfig:
    """Process-wide settings, built once at startup and never mutated."""

    api_key: str = ""
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    request_timeout: float = DEFAULT_TIMEOUT
    retries: int = 0
    injection: InjectionConfig = field(default_factory=InjectionConfig)
    strategy: InjectionStrategy = InjectionStrategy.STRUCTURAL
    prompt_language: str = "en"
    ignored_paths: Tuple[str, ...] = DEFAULT_IGNORED_PATHS
    host: str = "127.0.0.1"
    port: int = 3000

    @property
    def has_credential(self) -> bool:
        return bool(self.api_key)


def load_config(
    config_path: Path | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> MirageConfig:
    """Merge the YAML file, environment variables and explicit overrides (in that order)."""
    values: Dict[str, Any] = {}

    if config_path is not None:
        values.update(_read_file(_resolve_config_path(config_path)))

    env = os.environ if environ is None else environ
    for env_key, field_name in ENV_KEYS.items():
        raw = env.get(env_key)
        if raw:
            values[field_name] = raw

    for key, value in (overrides or {}).items():
        if value is not None:
            values[key] = value

    return _build_config(values)


def _build_config(values: Mapping[str, Any]) -> MirageConfig:
    config = MirageConfig()
    updates: Dict[str, Any] = {}

    for name in ("api_key", "model", "base_url", "host"):
        text = _as_str(values.get(name))
        if text is not None:
            updates[name] = text.strip()

    timeout = _as_float(values.get("request_timeout"))
    if values.get("request_timeout") is not None and (timeout is None or timeout <= 0):
        raise ConfigError(f"request_timeout must be a positive number, got {values['request_timeout']!r}")
    if timeout is not None:
        updates["request_timeout"] = timeout

    retries = _as_int(values.get("retries"))
    if retries is not None:
        if retries < 0:
            raise ConfigError("retries cannot be negative")
        updates["retries"] = retries

    port = _as_int(values.get("port"))
    if port is not None:
        updates["port"] = port

    strategy = values.get("strategy")
    if strategy is not None:
        try:
            updates["strategy"] = InjectionStrategy(str(strategy).strip().lower())
        except ValueError as exc:
            choices = ", ".join(item.value for item in InjectionStrategy)
            raise ConfigError(f"Unknown injection strategy {strategy!r} (expected one of: {choices})") from exc

    language = _as_str(values.get("prompt_language"))
    if language is not None:
        language = language.strip().lower()
        if language not in PROMPT_LANGUAGES:
            raise ConfigError(
                f"Unknown prompt language {language!r} (expected one of: {', '.join(PROMPT_LANGUAGES)})"
            )
        updates["prompt_language"] = language

    ignored = values.get("ignored_paths")
    if ignored is not None:
        updates["ignored_paths"] = _as_path_tuple(ignored)

    updates["injection"] = InjectionConfig(
        analytics_id=_as_str(values.get("analytics_id")),
        ad_client_id=_as_str(values.get("ad_client_id")),
    )
    return replace(config, **updates)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path.name} must contain a mapping at the root")

    flattened: Dict[str, Any] = {
        key: value for key, value in loaded.items() if key not in {"gemini", "injection", "server"}
    }
    # Nested sections are accepted as a convenience and flattened onto field names.
    gemini = _as_dict(loaded.get("gemini"))
    for key in ("api_key", "model", "base_url", "request_timeout", "retries"):
        if key in gemini:
            flattened[key] = gemini[key]
    injection = _as_dict(loaded.get("injection"))
    for key in ("analytics_id", "ad_client_id", "strategy"):
        if key in injection:
            flattened[key] = injection[key]
    server = _as_dict(loaded.get("server"))
    for key in ("host", "port", "ignored_paths"):
        if key in server:
            flattened[key] = server[key]
    return flattened


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_path_tuple(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",")]
    elif isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value]
    else:
        raise ConfigError("ignored_paths must be a list of paths")
    return tuple(item for item in items if item)


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "DEFAULT_BASE_URL",
    "DEFAULT_MODEL",
    "MirageConfig",
    "PROMPT_LANGUAGES",
    "load_config",
]
