"""VibeGate API settings.

Runtime configuration is read from ``VIBEGATE_*`` environment variables.
``.env`` and, in dev, ``.env.development`` at the repository root are loaded
first; they never override variables already present in the environment.
"""

from __future__ import annotations

import contextlib
import os
from pathlib import Path

from input_processing.config import PipelineConfig


def _load_env_file(path: Path) -> None:
    """Load KEY=VALUE from a .env-style file into os.environ if not already set."""
    with contextlib.suppress(OSError, UnicodeDecodeError):
        if not path.exists():
            return
        with path.open(encoding="utf-8") as f:
            for raw in f:
                line = raw.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip().strip('"').strip("'")
                if key and key not in os.environ:
                    os.environ[key] = value


def _load_envs_for_runtime() -> None:
    root = Path(__file__).resolve().parents[1]
    _load_env_file(root / ".env")
    env = (os.environ.get("VIBEGATE_ENV", "dev") or "dev").strip().lower()
    if env in {"dev", "development"}:
        _load_env_file(root / ".env.development")


# One-time load at import
_load_envs_for_runtime()


def _get_env(name: str, default: str | None = None) -> str | None:
    return os.environ.get(name, default)


def _parse_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _parse_int(val: str | None, default: int) -> int:
    try:
        return int(str(val)) if val is not None else default
    except ValueError:
        return default


def _parse_float(val: str | None, default: float) -> float:
    try:
        parsed = float(str(val)) if val is not None else default
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _parse_csv(val: str | None) -> list[str]:
    if not val:
        return []
    items = [s.strip() for s in str(val).split(",")]
    return [s for s in items if s]


class Settings:
    """
    Runtime configuration loaded from environment variables with prefix
    VIBEGATE_.

        Variables:
        - VIBEGATE_ENV: "dev" or "prod" (default: dev)
        - VIBEGATE_API_HOST: bind address (default: 127.0.0.1)
        - VIBEGATE_API_PORT: int (default: 24801)
        - VIBEGATE_ALLOWED_ORIGINS: CSV list
            dev default if empty: [http://localhost:3000, http://localhost:5173]
            prod default if empty: []
        - VIBEGATE_LOG_LEVEL: INFO|DEBUG|WARNING|ERROR (default: INFO)
        - VIBEGATE_LOG_DIR: logs directory path (default: logs)
        - VIBEGATE_RATE_LIMIT: admissions per identity per window (default: 100)
        - VIBEGATE_RATE_WINDOW_SECONDS: fixed window length (default: 60)
        - VIBEGATE_REDIS_URL: shared counting store; in-memory when unset
        - VIBEGATE_CLASSIFIER_BASE_URL: external classification service;
            local heuristics only when unset
        - VIBEGATE_CLASSIFIER_API_KEY: optional bearer token for the service
        - VIBEGATE_CLASSIFIER_TIMEOUT_S: per-call timeout seconds (default: 5)
        - VIBEGATE_EXPOSE_OPENAPI_IN_DEV: bool (default: true)
    """

    def __init__(self) -> None:
        # Environment
        self.environment: str = (_get_env("VIBEGATE_ENV", "dev") or "dev").strip().lower()
        self.is_dev: bool = self.environment in {"dev", "development"}

        # Network
        self.host: str = _get_env("VIBEGATE_API_HOST", "127.0.0.1") or "127.0.0.1"
        self.port: int = _parse_int(_get_env("VIBEGATE_API_PORT"), 24801)

        if allowed_origins_env := _get_env("VIBEGATE_ALLOWED_ORIGINS"):
            self.allowed_origins: list[str] = _parse_csv(allowed_origins_env)
        else:
            self.allowed_origins = (
                ["http://localhost:3000", "http://localhost:5173"] if self.is_dev else []
            )

        # Logging
        self.log_level: str = (_get_env("VIBEGATE_LOG_LEVEL", "INFO") or "INFO").upper()
        self.log_dir: str = _get_env("VIBEGATE_LOG_DIR", "logs") or "logs"

        # Rate limiting
        self.rate_limit: int = _parse_int(_get_env("VIBEGATE_RATE_LIMIT"), 100)
        self.rate_window_seconds: int = _parse_int(_get_env("VIBEGATE_RATE_WINDOW_SECONDS"), 60)
        self.redis_url: str | None = _get_env("VIBEGATE_REDIS_URL") or None

        # External classification service
        self.classifier_base_url: str | None = _get_env("VIBEGATE_CLASSIFIER_BASE_URL") or None
        self.classifier_api_key: str | None = _get_env("VIBEGATE_CLASSIFIER_API_KEY") or None
        self.classifier_timeout_s: float = _parse_float(
            _get_env("VIBEGATE_CLASSIFIER_TIMEOUT_S"), 5.0
        )

        # Docs in dev
        self.expose_openapi_in_dev: bool = _parse_bool(
            _get_env("VIBEGATE_EXPOSE_OPENAPI_IN_DEV"), True
        )

    def pipeline_config(self) -> PipelineConfig:
        """PipelineConfig built from the rate limit settings."""
        return PipelineConfig(
            rate_limit=self.rate_limit if self.rate_limit > 0 else 100,
            window_seconds=self.rate_window_seconds if self.rate_window_seconds > 0 else 60,
        )
