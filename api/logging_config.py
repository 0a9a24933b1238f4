from __future__ import annotations

import contextlib
import logging
import os
import re
import sys
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, Any, TypeVar, cast

from pythonjsonlogger.json import JsonFormatter
from starlette.types import Message, Receive, Scope, Send

if TYPE_CHECKING:
    from .settings import Settings

ASGIApp = Callable[[Scope, Receive, Send], Awaitable[None]]

T = TypeVar("T")

# Bearer credentials in header dumps or error text
_BEARER = re.compile(r"(?i)(bearer\s+)[A-Za-z0-9._~+/=-]+")


@dataclass(frozen=True)
class RedactionConfig:
    """Configuration constants for redaction operations."""

    redacted_placeholder: str = "***"
    sensitive_keys: frozenset[str] = field(
        default_factory=lambda: frozenset(["authorization", "api_key", "apikey", "x-api-key"])
    )
    structured_log_fields: tuple[str, ...] = field(
        default_factory=lambda: (
            "status",
            "route",
            "path",
            "method",
            "trace_id",
            "duration_ms",
            "identity",
            "reason",
            "model",
            "rate_limit_remaining",
        )
    )


class RedactionService:
    """Masks the classifier API key and bearer credentials in log data."""

    def __init__(self, secrets: list[str | None], config: RedactionConfig) -> None:
        self.config = config
        self.secrets = [s for s in secrets if s]

    def redact_text(self, text: str) -> str:
        redacted = text
        for secret in self.secrets:
            if secret in redacted:
                redacted = redacted.replace(secret, self.config.redacted_placeholder)
        return _BEARER.sub(rf"\g<1>{self.config.redacted_placeholder}", redacted)

    def redact_value(self, value: T) -> T:
        """Recursively redact strings inside dicts, lists and tuples."""
        if isinstance(value, str):
            return cast("T", self.redact_text(value))
        if isinstance(value, dict):
            return cast(
                "T",
                {
                    k: (
                        self.config.redacted_placeholder
                        if isinstance(k, str) and k.lower() in self.config.sensitive_keys
                        else self.redact_value(v)
                    )
                    for k, v in value.items()
                },
            )
        if isinstance(value, list):
            return cast("T", [self.redact_value(v) for v in value])
        if isinstance(value, tuple):
            return cast("T", tuple(self.redact_value(v) for v in value))
        return value


class RedactionFilter(logging.Filter):
    """Logging filter that redacts sensitive values from log records."""

    def __init__(self, *secrets: str | None) -> None:
        super().__init__()
        self.config = RedactionConfig()
        self.redaction_service = RedactionService(list(secrets), self.config)

    def filter(self, record: logging.LogRecord) -> bool:
        """Redact message, args and extra fields. Never drops the record."""
        service = self.redaction_service
        if isinstance(record.msg, str):
            record.msg = service.redact_text(record.msg)
        if isinstance(record.args, dict):
            record.args = {k: service.redact_value(v) for k, v in record.args.items()}
        elif isinstance(record.args, tuple):
            record.args = tuple(service.redact_value(a) for a in record.args)
        for key, value in list(record.__dict__.items()):
            if key in {"msg", "args"}:
                continue
            if isinstance(value, str | dict | list | tuple):
                record.__dict__[key] = service.redact_value(value)
        return True


class ISOFormatter(JsonFormatter):
    """JSON formatter that outputs ISO8601 timestamp and selected fields."""

    def __init__(self, config: RedactionConfig) -> None:
        super().__init__(fmt="%(message)s")
        self.config = config

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record.setdefault("ts", time.strftime("%Y-%m-%dT%H:%M:%S%z"))
        log_record["level"] = str(record.levelname or "INFO").lower()
        log_record["logger"] = record.name

        for field_name in self.config.structured_log_fields:
            value = message_dict.get(field_name) or getattr(record, field_name, None)
            if value is not None:
                log_record[field_name] = value
        if "route" not in log_record and "path" in log_record:
            log_record["route"] = log_record["path"]


def ensure_log_dir(path: str) -> None:
    os.makedirs(path, exist_ok=True)


@dataclass(frozen=True)
class HandlerConfig:
    """Configuration for logging handlers."""

    level: int
    formatter: logging.Formatter
    redactor: logging.Filter


class LoggingFactory:
    """Factory for creating logging components."""

    @staticmethod
    def create_redaction_filter(settings: Settings) -> RedactionFilter:
        return RedactionFilter(settings.classifier_api_key)

    @staticmethod
    def create_formatter() -> ISOFormatter:
        return ISOFormatter(RedactionConfig())

    @staticmethod
    def create_stream_handler(config: HandlerConfig) -> logging.StreamHandler[Any]:
        handler = logging.StreamHandler(stream=sys.stderr)
        handler.setLevel(config.level)
        handler.setFormatter(config.formatter)
        handler.addFilter(config.redactor)
        return handler

    @staticmethod
    def create_file_handler(logfile: str, config: HandlerConfig) -> RotatingFileHandler:
        handler = RotatingFileHandler(
            logfile,
            maxBytes=1_000_000,
            backupCount=5,
            encoding="utf-8",
        )
        handler.setLevel(config.level)
        handler.setFormatter(config.formatter)
        handler.addFilter(config.redactor)
        return handler


def setup_logging(settings: Settings) -> None:
    """Configure structured JSON logging with redaction.

    Sets up:
    - StreamHandler (stderr)
    - RotatingFileHandler (<log_dir>/api.log)
    - Redaction of the classifier API key and bearer tokens

    Args:
        settings: Application settings
    """
    ensure_log_dir(settings.log_dir)

    logfile = os.path.join(settings.log_dir, "api.log")
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers to avoid duplication
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        with contextlib.suppress(OSError):
            handler.close()

    factory = LoggingFactory()
    config = HandlerConfig(
        level=level,
        formatter=factory.create_formatter(),
        redactor=factory.create_redaction_filter(settings),
    )
    root_logger.addHandler(factory.create_stream_handler(config))
    root_logger.addHandler(factory.create_file_handler(logfile, config))


class RequestResponseLoggerMiddleware:
    """ASGI middleware that logs one record per HTTP request.

    Besides timing and status, the record carries the admission budget left
    for the caller when the response reports one (``X-RateLimit-Remaining``).
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app
        self.log = logging.getLogger("api.requests")

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        start_ns = time.perf_counter_ns()
        seen: dict[str, int | None] = {"status": None, "rate_limit_remaining": None}

        async def send_wrapper(message: Message) -> None:
            if message.get("type") == "http.response.start":
                seen["status"] = int(message.get("status", 0))
                seen["rate_limit_remaining"] = _remaining_budget(message.get("headers") or [])
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            duration_ms = (time.perf_counter_ns() - start_ns) / 1_000_000.0
            trace_obj = scope.get("trace_id", "")
            extra: dict[str, Any] = {
                "trace_id": trace_obj if isinstance(trace_obj, str) else "",
                "path": scope.get("path", ""),
                "method": scope.get("method", ""),
                "status": seen["status"] or 0,
                "duration_ms": round(duration_ms, 3),
            }
            if seen["rate_limit_remaining"] is not None:
                extra["rate_limit_remaining"] = seen["rate_limit_remaining"]
            self.log.info("request", extra=extra)


def _remaining_budget(headers: list[tuple[bytes, bytes]]) -> int | None:
    for name, value in headers:
        if name.lower() == b"x-ratelimit-remaining":
            with contextlib.suppress(ValueError):
                return int(value.decode("latin-1"))
    return None
