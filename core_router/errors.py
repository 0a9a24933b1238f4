"""
Error types used across the core_router package.

Transport failures are raised as ``AdapterError`` inside adapters and turned
into ``AdapterResult`` values at the adapter boundary. Downstream provider
failures are classified by message into a small set of caller-visible kinds.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any
from uuid import uuid4

from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field


class AdapterError(Exception):
    """
    Raised when an adapter call encounters an error.

    Attributes:
        adapter: Adapter kind/name (e.g., "http_classifier").
        reason: Optional human-readable reason.
    """

    def __init__(
        self,
        message: str | None = None,
        *,
        adapter: str | None = None,
        reason: str | None = None,
    ) -> None:
        if not message:
            if adapter and reason:
                message = f"{adapter}: {reason}"
            elif reason:
                message = reason
            elif adapter:
                message = f"{adapter}: adapter error"
            else:
                message = "adapter error"
        super().__init__(message)
        self.adapter: str | None = adapter
        self.reason: str | None = reason


@dataclass(frozen=True)
class AdapterResult:
    """
    Outcome of one external classification call.

    Exactly one of ``data`` (when ``ok``) or ``error`` (when not ``ok``) is set.
    """

    ok: bool
    data: dict[str, Any] | None = None
    error: str | None = None

    @classmethod
    def success(cls, data: dict[str, Any]) -> AdapterResult:
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, error: str) -> AdapterResult:
        return cls(ok=False, error=error)


# === Downstream provider errors ===


class ProviderErrorKind(str, Enum):
    CONFIGURATION = "configuration"
    QUOTA_EXCEEDED = "quota_exceeded"
    GENERIC = "generic"


class ProviderError(Exception):
    """Raised by a downstream LLM collaborator when a model call fails."""


# kind -> (status, error, message, code)
_PROVIDER_ERRORS: dict[ProviderErrorKind, tuple[int, str, str, str]] = {
    ProviderErrorKind.CONFIGURATION: (
        500,
        "API configuration error",
        "Please check your API key configuration",
        "ERR_PROVIDER_CONFIG",
    ),
    ProviderErrorKind.QUOTA_EXCEEDED: (
        429,
        "Quota exceeded",
        "API quota has been exceeded. Please try again later.",
        "ERR_QUOTA_EXCEEDED",
    ),
    ProviderErrorKind.GENERIC: (
        500,
        "Internal server error",
        "An unexpected error occurred. Please try again.",
        "ERR_INTERNAL",
    ),
}


def classify_provider_error(error: BaseException | str) -> ProviderErrorKind:
    """
    Classify a provider failure by its message.

    Messages mentioning an API key are configuration problems, messages
    mentioning quota are quota exhaustion, anything else is generic.
    """
    text = str(error)
    if "API key" in text:
        return ProviderErrorKind.CONFIGURATION
    if "quota" in text:
        return ProviderErrorKind.QUOTA_EXCEEDED
    return ProviderErrorKind.GENERIC


def provider_error_status(kind: ProviderErrorKind) -> int:
    return _PROVIDER_ERRORS[kind][0]


def provider_error_payload(kind: ProviderErrorKind) -> dict[str, Any]:
    """Caller-visible ``status``/``error``/``message``/``code`` for a kind."""
    status, error, message, code = _PROVIDER_ERRORS[kind]
    return {"status": status, "error": error, "message": message, "code": code}


# === Canonical ErrorResponse model and helpers (normalized API errors) ===


class ErrorResponse(BaseModel):
    # Short, human category (e.g. "Validation Error", "Too Many Requests")
    error: str = Field(...)
    status: int = Field(...)
    # Machine-usable code (e.g., "ERR_VALIDATION", "ERR_RATE_LIMITED")
    code: str = Field(...)
    message: str = Field(...)
    # Error list, moderation reasons or adapter-specific info
    details: Any | None = Field(default=None)
    requestId: str | None = Field(default=None)
    # "METHOD PATH"
    endpoint: str = Field(...)
    # RFC3339 timestamp
    timestamp: str = Field(...)

    model_config = {"populate_by_name": True}


def _now_rfc3339() -> str:
    return datetime.now(UTC).isoformat()


def error_response(
    status: int,
    code: str,
    message: str,
    *,
    error: str,
    details: Any | None = None,
    endpoint: str,
    requestId: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    rid = requestId or str(uuid4())
    body = ErrorResponse(
        error=error,
        status=status,
        code=code,
        message=message,
        details=details,
        requestId=rid,
        endpoint=endpoint,
        timestamp=_now_rfc3339(),
    )
    return JSONResponse(
        content=body.model_dump(by_alias=True, exclude_none=True),
        status_code=status,
        headers=headers,
    )
