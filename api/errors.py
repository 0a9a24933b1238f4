from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any, cast

from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from core_router.errors import ProviderError, classify_provider_error, provider_error_payload
from core_router.errors import error_response as core_error_response
from input_processing.request_pipeline import RequestPipelineError

if TYPE_CHECKING:
    from fastapi import FastAPI, Request
    from fastapi.responses import JSONResponse


log = logging.getLogger("api.errors")

VALIDATION_ERROR = "Validation Error"
VALIDATION_MESSAGE = "One or more validation errors occurred."


def trace_id_from_request(request: Request) -> str:
    # Prefer the middleware-assigned trace_id in scope
    trace_id = request.scope.get("trace_id")
    if isinstance(trace_id, str) and trace_id:
        return trace_id
    header_rid = request.headers.get("X-Request-ID") or request.headers.get("X-Trace-Id")
    return header_rid if isinstance(header_rid, str) else ""


def _normalize_loc(v: Any) -> list[str]:
    # Treat strings as a single location element instead of an iterable of chars
    if isinstance(v, str):
        return [v]
    if isinstance(v, Iterable):
        return [str(x) for x in cast("Iterable[Any]", v)]
    return []


def _flatten_validation_errors(exc: RequestValidationError | ValidationError) -> list[dict[str, Any]]:
    return [
        {
            "loc": _normalize_loc(e.get("loc", [])),
            "msg": str(e.get("msg", "")),
            "type": str(e.get("type", "")),
        }
        for e in cast("Iterable[Mapping[str, Any]]", exc.errors())
    ]


def json_error_response(
    *,
    request: Request,
    status_code: int,
    code: str,
    error: str,
    message: str,
    details: Any | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """Canonical ErrorResponse for ``request``."""
    rid = trace_id_from_request(request)
    return core_error_response(
        status=status_code,
        code=code,
        message=message,
        error=error,
        details=details,
        endpoint=f"{request.method} {request.url.path}",
        requestId=rid or None,
        headers=headers,
    )


def _log_extra(request: Request, status_code: int, **fields: Any) -> dict[str, Any]:
    return {
        "trace_id": trace_id_from_request(request),
        "path": request.url.path,
        "method": request.method,
        "status": status_code,
        **fields,
    }


def register_exception_handlers(app: FastAPI) -> None:
    """Register API exception handlers producing canonical ErrorResponse bodies."""
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(ProviderError, provider_exception_handler)
    app.add_exception_handler(RequestPipelineError, pipeline_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def http_exception_handler(request: Request, exc: Exception):
    exc_obj = cast("StarletteHTTPException", exc)
    status_code = exc_obj.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR

    if status_code == status.HTTP_404_NOT_FOUND:
        err, code = "Not Found", "ERR_NOT_FOUND"
    elif status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        err, code = "Method Not Allowed", "ERR_METHOD_NOT_ALLOWED"
    elif status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
        err, code = "Service Unavailable", "ERR_UNAVAILABLE"
    else:
        err = "HTTP Error" if status_code < 500 else "Internal Error"
        code = "ERR_HTTP" if status_code < 500 else "ERR_INTERNAL"

    log.warning("HTTPException", extra=_log_extra(request, status_code))
    return json_error_response(
        request=request,
        status_code=status_code,
        code=code,
        error=err,
        message=str(exc_obj.detail),
    )


def request_validation_exception_handler(request: Request, exc: Exception):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    errors = _flatten_validation_errors(cast("RequestValidationError", exc))

    log.warning("RequestValidationError", extra=_log_extra(request, status_code, errors=errors))
    return json_error_response(
        request=request,
        status_code=status_code,
        code="ERR_VALIDATION",
        error=VALIDATION_ERROR,
        message=VALIDATION_MESSAGE,
        details=errors,
    )


def validation_exception_handler(request: Request, exc: Exception):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    errors = _flatten_validation_errors(cast("ValidationError", exc))

    log.warning("ValidationError", extra=_log_extra(request, status_code, errors=errors))
    return json_error_response(
        request=request,
        status_code=status_code,
        code="ERR_VALIDATION",
        error=VALIDATION_ERROR,
        message=VALIDATION_MESSAGE,
        details=errors,
    )


def provider_exception_handler(request: Request, exc: Exception):
    """Map a downstream model failure to configuration, quota or generic."""
    kind = classify_provider_error(exc)
    payload = provider_error_payload(kind)

    log.error("ProviderError", extra=_log_extra(request, payload["status"], reason=kind.value))
    return json_error_response(
        request=request,
        status_code=payload["status"],
        code=payload["code"],
        error=payload["error"],
        message=payload["message"],
    )


def pipeline_exception_handler(request: Request, _exc: Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    log.error("RequestPipelineError", extra=_log_extra(request, status_code))
    return json_error_response(
        request=request,
        status_code=status_code,
        code="ERR_PIPELINE",
        error="Internal Error",
        message="Request processing failed.",
    )


def unhandled_exception_handler(request: Request, _exc: Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    # Log stack trace with correlation ID if present
    log.exception("UnhandledException", extra=_log_extra(request, status_code))
    return json_error_response(
        request=request,
        status_code=status_code,
        code="ERR_INTERNAL",
        error="Internal Error",
        message="An unexpected error occurred.",
    )
