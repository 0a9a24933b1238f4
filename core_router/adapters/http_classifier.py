"""
HTTP adapter for the external classification service.

The service exposes one POST endpoint per task:
  - /moderate   {"text": ...} -> {"safe", "reasons", "categories"}
  - /sentiment  {"text": ...} -> {"label", "confidence", "emotions"?}
  - /translate  {"text", "targetLanguage", "sourceLanguage"} -> {"translatedText"}

HTTP client:
- httpx.Client with connect/read/write timeouts (default 5s)
- No retries: a single failure is reported to the caller, which falls back
  to its local heuristic
- Authorization header added when an API key is configured

Failures (timeout, connection error, non-2xx, undecodable or non-object
JSON) never escape ``classify``; they come back as
``AdapterResult(ok=False, error=...)``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from contextlib import suppress
from typing import Any, cast

import httpx

from ..errors import AdapterError, AdapterResult

__all__ = ["HTTPClassificationAdapter"]

logger = logging.getLogger(__name__)

_ADAPTER = "http_classifier"


def _normalize_base_url(base_url: str) -> str:
    return str(base_url or "").strip().rstrip("/")


class HTTPClassificationAdapter:
    """Synchronous adapter for the classification service."""

    def __init__(
        self,
        base_url: str,
        *,
        api_key: str | None = None,
        timeout_s: float = 5.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        base = _normalize_base_url(base_url)
        if not base:
            raise AdapterError(adapter=_ADAPTER, reason="base_url must be set")

        self._base = base
        self._headers: dict[str, str] = {"Content-Type": "application/json"}
        if api_key:
            self._headers["Authorization"] = f"Bearer {api_key}"

        try:
            timeout = float(timeout_s)
        except (TypeError, ValueError):
            timeout = 5.0
        if timeout <= 0:
            timeout = 5.0
        self._timeout = httpx.Timeout(connect=timeout, read=timeout, write=timeout, pool=timeout)
        # Tests inject httpx.MockTransport here
        self._transport = transport

    @property
    def base_url(self) -> str:
        return self._base

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self._timeout, transport=self._transport)

    def ping(self) -> bool:
        """Return True if the base URL answers with a 2xx status."""
        with suppress(httpx.HTTPError), self._client() as client:
            resp = client.get(self._base, headers=self._headers)
            return 200 <= resp.status_code < 300
        return False

    def classify(self, task: str, payload: dict[str, Any]) -> AdapterResult:
        """
        POST ``payload`` to ``{base}/{task}``.

        Returns:
            AdapterResult carrying the JSON object on success, or the
            failure reason otherwise.
        """
        url = f"{self._base}/{task.strip('/')}"
        try:
            return AdapterResult.success(self._post(url, dict(payload)))
        except AdapterError as exc:
            logger.debug("classification call failed", extra={"task": task, "reason": exc.reason})
            return AdapterResult.failure(str(exc))

    def _post(self, url: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            with self._client() as client:
                resp = client.post(url, json=body, headers=self._headers)
        except httpx.TimeoutException as exc:
            raise AdapterError(adapter=_ADAPTER, reason="timeout") from exc
        except httpx.RequestError as exc:
            raise AdapterError(adapter=_ADAPTER, reason="network error") from exc

        if not 200 <= resp.status_code < 300:
            text = (resp.text or "")[:512]
            raise AdapterError(adapter=_ADAPTER, reason=f"HTTP {resp.status_code}: {text}")

        try:
            raw = resp.json()
        except ValueError as exc:
            raise AdapterError(adapter=_ADAPTER, reason="invalid JSON response") from exc

        if not isinstance(raw, Mapping):
            raise AdapterError(
                adapter=_ADAPTER,
                reason=f"JSON root must be object, got {type(raw).__name__}",
            )
        return {str(k): v for k, v in cast("Mapping[str, Any]", raw).items()}
