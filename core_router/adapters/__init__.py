"""
Adapter factory and protocol exports.

Concrete adapters are imported lazily inside the factory function.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..errors import AdapterError
from .base import ClassificationAdapter, ensure_protocol

if TYPE_CHECKING:
    from collections.abc import Mapping


__all__ = ["ClassificationAdapter", "ensure_protocol", "make_adapter"]


def make_adapter(kind: str, adapter_config: Mapping[str, Any]) -> ClassificationAdapter:
    """
    Construct a ClassificationAdapter for the given kind.

    Supported kinds:
      - "http" -> HTTPClassificationAdapter (keys: base_url, api_key, timeout_s)

    Raises:
        AdapterError: if kind is unknown or the configuration is incomplete.
    """
    k = (kind or "").strip().lower()
    if k == "http":
        from .http_classifier import (  # lazy import  # pylint: disable=import-outside-toplevel
            HTTPClassificationAdapter,
        )

        cfg = dict(adapter_config or {})
        return HTTPClassificationAdapter(
            str(cfg.get("base_url") or ""),
            api_key=cfg.get("api_key"),
            timeout_s=cfg.get("timeout_s", 5.0),
        )
    raise AdapterError(
        adapter="factory",
        reason=f"unknown adapter kind: {kind!r}",
    )
