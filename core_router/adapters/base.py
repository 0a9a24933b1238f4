"""
Adapter protocol and utilities for core_router.

Adapters encapsulate transport details for external classification
services. They must be synchronous, SHOULD NOT mutate the provided payload,
and report failures as ``AdapterResult`` values instead of raising.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from ..errors import AdapterError, AdapterResult

__all__ = ["ClassificationAdapter", "ensure_protocol"]


@runtime_checkable
class ClassificationAdapter(Protocol):
    """
    Protocol for classification adapters used by the pipeline stages.

    Requirements:
      - classify(task, payload: dict) -> AdapterResult
        Perform the call synchronously and bounded by a timeout. Any
        failure is returned as ``AdapterResult(ok=False, ...)``.
      - ping() -> bool
        Return True if the service is reachable. Should not raise.
    """

    def classify(
        self,
        task: str,
        payload: dict[str, Any],
    ) -> AdapterResult:  # pragma: no cover - protocol signature
        ...

    def ping(self) -> bool:  # pragma: no cover - protocol signature
        ...


def ensure_protocol(obj: Any) -> None:
    """
    Ensure the given object satisfies the ClassificationAdapter protocol.

    Raises:
        AdapterError: if the object does not appear to implement the protocol.
    """
    if not isinstance(obj, ClassificationAdapter):
        raise AdapterError(
            adapter="protocol",
            reason="Object does not implement ClassificationAdapter",
        )
