"""
Transport to external classification services and the shared error taxonomy.
"""

from __future__ import annotations

from .adapters import ClassificationAdapter, make_adapter
from .errors import (
    AdapterError,
    AdapterResult,
    ProviderError,
    ProviderErrorKind,
    classify_provider_error,
    provider_error_status,
)

__all__ = [
    "__version__",
    # errors
    "AdapterError",
    "AdapterResult",
    "ProviderError",
    "ProviderErrorKind",
    "classify_provider_error",
    "provider_error_status",
    # adapters
    "ClassificationAdapter",
    "make_adapter",
]

__version__: str = "0.1.0"
