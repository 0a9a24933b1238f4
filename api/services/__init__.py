from __future__ import annotations

from .pipeline_factory import build_pipeline, get_pipeline, reset_pipeline

__all__ = ["build_pipeline", "get_pipeline", "reset_pipeline"]
