from __future__ import annotations

import logging

from core_router.adapters import make_adapter
from input_processing.request_pipeline import RequestPipeline
from input_processing.stages.counting_store import CountingStore, RedisCountingStore

from ..settings import Settings

log = logging.getLogger("api.services.pipeline")

_pipeline_singleton: RequestPipeline | None = None


def build_pipeline(settings: Settings) -> RequestPipeline:
    """
    Construct a RequestPipeline from runtime settings.

    - VIBEGATE_REDIS_URL set: counters are shared through Redis
    - VIBEGATE_CLASSIFIER_BASE_URL set: moderation, sentiment and translation
      call the external classification service first
    """
    store: CountingStore | None = None
    if settings.redis_url:
        store = RedisCountingStore.from_url(settings.redis_url)

    adapter = None
    if settings.classifier_base_url:
        adapter = make_adapter(
            "http",
            {
                "base_url": settings.classifier_base_url,
                "api_key": settings.classifier_api_key,
                "timeout_s": settings.classifier_timeout_s,
            },
        )

    log.info(
        "Pipeline configured",
        extra={
            "store": "redis" if store is not None else "memory",
            "classifier": "external" if adapter is not None else "local",
        },
    )
    return RequestPipeline(settings.pipeline_config(), store=store, adapter=adapter)


def get_pipeline() -> RequestPipeline:
    """Return the process-wide RequestPipeline, building it on first use."""
    global _pipeline_singleton
    if _pipeline_singleton is None:
        _pipeline_singleton = build_pipeline(Settings())
    return _pipeline_singleton


def reset_pipeline() -> None:
    """Drop the cached pipeline so the next call rebuilds it from settings."""
    global _pipeline_singleton
    _pipeline_singleton = None
