from __future__ import annotations

import logging

import pytest
from fastapi.testclient import TestClient

from api.app import create_app
from api.services.pipeline_factory import get_pipeline, reset_pipeline
from api.settings import Settings
from input_processing.config import PipelineConfig
from input_processing.request_pipeline import RequestPipeline

# Small admission budget so rate limiting is reachable in a handful of calls
TEST_RATE_LIMIT = 3


class ListHandler(logging.Handler):
    """Collects records emitted on a logger."""

    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture
def pipeline() -> RequestPipeline:
    return RequestPipeline(PipelineConfig(rate_limit=TEST_RATE_LIMIT))


@pytest.fixture
def app(log_dir, pipeline):
    application = create_app(Settings())
    application.dependency_overrides[get_pipeline] = lambda: pipeline
    yield application
    application.dependency_overrides.clear()
    reset_pipeline()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def request_log():
    handler = ListHandler()
    logger = logging.getLogger("api.requests")
    logger.addHandler(handler)
    yield handler
    logger.removeHandler(handler)
