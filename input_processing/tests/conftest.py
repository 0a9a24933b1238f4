"""
Shared fixtures for pipeline stage tests
"""

from __future__ import annotations

from typing import Any

import pytest

from core_router.errors import AdapterResult


class FakeAdapter:
    """In-process ClassificationAdapter returning canned results per task."""

    def __init__(self, responses: dict[str, AdapterResult] | None = None):
        self.responses = dict(responses or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []

    def classify(self, task: str, payload: dict[str, Any]) -> AdapterResult:
        self.calls.append((task, dict(payload)))
        return self.responses.get(task, AdapterResult.failure(f"no response for {task}"))

    def ping(self) -> bool:
        return True


class ExplodingAdapter:
    """Adapter that violates the never-raise contract."""

    def classify(self, task: str, payload: dict[str, Any]) -> AdapterResult:
        raise RuntimeError(f"boom during {task}")

    def ping(self) -> bool:
        return False


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_adapter():
    return FakeAdapter()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def exploding_adapter():
    return ExplodingAdapter()
