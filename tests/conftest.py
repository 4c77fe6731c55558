"""Shared test fixtures for all test modules."""

from collections.abc import Callable

import pytest
from tests.helpers import FIXED_TIMESTAMP, FakeClock, FakeConnector

from influxreporter.adapters.in_memory import InMemoryTimeSeriesClient
from influxreporter.config import ReporterConfig
from influxreporter.core.registry import MetricsRegistry


@pytest.fixture
def fake_clock() -> FakeClock:
    """Provide a manually advanced monotonic clock."""
    return FakeClock()


@pytest.fixture
def fixed_time_ns() -> Callable[[], int]:
    """Provide a wall clock always returning FIXED_TIMESTAMP."""
    return lambda: FIXED_TIMESTAMP


@pytest.fixture
def registry() -> MetricsRegistry:
    """Provide an empty metrics registry."""
    return MetricsRegistry()


@pytest.fixture
def config() -> ReporterConfig:
    """Provide a reporter config with static tags."""
    return ReporterConfig(
        address="http://influx.test:8086",
        database="metrics",
        username="user",
        password="secret",
        interval=10.0,
        tags={"host": "web-1"},
    )


@pytest.fixture
def connector() -> FakeConnector:
    """Provide a connect factory handing out in-memory clients."""
    return FakeConnector()


@pytest.fixture
def memory_client() -> InMemoryTimeSeriesClient:
    """Provide a standalone in-memory client."""
    return InMemoryTimeSeriesClient()
