"""BDD step definitions for reporter features."""

import asyncio
import logging
import math
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when
from tests.helpers import FakeConnector

from influxreporter.adapters.in_memory import InMemoryTimeSeriesClient
from influxreporter.config import ReporterConfig
from influxreporter.core.metrics import Counter, GaugeFloat64
from influxreporter.core.models import Record
from influxreporter.core.registry import MetricsRegistry
from influxreporter.runtime.reporter import Reporter

REPORTER_LOGGER = "influxreporter.runtime.reporter"


@dataclass
class ReporterScenarioContext:
    """Mutable state shared between the steps of one scenario."""

    registry: MetricsRegistry = field(default_factory=MetricsRegistry)
    connector: FakeConnector = field(default_factory=FakeConnector)
    reporter: Reporter | None = None
    original: InMemoryTimeSeriesClient | None = None

    def last_batch_records(self) -> list[Record]:
        client = self.reporter.connection.client  # type: ignore[union-attr]
        assert client.batches, "no batch was written"
        return client.batches[-1].records


@pytest.fixture
def ctx() -> ReporterScenarioContext:
    """Fresh scenario context for each test."""
    return ReporterScenarioContext()


# === Background Steps ===
@given("an empty metrics registry")
def step_empty_registry(ctx: ReporterScenarioContext) -> None:
    ctx.registry = MetricsRegistry()


@given(parsers.parse('a reporter connected to InfluxDB with tag "{key}" = "{value}"'))
def step_connected_reporter(
    ctx: ReporterScenarioContext,
    caplog: pytest.LogCaptureFixture,
    key: str,
    value: str,
) -> None:
    caplog.set_level(logging.ERROR, logger=REPORTER_LOGGER)
    config = ReporterConfig(
        address="http://influx.test:8086",
        database="metrics",
        tags={key: value},
    )
    ctx.reporter = Reporter(ctx.registry, config, connect=ctx.connector)
    assert asyncio.run(ctx.reporter.start())
    ctx.original = ctx.connector.clients[0]


# === Registry Steps ===
@given(parsers.parse('a counter "{name}" with count {n:d}'))
def step_counter(ctx: ReporterScenarioContext, name: str, n: int) -> None:
    ctx.registry.get_or_register(name, Counter).inc(n)


@given(parsers.parse('a float gauge "{name}" with value {value}'))
def step_float_gauge(ctx: ReporterScenarioContext, name: str, value: str) -> None:
    ctx.registry.get_or_register(name, GaugeFloat64).update(float(value))


@given(parsers.parse("{n:d} counters"))
def step_n_counters(ctx: ReporterScenarioContext, n: int) -> None:
    for i in range(n):
        ctx.registry.get_or_register(f"counter{i}", Counter).inc(i + 1)


# === Server Behaviour Steps ===
@given("the server stops answering pings")
def step_pings_fail(ctx: ReporterScenarioContext) -> None:
    ctx.original.fail_pings = True  # type: ignore[union-attr]


@given("the server rejects writes")
def step_writes_fail(ctx: ReporterScenarioContext) -> None:
    ctx.original.fail_writes = True  # type: ignore[union-attr]


@when("the server accepts writes again")
def step_writes_succeed(ctx: ReporterScenarioContext) -> None:
    ctx.original.fail_writes = False  # type: ignore[union-attr]


@given("reconnecting is impossible")
def step_reconnect_fails(ctx: ReporterScenarioContext) -> None:
    ctx.connector.fail = True


# === Action Steps ===
@when("the reporter flushes")
def step_flush(ctx: ReporterScenarioContext) -> None:
    asyncio.run(ctx.reporter.flush())  # type: ignore[union-attr]


@when("the health check runs")
def step_health_check(ctx: ReporterScenarioContext) -> None:
    asyncio.run(ctx.reporter.connection.health_check())  # type: ignore[union-attr]


# === Assertion Steps ===
@then(parsers.parse("the last batch should contain {n:d} records"))
def then_batch_size(ctx: ReporterScenarioContext, n: int) -> None:
    assert len(ctx.last_batch_records()) == n


@then(parsers.parse('the record "{name}" should have field "{key}" = {value}'))
def then_record_field(
    ctx: ReporterScenarioContext, name: str, key: str, value: str
) -> None:
    records = {r.name: r for r in ctx.last_batch_records()}
    assert name in records, f"{name} not in {sorted(records)}"
    assert math.isclose(records[name].fields[key], float(value))


@then(parsers.parse('every record should carry tag "{key}" = "{value}"'))
def then_every_record_tagged(
    ctx: ReporterScenarioContext, key: str, value: str
) -> None:
    assert all(r.tags.get(key) == value for r in ctx.last_batch_records())


@then("the reporter should be using a new connection")
def then_new_connection(ctx: ReporterScenarioContext) -> None:
    client = ctx.reporter.connection.client  # type: ignore[union-attr]
    assert client is not ctx.original
    assert ctx.original.closed  # type: ignore[union-attr]


@then(parsers.parse("the new connection should have received {n:d} batch"))
def then_new_connection_batches(ctx: ReporterScenarioContext, n: int) -> None:
    assert len(ctx.connector.clients[-1].batches) == n
    assert ctx.original.batches == []  # type: ignore[union-attr]


@then("the reporter should still be using the original connection")
def then_original_connection(ctx: ReporterScenarioContext) -> None:
    assert ctx.reporter.connection.client is ctx.original  # type: ignore[union-attr]


@then(parsers.parse("the original connection should have received {n:d} batch"))
def then_original_batches(ctx: ReporterScenarioContext, n: int) -> None:
    assert len(ctx.original.batches) == n  # type: ignore[union-attr]


@then(parsers.parse("{n:d} flush error should have been logged"))
def then_flush_errors(
    ctx: ReporterScenarioContext, caplog: pytest.LogCaptureFixture, n: int
) -> None:
    errors = [
        r
        for r in caplog.records
        if r.name == REPORTER_LOGGER and r.levelno >= logging.ERROR
    ]
    assert len(errors) == n


@then(parsers.parse('the counter "{name}" should still have count {n:d}'))
def then_counter_unchanged(ctx: ReporterScenarioContext, name: str, n: int) -> None:
    assert ctx.registry.get(name).count == n
