"""influxreporter - ship metrics registry snapshots to InfluxDB.

Example:
    ```python
    import asyncio

    from influxreporter import Counter, MetricsRegistry, report_to_influxdb

    registry = MetricsRegistry()
    registry.get_or_register("requests", Counter).inc()

    asyncio.run(
        report_to_influxdb(
            registry, 10.0, "http://localhost:8086", "app", "user", "secret"
        )
    )
    ```
"""

from influxreporter.adapters.in_memory import InMemoryTimeSeriesClient
from influxreporter.adapters.influxdb import InfluxDBClient, connect
from influxreporter.config import ReporterConfig
from influxreporter.core.encoding import PERCENTILES, encode_batch, encode_metric
from influxreporter.core.exceptions import (
    ClientError,
    ConfigurationError,
    ConnectError,
    DuplicateMetricError,
    InfluxReporterError,
    InvalidAddressError,
    InvalidBatchError,
    InvalidRecordError,
    NotConnectedError,
    PingError,
    WriteError,
)
from influxreporter.core.metrics import (
    Counter,
    Gauge,
    GaugeFloat64,
    Histogram,
    Meter,
    Timer,
)
from influxreporter.core.models import Batch, Record
from influxreporter.core.registry import MetricsRegistry, default_registry
from influxreporter.core.sample import ExpDecaySample, UniformSample
from influxreporter.runtime import (
    ConnectionManager,
    ConnectionState,
    Reporter,
    report_to_influxdb,
    report_to_influxdb_with_client,
    report_to_influxdb_with_tags,
)

__all__ = [
    "PERCENTILES",
    "Batch",
    "ClientError",
    "ConfigurationError",
    "ConnectError",
    "ConnectionManager",
    "ConnectionState",
    "Counter",
    "DuplicateMetricError",
    "ExpDecaySample",
    "Gauge",
    "GaugeFloat64",
    "Histogram",
    "InMemoryTimeSeriesClient",
    "InfluxDBClient",
    "InfluxReporterError",
    "InvalidAddressError",
    "InvalidBatchError",
    "InvalidRecordError",
    "Meter",
    "MetricsRegistry",
    "NotConnectedError",
    "PingError",
    "Record",
    "Reporter",
    "ReporterConfig",
    "Timer",
    "UniformSample",
    "WriteError",
    "connect",
    "default_registry",
    "encode_batch",
    "encode_metric",
    "report_to_influxdb",
    "report_to_influxdb_with_client",
    "report_to_influxdb_with_tags",
]
