"""Reporter runtime: the flush/health-check loop and its connection."""

from influxreporter.runtime.connection import ConnectionManager, ConnectionState
from influxreporter.runtime.reporter import (
    Reporter,
    report_to_influxdb,
    report_to_influxdb_with_client,
    report_to_influxdb_with_tags,
)

__all__ = [
    "ConnectionManager",
    "ConnectionState",
    "Reporter",
    "report_to_influxdb",
    "report_to_influxdb_with_client",
    "report_to_influxdb_with_tags",
]
