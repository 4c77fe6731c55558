"""Client adapters implementing TimeSeriesClientPort."""

from influxreporter.adapters.in_memory import InMemoryTimeSeriesClient
from influxreporter.adapters.influxdb import InfluxDBClient, connect

__all__ = [
    "InMemoryTimeSeriesClient",
    "InfluxDBClient",
    "connect",
]
