"""Encoders for metric records and the InfluxDB wire format."""

from influxreporter.core.encoding.line_protocol import encode_batch, encode_record
from influxreporter.core.encoding.records import PERCENTILES, encode_metric

__all__ = [
    "PERCENTILES",
    "encode_batch",
    "encode_metric",
    "encode_record",
]
