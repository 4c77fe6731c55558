"""Encoder turning registry metrics into records.

Each supported instrument becomes exactly one record named
``"<name>.<suffix>"`` whose field set depends only on the instrument type:

| Instrument   | Suffix    | Fields                                          |
|--------------|-----------|-------------------------------------------------|
| Counter      | count     | value                                           |
| Gauge        | gauge     | value                                           |
| GaugeFloat64 | gauge     | value                                           |
| Histogram    | histogram | count max mean min stddev variance p50..p9999   |
| Meter        | meter     | count m1 m5 m15 mean                            |
| Timer        | timer     | histogram fields + m1 m5 m15 meanrate           |

Anything else is skipped.
"""

from typing import Any

from influxreporter.core.metrics import (
    Counter,
    Gauge,
    GaugeFloat64,
    Histogram,
    Meter,
    Timer,
)
from influxreporter.core.models import (
    FieldValue,
    HistogramSnapshot,
    Record,
    TimerSnapshot,
)

PERCENTILES: tuple[float, ...] = (0.5, 0.75, 0.95, 0.99, 0.999, 0.9999)

# Field names for PERCENTILES, positionally.
PERCENTILE_FIELDS: tuple[str, ...] = ("p50", "p75", "p95", "p99", "p999", "p9999")

HISTOGRAM_FIELDS = frozenset(
    {"count", "max", "mean", "min", "stddev", "variance", *PERCENTILE_FIELDS}
)
METER_FIELDS = frozenset({"count", "m1", "m5", "m15", "mean"})
TIMER_FIELDS = HISTOGRAM_FIELDS | {"m1", "m5", "m15", "meanrate"}


def _distribution_fields(
    snapshot: HistogramSnapshot | TimerSnapshot,
) -> dict[str, FieldValue]:
    ps = snapshot.percentiles(PERCENTILES)
    fields: dict[str, FieldValue] = {
        "count": snapshot.count,
        "max": snapshot.max,
        "mean": snapshot.mean,
        "min": snapshot.min,
        "stddev": snapshot.stddev,
        "variance": snapshot.variance,
    }
    fields.update(zip(PERCENTILE_FIELDS, ps, strict=True))
    return fields


def encode_metric(
    name: str,
    metric: Any,
    tags: dict[str, str],
    timestamp: int,
) -> Record | None:
    """Encode one registry entry as a record.

    Args:
        name: Registry name of the metric.
        metric: The instrument; read through its ``snapshot()``.
        tags: Static tags copied onto the record.
        timestamp: Record timestamp in nanoseconds.

    Returns:
        The record, or None for unsupported metric types.

    Raises:
        InvalidRecordError: If the snapshot cannot form a valid record
            (e.g. a non-finite gauge value).
    """
    suffix: str
    fields: dict[str, FieldValue]
    match metric:
        case Counter():
            suffix = "count"
            fields = {"value": metric.snapshot().count}
        case Gauge() | GaugeFloat64():
            suffix = "gauge"
            fields = {"value": metric.snapshot().value}
        case Histogram():
            suffix = "histogram"
            fields = _distribution_fields(metric.snapshot())
        case Meter():
            ms = metric.snapshot()
            suffix = "meter"
            fields = {
                "count": ms.count,
                "m1": ms.rate1,
                "m5": ms.rate5,
                "m15": ms.rate15,
                "mean": ms.rate_mean,
            }
        case Timer():
            ts = metric.snapshot()
            suffix = "timer"
            fields = _distribution_fields(ts)
            fields.update(
                {
                    "m1": ts.rate1,
                    "m5": ts.rate5,
                    "m15": ts.rate15,
                    "meanrate": ts.rate_mean,
                }
            )
        case _:
            return None

    return Record(
        name=f"{name}.{suffix}",
        tags=dict(tags),
        fields=fields,
        timestamp=timestamp,
    )
