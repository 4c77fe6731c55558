"""Core domain models for records, batches and metric snapshots."""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from influxreporter.core.exceptions import InvalidBatchError, InvalidRecordError
from influxreporter.core.sample import sample_percentiles

FieldValue = int | float

DEFAULT_PRECISION = "ns"

# Nanoseconds per unit for each accepted precision string.
PRECISION_NANOS: dict[str, int] = {
    "ns": 1,
    "n": 1,
    "us": 1_000,
    "u": 1_000,
    "ms": 1_000_000,
    "s": 1_000_000_000,
    "m": 60 * 1_000_000_000,
    "h": 3600 * 1_000_000_000,
}


@dataclass(frozen=True)
class Record:
    """One flattened measurement.

    Attributes:
        name: Measurement name (e.g., "requests.count").
        tags: Static tags applied to the record.
        fields: Field name to numeric value.
        timestamp: Unix timestamp in nanoseconds.

    Raises:
        InvalidRecordError: If the name or field set is empty, a field value
            is not numeric or not finite, or a tag key is empty.
    """

    name: str
    tags: dict[str, str]
    fields: dict[str, FieldValue]
    timestamp: int

    def __post_init__(self) -> None:
        if not self.name:
            raise InvalidRecordError("record name must not be empty")
        if not self.fields:
            raise InvalidRecordError(f"record {self.name!r} has no fields")
        for key in self.tags:
            if not key:
                raise InvalidRecordError(f"record {self.name!r} has an empty tag key")
        for key, value in self.fields.items():
            if not key:
                raise InvalidRecordError(
                    f"record {self.name!r} has an empty field key"
                )
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidRecordError(
                    f"field {key!r} of {self.name!r} is not numeric: {value!r}"
                )
            if isinstance(value, float) and not math.isfinite(value):
                raise InvalidRecordError(
                    f"field {key!r} of {self.name!r} is not finite: {value!r}"
                )


@dataclass
class Batch:
    """Records submitted together to one database.

    Attributes:
        database: Target database (namespace) name.
        precision: Timestamp precision unit used on the wire.
        records: Records in submission order.
    """

    database: str
    precision: str = DEFAULT_PRECISION
    records: list[Record] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.database:
            raise InvalidBatchError("batch database must not be empty")
        if self.precision not in PRECISION_NANOS:
            raise InvalidBatchError(f"unknown precision unit: {self.precision!r}")

    def add_records(self, records: Sequence[Record]) -> None:
        """Append records to the batch."""
        self.records.extend(records)

    def __len__(self) -> int:
        return len(self.records)


# --- Metric snapshots ---


@dataclass(frozen=True)
class CounterSnapshot:
    """Point-in-time read of a counter."""

    count: int


@dataclass(frozen=True)
class GaugeSnapshot:
    """Point-in-time read of an integer gauge."""

    value: int


@dataclass(frozen=True)
class GaugeFloat64Snapshot:
    """Point-in-time read of a floating-point gauge."""

    value: float


@dataclass(frozen=True)
class HistogramSnapshot:
    """Point-in-time read of a histogram.

    ``values`` holds the sampled observations; statistics other than
    ``count`` are computed from them.
    """

    count: int
    values: tuple[int, ...] = ()

    @property
    def max(self) -> int:
        return max(self.values) if self.values else 0

    @property
    def min(self) -> int:
        return min(self.values) if self.values else 0

    @property
    def mean(self) -> float:
        if not self.values:
            return 0.0
        return sum(self.values) / len(self.values)

    @property
    def variance(self) -> float:
        if not self.values:
            return 0.0
        mean = self.mean
        return sum((v - mean) ** 2 for v in self.values) / len(self.values)

    @property
    def stddev(self) -> float:
        return math.sqrt(self.variance)

    def percentiles(self, quantiles: Sequence[float]) -> list[float]:
        return sample_percentiles(self.values, quantiles)


@dataclass(frozen=True)
class MeterSnapshot:
    """Point-in-time read of a meter.

    Rates are events per second.
    """

    count: int
    rate1: float
    rate5: float
    rate15: float
    rate_mean: float


@dataclass(frozen=True)
class TimerSnapshot:
    """Point-in-time read of a timer: a histogram of durations plus a meter."""

    histogram: HistogramSnapshot
    meter: MeterSnapshot

    @property
    def count(self) -> int:
        return self.histogram.count

    @property
    def max(self) -> int:
        return self.histogram.max

    @property
    def min(self) -> int:
        return self.histogram.min

    @property
    def mean(self) -> float:
        return self.histogram.mean

    @property
    def stddev(self) -> float:
        return self.histogram.stddev

    @property
    def variance(self) -> float:
        return self.histogram.variance

    def percentiles(self, quantiles: Sequence[float]) -> list[float]:
        return self.histogram.percentiles(quantiles)

    @property
    def rate1(self) -> float:
        return self.meter.rate1

    @property
    def rate5(self) -> float:
        return self.meter.rate5

    @property
    def rate15(self) -> float:
        return self.meter.rate15

    @property
    def rate_mean(self) -> float:
        return self.meter.rate_mean
