"""Metric instruments held in a MetricsRegistry.

Every instrument is safe to update from multiple threads and exposes a
``snapshot()`` returning an immutable point-in-time read.
"""

import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from influxreporter.core.ewma import EWMA, TICK_INTERVAL_SECONDS
from influxreporter.core.models import (
    CounterSnapshot,
    GaugeFloat64Snapshot,
    GaugeSnapshot,
    HistogramSnapshot,
    MeterSnapshot,
    TimerSnapshot,
)
from influxreporter.core.sample import ExpDecaySample, UniformSample

T = TypeVar("T")

Sample = UniformSample | ExpDecaySample


class Counter:
    """Monotonic-by-convention integer count that can also be decremented."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._count = 0

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    def clear(self) -> None:
        with self._lock:
            self._count = 0

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def snapshot(self) -> CounterSnapshot:
        return CounterSnapshot(count=self.count)


class Gauge:
    """Integer value set by the caller.

    Values are truncated to int so the stored field keeps one type.
    """

    def __init__(self, value: int = 0) -> None:
        self._lock = threading.Lock()
        self._value = int(value)

    def update(self, value: int) -> None:
        with self._lock:
            self._value = int(value)

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def snapshot(self) -> GaugeSnapshot:
        return GaugeSnapshot(value=self.value)


class GaugeFloat64:
    """Floating-point value set by the caller.

    Values are stored as float, so an int update still encodes as a float.
    """

    def __init__(self, value: float = 0.0) -> None:
        self._lock = threading.Lock()
        self._value = float(value)

    def update(self, value: float) -> None:
        with self._lock:
            self._value = float(value)

    @property
    def value(self) -> float:
        with self._lock:
            return self._value

    def snapshot(self) -> GaugeFloat64Snapshot:
        return GaugeFloat64Snapshot(value=self.value)


class Histogram:
    """Distribution of integer observations backed by a reservoir sample.

    Args:
        sample: Reservoir strategy. Defaults to an exponentially decaying
            sample of 1028 observations.
    """

    def __init__(self, sample: Sample | None = None) -> None:
        self._sample = sample if sample is not None else ExpDecaySample()

    def update(self, value: int) -> None:
        self._sample.update(int(value))

    def clear(self) -> None:
        self._sample.clear()

    @property
    def count(self) -> int:
        return self._sample.snapshot()[0]

    def snapshot(self) -> HistogramSnapshot:
        count, values = self._sample.snapshot()
        return HistogramSnapshot(count=count, values=values)


class Meter:
    """Rate of events with 1, 5 and 15 minute moving averages.

    Averages are ticked lazily: every ``mark`` or ``snapshot`` folds in
    however many 5-second ticks have elapsed since the last one.

    Args:
        clock: Monotonic clock in seconds (injectable for tests).
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._count = 0
        self._start = clock()
        self._last_tick = self._start
        self._m1 = EWMA.one_minute()
        self._m5 = EWMA.five_minute()
        self._m15 = EWMA.fifteen_minute()

    def _tick_if_necessary(self) -> None:
        now = self._clock()
        elapsed = now - self._last_tick
        if elapsed < TICK_INTERVAL_SECONDS:
            return
        ticks = int(elapsed // TICK_INTERVAL_SECONDS)
        self._last_tick += ticks * TICK_INTERVAL_SECONDS
        for _ in range(ticks):
            self._m1.tick()
            self._m5.tick()
            self._m15.tick()

    def mark(self, n: int = 1) -> None:
        """Record ``n`` events."""
        with self._lock:
            self._tick_if_necessary()
            self._count += n
            self._m1.update(n)
            self._m5.update(n)
            self._m15.update(n)

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def snapshot(self) -> MeterSnapshot:
        with self._lock:
            self._tick_if_necessary()
            elapsed = self._clock() - self._start
            rate_mean = self._count / elapsed if elapsed > 0 else 0.0
            return MeterSnapshot(
                count=self._count,
                rate1=self._m1.rate,
                rate5=self._m5.rate,
                rate15=self._m15.rate,
                rate_mean=rate_mean,
            )


class Timer:
    """Histogram of durations in nanoseconds plus a meter of their rate.

    Example:
        ```python
        timer = Timer()
        with timer.timed():
            handle_request()
        ```
    """

    def __init__(
        self,
        histogram: Histogram | None = None,
        meter: Meter | None = None,
    ) -> None:
        self._histogram = histogram if histogram is not None else Histogram()
        self._meter = meter if meter is not None else Meter()

    def update(self, duration_ns: int) -> None:
        """Record one duration in nanoseconds."""
        self._histogram.update(duration_ns)
        self._meter.mark(1)

    def update_since(self, start_ns: int) -> None:
        """Record the time elapsed since ``start_ns`` (a perf_counter_ns value)."""
        self.update(time.perf_counter_ns() - start_ns)

    def time(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Call ``fn`` and record how long it took."""
        start = time.perf_counter_ns()
        try:
            return fn(*args, **kwargs)
        finally:
            self.update_since(start)

    @contextmanager
    def timed(self) -> Iterator[None]:
        """Context manager recording the duration of its body."""
        start = time.perf_counter_ns()
        try:
            yield
        finally:
            self.update_since(start)

    @property
    def count(self) -> int:
        return self._histogram.count

    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            histogram=self._histogram.snapshot(),
            meter=self._meter.snapshot(),
        )


Metric = Counter | Gauge | GaugeFloat64 | Histogram | Meter | Timer
