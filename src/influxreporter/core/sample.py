"""Reservoir samples backing histograms and timers.

Two strategies are provided:

- ``UniformSample``: Vitter's algorithm R, every observation equally likely
  to be retained.
- ``ExpDecaySample``: forward-decaying priority reservoir that biases the
  sample towards the last few minutes of observations.
"""

import heapq
import math
import random
import threading
import time
from collections.abc import Callable, Sequence

DEFAULT_RESERVOIR_SIZE = 1028
DEFAULT_ALPHA = 0.015

# Rescale the exponentially decaying reservoir once an hour.
_RESCALE_THRESHOLD_SECONDS = 3600.0


def sample_percentiles(
    values: Sequence[int | float], quantiles: Sequence[float]
) -> list[float]:
    """Compute percentiles of ``values`` at each quantile in ``quantiles``.

    For quantile p over n sorted values the position is ``p * (n + 1)``.
    Positions below 1 map to the minimum, positions at or past n map to the
    maximum, anything else is linearly interpolated between neighbours.

    Args:
        values: Observations in any order.
        quantiles: Quantiles in [0, 1].

    Returns:
        One float per quantile, in the order given. All zeros if ``values``
        is empty.
    """
    if not values:
        return [0.0 for _ in quantiles]
    ordered = sorted(values)
    size = len(ordered)
    result: list[float] = []
    for p in quantiles:
        pos = p * (size + 1)
        if pos < 1.0:
            result.append(float(ordered[0]))
        elif pos >= size:
            result.append(float(ordered[-1]))
        else:
            lower = ordered[int(pos) - 1]
            upper = ordered[int(pos)]
            result.append(lower + (pos - math.floor(pos)) * (upper - lower))
    return result


class UniformSample:
    """Uniform reservoir sample using Vitter's algorithm R.

    Args:
        reservoir_size: Maximum number of retained observations.
        rng: Random source (injectable for deterministic tests).
    """

    def __init__(
        self,
        reservoir_size: int = DEFAULT_RESERVOIR_SIZE,
        rng: random.Random | None = None,
    ) -> None:
        if reservoir_size <= 0:
            raise ValueError("reservoir_size must be positive")
        self._reservoir_size = reservoir_size
        self._rng = rng or random.Random()
        self._lock = threading.Lock()
        self._count = 0
        self._values: list[int] = []

    def update(self, value: int) -> None:
        """Record an observation."""
        with self._lock:
            self._count += 1
            if len(self._values) < self._reservoir_size:
                self._values.append(value)
                return
            slot = self._rng.randint(0, self._count - 1)
            if slot < self._reservoir_size:
                self._values[slot] = value

    def clear(self) -> None:
        with self._lock:
            self._count = 0
            self._values = []

    def snapshot(self) -> tuple[int, tuple[int, ...]]:
        """Return ``(count, values)`` read under the lock."""
        with self._lock:
            return self._count, tuple(self._values)

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)


class ExpDecaySample:
    """Exponentially decaying reservoir sample.

    Each observation gets priority ``exp(alpha * (t - start)) / u`` with
    ``u`` uniform in (0, 1]; the reservoir keeps the highest priorities.
    Priorities are rescaled every hour so they stay representable.

    Args:
        reservoir_size: Maximum number of retained observations.
        alpha: Decay factor; larger values favour recent observations.
        rng: Random source (injectable for deterministic tests).
        clock: Monotonic clock in seconds.
    """

    def __init__(
        self,
        reservoir_size: int = DEFAULT_RESERVOIR_SIZE,
        alpha: float = DEFAULT_ALPHA,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if reservoir_size <= 0:
            raise ValueError("reservoir_size must be positive")
        self._reservoir_size = reservoir_size
        self._alpha = alpha
        self._rng = rng or random.Random()
        self._clock = clock
        self._lock = threading.Lock()
        self._count = 0
        # Min-heap of (priority, sequence, value); sequence breaks ties.
        self._heap: list[tuple[float, int, int]] = []
        self._seq = 0
        self._start = clock()
        self._next_rescale = self._start + _RESCALE_THRESHOLD_SECONDS

    def _priority(self, now: float) -> float:
        u = 1.0 - self._rng.random()
        return math.exp(self._alpha * (now - self._start)) / u

    def update(self, value: int) -> None:
        """Record an observation at the current clock time."""
        with self._lock:
            now = self._clock()
            if now >= self._next_rescale:
                self._rescale(now)
            self._count += 1
            self._seq += 1
            item = (self._priority(now), self._seq, value)
            if len(self._heap) < self._reservoir_size:
                heapq.heappush(self._heap, item)
            elif item[0] > self._heap[0][0]:
                heapq.heapreplace(self._heap, item)

    def _rescale(self, now: float) -> None:
        old_start = self._start
        self._start = now
        self._next_rescale = now + _RESCALE_THRESHOLD_SECONDS
        factor = math.exp(-self._alpha * (now - old_start))
        self._heap = [(p * factor, seq, v) for p, seq, v in self._heap]
        heapq.heapify(self._heap)

    def clear(self) -> None:
        with self._lock:
            self._count = 0
            self._heap = []
            self._start = self._clock()
            self._next_rescale = self._start + _RESCALE_THRESHOLD_SECONDS

    def snapshot(self) -> tuple[int, tuple[int, ...]]:
        """Return ``(count, values)`` read under the lock."""
        with self._lock:
            return self._count, tuple(v for _, _, v in self._heap)

    def __len__(self) -> int:
        with self._lock:
            return len(self._heap)
