"""Exponentially-weighted moving averages for meter rates."""

import math
import threading

TICK_INTERVAL_SECONDS = 5.0


def _alpha(minutes: float) -> float:
    return 1.0 - math.exp(-TICK_INTERVAL_SECONDS / 60.0 / minutes)


class EWMA:
    """Moving average of events per second, updated every tick interval.

    Counts accumulate through ``update`` and are folded into the rate on
    ``tick``. The first tick seeds the rate with the instantaneous rate.
    """

    def __init__(self, alpha: float) -> None:
        self._alpha = alpha
        self._lock = threading.Lock()
        self._uncounted = 0
        self._rate = 0.0
        self._initialized = False

    @classmethod
    def one_minute(cls) -> "EWMA":
        return cls(_alpha(1.0))

    @classmethod
    def five_minute(cls) -> "EWMA":
        return cls(_alpha(5.0))

    @classmethod
    def fifteen_minute(cls) -> "EWMA":
        return cls(_alpha(15.0))

    def update(self, n: int) -> None:
        with self._lock:
            self._uncounted += n

    def tick(self) -> None:
        with self._lock:
            instant = self._uncounted / TICK_INTERVAL_SECONDS
            self._uncounted = 0
            if self._initialized:
                self._rate += self._alpha * (instant - self._rate)
            else:
                self._rate = instant
                self._initialized = True

    @property
    def rate(self) -> float:
        """Current rate in events per second."""
        with self._lock:
            return self._rate
