"""Thread-safe registry mapping metric names to instruments."""

import threading
from collections.abc import Callable
from typing import Any

from influxreporter.core.exceptions import DuplicateMetricError


class MetricsRegistry:
    """Name to metric mapping shared between instrumented code and reporters.

    ``each`` iterates over a copy taken under the lock, so metrics may be
    registered or removed by other threads while a reporter walks the
    registry. Values are stored as given; the reporter decides which types
    it knows how to encode.

    Example:
        ```python
        registry = MetricsRegistry()
        requests = registry.get_or_register("requests", Counter)
        requests.inc()
        ```
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._metrics: dict[str, Any] = {}

    def register(self, name: str, metric: Any) -> None:
        """Register ``metric`` under ``name``.

        Raises:
            DuplicateMetricError: If ``name`` is already registered.
        """
        with self._lock:
            if name in self._metrics:
                raise DuplicateMetricError(f"metric {name!r} already registered")
            self._metrics[name] = metric

    def get_or_register(self, name: str, metric: Any) -> Any:
        """Return the metric under ``name``, registering ``metric`` if absent.

        ``metric`` may be an instance or a zero-argument factory (such as an
        instrument class); a factory is only called when the name is free.
        """
        with self._lock:
            existing = self._metrics.get(name)
            if existing is not None:
                return existing
            if isinstance(metric, type) or (
                callable(metric) and not hasattr(metric, "snapshot")
            ):
                metric = metric()
            self._metrics[name] = metric
            return metric

    def get(self, name: str) -> Any | None:
        with self._lock:
            return self._metrics.get(name)

    def unregister(self, name: str) -> None:
        with self._lock:
            self._metrics.pop(name, None)

    def unregister_all(self) -> None:
        with self._lock:
            self._metrics.clear()

    def each(self, callback: Callable[[str, Any], None]) -> None:
        """Call ``callback(name, metric)`` for every registered metric."""
        with self._lock:
            items = list(self._metrics.items())
        for name, metric in items:
            callback(name, metric)

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._metrics


default_registry = MetricsRegistry()
