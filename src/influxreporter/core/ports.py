"""Port interfaces for the reporter's collaborators.

These protocols define the contracts the registry and the time-series
client must satisfy. The runtime depends only on these interfaces, not on
concrete adapters.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

from influxreporter.core.models import Batch


@runtime_checkable
class RegistryPort(Protocol):
    """Port for reading a metrics registry.

    Implementations: MetricsRegistry, or any object with a compatible
    ``each``.
    """

    def each(self, callback: Callable[[str, Any], None]) -> None:
        """Invoke ``callback(name, metric)`` for every registered metric."""
        ...


@runtime_checkable
class TimeSeriesClientPort(Protocol):
    """Port for a connection to a time-series store.

    Implementations: InfluxDBClient, InMemoryTimeSeriesClient.
    """

    async def ping(self, timeout: float) -> None:
        """Check the store is reachable.

        Raises:
            PingError: If the store does not answer within ``timeout``.
        """
        ...

    async def write(self, batch: Batch) -> None:
        """Submit a batch atomically.

        Raises:
            WriteError: If the store rejects or never receives the batch.
        """
        ...

    async def aclose(self) -> None:
        """Release the connection's resources."""
        ...


# connect(address, username, password, timeout) -> client
ConnectFunc = Callable[[str, str, str, float], Awaitable[TimeSeriesClientPort]]
