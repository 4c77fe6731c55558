"""In-memory time-series client adapter."""

from influxreporter.core.exceptions import PingError, WriteError
from influxreporter.core.models import Batch


class InMemoryTimeSeriesClient:
    """In-memory implementation of TimeSeriesClientPort.

    Keeps every written batch in a list. Suitable for testing and for
    running a reporter without a store. Set ``fail_pings`` or
    ``fail_writes`` to simulate an unhealthy server.
    """

    def __init__(self, name: str = "in-memory") -> None:
        self.name = name
        self.batches: list[Batch] = []
        self.fail_pings = False
        self.fail_writes = False
        self.ping_count = 0
        self.closed = False

    async def ping(self, timeout: float) -> None:
        """Count the ping; raise PingError when ``fail_pings`` is set."""
        self.ping_count += 1
        if self.fail_pings:
            raise PingError(f"{self.name}: ping failed")

    async def write(self, batch: Batch) -> None:
        """Store the batch; raise WriteError when ``fail_writes`` is set."""
        if self.fail_writes:
            raise WriteError(f"{self.name}: write failed")
        self.batches.append(batch)

    async def aclose(self) -> None:
        self.closed = True

    @property
    def records(self) -> list:
        """All records from every stored batch, in write order."""
        return [record for batch in self.batches for record in batch.records]
