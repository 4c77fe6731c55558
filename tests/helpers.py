"""Test doubles shared across test modules."""

from influxreporter.adapters.in_memory import InMemoryTimeSeriesClient
from influxreporter.core.exceptions import ConnectError

FIXED_TIMESTAMP = 1_702_300_000_000_000_000


class FakeClock:
    """Manually advanced monotonic clock in seconds."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeConnector:
    """Connect factory handing out in-memory clients.

    Set ``fail`` to make the next connects raise ConnectError. Every client
    created is kept in ``clients`` in creation order.
    """

    def __init__(self) -> None:
        self.fail = False
        self.calls: list[tuple[str, str, str, float]] = []
        self.clients: list[InMemoryTimeSeriesClient] = []

    async def __call__(
        self, address: str, username: str, password: str, timeout: float
    ) -> InMemoryTimeSeriesClient:
        self.calls.append((address, username, password, timeout))
        if self.fail:
            raise ConnectError(f"unable to reach InfluxDB at {address}")
        client = InMemoryTimeSeriesClient(name=f"client-{len(self.clients)}")
        self.clients.append(client)
        return client
