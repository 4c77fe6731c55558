"""Connection manager owning the reporter's time-series client handle."""

import enum
import logging

from influxreporter.adapters.influxdb import connect as connect_influxdb
from influxreporter.config import ReporterConfig
from influxreporter.core.exceptions import NotConnectedError
from influxreporter.core.ports import ConnectFunc, TimeSeriesClientPort

logger = logging.getLogger(__name__)


class ConnectionState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"


class ConnectionManager:
    """Creates, health-checks and replaces the client handle.

    The handle is only read and replaced from the reporter's loop task, so
    no locking is done here. A failed reconnect keeps the previous (broken)
    handle so the next health check retries the same way.

    Args:
        config: Reporter settings (address, credentials, timeout).
        connect: Factory creating a connected client.
        client: Pre-built handle; when given, ``establish`` need not be
            called before the loop starts.
    """

    def __init__(
        self,
        config: ReporterConfig,
        connect: ConnectFunc = connect_influxdb,
        client: TimeSeriesClientPort | None = None,
    ) -> None:
        self._config = config
        self._connect = connect
        self._client = client
        self.state = (
            ConnectionState.CONNECTED
            if client is not None
            else ConnectionState.UNINITIALIZED
        )

    @property
    def client(self) -> TimeSeriesClientPort:
        """The current handle.

        Raises:
            NotConnectedError: If no connection was ever established.
        """
        if self._client is None:
            raise NotConnectedError(
                f"no connection to {self._config.address} available"
            )
        return self._client

    async def establish(self) -> bool:
        """Create a new client and make it current.

        Returns:
            True on success. On failure the error is logged, the previous
            handle (if any) stays in place and False is returned.
        """
        cfg = self._config
        try:
            client = await self._connect(
                cfg.address, cfg.username, cfg.password, cfg.timeout
            )
        except Exception as exc:
            logger.error(
                "unable to make InfluxDB client: %s",
                exc,
                extra={"address": cfg.address, "error": str(exc)},
            )
            self.state = ConnectionState.DISCONNECTED
            return False
        await self._replace(client)
        self.state = ConnectionState.CONNECTED
        return True

    async def _replace(self, client: TimeSeriesClientPort) -> None:
        old, self._client = self._client, client
        if old is None or old is client:
            return
        try:
            await old.aclose()
        except Exception as exc:
            logger.debug("error closing replaced InfluxDB client: %s", exc)

    async def health_check(self) -> bool:
        """Ping the current handle, reconnecting if the ping fails.

        Returns:
            True if the handle is healthy after the check (the ping succeeded
            or the reconnect did).
        """
        if self._client is None:
            return await self.establish()
        try:
            await self._client.ping(self._config.timeout)
        except Exception as exc:
            logger.warning(
                "got error while sending a ping to InfluxDB, "
                "trying to recreate client: %s",
                exc,
                extra={"address": self._config.address, "error": str(exc)},
            )
            self.state = ConnectionState.DISCONNECTED
            if await self.establish():
                logger.info(
                    "reconnected to InfluxDB",
                    extra={"address": self._config.address},
                )
                return True
            return False
        self.state = ConnectionState.CONNECTED
        return True

    async def aclose(self) -> None:
        """Close the current handle, if any."""
        if self._client is not None:
            client, self._client = self._client, None
            await client.aclose()
        self.state = ConnectionState.UNINITIALIZED
