"""InfluxDB 1.x HTTP client adapter.

Implements TimeSeriesClientPort on top of ``httpx.AsyncClient``:

- ``GET /ping`` for health checks (any 2xx is healthy);
- ``POST /write?db=<database>&precision=<unit>`` with a line protocol body.

Transport errors are translated to ClientError subclasses so callers never
see httpx exceptions.
"""

import logging
from urllib.parse import urlsplit

import httpx

from influxreporter.core.encoding.line_protocol import encode_batch
from influxreporter.core.exceptions import (
    ConnectError,
    InvalidAddressError,
    PingError,
    WriteError,
)
from influxreporter.core.models import Batch

logger = logging.getLogger(__name__)

# Precision strings accepted by the write endpoint.
_WIRE_PRECISION = {
    "ns": "ns",
    "n": "ns",
    "us": "u",
    "u": "u",
    "ms": "ms",
    "s": "s",
    "m": "m",
    "h": "h",
}


def _validate_address(address: str) -> str:
    """Return the address without a trailing slash.

    Raises:
        InvalidAddressError: If the scheme is not http(s) or the host is missing.
    """
    parts = urlsplit(address)
    if parts.scheme not in ("http", "https"):
        raise InvalidAddressError(
            f"unsupported protocol scheme {parts.scheme!r} in {address!r}"
        )
    if not parts.netloc:
        raise InvalidAddressError(f"missing host in {address!r}")
    return address.rstrip("/")


def _error_message(response: httpx.Response) -> str:
    """Extract the server's error message from a write response."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return response.text.strip()


class InfluxDBClient:
    """Async client for one InfluxDB server.

    Args:
        address: Base URL, e.g. "http://localhost:8086".
        username: Basic-auth user; empty disables authentication.
        password: Basic-auth password.
        timeout: Default request timeout in seconds.
        transport: Optional httpx transport (used by tests).

    Raises:
        InvalidAddressError: If ``address`` is not an http(s) URL.
    """

    def __init__(
        self,
        address: str,
        username: str = "",
        password: str = "",
        timeout: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.address = _validate_address(address)
        auth = httpx.BasicAuth(username, password) if username else None
        self._client = httpx.AsyncClient(
            base_url=self.address,
            auth=auth,
            timeout=timeout,
            transport=transport,
        )

    async def ping(self, timeout: float) -> None:
        """Ping the server.

        Raises:
            PingError: On a transport error or a non-2xx response.
        """
        try:
            response = await self._client.get("/ping", timeout=timeout)
        except httpx.HTTPError as exc:
            raise PingError(f"ping {self.address} failed: {exc!r}") from exc
        if not response.is_success:
            raise PingError(
                f"ping {self.address} returned status {response.status_code}"
            )

    async def write(self, batch: Batch) -> None:
        """Write a batch; an empty batch is still submitted.

        Raises:
            WriteError: On a transport error or a non-2xx response.
        """
        params = {
            "db": batch.database,
            "precision": _WIRE_PRECISION[batch.precision],
        }
        body = encode_batch(batch)
        try:
            response = await self._client.post(
                "/write",
                params=params,
                content=body.encode(),
                headers={"content-type": "text/plain; charset=utf-8"},
            )
        except httpx.HTTPError as exc:
            raise WriteError(f"write to {self.address} failed: {exc!r}") from exc
        if not response.is_success:
            raise WriteError(
                f"write to {self.address} returned status "
                f"{response.status_code}: {_error_message(response)}",
                status_code=response.status_code,
            )

    async def aclose(self) -> None:
        await self._client.aclose()


async def connect(
    address: str,
    username: str,
    password: str,
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> InfluxDBClient:
    """Create a client and verify the server answers a ping.

    Args:
        address: Base URL of the server.
        username: Basic-auth user.
        password: Basic-auth password.
        timeout: Seconds allowed for the verifying ping.
        transport: Optional httpx transport (used by tests).

    Returns:
        A connected InfluxDBClient.

    Raises:
        InvalidAddressError: If ``address`` is not an http(s) URL.
        ConnectError: If the server does not answer the ping.
    """
    client = InfluxDBClient(address, username, password, timeout, transport)
    try:
        await client.ping(timeout)
    except PingError as exc:
        await client.aclose()
        raise ConnectError(f"unable to reach InfluxDB at {address}: {exc}") from exc
    logger.debug("connected to InfluxDB", extra={"address": client.address})
    return client
