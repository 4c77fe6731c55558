"""Reporter loop shipping registry snapshots to InfluxDB.

One asyncio task owns two timers, the flush timer and the health-check
timer, and services whichever is due first, strictly one at a time. A slow
write or ping delays the other timer; missed ticks are dropped rather than
replayed. The loop runs until its stop event is set.
"""

import asyncio
import datetime
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from influxreporter.adapters.influxdb import connect as connect_influxdb
from influxreporter.config import ReporterConfig
from influxreporter.core.encoding.records import encode_metric
from influxreporter.core.exceptions import InfluxReporterError, InvalidRecordError
from influxreporter.core.models import Batch, Record
from influxreporter.core.ports import ConnectFunc, RegistryPort, TimeSeriesClientPort
from influxreporter.runtime.connection import ConnectionManager

logger = logging.getLogger(__name__)

Interval = float | datetime.timedelta


def _seconds(interval: Interval) -> float:
    if isinstance(interval, datetime.timedelta):
        return interval.total_seconds()
    return float(interval)


def _advance(deadline: float, interval: float, now: float) -> float:
    """Return the first deadline after ``now`` on the ``interval`` grid."""
    deadline += interval
    if deadline <= now:
        missed = int((now - deadline) // interval) + 1
        deadline += missed * interval
    return deadline


class Reporter:
    """Periodically writes every metric of a registry to InfluxDB.

    Args:
        registry: Registry walked on every flush.
        config: Reporter settings.
        client: Pre-built client handle; skips the initial connect.
        connect: Factory used for the initial connect and reconnects.
        clock: Wall clock returning nanoseconds, used for record timestamps.

    Example:
        ```python
        reporter = Reporter(registry, ReporterConfig("http://db:8086", "app"))
        if await reporter.start():
            await reporter.run()
        ```
    """

    def __init__(
        self,
        registry: RegistryPort,
        config: ReporterConfig,
        *,
        client: TimeSeriesClientPort | None = None,
        connect: ConnectFunc = connect_influxdb,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self.registry = registry
        self.config = config
        self.connection = ConnectionManager(config, connect, client)
        self._clock = clock
        self._stop = asyncio.Event()

    async def start(self) -> bool:
        """Establish the initial connection.

        Returns:
            False if the connection could not be made; the failure is logged
            and the reporter should not be run.
        """
        return await self.connection.establish()

    def collect(self) -> list[Record]:
        """Encode every registry metric into records.

        A metric that fails to encode is dropped; the others are kept.
        """
        records: list[Record] = []
        tags = self.config.tags

        def visit(name: str, metric: Any) -> None:
            try:
                record = encode_metric(name, metric, tags, self._clock())
            except InvalidRecordError as exc:
                logger.debug("dropping metric %s: %s", name, exc)
                return
            except Exception:
                logger.exception("unable to encode metric %s", name)
                return
            if record is not None:
                records.append(record)

        self.registry.each(visit)
        return records

    async def send(self) -> int:
        """Run one flush cycle, raising on failure.

        Returns:
            Number of records written.

        Raises:
            InvalidBatchError: If the batch cannot be built.
            NotConnectedError: If no connection is available.
            WriteError: If the store rejects the batch.
        """
        records = self.collect()
        batch = Batch(database=self.config.database, precision=self.config.precision)
        batch.add_records(records)
        await self.connection.client.write(batch)
        return len(batch)

    async def flush(self) -> bool:
        """Run one flush cycle, logging instead of raising.

        Returns:
            True if the batch was written.
        """
        try:
            count = await self.send()
        except InfluxReporterError as exc:
            logger.error(
                "unable to send metrics to InfluxDB: %s",
                exc,
                extra={"database": self.config.database, "error": str(exc)},
            )
            return False
        except Exception:
            logger.exception("unexpected error sending metrics to InfluxDB")
            return False
        logger.debug(
            "sent metrics to InfluxDB",
            extra={"database": self.config.database, "records": count},
        )
        return True

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Service the flush and health-check timers until stopped.

        Args:
            stop: Event ending the loop. When given it replaces the
                reporter's own event, so ``stop()`` sets it as well.
        """
        if stop is not None:
            self._stop = stop
        stop = self._stop
        interval = self.config.interval
        ping_interval = self.config.ping_interval
        loop = asyncio.get_running_loop()
        now = loop.time()
        next_flush = now + interval
        next_ping = now + ping_interval

        while not stop.is_set():
            delay = min(next_flush, next_ping) - loop.time()
            if delay > 0:
                try:
                    await asyncio.wait_for(stop.wait(), timeout=delay)
                except TimeoutError:
                    pass
                else:
                    break
            if next_flush <= next_ping:
                await self.flush()
                next_flush = _advance(next_flush, interval, loop.time())
            else:
                await self.connection.health_check()
                next_ping = _advance(next_ping, ping_interval, loop.time())

    def stop(self) -> None:
        """Ask ``run`` to return at its next wait point."""
        self._stop.set()

    async def aclose(self) -> None:
        await self.connection.aclose()


async def _run_reporter(reporter: Reporter, stop: asyncio.Event | None) -> None:
    try:
        await reporter.run(stop)
    finally:
        await reporter.aclose()


async def report_to_influxdb(
    registry: RegistryPort,
    interval: Interval,
    address: str,
    database: str,
    username: str,
    password: str,
    *,
    stop: asyncio.Event | None = None,
    connect: ConnectFunc = connect_influxdb,
) -> None:
    """Report ``registry`` to InfluxDB every ``interval`` until ``stop`` is set.

    Returns immediately, after logging, if the first connection fails.
    """
    await report_to_influxdb_with_tags(
        registry,
        interval,
        address,
        database,
        username,
        password,
        None,
        stop=stop,
        connect=connect,
    )


async def report_to_influxdb_with_tags(
    registry: RegistryPort,
    interval: Interval,
    address: str,
    database: str,
    username: str,
    password: str,
    tags: Mapping[str, str] | None,
    *,
    stop: asyncio.Event | None = None,
    connect: ConnectFunc = connect_influxdb,
) -> None:
    """Like ``report_to_influxdb`` with static ``tags`` on every record."""
    config = ReporterConfig(
        address=address,
        database=database,
        username=username,
        password=password,
        interval=_seconds(interval),
        tags=dict(tags or {}),
    )
    reporter = Reporter(registry, config, connect=connect)
    if not await reporter.start():
        return
    await _run_reporter(reporter, stop)


async def report_to_influxdb_with_client(
    client: TimeSeriesClientPort,
    registry: RegistryPort,
    interval: Interval,
    address: str,
    database: str,
    username: str,
    password: str,
    tags: Mapping[str, str] | None,
    *,
    stop: asyncio.Event | None = None,
    connect: ConnectFunc = connect_influxdb,
) -> None:
    """Report through a pre-built ``client``, skipping the initial connect.

    The address and credentials are still used to reconnect when a health
    check fails. The reporter takes ownership of ``client`` and closes it
    when replaced or when the loop ends.
    """
    config = ReporterConfig(
        address=address,
        database=database,
        username=username,
        password=password,
        interval=_seconds(interval),
        tags=dict(tags or {}),
    )
    reporter = Reporter(registry, config, client=client, connect=connect)
    await _run_reporter(reporter, stop)
