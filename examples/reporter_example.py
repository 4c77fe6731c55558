"""Report simulated request metrics to a local InfluxDB.

Run an InfluxDB 1.x server on localhost:8086 with a database named
"example", then:

    python examples/reporter_example.py
"""

import asyncio
import logging
import random

from influxreporter import (
    Counter,
    GaugeFloat64,
    Histogram,
    Meter,
    MetricsRegistry,
    Timer,
    report_to_influxdb_with_tags,
)

logger = logging.getLogger(__name__)


async def simulate_traffic(registry: MetricsRegistry) -> None:
    """Update a handful of metrics every 100ms."""
    requests = registry.get_or_register("requests", Counter)
    load = registry.get_or_register("load", GaugeFloat64)
    sizes = registry.get_or_register("response_size", Histogram)
    hits = registry.get_or_register("cache_hits", Meter)
    latency = registry.get_or_register("latency", Timer)

    while True:
        requests.inc()
        load.update(random.uniform(0.0, 4.0))
        sizes.update(random.randint(200, 20_000))
        if random.random() < 0.8:
            hits.mark()
        latency.update(random.randint(1_000_000, 50_000_000))
        await asyncio.sleep(0.1)


async def main() -> None:
    logging.basicConfig(level=logging.INFO)
    registry = MetricsRegistry()
    traffic = asyncio.create_task(simulate_traffic(registry))
    try:
        await report_to_influxdb_with_tags(
            registry,
            10.0,
            "http://localhost:8086",
            "example",
            "",
            "",
            {"host": "example-1"},
        )
    finally:
        traffic.cancel()
    logger.info("reporter stopped")


if __name__ == "__main__":
    asyncio.run(main())
