"""Reporter configuration."""

import math
from dataclasses import dataclass, field

from influxreporter.core.exceptions import ConfigurationError
from influxreporter.core.models import DEFAULT_PRECISION

DEFAULT_PING_INTERVAL = 5.0
DEFAULT_TIMEOUT = 1.0


@dataclass(frozen=True)
class ReporterConfig:
    """Settings for one reporter.

    Attributes:
        address: Base URL of the InfluxDB HTTP API (e.g. "http://localhost:8086").
        database: Database every batch is written to.
        username: Basic-auth user; empty for no authentication.
        password: Basic-auth password.
        interval: Seconds between flushes.
        tags: Static tags applied to every record.
        ping_interval: Seconds between health checks.
        timeout: Seconds allowed for a connect or ping.
        precision: Timestamp precision of submitted batches.
    """

    address: str
    database: str
    username: str = ""
    password: str = ""
    interval: float = 10.0
    tags: dict[str, str] = field(default_factory=dict)
    ping_interval: float = DEFAULT_PING_INTERVAL
    timeout: float = DEFAULT_TIMEOUT
    precision: str = DEFAULT_PRECISION

    def __post_init__(self) -> None:
        if not self.address:
            raise ConfigurationError("address must not be empty")
        if not self.database:
            raise ConfigurationError("database must not be empty")
        for name in ("interval", "ping_interval", "timeout"):
            value = getattr(self, name)
            if not (value > 0 and math.isfinite(value)):
                raise ConfigurationError(
                    f"{name} must be positive and finite, got {value!r}"
                )
        # tags=None is accepted and normalized.
        if self.tags is None:
            object.__setattr__(self, "tags", {})
