"""Exception hierarchy for influxreporter."""

__all__ = [
    "ClientError",
    "ConfigurationError",
    "ConnectError",
    "DuplicateMetricError",
    "InfluxReporterError",
    "InvalidAddressError",
    "InvalidBatchError",
    "InvalidRecordError",
    "NotConnectedError",
    "PingError",
    "WriteError",
]


class InfluxReporterError(Exception):
    """Base exception for all influxreporter errors."""


class ConfigurationError(InfluxReporterError):
    """Raised when reporter configuration values are invalid."""


class InvalidRecordError(InfluxReporterError):
    """Raised when a record cannot be built from the given name, tags or fields."""


class InvalidBatchError(InfluxReporterError):
    """Raised when a batch cannot be built (unknown precision, missing database)."""


class DuplicateMetricError(InfluxReporterError):
    """Raised when registering a metric under a name that is already taken."""


class ClientError(InfluxReporterError):
    """Base class for errors talking to the time-series store."""


class InvalidAddressError(ClientError):
    """Raised when the store address is not a usable http(s) URL."""


class ConnectError(ClientError):
    """Raised when a connection to the store cannot be established."""


class PingError(ClientError):
    """Raised when a health-check ping fails."""


class WriteError(ClientError):
    """Raised when a batch write is rejected or cannot be delivered."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotConnectedError(ClientError):
    """Raised when an operation needs a connection and none is available."""
