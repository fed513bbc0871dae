"""Dealboard exception hierarchy."""


class DealboardError(Exception):
    """Base exception for all dealboard errors."""


class StoreError(DealboardError):
    """Raw-record store read or write failed."""

    def __init__(self, partition: str, message: str) -> None:
        self.partition = partition
        super().__init__(f"Store partition '{partition}': {message}")


class UnknownWindowError(DealboardError):
    """Time period name is not one of the supported windows."""

    def __init__(self, window: object) -> None:
        self.window = window
        super().__init__(f"Unknown time period: {window!r}")


class AggregationFailure(DealboardError):
    """Unexpected failure while reducing deals into metrics."""


class ConfigError(DealboardError):
    """Configuration file or environment override is invalid."""
