from typing import Protocol


class TelemetryPort(Protocol):
    """Port for telemetry and monitoring."""

    def incr(self, name: str, tags: dict) -> None:
        """Increment a counter metric."""
        ...

    def observe(self, name: str, value: float, tags: dict) -> None:
        """Observe a value for histogram/summary metric."""
        ...
