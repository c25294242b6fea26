from mmrag.application.ports.telemetry_port import TelemetryPort


class NoopTelemetry(TelemetryPort):
    """Telemetry sink used when metrics are disabled."""

    def incr(self, name: str, tags: dict) -> None:
        return None

    def observe(self, name: str, value: float, tags: dict) -> None:
        return None
