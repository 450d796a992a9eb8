"""Telemetry Sink — invocation records for every functional feature-dev call.

Invariants:
    - One TelemetryRecord per functional operation call, success or failure
    - Sinks are best-effort: callers swallow sink failures
    - LoggingTelemetrySink puts every record field into the log line's extra

Design Decisions:
    - Protocol over base class: any object with record() can be injected
    - LoggingTelemetrySink emits through logging extra fields, reusing JSONFormatter
"""

import logging
from dataclasses import dataclass, asdict
from typing import Protocol

logger = logging.getLogger("featuredev.telemetry")


@dataclass(frozen=True)
class TelemetryRecord:
    """Timing, outcome and reason of one remote invocation."""
    name: str
    operation: str
    result: str
    duration_ms: float
    conversation_id: str | None = None
    reason: str | None = None
    reason_desc: str | None = None
    credential_start_url: str | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    def to_log_extra(self) -> dict:
        """Record fields for logging extra; LogRecord reserves `name`."""
        fields = self.to_dict()
        fields["metric"] = fields.pop("name")
        return fields


class TelemetrySink(Protocol):
    """Destination for invocation records."""

    def record(self, record: TelemetryRecord) -> None:
        ...


class LoggingTelemetrySink:
    """Write each record as one structured log line."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def record(self, record: TelemetryRecord) -> None:
        logger.log(
            self.level,
            f"{record.name} {record.result}",
            extra=record.to_log_extra(),
        )
