"""Structured Logging — JSON lines for the proxy, its remote client and telemetry records.

Invariants:
    - Every line carries timestamp, level, logger, service and message
    - Request-scoped fields (conversation_id, request_id, ...) surface when present
    - Telemetry record fields (metric, result, reason, reason_desc, ...) surface when present
    - setup_logging is idempotent: repeated lifespans never duplicate handlers

Design Decisions:
    - JSONFormatter over third-party libs: zero dependencies, full control
    - httpx request logging capped at WARNING: the client logs its own retries
"""

import logging
import json
from datetime import datetime, timezone

SERVICE_NAME = "featuredev-proxy"

REQUEST_FIELDS = (
    "conversation_id", "operation", "request_id", "error_code", "status_code",
    "attempt",
)
TELEMETRY_FIELDS = (
    "metric", "result", "duration_ms", "reason", "reason_desc",
    "credential_start_url",
)
EXTRA_FIELDS = REQUEST_FIELDS + TELEMETRY_FIELDS

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def __init__(self, service: str = SERVICE_NAME):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(
                record.created, timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "service": self.service,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the proxy's root handler, replacing one from an earlier call."""
    handler = logging.StreamHandler()
    handler.set_name(SERVICE_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    for existing in list(logging.root.handlers):
        if existing.get_name() == SERVICE_NAME:
            logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return handler
