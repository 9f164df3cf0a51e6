"""Logging helpers: console output plus optional OpenTelemetry log export."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config import TelemetryConfig

LOG_FORMAT = (
    "%(asctime)s | %(levelname)s | %(name)s | %(message)s "
    "| trace_id=%(otelTraceID)s span_id=%(otelSpanID)s"
)

_LOGGER: logging.Logger | None = None
_OTLP_HANDLER: logging.Handler | None = None
_CONSOLE_HANDLER: logging.Handler | None = None


class _OtelContextFilter(logging.Filter):
    """Ensures trace/span placeholders exist even when no context is active."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        if not hasattr(record, "otelTraceID"):
            record.otelTraceID = "-"
        if not hasattr(record, "otelSpanID"):
            record.otelSpanID = "-"
        return True


def get_logger(name: str = "seabattle") -> logging.Logger:
    global _LOGGER
    if _LOGGER is None:
        _LOGGER = logging.getLogger(name)
    return _LOGGER


def configure_console_logging(level: str = "WARNING") -> None:
    """Send engine logs to stderr at ``level``, leaving stdout to the game.

    The level sits on the console handler. The root logger stays at INFO or
    lower so OTLP export still receives the engine's event records.
    """
    global _CONSOLE_HANDLER
    root_logger = logging.getLogger()
    if _CONSOLE_HANDLER is None and not root_logger.handlers:
        _CONSOLE_HANDLER = logging.StreamHandler()
        _CONSOLE_HANDLER.setFormatter(logging.Formatter(LOG_FORMAT))
        _CONSOLE_HANDLER.addFilter(_OtelContextFilter())
        root_logger.addHandler(_CONSOLE_HANDLER)
    if _CONSOLE_HANDLER is not None:
        _CONSOLE_HANDLER.setLevel(level)
    root_logger.setLevel(min(logging.getLevelName(level), logging.INFO))


def init_logging(config: TelemetryConfig) -> logging.Logger:
    """Export log records over OTLP when a logs endpoint is configured."""
    global _OTLP_HANDLER
    logger = get_logger(config.service_name)
    if not config.otlp_logs_endpoint or _OTLP_HANDLER is not None:
        return logger

    try:
        from opentelemetry._logs import set_logger_provider
        from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
        from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
        from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
        from opentelemetry.sdk.resources import Resource
    except ImportError:  # pragma: no cover
        return logger

    provider = LoggerProvider(resource=Resource.create(config.resource()))
    exporter = OTLPLogExporter(endpoint=config.otlp_logs_endpoint, insecure=True)
    provider.add_log_record_processor(BatchLogRecordProcessor(exporter))
    set_logger_provider(provider)

    _OTLP_HANDLER = LoggingHandler(level=logging.INFO, logger_provider=provider)
    _OTLP_HANDLER.addFilter(_OtelContextFilter())
    root_logger = logging.getLogger()
    root_logger.addHandler(_OTLP_HANDLER)
    if root_logger.getEffectiveLevel() > logging.INFO:
        root_logger.setLevel(logging.INFO)
    return logger
