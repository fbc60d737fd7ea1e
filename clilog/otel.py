"""OpenTelemetry logging SDK bridge.

Provides :class:`CLILogRecordExporter`, an OTel ``LogRecordExporter`` that
writes records through a :class:`~clilog.handler.CLIHandler`, and
:func:`configure_logging`, which wires it into a ``LoggerProvider``.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from opentelemetry._logs import SeverityNumber
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import (
    LogRecordExporter,
    LogRecordExportResult,
    SimpleLogRecordProcessor,
)
from opentelemetry.sdk.resources import Resource

from .attrs import any_attr
from .handler import CLIHandler, Handler
from .levels import INFO, Level
from .record import Record
from .sinks import StreamSink
from .source import Location

logger = logging.getLogger("clilog.otel")

# Semantic-convention keys carrying the location of the logging call, as
# (file key, line key) pairs: current names first, then the deprecated ones.
_SOURCE_KEYS = (
    ("code.file.path", "code.line.number"),
    ("code.filepath", "code.lineno"),
)

# OTel severity INFO (9) corresponds to level INFO (0); both scales step by
# four between DEBUG, INFO, WARN and ERROR.
_SEVERITY_OFFSET = SeverityNumber.INFO.value - INFO


def level_from_severity(severity: SeverityNumber | int | None) -> Level:
    """Map an OTel severity number to a level. Unspecified maps to ``INFO``."""
    if severity is None:
        return INFO
    value = severity.value if isinstance(severity, SeverityNumber) else int(severity)
    if value <= 0:
        return INFO
    return Level(value - _SEVERITY_OFFSET)


def _time_from_ns(timestamp_ns: int | None) -> datetime | None:
    if not timestamp_ns:
        return None
    seconds, ns = divmod(timestamp_ns, 1_000_000_000)
    return datetime.fromtimestamp(seconds, tz=UTC).replace(microsecond=ns // 1000)


def _pop_source(attributes: dict[str, Any]) -> Location | None:
    for file_key, line_key in _SOURCE_KEYS:
        if file_key in attributes and line_key in attributes:
            try:
                line = int(attributes[line_key])
            except (TypeError, ValueError):
                continue
            file = str(attributes.pop(file_key))
            attributes.pop(line_key)
            return Location(file, line)
    return None


def record_from_otel(log_record: Any) -> Record:
    """
    Convert an OTel ``LogRecord`` to a :class:`~clilog.record.Record`.

    The record time is the event timestamp, or the observed timestamp when
    the event has none. Source-location attributes are moved into the
    record's ``source``.
    """
    timestamp = getattr(log_record, "timestamp", None) or getattr(log_record, "observed_timestamp", None)

    raw: Mapping[str, Any] = log_record.attributes or {}
    attributes = dict(raw)
    source = _pop_source(attributes)

    body = log_record.body
    if body is None:
        message = ""
    elif isinstance(body, str):
        message = body
    else:
        message = str(body)

    return Record(
        time=_time_from_ns(timestamp),
        level=level_from_severity(log_record.severity_number),
        message=message,
        attrs=tuple(any_attr(k, v) for k, v in attributes.items()),
        source=source,
    )


# =============================================================================
# CLI Log Record Exporter
# =============================================================================


class CLILogRecordExporter(LogRecordExporter):
    """OTel LogRecordExporter producing one human-readable line per record.

    Records below the handler's minimum level are skipped.

    Example output:
        2026-02-03T10:30:00Z INFO Connection established peer=abc123
        2026-02-03T10:30:01Z WARN slow query db.table=users

    Parameters:
        handler: Handler to write through. Defaults to a
            :class:`~clilog.handler.CLIHandler` writing to stderr.
    """

    def __init__(self, handler: Handler | None = None):
        self._handler = handler if handler is not None else CLIHandler(StreamSink())

    @property
    def handler(self) -> Handler:
        return self._handler

    def export(self, batch: Sequence[Any]) -> LogRecordExportResult:
        """Export log records through the handler.

        Args:
            batch: Sequence of readable log records (anything with a
                ``log_record`` attribute).

        Returns:
            LogRecordExportResult.SUCCESS on success,
            LogRecordExportResult.FAILURE if the handler failed to write.
        """
        try:
            for readable_record in batch:
                record = record_from_otel(readable_record.log_record)
                if self._handler.enabled(record.level):
                    self._handler.handle(record)
            return LogRecordExportResult.SUCCESS
        except Exception:
            logger.warning("Failed to export log records", exc_info=True)
            return LogRecordExportResult.FAILURE

    def shutdown(self) -> None:
        """Shutdown the exporter (no-op; the sink belongs to the caller)."""
        pass

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        """Nothing is buffered: every record is written as it is exported."""
        return True


# =============================================================================
# Provider Configuration
# =============================================================================


def configure_logging(
    service_name: str = "clilog",
    service_version: str = "",
    handler: Handler | None = None,
) -> LoggerProvider:
    """
    Configure an OTel LoggerProvider that writes through a CLI handler.

    Records are exported one at a time with a SimpleLogRecordProcessor, so
    each line reaches the sink as soon as it is emitted.

    Returns the provider for explicit injection -- does NOT set the global
    provider.

    Args:
        service_name: Service identifier for resource attributes.
        service_version: Service version for resource attributes.
        handler: Handler for the exporter; defaults to stderr output.

    Example:
        >>> provider = configure_logging("my-app", handler=CLIHandler(StreamSink()))
        >>> otel_logger = provider.get_logger("my-app")
    """
    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": service_version,
        }
    )

    exporter = CLILogRecordExporter(handler)
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(SimpleLogRecordProcessor(exporter))
    return logger_provider
