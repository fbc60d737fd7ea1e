"""A thin structured-logging front end over a :class:`~clilog.handler.Handler`.

Provides :class:`Logger` with ``debug``/``info``/``warning``/``error``
methods, and a lazily created default logger writing to stderr.
"""

from datetime import datetime
from typing import Any

from .attrs import Attr, attrs_from_args
from .handler import CLIHandler, Handler
from .levels import DEBUG, ERROR, INFO, WARN
from .record import Record
from .sinks import StreamSink
from .source import capture_source


class Logger:
    """Structured logger emitting :class:`~clilog.record.Record` values.

    Positional arguments after the message are ``key, value`` pairs or
    :class:`~clilog.attrs.Attr` instances; keyword arguments are added after
    them.

    Example:
        >>> logger = Logger(CLIHandler(StreamSink()))
        >>> logger.info("Connection established", "peer", "abc123", port=8765)
        >>> db = logger.with_group("db").with_attrs(table="users")
        >>> db.warning("slow query", elapsed=timedelta(seconds=2))
    """

    def __init__(self, handler: Handler):
        self._handler = handler

    @property
    def handler(self) -> Handler:
        return self._handler

    def enabled(self, level: int) -> bool:
        """Report whether a record at ``level`` would be handled."""
        return self._handler.enabled(level)

    def debug(self, message: str, /, *args: Any, **attrs: Any) -> None:
        self._emit(DEBUG, message, args, attrs)

    def info(self, message: str, /, *args: Any, **attrs: Any) -> None:
        self._emit(INFO, message, args, attrs)

    def warning(self, message: str, /, *args: Any, **attrs: Any) -> None:
        self._emit(WARN, message, args, attrs)

    warn = warning

    def error(self, message: str, /, *args: Any, **attrs: Any) -> None:
        self._emit(ERROR, message, args, attrs)

    def log(self, level: int, message: str, /, *args: Any, **attrs: Any) -> None:
        """Emit a record at an arbitrary level."""
        self._emit(level, message, args, attrs)

    def log_attrs(self, level: int, message: str, *attrs: Attr) -> None:
        """Emit a record whose attributes are already :class:`Attr` values."""
        self._emit(level, message, attrs, {})

    def with_attrs(self, *args: Any, **attrs: Any) -> "Logger":
        """Derive a logger that adds the given attributes to every record.

        Returns the receiver itself when called without arguments.
        """
        if not args and not attrs:
            return self
        return Logger(self._handler.with_attrs(attrs_from_args(args, attrs)))

    def with_group(self, name: str) -> "Logger":
        """Derive a logger whose later attributes are nested under ``name``.

        Returns the receiver itself when ``name`` is empty.
        """
        if not name:
            return self
        return Logger(self._handler.with_group(name))

    def _emit(self, level: int, message: str, args: tuple, attrs: dict) -> None:
        if not self._handler.enabled(level):
            return
        # _emit <- public method <- caller
        source = capture_source(2)
        record = Record(
            time=datetime.now().astimezone(),
            level=level,
            message=message,
            attrs=tuple(attrs_from_args(args, attrs)),
            source=source,
        )
        self._handler.handle(record)


# =============================================================================
# Default Logger
# =============================================================================


_default_logger: Logger | None = None


def get_default_logger() -> Logger:
    """Get or create the default logger.

    The default logger writes ``INFO`` and above to stderr. It is created
    on first use; :func:`set_default_logger` replaces it.
    """
    global _default_logger

    if _default_logger is None:
        _default_logger = Logger(CLIHandler(StreamSink()))
    return _default_logger


def set_default_logger(logger: Logger) -> None:
    global _default_logger
    _default_logger = logger
