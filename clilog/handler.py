"""The CLI log handler: formats records as single human-readable lines.

Output format::

    2023-09-20T12:24:43Z INFO path/to/file.py:42 message k=v g.a=1 g.b=2

The timestamp is omitted when the record carries none, the source location
only when :attr:`HandlerOptions.add_source` is set. Attributes are
flattened: keys inside groups are joined with dots.
"""

import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Protocol

from .attrs import Attr, Kind
from .levels import INFO, Leveler, level_name, parse_level, resolve_level
from .record import Record, format_time
from .sinks import Sink


class Handler(Protocol):
    """The back-end interface a :class:`~clilog.logger.Logger` writes to."""

    def enabled(self, level: int) -> bool: ...

    def handle(self, record: Record) -> None: ...

    def with_attrs(self, attrs: Sequence[Attr]) -> "Handler": ...

    def with_group(self, name: str) -> "Handler": ...


@dataclass(frozen=True)
class HandlerOptions:
    """
    Options for a :class:`CLIHandler`. The defaults log ``INFO`` and above
    without source locations.

    Attributes:
        add_source: Write ``file:line`` of the logging call after the level.
        level: Minimum level to log. An int, a level name such as ``"warn"``
            or ``"INFO+2"``, or a :class:`~clilog.levels.LevelVar` to change
            the level at runtime. ``None`` means ``INFO``.
    """

    add_source: bool = False
    level: "int | str | Leveler | None" = None


@dataclass(eq=False)
class _LockedSink:
    """A sink together with the lock serializing writes to it."""

    sink: Sink
    lock: threading.Lock

    def write(self, data: bytes) -> None:
        with self.lock:
            self.sink.write(data)


class CLIHandler:
    """
    Handler producing one line of text per record.

    Handlers derived with :meth:`with_attrs` and :meth:`with_group` share
    the sink and its lock with the handler they came from, so records
    written concurrently from any of them never interleave. Derivation never
    modifies the receiver.

    Example:
        >>> import io
        >>> from clilog.attrs import int_attr
        >>> buf = io.BytesIO()
        >>> h = CLIHandler(buf).with_attrs([int_attr("req", 7)]).with_group("db")
    """

    def __init__(self, sink: Sink, opts: HandlerOptions | None = None):
        opts = opts or HandlerOptions()
        if isinstance(opts.level, str):
            opts = replace(opts, level=parse_level(opts.level))
        self._opts = opts
        self._group = ""  # preformatted group prefix, ends with a dot
        self._attrs = ""  # preformatted attrs, begins with a space
        self._out = _LockedSink(sink, threading.Lock())

    @property
    def options(self) -> HandlerOptions:
        return self._opts

    def _derive(self, *, group: str, attrs: str) -> "CLIHandler":
        handler = object.__new__(type(self))
        handler._opts = self._opts
        handler._group = group
        handler._attrs = attrs
        handler._out = self._out
        return handler

    def enabled(self, level: int) -> bool:
        """Report whether records at ``level`` would be written."""
        return level >= resolve_level(self._opts.level, INFO)  # type: ignore[arg-type]

    def render(self, record: Record) -> bytes:
        """Format ``record`` as one newline-terminated line."""
        parts: list[str] = []
        if record.time is not None:
            parts.append(format_time(record.time) + " ")
        parts.append(level_name(record.level) + " ")
        if self._opts.add_source and record.source is not None:
            location = record.source.resolve()
            if location is not None:
                parts.append(f"{location[0]}:{location[1]} ")
        parts.append(record.message)
        parts.append(self._attrs)
        for attr in record.attrs:
            _append_attr(parts, self._group, attr)
        parts.append("\n")
        return "".join(parts).encode("utf-8")

    def handle(self, record: Record) -> None:
        """
        Write ``record`` to the sink as a single write call.

        Any exception raised by the sink propagates to the caller.
        """
        self._out.write(self.render(record))

    def with_attrs(self, attrs: Iterable[Attr]) -> "CLIHandler":
        """Return a handler that also writes ``attrs`` on every record."""
        parts: list[str] = []
        for attr in attrs:
            _append_attr(parts, self._group, attr)
        return self._derive(group=self._group, attrs=self._attrs + "".join(parts))

    def with_group(self, name: str) -> "CLIHandler":
        """
        Return a handler that qualifies later attribute keys with ``name``.

        Attributes already bound with :meth:`with_attrs` keep their keys.
        """
        if not name:
            return self
        return self._derive(group=self._group + name + ".", attrs=self._attrs)

    def __repr__(self) -> str:
        level = resolve_level(self._opts.level, INFO)  # type: ignore[arg-type]
        return f"CLIHandler(level={level_name(level)}, group={self._group!r})"


def _append_attr(parts: list[str], group: str, attr: Attr) -> None:
    if attr.value.kind is Kind.EMPTY:
        return

    if attr.value.kind is not Kind.GROUP:
        parts.append(f" {group}{attr.key}={attr.value}")
        return

    if attr.key:
        group += attr.key + "."
    for child in attr.value.group():
        _append_attr(parts, group, child)
