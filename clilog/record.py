"""The log record handed from a front end to a handler."""

from dataclasses import dataclass, field
from datetime import datetime

from .attrs import Attr
from .source import Source


@dataclass(frozen=True)
class Record:
    """
    One log event, as it was at the moment it was emitted.

    Attributes:
        time: When the event happened. ``None`` means the time is omitted
            from the output.
        level: Severity; see :mod:`clilog.levels`.
        message: The log message, rendered verbatim.
        attrs: Attributes attached to this event only, in order.
        source: Optional location of the logging call.
    """

    time: datetime | None
    level: int
    message: str
    attrs: tuple[Attr, ...] = field(default=())
    source: Source | None = None


def format_time(dt: datetime) -> str:
    """
    Format ``dt`` as an RFC 3339 timestamp with second precision.

    UTC is written as ``Z``; naive datetimes are taken to be local time.
    """
    if dt.tzinfo is None or dt.utcoffset() is None:
        dt = dt.astimezone()

    offset = dt.utcoffset()
    stamp = dt.replace(tzinfo=None).isoformat(timespec="seconds")
    if not offset:
        return stamp + "Z"

    seconds = int(offset.total_seconds())
    sign = "+" if seconds >= 0 else "-"
    hours, minutes = divmod(abs(seconds) // 60, 60)
    return f"{stamp}{sign}{hours:02d}:{minutes:02d}"
