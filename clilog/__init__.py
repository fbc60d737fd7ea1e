"""Convenience exports for the :mod:`clilog` package."""

from .attrs import (  # noqa: F401
    EMPTY_ATTR,
    Attr,
    Kind,
    Value,
    any_attr,
    any_value,
    attrs_from_args,
    bool_attr,
    duration_attr,
    empty_attr,
    float_attr,
    format_duration,
    group,
    int_attr,
    string_attr,
    time_attr,
)
from .handler import CLIHandler, Handler, HandlerOptions  # noqa: F401
from .levels import (  # noqa: F401
    DEBUG,
    ERROR,
    INFO,
    WARN,
    WARNING,
    Level,
    LevelVar,
    level_name,
    parse_level,
)
from .logger import Logger, get_default_logger, set_default_logger  # noqa: F401
from .mechanism import LogWriteError  # noqa: F401
from .operators import drop_log, keep_log, log_filter, log_redirect_to  # noqa: F401
from .record import Record, format_time  # noqa: F401
from .sinks import FileSink, Sink, StreamSink  # noqa: F401
from .source import FrameSource, Location, capture_source  # noqa: F401

__all__ = [
    # levels
    "Level",
    "LevelVar",
    "DEBUG",
    "INFO",
    "WARN",
    "WARNING",
    "ERROR",
    "level_name",
    "parse_level",

    # attrs
    "Attr",
    "Kind",
    "Value",
    "EMPTY_ATTR",
    "any_attr",
    "any_value",
    "attrs_from_args",
    "bool_attr",
    "duration_attr",
    "empty_attr",
    "float_attr",
    "format_duration",
    "group",
    "int_attr",
    "string_attr",
    "time_attr",

    # records
    "Record",
    "format_time",
    "FrameSource",
    "Location",
    "capture_source",

    # handler
    "Handler",
    "HandlerOptions",
    "CLIHandler",

    # sinks
    "Sink",
    "StreamSink",
    "FileSink",

    # front end
    "Logger",
    "get_default_logger",
    "set_default_logger",

    # reactive operators
    "LogWriteError",
    "keep_log",
    "log_filter",
    "drop_log",
    "log_redirect_to",
]
