"""Attribute values and key/value attributes.

:class:`Value` is a tagged variant over a small set of kinds. Each kind has
one default textual rendering, produced by ``str(value)``; the handler never
inspects the payload of a value beyond its kind.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

BADKEY = "!BADKEY"

# Upper bound on chained ``log_value()`` resolutions.
_MAX_LOG_VALUE_DEPTH = 100


class Kind(Enum):
    EMPTY = "empty"
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    DURATION = "duration"
    TIME = "time"
    GROUP = "group"
    ANY = "any"


@dataclass(frozen=True)
class Value:
    """A tagged attribute value. Use the ``*_value`` helpers to build one."""

    kind: Kind = Kind.EMPTY
    payload: Any = None

    def group(self) -> tuple["Attr", ...]:
        """Return the child attributes of a group value."""
        if self.kind is not Kind.GROUP:
            raise TypeError(f"Value of kind {self.kind.value} is not a group")
        return self.payload

    def __str__(self) -> str:
        match self.kind:
            case Kind.EMPTY:
                return ""
            case Kind.STRING:
                return self.payload
            case Kind.BOOL:
                return "true" if self.payload else "false"
            case Kind.INT:
                return str(self.payload)
            case Kind.FLOAT:
                return repr(self.payload)
            case Kind.DURATION:
                return format_duration(self.payload)
            case Kind.TIME:
                return self.payload.isoformat()
            case Kind.GROUP:
                return "[" + " ".join(f"{a.key}={a.value}" for a in self.payload) + "]"
            case Kind.ANY:
                return str(self.payload)
        raise AssertionError(f"unhandled kind: {self.kind}")


@dataclass(frozen=True)
class Attr:
    """
    A key/value pair. A value of kind GROUP holds nested attributes.

    The zero ``Attr()`` is the empty sentinel: handlers render it as nothing.
    """

    key: str = ""
    value: Value = field(default_factory=Value)

    def is_empty(self) -> bool:
        return self.value.kind is Kind.EMPTY

    def __str__(self) -> str:
        return f"{self.key}={self.value}"


EMPTY_ATTR = Attr()


# =============================================================================
# Value constructors
# =============================================================================


def string_value(v: str) -> Value:
    return Value(Kind.STRING, v)


def bool_value(v: bool) -> Value:
    return Value(Kind.BOOL, bool(v))


def int_value(v: int) -> Value:
    return Value(Kind.INT, int(v))


def float_value(v: float) -> Value:
    return Value(Kind.FLOAT, float(v))


def duration_value(v: timedelta) -> Value:
    return Value(Kind.DURATION, v)


def time_value(v: datetime) -> Value:
    return Value(Kind.TIME, v)


def group_value(*attrs: Attr) -> Value:
    return Value(Kind.GROUP, tuple(attrs))


def any_value(obj: Any) -> Value:
    """
    Convert an arbitrary Python object to a :class:`Value`.

    Objects with a ``log_value()`` method are asked for their value first.
    Mappings become groups whose children keep the mapping's order.
    """
    for _ in range(_MAX_LOG_VALUE_DEPTH):
        resolver = getattr(obj, "log_value", None)
        if resolver is None or isinstance(obj, Value) or not callable(resolver):
            break
        obj = resolver()
    else:
        return Value(Kind.ANY, f"log_value() resolution exceeded {_MAX_LOG_VALUE_DEPTH} steps")

    if isinstance(obj, Value):
        return obj
    if isinstance(obj, str):
        return string_value(obj)
    # bool is a subclass of int
    if isinstance(obj, bool):
        return bool_value(obj)
    if isinstance(obj, int):
        return int_value(obj)
    if isinstance(obj, float):
        return float_value(obj)
    if isinstance(obj, timedelta):
        return duration_value(obj)
    if isinstance(obj, datetime):
        return time_value(obj)
    if isinstance(obj, Mapping):
        return group_value(*(any_attr(str(k), v) for k, v in obj.items()))
    return Value(Kind.ANY, obj)


# =============================================================================
# Attr constructors
# =============================================================================


def string_attr(key: str, v: str) -> Attr:
    return Attr(key, string_value(v))


def bool_attr(key: str, v: bool) -> Attr:
    return Attr(key, bool_value(v))


def int_attr(key: str, v: int) -> Attr:
    return Attr(key, int_value(v))


def float_attr(key: str, v: float) -> Attr:
    return Attr(key, float_value(v))


def duration_attr(key: str, v: timedelta) -> Attr:
    return Attr(key, duration_value(v))


def time_attr(key: str, v: datetime) -> Attr:
    return Attr(key, time_value(v))


def group(key: str, *attrs: Attr) -> Attr:
    """Return a group attribute. An empty ``key`` makes an anonymous group."""
    return Attr(key, group_value(*attrs))


def any_attr(key: str, v: Any) -> Attr:
    return Attr(key, any_value(v))


def empty_attr() -> Attr:
    return EMPTY_ATTR


def attrs_from_args(args: Iterable[Any], kwargs: Mapping[str, Any] | None = None) -> list[Attr]:
    """
    Turn front-end call arguments into attributes.

    Positional arguments are either :class:`Attr` instances or alternating
    ``key, value`` pairs. A trailing key without a value, or any other stray
    item, is kept under the ``!BADKEY`` key. Keyword arguments follow the
    positional ones.
    """
    items = list(args)
    attrs: list[Attr] = []
    i = 0
    while i < len(items):
        item = items[i]
        if isinstance(item, Attr):
            attrs.append(item)
            i += 1
        elif isinstance(item, str) and i + 1 < len(items):
            attrs.append(any_attr(item, items[i + 1]))
            i += 2
        else:
            attrs.append(any_attr(BADKEY, item))
            i += 1

    if kwargs:
        attrs.extend(any_attr(k, v) for k, v in kwargs.items())
    return attrs


# =============================================================================
# Duration formatting
# =============================================================================

_NS_PER_US = 1_000
_NS_PER_MS = 1_000_000
_NS_PER_S = 1_000_000_000


def _with_fraction(value: int, digits: int) -> str:
    whole, frac = divmod(value, 10**digits)
    if frac == 0:
        return str(whole)
    return f"{whole}.{frac:0{digits}d}".rstrip("0")


def format_duration(d: timedelta) -> str:
    """
    Format ``d`` in its shortest unit form, e.g. ``1.5s``, ``2m3s``, ``1h0m0s``,
    ``20ms`` or ``0s``.
    """
    ns = ((d.days * 86_400 + d.seconds) * 1_000_000 + d.microseconds) * _NS_PER_US
    sign = "-" if ns < 0 else ""
    ns = abs(ns)

    if ns == 0:
        return "0s"
    if ns < _NS_PER_US:
        return f"{sign}{ns}ns"
    if ns < _NS_PER_MS:
        return f"{sign}{_with_fraction(ns, 3)}µs"
    if ns < _NS_PER_S:
        return f"{sign}{_with_fraction(ns, 6)}ms"

    total_seconds, frac = divmod(ns, _NS_PER_S)
    text = _with_fraction((total_seconds % 60) * _NS_PER_S + frac, 9) + "s"
    minutes = total_seconds // 60
    if minutes:
        text = f"{minutes % 60}m{text}"
        hours = minutes // 60
        if hours:
            text = f"{hours}h{text}"
    return sign + text
