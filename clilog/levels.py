"""Ordered severity levels.

A level is an integer: higher means more severe. The named constants are
spaced four apart so that intermediate levels (``INFO+2``) can be used
without colliding with the named ones.
"""

import re
import threading
from typing import Protocol, runtime_checkable


class Level(int):
    """An integer severity level whose ``str()`` is its canonical name."""

    def __str__(self) -> str:
        return level_name(self)

    def __repr__(self) -> str:
        return f"Level({level_name(self)})"

    def level(self) -> "Level":
        return self


DEBUG = Level(-4)
INFO = Level(0)
WARN = Level(4)
WARNING = WARN
ERROR = Level(8)

_NAMES = (("DEBUG", DEBUG), ("INFO", INFO), ("WARN", WARN), ("ERROR", ERROR))
_LEVEL_RE = re.compile(r"^([A-Za-z]+)([+-]\d+)?$")


@runtime_checkable
class Leveler(Protocol):
    """Anything that can report a level, e.g. :class:`LevelVar`."""

    def level(self) -> int: ...


def level_name(level: int) -> str:
    """
    Return the canonical uppercase name of ``level``.

    Levels that fall between the named constants are written relative to
    the nearest lower one, e.g. ``INFO+2``. Levels below ``DEBUG`` are
    written as ``DEBUG-n``.
    """

    def _with_offset(base: str, offset: int) -> str:
        return base if offset == 0 else f"{base}{offset:+d}"

    level = int(level)
    if level < INFO:
        return _with_offset("DEBUG", level - DEBUG)
    if level < WARN:
        return _with_offset("INFO", level - INFO)
    if level < ERROR:
        return _with_offset("WARN", level - WARN)
    return _with_offset("ERROR", level - ERROR)


def parse_level(text: str) -> Level:
    """
    Parse a level name as produced by :func:`level_name`.

    Matching is case-insensitive and ``WARNING`` is accepted for ``WARN``.

    Raises:
        ValueError: If ``text`` is not a level name.
    """
    match = _LEVEL_RE.match(text.strip())
    if match is None:
        raise ValueError(f"Invalid level: {text!r}")

    name = match.group(1).upper()
    if name == "WARNING":
        name = "WARN"
    for candidate, base in _NAMES:
        if candidate == name:
            offset = int(match.group(2) or 0)
            return Level(base + offset)
    raise ValueError(f"Unknown level name: {text!r}")


def resolve_level(leveler: "int | Leveler | None", default: int = INFO) -> Level:
    """Return the current level reported by ``leveler``."""
    if leveler is None:
        return Level(default)
    if isinstance(leveler, int):
        return Level(leveler)
    return Level(leveler.level())


class LevelVar:
    """
    A level that can be changed while handlers are using it.

    Handlers configured with a ``LevelVar`` read it on every call, so
    ``set()`` takes effect immediately for every handler derived from the
    same configuration.
    """

    def __init__(self, level: int = INFO):
        self._lock = threading.Lock()
        self._level = Level(level)

    def level(self) -> Level:
        with self._lock:
            return self._level

    def set(self, level: "int | str") -> None:
        if isinstance(level, str):
            level = parse_level(level)
        with self._lock:
            self._level = Level(level)

    def __repr__(self) -> str:
        return f"LevelVar({level_name(self.level())})"
