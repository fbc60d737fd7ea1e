"""Source-location tokens attached to log records.

Capturing a location is cheap: :func:`capture_source` keeps the caller's
code object and bytecode offset, not the frame. Turning that into a file
name and line number is deferred until a handler actually renders it.
"""

import itertools
import sys
from dataclasses import dataclass
from types import CodeType
from typing import Protocol, runtime_checkable


@runtime_checkable
class Source(Protocol):
    def resolve(self) -> tuple[str, int] | None: ...


@dataclass(frozen=True)
class FrameSource:
    """A position inside a code object, captured from a live frame."""

    code: CodeType
    lasti: int

    def resolve(self) -> tuple[str, int] | None:
        """Return ``(filename, line)``, or ``None`` if the offset has no line."""
        if self.lasti < 0:
            return None
        try:
            # co_positions() yields one entry per 2-byte code unit.
            positions = self.code.co_positions()
            line = next(itertools.islice(positions, self.lasti // 2, None))[0]
        except (AttributeError, StopIteration):
            return None
        if line is None:
            return None
        return self.code.co_filename, line


@dataclass(frozen=True)
class Location:
    """An already-resolved location, e.g. one received from another system."""

    file: str
    line: int

    def resolve(self) -> tuple[str, int] | None:
        return self.file, self.line


def capture_source(depth: int = 0) -> FrameSource | None:
    """
    Capture the position of a caller.

    ``depth=0`` is the function calling ``capture_source``; each increment
    moves one frame further out. Returns ``None`` if the stack is not that
    deep.
    """
    try:
        frame = sys._getframe(depth + 1)
    except ValueError:
        return None
    return FrameSource(frame.f_code, frame.f_lasti)
