"""Output sinks for rendered log lines.

A sink is anything with a ``write(data: bytes)`` method that raises on
failure; ``io.BytesIO`` and files opened in binary mode qualify as they are.
The adapters here cover text streams and append-only log files.
"""

import io
import os
import sys
from typing import BinaryIO, Protocol, TextIO


class Sink(Protocol):
    def write(self, data: bytes, /) -> object: ...


def _is_binary(stream: object) -> bool:
    if isinstance(stream, (io.RawIOBase, io.BufferedIOBase)):
        return True
    mode = getattr(stream, "mode", None)
    return isinstance(mode, str) and "b" in mode


class StreamSink:
    """
    Write to a text or binary stream, flushing after every write.

    Parameters:
        stream: Target stream. ``None`` means whatever ``sys.stderr`` is at
            the time of each write, so redirections made later are honoured.
        encoding: Used to decode lines for text streams. Binary streams
            (raw or buffered, or opened with a ``b`` mode) get the bytes as
            they are; anything else is treated as a text stream.
    """

    def __init__(self, stream: TextIO | BinaryIO | None = None, *, encoding: str = "utf-8"):
        self._stream = stream
        self._encoding = encoding

    def write(self, data: bytes) -> None:
        stream = self._stream if self._stream is not None else sys.stderr
        if _is_binary(stream):
            stream.write(data)  # type: ignore[arg-type]
        else:
            stream.write(data.decode(self._encoding, errors="replace"))  # type: ignore[arg-type]
        flush = getattr(stream, "flush", None)
        if flush is not None:
            flush()


class FileSink:
    """
    Append to a log file.

    The file is created on the first write, along with any missing parent
    directories, and flushed after every write.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self._path = os.fspath(path)
        self._file: BinaryIO | None = None

    @property
    def path(self) -> str:
        return self._path

    def _ensure_file_open(self) -> BinaryIO:
        if self._file is None or self._file.closed:
            dir_name = os.path.dirname(self._path)
            if dir_name:
                os.makedirs(dir_name, exist_ok=True)
            self._file = open(self._path, "ab")
        return self._file

    def write(self, data: bytes) -> None:
        f = self._ensure_file_open()
        f.write(data)
        f.flush()

    def close(self) -> None:
        """Close the file. Safe to call more than once."""
        if self._file is not None and not self._file.closed:
            self._file.close()
        self._file = None
