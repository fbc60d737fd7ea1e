"""Shared test fixtures for clilog tests."""

import io
import threading
import time
from datetime import UTC, datetime

import pytest

from clilog import CLIHandler, HandlerOptions, Logger, Record

TEST_TIME = datetime(2023, 9, 20, 12, 24, 43, tzinfo=UTC)


class SetTimeHandler:
    """Wraps a handler and stamps every record with a fixed time."""

    def __init__(self, t, h):
        self.t = t
        self.h = h

    def enabled(self, level):
        return self.h.enabled(level)

    def handle(self, record: Record):
        return self.h.handle(
            Record(self.t, record.level, record.message, record.attrs, record.source)
        )

    def with_attrs(self, attrs):
        return SetTimeHandler(self.t, self.h.with_attrs(attrs))

    def with_group(self, name):
        return SetTimeHandler(self.t, self.h.with_group(name))


class FailingSink:
    """A sink whose writes always fail."""

    def __init__(self, exc: Exception | None = None):
        self.exc = exc or OSError("disk full")
        self.calls = 0

    def write(self, data: bytes):
        self.calls += 1
        raise self.exc


class SlowSink:
    """Appends each write one byte at a time, yielding between bytes.

    Unsynchronized concurrent writes to this sink interleave.
    """

    def __init__(self):
        self.chunks: list[bytes] = []
        self.writers = 0
        self.max_writers = 0
        self._count_lock = threading.Lock()

    def write(self, data: bytes):
        with self._count_lock:
            self.writers += 1
            self.max_writers = max(self.max_writers, self.writers)
        try:
            for i in range(len(data)):
                self.chunks.append(data[i:i + 1])
                time.sleep(0)
        finally:
            with self._count_lock:
                self.writers -= 1

    def getvalue(self) -> bytes:
        return b"".join(self.chunks)


@pytest.fixture
def buf():
    return io.BytesIO()


@pytest.fixture
def make_logger(buf):
    """Build a logger writing to ``buf`` with records stamped at TEST_TIME."""

    def _make(opts: HandlerOptions | None = None) -> Logger:
        return Logger(SetTimeHandler(TEST_TIME, CLIHandler(buf, opts)))

    return _make
