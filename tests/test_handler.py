"""Tests for CLIHandler formatting, derivation and writing."""

import inspect
import io
import threading
from datetime import UTC, datetime, timedelta, timezone

import pytest

from clilog import (
    DEBUG,
    ERROR,
    INFO,
    WARN,
    CLIHandler,
    HandlerOptions,
    LevelVar,
    Location,
    Record,
    bool_attr,
    duration_attr,
    empty_attr,
    group,
    int_attr,
    string_attr,
)

from conftest import TEST_TIME, FailingSink, SlowSink


CASES = [
    pytest.param(
        None,
        None,
        [string_attr("c", "foo"), bool_attr("b", True)],
        "2023-09-20T12:24:43Z INFO message c=foo b=true",
        id="basic",
    ),
    pytest.param(
        None,
        None,
        [
            string_attr("c", "foo"),
            group("g", int_attr("a", 1), int_attr("d", 4)),
            bool_attr("b", True),
        ],
        "2023-09-20T12:24:43Z INFO message c=foo g.a=1 g.d=4 b=true",
        id="group",
    ),
    pytest.param(
        HandlerOptions(add_source=True),
        None,
        [string_attr("c", "foo"), bool_attr("b", True)],
        "2023-09-20T12:24:43Z INFO $SOURCE message c=foo b=true",
        id="source",
    ),
    pytest.param(
        None,
        lambda l: l.with_attrs("wa", 1, "wb", 2),
        [string_attr("c", "foo"), bool_attr("b", True)],
        "2023-09-20T12:24:43Z INFO message wa=1 wb=2 c=foo b=true",
        id="with_attrs",
    ),
    pytest.param(
        None,
        lambda l: l.with_attrs("wa", 1, "wb", 2).with_group("p1").with_attrs("wc", 3).with_group("p2"),
        [string_attr("c", "foo"), bool_attr("b", True)],
        "2023-09-20T12:24:43Z INFO message wa=1 wb=2 p1.wc=3 p1.p2.c=foo p1.p2.b=true",
        id="with_attrs,with_group",
    ),
]


@pytest.mark.parametrize("opts, with_, attrs, want", CASES)
def test_cli_handler(make_logger, buf, opts, with_, attrs, want):
    logger = make_logger(opts)
    if with_ is not None:
        logger = with_(logger)

    logger.log_attrs(INFO, "message", *attrs)
    line = inspect.currentframe().f_lineno - 1

    # The logging call happens one line before reading f_lineno.
    source = f"{inspect.currentframe().f_code.co_filename}:{line}"

    got = buf.getvalue().decode()
    assert got.endswith("\n")
    assert got.removesuffix("\n") == want.replace("$SOURCE", source)


@pytest.mark.parametrize(
    "min_level, level, want",
    [
        (WARN, DEBUG, False),
        (WARN, INFO, False),
        (WARN, WARN, True),
        (WARN, ERROR, True),
    ],
    ids=["warn debug", "warn info", "warn warn", "warn error"],
)
def test_cli_handler_enabled(min_level, level, want):
    h = CLIHandler(io.BytesIO(), HandlerOptions(level=min_level))
    assert h.enabled(level) is want


class TestEnabled:
    def test_default_level_is_info(self):
        h = CLIHandler(io.BytesIO())
        assert not h.enabled(DEBUG)
        assert not h.enabled(INFO - 1)
        assert h.enabled(INFO)
        assert h.enabled(ERROR + 4)

    def test_level_name_string(self):
        h = CLIHandler(io.BytesIO(), HandlerOptions(level="info+2"))
        assert not h.enabled(INFO + 1)
        assert h.enabled(INFO + 2)

    def test_invalid_level_name_raises(self):
        with pytest.raises(ValueError):
            CLIHandler(io.BytesIO(), HandlerOptions(level="loud"))

    def test_level_var_read_on_every_call(self):
        var = LevelVar(ERROR)
        h = CLIHandler(io.BytesIO(), HandlerOptions(level=var))
        derived = h.with_group("g")
        assert not h.enabled(WARN)

        var.set(WARN)
        assert h.enabled(WARN)
        assert derived.enabled(WARN)

    def test_enabled_does_not_write(self):
        buf = io.BytesIO()
        h = CLIHandler(buf)
        h.enabled(ERROR)
        assert buf.getvalue() == b""


class TestRender:
    def test_no_time_no_leading_space(self):
        h = CLIHandler(io.BytesIO())
        out = h.render(Record(None, INFO, "hello", (int_attr("n", 1),)))
        assert out == b"INFO hello n=1\n"

    def test_level_names_with_offsets(self):
        h = CLIHandler(io.BytesIO())
        assert h.render(Record(None, WARN + 1, "m")) == b"WARN+1 m\n"
        assert h.render(Record(None, DEBUG - 2, "m")) == b"DEBUG-2 m\n"

    def test_non_utc_offset(self):
        h = CLIHandler(io.BytesIO())
        t = datetime(2023, 9, 20, 14, 24, 43, tzinfo=timezone(timedelta(hours=2)))
        assert h.render(Record(t, INFO, "m")) == b"2023-09-20T14:24:43+02:00 INFO m\n"

    def test_four_digit_year(self):
        h = CLIHandler(io.BytesIO())
        t = datetime(999, 12, 31, 23, 59, 59, tzinfo=UTC)
        assert h.render(Record(t, INFO, "m")) == b"0999-12-31T23:59:59Z INFO m\n"

    def test_message_rendered_verbatim(self):
        h = CLIHandler(io.BytesIO())
        out = h.render(Record(None, INFO, 'a "quoted" b=c\tmessage'))
        assert out == b'INFO a "quoted" b=c\tmessage\n'

    def test_empty_attr_contributes_nothing(self):
        h = CLIHandler(io.BytesIO())
        record = Record(None, INFO, "m", (empty_attr(), int_attr("a", 1), empty_attr()))
        assert h.render(record) == b"INFO m a=1\n"

    def test_empty_attr_inside_group_and_bound(self):
        h = CLIHandler(io.BytesIO()).with_attrs([empty_attr()])
        record = Record(None, INFO, "m", (group("g", empty_attr()),))
        assert h.render(record) == b"INFO m\n"

    def test_anonymous_group_adds_no_prefix(self):
        h = CLIHandler(io.BytesIO()).with_group("p")
        record = Record(None, INFO, "m", (group("", int_attr("a", 1), group("g", int_attr("b", 2))),))
        assert h.render(record) == b"INFO m p.a=1 p.g.b=2\n"

    def test_deeply_nested_groups(self):
        attr = int_attr("leaf", 1)
        for name in "edcba":
            attr = group(name, attr)
        h = CLIHandler(io.BytesIO())
        assert h.render(Record(None, INFO, "m", (attr,))) == b"INFO m a.b.c.d.e.leaf=1\n"

    def test_duplicate_keys_kept_in_order(self):
        h = CLIHandler(io.BytesIO())
        record = Record(None, INFO, "m", (int_attr("k", 1), int_attr("k", 2), int_attr("k", 1)))
        assert h.render(record) == b"INFO m k=1 k=2 k=1\n"

    def test_source_resolved(self):
        h = CLIHandler(io.BytesIO(), HandlerOptions(add_source=True))
        out = h.render(Record(None, INFO, "m", source=Location("app.py", 12)))
        assert out == b"INFO app.py:12 m\n"

    def test_source_ignored_without_add_source(self):
        h = CLIHandler(io.BytesIO())
        out = h.render(Record(None, INFO, "m", source=Location("app.py", 12)))
        assert out == b"INFO m\n"

    def test_unresolvable_source_omitted(self):
        class Unresolvable:
            def resolve(self):
                return None

        h = CLIHandler(io.BytesIO(), HandlerOptions(add_source=True))
        out = h.render(Record(None, INFO, "m", source=Unresolvable()))
        assert out == b"INFO m\n"

    def test_non_ascii_encoded_as_utf8(self):
        h = CLIHandler(io.BytesIO())
        out = h.render(Record(None, INFO, "café", (duration_attr("d", timedelta(microseconds=1)),)))
        assert out == "INFO café d=1µs\n".encode("utf-8")


class TestDerivation:
    def test_with_attrs_leaves_receiver_unchanged(self):
        h = CLIHandler(io.BytesIO())
        before = h.render(Record(None, INFO, "m"))
        derived = h.with_attrs([int_attr("a", 1)])

        assert h.render(Record(None, INFO, "m")) == before
        assert derived.render(Record(None, INFO, "m")) == b"INFO m a=1\n"

    def test_with_group_leaves_receiver_unchanged(self):
        h = CLIHandler(io.BytesIO())
        derived = h.with_group("g")
        record = Record(None, INFO, "m", (int_attr("a", 1),))

        assert h.render(record) == b"INFO m a=1\n"
        assert derived.render(record) == b"INFO m g.a=1\n"

    def test_empty_group_returns_receiver(self):
        h = CLIHandler(io.BytesIO()).with_group("p")
        assert h.with_group("") is h

    def test_siblings_are_independent(self):
        root = CLIHandler(io.BytesIO()).with_attrs([int_attr("r", 0)])
        left = root.with_attrs([int_attr("l", 1)])
        right = root.with_group("x").with_attrs([int_attr("r", 2)])
        record = Record(None, INFO, "m")

        assert root.render(record) == b"INFO m r=0\n"
        assert left.render(record) == b"INFO m r=0 l=1\n"
        assert right.render(record) == b"INFO m r=0 x.r=2\n"

    def test_bound_group_attr_flattened_with_current_prefix(self):
        h = CLIHandler(io.BytesIO()).with_group("p").with_attrs([group("g", int_attr("a", 1))])
        assert h.render(Record(None, INFO, "m")) == b"INFO m p.g.a=1\n"

    def test_derived_handlers_share_sink(self):
        buf = io.BytesIO()
        h = CLIHandler(buf)
        h.handle(Record(None, INFO, "one"))
        h.with_group("g").handle(Record(None, INFO, "two"))
        h.with_attrs([int_attr("a", 1)]).handle(Record(None, INFO, "three"))

        assert buf.getvalue() == b"INFO one\nINFO two\nINFO three a=1\n"


class TestHandle:
    def test_single_write_per_record(self):
        class RecordingSink:
            def __init__(self):
                self.writes = []

            def write(self, data):
                self.writes.append(data)

        sink = RecordingSink()
        h = CLIHandler(sink).with_attrs([int_attr("a", 1)])
        h.handle(Record(TEST_TIME, INFO, "m", (group("g", int_attr("b", 2)),)))

        assert sink.writes == [b"2023-09-20T12:24:43Z INFO m a=1 g.b=2\n"]

    def test_write_error_propagates_unchanged(self):
        exc = OSError("disk full")
        h = CLIHandler(FailingSink(exc))

        with pytest.raises(OSError) as info:
            h.handle(Record(None, INFO, "m"))
        assert info.value is exc

    def test_lock_released_after_write_error(self):
        sink = FailingSink()
        h = CLIHandler(sink)
        for _ in range(3):
            with pytest.raises(OSError):
                h.with_group("g").handle(Record(None, INFO, "m"))
        assert sink.calls == 3

    def test_concurrent_writes_do_not_interleave(self):
        sink = SlowSink()
        root = CLIHandler(sink)
        handlers = [root.with_attrs([int_attr("worker", i)]) for i in range(8)]
        per_worker = 25

        def work(h):
            for n in range(per_worker):
                h.handle(Record(TEST_TIME, INFO, "tick", (int_attr("n", n),)))

        threads = [threading.Thread(target=work, args=(h,)) for h in handlers]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sink.max_writers == 1
        lines = sink.getvalue().decode().splitlines()
        assert len(lines) == 8 * per_worker
        for line in lines:
            assert line.startswith("2023-09-20T12:24:43Z INFO tick worker=")
            assert " n=" in line
        for i in range(8):
            got = [line for line in lines if f" worker={i} " in line]
            assert [line.rsplit("n=", 1)[1] for line in got] == [str(n) for n in range(per_worker)]


def test_time_aware_utc_written_as_z():
    h = CLIHandler(io.BytesIO())
    t = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=UTC)
    assert h.render(Record(t, INFO, "m")) == b"2024-01-02T03:04:05Z INFO m\n"
