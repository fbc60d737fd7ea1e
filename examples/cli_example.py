import sys
import threading
from datetime import timedelta

import reactivex as rx

from clilog import (
    DEBUG,
    CLIHandler,
    HandlerOptions,
    LevelVar,
    Logger,
    Record,
    StreamSink,
    group,
    int_attr,
    log_redirect_to,
)
from clilog.otel import configure_logging

# this example writes a few records to stderr through the different front ends.

level = LevelVar()
handler = CLIHandler(StreamSink(sys.stderr), HandlerOptions(add_source=True, level=level))


def plain():
    logger = Logger(handler)
    logger.info("starting", "version", "0.1.0")
    logger.debug("not shown at the default level")

    level.set(DEBUG)
    logger.debug("now shown", elapsed=timedelta(milliseconds=1500))

    req = logger.with_attrs(request_id=42).with_group("http")
    req.info("served", "status", 200, group("client", int_attr("port", 51234)))


def threads():
    logger = Logger(handler).with_group("worker")

    def work(n):
        worker = logger.with_attrs(id=n)
        for i in range(3):
            worker.info("tick", i=i)

    ts = [threading.Thread(target=work, args=(n,)) for n in range(4)]
    for t in ts:
        t.start()
    for t in ts:
        t.join()


def stream():
    rx.from_([1, Record(None, 0, "from a stream"), 2]).pipe(
        log_redirect_to(handler.with_group("rx"))
    ).subscribe(print)


def otel():
    from opentelemetry._logs import LogRecord, SeverityNumber

    provider = configure_logging("cli-example", handler=handler)
    provider.get_logger("cli-example").emit(
        LogRecord(body="via OpenTelemetry", severity_number=SeverityNumber.WARN, attributes={"k": "v"})
    )
    provider.shutdown()


if __name__ == "__main__":
    plain()
    threads()
    stream()
    otel()
