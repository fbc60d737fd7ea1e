"""Rx operators for streams that carry :class:`~clilog.record.Record` items.

Records can travel through an observable alongside ordinary data; these
operators filter them, drop them, or write them through a handler while the
rest of the stream flows on.
"""

from typing import Any, Callable

from reactivex import Observable
from reactivex import operators as ops

from .handler import Handler
from .levels import INFO
from .mechanism import LogWriteError
from .record import Record


def keep_log(func: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """
    Wrap a mapping function so that records bypass it unchanged.
    """

    def wrapper(x):
        if isinstance(x, Record):
            return x
        else:
            return func(x)

    return wrapper


def log_filter(min_level: int = INFO):
    """
    The operator to keep only records at ``min_level`` or above.
    Non-record items are dropped.
    """
    return ops.filter(lambda item: isinstance(item, Record) and item.level >= min_level)


def drop_log():
    return ops.filter(lambda item: not isinstance(item, Record))


def log_redirect_to(handler: Handler, *, source: str = "log_redirect_to"):
    """
    The operator writes records through ``handler`` and forwards other items.

    Records the handler does not admit are discarded. If the handler fails
    to write, the stream errors with a :class:`LogWriteError` wrapping the
    original exception.
    """

    def _log_redirect_to(upstream: Observable) -> Observable:
        def subscribe(observer, scheduler=None):

            def on_next(value: Any) -> None:
                if not isinstance(value, Record):
                    observer.on_next(value)
                    return

                if not handler.enabled(value.level):
                    return
                try:
                    handler.handle(value)
                except Exception as e:
                    observer.on_error(LogWriteError(e, source=source))

            return upstream.subscribe(
                on_next=on_next,
                on_error=observer.on_error,
                on_completed=observer.on_completed,
                scheduler=scheduler,
            )

        return Observable(subscribe)

    return _log_redirect_to
