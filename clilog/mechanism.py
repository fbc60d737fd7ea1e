"""Core error types for :mod:`clilog`."""


class LogWriteError(Exception):
    """
    A sink failed to take a rendered record.

    Raised downstream of :func:`~clilog.operators.log_redirect_to` in place of
    the sink's own error, so that subscribers can tell a lost log line from an
    error raised by the stream itself.

    Attributes:
        exception: The error raised by the sink's ``write``.
        source: Name of the operator or component that was writing.
        note: Short description of what failed.
    """

    def __init__(self, exception: Exception, source: str = "clilog", note: str = "Error writing record"):
        super().__init__(exception)
        self.exception = exception
        self.source = source
        self.note = note

    def __str__(self):
        return f"<{self.source}> {self.note}: {self.exception}"
