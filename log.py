from typing import Any, Callable, Optional, Union

# Read statement prepended to every mutating statement by the dispatcher.
INJECTED_STATEMENT = "SELECT 1;"

LoggingCallback = Callable[..., Any]


def strip_injected_statement(sql: str) -> str:
    """
    Remove the first injected no-op read statement from logged SQL.

    Args:
        sql: The SQL text as it is about to be logged.

    Returns:
        str: The text without the first occurrence of ``SELECT 1;``.
    """
    return sql.replace(INJECTED_STATEMENT, "", 1)


def wrap_logging(callback: LoggingCallback) -> LoggingCallback:
    """
    Wrap a user logging callback so it never sees the injected statement.

    Any extra positional arguments (the elapsed time when benchmarking) are
    forwarded untouched.
    """
    def log(sql: str, *rest: Any) -> Any:
        return callback(strip_injected_statement(sql), *rest)
    log.__wrapped__ = callback  # type: ignore[attr-defined]
    return log


class QueryLog:
    """
    One driver execution as shown to the logging callback.

    Values are already inlined into `sql` by the time a driver runs it, so
    the logged text is the statement exactly as sent.
    """
    __slots__ = ("label", "sql", "elapsed")
    def __init__(self, label: str, sql: str, elapsed: Optional[float] = None):
        self.label = label
        self.sql = sql
        self.elapsed = elapsed
    def __repr__(self):
        return f"QueryLog({self.label!r}, {self.sql!r}, {self.elapsed!r})"

    def message(self) -> str:
        verb = "Executing" if self.elapsed is None else "Executed"
        return f"{verb} ({self.label}): {self.sql}"

    def emit(self, logging: Union[LoggingCallback, bool, None]) -> None:
        """Send this record to a logging callback, if one is configured."""
        if not callable(logging):
            return
        if self.elapsed is None:
            logging(self.message())
        else:
            logging(self.message(), self.elapsed)
