from __future__ import annotations
import time
import uuid
from typing import Any, List, Optional, Protocol, Tuple
from logging import Logger, getLogger as logging_getLogger

from ..exceptions import DriverError
from ..log import QueryLog
from ..sqlstring import SqlString

READ_COMMITTED = "READ COMMITTED"
ISOLATION_LEVELS = ("READ UNCOMMITTED", READ_COMMITTED, "REPEATABLE READ", "SERIALIZABLE")


class ResultHeader:
    """
    Outcome of a statement that returns no rows (INSERT, UPDATE, DDL, ...).

    Attributes:
        affected_rows (int): Rows changed by the statement.
        insert_id (Optional[int]): Last auto-generated id, when any.
    """
    __slots__ = ("affected_rows", "insert_id")
    def __init__(self, affected_rows: int = 0, insert_id: Optional[int] = None):
        self.affected_rows = affected_rows
        self.insert_id = insert_id
    def __repr__(self):
        return f"ResultHeader(affected_rows={self.affected_rows!r}, insert_id={self.insert_id!r})"
    def __eq__(self, other):
        if not isinstance(other, ResultHeader):
            return False
        return self.affected_rows == other.affected_rows and self.insert_id == other.insert_id
    def __hash__(self):
        return hash((self.affected_rows, self.insert_id))


class QueryOptions:
    """Execution options passed from the dispatcher to a driver."""
    __slots__ = ("raw", "nest", "transaction", "is_select", "values")
    def __init__(self, raw: bool = True, nest: bool = False, transaction: Optional[TransactionHandle] = None,
                 is_select: bool = False, values: Optional[List[Any]] = None):
        self.raw = raw
        self.nest = nest
        self.transaction = transaction
        self.is_select = is_select
        self.values = values
    def __repr__(self):
        return (f"QueryOptions(raw={self.raw!r}, nest={self.nest!r}, transaction={self.transaction!r}, "
                f"is_select={self.is_select!r})")


class Driver(Protocol):
    """What the dispatcher needs from a connection handle."""

    sqlstring: SqlString

    async def query(self, sql: str, options: QueryOptions) -> Tuple[Any, Any]: ...

    async def transaction(self, isolation_level: str = READ_COMMITTED) -> TransactionHandle: ...

    async def close(self) -> None: ...


class TransactionHandle:
    """
    An open transaction owned by a driver.

    Subclasses implement `_commit`, `_rollback`; `finished` records which of
    the two ended the transaction so later use can be refused.
    """

    def __init__(self, isolation_level: str, logger: Optional[Logger] = None) -> None:
        self.id = uuid.uuid4().hex
        self.isolation_level = isolation_level
        self.finished: Optional[str] = None
        self.logger = logger or logging_getLogger(__name__)

    def ensure_open(self) -> None:
        if self.finished:
            raise DriverError(
                f"{self.finished} has been called on this transaction({self.id}), you can no longer use it."
            )

    async def commit(self) -> None:
        self.ensure_open()
        try:
            await self._commit()
        finally:
            self.finished = "commit"
        self.logger.info(f"COMMIT transaction {self.id}")

    async def rollback(self) -> None:
        self.ensure_open()
        try:
            await self._rollback()
        finally:
            self.finished = "rollback"
        self.logger.info(f"ROLLBACK transaction {self.id}")

    async def _commit(self) -> None:
        raise NotImplementedError

    async def _rollback(self) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, isolation_level={self.isolation_level!r}, finished={self.finished!r})"


class LoggingMixin:
    """Per-query logging through the user supplied `logging` callback."""

    options: Any

    def _log_start(self, label: str, sql: str) -> float:
        if not self.options.benchmark:
            QueryLog(label, sql).emit(self.options.logging)
        return time.perf_counter()

    def _log_end(self, label: str, sql: str, started: float) -> None:
        if self.options.benchmark:
            elapsed = round((time.perf_counter() - started) * 1000, 3)
            QueryLog(label, sql, elapsed).emit(self.options.logging)


def query_label(options: QueryOptions) -> str:
    return options.transaction.id if options.transaction is not None else "default"


def collapse(per_statement: List[Any]) -> Any:
    """A single statement yields its own result set, a batch yields the list."""
    if len(per_statement) == 1:
        return per_statement[0]
    return per_statement
