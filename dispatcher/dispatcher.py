from __future__ import annotations
from typing import Any, Optional
from logging import Logger, getLogger as logging_getLogger

from ..driver.base import READ_COMMITTED, Driver, QueryOptions, TransactionHandle
from ..exceptions import ConnectionError, TransactionStateError
from ..sqlstring import Raw, SqlString
from .callbacks import callbackable
from .statement import Statement, StatementDescriptor, reshape
from .transaction import Transaction
from .types import ExecuteResult


class StatementDispatcher:
    """
    Executes SQL against a connection handle, optionally inside a transaction.

    A dispatcher is an immutable pairing of a connection handle and an
    optional transaction handle. `begin_transaction` never changes the
    dispatcher it is called on; it returns a new one sharing the same
    connection and owning the new transaction.

        rows = await db.execute("SELECT * FROM users WHERE id = ?", 7)
        header = await db.execute("UPDATE users SET name = ? WHERE id = ?", "Ann", 7)

        txn = await db.begin_transaction()
        try:
            await txn.execute("INSERT INTO audit (msg) VALUES (?)", "renamed")
            await txn.commit()
        except Exception:
            await txn.rollback()
            raise

    Every operation also accepts ``callback=fn`` (see `callbacks`).
    """
    __slots__ = ("_connection", "_transaction", "_sql", "logger")

    def __init__(
        self,
        connection: Optional[Driver],
        transaction: Optional[TransactionHandle] = None,
        logger: Optional[Logger] = None,
    ) -> None:
        self._connection = connection
        self._transaction = transaction
        self._sql: SqlString = getattr(connection, "sqlstring", None) or SqlString()
        self.logger = logger or logging_getLogger(__name__)

    # Properties
    @property
    def connection(self) -> Optional[Driver]:
        return self._connection

    @property
    def transaction(self) -> Optional[TransactionHandle]:
        return self._transaction

    @property
    def in_transaction(self) -> bool:
        return self._transaction is not None

    # SQL formatting
    @callbackable
    def escape_id(self, value: Any, forbid_qualified: bool = False) -> str:
        return self._sql.escape_id(value, forbid_qualified)

    @callbackable
    def escape(self, value: Any, stringify_objects: bool = False) -> str:
        return self._sql.escape(value, stringify_objects)

    @callbackable
    def format(self, sql: str, values: Any = None, stringify_objects: bool = False) -> str:
        return self._sql.format(sql, values, stringify_objects)

    @callbackable
    def raw(self, sql: str) -> Raw:
        return self._sql.raw(sql)

    # Execution
    @callbackable
    async def execute(self, statement: Statement, *params: Any) -> ExecuteResult:
        """
        Execute one statement or a semicolon separated batch.

        Args:
            statement: SQL text, or a mapping with `sql` and optional
                `values`, `nestTables` and `transaction`.
            *params: Values for `?`/`??` placeholders, used when the
                statement carries no `values`. A single list or tuple is
                taken as the whole value list.

        Returns:
            The rows of a read statement exactly as the driver returned
            them; the result of a single mutating statement; or the list of
            results of a batch of mutating statements, in order.

        Raises:
            ConnectionError: If no connection handle is bound.
        """
        if self._connection is None:
            raise ConnectionError("Connection failed.")

        descriptor = StatementDescriptor.build(statement)
        values = descriptor.bound_values(params)
        sql = self._sql.format(descriptor.composed_sql, values)
        options = QueryOptions(
            raw=True,
            nest=descriptor.nest_tables,
            transaction=self._transaction if self._transaction is not None else self._handle_of(descriptor.transaction),
            is_select=descriptor.is_select,
            values=values,
        )

        results, _ = await self._connection.query(sql, options)
        return reshape(results, descriptor.is_select)

    query = execute

    @staticmethod
    def _handle_of(transaction: Any) -> Optional[TransactionHandle]:
        if isinstance(transaction, StatementDispatcher):
            return transaction.transaction
        return transaction

    # Transaction Management
    @callbackable
    async def begin_transaction(self) -> StatementDispatcher:
        """Open a READ COMMITTED transaction and return a dispatcher bound to it."""
        if self._connection is None:
            raise ConnectionError("Connection failed.")
        handle = await self._connection.transaction(READ_COMMITTED)
        return StatementDispatcher(self._connection, handle, self.logger)

    @callbackable
    async def commit(self) -> None:
        if self._transaction is None:
            raise TransactionStateError("Transaction not initiated use begin_transaction before commit.")
        await self._transaction.commit()

    @callbackable
    async def rollback(self) -> None:
        if self._transaction is None:
            raise TransactionStateError("Transaction not initiated use begin_transaction before rollback.")
        await self._transaction.rollback()

    def transaction_scope(self, autocommit: bool = True, logger: Optional[Logger] = None) -> Transaction:
        """
        Context manager that begins a transaction and ends it on exit.

            async with db.transaction_scope() as txn:
                await txn.execute("UPDATE stock SET qty = qty - 1 WHERE id = ?", 3)
        """
        return Transaction(self, autocommit, logger or self.logger)

    # Lifecycle Management
    @callbackable
    async def close(self) -> None:
        """Close the connection handle shared by this dispatcher and its transactions."""
        if self._connection is not None:
            await self._connection.close()

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, StatementDispatcher) and
            self._connection is other._connection and
            self._transaction is other._transaction
        )

    def __hash__(self) -> int:
        return hash((id(self._connection), id(self._transaction)))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(connection={self._connection!r}, transaction={self._transaction!r})"
