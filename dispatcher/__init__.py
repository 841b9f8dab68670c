"""
Statement dispatcher and transaction context.

Public API:

    from async_sql_dispatcher import DatabaseConnection

    db = DatabaseConnection({"database": "shop", "username": "app", "password": "secret"})
    rows = await db.execute("SELECT * FROM orders WHERE id = ?", 7)

    async with db.transaction_scope() as txn:
        await txn.execute("UPDATE orders SET state = ? WHERE id = ?", ["paid", 7])

A dispatcher can wrap any connection handle implementing the driver
protocol; `DatabaseConnection` builds one from configuration.
"""

from .dispatcher import StatementDispatcher   # Core implementation
from .transaction import Transaction          # Transaction context manager
from .callbacks import callbackable, with_callback

from .statement import (
    StatementDescriptor,
    is_read_statement,
    reshape,
)

from .types import (
    Row,
    RowSequence,
    StatementResult,
    StatementResults,
    ExecuteResult,
)

__all__ = [
    # Main entry points
    "StatementDispatcher",
    "Transaction",

    # Extension points
    "StatementDescriptor",
    "is_read_statement",
    "reshape",
    "callbackable",
    "with_callback",

    # Typing helpers
    "Row",
    "RowSequence",
    "StatementResult",
    "StatementResults",
    "ExecuteResult",
]
