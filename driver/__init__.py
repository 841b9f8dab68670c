"""
Driver adapters: the connection handles the dispatcher executes against.

    MySQLDriver   aiomysql pools, multi-statement batches, replication
    SQLiteDriver  aiosqlite, batches split client side

Both return `(results, metadata)` from `query`, where `results` is the
single statement's result set or a list with one result set per statement.
"""
from .base import (
    READ_COMMITTED,
    Driver,
    QueryOptions,
    ResultHeader,
    TransactionHandle,
)
from .mysql import MySQLDriver, MySQLTransaction
from .sqlite import SQLiteDriver, SQLiteTransaction, split_statements
from .row_factory import dict_row_factory, nest_row

__all__ = [
    "READ_COMMITTED",
    "Driver",
    "QueryOptions",
    "ResultHeader",
    "TransactionHandle",
    "MySQLDriver",
    "MySQLTransaction",
    "SQLiteDriver",
    "SQLiteTransaction",
    "split_statements",
    "dict_row_factory",
    "nest_row",
]
