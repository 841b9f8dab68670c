from .connection import DatabaseConnection, create_connection
from .dispatcher import StatementDispatcher, Transaction
from .config import ConnectionOptions, PoolOptions
from .driver import MySQLDriver, SQLiteDriver, ResultHeader, READ_COMMITTED
from .exceptions import (
    SqlDispatcherError,
    ConnectionError,
    TransactionStateError,
    DriverError,
)
from .sqlstring import escape, escape_id, format, raw
from .utils import system_timezone

__all__ = (
    "DatabaseConnection",
    "create_connection",
    "StatementDispatcher",
    "Transaction",
    "ConnectionOptions",
    "PoolOptions",
    "MySQLDriver",
    "SQLiteDriver",
    "ResultHeader",
    "READ_COMMITTED",
    "SqlDispatcherError",
    "ConnectionError",
    "TransactionStateError",
    "DriverError",
    "escape",
    "escape_id",
    "format",
    "raw",
    "system_timezone",
)
