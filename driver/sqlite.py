from __future__ import annotations
import asyncio
import sqlite3
import os
import tempfile
from typing import Any, List, Optional, Tuple
from logging import Logger, getLogger as logging_getLogger

import aiosqlite
from aiosqlite import Connection as AioConnection

from ..config import ConnectionOptions
from ..sqlstring import SqliteString
from .base import (
    READ_COMMITTED,
    ISOLATION_LEVELS,
    LoggingMixin,
    QueryOptions,
    ResultHeader,
    TransactionHandle,
    collapse,
    query_label,
)
from .row_factory import dict_row_factory, shape_rows


def split_statements(script: str) -> List[str]:
    """
    Split a semicolon separated batch into complete SQLite statements.

    Semicolons inside string literals, comments and trigger bodies do not
    split, since a chunk is only emitted once `sqlite3.complete_statement`
    accepts it. An unterminated tail is returned as is so SQLite can report
    the syntax error.

    Examples:
        >>> split_statements("SELECT 1;UPDATE t SET a = 'x;y'")
        ['SELECT 1;', "UPDATE t SET a = 'x;y';"]
    """
    statements = []
    buffer = ""
    for chunk in script.split(";"):
        buffer += chunk + ";"
        if sqlite3.complete_statement(buffer):
            if buffer.strip(" \t\r\n;"):
                statements.append(buffer.strip())
            buffer = ""
    tail = buffer[:-1].strip()
    if tail:
        statements.append(tail)
    return statements


class SQLiteTransaction(TransactionHandle):
    """A transaction running on its own SQLite connection."""

    def __init__(self, connection: AioConnection, isolation_level: str, logger: Optional[Logger] = None) -> None:
        super().__init__(isolation_level, logger)
        self.connection = connection

    async def _commit(self) -> None:
        try:
            await self.connection.execute("COMMIT")
        finally:
            await self.connection.close()

    async def _rollback(self) -> None:
        try:
            await self.connection.execute("ROLLBACK")
        finally:
            await self.connection.close()


class SQLiteDriver(LoggingMixin):
    """
    aiosqlite backed connection handle.

    Statements outside a transaction share one autocommit connection and run
    one batch at a time. Every transaction gets a dedicated connection to
    the same database.
    """

    dialect = "sqlite"

    def __init__(self, options: ConnectionOptions, logger: Optional[Logger] = None) -> None:
        self.options = options
        self.logger = logger or logging_getLogger(__name__)
        self.sqlstring = SqliteString()
        self._memory = not options.storage or options.storage == ":memory:"
        self._database: Optional[str] = None if self._memory else options.storage
        self._uri = not self._memory and options.storage.startswith("file:")
        self._tempdir: Optional[tempfile.TemporaryDirectory] = None
        self._conn: Optional[AioConnection] = None
        self._lock = asyncio.Lock()

    @property
    def database(self) -> Optional[str]:
        """Database path, None for a memory database not opened yet."""
        return self._database

    def _open_memory_database(self) -> None:
        # transactions need connections of their own, so memory data lives in a
        # private WAL file removed on close
        self._tempdir = tempfile.TemporaryDirectory(prefix="sqlite_memory_")
        self._database = os.path.join(self._tempdir.name, "memory.db")

    async def _connect(self) -> AioConnection:
        timeout = self.options.pool.acquire / 1000
        conn = await aiosqlite.connect(self._database, uri=self._uri, isolation_level=None, timeout=timeout)
        conn.row_factory = dict_row_factory
        if self._memory:
            async with conn.execute("PRAGMA journal_mode=WAL"):
                pass
        return conn

    async def _root(self) -> AioConnection:
        if self._conn is None:
            if self._memory and self._database is None:
                self._open_memory_database()
            self._conn = await self._connect()
            self.logger.debug(f"Opened SQLite database: {self._database}")
        return self._conn

    async def query(self, sql: str, options: QueryOptions) -> Tuple[Any, Any]:
        label = query_label(options)
        started = self._log_start(label, sql)
        if options.transaction is not None:
            options.transaction.ensure_open()
            results, metadata = await self._run(options.transaction.connection, sql, options.nest)
        else:
            async with self._lock:
                conn = await self._root()
                results, metadata = await self._run(conn, sql, options.nest)
        self._log_end(label, sql, started)
        return collapse(results), metadata

    async def _run(self, conn: AioConnection, sql: str, nest: bool) -> Tuple[List[Any], List[Any]]:
        results: List[Any] = []
        metadata: List[Any] = []
        for statement in split_statements(sql):
            cursor = await conn.execute(statement)
            try:
                if cursor.description:
                    rows = await cursor.fetchall()
                    results.append(shape_rows(rows, nest))
                else:
                    results.append(ResultHeader(
                        affected_rows=max(cursor.rowcount, 0),
                        insert_id=cursor.lastrowid,
                    ))
                metadata.append(cursor.description)
            finally:
                await cursor.close()
        return results, metadata

    async def transaction(self, isolation_level: str = READ_COMMITTED) -> SQLiteTransaction:
        if isolation_level not in ISOLATION_LEVELS:
            raise ValueError(f"Unknown isolation level: {isolation_level}")
        async with self._lock:
            await self._root()
        conn = await self._connect()
        try:
            await conn.execute("BEGIN")
        except Exception:
            await conn.close()
            raise
        txn = SQLiteTransaction(conn, isolation_level, self.logger)
        self.logger.debug(f"SQLite ignores isolation level {isolation_level} for transaction {txn.id}")
        self.logger.info(f"BEGIN transaction {txn.id} on database: {self._database}")
        return txn

    async def close(self) -> None:
        async with self._lock:
            if self._conn is not None:
                await self._conn.close()
                self._conn = None
            if self._tempdir is not None:
                self._tempdir.cleanup()
                self._tempdir = None
                self._database = None
