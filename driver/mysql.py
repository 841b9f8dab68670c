from __future__ import annotations
import asyncio
import itertools
import weakref
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Tuple
from logging import Logger, getLogger as logging_getLogger

import aiomysql
from pymysql.constants import CLIENT, FIELD_TYPE
from pymysql.converters import conversions

from ..config import ConnectionOptions
from ..sqlstring import SqlString
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
from .row_factory import shape_rows

DATE_FIELD_TYPES = (FIELD_TYPE.DATE, FIELD_TYPE.DATETIME, FIELD_TYPE.TIMESTAMP)

READ_PREFIX = "SELECT"


def split_batch(sql: str) -> List[str]:
    """
    Split a MySQL batch at its top level semicolons.

    Quoted strings and identifiers (with backslash escapes inside quotes),
    ``--``/``#`` line comments and ``/* */`` comments never split. Blank
    pieces are dropped.

    Examples:
        >>> split_batch("SELECT ';' FROM t; UPDATE t SET x = 1")
        ["SELECT ';' FROM t", 'UPDATE t SET x = 1']
    """
    statements = []
    start = i = 0
    n = len(sql)
    while i < n:
        ch = sql[i]
        if ch in "'\"`":
            i += 1
            while i < n and sql[i] != ch:
                if sql[i] == "\\" and ch != "`":
                    i += 1
                i += 1
        elif ch == "#" or (sql.startswith("--", i) and (i + 2 == n or sql[i + 2].isspace())):
            newline = sql.find("\n", i)
            i = n if newline == -1 else newline
        elif sql.startswith("/*", i):
            end = sql.find("*/", i + 2)
            i = n if end == -1 else end + 1
        elif ch == ";":
            statements.append(sql[start:i])
            start = i + 1
        i += 1
    statements.append(sql[start:])
    return [s.strip() for s in statements if s.strip()]


def is_read_only(sql: str) -> bool:
    """True when every statement of the batch is a SELECT."""
    statements = split_batch(sql)
    return bool(statements) and all(s.startswith(READ_PREFIX) for s in statements)


def date_string_conversions() -> Dict[Any, Any]:
    """PyMySQL conversions without date decoders, so those columns stay strings."""
    conv = dict(conversions)
    for field_type in DATE_FIELD_TYPES:
        conv.pop(field_type, None)
    return conv


class MySQLTransaction(TransactionHandle):
    """A transaction pinned to one pooled connection until it finishes."""

    def __init__(self, driver: MySQLDriver, pool: Any, connection: Any,
                 isolation_level: str, logger: Optional[Logger] = None) -> None:
        super().__init__(isolation_level, logger)
        self.driver = driver
        self.pool = pool
        self.connection = connection

    async def _commit(self) -> None:
        try:
            await self.connection.commit()
        finally:
            await self.driver._release(self.pool, self.connection)

    async def _rollback(self) -> None:
        try:
            await self.connection.rollback()
        finally:
            await self.driver._release(self.pool, self.connection)


class MySQLDriver(LoggingMixin):
    """
    aiomysql backed connection handle.

    Pools are created on first use, so bad credentials or an unreachable
    host surface from the first query rather than from construction. With
    replication configured, batches made only of SELECT statements run on
    the read pools (outside a transaction) and everything else goes to the
    write pool.
    """

    dialect = "mysql"

    def __init__(self, options: ConnectionOptions, logger: Optional[Logger] = None) -> None:
        self.options = options
        self.logger = logger or logging_getLogger(__name__)
        self.sqlstring = SqlString()
        self._write_pool: Any = None
        self._read_pools: List[Any] = []
        self._read_cycle: Optional[itertools.cycle] = None
        self._lock = asyncio.Lock()
        self._uses: "weakref.WeakKeyDictionary[Any, int]" = weakref.WeakKeyDictionary()

    def pool_kwargs(self, server: Mapping[str, Any]) -> Dict[str, Any]:
        """Arguments for `aiomysql.create_pool` for one server."""
        pool = self.options.pool
        kwargs: Dict[str, Any] = {
            "host": server["host"],
            "port": server["port"],
            "user": server["username"] or "",
            "password": server["password"] or "",
            "db": server["database"],
            "charset": self.options.charset,
            "client_flag": CLIENT.MULTI_STATEMENTS,
            "autocommit": True,
            "minsize": pool.min,
            "maxsize": pool.max,
            "pool_recycle": pool.idle / 1000 if pool.idle else -1,
        }
        if self.options.timezone:
            kwargs["init_command"] = f"SET time_zone = {self.sqlstring.escape(self.options.timezone)}"
        if self.options.date_strings:
            kwargs["conv"] = date_string_conversions()
        return kwargs

    async def _ensure_pools(self) -> None:
        async with self._lock:
            if self._write_pool is not None:
                return
            replication = self.options.replication or {}
            reads = replication.get("read") or []
            if isinstance(reads, Mapping):
                reads = [reads]

            write = self.options.server(replication.get("write"))
            self._write_pool = await aiomysql.create_pool(**self.pool_kwargs(write))
            self.logger.debug(f"Created MySQL pool for {write['host']}:{write['port']}")
            for read in reads:
                server = self.options.server(read)
                self._read_pools.append(await aiomysql.create_pool(**self.pool_kwargs(server)))
                self.logger.debug(f"Created MySQL read pool for {server['host']}:{server['port']}")
            if self._read_pools:
                self._read_cycle = itertools.cycle(self._read_pools)

    async def _pool_for(self, sql: str, is_select: bool) -> Any:
        await self._ensure_pools()
        if self._read_cycle is not None and is_select and is_read_only(sql):
            return next(self._read_cycle)
        return self._write_pool

    async def _checkout(self, pool: Any) -> Any:
        return await asyncio.wait_for(pool.acquire(), timeout=self.options.pool.acquire / 1000)

    async def _release(self, pool: Any, conn: Any) -> None:
        max_uses = self.options.pool.max_uses
        if max_uses:
            # weak keys: connections the pool drops by itself leave no entry
            uses = self._uses.pop(conn, 0) + 1
            if uses >= max_uses and not conn.closed:
                # the pool drops closed connections instead of reusing them
                conn.close()
                self.logger.debug(f"Discarded MySQL connection after {uses} uses")
            elif not conn.closed:
                self._uses[conn] = uses
        await pool.release(conn)

    @asynccontextmanager
    async def _acquire(self, pool: Any) -> AsyncIterator[Any]:
        conn = await self._checkout(pool)
        try:
            yield conn
        finally:
            await self._release(pool, conn)

    async def query(self, sql: str, options: QueryOptions) -> Tuple[Any, Any]:
        label = query_label(options)
        started = self._log_start(label, sql)
        if options.transaction is not None:
            options.transaction.ensure_open()
            results, metadata = await self._run(options.transaction.connection, sql, options.nest)
        else:
            pool = await self._pool_for(sql, options.is_select)
            async with self._acquire(pool) as conn:
                results, metadata = await self._run(conn, sql, options.nest)
        self._log_end(label, sql, started)
        return collapse(results), metadata

    async def _run(self, conn: Any, sql: str, nest: bool) -> Tuple[List[Any], List[Any]]:
        cursor = await conn.cursor(aiomysql.DictCursor)
        try:
            await cursor.execute(sql)
            results = [await self._statement_result(cursor, nest)]
            metadata = [cursor.description]
            while await cursor.nextset():
                results.append(await self._statement_result(cursor, nest))
                metadata.append(cursor.description)
        finally:
            await cursor.close()
        return results, metadata

    @staticmethod
    async def _statement_result(cursor: Any, nest: bool) -> Any:
        if cursor.description:
            rows = await cursor.fetchall()
            return shape_rows(rows, nest)
        return ResultHeader(affected_rows=cursor.rowcount, insert_id=cursor.lastrowid)

    async def transaction(self, isolation_level: str = READ_COMMITTED) -> MySQLTransaction:
        if isolation_level not in ISOLATION_LEVELS:
            raise ValueError(f"Unknown isolation level: {isolation_level}")
        await self._ensure_pools()
        pool = self._write_pool
        conn = await self._checkout(pool)
        try:
            cursor = await conn.cursor()
            try:
                await cursor.execute(f"SET TRANSACTION ISOLATION LEVEL {isolation_level}")
            finally:
                await cursor.close()
            await conn.begin()
        except Exception:
            await self._release(pool, conn)
            raise
        txn = MySQLTransaction(self, pool, conn, isolation_level, self.logger)
        self.logger.info(f"BEGIN transaction {txn.id} ({isolation_level})")
        return txn

    async def close(self) -> None:
        async with self._lock:
            for pool in [self._write_pool, *self._read_pools]:
                if pool is None:
                    continue
                pool.close()
                await pool.wait_closed()
            self._write_pool = None
            self._read_pools = []
            self._read_cycle = None
