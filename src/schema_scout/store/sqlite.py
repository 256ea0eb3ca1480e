"""
SQLite store backed by SQLAlchemy's asyncio engine (aiosqlite driver).

Catalog information comes from SQLite PRAGMAs; counts and coverage checks
are plain SQL. Driver failures are mapped onto SchemaInferenceError kinds.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Mapping, Optional, Sequence, Set, Union

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from schema_scout.errors import ErrorKind, SchemaInferenceError, classify_store_error
from schema_scout.models import CoverageCount, StoreColumn
from schema_scout.profiling.literal import quote_identifier as q
from schema_scout.store.base import Store

logger = logging.getLogger(__name__)


def _sqlite_url(database: Union[str, Path]) -> str:
    database = str(database)
    if "://" in database:
        return database
    return f"sqlite+aiosqlite:///{database}"


def _enable_transactional_ddl(engine: AsyncEngine) -> None:
    """Let the store emit BEGIN itself so DDL joins the surrounding transaction."""

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


class StoreTransaction:
    """Statements executed inside one store transaction."""

    def __init__(self, conn: AsyncConnection):
        self._conn = conn

    async def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """
        Execute a driver-level statement (qmark parameters) and return the rowcount.

        Statements are passed to the driver verbatim, so literal text such as
        ``':name'`` is never mistaken for a bind parameter.
        """
        try:
            if params is None:
                result = await self._conn.exec_driver_sql(sql)
            else:
                result = await self._conn.exec_driver_sql(sql, tuple(params))
        except SQLAlchemyError as e:
            raise SchemaInferenceError(
                kind=classify_store_error(e),
                message="Statement failed",
                intent=sql[:120],
                cause=e,
            ) from e
        return result.rowcount


class SqliteStore(Store):
    """
    Store implementation over a SQLite database file.

    The store is an explicit handle: create one per database and pass it to
    every engine call. Usable as an async context manager.

    Example:
        async with SqliteStore("data.db") as store:
            tables = await store.list_tables()
    """

    def __init__(self, database: Union[str, Path], echo: bool = False):
        """
        Initialize the store.

        Args:
            database: Path to a SQLite file or a full SQLAlchemy URL
            echo: Log every SQL statement (debug only)
        """
        self.url = _sqlite_url(database)
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            try:
                self._engine = create_async_engine(self.url, echo=self.echo)
                _enable_transactional_ddl(self._engine)
            except (SQLAlchemyError, ImportError) as e:
                raise SchemaInferenceError(
                    kind=ErrorKind.STORE_UNAVAILABLE,
                    message=f"Cannot create engine for {self.url}",
                    cause=e,
                ) from e
        return self._engine

    async def connect(self) -> None:
        """Open the engine and verify the database is reachable."""
        try:
            async with self.engine.connect() as conn:
                await conn.exec_driver_sql("SELECT 1")
        except SQLAlchemyError as e:
            raise SchemaInferenceError(
                kind=ErrorKind.STORE_UNAVAILABLE,
                message=f"Cannot open store {self.url}",
                cause=e,
            ) from e
        logger.info(f"Connected to {self.url}")

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

    async def __aenter__(self) -> SqliteStore:
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _fetch(
        self,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
        intent: str = "query",
        table: Optional[str] = None,
        column: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        try:
            async with self.engine.connect() as conn:
                if params:
                    result = await conn.execute(text(sql), dict(params))
                else:
                    result = await conn.exec_driver_sql(sql)
                return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            raise SchemaInferenceError(
                kind=classify_store_error(e),
                message=f"{intent} failed",
                table=table,
                column=column,
                intent=intent,
                cause=e,
            ) from e

    async def list_tables(self) -> List[str]:
        rows = await self._fetch(
            "SELECT name FROM sqlite_master "
            "WHERE type = 'table' AND name NOT LIKE 'sqlite_%' ORDER BY name",
            intent="list_tables",
        )
        return [r["name"] for r in rows]

    async def get_columns(self, table: str) -> List[StoreColumn]:
        rows = await self._fetch(
            f"PRAGMA table_info({q(table)})", intent="get_columns", table=table
        )
        # PRAGMA returns nothing for unknown tables instead of failing
        if not rows:
            raise SchemaInferenceError(
                kind=ErrorKind.SCHEMA_CHANGED,
                message=f"no such table: {table}",
                table=table,
                intent="get_columns",
            )
        return [
            StoreColumn(
                name=str(r["name"]),
                declared_type=str(r["type"] or ""),
                not_null=bool(r["notnull"]),
                is_primary_key=bool(r["pk"]),
            )
            for r in sorted(rows, key=lambda r: r["cid"])
        ]

    async def get_unique_index_columns(self, table: str) -> Set[str]:
        uniques: Set[str] = set()
        indexes = await self._fetch(
            f"PRAGMA index_list({q(table)})", intent="index_list", table=table
        )
        for idx in indexes:
            if not idx["unique"]:
                continue
            cols = await self._fetch(
                f"PRAGMA index_info({q(idx['name'])})", intent="index_info", table=table
            )
            if len(cols) == 1 and cols[0]["name"]:
                uniques.add(str(cols[0]["name"]))

        # A single-column primary key is a uniqueness constraint too
        pk_cols = [c.name for c in await self.get_columns(table) if c.is_primary_key]
        if len(pk_cols) == 1:
            uniques.add(pk_cols[0])
        return uniques

    async def count_rows(self, table: str) -> int:
        rows = await self._fetch(
            f"SELECT COUNT(*) AS c FROM {q(table)}", intent="count_rows", table=table
        )
        return int(rows[0]["c"] or 0)

    async def count_distinct_non_null(self, table: str, column: str) -> int:
        rows = await self._fetch(
            f"SELECT COUNT(DISTINCT {q(column)}) AS d FROM {q(table)} "
            f"WHERE {q(column)} IS NOT NULL",
            intent="count_distinct_non_null",
            table=table,
            column=column,
        )
        return int(rows[0]["d"] or 0)

    async def count_matching_keys(
        self,
        child_table: str,
        child_column: str,
        parent_table: str,
        parent_key: str,
    ) -> CoverageCount:
        sql = (
            f"SELECT COUNT(*) AS total, "
            f"COALESCE(SUM(CASE WHEN EXISTS ("
            f"SELECT 1 FROM {q(parent_table)} p "
            f"WHERE CAST(p.{q(parent_key)} AS TEXT) = CAST(c.{q(child_column)} AS TEXT)"
            f") THEN 1 ELSE 0 END), 0) AS matched "
            f"FROM {q(child_table)} c "
            f"WHERE c.{q(child_column)} IS NOT NULL"
        )
        rows = await self._fetch(
            sql,
            intent=f"coverage {parent_table}.{parent_key}",
            table=child_table,
            column=child_column,
        )
        return CoverageCount(matched=int(rows[0]["matched"]), total=int(rows[0]["total"]))

    async def query(
        self,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        return await self._fetch(sql, params, intent="query")

    async def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> int:
        """Execute one statement in its own transaction."""
        async with self.transaction() as tx:
            return await tx.execute(sql, params)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[StoreTransaction]:
        """
        Run statements in a single transaction.

        Commits when the block exits normally and rolls back on any error.
        """
        try:
            async with self.engine.begin() as conn:
                yield StoreTransaction(conn)
        except SQLAlchemyError as e:
            raise SchemaInferenceError(
                kind=classify_store_error(e),
                message="Transaction failed",
                cause=e,
            ) from e
