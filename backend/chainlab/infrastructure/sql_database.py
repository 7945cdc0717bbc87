"""SQL Database — SQLAlchemy async passthrough for the "sql" backend.

Invariants:
    - Statements run verbatim against the engine; $n placeholders become bound parameters
    - Each query/script runs in its own transaction (engine.begin): commit on success, rollback on error
    - All SQLAlchemy exceptions mapped to DatabaseError (core/errors.py)
    - Connection pool uses pool_pre_ping for stale connection detection

Design Decisions:
    - Engine owned by DatabaseService and disposed on shutdown via lifespan
    - Pool sizing only applied to server databases: SQLite uses SQLAlchemy's default pool
"""

import logging
from typing import Any, Sequence

from sqlalchemy import inspect, text
from sqlalchemy.exc import (
    IntegrityError, OperationalError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import AsyncConnection, create_async_engine

from chainlab.core.errors import DatabaseError
from chainlab.core.sql_parse import bind_positional, split_script

logger = logging.getLogger(__name__)


class SqlDatabase:
    """Real SQL engine behind the same query()/execute_script() surface as TableStore."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        kwargs: dict[str, Any] = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **kwargs)

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        statement, bound = bind_positional(sql, params)
        try:
            async with self.engine.begin() as conn:
                return await self._run(conn, statement, bound)
        except SQLAlchemyError as e:
            raise self._map_error(e)

    async def execute_script(self, script: str) -> int:
        statements = split_script(script)
        try:
            async with self.engine.begin() as conn:
                for sql in statements:
                    await conn.execute(text(sql))
        except SQLAlchemyError as e:
            raise self._map_error(e)
        return len(statements)

    async def list_tables(self) -> list[str]:
        try:
            async with self.engine.connect() as conn:
                names = await conn.run_sync(
                    lambda sync_conn: inspect(sync_conn).get_table_names(),
                )
        except SQLAlchemyError as e:
            raise self._map_error(e)
        return sorted(names)

    async def health_check(self) -> bool:
        """Check database connectivity (for the readiness check)."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def close(self) -> None:
        await self.engine.dispose()

    async def _run(
        self, conn: AsyncConnection, statement: str, bound: dict[str, Any],
    ) -> list[dict[str, Any]]:
        result = await conn.execute(text(statement), bound)
        if not result.returns_rows:
            return []
        return [dict(row) for row in result.mappings().all()]

    def _map_error(self, e: SQLAlchemyError) -> DatabaseError:
        if isinstance(e, IntegrityError):
            logger.error(f"DB integrity error: {e}")
            return DatabaseError("Integrity constraint violated", "commit")
        if isinstance(e, OperationalError):
            logger.error(f"DB operational error: {e}")
            return DatabaseError("Connection or operational error", "execute")
        if isinstance(e, DBAPIError):
            logger.error(f"DB driver error: {e}")
            return DatabaseError("Database driver error", "query")
        logger.error(f"SQLAlchemy error: {e}")
        return DatabaseError("Database operation failed", "unknown")
