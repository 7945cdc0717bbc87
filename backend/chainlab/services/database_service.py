"""Database Service — one query surface over the memory, json and sql backends.

Invariants:
    - memory/json backends run the mini-SQL engine (TableStore); sql passes through to SQLAlchemy
    - table_info never creates a table as a side effect
    - seed_sample only seeds a store that has no tables yet
    - close() persists json stores and disposes sql engines

Design Decisions:
    - Created in the lifespan and stored on app.state; routes and agent tools receive it
      explicitly (no module-level singleton, no lazy first-use init)
"""

import logging
import re
from pathlib import Path
from typing import Any, Sequence

from chainlab.config import Settings
from chainlab.core.domain_types import DatabaseBackend
from chainlab.core.errors import DatabaseError, QueryError
from chainlab.core.sample_data import SAMPLE_DATABASE_SQL
from chainlab.core.table_describe import describe_rows
from chainlab.infrastructure.sql_database import SqlDatabase
from chainlab.infrastructure.table_store import TableStore

logger = logging.getLogger(__name__)

TABLE_INFO_SAMPLE_ROWS = 5

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class DatabaseService:
    def __init__(
        self,
        backend: DatabaseBackend,
        table_store: TableStore | None = None,
        sql_database: SqlDatabase | None = None,
    ):
        if backend == DatabaseBackend.SQL and sql_database is None:
            raise ValueError("sql backend requires a SqlDatabase")
        if backend != DatabaseBackend.SQL and table_store is None:
            raise ValueError(f"{backend.value} backend requires a TableStore")
        self.backend = backend
        self.table_store = table_store
        self.sql_database = sql_database

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseService":
        backend = settings.database_backend
        if backend == DatabaseBackend.SQL:
            return cls(backend, sql_database=SqlDatabase(
                settings.database_url,
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
            ))
        path = settings.json_db_path if backend == DatabaseBackend.JSON else None
        return cls(backend, table_store=TableStore(path))

    async def init(self, seed_sample: bool = False) -> None:
        if self.table_store is not None:
            self.table_store.load()
        if seed_sample and not await self.list_tables():
            count = await self.execute_script(SAMPLE_DATABASE_SQL)
            logger.info(f"Seeded sample database ({count} statements)")
        logger.info("Database ready", extra={"backend": self.backend.value})

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        if not sql or not sql.strip():
            raise QueryError("SQL statement must not be empty")
        if self.sql_database is not None:
            return await self.sql_database.query(sql, params)
        return await self.table_store.query(sql, params)

    async def execute_script(self, script: str) -> int:
        if self.sql_database is not None:
            return await self.sql_database.execute_script(script)
        return await self.table_store.execute_script(script)

    async def execute_sql_file(self, path: str | Path) -> int:
        if self.table_store is not None:
            return await self.table_store.execute_sql_file(path)
        try:
            script = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise DatabaseError(f"cannot read SQL file {path}: {e}", "read")
        return await self.execute_script(script)

    async def list_tables(self) -> list[str]:
        if self.sql_database is not None:
            return await self.sql_database.list_tables()
        return self.table_store.list_tables()

    async def table_info(self, table: str) -> dict:
        """Column names and JSON type names inferred from the first rows."""
        if not _TABLE_NAME.match(table or ""):
            raise QueryError(f"Invalid table name '{table}'")
        if table not in await self.list_tables():
            return describe_rows(table, [], exists=False)
        rows = await self.query(f"SELECT * FROM {table} LIMIT {TABLE_INFO_SAMPLE_ROWS}")
        return describe_rows(table, rows)

    async def health_check(self) -> bool:
        if self.sql_database is not None:
            return await self.sql_database.health_check()
        return True

    async def close(self) -> None:
        if self.sql_database is not None:
            await self.sql_database.close()
        if self.table_store is not None:
            self.table_store.close()
        logger.info("Database closed", extra={"backend": self.backend.value})
