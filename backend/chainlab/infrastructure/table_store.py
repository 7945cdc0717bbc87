"""Table Store — in-memory table mapping with optional JSON file persistence.

Invariants:
    - memory mode never touches disk; json mode reads on load() and writes after every mutation
    - load() creates the parent directory and an empty "{}" file when none exists
    - Unsupported statements log a warning and return [] (never raise)
    - A malformed JSON file (bad JSON, not a mapping of lists, a row that is not an object)
      raises DatabaseError at load time
    - close() only writes back a store that loaded successfully
    - Writes go to a temp file then os.replace: a crash never leaves a half-written store

Design Decisions:
    - Parsing/execution live in core/ (sql_parse, sql_execute); this class owns state and IO only
    - asyncio.Lock serializes statements so concurrent requests never interleave a mutation and a save
"""

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Any, Sequence

from chainlab.core.errors import DatabaseError
from chainlab.core.sql_execute import Tables, execute, mutates
from chainlab.core.sql_parse import parse_statement, split_script

logger = logging.getLogger(__name__)


class TableStore:
    """Mini-SQL table store. path=None means memory-only."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else None
        self.tables: Tables = {}
        self._lock = asyncio.Lock()
        self._loaded = False

    @property
    def persistent(self) -> bool:
        return self.path is not None

    def load(self) -> None:
        if self.path is None:
            logger.info("Memory table store ready", extra={"backend": "memory"})
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        if not self.path.exists():
            self.save()
            self._loaded = True
            logger.info(f"Created JSON table store at {self.path}", extra={"backend": "json"})
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise DatabaseError(f"cannot read {self.path}: {e}", "load")
        if not isinstance(data, dict) or not all(isinstance(v, list) for v in data.values()):
            raise DatabaseError(f"{self.path} is not a table mapping", "load")
        if not all(isinstance(row, dict) for rows in data.values() for row in rows):
            raise DatabaseError(f"{self.path} has rows that are not objects", "load")
        self.tables = data
        self._loaded = True
        logger.info(
            f"Loaded JSON table store ({len(self.tables)} tables)", extra={"backend": "json"},
        )

    def save(self) -> None:
        if self.path is None:
            return
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            tmp.write_text(
                json.dumps(self.tables, ensure_ascii=False, indent=2), encoding="utf-8",
            )
            os.replace(tmp, self.path)
        except OSError as e:
            raise DatabaseError(str(e), "save")

    async def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        statement = parse_statement(sql)
        if statement is None:
            logger.warning(f"Unsupported statement ignored: {sql.strip()[:200]}")
            return []
        async with self._lock:
            changed = mutates(self.tables, statement)
            rows = execute(self.tables, statement, params)
            if changed:
                self.save()
        return rows

    async def execute_script(self, script: str) -> int:
        """Run every statement in order. Returns the number of statements run."""
        statements = split_script(script)
        for sql in statements:
            await self.query(sql)
        return len(statements)

    async def execute_sql_file(self, path: str | Path) -> int:
        try:
            script = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise DatabaseError(f"cannot read SQL file {path}: {e}", "read")
        return await self.execute_script(script)

    def list_tables(self) -> list[str]:
        return sorted(self.tables)

    def has_table(self, table: str) -> bool:
        return table in self.tables

    def close(self) -> None:
        # A store whose file failed to load must not overwrite that file.
        if self._loaded:
            self.save()
