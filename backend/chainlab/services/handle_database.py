"""Database Handlers — run_sql_query, get_table_info, list_tables.

Invariants:
    - Rows returned to the model are capped at MAX_TOOL_ROWS (row_count is the full count)
    - An empty result carries message "no results" so the model does not invent rows
    - Missing/invalid input raises InvalidInputError (agent converts it to a tool error)
"""

import logging

from chainlab.core.errors import InvalidInputError
from chainlab.services.database_service import DatabaseService

logger = logging.getLogger(__name__)

MAX_TOOL_ROWS = 50


class DatabaseHandlers:
    """SQL tool handlers over the shared DatabaseService."""

    def __init__(self, database: DatabaseService):
        self.database = database

    async def run_sql_query(self, input_data: dict) -> dict:
        sql = input_data.get("query") or input_data.get("sql")
        if not isinstance(sql, str) or not sql.strip():
            raise InvalidInputError("run_sql_query requires a non-empty 'query'", "query")
        params = input_data.get("params") or []
        if not isinstance(params, list):
            raise InvalidInputError("'params' must be an array", "params")

        rows = await self.database.query(sql, params)
        result = {
            "status": "ok",
            "rows": rows[:MAX_TOOL_ROWS],
            "row_count": len(rows),
        }
        if not rows:
            result["message"] = "no results"
        elif len(rows) > MAX_TOOL_ROWS:
            result["message"] = f"showing first {MAX_TOOL_ROWS} of {len(rows)} rows"
        return result

    async def get_table_info(self, input_data: dict) -> dict:
        table = input_data.get("table")
        if not isinstance(table, str) or not table.strip():
            raise InvalidInputError("get_table_info requires 'table'", "table")
        info = await self.database.table_info(table.strip())
        return {"status": "ok", **info}

    async def list_tables(self, input_data: dict) -> dict:
        tables = await self.database.list_tables()
        return {"status": "ok", "tables": tables}
