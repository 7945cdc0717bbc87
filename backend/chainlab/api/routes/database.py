"""Database Routes — ad-hoc SQL over the configured backend.

Invariants:
    - Query errors are 400 (QueryError), backend failures 503 (DatabaseError)
    - Describing a missing table reports exists=false and creates nothing
"""

import logging

from fastapi import APIRouter, Depends

from chainlab.api.dependencies import get_database
from chainlab.schemas.database import (
    DatabaseQueryRequest, DatabaseQueryResponse, ScriptRequest, ScriptResponse,
    TableInfoResponse, TablesResponse,
)
from chainlab.services.database_service import DatabaseService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/database", tags=["database"])


@router.post("/query", response_model=DatabaseQueryResponse)
async def run_query(
    body: DatabaseQueryRequest, database: DatabaseService = Depends(get_database),
):
    rows = await database.query(body.sql, body.params)
    return DatabaseQueryResponse(rows=rows, row_count=len(rows))


@router.post("/script", response_model=ScriptResponse)
async def run_script(body: ScriptRequest, database: DatabaseService = Depends(get_database)):
    count = await database.execute_script(body.script)
    return ScriptResponse(statements_executed=count)


@router.get("/tables", response_model=TablesResponse)
async def list_tables(database: DatabaseService = Depends(get_database)):
    return TablesResponse(tables=await database.list_tables())


@router.get("/tables/{table}", response_model=TableInfoResponse)
async def table_info(table: str, database: DatabaseService = Depends(get_database)):
    return TableInfoResponse(**await database.table_info(table))
