"""Database Schemas — ad-hoc SQL queries, scripts and table descriptions."""

from typing import Any

from pydantic import BaseModel, Field


class DatabaseQueryRequest(BaseModel):
    sql: str = Field(min_length=1, max_length=20_000)
    params: list[Any] = Field(default_factory=list, max_length=100)


class DatabaseQueryResponse(BaseModel):
    rows: list[dict[str, Any]]
    row_count: int


class ScriptRequest(BaseModel):
    script: str = Field(min_length=1, max_length=200_000)


class ScriptResponse(BaseModel):
    statements_executed: int


class TablesResponse(BaseModel):
    tables: list[str]


class ColumnInfo(BaseModel):
    name: str
    inferred_type: str


class TableInfoResponse(BaseModel):
    table: str
    exists: bool
    row_count_sample: int
    columns: list[ColumnInfo]
    sample: list[dict[str, Any]]
