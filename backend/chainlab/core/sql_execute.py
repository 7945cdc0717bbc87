"""Mini-SQL Executor — runs parsed statements against an in-memory table mapping.

Invariants:
    - Tables is dict[table_name, list[row_dict]]; row order is insertion order
    - SELECT or INSERT on a missing table creates it empty first
    - WHERE conditions are ANDed; comparison is numeric when both sides read as
      numbers, string otherwise; a missing column satisfies only != / <>
    - Returned rows are copies: callers can never mutate stored rows through a result
    - ORDER BY is stable per key with None last, LIMIT applies after ordering

Design Decisions:
    - Pure function over the mapping: persistence is TableStore's job (infrastructure/)
    - Loose comparison mirrors how ad-hoc JSON data is typed (numbers often arrive as strings)
"""

import re
from typing import Any, Sequence

from chainlab.core.errors import QueryError
from chainlab.core.sql_parse import (
    Condition, CreateTableStatement, InsertStatement, OrderKey, Param,
    SelectStatement, Statement,
)

Tables = dict[str, list[dict[str, Any]]]

_INTEGER = re.compile(r"^\s*[+-]?\d+\s*$")
_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def execute(
    tables: Tables, statement: Statement, params: Sequence[Any] = (),
) -> list[dict[str, Any]]:
    """Execute one statement, mutating tables for INSERT/CREATE."""
    if isinstance(statement, SelectStatement):
        return _select(tables, statement, params)
    if isinstance(statement, InsertStatement):
        return _insert(tables, statement, params)
    if isinstance(statement, CreateTableStatement):
        tables.setdefault(statement.table, [])
        return []
    raise QueryError(f"Cannot execute {type(statement).__name__}")


def mutates(tables: Tables, statement: Statement) -> bool:
    """True when executing statement would change the table mapping."""
    if isinstance(statement, InsertStatement):
        return True
    return statement.table not in tables


def resolve(operand: Any, params: Sequence[Any]) -> Any:
    if not isinstance(operand, Param):
        return operand
    if operand.index > len(params):
        raise QueryError(
            f"Parameter ${operand.index} referenced but only {len(params)} supplied",
        )
    return params[operand.index - 1]


def compare(left: Any, operator: str, right: Any) -> bool:
    """Loose comparison of two stored/literal values."""
    if left is None or right is None:
        if operator == "=":
            return left is None and right is None
        if operator in ("!=", "<>"):
            return not (left is None and right is None)
        return False

    left_num, right_num = _as_number(left), _as_number(right)
    if left_num is not None and right_num is not None:
        a, b = left_num, right_num
    else:
        a, b = _as_text(left), _as_text(right)

    if operator == "=":
        return a == b
    if operator in ("!=", "<>"):
        return a != b
    if operator == ">":
        return a > b
    if operator == "<":
        return a < b
    if operator == ">=":
        return a >= b
    if operator == "<=":
        return a <= b
    raise QueryError(f"Unsupported operator '{operator}'")


def _select(
    tables: Tables, stmt: SelectStatement, params: Sequence[Any],
) -> list[dict[str, Any]]:
    conditions = [
        Condition(c.column, c.operator, resolve(c.operand, params))
        for c in stmt.conditions
    ]
    rows = tables.setdefault(stmt.table, [])
    matched = [row for row in rows if all(_matches(row, c) for c in conditions)]
    if stmt.order_by:
        matched = _order(matched, stmt.order_by)
    if stmt.limit is not None:
        matched = matched[:stmt.limit]
    if stmt.columns is None:
        return [dict(row) for row in matched]
    return [{col: row.get(col) for col in stmt.columns} for row in matched]


def _insert(
    tables: Tables, stmt: InsertStatement, params: Sequence[Any],
) -> list[dict[str, Any]]:
    # Resolve every row before touching the table: a bad parameter inserts nothing.
    new_rows = [
        {col: resolve(value, params) for col, value in zip(stmt.columns, values)}
        for values in stmt.rows
    ]
    tables.setdefault(stmt.table, []).extend(new_rows)
    return [dict(row) for row in new_rows]


def _matches(row: dict[str, Any], cond: Condition) -> bool:
    if cond.column not in row:
        return cond.operator in ("!=", "<>")
    return compare(row[cond.column], cond.operator, cond.operand)


def _order(rows: list[dict], keys: tuple[OrderKey, ...]) -> list[dict]:
    # Least significant key first; each pass is stable.
    for key in reversed(keys):
        present = [r for r in rows if r.get(key.column) is not None]
        missing = [r for r in rows if r.get(key.column) is None]
        present.sort(key=lambda r: _sort_key(r[key.column]), reverse=key.descending)
        rows = present + missing
    return rows


def _sort_key(value: Any) -> tuple[int, int | float, str]:
    number = _as_number(value)
    if number is not None:
        return (0, number, "")
    return (1, 0.0, _as_text(value))


def _as_number(value: Any) -> int | float | None:
    """Integers stay int so values beyond 2**53 compare exactly."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        if _INTEGER.match(value):
            return int(value)
        if _NUMERIC.match(value):
            return float(value)
    return None


def _as_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
