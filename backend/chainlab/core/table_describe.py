"""Table Description — infer column names and JSON type names from sample rows."""

from typing import Any


def json_type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    return "object"


def describe_rows(table: str, rows: list[dict[str, Any]], exists: bool = True) -> dict:
    """Column list in first-seen order; type taken from the first non-null value."""
    columns: dict[str, str] = {}
    for row in rows:
        for name, value in row.items():
            current = columns.get(name)
            if current is None or (current == "null" and value is not None):
                columns[name] = json_type_name(value)
    return {
        "table": table,
        "exists": exists,
        "row_count_sample": len(rows),
        "columns": [{"name": n, "inferred_type": t} for n, t in columns.items()],
        "sample": rows,
    }
