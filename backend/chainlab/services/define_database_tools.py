"""Database Tool Schemas — Anthropic Tool Use format for the SQL tools.

Invariants:
    - run_sql_query accepts an optional positional params array ($1, $2, ...)
    - get_table_info never creates the table it describes
"""

TOOLS_DATABASE = [
    {
        "name": "run_sql_query",
        "description": (
            "Runs one SQL statement against the application database and returns "
            "the resulting rows as JSON. Supports SELECT (WHERE with AND, ORDER BY, "
            "LIMIT), INSERT and CREATE TABLE. Use $1, $2, ... placeholders with "
            "params for values."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "SQL statement, e.g. SELECT * FROM users",
                },
                "params": {
                    "type": "array",
                    "items": {},
                    "description": "Positional parameter values",
                },
            },
            "required": ["query"],
        },
    },
    {
        "name": "get_table_info",
        "description": (
            "Describes a table: its columns with inferred types and up to five sample rows."
        ),
        "input_schema": {
            "type": "object",
            "properties": {
                "table": {"type": "string", "description": "Table name"},
            },
            "required": ["table"],
        },
    },
    {
        "name": "list_tables",
        "description": "Lists the tables in the application database.",
        "input_schema": {
            "type": "object",
            "properties": {},
            "required": [],
        },
    },
]
