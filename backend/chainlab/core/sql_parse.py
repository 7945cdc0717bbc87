"""Mini-SQL Parser — regex-driven parsing of a tiny SELECT/INSERT/CREATE TABLE subset.

Invariants:
    - Quoted literals are masked before any regex runs, so values may contain
      AND, commas, semicolons, parentheses or keywords without breaking the split
    - Keywords are case-insensitive; a single trailing ';' is accepted
    - Unsupported statement kinds parse to None; malformed supported ones raise QueryError
    - Table and column names must be plain identifiers

Design Decisions:
    - Regex over a real grammar: the supported surface is one table, AND-only WHERE,
      ORDER BY and LIMIT; anything richer belongs in the sql backend
    - Statements are frozen dataclasses: parse once, execute against any table mapping
"""

import re
from dataclasses import dataclass
from typing import Any, Sequence

from chainlab.core.errors import QueryError


@dataclass(frozen=True)
class Param:
    """Positional parameter reference ($1 is index 1)."""
    index: int


@dataclass(frozen=True)
class Condition:
    column: str
    operator: str
    operand: Any


@dataclass(frozen=True)
class OrderKey:
    column: str
    descending: bool = False


@dataclass(frozen=True)
class SelectStatement:
    table: str
    columns: tuple[str, ...] | None  # None means "*"
    conditions: tuple[Condition, ...] = ()
    order_by: tuple[OrderKey, ...] = ()
    limit: int | None = None


@dataclass(frozen=True)
class InsertStatement:
    table: str
    columns: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...]


@dataclass(frozen=True)
class CreateTableStatement:
    table: str


Statement = SelectStatement | InsertStatement | CreateTableStatement

OPERATORS = ("=", "!=", "<>", ">", "<", ">=", "<=")

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_PLACEHOLDER = re.compile(r"^\x00(\d+)\x00$")
_PARAM = re.compile(r"^\$(\d+)$")
_INTEGER = re.compile(r"^[+-]?\d+$")
_DECIMAL = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")

_SELECT = re.compile(
    r"^SELECT\s+(?P<columns>.+?)\s+FROM\s+(?P<table>\S+?)"
    r"(?:\s+WHERE\s+(?P<where>.+?))?"
    r"(?:\s+ORDER\s+BY\s+(?P<order>.+?))?"
    r"(?:\s+LIMIT\s+(?P<limit>\S+))?$",
    re.IGNORECASE | re.DOTALL,
)
_INSERT = re.compile(
    r"^INSERT\s+INTO\s+(?P<table>\S+?)\s*\((?P<columns>[^()]*)\)\s*"
    r"VALUES\s*(?P<values>.+)$",
    re.IGNORECASE | re.DOTALL,
)
_VALUES_LIST = re.compile(r"^\s*\([^()]*\)(?:\s*,\s*\([^()]*\))*\s*$", re.DOTALL)
_VALUES_GROUP = re.compile(r"\(([^()]*)\)")
_CREATE_TABLE = re.compile(
    r"^CREATE\s+TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?(?P<table>[^\s(]+)(?:\s*\(.*\))?$",
    re.IGNORECASE | re.DOTALL,
)
_CONDITION = re.compile(
    r"^(?P<column>\S+?)\s*(?P<op>>=|<=|!=|<>|=|>|<)\s*(?P<value>.+)$", re.DOTALL,
)
_AND = re.compile(r"\s+AND\s+", re.IGNORECASE)
_ORDER_KEY = re.compile(r"^(?P<column>\S+?)(?:\s+(?P<dir>ASC|DESC))?$", re.IGNORECASE)


def parse_statement(sql: str) -> Statement | None:
    """Parse one statement. Returns None when the statement kind is unsupported."""
    masked, literals = mask_literals(sql)
    body = masked.strip()
    if body.endswith(";"):
        body = body[:-1].rstrip()
    if not body:
        return None

    keyword = body.split(None, 1)[0].upper()
    if keyword == "SELECT":
        return _parse_select(body, literals, sql)
    if keyword == "INSERT":
        return _parse_insert(body, literals, sql)
    if keyword == "CREATE" and re.match(r"^CREATE\s+TABLE\b", body, re.IGNORECASE):
        return _parse_create(body, sql)
    return None


def mask_literals(sql: str) -> tuple[str, list[str]]:
    """Replace every quoted literal with a \\x00n\\x00 placeholder.

    Both quote styles are treated as string literals; a doubled quote inside a
    literal is an escaped quote.
    """
    out: list[str] = []
    literals: list[str] = []
    i, n = 0, len(sql)
    while i < n:
        ch = sql[i]
        if ch not in ("'", '"'):
            out.append(ch)
            i += 1
            continue
        buf: list[str] = []
        j = i + 1
        while True:
            if j >= n:
                raise QueryError("Unterminated string literal", sql)
            if sql[j] == ch:
                if j + 1 < n and sql[j + 1] == ch:
                    buf.append(ch)
                    j += 2
                    continue
                break
            buf.append(sql[j])
            j += 1
        out.append(f"\x00{len(literals)}\x00")
        literals.append("".join(buf))
        i = j + 1
    return "".join(out), literals


def split_script(text: str) -> list[str]:
    """Split a script on ';' outside quotes, dropping '--' line comments."""
    statements: list[str] = []
    current: list[str] = []
    quote: str | None = None
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if quote:
            current.append(ch)
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
            current.append(ch)
        elif ch == "-" and text.startswith("--", i):
            newline = text.find("\n", i)
            i = n if newline == -1 else newline
            continue
        elif ch == ";":
            statements.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    statements.append("".join(current))
    return [s.strip() for s in statements if s.strip()]


def bind_positional(sql: str, params: Sequence[Any]) -> tuple[str, dict[str, Any]]:
    """Rewrite $n references outside quotes to :p_n named binds."""
    out: list[str] = []
    bound: dict[str, Any] = {}
    quote: str | None = None
    i, n = 0, len(sql)
    while i < n:
        ch = sql[i]
        if quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == "$":
            match = re.match(r"\$(\d+)", sql[i:])
            if match:
                index = int(match.group(1))
                if index < 1 or index > len(params):
                    raise QueryError(
                        f"Parameter ${index} referenced but only {len(params)} supplied", sql,
                    )
                bound[f"p_{index}"] = params[index - 1]
                out.append(f":p_{index}")
                i += match.end()
                continue
        out.append(ch)
        i += 1
    return "".join(out), bound


def parse_literal(token: str, literals: list[str]) -> Any:
    """Turn one masked token into a Python value or a Param."""
    token = token.strip()
    placeholder = _PLACEHOLDER.match(token)
    if placeholder:
        return literals[int(placeholder.group(1))]
    param = _PARAM.match(token)
    if param:
        index = int(param.group(1))
        if index < 1:
            raise QueryError(f"Invalid parameter reference '{token}'")
        return Param(index)
    upper = token.upper()
    if upper == "NULL":
        return None
    if upper in ("TRUE", "FALSE"):
        return upper == "TRUE"
    if _INTEGER.match(token):
        return int(token)
    if _DECIMAL.match(token):
        return float(token)
    return _unmask(token, literals)


def _unmask(text: str, literals: list[str]) -> str:
    return re.sub(r"\x00(\d+)\x00", lambda m: literals[int(m.group(1))], text)


def _identifier(name: str, sql: str) -> str:
    name = name.strip()
    if not _IDENTIFIER.match(name):
        raise QueryError(f"Invalid identifier '{name}'", sql)
    return name


def _parse_select(body: str, literals: list[str], sql: str) -> SelectStatement:
    match = _SELECT.match(body)
    if not match:
        raise QueryError("Unsupported SELECT syntax", sql)

    raw_columns = match.group("columns").strip()
    columns = None if raw_columns == "*" else tuple(
        _identifier(c, sql) for c in raw_columns.split(",")
    )
    conditions = ()
    if match.group("where"):
        conditions = tuple(
            _parse_condition(part, literals, sql)
            for part in _AND.split(match.group("where").strip())
        )
    order_by = ()
    if match.group("order"):
        order_by = tuple(_parse_order_key(part, sql) for part in match.group("order").split(","))
    limit = None
    if match.group("limit") is not None:
        raw_limit = match.group("limit")
        if not raw_limit.isdigit():
            raise QueryError(f"LIMIT must be a non-negative integer, got '{raw_limit}'", sql)
        limit = int(raw_limit)

    return SelectStatement(
        table=_identifier(match.group("table"), sql),
        columns=columns,
        conditions=conditions,
        order_by=order_by,
        limit=limit,
    )


def _parse_condition(text: str, literals: list[str], sql: str) -> Condition:
    match = _CONDITION.match(text.strip())
    if not match:
        raise QueryError(f"Unsupported WHERE condition '{_unmask(text, literals)}'", sql)
    return Condition(
        column=_identifier(match.group("column"), sql),
        operator=match.group("op"),
        operand=parse_literal(match.group("value"), literals),
    )


def _parse_order_key(text: str, sql: str) -> OrderKey:
    match = _ORDER_KEY.match(text.strip())
    if not match:
        raise QueryError(f"Unsupported ORDER BY term '{text.strip()}'", sql)
    direction = (match.group("dir") or "ASC").upper()
    return OrderKey(_identifier(match.group("column"), sql), direction == "DESC")


def _parse_insert(body: str, literals: list[str], sql: str) -> InsertStatement:
    match = _INSERT.match(body)
    if not match or not _VALUES_LIST.match(match.group("values")):
        raise QueryError("Unsupported INSERT syntax", sql)

    columns = tuple(_identifier(c, sql) for c in match.group("columns").split(","))
    rows = []
    for group in _VALUES_GROUP.findall(match.group("values")):
        values = tuple(parse_literal(v, literals) for v in group.split(","))
        if len(values) != len(columns):
            raise QueryError(
                f"INSERT has {len(columns)} columns but {len(values)} values", sql,
            )
        rows.append(values)

    return InsertStatement(
        table=_identifier(match.group("table"), sql),
        columns=columns,
        rows=tuple(rows),
    )


def _parse_create(body: str, sql: str) -> CreateTableStatement:
    match = _CREATE_TABLE.match(body)
    if not match:
        raise QueryError("Unsupported CREATE TABLE syntax", sql)
    return CreateTableStatement(_identifier(match.group("table"), sql))
