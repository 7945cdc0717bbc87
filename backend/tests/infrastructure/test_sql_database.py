"""SQL backend tests — SQLAlchemy async passthrough over a temporary SQLite file.

Tests cover:
    - $n placeholders bound as parameters (quoted '$n' left alone)
    - Scripts run in one transaction; list_tables reflects the engine
    - Driver errors mapped to DatabaseError
"""

import pytest

from chainlab.core.errors import DatabaseError
from chainlab.core.sample_data import SAMPLE_DATABASE_SQL
from chainlab.infrastructure.sql_database import SqlDatabase


@pytest.fixture
async def sql_db(tmp_path):
    db = SqlDatabase(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    yield db
    await db.close()


@pytest.mark.asyncio
async def test_script_and_parameterized_query(sql_db):
    assert await sql_db.execute_script(SAMPLE_DATABASE_SQL) == 4
    rows = await sql_db.query(
        "SELECT username FROM users WHERE id >= $1 AND email != '$2' ORDER BY id", [2],
    )
    assert rows == [{"username": "user2"}, {"username": "user3"}]


@pytest.mark.asyncio
async def test_insert_returns_no_rows(sql_db):
    await sql_db.execute_script("CREATE TABLE notes (id INTEGER, body TEXT)")
    assert await sql_db.query("INSERT INTO notes (id, body) VALUES ($1, $2)", [1, "hi"]) == []
    assert await sql_db.query("SELECT body FROM notes") == [{"body": "hi"}]


@pytest.mark.asyncio
async def test_list_tables(sql_db):
    await sql_db.execute_script(SAMPLE_DATABASE_SQL)
    assert await sql_db.list_tables() == ["users", "weather_records"]


@pytest.mark.asyncio
async def test_missing_table_maps_to_database_error(sql_db):
    with pytest.raises(DatabaseError) as info:
        await sql_db.query("SELECT * FROM nowhere")
    assert info.value.http_status == 503


@pytest.mark.asyncio
async def test_health_check(sql_db):
    assert await sql_db.health_check() is True
