"""API route tests — every endpoint through FastAPI with httpx ASGITransport.

Tests cover:
    - Health/readiness checks
    - Chat and prompt-chain query
    - RAG query (knowledge base, fallback, web search, agent mode), search, memory clear
    - Agent query with tool trace
    - Database query/script/tables endpoints and their error statuses
    - Weather report (known city, unknown city -> 502)
    - Document extract (multipart) -> vectorize -> stores round trip
    - Upload limits: oversized files skipped, too many files rejected before reading
    - Error envelope for validation and not-found errors
"""

import json

import pytest

from chainlab.main import app
from tests.services.mock_anthropic import text_response, tool_response


# -- health --------------------------------------------------------------------


@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/v1/health/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_ready(client):
    resp = await client.get("/api/v1/health/ready")
    assert resp.status_code == 200
    assert resp.json()["checks"] == {"database": "healthy", "backend": "memory"}


# -- chat ----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_chat(client, mock_llm):
    mock_llm.queue(text_response("Hi!"))
    resp = await client.post("/api/v1/chat", json={
        "messages": [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "Hello"},
        ],
    })
    assert resp.status_code == 200
    assert resp.json() == {"response": {"content": "Hi!"}}
    assert mock_llm.calls[0]["system"] == "Be brief."


@pytest.mark.asyncio
async def test_query(client, mock_llm):
    mock_llm.queue(text_response("Paris."))
    resp = await client.post("/api/v1/query", json={"query": "  Capital of France?  "})
    assert resp.json() == {"result": {"text": "Paris."}}
    assert mock_llm.calls[0]["messages"][-1]["content"] == "Capital of France?"


@pytest.mark.asyncio
async def test_chat_validation_error_envelope(client):
    resp = await client.post("/api/v1/chat", json={"messages": []})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


# -- rag -----------------------------------------------------------------------


@pytest.mark.asyncio
async def test_rag_query_uses_knowledge_base(client, mock_llm, knowledge_store):
    mock_llm.queue(text_response("It opens at eight."))
    resp = await client.post("/api/v1/rag/query", json={
        "query": "When does the office cafeteria open in the morning?",
        "store_name": knowledge_store,
        "similarity_threshold": 0.1,
        "session_id": "s1",
    })
    body = resp.json()
    assert resp.status_code == 200
    assert body["answer"] == "It opens at eight."
    assert body["used_knowledge_base"] is True
    assert body["sources"][0]["source"] == "facilities.txt"
    assert body["session_id"] == "s1"


@pytest.mark.asyncio
async def test_rag_query_general_fallback(client, mock_llm, knowledge_store):
    mock_llm.queue(text_response("General answer."))
    resp = await client.post("/api/v1/rag/query", json={
        "query": "quantum chromodynamics gluon",
        "store_name": knowledge_store,
        "similarity_threshold": 0.99,
    })
    body = resp.json()
    assert body["used_general_model"] is True
    assert body["sources"] == []


@pytest.mark.asyncio
async def test_rag_query_web_search(client, mock_llm, knowledge_store):
    mock_llm.queue(text_response("About 14 million."))
    resp = await client.post("/api/v1/rag/query", json={
        "query": "Tokyo population",
        "store_name": knowledge_store,
        "similarity_threshold": 0.99,
        "use_web_search": True,
    })
    assert resp.status_code == 200
    body = resp.json()
    assert body["used_web_search"] is True
    assert body["used_general_model"] is False
    assert body["search_results"][0] == {
        "title": "Tokyo population 2024",
        "link": "https://stats.test/tokyo",
        "snippet": "Tokyo has about 14 million residents.",
        "display_link": "stats.test",
    }

@pytest.mark.asyncio
async def test_rag_query_missing_store_is_404(client):
    resp = await client.post("/api/v1/rag/query", json={"query": "anything", "store_name": "nope"})
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


@pytest.mark.asyncio
async def test_rag_query_agent_mode(client, mock_llm, knowledge_store):
    mock_llm.queue(
        tool_response("knowledge_base", {"query": "uploading documents"}),
        text_response("You can upload documents."),
    )
    resp = await client.post("/api/v1/rag/query", json={
        "query": "What does Chainlab support?",
        "store_name": knowledge_store,
        "similarity_threshold": 0.1,
        "use_agent": True,
    })
    body = resp.json()
    assert body["used_agent"] is True
    assert body["used_knowledge_base"] is True
    assert body["answer"] == "You can upload documents."


@pytest.mark.asyncio
async def test_rag_search(client, knowledge_store):
    resp = await client.post("/api/v1/rag/search", json={
        "query": "office cafeteria morning", "store_name": knowledge_store, "num_results": 1,
    })
    body = resp.json()
    assert body["count"] == 1
    assert body["results"][0]["source"] == "facilities.txt"


@pytest.mark.asyncio
async def test_memory_clear(client, mock_llm, knowledge_store):
    mock_llm.queue(text_response("Noted."))
    await client.post("/api/v1/rag/query", json={
        "query": "office cafeteria", "store_name": knowledge_store,
        "similarity_threshold": 0.1, "session_id": "s9",
    })
    first = await client.post("/api/v1/memory/clear", json={"session_id": "s9"})
    second = await client.post("/api/v1/memory/clear", json={"session_id": "s9"})
    assert first.json() == {"session_id": "s9", "cleared": True}
    assert second.json()["cleared"] is False


# -- agent ---------------------------------------------------------------------


@pytest.mark.asyncio
async def test_agent_query_with_tools(client, mock_llm):
    mock_llm.queue(
        tool_response("run_sql_query", {"query": "SELECT COUNT(*) FROM users"}),
        tool_response("list_tables", {}),
        text_response("There are two tables."),
    )
    resp = await client.post("/api/v1/agent/query", json={"query": "What tables exist?"})
    body = resp.json()
    assert resp.status_code == 200
    assert body["answer"] == "There are two tables."
    assert body["iterations"] == 3
    assert [c["tool"] for c in body["tool_calls"]] == ["run_sql_query", "list_tables"]
    assert body["tool_calls"][0]["status"] == "error"
    assert body["usage"]["input_tokens"] == 400

    tool_names = [t["name"] for t in mock_llm.calls[0]["tools"]]
    assert "knowledge_base" not in tool_names
    assert "get_weather" in tool_names


@pytest.mark.asyncio
async def test_agent_query_loop_exceeded(client, mock_llm):
    mock_llm.queue(*[tool_response("list_tables", {}) for _ in range(10)])
    resp = await client.post("/api/v1/agent/query", json={"query": "loop"})
    assert resp.status_code == 500
    assert resp.json()["error"]["code"] == "AGENT_LOOP_EXCEEDED"


# -- database ------------------------------------------------------------------


@pytest.mark.asyncio
async def test_database_query(client):
    resp = await client.post("/api/v1/database/query", json={
        "sql": "SELECT username FROM users WHERE id <= $1 ORDER BY id DESC", "params": [2],
    })
    assert resp.json() == {
        "rows": [{"username": "user2"}, {"username": "user1"}], "row_count": 2,
    }


@pytest.mark.asyncio
async def test_database_bad_query_is_400(client):
    resp = await client.post("/api/v1/database/query", json={"sql": "SELECT * FROM users LIMIT x"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INVALID_QUERY"


@pytest.mark.asyncio
async def test_database_script_and_tables(client):
    resp = await client.post("/api/v1/database/script", json={
        "script": "CREATE TABLE notes (id INTEGER);\nINSERT INTO notes (id, body) VALUES (1, 'x');",
    })
    assert resp.status_code == 200
    assert resp.json()["statements_executed"] == 2

    tables = await client.get("/api/v1/database/tables")
    assert tables.json()["tables"] == ["notes", "users", "weather_records"]

    info = await client.get("/api/v1/database/tables/notes")
    assert info.json()["columns"] == [
        {"name": "id", "inferred_type": "number"},
        {"name": "body", "inferred_type": "string"},
    ]


@pytest.mark.asyncio
async def test_table_info_missing_table(client):
    resp = await client.get("/api/v1/database/tables/ghosts")
    assert resp.status_code == 200
    assert resp.json()["exists"] is False
    tables = await client.get("/api/v1/database/tables")
    assert "ghosts" not in tables.json()["tables"]


# -- weather -------------------------------------------------------------------


@pytest.mark.asyncio
async def test_weather_known_city(client):
    resp = await client.get("/api/v1/weather/Beijing")
    assert resp.status_code == 200
    assert resp.json()["report"].startswith("Weather report for Beijing")


@pytest.mark.asyncio
async def test_weather_unknown_city(client):
    resp = await client.get("/api/v1/weather/Atlantis")
    assert resp.status_code == 502
    assert resp.json()["error"]["code"] == "WEATHER_API_ERROR"


# -- documents -----------------------------------------------------------------


@pytest.mark.asyncio
async def test_extract_vectorize_and_list_stores(client):
    details = json.dumps([{"safe_filename": "u1.txt", "original_filename": "handbook.txt"}])
    extracted = await client.post(
        "/api/v1/documents/extract",
        files=[
            ("files", ("u1.txt", b"Vacation requests go to the team lead.", "text/plain")),
            ("files", ("data.json", b'{"title": "Parking", "body": "Level B2"}', "application/json")),
        ],
        data={"file_details": details},
    )
    body = extracted.json()
    assert extracted.status_code == 200
    assert body["message"] == "Extracted text from 2 file(s)"
    assert [t["filename"] for t in body["extracted_texts"]] == ["handbook.txt", "data.json"]
    assert body["extracted_texts"][1]["text"] == "Parking\nLevel B2"

    vectorized = await client.post("/api/v1/documents/vectorize", json={
        "extracted_texts": body["extracted_texts"], "store_name": "handbook",
    })
    summary = vectorized.json()
    assert summary["message"] == "Vectorized 2 document(s) into 2 vectors"
    assert summary["total_vectors"] == 2

    appended = await client.post("/api/v1/documents/vectorize", json={
        "extracted_texts": [{"filename": "extra.md", "text": "Lunch is at noon."}],
        "store_name": "handbook",
        "append_to_existing": True,
    })
    assert appended.json()["message"].startswith("Appended 1 document(s)")
    assert appended.json()["total_vectors"] == 3

    stores = await client.get("/api/v1/documents/stores")
    assert "handbook" in stores.json()["stores"]


@pytest.mark.asyncio
async def test_extract_unsupported_only(client):
    resp = await client.post(
        "/api/v1/documents/extract",
        files=[("files", ("photo.png", b"\x89PNG", "image/png"))],
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "DOCUMENT_EXTRACTION_FAILED"


@pytest.mark.asyncio
async def test_extract_skips_oversized_upload(client):
    app.state.documents.max_bytes = 16
    resp = await client.post(
        "/api/v1/documents/extract",
        files=[
            ("files", ("small.txt", b"Short note.", "text/plain")),
            ("files", ("big.txt", b"x" * 4096, "text/plain")),
        ],
    )
    body = resp.json()
    assert resp.status_code == 200
    assert [t["filename"] for t in body["extracted_texts"]] == ["small.txt"]
    assert body["skipped"] == [{"filename": "big.txt", "reason": "file exceeds 16 bytes"}]


@pytest.mark.asyncio
async def test_extract_too_many_files_rejected(client):
    app.state.documents.max_files = 2
    resp = await client.post(
        "/api/v1/documents/extract",
        files=[("files", (f"f{i}.txt", b"text", "text/plain")) for i in range(3)],
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "VALIDATION_ERROR"
    assert "Too many files: 3" in resp.json()["error"]["message"]
