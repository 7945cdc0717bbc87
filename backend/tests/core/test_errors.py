"""Error hierarchy tests — REST envelope, tool results, status codes."""

import pytest

from chainlab.core.errors import (
    AgentLoopExceededError, AnthropicAPIError, ChainlabError, DatabaseError,
    DimensionMismatchError, DocumentExtractionError, ErrorContext, InvalidInputError,
    QueryError, QuotaExceededError, ResourceNotFoundError, WeatherAPIError,
    WebSearchError,
)


@pytest.mark.parametrize("error, status, code", [
    (QueryError("bad"), 400, "INVALID_QUERY"),
    (InvalidInputError("bad", "query"), 400, "VALIDATION_ERROR"),
    (DimensionMismatchError(3, 4), 400, "DIMENSION_MISMATCH"),
    (DocumentExtractionError("bad"), 400, "DOCUMENT_EXTRACTION_FAILED"),
    (ResourceNotFoundError("Vector store", "kb"), 404, "RESOURCE_NOT_FOUND"),
    (QuotaExceededError("no credit"), 402, "QUOTA_EXCEEDED"),
    (DatabaseError("down", "execute"), 503, "DATABASE_ERROR"),
    (AnthropicAPIError("boom", "unknown"), 503, "ANTHROPIC_API_ERROR"),
    (WeatherAPIError("down"), 502, "WEATHER_API_ERROR"),
    (WebSearchError("down", 500), 502, "WEB_SEARCH_ERROR"),
    (AgentLoopExceededError(5), 500, "AGENT_LOOP_EXCEEDED"),
])
def test_status_and_code(error, status, code):
    assert isinstance(error, ChainlabError)
    assert error.http_status == status
    assert error.code == code


def test_to_response_envelope():
    error = ResourceNotFoundError("Vector store", "kb", ErrorContext(store_name="kb"))
    body = error.to_response()["error"]
    assert body["code"] == "RESOURCE_NOT_FOUND"
    assert body["message"] == "Vector store 'kb' not found"
    assert body["category"] == "resource_not_found"
    assert body["context"]["store_name"] == "kb"


def test_to_tool_result_prefers_user_message():
    assert QueryError("bad sql").to_tool_result() == {
        "status": "error", "error_code": "INVALID_QUERY", "message": "bad sql",
    }
    error = QueryError("bad sql", context=ErrorContext(user_message="try again"))
    assert error.to_tool_result()["message"] == "try again"


def test_retry_after_recorded_in_context():
    error = AnthropicAPIError("slow down", "rate_limit", retry_after_ms=1500)
    assert error.to_response()["error"]["context"]["retry_after_ms"] == 1500
