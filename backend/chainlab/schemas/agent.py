"""Agent Schemas — tool-using agent requests and the tool trace returned with the answer."""

from pydantic import BaseModel, Field, field_validator


class AgentQueryRequest(BaseModel):
    query: str = Field(min_length=1, max_length=50_000)
    store_name: str | None = Field(None, max_length=64)
    similarity_threshold: float = Field(0.6, ge=0.0, le=1.0)
    session_id: str | None = Field(None, max_length=128)

    @field_validator("query")
    @classmethod
    def strip_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("query cannot be empty or whitespace")
        return v


class ToolCallResponse(BaseModel):
    tool: str
    input: dict
    status: str
    error_code: str | None = None


class AgentQueryResponse(BaseModel):
    answer: str
    tool_calls: list[ToolCallResponse] = []
    iterations: int
    usage: dict[str, int] = {}
    truncated: bool = False
    session_id: str | None = None
