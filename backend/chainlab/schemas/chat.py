"""Chat Schemas — plain chat and prompt-chain query.

Invariants:
    - ChatMessage.role limited to system/user/assistant
    - QueryRequest.query stripped and non-empty
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str = Field(max_length=50_000)


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(min_length=1, max_length=200)
    session_id: str | None = Field(None, max_length=128)


class ChatContent(BaseModel):
    content: str


class ChatResponse(BaseModel):
    response: ChatContent


class QueryRequest(BaseModel):
    query: str = Field(min_length=1, max_length=10_000)

    @field_validator("query")
    @classmethod
    def strip_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("query cannot be empty or whitespace")
        return v


class QueryText(BaseModel):
    text: str


class QueryResponse(BaseModel):
    result: QueryText
