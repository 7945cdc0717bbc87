"""RAG Schemas — knowledge-base question answering, similarity search, session memory.

Invariants:
    - similarity_threshold in [0, 1]; num_results in [1, 50]
    - Long queries are accepted here and truncated by the service (response says so)
"""

from pydantic import BaseModel, Field, field_validator


class RagQueryRequest(BaseModel):
    query: str = Field(min_length=1, max_length=50_000)
    store_name: str | None = Field(None, max_length=64)
    similarity_threshold: float = Field(0.6, ge=0.0, le=1.0)
    use_general_model_fallback: bool = True
    use_web_search: bool = False
    session_id: str | None = Field(None, max_length=128)
    use_agent: bool = False

    @field_validator("query")
    @classmethod
    def strip_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("query cannot be empty or whitespace")
        return v


class SourceResponse(BaseModel):
    source: str
    content: str
    similarity: float


class WebSearchResultResponse(BaseModel):
    title: str
    link: str
    snippet: str
    display_link: str


class RagQueryResponse(BaseModel):
    answer: str
    sources: list[SourceResponse] = []
    used_general_model: bool = False
    used_knowledge_base: bool = False
    used_agent: bool = False
    used_web_search: bool = False
    search_results: list[WebSearchResultResponse] = []
    truncated: bool = False
    session_id: str | None = None


class SearchRequest(BaseModel):
    query: str = Field(min_length=1, max_length=50_000)
    store_name: str | None = Field(None, max_length=64)
    num_results: int = Field(4, ge=1, le=50)
    similarity_threshold: float = Field(0.0, ge=0.0, le=1.0)


class SearchHit(BaseModel):
    content: str
    source: str | None
    metadata: dict
    similarity: float


class SearchResponse(BaseModel):
    results: list[SearchHit]
    count: int


class MemoryClearRequest(BaseModel):
    session_id: str = Field(min_length=1, max_length=128)


class MemoryClearResponse(BaseModel):
    session_id: str
    cleared: bool
