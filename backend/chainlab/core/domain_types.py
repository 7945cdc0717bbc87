"""Domain Types — documents, vectors and enums shared across the codebase.

Invariants:
    - Document.metadata is always a dict (never None); "source" names the originating file
    - VectorRecord.embedding is a plain list[float] so records serialize to JSON unchanged
    - All valid backend/mode choices encoded as str Enums, never raw string matching

Design Decisions:
    - dataclasses over pydantic models: core stays free of validation framework concerns
    - Embedder as Protocol: the vector index accepts any object with embed_documents/embed_query,
      the local HashingEmbedder is just the shipped implementation
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol, Sequence


# ─── Enums ───────────────────────────────────────────────────────

class DatabaseBackend(str, Enum):
    """Storage behind DatabaseService."""
    MEMORY = "memory"
    JSON = "json"
    SQL = "sql"


class ChatRole(str, Enum):
    """Roles accepted by the plain chat endpoint."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


# ─── Value Types ─────────────────────────────────────────────────

@dataclass
class Document:
    """A unit of text plus free-form metadata (source file, chunk index, ...)."""
    page_content: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class VectorRecord:
    """One stored (embedding, document) pair."""
    id: str
    content: str
    embedding: list[float]
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_document(self) -> Document:
        return Document(page_content=self.content, metadata=dict(self.metadata))


@dataclass
class ScoredDocument:
    """Similarity search hit."""
    document: Document
    score: float


# ─── Protocols ───────────────────────────────────────────────────

class Embedder(Protocol):
    """Anything that turns text into fixed-length vectors."""
    dimension: int

    def embed_documents(self, texts: Sequence[str]) -> list[list[float]]: ...

    def embed_query(self, text: str) -> list[float]: ...
