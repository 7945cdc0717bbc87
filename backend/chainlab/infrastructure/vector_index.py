"""Flat Vector Index — in-memory (embedding, document) list with JSON persistence.

Invariants:
    - All vectors in one index share a dimension; the first vector fixes it
    - similarity_search is a full linear scan: cosine score, top-k, then threshold
    - An empty or whitespace query raises InvalidInputError; an empty index returns []
    - Store files live at <base_dir>/<name>.json; names match [A-Za-z0-9_-]{1,64}
    - load() of a missing store raises ResourceNotFoundError (404); an unreadable or
      wrongly shaped file raises DatabaseError
    - Saves write a temp file then os.replace

Design Decisions:
    - JSON over a binary format: stores stay human-inspectable and diffable
    - Score matrix cached as a numpy array and rebuilt lazily after additions
    - Repository resolves names, never raw paths: request input can't escape base_dir
"""

import json
import logging
import os
import re
import uuid
from pathlib import Path
from typing import Any

import numpy as np

from chainlab.core.domain_types import Document, Embedder, ScoredDocument, VectorRecord
from chainlab.core.errors import (
    DatabaseError, DimensionMismatchError, ErrorContext, InvalidInputError,
    ResourceNotFoundError,
)
from chainlab.core.vector_math import cosine_scores, top_k

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1
DEFAULT_K = 4

_STORE_NAME = re.compile(r"^[A-Za-z0-9_-]{1,64}$")


class FlatVectorIndex:
    """Linear-scan cosine index over VectorRecords."""

    def __init__(self, dimension: int | None = None):
        self.dimension = dimension
        self.records: list[VectorRecord] = []
        self._matrix: np.ndarray | None = None

    def __len__(self) -> int:
        return len(self.records)

    def add_documents(self, documents: list[Document], embedder: Embedder) -> int:
        if not documents:
            return 0
        vectors = embedder.embed_documents([d.page_content for d in documents])
        return self.add_vectors(vectors, documents)

    def add_vectors(self, vectors: list[list[float]], documents: list[Document]) -> int:
        if len(vectors) != len(documents):
            raise InvalidInputError(
                f"{len(vectors)} vectors for {len(documents)} documents", "vectors",
            )
        for vector in vectors:
            self._check_dimension(len(vector))
        for vector, doc in zip(vectors, documents):
            self.records.append(VectorRecord(
                id=uuid.uuid4().hex,
                content=doc.page_content,
                embedding=[float(x) for x in vector],
                metadata=dict(doc.metadata),
            ))
        self._matrix = None
        return len(vectors)

    def similarity_search(
        self,
        query: str,
        embedder: Embedder,
        k: int = DEFAULT_K,
        threshold: float = 0.0,
    ) -> list[ScoredDocument]:
        if not query or not query.strip():
            raise InvalidInputError("Query must not be empty", "query")
        if not self.records:
            return []
        return self.search_by_vector(embedder.embed_query(query), k, threshold)

    def search_by_vector(
        self, vector: list[float], k: int = DEFAULT_K, threshold: float = 0.0,
    ) -> list[ScoredDocument]:
        if not self.records:
            return []
        self._check_dimension(len(vector))
        scores = cosine_scores(self._scores_matrix(), np.asarray(vector, dtype=np.float64))
        return [
            ScoredDocument(self.records[i].to_document(), score)
            for i, score in top_k(scores, k, threshold)
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": FORMAT_VERSION,
            "dimension": self.dimension,
            "vectors": [
                {
                    "id": r.id,
                    "content": r.content,
                    "embedding": r.embedding,
                    "metadata": r.metadata,
                }
                for r in self.records
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FlatVectorIndex":
        index = cls(data.get("dimension"))
        for item in data.get("vectors", []):
            embedding = [float(x) for x in item["embedding"]]
            index._check_dimension(len(embedding))
            index.records.append(VectorRecord(
                id=str(item.get("id") or uuid.uuid4().hex),
                content=item.get("content", ""),
                embedding=embedding,
                metadata=dict(item.get("metadata") or {}),
            ))
        return index

    def _check_dimension(self, length: int) -> None:
        if self.dimension is None:
            self.dimension = length
        elif length != self.dimension:
            raise DimensionMismatchError(self.dimension, length)

    def _scores_matrix(self) -> np.ndarray:
        if self._matrix is None:
            self._matrix = np.asarray([r.embedding for r in self.records], dtype=np.float64)
        return self._matrix


class VectorIndexRepository:
    """Named FlatVectorIndex files under one directory."""

    def __init__(self, base_dir: str | Path):
        self.base_dir = Path(base_dir)

    def path_for(self, name: str) -> Path:
        if not _STORE_NAME.match(name or ""):
            raise InvalidInputError(
                f"Invalid vector store name '{name}' (use letters, digits, '_' or '-')",
                "store_name",
            )
        return self.base_dir / f"{name}.json"

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def list_stores(self) -> list[str]:
        if not self.base_dir.is_dir():
            return []
        return sorted(p.stem for p in self.base_dir.glob("*.json"))

    def load(self, name: str) -> FlatVectorIndex:
        path = self.path_for(name)
        if not path.exists():
            raise ResourceNotFoundError(
                "Vector store", name, ErrorContext(store_name=name),
            )
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise DatabaseError(f"cannot read vector store '{name}': {e}", "load")
        try:
            index = FlatVectorIndex.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError, DimensionMismatchError) as e:
            raise DatabaseError(f"corrupt vector store '{name}': {e}", "load")
        logger.info(
            f"Loaded vector store with {len(index)} vectors", extra={"store_name": name},
        )
        return index

    def save(self, name: str, index: FlatVectorIndex) -> None:
        path = self.path_for(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        try:
            tmp.write_text(json.dumps(index.to_dict(), ensure_ascii=False), encoding="utf-8")
            os.replace(tmp, path)
        except OSError as e:
            raise DatabaseError(f"cannot write vector store '{name}': {e}", "save")

    def create(
        self, name: str, documents: list[Document], embedder: Embedder,
    ) -> FlatVectorIndex:
        """Build a fresh index from documents, replacing any existing store."""
        if not documents:
            raise InvalidInputError("No documents to vectorize", "documents")
        index = FlatVectorIndex(embedder.dimension)
        index.add_documents(documents, embedder)
        self.save(name, index)
        logger.info(
            f"Created vector store with {len(index)} vectors", extra={"store_name": name},
        )
        return index

    def append(
        self, name: str, documents: list[Document], embedder: Embedder,
    ) -> tuple[FlatVectorIndex, int, int]:
        """Add documents to a store (created if missing). Returns (index, added, total)."""
        if not documents:
            raise InvalidInputError("No documents to vectorize", "documents")
        index = self.load(name) if self.exists(name) else FlatVectorIndex(embedder.dimension)
        added = index.add_documents(documents, embedder)
        self.save(name, index)
        logger.info(
            f"Added {added} vectors, store now holds {len(index)}", extra={"store_name": name},
        )
        return index, added, len(index)

    def delete(self, name: str) -> bool:
        path = self.path_for(name)
        if not path.exists():
            return False
        path.unlink()
        return True
