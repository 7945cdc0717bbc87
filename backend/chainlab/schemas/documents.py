"""Document Schemas — extraction results and vectorize requests.

Invariants:
    - VectorizeRequest.extracted_texts is non-empty; each item carries filename + text
"""

from typing import Any

from pydantic import BaseModel, Field


class ExtractedText(BaseModel):
    filename: str = Field(min_length=1, max_length=512)
    text: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class SkippedFile(BaseModel):
    filename: str
    reason: str


class ExtractResponse(BaseModel):
    message: str
    extracted_texts: list[ExtractedText]
    skipped: list[SkippedFile] = []
    document_count: int


class VectorizeRequest(BaseModel):
    extracted_texts: list[ExtractedText] = Field(min_length=1)
    append_to_existing: bool = False
    store_name: str | None = Field(None, max_length=64)


class VectorizeResponse(BaseModel):
    message: str
    store_name: str
    documents_processed: int
    processed_document_names: list[str]
    chunks_generated: int
    vectors_added: int
    appended_to_existing: bool
    total_vectors: int


class StoreListResponse(BaseModel):
    stores: list[str]
