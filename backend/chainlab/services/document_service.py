"""Document Service — extract text from uploads and vectorize it into a named store.

Invariants:
    - At most max_files uploads per request, each at most max_bytes
    - Display names: file_details mapping first, then mojibake repair
    - A file that fails extraction is skipped and reported; zero extracted files is an error
    - Only unsupported extensions in the batch -> 400 listing the allowed ones
    - Vectorize: every chunk carries metadata.source = the document's filename

Design Decisions:
    - Upload bytes are handled in memory: no upload directory, nothing to clean up
    - append_to_existing on a missing store creates it (same as a fresh vectorize)
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from chainlab.core.document_text import SUPPORTED_EXTENSIONS, extract_text, is_supported
from chainlab.core.domain_types import Document, Embedder
from chainlab.core.errors import (
    ChainlabError, DocumentExtractionError, ErrorContext, InvalidInputError,
)
from chainlab.core.filename_repair import repair_filename
from chainlab.core.text_splitter import split_documents
from chainlab.infrastructure.vector_index import VectorIndexRepository

logger = logging.getLogger(__name__)


@dataclass
class UploadedFile:
    filename: str
    data: bytes


@dataclass
class ExtractionResult:
    extracted_texts: list[dict[str, Any]] = field(default_factory=list)
    skipped: list[dict[str, str]] = field(default_factory=list)


def parse_file_details(raw: str | None) -> dict[str, str]:
    """safe_filename -> original_filename from the optional JSON form field.

    Malformed input is ignored with a warning: the mapping only improves display names.
    """
    if not raw:
        return {}
    try:
        details = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed file_details field")
        return {}
    if not isinstance(details, list):
        return {}
    mapping = {}
    for item in details:
        if not isinstance(item, dict):
            continue
        safe = item.get("safe_filename") or item.get("safeFilename")
        original = item.get("original_filename") or item.get("originalFilename")
        if safe and original:
            mapping[str(safe)] = str(original)
    return mapping


class DocumentService:
    def __init__(
        self,
        repository: VectorIndexRepository,
        embedder: Embedder,
        default_store: str = "default_vector_store",
        chunk_size: int = 500,
        chunk_overlap: int = 50,
        max_files: int = 10,
        max_bytes: int = 10 * 1024 * 1024,
    ):
        self.repository = repository
        self.embedder = embedder
        self.default_store = default_store
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self.max_files = max_files
        self.max_bytes = max_bytes

    def display_name(self, filename: str, file_details: dict[str, str]) -> str:
        return file_details.get(filename) or repair_filename(filename) or "unnamed"

    def check_file_count(self, count: int) -> None:
        if not count:
            raise InvalidInputError("No files uploaded", "files")
        if count > self.max_files:
            raise InvalidInputError(
                f"Too many files: {count} (maximum {self.max_files})", "files",
            )

    def extract(
        self, files: list[UploadedFile], file_details: dict[str, str] | None = None,
    ) -> ExtractionResult:
        self.check_file_count(len(files))
        details = file_details or {}
        names = [self.display_name(f.filename, details) for f in files]
        if not any(is_supported(n) for n in names):
            raise DocumentExtractionError(
                f"Unsupported file type. Supported: {', '.join(SUPPORTED_EXTENSIONS)}",
            )

        result = ExtractionResult()
        for upload, name in zip(files, names):
            if len(upload.data) > self.max_bytes:
                result.skipped.append({
                    "filename": name,
                    "reason": f"file exceeds {self.max_bytes} bytes",
                })
                continue
            try:
                text, metadata = extract_text(name, upload.data)
            except ChainlabError as e:
                logger.warning(f"Skipping {name}: {e.message}")
                result.skipped.append({"filename": name, "reason": e.message})
                continue
            result.extracted_texts.append({"filename": name, "text": text, "metadata": metadata})

        if not result.extracted_texts:
            raise DocumentExtractionError(
                "No text could be extracted from the uploaded files",
                context=ErrorContext(debug_info={"skipped": result.skipped}),
            )
        logger.info(
            f"Extracted text from {len(result.extracted_texts)} of {len(files)} files",
        )
        return result

    def vectorize(
        self,
        extracted_texts: list[dict[str, Any]],
        append_to_existing: bool = False,
        store_name: str | None = None,
    ) -> dict[str, Any]:
        if not extracted_texts:
            raise InvalidInputError("No extracted texts provided", "extracted_texts")
        name = store_name or self.default_store
        # Validate the name before spending time embedding.
        self.repository.path_for(name)

        documents = []
        for item in extracted_texts:
            text = item.get("text") or ""
            if not text.strip():
                continue
            filename = item.get("filename") or "unknown"
            documents.append(Document(text, {**(item.get("metadata") or {}), "source": filename}))
        if not documents:
            raise InvalidInputError("All extracted texts are empty", "extracted_texts")

        chunks = split_documents(documents, self.chunk_size, self.chunk_overlap)
        if append_to_existing:
            _, added, total = self.repository.append(name, chunks, self.embedder)
        else:
            index = self.repository.create(name, chunks, self.embedder)
            added, total = len(chunks), len(index)

        return {
            "store_name": name,
            "documents_processed": len(documents),
            "processed_document_names": [d.metadata["source"] for d in documents],
            "chunks_generated": len(chunks),
            "vectors_added": added,
            "appended_to_existing": append_to_existing,
            "total_vectors": total,
        }
