"""Document Routes — multipart text extraction, vectorization, store listing.

Invariants:
    - Extraction reads upload bytes in memory; nothing is written to an upload directory
    - The file count is checked before any upload is read, and each upload is read
      only up to max_bytes + 1 (enough to know it is oversized)
    - Parsing, embedding and store IO run in a worker thread, off the event loop
    - Vectorize completes before responding: the response reports the final vector count
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile

from chainlab.api.dependencies import get_document_service
from chainlab.schemas.documents import (
    ExtractedText, ExtractResponse, SkippedFile, StoreListResponse, VectorizeRequest,
    VectorizeResponse,
)
from chainlab.services.document_service import DocumentService, UploadedFile, parse_file_details

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/documents", tags=["documents"])


@router.post("/extract", response_model=ExtractResponse)
async def extract_text(
    files: list[UploadFile] = File(...),
    file_details: str | None = Form(None),
    documents: DocumentService = Depends(get_document_service),
):
    documents.check_file_count(len(files))
    uploads = [
        UploadedFile(f.filename or "", await f.read(documents.max_bytes + 1)) for f in files
    ]
    result = await asyncio.to_thread(
        documents.extract, uploads, parse_file_details(file_details),
    )
    count = len(result.extracted_texts)
    return ExtractResponse(
        message=f"Extracted text from {count} file(s)",
        extracted_texts=[ExtractedText(**t) for t in result.extracted_texts],
        skipped=[SkippedFile(**s) for s in result.skipped],
        document_count=count,
    )


@router.post("/vectorize", response_model=VectorizeResponse)
async def vectorize(
    body: VectorizeRequest, documents: DocumentService = Depends(get_document_service),
):
    summary = await asyncio.to_thread(
        documents.vectorize,
        [t.model_dump() for t in body.extracted_texts],
        append_to_existing=body.append_to_existing,
        store_name=body.store_name,
    )
    if body.append_to_existing:
        message = (
            f"Appended {summary['documents_processed']} document(s) to the vector store, "
            f"adding {summary['vectors_added']} vectors"
        )
    else:
        message = (
            f"Vectorized {summary['documents_processed']} document(s) into "
            f"{summary['chunks_generated']} vectors"
        )
    return VectorizeResponse(message=message, **summary)


@router.get("/stores", response_model=StoreListResponse)
async def list_stores(documents: DocumentService = Depends(get_document_service)):
    stores = await asyncio.to_thread(documents.repository.list_stores)
    return StoreListResponse(stores=stores)
