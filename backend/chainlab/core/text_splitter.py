"""Text Splitting — chunk Documents for embedding.

Invariants:
    - Each chunk inherits its source Document's metadata plus "chunk" (0-based per source)
    - chunk_overlap must be smaller than chunk_size
    - Blank chunks are dropped
"""

from langchain_text_splitters import RecursiveCharacterTextSplitter

from chainlab.core.domain_types import Document
from chainlab.core.errors import InvalidInputError

DEFAULT_CHUNK_SIZE = 500
DEFAULT_CHUNK_OVERLAP = 50
SEPARATORS = ["\n\n", "\n", " ", ""]


def build_splitter(
    chunk_size: int = DEFAULT_CHUNK_SIZE, chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> RecursiveCharacterTextSplitter:
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if chunk_overlap < 0 or chunk_overlap >= chunk_size:
        raise ValueError("chunk_overlap must be in [0, chunk_size)")
    return RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        separators=SEPARATORS,
    )


def split_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[str]:
    splitter = build_splitter(chunk_size, chunk_overlap)
    return [c for c in splitter.split_text(text) if c.strip()]


def split_documents(
    documents: list[Document],
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    chunk_overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[Document]:
    """Split every document, keeping metadata and numbering chunks per source."""
    if not documents:
        raise InvalidInputError("No documents to split", "documents")
    splitter = build_splitter(chunk_size, chunk_overlap)
    chunks: list[Document] = []
    for doc in documents:
        pieces = [c for c in splitter.split_text(doc.page_content) if c.strip()]
        for i, piece in enumerate(pieces):
            chunks.append(Document(piece, {**doc.metadata, "chunk": i}))
    return chunks
