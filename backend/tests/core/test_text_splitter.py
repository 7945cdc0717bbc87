"""Text splitter tests — chunk sizes, metadata propagation, argument validation."""

import pytest

from chainlab.core.domain_types import Document
from chainlab.core.errors import InvalidInputError
from chainlab.core.text_splitter import build_splitter, split_documents, split_text


def test_short_text_is_one_chunk():
    assert split_text("just a sentence") == ["just a sentence"]


def test_chunks_respect_chunk_size():
    text = "\n\n".join(f"Paragraph {i} " + "word " * 30 for i in range(10))
    chunks = split_text(text, chunk_size=120, chunk_overlap=20)
    assert len(chunks) > 1
    assert all(len(c) <= 120 for c in chunks)


def test_split_documents_numbers_chunks_per_source():
    docs = [
        Document("alpha " * 100, {"source": "a.txt"}),
        Document("beta", {"source": "b.txt", "file_type": "txt"}),
    ]
    chunks = split_documents(docs, chunk_size=100, chunk_overlap=10)
    a_chunks = [c for c in chunks if c.metadata["source"] == "a.txt"]
    assert [c.metadata["chunk"] for c in a_chunks] == list(range(len(a_chunks)))
    assert chunks[-1].metadata == {"source": "b.txt", "file_type": "txt", "chunk": 0}


def test_blank_documents_produce_no_chunks():
    assert split_documents([Document("   \n\n  ", {"source": "blank.txt"})]) == []


def test_empty_document_list_rejected():
    with pytest.raises(InvalidInputError):
        split_documents([])


@pytest.mark.parametrize("size, overlap", [(0, 0), (100, 100), (100, -1)])
def test_invalid_sizes_rejected(size, overlap):
    with pytest.raises(ValueError):
        build_splitter(size, overlap)
