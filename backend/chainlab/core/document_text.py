"""Document Text Extraction — turn uploaded file bytes into plain text.

Invariants:
    - Extension decides the reader; unsupported extensions raise DocumentExtractionError
    - Text files are decoded as UTF-8 with a BOM-tolerant codec; undecodable bytes fail loudly
    - CSV rows become "column: value" lines, one blank line between rows
    - JSON keeps every string leaf, in document order
    - Empty extraction results raise DocumentExtractionError

Design Decisions:
    - Works on bytes (BytesIO), never on paths: upload handling never touches disk
    - pypdf for PDF, python-docx for DOCX (paragraphs + table cells)
"""

import csv
import io
import json
import os
from typing import Any

from docx import Document as DocxDocument
from pypdf import PdfReader

from chainlab.core.errors import DocumentExtractionError

SUPPORTED_EXTENSIONS = (".txt", ".md", ".pdf", ".csv", ".json", ".docx")


def file_extension(filename: str) -> str:
    return os.path.splitext(filename)[1].lower()


def is_supported(filename: str) -> bool:
    return file_extension(filename) in SUPPORTED_EXTENSIONS


def extract_text(filename: str, data: bytes) -> tuple[str, dict[str, Any]]:
    """Return (text, metadata) for one uploaded file."""
    ext = file_extension(filename)
    if ext in (".txt", ".md"):
        text, meta = _decode(filename, data), {}
    elif ext == ".csv":
        text, meta = _csv_text(filename, data)
    elif ext == ".json":
        text, meta = _json_text(filename, data)
    elif ext == ".pdf":
        text, meta = _pdf_text(filename, data)
    elif ext == ".docx":
        text, meta = _docx_text(filename, data)
    else:
        raise DocumentExtractionError(
            f"Unsupported file type '{ext}'. Supported: {', '.join(SUPPORTED_EXTENSIONS)}",
            filename,
        )
    if not text.strip():
        raise DocumentExtractionError(f"No text content in '{filename}'", filename)
    return text, {"source": filename, "file_type": ext.lstrip("."), **meta}


def _decode(filename: str, data: bytes) -> str:
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise DocumentExtractionError(f"'{filename}' is not valid UTF-8 text", filename)


def _csv_text(filename: str, data: bytes) -> tuple[str, dict]:
    reader = csv.DictReader(io.StringIO(_decode(filename, data)))
    rows = []
    for row in reader:
        lines = [f"{k}: {v}" for k, v in row.items() if k is not None]
        rows.append("\n".join(lines))
    return "\n\n".join(rows), {"rows": len(rows)}


def _json_text(filename: str, data: bytes) -> tuple[str, dict]:
    try:
        payload = json.loads(_decode(filename, data))
    except json.JSONDecodeError as e:
        raise DocumentExtractionError(f"'{filename}' is not valid JSON: {e.msg}", filename)
    return "\n".join(_string_leaves(payload)), {}


def _string_leaves(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, dict):
        return [s for v in value.values() for s in _string_leaves(v)]
    if isinstance(value, list):
        return [s for v in value for s in _string_leaves(v)]
    return []


def _pdf_text(filename: str, data: bytes) -> tuple[str, dict]:
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except Exception as e:
        raise DocumentExtractionError(f"PDF read error in '{filename}': {e}", filename)
    return "\n\n".join(p for p in pages if p.strip()), {"pages": len(pages)}


def _docx_text(filename: str, data: bytes) -> tuple[str, dict]:
    try:
        doc = DocxDocument(io.BytesIO(data))
    except Exception as e:
        raise DocumentExtractionError(f"DOCX read error in '{filename}': {e}", filename)
    parts = [p.text.strip() for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append("\t".join(cells))
    return "\n".join(parts), {}
