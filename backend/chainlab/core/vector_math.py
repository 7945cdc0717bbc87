"""Vector Math — cosine scoring, top-k selection and source de-duplication.

Invariants:
    - A zero-norm row or zero-norm query scores 0.0 (never NaN)
    - top_k sorts by descending score, truncates to k, THEN applies threshold
    - threshold <= 0 disables filtering; kept hits satisfy score >= threshold
    - Ties keep insertion order (stable argsort)
"""

import numpy as np

from chainlab.core.domain_types import ScoredDocument

PREVIEW_CHARS = 150


def cosine_scores(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Cosine similarity of every row in matrix against query."""
    if matrix.size == 0:
        return np.zeros(0, dtype=np.float64)
    query_norm = float(np.linalg.norm(query))
    if query_norm == 0.0:
        return np.zeros(matrix.shape[0], dtype=np.float64)
    row_norms = np.linalg.norm(matrix, axis=1)
    dots = matrix @ query
    with np.errstate(divide="ignore", invalid="ignore"):
        scores = np.where(row_norms > 0, dots / (row_norms * query_norm), 0.0)
    return scores.astype(np.float64)


def top_k(scores: np.ndarray, k: int, threshold: float = 0.0) -> list[tuple[int, float]]:
    """Return (row_index, score) pairs for the best k rows."""
    if k <= 0 or scores.size == 0:
        return []
    order = np.argsort(-scores, kind="stable")[:k]
    hits = [(int(i), float(scores[i])) for i in order]
    if threshold > 0:
        hits = [(i, s) for i, s in hits if s >= threshold]
    return hits


def dedupe_sources(
    results: list[ScoredDocument], preview_chars: int = PREVIEW_CHARS,
) -> list[dict]:
    """Collapse hits to one entry per metadata.source, keeping the best score."""
    best: dict[str, dict] = {}
    for hit in results:
        source = hit.document.metadata.get("source") or "unknown"
        similarity = round(hit.score, 2)
        current = best.get(source)
        if current is not None and current["similarity"] >= similarity:
            continue
        content = hit.document.page_content
        best[source] = {
            "source": source,
            "content": content[:preview_chars] + "...",
            "similarity": similarity,
        }
    return sorted(best.values(), key=lambda s: s["similarity"], reverse=True)
