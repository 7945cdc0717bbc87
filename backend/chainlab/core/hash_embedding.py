"""Hashing Embedder — deterministic bag-of-tokens vectors, no model download.

Invariants:
    - Same text -> same vector in every process (md5, not Python's salted hash())
    - Output length == dimension; non-empty token sets are L2-normalized
    - Text with no tokens embeds to the zero vector (scores 0.0 against everything)

Design Decisions:
    - Feature hashing with a sign bit: texts sharing words land close in cosine space,
      which is enough for a demo RAG loop without an embedding API
    - CJK characters are tokens on their own: they carry no whitespace boundaries
"""

import hashlib
import re
from typing import Sequence

import numpy as np

DEFAULT_DIMENSION = 384

# Latin alphanumerics as runs; CJK ideographs, kana and hangul one char at a time.
_TOKEN = re.compile(r"[a-z0-9]+|[一-鿿぀-ヿ가-힯]")


def tokenize(text: str) -> list[str]:
    return _TOKEN.findall(text.lower())


class HashingEmbedder:
    """Feature-hashing embedder implementing the Embedder protocol."""

    def __init__(self, dimension: int = DEFAULT_DIMENSION):
        if dimension <= 0:
            raise ValueError("dimension must be positive")
        self.dimension = dimension

    def embed_documents(self, texts: Sequence[str]) -> list[list[float]]:
        return [self._embed(t).tolist() for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._embed(text).tolist()

    def _embed(self, text: str) -> np.ndarray:
        vector = np.zeros(self.dimension, dtype=np.float64)
        for token in tokenize(text):
            digest = hashlib.md5(token.encode("utf-8")).digest()  # nosec B324
            bucket = int.from_bytes(digest[:8], "big") % self.dimension
            sign = 1.0 if digest[8] & 1 else -1.0
            vector[bucket] += sign
        norm = np.linalg.norm(vector)
        if norm > 0:
            vector /= norm
        return vector
