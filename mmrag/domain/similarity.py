"""Pure similarity functions.

Stores without a database-side vector operator scan with these.
"""

from collections.abc import Sequence
from math import sqrt

from .types import Score


def cosine(u: Sequence[float], v: Sequence[float]) -> Score:
    """Compute cosine similarity between two vectors.

    Args:
        u: First vector
        v: Second vector

    Returns:
        Cosine similarity between -1 and 1 (0 when either vector is all zeros)

    Raises:
        ValueError: If the vectors differ in dimension
    """
    if len(u) != len(v):
        raise ValueError(f"dimension mismatch: {len(u)} != {len(v)}")
    nu = sqrt(sum(a * a for a in u))
    nv = sqrt(sum(b * b for b in v))
    if nu == 0.0 or nv == 0.0:
        return 0.0
    dot = sum(a * b for a, b in zip(u, v, strict=True))
    return dot / (nu * nv)


def cosine_distance(u: Sequence[float], v: Sequence[float]) -> float:
    """pgvector's ``<=>`` operator: 1 - cosine similarity."""
    return 1.0 - cosine(u, v)


def cosine_similarity(u: Sequence[float], v: Sequence[float]) -> Score:
    """Similarity as reported by retrieval: 1 - cosine distance."""
    return 1.0 - cosine_distance(u, v)
