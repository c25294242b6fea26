from __future__ import annotations

import hashlib
import math
import re
from dataclasses import dataclass

from mmrag.application.ports.embedding_port import EmbeddingPort
from mmrag.domain.errors import EmbeddingUnavailable

_TOKEN = re.compile(r"\w+", re.UNICODE)


@dataclass
class HashingEmbeddingAdapter(EmbeddingPort):
    """Deterministic bag-of-words embedding for tests and offline runs.

    Each lower-cased token is hashed into one of ``dimension`` buckets; the
    result is L2-normalized. Texts sharing words end up close under cosine.
    """

    dimension: int = 384

    def embed(self, text: str) -> list[float]:
        if not text:
            raise EmbeddingUnavailable("cannot embed empty text")
        vec = [0.0] * self.dimension
        for token in _TOKEN.findall(text.lower()):
            digest = hashlib.sha1(token.encode("utf-8")).digest()
            vec[int.from_bytes(digest[:4], "big") % self.dimension] += 1.0
        norm = math.sqrt(sum(x * x for x in vec))
        if norm == 0.0:
            return vec
        return [x / norm for x in vec]
