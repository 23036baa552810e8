"""Vector similarity helpers."""

from __future__ import annotations

import math
from collections.abc import Sequence

from pdf_rag.errors import DimensionMismatch


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return ``dot(a, b) / (|a| * |b|)``.

    Raises :class:`DimensionMismatch` for vectors of different length.
    Returns ``nan`` when either vector has zero norm.
    """
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    denominator = math.sqrt(norm_a) * math.sqrt(norm_b)
    if denominator == 0.0:
        return math.nan
    # Clamp float drift so identical vectors never exceed 1.0.
    return max(-1.0, min(1.0, dot / denominator))
