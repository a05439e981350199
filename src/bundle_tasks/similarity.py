"""Vector similarity helpers.

Malformed vectors never raise here: they score 0.0 and so never cluster.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import numpy as np

logger = logging.getLogger(__name__)


def parse_embedding(raw: Any) -> list[float] | None:
    """Decode a stored embedding (JSON text, list, tuple or array). None if absent or unparsable."""
    if raw is None:
        return None
    if isinstance(raw, (str, bytes)):
        if not raw:
            return None
        try:
            raw = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError):
            return None
    if hasattr(raw, "tolist"):
        raw = raw.tolist()
    if not isinstance(raw, (list, tuple)):
        return None
    if any(isinstance(v, bool) or not isinstance(v, (int, float)) for v in raw):
        return None
    return [float(v) for v in raw]


def cosine_similarity(a: Any, b: Any) -> float:
    """Cosine similarity between two vectors.

    Returns 0.0 when either vector is missing, empty, non-numeric, non-finite,
    zero-length in norm, or when the two lengths differ.
    """
    if a is None or b is None:
        return 0.0
    try:
        a = np.asarray(a, dtype=float)
        b = np.asarray(b, dtype=float)
    except (TypeError, ValueError):
        return 0.0
    if a.ndim != 1 or a.shape != b.shape or a.size == 0:
        return 0.0
    if not (np.isfinite(a).all() and np.isfinite(b).all()):
        return 0.0
    # Scale to unit max so norms neither overflow nor underflow.
    scale_a = np.abs(a).max()
    scale_b = np.abs(b).max()
    if scale_a == 0 or scale_b == 0:
        return 0.0
    a = a / scale_a
    b = b / scale_b
    similarity = np.dot(a, b) / (np.linalg.norm(a) * np.linalg.norm(b))
    if not np.isfinite(similarity):
        return 0.0
    return float(similarity)
