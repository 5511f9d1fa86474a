from typing import List, Sequence

import numpy as np


def cosine_similarities(query: Sequence[float], matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of `query` against every row of `matrix`."""
    query_vec = np.asarray(query, dtype=float)
    if matrix.size == 0:
        return np.empty(0)
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vec)
    # Zero vectors score 0
    return np.divide(matrix @ query_vec, norms, out=np.zeros(len(matrix)), where=norms > 0)


def top_matches(similarities: np.ndarray, match_count: int, match_threshold: float) -> List[int]:
    """Indices of at most `match_count` rows at or above the threshold, best first."""
    candidates = np.flatnonzero(similarities >= match_threshold)
    ordered = candidates[np.argsort(-similarities[candidates], kind="stable")]
    return ordered[:match_count].tolist()
