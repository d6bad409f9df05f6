"""Fingerprint comparison."""

from .distance import hamming_distance, hash_similarity, histogram_similarity, aspect_ratio_similarity
from .score import SimilarityResult, WEIGHTS, combine, compare

__all__ = [
    "hamming_distance",
    "hash_similarity",
    "histogram_similarity",
    "aspect_ratio_similarity",
    "SimilarityResult",
    "WEIGHTS",
    "combine",
    "compare",
]
