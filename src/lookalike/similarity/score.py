"""Weighted similarity between two fingerprints."""

import math
from dataclasses import dataclass
from typing import Dict, Mapping

from .distance import aspect_ratio_similarity, hash_similarity, histogram_similarity
from ..fingerprint.model import ImageFingerprint

WEIGHTS: Dict[str, float] = {
    "phash": 0.30,
    "ahash": 0.20,
    "dhash": 0.20,
    "histogram": 0.15,
    "edge_hash": 0.10,
    "aspect_ratio": 0.05,
}


@dataclass(frozen=True)
class SimilarityResult:
    overall: float
    details: Mapping[str, float]


def combine(details: Mapping[str, float]) -> float:
    """Return the fixed weighted sum of *details*, clamped to [0, 1]."""
    score = math.fsum(weight * details[key] for key, weight in WEIGHTS.items())
    return float(max(0.0, min(1.0, score)))


def compare(a: ImageFingerprint, b: ImageFingerprint) -> SimilarityResult:
    """
    Score how alike two fingerprints are.

    Raises:
        IncompatibleFingerprints: If hash lengths or histogram bucket counts differ
    """
    details = {
        "ahash": hash_similarity(a.ahash, b.ahash),
        "dhash": hash_similarity(a.dhash, b.dhash),
        "phash": hash_similarity(a.phash, b.phash),
        "edge_hash": hash_similarity(a.edge_hash, b.edge_hash),
        "histogram": histogram_similarity(a.color_histogram, b.color_histogram),
        "aspect_ratio": aspect_ratio_similarity(a.aspect_ratio, b.aspect_ratio),
    }
    return SimilarityResult(overall=combine(details), details=details)
