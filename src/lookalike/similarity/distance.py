"""Distance and similarity measures for individual fingerprint components."""

from typing import Sequence

import imagehash
import numpy as np

from ..errors import IncompatibleFingerprints
from ..fingerprint.model import ColorHistogram


def hamming_distance(a: imagehash.ImageHash, b: imagehash.ImageHash) -> int:
    """
    Calculate Hamming distance between two hashes.

    Args:
        a: First hash
        b: Second hash

    Returns:
        Number of differing bits

    Raises:
        IncompatibleFingerprints: If the hashes have different bit lengths
    """
    if a.hash.size != b.hash.size:
        raise IncompatibleFingerprints(
            f"Hash lengths differ: {a.hash.size} vs {b.hash.size} bits"
        )
    return a - b


def hash_similarity(a: imagehash.ImageHash, b: imagehash.ImageHash) -> float:
    """Return ``1 - hamming / bit_length``."""
    return 1.0 - hamming_distance(a, b) / a.hash.size


def histogram_similarity(a: ColorHistogram, b: ColorHistogram) -> float:
    """Average per-channel normalised intersection of two color histograms."""
    if a.bucket_count != b.bucket_count:
        raise IncompatibleFingerprints(
            f"Histogram bucket counts differ: {a.bucket_count} vs {b.bucket_count}"
        )
    scores = [
        _channel_intersection(left, right)
        for left, right in zip(a.channels(), b.channels())
    ]
    return float(max(0.0, min(1.0, sum(scores) / len(scores))))


def aspect_ratio_similarity(ratio_a: float, ratio_b: float) -> float:
    """Return ``1 - min(1, |a - b| / max(a, b))``."""
    largest = max(ratio_a, ratio_b)
    if largest <= 0:
        return 0.0
    return 1.0 - min(1.0, abs(ratio_a - ratio_b) / largest)


def _channel_intersection(a: Sequence[float], b: Sequence[float]) -> float:
    left = np.asarray(a, dtype=np.float64)
    right = np.asarray(b, dtype=np.float64)
    mass = max(float(left.sum()), float(right.sum()))
    if mass <= 0:
        return 0.0
    return float(np.minimum(left, right).sum()) / mass
