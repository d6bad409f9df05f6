"""Image fingerprint extraction and caching."""

from .model import ImageFingerprint, ColorHistogram
from .hash import average_hash, difference_hash, perceptual_hash, edge_hash
from .color import color_histogram, dominant_colors
from .extract import extract_fingerprint
from .cache import FingerprintCache, CacheStats

__all__ = [
    "ImageFingerprint",
    "ColorHistogram",
    "average_hash",
    "difference_hash",
    "perceptual_hash",
    "edge_hash",
    "color_histogram",
    "dominant_colors",
    "extract_fingerprint",
    "FingerprintCache",
    "CacheStats",
]
