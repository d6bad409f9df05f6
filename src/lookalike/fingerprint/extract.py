"""Fingerprint extraction from a decoded raster."""

from typing import Optional

from .color import color_histogram, dominant_colors
from .hash import _average_hash, _difference_hash, _edge_hash, _perceptual_hash, grayscale
from .model import ImageFingerprint
from ..config import DEFAULT_SETTINGS, Settings
from ..raster.model import Raster
from ..logging import get_logger

logger = get_logger(__name__)


def extract_fingerprint(
    image_id: str,
    raster: Raster,
    settings: Optional[Settings] = None,
) -> ImageFingerprint:
    """
    Compute the full fingerprint of *raster*.

    Args:
        image_id: Identifier stored on the fingerprint
        raster: Decoded pixel buffer
        settings: Hash sizes, histogram buckets and k-means bounds

    Returns:
        ImageFingerprint; identical buffers always give equal fingerprints

    Raises:
        InvalidRaster: If the raster is empty or its buffer size is wrong
    """
    settings = settings or DEFAULT_SETTINGS
    raster.validate()

    gray = grayscale(raster)
    fingerprint = ImageFingerprint(
        id=image_id,
        width=raster.width,
        height=raster.height,
        ahash=_average_hash(gray, settings.hash_size),
        dhash=_difference_hash(gray, settings.hash_size),
        phash=_perceptual_hash(gray, settings.hash_size, settings.phash_size),
        edge_hash=_edge_hash(gray, settings.edge_grid_size),
        color_histogram=color_histogram(raster, settings.histogram_buckets),
        dominant_colors=dominant_colors(
            raster,
            k=settings.dominant_color_count,
            max_iterations=settings.kmeans_max_iterations,
            epsilon=settings.kmeans_epsilon,
            sample_limit=settings.kmeans_sample_limit,
        ),
    )

    logger.debug(
        f"Fingerprinted {image_id} ({raster.width}x{raster.height}): "
        f"ahash={fingerprint.ahash}, phash={fingerprint.phash}"
    )
    return fingerprint
