"""Color statistics: channel histograms and k-means dominant colors."""

import math
from typing import Tuple

import numpy as np

from .model import RGB, ColorHistogram
from ..raster.model import Raster
from ..logging import get_logger

logger = get_logger(__name__)


def color_histogram(raster: Raster, buckets: int = 256) -> ColorHistogram:
    """Return R, G and B histograms normalised to sum to 1 each."""
    pixels = raster.to_array()
    total = pixels.shape[0] * pixels.shape[1]
    channels = []
    for index in range(3):
        values = pixels[:, :, index].astype(np.int64).ravel()
        counts = np.bincount(values * buckets // 256, minlength=buckets)
        channels.append(tuple(float(count) / total for count in counts))
    return ColorHistogram(red=channels[0], green=channels[1], blue=channels[2])


def dominant_colors(
    raster: Raster,
    k: int = 5,
    max_iterations: int = 20,
    epsilon: float = 1.0,
    sample_limit: int = 4096,
) -> Tuple[RGB, ...]:
    """
    Cluster pixel colors with k-means and return up to *k* centroids.

    Pixels are subsampled with a fixed stride to at most *sample_limit*
    points. Centroids start at *k* evenly spaced sample points, so the result
    is reproducible. Iteration stops once no centroid moves by *epsilon* or
    more, or after *max_iterations*; the last centroids are returned either
    way. Output is ordered by descending cluster size.
    """
    if k <= 0:
        return ()

    pixels = raster.to_array()[:, :, :3].reshape(-1, 3).astype(np.float64)
    stride = max(1, math.ceil(len(pixels) / sample_limit))
    sample = pixels[::stride]

    k = min(k, len(sample))
    seeds = np.linspace(0, len(sample) - 1, num=k).round().astype(int)
    centroids = sample[seeds].copy()

    labels = _assign(sample, centroids)
    for iteration in range(max_iterations):
        updated = centroids.copy()
        for cluster in range(k):
            members = sample[labels == cluster]
            if len(members):
                updated[cluster] = members.mean(axis=0)
        movement = float(np.max(np.linalg.norm(updated - centroids, axis=1)))
        centroids = updated
        labels = _assign(sample, centroids)
        if movement < epsilon:
            logger.debug(f"k-means converged after {iteration + 1} iterations")
            break
    else:
        logger.debug(f"k-means stopped at the {max_iterations} iteration limit")

    counts = np.bincount(labels, minlength=k)
    rounded = np.clip(np.rint(centroids), 0, 255).astype(int)
    ranked = sorted(
        (cluster for cluster in range(k) if counts[cluster] > 0),
        key=lambda cluster: (-counts[cluster], tuple(rounded[cluster])),
    )
    return tuple(
        (int(rounded[c][0]), int(rounded[c][1]), int(rounded[c][2])) for c in ranked
    )


def _assign(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid (Euclidean) for each point."""
    distances = ((points[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)
    return np.argmin(distances, axis=1)
