"""Structural hashes computed from a grayscale rendition of a raster."""

from functools import lru_cache

import imagehash
import numpy as np
from PIL import Image

from ..raster.model import Raster


def grayscale(raster: Raster) -> Image.Image:
    """Return the raster as a Pillow ``L`` image (ITU-R 601-2 luma, alpha ignored)."""
    return raster.to_image().convert("L")


def downsample(gray: Image.Image, width: int, height: int) -> np.ndarray:
    """Area-average *gray* onto a ``height x width`` float grid."""
    resized = gray.resize((width, height), Image.Resampling.BOX)
    return np.asarray(resized, dtype=np.float64)


def average_hash(raster: Raster, hash_size: int = 8) -> imagehash.ImageHash:
    """One bit per cell of a ``hash_size`` square grid: cell >= grid mean."""
    return _average_hash(grayscale(raster), hash_size)


def difference_hash(raster: Raster, hash_size: int = 8) -> imagehash.ImageHash:
    """One bit per horizontal neighbour pair: left >= right."""
    return _difference_hash(grayscale(raster), hash_size)


def perceptual_hash(raster: Raster, hash_size: int = 8, resize: int = 32) -> imagehash.ImageHash:
    """
    DCT-based hash.

    The top-left ``hash_size`` block of the 2-D DCT is thresholded against the
    median of its AC coefficients. The DC term carries no structure, so it is
    skipped and the final bit is a constant 0 pad.
    """
    return _perceptual_hash(grayscale(raster), hash_size, resize)


def edge_hash(raster: Raster, grid_size: int = 8) -> imagehash.ImageHash:
    """One bit per cell: finite-difference gradient magnitude >= mean magnitude."""
    return _edge_hash(grayscale(raster), grid_size)


def _average_hash(gray: Image.Image, hash_size: int) -> imagehash.ImageHash:
    pixels = downsample(gray, hash_size, hash_size)
    return imagehash.ImageHash(pixels >= pixels.mean())


def _difference_hash(gray: Image.Image, hash_size: int) -> imagehash.ImageHash:
    pixels = downsample(gray, hash_size + 1, hash_size)
    return imagehash.ImageHash(pixels[:, :-1] >= pixels[:, 1:])


def _perceptual_hash(gray: Image.Image, hash_size: int, resize: int) -> imagehash.ImageHash:
    pixels = downsample(gray, resize, resize)
    basis = _dct_matrix(resize)
    coefficients = basis @ pixels @ basis.T
    ac_terms = coefficients[:hash_size, :hash_size].flatten()[1:]
    median = np.median(ac_terms)
    bits = np.append(ac_terms >= median, False)
    return imagehash.ImageHash(bits.reshape(hash_size, hash_size))


def _edge_hash(gray: Image.Image, grid_size: int) -> imagehash.ImageHash:
    pixels = downsample(gray, grid_size + 1, grid_size + 1)
    origin = pixels[:-1, :-1]
    horizontal = np.abs(pixels[:-1, 1:] - origin)
    vertical = np.abs(pixels[1:, :-1] - origin)
    magnitude = horizontal + vertical
    return imagehash.ImageHash(magnitude >= magnitude.mean())


@lru_cache(maxsize=8)
def _dct_matrix(size: int) -> np.ndarray:
    """Orthonormal DCT-II basis; ``M @ X @ M.T`` is the 2-D transform of X."""
    n = np.arange(size)
    k = n.reshape(-1, 1)
    basis = np.cos(np.pi * (2 * n + 1) * k / (2 * size))
    basis[0, :] *= np.sqrt(1.0 / size)
    basis[1:, :] *= np.sqrt(2.0 / size)
    basis.setflags(write=False)
    return basis
