"""Decoded pixel buffers handed to the fingerprint extractor."""

from .model import Raster, RasterProvider
from .pillow import load_raster, file_provider, discover_images

__all__ = [
    "Raster",
    "RasterProvider",
    "load_raster",
    "file_provider",
    "discover_images",
]
