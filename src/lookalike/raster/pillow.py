"""Pillow-backed raster providers for images stored on disk."""

from pathlib import Path
from typing import Iterable, List, Tuple

from PIL import Image

from .model import Raster, RasterProvider
from ..logging import get_logger

logger = get_logger(__name__)

IMAGE_SUFFIXES = frozenset({".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp", ".tif", ".tiff"})


def load_raster(image_path: Path) -> Raster:
    """Decode *image_path* into an RGBA raster."""
    with Image.open(image_path) as img:
        img.load()
        raster = Raster.from_image(img)
    logger.debug(f"Decoded {image_path} ({raster.width}x{raster.height})")
    return raster


def file_provider(image_path: Path) -> RasterProvider:
    """Return a provider that decodes *image_path* when called."""
    def provide() -> Raster:
        return load_raster(image_path)

    return provide


def discover_images(
    directory: Path,
    recursive: bool = False,
    suffixes: Iterable[str] = IMAGE_SUFFIXES,
) -> List[Tuple[str, RasterProvider]]:
    """
    List image files under *directory* as ``(id, provider)`` pairs.

    Ids are paths relative to *directory* using forward slashes, sorted
    lexically so repeated scans yield the same input order.
    """
    allowed = {suffix.lower() for suffix in suffixes}
    pattern = "**/*" if recursive else "*"
    paths = sorted(
        path for path in directory.glob(pattern)
        if path.is_file() and path.suffix.lower() in allowed
    )
    logger.info(f"Found {len(paths)} image files in {directory}")
    return [(path.relative_to(directory).as_posix(), file_provider(path)) for path in paths]
