from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Union

import numpy as np
from PIL import Image

from ..errors import InvalidRaster

PixelData = Union[bytes, bytearray, memoryview]

_MODES = {3: "RGB", 4: "RGBA"}


@dataclass(frozen=True)
class Raster:
    """Row-major 8-bit pixel buffer, RGBA unless ``channels`` says otherwise."""
    width: int
    height: int
    data: PixelData
    channels: int = 4

    def validate(self) -> None:
        """Raise InvalidRaster unless the buffer matches its declared shape."""
        if self.width <= 0 or self.height <= 0:
            raise InvalidRaster(f"Raster dimensions must be positive, got {self.width}x{self.height}")
        if self.channels not in _MODES:
            raise InvalidRaster(f"Unsupported channel count {self.channels}; expected 3 or 4")
        expected = self.width * self.height * self.channels
        actual = len(self._buffer())
        if actual != expected:
            raise InvalidRaster(
                f"Buffer holds {actual} bytes, expected {expected} "
                f"for {self.width}x{self.height}x{self.channels}"
            )

    def to_array(self) -> np.ndarray:
        """Return a read-only ``(height, width, channels)`` uint8 view."""
        self.validate()
        flat = np.frombuffer(self._buffer(), dtype=np.uint8)
        return flat.reshape(self.height, self.width, self.channels)

    def to_image(self) -> Image.Image:
        self.validate()
        return Image.frombytes(_MODES[self.channels], (self.width, self.height), self._buffer())

    def _buffer(self) -> bytes:
        if isinstance(self.data, int):
            # bytes(n) would silently build n zero bytes
            raise InvalidRaster(f"Pixel data must be a buffer, got {type(self.data).__name__}")
        try:
            return bytes(self.data)
        except (TypeError, ValueError) as exc:
            raise InvalidRaster(f"Pixel data is not an 8-bit buffer: {exc}") from exc

    @classmethod
    def from_image(cls, img: Image.Image) -> "Raster":
        """Build an RGBA raster from any Pillow image."""
        rgba = img.convert("RGBA") if img.mode != "RGBA" else img
        return cls(width=rgba.width, height=rgba.height, data=rgba.tobytes(), channels=4)


RasterProvider = Callable[[], Raster]
