"""Immutable fingerprint records."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Tuple

import imagehash

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class ColorHistogram:
    """Per-channel probability mass over equal-width intensity buckets."""
    red: Tuple[float, ...]
    green: Tuple[float, ...]
    blue: Tuple[float, ...]

    @property
    def bucket_count(self) -> int:
        return len(self.red)

    def channels(self) -> Tuple[Tuple[float, ...], Tuple[float, ...], Tuple[float, ...]]:
        return (self.red, self.green, self.blue)


@dataclass(frozen=True)
class ImageFingerprint:
    """Compact signature of one image. Equality ignores ``computed_at``."""
    id: str
    width: int
    height: int
    ahash: imagehash.ImageHash
    dhash: imagehash.ImageHash
    phash: imagehash.ImageHash
    edge_hash: imagehash.ImageHash
    color_histogram: ColorHistogram
    dominant_colors: Tuple[RGB, ...]
    computed_at: datetime = field(
        default_factory=lambda: datetime.now(timezone.utc), compare=False
    )

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serialisable dictionary (hashes as hex)."""
        return {
            "id": self.id,
            "width": self.width,
            "height": self.height,
            "aspect_ratio": self.aspect_ratio,
            "ahash": str(self.ahash),
            "dhash": str(self.dhash),
            "phash": str(self.phash),
            "edge_hash": str(self.edge_hash),
            "color_histogram": {
                "r": list(self.color_histogram.red),
                "g": list(self.color_histogram.green),
                "b": list(self.color_histogram.blue),
            },
            "dominant_colors": [list(color) for color in self.dominant_colors],
            "computed_at": self.computed_at.isoformat(),
        }
