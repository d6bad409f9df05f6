"""In-memory fingerprint cache keyed by image id."""

import json
import threading
from dataclasses import dataclass
from typing import Dict, Optional

from .extract import extract_fingerprint
from .model import ImageFingerprint
from ..config import Settings
from ..errors import RasterUnavailable
from ..raster.model import Raster, RasterProvider
from ..logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheStats:
    count: int
    approx_bytes: int


class FingerprintCache:
    """
    Memoizes fingerprint extraction per image id.

    Each id gets its own lock, so concurrent callers asking for the same id
    wait for a single extraction while different ids proceed in parallel.
    Failed extractions are not cached. A key lock lives only while its id is
    being computed or has failed; successful ids are served lock-free.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings if settings is not None else Settings()
        self._entries: Dict[str, ImageFingerprint] = {}
        self._sizes: Dict[str, int] = {}
        self._key_locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def get_or_compute(self, image_id: str, raster_provider: RasterProvider) -> ImageFingerprint:
        """
        Return the cached fingerprint for *image_id*, extracting it on first use.

        Raises:
            RasterUnavailable: If *raster_provider* fails
            InvalidRaster: If the provided raster is malformed
        """
        cached = self._entries.get(image_id)
        if cached is not None:
            return cached

        with self._lock_for(image_id):
            cached = self._entries.get(image_id)
            if cached is not None:
                return cached

            try:
                raster = raster_provider()
            except RasterUnavailable:
                raise
            except Exception as exc:
                raise RasterUnavailable(f"Failed to obtain raster for {image_id}: {exc}") from exc

            if not isinstance(raster, Raster):
                raise RasterUnavailable(
                    f"Provider for {image_id} returned {type(raster).__name__}, not a Raster"
                )

            fingerprint = extract_fingerprint(image_id, raster, self._settings)
            size = len(json.dumps(fingerprint.to_dict()).encode("utf-8"))

            with self._registry_lock:
                self._entries[image_id] = fingerprint
                self._sizes[image_id] = size
                # Later callers hit the entry first; waiters still hold this lock object
                self._key_locks.pop(image_id, None)

            logger.debug(f"Cached fingerprint for {image_id} (~{size} bytes)")
            return fingerprint

    @property
    def settings(self) -> Settings:
        """Extraction settings every fingerprint in this cache was built with."""
        return self._settings

    def get(self, image_id: str) -> Optional[ImageFingerprint]:
        return self._entries.get(image_id)

    def clear(self) -> None:
        """Evict every cached fingerprint."""
        with self._registry_lock:
            evicted = len(self._entries)
            self._entries.clear()
            self._sizes.clear()
            self._key_locks = {
                image_id: lock for image_id, lock in self._key_locks.items() if lock.locked()
            }
        logger.info(f"Cleared {evicted} cached fingerprints")

    def stats(self) -> CacheStats:
        with self._registry_lock:
            return CacheStats(count=len(self._entries), approx_bytes=sum(self._sizes.values()))

    def __contains__(self, image_id: object) -> bool:
        return image_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def _lock_for(self, image_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._key_locks.get(image_id)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[image_id] = lock
            return lock
