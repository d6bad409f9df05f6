"""Orchestrates fingerprinting, pairwise scoring and clustering of a collection."""

import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from itertools import combinations, islice
from typing import Any, Callable, Dict, Iterator, List, Literal, Optional, Protocol, Sequence, Tuple

from .cluster import Edge, Group, cluster_groups
from ..config import Settings
from ..errors import InvalidRaster, RasterUnavailable
from ..fingerprint.cache import FingerprintCache
from ..fingerprint.model import ImageFingerprint
from ..raster.model import RasterProvider
from ..similarity.score import SimilarityResult, compare
from ..logging import get_logger

logger = get_logger(__name__)

Phase = Literal["extract", "compare"]
ImageSource = Tuple[str, RasterProvider]
Scorer = Callable[[ImageFingerprint, ImageFingerprint], SimilarityResult]


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...


@dataclass(frozen=True)
class ProgressEvent:
    """
    Progress checkpoint of a grouping run.

    ``completed``/``total`` count work within the current phase; phases run
    extract then compare. ``overall_completed``/``overall_total`` count the
    whole run (one unit per image plus one per possible pair) and never
    decrease. Pairs that vanish because an image failed are settled when the
    failure happens.
    """
    phase: Phase
    completed: int
    total: int
    overall_completed: int = 0
    overall_total: int = 0

    @property
    def fraction(self) -> float:
        return self.completed / self.total if self.total else 1.0

    @property
    def overall_fraction(self) -> float:
        return self.overall_completed / self.overall_total if self.overall_total else 1.0


@dataclass
class GroupingResult:
    groups: List[Group]
    partial_failures: List[Tuple[str, str]]
    cancelled: bool = False
    total_images: int = 0
    fingerprinted: int = 0
    pairs_compared: int = 0
    threshold: float = 0.0
    processing_time: float = 0.0

    def summary(self) -> Dict[str, Any]:
        """Collection-level statistics for reports and console output."""
        return {
            "total_images": self.total_images,
            "fingerprinted": self.fingerprinted,
            "similar_groups": len(self.groups),
            "potential_duplicates": sum(len(group.image_ids) - 1 for group in self.groups),
            "pairs_compared": self.pairs_compared,
            "failures": len(self.partial_failures),
            "cancelled": self.cancelled,
            "threshold": self.threshold,
            "processing_time": self.processing_time,
        }


@dataclass
class _RunState:
    ids: List[str] = field(default_factory=list)
    fingerprints: List[ImageFingerprint] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    pairs_compared: int = 0
    settled: int = 0
    planned: int = 0
    cancelled: bool = False


class GroupingEngine:
    """
    Finds groups of similar images in a collection.

    ``iter_progress()`` drives the run as a generator, yielding a
    ProgressEvent after every extraction and every comparison batch; the
    caller regains control at each of those points. ``run()`` consumes the
    generator and forwards events to an optional callback.
    """

    def __init__(
        self,
        images: Sequence[ImageSource],
        threshold: Optional[float] = None,
        cache: Optional[FingerprintCache] = None,
        settings: Optional[Settings] = None,
        scorer: Scorer = compare,
        cancel_event: Optional[CancelSignal] = None,
        workers: Optional[int] = None,
        batch_size: Optional[int] = None,
    ) -> None:
        if cache is not None:
            if settings is not None and settings.extraction_key() != cache.settings.extraction_key():
                raise ValueError("settings disagree with the cache on extraction parameters")
            self.settings = settings or cache.settings
        else:
            self.settings = settings or Settings()
        self.threshold = self.settings.threshold if threshold is None else threshold
        if not 0.0 < self.threshold <= 1.0:
            raise ValueError(f"threshold must be in (0, 1], got {self.threshold}")

        self.images = list(images)
        seen = set()
        for image_id, _ in self.images:
            if image_id in seen:
                raise ValueError(f"Duplicate image id: {image_id}")
            seen.add(image_id)

        self.cache = cache if cache is not None else FingerprintCache(self.settings)
        self.scorer = scorer
        self.cancel_event = cancel_event
        self.workers = workers or self.settings.workers
        self.batch_size = batch_size or self.settings.compare_batch_size
        if self.workers < 1 or self.batch_size < 1:
            raise ValueError("workers and batch_size must be positive")

        self.result: Optional[GroupingResult] = None

    def run(self, on_progress: Optional[Callable[[ProgressEvent], None]] = None) -> GroupingResult:
        for event in self.iter_progress():
            if on_progress is not None:
                on_progress(event)
        assert self.result is not None
        return self.result

    def iter_progress(self) -> Iterator[ProgressEvent]:
        started = time.perf_counter()
        count = len(self.images)
        state = _RunState(planned=count + count * (count - 1) // 2)
        logger.info(f"Grouping {len(self.images)} images at threshold {self.threshold:.2f}")

        yield from self._extract_all(state)
        if not state.cancelled:
            yield from self._compare_all(state)

        groups = cluster_groups(state.ids, state.edges)
        self.result = GroupingResult(
            groups=groups,
            partial_failures=state.failures,
            cancelled=state.cancelled,
            total_images=len(self.images),
            fingerprinted=len(state.fingerprints),
            pairs_compared=state.pairs_compared,
            threshold=self.threshold,
            processing_time=time.perf_counter() - started,
        )

        if state.cancelled:
            logger.warning(f"Grouping cancelled after {state.pairs_compared} comparisons; results are partial")
        logger.info(
            f"Found {len(groups)} groups among {len(state.fingerprints)} fingerprinted images "
            f"({len(state.failures)} failures)"
        )

    def _cancel_requested(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()

    def _extract_all(self, state: _RunState) -> Iterator[ProgressEvent]:
        total = len(self.images)
        if self.workers == 1:
            for index, (image_id, provider) in enumerate(self.images):
                if self._cancel_requested():
                    state.cancelled = True
                    return
                self._record(state, image_id, lambda: self.cache.get_or_compute(image_id, provider))
                yield self._event(state, "extract", index + 1, total)
            return

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures: List[Future] = [
                executor.submit(self.cache.get_or_compute, image_id, provider)
                for image_id, provider in self.images
            ]
            # Consumed in input order so events stay ordered regardless of completion order
            for index, ((image_id, _), future) in enumerate(zip(self.images, futures)):
                if self._cancel_requested():
                    state.cancelled = True
                    executor.shutdown(wait=True, cancel_futures=True)
                    return
                self._record(state, image_id, future.result)
                yield self._event(state, "extract", index + 1, total)

    def _record(self, state: _RunState, image_id: str, compute: Callable[[], ImageFingerprint]) -> None:
        try:
            fingerprint = compute()
        except (RasterUnavailable, InvalidRaster) as exc:
            logger.warning(f"Skipping {image_id}: {exc}")
            # Pairs this image would have joined will never be compared
            state.settled += len(self.images) - len(state.failures)
            state.failures.append((image_id, str(exc)))
            return
        state.settled += 1
        state.ids.append(image_id)
        state.fingerprints.append(fingerprint)

    def _compare_all(self, state: _RunState) -> Iterator[ProgressEvent]:
        count = len(state.fingerprints)
        total = count * (count - 1) // 2
        pairs = combinations(range(count), 2)

        while state.pairs_compared < total:
            if self._cancel_requested():
                state.cancelled = True
                return
            for i, j in islice(pairs, self.batch_size):
                result = self.scorer(state.fingerprints[i], state.fingerprints[j])
                if result.overall >= self.threshold:
                    state.edges.append((i, j, result.overall))
                state.pairs_compared += 1
                state.settled += 1
            yield self._event(state, "compare", state.pairs_compared, total)

    @staticmethod
    def _event(state: _RunState, phase: Phase, completed: int, total: int) -> ProgressEvent:
        return ProgressEvent(phase, completed, total, state.settled, state.planned)


def find_groups(
    images: Sequence[ImageSource],
    threshold: Optional[float] = None,
    on_progress: Optional[Callable[[ProgressEvent], None]] = None,
    *,
    cache: Optional[FingerprintCache] = None,
    settings: Optional[Settings] = None,
    scorer: Scorer = compare,
    cancel_event: Optional[CancelSignal] = None,
    workers: Optional[int] = None,
    batch_size: Optional[int] = None,
) -> GroupingResult:
    """
    Find groups of visually similar images.

    Args:
        images: ``(id, raster_provider)`` pairs; ids must be unique
        threshold: Minimum overall similarity for an edge, in (0, 1]
        on_progress: Called with a ProgressEvent at every checkpoint
        cache: Fingerprint cache to reuse across runs
        settings: Extraction and batching settings; when a cache is given they
            must agree with its extraction settings and default to them
        scorer: Pairwise scoring function
        cancel_event: Checked before each extraction and comparison batch
        workers: Threads used for extraction
        batch_size: Pairs scored between progress checkpoints

    Returns:
        GroupingResult with groups, per-image failures and a cancelled flag

    Raises:
        ValueError: If the threshold is out of range, ids repeat, or settings
            disagree with the cache
    """
    engine = GroupingEngine(
        images,
        threshold=threshold,
        cache=cache,
        settings=settings,
        scorer=scorer,
        cancel_event=cancel_event,
        workers=workers,
        batch_size=batch_size,
    )
    return engine.run(on_progress)
