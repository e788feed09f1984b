"""
Non-maximum suppression over a 2D scalar field, restricted to candidate cells.

The extractor examines only the cells it is handed. Candidates for minima and
maxima are separate lists; passing None for one of them turns detection of
that polarity off. The comparison rule used inside a neighborhood is a search
strategy chosen at construction time.
"""
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence, Tuple

import numpy as np

from houghfoot.errors import InvalidConfiguration

logger = logging.getLogger(__name__)

Candidate = Tuple[int, int]


@dataclass(frozen=True)
class Peak:
    x: int
    y: int
    value: float


class NonMaxSearch(Protocol):
    """Decides if `value` is an extremum of the neighborhood it sits in."""

    def is_max(self, region: np.ndarray, value: float) -> bool:
        ...

    def is_min(self, region: np.ndarray, value: float) -> bool:
        ...


class RelaxedSearch:
    """Largest-or-equal rule: only a strictly larger neighbor rejects the cell."""

    def is_max(self, region: np.ndarray, value: float) -> bool:
        return not bool(np.any(region > value))

    def is_min(self, region: np.ndarray, value: float) -> bool:
        return not bool(np.any(region < value))


class StrictSearch:
    """Strictly-largest rule: any neighbor equal or larger rejects the cell."""

    # the region includes the center cell, which always compares equal
    def is_max(self, region: np.ndarray, value: float) -> bool:
        return int(np.count_nonzero(region >= value)) == 1

    def is_min(self, region: np.ndarray, value: float) -> bool:
        return int(np.count_nonzero(region <= value)) == 1


def all_candidates(width: int, height: int) -> List[Candidate]:
    """Every cell of a width x height field, row-major."""
    return [(x, y) for y in range(height) for x in range(width)]


class NonMaxCandidate:
    def __init__(
        self,
        search: NonMaxSearch,
        radius: int,
        threshold_min: float = -math.inf,
        threshold_max: float = math.inf,
        ignore_border: int = 0,
    ) -> None:
        if radius < 0:
            raise InvalidConfiguration(f"radius must be >= 0, got {radius}")
        if ignore_border < 0:
            raise InvalidConfiguration(f"ignore_border must be >= 0, got {ignore_border}")
        self.search = search
        self.radius = radius
        self.threshold_min = threshold_min
        self.threshold_max = threshold_max
        self.ignore_border = ignore_border

    def process(
        self,
        intensity: np.ndarray,
        candidates_min: Optional[Sequence[Candidate]],
        candidates_max: Optional[Sequence[Candidate]],
    ) -> Tuple[List[Peak], List[Peak]]:
        """
        Returns (found_min, found_max). A minimum needs value <= threshold_min,
        a maximum value >= threshold_max. Both lists are always returned, empty
        when nothing qualifies or when the matching candidate list is None.
        """
        found_min: List[Peak] = []
        found_max: List[Peak] = []
        if candidates_min is not None:
            found_min = self._examine(intensity, candidates_min, False)
        if candidates_max is not None:
            found_max = self._examine(intensity, candidates_max, True)
        logger.debug("non-max: %d minima, %d maxima", len(found_min), len(found_max))
        return found_min, found_max

    def _examine(self, intensity: np.ndarray, candidates: Sequence[Candidate], maximum: bool) -> List[Peak]:
        return self._examine_chunk(intensity, candidates, maximum)

    def _examine_chunk(self, intensity: np.ndarray, candidates: Sequence[Candidate], maximum: bool) -> List[Peak]:
        height, width = intensity.shape
        border = self.ignore_border
        r = self.radius
        found: List[Peak] = []
        for x, y in candidates:
            if x < border or y < border or x >= width - border or y >= height - border:
                continue
            value = float(intensity[y, x])
            if not math.isfinite(value):
                continue
            if maximum and value < self.threshold_max:
                continue
            if not maximum and value > self.threshold_min:
                continue

            region = intensity[max(0, y - r): y + r + 1, max(0, x - r): x + r + 1]
            if maximum:
                accepted = self.search.is_max(region, value)
            else:
                accepted = self.search.is_min(region, value)
            if accepted:
                found.append(Peak(int(x), int(y), value))
        return found


class NonMaxCandidateConcurrent(NonMaxCandidate):
    """
    Same contract as NonMaxCandidate, candidates examined in chunks on a thread pool.
    Chunk results are concatenated in candidate order so the output is identical
    to the sequential extractor.
    """

    def __init__(self, search: NonMaxSearch, radius: int, workers: int = 4, chunk_size: int = 4096, **kwargs) -> None:
        super().__init__(search, radius, **kwargs)
        if workers < 1:
            raise InvalidConfiguration(f"workers must be >= 1, got {workers}")
        self.workers = workers
        self.chunk_size = max(1, chunk_size)

    def _examine(self, intensity: np.ndarray, candidates: Sequence[Candidate], maximum: bool) -> List[Peak]:
        candidates = list(candidates)
        chunks = [candidates[i:i + self.chunk_size] for i in range(0, len(candidates), self.chunk_size)]
        if len(chunks) <= 1 or self.workers == 1:
            return self._examine_chunk(intensity, candidates, maximum)

        with ThreadPoolExecutor(max_workers=self.workers) as pool:
            parts = pool.map(lambda chunk: self._examine_chunk(intensity, chunk, maximum), chunks)
            found: List[Peak] = []
            for part in parts:
                found.extend(part)
        return found


def create_extractor(
    radius: int,
    threshold: float,
    ignore_border: int = 0,
    strict: bool = False,
    workers: int = 1,
) -> NonMaxCandidate:
    """Candidate extractor for maxima at or above `threshold` (and minima at or below -threshold)."""
    search: NonMaxSearch = StrictSearch() if strict else RelaxedSearch()
    kwargs = dict(threshold_min=-threshold, threshold_max=threshold, ignore_border=ignore_border)
    if workers > 1:
        return NonMaxCandidateConcurrent(search, radius, workers=workers, **kwargs)
    return NonMaxCandidate(search, radius, **kwargs)
