import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from houghfoot.lines import (
    LineParametric,
    LineSegment,
    angle_dist_half,
    point_segment_distance,
    segment_intersection,
)

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    line: LineParametric
    intensity: float
    order: int


def _segments_close(a: LineSegment, b: LineSegment, tol_dist: float) -> bool:
    if segment_intersection(a, b) is not None:
        return True
    return (
        point_segment_distance(b.a, a) <= tol_dist
        or point_segment_distance(b.b, a) <= tol_dist
        or point_segment_distance(a.a, b) <= tol_dist
        or point_segment_distance(a.b, b) <= tol_dist
    )


class ImageLinePruneMerge:
    """
    Post-processing for lines found in a Hough transform: removes near-duplicates
    and keeps the strongest lines.
    """

    def __init__(self) -> None:
        self._entries: List[_Entry] = []
        self._added = 0

    def reset(self) -> None:
        self._entries = []
        self._added = 0

    def add(self, line: LineParametric, intensity: float) -> None:
        self._entries.append(_Entry(line, float(intensity), self._added))
        self._added += 1

    @property
    def size(self) -> int:
        return len(self._entries)

    def _sort_by_intensity(self) -> None:
        # ties keep insertion order
        self._entries.sort(key=lambda e: (-e.intensity, e.order))

    def prune_similar(self, tol_angle: float, tol_dist: float, img_width: int, img_height: int) -> None:
        """
        Groups lines that are nearly parallel and either cross inside the image or
        come within tol_dist pixels of each other there. Groups are connected
        components of that relation; only the strongest line of each survives.
        """
        n = len(self._entries)
        if n <= 1:
            return

        parent = list(range(n))

        def find(i: int) -> int:
            while parent[i] != i:
                parent[i] = parent[parent[i]]
                i = parent[i]
            return i

        def union(i: int, j: int) -> None:
            ri, rj = find(i), find(j)
            if ri != rj:
                parent[max(ri, rj)] = min(ri, rj)

        thetas = [e.line.angle for e in self._entries]
        segments: List[Optional[LineSegment]] = [
            e.line.clip_to_image(img_width, img_height) for e in self._entries
        ]

        for i in range(n):
            if segments[i] is None:
                continue
            for j in range(i + 1, n):
                if segments[j] is None:
                    continue
                if angle_dist_half(thetas[i], thetas[j]) > tol_angle:
                    continue
                if _segments_close(segments[i], segments[j], tol_dist):
                    union(i, j)

        best: Dict[int, _Entry] = {}
        for i, entry in enumerate(self._entries):
            root = find(i)
            kept = best.get(root)
            if kept is None or (entry.intensity, -entry.order) > (kept.intensity, -kept.order):
                best[root] = entry

        before = n
        self._entries = list(best.values())
        self._sort_by_intensity()
        logger.debug("prune_similar: %d -> %d lines", before, len(self._entries))

    def prune_relative(self, fraction: float) -> None:
        """Drops lines weaker than `fraction` of the strongest line."""
        if not self._entries:
            return
        top = max(e.intensity for e in self._entries)
        self._entries = [e for e in self._entries if e.intensity >= fraction * top]

    def prune_n_best(self, n: int) -> None:
        self._sort_by_intensity()
        if len(self._entries) > n:
            self._entries = self._entries[:max(0, n)]

    def create_list(self) -> List[LineParametric]:
        return [e.line for e in self._entries]

    def intensities(self) -> List[float]:
        return [e.intensity for e in self._entries]
