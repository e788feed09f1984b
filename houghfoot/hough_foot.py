"""
Hough transform for lines using a foot-of-normal parametrization.

Every edge pixel defines a line through itself, perpendicular to its gradient.
The point on that line closest to the transform origin (the foot of the normal)
is the cell that receives the vote. The origin sits at the image center, which
keeps the error of the estimate small across the image. Lines passing close to
the origin have a poorly defined orientation and are discarded at extraction.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Tuple

import numpy as np

from houghfoot.errors import check_same_shape
from houghfoot.lines import LineParametric
from houghfoot.nonmax import Candidate, NonMaxCandidate

logger = logging.getLogger(__name__)


def foot_of_normal(
    xs: np.ndarray,
    ys: np.ndarray,
    deriv_x: np.ndarray,
    deriv_y: np.ndarray,
    origin: Tuple[int, int],
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Transform cells for pixels (xs, ys) with gradients (deriv_x, deriv_y).
    Gradients must be non-zero. Coordinates are truncated toward zero relative
    to the origin.
    """
    ox, oy = origin
    gx = deriv_x.astype(np.float64)
    gy = deriv_y.astype(np.float64)
    xr = xs - ox
    yr = ys - oy
    v = (xr * gx + yr * gy) / (gx * gx + gy * gy)
    fx = np.trunc(v * gx).astype(np.int64) + ox
    fy = np.trunc(v * gy).astype(np.int64) + oy
    return fx, fy


def foot_to_line(x: int, y: int, origin: Tuple[int, int]) -> LineParametric:
    """Line whose foot of normal is transform cell (x, y)."""
    x0 = x - origin[0]
    y0 = y - origin[1]
    return LineParametric(float(x), float(y), float(-y0), float(x0))


class HoughTransformLineFootOfNorm:
    def __init__(self, extractor: NonMaxCandidate, min_distance_from_origin: int, workers: int = 1) -> None:
        self.extractor = extractor
        self.min_distance_from_origin = min_distance_from_origin
        self.workers = max(1, workers)

        self.transform_image = np.zeros((1, 1), dtype=np.float32)
        self.origin: Tuple[int, int] = (0, 0)
        self.candidates: List[Candidate] = []
        self.found_intensity: List[float] = []

    @property
    def thread_safe(self) -> bool:
        # each worker votes into its own partial accumulator
        return True

    def transform(self, deriv_x: np.ndarray, deriv_y: np.ndarray, binary: np.ndarray) -> np.ndarray:
        check_same_shape(deriv_x, deriv_y, binary)
        height, width = binary.shape

        if self.transform_image.shape != (height, width):
            self.transform_image = np.zeros((height, width), dtype=np.float32)
        else:
            self.transform_image.fill(0)
        self.origin = (width // 2, height // 2)

        bands = self._row_bands(height)
        if len(bands) == 1:
            counts = self._vote_rows(deriv_x, deriv_y, binary, *bands[0])
        else:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                partials = list(pool.map(lambda band: self._vote_rows(deriv_x, deriv_y, binary, *band), bands))
            counts = np.zeros(height * width, dtype=np.int64)
            for partial in partials:
                counts += partial

        self.transform_image[...] = counts.reshape(height, width)

        ys, xs = np.nonzero(self.transform_image)
        self.candidates = list(zip(xs.tolist(), ys.tolist()))
        logger.debug("foot-of-norm transform: %d votes in %d cells", int(counts.sum()), len(self.candidates))
        return self.transform_image

    def _row_bands(self, height: int) -> List[Tuple[int, int]]:
        n = min(self.workers, max(1, height))
        edges = np.linspace(0, height, n + 1).astype(int)
        return [(int(a), int(b)) for a, b in zip(edges[:-1], edges[1:])]

    def _vote_rows(
        self,
        deriv_x: np.ndarray,
        deriv_y: np.ndarray,
        binary: np.ndarray,
        row_start: int,
        row_end: int,
    ) -> np.ndarray:
        height, width = binary.shape
        ys, xs = np.nonzero(binary[row_start:row_end])
        ys = ys + row_start
        gx = deriv_x[ys, xs]
        gy = deriv_y[ys, xs]

        # a pixel without gradient has no normal and casts no vote
        has_normal = (gx != 0) | (gy != 0)
        xs, ys, gx, gy = xs[has_normal], ys[has_normal], gx[has_normal], gy[has_normal]

        fx, fy = foot_of_normal(xs, ys, gx, gy, self.origin)
        inside = (fx >= 0) & (fx < width) & (fy >= 0) & (fy < height)
        return np.bincount(fy[inside] * width + fx[inside], minlength=height * width).astype(np.int64)

    def extract_lines(self) -> List[LineParametric]:
        _, found = self.extractor.process(self.transform_image, None, self.candidates)

        ox, oy = self.origin
        d = self.min_distance_from_origin
        lines: List[LineParametric] = []
        self.found_intensity = []
        for peak in found:
            if abs(peak.x - ox) >= d or abs(peak.y - oy) >= d:
                lines.append(foot_to_line(peak.x, peak.y, self.origin))
                self.found_intensity.append(peak.value)
        logger.debug("foot-of-norm extraction: %d peaks, %d lines", len(found), len(lines))
        return lines
