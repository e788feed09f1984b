"""
Full processing chain for detecting lines with a foot-of-norm Hough transform.

Blurring the image before computing the gradients usually improves the
results. Detection is not perfect: to find all the obvious lines in an image
a few false positives will typically be returned as well.
"""
import logging
from typing import List, Optional

import numpy as np

from houghfoot.config_line_detection import BLUR_SIGMA, MERGE_ANGLE_RADIANS, MERGE_DISTANCE_PX, DetectorConfig
from houghfoot.edges import compute_gradients, intensity_abs, threshold
from houghfoot.errors import check_same_shape
from houghfoot.hough_foot import HoughTransformLineFootOfNorm
from houghfoot.lines import LineParametric
from houghfoot.nonmax import create_extractor
from houghfoot.prune_merge import ImageLinePruneMerge

logger = logging.getLogger(__name__)


def _read_only(buffer: np.ndarray) -> np.ndarray:
    view = buffer.view()
    view.flags.writeable = False
    return view


class DetectLineHoughFoot:
    def __init__(self, config: DetectorConfig) -> None:
        self.config = config

        extractor = create_extractor(
            radius=config.local_max_radius,
            threshold=config.min_counts,
            ignore_border=0,
            strict=config.strict,
            workers=config.workers,
        )
        self.transform = HoughTransformLineFootOfNorm(
            extractor,
            config.min_distance_from_origin,
            workers=config.workers,
        )
        self.post = ImageLinePruneMerge()

        # tuning parameters for merging, may be changed between calls
        self.merge_angle = MERGE_ANGLE_RADIANS
        self.merge_distance = MERGE_DISTANCE_PX

        # scratch buffers, reshaped when the input size changes
        self._intensity = np.zeros((1, 1), dtype=np.float32)
        self._binary = np.zeros((1, 1), dtype=np.uint8)

        # published results
        self.found_lines: List[LineParametric] = []
        self.found_intensity: List[float] = []
        self.edge_intensity: Optional[np.ndarray] = None
        self.binary: Optional[np.ndarray] = None
        self.raw_line_count = 0

    def detect(self, deriv_x: np.ndarray, deriv_y: np.ndarray) -> List[LineParametric]:
        check_same_shape(deriv_x, deriv_y)
        height, width = deriv_x.shape

        self._intensity = intensity_abs(deriv_x, deriv_y, self._intensity)
        self._binary = threshold(self._intensity, self.config.threshold_edge, self._binary)

        self.transform.transform(deriv_x, deriv_y, self._binary)
        lines = self.transform.extract_lines()
        raw_count = len(lines)

        self.post.reset()
        for line, intensity in zip(lines, self.transform.found_intensity):
            self.post.add(line, intensity)

        # angular accuracy depends on the distance from the transform origin, the
        # pruning below uses one tolerance for the whole image
        self.post.prune_similar(float(self.merge_angle), float(self.merge_distance), width, height)
        self.post.prune_n_best(self.config.max_lines)

        self.found_lines = self.post.create_list()
        self.found_intensity = self.post.intensities()
        self.edge_intensity = _read_only(self._intensity)
        self.binary = _read_only(self._binary)
        self.raw_line_count = raw_count

        logger.debug(
            "detect %dx%d: %d edge pixels, %d raw lines, %d kept",
            width,
            height,
            int(np.count_nonzero(self._binary)),
            raw_count,
            len(self.found_lines),
        )
        return self.found_lines

    def detect_image(self, image: np.ndarray, blur_sigma: Optional[float] = BLUR_SIGMA) -> List[LineParametric]:
        deriv_x, deriv_y = compute_gradients(image, blur_sigma=blur_sigma)
        return self.detect(deriv_x, deriv_y)
