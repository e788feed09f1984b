# Foot-of-norm Hough line detection

from houghfoot.config_line_detection import DetectorConfig
from houghfoot.detector import DetectLineHoughFoot
from houghfoot.errors import InvalidConfiguration, ShapeMismatch
from houghfoot.lines import LineParametric, LineSegment
from houghfoot.prune_merge import ImageLinePruneMerge

__all__ = [
    "DetectorConfig",
    "DetectLineHoughFoot",
    "InvalidConfiguration",
    "ShapeMismatch",
    "LineParametric",
    "LineSegment",
    "ImageLinePruneMerge",
]
