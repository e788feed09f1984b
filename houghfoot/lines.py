import math
from dataclasses import dataclass
from typing import Optional, Tuple

Point = Tuple[float, float]


@dataclass(frozen=True)
class LineSegment:
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def a(self) -> Point:
        return (self.x1, self.y1)

    @property
    def b(self) -> Point:
        return (self.x2, self.y2)


@dataclass(frozen=True)
class LineParametric:
    """Infinite line through (x, y) with direction (slope_x, slope_y), image pixels."""

    x: float
    y: float
    slope_x: float
    slope_y: float

    @property
    def angle(self) -> float:
        return math.atan2(self.slope_y, self.slope_x)

    def point_at(self, t: float) -> Point:
        return (self.x + t * self.slope_x, self.y + t * self.slope_y)

    def clip_to_image(self, width: int, height: int) -> Optional[LineSegment]:
        """
        Portion of the line inside [0, width-1] x [0, height-1], or None when the
        line misses the image.
        """
        t_min, t_max = -math.inf, math.inf
        for p, s, hi in ((self.x, self.slope_x, width - 1), (self.y, self.slope_y, height - 1)):
            if s == 0:
                if p < 0 or p > hi:
                    return None
                continue
            t0, t1 = (0 - p) / s, (hi - p) / s
            if t0 > t1:
                t0, t1 = t1, t0
            t_min = max(t_min, t0)
            t_max = min(t_max, t1)
        if t_min > t_max:
            return None
        if math.isinf(t_min):
            # zero direction, the line degenerates to its point
            return LineSegment(self.x, self.y, self.x, self.y)
        x1, y1 = self.point_at(t_min)
        x2, y2 = self.point_at(t_max)
        return LineSegment(x1, y1, x2, y2)


def angle_dist_half(a: float, b: float) -> float:
    """Difference between two undirected line angles, in [0, pi/2]."""
    diff = abs(a - b) % math.pi
    return min(diff, math.pi - diff)


def _cross(ax: float, ay: float, bx: float, by: float) -> float:
    return ax * by - ay * bx


def segment_intersection(a: LineSegment, b: LineSegment) -> Optional[Point]:
    """Intersection point of two segments, None when they are parallel or do not meet."""
    rx, ry = a.x2 - a.x1, a.y2 - a.y1
    sx, sy = b.x2 - b.x1, b.y2 - b.y1
    denom = _cross(rx, ry, sx, sy)
    if abs(denom) < 1e-12:
        return None
    qx, qy = b.x1 - a.x1, b.y1 - a.y1
    t = _cross(qx, qy, sx, sy) / denom
    u = _cross(qx, qy, rx, ry) / denom
    if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
        return (a.x1 + t * rx, a.y1 + t * ry)
    return None


def point_segment_distance(point: Point, seg: LineSegment) -> float:
    px, py = point
    dx, dy = seg.x2 - seg.x1, seg.y2 - seg.y1
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(px - seg.x1, py - seg.y1)
    t = max(0.0, min(1.0, ((px - seg.x1) * dx + (py - seg.y1) * dy) / length_sq))
    return math.hypot(px - (seg.x1 + t * dx), py - (seg.y1 + t * dy))
