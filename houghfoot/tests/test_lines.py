import math

import pytest

from houghfoot.lines import (
    LineParametric,
    LineSegment,
    angle_dist_half,
    point_segment_distance,
    segment_intersection,
)


def test_clip_vertical_line_to_image():
    seg = LineParametric(20, 50, 0, 1).clip_to_image(100, 100)
    assert seg == LineSegment(20, 0, 20, 99)


def test_clip_diagonal_line_to_image():
    seg = LineParametric(0, 0, 1, 1).clip_to_image(50, 80)
    assert seg.a == pytest.approx((0, 0))
    assert seg.b == pytest.approx((49, 49))


def test_clip_line_missing_image():
    assert LineParametric(-10, -10, 1, -1).clip_to_image(100, 100) is None


def test_clip_zero_direction_degenerates_to_point():
    assert LineParametric(5, 5, 0, 0).clip_to_image(10, 10) == LineSegment(5, 5, 5, 5)
    assert LineParametric(50, 5, 0, 0).clip_to_image(10, 10) is None


def test_angle_dist_half_ignores_direction():
    assert angle_dist_half(0.0, math.pi - 0.01) == pytest.approx(0.01)
    assert angle_dist_half(0.2, 0.2 + math.pi) == pytest.approx(0.0)
    assert angle_dist_half(0.0, math.pi / 2) == pytest.approx(math.pi / 2)


def test_segment_intersection():
    a = LineSegment(0, 0, 10, 10)
    b = LineSegment(0, 10, 10, 0)
    assert segment_intersection(a, b) == pytest.approx((5, 5))
    assert segment_intersection(a, LineSegment(0, 1, 10, 11)) is None
    assert segment_intersection(a, LineSegment(20, 0, 30, -10)) is None


def test_point_segment_distance():
    seg = LineSegment(0, 0, 10, 0)
    assert point_segment_distance((5, 3), seg) == pytest.approx(3)
    assert point_segment_distance((13, 4), seg) == pytest.approx(5)
    assert point_segment_distance((1, 1), LineSegment(0, 0, 0, 0)) == pytest.approx(math.sqrt(2))
