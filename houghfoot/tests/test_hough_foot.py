import numpy as np
import pytest

from houghfoot.errors import ShapeMismatch
from houghfoot.hough_foot import HoughTransformLineFootOfNorm, foot_of_normal, foot_to_line
from houghfoot.lines import LineParametric
from houghfoot.nonmax import create_extractor


def _vertical_edge(shape=(12, 12), column=5, rows=range(2, 10)):
    dx = np.zeros(shape, dtype=np.float32)
    dy = np.zeros(shape, dtype=np.float32)
    binary = np.zeros(shape, dtype=np.uint8)
    for y in rows:
        dx[y, column] = 1.0
        binary[y, column] = 1
    return dx, dy, binary


def test_foot_of_normal_axis_aligned_and_diagonal():
    fx, fy = foot_of_normal(np.array([10]), np.array([3]), np.array([1.0]), np.array([0.0]), (0, 0))
    assert (fx[0], fy[0]) == (10, 0)

    # line x + y = 4 through (4, 0), closest point to the origin is (2, 2)
    fx, fy = foot_of_normal(np.array([4]), np.array([0]), np.array([1.0]), np.array([1.0]), (0, 0))
    assert (fx[0], fy[0]) == (2, 2)


def test_foot_of_normal_is_relative_to_origin():
    fx, fy = foot_of_normal(np.array([2]), np.array([9]), np.array([-1.0]), np.array([0.0]), (6, 6))
    assert (fx[0], fy[0]) == (2, 6)


def test_foot_to_line_is_perpendicular_to_origin_ray():
    line = foot_to_line(9, 2, (6, 6))
    assert line == LineParametric(9.0, 2.0, 4.0, 3.0)
    # (x - ox, y - oy) . slope == 0
    assert (9 - 6) * line.slope_x + (2 - 6) * line.slope_y == 0


def test_transform_votes_edge_column_into_one_cell():
    dx, dy, binary = _vertical_edge()
    # edge pixel without gradient casts no vote
    binary[0, 0] = 1

    alg = HoughTransformLineFootOfNorm(create_extractor(1, 3.0), min_distance_from_origin=1)
    transform = alg.transform(dx, dy, binary)

    assert alg.origin == (6, 6)
    assert transform[6, 5] == 8
    assert transform.sum() == 8
    assert alg.candidates == [(5, 6)]


def test_transform_is_reset_between_calls():
    dx, dy, binary = _vertical_edge()
    alg = HoughTransformLineFootOfNorm(create_extractor(1, 3.0), min_distance_from_origin=1)

    first = alg.transform(dx, dy, binary).copy()
    second = alg.transform(dx, dy, binary)

    np.testing.assert_array_equal(first, second)


def test_extract_lines_carries_intensity():
    dx, dy, binary = _vertical_edge()
    alg = HoughTransformLineFootOfNorm(create_extractor(1, 3.0), min_distance_from_origin=1)
    alg.transform(dx, dy, binary)

    lines = alg.extract_lines()

    assert lines == [LineParametric(5.0, 6.0, 0.0, -1.0)]
    assert alg.found_intensity == [8.0]


def test_extract_lines_ignores_peaks_near_origin():
    dx, dy, binary = _vertical_edge()
    alg = HoughTransformLineFootOfNorm(create_extractor(1, 3.0), min_distance_from_origin=2)
    alg.transform(dx, dy, binary)

    assert alg.extract_lines() == []
    assert alg.found_intensity == []


def test_extract_lines_respects_min_counts():
    dx, dy, binary = _vertical_edge()
    alg = HoughTransformLineFootOfNorm(create_extractor(1, 9.0), min_distance_from_origin=1)
    alg.transform(dx, dy, binary)
    assert alg.extract_lines() == []


def test_parallel_voting_matches_sequential():
    rng = np.random.default_rng(3)
    shape = (37, 53)
    dx = rng.normal(size=shape).astype(np.float32)
    dy = rng.normal(size=shape).astype(np.float32)
    binary = (rng.random(shape) > 0.6).astype(np.uint8)

    sequential = HoughTransformLineFootOfNorm(create_extractor(2, 2.0), 3, workers=1)
    parallel = HoughTransformLineFootOfNorm(create_extractor(2, 2.0, workers=4), 3, workers=4)

    np.testing.assert_array_equal(sequential.transform(dx, dy, binary), parallel.transform(dx, dy, binary))
    assert sequential.extract_lines() == parallel.extract_lines()
    assert sequential.found_intensity == parallel.found_intensity
    assert parallel.thread_safe


def test_transform_shape_mismatch():
    dx, dy, binary = _vertical_edge()
    alg = HoughTransformLineFootOfNorm(create_extractor(1, 3.0), 1)
    with pytest.raises(ShapeMismatch):
        alg.transform(dx, dy, binary[:, :-1])
