import numpy as np
import pytest

from houghfoot.edges import compute_gradients, intensity_abs, threshold
from houghfoot.errors import ShapeMismatch


def test_intensity_is_absolute_sum():
    dx = np.array([[3.0, -2.0], [0.0, 1.5]])
    dy = np.array([[-4.0, 2.0], [0.0, -0.5]])

    out = intensity_abs(dx, dy)

    assert out.dtype == np.float32
    np.testing.assert_allclose(out, [[7.0, 4.0], [0.0, 2.0]])


def test_intensity_shape_mismatch_leaves_buffer_alone():
    buffer = np.full((2, 2), 5.0, dtype=np.float32)
    with pytest.raises(ShapeMismatch):
        intensity_abs(np.zeros((2, 2)), np.zeros((2, 3)), buffer)
    assert np.all(buffer == 5.0)


def test_intensity_reuses_matching_buffer_and_reshapes_otherwise():
    buffer = np.zeros((4, 5), dtype=np.float32)
    same = intensity_abs(np.ones((4, 5)), np.ones((4, 5)), buffer)
    assert same is buffer

    other = intensity_abs(np.ones((6, 3)), np.ones((6, 3)), buffer)
    assert other is not buffer
    assert other.shape == (6, 3)


def test_threshold_is_exclusive_at_boundary():
    intensity = np.array([[29.9, 30.0, 30.1]], dtype=np.float32)

    mask = threshold(intensity, 30.0)

    assert mask.dtype == np.uint8
    assert mask.tolist() == [[0, 0, 1]]


def test_threshold_reuses_buffer():
    buffer = np.ones((1, 3), dtype=np.uint8)
    mask = threshold(np.zeros((1, 3), dtype=np.float32), 0.5, buffer)
    assert mask is buffer
    assert not mask.any()


def test_compute_gradients_on_vertical_step(rectangle_image):
    dx, dy = compute_gradients(rectangle_image, blur_sigma=None)

    assert dx.shape == dy.shape == rectangle_image.shape
    assert dx.dtype == np.float32
    # rising edge on the left side, no vertical change in the middle of it
    assert dx[50, 20] > 0
    assert dy[50, 20] == 0
    assert dx[50, 81] < 0


def test_compute_gradients_accepts_bgr(rectangle_image):
    bgr = np.dstack([rectangle_image] * 3)
    dx_gray, _ = compute_gradients(rectangle_image, blur_sigma=1.0)
    dx_bgr, _ = compute_gradients(bgr, blur_sigma=1.0)
    np.testing.assert_allclose(dx_gray, dx_bgr)


def test_intensity_of_int16_gradients_does_not_wrap():
    dx = np.array([[20000, -32768]], dtype=np.int16)
    dy = np.array([[20000, 0]], dtype=np.int16)

    out = intensity_abs(dx, dy)

    assert out.dtype == np.float32
    assert (out >= 0).all()
    np.testing.assert_array_equal(out, [[40000.0, 32768.0]])
    assert threshold(out, 30000.0).tolist() == [[1, 1]]
