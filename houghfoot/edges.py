from typing import Optional, Tuple

import cv2
import numpy as np

from houghfoot.config_line_detection import BLUR_SIGMA, SOBEL_KSIZE
from houghfoot.errors import check_same_shape


def _reshape(out: Optional[np.ndarray], shape: Tuple[int, ...], dtype) -> np.ndarray:
    if out is None or out.shape != shape or out.dtype != dtype:
        return np.empty(shape, dtype=dtype)
    return out


def intensity_abs(
    deriv_x: np.ndarray,
    deriv_y: np.ndarray,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Edge intensity as |dx| + |dy|.

    The absolute-value sum is used instead of the Euclidean norm; edge
    thresholds are expressed in that unit. `out` is reused when it already
    has the right shape.
    """
    check_same_shape(deriv_x, deriv_y)
    out = _reshape(out, deriv_x.shape, np.float32)
    # summed in float so integer gradients (e.g. int16 Sobel output) cannot wrap
    np.add(np.abs(deriv_x, dtype=np.float32), np.abs(deriv_y, dtype=np.float32), out=out)
    return out


def threshold(
    intensity: np.ndarray,
    thresh: float,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """Binary edge mask, 1 where intensity is strictly above `thresh`."""
    out = _reshape(out, intensity.shape, np.uint8)
    np.greater(intensity, thresh, out=out, casting="unsafe")
    return out


def compute_gradients(
    image: np.ndarray,
    blur_sigma: Optional[float] = BLUR_SIGMA,
    ksize: int = SOBEL_KSIZE,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sobel derivatives of a gray or BGR image as float32 (dx, dy).

    Blurring before differentiation usually improves the detector's results;
    pass blur_sigma=None or 0 to skip it.
    """
    gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY) if image.ndim == 3 else image
    gray = gray.astype(np.float32)
    if blur_sigma:
        gray = cv2.GaussianBlur(gray, (0, 0), sigmaX=blur_sigma, sigmaY=blur_sigma)
    deriv_x = cv2.Sobel(gray, cv2.CV_32F, 1, 0, ksize=ksize)
    deriv_y = cv2.Sobel(gray, cv2.CV_32F, 0, 1, ksize=ksize)
    return deriv_x, deriv_y
