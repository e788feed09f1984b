import base64
from typing import Optional, Sequence

import cv2
import numpy as np

from houghfoot.config_line_detection import OVERLAY_ALPHA
from houghfoot.lines import LineParametric


def encode_overlay(image: np.ndarray) -> str:
    ok, buffer = cv2.imencode(".png", image)
    if not ok:
        return ""
    b64 = base64.b64encode(buffer).decode("utf-8")
    return f"data:image/png;base64,{b64}"


def decode_image(data_url: str) -> Optional[np.ndarray]:
    """BGR image from a data URL or bare base64 payload; None when it holds no bytes."""
    _, _, payload = data_url.rpartition(",")
    raw = np.frombuffer(base64.b64decode(payload), dtype=np.uint8)
    return cv2.imdecode(raw, cv2.IMREAD_COLOR) if raw.size else None


def draw_lines(image: np.ndarray, lines: Sequence[LineParametric], alpha: float = OVERLAY_ALPHA) -> np.ndarray:
    """Blend the detected lines, clipped to the image, over a BGR copy of `image`."""
    base = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR) if image.ndim == 2 else image
    if base.dtype != np.uint8:
        base = cv2.normalize(base, None, 0, 255, cv2.NORM_MINMAX).astype(np.uint8)
    height, width = base.shape[:2]

    overlay = base.copy()
    for line in lines:
        seg = line.clip_to_image(width, height)
        if seg is None:
            continue
        cv2.line(
            overlay,
            (int(round(seg.x1)), int(round(seg.y1))),
            (int(round(seg.x2)), int(round(seg.y2))),
            (0, 122, 255),
            2,
            cv2.LINE_AA,
        )
    return cv2.addWeighted(base, 1.0 - alpha, overlay, alpha, 0)
