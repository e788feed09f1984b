import cv2
import numpy as np
import pytest


@pytest.fixture
def rectangle_image():
    """Filled white rectangle on black, sides at x=20, x=80, y=30, y=70."""
    image = np.zeros((100, 100), dtype=np.uint8)
    cv2.rectangle(image, (20, 30), (80, 70), color=255, thickness=-1)
    return image
