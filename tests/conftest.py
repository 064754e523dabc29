import os
import sys

import matplotlib
matplotlib.use("Agg")

import cv2
import numpy as np
import pytest

# Add src to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def sample_image():
    """Create a textured 8-bit test image with blob and corner structure"""
    rng = np.random.RandomState(42)
    image = rng.rand(256, 256) * 255
    image = cv2.GaussianBlur(image.astype(np.uint8), (5, 5), 1.5)

    cv2.circle(image, (128, 128), 30, 100, -1)
    cv2.circle(image, (64, 64), 20, 200, -1)
    cv2.circle(image, (192, 192), 25, 40, -1)
    cv2.rectangle(image, (160, 40), (220, 100), 230, -1)
    cv2.rectangle(image, (30, 170), (90, 220), 20, -1)

    return image


@pytest.fixture
def image_file(tmp_path, sample_image):
    """Write the sample image to a PNG file and return its path"""
    path = tmp_path / "sample.png"
    assert cv2.imwrite(str(path), sample_image)
    return path
