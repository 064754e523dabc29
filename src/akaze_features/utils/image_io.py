import os
from dataclasses import dataclass

import cv2
import numpy as np

from ..exceptions import ImageLoadError
from ..options import Options


@dataclass(frozen=True)
class LoadedImage:
    """
    Grayscale input image together with its normalized float copy

    Attributes:
        gray: 8-bit single channel image as decoded
        normalized: float32 copy of ``gray`` scaled to [0, 1]
    """
    gray: np.ndarray
    normalized: np.ndarray

    @property
    def width(self) -> int:
        return self.gray.shape[1]

    @property
    def height(self) -> int:
        return self.gray.shape[0]


def normalize_image(gray: np.ndarray) -> np.ndarray:
    """Convert an 8-bit image to float32 intensities in [0, 1]"""
    return gray.astype(np.float32) / 255.0


def load_image(path: str) -> LoadedImage:
    """
    Read an image from disk as grayscale and normalize it

    Args:
        path: Image file path, in any format OpenCV can decode

    Returns:
        LoadedImage with the raw and normalized pixels

    Raises:
        ImageLoadError: The file is missing or cannot be decoded
    """
    if not os.path.isfile(path):
        raise ImageLoadError(path)

    gray = cv2.imread(path, cv2.IMREAD_GRAYSCALE)
    if gray is None or gray.size == 0:
        raise ImageLoadError(path)

    return LoadedImage(gray=gray, normalized=normalize_image(gray))


def bind_image_size(options: Options, image: LoadedImage) -> Options:
    """Return options carrying the loaded image dimensions"""
    return options.with_image_size(image.width, image.height)
