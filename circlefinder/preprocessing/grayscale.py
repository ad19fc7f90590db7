"""Grayscale conversion for detector input."""

import cv2
import numpy as np
from skimage.util import img_as_float32


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert an input image to a single floating-point channel.

    Args:
        image: 2-D grayscale, BGR or BGRA image of any numeric dtype

    Returns:
        2-D float32 image; integer inputs are rescaled to [0, 1]
    """
    image = np.asarray(image)

    if image.ndim == 3 and image.shape[2] == 1:
        image = image[:, :, 0]
    elif image.ndim == 3 and image.shape[2] in (3, 4):
        code = cv2.COLOR_BGR2GRAY if image.shape[2] == 3 else cv2.COLOR_BGRA2GRAY
        if image.dtype not in (np.uint8, np.uint16, np.float32):
            image = img_as_float32(image)
        image = cv2.cvtColor(image, code)
    elif image.ndim != 2:
        raise ValueError(f"Expected a 2-D or 3-channel image, got shape {image.shape}")

    if image.size == 0:
        raise ValueError("Input image is empty")

    return img_as_float32(image)
