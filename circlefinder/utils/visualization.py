"""Visualization utilities for debugging and display."""

import cv2
import numpy as np
from typing import Tuple


def to_display_image(image: np.ndarray) -> np.ndarray:
    """Convert any grayscale or BGR image to 8-bit BGR."""
    image = np.asarray(image)
    if image.dtype != np.uint8:
        image = image.astype(np.float64)
        peak = image.max() if image.size else 0.0
        scale = 255.0 / peak if peak > 1.0 else 255.0
        image = np.clip(image * scale, 0, 255).astype(np.uint8)
    if image.ndim == 2:
        image = cv2.cvtColor(image, cv2.COLOR_GRAY2BGR)
    elif image.shape[2] == 4:
        image = cv2.cvtColor(image, cv2.COLOR_BGRA2BGR)
    return image


def draw_circles(image: np.ndarray, centers: np.ndarray, radii: np.ndarray,
                color: Tuple[int, int, int] = (0, 0, 255),
                thickness: int = 2) -> np.ndarray:
    """Draw detected circles on a BGR copy of the image."""
    output = to_display_image(image).copy()
    for (x, y), r in zip(np.asarray(centers).reshape(-1, 2), np.asarray(radii).ravel()):
        center = (int(round(x)), int(round(y)))
        cv2.circle(output, center, int(round(r)), color, thickness, cv2.LINE_AA)
        cv2.circle(output, center, 2, (255, 0, 0), -1)
    return output
