"""Image gradient computation."""

from dataclasses import dataclass

import cv2
import numpy as np


@dataclass(frozen=True)
class GradientField:
    """
    Horizontal/vertical gradient components and their magnitude.

    The components point from bright towards dark pixels, so for a bright
    object the gradient on its boundary points away from the center.
    """
    gx: np.ndarray
    gy: np.ndarray
    magnitude: np.ndarray

    @property
    def shape(self):
        return self.magnitude.shape


def compute_gradient(image: np.ndarray) -> GradientField:
    """
    Compute Sobel gradients with replicated borders.

    Args:
        image: 2-D grayscale image

    Returns:
        GradientField with float64 components
    """
    image = np.asarray(image, dtype=np.float64)
    if image.ndim != 2:
        raise ValueError(f"Expected a 2-D image, got shape {image.shape}")

    gx = -cv2.Sobel(image, cv2.CV_64F, 1, 0, ksize=3, borderType=cv2.BORDER_REPLICATE)
    gy = -cv2.Sobel(image, cv2.CV_64F, 0, 1, ksize=3, borderType=cv2.BORDER_REPLICATE)

    return GradientField(gx=gx, gy=gy, magnitude=np.hypot(gx, gy))
