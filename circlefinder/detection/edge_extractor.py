"""Edge pixel selection from gradient magnitude."""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from skimage.filters import threshold_otsu

from circlefinder.preprocessing.gradient import GradientField

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgePixels:
    """Voting pixels as parallel column (x) and row (y) index arrays."""
    x: np.ndarray
    y: np.ndarray
    threshold: float = 0.0

    def __len__(self) -> int:
        return len(self.x)

    @classmethod
    def empty(cls, threshold: float = 0.0) -> "EdgePixels":
        return cls(np.empty(0, dtype=np.intp), np.empty(0, dtype=np.intp), threshold)


class EdgeExtractor:
    """Selects pixels whose gradient magnitude exceeds an adaptive threshold."""

    def __init__(self, threshold: Optional[float] = None, nbins: int = 256):
        """
        Initialize edge extractor.

        Args:
            threshold: Fraction of the maximum gradient magnitude in [0, 1].
                When None, Otsu's method picks it per image.
            nbins: Histogram bins for Otsu's method
        """
        if threshold is not None and not 0.0 <= threshold <= 1.0:
            raise ValueError(f"Edge threshold must be in [0, 1], got {threshold}")
        self.threshold = threshold
        self.nbins = nbins

    def extract(self, gradient: GradientField) -> EdgePixels:
        """
        Extract edge pixels.

        Args:
            gradient: Gradient field of the image

        Returns:
            EdgePixels in row-major scan order (empty if the image is flat)
        """
        magnitude = gradient.magnitude
        g_max = float(magnitude.max()) if magnitude.size else 0.0
        if g_max <= 0.0:
            logger.debug("Gradient is zero everywhere, no edge pixels")
            return EdgePixels.empty()

        fraction = self.threshold
        if fraction is None:
            fraction = self.select_threshold(magnitude / g_max)

        ys, xs = np.nonzero(magnitude > g_max * fraction)
        logger.debug("Edge threshold %.4f selected %d pixels", fraction, len(xs))
        return EdgePixels(x=xs.astype(np.intp), y=ys.astype(np.intp), threshold=float(fraction))

    def select_threshold(self, normalized: np.ndarray) -> float:
        """Otsu threshold of a magnitude image scaled to [0, 1]."""
        if np.all(normalized == normalized.flat[0]):
            return float(normalized.flat[0])
        return float(threshold_otsu(normalized, nbins=self.nbins))


def extract_edge_pixels(gradient: GradientField, threshold: Optional[float] = None) -> EdgePixels:
    """Convenience function for edge pixel extraction."""
    return EdgeExtractor(threshold).extract(gradient)
