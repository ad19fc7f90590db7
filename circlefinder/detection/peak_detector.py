"""Circle center detection in the Hough accumulator."""

import logging
from typing import Tuple

import numpy as np
from scipy import ndimage
from skimage.measure import label, regionprops
from skimage.morphology import local_maxima, reconstruction

from circlefinder.detection.accumulator import round_half_up

logger = logging.getLogger(__name__)


def suppress_shallow_maxima(image: np.ndarray, height: float) -> np.ndarray:
    """
    H-maxima transform: flatten every maximum less than `height` above its saddle.

    Implemented as grayscale reconstruction by dilation of (image - height)
    under image.
    """
    if height <= 0:
        return image.copy()
    return reconstruction(image - height, image, method='dilation')


class PeakDetector:
    """Finds candidate circle centers as regional maxima of the accumulator magnitude."""

    def __init__(self, median_filter_size: int = 5):
        """
        Initialize peak detector.

        Args:
            median_filter_size: Window of the smoothing median filter; smoothing
                is skipped for accumulators not larger than this in both dimensions
        """
        self.median_filter_size = median_filter_size

    def smooth(self, magnitude: np.ndarray) -> np.ndarray:
        """
        Median-filter the magnitude image when it is large enough.

        Borders are replicated rather than zero padded so that a constant
        accumulator stays constant and has no regional maximum.
        """
        size = self.median_filter_size
        if min(magnitude.shape) > size:
            return ndimage.median_filter(magnitude, size=size, mode='nearest')
        return magnitude

    def find(self, accumulator: np.ndarray, threshold: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Find candidate centers.

        Args:
            accumulator: Real or complex accumulator array
            threshold: Suppression height in [0, 1]

        Returns:
            (centers, metric): (P, 2) array of (x, y) and (P,) array,
            sorted by descending metric
        """
        if not 0.0 <= threshold <= 1.0:
            raise ValueError(f"Suppression threshold must be in [0, 1], got {threshold}")

        centers = np.empty((0, 2), dtype=np.float64)
        metric = np.empty(0, dtype=np.float64)

        magnitude = np.abs(accumulator).astype(np.float64)
        if not magnitude.any():
            return centers, metric

        height = max(threshold - np.spacing(threshold), 0.0)
        suppressed = suppress_shallow_maxima(self.smooth(magnitude), height)

        peaks = local_maxima(suppressed, connectivity=2, allow_borders=True)
        regions = regionprops(label(peaks, connectivity=2), intensity_image=magnitude)
        if not regions:
            return centers, metric

        with np.errstate(invalid='ignore', divide='ignore'):
            rc = np.array([region.centroid_weighted for region in regions], dtype=np.float64)

        rc = rc[~np.isnan(rc).any(axis=1)]
        if len(rc) == 0:
            return centers, metric

        centers = rc[:, ::-1].copy()
        metric = suppressed[round_half_up(rc[:, 0]), round_half_up(rc[:, 1])]

        order = np.argsort(-metric, kind='stable')
        logger.debug("Found %d candidate centers", len(order))
        return centers[order], metric[order]


def find_circle_centers(accumulator: np.ndarray, threshold: float,
                        median_filter_size: int = 5) -> Tuple[np.ndarray, np.ndarray]:
    """Convenience function for center detection."""
    return PeakDetector(median_filter_size).find(accumulator, threshold)
