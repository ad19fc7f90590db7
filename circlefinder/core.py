"""
circlefinder Core Processor
Finds circles of bounded radius with a phase-coded Circular Hough Transform
"""

import logging
import math
import warnings
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from circlefinder.config import DEFAULT_CONFIG, merge_config
from circlefinder.preprocessing.grayscale import to_grayscale
from circlefinder.preprocessing.gradient import compute_gradient
from circlefinder.detection.edge_extractor import EdgeExtractor
from circlefinder.detection.accumulator import AccumulatorBuilder
from circlefinder.detection.peak_detector import PeakDetector
from circlefinder.detection.radius_estimator import RadiusEstimator
from circlefinder.utils.metrics import PerformanceMetrics

logger = logging.getLogger(__name__)

RadiusRange = Union[float, Sequence[float]]


@dataclass
class CircleResult:
    """Detected circles, strongest first."""
    centers: np.ndarray
    metric: np.ndarray
    radii: Optional[np.ndarray] = None

    def __len__(self) -> int:
        return len(self.metric)

    @classmethod
    def empty(cls, with_radii: bool = True) -> "CircleResult":
        return cls(
            centers=np.empty((0, 2), dtype=np.float64),
            metric=np.empty(0, dtype=np.float64),
            radii=np.empty(0, dtype=np.float64) if with_radii else None,
        )

    def as_tuples(self) -> List[Tuple[float, float, Optional[float]]]:
        """Circles as (x, y, radius) tuples; radius is None when not estimated."""
        radii = self.radii if self.radii is not None else [None] * len(self)
        return [(float(x), float(y), None if r is None else float(r))
                for (x, y), r in zip(self.centers, radii)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "circles_detected": len(self),
            "centers": self.centers.tolist(),
            "metric": self.metric.tolist(),
            "radii": self.radii.tolist() if self.radii is not None else None,
        }


def validate_radius_range(radius_range: RadiusRange) -> Tuple[float, float]:
    """Normalize a scalar or (min, max) radius range, rejecting invalid ones."""
    values = np.atleast_1d(np.asarray(radius_range, dtype=np.float64))
    if values.ndim != 1 or len(values) not in (1, 2):
        raise ValueError(f"Radius range must be a scalar or [min, max], got {radius_range!r}")
    r_min, r_max = float(values[0]), float(values[-1])
    if not (math.isfinite(r_min) and math.isfinite(r_max)):
        raise ValueError(f"Radius range must be finite, got {radius_range!r}")
    if r_min <= 0:
        raise ValueError(f"Minimum radius must be positive, got {r_min}")
    if r_max < r_min:
        raise ValueError(f"Maximum radius {r_max} is smaller than minimum radius {r_min}")
    return r_min, r_max


def validate_sensitivity(sensitivity: float) -> float:
    sensitivity = float(sensitivity)
    if not 0.0 <= sensitivity <= 1.0:
        raise ValueError(f"Sensitivity must be in [0, 1], got {sensitivity}")
    return sensitivity


class CircleFinder:
    """Main processor for circle detection"""

    def __init__(self, config: Dict[str, Any] = None):
        """
        Initialize circle finder

        Args:
            config: Configuration overrides, same layout as DEFAULT_CONFIG (optional)
        """
        self.config = merge_config(DEFAULT_CONFIG, config)
        acc_cfg = self.config["accumulator"]

        self.edge_extractor = EdgeExtractor(threshold=self.config["edge"]["threshold"])
        self.accumulator_builder = AccumulatorBuilder(
            radius_step=acc_cfg["radius_step"],
            max_chunk_elements=acc_cfg["max_chunk_elements"],
            object_polarity=acc_cfg["object_polarity"],
        )
        self.peak_detector = PeakDetector(
            median_filter_size=self.config["peaks"]["median_filter_size"]
        )
        self.radius_estimator = RadiusEstimator(radius_step=acc_cfg["radius_step"])
        self.metrics = PerformanceMetrics()

    @property
    def timings(self) -> Dict[str, float]:
        """Stage durations in milliseconds for the last call to find()."""
        return self.metrics.get_summary()

    def find(self, image: np.ndarray, radius_range: RadiusRange,
             sensitivity: Optional[float] = None,
             return_radii: bool = True) -> CircleResult:
        """
        Find circles in an image

        Args:
            image: Grayscale or BGR image
            radius_range: Radius or (min, max) radius in pixels
            sensitivity: Value in [0, 1]; higher finds weaker circles.
                Defaults to the configured sensitivity
            return_radii: Estimate a radius for each circle

        Returns:
            CircleResult sorted by descending metric
        """
        r_min, r_max = validate_radius_range(radius_range)
        if sensitivity is None:
            sensitivity = self.config["detection"]["sensitivity"]
        sensitivity = validate_sensitivity(sensitivity)

        if r_min <= self.config["detection"]["small_radius_warning"]:
            message = (f"Minimum radius {r_min} is small; detection accuracy "
                       f"degrades for radii of {self.config['detection']['small_radius_warning']} pixels or less")
            logger.warning(message)
            warnings.warn(message, UserWarning, stacklevel=2)

        self.metrics.reset()
        empty = CircleResult.empty(with_radii=return_radii)

        self.metrics.start_timer("gradient")
        gradient = compute_gradient(to_grayscale(image))
        self.metrics.stop_timer("gradient")

        self.metrics.start_timer("edges")
        edges = self.edge_extractor.extract(gradient)
        self.metrics.stop_timer("edges")
        if len(edges) == 0:
            logger.debug("No edge pixels found")
            return empty

        self.metrics.start_timer("accumulator")
        accumulator = self.accumulator_builder.build(gradient, edges, (r_min, r_max))
        self.metrics.stop_timer("accumulator")
        if not accumulator.any():
            logger.debug("Accumulator is empty")
            return empty

        threshold = 1.0 - sensitivity
        self.metrics.start_timer("peaks")
        centers, metric = self.peak_detector.find(accumulator, threshold)
        self.metrics.stop_timer("peaks")
        if len(centers) == 0:
            return empty

        keep = metric >= threshold
        centers, metric = centers[keep], metric[keep]
        if len(centers) == 0:
            return empty

        radii = None
        if return_radii:
            self.metrics.start_timer("radii")
            radii = self.radius_estimator.estimate(centers, accumulator, (r_min, r_max))
            self.metrics.stop_timer("radii")

        logger.debug("Accepted %d circle(s) at threshold %.3f", len(centers), threshold)
        return CircleResult(centers=centers, metric=metric, radii=radii)


def find_circles(image: np.ndarray, radius_range: RadiusRange,
                 sensitivity: float = 0.85) -> CircleResult:
    """Convenience function for circle detection with default settings."""
    return CircleFinder().find(image, radius_range, sensitivity)
