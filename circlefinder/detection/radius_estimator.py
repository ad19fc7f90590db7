"""Radius estimation by decoding the accumulator phase."""

from typing import Sequence

import numpy as np

from circlefinder.detection.accumulator import (
    log_radius_bounds, radius_samples, round_half_up
)


class RadiusEstimator:
    """Recovers circle radii from the phase of the accumulator at each center."""

    def __init__(self, radius_step: float = 0.5):
        self.radius_step = radius_step

    def estimate(self, centers: np.ndarray, accumulator: np.ndarray,
                 radius_range: Sequence[float]) -> np.ndarray:
        """
        Estimate one radius per center.

        Args:
            centers: (P, 2) array of (x, y) centers
            accumulator: Complex accumulator the centers were found in
            radius_range: (r_min, r_max) used to build the accumulator

        Returns:
            (P,) array of radii
        """
        centers = np.asarray(centers, dtype=np.float64).reshape(-1, 2)
        r_min, r_max = radius_range
        radii = radius_samples(r_min, r_max, self.radius_step)

        if len(radii) == 1:
            return np.full(len(centers), float(r_min))
        if len(centers) == 0:
            return np.empty(0, dtype=np.float64)

        cols = round_half_up(centers[:, 0])
        rows = round_half_up(centers[:, 1])
        phase = np.angle(accumulator[rows, cols])

        ln_min, ln_max = log_radius_bounds(radii)
        normalized = (phase + np.pi) / (2 * np.pi)
        return np.exp(ln_min + normalized * (ln_max - ln_min))


def estimate_radii(centers: np.ndarray, accumulator: np.ndarray,
                   radius_range: Sequence[float], radius_step: float = 0.5) -> np.ndarray:
    """Convenience function for phase-coded radius estimation."""
    return RadiusEstimator(radius_step).estimate(centers, accumulator, radius_range)
