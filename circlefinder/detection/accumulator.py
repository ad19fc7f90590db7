"""
Circular Hough Transform accumulator with phase-coded radius.

Every edge pixel votes, for each candidate radius, at the point one radius
away along its gradient direction. Votes are complex: the magnitude is
1 / (2 pi r) and the phase encodes log(r) linearly over [-pi, pi], so a
single 2-D array carries both center strength and radius.
"""

import logging
from typing import Sequence, Tuple

import numpy as np

from circlefinder.preprocessing.gradient import GradientField
from circlefinder.detection.edge_extractor import EdgePixels

logger = logging.getLogger(__name__)

POLARITIES = ("bright", "dark")


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round to the nearest integer index, halves upwards."""
    return np.floor(np.asarray(values) + 0.5).astype(np.intp)


def radius_samples(r_min: float, r_max: float, step: float = 0.5) -> np.ndarray:
    """Uniform samples of [r_min, r_max] at the given step, both ends included when reachable."""
    if step <= 0:
        raise ValueError(f"Radius step must be positive, got {step}")
    if r_max < r_min:
        raise ValueError(f"Invalid radius range [{r_min}, {r_max}]")
    # Tolerance keeps r_max when (r_max - r_min) / step is integral up to rounding
    count = int(np.floor((r_max - r_min) / step + 1e-9)) + 1
    return r_min + step * np.arange(count, dtype=np.float64)


def log_radius_bounds(radii: np.ndarray) -> Tuple[float, float]:
    """Natural log of the first and last radius sample."""
    return float(np.log(radii[0])), float(np.log(radii[-1]))


def radius_phase(radii: np.ndarray) -> np.ndarray:
    """Map each radius to a phase in [-pi, pi], linear in log(radius)."""
    radii = np.asarray(radii, dtype=np.float64)
    ln_r = np.log(radii)
    ln_min, ln_max = log_radius_bounds(radii)
    if ln_max == ln_min:
        normalized = np.zeros_like(ln_r)
    else:
        normalized = (ln_r - ln_min) / (ln_max - ln_min)
    return normalized * 2 * np.pi - np.pi


def phase_weights(radii: np.ndarray) -> np.ndarray:
    """Complex vote weight per radius: exp(i * phase) / (2 pi r)."""
    radii = np.asarray(radii, dtype=np.float64)
    return np.exp(1j * radius_phase(radii)) / (2 * np.pi * radii)


class AccumulatorBuilder:
    """Builds the complex 2-D voting array for a radius range."""

    def __init__(self, radius_step: float = 0.5, max_chunk_elements: int = 1000000,
                 object_polarity: str = "bright"):
        """
        Initialize accumulator builder.

        Args:
            radius_step: Spacing of the candidate radii
            max_chunk_elements: Upper bound on edge pixels x radii handled per chunk
            object_polarity: "bright" for objects brighter than the background,
                "dark" for darker ones
        """
        if object_polarity not in POLARITIES:
            raise ValueError(f"object_polarity must be one of {POLARITIES}, got {object_polarity!r}")
        if max_chunk_elements < 1:
            raise ValueError(f"max_chunk_elements must be positive, got {max_chunk_elements}")
        self.radius_step = radius_step
        self.max_chunk_elements = int(max_chunk_elements)
        self.object_polarity = object_polarity

    def chunk_size(self, n_radii: int) -> int:
        """Number of edge pixels processed together."""
        return max(1, self.max_chunk_elements // max(n_radii, 1))

    def build(self, gradient: GradientField, edges: EdgePixels,
              radius_range: Sequence[float]) -> np.ndarray:
        """
        Accumulate votes from all edge pixels.

        Args:
            gradient: Gradient field the edge pixels were taken from
            edges: Voting pixels
            radius_range: (r_min, r_max)

        Returns:
            Complex array with the shape of the image
        """
        r_min, r_max = radius_range
        radii = radius_samples(r_min, r_max, self.radius_step)
        weights = phase_weights(radii)

        rows, cols = gradient.shape
        accumulator = np.zeros(rows * cols, dtype=np.complex128)
        n_edges = len(edges)
        if n_edges == 0:
            return accumulator.reshape(rows, cols)

        step = self.chunk_size(len(radii))
        n_chunks = 0
        for start in range(0, n_edges, step):
            stop = min(start + step, n_edges)
            accumulator += self._accumulate_chunk(
                gradient, edges.x[start:stop], edges.y[start:stop], radii, weights
            )
            n_chunks += 1

        logger.debug("Accumulated %d edge pixels x %d radii in %d chunk(s)",
                     n_edges, len(radii), n_chunks)
        return accumulator.reshape(rows, cols)

    def _accumulate_chunk(self, gradient: GradientField, xs: np.ndarray, ys: np.ndarray,
                          radii: np.ndarray, weights: np.ndarray) -> np.ndarray:
        """Votes of one chunk of edge pixels as a flattened partial accumulator."""
        rows, cols = gradient.shape
        magnitude = gradient.magnitude[ys, xs]
        ux = gradient.gx[ys, xs] / magnitude
        uy = gradient.gy[ys, xs] / magnitude
        if self.object_polarity == "dark":
            ux, uy = -ux, -uy

        # (n_pixels, n_radii) candidate centers
        xc = round_half_up(xs[:, None] - radii[None, :] * ux[:, None])
        yc = round_half_up(ys[:, None] - radii[None, :] * uy[:, None])

        inside = (xc >= 0) & (xc <= cols - 1) & (yc >= 0) & (yc < rows - 1)
        w = np.broadcast_to(weights, xc.shape)[inside]
        flat = yc[inside] * cols + xc[inside]

        partial = np.bincount(flat, weights=w.real, minlength=rows * cols).astype(np.complex128)
        partial.imag = np.bincount(flat, weights=w.imag, minlength=rows * cols)
        return partial


def compute_accumulator(gradient: GradientField, edges: EdgePixels,
                        radius_range: Sequence[float], **kwargs) -> np.ndarray:
    """Convenience function for accumulator construction."""
    return AccumulatorBuilder(**kwargs).build(gradient, edges, radius_range)
