"""Tests for edge extraction and peak detection."""

import pytest
import numpy as np
import cv2
from circlefinder.preprocessing.gradient import GradientField, compute_gradient
from circlefinder.detection.edge_extractor import EdgeExtractor, EdgePixels, extract_edge_pixels
from circlefinder.detection.peak_detector import (
    PeakDetector, find_circle_centers, suppress_shallow_maxima
)


def field_from_magnitude(magnitude):
    magnitude = np.asarray(magnitude, dtype=np.float64)
    return GradientField(gx=magnitude.copy(), gy=np.zeros_like(magnitude), magnitude=magnitude)


def gaussian_blob(shape, center, amplitude, sigma=2.0):
    yy, xx = np.mgrid[:shape[0], :shape[1]]
    cx, cy = center
    return amplitude * np.exp(-((xx - cx) ** 2 + (yy - cy) ** 2) / (2 * sigma ** 2))


class TestEdgeExtractor:
    """Test edge pixel selection."""

    def test_initialization(self):
        """Test EdgeExtractor defaults."""
        extractor = EdgeExtractor()
        assert extractor.threshold is None
        assert extractor.nbins == 256

    def test_invalid_threshold(self):
        """Test that thresholds outside [0, 1] are rejected."""
        with pytest.raises(ValueError):
            EdgeExtractor(threshold=1.5)
        with pytest.raises(ValueError):
            EdgeExtractor(threshold=-0.1)

    def test_explicit_threshold_is_strict(self):
        """Test that only magnitudes strictly above the cutoff are kept."""
        gradient = field_from_magnitude([[0, 1], [2, 4]])
        edges = EdgeExtractor(threshold=0.5).extract(gradient)
        assert isinstance(edges, EdgePixels)
        assert edges.x.tolist() == [1]
        assert edges.y.tolist() == [1]
        assert edges.threshold == 0.5

    def test_row_major_order(self):
        """Test that edge pixels come out in a stable scan order."""
        gradient = field_from_magnitude([[1, 0, 1], [0, 1, 0], [1, 0, 1]])
        edges = extract_edge_pixels(gradient, threshold=0.0)
        assert list(zip(edges.y.tolist(), edges.x.tolist())) == [(0, 0), (0, 2), (1, 1), (2, 0), (2, 2)]

    def test_flat_image_has_no_edges(self):
        """Test zero gradient."""
        edges = EdgeExtractor().extract(compute_gradient(np.zeros((20, 20))))
        assert len(edges) == 0

    def test_adaptive_threshold_on_disk(self):
        """Test Otsu threshold on a disk boundary."""
        image = np.zeros((80, 80), dtype=np.float32)
        cv2.circle(image, (40, 40), 20, 1.0, -1)
        gradient = compute_gradient(image)

        edges = EdgeExtractor().extract(gradient)
        assert 0 < edges.threshold < 1
        assert len(edges) > 0
        distances = np.hypot(edges.x - 40, edges.y - 40)
        assert np.all(np.abs(distances - 20) < 3)


class TestPeakDetector:
    """Test center detection in accumulator arrays."""

    def test_initialization(self):
        """Test PeakDetector defaults."""
        detector = PeakDetector()
        assert detector.median_filter_size == 5

    def test_invalid_threshold(self):
        """Test that thresholds outside [0, 1] are rejected."""
        with pytest.raises(ValueError):
            PeakDetector().find(np.zeros((10, 10)), 1.2)

    def test_zero_accumulator(self):
        """Test that an empty accumulator yields no centers."""
        centers, metric = PeakDetector().find(np.zeros((30, 30), dtype=complex), 0.15)
        assert centers.shape == (0, 2)
        assert metric.shape == (0,)

    def test_constant_accumulator(self):
        """Test that a flat accumulator has no regional maximum."""
        centers, metric = PeakDetector().find(np.full((30, 30), 0.5), 0.15)
        assert len(centers) == 0

    def test_single_peak(self):
        """Test one blob."""
        accumulator = gaussian_blob((40, 40), (22, 15), 2.0)
        centers, metric = PeakDetector().find(accumulator, 0.15)

        assert len(centers) == 1
        assert centers[0] == pytest.approx([22, 15], abs=0.5)
        assert metric[0] > 0.15

    def test_complex_accumulator_uses_magnitude(self):
        """Test that the phase does not influence detection."""
        magnitude = gaussian_blob((40, 40), (22, 15), 2.0)
        real_centers, real_metric = PeakDetector().find(magnitude, 0.15)
        complex_centers, complex_metric = PeakDetector().find(magnitude * np.exp(0.7j), 0.15)

        np.testing.assert_allclose(complex_centers, real_centers)
        np.testing.assert_allclose(complex_metric, real_metric)

    def test_peaks_sorted_by_metric(self):
        """Test descending order."""
        accumulator = gaussian_blob((40, 60), (12, 20), 1.0) + gaussian_blob((40, 60), (45, 20), 3.0)
        centers, metric = PeakDetector().find(accumulator, 0.1)

        assert len(centers) == 2
        assert centers[0] == pytest.approx([45, 20], abs=0.5)
        assert centers[1] == pytest.approx([12, 20], abs=0.5)
        assert metric[0] > metric[1]

    def test_shallow_peak_suppressed(self):
        """Test that a bump below the suppression height is removed."""
        accumulator = gaussian_blob((40, 60), (12, 20), 2.0) + gaussian_blob((40, 60), (45, 20), 0.05)
        centers, _ = PeakDetector().find(accumulator, 0.2)

        assert len(centers) == 1
        assert centers[0] == pytest.approx([12, 20], abs=0.5)

    def test_small_accumulator_skips_smoothing(self):
        """Test metric equals the suppressed peak height without median filtering."""
        accumulator = np.zeros((4, 4))
        accumulator[1, 2] = 1.0
        centers, metric = PeakDetector().find(accumulator, 0.2)

        assert centers.tolist() == [[2.0, 1.0]]
        assert metric[0] == pytest.approx(0.8)

    def test_ties_keep_discovery_order(self):
        """Test stable ordering for equal metrics."""
        accumulator = np.zeros((5, 5))
        accumulator[1, 3] = 1.0
        accumulator[3, 1] = 1.0
        centers, metric = find_circle_centers(accumulator, 0.1)

        assert metric[0] == metric[1]
        assert centers.tolist() == [[3.0, 1.0], [1.0, 3.0]]

    def test_zero_weight_peak_dropped(self):
        """Test that a smoothed maximum over zero-valued raw cells is discarded."""
        # A ring of ones two cells around (6, 6): the 5x5 median is 1 at the
        # ring center only, where the raw accumulator is 0
        accumulator = np.zeros((12, 12))
        accumulator[4:9, 4:9] = 1.0
        accumulator[5:8, 5:8] = 0.0

        detector = PeakDetector()
        smoothed = detector.smooth(accumulator)
        assert smoothed[6, 6] == 1.0
        assert np.count_nonzero(smoothed) == 1

        centers, metric = detector.find(accumulator, 0.1)
        assert centers.shape == (0, 2)
        assert metric.shape == (0,)

    def test_zero_weight_peak_dropped_beside_real_peak(self):
        """Test that only finite centers survive next to a zero-weight maximum."""
        accumulator = np.zeros((12, 24))
        accumulator[4:9, 4:9] = 1.0
        accumulator[5:8, 5:8] = 0.0
        accumulator[4:9, 16:21] = 2.0

        centers, metric = PeakDetector().find(accumulator, 0.1)
        assert len(centers) == 1
        assert np.all(np.isfinite(centers))
        assert np.all(np.isfinite(metric))
        assert centers[0] == pytest.approx([18, 6])

    def test_suppress_shallow_maxima(self):
        """Test h-maxima transform."""
        image = np.array([[0, 0, 0, 0, 0],
                          [0, 3, 0, 1, 0],
                          [0, 0, 0, 0, 0]], dtype=np.float64)
        result = suppress_shallow_maxima(image, 2.0)

        assert result[1, 1] == pytest.approx(1.0)
        assert result[1, 3] == pytest.approx(0.0)
        np.testing.assert_array_equal(suppress_shallow_maxima(image, 0.0), image)
