"""Performance tests."""

import pytest
import numpy as np
import time
import cv2
from circlefinder.core import CircleFinder
from circlefinder.utils.metrics import PerformanceMetrics


class TestPerformance:
    """Test performance benchmarks."""

    def test_pipeline_speed(self):
        """Test circle finding performance."""
        test_image = np.zeros((256, 256), dtype=np.uint8)
        cv2.circle(test_image, (70, 70), 30, 255, -1)
        cv2.circle(test_image, (180, 90), 40, 255, -1)
        cv2.circle(test_image, (120, 190), 35, 255, -1)

        start = time.time()
        CircleFinder().find(test_image, (20, 50))
        duration = (time.time() - start) * 1000

        assert duration < 5000  # Should complete in under 5 seconds

    def test_performance_metrics(self):
        """Test performance metrics tracking."""
        metrics = PerformanceMetrics()

        metrics.start_timer('test_operation')
        time.sleep(0.1)
        duration = metrics.stop_timer('test_operation')

        assert 90 < duration < 250  # Should be around 100ms

        summary = metrics.get_summary()
        assert 'test_operation' in summary

    def test_stop_unknown_timer(self):
        """Test stopping a timer that never started."""
        assert PerformanceMetrics().stop_timer('missing') == 0.0
