"""Performance metrics and evaluation."""

import numpy as np
from typing import Dict, Optional
from time import perf_counter


class PerformanceMetrics:
    """Track performance metrics."""

    def __init__(self):
        self.start_times = {}
        self.durations = {}

    def start_timer(self, name: str):
        """Start timing an operation."""
        self.start_times[name] = perf_counter()

    def stop_timer(self, name: str) -> float:
        """Stop timing and return duration in milliseconds."""
        if name not in self.start_times:
            return 0.0
        duration = (perf_counter() - self.start_times.pop(name)) * 1000
        self.durations[name] = duration
        return duration

    def reset(self):
        """Forget all timings."""
        self.start_times.clear()
        self.durations.clear()

    def get_summary(self) -> Dict[str, float]:
        """Get summary of all timings."""
        return self.durations.copy()


class AccuracyMetrics:
    """Calculate accuracy metrics."""

    @staticmethod
    def calculate_precision_recall(true_positives: int, false_positives: int,
                                   false_negatives: int) -> Dict[str, float]:
        """Calculate precision, recall, and F1 score."""
        precision = true_positives / (true_positives + false_positives) if (true_positives + false_positives) > 0 else 0
        recall = true_positives / (true_positives + false_negatives) if (true_positives + false_negatives) > 0 else 0
        f1 = 2 * (precision * recall) / (precision + recall) if (precision + recall) > 0 else 0

        return {
            'precision': precision,
            'recall': recall,
            'f1_score': f1
        }

    @staticmethod
    def match_circles(detected: np.ndarray, ground_truth: np.ndarray,
                      max_center_error: float = 2.0) -> Dict[str, Optional[float]]:
        """
        Greedily match detected circles to ground truth circles.

        Detections are taken in order (strongest first); each one claims the
        nearest unmatched ground truth circle within max_center_error.

        Args:
            detected: (P, 3) array of (x, y, r), strongest first
            ground_truth: (Q, 3) array of (x, y, r)
            max_center_error: Largest center distance counted as a match

        Returns:
            Precision/recall/F1 plus mean center and radius error of matches
        """
        detected = np.asarray(detected, dtype=np.float64).reshape(-1, 3)
        ground_truth = np.asarray(ground_truth, dtype=np.float64).reshape(-1, 3)

        unmatched = np.ones(len(ground_truth), dtype=bool)
        center_errors = []
        radius_errors = []
        for x, y, r in detected:
            if not unmatched.any():
                break
            distances = np.hypot(ground_truth[:, 0] - x, ground_truth[:, 1] - y)
            distances[~unmatched] = np.inf
            best = int(np.argmin(distances))
            if distances[best] <= max_center_error:
                unmatched[best] = False
                center_errors.append(distances[best])
                radius_errors.append(abs(ground_truth[best, 2] - r))

        tp = len(center_errors)
        scores = AccuracyMetrics.calculate_precision_recall(
            tp, len(detected) - tp, len(ground_truth) - tp
        )
        scores['mean_center_error'] = float(np.mean(center_errors)) if center_errors else None
        scores['mean_radius_error'] = float(np.mean(radius_errors)) if radius_errors else None
        return scores
