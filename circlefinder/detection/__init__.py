"""Edge extraction, Hough voting, center and radius detection."""

from .edge_extractor import EdgeExtractor, EdgePixels
from .accumulator import AccumulatorBuilder
from .peak_detector import PeakDetector
from .radius_estimator import RadiusEstimator

__all__ = ['EdgeExtractor', 'EdgePixels', 'AccumulatorBuilder', 'PeakDetector', 'RadiusEstimator']
