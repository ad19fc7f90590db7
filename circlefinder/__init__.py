"""
circlefinder - circle detection with a phase-coded Circular Hough Transform.
"""

from .core import CircleFinder, CircleResult, find_circles

__all__ = ['CircleFinder', 'CircleResult', 'find_circles']
__version__ = '1.0.0'
