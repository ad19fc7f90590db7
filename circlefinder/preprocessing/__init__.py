"""Input conversion and gradient computation."""

from .grayscale import to_grayscale
from .gradient import GradientField, compute_gradient

__all__ = ['to_grayscale', 'GradientField', 'compute_gradient']
