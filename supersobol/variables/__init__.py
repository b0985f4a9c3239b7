"""The :mod:`supersobol.variables` module provides tools for drawing from
the uncertainty distributions of model parameters.
"""

from supersobol.variables.inverse_transform import InverseTransformSampler

__all__ = ["InverseTransformSampler"]
