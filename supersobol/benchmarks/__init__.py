"""The :mod:`supersobol.benchmarks` module provides models with known
Super Sobol indices
"""

from supersobol.benchmarks.sensitivity_benchmarks import (
    additive_model, get_additive_model_super_sobol_indices,
    ishigami_model, get_ishigami_super_sobol_indices
)

__all__ = ["additive_model", "get_additive_model_super_sobol_indices",
           "ishigami_model", "get_ishigami_super_sobol_indices"]
