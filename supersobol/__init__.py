"""
supersobol : Super Sobol sensitivity indices of models whose parameter
uncertainties are themselves uncertain
"""
import logging as _logging

from supersobol.util.exceptions import (
    SuperSobolError, ConfigurationError, InvalidParameterError,
    DegenerateVarianceError, NotComputedError
)
from supersobol.expdesign.low_discrepancy_sequences import (
    halton_sequence, RandomizedHaltonSequence
)
from supersobol.variables.inverse_transform import InverseTransformSampler
from supersobol.analysis.super_sobol_indices import (
    SuperSobolIndices, SuperSobolResult, repeat_super_sobol_indices,
    run_super_sobol_sensitivity_analysis, plot_super_sobol_indices
)

_logging.getLogger(__name__).addHandler(_logging.NullHandler())

name = "supersobol"
__version__ = "0.1.0"

__all__ = ["SuperSobolError", "ConfigurationError", "InvalidParameterError",
           "DegenerateVarianceError", "NotComputedError",
           "halton_sequence", "RandomizedHaltonSequence",
           "InverseTransformSampler", "SuperSobolIndices", "SuperSobolResult",
           "repeat_super_sobol_indices",
           "run_super_sobol_sensitivity_analysis", "plot_super_sobol_indices"]
