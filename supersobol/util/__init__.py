"""The :mod:`supersobol.util` module provides small numerical helpers and
the exceptions raised throughout the package.
"""

from supersobol.util.exceptions import (
    SuperSobolError, ConfigurationError, InvalidParameterError,
    DegenerateVarianceError, NotComputedError
)
from supersobol.util.utilities import (
    get_first_n_primes, get_summary_stat_functions
)

__all__ = ["SuperSobolError", "ConfigurationError", "InvalidParameterError",
           "DegenerateVarianceError", "NotComputedError",
           "get_first_n_primes", "get_summary_stat_functions"]
