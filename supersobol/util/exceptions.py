class SuperSobolError(Exception):
    """Base class of all errors raised by supersobol."""


class ConfigurationError(SuperSobolError, ValueError):
    """
    Raised when sizes or indices passed to a constructor are inconsistent,
    or when an object is used before it is ready, e.g. reading a coordinate
    of a sequence that has not generated a point yet.
    """


class InvalidParameterError(SuperSobolError, ValueError):
    """
    Raised when the parameters of a distribution violate the constraints
    of its family, e.g. a > b for a uniform distribution on [a, b].
    """


class DegenerateVarianceError(SuperSobolError, ArithmeticError):
    """
    Raised when the estimated variance of the model output is numerically
    zero, in which case sensitivity indices are undefined.
    """


class NotComputedError(SuperSobolError, RuntimeError):
    """Raised when results are requested before they have been computed."""
