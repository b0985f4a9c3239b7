import numpy as np
from scipy import stats

from supersobol.util.exceptions import InvalidParameterError


def _check_unit_interval(u):
    if np.ndim(u) == 0:
        u = float(u)
        if not 0 <= u <= 1:
            raise InvalidParameterError(
                f"Inverse transform requires draws in [0, 1], got {u}")
        return u
    u = np.asarray(u, dtype=float)
    if np.any(~np.isfinite(u)) or np.any(u < 0) or np.any(u > 1):
        raise InvalidParameterError(
            f"Inverse transform requires draws in [0, 1], got {u}")
    return u


def _as_output(values):
    if np.ndim(values) == 0:
        return float(values)
    return values


class InverseTransformSampler(object):
    """
    Map uniform draws on [0, 1] to draws from a named distribution using
    the inverse of its cumulative distribution function.

    The sampler holds no state so a single instance can be shared between
    iterations and threads. Each family has its own method taking the
    uniform draw ``u`` followed by the parameters of the family.
    ``u`` may be a scalar or an np.ndarray, in which case an array of the
    same shape is returned.

    A family whose scale parameter is zero degenerates to a point mass and
    every draw equals its location.
    """

    # name: (min number of parameters, max number of parameters)
    _families = {
        "uniform": (2, 2),
        "normal": (2, 2),
        "lognormal": (2, 2),
        "exponential": (1, 1),
        "beta": (2, 4),
        "triangular": (3, 3)}

    def families(self):
        return list(self._families.keys())

    def nparams(self, family):
        """
        Return the minimum and maximum number of parameters of a family.
        """
        if family not in self._families:
            raise InvalidParameterError(
                f"Distribution family '{family}' not supported. "
                f"Select from {self.families()}")
        return self._families[family]

    def sample(self, family, u, params):
        """
        Draw from the distribution ``family`` with parameters ``params``.

        Parameters
        ----------
        family : string
            The name of the distribution family, e.g. "uniform"

        u : float or np.ndarray
            Uniform draw(s) in [0, 1]

        params : sequence
            The parameters of the distribution, passed positionally to the
            method of the family

        Returns
        -------
        value : float or np.ndarray
            The draw(s) from the distribution
        """
        min_nparams, max_nparams = self.nparams(family)
        if len(params) < min_nparams or len(params) > max_nparams:
            raise InvalidParameterError(
                f"Family '{family}' requires between {min_nparams} and "
                f"{max_nparams} parameters but {len(params)} were given")
        return getattr(self, family)(u, *params)

    def uniform(self, u, a, b):
        r"""
        Uniform distribution on :math:`[a, b]`, i.e. :math:`a+u(b-a)`.
        """
        u = _check_unit_interval(u)
        if not a <= b:
            raise InvalidParameterError(
                f"Uniform distribution requires a <= b, got a={a}, b={b}")
        return _as_output(a + u*(b - a))

    def normal(self, u, mean, std):
        u = _check_unit_interval(u)
        if not std >= 0:
            raise InvalidParameterError(
                f"Normal distribution requires std >= 0, got {std}")
        if std == 0:
            return _as_output(np.full(np.shape(u), float(mean)))
        return _as_output(stats.norm(loc=mean, scale=std).ppf(u))

    def lognormal(self, u, mu, sigma):
        """
        Lognormal distribution of exp(X) with X ~ N(mu, sigma**2).
        """
        u = _check_unit_interval(u)
        if not sigma >= 0:
            raise InvalidParameterError(
                f"Lognormal distribution requires sigma >= 0, got {sigma}")
        if sigma == 0:
            return _as_output(np.full(np.shape(u), np.exp(mu)))
        return _as_output(stats.lognorm(s=sigma, scale=np.exp(mu)).ppf(u))

    def exponential(self, u, rate):
        u = _check_unit_interval(u)
        if not rate > 0:
            raise InvalidParameterError(
                f"Exponential distribution requires rate > 0, got {rate}")
        return _as_output(stats.expon(scale=1./rate).ppf(u))

    def beta(self, u, alpha, beta, a=0, b=1):
        r"""
        Beta distribution with shapes alpha, beta scaled to :math:`[a, b]`.
        """
        u = _check_unit_interval(u)
        if not (alpha > 0 and beta > 0):
            raise InvalidParameterError(
                "Beta distribution requires positive shapes, got "
                f"alpha={alpha}, beta={beta}")
        if not a <= b:
            raise InvalidParameterError(
                f"Beta distribution requires a <= b, got a={a}, b={b}")
        if a == b:
            return _as_output(np.full(np.shape(u), float(a)))
        return _as_output(stats.beta(alpha, beta, loc=a, scale=b-a).ppf(u))

    def triangular(self, u, a, c, b):
        r"""
        Triangular distribution on :math:`[a, b]` with mode c.
        """
        u = _check_unit_interval(u)
        if not a <= c <= b:
            raise InvalidParameterError(
                "Triangular distribution requires a <= c <= b, got "
                f"a={a}, c={c}, b={b}")
        if a == b:
            return _as_output(np.full(np.shape(u), float(a)))
        return _as_output(
            stats.triang((c-a)/(b-a), loc=a, scale=b-a).ppf(u))

    def __repr__(self):
        return "{0}()".format(self.__class__.__name__)
