import logging
import numbers

import numpy as np
from scipy.optimize import OptimizeResult

from supersobol.expdesign.low_discrepancy_sequences import (
    RandomizedHaltonSequence
)
from supersobol.variables.inverse_transform import InverseTransformSampler
from supersobol.util.utilities import get_summary_stat_functions
from supersobol.util.exceptions import (
    ConfigurationError, InvalidParameterError, DegenerateVarianceError,
    NotComputedError
)

logger = logging.getLogger(__name__)


class SuperSobolResult(OptimizeResult):
    pass


def _validate_indices(indices, dim):
    if isinstance(indices, (str, bytes)):
        raise ConfigurationError(
            f"Parameter indices must be an iterable of integers, got "
            f"{indices!r}")
    try:
        indices = list(indices)
    except TypeError as e:
        raise ConfigurationError(
            f"Parameter indices must be an iterable of integers, got "
            f"{indices!r}") from e
    validated = set()
    for index in indices:
        if (isinstance(index, (bool, np.bool_)) or
                not isinstance(index, numbers.Integral)):
            raise ConfigurationError(
                f"Parameter indices must be integers, got {index!r}")
        if index < 1 or index > dim:
            raise ConfigurationError(
                f"Parameter index {index} is outside [1, {dim}]")
        validated.add(int(index))
    return frozenset(validated)


def _validate_uncertainty_params(uncertainty_params, families, dim, sampler):
    if len(uncertainty_params) != dim:
        raise ConfigurationError(
            f"{len(uncertainty_params)} uncertainty distributions were "
            f"given for {dim} parameters")
    if families is None:
        families = ["uniform"]*dim
    elif isinstance(families, str):
        families = [families]*dim
    if len(families) != dim:
        raise ConfigurationError(
            f"{len(families)} distribution families were given for {dim} "
            "parameters")

    params = []
    for jj, (family, dist_params) in enumerate(
            zip(families, uncertainty_params)):
        try:
            min_nparams, max_nparams = sampler.nparams(family)
        except InvalidParameterError as e:
            raise ConfigurationError(str(e)) from e
        dist_params = tuple(dist_params)
        if len(dist_params) < min_nparams or len(dist_params) > max_nparams:
            raise ConfigurationError(
                f"Uncertainty distribution {jj} ({family}) requires between "
                f"{min_nparams} and {max_nparams} parameters but "
                f"{len(dist_params)} were given")
        params.append(dist_params)
    return params, list(families)


def build_uncertainty_realization(sequence, sampler, uncertainty_params,
                                  families, s1, s2):
    r"""
    Transform the current point of a sequence of dimension :math:`2d` into
    two independent realizations of the parameter uncertainties.

    Coordinates :math:`1,\ldots,d` of the point feed ``s1`` and coordinates
    :math:`d+1,\ldots,2d` feed ``s2``.

    Parameters
    ----------
    sequence : :class:`supersobol.expdesign.RandomizedHaltonSequence`
        The sequence. ``next_point`` must have been called at least once

    sampler : :class:`supersobol.variables.InverseTransformSampler`
        The sampler used to map uniform coordinates to the uncertainty
        distributions

    uncertainty_params : list (d)
        The parameters of each uncertainty distribution, e.g. (a, b) for a
        uniform distribution on [a, b]

    families : list (d)
        The name of the family of each uncertainty distribution

    s1, s2 : np.ndarray (d)
        Arrays overwritten in place with the two realizations

    Returns
    -------
    s1, s2 : np.ndarray (d)
        The realizations
    """
    dim = s1.shape[0]
    for jj in range(dim):
        u1 = sequence.coordinate(jj+1)
        u2 = sequence.coordinate(jj+1+dim)
        s1[jj] = sampler.sample(families[jj], u1, uncertainty_params[jj])
        s2[jj] = sampler.sample(families[jj], u2, uncertainty_params[jj])
    return s1, s2


def assemble_pick_freeze_arguments(indices, s1, s2):
    """
    Build the two model arguments of the pick-freeze estimator.

    For each parameter j (1-based) in ``indices`` arg1 takes its value from
    s1 and arg2 from s2. For all other parameters the roles are swapped.
    Consequently arg1 shares the coordinates in ``indices`` with s1 and
    arg2 shares the remaining coordinates with s1.

    Parameters
    ----------
    indices : set
        The 1-based indices of the parameters being analyzed

    s1, s2 : np.ndarray (d)
        Two independent realizations of the parameter uncertainties

    Returns
    -------
    arg1, arg2 : np.ndarray (d)
        New arrays holding the model arguments
    """
    s1, s2 = np.asarray(s1), np.asarray(s2)
    mask = np.zeros(s1.shape[0], dtype=bool)
    for index in indices:
        mask[index-1] = True
    arg1 = np.where(mask, s1, s2)
    arg2 = np.where(mask, s2, s1)
    return arg1, arg2


class SuperSobolIndices(object):
    r"""
    Estimate the lower (closed first-order) and total Super Sobol indices of
    a subset :math:`u` of the parameters of a scalar model.

    The uncertainty :math:`s_j` of each parameter is drawn from its own
    distribution. At each of the ``nmc`` iterations two independent
    realizations :math:`s^1, s^2` are generated from one point of a
    randomized Halton sequence of dimension :math:`2d` and the model is
    evaluated at

    .. math::

       f_0 = f(s^1),\quad f_1 = f(s^1_u, s^2_{\sim u}),\quad
       f_2 = f(s^2_u, s^1_{\sim u})

    The indices are

    .. math::

       \underline{S}_u = \frac{\frac{1}{N}\sum g_0g_1 - \hat{\mu}_g^2}{\hat{D}},
       \qquad
       \overline{S}_u = \frac{\frac{1}{2N}\sum (f_0-f_2)^2}{\hat{D}}

    where :math:`g_i = f_i - c` are the outputs shifted by the first base
    evaluation :math:`c`, and :math:`\hat{\mu}_g` and :math:`\hat{D}` are
    the sample mean and variance of :math:`g_0`. The shift leaves the
    indices unchanged and avoids cancellation when the output mean is
    large compared to its standard deviation.

    See I.M. Sobol. Mathematics and Computers in Simulation 55 (2001) 271–280

    and

    Saltelli, Annoni et. al, Variance based sensitivity analysis of model
    output. Design and estimator for the total sensitivity index. 2010.
    https://doi.org/10.1016/j.cpc.2009.09.018

    Parameters
    ----------
    model : callable
        The model ``model(parameters, constants) -> float`` where both
        arguments are 1D np.ndarray

    constants : sequence
        Fixed constants passed unchanged to every model evaluation

    indices : iterable of integers
        The 1-based indices of the parameters in the subset :math:`u`

    uncertainty_params : sequence (dim)
        The parameters of the uncertainty distribution of each model
        parameter, e.g. [a, b] for a uniform distribution on [a, b]

    dim : integer
        The number of model parameters

    nmc : integer
        The number of Monte Carlo iterations

    families : list (dim) or string
        The family of each uncertainty distribution. Defaults to "uniform"
        for all parameters

    random_start : boolean
        Start the Halton sequence at a random index

    random_permute : boolean
        Scramble the digits of the Halton sequence

    seed : integer or np.random.SeedSequence
        Seed of the generator owned by the sequence

    variance_tol : float
        The output variance is considered zero if it is smaller than
        ``variance_tol`` times the second moment of the shifted outputs

    log_interval : integer
        If positive log progress every ``log_interval`` iterations
    """

    def __init__(self, model, constants, indices, uncertainty_params, dim,
                 nmc, families=None, random_start=True, random_permute=True,
                 seed=None, variance_tol=1e-12, log_interval=0):
        if not callable(model):
            raise ConfigurationError("model must be callable")
        if (not isinstance(dim, numbers.Integral) or
                not isinstance(nmc, numbers.Integral)):
            raise ConfigurationError("dim and nmc must be integers")
        if dim < 1:
            raise ConfigurationError(f"dim must be >= 1, got {dim}")
        if nmc < 1:
            raise ConfigurationError(f"nmc must be >= 1, got {nmc}")
        if variance_tol < 0:
            raise ConfigurationError("variance_tol must be non-negative")

        self._sampler = InverseTransformSampler()
        self._indices = _validate_indices(indices, dim)
        self._uncertainty_params, self._families = (
            _validate_uncertainty_params(
                uncertainty_params, families, dim, self._sampler))

        self._model = model
        self._constants = np.array(constants, dtype=float)
        self._constants.flags.writeable = False
        self._dim = int(dim)
        self._nmc = int(nmc)
        self._variance_tol = variance_tol
        self._log_interval = log_interval

        self._sequence = RandomizedHaltonSequence(
            2*self._dim, random_start, random_permute, seed)
        self._s1 = np.empty(self._dim)
        self._s2 = np.empty(self._dim)

        self._reset()

    def _reset(self):
        # sums of f-shift where shift is the first base evaluation
        self._accumulators = {
            "shift": None, "sum_f": 0.0, "sum_f2": 0.0, "sum_cross": 0.0,
            "sum_total": 0.0, "niterations": 0}
        self._fmin, self._fmax = np.inf, -np.inf
        self._mean, self._variance = None, None
        self._lower, self._total = None, None

    def _evaluate(self, parameters):
        value = np.asarray(
            self._model(parameters, self._constants), dtype=float)
        if value.size != 1:
            raise ConfigurationError(
                f"model must return a scalar but returned shape "
                f"{value.shape}")
        return value.item()

    def _accumulate(self, f0, f1, f2):
        acc = self._accumulators
        if acc["shift"] is None:
            acc["shift"] = f0
        g0, g1 = f0-acc["shift"], f1-acc["shift"]
        acc["sum_f"] += g0
        acc["sum_f2"] += g0*g0
        acc["sum_cross"] += g0*g1
        acc["sum_total"] += (f0-f2)**2
        acc["niterations"] += 1
        self._fmin = min(self._fmin, f0)
        self._fmax = max(self._fmax, f0)

    def run(self, callback=None):
        """
        Run the Monte Carlo iterations and compute the indices.

        Parameters
        ----------
        callback : callable
            Function ``callback(iteration, accumulators)`` called after
            each iteration with a copy of the running sums

        Returns
        -------
        lower, total : float
            The lower and total Super Sobol indices
        """
        self._reset()
        logger.info(
            "Computing Super Sobol indices of %s: dim=%d, nmc=%d, %r",
            sorted(self._indices), self._dim, self._nmc, self._sequence)
        for ii in range(self._nmc):
            self._sequence.next_point()
            build_uncertainty_realization(
                self._sequence, self._sampler, self._uncertainty_params,
                self._families, self._s1, self._s2)
            arg1, arg2 = assemble_pick_freeze_arguments(
                self._indices, self._s1, self._s2)
            f0 = self._evaluate(self._s1.copy())
            f1 = self._evaluate(arg1)
            f2 = self._evaluate(arg2)
            self._accumulate(f0, f1, f2)
            if callback is not None:
                callback(ii, dict(self._accumulators))
            if self._log_interval > 0 and (ii+1) % self._log_interval == 0:
                logger.debug("Completed %d of %d iterations", ii+1, self._nmc)
        self._finalize()
        return self._lower, self._total

    def _finalize(self):
        acc = self._accumulators
        nmc = acc["niterations"]
        shifted_mean = acc["sum_f"]/nmc
        second_moment = acc["sum_f2"]/nmc
        variance = second_moment-shifted_mean**2
        if (self._fmin == self._fmax or
                variance <= self._variance_tol*second_moment):
            msg = (f"Estimated variance {variance} of the model output is "
                   "numerically zero. Super Sobol indices are undefined")
            logger.error(msg)
            raise DegenerateVarianceError(msg)
        mean = acc["shift"]+shifted_mean
        self._mean, self._variance = mean, variance
        self._lower = (acc["sum_cross"]/nmc-shifted_mean**2)/variance
        self._total = 0.5*acc["sum_total"]/nmc/variance
        logger.info(
            "Super Sobol indices of %s: lower=%g, total=%g (mean=%g, "
            "variance=%g)", sorted(self._indices), self._lower, self._total,
            mean, variance)

    def _check_computed(self):
        if self._lower is None:
            raise NotComputedError(
                "Super Sobol indices have not been computed. Call run()")

    def lower_super_index(self):
        self._check_computed()
        return self._lower

    def total_super_index(self):
        self._check_computed()
        return self._total

    def mean(self):
        self._check_computed()
        return self._mean

    def variance(self):
        self._check_computed()
        return self._variance

    @property
    def accumulators(self):
        return dict(self._accumulators)

    @property
    def indices(self):
        return self._indices

    def __repr__(self):
        return "{0}(indices={1}, dim={2}, nmc={3})".format(
            self.__class__.__name__, sorted(self._indices), self._dim,
            self._nmc)


def repeat_super_sobol_indices(
        model, constants, indices, uncertainty_params, dim, nmc,
        nrealizations=10,
        summary_stats=["mean", "median", "min", "max", "std",
                       "quantile-0.25", "quantile-0.75"],
        seed=None, **kwargs):
    """
    Compute Super Sobol indices with independently randomized sequences.
    This allows estimation of the error due to the finite number of Monte
    Carlo iterations and requires ``3*nmc*nrealizations`` model evaluations.
    At least one of ``random_start`` and ``random_permute`` must be True.

    Parameters
    ----------
    nrealizations : integer
        The number of independent estimates

    summary_stats : list of strings
        The statistics used to summarize the estimates. See
        :func:`supersobol.util.utilities.get_summary_stat_functions`

    seed : integer
        Seed from which the seed of each realization is spawned

    kwargs : kwargs
        Options passed to :class:`SuperSobolIndices`

    The remaining arguments are documented in :class:`SuperSobolIndices`

    Returns
    -------
    result : dict
        Entries "lower_super_index", "total_super_index", "mean" and
        "variance" are dictionaries with one entry per summary statistic
        and the entry "values" containing the raw estimates. The entry
        "indices" holds the sorted index set.
    """
    if nrealizations < 1:
        raise ConfigurationError(
            f"nrealizations must be >= 1, got {nrealizations}")
    if (not kwargs.get("random_start", True) and
            not kwargs.get("random_permute", True)):
        raise ConfigurationError(
            "Repeated estimates require a randomized sequence. Set "
            "random_start or random_permute to True")
    stat_functions = get_summary_stat_functions(summary_stats)
    seeds = np.random.SeedSequence(seed).spawn(nrealizations)

    lowers, totals, means, variances = [], [], [], []
    for ii in range(nrealizations):
        estimator = SuperSobolIndices(
            model, constants, indices, uncertainty_params, dim, nmc,
            seed=seeds[ii], **kwargs)
        lower, total = estimator.run()
        lowers.append(lower)
        totals.append(total)
        means.append(estimator.mean())
        variances.append(estimator.variance())

    result = dict()
    result["indices"] = sorted(estimator.indices)
    data = [lowers, totals, means, variances]
    data_names = ["lower_super_index", "total_super_index", "mean",
                  "variance"]
    for item, name in zip(data, data_names):
        item = np.asarray(item)
        subdict = dict()
        for stat_name, sfun in stat_functions:
            subdict[stat_name] = sfun(item, axis=0)
        subdict["values"] = item
        result[name] = subdict
    return result


def run_super_sobol_sensitivity_analysis(
        model, constants, index_sets, uncertainty_params, dim, nmc,
        nrealizations=1, seed=None, **kwargs):
    """
    Compute Super Sobol indices of several subsets of the model parameters.

    Parameters
    ----------
    index_sets : list of iterables
        Each entry is a set of 1-based parameter indices

    nrealizations : integer
        If greater than one the indices of each set are estimated
        ``nrealizations`` times and the mean of the estimates is reported

    seed : integer
        Seed from which the seeds of all estimators are spawned

    kwargs : kwargs
        Options passed to :class:`SuperSobolIndices`

    The remaining arguments are documented in :class:`SuperSobolIndices`

    Returns
    -------
    result : :class:`SuperSobolResult`
         Result object with the following attributes

    lower_super_indices : np.ndarray (nsets)
        The lower Super Sobol index of each set

    total_super_indices : np.ndarray (nsets)
        The total Super Sobol index of each set

    mean : np.ndarray (nsets)
        The mean of the model output estimated with each set

    variance : np.ndarray (nsets)
        The variance of the model output estimated with each set

    index_sets : list
        The sorted index sets

    repeated : list
        The results of :func:`repeat_super_sobol_indices` for each set if
        ``nrealizations > 1`` otherwise None
    """
    if len(index_sets) == 0:
        raise ConfigurationError("At least one index set must be provided")
    set_seeds = np.random.SeedSequence(seed).spawn(len(index_sets))
    lowers, totals, means, variances, repeated = [], [], [], [], []
    for indices, set_seed in zip(index_sets, set_seeds):
        if nrealizations > 1:
            rep = repeat_super_sobol_indices(
                model, constants, indices, uncertainty_params, dim, nmc,
                nrealizations, seed=set_seed, **kwargs)
            repeated.append(rep)
            lowers.append(rep["lower_super_index"]["mean"])
            totals.append(rep["total_super_index"]["mean"])
            means.append(rep["mean"]["mean"])
            variances.append(rep["variance"]["mean"])
            continue
        estimator = SuperSobolIndices(
            model, constants, indices, uncertainty_params, dim, nmc,
            seed=set_seed, **kwargs)
        lower, total = estimator.run()
        lowers.append(lower)
        totals.append(total)
        means.append(estimator.mean())
        variances.append(estimator.variance())

    return SuperSobolResult(
        {"lower_super_indices": np.asarray(lowers),
         "total_super_indices": np.asarray(totals),
         "mean": np.asarray(means),
         "variance": np.asarray(variances),
         "index_sets": [sorted(set(indices)) for indices in index_sets],
         "repeated": repeated if nrealizations > 1 else None})


def _get_index_set_labels(index_sets, rv="z"):
    labels = []
    for index_set in index_sets:
        ll = ",".join(["%s_{%d}" % (rv, ii) for ii in index_set])
        labels.append("$(%s)$" % ll if len(index_set) > 0 else r"$\emptyset$")
    return labels


def plot_super_sobol_indices(result, ax=None, rv="z"):
    """
    Plot the lower and total Super Sobol indices of each index set as
    grouped bars.

    Parameters
    ----------
    result : :class:`SuperSobolResult`
        The result of :func:`run_super_sobol_sensitivity_analysis`

    ax : :class:`matplotlib.axes.Axes`
        The axes to plot on. If None a new figure is created

    Returns
    -------
    bars : list
        The bar containers of the lower and total indices

    ax : :class:`matplotlib.axes.Axes`
        The axes
    """
    import matplotlib.pyplot as plt
    if ax is None:
        fig, ax = plt.subplots(1, 1, figsize=(8, 6))

    labels = _get_index_set_labels(result["index_sets"], rv)
    locations = np.arange(len(labels))
    width = 0.35
    bp0 = ax.bar(locations-width/2, result["lower_super_indices"], width,
                 label="lower")
    bp1 = ax.bar(locations+width/2, result["total_super_indices"], width,
                 label="total")
    ax.set_xticks(locations)
    ax.set_xticklabels(labels, rotation=45)
    ax.legend()
    return [bp0, bp1], ax
