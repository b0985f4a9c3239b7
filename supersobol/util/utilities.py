from functools import partial

import numpy as np

from supersobol.util.exceptions import ConfigurationError


def get_first_n_primes(n):
    """
    Return the first n prime numbers.

    Parameters
    ----------
    n : integer
        The number of primes requested

    Returns
    -------
    primes : np.ndarray (n)
        The primes in increasing order
    """
    if n < 1:
        raise ConfigurationError(f"Number of primes must be >= 1, got {n}")
    primes = [2]
    num = 3
    while len(primes) < n:
        flag = True
        for i in range(2, int(num**.5) + 1):
            if (num % i == 0):
                flag = False
                break
        if flag is True:
            primes.append(num)
        num += 2
    return np.asarray(primes[:n], dtype=np.int64)


def _quantile_stat(q):
    sfun = partial(np.quantile, q=q)
    sfun.__name__ = f'quantile-{q}'
    return sfun


_STAT_FUNCTIONS = {
    "mean": ("mean", np.mean),
    "median": ("median", np.median),
    "min": ("amin", np.min),
    "max": ("amax", np.max),
    "std": ("std", np.std),
    "quantile-0.25": ("quantile-0.25", _quantile_stat(0.25)),
    "quantile-0.75": ("quantile-0.75", _quantile_stat(0.75))}


def get_summary_stat_functions(summary_stats):
    """
    Return the functions used to summarize repeated estimates.

    Parameters
    ----------
    summary_stats : iterable of strings
        Names of the statistics. Must be keys of the supported set
        ("mean", "median", "min", "max", "std", "quantile-0.25",
        "quantile-0.75")

    Returns
    -------
    stat_functions : list of tuples (name, callable)
        The name under which the statistic is stored and a function
        ``sfun(values, axis=0)``. The minimum and maximum are stored
        under ``amin`` and ``amax``.
    """
    stat_functions = []
    for name in summary_stats:
        if name not in _STAT_FUNCTIONS:
            msg = f"Summary stats {name} not supported\n"
            msg += f"Select from {list(_STAT_FUNCTIONS.keys())}"
            raise ValueError(msg)
        stat_functions.append(_STAT_FUNCTIONS[name])
    return stat_functions
