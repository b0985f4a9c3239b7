import numpy as np


def additive_model(params, constants):
    r"""
    Weighted sum of the parameters

    .. math:: f(z) = \sum_{j=1}^d w_jz_j

    The weights are the constants. If no constants are given all weights
    are one.
    """
    params = np.asarray(params)
    if len(constants) == 0:
        return params.sum()
    return np.dot(np.asarray(constants), params)


def get_additive_model_super_sobol_indices(indices, weights, bounds):
    """
    Return the lower and total Super Sobol indices of the additive model
    when each parameter is uniform on bounds[j] = [a_j, b_j].

    The model has no interactions so both indices are equal to the
    fraction of variance contributed by the parameters in ``indices``.
    """
    weights = np.asarray(weights, dtype=float)
    bounds = np.asarray(bounds, dtype=float)
    variances = weights**2*(bounds[:, 1]-bounds[:, 0])**2/12
    II = np.array(sorted(indices), dtype=int)-1
    index = variances[II].sum()/variances.sum()
    return index, index


def ishigami_model(params, constants=(7, 0.1)):
    r"""
    The Ishigami function

    .. math:: f(z) = \sin(z_1)+a\sin^2(z_2) + bz_3^4\sin(z_1)

    with :math:`(a, b)` given by the constants
    """
    a, b = constants
    return (np.sin(params[0])+a*np.sin(params[1])**2 +
            b*params[2]**4*np.sin(params[0]))


def get_ishigami_function_statistics(a=7, b=0.1):
    """
    p_i(X_i) ~ U[-pi,pi]

    Returns
    -------
    mean : float
        The mean of the function

    variance : float
        The variance of the function

    partial_variances : dict
        The unnormalized Sobol index of each interaction term. Keys are
        tuples of 1-based parameter indices
    """
    mean = a/2
    variance = a**2/8+b*np.pi**4/5+b**2*np.pi**8/18+0.5
    D_1 = b*np.pi**4/5+b**2*np.pi**8/50+0.5
    D_2, D_3, D_12, D_13 = a**2/8, 0, 0, b**2*np.pi**8/18-b**2*np.pi**8/50
    D_23, D_123 = 0, 0
    partial_variances = {
        (1,): D_1, (2,): D_2, (3,): D_3, (1, 2): D_12, (1, 3): D_13,
        (2, 3): D_23, (1, 2, 3): D_123}
    return mean, variance, partial_variances


def get_ishigami_super_sobol_indices(indices, a=7, b=0.1):
    """
    Return the lower (closed first-order) and total Super Sobol indices of
    the subset ``indices`` of the Ishigami function parameters when each
    parameter is uniform on [-pi, pi].

    The lower index sums the partial variances of all terms contained in
    the subset. The total index sums those of all terms that intersect it.
    """
    indices = set(indices)
    mean, variance, partial_variances = get_ishigami_function_statistics(
        a, b)
    lower = sum(
        D for term, D in partial_variances.items() if set(term) <= indices)
    total = sum(
        D for term, D in partial_variances.items() if set(term) & indices)
    return lower/variance, total/variance
