import logging

import numpy as np
from numba import njit

from supersobol.util.utilities import get_first_n_primes
from supersobol.util.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


_UNPERMUTED = np.zeros(0, dtype=np.int32)
_UNPERMUTED_OFFSETS = np.zeros(0, dtype=np.int64)


@njit(cache=True)
def __halton_sequence(num_vars, index1, index2, primes, permutations,
                      offsets):
    num_samples = index2-index1
    sequence = np.zeros((num_vars, num_samples))
    permuted = offsets.shape[0] > 0

    kk = 0
    for ii in range(index1, index2):
        for dd in range(num_vars):
            prime = primes[dd]
            prime_inv = 1./prime
            ff = ii
            while ff > 0:
                digit = ff % prime
                if permuted:
                    digit = permutations[offsets[dd]+digit]
                sequence[dd, kk] += digit*prime_inv
                prime_inv /= prime
                ff = ff//prime
        kk += 1
    return sequence


def get_halton_digit_permutations(primes, rng=None):
    """
    Draw one random permutation of the digits {1,...,p-1} for each prime
    base p.

    The zero digit is always mapped to zero. A permuted radical inverse
    therefore only has a finite number of non-zero digits and every point
    with a non-zero index stays strictly inside (0, 1).

    Parameters
    ----------
    primes : np.ndarray (nvars)
        The prime base of each coordinate

    rng : np.random.Generator
        The generator used to draw the permutations. If None a freshly
        seeded generator is used.

    Returns
    -------
    permutations : list (nvars) of np.ndarray (primes[ii])
        The digit permutation of each coordinate. Each row only stores the
        digits of its own base
    """
    if rng is None:
        rng = np.random.default_rng()
    permutations = []
    for prime in primes:
        row = np.zeros(prime, dtype=np.int32)
        row[1:] = 1 + rng.permutation(prime-1)
        permutations.append(row)
    return permutations


def _flatten_digit_permutations(permutations, primes):
    """
    Concatenate the rows of a digit permutation table.

    Returns
    -------
    flat : np.ndarray (sum(primes))
        The concatenated rows

    offsets : np.ndarray (nvars)
        The position of the first entry of each row in ``flat``
    """
    if len(permutations) != primes.shape[0]:
        raise ConfigurationError(
            f"{len(permutations)} digit permutations were given for "
            f"{primes.shape[0]} variables")
    rows = []
    for ii, (row, prime) in enumerate(zip(permutations, primes)):
        row = np.asarray(row, dtype=np.int32)
        if row.ndim != 1 or row.shape[0] != prime:
            raise ConfigurationError(
                f"Digit permutation {ii} has shape {row.shape} but base "
                f"{prime} requires ({prime},)")
        if row.min() < 0 or row.max() >= prime:
            raise ConfigurationError(
                f"Digit permutation {ii} has digits outside [0, {prime})")
        rows.append(row)
    offsets = np.zeros(primes.shape[0], dtype=np.int64)
    offsets[1:] = np.cumsum(primes[:-1])
    return np.concatenate(rows), offsets


def _halton_samples(num_vars, index1, index2, primes, flat_permutations,
                    offsets):
    return __halton_sequence(
        num_vars, index1, index2, primes, flat_permutations, offsets)


def halton_sequence(num_vars, nsamples, start_index=0, permutations=None,
                    icdfs=None):
    """
    Generate a multivariate Halton sequence

    Parameters
    ----------
    num_vars : integer
        The number of dimensions

    nsamples : integer
        The number of samples needed

    start_index : integer
        The number of initial samples in the Halton sequence to skip

    permutations : list (num_vars) of np.ndarray
        Digit permutation of each coordinate. Row ii has one entry per
        digit of the ii-th prime base. See
        :func:`get_halton_digit_permutations`. If None the unscrambled
        sequence is returned

    icdfs : list of callables
        If provided the inverse cumulative distribution function icdfs[ii]
        is applied to the ii-th row (inverse transform sampling)

    Returns
    -------
    samples : np.ndarray (num_vars, nsamples)
        The low-discrepancy samples
    """
    index1, index2 = start_index, start_index + nsamples
    if num_vars < 1:
        raise ConfigurationError(
            f"Number of variables must be >= 1, got {num_vars}")
    if index1 < 0 or index1 >= index2:
        raise ConfigurationError("Index 1 must be >= 0 and < Index 2")

    primes = get_first_n_primes(num_vars)
    if permutations is None:
        flat, offsets = _UNPERMUTED, _UNPERMUTED_OFFSETS
    else:
        flat, offsets = _flatten_digit_permutations(permutations, primes)

    samples = _halton_samples(num_vars, index1, index2, primes, flat, offsets)
    if icdfs is None:
        return samples

    if callable(icdfs):
        icdfs = [icdfs]*num_vars
    elif len(icdfs) != num_vars:
        raise ConfigurationError(
            f"{len(icdfs)} icdfs were given for {num_vars} variables")
    for ii in range(num_vars):
        samples[ii, :] = icdfs[ii](samples[ii, :])
    return samples


class RandomizedHaltonSequence(object):
    r"""
    A cursor over a (randomized) Halton sequence that hands out one point
    at a time.

    Points are generated in blocks of ``block_size`` but are always
    returned in sequence order, so the points seen by a caller do not depend
    on the block size.

    Parameters
    ----------
    num_vars : integer
        The dimension :math:`k` of each point

    random_start : boolean
        If True the first index of the sequence is drawn uniformly from
        :math:`[1, \text{max_start_index})`. Otherwise the sequence starts
        at index 1. Index 0 is the origin and is always skipped

    random_permute : boolean
        If True the digits of each coordinate are scrambled with a random
        permutation

    seed : integer or np.random.SeedSequence
        Seed of the generator owned by this sequence. No global random
        state is used

    max_start_index : integer
        Upper bound (exclusive) on the random start index

    block_size : integer
        The number of points generated by each call to the Halton kernel
    """

    def __init__(self, num_vars, random_start=True, random_permute=True,
                 seed=None, max_start_index=2**20, block_size=1024):
        if num_vars < 1:
            raise ConfigurationError(
                f"Dimension of the sequence must be >= 1, got {num_vars}")
        if block_size < 1:
            raise ConfigurationError(
                f"block_size must be >= 1, got {block_size}")
        if random_start and max_start_index < 2:
            raise ConfigurationError("max_start_index must be >= 2")

        self._num_vars = num_vars
        self._block_size = block_size
        self._rng = np.random.default_rng(seed)
        self._primes = get_first_n_primes(num_vars)

        if random_permute:
            self._permutations, self._offsets = _flatten_digit_permutations(
                get_halton_digit_permutations(self._primes, self._rng),
                self._primes)
        else:
            self._permutations, self._offsets = (
                _UNPERMUTED, _UNPERMUTED_OFFSETS)

        if random_start:
            self._next_index = int(self._rng.integers(1, max_start_index))
        else:
            self._next_index = 1
        self.start_index = self._next_index
        self.current_index = None

        self._block = None
        self._block_pos = 0
        self._point = None
        logger.debug(
            "Halton sequence: num_vars=%d, start_index=%d, permuted=%s",
            num_vars, self.start_index, random_permute)

    def num_vars(self):
        return self._num_vars

    def _generate_block(self):
        self._block = _halton_samples(
            self._num_vars, self._next_index,
            self._next_index+self._block_size, self._primes,
            self._permutations, self._offsets)
        self._block_pos = 0

    def next_point(self):
        """
        Advance the sequence and return the new point.

        Returns
        -------
        point : np.ndarray (num_vars)
            A copy of the new point. All entries lie in (0, 1)
        """
        if self._block is None or self._block_pos == self._block.shape[1]:
            self._generate_block()
        self._point = self._block[:, self._block_pos]
        self._block_pos += 1
        self.current_index = self._next_index
        self._next_index += 1
        return self._point.copy()

    def coordinate(self, ii):
        """
        Return the ii-th (1-based) coordinate of the most recent point.
        """
        if self._point is None:
            raise ConfigurationError(
                "coordinate() called before any point was generated")
        if ii < 1 or ii > self._num_vars:
            raise ConfigurationError(
                f"Coordinate {ii} is outside [1, {self._num_vars}]")
        return self._point[ii-1]

    def __repr__(self):
        return "{0}(num_vars={1}, start_index={2})".format(
            self.__class__.__name__, self._num_vars, self.start_index)
