"""The :mod:`supersobol.expdesign` module implements the low-discrepancy
sequences used to drive the Monte Carlo estimators
"""

from supersobol.expdesign.low_discrepancy_sequences import (
    halton_sequence, get_halton_digit_permutations, RandomizedHaltonSequence
)


__all__ = ["halton_sequence", "get_halton_digit_permutations",
           "RandomizedHaltonSequence"]
