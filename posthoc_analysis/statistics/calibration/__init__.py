"""Permutation calibration of reference families.

Modules
-------
test_statistics
    Default per-hypothesis statistic (Welch t-test / one-way ANOVA)
permutation
    Parallel label permutations and per-permutation calibration factors
calibrator
    Quantile selection and the calibration entry point
"""

from .calibrator import (
    CalibrationResult,
    PermutationCalibrator,
    calibrate_lambda,
    calibrated_lambda,
)
from .permutation import (
    permutation_pivotal_statistics,
    permute_labels,
    seed_sequence_from,
)
from .test_statistics import welch_t_test

__all__ = [
    "CalibrationResult",
    "PermutationCalibrator",
    "calibrate_lambda",
    "calibrated_lambda",
    "permutation_pivotal_statistics",
    "permute_labels",
    "seed_sequence_from",
    "welch_t_test",
]
