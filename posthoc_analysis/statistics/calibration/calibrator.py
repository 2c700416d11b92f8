"""Permutation calibration of the reference family (adaptive lambda).

The uncalibrated Simes family (``lambda = 1``) is valid under PRDS but
ignores how strongly the hypotheses depend on each other; under positive
dependence it is conservative. Calibration estimates the distribution of the
pivotal statistic

    lambda_b = min_k  p_(k)^(b) / t_k(alpha, 1)

over label permutations ``b = 1..B`` and keeps its empirical
``alpha``-quantile. The family ``t_k(alpha, lambda*)`` is then crossed by the
permutation null p-values in at most a fraction ``alpha`` of permutations,
so it controls the joint error rate under exchangeability.

Pipeline ordering
-----------------

    Step 1: Calibrate lambda on the raw data (this module)
    Step 2: Build the calibrated reference family from the result
    Step 3: Query post hoc bounds / the confidence envelope

References
----------
Blanchard, G., Neuvial, P., and Roquain, E. (2020). Post hoc confidence
bounds on false positives using reference families. Annals of Statistics,
48(3), 1281-1303.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from posthoc_analysis import config
from posthoc_analysis.core_utils.data_utils import (
    as_data_matrix,
    validate_alpha,
    validate_labels,
)
from posthoc_analysis.exceptions import DomainError
from posthoc_analysis.statistics.reference_family import (
    ReferenceFamily,
    get_reference_family,
)

from .permutation import StatisticFunction, permutation_pivotal_statistics
from .test_statistics import welch_t_test

logger = logging.getLogger(__name__)


# =============================================================================
# Data structures
# =============================================================================


@dataclass(frozen=True)
class CalibrationResult:
    """Outcome of a permutation calibration run.

    Public API, consumed by the bound dispatcher and the confidence envelope
    through their ``calibration`` argument.
    """

    lambda_: float  # calibrated scaling of the reference family
    alpha: float  # JER level the calibration targets
    n_permutations: int  # B
    m: int  # number of hypotheses calibrated on
    family_name: str  # "simes", "beta"
    k_max: Optional[int] = None
    pivotal_statistics: np.ndarray = field(default=None, repr=False, compare=False)

    def reference_family(self, m: Optional[int] = None) -> ReferenceFamily:
        """Calibrated reference family for the hypotheses calibrated on."""
        if m is not None and int(m) != self.m:
            raise DomainError(
                f"Calibration was run on m={self.m} hypotheses, got m={m}."
            )
        return get_reference_family(
            self.family_name, self.m, k_max=self.k_max, calibrated=True
        )

    def thresholds(self) -> np.ndarray:
        """Calibrated thresholds ``t_k(alpha, lambda*)``."""
        return self.reference_family().thresholds(self.alpha, self.lambda_)


# =============================================================================
# Quantile selection
# =============================================================================


def calibrated_lambda(pivotal_statistics: np.ndarray, alpha: float) -> float:
    """Empirical ``alpha``-quantile of the permutation calibration factors.

    Returns the ``ceil(alpha * B)``-th smallest value, so at most a fraction
    ``alpha`` of the permutations fall strictly below it. With ``B = 1`` this
    is the single permutation's factor.
    """
    alpha = validate_alpha(alpha)
    values = np.sort(np.asarray(pivotal_statistics, dtype=float).ravel())
    if values.size == 0:
        raise DomainError("At least one permutation statistic is required.")
    rank = max(1, int(np.ceil(alpha * values.size - 1e-9)))
    return float(values[rank - 1])


# =============================================================================
# Calibration entry point
# =============================================================================


def calibrate_lambda(
    data,
    labels,
    statistic: Optional[StatisticFunction] = None,
    alpha: Optional[float] = None,
    n_permutations: Optional[int] = None,
    family: Optional[str] = None,
    k_max: Optional[int] = None,
    random_state=None,
    batch_size: Optional[int] = None,
    n_jobs: Optional[int] = None,
) -> CalibrationResult:
    """Calibrate the reference family scaling ``lambda`` by label permutation.

    Parameters
    ----------
    data : np.ndarray or pd.DataFrame
        Shape ``(m, n)``: hypotheses (features) in rows, samples in columns.
    labels : array-like
        Length ``n`` group labels with at least two groups.
    statistic : callable, optional
        ``statistic(matrix, labels) -> p_values``; defaults to
        :func:`welch_t_test`. Failures abort the calibration.
    alpha : float, optional
        JER level; defaults to ``config.SIGNIFICANCE_ALPHA``.
    n_permutations : int, optional
        Number of permutations ``B >= 1``; defaults to ``config.N_PERMUTATIONS``.
    family : str, optional
        Reference family template; defaults to ``config.REFERENCE_FAMILY``.
    k_max : int, optional
        Family size; defaults to ``m``.
    random_state : int | SeedSequence | Generator | None
        Injected random source; defaults to ``config.PERMUTATION_RANDOM_SEED``.
    batch_size : int, optional
        Permutations per parallel task; defaults to ``config.PERMUTATION_BATCH_SIZE``.
    n_jobs : int, optional
        joblib workers; defaults to ``config.N_JOBS``.

    Returns
    -------
    CalibrationResult
        Calibrated ``lambda`` together with the permutation sample.

    Raises
    ------
    DomainError
        For ``B < 1``, ``alpha`` outside ``(0, 1)``, malformed labels or
        statistic output.
    StatisticComputationFailure
        If the statistic function raises on any permutation.
    """
    alpha = validate_alpha(config.SIGNIFICANCE_ALPHA if alpha is None else alpha)
    if n_permutations is None:
        n_permutations = config.N_PERMUTATIONS
    if isinstance(n_permutations, bool) or int(n_permutations) != n_permutations:
        raise DomainError(f"n_permutations must be an integer, got {n_permutations!r}.")
    n_permutations = int(n_permutations)
    if n_permutations < 1:
        raise DomainError(f"n_permutations must be at least 1, got {n_permutations}.")

    matrix = as_data_matrix(data)
    label_array = validate_labels(labels, matrix.shape[1])
    reference = get_reference_family(family, matrix.shape[0], k_max=k_max)
    statistic = welch_t_test if statistic is None else statistic

    logger.info(
        "Calibrating %s family on %d hypotheses x %d samples with %d permutations "
        "(alpha=%.3f).",
        reference.name,
        matrix.shape[0],
        matrix.shape[1],
        n_permutations,
        alpha,
    )

    pivotal = permutation_pivotal_statistics(
        matrix,
        label_array,
        statistic,
        reference,
        alpha,
        n_permutations,
        random_state=(
            config.PERMUTATION_RANDOM_SEED if random_state is None else random_state
        ),
        batch_size=config.PERMUTATION_BATCH_SIZE if batch_size is None else batch_size,
        n_jobs=config.N_JOBS if n_jobs is None else n_jobs,
    )

    lambda_star = calibrated_lambda(pivotal, alpha)
    if lambda_star <= 0.0:
        logger.warning(
            "Calibration: alpha-quantile of permutation statistics is %.3g; "
            "null p-values of zero were observed. Using the smallest positive lambda.",
            lambda_star,
        )
        lambda_star = float(np.finfo(float).tiny)

    logger.info(
        "Calibration: lambda* = %.4f (median permutation factor %.4f).",
        lambda_star,
        float(np.median(pivotal)),
    )

    return CalibrationResult(
        lambda_=lambda_star,
        alpha=alpha,
        n_permutations=n_permutations,
        m=reference.m,
        family_name=reference.name,
        k_max=reference.k_max,
        pivotal_statistics=pivotal,
    )


@dataclass
class PermutationCalibrator:
    """Reusable calibration settings; see :func:`calibrate_lambda`."""

    statistic: Optional[StatisticFunction] = None
    alpha: Optional[float] = None
    n_permutations: Optional[int] = None
    family: Optional[str] = None
    k_max: Optional[int] = None
    random_state: object = None
    batch_size: Optional[int] = None
    n_jobs: Optional[int] = None

    def calibrate(self, data, labels) -> CalibrationResult:
        return calibrate_lambda(
            data,
            labels,
            statistic=self.statistic,
            alpha=self.alpha,
            n_permutations=self.n_permutations,
            family=self.family,
            k_max=self.k_max,
            random_state=self.random_state,
            batch_size=self.batch_size,
            n_jobs=self.n_jobs,
        )


__all__ = [
    "CalibrationResult",
    "calibrated_lambda",
    "calibrate_lambda",
    "PermutationCalibrator",
]
