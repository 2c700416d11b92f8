"""Abstract reference family of post hoc rejection thresholds.

A reference family is a non-decreasing sequence ``t_1 <= ... <= t_K`` on the
p-value scale, parameterised by the confidence level ``alpha`` and a scaling
factor ``lambda``. If the family controls the joint error rate (JER),

    P(exists k : p_(k:H0) < t_k) <= alpha,

then the bound of :mod:`posthoc_analysis.statistics.posthoc_bound` is valid
simultaneously for all subsets of hypotheses.

References
----------
Blanchard, G., Neuvial, P., and Roquain, E. (2020). Post hoc confidence
bounds on false positives using reference families. Annals of Statistics,
48(3), 1281-1303.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np

from posthoc_analysis.core_utils.data_utils import validate_alpha, validate_lambda
from posthoc_analysis.exceptions import DomainError


@dataclass(frozen=True)
class ReferenceFamily(ABC):
    """Template producing non-decreasing thresholds for ``m`` hypotheses.

    Attributes
    ----------
    m : int
        Number of hypotheses.
    k_max : int | None
        Size of the family. Thresholds are produced for ``k = 1..k_max``;
        ``None`` means ``m``.
    calibrated : bool
        True when ``lambda`` was obtained by permutation calibration, in
        which case validity does not rest on the PRDS assumption.
    """

    m: int
    k_max: int | None = None
    calibrated: bool = False

    name = "reference"

    def __post_init__(self) -> None:
        if int(self.m) < 1:
            raise DomainError(f"A reference family needs m >= 1, got {self.m!r}.")
        object.__setattr__(self, "m", int(self.m))
        k_max = self.m if self.k_max is None else int(self.k_max)
        if not 1 <= k_max <= self.m:
            raise DomainError(f"k_max must lie in [1, {self.m}], got {k_max!r}.")
        object.__setattr__(self, "k_max", k_max)

    @abstractmethod
    def _template(self, k: np.ndarray, alpha: float, lambda_: float) -> np.ndarray:
        """Vectorised ``t_k(alpha, lambda)`` for validated arguments."""

    @abstractmethod
    def calibration_factors(self, sorted_p: np.ndarray, alpha: float) -> np.ndarray:
        """Largest ``lambda`` keeping each row of ``sorted_p`` on or above the family.

        Parameters
        ----------
        sorted_p : np.ndarray
            Shape ``(B, m)``, each row sorted ascending (null p-values from
            one permutation).
        alpha : float
            Confidence parameter of the family.

        Returns
        -------
        np.ndarray
            Shape ``(B,)``. Row ``b`` satisfies ``p_(k) >= t_k(alpha, lambda_b)``
            for all ``k <= k_max`` with equality for at least one ``k``.
        """

    def threshold(self, k: int, alpha: float, lambda_: float = 1.0) -> float:
        """Return the single threshold ``t_k(alpha, lambda)`` for ``1 <= k <= k_max``."""
        if isinstance(k, bool) or int(k) != k or not 1 <= int(k) <= self.k_max:
            raise DomainError(f"k must be an integer in [1, {self.k_max}], got {k!r}.")
        alpha = validate_alpha(alpha)
        lambda_ = validate_lambda(lambda_)
        return float(self._template(np.array([int(k)]), alpha, lambda_)[0])

    def thresholds(self, alpha: float, lambda_: float = 1.0) -> np.ndarray:
        """Return ``t_1, ..., t_{k_max}`` as a non-decreasing float array."""
        alpha = validate_alpha(alpha)
        lambda_ = validate_lambda(lambda_)
        return self._template(np.arange(1, self.k_max + 1), alpha, lambda_)

    def calibration_factor(self, p_values: np.ndarray, alpha: float) -> float:
        """Calibration factor of a single vector of (unsorted) p-values."""
        alpha = validate_alpha(alpha)
        sorted_p = np.sort(np.asarray(p_values, dtype=float))
        if sorted_p.size != self.m:
            raise DomainError(f"Expected {self.m} p-values, got {sorted_p.size}.")
        return float(self.calibration_factors(sorted_p[None, :], alpha)[0])

    def with_calibration(self, calibrated: bool = True) -> "ReferenceFamily":
        """Copy of this family flagged as (un)calibrated."""
        return type(self)(m=self.m, k_max=self.k_max, calibrated=calibrated)


__all__ = ["ReferenceFamily"]
