"""Beta (order-statistic quantile) reference family.

Under independence the ``k``-th smallest of ``m`` uniform p-values follows
``Beta(k, m + 1 - k)``. Taking the ``lambda * alpha / k_max`` quantile of each
order statistic gives a family whose JER is at most ``lambda * alpha`` by a
union bound over ``k``; calibration then tightens ``lambda`` to the data.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from scipy.stats import beta

from .base import ReferenceFamily


@dataclass(frozen=True)
class BetaFamily(ReferenceFamily):
    """Thresholds ``t_k = F_k^{-1}(min(1, lambda * alpha / k_max))``.

    ``F_k`` is the CDF of ``Beta(k, m + 1 - k)``. Thresholds increase with
    ``k`` because the order statistics are stochastically increasing.
    """

    name = "beta"

    def _shape(self, k: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
        k = np.asarray(k, dtype=float)
        return k, self.m + 1.0 - k

    def _template(self, k: np.ndarray, alpha: float, lambda_: float) -> np.ndarray:
        level = min(1.0, lambda_ * alpha / self.k_max)
        a, b = self._shape(k)
        return beta.ppf(level, a, b)

    def calibration_factors(self, sorted_p: np.ndarray, alpha: float) -> np.ndarray:
        sorted_p = np.atleast_2d(np.asarray(sorted_p, dtype=float))
        a, b = self._shape(np.arange(1, self.k_max + 1))
        levels = beta.cdf(sorted_p[:, : self.k_max], a, b)
        return levels.min(axis=1) * self.k_max / alpha


__all__ = ["BetaFamily"]
