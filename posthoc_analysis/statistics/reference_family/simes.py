"""Simes (linear) reference family.

``t_k(alpha, lambda) = lambda * alpha * k / m``. With ``lambda = 1`` the
family controls the JER under independence or PRDS by the Simes inequality;
permutation calibration picks ``lambda`` from the observed dependence.

References
----------
Simes, R. J. (1986). An improved Bonferroni procedure for multiple tests of
significance. Biometrika, 73(3), 751-754.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .base import ReferenceFamily


@dataclass(frozen=True)
class SimesFamily(ReferenceFamily):
    """Linear template ``lambda * alpha * k / m``.

    Examples
    --------
    >>> SimesFamily(m=10).thresholds(alpha=0.1)[:3]
    array([0.01, 0.02, 0.03])
    """

    name = "simes"

    def _template(self, k: np.ndarray, alpha: float, lambda_: float) -> np.ndarray:
        return lambda_ * alpha * np.asarray(k, dtype=float) / self.m

    def calibration_factors(self, sorted_p: np.ndarray, alpha: float) -> np.ndarray:
        sorted_p = np.atleast_2d(np.asarray(sorted_p, dtype=float))
        k = np.arange(1, self.k_max + 1, dtype=float)
        # p_(k) / t_k(alpha, 1)
        ratios = sorted_p[:, : self.k_max] * self.m / (alpha * k)
        return ratios.min(axis=1)


__all__ = ["SimesFamily"]
