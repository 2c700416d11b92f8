"""Simes closed testing shortcut for post hoc bounds.

Closed testing with Simes local tests rejects an intersection hypothesis
``H_I`` unless some superset ``J ⊇ I`` passes the local Simes test. Naively
this needs all ``2^m`` subsets. Goeman & Solari (2011) and Goeman et al.
(2019) show the number of true discoveries in ``S`` is

    d(S) = max_{1 <= u <= |S|} (1 - u + #{i in S : h * p_i <= u * alpha}),

where ``h`` is Hommel's value, the size of the largest subset not rejected
by its local Simes test. Rearranging, ``|S| - max(0, d(S))`` is the generic
scan of :mod:`.base` with thresholds ``u * alpha / h``: the closed testing
bound is the JER bound of a Simes family whose denominator ``m`` shrinks to
``h``. It is never larger than the plain Simes JER bound.

References
----------
Goeman, J. J., and Solari, A. (2011). Multiple testing for exploratory
research. Statistical Science, 26(4), 584-597.

Goeman, J. J., Meijer, R. J., Krebs, T. J. P., and Solari, A. (2019).
Simultaneous control of all false discovery proportions in large-scale
multiple hypothesis testing. Biometrika, 106(4), 841-856.
"""

from __future__ import annotations

import numpy as np

from posthoc_analysis.core_utils.data_utils import (
    as_p_value_array,
    resolve_subset,
    validate_alpha,
    validate_lambda,
)
from posthoc_analysis.exceptions import DomainError

from .base import max_false_positives_sorted


def hommel_value(p_values: np.ndarray, alpha: float) -> int:
    """Size of the largest index set not rejected by its local Simes test.

    ``h = max{i in 0..m : i * p_(m - i + j) > j * alpha for j = 1..i}``. The
    set of the ``i`` largest p-values is the hardest set of size ``i`` to
    reject, so only those are checked, scanning ``i`` downward. The worst
    case (strong signal, ``h`` small) costs ``O(m^2)`` vectorised
    comparisons.

    Parameters
    ----------
    p_values : np.ndarray
        All ``m`` p-values (any order).
    alpha : float
        Level of the local Simes tests.

    Returns
    -------
    int
        Hommel's ``h`` in ``[0, m]``; 0 means every non-empty set is rejected.
    """
    alpha = validate_alpha(alpha)
    sorted_p = np.sort(as_p_value_array(p_values))
    m = sorted_p.size

    for i in range(m, 0, -1):
        tail = sorted_p[m - i :]
        if np.all(i * tail > alpha * np.arange(1, i + 1)):
            return i
    return 0


def closed_testing_thresholds(p_values: np.ndarray, alpha: float) -> np.ndarray:
    """Thresholds ``u * alpha / h`` for ``u = 1..m`` (``+inf`` when ``h = 0``)."""
    p_array = as_p_value_array(p_values)
    h = hommel_value(p_array, alpha)
    if h == 0:
        return np.full(p_array.size, np.inf)
    return alpha * np.arange(1, p_array.size + 1, dtype=float) / h


def closed_testing_max_false_positives(
    p_values: np.ndarray,
    subset=None,
    alpha: float = 0.1,
    lambda_: float = 1.0,
) -> int:
    """Simes closed testing upper bound on the false positives in ``subset``.

    Parameters
    ----------
    p_values : np.ndarray
        p-values of all ``m`` hypotheses.
    subset : optional
        Positions, boolean mask or Series labels; ``None`` means all.
    alpha : float
        Confidence level is ``1 - alpha``.
    lambda_ : float
        Scaling of the local test level, ``0 < lambda_ <= 1``. Values above
        1 would void the local Simes tests and are rejected.

    Returns
    -------
    int
        Bound in ``[0, |S|]``.

    Examples
    --------
    >>> closed_testing_max_false_positives([0.04, 0.5], alpha=0.1)
    1
    """
    alpha = validate_alpha(alpha)
    lambda_ = validate_lambda(lambda_)
    if lambda_ > 1.0:
        raise DomainError(
            "Closed testing uses Simes local tests and needs lambda <= 1; "
            f"got {lambda_!r}. Use the 'jer' bound for calibrated families."
        )
    positions = resolve_subset(p_values, subset)
    p_array = as_p_value_array(p_values)
    thresholds = closed_testing_thresholds(p_array, alpha * lambda_)
    return max_false_positives_sorted(np.sort(p_array[positions]), thresholds)


__all__ = [
    "hommel_value",
    "closed_testing_thresholds",
    "closed_testing_max_false_positives",
]
