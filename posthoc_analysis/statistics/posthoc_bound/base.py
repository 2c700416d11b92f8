"""Core scan shared by every post hoc bound.

For a reference family ``t_1 <= ... <= t_K`` and a subset ``S``,

    V̄(S) = min(|S|, min_{1 <= k <= K} (#{i in S : p_i > t_k} + k - 1)).

On the event that the family controls the JER, at most ``k - 1`` true nulls
fall below ``t_k``, so ``V̄(S)`` bounds ``|S ∩ H0|`` for every ``S`` at once.
The Simes closed testing shortcut reduces to the same scan with rescaled
thresholds (see :mod:`.closed_testing`).
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class BoundResult:
    """Post hoc bound for one subset.

    Attributes
    ----------
    size : int
        Number of hypotheses in the subset.
    max_false_positives : int
        Upper bound on the true nulls (false positives) in the subset.
    min_true_positives : int
        Lower bound on the false nulls, ``size - max_false_positives``.
    """

    size: int
    max_false_positives: int
    min_true_positives: int

    @property
    def max_fdp(self) -> float:
        """Upper bound on the false discovery proportion (0 for an empty subset)."""
        if self.size == 0:
            return 0.0
        return self.max_false_positives / self.size


def max_false_positives_sorted(sorted_p: np.ndarray, thresholds: np.ndarray) -> int:
    """Evaluate the bound for one subset given its ascending p-values.

    Parameters
    ----------
    sorted_p : np.ndarray
        p-values of the subset, sorted ascending.
    thresholds : np.ndarray
        Non-decreasing thresholds ``t_1..t_K``.

    Returns
    -------
    int
        Upper bound on the number of true nulls in the subset, in ``[0, |S|]``.
    """
    size = int(sorted_p.size)
    if size == 0:
        return 0

    # Terms with k > |S| are at least |S| and never improve the bound.
    n_terms = min(size, int(thresholds.size))
    thr = thresholds[:n_terms]

    n_at_or_below = np.searchsorted(sorted_p, thr, side="right")
    candidates = (size - n_at_or_below) + np.arange(n_terms)
    return int(min(size, candidates.min()))


def max_false_positives_prefixes(sorted_p: np.ndarray, thresholds: np.ndarray) -> np.ndarray:
    """Evaluate the bound for every prefix ``S_k`` of an ascending p-value vector.

    With ``N_j = #{i : p_i <= t_j}`` (non-decreasing in ``j``) the prefix of
    size ``k`` satisfies

        V̄(S_k) = min(k, min_j (max(0, k - N_j) + j - 1)).

    Let ``j*(k)`` be the first ``j`` with ``N_j >= k``. Terms with
    ``j >= j*`` are minimised at ``j*`` and give ``j* - 1``; terms with
    ``j < j*`` give ``k + (j - 1 - N_j)``, whose minimum is a running prefix
    minimum. Both parts are computed for all ``k`` with one ``searchsorted``.

    Parameters
    ----------
    sorted_p : np.ndarray
        All ``m`` p-values, sorted ascending.
    thresholds : np.ndarray
        Non-decreasing thresholds ``t_1..t_K``.

    Returns
    -------
    np.ndarray
        Integer array of length ``m + 1``; entry ``k`` is ``V̄(S_k)`` and
        entry 0 is 0.
    """
    m = int(sorted_p.size)
    bounds = np.zeros(m + 1, dtype=int)
    if m == 0 or thresholds.size == 0:
        bounds[1:] = np.arange(1, m + 1)
        return bounds

    counts = np.searchsorted(sorted_p, thresholds, side="right")
    n_thresholds = counts.size
    offsets = np.minimum.accumulate(np.arange(n_thresholds) - counts)

    k = np.arange(1, m + 1)
    first_covering = np.searchsorted(counts, k, side="left")

    big = np.iinfo(np.int64).max // 2
    covered = np.where(first_covering < n_thresholds, first_covering, big)
    uncovered = np.where(
        first_covering > 0,
        k + offsets[np.maximum(first_covering - 1, 0)],
        big,
    )

    bounds[1:] = np.minimum(k, np.minimum(covered, uncovered))
    return bounds


__all__ = ["BoundResult", "max_false_positives_sorted", "max_false_positives_prefixes"]
