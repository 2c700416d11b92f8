"""Candidate selections whose post hoc bounds are typically queried.

Post hoc bounds hold for any subset, including subsets chosen by looking at
the p-values. The selections here are the usual data-dependent choices:
a Benjamini-Hochberg rejection set or a raw p-value cutoff.

References
----------
Benjamini, Y., and Hochberg, Y. (1995). Controlling the false discovery
rate: a practical and powerful approach to multiple testing. Journal of
the Royal Statistical Society Series B, 57, 289-300.
"""

from __future__ import annotations

import numpy as np
from statsmodels.stats.multitest import multipletests

from posthoc_analysis.core_utils.data_utils import as_p_value_array, validate_alpha


def benjamini_hochberg_selection(p_values, alpha: float = 0.05) -> np.ndarray:
    """Positions rejected by Benjamini-Hochberg FDR control.

    Parameters
    ----------
    p_values : array-like
        p-values of all hypotheses
    alpha : float, default=0.05
        Target FDR level

    Returns
    -------
    np.ndarray
        Sorted integer positions of the rejected hypotheses

    Notes
    -----
    Uses statsmodels implementation of Benjamini-Hochberg procedure. The
    FDR guarantee concerns the expected proportion; the post hoc bound of
    the returned set gives a simultaneous, high-probability statement.

    Examples
    --------
    >>> import numpy as np
    >>> benjamini_hochberg_selection(np.array([0.001, 0.01, 0.03, 0.05, 0.1]))
    array([0, 1, 2])
    """
    p_values_array = as_p_value_array(p_values)
    alpha = validate_alpha(alpha)

    rejected, _, _, _ = multipletests(
        p_values_array,
        alpha=alpha,
        method="fdr_bh",
        is_sorted=False,
        returnsorted=False,
    )
    return np.flatnonzero(rejected)


def threshold_selection(p_values, threshold: float) -> np.ndarray:
    """Positions with p-value at or below ``threshold``."""
    p_values_array = as_p_value_array(p_values)
    return np.flatnonzero(p_values_array <= float(threshold))


__all__ = ["benjamini_hochberg_selection", "threshold_selection"]
