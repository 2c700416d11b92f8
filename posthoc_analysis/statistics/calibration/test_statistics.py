"""Per-hypothesis test statistics used as the default calibration statistic.

Any callable ``statistic(data, labels) -> p_values`` can be injected into
the calibrator; these are the usual choices for expression matrices with
one row per gene and one column per sample.
"""

from __future__ import annotations

import numpy as np
import pandas as pd
from scipy.stats import f_oneway, ttest_ind

from posthoc_analysis.core_utils.data_utils import as_data_matrix, validate_labels


def _group_columns(labels: np.ndarray) -> list[np.ndarray]:
    groups = pd.unique(labels)
    return [np.flatnonzero(labels == g) for g in groups]


def welch_t_test(data, labels) -> np.ndarray:
    """Two-sided p-values comparing sample groups, one per row of ``data``.

    Two groups use Welch's unequal-variance t-test; three or more groups use
    the one-way ANOVA F-test. Rows with no variance yield NaN statistics,
    which are reported as p = 1 (no evidence against the null).

    Parameters
    ----------
    data : np.ndarray or pd.DataFrame
        Shape ``(m, n)``: hypotheses in rows, samples in columns.
    labels : array-like
        Length ``n`` group labels.

    Returns
    -------
    np.ndarray
        Shape ``(m,)`` p-values in ``[0, 1]``.
    """
    matrix = as_data_matrix(data)
    label_array = validate_labels(labels, matrix.shape[1])
    columns = _group_columns(label_array)

    if len(columns) == 2:
        result = ttest_ind(
            matrix[:, columns[0]],
            matrix[:, columns[1]],
            axis=1,
            equal_var=False,
        )
    else:
        result = f_oneway(*(matrix[:, idx] for idx in columns), axis=1)

    p_values = np.asarray(result.pvalue, dtype=float)
    return np.where(np.isnan(p_values), 1.0, np.clip(p_values, 0.0, 1.0))


__all__ = ["welch_t_test"]
