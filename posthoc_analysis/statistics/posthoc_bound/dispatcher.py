"""Dispatcher for post hoc bound methods.

This module provides the public entry points for querying the bound of one
or several subsets. It selects the thresholds of the requested method and
runs the shared scan of :mod:`.base` on each subset.
"""

from __future__ import annotations

import warnings
from typing import Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from posthoc_analysis import config
from posthoc_analysis.core_utils.data_utils import (
    as_p_value_array,
    resolve_subset,
    validate_alpha,
    validate_lambda,
)
from posthoc_analysis.exceptions import DependencyAssumptionUnverifiable, DomainError
from posthoc_analysis.statistics.reference_family import ReferenceFamily, SimesFamily

from .base import BoundResult, max_false_positives_sorted
from .closed_testing import closed_testing_thresholds
from .jer_bound import resolve_reference_family

POSTHOC_METHODS = ("jer", "closed_testing")


def check_dependence_assumption(calibrated: bool, stacklevel: int = 3) -> None:
    """Warn that an uncalibrated bound is only valid under PRDS."""
    if calibrated or not config.WARN_DEPENDENCE_ASSUMPTION:
        return
    warnings.warn(
        "Post hoc bound uses an uncalibrated reference family; its validity "
        "assumes independent or PRDS test statistics, which cannot be "
        "checked from the data. Calibrate lambda by permutation to drop "
        "this assumption.",
        DependencyAssumptionUnverifiable,
        stacklevel=stacklevel,
    )


def posthoc_thresholds(
    p_values,
    alpha: Optional[float] = None,
    lambda_: Optional[float] = None,
    family: Optional[Union[str, ReferenceFamily]] = None,
    method: Optional[str] = None,
    calibration=None,
) -> Tuple[np.ndarray, np.ndarray, bool]:
    """Resolve defaults and return the thresholds driving the bound.

    Parameters
    ----------
    p_values
        p-values of all ``m`` hypotheses.
    alpha : float, optional
        Confidence level is ``1 - alpha``. Defaults to the calibration's
        ``alpha`` when ``calibration`` is given, else
        ``config.SIGNIFICANCE_ALPHA``.
    lambda_ : float, optional
        Family scaling; defaults to ``config.DEFAULT_LAMBDA``.
    family : str or ReferenceFamily, optional
        Template; defaults to ``config.REFERENCE_FAMILY``.
    method : str, optional
        ``"jer"`` or ``"closed_testing"``; defaults to ``config.POSTHOC_METHOD``.
    calibration : CalibrationResult, optional
        Permutation calibration supplying both family and ``lambda``.

    Returns
    -------
    p_array : np.ndarray
        Validated p-values.
    thresholds : np.ndarray
        Non-decreasing thresholds for the scan.
    calibrated : bool
        Whether the thresholds come from a calibrated family.

    Raises
    ------
    ValueError
        If ``method`` is unknown or ``calibration`` is combined with
        ``family``/``lambda_``.
    DomainError
        For out-of-range parameters or a closed testing request that is not
        a Simes family with ``lambda <= 1``.
    """
    p_array = as_p_value_array(p_values)
    method = (method or config.POSTHOC_METHOD).lower()
    if method not in POSTHOC_METHODS:
        raise ValueError(
            f"Unknown post hoc method: {method!r}. "
            f"Supported methods: {', '.join(map(repr, POSTHOC_METHODS))}"
        )

    if calibration is not None:
        if family is not None or lambda_ is not None:
            raise ValueError("Pass either calibration or family/lambda_, not both.")
        if alpha is None:
            alpha = calibration.alpha
        elif not np.isclose(alpha, calibration.alpha):
            raise DomainError(
                f"Calibration was run at alpha={calibration.alpha}, "
                f"bound requested at alpha={alpha}."
            )
        family = calibration.reference_family(p_array.size)
        lambda_ = calibration.lambda_

    alpha = validate_alpha(config.SIGNIFICANCE_ALPHA if alpha is None else alpha)
    lambda_ = validate_lambda(config.DEFAULT_LAMBDA if lambda_ is None else lambda_)
    reference = resolve_reference_family(family, p_array.size)

    if method == "closed_testing":
        if not isinstance(reference, SimesFamily) or reference.k_max != reference.m:
            raise DomainError(
                "Closed testing is only available for the full Simes family, "
                f"got {reference.name!r} with k_max={reference.k_max}."
            )
        if lambda_ > 1.0:
            raise DomainError(
                "Closed testing uses Simes local tests and needs lambda <= 1; "
                f"got {lambda_!r}. Use method='jer' for calibrated families."
            )
        return p_array, closed_testing_thresholds(p_array, alpha * lambda_), False

    return p_array, reference.thresholds(alpha, lambda_), reference.calibrated


def _bound_from_thresholds(p_array, p_values, subset, thresholds) -> BoundResult:
    positions = resolve_subset(p_values, subset)
    size = int(positions.size)
    v_bar = max_false_positives_sorted(np.sort(p_array[positions]), thresholds)
    return BoundResult(size=size, max_false_positives=v_bar, min_true_positives=size - v_bar)


def posthoc_bound(
    p_values,
    subset=None,
    alpha: Optional[float] = None,
    lambda_: Optional[float] = None,
    family: Optional[Union[str, ReferenceFamily]] = None,
    method: Optional[str] = None,
    calibration=None,
) -> BoundResult:
    """Post hoc bound on false and true positives in a subset.

    The subset may be chosen after looking at the data: the bound holds with
    probability ``1 - alpha`` simultaneously for all subsets.

    Parameters
    ----------
    p_values
        p-values of all ``m`` hypotheses (array, sequence or Series).
    subset : optional
        0-based positions, boolean mask of length ``m``, or Series labels.
        ``None`` queries all hypotheses; an empty subset gives a zero bound.
    alpha, lambda_, family, method, calibration
        See :func:`posthoc_thresholds`.

    Returns
    -------
    BoundResult
        ``(size, max_false_positives, min_true_positives)``.

    Examples
    --------
    >>> import numpy as np
    >>> p = np.linspace(0.001, 0.010, 10)
    >>> posthoc_bound(p, alpha=0.1).max_false_positives
    0
    """
    p_array, thresholds, calibrated = posthoc_thresholds(
        p_values, alpha, lambda_, family, method, calibration
    )
    check_dependence_assumption(calibrated)
    return _bound_from_thresholds(p_array, p_values, subset, thresholds)


def max_false_positives(
    p_values,
    subset=None,
    alpha: Optional[float] = None,
    lambda_: Optional[float] = None,
    family: Optional[Union[str, ReferenceFamily]] = None,
    method: Optional[str] = None,
    calibration=None,
) -> int:
    """Upper bound ``V̄(S)`` on the number of false positives in ``subset``."""
    p_array, thresholds, calibrated = posthoc_thresholds(
        p_values, alpha, lambda_, family, method, calibration
    )
    check_dependence_assumption(calibrated)
    return _bound_from_thresholds(p_array, p_values, subset, thresholds).max_false_positives


def min_true_positives(
    p_values,
    subset=None,
    alpha: Optional[float] = None,
    lambda_: Optional[float] = None,
    family: Optional[Union[str, ReferenceFamily]] = None,
    method: Optional[str] = None,
    calibration=None,
) -> int:
    """Lower bound ``|S| - V̄(S)`` on the number of true positives in ``subset``."""
    p_array, thresholds, calibrated = posthoc_thresholds(
        p_values, alpha, lambda_, family, method, calibration
    )
    check_dependence_assumption(calibrated)
    return _bound_from_thresholds(p_array, p_values, subset, thresholds).min_true_positives


def posthoc_bound_table(
    p_values,
    subsets: Mapping[str, object],
    alpha: Optional[float] = None,
    lambda_: Optional[float] = None,
    family: Optional[Union[str, ReferenceFamily]] = None,
    method: Optional[str] = None,
    calibration=None,
) -> pd.DataFrame:
    """Bounds for several named subsets, sharing one set of thresholds.

    Returns
    -------
    pd.DataFrame
        Indexed by subset name with columns ``Size``, ``FP_Upper_Bound``,
        ``TP_Lower_Bound`` and ``FDP_Upper_Bound``.
    """
    p_array, thresholds, calibrated = posthoc_thresholds(
        p_values, alpha, lambda_, family, method, calibration
    )
    check_dependence_assumption(calibrated)

    rows = {}
    for name, subset in subsets.items():
        result = _bound_from_thresholds(p_array, p_values, subset, thresholds)
        rows[name] = {
            "Size": result.size,
            "FP_Upper_Bound": result.max_false_positives,
            "TP_Lower_Bound": result.min_true_positives,
            "FDP_Upper_Bound": result.max_fdp,
        }

    table = pd.DataFrame.from_dict(
        rows,
        orient="index",
        columns=["Size", "FP_Upper_Bound", "TP_Lower_Bound", "FDP_Upper_Bound"],
    )
    table.index.name = "Subset"
    return table


__all__ = [
    "POSTHOC_METHODS",
    "check_dependence_assumption",
    "posthoc_thresholds",
    "posthoc_bound",
    "max_false_positives",
    "min_true_positives",
    "posthoc_bound_table",
]
