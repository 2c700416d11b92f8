"""Joint-error-rate (JER) post hoc bound for a reference family.

If the reference family ``t_k(alpha, lambda)`` controls the JER at level
``alpha`` then, with probability at least ``1 - alpha``, the bound returned
here is at least ``|S ∩ H0|`` for every subset ``S`` simultaneously. For the
Simes family with ``lambda = 1`` this holds under independence or PRDS; for
a permutation-calibrated ``lambda`` it holds under exchangeability.
"""

from __future__ import annotations

from typing import Optional, Union

import numpy as np

from posthoc_analysis import config
from posthoc_analysis.core_utils.data_utils import (
    as_p_value_array,
    resolve_subset,
    validate_alpha,
    validate_lambda,
)
from posthoc_analysis.exceptions import DomainError
from posthoc_analysis.statistics.reference_family import (
    ReferenceFamily,
    get_reference_family,
)

from .base import max_false_positives_sorted


def resolve_reference_family(
    family: Optional[Union[str, ReferenceFamily]],
    m: int,
) -> ReferenceFamily:
    """Return a reference family sized for ``m`` hypotheses.

    ``None`` and template names go through the dispatcher; instances are
    checked against ``m``.
    """
    if family is None or isinstance(family, str):
        return get_reference_family(family, m)
    if not isinstance(family, ReferenceFamily):
        raise TypeError(
            f"family must be a name or ReferenceFamily, got {type(family).__name__}."
        )
    if family.m != m:
        raise DomainError(
            f"Reference family was built for m={family.m} hypotheses, "
            f"but {m} p-values were given."
        )
    return family


def jer_max_false_positives(
    p_values: np.ndarray,
    subset=None,
    alpha: Optional[float] = None,
    lambda_: Optional[float] = None,
    family: Optional[Union[str, ReferenceFamily]] = None,
) -> int:
    """Upper bound on the false positives in ``subset`` from the reference family.

    Parameters
    ----------
    p_values : np.ndarray
        p-values of all ``m`` hypotheses.
    subset : optional
        Positions, boolean mask or Series labels; ``None`` means all.
    alpha : float, optional
        Confidence level is ``1 - alpha``; defaults to ``config.SIGNIFICANCE_ALPHA``.
    lambda_ : float, optional
        Family scaling; defaults to ``config.DEFAULT_LAMBDA``.
    family : str or ReferenceFamily, optional
        Template; defaults to ``config.REFERENCE_FAMILY``.

    Returns
    -------
    int
        Bound in ``[0, |S|]``.

    Examples
    --------
    >>> jer_max_false_positives([0.5] * 10, [0, 1, 2], alpha=0.1)
    3
    """
    alpha = validate_alpha(config.SIGNIFICANCE_ALPHA if alpha is None else alpha)
    lambda_ = validate_lambda(config.DEFAULT_LAMBDA if lambda_ is None else lambda_)
    positions = resolve_subset(p_values, subset)
    p_array = as_p_value_array(p_values)
    reference = resolve_reference_family(family, p_array.size)
    thresholds = reference.thresholds(alpha, lambda_)
    return max_false_positives_sorted(np.sort(p_array[positions]), thresholds)


__all__ = ["resolve_reference_family", "jer_max_false_positives"]
