"""Gaussian two-group expression data with optional equicorrelation.

Exports:
- generate_gaussian_two_group(...) -> tuple[pd.DataFrame, np.ndarray, np.ndarray]
"""

from __future__ import annotations

from typing import Optional, Tuple

import numpy as np
import pandas as pd

from posthoc_analysis.exceptions import DomainError


def generate_gaussian_two_group(
    m: int = 1000,
    n: int = 40,
    pi0: float = 0.8,
    effect: float = 1.0,
    rho: float = 0.0,
    random_state: Optional[int | np.random.Generator] = None,
) -> Tuple[pd.DataFrame, np.ndarray, np.ndarray]:
    """Simulate an ``m`` features x ``n`` samples matrix with two balanced groups.

    Each sample carries a shared factor, ``X = sqrt(rho) * F + sqrt(1 - rho) * E``,
    giving equicorrelation ``rho`` between features. The first
    ``round((1 - pi0) * m)`` features are shifted by ``effect`` in group 1.

    Parameters
    ----------
    m, n : int
        Number of features (hypotheses) and samples.
    pi0 : float
        Fraction of true nulls.
    effect : float
        Mean shift of non-null features in group 1.
    rho : float
        Equicorrelation between features, in ``[0, 1)``.
    random_state : int or Generator, optional
        Seed or generator for reproducibility.

    Returns
    -------
    data : pd.DataFrame
        Rows ``Gene_i``, columns ``Sample_j``.
    labels : np.ndarray
        Group label (0 or 1) of each sample.
    is_null : np.ndarray
        Boolean mask of true null features.
    """
    if m < 1 or n < 2:
        raise DomainError(f"Need m >= 1 and n >= 2, got m={m}, n={n}.")
    if not 0.0 <= pi0 <= 1.0:
        raise DomainError(f"pi0 must lie in [0, 1], got {pi0}.")
    if not 0.0 <= rho < 1.0:
        raise DomainError(f"rho must lie in [0, 1), got {rho}.")

    rng = np.random.default_rng(random_state)

    labels = np.repeat([0, 1], [n - n // 2, n // 2])
    factor = rng.standard_normal(n)
    noise = rng.standard_normal((m, n))
    matrix = np.sqrt(rho) * factor[None, :] + np.sqrt(1.0 - rho) * noise

    n_signal = int(round((1.0 - pi0) * m))
    matrix[:n_signal, labels == 1] += effect
    is_null = np.arange(m) >= n_signal

    data = pd.DataFrame(
        matrix,
        index=[f"Gene_{i}" for i in range(m)],
        columns=[f"Sample_{j}" for j in range(n)],
    )
    return data, labels, is_null
