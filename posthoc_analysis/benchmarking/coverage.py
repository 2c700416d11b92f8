"""Monte Carlo check of the simultaneous coverage of the confidence envelope.

For each simulated dataset the envelope is covering when
``V̄(S_k) >= |S_k ∩ H0|`` for every ``k`` at once. The fraction of covering
datasets estimates the simultaneous coverage, which should be at least
``1 - alpha`` for a valid reference family.
"""

from __future__ import annotations

import warnings
from dataclasses import dataclass
from typing import Optional

import numpy as np

from posthoc_analysis import config
from posthoc_analysis.benchmarking.logging import (
    log_replicate_progress,
    log_simulation_completion,
    log_simulation_start,
)
from posthoc_analysis.exceptions import DependencyAssumptionUnverifiable, DomainError
from posthoc_analysis.statistics.confidence_envelope import confidence_envelope


@dataclass(frozen=True)
class CoverageResult:
    """Empirical simultaneous coverage over simulated datasets."""

    coverage: float
    n_covered: int
    n_replicates: int
    alpha: float


def simulate_p_values(
    m: int,
    pi0: float,
    rng: np.random.Generator,
    signal_scale: float = 1e-4,
) -> tuple[np.ndarray, np.ndarray]:
    """Independent uniform nulls and near-zero signal p-values.

    Returns ``(p_values, is_null)``; the first ``round((1 - pi0) * m)``
    hypotheses are signals with p-values uniform on ``[0, signal_scale]``.
    """
    n_signal = int(round((1.0 - pi0) * m))
    p_values = rng.uniform(size=m)
    p_values[:n_signal] = rng.uniform(0.0, signal_scale, size=n_signal)
    is_null = np.arange(m) >= n_signal
    return p_values, is_null


def envelope_covers(envelope, is_null: np.ndarray) -> bool:
    """Whether every row of the envelope bounds the true nulls in its prefix."""
    ranking = envelope.attrs["ranking"]
    nulls_in_prefix = np.concatenate([[0], np.cumsum(is_null[ranking])])
    return bool(np.all(envelope["FP_Upper_Bound"].to_numpy() >= nulls_in_prefix))


def estimate_envelope_coverage(
    n_replicates: int = 200,
    m: int = 100,
    pi0: float = 0.8,
    alpha: Optional[float] = None,
    lambda_: Optional[float] = None,
    method: Optional[str] = None,
    signal_scale: float = 1e-4,
    random_state: Optional[int] = None,
) -> CoverageResult:
    """Estimate the simultaneous coverage of the envelope under independence.

    Parameters
    ----------
    n_replicates : int
        Number of simulated datasets.
    m : int
        Hypotheses per dataset.
    pi0 : float
        Fraction of true nulls.
    alpha, lambda_, method
        Passed to :func:`confidence_envelope`.
    signal_scale : float
        Upper end of the signal p-value distribution.
    random_state : int, optional
        Seed for reproducibility.

    Returns
    -------
    CoverageResult
    """
    if n_replicates < 1:
        raise DomainError(f"n_replicates must be at least 1, got {n_replicates}.")
    alpha = config.SIGNIFICANCE_ALPHA if alpha is None else alpha
    rng = np.random.default_rng(random_state)
    log_simulation_start(n_replicates, m, alpha)

    n_covered = 0
    # Independence holds by construction here
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", DependencyAssumptionUnverifiable)
        for replicate in range(1, n_replicates + 1):
            p_values, is_null = simulate_p_values(m, pi0, rng, signal_scale)
            envelope = confidence_envelope(
                p_values, alpha=alpha, lambda_=lambda_, method=method
            )
            n_covered += envelope_covers(envelope, is_null)
            log_replicate_progress(replicate, n_replicates, n_covered)

    coverage = n_covered / n_replicates
    log_simulation_completion(coverage, n_replicates)
    return CoverageResult(
        coverage=coverage,
        n_covered=n_covered,
        n_replicates=n_replicates,
        alpha=float(alpha),
    )


__all__ = [
    "CoverageResult",
    "simulate_p_values",
    "envelope_covers",
    "estimate_envelope_coverage",
]
