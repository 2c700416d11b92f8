"""Label permutations and per-permutation calibration factors.

Under the global null, permuting sample labels leaves the joint distribution
of the per-hypothesis p-values unchanged while keeping the dependence
between hypotheses. Each permutation therefore yields a draw of the sorted
null p-values, and the reference family reports the largest ``lambda``
that keeps this draw on or above its thresholds (the pivotal statistic).
"""

from __future__ import annotations

from typing import Callable

import numpy as np
from joblib import Parallel, delayed

from posthoc_analysis.exceptions import DomainError, StatisticComputationFailure
from posthoc_analysis.statistics.reference_family import ReferenceFamily

StatisticFunction = Callable[[np.ndarray, np.ndarray], np.ndarray]


def permute_labels(
    labels: np.ndarray,
    n_permutations: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Produce label permutations in one vectorised batch.

    Permuting (rather than resampling) keeps the group sizes of every row
    equal to those of ``labels``.

    Parameters
    ----------
    labels : np.ndarray
        Group labels, shape (n,)
    n_permutations : int
        Number of permutations to generate
    rng : np.random.Generator
        Random number generator for reproducibility

    Returns
    -------
    np.ndarray
        Shape (n_permutations, n), one permuted label vector per row
    """
    labels = np.asarray(labels)
    if n_permutations <= 0:
        return np.empty((0, labels.size), dtype=labels.dtype)
    # Permute positions so labels of any dtype are supported
    positions = np.repeat(np.arange(labels.size)[None, :], n_permutations, axis=0)
    return labels[rng.permuted(positions, axis=1)]


def seed_sequence_from(random_state) -> np.random.SeedSequence:
    """Normalise an injected random source to a ``SeedSequence``.

    Accepts ``None`` (fresh entropy), an integer seed, a ``SeedSequence`` or
    a ``Generator`` (consumed once to derive the entropy).
    """
    if isinstance(random_state, np.random.SeedSequence):
        return random_state
    if isinstance(random_state, np.random.Generator):
        entropy = random_state.integers(0, 2**63 - 1, size=4)
        return np.random.SeedSequence(entropy.tolist())
    return np.random.SeedSequence(random_state)


def _checked_p_values(p_values, m: int, permutation_number: int) -> np.ndarray:
    p_array = np.asarray(p_values, dtype=float).ravel()
    if p_array.size != m:
        raise DomainError(
            f"Statistic returned {p_array.size} values on permutation "
            f"{permutation_number}, expected {m}."
        )
    if not np.all(np.isfinite(p_array)) or p_array.min() < 0.0 or p_array.max() > 1.0:
        raise DomainError(
            f"Statistic returned values outside [0, 1] on permutation "
            f"{permutation_number}; it must return p-values."
        )
    return p_array


def _process_batch(
    k: int,
    first_permutation: int,
    seed: np.random.SeedSequence,
    matrix: np.ndarray,
    labels: np.ndarray,
    statistic: StatisticFunction,
    family: ReferenceFamily,
    alpha: float,
) -> np.ndarray:
    """Calibration factors for one batch of ``k`` permutations."""
    # Local RNG for this batch
    local_rng = np.random.default_rng(seed)
    permuted_labels = permute_labels(labels, k, local_rng)

    m = matrix.shape[0]
    sorted_p = np.empty((k, m), dtype=float)
    for r, perm in enumerate(permuted_labels):
        permutation_number = first_permutation + r + 1
        try:
            p_values = statistic(matrix, perm)
        except Exception as exc:
            raise StatisticComputationFailure(
                f"Statistic function failed on permutation {permutation_number}: {exc}"
            ) from exc
        sorted_p[r] = np.sort(_checked_p_values(p_values, m, permutation_number))

    return family.calibration_factors(sorted_p, alpha)


def permutation_pivotal_statistics(
    matrix: np.ndarray,
    labels: np.ndarray,
    statistic: StatisticFunction,
    family: ReferenceFamily,
    alpha: float,
    n_permutations: int,
    random_state=None,
    batch_size: int = 100,
    n_jobs: int | None = None,
) -> np.ndarray:
    """
    Batched, parallel calibration factors ``lambda_b`` for ``b = 1..B``.

    Parameters
    ----------
    matrix : np.ndarray
        Shape (m, n) data, hypotheses in rows
    labels : np.ndarray
        Group labels, shape (n,)
    statistic : callable
        ``statistic(matrix, labels) -> p_values`` of shape (m,)
    family : ReferenceFamily
        Template whose calibration factor is extracted
    alpha : float
        Level of the joint error rate
    n_permutations : int
        Number of permutations B
    random_state : int | SeedSequence | Generator | None
        Injected random source
    batch_size : int, default=100
        Number of permutations per joblib task
    n_jobs : int, default=None
        Number of jobs to run in parallel. None means 1. -1 means using all processors.

    Returns
    -------
    np.ndarray
        Shape (B,), one calibration factor per permutation, in permutation order

    Notes
    -----
    Each batch draws from its own child of ``SeedSequence(random_state)``,
    so the result for a fixed seed does not depend on ``n_jobs``. Any batch
    failure aborts the whole run.
    """
    # Use SeedSequence for robust parallel RNG
    seed_seq = seed_sequence_from(random_state)

    # Calculate batches
    effective_batch_size = max(1, int(batch_size))
    n_full_batches = n_permutations // effective_batch_size
    remainder = n_permutations % effective_batch_size

    batch_sizes = [effective_batch_size] * n_full_batches
    if remainder > 0:
        batch_sizes.append(remainder)

    batch_starts = np.concatenate([[0], np.cumsum(batch_sizes)[:-1]]).astype(int)
    batch_seeds = seed_seq.spawn(len(batch_sizes))

    # Run parallel batches
    results = Parallel(n_jobs=n_jobs)(
        delayed(_process_batch)(
            k, int(start), seed, matrix, labels, statistic, family, alpha
        )
        for k, start, seed in zip(batch_sizes, batch_starts, batch_seeds)
    )

    return np.concatenate(results)


__all__ = [
    "StatisticFunction",
    "permute_labels",
    "seed_sequence_from",
    "permutation_pivotal_statistics",
]
