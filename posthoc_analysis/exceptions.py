"""Exception and warning types raised by the post hoc bounds library."""

from __future__ import annotations


class DomainError(ValueError):
    """A parameter or input lies outside its admissible range.

    Raised for ``alpha`` outside ``(0, 1)``, non-positive ``lambda``,
    p-values outside ``[0, 1]``, subset positions outside ``[0, m)``,
    ``n_permutations < 1`` and malformed label vectors.
    """


class StatisticComputationFailure(RuntimeError):
    """The injected per-hypothesis statistic function failed.

    The original exception is available as ``__cause__``. A calibration run
    that raises this produces no result.
    """


class DependencyAssumptionUnverifiable(UserWarning):
    """The bound is only valid under PRDS, which data cannot confirm.

    Emitted for uncalibrated reference families. Permutation calibration
    replaces the PRDS assumption by exchangeability of the samples.
    """


__all__ = [
    "DomainError",
    "StatisticComputationFailure",
    "DependencyAssumptionUnverifiable",
]
