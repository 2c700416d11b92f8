"""Small logging helpers for the simulation benchmarks.

Functions are kept separate so they can be imported and reused elsewhere
without pulling in the coverage module.
"""

from __future__ import annotations

import logging


def _default_benchmark_logger() -> logging.Logger:
    return logging.getLogger("posthoc_analysis.benchmarking.coverage")


def log_simulation_start(
    n_replicates: int, m: int, alpha: float, logger: logging.Logger | None = None
) -> None:
    """Log the start of a coverage simulation."""
    logger = logger or _default_benchmark_logger()
    logger.info("%s", "=" * 80)
    logger.info("POST HOC BOUND COVERAGE SIMULATION")
    logger.info("%s", "=" * 80)
    logger.info("Simulating %d datasets of %d hypotheses at alpha=%.3f.", n_replicates, m, alpha)


def log_replicate_progress(
    index: int, total: int, n_covered: int, logger: logging.Logger | None = None
) -> None:
    """Log progress every tenth of the run."""
    logger = logger or _default_benchmark_logger()
    step = max(1, total // 10)
    if index % step == 0 or index == total:
        logger.debug("Replicate %d/%d: %d covered so far.", index, total, n_covered)


def log_simulation_completion(
    coverage: float, n_replicates: int, logger: logging.Logger | None = None
) -> None:
    """Log the empirical simultaneous coverage."""
    logger = logger or _default_benchmark_logger()
    logger.info(
        "Completed %d replicates; simultaneous coverage = %.3f.", n_replicates, coverage
    )
