"""
Central configuration for the post hoc bounds library.
"""

# --- Statistical Parameters ---

# Default confidence level is 1 - SIGNIFICANCE_ALPHA for all post hoc bounds.
SIGNIFICANCE_ALPHA: float = 0.1

# Default scaling of the reference family. 1.0 is the uncalibrated
# (PRDS-valid) Simes family; calibrated values come from permutations.
DEFAULT_LAMBDA: float = 1.0

# Reference family template used when none is given.
# Options: 'simes', 'beta'
REFERENCE_FAMILY: str = "simes"

# Bound used by the dispatcher when no method is given.
# Options:
#   "jer": joint-error-rate bound of the reference family (any lambda)
#   "closed_testing": Simes closed testing shortcut (lambda <= 1 only)
POSTHOC_METHOD: str = "jer"

# --- Permutation Calibration Parameters ---

# Default number of label permutations for calibration.
N_PERMUTATIONS: int = 1000

# Number of permutations handled by a single joblib task.
PERMUTATION_BATCH_SIZE: int = 100

# Number of joblib workers. None means 1, -1 means all processors.
N_JOBS: int | None = None

# Random seed for permutation reproducibility (None for fresh entropy)
PERMUTATION_RANDOM_SEED: int | None = None

# --- Warnings ---

# Warn when a bound relies on the PRDS assumption (uncalibrated family).
WARN_DEPENDENCE_ASSUMPTION: bool = True
