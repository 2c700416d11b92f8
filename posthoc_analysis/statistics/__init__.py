from .reference_family import (
    ReferenceFamily,
    SimesFamily,
    BetaFamily,
    get_reference_family,
)
from .posthoc_bound import (
    BoundResult,
    hommel_value,
    posthoc_bound,
    posthoc_bound_table,
    max_false_positives,
    min_true_positives,
)
from .confidence_envelope import (
    confidence_envelope,
    rank_hypotheses,
    max_fdp_selection_size,
)
from .calibration import (
    CalibrationResult,
    PermutationCalibrator,
    calibrate_lambda,
    welch_t_test,
)
from .multiple_testing import benjamini_hochberg_selection, threshold_selection

__all__ = [
    # Reference families
    "ReferenceFamily",
    "SimesFamily",
    "BetaFamily",
    "get_reference_family",
    # Post hoc bounds
    "BoundResult",
    "hommel_value",
    "posthoc_bound",
    "posthoc_bound_table",
    "max_false_positives",
    "min_true_positives",
    # Confidence envelope
    "confidence_envelope",
    "rank_hypotheses",
    "max_fdp_selection_size",
    # Calibration
    "CalibrationResult",
    "PermutationCalibrator",
    "calibrate_lambda",
    "welch_t_test",
    # Candidate selections
    "benjamini_hochberg_selection",
    "threshold_selection",
]
