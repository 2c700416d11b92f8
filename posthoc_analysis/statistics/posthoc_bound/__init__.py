"""Post hoc bounds on the number of false positives in arbitrary subsets.

Modules
-------
base
    Shared scan over a threshold family, single subset and all prefixes
jer_bound
    Bound from a reference family controlling the joint error rate
closed_testing
    Simes closed testing shortcut (Hommel's value)
dispatcher
    Unified interface selecting the method and resolving defaults
"""

from .base import BoundResult, max_false_positives_prefixes, max_false_positives_sorted
from .closed_testing import (
    closed_testing_max_false_positives,
    closed_testing_thresholds,
    hommel_value,
)
from .dispatcher import (
    POSTHOC_METHODS,
    check_dependence_assumption,
    max_false_positives,
    min_true_positives,
    posthoc_bound,
    posthoc_bound_table,
    posthoc_thresholds,
)
from .jer_bound import jer_max_false_positives, resolve_reference_family

__all__ = [
    "BoundResult",
    "max_false_positives_sorted",
    "max_false_positives_prefixes",
    "hommel_value",
    "closed_testing_thresholds",
    "closed_testing_max_false_positives",
    "jer_max_false_positives",
    "resolve_reference_family",
    "POSTHOC_METHODS",
    "check_dependence_assumption",
    "posthoc_thresholds",
    "posthoc_bound",
    "max_false_positives",
    "min_true_positives",
    "posthoc_bound_table",
]
