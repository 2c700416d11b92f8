"""Reference families of post hoc thresholds.

Modules
-------
base
    Abstract template with validation and calibration interface
simes
    Linear Simes template (default)
beta
    Order-statistic Beta quantile template
dispatcher
    Lookup by name
"""

from .base import ReferenceFamily
from .beta import BetaFamily
from .dispatcher import REFERENCE_FAMILIES, get_reference_family
from .simes import SimesFamily

__all__ = [
    "ReferenceFamily",
    "SimesFamily",
    "BetaFamily",
    "REFERENCE_FAMILIES",
    "get_reference_family",
]
