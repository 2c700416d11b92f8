"""Lookup of reference family templates by name."""

from __future__ import annotations

from typing import Dict, Optional, Type

from posthoc_analysis import config

from .base import ReferenceFamily
from .beta import BetaFamily
from .simes import SimesFamily

REFERENCE_FAMILIES: Dict[str, Type[ReferenceFamily]] = {
    "simes": SimesFamily,
    "beta": BetaFamily,
}


def get_reference_family(
    name: Optional[str],
    m: int,
    k_max: Optional[int] = None,
    calibrated: bool = False,
) -> ReferenceFamily:
    """Instantiate a reference family template.

    Parameters
    ----------
    name : str, optional
        ``"simes"`` or ``"beta"``. ``None`` uses ``config.REFERENCE_FAMILY``.
    m : int
        Number of hypotheses.
    k_max : int, optional
        Family size; defaults to ``m``.
    calibrated : bool
        Whether ``lambda`` will come from permutation calibration.

    Raises
    ------
    ValueError
        If ``name`` is not a known template.
    """
    key = (name or config.REFERENCE_FAMILY).lower()
    if key not in REFERENCE_FAMILIES:
        raise ValueError(
            f"Unknown reference family: {name!r}. "
            f"Supported families: {', '.join(map(repr, REFERENCE_FAMILIES))}"
        )
    return REFERENCE_FAMILIES[key](m=m, k_max=k_max, calibrated=calibrated)


__all__ = ["REFERENCE_FAMILIES", "get_reference_family"]
