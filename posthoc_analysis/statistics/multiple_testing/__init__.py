"""Data-dependent candidate selections for post hoc inference."""

from .base import benjamini_hochberg_selection, threshold_selection

__all__ = ["benjamini_hochberg_selection", "threshold_selection"]
