"""Simulation utilities for checking post hoc bounds."""

from .coverage import CoverageResult, estimate_envelope_coverage
from .generators import generate_gaussian_two_group

__all__ = ["CoverageResult", "estimate_envelope_coverage", "generate_gaussian_two_group"]
