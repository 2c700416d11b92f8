from __future__ import annotations

from typing import Iterable

import numpy as np
import pandas as pd

from posthoc_analysis.exceptions import DomainError


def validate_alpha(alpha: float) -> float:
    """Return ``alpha`` as float, raising ``DomainError`` unless 0 < alpha < 1."""
    alpha = float(alpha)
    if not 0.0 < alpha < 1.0:
        raise DomainError(f"alpha must lie in (0, 1), got {alpha!r}.")
    return alpha


def validate_lambda(lambda_: float) -> float:
    """Return ``lambda_`` as float, raising ``DomainError`` unless it is positive."""
    lambda_ = float(lambda_)
    if not (np.isfinite(lambda_) and lambda_ > 0.0):
        raise DomainError(f"lambda must be a positive finite number, got {lambda_!r}.")
    return lambda_


def as_p_value_array(p_values: Iterable[float] | np.ndarray | pd.Series) -> np.ndarray:
    """Convert p-values to a 1-D float64 array and check they lie in [0, 1].

    Parameters
    ----------
    p_values
        Sequence, array or Series with one p-value per hypothesis.

    Returns
    -------
    np.ndarray
        Copy-free float view where possible; callers must not mutate it.

    Raises
    ------
    DomainError
        If the vector is empty, not one-dimensional, non-finite or outside [0, 1].
    """
    if isinstance(p_values, pd.Series):
        values = p_values.to_numpy(dtype=float)
    else:
        values = np.asarray(p_values, dtype=float)

    if values.ndim != 1:
        raise DomainError(f"p-values must be one-dimensional, got shape {values.shape}.")
    if values.size == 0:
        raise DomainError("At least one p-value is required.")
    if not np.all(np.isfinite(values)):
        raise DomainError("p-values must be finite.")
    if values.min() < 0.0 or values.max() > 1.0:
        raise DomainError("p-values must lie in [0, 1].")
    return values


def resolve_subset(
    p_values: np.ndarray | pd.Series,
    subset: Iterable | np.ndarray | None,
) -> np.ndarray:
    """Translate a subset query into sorted, unique 0-based positions.

    Parameters
    ----------
    p_values
        The p-value vector the subset refers to. When it is a labelled
        ``pd.Series``, non-integer subsets are looked up as index labels.
    subset
        ``None`` (all hypotheses), a boolean mask of length ``m``, integer
        positions in ``[0, m)``, or Series index labels.

    Returns
    -------
    np.ndarray
        Integer positions, sorted and de-duplicated.

    Raises
    ------
    DomainError
        If a position is out of range, a label is unknown or a mask has the
        wrong length.
    """
    m = len(p_values)
    if subset is None:
        return np.arange(m)

    if isinstance(subset, (pd.Series, pd.Index)):
        subset = subset.to_numpy()
    elif isinstance(subset, (set, frozenset)):
        subset = list(subset)
    selection = np.asarray(subset)

    if selection.size == 0:
        return np.zeros(0, dtype=int)
    selection = selection.ravel()

    if selection.dtype == bool:
        if selection.size != m:
            raise DomainError(
                f"Boolean subset mask has length {selection.size}, expected {m}."
            )
        return np.flatnonzero(selection)

    if selection.dtype.kind in "iu":
        if selection.min() < 0 or selection.max() >= m:
            raise DomainError(
                f"Subset positions must lie in [0, {m - 1}], got "
                f"[{selection.min()}, {selection.max()}]."
            )
        return np.unique(selection.astype(int))

    if isinstance(p_values, pd.Series):
        positions = p_values.index.get_indexer(selection)
        if np.any(positions < 0):
            missing = selection[positions < 0]
            preview = ", ".join(map(repr, missing[:5].tolist()))
            raise DomainError(f"Unknown hypothesis labels in subset: {preview}.")
        return np.unique(positions)

    raise DomainError(
        "Subset must be positions, a boolean mask, or labels of a pandas Series; "
        f"got dtype {selection.dtype}."
    )


def as_data_matrix(data: np.ndarray | pd.DataFrame) -> np.ndarray:
    """Return the hypotheses x samples matrix as a 2-D float64 array."""
    if isinstance(data, pd.DataFrame):
        matrix = data.to_numpy(dtype=float)
    else:
        matrix = np.asarray(data, dtype=float)
    if matrix.ndim != 2:
        raise DomainError(f"Data must be a 2-D matrix, got shape {matrix.shape}.")
    if matrix.shape[0] == 0 or matrix.shape[1] == 0:
        raise DomainError("Data matrix must have at least one row and one column.")
    return matrix


def validate_labels(labels: Iterable | np.ndarray | pd.Series, n_samples: int) -> np.ndarray:
    """Check a categorical label vector has one entry per sample and >= 2 groups."""
    if isinstance(labels, pd.Series):
        label_array = labels.to_numpy()
    else:
        label_array = np.asarray(labels)
    label_array = label_array.ravel()

    if label_array.size != n_samples:
        raise DomainError(
            f"Expected {n_samples} labels (one per sample column), got {label_array.size}."
        )
    if np.unique(label_array).size < 2:
        raise DomainError("Labels must define at least two groups.")
    return label_array


__all__ = [
    "validate_alpha",
    "validate_lambda",
    "as_p_value_array",
    "resolve_subset",
    "as_data_matrix",
    "validate_labels",
]
