"""
Utility functions for input validation, sentinels and logging.

This module holds the checks run when a binning is defined, the sentinel
values returned on the per-event path, and the verbosity-gated logging
helpers shared by the rest of the package.
"""

from __future__ import annotations

import numbers
from typing import Any, List, Tuple, Union

import numpy as np


# =============================================================================
# Type Aliases
# =============================================================================

ArrayLike = Union[np.ndarray, List[Any], Tuple[Any, ...]]


# =============================================================================
# Sentinels
# =============================================================================

#: Returned by encoders when an event cannot be assigned a category.
NO_CATEGORY = -1

#: Returned by decoders when no bin can be recovered.
NO_BIN = -1

#: Returned by lookups for a variable id that is not configured.
VARIABLE_NOT_FOUND = -1


# =============================================================================
# Custom Exceptions and Warnings
# =============================================================================

class BinningError(ValueError):
    """
    Exception raised when a binning definition is malformed.

    Raised at set-up time only (``validate``, ``build``, ``from_dict``),
    never while categorizing events.
    """
    pass


class DuplicateVariableWarning(UserWarning):
    """Warning emitted when the same variable id names more than one axis."""
    pass


class SealedConfigWarning(UserWarning):
    """Warning emitted when a sealed binning definition is modified."""
    pass


# =============================================================================
# Input Validation Functions
# =============================================================================

def check_variable_id(variable_id: Any) -> int:
    """
    Validate a variable identifier.

    Parameters
    ----------
    variable_id : int
        Identifier of the observable. ``IntEnum`` members are accepted.

    Returns
    -------
    variable_id : int
        The identifier as a plain int.

    Raises
    ------
    BinningError
        If the identifier is not an integer.
    """
    if isinstance(variable_id, bool) or not isinstance(variable_id, numbers.Integral):
        raise BinningError(
            f"variable_id must be an integer, got {type(variable_id).__name__}"
        )
    return int(variable_id)


def as_edges(bin_edges: ArrayLike) -> np.ndarray:
    """
    Convert bin edges to an owned, read-only float64 array.

    No ordering checks are made here, see :func:`check_edges`.

    Parameters
    ----------
    bin_edges : array-like of shape (n_edges,)
        Bin edges.

    Returns
    -------
    edges : np.ndarray
        One-dimensional copy of the edges with the write flag cleared.

    Raises
    ------
    TypeError
        If the input cannot be converted to a float array.
    BinningError
        If the input is not one-dimensional.
    """
    try:
        edges = np.array(bin_edges, dtype=np.float64, copy=True)
    except (TypeError, ValueError) as e:
        raise TypeError(
            f"Cannot convert bin edges of type {type(bin_edges).__name__} "
            f"to a float array: {e}"
        )

    if edges.ndim != 1:
        raise BinningError(
            f"Bin edges must be one-dimensional, got {edges.ndim}D array instead."
        )

    edges.setflags(write=False)
    return edges


def check_edges(edges: np.ndarray, *, variable_id: int = VARIABLE_NOT_FOUND) -> None:
    """
    Validate the bin edges of one axis.

    Parameters
    ----------
    edges : np.ndarray of shape (n_edges,)
        Bin edges as returned by :func:`as_edges`.
    variable_id : int, optional
        Variable id used in error messages.

    Raises
    ------
    BinningError
        If there are fewer than two edges, an edge is not finite, or the
        edges are not strictly increasing.
    """
    label = f"variable {variable_id}"

    if len(edges) < 2:
        raise BinningError(
            f"{label}: at least 2 bin edges are required, got {len(edges)}"
        )

    if not np.all(np.isfinite(edges)):
        raise BinningError(f"{label}: bin edges must be finite, got {edges.tolist()}")

    steps = np.diff(edges)
    if np.any(steps <= 0):
        bad = int(np.argmax(steps <= 0))
        raise BinningError(
            f"{label}: bin edges must be strictly increasing, "
            f"edge {bad + 1} ({edges[bad + 1]}) <= edge {bad} ({edges[bad]})"
        )


# =============================================================================
# Logging Utilities
# =============================================================================

def log_message(message: str, *, verbose: int = 0, level: int = 1) -> None:
    """
    Print a log message if verbose level is sufficient.

    Parameters
    ----------
    message : str
        Message to print.
    verbose : int, default=0
        Verbosity of the caller.
    level : int, default=1
        Minimum verbosity at which the message is printed
        (1 = lifecycle, 2 = debug).
    """
    if verbose >= level:
        print(f"[EventMix] {message}")


def log_binning_summary(
    name: str,
    n_variables: int,
    n_categories: int,
    *,
    verbose: int = 0,
) -> None:
    """
    Log the shape of a freshly initialized binning.

    Parameters
    ----------
    name : str
        Name of the owning handler (may be empty).
    n_variables : int
        Number of configured axes.
    n_categories : int
        Size of the category space.
    verbose : int, default=0
        Verbosity level.
    """
    if verbose >= 1:
        prefix = f"{name}: " if name else ""
        print(
            f"[EventMix] {prefix}initialized {n_variables} mixing variable(s), "
            f"{n_categories} categories"
        )
