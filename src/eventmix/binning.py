"""
Bin search and mixed-radix arithmetic.

Every axis is searched with "largest edge <= value" semantics: for ``N``
edges the result is in ``[-1, N - 1]``, ``-1`` meaning the value lies below
the first edge and ``N - 1`` meaning it lies at or above the last one. Only
``[0, N - 2]`` are real bins.

Per-axis bin indices are combined into one category as the digits of a
mixed-radix number, the first axis being the most significant digit and
each axis' radix being its bin count.
"""

from __future__ import annotations

from typing import List, Sequence

import numpy as np


def search_bin(edges: np.ndarray, value: float) -> int:
    """
    Find the bin of a single value.

    Parameters
    ----------
    edges : np.ndarray of shape (n_edges,)
        Strictly increasing bin edges.
    value : float
        Observed value.

    Returns
    -------
    index : int
        Index of the largest edge ``<= value``, ``-1`` if the value is below
        the first edge. NaN sorts after +inf and lands on ``n_edges - 1``.
    """
    return int(np.searchsorted(edges, value, side="right")) - 1


def search_bins(edges: np.ndarray, values: np.ndarray) -> np.ndarray:
    """
    Vectorized :func:`search_bin`.

    Parameters
    ----------
    edges : np.ndarray of shape (n_edges,)
        Strictly increasing bin edges.
    values : np.ndarray of shape (n_samples,)
        Observed values.

    Returns
    -------
    indices : np.ndarray of shape (n_samples,)
        Search results in ``[-1, n_edges - 1]`` (int64).
    """
    return np.searchsorted(edges, values, side="right").astype(np.int64) - 1


def in_range(index: int, n_edges: int) -> bool:
    """Return True if a search result is a real bin."""
    return 0 <= index < n_edges - 1


def mixed_radix_strides(radixes: Sequence[int]) -> List[int]:
    """
    Compute the place value of every digit.

    ``strides[i]`` is the product of the radixes of all axes after ``i``,
    so the last axis has stride 1.

    Parameters
    ----------
    radixes : sequence of int
        Bin count of each axis, most significant first.

    Returns
    -------
    strides : list of int
    """
    strides = [1] * len(radixes)
    norm = 1
    for i in range(len(radixes) - 1, -1, -1):
        strides[i] = norm
        norm *= radixes[i]
    return strides


def encode_digits(digits: Sequence[int], strides: Sequence[int]) -> int:
    """Combine per-axis bin indices into a category."""
    category = 0
    for digit, stride in zip(digits, strides):
        category += digit * stride
    return category


def decode_digit(category: int, stride: int, radix: int) -> int:
    """Extract the bin index of one axis from a category."""
    return (category // stride) % radix


__all__ = [
    "search_bin",
    "search_bins",
    "in_range",
    "mixed_radix_strides",
    "encode_digits",
    "decode_digit",
]
