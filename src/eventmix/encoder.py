"""
Event categorization.

The encoder looks up every configured variable in an event's value table,
finds its bin and folds the bins into a single category. An event with any
value outside its axis range gets no category at all.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Any, List, Tuple

import numpy as np

from .binning import encode_digits, in_range, search_bin, search_bins
from .config import Binning
from .utils import NO_CATEGORY


class AxisStatus(IntEnum):
    """Position of an observed value relative to its axis range."""
    BELOW = -1
    INSIDE = 0
    ABOVE = 1


class CategoryEncoder:
    """
    Map per-event values to categories.

    Parameters
    ----------
    binning : Binning
        Sealed binning, see :meth:`BinningConfig.build`.

    Notes
    -----
    ``values`` arguments are indexed with the variable ids, so any mapping
    or sequence works: a dict, a list, a numpy array or a pandas Series.
    A value table that lacks a configured id raises the table's own
    ``KeyError`` / ``IndexError``.
    """

    def __init__(self, binning: Binning):
        self.binning = binning

    def find_bins(self, values: Any) -> List[int]:
        """
        Search every axis without rejecting out-of-range values.

        Returns
        -------
        bins : list of int
            Per-axis search results, ``-1`` below the first edge and
            ``n_edges - 1`` at or above the last edge.
        """
        return [
            search_bin(variable.edges, values[variable.variable_id])
            for variable in self.binning.variables
        ]

    def encode(self, values: Any) -> int:
        """
        Compute the category of one event.

        Parameters
        ----------
        values : mapping or sequence
            Observed values indexed by variable id.

        Returns
        -------
        category : int
            Category in ``[0, n_categories)``, or ``NO_CATEGORY`` (-1) if
            no variable is configured or any value is out of range.
        """
        variables = self.binning.variables
        if not variables:
            return NO_CATEGORY

        digits = []
        for variable in variables:
            index = search_bin(variable.edges, values[variable.variable_id])
            if not in_range(index, len(variable.edges)):
                return NO_CATEGORY
            digits.append(index)

        return encode_digits(digits, self.binning.strides)

    __call__ = encode

    def locate(self, values: Any) -> Tuple[int, Tuple[AxisStatus, ...]]:
        """
        Compute the category together with per-axis range diagnostics.

        Returns
        -------
        category : int
            Same as :meth:`encode`.
        statuses : tuple of AxisStatus
            One entry per axis, in digit order.
        """
        statuses = []
        for variable, index in zip(self.binning.variables, self.find_bins(values)):
            if index < 0:
                statuses.append(AxisStatus.BELOW)
            elif index >= variable.n_bins:
                statuses.append(AxisStatus.ABOVE)
            else:
                statuses.append(AxisStatus.INSIDE)
        return self.encode(values), tuple(statuses)

    def encode_batch(self, values: Any) -> np.ndarray:
        """
        Compute the categories of many events at once.

        Parameters
        ----------
        values : np.ndarray of shape (n_events, n_columns) or DataFrame
            Value table, one row per event. Array columns are indexed by
            variable id; DataFrame columns are selected by label.

        Returns
        -------
        categories : np.ndarray of shape (n_events,)
            int64 categories, ``NO_CATEGORY`` where :meth:`encode` would
            reject the event.

        Raises
        ------
        OverflowError
            If the category space does not fit in int64; use :meth:`encode`
            per event for such binnings.
        """
        if self.binning.n_categories > np.iinfo(np.int64).max:
            raise OverflowError(
                f"{self.binning.n_categories} categories do not fit in int64"
            )

        if hasattr(values, "columns"):
            columns = {
                variable.variable_id: np.asarray(values[variable.variable_id], dtype=np.float64)
                for variable in self.binning.variables
            }
            n_events = len(values)
        else:
            table = np.asarray(values, dtype=np.float64)
            if table.ndim != 2:
                raise ValueError(
                    f"Expected 2D array of events, got {table.ndim}D array instead."
                )
            columns = {
                variable.variable_id: table[:, variable.variable_id]
                for variable in self.binning.variables
            }
            n_events = table.shape[0]

        if not self.binning.variables:
            return np.full(n_events, NO_CATEGORY, dtype=np.int64)

        categories = np.zeros(n_events, dtype=np.int64)
        accepted = np.ones(n_events, dtype=bool)
        for variable, stride in zip(self.binning.variables, self.binning.strides):
            index = search_bins(variable.edges, columns[variable.variable_id])
            accepted &= (index >= 0) & (index < variable.n_bins)
            categories += index * stride

        categories[~accepted] = NO_CATEGORY
        return categories


def encode(binning: Binning, values: Any) -> int:
    """Shortcut for ``CategoryEncoder(binning).encode(values)``."""
    return CategoryEncoder(binning).encode(values)


__all__ = ["AxisStatus", "CategoryEncoder", "encode"]
