"""
Recover per-variable bins from categories.

Decoding reads one digit of the mixed-radix category, so the bin of any
variable can be recovered without the original event values. The category
must come from an encoder over the same :class:`Binning`.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import numpy as np

from .binning import decode_digit
from .config import Binning
from .utils import NO_BIN, VARIABLE_NOT_FOUND


class CategoryDecoder:
    """
    Invert categories produced by :class:`CategoryEncoder`.

    Parameters
    ----------
    binning : Binning
        The sealed binning the categories were computed with.
    """

    def __init__(self, binning: Binning):
        self.binning = binning

    def decode_bin(self, variable_id: int, category: int) -> int:
        """
        Bin index of one variable.

        Parameters
        ----------
        variable_id : int
            Variable to decode. With duplicate ids the last added axis
            is used.
        category : int
            Category from :meth:`CategoryEncoder.encode`.

        Returns
        -------
        bin_index : int
            Bin in ``[0, n_bins)``, or ``NO_BIN`` (-1) if no variable is
            configured, the variable is unknown or the category is negative.
        """
        if not self.binning.variables or category < 0:
            return NO_BIN

        index = self.binning.find_variable_index(variable_id)
        if index == VARIABLE_NOT_FOUND:
            return NO_BIN

        return decode_digit(
            int(category), self.binning.strides[index], self.binning.radixes[index]
        )

    def decode_bins(self, category: int) -> List[int]:
        """Bin index of every axis, in digit order (empty for ``NO_BIN`` input)."""
        if category < 0:
            return []
        return [
            decode_digit(int(category), stride, radix)
            for stride, radix in zip(self.binning.strides, self.binning.radixes)
        ]

    def decode_batch(self, variable_id: int, categories: np.ndarray) -> np.ndarray:
        """
        Vectorized :meth:`decode_bin`.

        Returns
        -------
        bins : np.ndarray
            int64 bin indices, ``NO_BIN`` for negative categories.
        """
        categories = np.asarray(categories, dtype=np.int64)
        bins = np.full(categories.shape, NO_BIN, dtype=np.int64)

        index = self.binning.find_variable_index(variable_id)
        if index == VARIABLE_NOT_FOUND:
            return bins

        valid = categories >= 0
        stride = self.binning.strides[index]
        radix = self.binning.radixes[index]
        bins[valid] = (categories[valid] // stride) % radix
        return bins

    def bin_edges_of(self, variable_id: int, category: int) -> Optional[Tuple[float, float]]:
        """(low, high) edges of the decoded bin, or None if nothing decodes."""
        bin_index = self.decode_bin(variable_id, category)
        if bin_index == NO_BIN:
            return None
        index = self.binning.find_variable_index(variable_id)
        return self.binning.variables[index].bin_limits(bin_index)

    def bin_centers(self, category: int) -> Dict[int, float]:
        """
        Midpoint of the decoded bin of every variable.

        With unique variable ids, feeding the result back to the encoder
        yields ``category`` again. With duplicate ids the last added axis
        wins, so every axis sharing the id reads the same center and the
        round trip does not hold.
        """
        centers: Dict[int, float] = {}
        for variable, bin_index in zip(self.binning.variables, self.decode_bins(category)):
            low, high = variable.bin_limits(bin_index)
            centers[variable.variable_id] = 0.5 * (low + high)
        return centers


def decode_bin(binning: Binning, variable_id: int, category: int) -> int:
    """Shortcut for ``CategoryDecoder(binning).decode_bin(variable_id, category)``."""
    return CategoryDecoder(binning).decode_bin(variable_id, category)


__all__ = ["CategoryDecoder", "decode_bin"]
