"""
Mixing handler.

:class:`MixingHandler` is the stateful entry point an analysis task owns:
variables are added during set-up, the handler is initialized explicitly
with :meth:`MixingHandler.init` or implicitly by the first call to
:meth:`MixingHandler.find_event_category`, and afterwards every event is
mapped to a category. Events sharing a category are candidates for mixing.
"""

from __future__ import annotations

import warnings
from typing import Any, List, Optional

import numpy as np

from .config import Binning, BinningConfig
from .decoder import CategoryDecoder
from .encoder import CategoryEncoder
from .utils import (
    ArrayLike,
    NO_BIN,
    NO_CATEGORY,
    SealedConfigWarning,
    log_binning_summary,
    log_message,
)


class MixingHandler:
    """
    Categorize events by the bins of several observables.

    Parameters
    ----------
    name : str, default=""
        Handler name, used in log messages and saved definitions.
    title : str, default=""
        Free-form description.
    verbose : int, default=0
        Verbosity level (0=silent, 1=lifecycle, 2=debug).

    Examples
    --------
    >>> handler = MixingHandler("mixing")
    >>> handler.add_mixing_variable(0, [0.0, 10.0, 20.0])
    >>> handler.add_mixing_variable(1, [0.0, 5.0])
    >>> handler.find_event_category({0: 15.0, 1: 2.0})
    1
    >>> handler.get_bin_from_category(0, 1)
    1
    """

    def __init__(self, name: str = "", title: str = "", verbose: int = 0):
        self.name = name
        self.title = title
        self.verbose = verbose

        self.config = BinningConfig(name=name)
        self._binning: Optional[Binning] = None
        self._encoder: Optional[CategoryEncoder] = None
        self._decoder: Optional[CategoryDecoder] = None

    # -------------------------------------------------------------------------
    # Set-up
    # -------------------------------------------------------------------------

    def add_mixing_variable(self, variable_id: int, bin_edges: ArrayLike) -> None:
        """
        Add a mixing variable.

        Adding after initialization is allowed but discards the current
        binning; the handler re-initializes on the next event and
        categories computed before no longer apply.
        """
        if self._binning is not None:
            warnings.warn(
                f"{self._label()}variable {variable_id} added after "
                "initialization; previously computed categories are stale.",
                SealedConfigWarning,
                stacklevel=2,
            )
            log_message(
                f"{self._label()}re-opening binning to add variable {variable_id}",
                verbose=self.verbose,
            )
            self._reset()

        with warnings.catch_warnings():
            # Already reported above
            warnings.simplefilter("ignore", SealedConfigWarning)
            self.config.add_variable(variable_id, bin_edges)

    def init(self) -> Binning:
        """
        Validate the variables and seal the binning.

        Returns
        -------
        binning : Binning
            The snapshot used for all following categorizations.
        """
        binning = self.config.build()
        self._binning = binning
        self._encoder = CategoryEncoder(binning)
        self._decoder = CategoryDecoder(binning)
        log_binning_summary(
            self.name, len(binning), binning.n_categories, verbose=self.verbose
        )
        return binning

    def _reset(self) -> None:
        self._binning = None
        self._encoder = None
        self._decoder = None

    @property
    def is_initialized(self) -> bool:
        return self._binning is not None

    @property
    def binning(self) -> Binning:
        """
        The sealed binning, initializing the handler if needed.

        With no variable configured an empty, unsealed binning is returned.
        """
        if len(self.config) == 0:
            return Binning((), name=self.name)
        if self._binning is None:
            return self.init()
        return self._binning

    # -------------------------------------------------------------------------
    # Per-event interface
    # -------------------------------------------------------------------------

    def find_event_category(self, values: Any) -> int:
        """
        Category of one event.

        Parameters
        ----------
        values : mapping or sequence
            Observed values indexed by variable id.

        Returns
        -------
        category : int
            Category, or ``NO_CATEGORY`` (-1) if no variable is configured
            or any value is outside its axis range.
        """
        if len(self.config) == 0:
            return NO_CATEGORY
        if self._encoder is None:
            self.init()

        category = self._encoder.encode(values)
        if category == NO_CATEGORY and self.verbose >= 2:
            _, statuses = self._encoder.locate(values)
            rejected = [
                f"{variable.variable_id}={status.name}"
                for variable, status in zip(self._binning.variables, statuses)
                if status != 0
            ]
            log_message(
                f"{self._label()}event rejected, out of range: {', '.join(rejected)}",
                verbose=self.verbose,
                level=2,
            )
        return category

    def find_event_categories(self, values: Any) -> np.ndarray:
        """Vectorized :meth:`find_event_category` over a table of events."""
        if len(self.config) == 0:
            return np.full(len(values), NO_CATEGORY, dtype=np.int64)
        if self._encoder is None:
            self.init()
        return self._encoder.encode_batch(values)

    def get_bin_from_category(self, variable_id: int, category: int) -> int:
        """
        Bin of one variable in a category.

        Returns
        -------
        bin_index : int
            Bin index, or ``NO_BIN`` (-1) if no variable is configured or
            the variable is unknown.
        """
        if len(self.config) == 0:
            return NO_BIN
        if self._decoder is None:
            self.init()
        return self._decoder.decode_bin(variable_id, category)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_mixing_variable(self, variable_id: int) -> int:
        """Position of a variable, ``VARIABLE_NOT_FOUND`` (-1) if absent."""
        return self.config.find_variable_index(variable_id)

    def get_mixing_variable_limits(self, variable_id: int) -> List[float]:
        """Bin edges of a variable, empty if absent."""
        return self.config.get_variable_limits(variable_id)

    def total_categories(self) -> int:
        return self.config.total_categories()

    def _label(self) -> str:
        return f"{self.name}: " if self.name else ""

    def __repr__(self) -> str:
        return (
            f"MixingHandler(name={self.name!r}, title={self.title!r}, "
            f"variables={len(self.config)}, initialized={self.is_initialized})"
        )


__all__ = ["MixingHandler"]
