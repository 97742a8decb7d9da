"""
Binning definitions for event categorization.

A :class:`BinningConfig` collects mixing variables one by one. Calling
:meth:`BinningConfig.build` validates it and returns a :class:`Binning`,
an immutable snapshot that encoders and decoders work on. Categories are
only meaningful together with the snapshot that produced them.
"""

from __future__ import annotations

import json
import warnings
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple

import numpy as np

from .utils import (
    ArrayLike,
    BinningError,
    DuplicateVariableWarning,
    SealedConfigWarning,
    VARIABLE_NOT_FOUND,
    as_edges,
    check_edges,
    check_variable_id,
)
from .binning import mixed_radix_strides


# =============================================================================
# Mixing Variable
# =============================================================================

@dataclass(frozen=True, eq=False)
class MixingVariable:
    """
    One categorization axis.

    Parameters
    ----------
    variable_id : int
        Identifier of the observable in the caller's value table.
    edges : np.ndarray of shape (n_edges,)
        Bin edges. Stored as a read-only float64 copy.
    """
    variable_id: int
    edges: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "variable_id", check_variable_id(self.variable_id))
        object.__setattr__(self, "edges", as_edges(self.edges))

    @property
    def n_bins(self) -> int:
        """Number of bins, one less than the number of edges."""
        return len(self.edges) - 1

    def bin_limits(self, bin_index: int) -> Tuple[float, float]:
        """Return the (low, high) edges of a bin."""
        return float(self.edges[bin_index]), float(self.edges[bin_index + 1])

    def to_dict(self) -> Dict[str, Any]:
        return {"variable_id": self.variable_id, "edges": self.edges.tolist()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MixingVariable":
        if not isinstance(data, dict):
            raise BinningError(
                f"Mixing variable entry must be a dict, got {type(data).__name__}"
            )
        try:
            return cls(data["variable_id"], data["edges"])
        except KeyError as e:
            raise BinningError(f"Mixing variable entry is missing key {e}")
        except TypeError as e:
            raise BinningError(f"Malformed mixing variable entry {data!r}: {e}")

    def __repr__(self) -> str:
        return f"MixingVariable(variable_id={self.variable_id}, edges={self.edges.tolist()})"


def _find_last(variables: Tuple[MixingVariable, ...], variable_id: int) -> int:
    # Later additions shadow earlier ones with the same id
    index = VARIABLE_NOT_FOUND
    for i, variable in enumerate(variables):
        if variable.variable_id == variable_id:
            index = i
    return index


# =============================================================================
# Sealed Snapshot
# =============================================================================

@dataclass(frozen=True, eq=False)
class Binning:
    """
    Immutable, validated set of mixing variables.

    Instances are created by :meth:`BinningConfig.build` and can be shared
    freely, including between threads.

    Attributes
    ----------
    variables : tuple of MixingVariable
        Axes in digit order, most significant first.
    radixes : tuple of int
        Bin count of each axis.
    strides : tuple of int
        Product of the radixes of all following axes.
    n_categories : int
        Size of the category space, 1 for an empty binning.
    name : str
        Optional label carried over from the config.
    """
    variables: Tuple[MixingVariable, ...]
    name: str = ""
    radixes: Tuple[int, ...] = field(init=False)
    strides: Tuple[int, ...] = field(init=False)
    n_categories: int = field(init=False)

    def __post_init__(self):
        variables = tuple(self.variables)
        radixes = tuple(v.n_bins for v in variables)
        n_categories = 1
        for radix in radixes:
            n_categories *= radix
        object.__setattr__(self, "variables", variables)
        object.__setattr__(self, "radixes", radixes)
        object.__setattr__(self, "strides", tuple(mixed_radix_strides(radixes)))
        object.__setattr__(self, "n_categories", n_categories)

    def __len__(self) -> int:
        return len(self.variables)

    def __iter__(self) -> Iterator[MixingVariable]:
        return iter(self.variables)

    @property
    def variable_ids(self) -> Tuple[int, ...]:
        return tuple(v.variable_id for v in self.variables)

    def find_variable_index(self, variable_id: int) -> int:
        """Position of the last axis with this id, or ``VARIABLE_NOT_FOUND``."""
        return _find_last(self.variables, variable_id)

    def total_categories(self) -> int:
        return self.n_categories

    def get_variable_limits(self, variable_id: int) -> List[float]:
        index = self.find_variable_index(variable_id)
        if index == VARIABLE_NOT_FOUND:
            return []
        return self.variables[index].edges.tolist()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "variables": [v.to_dict() for v in self.variables],
        }

    def __repr__(self) -> str:
        return (
            f"Binning(variable_ids={list(self.variable_ids)}, "
            f"radixes={list(self.radixes)}, n_categories={self.n_categories})"
        )


# =============================================================================
# Builder
# =============================================================================

class BinningConfig:
    """
    Ordered, append-only definition of the mixing variables.

    The order in which variables are added fixes the digit order of the
    categories: the first variable is the most significant digit.

    Parameters
    ----------
    name : str, default=""
        Optional label, kept in snapshots and in saved definitions.

    Examples
    --------
    >>> config = BinningConfig()
    >>> config.add_variable(0, [0.0, 10.0, 20.0]).add_variable(1, [0.0, 5.0])
    BinningConfig(name='', variable_ids=[0, 1], sealed=False)
    >>> config.total_categories()
    2
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._variables: List[MixingVariable] = []
        self._sealed = False

    # -------------------------------------------------------------------------
    # Definition
    # -------------------------------------------------------------------------

    def add_variable(self, variable_id: int, bin_edges: ArrayLike) -> "BinningConfig":
        """
        Append a mixing variable.

        Parameters
        ----------
        variable_id : int
            Identifier of the observable.
        bin_edges : array-like of shape (n_edges,)
            Strictly increasing bin edges, at least two. Ordering is only
            checked by :meth:`validate` / :meth:`build`.

        Returns
        -------
        self : BinningConfig
        """
        if self._sealed:
            warnings.warn(
                f"Adding variable {variable_id} to a sealed binning; snapshots "
                "built earlier are unchanged and categories from them do not "
                "apply to the new definition.",
                SealedConfigWarning,
                stacklevel=2,
            )
        self._variables.append(MixingVariable(variable_id, bin_edges))
        return self

    @property
    def variables(self) -> Tuple[MixingVariable, ...]:
        return tuple(self._variables)

    @property
    def is_sealed(self) -> bool:
        """True once :meth:`build` has been called."""
        return self._sealed

    def __len__(self) -> int:
        return len(self._variables)

    def __iter__(self) -> Iterator[MixingVariable]:
        return iter(self._variables)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def find_variable_index(self, variable_id: int) -> int:
        """
        Position of a variable in the definition.

        Returns
        -------
        index : int
            Index of the last added variable with this id, or
            ``VARIABLE_NOT_FOUND`` (-1).
        """
        return _find_last(tuple(self._variables), variable_id)

    def total_categories(self) -> int:
        """Product of the bin counts, 1 when no variable is configured."""
        total = 1
        for variable in self._variables:
            total *= variable.n_bins
        return total

    def get_variable_limits(self, variable_id: int) -> List[float]:
        """Bin edges of a variable, empty if it is not configured."""
        index = self.find_variable_index(variable_id)
        if index == VARIABLE_NOT_FOUND:
            return []
        return self._variables[index].edges.tolist()

    # -------------------------------------------------------------------------
    # Validation and sealing
    # -------------------------------------------------------------------------

    def validate(self) -> None:
        """
        Validate every axis.

        Raises
        ------
        BinningError
            If an axis has fewer than two edges, a non-finite edge or edges
            that are not strictly increasing.
        """
        for variable in self._variables:
            check_edges(variable.edges, variable_id=variable.variable_id)

    def duplicate_ids(self) -> List[int]:
        """Variable ids used by more than one axis."""
        counts = Counter(v.variable_id for v in self._variables)
        return [vid for vid, count in counts.items() if count > 1]

    def build(self) -> Binning:
        """
        Validate the definition and return an immutable snapshot.

        Seals the config. Duplicate ids are allowed but reported with a
        :class:`DuplicateVariableWarning`; lookups then resolve to the last
        added axis.

        Returns
        -------
        binning : Binning
        """
        self.validate()

        duplicates = self.duplicate_ids()
        if duplicates:
            warnings.warn(
                f"Variable id(s) {duplicates} configured more than once; "
                "lookups resolve to the last added axis.",
                DuplicateVariableWarning,
                stacklevel=2,
            )

        self._sealed = True
        return Binning(tuple(self._variables), name=self.name)

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Convert the definition to a JSON-serializable dictionary."""
        return {
            "name": self.name,
            "variables": [v.to_dict() for v in self._variables],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BinningConfig":
        """
        Create a config from a dictionary produced by :meth:`to_dict`.

        Raises
        ------
        BinningError
            If the ``variables`` entry is missing or malformed, or
            if the loaded edges do not pass :meth:`validate`.
        """
        if "variables" not in data:
            raise BinningError("Binning definition has no 'variables' entry")
        entries = data["variables"]
        if not isinstance(entries, list):
            raise BinningError(
                "Binning definition 'variables' must be a list, "
                f"got {type(entries).__name__}"
            )

        config = cls(name=data.get("name", ""))
        for entry in entries:
            variable = MixingVariable.from_dict(entry)
            config.add_variable(variable.variable_id, variable.edges)

        config.validate()
        return config

    def save(self, path: str) -> None:
        """
        Save the definition to a JSON file.

        Parameters
        ----------
        path : str
            File path to write.
        """
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: str) -> "BinningConfig":
        """
        Load a definition saved with :meth:`save`.

        Parameters
        ----------
        path : str
            File path to read.

        Returns
        -------
        config : BinningConfig
            An open (unsealed) config.
        """
        with open(path, "r") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def __repr__(self) -> str:
        ids = [v.variable_id for v in self._variables]
        return f"BinningConfig(name={self.name!r}, variable_ids={ids}, sealed={self._sealed})"


__all__ = ["MixingVariable", "Binning", "BinningConfig"]
