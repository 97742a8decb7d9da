"""
EventMix - multi-dimensional event categorization for event mixing.

Events are bucketed into discrete categories from several continuous
observables, each split into user-defined bins. Events that share a
category have similar characteristics and can be mixed to estimate
combinatorial background.

Features:
- Arbitrary number of mixing variables with their own bin edges
- Single integer category per event (mixed-radix encoding)
- Per-variable bin recovery from a category without the event values
- Immutable, thread-shareable binning snapshots
- Vectorized categorization of event tables (numpy / pandas)
- JSON persistence of binning definitions

Example usage:
    >>> from eventmix import BinningConfig, CategoryEncoder, CategoryDecoder
    >>>
    >>> config = BinningConfig()
    >>> config.add_variable(0, [0.0, 10.0, 20.0])   # e.g. vertex z
    >>> config.add_variable(1, [0.0, 5.0])          # e.g. centrality
    >>> binning = config.build()
    >>>
    >>> encoder = CategoryEncoder(binning)
    >>> category = encoder.encode({0: 15.0, 1: 2.0})   # -> 1
    >>> CategoryDecoder(binning).decode_bin(0, category)  # -> 1
"""

__version__ = "0.1.0"
__author__ = "EventMix Contributors"

# Binning definition
from .config import MixingVariable, Binning, BinningConfig

# Encoding / decoding
from .encoder import AxisStatus, CategoryEncoder, encode
from .decoder import CategoryDecoder, decode_bin

# Stateful handler
from .handler import MixingHandler

# Utility functions
from .utils import (
    NO_CATEGORY,
    NO_BIN,
    VARIABLE_NOT_FOUND,
    BinningError,
    DuplicateVariableWarning,
    SealedConfigWarning,
    check_edges,
    check_variable_id,
    log_message,
)

# Public API
__all__ = [
    # Version
    "__version__",
    # Definition
    "MixingVariable",
    "Binning",
    "BinningConfig",
    # Encoding / decoding
    "AxisStatus",
    "CategoryEncoder",
    "CategoryDecoder",
    "encode",
    "decode_bin",
    # Handler
    "MixingHandler",
    # Sentinels
    "NO_CATEGORY",
    "NO_BIN",
    "VARIABLE_NOT_FOUND",
    # Errors and warnings
    "BinningError",
    "DuplicateVariableWarning",
    "SealedConfigWarning",
    # Utilities
    "check_edges",
    "check_variable_id",
    "log_message",
]
