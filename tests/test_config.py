"""
Test suite for binning definitions (BinningConfig, Binning, MixingVariable).
"""

import os
import sys
import json
import warnings
from enum import IntEnum

import numpy as np
import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from eventmix import (
    Binning,
    BinningConfig,
    BinningError,
    DuplicateVariableWarning,
    MixingVariable,
    SealedConfigWarning,
    VARIABLE_NOT_FOUND,
)


class Variables(IntEnum):
    VTX_Z = 3
    CENTRALITY = 7


# =============================================================================
# Construction
# =============================================================================

def test_add_variable_is_chainable():
    config = BinningConfig()
    result = config.add_variable(0, [0.0, 1.0]).add_variable(1, [0.0, 1.0, 2.0])
    assert result is config
    assert len(config) == 2
    assert [v.variable_id for v in config] == [0, 1]


def test_edges_are_owned_read_only_copies():
    edges = [0.0, 10.0, 20.0]
    config = BinningConfig().add_variable(0, edges)
    edges[1] = 99.0

    stored = config.variables[0].edges
    assert stored.tolist() == [0.0, 10.0, 20.0]
    assert stored.dtype == np.float64
    assert not stored.flags.writeable


def test_int_enum_ids_are_accepted():
    config = BinningConfig().add_variable(Variables.VTX_Z, [0.0, 1.0])
    assert config.find_variable_index(3) == 0
    assert type(config.variables[0].variable_id) is int


@pytest.mark.parametrize("bad_id", ["vtx", 1.5, True, None])
def test_non_integer_ids_are_rejected(bad_id):
    with pytest.raises(BinningError, match="integer"):
        BinningConfig().add_variable(bad_id, [0.0, 1.0])


def test_two_dimensional_edges_are_rejected():
    with pytest.raises(BinningError, match="one-dimensional"):
        BinningConfig().add_variable(0, [[0.0, 1.0], [1.0, 2.0]])


# =============================================================================
# Queries
# =============================================================================

def test_total_categories_is_product_of_bin_counts():
    config = BinningConfig()
    config.add_variable(0, [0.0, 10.0, 20.0])          # 2 bins
    config.add_variable(1, [0.0, 5.0])                 # 1 bin
    config.add_variable(2, [0.0, 1.0, 2.0, 3.0, 4.0])  # 4 bins
    assert config.total_categories() == 8


def test_total_categories_empty_is_one():
    assert BinningConfig().total_categories() == 1
    assert BinningConfig().build().total_categories() == 1


def test_find_variable_index_last_match_wins():
    config = BinningConfig()
    config.add_variable(5, [0.0, 1.0])
    config.add_variable(6, [0.0, 1.0])
    config.add_variable(5, [0.0, 2.0, 4.0])
    assert config.find_variable_index(5) == 2
    assert config.find_variable_index(6) == 1
    assert config.find_variable_index(42) == VARIABLE_NOT_FOUND


def test_get_variable_limits():
    config = BinningConfig()
    config.add_variable(5, [0.0, 1.0])
    config.add_variable(5, [0.0, 2.0, 4.0])
    assert config.get_variable_limits(5) == [0.0, 2.0, 4.0]
    assert config.get_variable_limits(1) == []


def test_mixing_variable_bins():
    variable = MixingVariable(1, [0.0, 2.5, 5.0])
    assert variable.n_bins == 2
    assert variable.bin_limits(1) == (2.5, 5.0)


# =============================================================================
# Validation
# =============================================================================

@pytest.mark.parametrize(
    "edges, message",
    [
        ([1.0], "at least 2"),
        ([], "at least 2"),
        ([0.0, np.nan, 1.0], "finite"),
        ([0.0, np.inf], "finite"),
        ([0.0, 1.0, 1.0], "strictly increasing"),
        ([0.0, 2.0, 1.0], "strictly increasing"),
    ],
)
def test_validate_rejects_malformed_edges(edges, message):
    config = BinningConfig().add_variable(4, edges)
    with pytest.raises(BinningError, match=message):
        config.validate()
    with pytest.raises(BinningError, match="variable 4"):
        config.build()


def test_binning_error_is_value_error():
    assert issubclass(BinningError, ValueError)


def test_build_warns_on_duplicate_ids():
    config = BinningConfig()
    config.add_variable(5, [0.0, 1.0])
    config.add_variable(5, [0.0, 2.0, 4.0])
    with pytest.warns(DuplicateVariableWarning, match=r"\[5\]"):
        binning = config.build()
    assert binning.find_variable_index(5) == 1


# =============================================================================
# Sealing
# =============================================================================

def test_build_returns_snapshot_and_seals():
    config = BinningConfig(name="pp")
    config.add_variable(0, [0.0, 10.0, 20.0]).add_variable(1, [0.0, 5.0])
    assert not config.is_sealed

    binning = config.build()

    assert config.is_sealed
    assert isinstance(binning, Binning)
    assert binning.name == "pp"
    assert binning.variable_ids == (0, 1)
    assert binning.radixes == (2, 1)
    assert binning.strides == (1, 1)
    assert binning.n_categories == 2


def test_snapshot_is_frozen():
    binning = BinningConfig().add_variable(0, [0.0, 1.0]).build()
    with pytest.raises(AttributeError):
        binning.n_categories = 10


def test_adding_to_sealed_config_warns_and_keeps_old_snapshot():
    config = BinningConfig().add_variable(0, [0.0, 10.0, 20.0])
    first = config.build()

    with pytest.warns(SealedConfigWarning):
        config.add_variable(1, [0.0, 1.0, 2.0])

    assert first.n_categories == 2
    assert len(first) == 1
    assert config.total_categories() == 4

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        second = config.build()
    assert second.n_categories == 4


# =============================================================================
# Persistence
# =============================================================================

def test_to_dict_from_dict_roundtrip():
    config = BinningConfig(name="mixing")
    config.add_variable(3, [-10.0, 0.0, 10.0]).add_variable(7, [0.0, 50.0, 90.0])

    data = config.to_dict()
    assert data == {
        "name": "mixing",
        "variables": [
            {"variable_id": 3, "edges": [-10.0, 0.0, 10.0]},
            {"variable_id": 7, "edges": [0.0, 50.0, 90.0]},
        ],
    }

    restored = BinningConfig.from_dict(data)
    assert restored.to_dict() == data
    assert not restored.is_sealed


def test_save_and_load(tmp_path):
    config = BinningConfig(name="mixing")
    config.add_variable(3, [-10.0, 0.0, 10.0]).add_variable(7, [0.0, 90.0])

    path = tmp_path / "binning.json"
    config.save(str(path))

    with open(path) as f:
        assert json.load(f)["variables"][0]["variable_id"] == 3

    restored = BinningConfig.load(str(path))
    assert restored.to_dict() == config.to_dict()
    assert restored.build().n_categories == config.build().n_categories


def test_from_dict_requires_variables():
    with pytest.raises(BinningError, match="variables"):
        BinningConfig.from_dict({"name": "x"})


def test_from_dict_reports_missing_keys():
    with pytest.raises(BinningError, match="missing key"):
        BinningConfig.from_dict({"variables": [{"variable_id": 1}]})


def test_binning_to_dict_matches_config():
    config = BinningConfig().add_variable(2, [0.0, 1.0, 2.0])
    assert config.build().to_dict() == config.to_dict()


@pytest.mark.parametrize(
    "data",
    [
        {"variables": [{"variable_id": 1, "edges": "abc"}]},
        {"variables": [[1, [0.0, 1.0]]]},
        {"variables": None},
        {"variables": [{"variable_id": 1, "edges": [1.0, 0.0]}]},
    ],
    ids=["non-numeric-edges", "entry-not-a-dict", "variables-not-a-list", "decreasing-edges"],
)
def test_from_dict_rejects_malformed_definitions(data):
    with pytest.raises(BinningError):
        BinningConfig.from_dict(data)


def test_load_rejects_invalid_edges(tmp_path):
    path = tmp_path / "binning.json"
    path.write_text(json.dumps({"variables": [{"variable_id": 0, "edges": [0.0, 0.0]}]}))
    with pytest.raises(BinningError, match="strictly increasing"):
        BinningConfig.load(str(path))
