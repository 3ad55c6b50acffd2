"""Tests for result coercion and persistence."""

import pandas as pd
import pytest

from sigtools.results import coerce_result, load_result, save_result, write_result_tables


def test_coerce_result_converts_numeric_columns(raw_result) -> None:
    got = coerce_result(raw_result)

    assert got.weighted_sif["Sign"].tolist() == [1, 1]
    assert got.weighted_sif["Weight"].tolist() == [100.0, 50.5]
    assert got.nodes_attributes["AvgAct"].tolist() == [-100, -100, -100]
    for col in ["ZeroAct", "UpAct", "DownAct", "AvgAct"]:
        assert pd.api.types.is_numeric_dtype(got.nodes_attributes[col])
    assert got.nodes_attributes["NodeType"].tolist() == ["S", "", "T"]
    assert raw_result.weighted_sif["Sign"].tolist() == ["1", "1"]


def test_coerce_result_rejects_non_numeric(raw_result) -> None:
    raw_result.nodes_attributes.loc[1, "UpAct"] = "high"

    with pytest.raises(ValueError):
        coerce_result(raw_result)


def test_coerce_result_rejects_unknown_nodes(raw_result) -> None:
    raw_result.weighted_sif.loc[1, "Node2"] = "Z"

    with pytest.raises(ValueError, match="Z"):
        coerce_result(raw_result)


def test_saved_result_round_trips(tmp_path, raw_result) -> None:
    result = coerce_result(raw_result)
    path = str(tmp_path / "carnival_result.json")

    save_result(result, path)
    got = load_result(path)

    pd.testing.assert_frame_equal(got.weighted_sif, result.weighted_sif)
    pd.testing.assert_frame_equal(got.nodes_attributes, result.nodes_attributes)
    assert len(got.sif_all) == 1
    pd.testing.assert_frame_equal(got.sif_all[0], result.sif_all[0])


def test_write_result_tables(tmp_path, raw_result) -> None:
    result = coerce_result(raw_result)

    sif_fname, nodes_fname = write_result_tables(result, str(tmp_path))

    assert pd.read_csv(sif_fname, sep="\t")["Node2"].tolist() == ["B", "C"]
    assert pd.read_csv(nodes_fname, sep="\t")["Node"].tolist() == ["A", "B", "C"]
