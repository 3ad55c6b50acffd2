import json
import os
from dataclasses import dataclass, field
from typing import List
import pandas as pd

from sigtools.functions import setup_logger

logger = setup_logger()

EDGE_COLUMNS = ["Node1", "Sign", "Node2", "Weight"]
NODE_COLUMNS = ["Node", "ZeroAct", "UpAct", "DownAct", "AvgAct", "NodeType"]
NUMERIC_EDGE_COLUMNS = ["Sign", "Weight"]
NUMERIC_NODE_COLUMNS = ["ZeroAct", "UpAct", "DownAct", "AvgAct"]


@dataclass
class SolverResult:
    """
    Network returned by the solver.

    weighted_sif holds the edges of the consensus network, Weight being the
    share of solutions that use the edge. nodes_attributes counts for every
    node how often it was inactive/up/down across solutions.
    """
    weighted_sif: pd.DataFrame
    nodes_attributes: pd.DataFrame
    sif_all: List[pd.DataFrame] = field(default_factory=list)
    attributes_all: List[pd.DataFrame] = field(default_factory=list)


def _to_numeric(df, columns, table):
    df = df.copy()
    for col in columns:
        if col not in df.columns:
            raise ValueError(f"{table} has no '{col}' column")
        try:
            df[col] = pd.to_numeric(df[col], errors="raise")
        except (ValueError, TypeError) as e:
            raise ValueError(f"Non-numeric value in {table}.{col}: {e}") from e
    return df


def coerce_result(result):
    """Convert the numeric columns of a raw solver result and check node coverage."""
    weighted_sif = _to_numeric(result.weighted_sif, NUMERIC_EDGE_COLUMNS, "weightedSIF")
    nodes = _to_numeric(result.nodes_attributes, NUMERIC_NODE_COLUMNS, "nodesAttributes")

    edge_nodes = set(weighted_sif["Node1"]) | set(weighted_sif["Node2"])
    missing = sorted(edge_nodes - set(nodes["Node"]))
    if missing:
        raise ValueError(f"Nodes of weightedSIF missing from nodesAttributes: {missing}")

    return SolverResult(
        weighted_sif=weighted_sif,
        nodes_attributes=nodes,
        sif_all=[_to_numeric(df, ["Sign"], "sifAll") for df in result.sif_all],
        attributes_all=list(result.attributes_all),
    )


def _frame_to_dict(df):
    return {"columns": list(df.columns), "data": df.to_dict(orient="list")}


def _frame_from_dict(payload):
    return pd.DataFrame(payload["data"], columns=payload["columns"])


def save_result(result, path):
    """Write both result tables (and the per-solution tables) into one JSON file."""
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    payload = {
        "weightedSIF": _frame_to_dict(result.weighted_sif),
        "nodesAttributes": _frame_to_dict(result.nodes_attributes),
        "sifAll": [_frame_to_dict(df) for df in result.sif_all],
        "attributesAll": [_frame_to_dict(df) for df in result.attributes_all],
    }
    with open(path, "w") as f:
        json.dump(payload, f, indent=2, default=str)
    logger.info(f"Saved solver result to {path}")
    return path


def load_result(path):
    with open(path, "r") as f:
        payload = json.load(f)
    return SolverResult(
        weighted_sif=_frame_from_dict(payload["weightedSIF"]),
        nodes_attributes=_frame_from_dict(payload["nodesAttributes"]),
        sif_all=[_frame_from_dict(p) for p in payload.get("sifAll", [])],
        attributes_all=[_frame_from_dict(p) for p in payload.get("attributesAll", [])],
    )


def write_result_tables(result, output_dir):
    os.makedirs(output_dir, exist_ok=True)
    sif_fname = os.path.join(output_dir, "weightedSIF.tsv")
    nodes_fname = os.path.join(output_dir, "nodesAttributes.tsv")
    result.weighted_sif.to_csv(sif_fname, sep="\t", index=False)
    result.nodes_attributes.to_csv(nodes_fname, sep="\t", index=False)
    logger.info(f"Saved result tables to {sif_fname} and {nodes_fname}")
    return sif_fname, nodes_fname
