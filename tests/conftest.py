"""Shared fixtures: fake OmniPath tables and an in-process solver."""

import pandas as pd
import pytest

from sigtools.results import SolverResult
from sigtools.solver import Solver


def omnipath_rows(rows):
    return pd.DataFrame(rows, columns=[
        "source_genesymbol", "target_genesymbol",
        "consensus_direction", "consensus_stimulation", "consensus_inhibition",
        "curation_effort",
    ])


class RecordingSolver(Solver):
    """Keeps the inputs it was called with and answers with a fixed network."""

    def __init__(self, result=None):
        self.calls = []
        self.result = result

    def solve(self, network, measured, perturbations, weights, config):
        self.calls.append({
            "network": network,
            "measured": measured,
            "perturbations": perturbations,
            "weights": weights,
            "config": config,
        })
        return self.result


class StaticFetcher:
    def __init__(self, edges):
        self.edges = edges

    def fetch(self):
        return self.edges


@pytest.fixture
def raw_interactions():
    return omnipath_rows([
        ("A", "B", True, True, False, 3),
        ("B", "C", True, False, True, 2),
        ("C", "D", True, True, True, 5),
        ("D", "E", False, True, False, 4),
        ("E", "F", True, False, False, 1),
        ("A", "B", True, True, False, 3),
        ("COMPLEX:X_Y", "C", True, True, False, 1),
    ])


@pytest.fixture
def chain_edges():
    return pd.DataFrame({
        "source": ["A", "B"],
        "interaction": [1, 1],
        "target": ["B", "C"],
    })


@pytest.fixture
def raw_result():
    """Solver output as returned from R: every column is a string."""
    return SolverResult(
        weighted_sif=pd.DataFrame({
            "Node1": ["A", "B"],
            "Sign": ["1", "1"],
            "Node2": ["B", "C"],
            "Weight": ["100", "50.5"],
        }),
        nodes_attributes=pd.DataFrame({
            "Node": ["A", "B", "C"],
            "ZeroAct": ["0", "0", "0"],
            "UpAct": ["0", "0", "0"],
            "DownAct": ["100", "100", "100"],
            "AvgAct": ["-100", "-100", "-100"],
            "NodeType": ["S", "", "T"],
        }),
        sif_all=[pd.DataFrame({"Node1": ["A", "B"], "Sign": ["1", "1"], "Node2": ["B", "C"]})],
        attributes_all=[],
    )


@pytest.fixture
def recording_solver(raw_result):
    return RecordingSolver(raw_result)
