"""Tests for solver input assembly and the CARNIVAL solver guard rails."""

import logging
import os
import stat

import numpy as np
import pandas as pd
import pytest

from sigtools.carnival import CarnivalSolver, check_solver_path
from sigtools.config import SolverConfig
from sigtools.solver import SolverError, SolverInvoker, build_perturbations, report_unmatched


def test_build_perturbations_are_roots_with_nan(chain_edges) -> None:
    edges = pd.concat([chain_edges, pd.DataFrame({
        "source": ["D", "D"], "interaction": [-1, 1], "target": ["C", "E"],
    })])

    got = build_perturbations(edges)

    assert list(got.index) == ["A", "D"]
    assert got.isna().all()
    assert set(got.index) <= set(edges["source"])


def test_report_unmatched_warns(caplog) -> None:
    with caplog.at_level(logging.WARNING):
        got = report_unmatched(["C", "Z", "Y"], {"A", "B", "C"}, "measured")

    assert got == ["Y", "Z"]
    assert "not in the network" in caplog.text


def test_solver_receives_assembled_inputs(chain_edges, recording_solver) -> None:
    config = SolverConfig(solver="lpSolve", timelimit=60)
    invoker = SolverInvoker(recording_solver, config)
    measurements = pd.DataFrame({"C": [-2.5]}, index=["t"])

    result = invoker.run(chain_edges, measurements)

    assert result is recording_solver.result
    call = recording_solver.calls[0]
    pd.testing.assert_frame_equal(call["network"], chain_edges)
    assert call["measured"].to_dict() == {"C": -2.5}
    assert list(call["perturbations"].index) == ["A"]
    assert np.isnan(call["perturbations"]["A"])
    assert call["weights"] is None
    assert call["config"] is config


def test_assemble_flattens_weights(chain_edges, recording_solver) -> None:
    invoker = SolverInvoker(recording_solver)
    weights = pd.DataFrame({"B": [1.5], "Q": [0.5]}, index=["score"])

    inputs = invoker.assemble(chain_edges, {"C": -2.5}, weights)

    assert inputs.weights.to_dict() == {"B": 1.5, "Q": 0.5}


def test_assemble_rejects_multi_row_tables(chain_edges, recording_solver) -> None:
    invoker = SolverInvoker(recording_solver)

    with pytest.raises(ValueError):
        invoker.assemble(chain_edges, pd.DataFrame({"C": [1.0, 2.0]}))


def test_check_solver_path_requires_executable(tmp_path) -> None:
    with pytest.raises(SolverError):
        check_solver_path(SolverConfig(solver="cplex"))
    with pytest.raises(SolverError):
        check_solver_path(SolverConfig(solver="cbc", solver_path=str(tmp_path / "missing")))

    binary = tmp_path / "cbc"
    binary.write_text("#!/bin/sh\n")
    os.chmod(binary, os.stat(binary).st_mode | stat.S_IXUSR)

    assert check_solver_path(SolverConfig(solver="cbc", solver_path=str(binary))) == str(binary)
    assert check_solver_path(SolverConfig(solver="lpSolve")) is None


def test_carnival_solver_fails_before_r_on_bad_path(tmp_path, chain_edges) -> None:
    solver = CarnivalSolver(workdir=str(tmp_path))
    config = SolverConfig(solver="cplex", solver_path=str(tmp_path / "no_cplex"))

    with pytest.raises(SolverError):
        solver.solve(chain_edges, pd.Series({"C": -2.5}), build_perturbations(chain_edges), None, config)


def test_options_script_keeps_paths_out_of_r_source(tmp_path) -> None:
    workdir = str(tmp_path / 'dir "with" \\ quotes')
    solver = CarnivalSolver(workdir=workdir)
    config = SolverConfig(solver="cbc", solver_path='/opt/"cbc"\\bin/cbc', timelimit=600, mip_gap=0.05)

    script = solver.options_script(config, config.solver_path)

    assert "defaultCbcSolveCarnivalOptions(solverPath = solver_path)" in script
    assert "opts$workdir <- workdir" in script
    assert "opts$timelimit <- 600" in script
    assert config.solver_path not in script
    assert workdir not in script
    assert "solverPath" not in solver.options_script(SolverConfig(solver="lpSolve"), None)
