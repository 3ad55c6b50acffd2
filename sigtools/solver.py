import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import numpy as np
import pandas as pd

from sigtools.config import SolverConfig
from sigtools.functions import setup_logger

logger = setup_logger()


class SolverError(RuntimeError):
    pass


@dataclass
class SolverInputs:
    network: pd.DataFrame
    measurements: pd.Series
    perturbations: pd.Series
    weights: Optional[pd.Series] = None


class Solver(ABC):
    """Anything able to fit a signed sub-network to the measured activities."""

    @abstractmethod
    def solve(self, network, measured, perturbations, weights, config):
        """
        Returns:
            SolverResult with raw (possibly string typed) tables
        """


def build_perturbations(edges):
    """
    Nodes that are never targets, each with an unconstrained (NaN) activity.
    """
    roots = sorted(set(edges["source"]) - set(edges["target"]))
    return pd.Series(np.nan, index=pd.Index(roots, name="node"), dtype=float)


def report_unmatched(ids, nodes, label):
    unmatched = sorted(set(ids) - set(nodes))
    if unmatched:
        logger.warning(f"{len(unmatched)} {label} identifiers not in the network "
                       f"and ignored by the solver: {unmatched}")
    return unmatched


def _as_series(scores):
    if scores is None:
        return None
    if isinstance(scores, pd.DataFrame):
        if len(scores) != 1:
            raise ValueError(f"Expected a one-row table of scores, got {len(scores)} rows")
        scores = scores.iloc[0]
    return pd.Series(scores, dtype=float).dropna()


class SolverInvoker:
    """
    Assemble perturbations, measurements, network and weights and hand them
    to a solver.
    """

    def __init__(self, solver, config=None):
        self.solver = solver
        self.config = config or SolverConfig()

    def assemble(self, edges, measurements, weights=None):
        nodes = set(edges["source"]) | set(edges["target"])
        measurements = _as_series(measurements)
        weights = _as_series(weights)

        report_unmatched(measurements.index, nodes, "measured")
        if weights is not None:
            report_unmatched(weights.index, nodes, "weighted")

        perturbations = build_perturbations(edges)
        logger.info(f"Solver inputs: {len(edges)} edges, {len(perturbations)} perturbations, "
                    f"{len(measurements)} measurements, "
                    f"{0 if weights is None else len(weights)} weights")
        return SolverInputs(network=edges, measurements=measurements,
                            perturbations=perturbations, weights=weights)

    def invoke(self, inputs):
        logger.info(f"Running {self.config.solver} (time limit {self.config.timelimit}s, "
                    f"mipGap={self.config.mip_gap}, poolrelGap={self.config.pool_rel_gap})")
        start_time = time.time()
        result = self.solver.solve(
            inputs.network, inputs.measurements, inputs.perturbations,
            inputs.weights, self.config)
        logger.info(f"Solver finished in {time.time() - start_time:.1f} seconds")
        return result

    def run(self, edges, measurements, weights=None):
        return self.invoke(self.assemble(edges, measurements, weights))
