#!/usr/bin/env python3
"""
CARNIVAL solver using RPy2.
Runs runVanillaCarnival from the CARNIVAL R package with an ILP solver
(CPLEX, CBC or lpSolve) and hands the result tables back to pandas.
"""

import os
import shutil

from sigtools.functions import setup_logger, named_vector, pandas_to_r, r_to_pandas, parse_rpy2_results
from sigtools.results import SolverResult
from sigtools.solver import Solver, SolverError

logger = setup_logger()


def check_solver_path(config):
    """
    Make sure the solver executable exists before R is involved.
    Returns the resolved path, or None for solvers running inside R.
    """
    if not config.needs_path:
        return None
    if not config.solver_path:
        raise SolverError(f"solver_path is required for {config.solver}")
    path = config.solver_path
    if not os.path.isfile(path):
        path = shutil.which(path)
    if path is None or not os.access(path, os.X_OK):
        raise SolverError(f"{config.solver} executable not found at {config.solver_path}")
    return path


class CarnivalSolver(Solver):
    """
    A Python class to interface with the CARNIVAL R package using RPy2
    """

    def __init__(self, workdir="output/carnival/tmp"):
        self.workdir = workdir
        self._carnival = None

    def load(self):
        if self._carnival is None:
            from rpy2.robjects.packages import importr
            self._carnival = importr('CARNIVAL')
            logger.info("CARNIVAL loaded successfully")
        return self._carnival

    def options_script(self, config, solver_path):
        """R code building `opts`; paths are read from the R globals solver_path and workdir."""
        path_arg = 'solverPath = solver_path' if solver_path else ''
        return f'''
            opts <- {config.options_function}({path_arg});
            opts$timelimit <- {int(config.timelimit)};
            opts$workdir <- workdir;
            opts$outputFolder <- workdir;
            if (!is.null(opts$mipGap)) opts$mipGap <- {config.mip_gap};
            if (!is.null(opts$poolrelGap)) opts$poolrelGap <- {config.pool_rel_gap};
        '''

    def build_options(self, config, solver_path):
        import rpy2.robjects as ro

        os.makedirs(self.workdir, exist_ok=True)
        ro.globalenv['workdir'] = os.path.abspath(self.workdir)
        if solver_path:
            ro.globalenv['solver_path'] = solver_path
        ro.r(self.options_script(config, solver_path))
        if config.threads:
            ro.r(f'opts$threads <- {int(config.threads)}')
        return ro.r('opts')

    def solve(self, network, measured, perturbations, weights, config):
        solver_path = check_solver_path(config)
        try:
            import rpy2.robjects as ro
            from rpy2.rinterface_lib.embedded import RRuntimeError
        except (ImportError, RuntimeError) as e:
            raise SolverError(f"rpy2 and a working R installation are required: {e}") from e

        try:
            self.load()
            self.build_options(config, solver_path)
            ro.globalenv['pkn'] = pandas_to_r(network[["source", "interaction", "target"]])
            ro.globalenv['perturbations'] = named_vector(perturbations)
            ro.globalenv['measurements'] = named_vector(measured)
            ro.globalenv['weights'] = ro.NULL if weights is None else named_vector(weights)

            logger.info("Running CARNIVAL...")
            ro.r('''
                res <- runVanillaCarnival(perturbations = perturbations,
                                          measurements = measurements,
                                          priorKnowledgeNetwork = pkn,
                                          weights = weights,
                                          carnivalOptions = opts)
            ''')
            weighted_sif = r_to_pandas(ro.r('as.data.frame(res$weightedSIF, stringsAsFactors = FALSE)'))
            nodes = r_to_pandas(ro.r('as.data.frame(res$nodesAttributes, stringsAsFactors = FALSE)'))
            sif_all = parse_rpy2_results(ro.r('res$sifAll'))
            attributes_all = parse_rpy2_results(ro.r('res$attributesAll'))
        except (RRuntimeError, ImportError) as e:
            raise SolverError(f"CARNIVAL failed: {e}") from e

        logger.info(f"CARNIVAL returned {len(weighted_sif)} edges and {len(nodes)} nodes "
                    f"({len(sif_all)} solutions)")
        return SolverResult(weighted_sif=weighted_sif, nodes_attributes=nodes,
                            sif_all=sif_all, attributes_all=attributes_all)
