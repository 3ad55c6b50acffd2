#!/usr/bin/env python3
"""
Causal signalling network reconstruction with CARNIVAL.

Run with:
    python run_pipeline.py -c config.json
    python run_pipeline.py --solver cbc --solver-path /usr/bin/cbc -t 600
"""

import argparse
import sys
from dataclasses import replace

from sigtools.config import load_config
from sigtools.functions import setup_logger
from sigtools.network import NetworkFetchError
from sigtools.pipeline import CarnivalAnalyzer
from sigtools.solver import SolverError


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Infer a signalling network from TF and pathway activities"
    )
    parser.add_argument("-c", "--config", type=str, default=None,
                        help="JSON configuration file")
    parser.add_argument("-o", "--output", type=str, default=None,
                        help="Output directory")
    parser.add_argument("--tf-file", type=str, default=None,
                        help="TF activity table (CSV)")
    parser.add_argument("--pathway-file", type=str, default=None,
                        help="Pathway activity table (CSV)")
    parser.add_argument("-n", "--top", type=str, default=None,
                        help="Number of TFs used as measurements, or 'all'")
    parser.add_argument("--no-weights", action="store_true",
                        help="Do not use pathway scores as node weights")
    parser.add_argument("-s", "--solver", type=str, default=None,
                        help="ILP solver: cplex, cbc or lpSolve")
    parser.add_argument("-x", "--solver-path", type=str, default=None,
                        help="Path to the solver executable")
    parser.add_argument("-t", "--timelimit", type=int, default=None,
                        help="Solver time limit in seconds")
    parser.add_argument("-g", "--mip-gap", type=float, default=None,
                        help="Absolute MIP gap (0-1)")
    parser.add_argument("-r", "--pool-rel-gap", type=float, default=None,
                        help="Relative gap of the solution pool (0-1)")
    parser.add_argument("-l", "--log-file", type=str, default=None,
                        help="Also write the log to this file")
    return parser.parse_args(argv)


def build_config(args):
    config = load_config(args.config)
    if args.output:
        config.output_dir = args.output
    if args.log_file:
        config.log_file = args.log_file

    activity = {}
    if args.tf_file:
        activity["tf_file"] = args.tf_file
    if args.pathway_file:
        activity["pathway_file"] = args.pathway_file
    if args.top:
        activity["top"] = args.top if args.top == "all" else int(args.top)
    if args.no_weights:
        activity["use_weights"] = False
    config.activity = replace(config.activity, **activity)

    solver = {
        "solver": args.solver,
        "solver_path": args.solver_path,
        "timelimit": args.timelimit,
        "mip_gap": args.mip_gap,
        "pool_rel_gap": args.pool_rel_gap,
    }
    config.solver = replace(config.solver, **{k: v for k, v in solver.items() if v is not None})
    return config


def main(argv=None):
    args = parse_args(argv)
    try:
        config = build_config(args)
    except ValueError as e:
        setup_logger().error(f"Invalid configuration: {e}")
        return 2

    logger = setup_logger(log_file=config.log_file)
    logger.info(f"Setting up analysis: output={config.output_dir}, "
                f"solver={config.solver.solver}, timelimit={config.solver.timelimit}s")

    analyzer = CarnivalAnalyzer(config)
    try:
        analyzer.run_full_analysis()
    except (NetworkFetchError, SolverError, ValueError, OSError) as e:
        logger.error(f"Analysis failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
