import os

from sigtools.activity import (
    assign_pathway_scores, generate_tf_list, load_pathway_members,
    read_pathway_activities, read_tf_activities,
)
from sigtools.config import PipelineConfig
from sigtools.functions import setup_logger
from sigtools.network import NetworkFetcher, write_sif
from sigtools.results import coerce_result, save_result, write_result_tables
from sigtools.solver import SolverInvoker
from sigtools.visualize import build_graph, plot_network_html, plot_network_png

logger = setup_logger()


class CarnivalAnalyzer:
    """
    Run the network reconstruction end to end: prior knowledge network,
    activity lists, solver, result persistence and plots.
    """

    def __init__(self, config=None, solver=None, fetcher=None):
        self.config = config or PipelineConfig()
        if solver is None:
            from sigtools.carnival import CarnivalSolver
            solver = CarnivalSolver(workdir=os.path.join(self.config.output_dir, "tmp"))
        self.invoker = SolverInvoker(solver, self.config.solver)
        self.fetcher = fetcher or NetworkFetcher(self.config.network)
        self.output_dir = self.config.output_dir
        os.makedirs(self.output_dir, exist_ok=True)

        self.sif_file = os.path.join(self.output_dir, "omnipath_carnival.tsv")
        self.result_file = os.path.join(self.output_dir, "carnival_result.json")
        self.html_file = os.path.join(self.output_dir, "carnival_visualization.html")
        self.png_file = os.path.join(self.output_dir, "carnival_visualization.png")

    def load_network(self):
        edges = self.fetcher.fetch()
        write_sif(edges, self.sif_file)
        return edges

    def load_activities(self):
        """
        Returns:
            (measurements, weights) as one-row tables; weights is None when
            pathway weights are disabled
        """
        cfg = self.config.activity
        tf_activities = read_tf_activities(cfg.tf_file, cfg.tf_id_column, cfg.sep)
        tf_list = generate_tf_list(tf_activities, top=cfg.top, access_idx=cfg.tf_access_idx)
        measurements = next(iter(tf_list.values()))

        if not cfg.use_weights:
            return measurements, None
        pathways = read_pathway_activities(cfg.pathway_file, cfg.pathway_id_column, cfg.sep)
        members = load_pathway_members(cfg.members_file, cfg.id_type)
        scores = assign_pathway_scores(pathways, members, access_idx=cfg.pathway_access_idx)
        weights = next(iter(scores.values()))
        return measurements, weights

    def optimize_network(self, edges, measurements, weights=None):
        raw = self.invoker.run(edges, measurements, weights)
        return coerce_result(raw)

    def save_results(self, result):
        save_result(result, self.result_file)
        write_result_tables(result, self.output_dir)

    def plot_network(self, result):
        G = build_graph(result.weighted_sif, result.nodes_attributes)
        plot_network_html(G, self.html_file)
        plot_network_png(G, self.png_file)
        return G

    def run_full_analysis(self):
        edges = self.load_network()
        measurements, weights = self.load_activities()

        logger.info(f"Optimizing with solver: {self.config.solver.solver}")
        result = self.optimize_network(edges, measurements, weights)

        self.save_results(result)
        logger.info(f"Results saved to {self.output_dir}/")

        self.plot_network(result)
        logger.info("Analysis completed successfully!")
        return edges, result
