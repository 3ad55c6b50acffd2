import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

# solver name -> (CARNIVAL options constructor, needs an executable path)
solver_map = {
    "cplex": ("defaultCplexCarnivalOptions", True),
    "cbc": ("defaultCbcSolveCarnivalOptions", True),
    "lpSolve": ("defaultLpSolveCarnivalOptions", False),
}


@dataclass
class NetworkConfig:
    """How the prior knowledge network is downloaded and filtered."""
    retries: int = 3
    retry_delay: float = 5.0
    cache_file: Optional[str] = None
    min_curation_effort: Optional[int] = None

    def __post_init__(self):
        if self.retries < 1:
            raise ValueError("retries must be at least 1")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be non-negative")


@dataclass
class ActivityConfig:
    tf_file: str = "data/TFActivity_CARNIVAL.csv"
    pathway_file: str = "data/PathwayActivity_CARNIVAL.csv"
    members_file: Optional[str] = None
    tf_id_column: str = "TF"
    pathway_id_column: str = "Pathway"
    sep: str = ","
    top: Union[int, str] = 50
    tf_access_idx: Union[int, str] = 0
    pathway_access_idx: Union[int, str] = 0
    id_type: str = "gene"
    use_weights: bool = True

    def __post_init__(self):
        if self.top != "all" and (not isinstance(self.top, int) or self.top < 1):
            raise ValueError(f"top must be a positive integer or 'all', got {self.top!r}")
        for name in ("tf_access_idx", "pathway_access_idx"):
            if not isinstance(getattr(self, name), (int, str)):
                raise ValueError(f"{name} must select a single column, got {getattr(self, name)!r}")
        if self.id_type not in ("gene", "uniprot"):
            raise ValueError(f"Unknown id_type: {self.id_type}")


@dataclass
class SolverConfig:
    """
    Parameters handed to the ILP solver.

    mip_gap is the absolute MIP gap and pool_rel_gap the relative gap of the
    solution pool; both must lie in [0, 1]. timelimit is in seconds.
    """
    solver: str = "cplex"
    solver_path: Optional[str] = None
    timelimit: int = 7200
    mip_gap: float = 0.0
    pool_rel_gap: float = 0.0
    threads: int = 0

    def __post_init__(self):
        if self.solver not in solver_map:
            raise ValueError(f"Unknown solver: {self.solver}")
        if self.timelimit <= 0:
            raise ValueError("timelimit must be positive")
        for name in ("mip_gap", "pool_rel_gap"):
            value = getattr(self, name)
            if not (0 <= value <= 1):
                raise ValueError(f"{name} must be between 0 and 1")
        if self.threads < 0:
            raise ValueError("threads must be non-negative")

    @property
    def options_function(self) -> str:
        return solver_map[self.solver][0]

    @property
    def needs_path(self) -> bool:
        return solver_map[self.solver][1]


@dataclass
class PipelineConfig:
    output_dir: str = "output/carnival"
    log_file: Optional[str] = None
    network: NetworkConfig = field(default_factory=NetworkConfig)
    activity: ActivityConfig = field(default_factory=ActivityConfig)
    solver: SolverConfig = field(default_factory=SolverConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PipelineConfig":
        data = dict(data)
        return cls(
            network=NetworkConfig(**data.pop("network", {})),
            activity=ActivityConfig(**data.pop("activity", {})),
            solver=SolverConfig(**data.pop("solver", {})),
            **data,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(path: Optional[str] = None) -> PipelineConfig:
    """Read a JSON config file; missing keys fall back to the defaults."""
    if path is None:
        return PipelineConfig()
    with open(Path(path), "r") as f:
        return PipelineConfig.from_dict(json.load(f))
