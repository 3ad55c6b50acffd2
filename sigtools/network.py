"""
Prior knowledge network from OmniPath.

Downloads the OmniPath interactions, keeps the directed and sign consistent
ones and writes them as a SIF-like table: source <interaction> target, where
interaction is +1 (stimulation) or -1 (inhibition).
"""

import os
import time
import pandas as pd
import requests

from sigtools.config import NetworkConfig
from sigtools.functions import setup_logger

logger = setup_logger()

REQUIRED_COLUMNS = [
    "source_genesymbol", "target_genesymbol",
    "consensus_direction", "consensus_stimulation", "consensus_inhibition",
]
SIF_COLUMNS = ["source", "interaction", "target"]


class NetworkFetchError(RuntimeError):
    pass


def _as_flag(column):
    return column.fillna(0).astype(bool).astype(int)


def filter_consensus_edges(raw, min_curation_effort=None):
    """
    Keep the directed, sign consistent interactions of an OmniPath table.

    The consensus flags are remapped before comparison:
        stimulation 0 -> -1, 1 -> 1
        inhibition  1 -> -1, 0 -> 1
    A row survives only when both remapped values agree, and that value is
    the sign of the edge. Identifiers have ':' replaced by '_'.
    """
    missing = [c for c in REQUIRED_COLUMNS if c not in raw.columns]
    if missing:
        raise NetworkFetchError(f"Interaction table is missing columns: {missing}")

    df = raw.copy()
    direction = _as_flag(df["consensus_direction"])
    stimulation = _as_flag(df["consensus_stimulation"])
    inhibition = _as_flag(df["consensus_inhibition"])

    keep = (direction == 1) & ((stimulation == 1) | (inhibition == 1))
    if min_curation_effort is not None:
        if "curation_effort" not in df.columns:
            raise NetworkFetchError("min_curation_effort set but curation_effort column is absent")
        keep &= df["curation_effort"].fillna(0) >= min_curation_effort

    df = df[keep]
    stim_sign = stimulation[keep].map({0: -1, 1: 1})
    inh_sign = inhibition[keep].map({1: -1, 0: 1})

    consistent = stim_sign == inh_sign
    logger.debug(f"Dropping {int((~consistent).sum())} sign-inconsistent interactions")

    edges = pd.DataFrame({
        "source": df.loc[consistent, "source_genesymbol"].astype(str).str.replace(":", "_", regex=False),
        "interaction": stim_sign[consistent].astype(int),
        "target": df.loc[consistent, "target_genesymbol"].astype(str).str.replace(":", "_", regex=False),
    })
    return edges.drop_duplicates().reset_index(drop=True)


def write_sif(edges, path):
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    edges[SIF_COLUMNS].to_csv(path, sep="\t", index=False)
    logger.info(f"Saved {len(edges)} edges to {path}")
    return path


def read_sif(path):
    edges = pd.read_csv(path, sep="\t", dtype={"source": str, "target": str},
                        keep_default_na=False, na_values=[""])
    missing = [c for c in SIF_COLUMNS if c not in edges.columns]
    if missing:
        raise ValueError(f"{path} is missing columns: {missing}")
    edges["interaction"] = edges["interaction"].astype(int)
    return edges[SIF_COLUMNS]


class NetworkFetcher:
    """
    Download OmniPath interactions and reduce them to a signed edge table
    """

    def __init__(self, config=None):
        self.config = config or NetworkConfig()

    def _query(self):
        import omnipath as op
        return op.interactions.OmniPath.get(genesymbols=True)

    def fetch_raw(self):
        cache_file = self.config.cache_file
        if cache_file and os.path.exists(cache_file):
            logger.info(f"Loading OmniPath interactions from cache: {cache_file}")
            # gene symbols such as NA must stay strings
            return pd.read_csv(cache_file, sep="\t", keep_default_na=False, na_values=[""])

        attempt = 0
        while True:
            attempt += 1
            try:
                logger.info(f"Fetching OmniPath interactions (attempt {attempt}/{self.config.retries})")
                raw = self._query()
                break
            except requests.exceptions.RequestException as e:
                if attempt >= self.config.retries:
                    raise NetworkFetchError(
                        f"OmniPath query failed after {attempt} attempts: {e}") from e
                logger.warning(f"OmniPath query failed ({e}), retrying in {self.config.retry_delay}s")
                time.sleep(self.config.retry_delay)

        missing = [c for c in REQUIRED_COLUMNS if c not in raw.columns]
        if missing:
            raise NetworkFetchError(f"Unexpected OmniPath schema, missing columns: {missing}")

        if cache_file:
            os.makedirs(os.path.dirname(os.path.abspath(cache_file)), exist_ok=True)
            raw.to_csv(cache_file, sep="\t", index=False)
            logger.info(f"Cached OmniPath interactions to {cache_file}")
        return raw

    def fetch(self):
        raw = self.fetch_raw()
        edges = filter_consensus_edges(raw, self.config.min_curation_effort)
        logger.info(f"Kept {len(edges)} of {len(raw)} interactions "
                    f"({edges['source'].nunique()} sources, {edges['target'].nunique()} targets)")
        return edges
