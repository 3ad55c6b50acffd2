"""
Reshape TF and pathway activity tables into the scored node lists used as
measurements and weights by the solver.
"""

import os
import pandas as pd

from sigtools.functions import setup_logger

logger = setup_logger()

DEFAULT_MEMBERS_FILE = os.path.join(os.path.dirname(__file__), "data", "pathway_members.tsv")


def _read_activity_table(path, id_column, sep):
    df = pd.read_csv(path, sep=sep)
    if id_column not in df.columns:
        raise ValueError(f"{path} has no '{id_column}' column")
    df[id_column] = df[id_column].astype(str)
    duplicated = df[id_column][df[id_column].duplicated()].unique().tolist()
    if duplicated:
        raise ValueError(f"Duplicated identifiers in {path}: {duplicated}")
    return df.set_index(id_column).astype(float)


def read_tf_activities(path, id_column="TF", sep=","):
    """TF activity table: one row per TF, one column per sample/statistic."""
    df = _read_activity_table(path, id_column, sep)
    logger.info(f"Loaded activities of {len(df)} TFs from {path}")
    return df


def read_pathway_activities(path, id_column="Pathway", sep=","):
    """Pathway table, transposed so that rows are samples and columns pathways."""
    df = _read_activity_table(path, id_column, sep).T
    logger.info(f"Loaded {df.shape[1]} pathway scores from {path}")
    return df


def _resolve_indices(access_idx, labels, axis_name):
    if not isinstance(access_idx, (list, tuple)):
        access_idx = [access_idx]
    labels = list(labels)
    selected = []
    for idx in access_idx:
        if isinstance(idx, str) and idx in labels:
            selected.append(idx)
        elif isinstance(idx, int) and not isinstance(idx, bool) and 0 <= idx < len(labels):
            selected.append(labels[idx])
    if not selected:
        raise ValueError(f"The indices {access_idx} do not correspond to any {axis_name}")
    return selected


def generate_tf_list(df, top=50, access_idx=0, by_abs=True):
    """
    Select the top TFs of each requested column.

    Parameters:
    -----------
    df : pd.DataFrame
        TFs as rows, samples/statistics as columns.
    top : int or "all"
        Number of TFs to keep per column.
    access_idx : int, str or list
        Column positions or names to process.
    by_abs : bool
        Rank by absolute activity instead of the signed value.

    Returns:
    --------
    dict mapping column name to a one-row DataFrame (TF -> activity)
    """
    result = {}
    for column in _resolve_indices(access_idx, df.columns, "column"):
        values = df[column].astype(float)
        missing = int(values.isna().sum())
        if missing:
            logger.warning(f"Dropping {missing} TFs without a score in column {column}")
            values = values.dropna()

        n = len(values) if top == "all" else top
        if n > len(values):
            logger.warning(f"Requested top {n} TFs but only {len(values)} are available, using all of them")
            n = len(values)

        ranking = values.abs() if by_abs else values
        # stable sort: ties at the cut-off go to the TFs listed first
        keep = set(ranking.sort_values(ascending=False, kind="stable").index[:n])
        selected = values[[idx in keep for idx in values.index]]
        result[column] = pd.DataFrame([selected.values], columns=selected.index, index=[column])
    return result


def load_pathway_members(path=None, id_type="gene"):
    """
    Read the pathway -> member mapping.

    The TSV has columns pathway, gene, uniprot, weight; id_type picks which
    identifier column names the members. Missing weights count as 1.
    """
    path = path or DEFAULT_MEMBERS_FILE
    if id_type not in ("gene", "uniprot"):
        raise ValueError(f"Unknown id_type: {id_type}")
    table = pd.read_csv(path, sep="\t", dtype={"pathway": str, "gene": str, "uniprot": str})
    if "weight" not in table.columns:
        table["weight"] = 1.0
    table["weight"] = table["weight"].fillna(1.0).astype(float)
    table = table.dropna(subset=[id_type])

    members = {}
    for pathway, group in table.groupby("pathway", sort=False):
        members[pathway] = list(zip(group[id_type], group["weight"]))
    return members


def assign_pathway_scores(progeny, members, access_idx=0):
    """
    Spread pathway scores onto their member genes.

    Each member receives pathway_score * weight. A gene belonging to several
    pathways gets the mean of its contributions.

    Returns:
    --------
    dict mapping sample name to a one-row DataFrame (gene -> score)
    """
    result = {}
    for sample in _resolve_indices(access_idx, progeny.index, "row"):
        contributions = {}
        for pathway, genes in members.items():
            if pathway not in progeny.columns:
                logger.debug(f"Pathway {pathway} not in activity table, skipping")
                continue
            score = float(progeny.loc[sample, pathway])
            for gene, weight in genes:
                contributions.setdefault(gene, []).append(score * weight)

        scores = {gene: sum(v) / len(v) for gene, v in contributions.items()}
        result[sample] = pd.DataFrame([scores], index=[sample])
    return result
