"""
Node-level analysis of occurrence graphs: centrality and communities.

Results are returned as polars DataFrames keyed by node name instead of being
written back onto the graph, so graph snapshots stay immutable. Tables built
from a BipartiteGraph carry an extra "partition" column because a taxon and
a locality may share a name.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import polars as pl
import networkit as nk

from biogeoNet.common.exceptions import (
    ComputationError,
    ValidationError,
    require_positive
)
from biogeoNet.common.validators import validate_metric_names
from biogeoNet.common.logging_config import get_logger, log_function_entry, LoggingTimer
from biogeoNet.network.construction import BipartiteGraph, copy_networkit_graph
from biogeoNet.network.projection import ProjectedGraph
from biogeoNet.network.statistics import GraphLike

logger = get_logger(__name__)

CENTRALITY_METRICS = ["degree", "betweenness", "closeness", "eigenvector"]

# Metrics computed from shortest paths; weights would be read as distances
PATH_BASED_METRICS = {"betweenness", "closeness"}


def _node_table(graph: GraphLike) -> Tuple[nk.Graph, Dict[str, list]]:
    """
    NetworkIt graph plus identifying columns ordered by internal id.
    """
    if isinstance(graph, BipartiteGraph):
        keys = graph.id_mapper.original_ids()
        return graph.graph, {
            "node_id": [name for _, name in keys],
            "partition": [partition for partition, _ in keys],
        }
    if isinstance(graph, ProjectedGraph):
        return graph.graph, {"node_id": graph.id_mapper.original_ids()}
    if isinstance(graph, nk.Graph):
        return graph, {"node_id": list(graph.iterNodes())}
    raise ValidationError(
        f"Expected BipartiteGraph, ProjectedGraph or nk.Graph, got {type(graph).__name__}",
        field="graph"
    )


def extract_centrality(
    graph: GraphLike,
    metrics: Sequence[str] = ("degree", "betweenness", "closeness", "eigenvector"),
    normalized: bool = True
) -> pl.DataFrame:
    """
    Calculate node centralities.

    Parameters
    ----------
    graph : BipartiteGraph, ProjectedGraph or nk.Graph
        Undirected graph to analyze; it is not modified
    metrics : sequence of str
        Any of "degree", "betweenness", "closeness" (harmonic) and
        "eigenvector"
    normalized : bool, default True
        Scale scores to comparable ranges: degree by n - 1, betweenness and
        closeness by NetworkIt's normalization, eigenvector by its maximum

    Returns
    -------
    pl.DataFrame
        One row per node with "node_id" (plus "partition" for bipartite
        graphs) and one "<metric>_centrality" column per metric

    Raises
    ------
    ValidationError
        If no metrics are requested
    ConfigurationError
        If a metric name is not supported
    ComputationError
        If NetworkIt fails to compute a metric

    Examples
    --------
    >>> taxa = project_bipartite(bipartite, onto="taxon")
    >>> extract_centrality(taxa, ["degree"])  # doctest: +SKIP

    Notes
    -----
    Betweenness and closeness run on an unweighted copy of the graph. A
    projection weight counts shared neighbors, which is a strength and not a
    distance, so every edge is one step for path-based metrics.
    """
    metrics = list(metrics)
    log_function_entry("extract_centrality", metrics=metrics, normalized=normalized)
    validate_metric_names(metrics, CENTRALITY_METRICS, "extract_centrality")

    nk_graph, columns = _node_table(graph)

    if nk_graph.numberOfNodes() == 0:
        logger.warning("Graph has no nodes; returning an empty centrality table")
        schema = {name: pl.Utf8 for name in columns}
        schema.update({f"{metric}_centrality": pl.Float64 for metric in metrics})
        return pl.DataFrame(schema=schema)

    unweighted = None
    if nk_graph.isWeighted() and PATH_BASED_METRICS.intersection(metrics):
        unweighted = copy_networkit_graph(nk_graph, weighted=False)

    with LoggingTimer("extract_centrality", {"nodes": nk_graph.numberOfNodes(),
                                             "metrics": len(metrics)}):
        for metric in metrics:
            target = unweighted if (metric in PATH_BASED_METRICS and unweighted is not None) else nk_graph
            values = _calculate_single_centrality(target, metric, normalized)
            columns[f"{metric}_centrality"] = values.tolist()

    return pl.DataFrame(columns)


def _calculate_single_centrality(
    graph: nk.Graph,
    metric: str,
    normalized: bool
) -> np.ndarray:
    """
    Calculate one centrality metric, indexed by internal node id.

    Raises
    ------
    ComputationError
        If the NetworkIt computation fails
    """
    n = graph.numberOfNodes()
    try:
        if metric == "degree":
            values = np.array([graph.degree(v) for v in graph.iterNodes()], dtype=float)
            if normalized and n > 1:
                values = values / (n - 1)

        elif metric == "betweenness":
            bc = nk.centrality.Betweenness(graph, normalized=normalized)
            bc.run()
            values = np.array(bc.scores())

        elif metric == "closeness":
            # Harmonic closeness stays finite on disconnected graphs
            cc = nk.centrality.HarmonicCloseness(graph, normalized=normalized)
            cc.run()
            values = np.array(cc.scores())

        elif metric == "eigenvector":
            if graph.numberOfEdges() == 0:
                values = np.zeros(n) if n > 1 else np.ones(n)
            else:
                try:
                    ec = nk.centrality.EigenvectorCentrality(graph)
                    ec.run()
                    values = np.array(ec.scores())
                except Exception as e:
                    logger.warning("Eigenvector centrality failed (%s), using degree as fallback", e)
                    values = _calculate_single_centrality(graph, "degree", normalized)

                if normalized:
                    max_val = np.max(values) if len(values) > 0 else 0.0
                    if max_val > 0:
                        values = values / max_val

        else:
            raise ValueError(f"Unknown centrality metric: {metric}")

        values = np.nan_to_num(values, nan=0.0, posinf=1.0, neginf=0.0)
        return np.clip(values, 0.0, None)

    except ComputationError:
        raise
    except Exception as e:
        raise ComputationError(
            f"Failed to calculate {metric} centrality: {e}",
            operation=f"calculate_{metric}",
            error_type="numerical",
            cause=e
        )


def detect_communities(
    graph: GraphLike,
    resolution: float = 1.0,
    random_seed: Optional[int] = 42
) -> pl.DataFrame:
    """
    Partition nodes into communities with the Louvain method (NetworkIt PLM).

    Parameters
    ----------
    graph : BipartiteGraph, ProjectedGraph or nk.Graph
        Graph to partition; projection weights are used as edge strengths
    resolution : float, default 1.0
        Modularity resolution; larger values give smaller communities
    random_seed : int, optional, default 42
        Seed for NetworkIt's generator; None leaves it unseeded

    Returns
    -------
    pl.DataFrame
        "node_id" (plus "partition" for bipartite graphs) and "community",
        with community ids contiguous from 0 in order of first appearance

    Raises
    ------
    ConfigurationError
        If resolution is not positive
    ComputationError
        If the Louvain run fails

    Examples
    --------
    >>> communities = detect_communities(locality_graph)  # doctest: +SKIP
    >>> communities["community"].n_unique()  # doctest: +SKIP
    3
    """
    log_function_entry("detect_communities", resolution=resolution, random_seed=random_seed)
    require_positive(resolution, "resolution")

    nk_graph, columns = _node_table(graph)
    n = nk_graph.numberOfNodes()

    if nk_graph.numberOfEdges() == 0:
        if n > 0:
            logger.warning("Graph has no edges; each node forms its own community")
        columns["community"] = list(range(n))
        return pl.DataFrame(columns, schema_overrides={"community": pl.Int64})

    with LoggingTimer("detect_communities", {"nodes": n, "edges": nk_graph.numberOfEdges()}):
        try:
            if random_seed is not None:
                nk.setSeed(random_seed, useThreadId=False)

            louvain = nk.community.PLM(nk_graph, refine=True, gamma=resolution)
            louvain.run()
            partition = louvain.getPartition()
            assignment = [partition.subsetOf(v) for v in nk_graph.iterNodes()]
        except Exception as e:
            raise ComputationError(
                f"Louvain community detection failed: {e}",
                operation="detect_communities",
                error_type="algorithm_failure",
                cause=e
            )

    columns["community"] = _relabel_communities(assignment)
    result = pl.DataFrame(columns, schema_overrides={"community": pl.Int64})

    logger.info("Detected %d communities among %d nodes",
                result["community"].n_unique(), n)
    return result


def _relabel_communities(partition: List[int]) -> List[int]:
    """
    Relabel community ids to be contiguous from 0 in order of first appearance.
    """
    community_map: Dict[int, int] = {}
    for community_id in partition:
        if community_id not in community_map:
            community_map[community_id] = len(community_map)
    return [community_map[community_id] for community_id in partition]


def community_modularity(graph: GraphLike, communities_df: pl.DataFrame) -> float:
    """
    Modularity of a community assignment on a graph.

    Parameters
    ----------
    graph : BipartiteGraph, ProjectedGraph or nk.Graph
        Graph the communities were detected on
    communities_df : pl.DataFrame
        Table from detect_communities() covering every node

    Returns
    -------
    float
        Newman modularity; 0.0 for a graph without edges

    Raises
    ------
    ValidationError
        If the table lacks required columns or does not cover every node
    """
    nk_graph, columns = _node_table(graph)
    key_cols = list(columns)

    missing_cols = [col for col in key_cols + ["community"] if col not in communities_df.columns]
    if missing_cols:
        raise ValidationError(
            f"Missing required columns: {missing_cols}",
            field="communities_df",
            details={"available_columns": communities_df.columns}
        )

    if nk_graph.numberOfEdges() == 0:
        return 0.0

    node_keys = list(zip(*(columns[col] for col in key_cols)))
    internal = {key: node for key, node in zip(node_keys, nk_graph.iterNodes())}

    assignment: Dict[int, int] = {}
    for row in communities_df.select(key_cols + ["community"]).iter_rows():
        key, community = tuple(row[:-1]), row[-1]
        if key in internal:
            assignment[internal[key]] = int(community)

    if len(assignment) != nk_graph.numberOfNodes():
        raise ValidationError(
            "Community table does not cover every node of the graph",
            field="communities_df",
            details={"covered": len(assignment), "nodes": nk_graph.numberOfNodes()}
        )

    partition = nk.structures.Partition(nk_graph.upperNodeIdBound())
    partition.setUpperBound(max(assignment.values()) + 1)
    for node, community in assignment.items():
        partition.addToSubset(community, node)

    try:
        return float(nk.community.Modularity().getQuality(partition, nk_graph))
    except Exception as e:
        raise ComputationError(
            f"Modularity calculation failed: {e}",
            operation="community_modularity",
            cause=e
        )


def identify_central_nodes(
    centrality_df: pl.DataFrame,
    metric: str = "betweenness_centrality",
    top_k: int = 10,
    threshold: Optional[float] = None
) -> List[Any]:
    """
    Names of the most central nodes by one centrality column.

    Parameters
    ----------
    centrality_df : pl.DataFrame
        Table returned by extract_centrality()
    metric : str, default "betweenness_centrality"
        Column to rank by
    top_k : int, default 10
        Maximum number of nodes returned
    threshold : float, optional
        Only nodes scoring at least this value are returned

    Returns
    -------
    List
        Node names in descending score order; ties keep table order

    Raises
    ------
    ValidationError
        If the column does not exist
    """
    if metric not in centrality_df.columns:
        available = [col for col in centrality_df.columns if col.endswith("_centrality")]
        raise ValidationError(
            f"Metric '{metric}' not found in DataFrame. Available metrics: {available}",
            field="metric",
            value=metric
        )
    require_positive(top_k, "top_k")

    result = centrality_df.sort(metric, descending=True, maintain_order=True)
    if threshold is not None:
        result = result.filter(pl.col(metric) >= threshold)

    return result.head(top_k)["node_id"].to_list()


def compare_centrality_metrics(
    centrality_df: pl.DataFrame,
    metric1: str,
    metric2: str
) -> Dict[str, float]:
    """
    Pearson and Spearman correlation between two centrality columns.

    Returns
    -------
    Dict[str, float]
        "pearson", "spearman" (0.0 where undefined, e.g. a constant column)
        and "n_nodes"
    """
    for metric in (metric1, metric2):
        if metric not in centrality_df.columns:
            raise ValidationError(f"Metric '{metric}' not found in DataFrame",
                                  field="metric", value=metric)

    values1 = centrality_df[metric1].to_numpy()
    values2 = centrality_df[metric2].to_numpy()

    if len(values1) < 2 or np.std(values1) == 0 or np.std(values2) == 0:
        return {"pearson": 0.0, "spearman": 0.0, "n_nodes": len(values1)}

    pearson_corr = np.corrcoef(values1, values2)[0, 1]

    from scipy.stats import spearmanr
    spearman_corr, _ = spearmanr(values1, values2)

    return {
        "pearson": float(pearson_corr) if not np.isnan(pearson_corr) else 0.0,
        "spearman": float(spearman_corr) if not np.isnan(spearman_corr) else 0.0,
        "n_nodes": len(values1)
    }
