"""
Summary statistics for occurrence graphs.

All functions are pure: they read a graph snapshot (BipartiteGraph,
ProjectedGraph, or a plain undirected NetworkIt graph) and return a value
without modifying anything.

A statistic that is mathematically undefined for the given graph (for example
the density of a single-node graph) is returned as a NotApplicableResult rather
than raised, since that is an expected outcome and not a fault. Genuine misuse
(biogeographic connectedness of a non-bipartite graph, the diameter of a
disconnected graph without a component policy) raises.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Union

import numpy as np
import networkit as nk

from biogeoNet.common.exceptions import (
    NetworkAnalysisError,
    ComputationError,
    NotBipartiteError,
    NotConnectedError,
    ValidationError,
    validate_parameter
)
from biogeoNet.common.validators import TAXON, LOCALITY
from biogeoNet.common.logging_config import get_logger, log_function_entry, LoggingTimer
from biogeoNet.network.construction import BipartiteGraph
from biogeoNet.network.projection import ProjectedGraph

logger = get_logger(__name__)

GraphLike = Union[BipartiteGraph, ProjectedGraph, nk.Graph]

DIAMETER_POLICIES = ["raise", "largest_component", "per_component"]


@dataclass(frozen=True)
class NotApplicableResult:
    """
    Explicit "undefined" value for a statistic.

    Instances are falsy, so ``if density:`` treats them like a missing value,
    but they are never equal to a number.

    Attributes
    ----------
    statistic : str
        Name of the statistic that could not be computed
    reason : str
        Why it is undefined for this graph
    """

    statistic: str
    reason: str

    def __bool__(self) -> bool:
        return False


def is_not_applicable(value: Any) -> bool:
    """Whether a statistic result is a NotApplicableResult."""
    return isinstance(value, NotApplicableResult)


def _as_networkit(graph: GraphLike) -> nk.Graph:
    if isinstance(graph, (BipartiteGraph, ProjectedGraph)):
        return graph.graph
    if isinstance(graph, nk.Graph):
        return graph
    raise ValidationError(
        f"Expected BipartiteGraph, ProjectedGraph or nk.Graph, got {type(graph).__name__}",
        field="graph"
    )


def edge_density(graph: GraphLike) -> Union[float, NotApplicableResult]:
    """
    Fraction of possible edges present: |E| / (n(n-1)/2).

    Returns
    -------
    float or NotApplicableResult
        NotApplicableResult for graphs with fewer than two nodes

    Examples
    --------
    >>> edge_density(bipartite)  # doctest: +SKIP
    0.4
    """
    nk_graph = _as_networkit(graph)
    n = nk_graph.numberOfNodes()
    if n < 2:
        return NotApplicableResult("edge_density", f"density is undefined for {n} node(s)")
    return nk_graph.numberOfEdges() / (n * (n - 1) / 2)


def connected_components(graph: GraphLike) -> List[List[int]]:
    """
    Connected components as sorted lists of internal ids.

    Components are ordered largest first; ties go to the component holding
    the lowest node id.
    """
    nk_graph = _as_networkit(graph)
    if nk_graph.numberOfNodes() == 0:
        return []

    cc = nk.components.ConnectedComponents(nk_graph)
    cc.run()
    components = [sorted(component) for component in cc.getComponents()]
    components.sort(key=lambda component: (-len(component), component[0]))
    return components


def diameter(
    graph: GraphLike,
    policy: str = "raise"
) -> Union[int, List[int], NotApplicableResult]:
    """
    Longest shortest-path length, in hops, between any two nodes.

    Edge weights are ignored: a projection edge counts as one step whatever
    its shared-neighbor weight.

    Parameters
    ----------
    graph : BipartiteGraph, ProjectedGraph or nk.Graph
        Undirected graph
    policy : str, default "raise"
        Behavior for disconnected graphs:
        - "raise": raise NotConnectedError
        - "largest_component": diameter of the largest component
        - "per_component": list of diameters, one per component, largest
          component first
        Connected graphs give the same number under all policies ("per_component"
        wraps it in a one-element list).

    Returns
    -------
    int, List[int] or NotApplicableResult
        NotApplicableResult for an empty graph

    Raises
    ------
    NotConnectedError
        If the graph is disconnected and policy is "raise"
    ConfigurationError
        If policy is invalid

    Examples
    --------
    >>> taxon_graph = project_bipartite(build_bipartite_graph(
    ...     [("A", "X"), ("B", "X"), ("B", "Y"), ("C", "Y")]))
    >>> diameter(taxon_graph)
    2
    """
    log_function_entry("diameter", policy=policy)
    validate_parameter(policy, DIAMETER_POLICIES, "policy", "diameter")

    nk_graph = _as_networkit(graph)
    if nk_graph.numberOfNodes() == 0:
        return NotApplicableResult("diameter", "diameter is undefined for an empty graph")

    try:
        components = connected_components(nk_graph)
    except Exception as e:
        raise ComputationError(
            f"Connected component analysis failed: {e}",
            operation="diameter",
            cause=e
        )

    if len(components) > 1 and policy == "raise":
        raise NotConnectedError(
            "Diameter is undefined for a disconnected graph; pass "
            "policy='largest_component' or policy='per_component'",
            component_sizes=[len(component) for component in components],
            operation="diameter"
        )

    with LoggingTimer("diameter", {"nodes": nk_graph.numberOfNodes(), "policy": policy}):
        try:
            if policy == "per_component":
                return [_component_diameter(nk_graph, component) for component in components]
            return _component_diameter(nk_graph, components[0])
        except NetworkAnalysisError:
            raise
        except Exception as e:
            raise ComputationError(
                f"Diameter computation failed: {e}",
                operation="diameter",
                resource_info={"nodes": nk_graph.numberOfNodes(),
                               "edges": nk_graph.numberOfEdges()},
                cause=e
            )


def _component_diameter(nk_graph: nk.Graph, component: List[int]) -> int:
    """
    Exact diameter of one component by a BFS from every member.
    """
    if len(component) == 1:
        return 0

    longest = 0.0
    for source in component:
        bfs = nk.distance.BFS(nk_graph, source, storePaths=False)
        bfs.run()
        distances = bfs.getDistances()
        longest = max(longest, max(distances[target] for target in component))
    return int(longest)


def degree_distribution(graph: GraphLike) -> Union[np.ndarray, NotApplicableResult]:
    """
    Fraction of nodes with each degree.

    Returns
    -------
    np.ndarray or NotApplicableResult
        Array of length max_degree + 1 whose entry k is the fraction of nodes
        with exactly k edges; it sums to 1. NotApplicableResult for an empty
        graph.

    Examples
    --------
    >>> degree_distribution(bipartite)  # doctest: +SKIP
    array([0. , 0.4, 0.6])
    """
    nk_graph = _as_networkit(graph)
    n = nk_graph.numberOfNodes()
    if n == 0:
        return NotApplicableResult("degree_distribution",
                                   "degree distribution is undefined for an empty graph")

    degrees = np.fromiter((nk_graph.degree(v) for v in nk_graph.iterNodes()),
                          dtype=np.int64, count=n)
    return np.bincount(degrees) / n


def biogeographic_connectedness(graph: BipartiteGraph) -> Union[float, NotApplicableResult]:
    """
    Biogeographic connectedness of an occurrence graph.

    BC = (O - N) / (L * N - N), where O is the number of occurrences (edges),
    N the number of taxa and L the number of localities. BC is 0 when every
    taxon is confined to a single locality and 1 when every taxon occurs
    everywhere.

    Parameters
    ----------
    graph : BipartiteGraph
        Occurrence graph with taxon/locality labels

    Returns
    -------
    float or NotApplicableResult
        NotApplicableResult when L * N - N is zero (no taxa, or a single
        locality) or when there are no occurrences at all. The value is not
        clamped; results outside [0, 1] are logged as a data-quality warning.

    Raises
    ------
    NotBipartiteError
        If graph is not a BipartiteGraph

    Examples
    --------
    >>> biogeographic_connectedness(build_bipartite_graph(
    ...     [("A", "X"), ("A", "Y"), ("B", "X"), ("B", "Y")]))
    1.0
    """
    if not isinstance(graph, BipartiteGraph):
        raise NotBipartiteError(
            "Biogeographic connectedness requires a BipartiteGraph with taxon and "
            f"locality partitions, got {type(graph).__name__}",
            operation="biogeographic_connectedness"
        )

    occurrences = graph.number_of_edges()
    n_taxa = graph.number_of_nodes(TAXON)
    n_localities = graph.number_of_nodes(LOCALITY)

    denominator = n_localities * n_taxa - n_taxa
    if denominator == 0:
        return NotApplicableResult(
            "biogeographic_connectedness",
            f"undefined for {n_taxa} taxa and {n_localities} localities"
        )
    if n_localities == 0 or occurrences == 0:
        return NotApplicableResult(
            "biogeographic_connectedness",
            "undefined for a graph without occurrences"
        )

    bc = (occurrences - n_taxa) / denominator
    if not 0.0 <= bc <= 1.0:
        logger.warning(
            "Biogeographic connectedness %.4f is outside [0, 1] "
            "(occurrences=%d, taxa=%d, localities=%d); check the occurrence data",
            bc, occurrences, n_taxa, n_localities
        )
    return bc


def summarize_graph(graph: GraphLike) -> Dict[str, Any]:
    """
    Collect the summary statistics of a graph in one dictionary.

    Undefined statistics are reported as None. The diameter is that of the
    largest connected component.

    Returns
    -------
    Dict[str, Any]
        Keys: graph_type, num_nodes, num_edges, density, num_components,
        is_connected, diameter, mean_degree, max_degree,
        biogeographic_connectedness
    """
    nk_graph = _as_networkit(graph)
    n = nk_graph.numberOfNodes()

    if isinstance(graph, BipartiteGraph):
        graph_type = "bipartite"
    elif isinstance(graph, ProjectedGraph):
        graph_type = f"{graph.partition}_projection"
    else:
        graph_type = "networkit"

    with LoggingTimer("summarize_graph", {"graph_type": graph_type, "nodes": n}):
        density = edge_density(nk_graph)
        components = connected_components(nk_graph)
        diam = diameter(nk_graph, policy="largest_component")
        distribution = degree_distribution(nk_graph)

        if isinstance(graph, BipartiteGraph):
            bc = biogeographic_connectedness(graph)
        else:
            bc = None

    degrees = [nk_graph.degree(v) for v in nk_graph.iterNodes()]

    return {
        "graph_type": graph_type,
        "num_nodes": n,
        "num_edges": nk_graph.numberOfEdges(),
        "density": _defined_or_none(density),
        "num_components": len(components),
        "is_connected": len(components) == 1,
        "diameter": _defined_or_none(diam),
        "mean_degree": float(np.mean(degrees)) if degrees else None,
        "max_degree": len(distribution) - 1 if not is_not_applicable(distribution) else None,
        "biogeographic_connectedness": _defined_or_none(bc),
    }


def _defined_or_none(value: Any) -> Any:
    return None if is_not_applicable(value) else value
