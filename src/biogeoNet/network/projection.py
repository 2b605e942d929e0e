"""
One-mode projection of bipartite occurrence graphs.

Projecting onto taxa links two taxa whenever they occur at a common locality;
projecting onto localities links two localities whenever they share a taxon.
With the default "count" weighting the edge weight is the number of shared
opposite-partition neighbors.
"""

from collections import Counter
from dataclasses import dataclass
from itertools import combinations
from typing import Dict, List, Set, Tuple

import polars as pl
import networkit as nk

from biogeoNet.common.id_mapper import IDMapper
from biogeoNet.common.exceptions import (
    NetworkAnalysisError,
    GraphConstructionError,
    NotBipartiteError,
    validate_parameter
)
from biogeoNet.common.validators import TAXON, LOCALITY, PARTITIONS, other_partition
from biogeoNet.common.logging_config import get_logger, log_function_entry, LoggingTimer
from biogeoNet.network.construction import BipartiteGraph, copy_networkit_graph

logger = get_logger(__name__)

WEIGHT_METHODS = ["count", "jaccard", "overlap"]


@dataclass(frozen=True, eq=False)
class ProjectedGraph:
    """
    Immutable weighted graph over one partition of a bipartite graph.

    Attributes
    ----------
    graph : nk.Graph
        Undirected weighted NetworkIt graph without self-loops. Read-only.
    id_mapper : IDMapper
        Mapping from node names to internal ids (names sorted)
    partition : str
        Partition the graph was projected onto ("taxon" or "locality")
    weight_method : str
        Weighting used for edges ("count", "jaccard" or "overlap")
    """

    graph: nk.Graph
    id_mapper: IDMapper
    partition: str
    weight_method: str = "count"

    def nodes(self) -> List[str]:
        return self.id_mapper.original_ids()

    def number_of_nodes(self) -> int:
        return self.graph.numberOfNodes()

    def number_of_edges(self) -> int:
        return self.graph.numberOfEdges()

    def has_node(self, name: str) -> bool:
        return self.id_mapper.has_original(name)

    def has_edge(self, u: str, v: str) -> bool:
        if u == v or not (self.has_node(u) and self.has_node(v)):
            return False
        return self.graph.hasEdge(self.id_mapper.get_internal(u), self.id_mapper.get_internal(v))

    def weight(self, u: str, v: str) -> float:
        """
        Edge weight between two nodes; 0.0 when they are not adjacent.

        Raises
        ------
        KeyError
            If either node does not exist
        """
        iu = self.id_mapper.get_internal(u)
        iv = self.id_mapper.get_internal(v)
        if iu == iv or not self.graph.hasEdge(iu, iv):
            return 0.0
        return self.graph.weight(iu, iv)

    def neighbors(self, name: str) -> List[str]:
        node = self.id_mapper.get_internal(name)
        return sorted(self.id_mapper.get_original_batch(self.graph.iterNeighbors(node)))

    def degree(self, name: str) -> int:
        return self.graph.degree(self.id_mapper.get_internal(name))

    def edges(self) -> List[Tuple[str, str, float]]:
        """All edges as ``(u, v, weight)`` with ``u < v``, sorted."""
        triples = []
        for u, v, w in self.graph.iterEdgesWeights():
            a, b = sorted((self.id_mapper.get_original(u), self.id_mapper.get_original(v)))
            triples.append((a, b, w))
        return sorted(triples)

    def to_edgelist(self) -> pl.DataFrame:
        """Edges as a DataFrame with "source", "target" and "weight" columns."""
        triples = self.edges()
        return pl.DataFrame(
            {
                "source": [u for u, _, _ in triples],
                "target": [v for _, v, _ in triples],
                "weight": [w for _, _, w in triples],
            },
            schema={"source": pl.Utf8, "target": pl.Utf8, "weight": pl.Float64}
        )

    def to_networkit(self) -> Tuple[nk.Graph, IDMapper]:
        """Return a mutable copy of the graph and a copy of its id mapping."""
        return copy_networkit_graph(self.graph), IDMapper.from_ids(self.id_mapper.original_ids())

    def __repr__(self) -> str:
        return (
            f"ProjectedGraph(partition={self.partition!r}, nodes={self.number_of_nodes()}, "
            f"edges={self.number_of_edges()}, weight_method={self.weight_method!r})"
        )


def project_bipartite(
    bipartite: BipartiteGraph,
    onto: str = TAXON,
    weight_method: str = "count"
) -> ProjectedGraph:
    """
    Project a bipartite occurrence graph onto one of its partitions.

    Parameters
    ----------
    bipartite : BipartiteGraph
        Source graph; it is not modified
    onto : str, default "taxon"
        Partition to retain: "taxon" (collapse localities) or "locality"
        (collapse taxa)
    weight_method : str, default "count"
        - "count": number of shared neighbors
        - "jaccard": |A ∩ B| / |A ∪ B| of the two neighbor sets
        - "overlap": |A ∩ B| / min(|A|, |B|)

    Returns
    -------
    ProjectedGraph
        Every retained node, with an edge wherever two nodes share at least
        one neighbor in the collapsed partition

    Raises
    ------
    NotBipartiteError
        If the input is not a BipartiteGraph
    ConfigurationError
        If onto or weight_method is invalid
    GraphConstructionError
        If building the projected graph fails

    Examples
    --------
    >>> bipartite = build_bipartite_graph([("A", "X"), ("B", "X"), ("B", "Y"), ("C", "Y")])
    >>> project_bipartite(bipartite, onto="taxon").edges()
    [('A', 'B', 1.0), ('B', 'C', 1.0)]

    Notes
    -----
    Shared-neighbor counts are accumulated per collapsed node: each collapsed
    node of degree d adds one to each of its C(d, 2) neighbor pairs. The cost
    is therefore the sum of C(d, 2) over collapsed nodes, independent of how
    many retained pairs share nothing.
    """
    log_function_entry("project_bipartite", onto=onto, weight_method=weight_method)

    validate_parameter(onto, PARTITIONS, "onto", "project_bipartite")
    validate_parameter(weight_method, WEIGHT_METHODS, "weight_method", "project_bipartite")

    if not isinstance(bipartite, BipartiteGraph):
        raise NotBipartiteError(
            f"Projection requires a BipartiteGraph, got {type(bipartite).__name__}; "
            "use bipartite_from_graph() to verify a NetworkIt graph first",
            operation="project_bipartite"
        )

    with LoggingTimer("project_bipartite", {"onto": onto}):
        try:
            names = [name for _, name in bipartite.nodes(onto)]
            collapsed = bipartite.nodes(other_partition(onto))
            id_mapper = IDMapper.from_ids(names)

            logger.info("Projecting bipartite graph onto %s: %d retained nodes, %d collapsed nodes",
                        onto, len(names), len(collapsed))

            neighbor_sets = _retained_neighbor_sets(bipartite, collapsed, id_mapper)
            pair_counts = _count_shared_neighbors(neighbor_sets)

            degrees: Dict[int, int] = Counter()
            for members in neighbor_sets:
                degrees.update(members)

            graph = nk.Graph(id_mapper.size(), weighted=True, directed=False)
            for (u, v), shared in sorted(pair_counts.items()):
                weight = _calculate_projection_weight(shared, degrees[u], degrees[v], weight_method)
                graph.addEdge(u, v, weight)

        except NetworkAnalysisError:
            raise
        except Exception as e:
            raise GraphConstructionError(
                f"Bipartite projection failed: {e}",
                graph_type="projection",
                operation="project_bipartite",
                cause=e
            )

    logger.info("Projection onto %s completed: %d nodes, %d edges",
                onto, graph.numberOfNodes(), graph.numberOfEdges())

    return ProjectedGraph(graph, id_mapper, onto, weight_method)


def _retained_neighbor_sets(
    bipartite: BipartiteGraph,
    collapsed: List[Tuple[str, str]],
    id_mapper: IDMapper
) -> List[List[int]]:
    """
    For each collapsed node, the sorted projected ids of its neighbors.
    """
    source = bipartite.graph
    neighbor_sets = []
    for key in collapsed:
        node = bipartite.id_mapper.get_internal(key)
        members = {
            id_mapper.get_internal(bipartite.id_mapper.get_original(v)[1])
            for v in source.iterNeighbors(node)
        }
        neighbor_sets.append(sorted(members))
    return neighbor_sets


def _count_shared_neighbors(neighbor_sets: List[List[int]]) -> Counter:
    """
    Count, for every retained pair (u < v), the collapsed nodes they share.
    """
    pair_counts: Counter = Counter()
    for members in neighbor_sets:
        pair_counts.update(combinations(members, 2))
    return pair_counts


def _calculate_projection_weight(
    shared: int,
    degree_u: int,
    degree_v: int,
    weight_method: str
) -> float:
    """
    Edge weight for a retained pair with ``shared`` common neighbors.
    """
    if weight_method == "count":
        return float(shared)

    elif weight_method == "jaccard":
        union_size = degree_u + degree_v - shared
        return shared / union_size if union_size > 0 else 0.0

    elif weight_method == "overlap":
        min_size = min(degree_u, degree_v)
        return shared / min_size if min_size > 0 else 0.0

    raise ValueError(f"Unknown weight method: {weight_method}")


def project_both(
    bipartite: BipartiteGraph,
    weight_method: str = "count"
) -> Tuple[ProjectedGraph, ProjectedGraph]:
    """
    Return the (taxon, locality) projections of a bipartite graph.
    """
    return (
        project_bipartite(bipartite, onto=TAXON, weight_method=weight_method),
        project_bipartite(bipartite, onto=LOCALITY, weight_method=weight_method),
    )


def shared_neighbors(
    bipartite: BipartiteGraph,
    partition: str,
    u: str,
    v: str
) -> Set[str]:
    """
    Names of the opposite-partition nodes adjacent to both u and v.

    Computed directly from neighbor sets, without projecting.
    """
    return set(bipartite.neighbors(partition, u)) & set(bipartite.neighbors(partition, v))
