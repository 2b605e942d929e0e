"""
Bipartite occurrence graph construction for the biogeoNet library.

This module turns a cleaned occurrence table into an undirected bipartite
NetworkIt graph with one partition of taxon nodes and one partition of
locality nodes. Node identity is the ``(partition, name)`` pair, so a taxon and
a locality that happen to share a name remain distinct nodes.

Graphs are wrapped in the BipartiteGraph value object. The wrapped NetworkIt
graph is shared with library functions for reading only; callers that need a
mutable graph use ``to_networkit()``, which returns an independent copy.
"""

from collections import deque
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union
import warnings

import polars as pl
import networkit as nk

from biogeoNet.common.id_mapper import IDMapper
from biogeoNet.common.exceptions import (
    GraphConstructionError,
    NotBipartiteError,
    ValidationError
)
from biogeoNet.common.validators import (
    TAXON,
    LOCALITY,
    validate_occurrence_dataframe,
    validate_partition
)
from biogeoNet.common.logging_config import get_logger, log_function_entry, LoggingTimer

logger = get_logger(__name__)

NodeKey = Tuple[str, str]


def copy_networkit_graph(graph: nk.Graph, weighted: Optional[bool] = None) -> nk.Graph:
    """
    Return an independent copy of a NetworkIt graph.

    Parameters
    ----------
    graph : nk.Graph
        Graph to copy
    weighted : bool, optional
        Force the copy to be weighted or unweighted. Defaults to the
        weightedness of the input. An unweighted copy drops edge weights.
    """
    if weighted is None:
        weighted = graph.isWeighted()

    copy = nk.Graph(graph.upperNodeIdBound(), weighted=weighted, directed=graph.isDirected())
    if weighted and graph.isWeighted():
        for u, v, w in graph.iterEdgesWeights():
            copy.addEdge(u, v, w)
    else:
        for u, v in graph.iterEdges():
            copy.addEdge(u, v)
    return copy


@dataclass(frozen=True, eq=False)
class BipartiteGraph:
    """
    Immutable taxon/locality occurrence graph.

    Attributes
    ----------
    graph : nk.Graph
        Undirected, unweighted NetworkIt graph. Read-only: library functions
        never modify it and callers must not either.
    id_mapper : IDMapper
        Mapping from ``(partition, name)`` node keys to internal ids. Taxon
        nodes occupy the lowest ids, sorted by name, followed by localities.

    Examples
    --------
    >>> occurrences = pl.DataFrame({"taxon": ["A", "B"], "locality": ["X", "X"]})
    >>> bipartite = build_bipartite_graph(occurrences)
    >>> bipartite.taxa, bipartite.localities
    (['A', 'B'], ['X'])
    >>> bipartite.neighbors(LOCALITY, "X")
    ['A', 'B']
    """

    graph: nk.Graph
    id_mapper: IDMapper

    @property
    def taxa(self) -> List[str]:
        """Taxon names in internal id order."""
        return self._names(TAXON)

    @property
    def localities(self) -> List[str]:
        """Locality names in internal id order."""
        return self._names(LOCALITY)

    def _names(self, partition: str) -> List[str]:
        return [name for label, name in self.id_mapper.original_ids() if label == partition]

    def nodes(self, partition: Optional[str] = None) -> List[NodeKey]:
        """
        Node keys ``(partition, name)``, optionally restricted to one partition.
        """
        keys = self.id_mapper.original_ids()
        if partition is None:
            return keys
        validate_partition(partition, "BipartiteGraph.nodes")
        return [key for key in keys if key[0] == partition]

    def partition_of(self, internal_id: int) -> str:
        """Partition label of an internal node id."""
        return self.id_mapper.get_original(internal_id)[0]

    def number_of_nodes(self, partition: Optional[str] = None) -> int:
        if partition is None:
            return self.graph.numberOfNodes()
        return len(self.nodes(partition))

    def number_of_edges(self) -> int:
        return self.graph.numberOfEdges()

    def _internal(self, partition: str, name: str) -> int:
        validate_partition(partition, "BipartiteGraph")
        return self.id_mapper.get_internal((partition, name))

    def neighbors(self, partition: str, name: str) -> List[str]:
        """
        Names of the opposite-partition nodes adjacent to a node, sorted.

        Raises
        ------
        KeyError
            If the node does not exist
        """
        node = self._internal(partition, name)
        keys = self.id_mapper.get_original_batch(self.graph.iterNeighbors(node))
        return sorted(neighbor for _, neighbor in keys)

    def degree(self, partition: str, name: str) -> int:
        return self.graph.degree(self._internal(partition, name))

    def has_node(self, partition: str, name: str) -> bool:
        return self.id_mapper.has_original((partition, name))

    def has_edge(self, taxon: str, locality: str) -> bool:
        """Whether the taxon occurs at the locality."""
        if not (self.has_node(TAXON, taxon) and self.has_node(LOCALITY, locality)):
            return False
        return self.graph.hasEdge(
            self.id_mapper.get_internal((TAXON, taxon)),
            self.id_mapper.get_internal((LOCALITY, locality))
        )

    def edges(self) -> List[Tuple[str, str]]:
        """All edges as sorted ``(taxon, locality)`` pairs."""
        pairs = []
        for u, v in self.graph.iterEdges():
            first = self.id_mapper.get_original(u)
            second = self.id_mapper.get_original(v)
            if first[0] == LOCALITY:
                first, second = second, first
            pairs.append((first[1], second[1]))
        return sorted(pairs)

    def to_edgelist(self) -> pl.DataFrame:
        """Edges as a DataFrame with "taxon" and "locality" columns."""
        pairs = self.edges()
        return pl.DataFrame(
            {TAXON: [t for t, _ in pairs], LOCALITY: [l for _, l in pairs]},
            schema={TAXON: pl.Utf8, LOCALITY: pl.Utf8}
        )

    def to_nodelist(self) -> pl.DataFrame:
        """
        Nodes as a DataFrame with "node_id", "partition" and "degree" columns.

        Suitable as an attribute table for an external plotting layer.
        """
        keys = self.id_mapper.original_ids()
        return pl.DataFrame(
            {
                "node_id": [name for _, name in keys],
                "partition": [label for label, _ in keys],
                "degree": [self.graph.degree(self.id_mapper.get_internal(key)) for key in keys],
            },
            schema={"node_id": pl.Utf8, "partition": pl.Utf8, "degree": pl.Int64}
        )

    def to_networkit(self) -> Tuple[nk.Graph, IDMapper]:
        """
        Return a mutable copy of the graph and a copy of its id mapping.
        """
        return copy_networkit_graph(self.graph), IDMapper.from_ids(self.id_mapper.original_ids())

    def __repr__(self) -> str:
        return (
            f"BipartiteGraph(taxa={len(self.taxa)}, localities={len(self.localities)}, "
            f"edges={self.number_of_edges()})"
        )


def build_bipartite_graph(
    occurrences: Union[pl.DataFrame, Sequence[Tuple[str, str]]],
    taxon_col: str = TAXON,
    locality_col: str = LOCALITY
) -> BipartiteGraph:
    """
    Build the bipartite taxon/locality graph from cleaned occurrences.

    Parameters
    ----------
    occurrences : pl.DataFrame or sequence of (taxon, locality) pairs
        Cleaned occurrence records, as returned by clean_occurrences()
    taxon_col : str, default "taxon"
        Taxon column name
    locality_col : str, default "locality"
        Locality column name

    Returns
    -------
    BipartiteGraph
        One node per distinct taxon and per distinct locality, one undirected
        edge per record

    Raises
    ------
    ValidationError
        If the records contain null/empty names or repeated pairs, i.e. were
        not cleaned
    GraphConstructionError
        If NetworkIt graph construction fails

    Examples
    --------
    >>> records = [("A", "X"), ("B", "X"), ("B", "Y"), ("C", "Y")]
    >>> bipartite = build_bipartite_graph(records)
    >>> bipartite.number_of_nodes(), bipartite.number_of_edges()
    (5, 4)

    Notes
    -----
    Time Complexity: O(R log R) for R records (sorting names for deterministic
    ids). Every node has degree >= 1 since nodes only arise from records.
    """
    log_function_entry("build_bipartite_graph", occurrences=type(occurrences).__name__,
                       taxon_col=taxon_col, locality_col=locality_col)

    if not isinstance(occurrences, pl.DataFrame):
        occurrences = _pairs_to_frame(occurrences, taxon_col, locality_col)

    validate_occurrence_dataframe(
        occurrences, taxon_col, locality_col,
        allow_missing=False, allow_duplicates=False
    )

    if occurrences.is_empty():
        warnings.warn("Empty occurrence set provided. Creating empty bipartite graph.")
        return BipartiteGraph(nk.Graph(0, weighted=False, directed=False), IDMapper())

    with LoggingTimer("build_bipartite_graph", {"records": len(occurrences)}):
        try:
            frame = occurrences.select(
                pl.col(taxon_col).cast(pl.Utf8),
                pl.col(locality_col).cast(pl.Utf8)
            )

            taxa = sorted(frame[taxon_col].unique().to_list())
            localities = sorted(frame[locality_col].unique().to_list())
            id_mapper = IDMapper.from_ids(
                [(TAXON, name) for name in taxa] + [(LOCALITY, name) for name in localities]
            )

            graph = nk.Graph(id_mapper.size(), weighted=False, directed=False)
            for taxon, locality in frame.iter_rows():
                graph.addEdge(
                    id_mapper.get_internal((TAXON, taxon)),
                    id_mapper.get_internal((LOCALITY, locality))
                )

        except Exception as e:
            raise GraphConstructionError(
                f"Failed to build bipartite graph: {e}",
                graph_type="bipartite",
                edge_count=len(occurrences),
                operation="build_bipartite_graph",
                cause=e
            )

    logger.info("Bipartite graph built: %d taxa, %d localities, %d edges",
                len(taxa), len(localities), graph.numberOfEdges())

    return BipartiteGraph(graph, id_mapper)


def _pairs_to_frame(
    pairs: Sequence[Tuple[str, str]],
    taxon_col: str,
    locality_col: str
) -> pl.DataFrame:
    rows = [list(pair) for pair in pairs]
    if any(len(row) != 2 for row in rows):
        raise ValidationError(
            "Occurrence records must be (taxon, locality) pairs",
            field="occurrences"
        )
    return pl.DataFrame(
        rows,
        schema=[(taxon_col, pl.Utf8), (locality_col, pl.Utf8)],
        orient="row"
    )


def check_bipartite(graph: nk.Graph) -> Tuple[List[int], List[int]]:
    """
    Two-color a NetworkIt graph by breadth-first search.

    Every connected component is colored independently, starting from its
    lowest node id with color 0.

    Parameters
    ----------
    graph : nk.Graph
        Undirected graph to check

    Returns
    -------
    color_0 : List[int]
        Internal ids colored 0
    color_1 : List[int]
        Internal ids colored 1

    Raises
    ------
    NotBipartiteError
        If the graph is directed or contains an odd cycle (a self-loop is a
        cycle of length one)
    """
    logger.debug("Checking bipartiteness of graph with %d nodes", graph.numberOfNodes())

    if graph.isDirected():
        raise NotBipartiteError(
            "Directed graphs are not supported as bipartite occurrence graphs",
            operation="check_bipartite"
        )

    colors: Dict[int, int] = {}
    for start in sorted(graph.iterNodes()):
        if start in colors:
            continue
        colors[start] = 0
        queue = deque([start])

        while queue:
            current = queue.popleft()
            for neighbor in graph.iterNeighbors(current):
                if neighbor not in colors:
                    colors[neighbor] = 1 - colors[current]
                    queue.append(neighbor)
                elif colors[neighbor] == colors[current]:
                    raise NotBipartiteError(
                        "Graph is not bipartite: found odd cycle",
                        conflicting_nodes=[current, neighbor],
                        operation="check_bipartite"
                    )

    color_0 = sorted(node for node, color in colors.items() if color == 0)
    color_1 = sorted(node for node, color in colors.items() if color == 1)
    return color_0, color_1


def is_bipartite(graph: nk.Graph) -> bool:
    """Whether a NetworkIt graph admits a 2-coloring."""
    try:
        check_bipartite(graph)
    except NotBipartiteError:
        return False
    return True


def bipartite_from_graph(
    graph: nk.Graph,
    id_mapper: IDMapper,
    partition_of: Mapping[Any, str]
) -> BipartiteGraph:
    """
    Wrap a caller-supplied NetworkIt graph as a BipartiteGraph.

    The partition tags are not trusted: the graph is 2-colored independently
    and every edge is checked to join a taxon node to a locality node.

    Parameters
    ----------
    graph : nk.Graph
        Undirected graph supplied by the caller
    id_mapper : IDMapper
        Mapping between the caller's node ids and the graph's internal ids
    partition_of : Mapping[Any, str]
        Partition label ("taxon" or "locality") for every original node id

    Returns
    -------
    BipartiteGraph
        A new graph keyed by ``(partition, str(original_id))``; the input graph
        is not modified or retained

    Raises
    ------
    NotBipartiteError
        If the graph is directed, has an odd cycle, or has an edge between two
        nodes with the same label
    ValidationError
        If a node lacks a partition label or the mapper does not match the graph
    ConfigurationError
        If a label is not "taxon" or "locality"

    Examples
    --------
    >>> graph = nk.Graph(3)
    >>> _ = graph.addEdge(0, 2)
    >>> _ = graph.addEdge(1, 2)
    >>> mapper = IDMapper.from_ids(["A", "B", "X"])
    >>> tags = {"A": "taxon", "B": "taxon", "X": "locality"}
    >>> bipartite_from_graph(graph, mapper, tags).localities
    ['X']
    """
    log_function_entry("bipartite_from_graph", nodes=graph.numberOfNodes(),
                       edges=graph.numberOfEdges())

    if id_mapper.size() != graph.numberOfNodes():
        raise ValidationError(
            "ID mapper does not match graph",
            field="id_mapper",
            details={"graph_nodes": graph.numberOfNodes(), "mapper_size": id_mapper.size()}
        )

    labels: Dict[int, str] = {}
    for internal in graph.iterNodes():
        original = id_mapper.get_original(internal)
        if original not in partition_of:
            raise ValidationError(
                f"Node {original!r} has no partition label",
                field="partition_of",
                value=original
            )
        label = partition_of[original]
        validate_partition(label, "bipartite_from_graph")
        labels[internal] = label

    check_bipartite(graph)

    for u, v in graph.iterEdges():
        if labels[u] == labels[v]:
            raise NotBipartiteError(
                f"Edge joins two {labels[u]} nodes",
                conflicting_nodes=[id_mapper.get_original(u), id_mapper.get_original(v)],
                operation="bipartite_from_graph"
            )

    keys = {internal: (labels[internal], str(id_mapper.get_original(internal)))
            for internal in labels}
    ordered = sorted(keys.values(), key=lambda key: (key[0] != TAXON, key[1]))

    try:
        new_mapper = IDMapper.from_ids(ordered)
    except ValueError as e:
        raise ValidationError(
            "Node ids collide after conversion to names",
            field="id_mapper",
            cause=e
        )

    # Parallel edges collapse: an occurrence is present or absent
    new_graph = nk.Graph(new_mapper.size(), weighted=False, directed=False)
    duplicates = 0
    for u, v in graph.iterEdges():
        a, b = new_mapper.get_internal(keys[u]), new_mapper.get_internal(keys[v])
        if new_graph.hasEdge(a, b):
            duplicates += 1
            continue
        new_graph.addEdge(a, b)

    if duplicates:
        logger.warning("Dropped %d parallel edges from caller-supplied graph", duplicates)

    logger.info("Verified bipartite graph: %d taxa, %d localities, %d edges",
                sum(1 for label in labels.values() if label == TAXON),
                sum(1 for label in labels.values() if label == LOCALITY),
                new_graph.numberOfEdges())

    return BipartiteGraph(new_graph, new_mapper)
