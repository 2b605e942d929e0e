"""
Tests for one-mode projection of occurrence graphs.
"""

from itertools import combinations
import random

import pytest
import networkit as nk

from biogeoNet.common.exceptions import ConfigurationError, NotBipartiteError
from biogeoNet.network.construction import build_bipartite_graph
from biogeoNet.network.projection import (
    ProjectedGraph,
    project_bipartite,
    project_both,
    shared_neighbors
)


def _random_records(seed, n_taxa=15, n_localities=8, p=0.3):
    rng = random.Random(seed)
    records = [
        (f"T{t:02d}", f"L{l:02d}")
        for t in range(n_taxa)
        for l in range(n_localities)
        if rng.random() < p
    ]
    return records


class TestWorkedExample:
    """The four-record example: A-X, B-X, B-Y, C-Y."""

    def setup_method(self):
        """Set up test fixtures."""
        self.bipartite = build_bipartite_graph([("A", "X"), ("B", "X"), ("B", "Y"), ("C", "Y")])

    def test_taxon_projection(self):
        taxa = project_bipartite(self.bipartite, onto="taxon")
        assert taxa.nodes() == ["A", "B", "C"]
        assert taxa.edges() == [("A", "B", 1.0), ("B", "C", 1.0)]
        assert taxa.weight("A", "C") == 0.0
        assert not taxa.has_edge("A", "C")

    def test_locality_projection(self):
        localities = project_bipartite(self.bipartite, onto="locality")
        assert localities.nodes() == ["X", "Y"]
        assert localities.edges() == [("X", "Y", 1.0)]

    def test_project_both(self):
        taxa, localities = project_both(self.bipartite)
        assert taxa.partition == "taxon"
        assert localities.partition == "locality"

    def test_source_graph_unchanged(self):
        edges_before = self.bipartite.edges()
        project_both(self.bipartite)
        assert self.bipartite.edges() == edges_before

    def test_shared_neighbors(self):
        assert shared_neighbors(self.bipartite, "taxon", "A", "B") == {"X"}
        assert shared_neighbors(self.bipartite, "taxon", "A", "C") == set()
        assert shared_neighbors(self.bipartite, "locality", "X", "Y") == {"B"}


class TestProjectionProperties:
    """Properties that hold for any occurrence graph."""

    @pytest.mark.parametrize("seed", [1, 2, 3])
    @pytest.mark.parametrize("onto", ["taxon", "locality"])
    def test_weights_match_brute_force(self, seed, onto):
        bipartite = build_bipartite_graph(_random_records(seed))
        projected = project_bipartite(bipartite, onto=onto)

        names = [name for _, name in bipartite.nodes(onto)]
        assert projected.nodes() == names

        for u, v in combinations(names, 2):
            common = len(shared_neighbors(bipartite, onto, u, v))
            assert projected.weight(u, v) == common
            assert projected.has_edge(u, v) == (common > 0)

    def test_no_self_loops(self):
        projected = project_bipartite(build_bipartite_graph(_random_records(7)))
        assert projected.graph.numberOfSelfLoops() == 0
        for u, v, w in projected.edges():
            assert u < v
            assert w >= 1

    def test_projection_is_deterministic(self):
        records = _random_records(11)
        first = project_bipartite(build_bipartite_graph(records))
        second = project_bipartite(build_bipartite_graph(list(reversed(records))))
        assert first.edges() == second.edges()


class TestWeightMethods:
    """Test the normalized weightings."""

    def setup_method(self):
        """Set up test fixtures."""
        # A at X, Y; B at X, Y, Z; C at Z
        self.bipartite = build_bipartite_graph([
            ("A", "X"), ("A", "Y"), ("B", "X"), ("B", "Y"), ("B", "Z"), ("C", "Z")
        ])

    def test_jaccard(self):
        projected = project_bipartite(self.bipartite, weight_method="jaccard")
        assert projected.weight("A", "B") == pytest.approx(2 / 3)
        assert projected.weight("B", "C") == pytest.approx(1 / 3)

    def test_overlap(self):
        projected = project_bipartite(self.bipartite, weight_method="overlap")
        assert projected.weight("A", "B") == pytest.approx(1.0)
        assert projected.weight("B", "C") == pytest.approx(1.0)

    def test_invalid_method(self):
        with pytest.raises(ConfigurationError):
            project_bipartite(self.bipartite, weight_method="cosine")


class TestEdgeCases:

    def test_single_locality(self):
        bipartite = build_bipartite_graph([("A", "X"), ("B", "X"), ("C", "X")])
        taxa = project_bipartite(bipartite, onto="taxon")
        assert taxa.number_of_edges() == 3
        localities = project_bipartite(bipartite, onto="locality")
        assert localities.number_of_nodes() == 1
        assert localities.number_of_edges() == 0

    def test_no_shared_localities(self):
        bipartite = build_bipartite_graph([("A", "X"), ("B", "Y")])
        taxa = project_bipartite(bipartite)
        assert taxa.number_of_nodes() == 2
        assert taxa.number_of_edges() == 0

    def test_empty_graph(self):
        with pytest.warns(UserWarning):
            bipartite = build_bipartite_graph([])
        projected = project_bipartite(bipartite)
        assert projected.number_of_nodes() == 0

    def test_invalid_partition(self):
        bipartite = build_bipartite_graph([("A", "X")])
        with pytest.raises(ConfigurationError):
            project_bipartite(bipartite, onto="genus")

    def test_requires_bipartite_graph(self):
        with pytest.raises(NotBipartiteError):
            project_bipartite(nk.Graph(3))


class TestProjectedGraph:
    """Test the ProjectedGraph accessors."""

    def setup_method(self):
        """Set up test fixtures."""
        bipartite = build_bipartite_graph([("A", "X"), ("B", "X"), ("B", "Y"), ("C", "Y"), ("A", "Y")])
        self.projected = project_bipartite(bipartite)

    def test_accessors(self):
        assert isinstance(self.projected, ProjectedGraph)
        assert self.projected.neighbors("B") == ["A", "C"]
        assert self.projected.degree("A") == 2
        assert self.projected.weight("A", "B") == 2.0
        assert self.projected.has_node("C")
        assert not self.projected.has_edge("A", "A")

    def test_unknown_node_weight(self):
        with pytest.raises(KeyError):
            self.projected.weight("A", "Z")

    def test_edgelist(self):
        edges = self.projected.to_edgelist()
        assert edges.columns == ["source", "target", "weight"]
        assert edges.filter(edges["source"] == "A")["weight"].to_list() == [2.0, 1.0]

    def test_to_networkit_copy(self):
        graph, mapper = self.projected.to_networkit()
        assert graph.isWeighted()
        graph.removeEdge(0, 1)
        assert self.projected.has_edge("A", "B")

    def test_repr(self):
        assert repr(self.projected) == (
            "ProjectedGraph(partition='taxon', nodes=3, edges=3, weight_method='count')"
        )
