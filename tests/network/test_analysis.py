"""
Tests for centrality and community analysis of occurrence graphs.
"""

import pytest
import polars as pl
import networkit as nk

from biogeoNet.common.exceptions import ConfigurationError, ValidationError
from biogeoNet.network.construction import build_bipartite_graph
from biogeoNet.network.projection import project_bipartite
from biogeoNet.network.analysis import (
    extract_centrality,
    detect_communities,
    community_modularity,
    identify_central_nodes,
    compare_centrality_metrics
)


class TestExtractCentrality:
    """Test extract_centrality()."""

    def setup_method(self):
        """Set up test fixtures."""
        # Taxon projection is the path A - B - C
        self.bipartite = build_bipartite_graph([("A", "X"), ("B", "X"), ("B", "Y"), ("C", "Y")])
        self.taxa = project_bipartite(self.bipartite, onto="taxon")

    def test_columns(self):
        df = extract_centrality(self.taxa)
        assert df.columns == [
            "node_id", "degree_centrality", "betweenness_centrality",
            "closeness_centrality", "eigenvector_centrality"
        ]
        assert df["node_id"].to_list() == ["A", "B", "C"]

    def test_path_centralities(self):
        df = extract_centrality(self.taxa, ["degree", "betweenness"])
        scores = dict(zip(df["node_id"], df["degree_centrality"]))
        assert scores == {"A": 0.5, "B": 1.0, "C": 0.5}

        betweenness = dict(zip(df["node_id"], df["betweenness_centrality"]))
        assert betweenness["B"] > betweenness["A"]
        assert betweenness["A"] == pytest.approx(0.0)

    def test_unnormalized_degree(self):
        df = extract_centrality(self.taxa, ["degree"], normalized=False)
        assert df["degree_centrality"].to_list() == [1.0, 2.0, 1.0]

    def test_bipartite_has_partition_column(self):
        df = extract_centrality(self.bipartite, ["degree"])
        assert df.columns == ["node_id", "partition", "degree_centrality"]
        assert df["partition"].to_list() == ["taxon"] * 3 + ["locality"] * 2

    def test_weights_ignored_by_path_metrics(self):
        # A-B share two localities, B-C one; hops are what count
        bipartite = build_bipartite_graph([
            ("A", "X"), ("A", "Z"), ("B", "X"), ("B", "Z"), ("B", "Y"), ("C", "Y")
        ])
        weighted = extract_centrality(project_bipartite(bipartite), ["closeness"])
        unweighted = extract_centrality(self.taxa, ["closeness"])
        assert weighted["closeness_centrality"].to_list() == pytest.approx(
            unweighted["closeness_centrality"].to_list())

    def test_graph_not_modified(self):
        edges_before = self.taxa.edges()
        extract_centrality(self.taxa)
        assert self.taxa.edges() == edges_before

    def test_unknown_metric(self):
        with pytest.raises(ConfigurationError):
            extract_centrality(self.taxa, ["pagerank"])

    def test_no_metrics(self):
        with pytest.raises(ValidationError):
            extract_centrality(self.taxa, [])

    def test_empty_graph(self):
        df = extract_centrality(nk.Graph(0), ["degree"])
        assert df.height == 0
        assert "degree_centrality" in df.columns

    def test_edgeless_eigenvector(self):
        df = extract_centrality(nk.Graph(3), ["eigenvector"])
        assert df["eigenvector_centrality"].to_list() == [0.0, 0.0, 0.0]


class TestCommunities:
    """Test detect_communities() and community_modularity()."""

    def setup_method(self):
        """Set up test fixtures."""
        # Two faunas with no shared localities
        records = [(t, l) for t in ["A", "B", "C"] for l in ["X1", "X2"]]
        records += [(t, l) for t in ["D", "E", "F"] for l in ["Y1", "Y2"]]
        self.bipartite = build_bipartite_graph(records)
        self.taxa = project_bipartite(self.bipartite, onto="taxon")

    def test_separate_faunas(self):
        communities = detect_communities(self.taxa)
        assert communities.columns == ["node_id", "community"]

        membership = dict(zip(communities["node_id"], communities["community"]))
        assert membership["A"] == membership["B"] == membership["C"]
        assert membership["D"] == membership["E"] == membership["F"]
        assert membership["A"] != membership["D"]

    def test_contiguous_ids(self):
        communities = detect_communities(self.taxa)
        ids = sorted(set(communities["community"].to_list()))
        assert ids == list(range(len(ids)))
        assert communities["community"][0] == 0

    def test_seeded_runs_agree(self):
        first = detect_communities(self.taxa, random_seed=7)
        second = detect_communities(self.taxa, random_seed=7)
        assert first.equals(second)

    def test_no_edges(self):
        bipartite = build_bipartite_graph([("A", "X"), ("B", "Y")])
        communities = detect_communities(project_bipartite(bipartite))
        assert communities["community"].to_list() == [0, 1]

    def test_invalid_resolution(self):
        with pytest.raises(ConfigurationError):
            detect_communities(self.taxa, resolution=0)

    def test_modularity(self):
        communities = detect_communities(self.taxa)
        assert community_modularity(self.taxa, communities) == pytest.approx(0.5)

    def test_modularity_single_community(self):
        communities = pl.DataFrame({"node_id": self.taxa.nodes(), "community": [0] * 6})
        assert community_modularity(self.taxa, communities) == pytest.approx(0.0)

    def test_modularity_incomplete_table(self):
        communities = pl.DataFrame({"node_id": ["A"], "community": [0]})
        with pytest.raises(ValidationError):
            community_modularity(self.taxa, communities)

    def test_bipartite_communities(self):
        communities = detect_communities(self.bipartite)
        assert communities.columns == ["node_id", "partition", "community"]
        assert community_modularity(self.bipartite, communities) > 0


class TestCentralityRanking:
    """Test identify_central_nodes() and compare_centrality_metrics()."""

    def setup_method(self):
        """Set up test fixtures."""
        self.df = pl.DataFrame({
            "node_id": ["A", "B", "C", "D"],
            "degree_centrality": [0.2, 0.9, 0.5, 0.1],
            "betweenness_centrality": [0.0, 0.8, 0.3, 0.0],
        })

    def test_top_k(self):
        assert identify_central_nodes(self.df, "degree_centrality", top_k=2) == ["B", "C"]

    def test_threshold(self):
        assert identify_central_nodes(self.df, "degree_centrality", threshold=0.5) == ["B", "C"]

    def test_unknown_metric(self):
        with pytest.raises(ValidationError):
            identify_central_nodes(self.df, "katz_centrality")

    def test_compare(self):
        result = compare_centrality_metrics(self.df, "degree_centrality", "betweenness_centrality")
        assert result["n_nodes"] == 4
        assert result["pearson"] > 0.9
        assert result["spearman"] > 0.9

    def test_compare_constant_column(self):
        df = self.df.with_columns(pl.lit(1.0).alias("degree_centrality"))
        result = compare_centrality_metrics(df, "degree_centrality", "betweenness_centrality")
        assert result["pearson"] == 0.0
        assert result["spearman"] == 0.0
