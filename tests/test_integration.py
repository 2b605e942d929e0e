"""
End-to-end tests: occurrence table to networks and statistics.
"""

import pytest
import polars as pl

from biogeoNet import (
    OccurrenceNetworks,
    build_occurrence_networks,
    summarize_networks,
    diameter,
    biogeographic_connectedness
)
from biogeoNet.common.exceptions import IngestionError


OCCURRENCE_CSV = """occurrence_no,accepted_name,formation,max_ma
1,A,x,150
2,B,X,150
3,B,Y,148
4,C,Y,148
5,C,Y,147
6,D,,140
7,E,Y?,140
"""


class TestPipeline:
    """Test build_occurrence_networks() on a small PBDB-style download."""

    @pytest.fixture
    def occurrence_file(self, tmp_path):
        path = tmp_path / "pbdb_occurrences.csv"
        path.write_text(OCCURRENCE_CSV)
        return path

    def test_worked_example(self, occurrence_file):
        networks = build_occurrence_networks(occurrence_file)

        assert isinstance(networks, OccurrenceNetworks)
        assert networks.occurrences.height == 4
        assert networks.bipartite.taxa == ["A", "B", "C"]
        assert networks.bipartite.localities == ["X", "Y"]
        assert networks.taxon_projection.edges() == [("A", "B", 1.0), ("B", "C", 1.0)]
        assert networks.locality_projection.edges() == [("X", "Y", 1.0)]
        assert diameter(networks.taxon_projection) == 2

    def test_dropped_records_leave_no_trace(self, occurrence_file):
        networks = build_occurrence_networks(occurrence_file)
        assert not networks.bipartite.has_node("taxon", "D")
        assert not networks.bipartite.has_node("taxon", "E")
        assert not networks.taxon_projection.has_node("D")

    def test_idempotent(self, occurrence_file):
        first = build_occurrence_networks(occurrence_file)
        second = build_occurrence_networks(occurrence_file)

        assert first.occurrences.equals(second.occurrences)
        assert first.bipartite.edges() == second.bipartite.edges()
        assert first.taxon_projection.edges() == second.taxon_projection.edges()
        assert first.locality_projection.edges() == second.locality_projection.edges()

    def test_rebuilding_from_cleaned_table(self, occurrence_file):
        first = build_occurrence_networks(occurrence_file)
        second = build_occurrence_networks(first.occurrences, "taxon", "locality")
        assert first.bipartite.edges() == second.bipartite.edges()
        assert first.taxon_projection.edges() == second.taxon_projection.edges()

    def test_weight_method(self, occurrence_file):
        networks = build_occurrence_networks(occurrence_file, weight_method="jaccard")
        assert networks.taxon_projection.weight_method == "jaccard"
        assert networks.taxon_projection.weight("A", "B") == pytest.approx(1 / 2)

    def test_unreadable_source(self, tmp_path):
        with pytest.raises(IngestionError):
            build_occurrence_networks(tmp_path / "missing.csv")


class TestSummarizeNetworks:

    def test_summary_table(self):
        records = [
            {"accepted_name": "A", "formation": "X"},
            {"accepted_name": "B", "formation": "X"},
            {"accepted_name": "B", "formation": "Y"},
            {"accepted_name": "C", "formation": "Y"},
        ]
        networks = build_occurrence_networks(records)
        summary = summarize_networks(networks)

        assert summary.height == 3
        assert summary["graph_type"].to_list() == [
            "bipartite", "taxon_projection", "locality_projection"
        ]
        assert summary["diameter"].to_list() == [4, 2, 1]
        assert summary["biogeographic_connectedness"][0] == pytest.approx(1 / 3)
        assert summary["biogeographic_connectedness"][1] is None

    def test_connectedness_matches_statistic(self):
        records = [(t, l) for t in "ABC" for l in "XY"]
        networks = build_occurrence_networks(records, "taxon", "locality")
        assert biogeographic_connectedness(networks.bipartite) == pytest.approx(1.0)
        assert summarize_networks(networks)["density"][1] == pytest.approx(1.0)
