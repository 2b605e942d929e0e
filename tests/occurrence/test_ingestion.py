"""
Tests for occurrence table loading and cleaning.
"""

import pytest
import polars as pl

from biogeoNet.common.exceptions import IngestionError, ValidationError
from biogeoNet.occurrence.ingestion import (
    OccurrenceRecord,
    load_occurrences,
    clean_occurrences,
    ingest_occurrences,
    iter_records,
    has_ambiguous_locality
)


class TestHasAmbiguousLocality:
    """Test the locality ambiguity policy."""

    @pytest.mark.parametrize("name", ["Morrison", "Hell Creek", "Tendaguru Beds"])
    def test_plain_names(self, name):
        assert not has_ambiguous_locality(name)

    @pytest.mark.parametrize("name", ["Morrison?", "Hell Creek/Lance", "Kirtland (upper)",
                                      "Two Medicine-Judith", "", "   ", None])
    def test_ambiguous_names(self, name):
        assert has_ambiguous_locality(name)


class TestCleanOccurrences:
    """Test clean_occurrences()."""

    def setup_method(self):
        """Set up test fixtures."""
        self.raw = pl.DataFrame({
            "accepted_name": ["Allosaurus", "Allosaurus", "Stegosaurus", "Ceratosaurus",
                              "Diplodocus", None, "Camarasaurus"],
            "formation": ["morrison", "Morrison", "Morrison?", None,
                          "  tendaguru ", "Morrison", ""],
            "max_ma": ["155.7", "155.7", "152.1", "150.8", "152.1", "150.0", "149.0"]
        })

    def test_cleaning_policy(self):
        cleaned = clean_occurrences(self.raw)

        assert cleaned.columns == ["taxon", "locality"]
        assert cleaned.rows() == [("Allosaurus", "Morrison"), ("Diplodocus", "Tendaguru")]

    def test_no_nulls_or_empty_names(self):
        cleaned = clean_occurrences(self.raw)
        assert cleaned.null_count().sum_horizontal().item() == 0
        assert (cleaned["taxon"] == "").sum() == 0
        assert (cleaned["locality"] == "").sum() == 0

    def test_pairs_are_unique(self):
        cleaned = clean_occurrences(self.raw)
        assert not cleaned.is_duplicated().any()

    def test_empty_locality_never_kept(self):
        raw = pl.DataFrame({"accepted_name": ["A", "B"], "formation": ["", None]})
        cleaned = clean_occurrences(raw)
        assert cleaned.height == 0
        assert cleaned.columns == ["taxon", "locality"]

    def test_taxon_names_keep_case(self):
        raw = pl.DataFrame({"accepted_name": ["tyrannosaurus rex"], "formation": ["hell creek"]})
        assert clean_occurrences(raw).rows() == [("tyrannosaurus rex", "Hell Creek")]

    def test_custom_columns(self):
        raw = pl.DataFrame({"name": ["A"], "site": ["X"]})
        assert clean_occurrences(raw, "name", "site").rows() == [("A", "X")]

    def test_missing_column(self):
        with pytest.raises(ValidationError):
            clean_occurrences(self.raw.drop("formation"))

    def test_idempotent(self):
        once = clean_occurrences(self.raw)
        twice = clean_occurrences(once, "taxon", "locality")
        assert once.equals(twice)

    def test_input_not_modified(self):
        before = self.raw.clone()
        clean_occurrences(self.raw)
        assert self.raw.equals(before)


class TestLoadOccurrences:
    """Test load_occurrences() on files and in-memory records."""

    def test_csv(self, tmp_path):
        path = tmp_path / "occurrences.csv"
        path.write_text(
            "occurrence_no,accepted_name,formation\n"
            "1,Allosaurus,Morrison\n"
            "2,Stegosaurus,\n"
        )
        raw = load_occurrences(path)
        assert raw.height == 2
        assert raw["formation"].to_list() == ["Morrison", None]
        assert raw.schema["occurrence_no"] == pl.Utf8

    def test_tsv(self, tmp_path):
        path = tmp_path / "occurrences.tsv"
        path.write_text("accepted_name\tformation\nAllosaurus\tMorrison\n")
        assert load_occurrences(str(path)).rows() == [("Allosaurus", "Morrison")]

    def test_explicit_separator(self, tmp_path):
        path = tmp_path / "occurrences.csv"
        path.write_text("accepted_name;formation\nAllosaurus;Morrison\n")
        assert load_occurrences(path, separator=";").height == 1

    def test_parquet(self, tmp_path):
        path = tmp_path / "occurrences.parquet"
        pl.DataFrame({"accepted_name": ["A"], "formation": ["X"]}).write_parquet(path)
        assert load_occurrences(path).rows() == [("A", "X")]

    def test_dataframe_passthrough(self):
        df = pl.DataFrame({"accepted_name": ["A"], "formation": ["X"]})
        assert load_occurrences(df) is df

    def test_pair_records(self):
        raw = load_occurrences([("A", "X"), ("B", None)], "taxon", "locality")
        assert raw.columns == ["taxon", "locality"]
        assert raw.rows() == [("A", "X"), ("B", None)]

    def test_mapping_records(self):
        records = [{"accepted_name": "A", "formation": "X", "country": "US"}]
        assert load_occurrences(records).height == 1

    def test_empty_records(self):
        raw = load_occurrences([], "taxon", "locality")
        assert raw.height == 0
        assert raw.columns == ["taxon", "locality"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(IngestionError, match="not found"):
            load_occurrences(tmp_path / "absent.csv")

    def test_missing_column(self, tmp_path):
        path = tmp_path / "occurrences.csv"
        path.write_text("accepted_name,country\nAllosaurus,US\n")
        with pytest.raises(IngestionError) as exc_info:
            load_occurrences(path)
        assert isinstance(exc_info.value.cause, ValidationError)

    def test_malformed_record(self):
        with pytest.raises(IngestionError) as exc_info:
            load_occurrences([("A", "X"), ("B",)], "taxon", "locality")
        assert exc_info.value.details["line_number"] == 1

    def test_unsupported_source(self):
        with pytest.raises(IngestionError, match="Unsupported"):
            load_occurrences(42)

    def test_ingestion_error_is_library_error(self, tmp_path):
        from biogeoNet.common.exceptions import NetworkAnalysisError
        with pytest.raises(NetworkAnalysisError):
            load_occurrences(tmp_path / "absent.parquet")


class TestIngestOccurrences:

    def test_load_and_clean(self, tmp_path):
        path = tmp_path / "occurrences.csv"
        path.write_text(
            "accepted_name,formation\n"
            "A,x\n"
            "A,X\n"
            "B,Y?\n"
            ",Y\n"
        )
        assert ingest_occurrences(path).rows() == [("A", "X")]

    def test_iter_records(self):
        df = pl.DataFrame({"taxon": ["A", "B"], "locality": ["X", "Y"]})
        records = list(iter_records(df))
        assert records == [OccurrenceRecord("A", "X"), OccurrenceRecord("B", "Y")]
        assert records[0].locality == "X"
