"""
Tests for the biogeoNet exception hierarchy and parameter helpers.
"""

import pytest

from biogeoNet.common.exceptions import (
    NetworkAnalysisError,
    ValidationError,
    DataFormatError,
    IngestionError,
    GraphConstructionError,
    NotBipartiteError,
    ConfigurationError,
    ComputationError,
    NotConnectedError,
    validate_parameter,
    require_positive
)


class TestHierarchy:
    """Every library error derives from NetworkAnalysisError."""

    @pytest.mark.parametrize("exc_class", [
        ValidationError, DataFormatError, IngestionError, GraphConstructionError,
        NotBipartiteError, ConfigurationError, ComputationError, NotConnectedError
    ])
    def test_subclass_of_base(self, exc_class):
        assert issubclass(exc_class, NetworkAnalysisError)

    def test_ingestion_error_is_validation_error(self):
        assert issubclass(IngestionError, DataFormatError)
        assert issubclass(IngestionError, ValidationError)

    def test_specific_subclasses(self):
        assert issubclass(NotBipartiteError, GraphConstructionError)
        assert issubclass(NotConnectedError, ComputationError)


class TestNetworkAnalysisError:
    """Test the base exception."""

    def test_message_only(self):
        error = NetworkAnalysisError("Projection failed")
        assert str(error) == "Projection failed"
        assert error.details == {}
        assert error.context == {}
        assert error.cause is None

    def test_details_and_context_in_message(self):
        error = NetworkAnalysisError(
            "Invalid table",
            details={"rows": 0},
            context={"operation": "load_occurrences"}
        )
        assert "rows=0" in str(error)
        assert "operation=load_occurrences" in str(error)

    def test_long_detail_values_are_summarized(self):
        error = NetworkAnalysisError("Too many", details={"nodes": list(range(200))})
        assert "<list with 200 items>" in str(error)

    def test_cause_is_chained(self):
        cause = ValueError("bad value")
        error = NetworkAnalysisError("Wrapped", cause=cause)
        assert error.__cause__ is cause

    def test_add_context_chains(self):
        error = NetworkAnalysisError("Failed").add_context(step="projection")
        assert error.context["step"] == "projection"

    def test_debug_info(self):
        error = NetworkAnalysisError("Failed", cause=KeyError("x"))
        info = error.get_debug_info()
        assert info["exception_type"] == "NetworkAnalysisError"
        assert info["message"] == "Failed"
        assert "x" in info["cause"]


class TestSpecificErrors:
    """Test the structured fields of each subclass."""

    def test_validation_error_field(self):
        error = ValidationError("Column contains nulls", field="taxon", value=3)
        assert error.field == "taxon"
        assert "Validation error in field 'taxon'" in str(error)
        assert error.details["invalid_value"] == 3

    def test_ingestion_error_records_source(self):
        error = IngestionError("Not found", source="data/occ.csv", format_type="CSV")
        assert error.source == "data/occ.csv"
        assert error.details["file_path"] == "data/occ.csv"
        assert error.details["format_type"] == "CSV"

    def test_ingestion_error_line_number(self):
        error = IngestionError("Bad record", source="records", line_number=4)
        assert error.details["line_number"] == 4

    def test_graph_construction_error_context(self):
        error = GraphConstructionError("Failed", graph_type="projection", edge_count=10)
        assert error.context["graph_type"] == "projection"
        assert error.context["edge_count"] == 10

    def test_not_bipartite_defaults(self):
        error = NotBipartiteError("Odd cycle", conflicting_nodes=[1, 2])
        assert error.graph_type == "bipartite"
        assert error.conflicting_nodes == [1, 2]
        assert error.details["conflicting_nodes"] == [1, 2]

    def test_configuration_error_lists_options(self):
        error = ConfigurationError(
            "Invalid partition",
            parameter="onto",
            value="genus",
            valid_options=["taxon", "locality"]
        )
        assert "Valid options for 'onto'" in str(error)
        assert error.value == "genus"

    def test_computation_error_resource_info(self):
        error = ComputationError("Failed", operation="diameter", resource_info={"nodes": 5})
        assert error.context["operation"] == "diameter"
        assert error.details["nodes"] == 5

    def test_not_connected_error(self):
        error = NotConnectedError("Disconnected", component_sizes=[3, 2])
        assert error.component_sizes == [3, 2]
        assert error.details["number_of_components"] == 2
        assert error.error_type == "topology"


class TestHelpers:
    """Test validate_parameter and require_positive."""

    def test_validate_parameter_accepts_valid(self):
        validate_parameter("count", ["count", "jaccard"], "weight_method")

    def test_validate_parameter_rejects_invalid(self):
        with pytest.raises(ConfigurationError) as exc_info:
            validate_parameter("cosine", ["count", "jaccard"], "weight_method", "project_bipartite")
        assert exc_info.value.parameter == "weight_method"
        assert exc_info.value.function == "project_bipartite"

    def test_require_positive(self):
        require_positive(1.5, "resolution")
        require_positive(0, "top_k", allow_zero=True)

        with pytest.raises(ConfigurationError):
            require_positive(0, "resolution")
        with pytest.raises(ConfigurationError):
            require_positive(-1, "top_k", allow_zero=True)
