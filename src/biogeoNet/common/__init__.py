"""
Common utilities for the biogeoNet library.

This module provides shared functionality used across all other modules:
- Custom exception hierarchy
- ID mapping between node identities and NetworkIt integer IDs
- Input validation for occurrence tables and parameters
- Logging configuration
"""

from .exceptions import (
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

from .id_mapper import IDMapper
from .validators import (
    TAXON,
    LOCALITY,
    PARTITIONS,
    validate_occurrence_dataframe,
    validate_partition,
    other_partition
)

from .logging_config import (
    setup_logging,
    get_logger,
    configure_external_library_logging,
    log_function_entry,
    log_performance_metric,
    LoggingTimer,
    JSONFormatter,
    PerformanceFilter
)
