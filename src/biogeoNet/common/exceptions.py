"""
Custom exception hierarchy for the biogeoNet library.

Every error raised by the library derives from NetworkAnalysisError, so callers
can catch all library failures with a single except clause while still being
able to tell ingestion problems apart from graph-structure problems.

Hierarchy
---------
NetworkAnalysisError
    ValidationError
        DataFormatError
            IngestionError
    GraphConstructionError
        NotBipartiteError
    ConfigurationError
    ComputationError
        NotConnectedError
"""

from typing import Dict, Any, Optional, List, Union
import traceback


class NetworkAnalysisError(Exception):
    """
    Base exception for all biogeoNet errors.

    Parameters
    ----------
    message : str
        Human-readable error message describing what went wrong
    details : Dict[str, Any], optional
        Additional structured information about the error
    cause : Exception, optional
        The underlying exception that caused this error
    context : Dict[str, Any], optional
        Additional context about the operation that failed

    Examples
    --------
    >>> raise NetworkAnalysisError("Projection failed")
    >>> raise NetworkAnalysisError(
    ...     "Invalid occurrence table",
    ...     details={"rows": 0},
    ...     context={"operation": "load_occurrences"}
    ... )
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        self.details = details or {}
        self.cause = cause
        self.context = context or {}

        full_message = message

        if self.details:
            detail_parts = []
            for key, value in self.details.items():
                if isinstance(value, (list, dict, set)) and len(str(value)) > 100:
                    detail_parts.append(f"{key}=<{type(value).__name__} with {len(value)} items>")
                else:
                    detail_parts.append(f"{key}={value}")
            full_message += f" (Details: {', '.join(detail_parts)})"

        if self.context:
            context_parts = [f"{k}={v}" for k, v in self.context.items()]
            full_message += f" (Context: {', '.join(context_parts)})"

        super().__init__(full_message)

        if cause is not None:
            self.__cause__ = cause

    def add_context(self, **kwargs: Any) -> 'NetworkAnalysisError':
        """
        Add additional context to the exception.

        Returns
        -------
        NetworkAnalysisError
            Self, for method chaining
        """
        self.context.update(kwargs)
        return self

    def get_debug_info(self) -> Dict[str, Any]:
        """
        Get all available error information as a dictionary.
        """
        return {
            "exception_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "cause": str(self.cause) if self.cause else None,
            "traceback": traceback.format_exc() if self.__traceback__ else None
        }


class ValidationError(NetworkAnalysisError):
    """
    Exception raised for input validation errors.

    Parameters
    ----------
    message : str
        Descriptive error message explaining the validation failure
    field : str, optional
        Name of the field or column that failed validation
    value : Any, optional
        The invalid value that caused the error
    expected : str, optional
        Description of what was expected
    details : Dict[str, Any], optional
        Additional details about the validation failure

    Examples
    --------
    >>> raise ValidationError("Column contains null values", field="taxon")
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.field = field
        self.value = value
        self.expected = expected

        enhanced_details = details or {}
        if field is not None:
            enhanced_details["field"] = field
        if value is not None:
            enhanced_details["invalid_value"] = value
        if expected is not None:
            enhanced_details["expected"] = expected

        if field:
            enhanced_message = f"Validation error in field '{field}': {message}"
        else:
            enhanced_message = f"Validation error: {message}"

        super().__init__(enhanced_message, details=enhanced_details, **kwargs)


class DataFormatError(ValidationError):
    """
    Exception raised for data format and structure errors.

    Parameters
    ----------
    message : str
        Description of the format error
    format_type : str, optional
        Expected format (e.g., "CSV", "Parquet", "DataFrame")
    file_path : str, optional
        Path or URL of the problematic resource
    line_number : int, optional
        Line number where error occurred (for file parsing)
    """

    def __init__(
        self,
        message: str,
        format_type: Optional[str] = None,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
        **kwargs
    ) -> None:
        details = kwargs.get('details') or {}

        if format_type:
            details["format_type"] = format_type
        if file_path:
            details["file_path"] = str(file_path)
        if line_number is not None:
            details["line_number"] = line_number

        kwargs["details"] = details
        super().__init__(message, **kwargs)


class IngestionError(DataFormatError):
    """
    Exception raised when an occurrence table cannot be ingested.

    Covers unreachable sources (missing files, failed downloads), content that
    is not tabular, and tables lacking the taxon or locality column. Ingestion
    is a one-shot batch step, so this error is never retried internally.

    Parameters
    ----------
    message : str
        Description of the ingestion failure
    source : str, optional
        Description of the source that failed (path, URL or type name)

    Examples
    --------
    >>> raise IngestionError(
    ...     "Occurrence table not found",
    ...     source="data/pbdb_occurrences.csv",
    ...     format_type="CSV"
    ... )
    """

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        **kwargs
    ) -> None:
        self.source = source
        if source is not None:
            kwargs.setdefault("file_path", str(source))
        super().__init__(message, **kwargs)


class GraphConstructionError(NetworkAnalysisError):
    """
    Exception raised during graph construction and manipulation.

    Parameters
    ----------
    message : str
        Description of the graph construction error
    graph_type : str, optional
        Type of graph being constructed (e.g., "bipartite", "projection")
    node_count : int, optional
        Number of nodes in the graph when error occurred
    edge_count : int, optional
        Number of edges processed when error occurred
    operation : str, optional
        Specific operation that failed (e.g., "add_edges")

    Examples
    --------
    >>> raise GraphConstructionError(
    ...     "Failed to add edges to graph",
    ...     operation="add_edges",
    ...     edge_count=1500
    ... )
    """

    def __init__(
        self,
        message: str,
        graph_type: Optional[str] = None,
        node_count: Optional[int] = None,
        edge_count: Optional[int] = None,
        operation: Optional[str] = None,
        **kwargs
    ) -> None:
        self.graph_type = graph_type
        self.node_count = node_count
        self.edge_count = edge_count
        self.operation = operation

        context = kwargs.pop("context", None) or {}
        if graph_type:
            context["graph_type"] = graph_type
        if node_count is not None:
            context["node_count"] = node_count
        if edge_count is not None:
            context["edge_count"] = edge_count
        if operation:
            context["operation"] = operation

        super().__init__(message, context=context, **kwargs)


class NotBipartiteError(GraphConstructionError):
    """
    Exception raised when a graph fails bipartite partition verification.

    Raised when a 2-coloring does not exist (odd cycle), when an edge joins two
    nodes carrying the same partition label, or when a statistic that needs
    taxon/locality labels receives a graph without them.

    Parameters
    ----------
    message : str
        Description of the failure
    conflicting_nodes : List[Any], optional
        Original ids of the nodes that exposed the conflict

    Examples
    --------
    >>> raise NotBipartiteError(
    ...     "Edge joins two taxon nodes",
    ...     conflicting_nodes=[("taxon", "A"), ("taxon", "B")]
    ... )
    """

    def __init__(
        self,
        message: str,
        conflicting_nodes: Optional[List[Any]] = None,
        **kwargs
    ) -> None:
        self.conflicting_nodes = list(conflicting_nodes) if conflicting_nodes else []

        details = kwargs.get("details") or {}
        if self.conflicting_nodes:
            details["conflicting_nodes"] = self.conflicting_nodes
        kwargs["details"] = details
        kwargs.setdefault("graph_type", "bipartite")

        super().__init__(message, **kwargs)


class ConfigurationError(NetworkAnalysisError):
    """
    Exception raised for invalid configuration or parameter values.

    Parameters
    ----------
    message : str
        Description of the configuration error
    parameter : str, optional
        Name of the problematic parameter
    value : Any, optional
        The invalid parameter value
    valid_options : List[Any], optional
        List of valid options for the parameter
    function : str, optional
        Name of the function where the error occurred

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "Invalid projection partition",
    ...     parameter="onto",
    ...     value="genus",
    ...     valid_options=["taxon", "locality"]
    ... )
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        valid_options: Optional[List[Any]] = None,
        function: Optional[str] = None,
        **kwargs
    ) -> None:
        self.parameter = parameter
        self.value = value
        self.valid_options = valid_options
        self.function = function

        details = kwargs.get('details') or {}
        if parameter:
            details["parameter"] = parameter
        if value is not None:
            details["invalid_value"] = value
        if valid_options:
            details["valid_options"] = valid_options
        if function:
            details["function"] = function

        enhanced_message = message
        if parameter and valid_options:
            enhanced_message += f". Valid options for '{parameter}': {valid_options}"

        kwargs["details"] = details
        super().__init__(enhanced_message, **kwargs)


class ComputationError(NetworkAnalysisError):
    """
    Exception raised when computational operations fail.

    Parameters
    ----------
    message : str
        Description of the computational error
    operation : str, optional
        The computational operation that failed
    error_type : str, optional
        Type of computational error (e.g., "numerical", "topology")
    resource_info : Dict[str, Any], optional
        Information about the graph when the error occurred
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        error_type: Optional[str] = None,
        resource_info: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.operation = operation
        self.error_type = error_type
        self.resource_info = resource_info or {}

        context = kwargs.get("context") or {}
        if operation:
            context["operation"] = operation
        if error_type:
            context["error_type"] = error_type

        details = kwargs.get('details') or {}
        details.update(self.resource_info)

        kwargs["details"] = details
        kwargs["context"] = context

        super().__init__(message, **kwargs)


class NotConnectedError(ComputationError):
    """
    Exception raised when a connected graph is required but not supplied.

    The diameter of a disconnected graph is infinite; callers who want a finite
    answer must opt in to a per-component policy explicitly.

    Parameters
    ----------
    message : str
        Description of the failure
    component_sizes : List[int], optional
        Sizes of the connected components, largest first

    Examples
    --------
    >>> raise NotConnectedError(
    ...     "Diameter undefined for disconnected graph",
    ...     component_sizes=[3, 2]
    ... )
    """

    def __init__(
        self,
        message: str,
        component_sizes: Optional[List[int]] = None,
        **kwargs
    ) -> None:
        self.component_sizes = list(component_sizes) if component_sizes else []

        details = kwargs.get("details") or {}
        if self.component_sizes:
            details["number_of_components"] = len(self.component_sizes)
            details["component_sizes"] = self.component_sizes
        kwargs["details"] = details
        kwargs.setdefault("error_type", "topology")

        super().__init__(message, **kwargs)


# Convenience functions for common error patterns

def validate_parameter(
    value: Any,
    valid_options: List[Any],
    parameter_name: str,
    function_name: Optional[str] = None
) -> None:
    """
    Validate that a parameter value is in the list of valid options.

    Raises
    ------
    ConfigurationError
        If value is not in valid_options
    """
    if value not in valid_options:
        raise ConfigurationError(
            f"Invalid value for parameter '{parameter_name}': {value}",
            parameter=parameter_name,
            value=value,
            valid_options=list(valid_options),
            function=function_name
        )


def require_positive(
    value: Union[int, float],
    parameter_name: str,
    allow_zero: bool = False
) -> None:
    """
    Validate that a numeric parameter is positive.

    Parameters
    ----------
    value : Union[int, float]
        The numeric value to validate
    parameter_name : str
        Name of the parameter
    allow_zero : bool, default False
        Whether to allow zero values

    Raises
    ------
    ConfigurationError
        If value is not positive (or non-negative if allow_zero=True)
    """
    if allow_zero and value < 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be non-negative, got {value}",
            parameter=parameter_name,
            value=value
        )
    elif not allow_zero and value <= 0:
        raise ConfigurationError(
            f"Parameter '{parameter_name}' must be positive, got {value}",
            parameter=parameter_name,
            value=value
        )
