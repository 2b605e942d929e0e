"""
Occurrence network construction and analysis.

This module provides:
- Bipartite taxon/locality graph construction and bipartiteness checks
- One-mode projection onto taxa or localities
- Summary statistics (density, diameter, degree distribution,
  biogeographic connectedness)
- Centrality measures and Louvain community detection
"""

# Graph construction
from .construction import (
    BipartiteGraph,
    build_bipartite_graph,
    bipartite_from_graph,
    check_bipartite,
    is_bipartite
)

# Projection
from .projection import (
    ProjectedGraph,
    project_bipartite,
    project_both,
    shared_neighbors
)

# Summary statistics
from .statistics import (
    NotApplicableResult,
    is_not_applicable,
    edge_density,
    connected_components,
    diameter,
    degree_distribution,
    biogeographic_connectedness,
    summarize_graph
)

# Node-level analysis
from .analysis import (
    extract_centrality,
    detect_communities,
    community_modularity,
    identify_central_nodes,
    compare_centrality_metrics
)
