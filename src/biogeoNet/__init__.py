"""
biogeoNet - Occurrence network analysis for biogeography.

This package turns taxon occurrence records (which taxa were found at which
localities or geological formations) into a bipartite occurrence graph, its
one-mode projections onto taxa and onto localities, and the summary
statistics used to compare biogeographic structure.

Modules:
    common: Exceptions, logging, ID mapping and validation
    occurrence: Loading and cleaning of occurrence tables
    network: Graph construction, projection, statistics and node analysis
    pipeline: End-to-end network construction
"""

__version__ = "0.1.0"

from .occurrence import ingest_occurrences, load_occurrences, clean_occurrences
from .network import (
    BipartiteGraph,
    ProjectedGraph,
    NotApplicableResult,
    build_bipartite_graph,
    project_bipartite,
    edge_density,
    diameter,
    degree_distribution,
    biogeographic_connectedness,
    summarize_graph
)
from .pipeline import OccurrenceNetworks, build_occurrence_networks, summarize_networks
