#!/usr/bin/env python3
"""
Occurrence Network Example

This example walks through the occurrence network workflow of the biogeoNet
library. It shows how to:

1. Clean a raw occurrence table
2. Build the bipartite taxon/locality graph
3. Project it onto taxa and onto localities
4. Compute summary statistics and biogeographic connectedness
5. Rank central taxa and find locality communities

The data are a handful of Late Jurassic dinosaur occurrences in the shape of a
Paleobiology Database download (accepted_name / formation columns).
"""

import polars as pl

from biogeoNet import build_occurrence_networks, summarize_networks
from biogeoNet.common import setup_logging
from biogeoNet.network import (
    biogeographic_connectedness,
    diameter,
    degree_distribution,
    extract_centrality,
    identify_central_nodes,
    detect_communities,
    is_not_applicable
)


RAW_OCCURRENCES = pl.DataFrame({
    "accepted_name": [
        "Allosaurus fragilis", "Allosaurus fragilis", "Stegosaurus stenops",
        "Camarasaurus supremus", "Camarasaurus supremus", "Ceratosaurus nasicornis",
        "Torvosaurus gurneyi", "Dacentrurus armatus", "Giraffatitan brancai",
        "Kentrosaurus aethiopicus", "Allosaurus europaeus", "Diplodocus carnegii",
    ],
    "formation": [
        "Morrison", "Lourinha", "morrison",
        "Morrison", "Morrison", "Morrison?",
        "Lourinha", "Lourinha", "Tendaguru",
        "Tendaguru", "Lourinha", None,
    ],
})


def main():
    """Main function demonstrating the occurrence network workflow."""

    setup_logging(level="WARNING")

    print("=" * 60)
    print("Occurrence Network Example")
    print("=" * 60)

    # Step 1-3: clean, build and project
    print("\n1. Building Networks")
    print("-" * 40)

    networks = build_occurrence_networks(RAW_OCCURRENCES)
    print(f"Kept {networks.occurrences.height} of {RAW_OCCURRENCES.height} raw records")
    print(networks.bipartite)
    print(networks.taxon_projection)
    print(networks.locality_projection)

    # Step 4: statistics
    print("\n2. Summary Statistics")
    print("-" * 40)

    print(summarize_networks(networks))

    bc = biogeographic_connectedness(networks.bipartite)
    if is_not_applicable(bc):
        print(f"Biogeographic connectedness undefined: {bc.reason}")
    else:
        print(f"Biogeographic connectedness: {bc:.3f}")

    per_component = diameter(networks.locality_projection, policy="per_component")
    print(f"Locality projection diameters per component: {per_component}")
    print(f"Taxon degree distribution: {degree_distribution(networks.taxon_projection)}")

    # Step 5: node-level analysis
    print("\n3. Central Taxa and Locality Communities")
    print("-" * 40)

    centrality = extract_centrality(networks.taxon_projection, ["degree", "betweenness"])
    top = identify_central_nodes(centrality, "degree_centrality", top_k=3)
    print(f"Most connected taxa: {top}")

    communities = detect_communities(networks.locality_projection)
    print(communities.sort("community"))


if __name__ == "__main__":
    main()
