"""
Clustering and graph analytics.

Clusters are connected components grown along one family of edge types,
scored by how densely their members are interlinked:

    coherence = linked member pairs / possible member pairs

Component search uses an explicit stack, so recursion depth never grows with
graph size.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from pharma_kg.graph.models import Cluster, ClusterType, GraphStats, RelationshipType

if TYPE_CHECKING:
    from pharma_kg.graph.store import KnowledgeGraph

logger = logging.getLogger(__name__)

# Edge types that connect members of each cluster type
CLUSTER_EDGE_TYPES: dict[ClusterType, frozenset[RelationshipType]] = {
    ClusterType.THERAPEUTIC: frozenset({
        RelationshipType.TREATS,
        RelationshipType.ALTERNATIVE_TO,
        RelationshipType.COMBINED_WITH,
    }),
    ClusterType.MECHANISM: frozenset({
        RelationshipType.SIMILAR_TO,
        RelationshipType.METABOLIZED_BY,
    }),
    ClusterType.STRUCTURE: frozenset({
        RelationshipType.SIMILAR_TO,
        RelationshipType.DERIVED_FROM,
        RelationshipType.PRECURSOR_TO,
    }),
    ClusterType.INDICATION: frozenset({
        RelationshipType.TREATS,
        RelationshipType.ALTERNATIVE_TO,
    }),
}

HUB_COUNT = 5
BRIDGE_COUNT = 5
BRIDGE_THRESHOLD = 0.7


def _component(
    graph: KnowledgeGraph,
    start: str,
    allowed: frozenset[RelationshipType],
    visited: set[str],
) -> list[str]:
    """Members reachable from start over allowed edges, ignoring direction."""
    members = []
    stack = [start]
    while stack:
        node_id = stack.pop()
        if node_id in visited:
            continue
        visited.add(node_id)
        members.append(node_id)
        neighbours = [e.target for e in graph.edges_from(node_id) if e.type in allowed]
        neighbours += [e.source for e in graph.edges_to(node_id) if e.type in allowed]
        # Reversed so neighbours pop in edge insertion order
        stack.extend(n for n in reversed(neighbours) if n not in visited)
    return members


def cluster_coherence(graph: KnowledgeGraph, members: list[str]) -> float:
    """Fraction of member pairs joined by at least one edge of any type."""
    if len(members) < 2:
        return 1.0
    member_set = set(members)
    linked = set()
    for node_id in members:
        for edge in graph.edges_from(node_id):
            if edge.target in member_set:
                linked.add(frozenset((node_id, edge.target)))
    possible = len(members) * (len(members) - 1) // 2
    return len(linked) / possible


def find_clusters(
    graph: KnowledgeGraph,
    min_size: int = 3,
    max_clusters: int = 10,
    cluster_type: ClusterType | str = ClusterType.THERAPEUTIC,
    min_coherence: float = 0.5,
) -> list[Cluster]:
    """
    Find clusters of tightly related entities.

    Args:
        graph: Graph to analyse
        min_size: Discard clusters with fewer members
        max_clusters: Maximum clusters returned
        cluster_type: Edge family used to grow clusters
        min_coherence: Discard clusters less coherent than this

    Returns:
        Clusters ranked by size x coherence, descending
    """
    cluster_type = ClusterType(cluster_type)
    allowed = CLUSTER_EDGE_TYPES[cluster_type]
    visited: set[str] = set()
    clusters = []

    for entity in graph.entities():
        if entity.id in visited:
            continue
        members = _component(graph, entity.id, allowed, visited)
        if len(members) < min_size:
            continue
        coherence = cluster_coherence(graph, members)
        if coherence < min_coherence:
            continue
        center = max(members, key=graph.degree)
        clusters.append(Cluster(
            id=f"cluster_{members[0]}",
            name=f"{cluster_type.value} cluster around {graph.entity(center).name}",
            members=members,
            center=center,
            cluster_type=cluster_type,
            coherence=coherence,
        ))

    clusters.sort(key=lambda c: c.size * c.coherence, reverse=True)

    logger.debug("Found %d %s clusters", len(clusters), cluster_type.value)
    return clusters[:max(max_clusters, 0)]


def count_components(graph: KnowledgeGraph) -> int:
    """Number of weakly connected components."""
    all_types = frozenset(RelationshipType)
    visited: set[str] = set()
    components = 0
    for entity in graph.entities():
        if entity.id not in visited:
            _component(graph, entity.id, all_types, visited)
            components += 1
    return components


def _neighbour_count(graph: KnowledgeGraph, node_id: str) -> int:
    neighbours = {e.target for e in graph.edges_from(node_id)}
    neighbours |= {e.source for e in graph.edges_to(node_id)}
    return len(neighbours)


def compute_stats(graph: KnowledgeGraph) -> GraphStats:
    """
    Compute graph-wide analytics.

    Average degree counts distinct out-neighbours, so parallel edges of
    different types between the same pair count once.

    Bridges use a degree heuristic rather than articulation-point analysis:
    a node qualifies when it has more than one neighbour and
    min(neighbours / sqrt(total nodes), 1) exceeds 0.7.
    """
    entities = graph.entities()
    total_nodes = len(entities)
    total_edges = graph.edge_count

    out_neighbours = sum(len({e.target for e in graph.edges_from(entity.id)}) for entity in entities)
    average_degree = out_neighbours / total_nodes if total_nodes else 0.0
    possible_edges = total_nodes * (total_nodes - 1)
    density = total_edges / possible_edges if possible_edges else 0.0

    by_degree = sorted(entities, key=lambda e: graph.degree(e.id), reverse=True)
    hubs = [e.id for e in by_degree[:HUB_COUNT]]

    bridge_scores = []
    for entity in entities:
        neighbours = _neighbour_count(graph, entity.id)
        if neighbours <= 1:
            continue
        score = min(neighbours / math.sqrt(total_nodes), 1.0)
        if score > BRIDGE_THRESHOLD:
            bridge_scores.append((entity.id, score))
    bridge_scores.sort(key=lambda item: item[1], reverse=True)

    return GraphStats(
        total_nodes=total_nodes,
        total_edges=total_edges,
        average_degree=round(average_degree, 2),
        density=round(density, 4),
        connected_components=count_components(graph),
        hubs=hubs,
        bridges=[node_id for node_id, _ in bridge_scores[:BRIDGE_COUNT]],
        clusters=find_clusters(graph),
    )
