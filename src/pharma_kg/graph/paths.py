"""
Neighbourhood and path finding over the knowledge graph.

Both searches are breadth-first and bounded by caller-supplied depth limits, so
they terminate on dense or cyclic graphs.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from typing import TYPE_CHECKING

from pharma_kg.graph.models import (
    EntityPath,
    RelatedEntity,
    RelationshipEdge,
    RelationshipType,
)

if TYPE_CHECKING:
    from pharma_kg.graph.store import KnowledgeGraph

logger = logging.getLogger(__name__)

THERAPEUTIC_TYPES = frozenset({RelationshipType.TREATS, RelationshipType.ALTERNATIVE_TO})
STRUCTURAL_TYPES = frozenset({RelationshipType.SIMILAR_TO, RelationshipType.DERIVED_FROM})


def _type_filter(
    relationship_types: Iterable[RelationshipType | str] | None,
) -> frozenset[RelationshipType] | None:
    if not relationship_types:
        return None
    return frozenset(RelationshipType(t) for t in relationship_types)


def _passes(
    edge: RelationshipEdge,
    allowed: frozenset[RelationshipType] | None,
    min_strength: float,
) -> bool:
    return (allowed is None or edge.type in allowed) and edge.strength >= min_strength


def related_to(
    graph: KnowledgeGraph,
    origin: str,
    max_results: int = 20,
    relationship_types: Iterable[RelationshipType | str] | None = None,
    min_strength: float = 0.1,
    max_depth: int = 2,
) -> list[RelatedEntity]:
    """
    Find entities related to an origin node.

    Walks outgoing edges level by level. Each entity is reported once, at its
    minimum distance, via the strongest qualifying edge from the frontier node
    that discovered it. The origin is never reported.

    Ranking:
        rank_score = edge.strength / (distance + 1), descending;
        ties keep discovery order

    Args:
        graph: Graph to search
        origin: Name, alias or id of the start node
        max_results: Maximum entities returned
        relationship_types: Only follow these edge types (None = all)
        min_strength: Only follow edges at least this strong
        max_depth: Maximum hops from the origin

    Returns:
        Ranked RelatedEntity list

    Raises:
        NotFoundError: Origin does not resolve
    """
    origin_id = graph.require(origin)
    if max_depth <= 0 or max_results <= 0:
        return []

    allowed = _type_filter(relationship_types)
    visited = {origin_id}
    frontier = [origin_id]
    found: list[RelatedEntity] = []
    distance = 0

    while frontier and distance < max_depth:
        distance += 1
        next_frontier = []
        for node_id in frontier:
            best: dict[str, RelationshipEdge] = {}
            for edge in graph.edges_from(node_id):
                if edge.target in visited or not _passes(edge, allowed, min_strength):
                    continue
                current = best.get(edge.target)
                if current is None or edge.strength > current.strength:
                    best[edge.target] = edge
            for target_id, edge in best.items():
                visited.add(target_id)
                found.append(RelatedEntity(entity=graph.entity(target_id), edge=edge, distance=distance))
                next_frontier.append(target_id)
        frontier = next_frontier

    # list.sort is stable, so equal scores stay in discovery order
    found.sort(key=lambda r: r.rank_score, reverse=True)

    logger.debug(
        "Found %d entities related to %s (max_depth=%d)", len(found), origin_id, max_depth
    )
    return found[:max_results]


def shortest_path(
    graph: KnowledgeGraph,
    source: str,
    target: str,
    max_depth: int = 5,
    relationship_types: Iterable[RelationshipType | str] | None = None,
    min_strength: float = 0.1,
) -> EntityPath | None:
    """
    Find a minimum-hop path between two entities.

    Breadth-first over nodes with parent pointers: every node is expanded once,
    at the depth it was first reached, so the search is O(V + E) and the
    first route that reaches the target has the fewest hops.

    Path strength:
        product(edge strengths) / number of nodes on the path

    Args:
        graph: Graph to search
        source: Start entity (name, alias or id)
        target: End entity
        max_depth: Maximum number of hops
        relationship_types: Only follow these edge types (None = all)
        min_strength: Only follow edges at least this strong

    Returns:
        EntityPath, or None if the target is unreachable within max_depth

    Raises:
        NotFoundError: Either endpoint does not resolve
    """
    source_id = graph.require(source)
    target_id = graph.require(target)
    if source_id == target_id:
        return EntityPath(entities=[graph.entity(source_id)], edges=[], strength=1.0, path_type="direct")

    allowed = _type_filter(relationship_types)
    parent: dict[str, RelationshipEdge | None] = {source_id: None}
    queue: deque[tuple[str, int]] = deque([(source_id, 0)])

    while queue:
        node_id, depth = queue.popleft()
        if depth >= max_depth:
            continue
        for edge in graph.edges_from(node_id):
            if edge.target in parent or not _passes(edge, allowed, min_strength):
                continue
            parent[edge.target] = edge
            if edge.target == target_id:
                return _build_path(graph, _trace(parent, target_id))
            queue.append((edge.target, depth + 1))

    return None


def _trace(parent: dict[str, RelationshipEdge | None], node_id: str) -> list[RelationshipEdge]:
    edges = []
    edge = parent[node_id]
    while edge is not None:
        edges.append(edge)
        edge = parent[edge.source]
    edges.reverse()
    return edges


def _build_path(graph: KnowledgeGraph, edges: list[RelationshipEdge]) -> EntityPath:
    nodes = [edges[0].source, *(e.target for e in edges)]
    strength = 1.0
    for edge in edges:
        strength *= edge.strength
    return EntityPath(
        entities=[graph.entity(n) for n in nodes],
        edges=edges,
        strength=strength / len(nodes),
        path_type=classify_path(edges),
    )


def classify_path(edges: Iterable[RelationshipEdge]) -> str:
    """
    Label a path by the relationship types it uses.

    Returns:
        "direct" for no edges, the type name when all edges share one type,
        "therapeutic" / "structural" for those edge families, else "mixed"
    """
    types = {e.type for e in edges}
    if not types:
        return "direct"
    if len(types) == 1:
        return next(iter(types)).value
    if types <= THERAPEUTIC_TYPES:
        return "therapeutic"
    if types <= STRUCTURAL_TYPES:
        return "structural"
    return "mixed"
