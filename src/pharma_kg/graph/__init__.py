"""
Drug relationship knowledge graph.

Provides:
- Entity and edge model with provenance
- Alias resolution and gated runtime updates
- Neighbourhood, shortest-path and combined queries
- Clustering and graph analytics
- Curated seed data
"""

from pharma_kg.graph.models import (
    Cluster,
    ClusterType,
    CompetitiveMapping,
    EdgeProperties,
    Entity,
    EntityKind,
    EntityPath,
    EntitySpec,
    GraphQueryResult,
    GraphStats,
    Provenance,
    RelatedEntity,
    RelationshipEdge,
    RelationshipType,
    UpdateResult,
    UpdateStatus,
    normalize_id,
)
from pharma_kg.graph.paths import classify_path
from pharma_kg.graph.seed import build_seed_graph, load_seed
from pharma_kg.graph.store import KnowledgeGraph

__all__ = [
    # Store
    "KnowledgeGraph",
    "build_seed_graph",
    "load_seed",
    # Model
    "Cluster",
    "ClusterType",
    "CompetitiveMapping",
    "EdgeProperties",
    "Entity",
    "EntityKind",
    "EntityPath",
    "EntitySpec",
    "GraphQueryResult",
    "GraphStats",
    "Provenance",
    "RelatedEntity",
    "RelationshipEdge",
    "RelationshipType",
    "UpdateResult",
    "UpdateStatus",
    "classify_path",
    "normalize_id",
]
