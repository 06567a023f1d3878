"""
Knowledge graph data model.

Entities (drugs and indications), typed weighted edges, competitive mappings,
and the structured results returned by graph queries.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class EntityKind(str, Enum):
    """Kind of graph node."""
    DRUG = "drug"
    INDICATION = "indication"


class RelationshipType(str, Enum):
    """Directed relationship between two entities."""
    CONTAINS = "contains"                          # Drug contains ingredient
    SIMILAR_TO = "similar_to"                      # Similar mechanism/structure
    INTERACTS_WITH = "interacts_with"              # Drug-drug interaction
    TREATS = "treats"                              # Drug treats condition
    CAUSES = "causes"                              # Drug causes condition
    METABOLIZED_BY = "metabolized_by"              # Metabolic pathway
    CONTRAINDICATED_WITH = "contraindicated_with"
    ALTERNATIVE_TO = "alternative_to"              # Alternative treatment
    PRECURSOR_TO = "precursor_to"                  # Chemical precursor
    DERIVED_FROM = "derived_from"                  # Chemical derivation
    COMPETES_WITH = "competes_with"                # Market competition
    COMBINED_WITH = "combined_with"                # Combination therapy


class ClusterType(str, Enum):
    """Which edge family a cluster is grown along."""
    THERAPEUTIC = "therapeutic"
    MECHANISM = "mechanism"
    STRUCTURE = "structure"
    INDICATION = "indication"


class UpdateStatus(str, Enum):
    """Outcome of a dynamic knowledge update."""
    CREATED = "created"
    MERGED = "merged"
    REJECTED_LOW_CONFIDENCE = "rejected_low_confidence"
    INVALID = "invalid"


def normalize_id(name: str) -> str:
    """Derive a canonical node id from a display name."""
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def unique(values) -> list[str]:
    """De-duplicate strings case-insensitively, keeping first spelling and order."""
    seen: set[str] = set()
    result = []
    for value in values:
        value = value.strip()
        key = value.lower()
        if value and key not in seen:
            seen.add(key)
            result.append(value)
    return result


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Provenance:
    """Where a node or edge came from and how much it is trusted."""
    sources: list[str] = field(default_factory=lambda: ["seed"])
    last_updated: datetime = field(default_factory=utcnow)
    confidence: float = 0.8

    def to_dict(self) -> dict:
        return {
            "sources": list(self.sources),
            "last_updated": self.last_updated.isoformat(),
            "confidence": self.confidence,
        }


class EntitySpec(BaseModel):
    """Input shape for creating or updating an entity."""
    name: str
    kind: EntityKind = EntityKind.DRUG
    aliases: list[str] = Field(default_factory=list)
    mechanism: str | None = None
    therapeutic_areas: list[str] = Field(default_factory=list)
    modality: str | None = None
    company: str | None = None
    competitors: list[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        return value.strip()

    @field_validator("aliases", "therapeutic_areas", "competitors")
    @classmethod
    def _dedupe(cls, values: list[str]) -> list[str]:
        return unique(values)

    @field_validator("mechanism", "modality", "company")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None

    @property
    def id(self) -> str:
        return normalize_id(self.name)

    def problems(self) -> list[str]:
        """
        Check the entity against graph admission rules.

        Drugs need a mechanism of action and a developing company; indications
        do not. Every entity needs a name and at least one therapeutic area.

        Returns:
            Human-readable problems, empty when the entity is valid
        """
        errors = []
        if len(self.name) < 2:
            errors.append(f"name must be at least 2 characters: {self.name!r}")
        elif not self.id:
            errors.append(f"name has no alphanumeric characters: {self.name!r}")
        if not self.therapeutic_areas:
            errors.append(f"{self.name}: at least one therapeutic area is required")
        if self.kind == EntityKind.DRUG:
            if len(self.mechanism or "") < 5:
                errors.append(f"{self.name}: mechanism must be at least 5 characters")
            if not self.company:
                errors.append(f"{self.name}: developer/company is required")
        return errors


@dataclass
class Entity:
    """Graph node: a drug or an indication."""
    id: str
    name: str
    kind: EntityKind
    aliases: list[str] = field(default_factory=list)
    mechanism: str | None = None
    therapeutic_areas: list[str] = field(default_factory=list)
    modality: str | None = None
    company: str | None = None
    competitors: list[str] = field(default_factory=list)
    provenance: Provenance = field(default_factory=Provenance)

    def all_names(self) -> list[str]:
        """Display name followed by every alias."""
        return unique([self.name, *self.aliases])

    def to_spec(self) -> EntitySpec:
        return EntitySpec(
            name=self.name,
            kind=self.kind,
            aliases=list(self.aliases),
            mechanism=self.mechanism,
            therapeutic_areas=list(self.therapeutic_areas),
            modality=self.modality,
            company=self.company,
            competitors=list(self.competitors),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "kind": self.kind.value,
            "aliases": list(self.aliases),
            "mechanism": self.mechanism,
            "therapeutic_areas": list(self.therapeutic_areas),
            "modality": self.modality,
            "company": self.company,
            "competitors": list(self.competitors),
            "provenance": self.provenance.to_dict(),
        }


@dataclass(frozen=True)
class EdgeProperties:
    """Edge properties: well-known fields plus an open extension map."""
    rationale: str | None = None
    evidence_level: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, props: "dict[str, Any] | EdgeProperties | None") -> "EdgeProperties":
        if props is None:
            return cls()
        if isinstance(props, EdgeProperties):
            return props
        props = dict(props)
        rationale = props.pop("rationale", None) or props.pop("reason", None)
        evidence_level = props.pop("evidence_level", None)
        return cls(rationale=rationale, evidence_level=evidence_level, extra=props)

    def to_dict(self) -> dict:
        data = dict(self.extra)
        if self.rationale is not None:
            data["rationale"] = self.rationale
        if self.evidence_level is not None:
            data["evidence_level"] = self.evidence_level
        return data


@dataclass
class RelationshipEdge:
    """Directed, typed, weighted edge."""
    id: str
    source: str
    target: str
    type: RelationshipType
    strength: float
    properties: EdgeProperties = field(default_factory=EdgeProperties)
    provenance: Provenance = field(default_factory=Provenance)

    @property
    def key(self) -> tuple[str, str, RelationshipType]:
        return (self.source, self.target, self.type)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "type": self.type.value,
            "strength": self.strength,
            "properties": self.properties.to_dict(),
            "provenance": self.provenance.to_dict(),
        }


@dataclass(frozen=True)
class CompetitiveMapping:
    """Precomputed competitor tiers for a drug within one indication."""
    drug_id: str
    indication_id: str
    direct: tuple[str, ...] = ()
    mechanism: tuple[str, ...] = ()
    therapeutic_area: tuple[str, ...] = ()

    def all_competitors(self) -> list[str]:
        """Union of the three tiers, in tier order."""
        return list(dict.fromkeys([*self.direct, *self.mechanism, *self.therapeutic_area]))

    def to_dict(self) -> dict:
        return {
            "drug_id": self.drug_id,
            "indication_id": self.indication_id,
            "direct": list(self.direct),
            "mechanism": list(self.mechanism),
            "therapeutic_area": list(self.therapeutic_area),
        }


# ---------------------------------------------------------------------------
# Query results
# ---------------------------------------------------------------------------


@dataclass
class RelatedEntity:
    """Entity reached from a traversal origin."""
    entity: Entity
    edge: RelationshipEdge
    distance: int

    @property
    def strength(self) -> float:
        return self.edge.strength

    @property
    def rank_score(self) -> float:
        return self.edge.strength / (self.distance + 1)

    def to_dict(self) -> dict:
        return {
            "id": self.entity.id,
            "name": self.entity.name,
            "relationship": self.edge.type.value,
            "strength": self.edge.strength,
            "distance": self.distance,
            "rank_score": round(self.rank_score, 4),
        }


@dataclass
class EntityPath:
    """Path between two entities."""
    entities: list[Entity] = field(default_factory=list)
    edges: list[RelationshipEdge] = field(default_factory=list)
    strength: float = 1.0
    path_type: str = "direct"

    @property
    def distance(self) -> int:
        return len(self.edges)

    def __str__(self) -> str:
        parts = [self.entities[0].name] if self.entities else []
        for edge, entity in zip(self.edges, self.entities[1:]):
            parts.append(f" --[{edge.type.value}]--> {entity.name}")
        return "".join(parts)

    def to_dict(self) -> dict:
        return {
            "path": [e.id for e in self.entities],
            "edges": [e.type.value for e in self.edges],
            "distance": self.distance,
            "strength": self.strength,
            "path_type": self.path_type,
        }


@dataclass
class GraphQueryResult:
    """Nodes, edges and paths returned by KnowledgeGraph.query."""
    entities: list[Entity] = field(default_factory=list)
    edges: list[RelationshipEdge] = field(default_factory=list)
    paths: list[EntityPath] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "nodes": [e.to_dict() for e in self.entities],
            "edges": [e.to_dict() for e in self.edges],
            "paths": [p.to_dict() for p in self.paths],
        }


@dataclass
class Cluster:
    """Group of entities connected by one edge family."""
    id: str
    name: str
    members: list[str]
    center: str
    cluster_type: ClusterType
    coherence: float

    @property
    def size(self) -> int:
        return len(self.members)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "members": list(self.members),
            "center": self.center,
            "cluster_type": self.cluster_type.value,
            "coherence": self.coherence,
            "size": self.size,
        }


@dataclass
class GraphStats:
    """Graph-wide analytics."""
    total_nodes: int
    total_edges: int
    average_degree: float
    density: float
    connected_components: int
    hubs: list[str] = field(default_factory=list)
    bridges: list[str] = field(default_factory=list)
    clusters: list[Cluster] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "total_nodes": self.total_nodes,
            "total_edges": self.total_edges,
            "average_degree": self.average_degree,
            "density": self.density,
            "connected_components": self.connected_components,
            "hubs": list(self.hubs),
            "bridges": list(self.bridges),
            "clusters": [c.to_dict() for c in self.clusters],
        }


@dataclass
class UpdateResult:
    """Outcome of KnowledgeGraph.dynamic_update."""
    status: UpdateStatus
    entity_id: str | None = None
    message: str = ""
    errors: list[str] = field(default_factory=list)

    @property
    def applied(self) -> bool:
        return self.status in (UpdateStatus.CREATED, UpdateStatus.MERGED)

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "applied": self.applied,
            "entity_id": self.entity_id,
            "message": self.message,
            "errors": list(self.errors),
        }
