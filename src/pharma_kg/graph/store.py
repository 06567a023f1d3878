"""
In-memory drug/indication knowledge graph.

Entities and edges live in dense lists addressed by integer index; the id
index, alias index, adjacency lists and competitive mappings all sit behind a
single re-entrant lock, so every public operation sees and leaves the graph in
a consistent state. The graph is append-only: nodes and edges are never
removed.
"""

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from pharma_kg.config import Settings
from pharma_kg.config import settings as default_settings
from pharma_kg.errors import NotFoundError, ValidationError
from pharma_kg.graph.clusters import compute_stats, find_clusters
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
    unique,
    utcnow,
)
from pharma_kg.graph.paths import related_to, shortest_path

logger = logging.getLogger(__name__)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def _more_specific(current: str | None, incoming: str | None) -> str | None:
    """Scalar merge rule: the longer non-empty value wins."""
    if incoming and (not current or len(incoming) > len(current)):
        return incoming
    return current


def coerce_spec(data: EntitySpec | Mapping[str, Any]) -> EntitySpec:
    """Build an EntitySpec, reporting shape errors as ValidationError."""
    if isinstance(data, EntitySpec):
        return data
    try:
        return EntitySpec.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(
            [f"{'.'.join(str(p) for p in err['loc']) or 'entity'}: {err['msg']}" for err in exc.errors()]
        ) from exc


class KnowledgeGraph:
    """
    Drug relationship knowledge graph.

    Usage:
        graph = KnowledgeGraph()
        graph.add_node(EntitySpec(name="Aspirin", mechanism="COX inhibitor", ...))
        graph.add_edge("Aspirin", "Ibuprofen", "similar_to", 0.8)
        graph.related_to("ASA", max_depth=1)
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or default_settings
        self._lock = threading.RLock()
        self._entities: list[Entity] = []
        self._index: dict[str, int] = {}  # entity id -> arena index
        self._edges: list[RelationshipEdge] = []
        self._edge_keys: dict[tuple[str, str, RelationshipType], int] = {}
        self._out: list[list[int]] = []  # arena index -> outgoing edge indices
        self._in: list[list[int]] = []  # arena index -> incoming edge indices
        self._aliases: dict[str, str] = {}  # lowercased name/alias -> entity id
        self._mappings: dict[tuple[str, str], CompetitiveMapping] = {}

    # -------------------------------------------------------------------------
    # Resolution and lookup
    # -------------------------------------------------------------------------

    def resolve(self, name_or_alias: str | None) -> str | None:
        """
        Resolve a name, alias or canonical id to a node id.

        Args:
            name_or_alias: Free-text name (case-insensitive)

        Returns:
            Canonical node id, or None if unknown
        """
        if not name_or_alias:
            return None
        key = name_or_alias.strip().lower()
        with self._lock:
            found = self._aliases.get(key)
            if found is None and key in self._index:
                found = key
            return found

    def require(self, name_or_alias: str) -> str:
        """Resolve or raise NotFoundError."""
        node_id = self.resolve(name_or_alias)
        if node_id is None:
            raise NotFoundError(name_or_alias)
        return node_id

    def entity(self, name_or_alias: str) -> Entity:
        """Get an entity by id, name or alias."""
        with self._lock:
            return self._entities[self._index[self.require(name_or_alias)]]

    def entities(self, kind: EntityKind | str | None = None) -> list[Entity]:
        """All entities in insertion order, optionally filtered by kind."""
        with self._lock:
            if kind is None:
                return list(self._entities)
            kind = EntityKind(kind)
            return [e for e in self._entities if e.kind == kind]

    def edges(self) -> list[RelationshipEdge]:
        """All edges in insertion order."""
        with self._lock:
            return list(self._edges)

    def edges_from(self, name_or_alias: str) -> list[RelationshipEdge]:
        """Outgoing edges of a node, in insertion order."""
        with self._lock:
            idx = self._index[self.require(name_or_alias)]
            return [self._edges[i] for i in self._out[idx]]

    def edges_to(self, name_or_alias: str) -> list[RelationshipEdge]:
        """Incoming edges of a node, in insertion order."""
        with self._lock:
            idx = self._index[self.require(name_or_alias)]
            return [self._edges[i] for i in self._in[idx]]

    def degree(self, name_or_alias: str) -> int:
        """Total (in + out) edge count of a node."""
        with self._lock:
            idx = self._index[self.require(name_or_alias)]
            return len(self._out[idx]) + len(self._in[idx])

    @property
    def node_count(self) -> int:
        return len(self._entities)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def __len__(self) -> int:
        return self.node_count

    def __contains__(self, name_or_alias: object) -> bool:
        return isinstance(name_or_alias, str) and self.resolve(name_or_alias) is not None

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add_node(
        self,
        spec: EntitySpec | Mapping[str, Any],
        sources: Iterable[str] | None = None,
        confidence: float = 0.8,
    ) -> str:
        """
        Add a drug or indication node.

        Args:
            spec: Entity description (EntitySpec or a mapping of its fields)
            sources: Provenance sources (defaults to "manual")
            confidence: Provenance confidence, clamped to [0, 1]

        Returns:
            The new node id

        Raises:
            ValidationError: Entity fails admission rules or its id already exists
        """
        spec = coerce_spec(spec)
        problems = spec.problems()
        if problems:
            raise ValidationError(problems)

        with self._lock:
            if spec.id in self._index:
                raise ValidationError(f"entity already exists: {spec.id}")
            provenance = Provenance(
                sources=unique(sources or ["manual"]),
                last_updated=utcnow(),
                confidence=_clamp(confidence),
            )
            entity = Entity(
                id=spec.id,
                name=spec.name,
                kind=spec.kind,
                aliases=[a for a in spec.aliases if a.lower() != spec.name.lower()],
                mechanism=spec.mechanism,
                therapeutic_areas=list(spec.therapeutic_areas),
                modality=spec.modality,
                company=spec.company,
                competitors=list(spec.competitors),
                provenance=provenance,
            )
            self._index[entity.id] = len(self._entities)
            self._entities.append(entity)
            self._out.append([])
            self._in.append([])
            self._index_names(entity)

        logger.debug(
            "Added %s node %s (%d aliases)", entity.kind.value, entity.id, len(entity.aliases)
        )
        return entity.id

    def add_edge(
        self,
        source: str,
        target: str,
        rel_type: RelationshipType | str,
        strength: float = 0.5,
        properties: EdgeProperties | Mapping[str, Any] | None = None,
        sources: Iterable[str] | None = None,
        confidence: float = 0.8,
    ) -> str:
        """
        Add a directed relationship between two nodes.

        Strength is clamped into [0, 1]. Adding an existing
        (source, target, type) edge is a no-op returning the existing id.

        Returns:
            Edge id

        Raises:
            NotFoundError: Either endpoint does not resolve
            ValidationError: Unknown relationship type or self-loop
        """
        try:
            rel_type = RelationshipType(rel_type)
        except ValueError as exc:
            raise ValidationError(f"unknown relationship type: {rel_type!r}") from exc

        with self._lock:
            source_id = self.require(source)
            target_id = self.require(target)
            if source_id == target_id:
                raise ValidationError(f"self-loop edges are not allowed: {source_id}")

            key = (source_id, target_id, rel_type)
            existing = self._edge_keys.get(key)
            if existing is not None:
                logger.debug("Duplicate edge ignored: %s", self._edges[existing].id)
                return self._edges[existing].id

            edge = RelationshipEdge(
                id=f"{source_id}_{rel_type.value}_{target_id}",
                source=source_id,
                target=target_id,
                type=rel_type,
                strength=_clamp(strength),
                properties=EdgeProperties.from_mapping(properties),
                provenance=Provenance(
                    sources=unique(sources or ["manual"]),
                    last_updated=utcnow(),
                    confidence=_clamp(confidence),
                ),
            )
            edge_idx = len(self._edges)
            self._edges.append(edge)
            self._edge_keys[key] = edge_idx
            self._out[self._index[source_id]].append(edge_idx)
            self._in[self._index[target_id]].append(edge_idx)

        logger.debug("Added edge %s (strength %.2f)", edge.id, edge.strength)
        return edge.id

    def set_competitive_mapping(
        self,
        drug: str,
        indication: str,
        direct: Iterable[str] = (),
        mechanism: Iterable[str] = (),
        therapeutic_area: Iterable[str] = (),
    ) -> CompetitiveMapping:
        """
        Register competitor tiers for a drug within an indication.

        Raises:
            NotFoundError: Any named drug or indication does not resolve
        """
        with self._lock:
            drug_id = self.require(drug)
            indication_id = self.require(indication)

            def tier(names: Iterable[str]) -> tuple[str, ...]:
                ids = (self.require(n) for n in names)
                return tuple(dict.fromkeys(i for i in ids if i != drug_id))

            mapping = CompetitiveMapping(
                drug_id=drug_id,
                indication_id=indication_id,
                direct=tier(direct),
                mechanism=tier(mechanism),
                therapeutic_area=tier(therapeutic_area),
            )
            self._mappings[(drug_id, indication_id)] = mapping
            return mapping

    def competitive_mapping(self, drug: str, indication: str) -> CompetitiveMapping | None:
        """Competitor tiers for a (drug, indication) pair, if registered."""
        drug_id = self.resolve(drug)
        indication_id = self.resolve(indication)
        if drug_id is None or indication_id is None:
            return None
        with self._lock:
            return self._mappings.get((drug_id, indication_id))

    def dynamic_update(
        self,
        data: EntitySpec | Mapping[str, Any],
        source: str,
        confidence: float,
    ) -> UpdateResult:
        """
        Apply a runtime knowledge update, gated by confidence.

        Updates below ``settings.update_confidence_threshold`` are logged and
        ignored. Accepted updates either create a new entity or merge into the
        existing one: list fields by order-preserving union, scalar fields by
        "longer/more specific wins". Only a name is required when merging.

        Args:
            data: Partial or complete entity description
            source: Name of the data source supplying the update
            confidence: Source confidence in [0, 1]

        Returns:
            UpdateResult describing what happened
        """
        threshold = self.settings.update_confidence_threshold
        name = data.name if isinstance(data, EntitySpec) else str(data.get("name", ""))

        if confidence < threshold:
            logger.warning(
                "Rejected update for %r from %s: confidence %.2f below threshold %.2f",
                name, source, confidence, threshold,
            )
            return UpdateResult(
                status=UpdateStatus.REJECTED_LOW_CONFIDENCE,
                message=f"confidence {confidence:.2f} below threshold {threshold:.2f}",
            )

        try:
            spec = coerce_spec(data)
        except ValidationError as exc:
            logger.warning("Rejected invalid update from %s: %s", source, exc)
            return UpdateResult(status=UpdateStatus.INVALID, message=str(exc), errors=exc.errors)

        with self._lock:
            existing_id = self.resolve(spec.name)
            if existing_id is None and spec.id in self._index:
                existing_id = spec.id

            if existing_id is None:
                problems = spec.problems()
                if problems:
                    logger.warning("Rejected invalid update from %s: %s", source, "; ".join(problems))
                    return UpdateResult(
                        status=UpdateStatus.INVALID, message="entity failed validation", errors=problems
                    )
                node_id = self.add_node(spec, sources=[source], confidence=confidence)
                logger.info("Created %s from %s (confidence %.2f)", node_id, source, confidence)
                return UpdateResult(status=UpdateStatus.CREATED, entity_id=node_id, message="entity created")

            idx = self._index[existing_id]
            merged = self._merge(self._entities[idx], spec, source, confidence)
            problems = merged.to_spec().problems()
            if len(spec.name) < 2:
                problems.insert(0, f"name must be at least 2 characters: {spec.name!r}")
            if problems:
                logger.warning("Rejected invalid update from %s: %s", source, "; ".join(problems))
                return UpdateResult(
                    status=UpdateStatus.INVALID,
                    entity_id=existing_id,
                    message="merged entity failed validation",
                    errors=problems,
                )

            self._entities[idx] = merged
            self._index_names(merged)

        logger.info("Merged update into %s from %s (confidence %.2f)", existing_id, source, confidence)
        return UpdateResult(status=UpdateStatus.MERGED, entity_id=existing_id, message="entity merged")

    def _merge(self, current: Entity, spec: EntitySpec, source: str, confidence: float) -> Entity:
        aliases = unique([*current.aliases, *spec.aliases, spec.name])
        return Entity(
            id=current.id,
            name=current.name,
            kind=current.kind,
            aliases=[a for a in aliases if a.lower() != current.name.lower()],
            mechanism=_more_specific(current.mechanism, spec.mechanism),
            therapeutic_areas=unique([*current.therapeutic_areas, *spec.therapeutic_areas]),
            modality=_more_specific(current.modality, spec.modality),
            company=_more_specific(current.company, spec.company),
            competitors=unique([*current.competitors, *spec.competitors]),
            provenance=Provenance(
                sources=unique([*current.provenance.sources, source]),
                last_updated=utcnow(),
                confidence=max(current.provenance.confidence, _clamp(confidence)),
            ),
        )

    def _index_names(self, entity: Entity) -> None:
        # Last write wins; a reassigned alias is logged because it silently
        # changes what an existing name resolves to.
        for name in entity.all_names():
            key = name.lower()
            previous = self._aliases.get(key)
            if previous is not None and previous != entity.id:
                logger.warning("Alias %r reassigned from %s to %s", name, previous, entity.id)
            self._aliases[key] = entity.id

    # -------------------------------------------------------------------------
    # Domain queries
    # -------------------------------------------------------------------------

    def competitors_of(self, name_or_alias: str, indication: str | None = None) -> list[str]:
        """
        Competitor ids for a drug.

        Uses the (drug, indication) competitive mapping when one exists,
        otherwise the drug's static competitor list.

        Returns:
            Ordered, de-duplicated competitor ids (never the drug itself)
        """
        with self._lock:
            drug_id = self.require(name_or_alias)
            mapping = self.competitive_mapping(drug_id, indication) if indication else None
            if mapping is not None:
                ids = mapping.all_competitors()
            else:
                ids = []
                for name in self.entity(drug_id).competitors:
                    competitor_id = self.resolve(name)
                    if competitor_id is None:
                        logger.debug("Static competitor %r of %s not in graph", name, drug_id)
                        continue
                    ids.append(competitor_id)
            return [i for i in dict.fromkeys(ids) if i != drug_id]

    def related_conditions(self, name_or_alias: str) -> list[str]:
        """Indication ids directly linked (either direction) to an indication."""
        with self._lock:
            entity = self.entity(name_or_alias)
            if entity.kind != EntityKind.INDICATION:
                return []
            linked = [e.target for e in self.edges_from(entity.id)]
            linked += [e.source for e in self.edges_to(entity.id)]
            return [
                node_id
                for node_id in dict.fromkeys(linked)
                if self._entities[self._index[node_id]].kind == EntityKind.INDICATION
            ]

    def related_to(
        self,
        name_or_alias: str,
        max_results: int | None = None,
        relationship_types: Iterable[RelationshipType | str] | None = None,
        min_strength: float | None = None,
        max_depth: int | None = None,
    ) -> list[RelatedEntity]:
        """Entities reachable from a node; see graph.paths.related_to."""
        with self._lock:
            return related_to(
                self,
                name_or_alias,
                max_results=self.settings.default_max_results if max_results is None else max_results,
                relationship_types=relationship_types,
                min_strength=self.settings.default_min_strength if min_strength is None else min_strength,
                max_depth=self.settings.default_max_depth if max_depth is None else max_depth,
            )

    def shortest_path(
        self,
        source: str,
        target: str,
        max_depth: int | None = None,
        relationship_types: Iterable[RelationshipType | str] | None = None,
        min_strength: float | None = None,
    ) -> EntityPath | None:
        """Minimum-hop path between two nodes; see graph.paths.shortest_path."""
        with self._lock:
            return shortest_path(
                self,
                source,
                target,
                max_depth=self.settings.path_max_depth if max_depth is None else max_depth,
                relationship_types=relationship_types,
                min_strength=self.settings.default_min_strength if min_strength is None else min_strength,
            )

    def query(
        self,
        start: str | None = None,
        end: str | None = None,
        relationship_types: Iterable[RelationshipType | str] | None = None,
        max_depth: int = 3,
        min_strength: float | None = None,
        exclude_kinds: Iterable[EntityKind | str] | None = None,
    ) -> GraphQueryResult:
        """
        Query the graph through a single entry point.

        Modes:
            start and end: shortest path between them
            start only: the start node plus its related entities
            neither: every node and every edge passing the filters

        Args:
            start: Start entity (name, alias or id)
            end: End entity; ignored without a start
            relationship_types: Only follow/return these edge types (None = all)
            max_depth: Maximum hops for path and neighbourhood searches
            min_strength: Only follow/return edges at least this strong
            exclude_kinds: Drop entities of these kinds, and edges touching
                them, from neighbourhood and full-graph results

        Returns:
            GraphQueryResult with de-duplicated entities and edges

        Raises:
            NotFoundError: start or end does not resolve
        """
        min_strength = self.settings.default_min_strength if min_strength is None else min_strength
        excluded = frozenset(EntityKind(k) for k in exclude_kinds or ())
        types = [RelationshipType(t) for t in relationship_types or ()]

        with self._lock:
            if start and end:
                path = self.shortest_path(start, end, max_depth, types or None, min_strength)
                result = GraphQueryResult()
                if path is not None:
                    result = GraphQueryResult(entities=list(path.entities), edges=list(path.edges), paths=[path])
            elif start:
                related = self.related_to(
                    start, relationship_types=types or None, min_strength=min_strength, max_depth=max_depth
                )
                kept = [r for r in related if r.entity.kind not in excluded]
                result = GraphQueryResult(
                    entities=[self.entity(start), *(r.entity for r in kept)],
                    edges=[r.edge for r in kept],
                )
            else:
                entities = [e for e in self._entities if e.kind not in excluded]
                kept_ids = {e.id for e in entities}
                edges = [
                    e
                    for e in self._edges
                    if (not types or e.type in types)
                    and e.strength >= min_strength
                    and e.source in kept_ids
                    and e.target in kept_ids
                ]
                result = GraphQueryResult(entities=entities, edges=edges)

        logger.info(
            "Graph query start=%s end=%s: %d nodes, %d edges, %d paths",
            start, end, len(result.entities), len(result.edges), len(result.paths),
        )
        return result

    def cluster(
        self,
        min_size: int = 3,
        max_clusters: int = 10,
        cluster_type: ClusterType | str = ClusterType.THERAPEUTIC,
        min_coherence: float = 0.5,
    ) -> list[Cluster]:
        """Connected clusters along one edge family; see graph.clusters."""
        with self._lock:
            return find_clusters(
                self,
                min_size=min_size,
                max_clusters=max_clusters,
                cluster_type=cluster_type,
                min_coherence=min_coherence,
            )

    def analytics(self) -> GraphStats:
        """Graph-wide statistics; see graph.clusters.compute_stats."""
        with self._lock:
            return compute_stats(self)

    def snapshot(self) -> dict:
        """Deep, comparable copy of all graph state."""
        with self._lock:
            return {
                "entities": [e.to_dict() for e in self._entities],
                "edges": [e.to_dict() for e in self._edges],
                "aliases": dict(sorted(self._aliases.items())),
                "mappings": [m.to_dict() for m in self._mappings.values()],
            }
