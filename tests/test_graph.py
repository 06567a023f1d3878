"""Tests for the knowledge graph store and seed data."""

import pytest

from pharma_kg.errors import NotFoundError, ValidationError
from pharma_kg.graph import EntityKind, EntitySpec, RelationshipType, normalize_id
from pharma_kg.graph.seed import SEED_DRUGS, SEED_INDICATIONS, SEED_RELATIONSHIPS


def _drug(name, **overrides):
    data = {
        "name": name,
        "mechanism": "Kinase inhibitor",
        "therapeutic_areas": ["oncology"],
        "company": "Acme Bio",
    }
    data.update(overrides)
    return EntitySpec(**data)


# ---------------------------------------------------------------------------
# Seed
# ---------------------------------------------------------------------------


class TestSeedGraph:
    """Tests for the curated seed."""

    def test_counts(self, seed_graph):
        """Test that every seed entity and edge is loaded."""
        assert seed_graph.node_count == len(SEED_DRUGS) + len(SEED_INDICATIONS)
        assert seed_graph.edge_count == len(SEED_RELATIONSHIPS)
        assert len(seed_graph.entities(EntityKind.DRUG)) == len(SEED_DRUGS)

    def test_every_alias_resolves_to_its_entity(self, seed_graph):
        """Test that resolve(alias) == resolve(name) for every alias."""
        for entity in seed_graph.entities():
            for alias in entity.aliases:
                assert seed_graph.resolve(alias) == seed_graph.resolve(entity.name) == entity.id

    def test_aspirin_outgoing_edges(self, seed_graph):
        """Test that Aspirin only links to Ibuprofen."""
        edges = seed_graph.edges_from("Aspirin")
        assert {e.target for e in edges} == {"ibuprofen"}
        assert {(e.type, e.strength) for e in edges} == {
            (RelationshipType.SIMILAR_TO, 0.8),
            (RelationshipType.ALTERNATIVE_TO, 0.7),
        }

    def test_seed_provenance(self, seed_graph):
        """Test that seed entities carry curated provenance."""
        entity = seed_graph.entity("Keytruda")
        assert entity.provenance.sources == ["curated_seed"]
        assert entity.provenance.confidence == 0.9


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class TestResolve:
    """Tests for alias resolution."""

    def test_case_and_whitespace_insensitive(self, seed_graph):
        """Test case-insensitive, trimmed lookup."""
        assert seed_graph.resolve("  ozempic ") == "semaglutide"
        assert seed_graph.resolve("KEYTRUDA") == "pembrolizumab"

    def test_synonym_and_mesh_heading(self, seed_graph):
        """Test indication synonyms and MeSH headings."""
        assert seed_graph.resolve("T2DM") == "type_2_diabetes"
        assert seed_graph.resolve("Diabetes Mellitus, Type 2") == "type_2_diabetes"

    def test_canonical_id(self, seed_graph):
        """Test that canonical ids resolve to themselves."""
        assert seed_graph.resolve("type_2_diabetes") == "type_2_diabetes"

    def test_unknown(self, seed_graph):
        """Test unknown and empty names."""
        assert seed_graph.resolve("Unknownium") is None
        assert seed_graph.resolve("") is None
        assert seed_graph.resolve(None) is None
        assert "Unknownium" not in seed_graph
        assert "Advil" in seed_graph

    def test_require_raises(self, seed_graph):
        """Test that require raises NotFoundError."""
        with pytest.raises(NotFoundError) as exc_info:
            seed_graph.require("Unknownium")
        assert exc_info.value.ref == "Unknownium"

    def test_normalize_id(self):
        """Test canonical id derivation."""
        assert normalize_id("Non-Small Cell Lung Cancer") == "non_small_cell_lung_cancer"
        assert normalize_id("  Type 2 Diabetes ") == "type_2_diabetes"


# ---------------------------------------------------------------------------
# Mutation
# ---------------------------------------------------------------------------


class TestAddNode:
    """Tests for add_node validation."""

    def test_add_and_resolve_alias(self, empty_graph):
        """Test that a node is indexed by name and aliases."""
        node_id = empty_graph.add_node(_drug("Zorblax", aliases=["ZX-101", "Zorblax"]))
        assert node_id == "zorblax"
        assert empty_graph.resolve("zx-101") == "zorblax"
        # The display name is not duplicated as an alias
        assert empty_graph.entity("zorblax").aliases == ["ZX-101"]

    def test_short_name(self, empty_graph):
        """Test that names under 2 characters are rejected."""
        with pytest.raises(ValidationError):
            empty_graph.add_node(_drug("Z"))

    def test_short_mechanism(self, empty_graph):
        """Test that drug mechanisms under 5 characters are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            empty_graph.add_node(_drug("Zorblax", mechanism="abc"))
        assert any("mechanism" in e for e in exc_info.value.errors)

    def test_missing_company(self, empty_graph):
        """Test that drugs need a company."""
        with pytest.raises(ValidationError) as exc_info:
            empty_graph.add_node(_drug("Zorblax", company="  "))
        assert any("company" in e for e in exc_info.value.errors)

    def test_empty_therapeutic_areas(self, empty_graph):
        """Test that at least one therapeutic area is required."""
        with pytest.raises(ValidationError):
            empty_graph.add_node(_drug("Zorblax", therapeutic_areas=[]))

    def test_all_problems_reported(self, empty_graph):
        """Test that every failed rule is reported at once."""
        with pytest.raises(ValidationError) as exc_info:
            empty_graph.add_node({"name": "Zorblax"})
        assert len(exc_info.value.errors) == 3

    def test_indication_needs_no_company(self, empty_graph):
        """Test relaxed rules for indications."""
        node_id = empty_graph.add_node(
            {"name": "Gout", "kind": "indication", "therapeutic_areas": ["rheumatology"]}
        )
        assert empty_graph.entity(node_id).kind == EntityKind.INDICATION

    def test_duplicate_id(self, empty_graph):
        """Test that an existing id cannot be added again."""
        empty_graph.add_node(_drug("Zorblax"))
        with pytest.raises(ValidationError):
            empty_graph.add_node(_drug("ZORBLAX"))


class TestAddEdge:
    """Tests for add_edge."""

    def test_unknown_endpoint(self, seed_graph):
        """Test that unresolved endpoints raise NotFoundError."""
        with pytest.raises(NotFoundError):
            seed_graph.add_edge("Aspirin", "Unknownium", "similar_to", 0.5)

    def test_self_loop(self, seed_graph):
        """Test that self-loops are rejected."""
        with pytest.raises(ValidationError):
            seed_graph.add_edge("Aspirin", "ASA", "similar_to", 0.5)

    def test_unknown_type(self, seed_graph):
        """Test that unknown relationship types are rejected."""
        with pytest.raises(ValidationError):
            seed_graph.add_edge("Aspirin", "Naproxen", "likes", 0.5)

    def test_strength_clamped(self, seed_graph):
        """Test that out-of-range strengths are clamped, not rejected."""
        seed_graph.add_edge("Aspirin", "Naproxen", "similar_to", 1.7)
        seed_graph.add_edge("Aspirin", "Acetaminophen", "similar_to", -0.2)
        strengths = {e.target: e.strength for e in seed_graph.edges_from("Aspirin")
                     if e.type == RelationshipType.SIMILAR_TO}
        assert strengths["naproxen"] == 1.0
        assert strengths["acetaminophen"] == 0.0

    def test_duplicate_is_noop(self, seed_graph):
        """Test that a duplicate (source, target, type) edge is ignored."""
        before = seed_graph.edge_count
        edge_id = seed_graph.add_edge("ASA", "Advil", "similar_to", 0.1)
        assert edge_id == "aspirin_similar_to_ibuprofen"
        assert seed_graph.edge_count == before
        assert seed_graph.edges_from("Aspirin")[0].strength == 0.8

    def test_properties(self, seed_graph):
        """Test typed edge properties with an extension map."""
        seed_graph.add_edge(
            "Naproxen", "Fever", "treats", 0.6,
            properties={"reason": "antipyretic", "evidence_level": "A", "label": "OTC"},
        )
        edge = seed_graph.edges_to("Fever")[-1]
        assert edge.properties.rationale == "antipyretic"
        assert edge.properties.evidence_level == "A"
        assert edge.properties.extra == {"label": "OTC"}


# ---------------------------------------------------------------------------
# Domain queries
# ---------------------------------------------------------------------------


class TestCompetitors:
    """Tests for competitors_of."""

    def test_mapping_union_in_tier_order(self, seed_graph):
        """Test that the competitive mapping tiers are unioned."""
        assert seed_graph.competitors_of("Ozempic", "T2DM") == [
            "tirzepatide",
            "dulaglutide",
            "liraglutide",
            "empagliflozin",
            "sitagliptin",
            "metformin",
        ]

    def test_static_fallback(self, seed_graph):
        """Test fallback to the static competitor list."""
        assert seed_graph.competitors_of("Semaglutide") == ["tirzepatide", "liraglutide", "dulaglutide"]

    def test_fallback_when_no_mapping_for_indication(self, seed_graph):
        """Test fallback when the indication has no mapping."""
        assert seed_graph.competitors_of("Ibuprofen", "Pain") == ["naproxen", "acetaminophen", "aspirin"]

    def test_never_contains_self(self, seed_graph):
        """Test that a drug is never its own competitor."""
        for drug in seed_graph.entities(EntityKind.DRUG):
            assert drug.id not in seed_graph.competitors_of(drug.id)

    def test_no_competitors(self, seed_graph):
        assert seed_graph.competitors_of("Lisinopril") == []

    def test_unknown_drug(self, seed_graph):
        with pytest.raises(NotFoundError):
            seed_graph.competitors_of("Unknownium")


class TestRelatedConditions:
    """Tests for related_conditions."""

    def test_adjacent_indications(self, seed_graph):
        """Test indications linked in either direction."""
        assert set(seed_graph.related_conditions("T2DM")) == {"obesity", "diabetic_macular_edema"}

    def test_drug_has_none(self, seed_graph):
        assert seed_graph.related_conditions("Aspirin") == []


class TestRelatedTo:
    """Tests for related_to."""

    def test_aspirin_depth_one(self, seed_graph):
        """Test the single strongest Ibuprofen link at depth 1."""
        results = seed_graph.related_to(seed_graph.resolve("Aspirin"), max_depth=1)
        assert [(r.entity.id, r.distance, r.strength) for r in results] == [("ibuprofen", 1, 0.8)]

    def test_depth_two_ranking(self, seed_graph):
        """Test ranking by strength / (distance + 1)."""
        results = seed_graph.related_to("Aspirin", max_depth=2)
        assert [r.entity.id for r in results] == [
            "ibuprofen",
            "pain",
            "naproxen",
            "inflammation",
            "fever",
            "acetaminophen",
        ]

    def test_never_includes_origin(self, seed_graph):
        """Test that the origin is excluded even on cyclic graphs."""
        for entity in seed_graph.entities():
            results = seed_graph.related_to(entity.id, max_depth=4, max_results=100)
            assert entity.id not in {r.entity.id for r in results}
            assert len({r.entity.id for r in results}) == len(results)

    def test_type_filter(self, seed_graph):
        """Test relationship type filtering."""
        results = seed_graph.related_to("Aspirin", max_depth=1, relationship_types=["alternative_to"])
        assert [(r.entity.id, r.strength) for r in results] == [("ibuprofen", 0.7)]

    def test_min_strength(self, seed_graph):
        assert seed_graph.related_to("Aspirin", max_depth=1, min_strength=0.9) == []

    def test_max_results(self, seed_graph):
        results = seed_graph.related_to("Aspirin", max_depth=2, max_results=2)
        assert [r.entity.id for r in results] == ["ibuprofen", "pain"]

    def test_zero_depth(self, seed_graph):
        assert seed_graph.related_to("Aspirin", max_depth=0) == []

    def test_unknown_origin(self, seed_graph):
        with pytest.raises(NotFoundError):
            seed_graph.related_to("Unknownium")

    def test_to_dict(self, seed_graph):
        result = seed_graph.related_to("Aspirin", max_depth=1)[0].to_dict()
        assert result["relationship"] == "similar_to"
        assert result["rank_score"] == 0.4


class TestQuery:
    """Tests for KnowledgeGraph.query."""

    def test_path_mode(self, seed_graph):
        result = seed_graph.query(start="Obesity", end="DME")
        assert len(result.paths) == 1
        assert [e.id for e in result.entities] == ["obesity", "type_2_diabetes", "diabetic_macular_edema"]
        assert [e.type for e in result.edges] == [RelationshipType.CAUSES, RelationshipType.CAUSES]

    def test_path_mode_unreachable(self, seed_graph):
        result = seed_graph.query(start="DME", end="Obesity")
        assert result.paths == []
        assert result.entities == []
        assert result.edges == []

    def test_neighbourhood_mode(self, seed_graph):
        """Test the start node followed by its ranked neighbours."""
        result = seed_graph.query(start="Advil", max_depth=1)
        assert [e.id for e in result.entities] == [
            "ibuprofen", "pain", "naproxen", "inflammation", "fever", "acetaminophen",
        ]
        assert len(result.edges) == 5
        assert result.paths == []

    def test_neighbourhood_excludes_kinds(self, seed_graph):
        result = seed_graph.query(start="Ibuprofen", max_depth=1, exclude_kinds=["drug"])
        assert [e.id for e in result.entities] == ["ibuprofen", "pain", "inflammation", "fever"]
        assert {e.type for e in result.edges} == {RelationshipType.TREATS}

    def test_full_graph_mode(self, seed_graph):
        result = seed_graph.query()
        assert len(result.entities) == seed_graph.node_count
        assert len(result.edges) == len(SEED_RELATIONSHIPS)

    def test_full_graph_filters(self, seed_graph):
        """Test kind exclusion drops touching edges, and the type filter applies."""
        indications_only = seed_graph.query(exclude_kinds=[EntityKind.DRUG])
        assert len(indications_only.entities) == len(SEED_INDICATIONS)
        assert len(indications_only.edges) == 5

        causes = seed_graph.query(relationship_types=["causes"], exclude_kinds=["drug"])
        assert len(causes.edges) == 4
        assert all(e.type == RelationshipType.CAUSES for e in causes.edges)

        assert seed_graph.query(min_strength=0.99).edges == []

    def test_unknown_start(self, seed_graph):
        with pytest.raises(NotFoundError):
            seed_graph.query(start="Unknownium")

    def test_to_dict(self, seed_graph):
        data = seed_graph.query(start="Obesity", end="DME").to_dict()
        assert set(data) == {"nodes", "edges", "paths"}
        assert data["paths"][0]["distance"] == 2
