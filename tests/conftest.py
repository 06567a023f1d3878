"""Pytest configuration and fixtures."""

import pytest

from pharma_kg.config import Settings
from pharma_kg.graph import EntityKind, EntitySpec, KnowledgeGraph, build_seed_graph


def make_graph(node_ids, edges, settings: Settings | None = None) -> KnowledgeGraph:
    """
    Build a small synthetic graph.

    Nodes are indications (no mechanism/company needed) named by their ids.

    Args:
        node_ids: Node names, at least 2 characters each
        edges: (source, target, type, strength) tuples
    """
    graph = KnowledgeGraph(settings)
    for node_id in node_ids:
        graph.add_node(EntitySpec(name=node_id, kind=EntityKind.INDICATION, therapeutic_areas=["test"]))
    for source, target, rel_type, strength in edges:
        graph.add_edge(source, target, rel_type, strength)
    return graph


@pytest.fixture
def seed_graph() -> KnowledgeGraph:
    """Fresh curated seed graph (tests may mutate it)."""
    return build_seed_graph()


@pytest.fixture
def empty_graph() -> KnowledgeGraph:
    return KnowledgeGraph()


@pytest.fixture
def chain_graph() -> KnowledgeGraph:
    """aa -> bb -> cc plus an isolated dd."""
    return make_graph(
        ["aa", "bb", "cc", "dd"],
        [
            ("aa", "bb", "treats", 0.8),
            ("bb", "cc", "treats", 0.5),
        ],
    )
