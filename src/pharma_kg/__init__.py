"""
pharma_kg: Pharmaceutical search intelligence

Expands drug/indication search queries with domain knowledge and ranks
clinical records by clinical and commercial relevance:

    SearchParams → QueryEnhancer → (external search) → RelevanceScorer → ranked records

Core constraints:
- In-memory, pure Python (no I/O at runtime)
- Knowledge graph rebuilt from a curated seed at process start
- Deterministic expansion and scoring (pattern and dictionary based, no ML)
"""

from pharma_kg.errors import NotFoundError, PharmaKGError, ValidationError
from pharma_kg.graph import KnowledgeGraph, build_seed_graph
from pharma_kg.query import QueryEnhancer
from pharma_kg.scoring import RelevanceScorer

__version__ = "0.1.0"

__all__ = [
    "KnowledgeGraph",
    "build_seed_graph",
    "QueryEnhancer",
    "RelevanceScorer",
    "PharmaKGError",
    "ValidationError",
    "NotFoundError",
]
