"""
Search query enhancement.

Provides:
- Request/response schemas mirroring the ClinicalTrials.gov search contract
- Alias-OR expansion of drug and condition clauses
- Intent-driven filter and paging defaults
- Multi-strategy fan-out
"""

from pharma_kg.query.enhancer import QueryEnhancer, alias_clause
from pharma_kg.query.schemas import (
    EnhancedQuery,
    Intent,
    QueryExpansions,
    ScoringContext,
    SearchParams,
    SearchStrategy,
    SortSpec,
    StudyFilter,
    StudyQuery,
)

__all__ = [
    "QueryEnhancer",
    "alias_clause",
    "EnhancedQuery",
    "Intent",
    "QueryExpansions",
    "ScoringContext",
    "SearchParams",
    "SearchStrategy",
    "SortSpec",
    "StudyFilter",
    "StudyQuery",
]
