"""
Relevance scoring of study records.
"""

from pharma_kg.scoring.scorer import (
    RelevanceFactor,
    RelevanceScore,
    RelevanceScorer,
    ScoredRecord,
    TrialRecord,
)
from pharma_kg.scoring.tables import DEFAULT_WEIGHTS, RelevanceCategory, ScoringWeights

__all__ = [
    "RelevanceScorer",
    "RelevanceFactor",
    "RelevanceScore",
    "ScoredRecord",
    "TrialRecord",
    "RelevanceCategory",
    "ScoringWeights",
    "DEFAULT_WEIGHTS",
]
