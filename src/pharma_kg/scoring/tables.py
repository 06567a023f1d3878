"""
Fixed lookup tables for relevance scoring.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum

from pharma_kg.errors import ValidationError
from pharma_kg.query.schemas import Intent


class RelevanceCategory(str, Enum):
    """Bucket a composite score falls into."""
    HIGHLY_RELEVANT = "highly_relevant"
    RELEVANT = "relevant"
    SOMEWHAT_RELEVANT = "somewhat_relevant"
    NOT_RELEVANT = "not_relevant"


@dataclass(frozen=True)
class ScoringWeights:
    """Per-factor weights; must sum to exactly 1.0."""
    drug: float = 0.30
    indication: float = 0.25
    phase: float = 0.20
    status: float = 0.15
    sponsor: float = 0.10

    def __post_init__(self):
        total = math.fsum(self.as_tuple())
        if total != 1.0:
            raise ValidationError(f"scoring weights must sum to 1.0, got {total}")
        if any(w < 0 for w in self.as_tuple()):
            raise ValidationError("scoring weights must be non-negative")

    def as_tuple(self) -> tuple[float, ...]:
        return (self.drug, self.indication, self.phase, self.status, self.sponsor)


DEFAULT_WEIGHTS = ScoringWeights()

NEUTRAL_SCORE = 50

# Drug factor
DRUG_EXACT = 100
DRUG_COMPETITOR = 70
DRUG_MECHANISM = 50
DRUG_UNRELATED = 20

# Indication factor
INDICATION_EXACT = 100
INDICATION_RELATED = 60
INDICATION_AREA = 40
INDICATION_UNRELATED = 10

# Sponsor factor
SPONSOR_USER_COMPANY = 100
SPONSOR_GOVERNMENT = 95
SPONSOR_MAJOR_PHARMA = 80
SPONSOR_ACADEMIC = 60
SPONSOR_OTHER = 40

# intent -> normalised phase -> (score, explanation)
PHASE_TABLE: dict[Intent, dict[str, tuple[int, str]]] = {
    Intent.COMPETITIVE_ANALYSIS: {
        "PHASE4": (90, "Late-stage development - high competitive relevance"),
        "PHASE3": (90, "Late-stage development - high competitive relevance"),
        "PHASE2": (70, "Mid-stage development - moderate competitive relevance"),
        "PHASE1": (40, "Early-stage development - lower competitive urgency"),
    },
    Intent.SAFETY_MONITORING: {
        "PHASE4": (100, "Post-market surveillance - highest safety relevance"),
        "PHASE3": (80, "Large-scale safety data available"),
        "PHASE2": (60, "Moderate safety data available"),
    },
    Intent.MARKET_RESEARCH: {
        "PHASE4": (85, "Near-market or marketed - high market relevance"),
        "PHASE3": (85, "Near-market or marketed - high market relevance"),
        "PHASE2": (60, "Potential future market entry"),
    },
    Intent.DRUG_DEVELOPMENT: {},
    Intent.GENERAL: {},
}

# intent -> normalised status -> (score, explanation)
STATUS_TABLE: dict[Intent, dict[str, tuple[int, str]]] = {
    Intent.COMPETITIVE_ANALYSIS: {
        "RECRUITING": (90, "Active development - immediate competitive concern"),
        "ACTIVE_NOT_RECRUITING": (90, "Active development - immediate competitive concern"),
        "COMPLETED": (80, "Recently completed - results may impact competition"),
        "NOT_YET_RECRUITING": (70, "Planned development - future competitive concern"),
        "TERMINATED": (30, "Development halted - reduced competitive threat"),
        "SUSPENDED": (30, "Development halted - reduced competitive threat"),
    },
    Intent.SAFETY_MONITORING: {
        "COMPLETED": (100, "Completed study - safety data available"),
        "TERMINATED": (90, "Halted study - potential safety signals"),
        "SUSPENDED": (90, "Halted study - potential safety signals"),
    },
    Intent.MARKET_RESEARCH: {},
    Intent.DRUG_DEVELOPMENT: {},
    Intent.GENERAL: {},
}

MAJOR_PHARMA = (
    "Roche",
    "Genentech",
    "Regeneron",
    "Novartis",
    "Bayer",
    "Johnson & Johnson",
    "Pfizer",
    "Merck",
    "Bristol Myers Squibb",
    "Bristol-Myers Squibb",
    "AbbVie",
    "Amgen",
)

GOVERNMENT_KEYWORDS = (
    "National Institutes of Health",
    "National Cancer Institute",
    "NIH",
    "NCI",
    "Veterans Affairs",
    "Department of Defense",
    "Ministry of Health",
    "Centers for Disease Control",
)

ACADEMIC_KEYWORDS = (
    "university",
    "hospital",
    "college",
    "medical center",
    "school of medicine",
)

CATEGORY_THRESHOLDS: tuple[tuple[int, RelevanceCategory], ...] = (
    (80, RelevanceCategory.HIGHLY_RELEVANT),
    (60, RelevanceCategory.RELEVANT),
    (40, RelevanceCategory.SOMEWHAT_RELEVANT),
)

CATEGORY_DESCRIPTIONS: dict[RelevanceCategory, str] = {
    RelevanceCategory.HIGHLY_RELEVANT: "This study is highly relevant to your query",
    RelevanceCategory.RELEVANT: "This study has good relevance to your query",
    RelevanceCategory.SOMEWHAT_RELEVANT: "This study has some relevance to your query",
    RelevanceCategory.NOT_RELEVANT: "This study has limited relevance to your query",
}


def categorize(score: int) -> RelevanceCategory:
    for threshold, category in CATEGORY_THRESHOLDS:
        if score >= threshold:
            return category
    return RelevanceCategory.NOT_RELEVANT


def normalize_phase(phase: str) -> str:
    """'Phase 3', 'phase_3' and 'PHASE3' all become 'PHASE3'."""
    return re.sub(r"[\s_]+", "", phase.upper())


def normalize_status(status: str) -> str:
    """'Active, not recruiting' becomes 'ACTIVE_NOT_RECRUITING'."""
    return re.sub(r"[^A-Z]+", "_", status.upper()).strip("_")
