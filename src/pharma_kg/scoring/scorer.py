"""
Multi-factor relevance scoring of study records.

Each record is scored on five independent factors, combined as

    score = round_half_up(sum(factor score x factor weight))

and bucketed into a relevance category. Scoring is a pure function of
(record, context, graph state): no randomness, no caching.
"""

import logging
import math
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from pharma_kg.errors import ValidationError
from pharma_kg.graph.store import KnowledgeGraph
from pharma_kg.query.enhancer import coerce_context
from pharma_kg.query.schemas import ScoringContext
from pharma_kg.scoring import tables
from pharma_kg.scoring.tables import RelevanceCategory, ScoringWeights

logger = logging.getLogger(__name__)


class TrialRecord(BaseModel):
    """Minimal projection of a study record needed for scoring."""
    model_config = ConfigDict(populate_by_name=True)

    interventions: list[str] = Field(default_factory=list)
    conditions: list[str] = Field(default_factory=list)
    phases: list[str] = Field(default_factory=list)
    status: str = ""
    sponsor_name: str = Field("", alias="sponsorName")
    title: str | None = None
    nct_id: str | None = Field(None, alias="nctId")

    @classmethod
    def from_study(cls, study: Mapping[str, Any]) -> "TrialRecord":
        """
        Project a ClinicalTrials.gov v2 study document.

        Args:
            study: Study JSON with a ``protocolSection``

        Returns:
            TrialRecord with missing modules left empty
        """
        protocol = study.get("protocolSection", {})
        ident = protocol.get("identificationModule", {})
        sponsors = protocol.get("sponsorCollaboratorsModule", {})
        return cls(
            interventions=[
                i["name"]
                for i in protocol.get("interventionsModule", {}).get("interventions", [])
                if i.get("name")
            ],
            conditions=protocol.get("conditionsModule", {}).get("conditions", []),
            phases=protocol.get("designModule", {}).get("phases", []),
            status=protocol.get("statusModule", {}).get("overallStatus", ""),
            sponsor_name=sponsors.get("leadSponsor", {}).get("name", ""),
            title=ident.get("briefTitle"),
            nct_id=ident.get("nctId"),
        )

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass
class RelevanceFactor:
    """One weighted component of a relevance score."""
    factor: str
    weight: float
    score: int
    explanation: str

    @property
    def contribution(self) -> float:
        return self.score * self.weight

    def to_dict(self) -> dict:
        return {
            "factor": self.factor,
            "weight": self.weight,
            "score": self.score,
            "contribution": round(self.contribution, 4),
            "explanation": self.explanation,
        }


@dataclass
class RelevanceScore:
    """Composite score with its factor breakdown."""
    score: int
    category: RelevanceCategory
    explanation: str
    factors: list[RelevanceFactor] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "factors": [f.to_dict() for f in self.factors],
            "category": self.category.value,
            "explanation": self.explanation,
        }


@dataclass
class ScoredRecord:
    record: TrialRecord
    relevance_score: RelevanceScore

    @property
    def score(self) -> int:
        return self.relevance_score.score

    def to_dict(self) -> dict:
        return {
            "record": self.record.to_dict(),
            "relevanceScore": self.relevance_score.to_dict(),
        }


@lru_cache(maxsize=1024)
def _term_pattern(term: str) -> re.Pattern:
    return re.compile(r"(?<![A-Za-z0-9])" + re.escape(term) + r"(?![A-Za-z0-9])", re.IGNORECASE)


def mentions(text: str, term: str) -> bool:
    """Case-insensitive whole-word containment."""
    term = term.strip()
    return bool(term) and _term_pattern(term).search(text) is not None


def first_mention(texts: Iterable[str], terms: Iterable[str]) -> str | None:
    """The first term mentioned by any text, or None."""
    texts = list(texts)
    for term in terms:
        if any(mentions(text, term) for text in texts):
            return term
    return None


def coerce_record(record: TrialRecord | Mapping[str, Any]) -> TrialRecord:
    if isinstance(record, TrialRecord):
        return record
    try:
        if "protocolSection" in record:
            return TrialRecord.from_study(record)
        return TrialRecord.model_validate(record)
    except PydanticValidationError as exc:
        raise ValidationError([f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]) from exc


class RelevanceScorer:
    """
    Rank study records by clinical and commercial relevance.

    Factors and default weights:
        drug/intervention 0.30, indication/condition 0.25, phase 0.20,
        status 0.15, sponsor 0.10

    Usage:
        scorer = RelevanceScorer(build_seed_graph())
        ranked = scorer.score_all(records, {"primaryDrug": "Keytruda",
                                            "intent": "competitive_analysis"})
    """

    def __init__(self, graph: KnowledgeGraph, weights: ScoringWeights | None = None):
        self.graph = graph
        self.weights = weights or tables.DEFAULT_WEIGHTS

    def score(
        self,
        record: TrialRecord | Mapping[str, Any],
        context: ScoringContext | Mapping[str, Any] | None = None,
    ) -> RelevanceScore:
        """
        Score one record.

        Args:
            record: TrialRecord, its camelCase mapping, or a raw
                ClinicalTrials.gov study document
            context: Scoring context (defaults to general intent)

        Returns:
            RelevanceScore with score in [0, 100]

        Raises:
            ValidationError: record or context are malformed
        """
        record = coerce_record(record)
        context = coerce_context(context)

        factors = [
            self._drug_factor(record, context),
            self._indication_factor(record, context),
            self._phase_factor(record, context),
            self._status_factor(record, context),
            self._sponsor_factor(record, context),
        ]
        total = math.fsum(f.contribution for f in factors)
        score = max(0, min(100, math.floor(total + 0.5)))
        category = tables.categorize(score)

        return RelevanceScore(
            score=score,
            category=category,
            explanation=self._explain(factors, category),
            factors=factors,
        )

    def score_all(
        self,
        records: Iterable[TrialRecord | Mapping[str, Any]],
        context: ScoringContext | Mapping[str, Any] | None = None,
    ) -> list[ScoredRecord]:
        """
        Score records and rank them, highest score first.

        The ranking is stable: records with equal scores keep their input
        order.
        """
        context = coerce_context(context)
        scored = []
        for record in records:
            record = coerce_record(record)
            scored.append(ScoredRecord(record=record, relevance_score=self.score(record, context)))

        ranked = [
            item for _, item in sorted(enumerate(scored), key=lambda pair: (-pair[1].score, pair[0]))
        ]
        logger.debug("Scored %d records (intent=%s)", len(ranked), context.intent.value)
        return ranked

    # -------------------------------------------------------------------------
    # Factors
    # -------------------------------------------------------------------------

    def _drug_factor(self, record: TrialRecord, context: ScoringContext) -> RelevanceFactor:
        weight = self.weights.drug
        primary = context.primary_drug
        if not primary:
            return RelevanceFactor("drug", weight, tables.NEUTRAL_SCORE, "No primary drug specified for comparison")

        texts = list(record.interventions)
        if record.title:
            texts.append(record.title)

        drug_id = self.graph.resolve(primary)
        names = self.graph.entity(drug_id).all_names() if drug_id else [primary]
        if first_mention(texts, names):
            return RelevanceFactor("drug", weight, tables.DRUG_EXACT, f"Direct match with {primary}")

        if drug_id is None:
            return RelevanceFactor("drug", weight, tables.DRUG_UNRELATED, "No clear drug relationship")

        for competitor_id in self.graph.competitors_of(drug_id, context.primary_indication):
            competitor = self.graph.entity(competitor_id)
            if first_mention(texts, competitor.all_names()):
                return RelevanceFactor(
                    "drug", weight, tables.DRUG_COMPETITOR, f"Contains competitive drug {competitor.name}"
                )

        mechanism = self.graph.entity(drug_id).mechanism
        if mechanism and self._shares_mechanism(record.interventions, texts, drug_id, mechanism):
            return RelevanceFactor("drug", weight, tables.DRUG_MECHANISM, f"Same mechanism of action ({mechanism})")

        return RelevanceFactor("drug", weight, tables.DRUG_UNRELATED, "Different therapeutic approach")

    def _shares_mechanism(
        self, interventions: list[str], texts: list[str], drug_id: str, mechanism: str
    ) -> bool:
        for intervention in interventions:
            other_id = self.graph.resolve(intervention)
            if other_id is None or other_id == drug_id:
                continue
            other = self.graph.entity(other_id).mechanism
            if other and other.lower() == mechanism.lower():
                return True
        return first_mention(texts, [mechanism]) is not None

    def _indication_factor(self, record: TrialRecord, context: ScoringContext) -> RelevanceFactor:
        weight = self.weights.indication
        primary = context.primary_indication
        if not primary:
            return RelevanceFactor(
                "indication", weight, tables.NEUTRAL_SCORE, "No primary indication specified for comparison"
            )

        conditions = record.conditions
        indication_id = self.graph.resolve(primary)
        names = self.graph.entity(indication_id).all_names() if indication_id else [primary]
        if first_mention(conditions, names):
            return RelevanceFactor("indication", weight, tables.INDICATION_EXACT, f"Direct match with {primary}")

        if indication_id is None:
            return RelevanceFactor("indication", weight, tables.INDICATION_UNRELATED, "Unclear indication relationship")

        for related_id in self.graph.related_conditions(indication_id):
            related = self.graph.entity(related_id)
            if first_mention(conditions, related.all_names()):
                return RelevanceFactor(
                    "indication", weight, tables.INDICATION_RELATED, f"Related indication match ({related.name})"
                )

        areas = self.graph.entity(indication_id).therapeutic_areas
        if self._shares_area(conditions, areas):
            return RelevanceFactor("indication", weight, tables.INDICATION_AREA, "Same therapeutic area")

        return RelevanceFactor("indication", weight, tables.INDICATION_UNRELATED, "Different therapeutic area")

    def _shares_area(self, conditions: list[str], areas: list[str]) -> bool:
        if first_mention(conditions, areas):
            return True
        wanted = {a.lower() for a in areas}
        for condition in conditions:
            other_id = self.graph.resolve(condition)
            if other_id is None:
                continue
            if wanted & {a.lower() for a in self.graph.entity(other_id).therapeutic_areas}:
                return True
        return False

    def _phase_factor(self, record: TrialRecord, context: ScoringContext) -> RelevanceFactor:
        table = tables.PHASE_TABLE.get(context.intent, {})
        phases = [tables.normalize_phase(p) for p in record.phases]
        return self._table_factor("phase", self.weights.phase, table, phases)

    def _status_factor(self, record: TrialRecord, context: ScoringContext) -> RelevanceFactor:
        table = tables.STATUS_TABLE.get(context.intent, {})
        statuses = [tables.normalize_status(record.status)] if record.status else []
        return self._table_factor("status", self.weights.status, table, statuses)

    @staticmethod
    def _table_factor(
        name: str, weight: float, table: dict[str, tuple[int, str]], values: list[str]
    ) -> RelevanceFactor:
        matches = [table[v] for v in values if v in table]
        if not matches:
            return RelevanceFactor(name, weight, tables.NEUTRAL_SCORE, f"No {name} preference for this intent")
        # max() keeps the first of equal scores
        score, explanation = max(matches, key=lambda m: m[0])
        return RelevanceFactor(name, weight, score, explanation)

    def _sponsor_factor(self, record: TrialRecord, context: ScoringContext) -> RelevanceFactor:
        """User company matches by whole-word containment: "Acme Bio Inc." counts for "Acme Bio"."""
        weight = self.weights.sponsor
        sponsor = record.sponsor_name
        if context.user_company and mentions(sponsor, context.user_company):
            score, explanation = tables.SPONSOR_USER_COMPANY, "Same company - direct internal relevance"
        elif first_mention([sponsor], tables.MAJOR_PHARMA):
            score, explanation = tables.SPONSOR_MAJOR_PHARMA, "Major pharmaceutical company - high competitive relevance"
        elif first_mention([sponsor], tables.GOVERNMENT_KEYWORDS):
            score, explanation = tables.SPONSOR_GOVERNMENT, "Government sponsor - high data reliability"
        elif first_mention([sponsor], tables.ACADEMIC_KEYWORDS):
            score, explanation = tables.SPONSOR_ACADEMIC, "Academic/medical institution - moderate relevance"
        else:
            score, explanation = tables.SPONSOR_OTHER, "Other sponsor - basic relevance"
        return RelevanceFactor("sponsor", weight, score, explanation)

    @staticmethod
    def _explain(factors: list[RelevanceFactor], category: RelevanceCategory) -> str:
        top = sorted(factors, key=lambda f: f.contribution, reverse=True)[:2]
        return f"{tables.CATEGORY_DESCRIPTIONS[category]}. {'; '.join(f.explanation for f in top)}."
