"""
Knowledge-driven search query enhancement.

Rewrites drug and condition clauses into alias-OR expressions, overlays
intent-specific filters, fills paging defaults, and fans one request out into
several search strategies (exact, competitor-substituted,
therapeutic-area-substituted).
"""

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from pharma_kg.config import Settings
from pharma_kg.config import settings as default_settings
from pharma_kg.errors import ValidationError
from pharma_kg.graph.models import Entity
from pharma_kg.graph.store import KnowledgeGraph
from pharma_kg.query.schemas import (
    EnhancedQuery,
    Intent,
    QueryExpansions,
    ScoringContext,
    SearchParams,
    SearchStrategy,
    SortSpec,
)

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.5
INTERVENTION_BOOST = 0.3
CONDITION_BOOST = 0.2

# Filter values filled in per intent, only where the caller left the filter unset
INTENT_FILTERS: dict[Intent, dict[str, list[str]]] = {
    Intent.COMPETITIVE_ANALYSIS: {
        "phase": ["PHASE2", "PHASE3"],
        "overall_status": ["RECRUITING", "ACTIVE_NOT_RECRUITING"],
    },
    Intent.SAFETY_MONITORING: {
        "overall_status": ["COMPLETED", "TERMINATED", "SUSPENDED"],
    },
    Intent.DRUG_DEVELOPMENT: {
        "overall_status": ["RECRUITING", "ACTIVE_NOT_RECRUITING", "NOT_YET_RECRUITING"],
    },
    Intent.MARKET_RESEARCH: {
        "phase": ["PHASE3", "PHASE4"],
    },
    Intent.GENERAL: {},
}

PAGE_SIZES: dict[SearchStrategy, int] = {
    SearchStrategy.COMPETITIVE: 50,
    SearchStrategy.EXPANDED: 30,
}
DEFAULT_PAGE_SIZE = 20

SORT_DEFAULTS: dict[SearchStrategy, tuple[str, str]] = {
    SearchStrategy.COMPETITIVE: ("LastUpdatePostDate", "desc"),
    SearchStrategy.EXPANDED: ("EnrollmentCount", "desc"),
    SearchStrategy.THERAPEUTIC_AREA: ("EnrollmentCount", "desc"),
}
DEFAULT_SORT = ("LastUpdatePostDate", "desc")

BASE_FIELDS = [
    "NCTId",
    "BriefTitle",
    "OverallStatus",
    "Phase",
    "Condition",
    "InterventionName",
    "LeadSponsorName",
]
COMPETITIVE_FIELDS = BASE_FIELDS + ["StartDate", "PrimaryCompletionDate", "EnrollmentCount"]


def quote_term(term: str) -> str:
    """Quote a search term containing whitespace or punctuation."""
    if any(not (c.isalnum() or c in "-_") for c in term):
        return '"' + term.replace('"', "") + '"'
    return term


def alias_clause(entity: Entity) -> str:
    """
    Build an alias-OR clause for an entity.

    Example:
        Aspirin -> (Aspirin OR "acetylsalicylic acid" OR ASA OR "Bayer Aspirin")
    """
    terms = [quote_term(name) for name in entity.all_names()]
    if len(terms) == 1:
        return terms[0]
    return "(" + " OR ".join(terms) + ")"


def coerce_params(params: SearchParams | Mapping[str, Any]) -> SearchParams:
    """Parse raw request data, reporting shape errors as ValidationError."""
    if isinstance(params, SearchParams):
        return params
    try:
        return SearchParams.model_validate(params)
    except PydanticValidationError as exc:
        raise ValidationError([f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]) from exc


def coerce_context(context: ScoringContext | Mapping[str, Any] | None) -> ScoringContext:
    if context is None:
        return ScoringContext()
    if isinstance(context, ScoringContext):
        return context
    try:
        return ScoringContext.model_validate(context)
    except PydanticValidationError as exc:
        raise ValidationError([f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()]) from exc


class QueryEnhancer:
    """
    Expand search requests using the knowledge graph.

    Usage:
        enhancer = QueryEnhancer(build_seed_graph())
        result = enhancer.enhance({"query": {"intervention": "Ozempic"}},
                                  {"intent": "competitive_analysis"})
        result.enhanced_query.query.intervention
        # '(Semaglutide OR Ozempic OR Wegovy OR Rybelsus OR NN9535)'
    """

    def __init__(self, graph: KnowledgeGraph, settings: Settings | None = None):
        self.graph = graph
        self.settings = settings or default_settings

    def enhance(
        self,
        params: SearchParams | Mapping[str, Any],
        context: ScoringContext | Mapping[str, Any] | None = None,
    ) -> EnhancedQuery:
        """
        Enhance a single search request.

        Args:
            params: Search request (never mutated)
            context: Optional intent context

        Returns:
            EnhancedQuery with the rewritten request, expansions, strategy and
            confidence. When neither the intervention nor the condition
            resolves, the request passes through unchanged with strategy
            "exact" and confidence 0.5.

        Raises:
            ValidationError: params or context are malformed
        """
        params = coerce_params(params)
        return self._enhance(params, params, coerce_context(context))

    def generate_strategies(
        self,
        params: SearchParams | Mapping[str, Any],
        context: ScoringContext | Mapping[str, Any] | None = None,
    ) -> list[EnhancedQuery]:
        """
        Fan one request out into parallel search strategies.

        Order: the base enhancement, then one competitive strategy per
        competitor of the resolved intervention, then one therapeutic-area
        strategy per therapeutic area of the resolved intervention. Empty
        competitor or area sets contribute nothing.

        Returns:
            Ordered list of EnhancedQuery, always starting with enhance(params)
        """
        params = coerce_params(params)
        context = coerce_context(context)
        strategies = [self._enhance(params, params, context)]

        drug_id = self.graph.resolve(params.query.intervention)
        if drug_id is None:
            return strategies

        competitors = self.graph.competitors_of(drug_id, params.query.condition)
        for competitor_id in competitors[: self.settings.max_competitor_strategies]:
            variant = params.model_copy(deep=True)
            variant.query.intervention = self.graph.entity(competitor_id).name
            strategies.append(
                self._enhance(params, variant, context, strategy=SearchStrategy.COMPETITIVE)
            )

        for area in self.graph.entity(drug_id).therapeutic_areas:
            variant = params.model_copy(deep=True)
            variant.query.condition = area
            strategies.append(
                self._enhance(params, variant, context, strategy=SearchStrategy.THERAPEUTIC_AREA)
            )

        logger.debug("Generated %d search strategies for %s", len(strategies), drug_id)
        return strategies

    def _enhance(
        self,
        original: SearchParams,
        params: SearchParams,
        context: ScoringContext,
        strategy: SearchStrategy | None = None,
    ) -> EnhancedQuery:
        enhanced = params.model_copy(deep=True)
        expansions = QueryExpansions()
        confidence = BASE_CONFIDENCE

        drug_id = self.graph.resolve(params.query.intervention)
        condition_id = self.graph.resolve(params.query.condition)

        if drug_id is None and condition_id is None:
            logger.debug("No resolvable terms; passing query through unchanged")
            return EnhancedQuery(
                original_query=original.model_copy(deep=True),
                enhanced_query=enhanced,
                expansions=expansions,
                search_strategy=strategy or SearchStrategy.EXACT,
                confidence=BASE_CONFIDENCE,
            )

        final_strategy = SearchStrategy.EXPANDED

        if drug_id is not None:
            drug = self.graph.entity(drug_id)
            enhanced.query.intervention = alias_clause(drug)
            confidence += INTERVENTION_BOOST
            expansions.drug_expansions = list(drug.aliases)
            expansions.competitor_suggestions = [
                self.graph.entity(c).name for c in self.graph.competitors_of(drug_id, condition_id)
            ]
            expansions.related_searches = [
                r.entity.name
                for r in self.graph.related_to(
                    drug_id, max_depth=1, max_results=self.settings.related_search_limit
                )
            ]
            if context.intent == Intent.COMPETITIVE_ANALYSIS:
                final_strategy = SearchStrategy.COMPETITIVE

        if condition_id is not None:
            condition = self.graph.entity(condition_id)
            enhanced.query.condition = alias_clause(condition)
            confidence += CONDITION_BOOST
            expansions.indication_expansions = list(condition.aliases)

        if strategy is not None:
            final_strategy = strategy

        for field_name, values in INTENT_FILTERS[context.intent].items():
            if getattr(enhanced.filter, field_name) is None:
                setattr(enhanced.filter, field_name, list(values))

        self._apply_defaults(enhanced, final_strategy)

        return EnhancedQuery(
            original_query=original.model_copy(deep=True),
            enhanced_query=enhanced,
            expansions=expansions,
            search_strategy=final_strategy,
            confidence=max(0.0, min(1.0, confidence)),
        )

    @staticmethod
    def _apply_defaults(params: SearchParams, strategy: SearchStrategy) -> None:
        if params.page_size is None:
            params.page_size = PAGE_SIZES.get(strategy, DEFAULT_PAGE_SIZE)
        if params.sort is None:
            field_name, direction = SORT_DEFAULTS.get(strategy, DEFAULT_SORT)
            params.sort = [SortSpec(field=field_name, direction=direction)]
        if params.fields is None:
            fields = COMPETITIVE_FIELDS if strategy == SearchStrategy.COMPETITIVE else BASE_FIELDS
            params.fields = list(fields)
