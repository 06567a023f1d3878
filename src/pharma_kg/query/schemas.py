"""
Pydantic schemas for search requests, scoring context and enhanced queries.

Field aliases follow the camelCase names used by the ClinicalTrials.gov v2
API, so request payloads round-trip without translation. Python code may use
either spelling.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Intent(str, Enum):
    """Why the user is searching; drives filter defaults and scoring tables."""
    COMPETITIVE_ANALYSIS = "competitive_analysis"
    DRUG_DEVELOPMENT = "drug_development"
    SAFETY_MONITORING = "safety_monitoring"
    MARKET_RESEARCH = "market_research"
    GENERAL = "general"


class SearchStrategy(str, Enum):
    """How a query was rewritten."""
    EXACT = "exact"
    EXPANDED = "expanded"
    COMPETITIVE = "competitive"
    THERAPEUTIC_AREA = "therapeutic_area"


class StudyQuery(_CamelModel):
    """Free-text query clauses."""
    condition: str | None = Field(None, description="Condition or disease clause")
    intervention: str | None = Field(None, description="Drug or intervention clause")
    title: str | None = Field(None, description="Title search clause")
    sponsor: str | None = Field(None, description="Sponsor search clause")
    location: str | None = Field(None, description="Location search clause")
    ids: list[str] | None = Field(None, description="Study identifiers (NCT ids)")


class StudyFilter(_CamelModel):
    """Exact-match filters."""
    overall_status: list[str] | None = Field(None, alias="overallStatus")
    phase: list[str] | None = None
    study_type: list[str] | None = Field(None, alias="studyType")
    results: Literal["with", "without"] | None = Field(
        None, description="Restrict to studies with or without posted results"
    )


class SortSpec(_CamelModel):
    """One sort key."""
    field: str
    direction: Literal["asc", "desc"] = "desc"


class SearchParams(_CamelModel):
    """Structured study search request."""
    query: StudyQuery = Field(default_factory=StudyQuery)
    filter: StudyFilter = Field(default_factory=StudyFilter)
    sort: list[SortSpec] | None = None
    page_size: int | None = Field(None, alias="pageSize", ge=1, le=1000)
    page_token: str | None = Field(None, alias="pageToken")
    fields: list[str] | None = None


class ScoringContext(_CamelModel):
    """What the user cares about when ranking results."""
    primary_drug: str | None = Field(None, alias="primaryDrug")
    primary_indication: str | None = Field(None, alias="primaryIndication")
    intent: Intent = Intent.GENERAL
    user_company: str | None = Field(None, alias="userCompany")


class QueryExpansions(_CamelModel):
    """Terms the enhancer added or suggests."""
    drug_expansions: list[str] = Field(default_factory=list, alias="drugExpansions")
    indication_expansions: list[str] = Field(default_factory=list, alias="indicationExpansions")
    competitor_suggestions: list[str] = Field(default_factory=list, alias="competitorSuggestions")
    related_searches: list[str] = Field(default_factory=list, alias="relatedSearches")


class EnhancedQuery(_CamelModel):
    """Result of QueryEnhancer.enhance."""
    original_query: SearchParams = Field(..., alias="originalQuery")
    enhanced_query: SearchParams = Field(..., alias="enhancedQuery")
    expansions: QueryExpansions = Field(default_factory=QueryExpansions)
    search_strategy: SearchStrategy = Field(SearchStrategy.EXACT, alias="searchStrategy")
    confidence: float = Field(0.5, ge=0.0, le=1.0)
