"""
Research contracts.

Search queries and their results, candidate sources and extracted
documents, and the structured venue/activity findings pulled out of them.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import Field, field_validator, model_validator

from itinerary_agents.shared.contracts.base import (
    Amount,
    ContractModel,
    Text,
    TextList,
)


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


# ============================================================================
# Search
# ============================================================================


class SearchQuery(ContractModel):
    """A planned discovery query."""

    query: str
    description: str
    category: str
    priority: Priority
    max_results: int = Field(ge=1)


class SearchResult(ContractModel):
    """A single ranked search hit."""

    url: str
    title: str = ""
    content: str = ""
    score: float = Field(default=0.0, description="Discovery service score")
    category: str = ""
    priority: Priority = Priority.MEDIUM
    relevance_score: float = Field(
        default=0.0, ge=0.0, le=1.0, description="Request relevance in [0, 1]"
    )


class QueryResultSet(ContractModel):
    """The outcome of one executed query; failures are recorded, not raised."""

    query: str
    description: str = ""
    category: str = ""
    priority: Priority = Priority.MEDIUM
    results: List[SearchResult] = Field(default_factory=list)
    error: Optional[str] = None
    searched_at: str = ""
    average_relevance: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.error is None


# ============================================================================
# Extraction
# ============================================================================


class CandidateSource(ContractModel):
    """A search result selected for content extraction."""

    url: str
    title: str = ""
    content: str = ""
    category: str = ""
    search_relevance: float = 0.0
    quality_score: int = Field(ge=1, le=3, description="Domain reputation tier")
    relevance_score: float = Field(description="Source relevance (base 1)")
    total_score: float = Field(description="quality_score x relevance_score")


class ExtractedDocument(ContractModel):
    """Cleaned page content for one candidate source."""

    url: str
    title: str = ""
    category: str = ""
    content: str = ""
    word_count: int = 0
    quality_score: int = 1
    relevance_score: float = 0.0
    total_score: float = 0.0
    error: Optional[str] = None
    extracted_at: str = ""
    retry_attempt: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


# ============================================================================
# Structured findings
# ============================================================================


def _named_item(data: Any) -> Any:
    # Completion output sometimes lists bare names instead of objects
    if isinstance(data, str):
        return {"name": data}
    return data


class ResearchVenue(ContractModel):
    """A venue (hotel, meeting venue, restaurant, attraction) found in research."""

    name: Text
    type: Text = "venue"
    description: Text = ""
    location: Text = ""
    address: Text = ""
    contact: Text = ""
    cost: Text = ""
    capacity: Text = ""
    operating_hours: Text = ""
    highlights: TextList = Field(default_factory=list)
    requirements: TextList = Field(default_factory=list)
    booking_info: Text = ""
    source_url: Text = ""
    extracted_at: Text = ""
    relevance_score: Amount = 0.0

    @model_validator(mode="before")
    @classmethod
    def _coerce_item(cls, data: Any) -> Any:
        return _named_item(data)

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("venue name is required")
        return value

    @property
    def dedup_key(self) -> tuple:
        return (self.name.lower(), self.location.lower())


class ResearchActivity(ContractModel):
    """An activity or experience found in research."""

    name: Text
    type: Text = ""
    description: Text = ""
    duration: Text = ""
    cost: Text = ""
    group_size: Text = ""
    location: Text = ""
    requirements: TextList = Field(default_factory=list)
    highlights: TextList = Field(default_factory=list)
    source_url: Text = ""
    extracted_at: Text = ""
    relevance_score: Amount = 0.0

    @model_validator(mode="before")
    @classmethod
    def _coerce_item(cls, data: Any) -> Any:
        return _named_item(data)

    @field_validator("name")
    @classmethod
    def _name_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("activity name is required")
        return value

    @property
    def dedup_key(self) -> tuple:
        return (self.name.lower(), self.type.lower())


class PracticalInfo(ContractModel):
    transportation: TextList = Field(default_factory=list)
    budget_insights: TextList = Field(default_factory=list)
    seasonal_tips: TextList = Field(default_factory=list)
    local_tips: TextList = Field(default_factory=list)


class StructuredFinding(ContractModel):
    """Venues, activities and practical info extracted from one chunk."""

    venues: List[ResearchVenue] = Field(default_factory=list)
    activities: List[ResearchActivity] = Field(default_factory=list)
    practical_info: PracticalInfo = Field(default_factory=PracticalInfo)


class ConsolidatedResearch(ContractModel):
    """Deduplicated union of all findings, sorted by relevance."""

    venues: List[ResearchVenue] = Field(default_factory=list)
    activities: List[ResearchActivity] = Field(default_factory=list)
    practical_info: PracticalInfo = Field(default_factory=PracticalInfo)

    @property
    def is_empty(self) -> bool:
        return not self.venues and not self.activities

