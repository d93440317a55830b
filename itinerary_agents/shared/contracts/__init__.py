"""
Contracts shared between pipeline stages.

Each stage communicates only through these pydantic models, which keeps
stages independently testable and makes export deterministic.
"""

from itinerary_agents.shared.contracts.request import (
    EventType,
    ItineraryType,
    ParsedRequest,
)
from itinerary_agents.shared.contracts.research import (
    CandidateSource,
    ConsolidatedResearch,
    ExtractedDocument,
    PracticalInfo,
    Priority,
    QueryResultSet,
    ResearchActivity,
    ResearchVenue,
    SearchQuery,
    SearchResult,
    StructuredFinding,
)
from itinerary_agents.shared.contracts.suggestions import (
    ActivitySuggestions,
    SuggestedActivity,
)
from itinerary_agents.shared.contracts.summaries import (
    BudgetAnalysis,
    CategorySummaries,
    LogisticsSummary,
    Recommendations,
    ResearchSummaries,
)
from itinerary_agents.shared.contracts.itinerary import (
    DayPlan,
    FinalNotes,
    Itinerary,
    ItineraryActivity,
    RefinementEntry,
    RefinementScope,
    ValidationReport,
    VenueRef,
)

__all__ = [
    "EventType",
    "ItineraryType",
    "ParsedRequest",
    "CandidateSource",
    "ConsolidatedResearch",
    "ExtractedDocument",
    "PracticalInfo",
    "Priority",
    "QueryResultSet",
    "ResearchActivity",
    "ResearchVenue",
    "SearchQuery",
    "SearchResult",
    "StructuredFinding",
    "ActivitySuggestions",
    "SuggestedActivity",
    "BudgetAnalysis",
    "CategorySummaries",
    "LogisticsSummary",
    "Recommendations",
    "ResearchSummaries",
    "DayPlan",
    "FinalNotes",
    "Itinerary",
    "ItineraryActivity",
    "RefinementEntry",
    "RefinementScope",
    "ValidationReport",
    "VenueRef",
]
