"""
Itinerary contract.

The planner's day-by-day output, enriched by the finalizer and extended
by refinement. Serialized with camelCase keys for export.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, model_validator

from itinerary_agents.shared.contracts.base import (
    Amount,
    ContractModel,
    Count,
    Text,
    TextList,
)
from itinerary_agents.shared.contracts.request import ItineraryType

RESEARCH_DATA = "research_data"
LLM_GENERATED = "llm_generated"
SUGGESTED = "suggested"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class VenueRef(ContractModel):
    """Where an activity takes place."""

    name: Text = ""
    address: Text = ""
    contact: Text = ""
    capacity: Text = ""
    booking_info: Text = ""

    @model_validator(mode="before")
    @classmethod
    def _from_name(cls, data: Any) -> Any:
        if isinstance(data, str):
            return {"name": data}
        if data is None:
            return {}
        return data


class ItineraryActivity(ContractModel):
    id: Text = ""
    time_slot: Text = ""
    title: Text = ""
    description: Text = ""
    category: Text = ""
    cost: Amount = 0.0
    venue: VenueRef = Field(default_factory=VenueRef)
    requirements: TextList = Field(default_factory=list)
    alternatives: TextList = Field(default_factory=list)
    data_source: Text = ""


class DayPlan(ContractModel):
    day: Count
    date: Text = ""
    theme: Text = ""
    activities: List[ItineraryActivity] = Field(default_factory=list)
    total_cost: Amount = 0.0
    meals: Dict[str, Any] = Field(default_factory=dict)
    transportation: Text = ""
    notes: Text = ""


class RefinementScope(ContractModel):
    """Which part of an itinerary a refinement may replace."""

    type: Literal["entire", "day", "activity"] = "entire"
    day_number: Optional[int] = None
    activity_id: Optional[str] = None

    @model_validator(mode="after")
    def _target_present(self) -> "RefinementScope":
        if self.type == "day" and self.day_number is None:
            raise ValueError("day scope requires day_number")
        if self.type == "activity" and not self.activity_id:
            raise ValueError("activity scope requires activity_id")
        return self


class RefinementEntry(ContractModel):
    prompt: str
    type: Literal["research_aware", "basic"]
    scope: RefinementScope = Field(default_factory=RefinementScope)
    timestamp: str = Field(default_factory=utc_now)


class FinalNotes(ContractModel):
    weather_info: Text = ""
    packing_list: TextList = Field(default_factory=list)
    cultural_tips: TextList = Field(default_factory=list)
    emergency_info: Text = ""
    preparation_checklist: TextList = Field(default_factory=list)
    payment_tips: TextList = Field(default_factory=list)


class ValidationReport(ContractModel):
    is_valid: bool = True
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    quality_score: float = 10.0


class ItineraryMetadata(ContractModel):
    data_integration_score: int = Field(default=0, ge=0, le=100)
    is_fallback: bool = False
    version: str = "1.0"
    generator: str = ""
    integration_warnings: List[str] = Field(default_factory=list)


class Itinerary(ContractModel):
    """A complete, costed, multi-day itinerary."""

    id: Text = ""
    type: ItineraryType = ItineraryType.TRAVEL
    title: Text = ""
    summary: Text = ""
    executive_summary: Text = ""
    total_budget: Amount = 0.0
    currency: Text = "INR"
    location: Text = ""
    participants: Count = 1
    days: List[DayPlan] = Field(default_factory=list)
    budget_breakdown: Dict[str, Any] = Field(default_factory=dict)
    research_data_used: Dict[str, int] = Field(default_factory=dict)
    optimization_notes: TextList = Field(default_factory=list)
    budget_optimized: bool = False
    final_notes: Optional[FinalNotes] = None
    validation: Optional[ValidationReport] = None
    generated_at: Optional[str] = None
    refined_at: Optional[str] = None
    finalized_at: Optional[str] = None
    metadata: ItineraryMetadata = Field(default_factory=ItineraryMetadata)
    refinement_history: List[RefinementEntry] = Field(default_factory=list)

    def iter_activities(self):
        """Yield ``(day, activity)`` pairs in day order."""
        for day in self.days:
            for activity in day.activities:
                yield day, activity
