"""
Parsed request contract.

The normalized form of a free-text travel or corporate-event request,
produced once by the request parser and read by every later stage.
"""

from enum import Enum
from typing import List

from pydantic import ConfigDict, Field

from itinerary_agents.shared.contracts.base import ContractModel


class ItineraryType(str, Enum):
    TRAVEL = "travel"
    CORPORATE = "corporate"


class EventType(str, Enum):
    NONE = ""
    TRAINING = "training"
    CONFERENCE = "conference"
    TEAM_BUILDING = "team_building"
    OFFSITE = "offsite"
    SEMINAR = "seminar"


class ParsedRequest(ContractModel):
    """Normalized, immutable user request."""

    model_config = ConfigDict(frozen=True)

    type: ItineraryType = Field(description="Selects query and activity templates")
    location: str = Field(min_length=1, description="Destination")
    participants: int = Field(default=1, ge=1, description="Group size")
    duration: int = Field(default=1, ge=1, description="Number of days")
    budget: float = Field(default=0, ge=0, description="Total budget")
    currency: str = Field(default="INR", description="ISO currency code")
    date: str = Field(
        default="flexible", description="ISO date (YYYY-MM-DD) or 'flexible'"
    )
    preferences: List[str] = Field(default_factory=list)
    dietary: List[str] = Field(default_factory=list)
    event_type: EventType = Field(
        default=EventType.NONE, description="Corporate event kind; empty for travel"
    )
    focus: str = Field(default="", description="Corporate event focus")
    special_requests: str = Field(default="")

    @property
    def is_corporate(self) -> bool:
        return self.type == ItineraryType.CORPORATE
