"""Activity suggestion contracts."""

from typing import List, Optional

from pydantic import Field

from itinerary_agents.shared.contracts.base import Amount, ContractModel, Text, TextList


class SuggestedActivity(ContractModel):
    title: Text
    description: Text = ""
    category: Text = ""
    duration: Text = ""
    estimated_cost: Amount = 0.0
    participants: Optional[Text] = None
    location: Text = ""
    time_slot: Text = ""
    requirements: TextList = Field(default_factory=list)
    alternatives: TextList = Field(default_factory=list)


class ActivitySuggestions(ContractModel):
    """Candidate activities proposed before research begins."""

    activities: List[SuggestedActivity] = Field(default_factory=list)
    total_estimated_cost: Amount = 0.0
    notes: Text = ""
