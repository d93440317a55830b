"""
Research integration scoring.

Measures how much of an itinerary is backed by researched venues. A venue
counts as researched when some research venue name contains the
activity's venue name, case-insensitively. Substring containment is
lenient: a short name such as "Cafe" matches "Cafe Mondegar", so scores
can overstate integration; the per-activity warnings from
``validate_integration`` surface the unmatched venues.
"""

from typing import Any, Dict, List

from itinerary_agents.shared.contracts import (
    ConsolidatedResearch,
    Itinerary,
    ItineraryActivity,
)
from itinerary_agents.shared.contracts.itinerary import LLM_GENERATED, RESEARCH_DATA

LOW_INTEGRATION_THRESHOLD = 50


def research_venue_names(research: ConsolidatedResearch) -> List[str]:
    return [venue.name.lower() for venue in research.venues if venue.name]


def venue_from_research(venue_name: str, research_names: List[str]) -> bool:
    name = (venue_name or "").strip().lower()
    if not name:
        return False
    return any(name in research_name for research_name in research_names)


def identify_data_source(
    activity: ItineraryActivity, research_names: List[str]
) -> str:
    if venue_from_research(activity.venue.name, research_names):
        return RESEARCH_DATA
    return LLM_GENERATED


def data_integration_score(itinerary: Itinerary, research: ConsolidatedResearch) -> int:
    """Percentage (0-100) of activities whose venue is researched; 0 if none."""
    names = research_venue_names(research)
    total = 0
    matched = 0
    for _, activity in itinerary.iter_activities():
        total += 1
        if venue_from_research(activity.venue.name, names):
            matched += 1
    if total == 0:
        return 0
    return round(matched / total * 100)


def validate_integration(
    itinerary: Itinerary, research: ConsolidatedResearch
) -> Dict[str, Any]:
    """Warn about activities whose venue is not in the research data."""
    names = research_venue_names(research)
    warnings = []
    for day_index, day in enumerate(itinerary.days, start=1):
        for activity_index, activity in enumerate(day.activities, start=1):
            if activity.venue.name and not venue_from_research(activity.venue.name, names):
                warnings.append(
                    f'Day {day_index}, Activity {activity_index}: Venue '
                    f'"{activity.venue.name}" not found in research data'
                )

    score = data_integration_score(itinerary, research)
    suggestions = []
    if score < LOW_INTEGRATION_THRESHOLD:
        suggestions.append(
            "Consider improving integration with research data for more "
            "authentic local experiences"
        )
    return {
        "is_valid": True,
        "warnings": warnings,
        "suggestions": suggestions,
        "data_integration_score": score,
    }
