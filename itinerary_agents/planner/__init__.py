"""
Itinerary planning.

Turns research summaries into a day-by-day itinerary, with a templated
fallback when generation is impossible.
"""

from itinerary_agents.planner.fallback import build_fallback_itinerary
from itinerary_agents.planner.integration import (
    data_integration_score,
    validate_integration,
)
from itinerary_agents.planner.planner import (
    ItineraryPlanner,
    enrich_itinerary,
    parse_itinerary,
)

__all__ = [
    "build_fallback_itinerary",
    "data_integration_score",
    "validate_integration",
    "ItineraryPlanner",
    "enrich_itinerary",
    "parse_itinerary",
]
