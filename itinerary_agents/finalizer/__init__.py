"""Finalization, refinement and export of itineraries."""

from itinerary_agents.finalizer.export import export_itinerary, format_currency, shareable_version
from itinerary_agents.finalizer.finalizer import ItineraryFinalizer, validate_itinerary
from itinerary_agents.finalizer.refinement import ItineraryRefiner, request_from_itinerary

__all__ = [
    "export_itinerary",
    "format_currency",
    "shareable_version",
    "ItineraryFinalizer",
    "validate_itinerary",
    "ItineraryRefiner",
    "request_from_itinerary",
]
