"""Activity suggestions proposed before research begins."""

from itinerary_agents.suggestions.suggestor import ActivitySuggestor

__all__ = ["ActivitySuggestor"]
