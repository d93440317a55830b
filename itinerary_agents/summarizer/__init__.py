"""Consolidation and summarization of research findings."""

from itinerary_agents.summarizer.consolidation import consolidate
from itinerary_agents.summarizer.summarizer import (
    ResearchSummarizer,
    extract_cost_information,
    format_for_planning,
    validate_summaries,
)

__all__ = [
    "consolidate",
    "ResearchSummarizer",
    "extract_cost_information",
    "format_for_planning",
    "validate_summaries",
]
