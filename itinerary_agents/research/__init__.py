"""
Research stages.

    build_queries -> SearchExecutor -> select_sources -> ContentExtractor
        -> filter_documents -> StructuredExtractor
"""

from itinerary_agents.research.extraction import (
    ContentExtractor,
    clean_content,
    filter_documents,
    select_sources,
    summarize_extraction,
)
from itinerary_agents.research.queries import build_queries
from itinerary_agents.research.search import SearchExecutor, summarize_search
from itinerary_agents.research.structured import StructuredExtractor, parse_finding

__all__ = [
    "ContentExtractor",
    "clean_content",
    "filter_documents",
    "select_sources",
    "summarize_extraction",
    "build_queries",
    "SearchExecutor",
    "summarize_search",
    "StructuredExtractor",
    "parse_finding",
]
