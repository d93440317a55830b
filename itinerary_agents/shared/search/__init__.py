"""Discovery service (web search and page extraction) clients."""

from itinerary_agents.shared.search.client import (
    DiscoveryClient,
    TavilyDiscoveryClient,
)

__all__ = ["DiscoveryClient", "TavilyDiscoveryClient"]
