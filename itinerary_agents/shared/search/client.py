"""
Discovery service client.

The research stages only need two capabilities: ranked web search and
bulk page-content extraction. ``DiscoveryClient`` captures that surface;
``TavilyDiscoveryClient`` implements it on top of the Tavily API.
"""

import logging
from typing import Any, Dict, List, Optional, Protocol

from tavily import AsyncTavilyClient

logger = logging.getLogger(__name__)


class DiscoveryClient(Protocol):
    """Web search and content extraction."""

    async def search(
        self, query: str, max_results: int = 10, search_depth: str = "basic"
    ) -> List[Dict[str, Any]]:
        """Return results as dicts with ``title, url, content, score``."""
        ...

    async def extract(self, urls: List[str]) -> List[Dict[str, Any]]:
        """
        Return one dict per URL with ``url`` and ``content``.

        URLs that could not be extracted carry an ``error`` key instead of
        content. The call itself may raise when the whole request fails.
        """
        ...


class TavilyDiscoveryClient:
    """
    Discovery client backed by Tavily search and extract.

    Args:
        api_key: Tavily API key
        client: Pre-built AsyncTavilyClient (takes precedence over api_key)
    """

    def __init__(
        self, api_key: Optional[str] = None, client: Optional[AsyncTavilyClient] = None
    ):
        self._client = client or AsyncTavilyClient(api_key=api_key)

    async def search(
        self, query: str, max_results: int = 10, search_depth: str = "basic"
    ) -> List[Dict[str, Any]]:
        response = await self._client.search(
            query=query,
            search_depth=search_depth,
            max_results=max_results,
            include_answer=False,
        )
        return [
            {
                "title": item.get("title", ""),
                "url": item.get("url", ""),
                "content": item.get("content", ""),
                "score": item.get("score", 0.0),
            }
            for item in response.get("results", [])
        ]

    async def extract(self, urls: List[str]) -> List[Dict[str, Any]]:
        response = await self._client.extract(urls=urls, include_images=False)

        extracted: Dict[str, Dict[str, Any]] = {}
        for item in response.get("results", []):
            extracted[item.get("url", "")] = {
                "url": item.get("url", ""),
                "content": item.get("raw_content") or "",
            }
        for failed in response.get("failed_results", []):
            if isinstance(failed, dict):
                url = failed.get("url", "")
                error = failed.get("error") or "extraction failed"
            else:
                url, error = str(failed), "extraction failed"
            extracted[url] = {"url": url, "content": "", "error": error}

        if response.get("failed_results"):
            logger.warning(
                f"Tavily extract: {len(response['failed_results'])}/{len(urls)} URLs failed"
            )

        # Preserve request order; URLs Tavily silently dropped count as failures
        return [
            extracted.get(url, {"url": url, "content": "", "error": "no content returned"})
            for url in urls
        ]
