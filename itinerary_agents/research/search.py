"""
Search execution.

Runs the planned queries sequentially against the discovery service,
pacing calls by priority. A failing query is recorded on its result set
and never aborts the batch.
"""

import logging
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List

from itinerary_agents.research.queries import build_queries
from itinerary_agents.research.scoring import search_relevance
from itinerary_agents.shared.config import DEFAULT_CONFIG, PipelineConfig
from itinerary_agents.shared.contracts import (
    ParsedRequest,
    Priority,
    QueryResultSet,
    SearchQuery,
    SearchResult,
)
from itinerary_agents.shared.fallback import pause
from itinerary_agents.shared.search import DiscoveryClient

logger = logging.getLogger(__name__)


class SearchExecutor:
    """
    Executes discovery queries and scores their results.

    Args:
        discovery: Discovery service client
        config: Pipeline config (pacing, relevance threshold)
    """

    def __init__(
        self, discovery: DiscoveryClient, config: PipelineConfig = DEFAULT_CONFIG
    ):
        self.discovery = discovery
        self.config = config

    async def search(self, request: ParsedRequest) -> List[QueryResultSet]:
        """Plan and run all queries for ``request``, in query order."""
        queries = build_queries(request)
        logger.info(
            f"[stage=search] Running {len(queries)} queries | "
            f"type={request.type.value}, location={request.location}"
        )

        result_sets = []
        for i, query in enumerate(queries, start=1):
            logger.debug(f"[stage=search] Query {i}/{len(queries)}: {query.description}")
            result_sets.append(await self._run_query(query, request))

            delay = (
                self.config.high_priority_delay
                if query.priority == Priority.HIGH
                else self.config.default_query_delay
            )
            await pause(delay)

        succeeded = sum(1 for rs in result_sets if rs.succeeded and rs.results)
        logger.info(
            f"[stage=search] Completed | successful={succeeded}/{len(result_sets)}, "
            f"results={sum(len(rs.results) for rs in result_sets)}"
        )
        return result_sets

    async def _run_query(self, query: SearchQuery, request: ParsedRequest) -> QueryResultSet:
        searched_at = datetime.now(timezone.utc).isoformat()
        depth = "advanced" if query.priority == Priority.HIGH else "basic"
        try:
            raw_results = await self.discovery.search(
                query.query, max_results=query.max_results, search_depth=depth
            )
        except Exception as e:
            logger.warning(f"[stage=search] Query failed: {query.description} | {e}")
            return QueryResultSet(
                query=query.query,
                description=query.description,
                category=query.category,
                priority=query.priority,
                results=[],
                error=str(e) or type(e).__name__,
                searched_at=searched_at,
            )

        results = self._score_results(raw_results, query, request)
        average = (
            sum(r.relevance_score for r in results) / len(results) if results else 0.0
        )
        return QueryResultSet(
            query=query.query,
            description=query.description,
            category=query.category,
            priority=query.priority,
            results=results,
            searched_at=searched_at,
            average_relevance=average,
        )

    def _score_results(
        self,
        raw_results: List[Dict[str, Any]],
        query: SearchQuery,
        request: ParsedRequest,
    ) -> List[SearchResult]:
        scored = []
        for raw in raw_results:
            url = raw.get("url") or ""
            if not url:
                continue
            title = raw.get("title") or ""
            content = raw.get("content") or ""
            relevance = search_relevance(title, content, url, request)
            if relevance <= self.config.min_search_relevance:
                continue
            scored.append(
                SearchResult(
                    url=url,
                    title=title,
                    content=content,
                    score=float(raw.get("score") or 0.0),
                    category=query.category,
                    priority=query.priority,
                    relevance_score=relevance,
                )
            )
        # sorted() is stable, so ties keep discovery order
        return sorted(scored, key=lambda r: r.relevance_score, reverse=True)


def summarize_search(result_sets: List[QueryResultSet]) -> Dict[str, Any]:
    """Aggregate counts and relevance across executed queries."""
    successful = [rs for rs in result_sets if rs.succeeded and rs.results]
    all_results = [r for rs in successful for r in rs.results]
    return {
        "total_searches": len(result_sets),
        "successful_searches": len(successful),
        "failed_searches": sum(1 for rs in result_sets if not rs.succeeded),
        "total_results": len(all_results),
        "average_relevance": (
            sum(r.relevance_score for r in all_results) / len(all_results)
            if all_results
            else 0.0
        ),
        "categories": dict(Counter(rs.category for rs in successful)),
        "priorities": dict(Counter(rs.priority.value for rs in successful)),
    }
