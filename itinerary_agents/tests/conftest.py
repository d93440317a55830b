"""
Shared fixtures and fakes for the pipeline tests.

The completion fake answers by matching the start of each prompt against
scripted markers; anything unscripted raises, which drives the stage
under test onto its fallback path.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import pytest

from itinerary_agents.shared.config import get_config
from itinerary_agents.shared.contracts import (
    ConsolidatedResearch,
    DayPlan,
    Itinerary,
    ItineraryActivity,
    ItineraryType,
    ParsedRequest,
    ResearchActivity,
    ResearchSummaries,
    ResearchVenue,
    VenueRef,
)
from itinerary_agents.summarizer.fallbacks import (
    fallback_budget_analysis,
    fallback_category_summaries,
    fallback_logistics,
    fallback_recommendations,
)

# Prompt prefixes of each completion call site
PARSE = "Parse this itinerary request"
SUGGEST_CORPORATE = "Generate corporate activities"
SUGGEST_TRAVEL = "Generate travel activities"
EXTRACT = "Extract structured information"
CATEGORY = "Create comprehensive category summaries"
RECOMMEND = "Generate actionable recommendations"
BUDGET = "Analyze budget implications"
LOGISTICS = "Create logistics summary"
PLAN = "Generate a comprehensive"
OPTIMIZE = "Review this itinerary"
FINAL_TOUCHES = "Add final touches"
EXECUTIVE_SUMMARY = "Create an executive summary"
REFINE = "Refine "

Response = Union[str, Dict[str, Any], Exception, Callable[[str], Any]]


class FakeCompletionClient:
    """Scripted completion client recording every call."""

    def __init__(self, routes: Optional[Dict[str, Response]] = None):
        self.routes: List[Tuple[str, Response]] = list((routes or {}).items())
        self.calls: List[Dict[str, Any]] = []

    def route(self, marker: str, response: Response) -> "FakeCompletionClient":
        self.routes.insert(0, (marker, response))
        return self

    def calls_for(self, marker: str) -> List[Dict[str, Any]]:
        return [c for c in self.calls if c["prompt"].startswith(marker)]

    async def complete(self, prompt, system_prompt=None, options=None) -> str:
        self.calls.append(
            {"prompt": prompt, "system_prompt": system_prompt, "options": options}
        )
        for marker, response in self.routes:
            if prompt.startswith(marker):
                return self._render(response, prompt)
        raise RuntimeError(f"No scripted completion for: {prompt[:60]!r}")

    @staticmethod
    def _render(response: Response, prompt: str) -> str:
        if callable(response) and not isinstance(response, Exception):
            response = response(prompt)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, (dict, list)):
            return json.dumps(response)
        return response


class FakeDiscoveryClient:
    """
    Discovery client serving canned search hits and page content.

    Args:
        results: Hits returned for every query (or a callable of the query)
        pages: url -> page content; URLs missing here fail extraction
        fail_search: Raise on every search call
    """

    def __init__(
        self,
        results: Union[List[Dict[str, Any]], Callable[[str], List[Dict[str, Any]]], None] = None,
        pages: Optional[Dict[str, str]] = None,
        fail_search: bool = False,
    ):
        self.results = results if results is not None else []
        self.pages = pages or {}
        self.fail_search = fail_search
        self.search_calls: List[Dict[str, Any]] = []
        self.extract_calls: List[List[str]] = []

    async def search(self, query, max_results=10, search_depth="basic"):
        self.search_calls.append(
            {"query": query, "max_results": max_results, "search_depth": search_depth}
        )
        if self.fail_search:
            raise ConnectionError("search unavailable")
        results = self.results(query) if callable(self.results) else self.results
        return [dict(r) for r in results]

    async def extract(self, urls):
        self.extract_calls.append(list(urls))
        return [
            {"url": url, "content": self.pages[url]}
            if url in self.pages
            else {"url": url, "content": "", "error": "blocked"}
            for url in urls
        ]


# ============================================================================
# Builders
# ============================================================================


def make_request(**overrides) -> ParsedRequest:
    fields = {
        "type": ItineraryType.CORPORATE,
        "location": "Bangalore",
        "participants": 50,
        "duration": 2,
        "budget": 150000,
        "currency": "INR",
    }
    fields.update(overrides)
    return ParsedRequest(**fields)


def make_research() -> ConsolidatedResearch:
    return ConsolidatedResearch(
        venues=[
            ResearchVenue(
                name="Taj West End",
                type="hotel",
                location="Bangalore",
                address="25 Race Course Road, Bangalore",
                contact="+91 80 6660 5660",
                capacity="300",
                booking_info="Book 2 weeks ahead",
                relevance_score=4.5,
            ),
            ResearchVenue(
                name="Bangalore International Exhibition Centre",
                type="venue",
                location="Bangalore",
                address="Tumkur Road, Bangalore",
                contact="+91 80 2371 4000",
                relevance_score=4.0,
            ),
            ResearchVenue(
                name="Toit Brewpub",
                type="restaurant",
                location="Indiranagar, Bangalore",
                relevance_score=3.0,
            ),
        ],
        activities=[
            ResearchActivity(
                name="Nandi Hills Sunrise Trek",
                type="adventure",
                location="Nandi Hills",
                relevance_score=3.0,
            ),
            ResearchActivity(
                name="Corporate Escape Room Challenge",
                type="team_building",
                location="Koramangala",
                relevance_score=4.5,
            ),
        ],
    )


def make_summaries(
    research: Optional[ConsolidatedResearch] = None,
    request: Optional[ParsedRequest] = None,
) -> ResearchSummaries:
    research = research if research is not None else make_research()
    request = request or make_request()
    return ResearchSummaries(
        consolidated=research,
        category_summaries=fallback_category_summaries(research, request),
        recommendations=fallback_recommendations(research, request),
        budget_analysis=fallback_budget_analysis(request),
        logistics_summary=fallback_logistics(request),
    )


def make_activity(day: int, index: int, venue: str, **overrides) -> ItineraryActivity:
    fields = {
        "id": f"day{day}_activity{index}",
        "time_slot": "10:00 AM - 12:00 PM",
        "title": f"Session {day}.{index}",
        "description": "Planned activity",
        "category": "meeting",
        "cost": 10000,
        "venue": VenueRef(name=venue),
    }
    fields.update(overrides)
    return ItineraryActivity(**fields)


def make_itinerary(**overrides) -> Itinerary:
    fields = {
        "id": "itinerary_test",
        "type": ItineraryType.CORPORATE,
        "title": "Bangalore Leadership Training",
        "summary": "Two days of training and team building",
        "total_budget": 140000,
        "currency": "INR",
        "location": "Bangalore",
        "participants": 50,
        "days": [
            DayPlan(
                day=1,
                date="2026-03-10",
                theme="Kickoff",
                activities=[
                    make_activity(1, 1, "Bangalore International Exhibition Centre"),
                    make_activity(1, 2, "Toit Brewpub", title="Team dinner", time_slot="7:00 PM - 9:00 PM"),
                ],
                total_cost=70000,
            ),
            DayPlan(
                day=2,
                date="2026-03-11",
                theme="Team building",
                activities=[
                    make_activity(2, 1, "Taj West End", title="Workshop"),
                    make_activity(2, 2, "Local Cafe", title="Wrap-up coffee"),
                ],
                total_cost=70000,
            ),
        ],
    }
    fields.update(overrides)
    return Itinerary(**fields)


def page_text(location: str, words: int = 150, extra: str = "") -> str:
    """Page content long enough to pass the word-count filter."""
    filler = " ".join(["venue"] * words)
    return f"Best corporate conference venues in {location}. {extra} {filler}"


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def config():
    """Pipeline config with all pacing and retry waits disabled."""
    return get_config(
        high_priority_delay=0,
        default_query_delay=0,
        batch_pause=0,
        chunk_pause=0,
        completion_retry_backoff=0,
        extraction_retry_backoff=0,
    )


@pytest.fixture
def request_corporate():
    return make_request()


@pytest.fixture
def research():
    return make_research()


@pytest.fixture
def summaries():
    return make_summaries()


@pytest.fixture
def itinerary():
    return make_itinerary()
