"""
Unit tests for the research stages.

Covers query planning, search scoring and failure isolation, source
selection, batched extraction with pacing, document filtering and
chunked structured extraction.
"""

from dataclasses import replace

import pytest

import itinerary_agents.research.extraction as extraction_module
import itinerary_agents.research.structured as structured_module
from conftest import EXTRACT, FakeCompletionClient, FakeDiscoveryClient, make_request, page_text
from itinerary_agents.research import (
    ContentExtractor,
    SearchExecutor,
    StructuredExtractor,
    build_queries,
    clean_content,
    filter_documents,
    parse_finding,
    select_sources,
    summarize_search,
)
from itinerary_agents.research.scoring import (
    item_relevance,
    quality_score,
    search_relevance,
    source_relevance,
)
from itinerary_agents.shared.contracts import (
    CandidateSource,
    ExtractedDocument,
    ItineraryType,
    Priority,
    QueryResultSet,
    SearchResult,
)


def _candidate(url: str, total: float = 3.0) -> CandidateSource:
    return CandidateSource(
        url=url,
        title=f"Page {url}",
        quality_score=1,
        relevance_score=total,
        total_score=total,
    )


def _document(url: str, words: int, relevance: float, error=None) -> ExtractedDocument:
    return ExtractedDocument(
        url=url,
        content=" ".join(["word"] * words),
        word_count=words,
        relevance_score=relevance,
        total_score=relevance,
        error=error,
    )


class _PauseRecorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


# ============================================================================
# Query planning
# ============================================================================


class TestBuildQueries:
    """Tests for query planning."""

    def test_corporate_large_group_adds_transport(self):
        queries = build_queries(make_request(participants=50))
        categories = [q.category for q in queries]

        assert "transport" in categories
        assert categories[0] == "venues"
        assert all("Bangalore" in q.query for q in queries)

    def test_corporate_team_focus_adds_team_building(self):
        without = build_queries(make_request())
        with_team = build_queries(make_request(focus="Team bonding"))
        assert len(with_team) == len(without) + 2

    def test_travel_preferences_add_one_query_per_theme(self):
        request = make_request(
            type=ItineraryType.TRAVEL,
            location="Jaipur",
            participants=2,
            preferences=["heritage", "cultural walks", "food"],
        )
        queries = build_queries(request)
        categories = [q.category for q in queries]

        assert categories.count("cultural") == 1
        assert categories.count("dining") == 3
        assert "adventure" not in categories


# ============================================================================
# Scoring
# ============================================================================


class TestScoring:
    """Tests for the relevance scales."""

    def test_search_relevance_is_capped(self, request_corporate):
        score = search_relevance(
            "Corporate conference venues in Bangalore",
            "Group bookings for business meetings in Bangalore " * 20,
            "https://www.tripadvisor.com/x",
            request_corporate,
        )
        assert score == 1.0

    def test_search_relevance_base(self, request_corporate):
        assert search_relevance("Cafes", "Nice coffee", "https://x.com", request_corporate) == 0.5

    def test_quality_tiers(self):
        assert quality_score("https://www.tripadvisor.com/a") == 3
        assert quality_score("https://en.wikipedia.org/wiki/Bangalore") == 2
        assert quality_score("https://random.blog/post") == 1

    def test_source_relevance(self, request_corporate):
        assert source_relevance("Bangalore", "corporate offsites", request_corporate) == 4.5
        assert source_relevance("Paris", "cafes", request_corporate) == 1.0

    def test_item_relevance_counts_preferences(self):
        request = make_request(type=ItineraryType.TRAVEL, preferences=["trek"])
        assert item_relevance("Nandi Hills trek", "", request) == 2.0


# ============================================================================
# Search
# ============================================================================


class TestSearchExecutor:
    """Tests for SearchExecutor."""

    @pytest.mark.asyncio
    async def test_results_below_threshold_are_dropped(self, config, request_corporate):
        discovery = FakeDiscoveryClient(
            [
                {"url": "https://a.com", "title": "Corporate venues in Bangalore", "content": ""},
                {"url": "https://b.com", "title": "Cafes in Paris", "content": ""},
                {"url": "", "title": "No url", "content": "Bangalore"},
            ]
        )
        strict = replace(config, min_search_relevance=0.6)

        result_sets = await SearchExecutor(discovery, strict).search(request_corporate)

        first = result_sets[0]
        assert [r.url for r in first.results] == ["https://a.com"]
        assert all(0 <= r.relevance_score <= 1 for r in first.results)
        assert len(result_sets) == len(build_queries(request_corporate))

    @pytest.mark.asyncio
    async def test_failed_queries_are_recorded(self, config, request_corporate):
        discovery = FakeDiscoveryClient(fail_search=True)

        result_sets = await SearchExecutor(discovery, config).search(request_corporate)

        assert result_sets
        assert all(not rs.succeeded for rs in result_sets)
        assert all(rs.error == "search unavailable" for rs in result_sets)
        summary = summarize_search(result_sets)
        assert summary["failed_searches"] == len(result_sets)
        assert summary["total_results"] == 0

    @pytest.mark.asyncio
    async def test_high_priority_uses_advanced_depth(self, config, request_corporate):
        discovery = FakeDiscoveryClient([])
        await SearchExecutor(discovery, config).search(request_corporate)

        queries = build_queries(request_corporate)
        for query, call in zip(queries, discovery.search_calls):
            expected = "advanced" if query.priority == Priority.HIGH else "basic"
            assert call["search_depth"] == expected
            assert call["max_results"] == query.max_results


# ============================================================================
# Selection and filtering
# ============================================================================


class TestSelectSources:
    """Tests for candidate source selection."""

    def test_dedup_keeps_best_and_skips_failed_sets(self, request_corporate):
        hit = SearchResult(url="https://a.com", title="Bangalore corporate venues")
        weak = SearchResult(url="https://a.com", title="Something")
        sets = [
            QueryResultSet(query="q1", category="venues", results=[weak]),
            QueryResultSet(query="q2", category="catering", results=[hit]),
            QueryResultSet(
                query="q3",
                results=[SearchResult(url="https://failed.com")],
                error="timeout",
            ),
        ]

        sources = select_sources(sets, request_corporate)

        assert [s.url for s in sources] == ["https://a.com"]
        assert sources[0].category == "catering"
        assert sources[0].total_score == sources[0].quality_score * sources[0].relevance_score

    def test_limit(self, request_corporate):
        results = [SearchResult(url=f"https://site{i}.com", title="x") for i in range(30)]
        sets = [QueryResultSet(query="q", results=results)]

        assert len(select_sources(sets, request_corporate)) == 15
        assert len(select_sources(sets, request_corporate, limit=4)) == 4


class TestFilterDocuments:
    """Tests for document filtering."""

    def test_every_kept_document_meets_thresholds(self, config):
        documents = [
            _document("https://ok.com", 150, 3.0),
            _document("https://short.com", 99, 3.0),
            _document("https://offtopic.com", 500, 1.0),
            _document("https://failed.com", 200, 3.0, error="blocked"),
            _document("https://best.com", 100, 4.5),
        ]

        kept = filter_documents(documents, config)

        assert [d.url for d in kept] == ["https://best.com", "https://ok.com"]
        assert all(
            d.succeeded and d.word_count >= 100 and d.relevance_score >= 1.5 for d in kept
        )

    def test_clean_content_strips_noise(self):
        cleaned = clean_content("Great  venue\n\nCookie Policy here")
        assert cleaned.startswith("Great venue ")
        assert "cookie" not in cleaned.lower()


# ============================================================================
# Extraction
# ============================================================================


class TestContentExtractor:
    """Tests for batched content extraction."""

    @pytest.mark.asyncio
    async def test_twenty_urls_run_in_four_paced_batches(self, config, monkeypatch):
        recorder = _PauseRecorder()
        monkeypatch.setattr(extraction_module, "pause", recorder)
        sources = [_candidate(f"https://site{i}.com") for i in range(20)]
        pages = {s.url: page_text("Bangalore") for s in sources[:18]}
        discovery = FakeDiscoveryClient(pages=pages)

        documents = await ContentExtractor(discovery, config).extract(sources)

        assert [len(batch) for batch in discovery.extract_calls] == [5, 5, 5, 5]
        assert len(recorder.calls) == 3
        assert [d.url for d in documents] == [s.url for s in sources]
        assert [d.error for d in documents[18:]] == ["blocked", "blocked"]
        assert all(d.succeeded and d.word_count > 100 for d in documents[:18])

    @pytest.mark.asyncio
    async def test_empty_sources_skip_discovery(self, config):
        discovery = FakeDiscoveryClient()
        assert await ContentExtractor(discovery, config).extract([]) == []
        assert discovery.extract_calls == []

    @pytest.mark.asyncio
    async def test_batch_failure_marks_every_url(self, config):
        class BrokenDiscovery(FakeDiscoveryClient):
            async def extract(self, urls):
                raise TimeoutError("extract timed out")

        sources = [_candidate("https://a.com"), _candidate("https://b.com")]
        documents = await ContentExtractor(BrokenDiscovery(), config).extract(sources)

        assert [d.error for d in documents] == ["extract timed out"] * 2

    @pytest.mark.asyncio
    async def test_retry_failed_recovers(self, config):
        sources = [_candidate("https://a.com"), _candidate("https://b.com")]
        discovery = FakeDiscoveryClient(pages={"https://a.com": page_text("Bangalore")})
        extractor = ContentExtractor(discovery, config)
        documents = await extractor.extract(sources)

        discovery.pages["https://b.com"] = page_text("Bangalore")
        retried = await extractor.retry_failed(documents, sources)

        assert all(d.succeeded for d in retried)
        assert retried[1].retry_attempt == 1


# ============================================================================
# Structured extraction
# ============================================================================


class TestStructuredExtractor:
    """Tests for chunked structured extraction."""

    @pytest.mark.asyncio
    async def test_bad_chunk_is_skipped(self, config, request_corporate, monkeypatch):
        recorder = _PauseRecorder()
        monkeypatch.setattr(structured_module, "pause", recorder)
        answers = iter(
            [
                {"venues": [{"name": "Taj West End", "type": "hotel"}], "activities": []},
                "not json at all",
                {"venues": [], "activities": [{"name": "Escape Room"}]},
            ]
        )
        client = FakeCompletionClient({EXTRACT: lambda prompt: next(answers)})
        documents = [_document(f"https://d{i}.com", 150, 3.0) for i in range(7)]

        findings = await StructuredExtractor(client, config).extract(documents, request_corporate)

        assert len(client.calls) == 3
        assert len(recorder.calls) == 2
        assert len(findings) == 2
        assert findings[0].venues[0].name == "Taj West End"
        assert findings[1].activities[0].name == "Escape Room"

    def test_parse_finding_drops_invalid_items(self, request_corporate):
        finding = parse_finding(
            {
                "venues": [{"name": "  "}, {"name": "Bangalore Palace", "type": "venue"}],
                "activities": "not a list",
                "practicalInfo": {"localTips": ["Carry cash"]},
            },
            request_corporate,
        )

        assert [v.name for v in finding.venues] == ["Bangalore Palace"]
        assert finding.venues[0].relevance_score == 3.0
        assert finding.activities == []
        assert finding.practical_info.local_tips == ["Carry cash"]

    @pytest.mark.asyncio
    async def test_no_documents(self, config, request_corporate):
        client = FakeCompletionClient()
        assert await StructuredExtractor(client, config).extract([], request_corporate) == []
        assert client.calls == []


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
