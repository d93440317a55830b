"""
Unit tests for activity suggestion and itinerary planning.

Tests fallback itineraries, research integration scoring, enrichment and
generation through a scripted completion client.
"""

import pytest

from conftest import (
    PLAN,
    SUGGEST_CORPORATE,
    SUGGEST_TRAVEL,
    FakeCompletionClient,
    make_activity,
    make_request,
    make_summaries,
)
from itinerary_agents.planner import (
    ItineraryPlanner,
    build_fallback_itinerary,
    data_integration_score,
    enrich_itinerary,
    parse_itinerary,
    validate_integration,
)
from itinerary_agents.shared.contracts import (
    ActivitySuggestions,
    ConsolidatedResearch,
    ItineraryType,
    SuggestedActivity,
)
from itinerary_agents.shared.contracts.itinerary import (
    LLM_GENERATED,
    RESEARCH_DATA,
    SUGGESTED,
)
from itinerary_agents.suggestions import ActivitySuggestor


def _suggestions(*titles):
    return ActivitySuggestions(
        activities=[
            SuggestedActivity(title=title, category="team_building", location="Whitefield")
            for title in titles
        ]
    )


def _plan_payload(days):
    return {
        "title": "Bangalore Offsite",
        "summary": "Generated plan",
        "totalBudget": 0,
        "days": [
            {
                "day": 10 + i,
                "date": f"2026-03-1{i}",
                "theme": "Work and play",
                "activities": [
                    {"timeSlot": "9:00 AM - 11:00 AM", "title": "Keynote", "cost": "₹20,000",
                     "venue": {"name": "Taj West End"}},
                    {"timeSlot": "7:00 PM - 9:00 PM", "title": "Dinner", "cost": 15000,
                     "venue": "Toit"},
                    {"timeSlot": "9:30 PM", "title": "Snacks", "venue": {"name": "Street Stall"}},
                ],
                "totalCost": 35000,
            }
            for i in range(days)
        ],
    }


# ============================================================================
# Suggestions
# ============================================================================


class TestActivitySuggestor:
    """Tests for ActivitySuggestor."""

    @pytest.mark.asyncio
    async def test_corporate_suggestions_are_capped(self, config, request_corporate):
        payload = {
            "activities": [{"title": f"Session {i}", "category": "training"} for i in range(15)],
            "totalEstimatedCost": "₹90,000",
        }
        client = FakeCompletionClient({SUGGEST_CORPORATE: payload})

        suggestions = await ActivitySuggestor(client, config).suggest(request_corporate)

        assert len(suggestions.activities) == 12
        assert suggestions.total_estimated_cost == 90000

    @pytest.mark.asyncio
    async def test_failure_yields_empty_set(self, config):
        request = make_request(type=ItineraryType.TRAVEL, location="Goa")
        client = FakeCompletionClient({SUGGEST_TRAVEL: "no json here"})

        suggestions = await ActivitySuggestor(client, config).suggest(request)

        assert suggestions.activities == []
        assert "Goa" in suggestions.notes


# ============================================================================
# Fallback itinerary
# ============================================================================


class TestFallbackItinerary:
    """Tests for the templated itinerary."""

    def test_uses_suggestions_when_research_is_empty(self):
        request = make_request(duration=3, date="2026-03-10")
        itinerary = build_fallback_itinerary(
            request, _suggestions("Escape Room", "Drum Circle"), ConsolidatedResearch()
        )

        assert itinerary.metadata.is_fallback
        assert len(itinerary.days) == 3
        assert [d.date for d in itinerary.days] == ["2026-03-10", "2026-03-11", "2026-03-12"]
        titles = [d.activities[0].title for d in itinerary.days]
        assert titles == ["Escape Room", "Drum Circle", "Escape Room"]
        assert all(d.activities[0].data_source == SUGGESTED for d in itinerary.days)
        assert itinerary.budget_breakdown["accommodation"] == 60000

    def test_research_activities_take_precedence(self, research):
        request = make_request(duration=2)
        itinerary = build_fallback_itinerary(request, _suggestions("Ignored"), research)

        assert itinerary.days[0].activities[0].title == "Nandi Hills Sunrise Trek"
        assert itinerary.days[0].activities[0].data_source == RESEARCH_DATA
        assert itinerary.days[0].date == "TBD"
        assert itinerary.days[0].total_cost == 75000

    def test_no_sources_still_produces_days(self):
        itinerary = build_fallback_itinerary(make_request(duration=2), None, ConsolidatedResearch())
        assert [len(d.activities) for d in itinerary.days] == [0, 0]


# ============================================================================
# Integration
# ============================================================================


class TestIntegration:
    """Tests for research integration scoring."""

    def test_score_counts_substring_matches(self, itinerary, research):
        assert data_integration_score(itinerary, research) == 75

    def test_full_match_scores_100(self, itinerary, research):
        itinerary.days[1].activities[1].venue.name = "taj"
        assert data_integration_score(itinerary, research) == 100

    def test_empty_itinerary_scores_zero(self, itinerary, research):
        for day in itinerary.days:
            day.activities = []
        assert data_integration_score(itinerary, research) == 0

    def test_warnings_name_unmatched_venues(self, itinerary, research):
        report = validate_integration(itinerary, research)

        assert report["warnings"] == [
            'Day 2, Activity 2: Venue "Local Cafe" not found in research data'
        ]
        assert report["suggestions"] == []


# ============================================================================
# Planner
# ============================================================================


class TestParseAndEnrich:
    """Tests for itinerary parsing and enrichment."""

    def test_extra_days_are_trimmed_and_renumbered(self):
        itinerary = parse_itinerary(_plan_payload(3), make_request(duration=2))
        assert [d.day for d in itinerary.days] == [1, 2]

    def test_no_days_is_invalid(self):
        with pytest.raises(ValueError):
            parse_itinerary({"title": "Empty", "days": []}, make_request())

    def test_enrich_stamps_ids_and_sources(self, research):
        request = make_request()
        itinerary = enrich_itinerary(parse_itinerary(_plan_payload(2), request), request, research)

        first_day = itinerary.days[0].activities
        assert [a.id for a in first_day] == [
            "day1_activity1",
            "day1_activity2",
            "day1_activity3",
        ]
        assert [a.data_source for a in first_day] == [RESEARCH_DATA, RESEARCH_DATA, LLM_GENERATED]
        assert itinerary.total_budget == 150000
        assert itinerary.location == "Bangalore"
        assert itinerary.research_data_used == {"venuesCount": 3, "activitiesCount": 2}
        assert itinerary.metadata.data_integration_score == 67
        assert len(itinerary.metadata.integration_warnings) == 2
        assert itinerary.id.startswith("itinerary_")


class TestItineraryPlanner:
    """Tests for ItineraryPlanner."""

    @pytest.mark.asyncio
    async def test_generated_itinerary(self, config, summaries, request_corporate):
        client = FakeCompletionClient({PLAN: _plan_payload(2)})

        itinerary = await ItineraryPlanner(client, config).generate(
            request_corporate, _suggestions("Escape Room"), summaries
        )

        assert not itinerary.metadata.is_fallback
        assert itinerary.metadata.generator == "ItineraryPlanner"
        assert itinerary.days[0].activities[0].cost == 20000
        assert client.calls_for(PLAN)[0]["prompt"].startswith(
            "Generate a comprehensive corporate itinerary"
        )

    @pytest.mark.asyncio
    async def test_empty_research_goes_straight_to_fallback(self, config, request_corporate):
        client = FakeCompletionClient({PLAN: _plan_payload(2)})
        empty = make_summaries(ConsolidatedResearch(), request_corporate)

        itinerary = await ItineraryPlanner(client, config).generate(
            request_corporate, _suggestions("Escape Room"), empty
        )

        assert itinerary.metadata.is_fallback
        assert itinerary.to_wire()["metadata"]["isFallback"] is True
        assert len(itinerary.days) == request_corporate.duration
        assert itinerary.metadata.data_integration_score == 0
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_malformed_generation_falls_back(self, config, summaries, request_corporate):
        client = FakeCompletionClient({PLAN: {"title": "No days here"}})

        itinerary = await ItineraryPlanner(client, config).generate(
            request_corporate, None, summaries
        )

        assert itinerary.metadata.is_fallback
        assert itinerary.days[0].activities[0].title == "Nandi Hills Sunrise Trek"
        assert itinerary.metadata.data_integration_score == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
