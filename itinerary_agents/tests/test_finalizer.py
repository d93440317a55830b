"""
Unit tests for finalization, refinement and export.
"""

import json

import pytest

from conftest import (
    EXECUTIVE_SUMMARY,
    FINAL_TOUCHES,
    OPTIMIZE,
    REFINE,
    FakeCompletionClient,
    make_request,
)
from itinerary_agents.finalizer import (
    ItineraryFinalizer,
    ItineraryRefiner,
    export_itinerary,
    format_currency,
    request_from_itinerary,
    shareable_version,
    validate_itinerary,
)
from itinerary_agents.finalizer.finalizer import (
    FINAL_VERSION,
    clamp_budget,
    enhance_with_research,
)
from itinerary_agents.shared.contracts import DayPlan, ItineraryActivity, RefinementScope
from itinerary_agents.shared.contracts.itinerary import LLM_GENERATED, RESEARCH_DATA
from itinerary_agents.shared.errors import RefinementError


def _refined_day(first_venue: str, second_venue: str) -> dict:
    return {
        "refinedDay": {
            "day": 1,
            "theme": "Relaxed kickoff",
            "activities": [
                {"timeSlot": "11:00 AM - 1:00 PM", "title": "Late start session", "cost": 8000,
                 "venue": {"name": first_venue}},
                {"timeSlot": "7:00 PM - 9:00 PM", "title": "Team dinner", "cost": 12000,
                 "venue": {"name": second_venue}},
            ],
            "totalCost": 60000,
        }
    }


# ============================================================================
# Finalizer
# ============================================================================


class TestFinalizerPasses:
    """Tests for the individual finalization passes."""

    def test_enhance_fills_only_empty_fields(self, itinerary, research):
        itinerary.days[0].activities[0].venue.contact = "Front desk"

        enhanced = enhance_with_research(itinerary, research)

        biec = itinerary.days[0].activities[0].venue
        taj = itinerary.days[1].activities[0].venue
        assert enhanced == 2
        assert biec.address == "Tumkur Road, Bangalore"
        assert biec.contact == "Front desk"
        assert taj.capacity == "300"
        assert taj.booking_info == "Book 2 weeks ahead"
        assert itinerary.days[1].activities[1].venue.address == ""

    def test_clamp_budget(self, itinerary):
        assert clamp_budget(itinerary, make_request(budget=100000))
        assert itinerary.total_budget == 100000
        assert itinerary.budget_optimized

    def test_clamp_leaves_budget_within_limit(self, itinerary):
        assert not clamp_budget(itinerary, make_request(budget=150000))
        assert itinerary.total_budget == 140000
        assert not clamp_budget(itinerary, make_request(budget=0))

    def test_validation_score(self, itinerary):
        assert validate_itinerary(itinerary).quality_score == 10.0

        itinerary.title = ""
        itinerary.days[0].activities[0].time_slot = ""
        itinerary.days[0].activities[1].cost = -5
        itinerary.days.append(DayPlan(day=3))

        report = validate_itinerary(itinerary)
        assert not report.is_valid
        assert report.errors == ["Missing title"]
        assert len(report.warnings) == 3
        assert report.quality_score == 6.5

    def test_validation_score_floors_at_zero(self, itinerary):
        for _, activity in itinerary.iter_activities():
            activity.title = ""
        itinerary.title = ""
        itinerary.total_budget = 0
        assert validate_itinerary(itinerary).quality_score == 0.0


class TestItineraryFinalizer:
    """Tests for ItineraryFinalizer."""

    @pytest.mark.asyncio
    async def test_fallback_notes_when_service_fails(self, config, itinerary, summaries):
        request = make_request(budget=100000)
        original = itinerary.model_copy(deep=True)

        final = await ItineraryFinalizer(FakeCompletionClient(), config).finalize(
            itinerary, summaries, request
        )

        assert itinerary == original
        assert final.total_budget == 100000
        assert final.budget_optimized
        assert final.optimization_notes[0].startswith("Total budget capped at INR 100000")
        assert "Business attire and laptop" in final.final_notes.packing_list
        assert final.validation.is_valid
        assert final.finalized_at
        assert final.metadata.version == FINAL_VERSION
        assert final.days[1].activities[0].venue.address == "25 Race Course Road, Bangalore"
        assert final.executive_summary == (
            "Executive Summary for Bangalore Leadership Training\n\n"
            "A 2-day corporate itinerary for 50 participants in Bangalore "
            "with a total budget of INR 100000."
        )

    @pytest.mark.asyncio
    async def test_service_notes_are_used(self, config, itinerary, summaries, request_corporate):
        client = FakeCompletionClient(
            {
                OPTIMIZE: {"optimizationNotes": ["Move dinner earlier"]},
                FINAL_TOUCHES: {
                    "finalNotes": {"weatherInfo": "Pleasant, 24°C", "packingList": ["Umbrella"]}
                },
                EXECUTIVE_SUMMARY: "  Two focused days of leadership training in Bangalore.  ",
            }
        )

        final = await ItineraryFinalizer(client, config).finalize(
            itinerary, summaries, request_corporate
        )

        assert final.optimization_notes == ["Move dinner earlier"]
        assert final.final_notes.weather_info == "Pleasant, 24°C"
        assert final.final_notes.packing_list == ["Umbrella"]
        assert not final.budget_optimized
        assert final.executive_summary == "Two focused days of leadership training in Bangalore."
        summary_call = client.calls_for(EXECUTIVE_SUMMARY)[0]
        assert "Total Budget: INR 140000" in summary_call["prompt"]
        assert not summary_call["options"].json_mode

    @pytest.mark.asyncio
    async def test_without_summaries(self, config, itinerary, request_corporate):
        final = await ItineraryFinalizer(FakeCompletionClient(), config).finalize(
            itinerary, None, request_corporate
        )

        assert final.days[1].activities[0].venue.address == ""
        assert final.final_notes.cultural_tips == ["Respect local customs in Bangalore"]


# ============================================================================
# Refinement
# ============================================================================


class TestResearchAwareRefinement:
    """Tests for refinement with research available."""

    @pytest.mark.asyncio
    async def test_day_scope_keeps_refined_venues(self, config, itinerary, summaries):
        client = FakeCompletionClient({REFINE: _refined_day("Random Hall", "Toit Brewpub")})

        refined = await ItineraryRefiner(client, config).refine(
            itinerary,
            "Make day 1 more relaxed",
            RefinementScope(type="day", day_number=1),
            summaries=summaries,
        )

        day_one = refined.days[0].activities
        assert day_one[0].venue.name == "Random Hall"
        assert day_one[0].title == "Late start session"
        assert [a.id for a in day_one] == ["day1_activity1", "day1_activity2"]
        assert [a.data_source for a in day_one] == [LLM_GENERATED, RESEARCH_DATA]
        assert refined.days[0].date == "2026-03-10"
        assert [a.title for a in refined.days[1].activities] == ["Workshop", "Wrap-up coffee"]
        assert refined.metadata.data_integration_score == 50

        entry = refined.refinement_history[-1]
        assert entry.type == "research_aware"
        assert entry.scope.day_number == 1
        assert refined.refined_at
        assert "Available Research Data" in client.calls_for(REFINE)[0]["prompt"]

    @pytest.mark.asyncio
    async def test_activity_scope_can_move_to_another_research_venue(
        self, config, itinerary, summaries
    ):
        client = FakeCompletionClient(
            {
                REFINE: {
                    "refinedActivity": {
                        "title": "Luxury brunch at the hotel",
                        "venue": "Taj West End",
                    }
                }
            }
        )

        refined = await ItineraryRefiner(client, config).refine(
            itinerary,
            "Swap this morning session for a brunch somewhere nicer",
            RefinementScope(type="activity", activity_id="day1_activity1"),
            summaries=summaries,
        )

        brunch, dinner = refined.days[0].activities
        assert brunch.title == "Luxury brunch at the hotel"
        assert brunch.venue.name == "Taj West End"
        assert brunch.data_source == RESEARCH_DATA
        assert dinner.venue.name == "Toit Brewpub"

    @pytest.mark.asyncio
    async def test_entire_scope_restores_only_unmentioned_days(
        self, config, itinerary, summaries
    ):
        payload = {
            "refinedItinerary": {
                "days": [
                    {
                        "day": 1,
                        "activities": [
                            {"title": "Late start session", "venue": "Random Hall"},
                            {"title": "Team dinner", "venue": "Toit Brewpub"},
                        ],
                    },
                    {
                        "day": 2,
                        "activities": [
                            {"title": "Wrap-up coffee", "venue": "Local Cafe"},
                            {"title": "Workshop", "venue": "Somewhere Else"},
                        ],
                    },
                ],
            }
        }
        client = FakeCompletionClient({REFINE: payload})

        refined = await ItineraryRefiner(client, config).refine(
            itinerary, "Make day 1 more relaxed", summaries=summaries
        )

        assert refined.days[0].activities[0].venue.name == "Random Hall"
        coffee, workshop = refined.days[1].activities
        assert coffee.venue.name == "Local Cafe"
        assert workshop.id == "day2_activity2"
        assert workshop.venue.name == "Taj West End"
        assert workshop.data_source == RESEARCH_DATA

    @pytest.mark.asyncio
    async def test_venue_named_in_prompt_may_change(self, config, itinerary, summaries):
        client = FakeCompletionClient(
            {REFINE: _refined_day("Bangalore International Exhibition Centre", "Quiet Garden")}
        )

        refined = await ItineraryRefiner(client, config).refine(
            itinerary,
            "Replace Toit Brewpub with somewhere quieter",
            RefinementScope(type="day", day_number=1),
            summaries=summaries,
        )

        assert refined.days[0].activities[1].venue.name == "Quiet Garden"
        assert refined.days[0].activities[1].data_source == LLM_GENERATED

    @pytest.mark.asyncio
    async def test_history_accumulates(self, config, itinerary, summaries):
        client = FakeCompletionClient(
            {
                REFINE: {
                    "refinedActivity": {
                        "title": "Rooftop dinner",
                        "timeSlot": "8:00 PM - 10:00 PM",
                        "cost": 15000,
                        "venue": "Toit Brewpub",
                    }
                }
            }
        )
        refiner = ItineraryRefiner(client, config)
        scope = RefinementScope(type="activity", activity_id="day1_activity2")

        once = await refiner.refine(itinerary, "Make dinner fancier", scope, summaries=summaries)
        twice = await refiner.refine(once, "Start dinner later", scope, summaries=summaries)

        assert [e.prompt for e in twice.refinement_history] == [
            "Make dinner fancier",
            "Start dinner later",
        ]
        assert once.days[0].activities[1].id == "day1_activity2"
        assert once.days[0].total_cost == 75000
        assert itinerary.refinement_history == []


class TestBasicRefinement:
    """Tests for refinement without research."""

    @pytest.mark.asyncio
    async def test_entire_itinerary(self, config, itinerary):
        payload = {
            "refinedItinerary": {
                "title": "Relaxed Bangalore Training",
                "days": [
                    {"day": 1, "activities": [{"title": "Yoga", "venue": "Cubbon Park"}]},
                    {"day": 2, "activities": [{"title": "Brunch"}, {"title": "Workshop"}]},
                ],
            }
        }
        client = FakeCompletionClient({REFINE: payload})

        refined = await ItineraryRefiner(client, config).refine(itinerary, "Slow it down")

        assert refined.title == "Relaxed Bangalore Training"
        assert refined.total_budget == 140000
        assert [a.id for a in refined.days[1].activities] == ["day2_activity1", "day2_activity2"]
        assert all(a.data_source == LLM_GENERATED for _, a in refined.iter_activities())
        assert refined.refinement_history[-1].type == "basic"
        assert "Available Research Data" not in client.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_empty_prompt(self, config, itinerary):
        client = FakeCompletionClient()
        with pytest.raises(RefinementError):
            await ItineraryRefiner(client, config).refine(itinerary, "  ")
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_missing_target_skips_service(self, config, itinerary):
        client = FakeCompletionClient({REFINE: _refined_day("A", "B")})
        refiner = ItineraryRefiner(client, config)

        with pytest.raises(RefinementError):
            await refiner.refine(itinerary, "Change it", RefinementScope(type="day", day_number=5))
        with pytest.raises(RefinementError):
            await refiner.refine(
                itinerary, "Change it", RefinementScope(type="activity", activity_id="day9_activity1")
            )
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_service_failure_is_wrapped(self, config, itinerary):
        client = FakeCompletionClient({REFINE: "Sorry, I can't do that"})
        with pytest.raises(RefinementError):
            await ItineraryRefiner(client, config).refine(itinerary, "Change it")

    def test_request_from_itinerary(self, itinerary):
        request = request_from_itinerary(itinerary)
        assert request.duration == 2
        assert request.budget == 140000
        assert request.location == "Bangalore"


# ============================================================================
# Export
# ============================================================================


class TestFormatCurrency:
    """Tests for currency formatting."""

    @pytest.mark.parametrize(
        "amount, currency, expected",
        [
            (120000, "INR", "₹1,20,000"),
            (12345678, "INR", "₹1,23,45,678"),
            (999, "INR", "₹999"),
            (1234.5, "USD", "$1,234.5"),
            (1000000, "EUR", "€1,000,000"),
            (-2500, "INR", "-₹2,500"),
            (99.999, "INR", "₹100"),
            (500, "GBP", "₹500"),
        ],
    )
    def test_formats(self, amount, currency, expected):
        assert format_currency(amount, currency) == expected

    def test_non_numeric(self):
        assert format_currency("lots") == "0"
        assert format_currency(None) == "0"


class TestExport:
    """Tests for itinerary export."""

    def test_json_uses_camel_case(self, itinerary):
        data = json.loads(export_itinerary(itinerary, "json"))
        assert data["totalBudget"] == 140000
        assert data["days"][0]["activities"][0]["timeSlot"] == "10:00 AM - 12:00 PM"

    @pytest.mark.parametrize("fmt", ["json", "text", "markdown"])
    def test_export_is_deterministic(self, itinerary, fmt):
        assert export_itinerary(itinerary, fmt) == export_itinerary(itinerary, fmt)

    def test_markdown(self, itinerary):
        markdown = export_itinerary(itinerary, "MARKDOWN")
        assert markdown.startswith("# Bangalore Leadership Training")
        assert "**Total Budget:** ₹1,40,000" in markdown
        assert "## Day 1: Kickoff" in markdown

    def test_text(self, itinerary):
        text = export_itinerary(itinerary, "text")
        assert text.splitlines()[1] == "=" * len("Bangalore Leadership Training")
        assert "Venue: Toit Brewpub" in text

    def test_markdown_includes_executive_summary(self, itinerary):
        itinerary.executive_summary = "Two days of focused training."
        markdown = export_itinerary(itinerary, "markdown")
        assert "## Executive Summary\n\nTwo days of focused training." in markdown

    def test_unsupported_format(self, itinerary):
        with pytest.raises(ValueError):
            export_itinerary(itinerary, "pdf")


class TestShareableVersion:
    """Tests for the participant-facing itinerary view."""

    def test_internal_fields_are_dropped(self, itinerary):
        itinerary.metadata.data_integration_score = 75
        itinerary.optimization_notes = ["Internal note"]

        shared = shareable_version(itinerary)

        assert "id" not in shared
        assert "metadata" not in shared
        assert "refinementHistory" not in shared
        assert "optimizationNotes" not in shared
        assert shared["duration"] == 2
        assert shared["type"] == "corporate"
        assert shared["totalBudget"] == 140000

    def test_activity_view(self, itinerary):
        itinerary.days[0].activities[1].venue.address = "Indiranagar"

        dinner = shareable_version(itinerary)["days"][0]["activities"][1]

        assert dinner == {
            "timeSlot": "7:00 PM - 9:00 PM",
            "title": "Team dinner",
            "description": "Planned activity",
            "cost": 10000,
            "venue": "Toit Brewpub",
            "address": "Indiranagar",
        }

    def test_is_json_serialisable(self, itinerary):
        assert json.loads(json.dumps(shareable_version(itinerary)))["title"] == (
            "Bangalore Leadership Training"
        )


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
