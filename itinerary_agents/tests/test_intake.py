"""
Unit tests for request intake.

Tests budget and date normalization, type classification, completion
JSON extraction and the RequestParser end to end against a fake client.
"""

import pytest

from conftest import PARSE, FakeCompletionClient
from itinerary_agents.intake import RequestParser, parse_budget, parse_date
from itinerary_agents.intake.parser import classify_type, normalize_request
from itinerary_agents.shared.contracts import EventType, ItineraryType
from itinerary_agents.shared.errors import CompletionParseError, ParseError
from itinerary_agents.shared.llm import extract_json, find_json_object


class TestParseBudget:
    """Tests for colloquial budget parsing."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("1.5 lakhs", 150000),
            ("2 lakh", 200000),
            ("3 lac", 300000),
            ("₹1.5 crore", 15000000),
            ("2 cr", 20000000),
            ("50k", 50000),
            ("75 K", 75000),
            ("₹50,000", 50000),
            ("120000", 120000),
            ("80000 across the team", 80000),
            ("50000 INR incl. crafts workshop", 50000),
            ("60000 on credit card", 60000),
            ("1.2 crores", 12000000),
            ("4 lacs all-inclusive", 400000),
        ],
    )
    def test_multipliers(self, text, expected):
        assert parse_budget(text) == expected

    def test_numbers_pass_through(self):
        assert parse_budget(80000) == 80000
        assert parse_budget(1234.5) == 1234.5

    def test_missing_or_invalid_is_zero(self):
        assert parse_budget(None) == 0
        assert parse_budget("no budget given") == 0
        assert parse_budget(True) == 0
        assert parse_budget(-500) == 0

    def test_k_needs_a_digit_before_it(self):
        """A stray 'k' in a word must not multiply the amount."""
        assert parse_budget("5000 for the kids") == 5000


class TestParseDate:
    """Tests for date normalization."""

    def test_iso_passes_through(self):
        assert parse_date("2026-03-10") == "2026-03-10"

    def test_common_formats(self):
        assert parse_date("10/03/2026") == "2026-03-10"
        assert parse_date("10 March 2026") == "2026-03-10"
        assert parse_date("March 10, 2026") == "2026-03-10"

    def test_unparseable_is_flexible(self):
        assert parse_date(None) == "flexible"
        assert parse_date("") == "flexible"
        assert parse_date("next spring") == "flexible"
        assert parse_date("any time") == "flexible"


class TestClassifyType:
    """Tests for itinerary type classification."""

    def test_corporate_keywords(self):
        assert classify_type("CORPORATE") == ItineraryType.CORPORATE
        assert classify_type("Team building offsite for sales") == ItineraryType.CORPORATE

    def test_travel_keywords(self):
        assert classify_type("travel") == ItineraryType.TRAVEL
        assert classify_type("family trip") == ItineraryType.TRAVEL

    def test_ambiguous_returns_none(self):
        assert classify_type("") is None
        assert classify_type("something") is None


class TestNormalizeRequest:
    """Tests for completion-output normalization."""

    def test_ambiguous_type_falls_back_to_user_text(self):
        parsed = normalize_request(
            {"type": "unknown", "location": "Pune"},
            user_input="Conference for 30 people in Pune",
        )
        assert parsed.type == ItineraryType.CORPORATE

    def test_participants_and_duration_default_to_one(self):
        parsed = normalize_request(
            {"type": "travel", "location": "Goa", "participants": "many", "duration": 0}
        )
        assert parsed.participants == 1
        assert parsed.duration == 1

    def test_missing_location_raises(self):
        with pytest.raises(ParseError):
            normalize_request({"type": "travel", "participants": 2})

    def test_event_type_only_for_corporate(self):
        travel = normalize_request(
            {"type": "travel", "location": "Goa", "eventType": "conference"}
        )
        corporate = normalize_request(
            {"type": "corporate", "location": "Goa", "eventType": "conference"}
        )
        assert travel.event_type == EventType.NONE
        assert corporate.event_type == EventType.CONFERENCE

    def test_currency_defaults(self):
        parsed = normalize_request({"type": "travel", "location": "Goa"}, default_currency="USD")
        assert parsed.currency == "USD"


class TestExtractJson:
    """Tests for completion JSON extraction."""

    def test_plain_object(self):
        assert extract_json('{"a": 1}') == {"a": 1}

    def test_object_inside_chatter_and_fences(self):
        raw = 'Sure! Here you go:\n```json\n{"a": {"b": [1, 2]}}\n```\nAnything else?'
        assert extract_json(raw) == {"a": {"b": [1, 2]}}

    def test_braces_inside_strings_are_ignored(self):
        assert find_json_object('x {"text": "use {name} here"} y') == '{"text": "use {name} here"}'

    def test_trailing_commas_cleaned_once(self):
        assert extract_json('{"items": [1, 2,], }') == {"items": [1, 2]}

    def test_no_object_raises(self):
        with pytest.raises(CompletionParseError):
            extract_json("I cannot help with that.")

    def test_empty_raises(self):
        with pytest.raises(CompletionParseError):
            extract_json("")


class TestRequestParser:
    """Tests for RequestParser against a scripted completion client."""

    @pytest.mark.asyncio
    async def test_corporate_training_request(self, config):
        """Lakh budgets and corporate classification survive the round trip."""
        client = FakeCompletionClient(
            {
                PARSE: {
                    "type": "CORPORATE",
                    "location": "Bangalore",
                    "participants": 50,
                    "duration": 1,
                    "budget": "1.5 lakhs",
                    "eventType": "training",
                }
            }
        )
        parsed = await RequestParser(client, config).parse(
            "Corporate training for 50 people in Bangalore. Budget 1.5 lakhs."
        )

        assert parsed.type == ItineraryType.CORPORATE
        assert parsed.location == "Bangalore"
        assert parsed.participants == 50
        assert parsed.budget == 150000
        assert parsed.event_type == EventType.TRAINING
        assert parsed.date == "flexible"

    @pytest.mark.asyncio
    async def test_empty_input_raises_without_calling_service(self, config):
        client = FakeCompletionClient()
        with pytest.raises(ParseError):
            await RequestParser(client, config).parse("   ")
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_non_json_response_raises_after_retries(self, config):
        client = FakeCompletionClient({PARSE: "I am not JSON"})
        with pytest.raises(ParseError):
            await RequestParser(client, config).parse("Trip to Goa")
        assert len(client.calls) == config.completion_retry_attempts

    @pytest.mark.asyncio
    async def test_transient_failure_is_retried(self, config):
        answers = iter([RuntimeError("timeout"), {"type": "travel", "location": "Goa"}])
        client = FakeCompletionClient({PARSE: lambda prompt: next(answers)})

        parsed = await RequestParser(client, config).parse("Trip to Goa")

        assert parsed.location == "Goa"
        assert len(client.calls) == 2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
