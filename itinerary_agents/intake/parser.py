"""
Request parser.

The completion service does the heavy lifting of reading free text; the
functions here normalize its output into a ParsedRequest so later stages
never see ambiguous types, unit-bearing budgets or free-form dates.
"""

import logging
import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from itinerary_agents.intake.prompts import (
    PARSER_SCHEMA,
    PARSER_SYSTEM_PROMPT,
    build_parse_prompt,
)
from itinerary_agents.shared.config import DEFAULT_CONFIG, PipelineConfig
from itinerary_agents.shared.contracts import EventType, ItineraryType, ParsedRequest
from itinerary_agents.shared.errors import ParseError
from itinerary_agents.shared.llm import CompletionClient, CompletionOptions, complete_json

logger = logging.getLogger(__name__)

CORPORATE_KEYWORDS = (
    "corporate",
    "business",
    "training",
    "conference",
    "seminar",
    "offsite",
    "team building",
)

EVENT_TYPE_MAP = {
    "training": EventType.TRAINING,
    "conference": EventType.CONFERENCE,
    "team_building": EventType.TEAM_BUILDING,
    "team building": EventType.TEAM_BUILDING,
    "teambuilding": EventType.TEAM_BUILDING,
    "offsite": EventType.OFFSITE,
    "seminar": EventType.SEMINAR,
}

# Units only count directly after a number, as whole words
BUDGET_UNITS = (
    (re.compile(r"\d\s*(?:crores?|cr)\b"), 10_000_000),
    (re.compile(r"\d\s*(?:lakhs?|lacs?)\b"), 100_000),
    (re.compile(r"\d\s*k\b"), 1_000),
)
NUMBER = re.compile(r"\d+(?:\.\d+)?")

DATE_FORMATS = (
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%d-%m-%Y",
    "%d %B %Y",
    "%d %b %Y",
    "%B %d %Y",
    "%B %d, %Y",
    "%b %d %Y",
    "%b %d, %Y",
)
FLEXIBLE = "flexible"


# ============================================================================
# Normalization helpers
# ============================================================================


def classify_type(value: Any) -> Optional[ItineraryType]:
    """
    Map a type hint onto an ItineraryType.

    Returns None when the hint carries no signal, so the caller can fall
    back to the raw request text.
    """
    text = str(value or "").strip().lower()
    if not text:
        return None
    if any(keyword in text for keyword in CORPORATE_KEYWORDS):
        return ItineraryType.CORPORATE
    if "travel" in text or "trip" in text or "leisure" in text:
        return ItineraryType.TRAVEL
    return None


def parse_budget(value: Any) -> float:
    """
    Parse a budget given as a number or as text with Indian or ``k`` units.

    Examples:
        >>> parse_budget("2 lakh")
        200000
        >>> parse_budget("₹1.5 crore")
        15000000
        >>> parse_budget("50k")
        50000
    """
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, (int, float)):
        return max(value, 0)

    text = str(value).lower().replace(",", "")
    match = NUMBER.search(text)
    if not match:
        return 0
    amount = float(match.group())

    for unit, multiplier in BUDGET_UNITS:
        if unit.search(text):
            amount *= multiplier
            break

    return round(amount)


def parse_date(value: Any) -> str:
    """Return an ISO ``YYYY-MM-DD`` date, or ``"flexible"``."""
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    text = str(value or "").strip()
    lowered = text.lower()
    if not text or "flexible" in lowered or "any" in lowered:
        return FLEXIBLE

    try:
        return datetime.fromisoformat(text).strftime("%Y-%m-%d")
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).strftime("%Y-%m-%d")
        except ValueError:
            continue
    return FLEXIBLE


def map_event_type(value: Any, itinerary_type: ItineraryType) -> EventType:
    if itinerary_type != ItineraryType.CORPORATE:
        return EventType.NONE
    text = str(value or "").strip().lower()
    if not text:
        return EventType.NONE
    return EVENT_TYPE_MAP.get(text, EventType.TRAINING)


def _positive_int(value: Any, default: int = 1) -> int:
    try:
        number = int(float(str(value).strip()))
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if str(item).strip()]


def normalize_request(
    raw: Dict[str, Any],
    user_input: str = "",
    default_currency: str = "INR",
) -> ParsedRequest:
    """
    Normalize completion output into a ParsedRequest.

    Args:
        raw: Parsed completion JSON (camelCase keys)
        user_input: The original request text, used when ``type`` is ambiguous
        default_currency: Currency used when none is given

    Raises:
        ParseError: If the location is missing or the result is invalid
    """
    itinerary_type = (
        classify_type(raw.get("type"))
        or classify_type(user_input)
        or ItineraryType.TRAVEL
    )

    location = str(raw.get("location") or "").strip()
    if not location:
        raise ParseError("Failed to parse input: no destination location found")

    try:
        return ParsedRequest(
            type=itinerary_type,
            location=location,
            participants=_positive_int(raw.get("participants")),
            duration=_positive_int(raw.get("duration")),
            budget=parse_budget(raw.get("budget")),
            currency=str(raw.get("currency") or default_currency).upper(),
            date=parse_date(raw.get("date")),
            preferences=_string_list(raw.get("preferences")),
            dietary=_string_list(raw.get("dietary")),
            event_type=map_event_type(raw.get("eventType"), itinerary_type),
            focus=str(raw.get("focus") or "").strip(),
            special_requests=str(raw.get("specialRequests") or "").strip(),
        )
    except ValidationError as e:
        raise ParseError(f"Failed to parse input: {e}") from e


# ============================================================================
# Parser
# ============================================================================


class RequestParser:
    """
    Parses free-text requests through the completion service.

    Args:
        completion: Completion service client
        config: Pipeline config (retry policy, default currency)
    """

    def __init__(
        self, completion: CompletionClient, config: PipelineConfig = DEFAULT_CONFIG
    ):
        self.completion = completion
        self.config = config

    async def parse(self, user_input: str) -> ParsedRequest:
        """
        Parse a free-text request.

        Raises:
            ParseError: If the input is empty, the completion service fails,
                or its output cannot be normalized
        """
        if not user_input or not user_input.strip():
            raise ParseError("Failed to parse input: request text is empty")

        logger.info(f"[stage=parse] Parsing request | chars={len(user_input)}")
        try:
            raw = await complete_json(
                self.completion,
                build_parse_prompt(user_input),
                system_prompt=PARSER_SYSTEM_PROMPT,
                schema=PARSER_SCHEMA,
                options=CompletionOptions(temperature=0.1, json_mode=True),
                retry_attempts=self.config.completion_retry_attempts,
                retry_backoff=self.config.completion_retry_backoff,
                label="request parse",
            )
        except Exception as e:
            logger.error(f"[stage=parse] Completion failed: {e}")
            raise ParseError(f"Failed to parse input: {e}") from e

        parsed = normalize_request(raw, user_input, self.config.default_currency)
        logger.info(
            f"[stage=parse] Parsed | type={parsed.type.value}, location={parsed.location}, "
            f"participants={parsed.participants}, duration={parsed.duration}d, "
            f"budget={parsed.budget} {parsed.currency}, date={parsed.date}"
        )
        return parsed
