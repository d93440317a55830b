"""
Activity suggestor.

Proposes a first set of candidate activities from the parsed request
alone. Research later grounds the itinerary in real venues; these
suggestions seed the planner and back the fallback itinerary when
research comes up empty.
"""

import logging
from typing import Tuple

from pydantic import ValidationError

from itinerary_agents.shared.config import DEFAULT_CONFIG, PipelineConfig
from itinerary_agents.shared.contracts import ActivitySuggestions, ParsedRequest
from itinerary_agents.shared.fallback import with_fallback
from itinerary_agents.shared.llm import CompletionClient, CompletionOptions, complete_json
from itinerary_agents.suggestions.prompts import (
    CORPORATE_SCHEMA,
    CORPORATE_SYSTEM_PROMPT,
    TRAVEL_SCHEMA,
    TRAVEL_SYSTEM_PROMPT,
    build_corporate_prompt,
    build_travel_prompt,
)

logger = logging.getLogger(__name__)

# (min, max) number of suggestions per itinerary type
CORPORATE_RANGE: Tuple[int, int] = (8, 12)
TRAVEL_RANGE: Tuple[int, int] = (10, 15)
TRAVEL_MIN_CATEGORIES = 3


class ActivitySuggestor:
    def __init__(
        self, completion: CompletionClient, config: PipelineConfig = DEFAULT_CONFIG
    ):
        self.completion = completion
        self.config = config

    async def suggest(self, request: ParsedRequest) -> ActivitySuggestions:
        """
        Suggest activities for the request.

        Never raises: a failed or malformed completion yields an empty
        suggestion set whose notes say why.
        """
        suggestions, used_fallback = await with_fallback(
            lambda: self._generate(request),
            lambda: self._empty(request),
            label="activity_suggestions",
        )
        if not used_fallback:
            logger.info(
                f"[stage=suggest] Suggested {len(suggestions.activities)} activities | "
                f"type={request.type.value}"
            )
        return suggestions

    async def _generate(self, request: ParsedRequest) -> ActivitySuggestions:
        if request.is_corporate:
            prompt, system, schema = (
                build_corporate_prompt(request),
                CORPORATE_SYSTEM_PROMPT,
                CORPORATE_SCHEMA,
            )
            low, high = CORPORATE_RANGE
        else:
            prompt, system, schema = (
                build_travel_prompt(request),
                TRAVEL_SYSTEM_PROMPT,
                TRAVEL_SCHEMA,
            )
            low, high = TRAVEL_RANGE

        raw = await complete_json(
            self.completion,
            prompt,
            system_prompt=system,
            schema=schema,
            options=CompletionOptions(temperature=self.config.temperature, json_mode=True),
        )
        try:
            suggestions = ActivitySuggestions.model_validate(raw)
        except ValidationError as e:
            raise ValueError(f"Suggestion payload failed validation: {e}") from e

        if len(suggestions.activities) > high:
            suggestions.activities = suggestions.activities[:high]
        if len(suggestions.activities) < low:
            logger.warning(
                f"[stage=suggest] Only {len(suggestions.activities)} suggestions "
                f"(expected {low}-{high})"
            )
        if not request.is_corporate:
            categories = {a.category.lower() for a in suggestions.activities if a.category}
            if len(categories) < TRAVEL_MIN_CATEGORIES:
                logger.warning(
                    f"[stage=suggest] Suggestions cover only {len(categories)} categories"
                )
        return suggestions

    @staticmethod
    def _empty(request: ParsedRequest) -> ActivitySuggestions:
        return ActivitySuggestions(
            activities=[],
            total_estimated_cost=0,
            notes=(
                f"Activity suggestions were unavailable for {request.location}; "
                "the itinerary relies on research findings."
            ),
        )
