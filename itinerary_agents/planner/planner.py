"""
Itinerary planner.

Generates a day-by-day itinerary grounded in the research summaries and
enriches it with ids, provenance and an integration score. Any failure
in generation falls back to the templated itinerary; only a failure of
the fallback itself is fatal.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from pydantic import ValidationError

from itinerary_agents.planner.fallback import build_fallback_itinerary
from itinerary_agents.planner.integration import (
    data_integration_score,
    identify_data_source,
    research_venue_names,
    validate_integration,
)
from itinerary_agents.planner.prompts import (
    CORPORATE_SYSTEM_PROMPT,
    ITINERARY_SCHEMA,
    TRAVEL_SYSTEM_PROMPT,
    build_corporate_prompt,
    build_travel_prompt,
)
from itinerary_agents.shared.config import DEFAULT_CONFIG, PipelineConfig
from itinerary_agents.shared.contracts import (
    ActivitySuggestions,
    ConsolidatedResearch,
    Itinerary,
    ParsedRequest,
    ResearchSummaries,
)
from itinerary_agents.shared.contracts.itinerary import utc_now
from itinerary_agents.shared.errors import PlanningError
from itinerary_agents.shared.llm import CompletionClient, CompletionOptions, complete_json
from itinerary_agents.summarizer import format_for_planning

logger = logging.getLogger(__name__)

GENERATOR = "ItineraryPlanner"
VERSION = "2.0"


def parse_itinerary(raw: Dict[str, Any], request: ParsedRequest) -> Itinerary:
    """
    Validate completion output as an Itinerary.

    Extra days beyond the requested duration are dropped and day numbers
    are rewritten to run 1..n.

    Raises:
        ValueError: If the payload is invalid or has no days
    """
    try:
        itinerary = Itinerary.model_validate(raw)
    except ValidationError as e:
        raise ValueError(f"Itinerary payload failed validation: {e}") from e
    if not itinerary.days:
        raise ValueError("Itinerary payload has no days")
    if len(itinerary.days) > request.duration:
        logger.warning(
            f"[stage=plan] Trimming {len(itinerary.days)} days to {request.duration}"
        )
        itinerary.days = itinerary.days[: request.duration]
    for number, day in enumerate(itinerary.days, start=1):
        day.day = number
    return itinerary


def enrich_itinerary(
    itinerary: Itinerary,
    request: ParsedRequest,
    research: ConsolidatedResearch,
    version: str = VERSION,
) -> Itinerary:
    """
    Stamp identity, request fields, activity ids and research provenance.

    Activity ids follow ``day{n}_activity{m}``; each activity is marked
    ``research_data`` or ``llm_generated``.
    """
    names = research_venue_names(research)
    for day in itinerary.days:
        for index, activity in enumerate(day.activities, start=1):
            activity.id = f"day{day.day}_activity{index}"
            activity.data_source = identify_data_source(activity, names)

    itinerary.id = itinerary.id or f"itinerary_{uuid.uuid4().hex[:12]}"
    itinerary.type = request.type
    itinerary.location = request.location
    itinerary.participants = request.participants
    itinerary.currency = request.currency
    if not itinerary.total_budget:
        itinerary.total_budget = request.budget
    itinerary.generated_at = itinerary.generated_at or utc_now()
    itinerary.research_data_used = {
        "venuesCount": len(research.venues),
        "activitiesCount": len(research.activities),
    }

    validation = validate_integration(itinerary, research)
    itinerary.metadata.version = version
    itinerary.metadata.generator = GENERATOR
    itinerary.metadata.data_integration_score = validation["data_integration_score"]
    itinerary.metadata.integration_warnings = validation["warnings"]
    return itinerary


class ItineraryPlanner:
    """
    Builds itineraries from the request, suggestions and research.

    Args:
        completion: Completion service client
        config: Pipeline config (model defaults)
    """

    def __init__(
        self, completion: CompletionClient, config: PipelineConfig = DEFAULT_CONFIG
    ):
        self.completion = completion
        self.config = config

    async def generate(
        self,
        request: ParsedRequest,
        suggestions: Optional[ActivitySuggestions],
        summaries: ResearchSummaries,
    ) -> Itinerary:
        """
        Generate an itinerary, falling back to the template on any failure.

        Raises:
            PlanningError: If the fallback itinerary cannot be built either
        """
        suggestions = suggestions or ActivitySuggestions()
        research = summaries.consolidated

        if not summaries.has_research:
            logger.warning(
                "[stage=plan] No research venues or activities; using fallback itinerary"
            )
            return self._fallback(request, suggestions, research)

        try:
            itinerary = await self._generate(request, suggestions, summaries)
        except Exception as e:
            logger.warning(f"[stage=plan] Generation failed, using fallback: {e}")
            return self._fallback(request, suggestions, research)

        itinerary = enrich_itinerary(itinerary, request, research)
        logger.info(
            f"[stage=plan] Generated | days={len(itinerary.days)}, "
            f"integration={itinerary.metadata.data_integration_score}%"
        )
        return itinerary

    async def _generate(
        self,
        request: ParsedRequest,
        suggestions: ActivitySuggestions,
        summaries: ResearchSummaries,
    ) -> Itinerary:
        research = format_for_planning(summaries)
        if request.is_corporate:
            prompt = build_corporate_prompt(request, suggestions, research)
            system_prompt = CORPORATE_SYSTEM_PROMPT
        else:
            prompt = build_travel_prompt(request, suggestions, research)
            system_prompt = TRAVEL_SYSTEM_PROMPT

        raw = await complete_json(
            self.completion,
            prompt,
            system_prompt=system_prompt,
            schema=ITINERARY_SCHEMA,
            options=CompletionOptions(
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
                json_mode=True,
            ),
        )
        return parse_itinerary(raw, request)

    @staticmethod
    def _fallback(
        request: ParsedRequest,
        suggestions: ActivitySuggestions,
        research: ConsolidatedResearch,
    ) -> Itinerary:
        try:
            itinerary = build_fallback_itinerary(request, suggestions, research)
        except Exception as e:
            logger.error(f"[stage=plan] Fallback itinerary failed: {e}")
            raise PlanningError(f"Failed to build fallback itinerary: {e}") from e
        itinerary.metadata.data_integration_score = data_integration_score(
            itinerary, research
        )
        return itinerary
