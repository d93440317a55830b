"""
Itinerary refinement.

Applies a free-text change request to part or all of an itinerary. With
research available the completion service is told to keep researched
venues, and any researched venue it replaced outside the refined target is
put back unless the request names it. Without research a basic refinement
is performed.
"""

import logging
import re
from typing import Any, Dict, Optional, Set

from itinerary_agents.finalizer import prompts
from itinerary_agents.planner.integration import (
    identify_data_source,
    research_venue_names,
    validate_integration,
    venue_from_research,
)
from itinerary_agents.planner.planner import parse_itinerary
from itinerary_agents.shared.config import DEFAULT_CONFIG, PipelineConfig
from itinerary_agents.shared.contracts import (
    ConsolidatedResearch,
    DayPlan,
    Itinerary,
    ItineraryActivity,
    ParsedRequest,
    RefinementEntry,
    RefinementScope,
    ResearchSummaries,
)
from itinerary_agents.shared.contracts.itinerary import LLM_GENERATED, utc_now
from itinerary_agents.shared.errors import RefinementError
from itinerary_agents.shared.llm import CompletionClient, CompletionOptions, complete_json
from itinerary_agents.summarizer import format_for_planning

logger = logging.getLogger(__name__)

RESEARCH_AWARE = "research_aware"
BASIC = "basic"

DAY_MENTION = re.compile(r"\bday\s*(\d+)\b", re.IGNORECASE)


def request_from_itinerary(itinerary: Itinerary) -> ParsedRequest:
    """Rebuild the request context of an itinerary produced elsewhere."""
    return ParsedRequest(
        type=itinerary.type,
        location=itinerary.location or "Unknown",
        participants=max(itinerary.participants, 1),
        duration=max(len(itinerary.days), 1),
        budget=itinerary.total_budget,
        currency=itinerary.currency or DEFAULT_CONFIG.default_currency,
    )


def _assign_ids(day: DayPlan) -> None:
    for index, activity in enumerate(day.activities, start=1):
        activity.id = f"day{day.day}_activity{index}"


def _targeted(
    scope: RefinementScope, mentioned_days: Set[int], day: DayPlan, activity: ItineraryActivity
) -> bool:
    if scope.type == "day":
        return day.day == scope.day_number
    if scope.type == "activity":
        return activity.id == scope.activity_id
    return day.day in mentioned_days


def _activity_key(scope: RefinementScope, day: DayPlan, activity: ItineraryActivity):
    # A full rewrite may reorder activities, so ids are not stable there
    if scope.type == "entire":
        return day.day, activity.title.strip().lower()
    return activity.id or None


def restore_research_venues(
    original: Itinerary,
    refined: Itinerary,
    prompt: str,
    research: ConsolidatedResearch,
    scope: Optional[RefinementScope] = None,
) -> int:
    """
    Put back researched venues the refinement replaced outside its target.

    The refinement target is left as refined: the scoped day or activity,
    or for ``entire`` scope every day the prompt mentions by number.
    Elsewhere activities are matched by id, or by day and title for
    ``entire`` scope. A venue is only restored when its name does not
    appear in the refinement prompt.

    Returns:
        Number of venues restored
    """
    scope = scope or RefinementScope()
    names = research_venue_names(research)
    requested = prompt.lower()
    mentioned_days = {int(number) for number in DAY_MENTION.findall(prompt)}
    researched = {
        _activity_key(scope, day, activity): activity.venue
        for day, activity in original.iter_activities()
        if venue_from_research(activity.venue.name, names)
    }
    researched.pop(None, None)

    restored = 0
    for day, activity in refined.iter_activities():
        if _targeted(scope, mentioned_days, day, activity):
            continue
        venue = researched.get(_activity_key(scope, day, activity))
        if venue is None or venue.name.lower() in requested:
            continue
        if activity.venue.name.strip().lower() != venue.name.strip().lower():
            logger.info(
                f"[stage=refine] Restoring researched venue {venue.name!r} "
                f"for {activity.id} (was {activity.venue.name!r})"
            )
            activity.venue = venue.model_copy()
            restored += 1
    return restored


def merge_refinement(
    itinerary: Itinerary,
    raw: Dict[str, Any],
    scope: RefinementScope,
    request: ParsedRequest,
) -> Itinerary:
    """
    Replace the scoped part of a copy of ``itinerary`` with the refined payload.

    Raises:
        RefinementError: If the scope target does not exist
        ValueError: If the payload is unusable
    """
    refined = itinerary.model_copy(deep=True)

    if scope.type == "entire":
        parsed = parse_itinerary(raw.get("refinedItinerary", raw), request)
        refined.days = parsed.days
        for day in refined.days:
            _assign_ids(day)
        if parsed.title:
            refined.title = parsed.title
        if parsed.summary:
            refined.summary = parsed.summary
        if parsed.total_budget:
            refined.total_budget = parsed.total_budget
        if parsed.budget_breakdown:
            refined.budget_breakdown = parsed.budget_breakdown
        return refined

    if scope.type == "day":
        index = _day_index(refined, scope.day_number)
        new_day = DayPlan.model_validate(raw.get("refinedDay", raw))
        new_day.day = scope.day_number
        if not new_day.date:
            new_day.date = refined.days[index].date
        if not new_day.activities:
            raise ValueError(f"Refined day {scope.day_number} has no activities")
        _assign_ids(new_day)
        refined.days[index] = new_day
        return refined

    day_index, activity_index = _activity_index(refined, scope.activity_id)
    day = refined.days[day_index]
    old = day.activities[activity_index]
    new_activity = ItineraryActivity.model_validate(raw.get("refinedActivity", raw))
    if not new_activity.title:
        raise ValueError(f"Refined activity {scope.activity_id} has no title")
    new_activity.id = old.id
    day.activities[activity_index] = new_activity
    day.total_cost = max(0.0, day.total_cost - old.cost + new_activity.cost)
    return refined


def _day_index(itinerary: Itinerary, day_number: Optional[int]) -> int:
    for index, day in enumerate(itinerary.days):
        if day.day == day_number:
            return index
    raise RefinementError(f"Day {day_number} not found in itinerary")


def _activity_index(itinerary: Itinerary, activity_id: Optional[str]):
    for day_index, day in enumerate(itinerary.days):
        for activity_index, activity in enumerate(day.activities):
            if activity.id == activity_id:
                return day_index, activity_index
    raise RefinementError(f"Activity {activity_id} not found in itinerary")


class ItineraryRefiner:
    """
    Refines itineraries, research-aware when research is available.

    Args:
        completion: Completion service client
        config: Pipeline config
    """

    def __init__(
        self, completion: CompletionClient, config: PipelineConfig = DEFAULT_CONFIG
    ):
        self.completion = completion
        self.config = config

    async def refine(
        self,
        itinerary: Itinerary,
        prompt: str,
        scope: Optional[RefinementScope] = None,
        request: Optional[ParsedRequest] = None,
        summaries: Optional[ResearchSummaries] = None,
    ) -> Itinerary:
        """
        Apply ``prompt`` to the scoped part of ``itinerary``.

        The input itinerary is not modified. Prior refinement history is
        kept and a new entry appended.

        Raises:
            RefinementError: On an empty prompt, a missing scope target or any
                completion failure
        """
        if not prompt or not prompt.strip():
            raise RefinementError("Refinement prompt is empty")
        scope = scope or RefinementScope()
        request = request or request_from_itinerary(itinerary)
        research_aware = summaries is not None and summaries.has_research
        kind = RESEARCH_AWARE if research_aware else BASIC

        # Resolve the target before spending a completion call
        if scope.type == "day":
            _day_index(itinerary, scope.day_number)
        elif scope.type == "activity":
            _activity_index(itinerary, scope.activity_id)

        logger.info(f"[stage=refine] Starting | type={kind}, scope={scope.type}")
        try:
            raw = await complete_json(
                self.completion,
                prompts.build_refine_prompt(
                    itinerary,
                    prompt,
                    scope,
                    request,
                    format_for_planning(summaries) if research_aware else None,
                ),
                system_prompt=(
                    prompts.RESEARCH_REFINE_SYSTEM_PROMPT
                    if research_aware
                    else prompts.BASIC_REFINE_SYSTEM_PROMPT
                ),
                schema=prompts.REFINE_SCHEMAS[scope.type],
                options=CompletionOptions(
                    temperature=self.config.temperature,
                    max_tokens=self.config.max_tokens,
                    json_mode=True,
                ),
            )
            refined = merge_refinement(itinerary, raw, scope, request)
        except RefinementError:
            raise
        except Exception as e:
            logger.error(f"[stage=refine] Failed: {e}")
            raise RefinementError(f"Refinement failed: {e}") from e

        if research_aware:
            research = summaries.consolidated
            restore_research_venues(itinerary, refined, prompt, research, scope)
            names = research_venue_names(research)
            for _, activity in refined.iter_activities():
                activity.data_source = identify_data_source(activity, names)
            validation = validate_integration(refined, research)
            refined.metadata.data_integration_score = validation["data_integration_score"]
            refined.metadata.integration_warnings = validation["warnings"]
        else:
            for _, activity in refined.iter_activities():
                activity.data_source = activity.data_source or LLM_GENERATED

        refined.refinement_history.append(
            RefinementEntry(prompt=prompt, type=kind, scope=scope)
        )
        refined.refined_at = utc_now()
        logger.info(
            f"[stage=refine] Completed | type={kind}, "
            f"history={len(refined.refinement_history)}"
        )
        return refined
