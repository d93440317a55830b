"""
Itinerary finalizer.

Runs five passes over a generated itinerary:

1. Enhance: copy research venue details (address, contact, capacity,
   booking info) into matching activity venues.
2. Optimize: cap the total budget at the requested budget and attach
   optimization notes.
3. Final touches: weather, packing, etiquette, emergency and payment notes.
4. Executive summary: a short plain-text overview for stakeholders.
5. Validate: structural errors and warnings with a 0-10 quality score.

Only the completion-backed parts of passes 2 to 4 can fail, and each
degrades to deterministic content.
"""

import logging
from typing import Any, Dict, List, Optional

from itinerary_agents.finalizer import prompts
from itinerary_agents.planner.integration import research_venue_names, venue_from_research
from itinerary_agents.shared.config import DEFAULT_CONFIG, PipelineConfig
from itinerary_agents.shared.contracts import (
    ConsolidatedResearch,
    FinalNotes,
    Itinerary,
    ParsedRequest,
    ResearchSummaries,
    ResearchVenue,
    ValidationReport,
)
from itinerary_agents.shared.contracts.base import coerce_text_list
from itinerary_agents.shared.contracts.itinerary import utc_now
from itinerary_agents.shared.fallback import with_fallback
from itinerary_agents.shared.llm import CompletionClient, CompletionOptions, complete_json
from itinerary_agents.summarizer.fallbacks import OPTIMIZATION_TIPS, RISK_MITIGATION

logger = logging.getLogger(__name__)

FINAL_VERSION = "1.0-final"
ERROR_PENALTY = 2.0
WARNING_PENALTY = 0.5
MAX_QUALITY_SCORE = 10.0

DEFAULT_PACKING = [
    "Government-issued photo ID",
    "Comfortable walking shoes",
    "Phone charger and power bank",
    "Basic medicines and first-aid kit",
]
DEFAULT_CHECKLIST = [
    "Confirm all bookings 48 hours before departure",
    "Share the final itinerary with all participants",
    "Collect emergency contacts for every participant",
]


# ============================================================================
# Passes
# ============================================================================


def _matching_venue(name: str, research: ConsolidatedResearch) -> Optional[ResearchVenue]:
    names = research_venue_names(research)
    if not venue_from_research(name, names):
        return None
    needle = name.strip().lower()
    for venue in research.venues:
        if needle in venue.name.lower():
            return venue
    return None


def enhance_with_research(itinerary: Itinerary, research: ConsolidatedResearch) -> int:
    """
    Fill empty venue detail fields from matching research venues.

    Existing values are never overwritten.

    Returns:
        Number of activities that received at least one detail
    """
    enhanced = 0
    for _, activity in itinerary.iter_activities():
        match = _matching_venue(activity.venue.name, research)
        if match is None:
            continue
        changed = False
        for field in ("address", "contact", "capacity", "booking_info"):
            value = getattr(match, field)
            if value and not getattr(activity.venue, field):
                setattr(activity.venue, field, value)
                changed = True
        if changed:
            enhanced += 1
    return enhanced


def clamp_budget(itinerary: Itinerary, request: ParsedRequest) -> bool:
    """Cap ``total_budget`` at the requested budget; True when it was capped."""
    if request.budget > 0 and itinerary.total_budget > request.budget:
        logger.info(
            f"[stage=finalize] Capping total budget {itinerary.total_budget:g} "
            f"-> {request.budget:g}"
        )
        itinerary.total_budget = request.budget
        itinerary.budget_optimized = True
        return True
    return False


def fallback_optimization_notes(
    itinerary: Itinerary, request: ParsedRequest, summaries: Optional[ResearchSummaries]
) -> List[str]:
    notes = []
    if itinerary.budget_optimized:
        notes.append(
            f"Total budget capped at {request.currency} {request.budget:g} "
            "to match the requested budget"
        )
    for day in itinerary.days:
        if not day.activities:
            notes.append(f"Day {day.day} has no scheduled activities; add a buffer activity")
    tips = summaries.budget_analysis.cost_optimization_tips if summaries else []
    notes.extend(tips or OPTIMIZATION_TIPS)
    return notes


def fallback_final_notes(
    request: ParsedRequest, summaries: Optional[ResearchSummaries]
) -> FinalNotes:
    weather = ""
    emergency = ""
    cultural: List[str] = []
    if summaries is not None:
        local = summaries.logistics_summary.local_factors
        weather = local.weather
        emergency = local.emergency_info
        if local.cultural_considerations:
            cultural.append(local.cultural_considerations)
        cultural.extend(summaries.consolidated.practical_info.local_tips)
        if not weather and summaries.consolidated.practical_info.seasonal_tips:
            weather = summaries.consolidated.practical_info.seasonal_tips[0]

    packing = list(DEFAULT_PACKING)
    if request.is_corporate:
        packing.append("Business attire and laptop")
    return FinalNotes(
        weather_info=weather or f"Check the local forecast for {request.location} before travel",
        packing_list=packing,
        cultural_tips=cultural or [f"Respect local customs in {request.location}"],
        emergency_info=emergency or "Dial 112 for emergencies; keep the hotel front desk number handy",
        preparation_checklist=DEFAULT_CHECKLIST + RISK_MITIGATION[:1],
        payment_tips=[
            f"Carry some cash in {request.currency} for small vendors",
            "Confirm group payment terms with venues in advance",
        ],
    )


def fallback_executive_summary(itinerary: Itinerary) -> str:
    """One-paragraph summary built from the itinerary alone."""
    title = itinerary.title or "Itinerary"
    return (
        f"Executive Summary for {title}\n\n"
        f"A {len(itinerary.days)}-day {itinerary.type.value} itinerary for "
        f"{itinerary.participants} participants in {itinerary.location} with a "
        f"total budget of {itinerary.currency} {itinerary.total_budget:g}."
    )

def validate_itinerary(itinerary: Itinerary) -> ValidationReport:
    """
    Check structural completeness.

    Missing title, days, budget or activity titles are errors; empty days,
    missing time slots and negative costs are warnings. The quality score
    starts at 10 and loses 2 per error and 0.5 per warning, floored at 0.
    """
    errors = []
    warnings = []
    if not itinerary.title:
        errors.append("Missing title")
    if not itinerary.days:
        errors.append("No days defined")
    if not itinerary.total_budget:
        errors.append("Missing budget")

    for day_index, day in enumerate(itinerary.days, start=1):
        if not day.activities:
            warnings.append(f"Day {day_index} has no activities")
        for activity_index, activity in enumerate(day.activities, start=1):
            where = f"Day {day_index}, Activity {activity_index}"
            if not activity.title:
                errors.append(f"{where}: Missing title")
            if not activity.time_slot:
                warnings.append(f"{where}: Missing time slot")
            if activity.cost < 0:
                warnings.append(f"{where}: Negative cost")

    score = MAX_QUALITY_SCORE - ERROR_PENALTY * len(errors) - WARNING_PENALTY * len(warnings)
    return ValidationReport(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        quality_score=max(0.0, score),
    )


# ============================================================================
# Finalizer
# ============================================================================


class ItineraryFinalizer:
    """
    Enhances, optimizes, annotates and validates a generated itinerary.

    Args:
        completion: Completion service client
        config: Pipeline config
    """

    def __init__(
        self, completion: CompletionClient, config: PipelineConfig = DEFAULT_CONFIG
    ):
        self.completion = completion
        self.config = config

    async def finalize(
        self,
        itinerary: Itinerary,
        summaries: Optional[ResearchSummaries],
        request: ParsedRequest,
    ) -> Itinerary:
        """
        Produce the final itinerary. The input is not modified.

        Returns:
            A new Itinerary with finalNotes, validation and finalizedAt set
        """
        final = itinerary.model_copy(deep=True)

        if summaries is not None:
            enhanced = enhance_with_research(final, summaries.consolidated)
            logger.info(f"[stage=finalize] Enhanced {enhanced} activities from research")

        clamp_budget(final, request)
        final.optimization_notes, _ = await with_fallback(
            lambda: self._optimization_notes(final, request),
            lambda: fallback_optimization_notes(final, request, summaries),
            label="optimization_notes",
        )

        final.final_notes, _ = await with_fallback(
            lambda: self._final_notes(final, request),
            lambda: fallback_final_notes(request, summaries),
            label="final_notes",
        )

        final.executive_summary, _ = await with_fallback(
            lambda: self._executive_summary(final, request),
            lambda: fallback_executive_summary(final),
            label="executive_summary",
        )

        final.validation = validate_itinerary(final)
        final.finalized_at = utc_now()
        final.metadata.version = FINAL_VERSION

        logger.info(
            f"[stage=finalize] Completed | valid={final.validation.is_valid}, "
            f"quality={final.validation.quality_score:g}, "
            f"budget_optimized={final.budget_optimized}"
        )
        if final.validation.errors:
            logger.warning(f"[stage=finalize] Validation errors: {final.validation.errors}")
        return final

    def _options(self) -> CompletionOptions:
        return CompletionOptions(
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            json_mode=True,
        )

    async def _optimization_notes(
        self, itinerary: Itinerary, request: ParsedRequest
    ) -> List[str]:
        raw = await complete_json(
            self.completion,
            prompts.build_optimization_prompt(itinerary, request),
            system_prompt=prompts.OPTIMIZATION_SYSTEM_PROMPT,
            schema=prompts.OPTIMIZATION_SCHEMA,
            options=self._options(),
        )
        notes = coerce_text_list(raw.get("optimizationNotes"))
        if not notes:
            raise ValueError("No optimization notes returned")
        return notes

    async def _final_notes(self, itinerary: Itinerary, request: ParsedRequest) -> FinalNotes:
        raw: Dict[str, Any] = await complete_json(
            self.completion,
            prompts.build_final_touches_prompt(itinerary, request),
            system_prompt=prompts.FINAL_TOUCHES_SYSTEM_PROMPT,
            schema=prompts.FINAL_NOTES_SCHEMA,
            options=self._options(),
        )
        return FinalNotes.model_validate(raw.get("finalNotes", raw))

    async def _executive_summary(self, itinerary: Itinerary, request: ParsedRequest) -> str:
        text = await self.completion.complete(
            prompts.build_executive_summary_prompt(itinerary, request),
            prompts.EXECUTIVE_SUMMARY_SYSTEM_PROMPT,
            CompletionOptions(
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            ),
        )
        if not text.strip():
            raise ValueError("Empty executive summary returned")
        return text.strip()
