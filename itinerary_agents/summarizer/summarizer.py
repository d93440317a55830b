"""
Research summarizer.

Consolidates structured findings and derives the four summary artifacts
(category summaries, recommendations, budget analysis, logistics). Each
artifact has a deterministic fallback, so this stage never fails a run.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Type, TypeVar

from itinerary_agents.shared.config import DEFAULT_CONFIG, PipelineConfig
from itinerary_agents.shared.contracts import (
    BudgetAnalysis,
    CategorySummaries,
    ConsolidatedResearch,
    LogisticsSummary,
    ParsedRequest,
    Recommendations,
    ResearchSummaries,
    StructuredFinding,
)
from itinerary_agents.shared.contracts.base import ContractModel
from itinerary_agents.shared.contracts.summaries import SummaryMetadata
from itinerary_agents.shared.fallback import with_fallback
from itinerary_agents.shared.llm import CompletionClient, CompletionOptions, complete_json
from itinerary_agents.summarizer import prompts
from itinerary_agents.summarizer.consolidation import consolidate
from itinerary_agents.summarizer.fallbacks import (
    budget_distribution,
    fallback_budget_analysis,
    fallback_category_summaries,
    fallback_logistics,
    fallback_recommendations,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=ContractModel)

MIN_VENUES = 3
MIN_ACTIVITIES = 3


def extract_cost_information(research: ConsolidatedResearch) -> Dict[str, Any]:
    """Collect the venues and activities that carry cost information."""
    return {
        "venues": [
            {"name": v.name, "type": v.type, "cost": v.cost, "capacity": v.capacity}
            for v in research.venues
            if v.cost
        ],
        "activities": [
            {"name": a.name, "type": a.type, "cost": a.cost, "groupSize": a.group_size}
            for a in research.activities
            if a.cost
        ],
    }


class ResearchSummarizer:
    """
    Produces ResearchSummaries from structured findings.

    Args:
        completion: Completion service client
        config: Pipeline config (temperature, token limits)
    """

    def __init__(
        self, completion: CompletionClient, config: PipelineConfig = DEFAULT_CONFIG
    ):
        self.completion = completion
        self.config = config

    async def summarize(
        self, findings: List[StructuredFinding], request: ParsedRequest
    ) -> ResearchSummaries:
        research = consolidate(findings)
        logger.info(
            f"[stage=summarize] Consolidated | venues={len(research.venues)}, "
            f"activities={len(research.activities)}"
        )

        fallbacks_used = []

        category_summaries, used = await with_fallback(
            self._structured(
                CategorySummaries,
                prompts.build_category_prompt(research, request),
                prompts.CATEGORY_SYSTEM_PROMPT,
                prompts.CATEGORY_SCHEMA,
            ),
            lambda: fallback_category_summaries(research, request),
            label="category_summaries",
        )
        if used:
            fallbacks_used.append("category_summaries")

        recommendations, used = await with_fallback(
            self._structured(
                Recommendations,
                prompts.build_recommendations_prompt(research, request),
                prompts.RECOMMENDATIONS_SYSTEM_PROMPT,
                prompts.RECOMMENDATIONS_SCHEMA,
            ),
            lambda: fallback_recommendations(research, request),
            label="recommendations",
        )
        if used:
            fallbacks_used.append("recommendations")

        budget_analysis, used = await with_fallback(
            self._structured(
                BudgetAnalysis,
                prompts.build_budget_prompt(extract_cost_information(research), request),
                prompts.BUDGET_SYSTEM_PROMPT,
                prompts.BUDGET_SCHEMA,
            ),
            lambda: fallback_budget_analysis(request),
            label="budget_analysis",
        )
        if used:
            fallbacks_used.append("budget_analysis")
        elif not budget_analysis.recommended_distribution:
            budget_analysis.recommended_distribution = budget_distribution(request)

        logistics_summary, used = await with_fallback(
            self._structured(
                LogisticsSummary,
                prompts.build_logistics_prompt(research, request),
                prompts.LOGISTICS_SYSTEM_PROMPT,
                prompts.LOGISTICS_SCHEMA,
            ),
            lambda: fallback_logistics(request),
            label="logistics_summary",
        )
        if used:
            fallbacks_used.append("logistics_summary")

        summaries = ResearchSummaries(
            consolidated=research,
            category_summaries=category_summaries,
            recommendations=recommendations,
            budget_analysis=budget_analysis,
            logistics_summary=logistics_summary,
            metadata=SummaryMetadata(
                total_venues=len(research.venues),
                total_activities=len(research.activities),
                summarized_at=datetime.now(timezone.utc).isoformat(),
                fallbacks_used=fallbacks_used,
            ),
        )
        logger.info(
            f"[stage=summarize] Completed | fallbacks={fallbacks_used or 'none'}"
        )
        return summaries

    def _structured(
        self,
        model: Type[ModelT],
        prompt: str,
        system_prompt: str,
        schema: Dict[str, Any],
    ) -> Callable[[], Awaitable[ModelT]]:
        async def call() -> ModelT:
            raw = await complete_json(
                self.completion,
                prompt,
                system_prompt=system_prompt,
                schema=schema,
                options=CompletionOptions(
                    temperature=self.config.extraction_temperature,
                    max_tokens=self.config.extraction_max_tokens,
                    json_mode=True,
                ),
            )
            return model.model_validate(raw)

        return call


def validate_summaries(summaries: ResearchSummaries) -> Dict[str, Any]:
    """Flag thin research or incomplete budget and logistics artifacts."""
    warnings = []
    venues = len(summaries.consolidated.venues)
    activities = len(summaries.consolidated.activities)
    if venues < MIN_VENUES:
        warnings.append(f"Only {venues} venues found. Consider broader search.")
    if activities < MIN_ACTIVITIES:
        warnings.append(
            f"Only {activities} activities found. Consider expanding search criteria."
        )

    accommodation = summaries.budget_analysis.cost_breakdown.get("accommodation")
    if accommodation is None or not accommodation.estimated_cost:
        warnings.append("Accommodation cost estimates missing.")
    if not summaries.logistics_summary.transportation_plan.options:
        warnings.append("Transportation options not identified.")

    return {"is_valid": True, "warnings": warnings}


def format_for_planning(summaries: ResearchSummaries) -> Dict[str, Any]:
    """Reshape summaries into the research section of a planning prompt."""
    categories = summaries.category_summaries
    research = summaries.consolidated

    def venues(kind: str) -> List[Dict[str, Any]]:
        return [v.to_wire() for v in research.venues if v.type.lower() == kind]

    def activities(kind: str) -> List[Dict[str, Any]]:
        return [a.to_wire() for a in research.activities if a.type.lower() == kind]

    other_activities = [
        a.to_wire()
        for a in research.activities
        if a.type.lower() not in ("team_building", "cultural", "adventure")
    ]

    return {
        "venues": {
            "accommodations": venues("hotel"),
            "meetingVenues": venues("venue"),
            "restaurants": venues("restaurant"),
            "attractions": venues("attraction"),
        },
        "activities": {
            "teamBuilding": activities("team_building"),
            "cultural": activities("cultural"),
            "adventure": activities("adventure"),
            "other": other_activities,
        },
        "recommendations": {
            "mustHave": [i.to_wire() for i in summaries.recommendations.must_have_items],
            "dayStructures": [
                d.to_wire() for d in summaries.recommendations.day_structure_recommendations
            ],
            "logistics": [
                r.to_wire() for r in summaries.recommendations.logistical_recommendations
            ],
        },
        "budget": {
            "breakdown": {
                k: v.to_wire() for k, v in summaries.budget_analysis.cost_breakdown.items()
            },
            "distribution": summaries.budget_analysis.recommended_distribution,
            "optimizationTips": summaries.budget_analysis.cost_optimization_tips,
        },
        "logistics": summaries.logistics_summary.to_wire(),
        "practicalSummary": categories.practical_summary.to_wire(),
    }
