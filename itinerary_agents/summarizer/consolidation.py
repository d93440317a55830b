"""
Consolidation of structured findings.

Merges per-chunk findings into one deduplicated research set. The first
occurrence of a duplicate wins; sorting by relevance is stable, so ties
keep extraction order.
"""

from typing import Hashable, Iterable, List, TypeVar

from itinerary_agents.shared.contracts import (
    ConsolidatedResearch,
    PracticalInfo,
    ResearchActivity,
    ResearchVenue,
    StructuredFinding,
)

T = TypeVar("T")


def _unique_by_key(items: Iterable[T], key) -> List[T]:
    seen = set()
    unique = []
    for item in items:
        k: Hashable = key(item)
        if k in seen:
            continue
        seen.add(k)
        unique.append(item)
    return unique


def _ordered_set(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))


def consolidate(findings: List[StructuredFinding]) -> ConsolidatedResearch:
    """
    Merge findings into a single ConsolidatedResearch.

    Venues are unique by lowercase ``(name, location)``, activities by
    lowercase ``(name, type)``; both are sorted by descending relevance.
    """
    venues: List[ResearchVenue] = []
    activities: List[ResearchActivity] = []
    transportation, budget_insights, seasonal_tips, local_tips = [], [], [], []

    for finding in findings:
        venues.extend(finding.venues)
        activities.extend(finding.activities)
        transportation.extend(finding.practical_info.transportation)
        budget_insights.extend(finding.practical_info.budget_insights)
        seasonal_tips.extend(finding.practical_info.seasonal_tips)
        local_tips.extend(finding.practical_info.local_tips)

    venues = _unique_by_key(venues, lambda v: v.dedup_key)
    activities = _unique_by_key(activities, lambda a: a.dedup_key)

    return ConsolidatedResearch(
        venues=sorted(venues, key=lambda v: v.relevance_score, reverse=True),
        activities=sorted(activities, key=lambda a: a.relevance_score, reverse=True),
        practical_info=PracticalInfo(
            transportation=_ordered_set(transportation),
            budget_insights=_ordered_set(budget_insights),
            seasonal_tips=_ordered_set(seasonal_tips),
            local_tips=_ordered_set(local_tips),
        ),
    )
