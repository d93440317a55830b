"""
Fallback itinerary.

A templated itinerary built without the completion service. Used when
generation fails or when research produced nothing to plan from.
"""

import uuid
from datetime import date, timedelta
from typing import List, Optional, Union

from itinerary_agents.shared.contracts import (
    ActivitySuggestions,
    ConsolidatedResearch,
    DayPlan,
    Itinerary,
    ItineraryActivity,
    ParsedRequest,
    ResearchActivity,
    SuggestedActivity,
    VenueRef,
)
from itinerary_agents.shared.contracts.itinerary import (
    RESEARCH_DATA,
    SUGGESTED,
    utc_now,
)

BUDGET_BREAKDOWN = (
    ("accommodation", 0.40),
    ("activities", 0.30),
    ("meals", 0.20),
    ("transportation", 0.08),
    ("miscellaneous", 0.02),
)
MEAL_SPLIT = (("breakfast", 0.20), ("lunch", 0.35), ("dinner", 0.45))
FALLBACK_TIME_SLOT = "10:00 AM - 12:00 PM"


def day_dates(start: str, days: int) -> List[str]:
    """ISO dates for each day, or ``"TBD"`` when the start date is flexible."""
    try:
        first = date.fromisoformat(start)
    except ValueError:
        return ["TBD"] * days
    return [(first + timedelta(days=i)).isoformat() for i in range(days)]


def _activity_from(
    source: Union[ResearchActivity, SuggestedActivity],
    day_number: int,
    cost: float,
) -> ItineraryActivity:
    if isinstance(source, ResearchActivity):
        title = source.name
        category = source.type or "general"
        venue_name = source.location or "TBD"
        data_source = RESEARCH_DATA
    else:
        title = source.title
        category = source.category or "general"
        venue_name = source.location or "TBD"
        data_source = SUGGESTED
    return ItineraryActivity(
        id=f"day{day_number}_activity1",
        time_slot=FALLBACK_TIME_SLOT,
        title=title or f"Activity {day_number}",
        description=source.description or "Activity details to be confirmed",
        category=category,
        cost=cost,
        venue=VenueRef(name=venue_name, address="To be confirmed", contact="TBD"),
        requirements=list(source.requirements),
        data_source=data_source,
    )


def build_fallback_itinerary(
    request: ParsedRequest,
    suggestions: Optional[ActivitySuggestions],
    research: ConsolidatedResearch,
) -> Itinerary:
    """
    Build a ``duration``-day itinerary with one activity per day.

    Activities are taken round-robin from research activities, or from the
    suggested activities when research has none. Each day's total is an
    even share of the budget.
    """
    pool: List[Union[ResearchActivity, SuggestedActivity]] = list(research.activities)
    if not pool and suggestions is not None:
        pool = list(suggestions.activities)

    duration = request.duration
    per_day = round(request.budget / duration)
    activity_cost = round(request.budget * 0.30 / duration)
    meals_budget = request.budget * 0.20 / duration
    dates = day_dates(request.date, duration)

    days = []
    for i in range(duration):
        day_number = i + 1
        activities = []
        if pool:
            activities.append(_activity_from(pool[i % len(pool)], day_number, activity_cost))
        days.append(
            DayPlan(
                day=day_number,
                date=dates[i],
                theme=f"Day {day_number} Activities",
                activities=activities,
                total_cost=per_day,
                meals={
                    meal: {
                        "venue": "Hotel/Local restaurant" if meal == "breakfast" else "Local restaurant",
                        "cost": round(meals_budget * share),
                    }
                    for meal, share in MEAL_SPLIT
                },
                transportation="Local transport",
                notes="Detailed planning required",
            )
        )

    itinerary = Itinerary(
        id=f"itinerary_{uuid.uuid4().hex[:12]}",
        type=request.type,
        title=f"{request.type.value.title()} Itinerary for {request.location}",
        summary=(
            f"A {duration}-day itinerary for {request.participants} participants"
        ),
        total_budget=request.budget,
        currency=request.currency,
        location=request.location,
        participants=request.participants,
        days=days,
        budget_breakdown={
            category: round(request.budget * share)
            for category, share in BUDGET_BREAKDOWN
        },
        generated_at=utc_now(),
    )
    itinerary.metadata.is_fallback = True
    itinerary.metadata.generator = "fallback"
    return itinerary
