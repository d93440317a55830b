"""
Deterministic fallbacks for the research summaries.

Each builder depends only on the consolidated research and the parsed
request, so a run whose completion calls all fail still produces the
same summaries every time.
"""

from typing import Dict, List

from itinerary_agents.shared.contracts import (
    BudgetAnalysis,
    CategorySummaries,
    ConsolidatedResearch,
    LogisticsSummary,
    ParsedRequest,
    Recommendations,
    ResearchActivity,
    ResearchVenue,
)

# Share of the total budget per spending category
COST_SHARES = (
    ("accommodation", 0.40, ["Budget hotels", "Mid-range hotels", "Premium resorts"]),
    ("activities", 0.30, ["Group activities", "Individual experiences", "Premium tours"]),
    ("meals", 0.20, ["Local restaurants", "Hotel dining", "Catered meals"]),
    ("transportation", 0.08, ["Public transport", "Private bus", "Individual taxis"]),
    ("miscellaneous", 0.02, []),
)

CORPORATE_DISTRIBUTION = {
    "venue": 0.35,
    "catering": 0.30,
    "activities": 0.20,
    "materials": 0.10,
    "miscellaneous": 0.05,
}
TRAVEL_DISTRIBUTION = {
    "accommodation": 0.35,
    "dining": 0.25,
    "activities": 0.25,
    "transport": 0.10,
    "miscellaneous": 0.05,
}

SCENARIOS = (
    ("budget", 0.8, "Basic accommodations and activities", "Limited premium experiences"),
    ("standard", 1.0, "Balanced mix of experiences", "Good value for money"),
    (
        "premium",
        1.2,
        "High-end accommodations and unique experiences",
        "Exceeds initial budget",
    ),
)

OPTIMIZATION_TIPS = [
    "Book accommodations early for group discounts",
    "Consider off-season timing",
    "Look for group discounts",
    "Bundle activities for savings",
]
RISK_MITIGATION = [
    "Have backup indoor activities for weather",
    "Confirm all bookings 48 hours before",
    "Keep emergency contact list",
]


def _venues_of(research: ConsolidatedResearch, kind: str) -> List[ResearchVenue]:
    return [v for v in research.venues if v.type.lower() == kind]


def _activities_of(research: ConsolidatedResearch, kind: str) -> List[ResearchActivity]:
    return [a for a in research.activities if a.type.lower() == kind]


def budget_distribution(request: ParsedRequest) -> Dict[str, float]:
    """Recommended share of budget per category for the itinerary type."""
    if request.is_corporate:
        return dict(CORPORATE_DISTRIBUTION)
    return dict(TRAVEL_DISTRIBUTION)


def fallback_category_summaries(
    research: ConsolidatedResearch, request: ParsedRequest
) -> CategorySummaries:
    hotels = _venues_of(research, "hotel")
    practical = research.practical_info
    return CategorySummaries.model_validate(
        {
            "accommodation_summary": {
                "overview": f"Found {len(hotels)} accommodation options in {request.location}",
                "top_options": hotels[:3],
                "budget_insights": "Cost analysis unavailable",
                "recommendations": "Manual review of accommodation options recommended",
            },
            "venues_summary": {
                "overview": f"Available venues in {request.location}",
                "conference_venues": _venues_of(research, "venue"),
                "dining_options": _venues_of(research, "restaurant"),
                "attraction_venues": _venues_of(research, "attraction"),
                "recommendations": "Review individual venue options",
            },
            "activities_summary": {
                "overview": f"Found {len(research.activities)} activities",
                "team_building_activities": _activities_of(research, "team_building"),
                "cultural_activities": _activities_of(research, "cultural"),
                "adventure_activities": _activities_of(research, "adventure"),
                "recommendations": "Manual activity selection recommended",
            },
            "practical_summary": {
                "transportation": ", ".join(practical.transportation)
                or "Transportation info not available",
                "budget_considerations": ", ".join(practical.budget_insights)
                or "Budget analysis pending",
                "seasonal_factors": ", ".join(practical.seasonal_tips)
                or "Seasonal info not available",
                "local_insights": ", ".join(practical.local_tips)
                or "Local insights not available",
            },
        }
    )


def fallback_recommendations(
    research: ConsolidatedResearch, request: ParsedRequest
) -> Recommendations:
    return Recommendations.model_validate(
        {
            "must_have_items": [
                {
                    "item": venue.name,
                    "type": venue.type,
                    "reasoning": f"High-rated {venue.type} in {request.location}",
                    "cost": venue.cost or "Cost TBD",
                    "booking_advice": venue.booking_info or "Contact venue directly",
                }
                for venue in research.venues[:3]
            ],
            "day_structure_recommendations": [
                {
                    "day_type": "Standard day",
                    "structure": "Morning activity, lunch, afternoon activity, dinner",
                    "recommended_activities": [a.name for a in research.activities[:3]],
                    "budget_allocation": f"{round(request.budget / request.duration)} per day",
                }
            ],
            "logistical_recommendations": [
                {
                    "category": "transportation",
                    "recommendation": "Arrange group transportation",
                    "cost": "TBD",
                    "implementation": "Book in advance",
                }
            ],
            "budget_optimization_tips": OPTIMIZATION_TIPS,
            "risk_mitigation": RISK_MITIGATION,
        }
    )


def fallback_budget_analysis(request: ParsedRequest) -> BudgetAnalysis:
    budget = request.budget
    cost_breakdown = {}
    for category, share, options in COST_SHARES:
        line = {
            "estimated_cost": round(budget * share),
            "percentage": round(share * 100),
            "options": options,
        }
        if category == "miscellaneous":
            line["description"] = "Tips, emergency fund, miscellaneous expenses"
        cost_breakdown[category] = line

    return BudgetAnalysis.model_validate(
        {
            "total_budget_analysis": {
                "available_budget": budget,
                "per_person_budget": round(budget / request.participants),
                "per_day_budget": round(budget / request.duration),
                "feasibility_assessment": (
                    f"Budget of {request.currency} {budget:g} for {request.participants} "
                    f"people over {request.duration} days"
                ),
            },
            "cost_breakdown": cost_breakdown,
            "budget_scenarios": [
                {
                    "scenario": name,
                    "total_cost": round(budget * factor),
                    "description": description,
                    "tradeoffs": tradeoffs,
                }
                for name, factor, description, tradeoffs in SCENARIOS
            ],
            "cost_optimization_tips": OPTIMIZATION_TIPS,
            "risk_mitigation": RISK_MITIGATION,
            "recommended_distribution": budget_distribution(request),
        }
    )


def fallback_logistics(request: ParsedRequest) -> LogisticsSummary:
    return LogisticsSummary.model_validate(
        {
            "transportation_plan": {
                "overview": (
                    f"Transportation planning for {request.participants} people "
                    f"in {request.location}"
                ),
                "options": [
                    {
                        "method": "Private bus/coach",
                        "cost": "TBD - depends on distance and duration",
                        "suitability": "Best for large groups",
                        "booking_info": "Book 2-3 weeks in advance",
                    },
                    {
                        "method": "Multiple taxis/cabs",
                        "cost": "Higher cost but more flexible",
                        "suitability": "Good for smaller groups or split activities",
                        "booking_info": "Can be arranged day-of",
                    },
                ],
                "recommendations": (
                    "Private bus recommended for group cohesion and cost efficiency"
                ),
            },
            "timing_considerations": {
                "peak_seasons": "Check local peak tourist seasons",
                "operating_hours": "Verify venue and attraction operating hours",
                "booking_lead_times": (
                    "Book accommodations and major activities 2-4 weeks ahead"
                ),
                "group_scheduling": "Allow buffer time between activities for group movement",
            },
            "group_logistics": {
                "coordination_needs": "Designate group leaders and point persons",
                "communication_plan": "Set up a group chat for coordination",
                "contingency_planning": "Have backup indoor activities and flexible scheduling",
            },
            "local_factors": {
                "weather": f"Check {request.location} weather patterns for travel dates",
                "cultural_considerations": "Research local customs and dress codes",
                "safety_notes": "Keep emergency contacts and first aid readily available",
                "emergency_info": "Identify nearest hospitals and police stations",
            },
        }
    )
