"""Prompt templates for the research summarizer."""

import json
from typing import Any, Dict, List

from itinerary_agents.shared.contracts import ConsolidatedResearch, ParsedRequest

CATEGORY_SYSTEM_PROMPT = """You are creating comprehensive category summaries for itinerary planning.
Organize and summarize the information in a way that's directly useful for creating detailed day-by-day itineraries.

Focus on:
- Specific venue names, locations and costs
- Group suitability and capacity
- Practical booking and logistics details
Only reference venues and activities present in the provided data."""

RECOMMENDATIONS_SYSTEM_PROMPT = """Generate specific, actionable recommendations for itinerary planning.
Focus on creating recommendations that can be directly used in day-by-day planning with specific venues, activities, and logistics."""

BUDGET_SYSTEM_PROMPT = """Analyze budget implications and create detailed budget breakdowns for itinerary planning.
Provide realistic cost estimates and budget allocation recommendations."""

LOGISTICS_SYSTEM_PROMPT = """Create a comprehensive logistics summary for itinerary planning.
Focus on practical implementation details that will be needed for day-by-day planning."""

CATEGORY_SCHEMA = {
    "accommodationSummary": {
        "overview": "string",
        "topOptions": "array of venue objects",
        "budgetInsights": "string",
        "recommendations": "string",
    },
    "venuesSummary": {
        "overview": "string",
        "conferenceVenues": "array of venue objects",
        "diningOptions": "array of venue objects",
        "attractionVenues": "array of venue objects",
        "recommendations": "string",
    },
    "activitiesSummary": {
        "overview": "string",
        "teamBuildingActivities": "array of activity objects",
        "culturalActivities": "array of activity objects",
        "adventureActivities": "array of activity objects",
        "recommendations": "string",
    },
    "practicalSummary": {
        "transportation": "string",
        "budgetConsiderations": "string",
        "seasonalFactors": "string",
        "localInsights": "string",
    },
}

RECOMMENDATIONS_SCHEMA = {
    "mustHaveItems": [
        {
            "item": "string",
            "type": "venue | activity | service",
            "reasoning": "string",
            "cost": "string",
            "bookingAdvice": "string",
        }
    ],
    "dayStructureRecommendations": [
        {
            "dayType": "string (e.g., 'arrival day', 'main activity day')",
            "structure": "string",
            "recommendedActivities": "array of strings",
            "budgetAllocation": "string",
        }
    ],
    "logisticalRecommendations": [
        {
            "category": "string (e.g., 'transportation', 'meals')",
            "recommendation": "string",
            "cost": "string",
            "implementation": "string",
        }
    ],
    "budgetOptimizationTips": "array of strings",
    "riskMitigation": "array of strings",
}

BUDGET_SCHEMA = {
    "totalBudgetAnalysis": {
        "availableBudget": "number",
        "perPersonBudget": "number",
        "perDayBudget": "number",
        "feasibilityAssessment": "string",
    },
    "costBreakdown": {
        category: {
            "estimatedCost": "number",
            "percentage": "number",
            "options": "array of cost options",
        }
        for category in (
            "accommodation",
            "activities",
            "meals",
            "transportation",
            "miscellaneous",
        )
    },
    "budgetScenarios": [
        {
            "scenario": "string (e.g., 'budget', 'standard', 'premium')",
            "totalCost": "number",
            "description": "string",
            "tradeoffs": "string",
        }
    ],
    "costOptimizationTips": "array of strings",
}

LOGISTICS_SCHEMA = {
    "transportationPlan": {
        "overview": "string",
        "options": [
            {
                "method": "string",
                "cost": "string",
                "suitability": "string",
                "bookingInfo": "string",
            }
        ],
        "recommendations": "string",
    },
    "timingConsiderations": {
        "peakSeasons": "string",
        "operatingHours": "string",
        "bookingLeadTimes": "string",
        "groupScheduling": "string",
    },
    "groupLogistics": {
        "coordinationNeeds": "string",
        "communicationPlan": "string",
        "contingencyPlanning": "string",
    },
    "localFactors": {
        "weather": "string",
        "culturalConsiderations": "string",
        "safetyNotes": "string",
        "emergencyInfo": "string",
    },
}


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _wire(items: List[Any]) -> List[Dict[str, Any]]:
    return [item.to_wire() for item in items]


def request_context(request: ParsedRequest) -> str:
    return f"""- Location: {request.location}
- Type: {request.type.value}
- Participants: {request.participants}
- Duration: {request.duration} days
- Budget: {request.currency} {request.budget:g}"""


def build_category_prompt(research: ConsolidatedResearch, request: ParsedRequest) -> str:
    return f"""Create comprehensive category summaries for {request.type.value} itinerary in {request.location}:

Context:
{request_context(request)}

Available Data:
- Venues: {_dump(_wire(research.venues[:10]))}
- Activities: {_dump(_wire(research.activities[:10]))}
- Practical Info: {_dump(research.practical_info.to_wire())}

Create detailed summaries that will help generate specific, actionable itinerary recommendations."""


def build_recommendations_prompt(
    research: ConsolidatedResearch, request: ParsedRequest
) -> str:
    return f"""Generate actionable recommendations for {request.type.value} itinerary planning:

Context:
{request_context(request)}

Available Options:
Top Venues: {_dump(_wire(research.venues[:5]))}
Top Activities: {_dump(_wire(research.activities[:5]))}

Provide specific, implementable recommendations that can guide detailed itinerary creation."""


def build_budget_prompt(cost_data: Dict[str, Any], request: ParsedRequest) -> str:
    return f"""Analyze budget implications for {request.type.value} itinerary:

Context:
{request_context(request)}

Available Cost Data:
{_dump(cost_data)}

Provide detailed budget analysis and allocation recommendations."""


def build_logistics_prompt(research: ConsolidatedResearch, request: ParsedRequest) -> str:
    practical = research.practical_info
    return f"""Create logistics summary for {request.type.value} itinerary in {request.location}:

Context:
{request_context(request)}

Transportation Info: {_dump(practical.transportation)}
Local Tips: {_dump(practical.local_tips)}
Seasonal Tips: {_dump(practical.seasonal_tips)}

Provide comprehensive logistics guidance for itinerary implementation."""
