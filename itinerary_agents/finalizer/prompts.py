"""Prompt templates for finalization and refinement."""

import json
from typing import Any, Dict, List, Optional

from itinerary_agents.shared.contracts import Itinerary, ParsedRequest, RefinementScope

OPTIMIZATION_SYSTEM_PROMPT = """Optimize an itinerary for budget efficiency, time management, and logistics.
Ensure activities flow logically, travel times are realistic, and the budget is well-distributed."""

OPTIMIZATION_SCHEMA = {
    "optimizationNotes": "array of strings, one concrete change or check per entry",
}

FINAL_TOUCHES_SYSTEM_PROMPT = """Add final professional touches to an itinerary including:
- Emergency information and contacts
- Weather considerations and packing suggestions
- Cultural etiquette and local customs
- Payment tips
- Last-minute preparation checklist"""

FINAL_NOTES_SCHEMA = {
    "weatherInfo": "string",
    "packingList": "array of strings",
    "culturalTips": "array of strings",
    "emergencyInfo": "string",
    "preparationChecklist": "array of strings",
    "paymentTips": "array of strings",
}

EXECUTIVE_SUMMARY_SYSTEM_PROMPT = """Create a professional executive summary for an itinerary that highlights
key features, value proposition, logistics overview, and investment summary.
Respond with plain text paragraphs, not JSON."""

RESEARCH_REFINE_SYSTEM_PROMPT = """You are refining an existing itinerary while maintaining integration with research data.
Keep all specific venue names and details from research unless explicitly asked to change them.
When making changes, prioritize using venues and activities from the available research data."""

BASIC_REFINE_SYSTEM_PROMPT = """You are refining an existing itinerary according to the user's request.
Change only what the request asks for and keep the rest of the structure, costs and timings intact."""

ACTIVITY_SHAPE = {
    "timeSlot": "string",
    "title": "string",
    "description": "string",
    "category": "string",
    "cost": "number",
    "venue": {"name": "string", "address": "string", "contact": "string"},
    "requirements": "array of strings",
    "alternatives": "array of strings",
}

DAY_SHAPE = {
    "day": "number",
    "date": "string",
    "theme": "string",
    "activities": [ACTIVITY_SHAPE],
    "totalCost": "number",
    "meals": {"breakfast": "object", "lunch": "object", "dinner": "object"},
    "transportation": "string",
    "notes": "string",
}

REFINE_SCHEMAS = {
    "entire": {
        "refinedItinerary": {
            "title": "string",
            "summary": "string",
            "totalBudget": "number",
            "days": [DAY_SHAPE],
            "budgetBreakdown": "object",
        },
        "changesLog": "array of strings",
    },
    "day": {"refinedDay": DAY_SHAPE, "changesLog": "array of strings"},
    "activity": {"refinedActivity": ACTIVITY_SHAPE, "changesLog": "array of strings"},
}


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def _outline(itinerary: Itinerary) -> List[Dict[str, Any]]:
    """Compact day/activity view used in optimization prompts."""
    return [
        {
            "day": day.day,
            "theme": day.theme,
            "totalCost": day.total_cost,
            "activities": [
                {
                    "timeSlot": a.time_slot,
                    "title": a.title,
                    "venue": a.venue.name,
                    "cost": a.cost,
                }
                for a in day.activities
            ],
        }
        for day in itinerary.days
    ]


def build_optimization_prompt(itinerary: Itinerary, request: ParsedRequest) -> str:
    return f"""Review this itinerary and list the optimizations it needs:

{_dump(_outline(itinerary))}

Optimization goals:
1. Budget efficiency - stay within {request.currency} {request.budget:g}
2. Logical flow and minimal travel time
3. Balanced activity distribution
4. Buffer time for meals and rest
5. Contingency planning"""


def build_final_touches_prompt(itinerary: Itinerary, request: ParsedRequest) -> str:
    return f"""Add final touches to this itinerary:

Title: {itinerary.title}
Location: {request.location}
Dates: {request.date} ({request.duration} days)
Participants: {request.participants}
Type: {request.type.value}
Dietary Requirements: {', '.join(request.dietary) or 'None specified'}

Days:
{_dump(_outline(itinerary))}

Add comprehensive final information for a complete, professional itinerary."""


def build_executive_summary_prompt(itinerary: Itinerary, request: ParsedRequest) -> str:
    return f"""Create an executive summary for this itinerary:

Title: {itinerary.title}
Type: {request.type.value}
Location: {request.location}
Participants: {request.participants}
Total Budget: {itinerary.currency} {itinerary.total_budget:g}

Days:
{_dump(_outline(itinerary))}

Include:
- Overview and highlights
- Investment and value summary
- Logistics overview
- Key recommendations
- Success metrics (if applicable)"""


def build_refine_prompt(
    itinerary: Itinerary,
    prompt: str,
    scope: RefinementScope,
    request: ParsedRequest,
    research: Optional[Dict[str, Any]] = None,
) -> str:
    if scope.type == "day":
        target = next(d for d in itinerary.days if d.day == scope.day_number)
        subject = f"Day {scope.day_number} of this itinerary"
        body = target.to_wire()
        instruction = 'Return the complete refined day as "refinedDay".'
    elif scope.type == "activity":
        target = next(a for _, a in itinerary.iter_activities() if a.id == scope.activity_id)
        subject = f"Activity {scope.activity_id} of this itinerary"
        body = target.to_wire()
        instruction = 'Return the complete refined activity as "refinedActivity".'
    else:
        subject = "this itinerary"
        body = {
            "title": itinerary.title,
            "summary": itinerary.summary,
            "totalBudget": itinerary.total_budget,
            "days": [d.to_wire() for d in itinerary.days],
            "budgetBreakdown": itinerary.budget_breakdown,
        }
        instruction = (
            f'Return the complete refined itinerary as "refinedItinerary" with '
            f"exactly {len(itinerary.days)} days unless the request changes the length."
        )

    sections = [
        f"Refine {subject} based on the request:",
        f"Current:\n{_dump(body)}",
        f'Refinement Request: "{prompt}"',
        (
            f"Context: {request.type.value} in {request.location} for "
            f"{request.participants} participants, budget {request.currency} "
            f"{request.budget:g}"
        ),
    ]
    if research is not None:
        sections.append(
            "Available Research Data:\n"
            f"Venues: {_dump(research['venues'])}\n"
            f"Activities: {_dump(research['activities'])}"
        )
        sections.append(
            "Prioritize keeping specific venue names and details from the research "
            "data. When adding new elements, use the available research data."
        )
    sections.append(instruction)
    return "\n\n".join(sections)
