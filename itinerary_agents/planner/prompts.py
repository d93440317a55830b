"""Prompt templates for the itinerary planner."""

import json
from typing import Any, Dict

from itinerary_agents.shared.contracts import ActivitySuggestions, ParsedRequest

RESEARCH_RULES = """1. Use ONLY venues and activities from the research data
2. Include specific venue names, addresses, and contact information when available
3. Provide realistic timing based on venue operating hours and costs from research
4. Create logical geographical flow between activities
5. Include buffer time for transitions and meals
6. Include contingency notes for weather or availability issues"""

CORPORATE_SYSTEM_PROMPT = f"""You are an expert corporate event planner creating detailed itineraries.
Use the provided research data to create specific, actionable day-by-day schedules with real venues and activities.

CRITICAL INSTRUCTIONS:
{RESEARCH_RULES}
7. Ensure activities match the corporate event objectives

Output a comprehensive itinerary with specific details that can be immediately implemented."""

TRAVEL_SYSTEM_PROMPT = f"""You are an expert travel planner creating detailed itineraries.
Use the provided research data to create specific, actionable day-by-day travel schedules with real venues and activities.

CRITICAL INSTRUCTIONS:
{RESEARCH_RULES}
7. Balance different types of activities and include cultural immersion using researched venues

Create an itinerary that feels authentic to the destination using real researched venues."""

ITINERARY_SCHEMA = {
    "title": "string",
    "summary": "string",
    "totalBudget": "number",
    "currency": "string",
    "days": [
        {
            "day": "number",
            "date": "string",
            "theme": "string",
            "activities": [
                {
                    "timeSlot": "string (e.g., '9:00 AM - 10:30 AM')",
                    "title": "string",
                    "description": "string",
                    "category": "string",
                    "venue": {
                        "name": "string",
                        "address": "string",
                        "contact": "string",
                        "capacity": "string",
                    },
                    "cost": "number",
                    "requirements": "array of strings",
                    "alternatives": "array of backup options",
                }
            ],
            "totalCost": "number",
            "meals": {
                "breakfast": "object with venue and cost",
                "lunch": "object with venue and cost",
                "dinner": "object with venue and cost",
            },
            "transportation": "string",
            "notes": "string (include contingency arrangements)",
        }
    ],
    "budgetBreakdown": {
        "accommodation": "number",
        "activities": "number",
        "meals": "number",
        "transportation": "number",
        "miscellaneous": "number",
    },
}


def _dump(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def build_corporate_prompt(
    request: ParsedRequest,
    suggestions: ActivitySuggestions,
    research: Dict[str, Any],
) -> str:
    event = request.event_type.value or "corporate event"
    venues = research["venues"]
    activities = research["activities"]
    return f"""Generate a comprehensive corporate itinerary for {event} in {request.location}:

EVENT CONTEXT:
- Type: {event}
- Location: {request.location}
- Participants: {request.participants}
- Duration: {request.duration} days (exactly {request.duration} entries in "days")
- Start date: {request.date}
- Budget: {request.currency} {request.budget:g}
- Focus: {request.focus or 'Not specified'}
- Dietary Requirements: {', '.join(request.dietary) or 'None specified'}
- Special Requests: {request.special_requests or 'None'}

SUGGESTED ACTIVITIES (integrate these with research data):
{_dump(suggestions.to_wire()['activities'])}

RESEARCH DATA TO USE:
Available Venues:
- Meeting Venues: {_dump(venues['meetingVenues'])}
- Accommodations: {_dump(venues['accommodations'])}
- Restaurants: {_dump(venues['restaurants'])}
- Attractions: {_dump(venues['attractions'])}

Available Activities:
- Team Building: {_dump(activities['teamBuilding'])}
- Cultural: {_dump(activities['cultural'])}
- Adventure: {_dump(activities['adventure'])}
- Other: {_dump(activities['other'])}

Budget Guidelines:
{_dump(research['budget'])}

Logistics Information:
{_dump(research['logistics'])}

Use ONLY venues and activities from the research data above. Generate a detailed,
implementable itinerary that maximizes the use of researched information."""


def build_travel_prompt(
    request: ParsedRequest,
    suggestions: ActivitySuggestions,
    research: Dict[str, Any],
) -> str:
    venues = research["venues"]
    activities = research["activities"]
    return f"""Generate a comprehensive travel itinerary for {request.location}:

TRAVEL CONTEXT:
- Destination: {request.location}
- Travelers: {request.participants}
- Duration: {request.duration} days (exactly {request.duration} entries in "days")
- Start date: {request.date}
- Budget: {request.currency} {request.budget:g}
- Preferences: {', '.join(request.preferences) or 'General tourism'}
- Dietary Requirements: {', '.join(request.dietary) or 'None specified'}

SUGGESTED ACTIVITIES (integrate with research):
{_dump(suggestions.to_wire()['activities'])}

RESEARCH DATA TO USE:
Available Venues:
- Accommodations: {_dump(venues['accommodations'])}
- Restaurants: {_dump(venues['restaurants'])}
- Attractions: {_dump(venues['attractions'])}

Available Activities:
- Cultural: {_dump(activities['cultural'])}
- Adventure: {_dump(activities['adventure'])}
- Other: {_dump(activities['other'])}

Budget Guidelines:
{_dump(research['budget'])}

Local Information:
{_dump(research['logistics'])}

Use ONLY venues and activities from the research data. Generate a detailed,
authentic itinerary using the researched venues and activities."""
