"""Prompt templates for the activity suggestor."""

from itinerary_agents.shared.contracts import ParsedRequest

CORPORATE_SYSTEM_PROMPT = """You are an expert corporate event planner. Generate engaging, practical activities
for corporate events based on the input parameters. Consider team size, budget, duration, and event focus.

Key considerations:
- Participant engagement and interaction
- Budget appropriateness
- Time management and flow
- Professional yet engaging atmosphere
- Measurable outcomes where applicable

Output activities with specific details including duration, estimated costs, and requirements."""

TRAVEL_SYSTEM_PROMPT = """You are an expert travel guide and activity planner. Suggest diverse, engaging
activities for tourists based on location, group size, duration, and preferences.

Consider local culture and attractions, budget constraints, group dynamics,
seasonal factors and travel logistics. Mix activity types (cultural, adventure,
leisure, dining, shopping).

Provide practical, actionable suggestions with realistic timing and costs."""

CORPORATE_SCHEMA = {
    "activities": [
        {
            "title": "string",
            "description": "string",
            "category": "networking | presentation | team_building | break | dining",
            "duration": "string (e.g., '2 hours')",
            "estimatedCost": "number",
            "participants": "number",
            "requirements": "array of strings",
            "timeSlot": "string (e.g., '9:00 AM - 11:00 AM')",
            "alternatives": "array of alternative options",
        }
    ],
    "totalEstimatedCost": "number",
    "notes": "string",
}

TRAVEL_SCHEMA = {
    "activities": [
        {
            "title": "string",
            "description": "string",
            "category": "cultural | adventure | leisure | dining | shopping",
            "duration": "string",
            "estimatedCost": "number",
            "participants": "number",
            "location": "string",
            "timeSlot": "string",
            "requirements": "array of strings",
            "alternatives": "array of strings",
        }
    ],
    "totalEstimatedCost": "number",
    "notes": "string",
}


def _join(values) -> str:
    return ", ".join(values) or "none"


def build_corporate_prompt(request: ParsedRequest) -> str:
    return f"""Generate corporate activities for:
- Event Type: {request.event_type.value or 'general'}
- Location: {request.location}
- Participants: {request.participants}
- Duration: {request.duration} days
- Budget: {request.currency} {request.budget:g}
- Focus: {request.focus or 'not specified'}
- Dietary Requirements: {_join(request.dietary)}
- Special Requests: {request.special_requests or 'none'}

Suggest 8-12 activities that would work well for this corporate event."""


def build_travel_prompt(request: ParsedRequest) -> str:
    return f"""Generate travel activities for:
- Destination: {request.location}
- Participants: {request.participants}
- Duration: {request.duration} days
- Budget: {request.currency} {request.budget:g}
- Preferences: {_join(request.preferences)}
- Dietary Requirements: {_join(request.dietary)}
- Special Requests: {request.special_requests or 'none'}

Suggest 10-15 diverse activities covering at least 3 different categories and varied time slots."""
