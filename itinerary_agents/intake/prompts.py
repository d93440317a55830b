"""Prompt templates for the request parser."""

PARSER_SYSTEM_PROMPT = """You are an expert input parser for an itinerary generation system.
Your task is to extract structured information from user requests for either travel or corporate event itineraries.

Key guidelines:
1. Determine if this is a TRAVEL or CORPORATE itinerary request
2. Extract all relevant details like location, participants, budget, dates, preferences
3. For corporate events, identify the event type (training, conference, team_building, offsite, seminar)
4. Convert budget amounts to numbers (remove currency symbols, convert lakhs/crores to actual numbers)
5. Parse dates into YYYY-MM-DD format, or 'flexible' when no date is given
6. Extract dietary restrictions and special preferences

Be thorough and accurate in extraction."""

PARSER_SCHEMA = {
    "type": "travel | corporate",
    "location": "string",
    "participants": "number",
    "duration": "number (in days)",
    "budget": "number",
    "currency": "INR | USD | EUR",
    "date": "YYYY-MM-DD format or 'flexible'",
    "preferences": "array of strings",
    "dietary": "array of dietary restrictions",
    "eventType": "training | conference | team_building | offsite | seminar (for corporate only)",
    "focus": "main theme or focus",
    "specialRequests": "any special requirements",
}


def build_parse_prompt(user_input: str) -> str:
    return f'Parse this itinerary request: "{user_input}"'
