"""Prompt templates for structured information extraction."""

from typing import List

from itinerary_agents.shared.contracts import ExtractedDocument, ParsedRequest

EXTRACTION_SYSTEM_PROMPT = """You are an expert information extractor for travel and event planning.
Extract specific, actionable information from web content that can be used for itinerary planning.

Focus on extracting:
1. Venue/attraction names with specific details
2. Costs and pricing information
3. Location addresses and contact details
4. Operating hours and availability
5. Special features or highlights
6. Booking requirements
7. Group accommodation capabilities
8. Activity descriptions and requirements

Be specific and factual. Avoid generic descriptions. Only include items that
appear in the provided content."""

EXTRACTION_SCHEMA = {
    "venues": [
        {
            "name": "string",
            "type": "hotel | restaurant | attraction | venue | activity",
            "description": "string",
            "location": "string",
            "address": "string",
            "contact": "string",
            "cost": "string",
            "capacity": "string",
            "operatingHours": "string",
            "highlights": "array of strings",
            "requirements": "array of strings",
            "bookingInfo": "string",
            "sourceUrl": "string",
        }
    ],
    "activities": [
        {
            "name": "string",
            "type": "adventure | cultural | leisure | team_building | dining",
            "description": "string",
            "duration": "string",
            "cost": "string",
            "groupSize": "string",
            "location": "string",
            "requirements": "array of strings",
            "highlights": "array of strings",
            "sourceUrl": "string",
        }
    ],
    "practicalInfo": {
        "transportation": "array of strings",
        "budgetInsights": "array of strings",
        "seasonalTips": "array of strings",
        "localTips": "array of strings",
    },
}


def format_chunk(documents: List[ExtractedDocument], max_chars: int) -> str:
    return "\n\n---\n\n".join(
        f"Source: {doc.title} ({doc.url})\nContent: {doc.content[:max_chars]}..."
        for doc in documents
    )


def build_extraction_prompt(
    request: ParsedRequest, documents: List[ExtractedDocument], max_chars: int
) -> str:
    return f"""Extract structured information for {request.type.value} itinerary planning in {request.location}:

Context:
- Location: {request.location}
- Type: {request.type.value}
- Participants: {request.participants}
- Duration: {request.duration} days
- Budget: {request.currency} {request.budget:g}
- Preferences: {', '.join(request.preferences) or 'None'}

Content to extract from:
{format_chunk(documents, max_chars)}

Extract specific venues, activities, and practical information relevant to the context."""
