"""
Relevance and quality scoring for research results.

Three scales are in play and are deliberately kept apart:

- search relevance: [0, 1], ranks and filters raw search hits
- source relevance: base 1, ranks candidate sources and filters
  extracted documents
- item relevance: base 1, orders venues and activities within findings

All scorers are pure functions of their inputs.
"""

from typing import Iterable
from urllib.parse import urlparse

from itinerary_agents.shared.contracts import ParsedRequest

# Domains boosting search relevance
HIGH_QUALITY_SEARCH_DOMAINS = (
    "tourism.gov.in",
    "incredibleindia.org",
    "tripadvisor.com",
    "lonelyplanet.com",
    "makemytrip.com",
    "goibibo.com",
)

# Domain reputation tiers for candidate sources
HIGH_QUALITY_DOMAINS = (
    "tourism.gov.in",
    "incredibleindia.org",
    "tripadvisor.com",
    "makemytrip.com",
    "goibibo.com",
    "cleartrip.com",
    "yatra.com",
    "thrillophilia.com",
    "holidayiq.com",
    "travelogyindia.com",
)
MEDIUM_QUALITY_DOMAINS = (
    "wikipedia.org",
    "lonelyplanet.com",
    "timesofindia.com",
)

SEARCH_CORPORATE_TERMS = (
    "corporate",
    "business",
    "conference",
    "meeting",
    "seminar",
    "team building",
)
SOURCE_CORPORATE_TERMS = ("corporate", "conference", "meeting", "team building")
ITEM_CORPORATE_TERMS = ("corporate", "conference", "meeting", "team")
GROUP_TERMS = ("group", "groups", "party", "bulk", "multiple")

LONG_CONTENT_CHARS = 500


def _contains_any(text: str, terms: Iterable[str]) -> bool:
    return any(term in text for term in terms)


def _hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


def _preference_hits(text: str, request: ParsedRequest) -> int:
    return sum(1 for pref in request.preferences if pref.lower() in text)


def search_relevance(
    title: str, content: str, url: str, request: ParsedRequest
) -> float:
    """
    Score a search hit against the request, capped at 1.0.

    Base 0.5; +0.4 location substring; +0.2 when every location token
    appears; +0.3 corporate term (corporate requests only); +0.15 per
    matched preference; +0.1 group term when participants > 10; +0.15
    high-quality domain; +0.1 for content over 500 characters.
    """
    text = f"{title} {content}".lower()
    location = request.location.lower()
    score = 0.5

    if location and location in text:
        score += 0.4
    tokens = location.split()
    if tokens and all(token in text for token in tokens):
        score += 0.2

    if request.is_corporate and _contains_any(text, SEARCH_CORPORATE_TERMS):
        score += 0.3

    score += 0.15 * _preference_hits(text, request)

    if request.participants > 10 and _contains_any(text, GROUP_TERMS):
        score += 0.1

    if _contains_any(_hostname(url), HIGH_QUALITY_SEARCH_DOMAINS):
        score += 0.15

    if len(content) > LONG_CONTENT_CHARS:
        score += 0.1

    return min(score, 1.0)


def quality_score(url: str) -> int:
    """Domain reputation tier: 3 high, 2 medium, 1 anything else."""
    url = url.lower()
    if _contains_any(url, HIGH_QUALITY_DOMAINS):
        return 3
    if _contains_any(url, MEDIUM_QUALITY_DOMAINS):
        return 2
    return 1


def source_relevance(title: str, content: str, request: ParsedRequest) -> float:
    """Base 1; +2 location substring; +1.5 corporate term; +1 per preference."""
    text = f"{title} {content}".lower()
    score = 1.0
    if request.location.lower() in text:
        score += 2
    if request.is_corporate and _contains_any(text, SOURCE_CORPORATE_TERMS):
        score += 1.5
    score += _preference_hits(text, request)
    return score


def item_relevance(name: str, description: str, request: ParsedRequest) -> float:
    """Relevance of an extracted venue or activity; same shape as sources."""
    text = f"{name} {description}".lower()
    score = 1.0
    if request.location.lower() in text:
        score += 2
    if request.is_corporate and _contains_any(text, ITEM_CORPORATE_TERMS):
        score += 1.5
    score += _preference_hits(text, request)
    return score
