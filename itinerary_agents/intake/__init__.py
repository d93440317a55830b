"""
Request intake.

Turns a free-text request into a normalized ParsedRequest. This is the
only stage whose failure aborts a run before research starts.
"""

from itinerary_agents.intake.parser import RequestParser, parse_budget, parse_date

__all__ = ["RequestParser", "parse_budget", "parse_date"]
