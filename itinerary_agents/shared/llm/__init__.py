"""Completion service client and response parsing."""

from itinerary_agents.shared.llm.client import (
    CompletionClient,
    CompletionOptions,
    OpenAICompletionClient,
    complete_json,
    with_retry,
)
from itinerary_agents.shared.llm.response_parser import extract_json, find_json_object

__all__ = [
    "CompletionClient",
    "CompletionOptions",
    "OpenAICompletionClient",
    "complete_json",
    "with_retry",
    "extract_json",
    "find_json_object",
]
