"""
Response parsing for completion-service output.

Completion text is rarely bare JSON: it arrives wrapped in markdown code
blocks, prefixed with chatter, or with trailing commas. The helpers here
locate the first balanced JSON object and give malformed output exactly
one cleanup attempt before failing.
"""

import json
import logging
import re
from typing import Any, Dict, Optional

from itinerary_agents.shared.errors import CompletionParseError

logger = logging.getLogger(__name__)

CODE_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```")
TRAILING_COMMA_PATTERN = re.compile(r",\s*([}\]])")
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")

SMART_QUOTES = {
    "“": '"',
    "”": '"',
    "‘": "'",
    "’": "'",
}


def find_json_object(text: str) -> Optional[str]:
    """
    Return the first balanced ``{...}`` substring of ``text``.

    Braces inside string literals are ignored so values such as
    ``"{placeholder}"`` do not break the brace count.

    Args:
        text: Raw completion text

    Returns:
        The JSON object substring, or None when no balanced object exists
    """
    start = text.find("{")
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for i in range(start, len(text)):
            char = text[i]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return text[start : i + 1]
        # Unbalanced from this brace; try the next opening brace
        start = text.find("{", start + 1)
    return None


def clean_json_text(text: str) -> str:
    """Normalize common completion artifacts that break ``json.loads``."""
    match = CODE_BLOCK_PATTERN.search(text)
    if match:
        text = match.group(1)
    for smart, plain in SMART_QUOTES.items():
        text = text.replace(smart, plain)
    text = CONTROL_CHAR_PATTERN.sub(" ", text)
    text = TRAILING_COMMA_PATTERN.sub(r"\1", text)
    return text.strip()


def extract_json(raw_response: str) -> Dict[str, Any]:
    """
    Parse the first JSON object embedded in a completion response.

    Args:
        raw_response: Raw completion text

    Returns:
        Parsed JSON object

    Raises:
        CompletionParseError: If no object is found, or it still fails to
            parse after one cleanup attempt
    """
    if not raw_response:
        raise CompletionParseError("Empty completion response", raw_response or "")

    candidate = find_json_object(raw_response)
    if candidate is not None:
        try:
            parsed = json.loads(candidate)
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError as e:
            logger.debug(f"First JSON parse failed, attempting cleanup: {e}")

    cleaned = clean_json_text(raw_response)
    candidate = find_json_object(cleaned)
    if candidate is None:
        raise CompletionParseError(
            "No JSON object found in completion response", raw_response
        )
    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise CompletionParseError(
            f"Invalid JSON in completion response: {e}", raw_response
        ) from e
    if not isinstance(parsed, dict):
        raise CompletionParseError("Completion JSON is not an object", raw_response)
    return parsed
