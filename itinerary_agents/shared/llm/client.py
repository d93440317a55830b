"""
Completion service client with opt-in retry logic.

Every LLM-backed stage depends on the ``CompletionClient`` protocol rather
than on a concrete SDK, so tests and alternative providers can be injected
through the workflow controller. ``OpenAICompletionClient`` works against
any OpenAI-compatible endpoint (OpenAI, Groq, ...) via ``base_url``.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, TypeVar

from openai import AsyncOpenAI
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from itinerary_agents.shared.config import DEFAULT_CONFIG, PipelineConfig
from itinerary_agents.shared.llm.response_parser import extract_json

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CompletionOptions:
    """Per-call overrides for a completion request."""

    model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    json_mode: bool = False


class CompletionClient(Protocol):
    """Anything that turns a prompt into completion text."""

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        options: Optional[CompletionOptions] = None,
    ) -> str:
        ...


class OpenAICompletionClient:
    """
    Completion client backed by the OpenAI chat completions API.

    Args:
        api_key: API key for the endpoint
        base_url: Optional OpenAI-compatible base URL (e.g. Groq)
        config: Pipeline config providing model defaults
        client: Pre-built AsyncOpenAI instance (takes precedence over api_key)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        config: PipelineConfig = DEFAULT_CONFIG,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.config = config
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)

    async def complete(
        self,
        prompt: str,
        system_prompt: Optional[str] = None,
        options: Optional[CompletionOptions] = None,
    ) -> str:
        options = options or CompletionOptions()
        messages: List[Dict[str, str]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": prompt})

        kwargs: Dict[str, Any] = {
            "model": options.model or self.config.model,
            "messages": messages,
            "max_tokens": options.max_tokens or self.config.max_tokens,
            "temperature": (
                options.temperature
                if options.temperature is not None
                else self.config.temperature
            ),
        }
        if options.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        response = await self._client.chat.completions.create(**kwargs)
        content = response.choices[0].message.content or ""
        return content.strip()


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    backoff: float = 1.0,
    label: str = "operation",
) -> T:
    """
    Await ``operation`` with linear backoff (``backoff * attempt`` seconds).

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        max_attempts: Total attempts including the first
        backoff: Wait unit in seconds
        label: Name used in retry log lines

    Returns:
        The operation's result

    Raises:
        Exception: The last error once all attempts fail
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_incrementing(start=backoff, increment=backoff),
        retry=retry_if_exception_type(Exception),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            logger.debug(
                f"{label} | attempt={attempt.retry_state.attempt_number}/{max_attempts}"
            )
            return await operation()
    raise RuntimeError(f"{label} exhausted retries without a result")


def build_json_prompt(prompt: str, schema: Optional[Dict[str, Any]] = None) -> str:
    """Append the JSON-only instruction (and schema, if any) to a prompt."""
    if schema is None:
        return f"{prompt}\n\nRespond with a single valid JSON object only."
    return (
        f"{prompt}\n\n"
        "Respond with a single valid JSON object only, matching this structure:\n"
        f"{json.dumps(schema, indent=2)}"
    )


async def complete_json(
    client: CompletionClient,
    prompt: str,
    system_prompt: Optional[str] = None,
    schema: Optional[Dict[str, Any]] = None,
    options: Optional[CompletionOptions] = None,
    retry_attempts: int = 1,
    retry_backoff: float = 1.0,
    label: str = "completion",
) -> Dict[str, Any]:
    """
    Request a JSON object from the completion service and parse it.

    With ``retry_attempts > 1`` the call and the parse are retried together.

    Raises:
        CompletionParseError: If the response holds no usable JSON object
        Exception: Any completion-service error once attempts are exhausted
    """
    full_prompt = build_json_prompt(prompt, schema)

    async def attempt() -> Dict[str, Any]:
        raw = await client.complete(full_prompt, system_prompt, options)
        return extract_json(raw)

    if retry_attempts <= 1:
        return await attempt()
    return await with_retry(
        attempt, max_attempts=retry_attempts, backoff=retry_backoff, label=label
    )
