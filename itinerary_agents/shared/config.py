"""
Pipeline configuration.

Centralizes the tunable constants of every stage (pacing, batch sizes,
relevance thresholds, retry policy) and the external service credentials.
"""

import os
from dataclasses import dataclass, fields, replace
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class PipelineConfig:
    """
    Configuration for the itinerary pipeline.

    Attributes:
        model: Completion model identifier
        max_tokens: Default completion token limit
        temperature: Default sampling temperature
        extraction_temperature: Temperature for structured extraction calls
        extraction_max_tokens: Token limit for structured extraction calls
        high_priority_delay: Pause (seconds) after a high-priority query
        default_query_delay: Pause (seconds) after any other query
        min_search_relevance: Results at or below this score are dropped
        max_extraction_urls: Number of candidate sources kept for extraction
        extraction_batch_size: URLs per discovery extract call
        batch_pause: Pause (seconds) between extraction batches
        min_word_count: Documents with fewer words are filtered out
        min_source_relevance: Documents with lower source relevance are filtered out
        extraction_retry_attempts: Attempts per URL in retry_failed
        retry_failed_extractions: Re-extract failed URLs before filtering
        extraction_retry_backoff: Linear backoff unit (seconds) for retry_failed
        chunk_size: Documents per structured extraction call
        chunk_content_chars: Characters of each document sent per chunk
        chunk_pause: Pause (seconds) between structured extraction calls
        completion_retry_attempts: Attempts for call sites that opt into retry
        completion_retry_backoff: Linear backoff unit (seconds) for completion retry
        default_currency: Currency used when the request names none
    """

    model: str = "gpt-4.1-mini"
    max_tokens: int = 4096
    temperature: float = 0.7
    extraction_temperature: float = 0.1
    extraction_max_tokens: int = 4000

    high_priority_delay: float = 0.3
    default_query_delay: float = 0.2
    min_search_relevance: float = 0.3

    max_extraction_urls: int = 15
    extraction_batch_size: int = 5
    batch_pause: float = 1.0
    min_word_count: int = 100
    min_source_relevance: float = 1.5
    extraction_retry_attempts: int = 2
    retry_failed_extractions: bool = False
    extraction_retry_backoff: float = 1.0

    chunk_size: int = 3
    chunk_content_chars: int = 1500
    chunk_pause: float = 0.5

    completion_retry_attempts: int = 3
    completion_retry_backoff: float = 1.0

    default_currency: str = "INR"

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """
        Build a config from ``PIPELINE_<FIELD>`` environment variables.

        Unset variables keep their defaults.
        """
        overrides = {}
        for field in fields(cls):
            raw = os.getenv(f"PIPELINE_{field.name.upper()}")
            if raw is None:
                continue
            default = getattr(DEFAULT_CONFIG, field.name)
            if isinstance(default, bool):
                overrides[field.name] = raw.strip().lower() in ("1", "true", "yes")
            else:
                overrides[field.name] = type(default)(raw)
        return replace(DEFAULT_CONFIG, **overrides)


# Default configuration instance
DEFAULT_CONFIG = PipelineConfig()


def get_config(**overrides) -> PipelineConfig:
    """
    Get a pipeline config with optional overrides.

    Args:
        **overrides: Field values replacing the defaults

    Returns:
        PipelineConfig instance
    """
    return replace(DEFAULT_CONFIG, **overrides)


@dataclass
class Settings:
    """External service credentials and runtime switches."""

    llm_api_key: Optional[str] = None
    llm_base_url: Optional[str] = None
    tavily_api_key: Optional[str] = None
    log_json: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables (``.env`` is honoured)."""
        return cls(
            llm_api_key=os.getenv("LLM_API_KEY") or os.getenv("OPENAI_API_KEY"),
            llm_base_url=os.getenv("LLM_BASE_URL"),
            tavily_api_key=os.getenv("TAVILY_API_KEY"),
            log_json=os.getenv("LOG_FORMAT", "").lower() == "json",
        )

    def ensure(self, field: str) -> str:
        """Return the requested field and fail fast if it is missing."""
        value = getattr(self, field)
        if not value:
            raise RuntimeError(f"Missing configuration value: {field}")
        return value
