"""
Structured information extraction.

Sends filtered documents to the completion service in small chunks and
turns the replies into StructuredFinding objects. A bad item is dropped
on its own; a bad chunk is logged and skipped; neither stops the run.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar

from pydantic import ValidationError

from itinerary_agents.research.prompts import (
    EXTRACTION_SCHEMA,
    EXTRACTION_SYSTEM_PROMPT,
    build_extraction_prompt,
)
from itinerary_agents.research.scoring import item_relevance
from itinerary_agents.shared.config import DEFAULT_CONFIG, PipelineConfig
from itinerary_agents.shared.contracts import (
    ExtractedDocument,
    ParsedRequest,
    PracticalInfo,
    ResearchActivity,
    ResearchVenue,
    StructuredFinding,
)
from itinerary_agents.shared.contracts.base import ContractModel
from itinerary_agents.shared.fallback import pause
from itinerary_agents.shared.llm import CompletionClient, CompletionOptions, complete_json

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT", bound=ContractModel)


def _validate_items(
    raw_items: Any, model: Type[ItemT], request: ParsedRequest, stamped_at: str
) -> List[ItemT]:
    if not isinstance(raw_items, list):
        return []
    items = []
    for raw in raw_items:
        try:
            item = model.model_validate(raw)
        except ValidationError as e:
            logger.debug(f"[stage=structure] Skipping invalid {model.__name__}: {e}")
            continue
        item.extracted_at = stamped_at
        item.relevance_score = item_relevance(item.name, item.description, request)
        items.append(item)
    return items


def parse_finding(
    raw: Dict[str, Any], request: ParsedRequest, stamped_at: Optional[str] = None
) -> StructuredFinding:
    """Build a finding from completion JSON, skipping invalid items."""
    stamped_at = stamped_at or datetime.now(timezone.utc).isoformat()
    practical_raw = raw.get("practicalInfo") or raw.get("practical_info") or {}
    try:
        practical = PracticalInfo.model_validate(practical_raw)
    except ValidationError:
        practical = PracticalInfo()
    return StructuredFinding(
        venues=_validate_items(raw.get("venues"), ResearchVenue, request, stamped_at),
        activities=_validate_items(
            raw.get("activities"), ResearchActivity, request, stamped_at
        ),
        practical_info=practical,
    )


class StructuredExtractor:
    """
    Extracts venues, activities and practical info from documents.

    Args:
        completion: Completion service client
        config: Pipeline config (chunk size, content window, pacing)
    """

    def __init__(
        self, completion: CompletionClient, config: PipelineConfig = DEFAULT_CONFIG
    ):
        self.completion = completion
        self.config = config

    async def extract(
        self, documents: List[ExtractedDocument], request: ParsedRequest
    ) -> List[StructuredFinding]:
        if not documents:
            logger.info("[stage=structure] No documents to structure")
            return []

        size = self.config.chunk_size
        chunks = [documents[i : i + size] for i in range(0, len(documents), size)]
        logger.info(
            f"[stage=structure] Structuring {len(documents)} documents in {len(chunks)} chunks"
        )

        findings = []
        for i, chunk in enumerate(chunks):
            try:
                findings.append(await self._extract_chunk(chunk, request))
            except Exception as e:
                logger.warning(f"[stage=structure] Chunk {i + 1}/{len(chunks)} skipped: {e}")
            if i < len(chunks) - 1:
                await pause(self.config.chunk_pause)

        logger.info(
            f"[stage=structure] Completed | findings={len(findings)}, "
            f"venues={sum(len(f.venues) for f in findings)}, "
            f"activities={sum(len(f.activities) for f in findings)}"
        )
        return findings

    async def _extract_chunk(
        self, chunk: List[ExtractedDocument], request: ParsedRequest
    ) -> StructuredFinding:
        raw = await complete_json(
            self.completion,
            build_extraction_prompt(request, chunk, self.config.chunk_content_chars),
            system_prompt=EXTRACTION_SYSTEM_PROMPT,
            schema=EXTRACTION_SCHEMA,
            options=CompletionOptions(
                temperature=self.config.extraction_temperature,
                max_tokens=self.config.extraction_max_tokens,
                json_mode=True,
            ),
        )
        return parse_finding(raw, request)
