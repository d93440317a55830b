"""
Source selection and content extraction.

Selects the best candidate sources from search results, extracts their
page content in paced batches, cleans it, and filters out documents too
thin or too off-topic to be worth structured extraction.
"""

import logging
import re
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List

from itinerary_agents.research.scoring import quality_score, source_relevance
from itinerary_agents.shared.config import DEFAULT_CONFIG, PipelineConfig
from itinerary_agents.shared.contracts import (
    CandidateSource,
    ExtractedDocument,
    ParsedRequest,
    QueryResultSet,
)
from itinerary_agents.shared.fallback import pause
from itinerary_agents.shared.llm import with_retry
from itinerary_agents.shared.search import DiscoveryClient

logger = logging.getLogger(__name__)

WHITESPACE = re.compile(r"\s+")
NOISE_PATTERNS = (
    re.compile(r"cookie policy|privacy policy|terms of service", re.IGNORECASE),
    re.compile(r"subscribe to newsletter|sign up", re.IGNORECASE),
    re.compile(r"advertisement|ad space", re.IGNORECASE),
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ============================================================================
# Selection
# ============================================================================


def select_sources(
    result_sets: List[QueryResultSet],
    request: ParsedRequest,
    limit: int = DEFAULT_CONFIG.max_extraction_urls,
) -> List[CandidateSource]:
    """
    Rank search hits as extraction candidates and keep the top ``limit``.

    Failed query sets are skipped. A URL returned by several queries is
    kept once, with its best score.
    """
    best: Dict[str, CandidateSource] = {}
    for result_set in result_sets:
        if not result_set.succeeded:
            continue
        for result in result_set.results:
            quality = quality_score(result.url)
            relevance = source_relevance(result.title, result.content, request)
            candidate = CandidateSource(
                url=result.url,
                title=result.title,
                content=result.content,
                category=result_set.category,
                search_relevance=result.relevance_score,
                quality_score=quality,
                relevance_score=relevance,
                total_score=quality * relevance,
            )
            current = best.get(result.url)
            if current is None or candidate.total_score > current.total_score:
                best[result.url] = candidate

    ranked = sorted(best.values(), key=lambda c: c.total_score, reverse=True)
    return ranked[:limit]


# ============================================================================
# Cleaning and filtering
# ============================================================================


def clean_content(text: str) -> str:
    """Collapse whitespace and strip boilerplate noise phrases."""
    if not text:
        return ""
    cleaned = WHITESPACE.sub(" ", text).strip()
    for pattern in NOISE_PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return cleaned


def count_words(text: str) -> int:
    return len(text.split(" ")) if text else 0


def filter_documents(
    documents: List[ExtractedDocument], config: PipelineConfig = DEFAULT_CONFIG
) -> List[ExtractedDocument]:
    """Drop failed, short or off-topic documents; best ``total_score`` first."""
    kept = [
        doc
        for doc in documents
        if doc.succeeded
        and doc.word_count >= config.min_word_count
        and doc.relevance_score >= config.min_source_relevance
    ]
    return sorted(kept, key=lambda d: d.total_score, reverse=True)


def summarize_extraction(documents: List[ExtractedDocument]) -> Dict[str, Any]:
    """Aggregate extraction outcomes for status reporting."""
    successful = [d for d in documents if d.succeeded and d.content]
    return {
        "total_urls": len(documents),
        "successful_extractions": len(successful),
        "failed_extractions": len(documents) - len(successful),
        "total_word_count": sum(d.word_count for d in documents),
        "average_quality": (
            sum(d.quality_score for d in documents) / len(documents)
            if documents
            else 0.0
        ),
        "categories": dict(Counter(d.category for d in documents if d.category)),
    }


# ============================================================================
# Extraction
# ============================================================================


class ContentExtractor:
    """
    Extracts page content for candidate sources in paced batches.

    Args:
        discovery: Discovery service client
        config: Pipeline config (batch size, pause, retry policy)
    """

    def __init__(
        self, discovery: DiscoveryClient, config: PipelineConfig = DEFAULT_CONFIG
    ):
        self.discovery = discovery
        self.config = config

    async def extract(self, sources: List[CandidateSource]) -> List[ExtractedDocument]:
        """
        Extract every source; failures become documents with ``error`` set.

        Batches run strictly in order with a pause between consecutive
        batches. Returns documents in source order, unfiltered.
        """
        if not sources:
            logger.warning("[stage=extract] No candidate sources to extract")
            return []

        size = self.config.extraction_batch_size
        batches = [sources[i : i + size] for i in range(0, len(sources), size)]
        logger.info(
            f"[stage=extract] Extracting {len(sources)} URLs in {len(batches)} batches"
        )

        documents: List[ExtractedDocument] = []
        for i, batch in enumerate(batches):
            documents.extend(await self._extract_batch(batch, i + 1, len(batches)))
            if i < len(batches) - 1:
                await pause(self.config.batch_pause)

        failed = sum(1 for d in documents if not d.succeeded)
        logger.info(
            f"[stage=extract] Completed | documents={len(documents)}, failed={failed}"
        )
        return documents

    async def _extract_batch(
        self, batch: List[CandidateSource], number: int, total: int
    ) -> List[ExtractedDocument]:
        urls = [source.url for source in batch]
        logger.debug(f"[stage=extract] Batch {number}/{total} | urls={len(urls)}")
        try:
            extracted = await self.discovery.extract(urls)
        except Exception as e:
            logger.warning(f"[stage=extract] Batch {number}/{total} failed: {e}")
            return [self._failed(source, str(e) or type(e).__name__) for source in batch]

        by_url = {item.get("url"): item for item in extracted}
        documents = []
        for source in batch:
            item = by_url.get(source.url)
            if item is None:
                documents.append(self._failed(source, "no content returned"))
            elif item.get("error"):
                documents.append(self._failed(source, str(item["error"])))
            else:
                documents.append(self._document(source, item.get("content") or ""))
        return documents

    async def retry_failed(
        self, documents: List[ExtractedDocument], sources: List[CandidateSource]
    ) -> List[ExtractedDocument]:
        """
        Re-extract failed documents one URL at a time with linear backoff.

        Returns ``documents`` with each recovered entry replaced in place;
        entries that still fail are kept unchanged.
        """
        by_url = {source.url: source for source in sources}
        retried = []
        recovered = 0
        for doc in documents:
            source = by_url.get(doc.url)
            if doc.succeeded or source is None:
                retried.append(doc)
                continue
            try:
                fresh = await self._retry_one(source)
                recovered += 1
                retried.append(fresh)
            except Exception as e:
                logger.warning(f"[stage=extract] Retry exhausted for {doc.url}: {e}")
                retried.append(doc)
        logger.info(f"[stage=extract] Retried failed URLs | recovered={recovered}")
        return retried

    async def _retry_one(self, source: CandidateSource) -> ExtractedDocument:
        attempts = 0

        async def attempt() -> ExtractedDocument:
            nonlocal attempts
            attempts += 1
            items = await self.discovery.extract([source.url])
            item = items[0] if items else {}
            if item.get("error") or not item.get("content"):
                raise RuntimeError(item.get("error") or "empty content")
            document = self._document(source, item["content"])
            document.retry_attempt = attempts
            return document

        return await with_retry(
            attempt,
            max_attempts=self.config.extraction_retry_attempts,
            backoff=self.config.extraction_retry_backoff,
            label=f"extract {source.url}",
        )

    @staticmethod
    def _document(source: CandidateSource, raw_content: str) -> ExtractedDocument:
        content = clean_content(raw_content)
        return ExtractedDocument(
            url=source.url,
            title=source.title,
            category=source.category,
            content=content,
            word_count=count_words(content),
            quality_score=source.quality_score,
            relevance_score=source.relevance_score,
            total_score=source.total_score,
            extracted_at=_now(),
        )

    @staticmethod
    def _failed(source: CandidateSource, error: str) -> ExtractedDocument:
        return ExtractedDocument(
            url=source.url,
            title=source.title,
            category=source.category,
            content="",
            word_count=0,
            quality_score=source.quality_score,
            relevance_score=source.relevance_score,
            total_score=source.total_score,
            error=error,
            extracted_at=_now(),
        )
