"""
Workflow controller.

Drives the itinerary pipeline as an explicit state machine:

    idle -> parsing_input -> suggesting_activities -> searching -> extracting
         -> summarizing -> planning -> finalizing -> completed

plus the refinement branch (completed/idle -> refining_with_research |
basic_refinement -> completed) and the error state. Each stage service
runs on entry to its state; its result is committed to the context
before the next state is entered.

Every run carries a token. RESET and RETRY bump the token, so a stage
that finishes after a reset has its result discarded instead of
committed.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from itinerary_agents.finalizer import (
    ItineraryFinalizer,
    ItineraryRefiner,
    export_itinerary,
    shareable_version,
)
from itinerary_agents.intake import RequestParser
from itinerary_agents.planner import ItineraryPlanner
from itinerary_agents.research import (
    ContentExtractor,
    SearchExecutor,
    StructuredExtractor,
    filter_documents,
    select_sources,
    summarize_extraction,
    summarize_search,
)
from itinerary_agents.shared.config import DEFAULT_CONFIG, PipelineConfig, Settings
from itinerary_agents.shared.contracts import Itinerary, RefinementScope
from itinerary_agents.shared.errors import PipelineError, WorkflowCancelledError
from itinerary_agents.shared.llm import CompletionClient, OpenAICompletionClient
from itinerary_agents.shared.logging import log_state_transition
from itinerary_agents.shared.search import DiscoveryClient, TavilyDiscoveryClient
from itinerary_agents.suggestions import ActivitySuggestor
from itinerary_agents.summarizer import ResearchSummarizer, validate_summaries
from itinerary_agents.workflow.state import (
    EventType,
    ExtractionOutput,
    RefinementRequest,
    WorkflowContext,
    WorkflowEvent,
    WorkflowState,
)
from itinerary_agents.workflow.transitions import PROGRESS, next_state, reduce

logger = logging.getLogger(__name__)

QUALITY_WEIGHTS = {
    "search_quality": 0.3,
    "extraction_quality": 0.4,
    "integration_score": 0.3,
}


def weighted_score(metrics: Dict[str, float]) -> int:
    """Weighted overall quality (search 30%, extraction 40%, integration 30%)."""
    return round(sum(metrics.get(key, 0.0) * weight for key, weight in QUALITY_WEIGHTS.items()))


def quality_status(score: float) -> str:
    if score >= 80:
        return "excellent"
    if score >= 65:
        return "good"
    if score >= 45:
        return "fair"
    return "poor"


class WorkflowController:
    """
    Runs generation and refinement and tracks state, context and quality.

    Args:
        completion: Completion service client shared by all stages
        discovery: Discovery service client for search and extraction
        config: Pipeline config
    """

    def __init__(
        self,
        completion: CompletionClient,
        discovery: DiscoveryClient,
        config: PipelineConfig = DEFAULT_CONFIG,
    ):
        self.config = config
        self.parser = RequestParser(completion, config)
        self.suggestor = ActivitySuggestor(completion, config)
        self.searcher = SearchExecutor(discovery, config)
        self.extractor = ContentExtractor(discovery, config)
        self.structurer = StructuredExtractor(completion, config)
        self.summarizer = ResearchSummarizer(completion, config)
        self.planner = ItineraryPlanner(completion, config)
        self.finalizer = ItineraryFinalizer(completion, config)
        self.refiner = ItineraryRefiner(completion, config)

        self.state = WorkflowState.IDLE
        self.context = WorkflowContext()
        self._run = 0
        self._exception: Optional[BaseException] = None

        self._services: Dict[WorkflowState, Callable[[], Awaitable[Any]]] = {
            WorkflowState.PARSING_INPUT: self._parse,
            WorkflowState.SUGGESTING_ACTIVITIES: self._suggest,
            WorkflowState.SEARCHING: self._search,
            WorkflowState.EXTRACTING: self._extract,
            WorkflowState.SUMMARIZING: self._summarize,
            WorkflowState.PLANNING: self._plan,
            WorkflowState.FINALIZING: self._finalize,
            WorkflowState.REFINING_WITH_RESEARCH: self._refine,
            WorkflowState.BASIC_REFINEMENT: self._refine,
        }

    # ========================================================================
    # Entry points
    # ========================================================================

    async def generate(self, user_input: str) -> Itinerary:
        """
        Run the full pipeline for a free-text request.

        Raises:
            InvalidTransitionError: If a run is already in progress
            PipelineError: The fatal stage error (ParseError, PlanningError, ...)
            WorkflowCancelledError: If the run was reset before completing
        """
        self.send(WorkflowEvent(type=EventType.GENERATE, user_input=user_input))
        run = self._begin_run()
        logger.info(f"[run={run}] Generation starting | chars={len(user_input or '')}")
        await self._drive(run)
        return self._outcome(run)

    async def refine(
        self,
        itinerary: Itinerary,
        prompt: str,
        scope: Union[RefinementScope, Dict[str, Any], None] = None,
    ) -> Itinerary:
        """
        Refine an itinerary; research-aware when this controller holds research.

        Raises:
            InvalidTransitionError: If called while a run is in progress
            RefinementError: If the refinement fails
        """
        if isinstance(scope, dict):
            scope = RefinementScope.model_validate(scope)
        refinement = RefinementRequest(prompt=prompt, scope=scope or RefinementScope())
        self.send(
            WorkflowEvent(
                type=EventType.REFINE, refinement=refinement, itinerary=itinerary
            )
        )
        run = self._begin_run()
        await self._drive(run)
        return self._outcome(run)

    def export(self, itinerary: Optional[Itinerary] = None, fmt: str = "json") -> str:
        """Export ``itinerary`` (default: the current final itinerary)."""
        itinerary = itinerary or self.context.final_itinerary
        if itinerary is None:
            raise ValueError("No itinerary to export")
        return export_itinerary(itinerary, fmt)

    def shareable(self, itinerary: Optional[Itinerary] = None) -> Dict[str, Any]:
        """Shareable view of ``itinerary`` (default: the current final itinerary)."""
        itinerary = itinerary or self.context.final_itinerary
        if itinerary is None:
            raise ValueError("No itinerary to share")
        return shareable_version(itinerary)

    def reset(self) -> None:
        """Return to idle, keeping only the user input; in-flight results are dropped."""
        self._run += 1
        self._exception = None
        if self.state != WorkflowState.IDLE:
            self.send(WorkflowEvent(type=EventType.RESET))

    async def retry(self) -> Itinerary:
        """
        Clear the failed run and generate again from the same user input.

        Raises:
            InvalidTransitionError: If the workflow is not in the error state
        """
        self.send(WorkflowEvent(type=EventType.RETRY))
        self._run += 1
        self._exception = None
        return await self.generate(self.context.user_input)

    # ========================================================================
    # State machine
    # ========================================================================

    def send(self, event: WorkflowEvent) -> WorkflowState:
        """
        Apply an event: resolve the target, reduce the context, commit both.

        Raises:
            InvalidTransitionError: If the event is not accepted in the current state
        """
        target = next_state(self.state, event, self.context)
        context = reduce(self.context, self.state, event)
        log_state_transition(
            self.state.value,
            event.type.value,
            target.value,
            {
                "run": self._run,
                "processing_step": context.processing_step,
                "has_error": context.error is not None,
                "data_quality": context.data_quality.to_wire(),
            },
            logger,
        )
        self.state, self.context = target, context
        return target

    def _begin_run(self) -> int:
        self._run += 1
        self._exception = None
        return self._run

    async def _drive(self, run: int) -> None:
        while run == self._run and self.state in self._services:
            state = self.state
            _log = f"[run={run}] [state={state.value}] "
            try:
                data = await self._services[state]()
            except Exception as e:
                if run != self._run:
                    logger.info(f"{_log}Discarding failure from a reset run: {e}")
                    return
                logger.error(f"{_log}Stage failed: {e}")
                self._exception = e
                self.send(WorkflowEvent(type=EventType.FAILED, data=e))
                return
            if run != self._run:
                logger.info(f"{_log}Discarding result from a reset run")
                return
            self.send(WorkflowEvent(type=EventType.DONE, data=data))

    def _outcome(self, run: int) -> Itinerary:
        if run != self._run:
            raise WorkflowCancelledError("Workflow was reset before the run completed")
        if self.state == WorkflowState.ERROR:
            if isinstance(self._exception, Exception):
                raise self._exception
            raise PipelineError(self.context.error or "Workflow failed")
        return self.context.final_itinerary

    # ========================================================================
    # Stage services
    # ========================================================================

    async def _parse(self):
        return await self.parser.parse(self.context.user_input)

    async def _suggest(self):
        return await self.suggestor.suggest(self.context.parsed_request)

    async def _search(self):
        result_sets = await self.searcher.search(self.context.parsed_request)
        logger.info(f"[stage=search] Summary | {summarize_search(result_sets)}")
        return result_sets

    async def _extract(self) -> ExtractionOutput:
        request = self.context.parsed_request
        sources = select_sources(
            self.context.search_results or [], request, self.config.max_extraction_urls
        )
        documents = await self.extractor.extract(sources)
        if self.config.retry_failed_extractions and documents:
            documents = await self.extractor.retry_failed(documents, sources)

        summary = summarize_extraction(documents)
        logger.info(f"[stage=extract] Summary | {summary}")
        quality = (
            summary["successful_extractions"] / summary["total_urls"] * 100
            if summary["total_urls"]
            else 0.0
        )

        kept = filter_documents(documents, self.config)
        logger.info(f"[stage=extract] Filtered {len(documents)} -> {len(kept)} documents")
        findings = await self.structurer.extract(kept, request)
        return ExtractionOutput(documents=documents, findings=findings, quality=quality)

    async def _summarize(self):
        summaries = await self.summarizer.summarize(
            self.context.structured_findings or [], self.context.parsed_request
        )
        validation = validate_summaries(summaries)
        if validation["warnings"]:
            logger.warning(f"[stage=summarize] Quality warnings: {validation['warnings']}")
        return summaries

    async def _plan(self):
        return await self.planner.generate(
            self.context.parsed_request,
            self.context.suggested_activities,
            self.context.research_summaries,
        )

    async def _finalize(self):
        return await self.finalizer.finalize(
            self.context.generated_itinerary,
            self.context.research_summaries,
            self.context.parsed_request,
        )

    async def _refine(self):
        refinement = self.context.refinement
        summaries = (
            self.context.research_summaries
            if self.state == WorkflowState.REFINING_WITH_RESEARCH
            else None
        )
        return await self.refiner.refine(
            self.context.final_itinerary,
            refinement.prompt,
            refinement.scope,
            self.context.parsed_request,
            summaries,
        )

    # ========================================================================
    # Quality and status
    # ========================================================================

    @property
    def quality_metrics(self) -> Dict[str, float]:
        quality = self.context.data_quality
        metrics = {
            "search_quality": quality.search_quality,
            "extraction_quality": quality.extraction_quality,
            "integration_score": quality.integration_score,
        }
        metrics["overall_score"] = weighted_score(metrics)
        return metrics

    @property
    def overall_score(self) -> int:
        return self.quality_metrics["overall_score"]

    def progress_percentage(self) -> int:
        return PROGRESS.get(self.state, 0)

    def assess_quality(self) -> Dict[str, Any]:
        """Per-phase score, status and supporting details."""
        context = self.context
        metrics = self.quality_metrics

        search_details = None
        if context.search_results:
            results = context.search_results
            search_details = {
                "total_searches": len(results),
                "successful_searches": sum(1 for rs in results if rs.succeeded),
                "average_relevance": sum(rs.average_relevance for rs in results) / len(results),
            }

        extraction_details = None
        if context.extracted_documents:
            docs = context.extracted_documents
            extraction_details = {
                "total_urls": len(docs),
                "successful_extractions": sum(1 for d in docs if d.succeeded and d.content),
            }

        integration_details = None
        itinerary = context.final_itinerary or context.generated_itinerary
        if itinerary is not None:
            integration_details = {
                "data_integration_score": itinerary.metadata.data_integration_score,
                "research_data_used": itinerary.research_data_used,
                "is_fallback": itinerary.metadata.is_fallback,
            }

        def phase(score: float, details: Optional[Dict[str, Any]]) -> Dict[str, Any]:
            return {"score": score, "status": quality_status(score), "details": details}

        return {
            "search_phase": phase(metrics["search_quality"], search_details),
            "extraction_phase": phase(metrics["extraction_quality"], extraction_details),
            "integration_phase": phase(metrics["integration_score"], integration_details),
            "overall": {
                "score": metrics["overall_score"],
                "status": quality_status(metrics["overall_score"]),
            },
        }

    def diagnose_issues(self) -> List[Dict[str, str]]:
        metrics = self.quality_metrics
        issues = []
        if metrics["search_quality"] < 50:
            issues.append(
                {
                    "phase": "search",
                    "severity": "high",
                    "message": "Low search quality detected. Consider broadening search terms or checking API connectivity.",
                    "suggestion": "Review search queries and ensure location and preferences are specific enough.",
                }
            )
        if metrics["extraction_quality"] < 60:
            issues.append(
                {
                    "phase": "extraction",
                    "severity": "high",
                    "message": "Content extraction quality is low. Many URLs may be failing.",
                    "suggestion": "Check URL accessibility and consider retrying failed extractions.",
                }
            )
        if metrics["integration_score"] < 40:
            issues.append(
                {
                    "phase": "integration",
                    "severity": "medium",
                    "message": "Low research data integration. Itinerary may lack specific venue details.",
                    "suggestion": "Improve content summarization or enhance data extraction specificity.",
                }
            )
        return issues

    def optimization_suggestions(self) -> List[Dict[str, str]]:
        metrics = self.quality_metrics
        suggestions = []
        if metrics["search_quality"] < 70:
            suggestions.append(
                {
                    "category": "search",
                    "suggestion": "Add more specific search terms related to the location",
                    "impact": "medium",
                }
            )
        if metrics["extraction_quality"] < 70:
            suggestions.append(
                {
                    "category": "extraction",
                    "suggestion": "Enable retry of failed URL extractions (PIPELINE_RETRY_FAILED_EXTRACTIONS)",
                    "impact": "high",
                }
            )
        if metrics["integration_score"] < 50:
            suggestions.append(
                {
                    "category": "integration",
                    "suggestion": "Enhance structured data extraction from content",
                    "impact": "high",
                }
            )
        return suggestions

    def detailed_status(self) -> Dict[str, Any]:
        context = self.context
        return {
            "current_state": self.state.value,
            "processing_step": context.processing_step,
            "progress": self.progress_percentage(),
            "quality_metrics": self.quality_metrics,
            "has_error": context.error is not None,
            "error": context.error,
            "data_stats": {
                "search_results": len(context.search_results or []),
                "extracted_documents": len(context.extracted_documents or []),
                "structured_findings": len(context.structured_findings or []),
                "has_research_summaries": context.research_summaries is not None,
                "has_final_itinerary": context.final_itinerary is not None,
            },
        }


def create_controller(
    settings: Optional[Settings] = None, config: Optional[PipelineConfig] = None
) -> WorkflowController:
    """
    Build a controller wired to the OpenAI-compatible and Tavily clients.

    Raises:
        RuntimeError: If an API key is missing
    """
    settings = settings or Settings.from_env()
    config = config or PipelineConfig.from_env()
    completion = OpenAICompletionClient(
        api_key=settings.ensure("llm_api_key"),
        base_url=settings.llm_base_url,
        config=config,
    )
    discovery = TavilyDiscoveryClient(api_key=settings.ensure("tavily_api_key"))
    return WorkflowController(completion, discovery, config)
