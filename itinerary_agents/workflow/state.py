"""
Workflow state schema.

Defines the controller's states and events, and the context that carries
each stage's committed output to the next stage.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import Field

from itinerary_agents.shared.contracts import (
    ActivitySuggestions,
    ExtractedDocument,
    Itinerary,
    ParsedRequest,
    QueryResultSet,
    RefinementScope,
    ResearchSummaries,
    StructuredFinding,
)
from itinerary_agents.shared.contracts.base import ContractModel


class WorkflowState(str, Enum):
    IDLE = "idle"
    PARSING_INPUT = "parsing_input"
    SUGGESTING_ACTIVITIES = "suggesting_activities"
    SEARCHING = "searching"
    EXTRACTING = "extracting"
    SUMMARIZING = "summarizing"
    PLANNING = "planning"
    FINALIZING = "finalizing"
    REFINING_WITH_RESEARCH = "refining_with_research"
    BASIC_REFINEMENT = "basic_refinement"
    COMPLETED = "completed"
    ERROR = "error"


class EventType(str, Enum):
    GENERATE = "GENERATE"
    REFINE = "REFINE"
    DONE = "DONE"
    FAILED = "FAILED"
    RESET = "RESET"
    RETRY = "RETRY"


# States with a stage service that runs on entry
STAGE_STATES = (
    WorkflowState.PARSING_INPUT,
    WorkflowState.SUGGESTING_ACTIVITIES,
    WorkflowState.SEARCHING,
    WorkflowState.EXTRACTING,
    WorkflowState.SUMMARIZING,
    WorkflowState.PLANNING,
    WorkflowState.FINALIZING,
    WorkflowState.REFINING_WITH_RESEARCH,
    WorkflowState.BASIC_REFINEMENT,
)


class RefinementRequest(ContractModel):
    prompt: str
    scope: RefinementScope = Field(default_factory=RefinementScope)


class ExtractionOutput(ContractModel):
    """Result of the extracting state: raw documents, findings and quality."""

    documents: List[ExtractedDocument] = Field(default_factory=list)
    findings: List[StructuredFinding] = Field(default_factory=list)
    quality: float = 0.0


class DataQuality(ContractModel):
    """Per-phase quality percentages (0-100)."""

    search_quality: float = 0.0
    extraction_quality: float = 0.0
    integration_score: float = 0.0


class WorkflowEvent(ContractModel):
    """
    An input to the state machine.

    ``data`` carries a stage result for DONE and the exception for FAILED.
    """

    type: EventType
    data: Any = None
    user_input: Optional[str] = None
    refinement: Optional[RefinementRequest] = None
    itinerary: Optional[Itinerary] = None


class WorkflowContext(ContractModel):
    """Everything committed so far in the current run. Owned by the controller."""

    user_input: str = ""
    parsed_request: Optional[ParsedRequest] = None
    suggested_activities: Optional[ActivitySuggestions] = None
    search_results: Optional[List[QueryResultSet]] = None
    extracted_documents: Optional[List[ExtractedDocument]] = None
    structured_findings: Optional[List[StructuredFinding]] = None
    research_summaries: Optional[ResearchSummaries] = None
    generated_itinerary: Optional[Itinerary] = None
    final_itinerary: Optional[Itinerary] = None
    refinement: Optional[RefinementRequest] = None
    error: Optional[str] = None
    processing_step: str = ""
    data_quality: DataQuality = Field(default_factory=DataQuality)

    @property
    def has_research_data(self) -> bool:
        return self.research_summaries is not None and self.research_summaries.has_research
