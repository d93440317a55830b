"""
Transition table and context reducer.

``next_state`` answers where an event leads; ``reduce`` computes the
context after it. Both are pure: the controller is the only place that
commits their results.
"""

from typing import Any, Dict, Tuple

from itinerary_agents.shared.contracts import Itinerary
from itinerary_agents.shared.errors import InvalidTransitionError
from itinerary_agents.workflow.state import (
    STAGE_STATES,
    DataQuality,
    EventType,
    ExtractionOutput,
    WorkflowContext,
    WorkflowEvent,
    WorkflowState,
)

S = WorkflowState
E = EventType

# Stage order for the generation run
PIPELINE = (
    S.PARSING_INPUT,
    S.SUGGESTING_ACTIVITIES,
    S.SEARCHING,
    S.EXTRACTING,
    S.SUMMARIZING,
    S.PLANNING,
    S.FINALIZING,
    S.COMPLETED,
)

TRANSITIONS: Dict[Tuple[WorkflowState, EventType], WorkflowState] = {
    (S.IDLE, E.GENERATE): S.PARSING_INPUT,
    (S.COMPLETED, E.GENERATE): S.PARSING_INPUT,
    (S.ERROR, E.GENERATE): S.PARSING_INPUT,
    (S.COMPLETED, E.RESET): S.IDLE,
    (S.ERROR, E.RESET): S.IDLE,
    (S.ERROR, E.RETRY): S.IDLE,
    (S.REFINING_WITH_RESEARCH, E.DONE): S.COMPLETED,
    (S.BASIC_REFINEMENT, E.DONE): S.COMPLETED,
}
TRANSITIONS.update(
    {(state, E.DONE): target for state, target in zip(PIPELINE, PIPELINE[1:])}
)
TRANSITIONS.update({(state, E.FAILED): S.ERROR for state in STAGE_STATES})
TRANSITIONS.update({(state, E.RESET): S.IDLE for state in STAGE_STATES})

# REFINE is resolved by the research guard rather than the table
REFINE_SOURCES = (S.IDLE, S.COMPLETED)

# Progress shown while a state is active
PROGRESS = {
    S.IDLE: 0,
    S.PARSING_INPUT: 10,
    S.SUGGESTING_ACTIVITIES: 20,
    S.SEARCHING: 35,
    S.EXTRACTING: 55,
    S.SUMMARIZING: 75,
    S.REFINING_WITH_RESEARCH: 85,
    S.BASIC_REFINEMENT: 85,
    S.PLANNING: 90,
    S.FINALIZING: 95,
    S.COMPLETED: 100,
    S.ERROR: 0,
}

STEP_MESSAGES = {
    S.PARSING_INPUT: "Parsing user input...",
    S.SUGGESTING_ACTIVITIES: "Input parsed, suggesting activities...",
    S.SEARCHING: "Activities suggested, searching for venues and activities...",
    S.EXTRACTING: "Search completed, extracting content...",
    S.SUMMARIZING: "Content extracted and structured, summarizing research...",
    S.PLANNING: "Research summarized, generating itinerary...",
    S.FINALIZING: "Itinerary generated, finalizing...",
    S.COMPLETED: "Completed successfully",
    S.REFINING_WITH_RESEARCH: "Refining itinerary with research data...",
    S.BASIC_REFINEMENT: "Refining itinerary...",
}


def next_state(
    state: WorkflowState, event: WorkflowEvent, context: WorkflowContext
) -> WorkflowState:
    """
    Resolve the target state for ``event``.

    Raises:
        InvalidTransitionError: If the event is not accepted in ``state``
    """
    if event.type == E.REFINE:
        if state not in REFINE_SOURCES:
            raise InvalidTransitionError(state.value, event.type.value)
        if context.has_research_data:
            return S.REFINING_WITH_RESEARCH
        return S.BASIC_REFINEMENT

    target = TRANSITIONS.get((state, event.type))
    if target is None:
        raise InvalidTransitionError(state.value, event.type.value)
    return target


def _search_quality(result_sets) -> float:
    if not result_sets:
        return 0.0
    succeeded = sum(1 for rs in result_sets if rs.succeeded)
    return succeeded / len(result_sets) * 100


def _committed(state: WorkflowState, data: Any) -> Dict[str, Any]:
    """Context fields written when ``state`` completes with ``data``."""
    if state == S.PARSING_INPUT:
        return {"parsed_request": data}
    if state == S.SUGGESTING_ACTIVITIES:
        return {"suggested_activities": data}
    if state == S.SEARCHING:
        return {"search_results": data}
    if state == S.EXTRACTING:
        output: ExtractionOutput = data
        return {
            "extracted_documents": output.documents,
            "structured_findings": output.findings,
        }
    if state == S.SUMMARIZING:
        return {"research_summaries": data}
    if state == S.PLANNING:
        return {"generated_itinerary": data}
    if state in (S.FINALIZING, S.REFINING_WITH_RESEARCH, S.BASIC_REFINEMENT):
        return {"final_itinerary": data}
    return {}


def _quality(context: WorkflowContext, state: WorkflowState, data: Any) -> DataQuality:
    quality = context.data_quality
    if state == S.SEARCHING:
        return quality.model_copy(update={"search_quality": _search_quality(data)})
    if state == S.EXTRACTING:
        return quality.model_copy(update={"extraction_quality": data.quality})
    if state == S.PLANNING or (
        state == S.REFINING_WITH_RESEARCH and isinstance(data, Itinerary)
    ):
        return quality.model_copy(
            update={"integration_score": float(data.metadata.data_integration_score)}
        )
    return quality


def reduce(
    context: WorkflowContext, state: WorkflowState, event: WorkflowEvent
) -> WorkflowContext:
    """
    Compute the context after ``event`` is accepted in ``state``.

    Never mutates ``context``.
    """
    if event.type in (E.RESET, E.RETRY):
        return WorkflowContext(user_input=context.user_input)

    if event.type == E.GENERATE:
        return WorkflowContext(
            user_input=event.user_input if event.user_input is not None else context.user_input,
            processing_step=STEP_MESSAGES[S.PARSING_INPUT],
        )

    if event.type == E.REFINE:
        target = next_state(state, event, context)
        update: Dict[str, Any] = {
            "refinement": event.refinement,
            "error": None,
            "processing_step": STEP_MESSAGES[target],
        }
        if event.itinerary is not None:
            update["final_itinerary"] = event.itinerary
        return context.model_copy(update=update)

    if event.type == E.FAILED:
        message = str(event.data) if event.data is not None else "Unknown error"
        return context.model_copy(
            update={"error": message, "processing_step": f"Error: {message}"}
        )

    # DONE
    target = TRANSITIONS[(state, E.DONE)]
    update = _committed(state, event.data)
    update["data_quality"] = _quality(context, state, event.data)
    update["processing_step"] = STEP_MESSAGES.get(target, "")
    return context.model_copy(update=update)
