"""
FastAPI endpoints for the itinerary workflow.

Each generation gets a session holding its controller, so a later
refinement of the same itinerary can take the research-aware path.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, ValidationError

from itinerary_agents.finalizer import export_itinerary
from itinerary_agents.shared.contracts import Itinerary, RefinementScope
from itinerary_agents.shared.errors import (
    InvalidTransitionError,
    ParseError,
    PipelineError,
    RefinementError,
)
from itinerary_agents.workflow.controller import WorkflowController, create_controller

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/itinerary", tags=["itinerary"])

# In-memory session storage (replace with Redis/DB in production)
_sessions: Dict[str, Dict[str, Any]] = {}


def get_controller_factory() -> Callable[[], WorkflowController]:
    """Dependency returning the controller factory (overridden in tests)."""
    return create_controller


# ============================================================================
# Request/Response Models
# ============================================================================


class GenerateRequest(BaseModel):
    user_input: str = Field(min_length=1, description="Free-text itinerary request")


class GenerateResponse(BaseModel):
    session_id: str
    status: str = Field(description="Final workflow state")
    itinerary: Dict[str, Any]
    quality: Dict[str, Any] = Field(default_factory=dict)
    issues: List[Dict[str, str]] = Field(default_factory=list)


class RefineRequest(BaseModel):
    prompt: str = Field(min_length=1, description="What to change")
    session_id: Optional[str] = Field(
        default=None, description="Session from /generate; enables research-aware refinement"
    )
    itinerary: Optional[Dict[str, Any]] = Field(
        default=None, description="Itinerary to refine; defaults to the session's itinerary"
    )
    scope: Optional[Dict[str, Any]] = Field(
        default=None, description="{type: entire|day|activity, dayNumber?, activityId?}"
    )


class RefineResponse(BaseModel):
    session_id: str
    refinement_type: str
    itinerary: Dict[str, Any]


class ExportRequest(BaseModel):
    format: str = Field(default="json", description="json, text or markdown")
    session_id: Optional[str] = None
    itinerary: Optional[Dict[str, Any]] = None


class ExportResponse(BaseModel):
    format: str
    content: str


# ============================================================================
# Helpers
# ============================================================================


def _session(session_id: str) -> Dict[str, Any]:
    if session_id not in _sessions:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Session {session_id} not found",
        )
    return _sessions[session_id]


def _itinerary_from(payload: Dict[str, Any]) -> Itinerary:
    try:
        return Itinerary.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Invalid itinerary: {e}",
        )


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/generate", response_model=GenerateResponse)
async def generate(
    request: GenerateRequest,
    factory: Callable[[], WorkflowController] = Depends(get_controller_factory),
) -> GenerateResponse:
    """Run the full pipeline for a free-text request."""
    session_id = str(uuid.uuid4())
    _log = f"[session={session_id}] [api=generate] "
    logger.info(f"{_log}Generation requested | chars={len(request.user_input)}")

    controller = factory()
    _sessions[session_id] = {
        "controller": controller,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }

    try:
        itinerary = await controller.generate(request.user_input)
    except ParseError as e:
        logger.warning(f"{_log}Request could not be parsed: {e}")
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except PipelineError as e:
        logger.error(f"{_log}Pipeline failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Pipeline execution failed: {e}",
        )

    logger.info(
        f"{_log}Generation finished | days={len(itinerary.days)}, "
        f"overall_quality={controller.overall_score}"
    )
    return GenerateResponse(
        session_id=session_id,
        status=controller.state.value,
        itinerary=itinerary.to_wire(),
        quality=controller.assess_quality(),
        issues=controller.diagnose_issues(),
    )


@router.post("/refine", response_model=RefineResponse)
async def refine(
    request: RefineRequest,
    factory: Callable[[], WorkflowController] = Depends(get_controller_factory),
) -> RefineResponse:
    """Refine an itinerary, research-aware when the session holds research."""
    if request.session_id is not None:
        session_id = request.session_id
        controller: WorkflowController = _session(session_id)["controller"]
    else:
        session_id = str(uuid.uuid4())
        controller = factory()
        _sessions[session_id] = {
            "controller": controller,
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
    _log = f"[session={session_id}] [api=refine] "

    if request.itinerary is not None:
        itinerary = _itinerary_from(request.itinerary)
    elif controller.context.final_itinerary is not None:
        itinerary = controller.context.final_itinerary
    else:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No itinerary supplied and none stored for this session",
        )

    try:
        scope = RefinementScope.model_validate(request.scope or {})
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    try:
        refined = await controller.refine(itinerary, request.prompt, scope)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except RefinementError as e:
        logger.warning(f"{_log}Refinement failed: {e}")
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    entry = refined.refinement_history[-1]
    logger.info(f"{_log}Refinement finished | type={entry.type}, scope={scope.type}")
    return RefineResponse(
        session_id=session_id,
        refinement_type=entry.type,
        itinerary=refined.to_wire(),
    )


@router.post("/export", response_model=ExportResponse)
async def export(request: ExportRequest) -> ExportResponse:
    """Render an itinerary (given inline or from a session) as json, text or markdown."""
    if request.itinerary is not None:
        itinerary = _itinerary_from(request.itinerary)
    elif request.session_id is not None:
        itinerary = _session(request.session_id)["controller"].context.final_itinerary
    else:
        itinerary = None
    if itinerary is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="No itinerary to export"
        )

    try:
        content = export_itinerary(itinerary, request.format)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ExportResponse(format=request.format.lower(), content=content)


@router.get("/status/{session_id}")
async def get_status(session_id: str) -> Dict[str, Any]:
    """Current state, progress, quality metrics and diagnostics of a session."""
    controller: WorkflowController = _session(session_id)["controller"]
    detail = controller.detailed_status()
    detail["session_id"] = session_id
    detail["issues"] = controller.diagnose_issues()
    detail["optimization_suggestions"] = controller.optimization_suggestions()
    return detail


@router.get("/shareable/{session_id}")
async def get_shareable(session_id: str) -> Dict[str, Any]:
    """Participant-facing view of a session's itinerary, without internal metadata."""
    controller: WorkflowController = _session(session_id)["controller"]
    try:
        return controller.shareable()
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/reset/{session_id}")
async def reset_session(session_id: str) -> Dict[str, Any]:
    """
    Return a session's workflow to idle, e.g. after a failed refinement.

    A failed run leaves the session in the error state, where refinement is
    rejected with 409 until the session is reset. Reset drops the session's
    research and itineraries, so a later refinement must send the itinerary
    inline and takes the basic path.
    """
    controller: WorkflowController = _session(session_id)["controller"]
    previous = controller.state.value
    controller.reset()
    logger.info(f"[session={session_id}] [api=reset] Reset | from={previous}")
    detail = controller.detailed_status()
    detail["session_id"] = session_id
    return detail
