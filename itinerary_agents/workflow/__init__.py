"""
Workflow controller.

An explicit state machine that sequences the pipeline stages, owns the
shared context and tracks data quality.
"""

from itinerary_agents.workflow.controller import (
    WorkflowController,
    create_controller,
    quality_status,
    weighted_score,
)
from itinerary_agents.workflow.state import (
    DataQuality,
    EventType,
    WorkflowContext,
    WorkflowEvent,
    WorkflowState,
)
from itinerary_agents.workflow.transitions import TRANSITIONS, next_state, reduce

__all__ = [
    "WorkflowController",
    "create_controller",
    "quality_status",
    "weighted_score",
    "DataQuality",
    "EventType",
    "WorkflowContext",
    "WorkflowEvent",
    "WorkflowState",
    "TRANSITIONS",
    "next_state",
    "reduce",
]
