"""
Exception hierarchy for the itinerary pipeline.

Fatal errors (request parsing, planner fallback exhaustion, refinement)
propagate to the workflow controller, which moves to the error state.
Recoverable stages never raise these; they degrade through
``with_fallback`` instead.
"""


class PipelineError(Exception):
    """Base class for all pipeline errors."""

    pass


class CompletionParseError(PipelineError):
    """Raised when a completion response contains no usable JSON object."""

    def __init__(self, message: str, raw_response: str = ""):
        super().__init__(message)
        self.raw_response = raw_response


class ParseError(PipelineError):
    """Raised when the user request cannot be parsed into a ParsedRequest."""

    pass


class PlanningError(PipelineError):
    """Raised when neither generation nor the fallback itinerary succeeds."""

    pass


class RefinementError(PipelineError):
    """Raised when an itinerary refinement fails."""

    pass


class InvalidTransitionError(PipelineError):
    """Raised when an event is not accepted in the current workflow state."""

    def __init__(self, state: str, event: str):
        super().__init__(f"Event {event} is not allowed in state {state}")
        self.state = state
        self.event = event


class WorkflowCancelledError(PipelineError):
    """Raised to the caller of a run that was reset before it completed."""

    pass
