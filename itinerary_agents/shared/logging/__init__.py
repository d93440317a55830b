"""Logging helpers shared by the pipeline stages."""

from itinerary_agents.shared.logging.config import (
    StructuredFormatter,
    setup_logging,
    log_state_transition,
)

__all__ = ["StructuredFormatter", "setup_logging", "log_state_transition"]
