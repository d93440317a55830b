"""
Logging configuration.

Provides plain or JSON-formatted output for the pipeline and a helper
that records workflow state transitions with a compact context summary.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-35s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("httpcore", "httpx", "openai")


class StructuredFormatter(logging.Formatter):
    """
    Formatter that outputs log records as JSON.

    Each log entry includes:
    - timestamp: ISO format datetime (UTC)
    - level: Log level name
    - logger: Logger name
    - message: Log message
    - extra: Any structured payload attached to the record
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra"):
            log_entry["extra"] = record.extra

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    json_format: bool = False,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the root logger for the whole process.

    Args:
        level: Logging level or level name (default: INFO)
        json_format: Emit JSON lines instead of the pipe-separated format
        log_file: Optional path to an additional log file

    Returns:
        The configured root logger.
    """
    if json_format:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    for handler in handlers:
        handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers = []
    root.setLevel(level)
    for handler in handlers:
        root.addHandler(handler)

    # Quiet noisy third-party loggers
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return root


def log_state_transition(
    from_state: str,
    event: str,
    to_state: str,
    context: Dict[str, Any],
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a workflow state transition.

    Args:
        from_state: State before the event
        event: Event type that triggered the transition
        to_state: State after the event
        context: Summary of the workflow context (counts, quality scores)
        logger: Logger instance to use. Defaults to the workflow logger.
    """
    if logger is None:
        logger = logging.getLogger("itinerary_agents.workflow")

    record = logger.makeRecord(
        logger.name,
        logging.INFO,
        "",
        0,
        "State transition: %s --%s--> %s",
        args=(from_state, event, to_state),
        exc_info=None,
    )
    record.extra = {
        "from_state": from_state,
        "event": event,
        "to_state": to_state,
        "context_summary": context,
    }
    logger.handle(record)
