"""
Audit Logger

DESIGN DECISION: Every change to the tracker's state is logged.
This provides:
1. Complete traceability of what the user did
2. Debugging capability when stored data looks wrong
3. A hook point for anything that wants to watch changes

The audit logger:
- Is synchronous, so the log line lands in the same step as the change
- Gracefully handles failures (a broken log sink never aborts a mutation)
"""

import logging
import sys
from typing import Optional

import structlog

from finance_tracker.config import TrackerSettings
from finance_tracker.models.events import EventSeverity, StateEvent


def configure_logging(settings: Optional[TrackerSettings] = None) -> None:
    """
    Configure structlog on top of the stdlib logging module.

    Safe to call more than once; the latest settings win.
    """
    level = getattr(logging, settings.log_level) if settings else logging.INFO
    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings and settings.log_format == "console"
        else structlog.processors.JSONRenderer()
    )

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger("finance_tracker").setLevel(level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


class AuditLogger:
    """
    Central audit logging service.

    Writes one structured log line per StateEvent, at a level matching
    the event's severity.
    """

    def __init__(self, logger_name: str = "finance_tracker.audit"):
        self._logger = structlog.get_logger(logger_name)

    def log(self, event: StateEvent) -> bool:
        """
        Log a state event.

        Returns True if the log call succeeded.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity == EventSeverity.ERROR:
                self._logger.error("state_event", **log_dict)
            elif event.severity == EventSeverity.WARNING:
                self._logger.warning("state_event", **log_dict)
            elif event.severity == EventSeverity.DEBUG:
                self._logger.debug("state_event", **log_dict)
            else:
                self._logger.info("state_event", **log_dict)
        except Exception as e:
            # Logging must never take a mutation down with it
            print(f"Warning: audit log failed for {event.event_id}: {e}", file=sys.stderr)
            return False
        return True

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error that did not come from a state event."""
        try:
            self._logger.error(
                "system_error",
                error_type=error_type,
                error_message=error_message,
                details=details or {},
            )
        except Exception as e:
            print(f"Warning: audit log failed: {e}", file=sys.stderr)
