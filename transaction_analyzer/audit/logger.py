"""
Audit Logger

DESIGN DECISION: Every file read and every analysis run is logged.
This provides:
1. Traceability of which upload produced which result
2. Debugging capability when a file fails to decode
3. A record of the filters applied to each analysis

The audit logger:
- Writes structured events through structlog
- Never persists anything
- Supports correlation IDs to trace related events
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from transaction_analyzer.config import AppSettings
from transaction_analyzer.models.audit import AuditEvent, AuditEventBuilder


def configure_logging(settings: Optional[AppSettings] = None) -> None:
    """
    Configure structlog and the stdlib root logger.

    JSON output by default; set LOG_JSON=false for console output.
    """
    settings = settings or AppSettings()

    logging.basicConfig(
        format="%(message)s",
        level=getattr(logging, settings.log_level),
    )

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_json
        else structlog.dev.ConsoleRenderer()
    )

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

    Each event is written to the structured log at a level matching
    its severity.
    """

    def __init__(self):
        self._logger = structlog.get_logger("transaction_analyzer.audit")

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        elif event.severity.value == "debug":
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

    def log_file_read_started(
        self,
        source: str,
        correlation_id: UUID,
    ) -> None:
        """Log the start of a file read."""
        self.log(AuditEventBuilder.file_read_started(
            source=source,
            correlation_id=correlation_id,
        ))

    def log_transactions_read(
        self,
        source: str,
        transaction_count: int,
        correlation_id: UUID,
    ) -> None:
        """Log a successful read."""
        self.log(AuditEventBuilder.transactions_read(
            source=source,
            transaction_count=transaction_count,
            correlation_id=correlation_id,
        ))

    def log_read_failed(
        self,
        source: str,
        error: Exception,
        correlation_id: UUID,
    ) -> None:
        """Log a read that was aborted by a malformed file."""
        self.log(AuditEventBuilder.read_failed(
            source=source,
            error=error,
            correlation_id=correlation_id,
        ))

    def log_analysis_started(self, correlation_id: UUID, **params) -> None:
        """Log the start of an analysis run with its filter parameters."""
        self.log(AuditEventBuilder.analysis_started(
            correlation_id=correlation_id,
            **params,
        ))

    def log_analysis_completed(
        self,
        total_count: int,
        filtered_count: int,
        currencies: list[str],
        correlation_id: UUID,
    ) -> None:
        """Log analysis completion."""
        self.log(AuditEventBuilder.analysis_completed(
            total_count=total_count,
            filtered_count=filtered_count,
            currencies=currencies,
            correlation_id=correlation_id,
        ))

    def log_analysis_failed(
        self,
        error: Exception,
        correlation_id: UUID,
    ) -> None:
        self.log(AuditEventBuilder.analysis_failed(
            error=error,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., a file upload).
    Pass it through all subsequent operations.
    """
    return uuid4()
