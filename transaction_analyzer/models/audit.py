"""
Audit Models for the Transaction Analyzer

Every file read and every analysis run produces audit events.
This provides:
1. Traceability of which file produced which result
2. Debugging information when a file fails to decode
3. A record of the filters that were applied

DESIGN DECISION: Audit events are emitted to the structured log only.
Nothing is persisted.
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Reading
    FILE_READ_STARTED = "file_read_started"
    TRANSACTIONS_READ = "transactions_read"
    READ_FAILED = "read_failed"

    # Analysis
    ANALYSIS_STARTED = "analysis_started"
    ANALYSIS_COMPLETED = "analysis_completed"
    ANALYSIS_FAILED = "analysis_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Events belonging to one upload-and-analyze action share a correlation ID.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one read and its analysis)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_type: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_type": self.error_type,
            "error_message": self.error_message,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transactions_read("export.csv", 120, correlation_id)
    """

    @staticmethod
    def file_read_started(
        source: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.FILE_READ_STARTED,
            correlation_id=correlation_id,
            description=f"Reading transactions from {source}",
            details={
                "source": source,
            },
        )

    @staticmethod
    def transactions_read(
        source: str,
        transaction_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_READ,
            correlation_id=correlation_id,
            description=f"Read {transaction_count} transactions from {source}",
            details={
                "source": source,
                "transaction_count": transaction_count,
            },
        )

    @staticmethod
    def read_failed(
        source: str,
        error: Exception,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.READ_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description=f"Failed to read transactions from {source}",
            details={
                "source": source,
            },
            error_type=type(error).__name__,
            error_message=str(error),
        )

    @staticmethod
    def analysis_started(
        transaction_count: int,
        ignore_internal_transactions: bool,
        date_from: date,
        date_to: date,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANALYSIS_STARTED,
            correlation_id=correlation_id,
            description=f"Analyzing {transaction_count} transactions",
            details={
                "transaction_count": transaction_count,
                "ignore_internal_transactions": ignore_internal_transactions,
                "date_from": date_from.isoformat(),
                "date_to": date_to.isoformat(),
            },
        )

    @staticmethod
    def analysis_completed(
        total_count: int,
        filtered_count: int,
        currencies: list[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANALYSIS_COMPLETED,
            correlation_id=correlation_id,
            description=(
                f"Analysis completed: {filtered_count} of {total_count} "
                f"transactions in {len(currencies)} currencies"
            ),
            details={
                "total_transaction_count": total_count,
                "filtered_transaction_count": filtered_count,
                "currencies": currencies,
            },
        )

    @staticmethod
    def analysis_failed(
        error: Exception,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ANALYSIS_FAILED,
            severity=AuditSeverity.ERROR,
            correlation_id=correlation_id,
            description="Analysis failed",
            error_type=type(error).__name__,
            error_message=str(error),
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_type=error_type,
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
