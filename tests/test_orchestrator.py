"""
Tests for the orchestrated read-and-analyze flow.

Audit events are captured by a recording logger instead of being
written to the structured log.
"""

import asyncio
import io
import pytest
from datetime import date
from decimal import Decimal

from transaction_analyzer.analysis import TransactionAnalysisService
from transaction_analyzer.audit import AuditLogger, configure_logging
from transaction_analyzer.config import AnalysisSettings, AppSettings, ReaderSettings
from transaction_analyzer.exceptions import FormatError, NotFoundError, ValidationError
from transaction_analyzer.models import AuditEventType, AuditSeverity, Currency
from transaction_analyzer.orchestrator import AnalysisFlow, create_app_components
from transaction_analyzer.reader import REQUIRED_COLUMNS, TransactionReader


EXPORT = "\n".join([
    ",".join(REQUIRED_COLUMNS),
    ",Alice,100.00 USD,,,PAYMENT,01/09/2023,9:00:00 AM,COMPLETED,,",
    ",Bob,-30.00 USD,,,PAYMENT,02/09/2023,10:00:00 AM,COMPLETED,,",
    ",,-10.00 USD,,,MONEY_BOX_TRANSFER,03/09/2023,11:00:00 AM,COMPLETED,,",
    ",Carol,250 IQD,,,SALARY,04/10/2023,,COMPLETED,,",
]).encode("utf-8")


class RecordingAuditLogger(AuditLogger):
    """Keeps audit events in memory."""

    def __init__(self):
        super().__init__()
        self.events = []

    def log(self, event):
        self.events.append(event)

    @property
    def event_types(self):
        return [event.event_type for event in self.events]


class FailingReader(TransactionReader):
    """Reader whose every read fails with a non-package error."""

    async def read_transactions_async(self, source):
        raise RuntimeError("disk went away")


class FailingAnalysisService(TransactionAnalysisService):
    """Analysis service whose every run fails with a non-package error."""

    async def analyze_async(self, transactions, **filters):
        raise ArithmeticError("overflow")


@pytest.fixture
def audit_logger():
    return RecordingAuditLogger()


@pytest.fixture
def flow(audit_logger):
    return AnalysisFlow(
        reader=TransactionReader(ReaderSettings()),
        analysis_service=TransactionAnalysisService(AnalysisSettings()),
        audit_logger=audit_logger,
    )


class TestAnalysisFlow:
    """Tests for AnalysisFlow."""

    def test_analyze_file_from_path(self, flow, audit_logger, tmp_path):
        """Test the full flow from a file on disk."""
        path = tmp_path / "export.csv"
        path.write_bytes(EXPORT)

        transactions, result = asyncio.run(flow.analyze_file(path))

        assert len(transactions) == 4
        assert result.total_transaction_count == 4
        assert result.currencies == [Currency.USD, Currency.IQD]
        assert result.currency_analyses[Currency.USD].net_amount == Decimal("60")
        assert audit_logger.event_types == [
            AuditEventType.FILE_READ_STARTED,
            AuditEventType.TRANSACTIONS_READ,
            AuditEventType.ANALYSIS_STARTED,
            AuditEventType.ANALYSIS_COMPLETED,
        ]

    def test_events_share_correlation_id(self, flow, audit_logger):
        """Test that one call is traceable through a single correlation ID."""
        asyncio.run(flow.analyze_file(io.BytesIO(EXPORT)))

        correlation_ids = {event.correlation_id for event in audit_logger.events}
        assert len(correlation_ids) == 1
        assert None not in correlation_ids

    def test_filters_are_applied_and_audited(self, flow, audit_logger):
        """Test that filters reach the engine and the audit trail."""
        _, result = asyncio.run(flow.analyze_file(
            io.BytesIO(EXPORT),
            ignore_internal_transactions=True,
            date_from=date(2023, 9, 1),
            date_to=date(2023, 9, 30),
        ))

        assert result.filtered_transaction_count == 2
        assert result.currencies == [Currency.USD]

        started = audit_logger.events[2]
        assert started.details["ignore_internal_transactions"] is True
        assert started.details["date_from"] == "2023-09-01"

        completed = audit_logger.events[3]
        assert completed.details["filtered_transaction_count"] == 2
        assert completed.details["currencies"] == ["USD"]

    def test_reanalyze_without_rereading(self, flow):
        """Test that decoded transactions can be analyzed again with new filters."""
        transactions = asyncio.run(flow.read(io.BytesIO(EXPORT)))

        everything = asyncio.run(flow.analyze(transactions))
        october = asyncio.run(flow.analyze(transactions, date_from=date(2023, 10, 1)))

        assert everything.filtered_transaction_count == 4
        assert october.currencies == [Currency.IQD]

    def test_read_failure_is_audited_and_raised(self, flow, audit_logger):
        """Test that a malformed file is logged as an error and re-raised."""
        bad = EXPORT.replace(b"-30.00 USD", b"thirty")

        with pytest.raises(FormatError) as exc_info:
            asyncio.run(flow.analyze_file(io.BytesIO(bad)))

        assert exc_info.value.row == 2
        assert audit_logger.event_types == [
            AuditEventType.FILE_READ_STARTED,
            AuditEventType.READ_FAILED,
        ]
        failed = audit_logger.events[-1]
        assert failed.severity == AuditSeverity.ERROR
        assert failed.error_type == "FormatError"

    def test_missing_file(self, flow, audit_logger, tmp_path):
        """Test that a missing file is audited and raised."""
        with pytest.raises(NotFoundError):
            asyncio.run(flow.analyze_file(tmp_path / "nope.csv"))
        assert audit_logger.event_types[-1] == AuditEventType.READ_FAILED

    def test_analysis_failure_is_audited_and_raised(self, flow, audit_logger):
        """Test that an analysis precondition failure is logged and re-raised."""
        with pytest.raises(ValidationError):
            asyncio.run(flow.analyze(None))

        assert audit_logger.event_types == [
            AuditEventType.ANALYSIS_STARTED,
            AuditEventType.ANALYSIS_FAILED,
        ]

    def test_unexpected_read_error_is_audited_and_raised(self, audit_logger):
        """Test that a failure outside the package's errors is logged as a system error."""
        flow = AnalysisFlow(
            reader=FailingReader(ReaderSettings()),
            analysis_service=TransactionAnalysisService(AnalysisSettings()),
            audit_logger=audit_logger,
        )

        with pytest.raises(RuntimeError):
            asyncio.run(flow.analyze_file(io.BytesIO(EXPORT)))

        assert audit_logger.event_types == [
            AuditEventType.FILE_READ_STARTED,
            AuditEventType.SYSTEM_ERROR,
        ]
        failed = audit_logger.events[-1]
        assert failed.severity == AuditSeverity.ERROR
        assert failed.error_type == "RuntimeError"
        assert failed.error_message == "disk went away"
        assert failed.details["stage"] == "read"
        assert failed.correlation_id == audit_logger.events[0].correlation_id

    def test_unexpected_analysis_error_is_audited_and_raised(self, audit_logger):
        """Test that an unexpected analysis failure is logged as a system error."""
        flow = AnalysisFlow(
            reader=TransactionReader(ReaderSettings()),
            analysis_service=FailingAnalysisService(AnalysisSettings()),
            audit_logger=audit_logger,
        )

        with pytest.raises(ArithmeticError):
            asyncio.run(flow.analyze([]))

        assert audit_logger.event_types == [
            AuditEventType.ANALYSIS_STARTED,
            AuditEventType.SYSTEM_ERROR,
        ]
        assert audit_logger.events[-1].details == {"stage": "analysis"}

    def test_without_audit_logger(self):
        """Test that auditing is optional."""
        flow = AnalysisFlow(
            reader=TransactionReader(ReaderSettings()),
            analysis_service=TransactionAnalysisService(AnalysisSettings()),
        )

        _, result = asyncio.run(flow.analyze_file(io.BytesIO(EXPORT)))

        assert result.total_transaction_count == 4


class TestAppComponents:
    """Tests for component wiring."""

    def test_create_app_components(self):
        """Test that the factory builds a working flow."""
        flow = create_app_components()

        assert isinstance(flow, AnalysisFlow)
        _, result = asyncio.run(flow.analyze_file(io.BytesIO(EXPORT)))
        assert result.filtered_transaction_count == 4

    def test_configure_logging_console(self):
        """Test console rendering can be selected."""
        configure_logging(AppSettings(log_json=False, log_level="warning"))
        configure_logging(AppSettings())
