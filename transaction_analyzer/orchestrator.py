"""
Main Orchestrator for the Transaction Analyzer

This module ties together all the components and defines the
end-to-end flow:
    export file → decode → filter → analyze per currency → result

DESIGN DECISION: The orchestrator enforces the boundaries:
- A file that fails to decode produces no analysis at all
- Every step is audited under one correlation ID
- Failures are logged and re-raised, never swallowed

Reading and analysis are synchronous and CPU-bound; the async methods
here run them on worker threads so a UI event loop stays responsive.
"""

from datetime import date
from pathlib import Path
from typing import BinaryIO, Optional, Union
from uuid import UUID

from transaction_analyzer.analysis import TransactionAnalysisService
from transaction_analyzer.audit import AuditLogger, configure_logging, create_correlation_id
from transaction_analyzer.config import get_settings
from transaction_analyzer.exceptions import TransactionAnalyzerError
from transaction_analyzer.models.analysis import TransactionAnalysisResult
from transaction_analyzer.models.transaction import Transaction
from transaction_analyzer.reader import TransactionReader


Source = Union[str, Path, BinaryIO]


def _describe(source: Source) -> str:
    if isinstance(source, (str, Path)):
        return str(source)
    return getattr(source, "name", "<stream>")


class AnalysisFlow:
    """
    Orchestrates reading an export and analyzing it.

    Flow:
    1. Read → Decode every row (fail-fast on the first bad field)
    2. Filter → Date range and internal-transfer exclusion
    3. Analyze → One CurrencyAnalysis per currency
    """

    def __init__(
        self,
        reader: Optional[TransactionReader] = None,
        analysis_service: Optional[TransactionAnalysisService] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._reader = reader or TransactionReader()
        self._analysis_service = analysis_service or TransactionAnalysisService()
        self._audit_logger = audit_logger

    async def read(
        self,
        source: Source,
        correlation_id: Optional[UUID] = None,
    ) -> list[Transaction]:
        """
        Read transactions from a file path or byte stream.

        Raises:
            ValidationError, NotFoundError, FormatError: From the reader
        """
        correlation_id = correlation_id or create_correlation_id()
        name = _describe(source)

        if self._audit_logger:
            self._audit_logger.log_file_read_started(
                source=name,
                correlation_id=correlation_id,
            )

        try:
            transactions = await self._reader.read_transactions_async(source)
        except TransactionAnalyzerError as e:
            if self._audit_logger:
                self._audit_logger.log_read_failed(
                    source=name,
                    error=e,
                    correlation_id=correlation_id,
                )
            raise
        except Exception as e:
            self._log_unexpected(e, "read", correlation_id, source=name)
            raise

        if self._audit_logger:
            self._audit_logger.log_transactions_read(
                source=name,
                transaction_count=len(transactions),
                correlation_id=correlation_id,
            )

        return transactions

    async def analyze(
        self,
        transactions: list[Transaction],
        ignore_internal_transactions: bool = False,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> TransactionAnalysisResult:
        """Analyze already-decoded transactions."""
        correlation_id = correlation_id or create_correlation_id()

        if self._audit_logger:
            self._audit_logger.log_analysis_started(
                correlation_id=correlation_id,
                transaction_count=len(transactions) if transactions is not None else 0,
                ignore_internal_transactions=ignore_internal_transactions,
                date_from=date_from or date.min,
                date_to=date_to or date.max,
            )

        try:
            result = await self._analysis_service.analyze_async(
                transactions,
                ignore_internal_transactions=ignore_internal_transactions,
                date_from=date_from,
                date_to=date_to,
            )
        except TransactionAnalyzerError as e:
            if self._audit_logger:
                self._audit_logger.log_analysis_failed(
                    error=e,
                    correlation_id=correlation_id,
                )
            raise
        except Exception as e:
            self._log_unexpected(e, "analysis", correlation_id)
            raise

        if self._audit_logger:
            self._audit_logger.log_analysis_completed(
                total_count=result.total_transaction_count,
                filtered_count=result.filtered_transaction_count,
                currencies=[currency.value for currency in result.currencies],
                correlation_id=correlation_id,
            )

        return result

    async def analyze_file(
        self,
        source: Source,
        ignore_internal_transactions: bool = False,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        correlation_id: Optional[UUID] = None,
    ) -> tuple[list[Transaction], TransactionAnalysisResult]:
        """
        Read and analyze an export in one call.

        Returns:
            (transactions, result) - the decoded transactions are returned
            too so callers can re-run the analysis with other filters
            without reading the file again.
        """
        correlation_id = correlation_id or create_correlation_id()

        transactions = await self.read(source, correlation_id=correlation_id)
        result = await self.analyze(
            transactions,
            ignore_internal_transactions=ignore_internal_transactions,
            date_from=date_from,
            date_to=date_to,
            correlation_id=correlation_id,
        )
        return transactions, result

    def _log_unexpected(
        self,
        error: Exception,
        stage: str,
        correlation_id: UUID,
        **details,
    ) -> None:
        """Record a failure that is not one of the package's own errors."""
        if self._audit_logger:
            self._audit_logger.log_error(
                error_type=type(error).__name__,
                error_message=str(error),
                details={"stage": stage, **details},
                correlation_id=correlation_id,
            )


def create_app_components() -> AnalysisFlow:
    """
    Factory function to create all application components.

    Configures logging from AppSettings and wires the reader and analysis
    service to their settings sections.
    """
    settings = get_settings()
    configure_logging(settings.app)

    return AnalysisFlow(
        reader=TransactionReader(settings.reader),
        analysis_service=TransactionAnalysisService(settings.analysis),
        audit_logger=AuditLogger(),
    )
