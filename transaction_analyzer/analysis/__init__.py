"""Transaction analysis package."""

from transaction_analyzer.analysis.service import TransactionAnalysisService

__all__ = ["TransactionAnalysisService"]
