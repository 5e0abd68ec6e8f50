"""
Data Models Package

This package contains all Pydantic models used in the Transaction Analyzer:
the decoded transaction record, money and currency types, analysis results
and audit events.
"""

from transaction_analyzer.models.currency import (
    CURRENCY_INFO,
    DEFAULT_CURRENCY,
    Currency,
    CurrencyInfo,
    currency_from_code,
)
from transaction_analyzer.models.money import MonetaryValue
from transaction_analyzer.models.transaction import (
    INTERNAL_TRANSFER_TYPE,
    NIL_ID,
    UNSET_DATE,
    ZERO_TIME,
    Transaction,
)
from transaction_analyzer.models.analysis import (
    BalancePoint,
    CounterpartyAnalysis,
    CounterpartyTransactionTypeAnalysis,
    CurrencyAnalysis,
    IncomeTrend,
    MonthlyAnalysis,
    StatusAnalysis,
    TransactionAnalysisResult,
    TransactionTypeAnalysis,
    YearlyAnalysis,
)
from transaction_analyzer.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Money
    "CURRENCY_INFO",
    "DEFAULT_CURRENCY",
    "Currency",
    "CurrencyInfo",
    "MonetaryValue",
    "currency_from_code",
    # Transactions
    "INTERNAL_TRANSFER_TYPE",
    "NIL_ID",
    "UNSET_DATE",
    "ZERO_TIME",
    "Transaction",
    # Analysis results
    "BalancePoint",
    "CounterpartyAnalysis",
    "CounterpartyTransactionTypeAnalysis",
    "CurrencyAnalysis",
    "IncomeTrend",
    "MonthlyAnalysis",
    "StatusAnalysis",
    "TransactionAnalysisResult",
    "TransactionTypeAnalysis",
    "YearlyAnalysis",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
