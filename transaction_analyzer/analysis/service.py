"""
Transaction Analysis Engine

DESIGN DECISION: Analysis is a PURE computation.
The engine takes a list of transactions plus filter parameters and returns
a freshly built TransactionAnalysisResult. It:
- Never mutates its input
- Holds no state between calls
- Never converts between currencies (each currency is its own partition)

Because of that, the same input always yields the same aggregates, and
independent calls may run concurrently.

Ordering rules (all sorts are stable, so ties keep input order):
- Monthly/yearly series: newest first
- Balance history: oldest first
- Transaction types: most frequent first
- Largest-by-type, counterparties, counterparty leaves: largest amount first
"""

import asyncio
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Hashable, Iterable, Optional, TypeVar

import structlog

from transaction_analyzer.config import AnalysisSettings, get_settings
from transaction_analyzer.exceptions import ValidationError
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
from transaction_analyzer.models.currency import Currency
from transaction_analyzer.models.transaction import Transaction


K = TypeVar("K", bound=Hashable)

ZERO = Decimal("0")
HUNDRED = Decimal("100")

logger = structlog.get_logger(__name__)


def _group_by(
    transactions: Iterable[Transaction],
    key: Callable[[Transaction], K],
) -> dict[K, list[Transaction]]:
    """Group transactions by key, keeping first-seen key order."""
    groups: dict[K, list[Transaction]] = {}
    for transaction in transactions:
        groups.setdefault(key(transaction), []).append(transaction)
    return groups


def _absolute(transaction: Transaction) -> Decimal:
    return abs(transaction.amount.amount)


def _income(transactions: list[Transaction]) -> Decimal:
    """Sum of positive amounts."""
    return sum((t.amount.amount for t in transactions if t.is_inflow), ZERO)


def _expenses(transactions: list[Transaction]) -> Decimal:
    """Sum of absolute negative amounts."""
    return sum((_absolute(t) for t in transactions if t.is_outflow), ZERO)


def _total_absolute(transactions: list[Transaction]) -> Decimal:
    return sum((_absolute(t) for t in transactions), ZERO)


def _as_date(value: Optional[date], default: date) -> date:
    if value is None:
        return default
    if isinstance(value, datetime):
        return value.date()
    return value


class TransactionAnalysisService:
    """
    Computes per-currency analytics over a list of transactions.

    GUARANTEES:
    - Every currency present after filtering gets exactly one CurrencyAnalysis
    - Empty or fully filtered input gives zeroed results, never an error
    - Only a None input is rejected
    """

    def __init__(self, settings: Optional[AnalysisSettings] = None):
        self._settings = settings or get_settings().analysis

    def analyze(
        self,
        transactions: Iterable[Transaction],
        ignore_internal_transactions: bool = False,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> TransactionAnalysisResult:
        """
        Analyze transactions within an inclusive date range.

        Args:
            transactions: Decoded transactions (not modified)
            ignore_internal_transactions: Drop same-owner transfers
            date_from: First date to include (default: no lower bound)
            date_to: Last date to include (default: no upper bound)

        Raises:
            ValidationError: If transactions is None
        """
        if transactions is None:
            raise ValidationError("Transactions cannot be null.")

        all_transactions = list(transactions)
        date_from = _as_date(date_from, date.min)
        date_to = _as_date(date_to, date.max)

        filtered = self._filter(
            all_transactions,
            ignore_internal_transactions,
            date_from,
            date_to,
        )

        currency_analyses = {
            currency: self._analyze_currency(currency, group)
            for currency, group in _group_by(filtered, lambda t: t.amount.currency).items()
        }

        result = TransactionAnalysisResult(
            currency_analyses=currency_analyses,
            total_transaction_count=len(all_transactions),
            filtered_transaction_count=len(filtered),
            date_from=date_from,
            date_to=date_to,
            ignore_internal_transactions=ignore_internal_transactions,
            recent_transactions=self._calculate_recent_transactions(filtered),
        )

        logger.info(
            "analysis_completed",
            total_transaction_count=result.total_transaction_count,
            filtered_transaction_count=result.filtered_transaction_count,
            currencies=[currency.value for currency in currency_analyses],
        )
        return result

    async def analyze_async(
        self,
        transactions: Iterable[Transaction],
        ignore_internal_transactions: bool = False,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> TransactionAnalysisResult:
        """Run analyze() on a worker thread so an event loop is not blocked."""
        return await asyncio.to_thread(
            self.analyze,
            transactions,
            ignore_internal_transactions,
            date_from,
            date_to,
        )

    def _filter(
        self,
        transactions: list[Transaction],
        ignore_internal_transactions: bool,
        date_from: date,
        date_to: date,
    ) -> list[Transaction]:
        internal_type = self._settings.internal_transfer_type
        return [
            t for t in transactions
            if date_from <= t.date <= date_to
            and not (ignore_internal_transactions and t.transaction_type == internal_type)
        ]

    def _analyze_currency(
        self,
        currency: Currency,
        transactions: list[Transaction],
    ) -> CurrencyAnalysis:
        """Compute every aggregate for one currency partition."""
        monthly = self._calculate_monthly_analysis(transactions)

        return CurrencyAnalysis(
            currency=currency,
            transaction_count=len(transactions),
            total_inflow=_income(transactions),
            total_outflow=_expenses(transactions),
            net_amount=sum((t.amount.amount for t in transactions), ZERO),
            total_fees=sum((t.fee.amount for t in transactions), ZERO),
            monthly_analyses=monthly,
            yearly_analyses=self._calculate_yearly_analysis(transactions),
            balance_history=self._calculate_balance_history(transactions),
            income_trends=self._calculate_income_trends(monthly),
            transaction_type_analyses=self._calculate_transaction_type_analysis(transactions),
            largest_transactions_by_type=self._calculate_largest_transactions_by_type(transactions),
            top_counterparties=self._calculate_top_counterparties(transactions),
            counterparties_by_transaction_type=self._calculate_counterparties_by_transaction_type(
                transactions
            ),
            status_analyses=self._calculate_status_analysis(transactions),
            largest_transactions=self._calculate_largest_transactions(transactions),
            **self._calculate_income_statistics(monthly),
        )

    def _calculate_monthly_analysis(
        self,
        transactions: list[Transaction],
    ) -> list[MonthlyAnalysis]:
        groups = _group_by(
            (t for t in transactions if t.has_date),
            lambda t: (t.date.year, t.date.month),
        )
        months = [
            MonthlyAnalysis(
                year=year,
                month=month,
                income=_income(group),
                expenses=_expenses(group),
                transaction_count=len(group),
            )
            for (year, month), group in groups.items()
        ]
        return sorted(months, key=lambda m: (m.year, m.month), reverse=True)

    def _calculate_yearly_analysis(
        self,
        transactions: list[Transaction],
    ) -> list[YearlyAnalysis]:
        groups = _group_by(
            (t for t in transactions if t.has_date),
            lambda t: t.date.year,
        )
        years = [
            YearlyAnalysis(
                year=year,
                income=_income(group),
                expenses=_expenses(group),
                transaction_count=len(group),
            )
            for year, group in groups.items()
        ]
        return sorted(years, key=lambda y: y.year, reverse=True)

    def _calculate_balance_history(
        self,
        transactions: list[Transaction],
    ) -> list[BalancePoint]:
        """
        Reported balances when the export has them, else a running total.

        Transactions without a date cannot be placed in time and are skipped.
        """
        chronological = sorted(
            (t for t in transactions if t.has_date),
            key=lambda t: (t.date, t.time),
        )

        history = [
            BalancePoint(timestamp=t.timestamp, balance=t.balance_after.amount)
            for t in chronological
            if not t.balance_after.is_zero
        ]

        if not history:
            running_balance = ZERO
            for t in chronological:
                running_balance += t.amount.amount
                history.append(BalancePoint(timestamp=t.timestamp, balance=running_balance))

        return sorted(history, key=lambda point: point.timestamp)

    def _calculate_transaction_type_analysis(
        self,
        transactions: list[Transaction],
    ) -> list[TransactionTypeAnalysis]:
        analyses = [
            TransactionTypeAnalysis(
                transaction_type=transaction_type,
                count=len(group),
                total_amount=_total_absolute(group),
                largest_amount=max(_absolute(t) for t in group),
            )
            for transaction_type, group in _group_by(
                transactions, lambda t: t.transaction_type
            ).items()
        ]
        return sorted(analyses, key=lambda a: a.count, reverse=True)

    def _calculate_largest_transactions_by_type(
        self,
        transactions: list[Transaction],
    ) -> list[TransactionTypeAnalysis]:
        analyses = []
        for transaction_type, group in _group_by(transactions, lambda t: t.transaction_type).items():
            # max() keeps the first of several equally large transactions
            largest = max(group, key=_absolute)
            analyses.append(TransactionTypeAnalysis(
                transaction_type=transaction_type,
                count=len(group),
                total_amount=_total_absolute(group),
                largest_amount=_absolute(largest),
                largest_transaction=largest,
            ))
        return sorted(analyses, key=lambda a: a.largest_amount, reverse=True)

    def _calculate_top_counterparties(
        self,
        transactions: list[Transaction],
    ) -> list[CounterpartyAnalysis]:
        groups = _group_by(
            (t for t in transactions if t.counterparty),
            lambda t: t.counterparty,
        )
        counterparties = [
            CounterpartyAnalysis(
                counterparty=counterparty,
                transaction_count=len(group),
                total_amount=_total_absolute(group),
                amount_sent=_expenses(group),
                amount_received=_income(group),
            )
            for counterparty, group in groups.items()
        ]
        return sorted(counterparties, key=lambda c: c.total_amount, reverse=True)

    def _calculate_counterparties_by_transaction_type(
        self,
        transactions: list[Transaction],
    ) -> dict[str, list[CounterpartyTransactionTypeAnalysis]]:
        type_groups = _group_by(
            (t for t in transactions if t.counterparty),
            lambda t: t.transaction_type,
        )

        result = {}
        for transaction_type, type_group in type_groups.items():
            leaves = [
                CounterpartyTransactionTypeAnalysis(
                    counterparty=counterparty,
                    transaction_type=transaction_type,
                    count=len(group),
                    total_amount=_total_absolute(group),
                )
                for counterparty, group in _group_by(type_group, lambda t: t.counterparty).items()
            ]
            result[transaction_type] = sorted(leaves, key=lambda c: c.total_amount, reverse=True)
        return result

    def _calculate_status_analysis(
        self,
        transactions: list[Transaction],
    ) -> list[StatusAnalysis]:
        statuses = [
            StatusAnalysis(status=status, count=len(group))
            for status, group in _group_by(transactions, lambda t: t.status).items()
        ]
        return sorted(statuses, key=lambda s: s.count, reverse=True)

    def _calculate_largest_transactions(
        self,
        transactions: list[Transaction],
    ) -> list[Transaction]:
        limit = self._settings.largest_transactions_limit
        return sorted(transactions, key=_absolute, reverse=True)[:limit]

    def _calculate_recent_transactions(
        self,
        transactions: list[Transaction],
    ) -> list[Transaction]:
        limit = self._settings.recent_transactions_limit
        return sorted(transactions, key=lambda t: (t.date, t.time), reverse=True)[:limit]

    def _calculate_income_trends(
        self,
        monthly: list[MonthlyAnalysis],
    ) -> list[IncomeTrend]:
        """Month-over-month income change across the most recent months."""
        recent = monthly[:self._settings.income_trend_months]

        trends = []
        for current, previous in zip(recent, recent[1:]):
            change = current.income - previous.income
            change_percent = (
                change / previous.income * HUNDRED if previous.income > 0 else ZERO
            )
            trends.append(IncomeTrend(
                current_month=current,
                previous_month=previous,
                change=change,
                change_percent=change_percent,
            ))
        return trends

    def _calculate_income_statistics(self, monthly: list[MonthlyAnalysis]) -> dict:
        """
        Statistics over months with positive income.

        Uses the already-computed monthly series (newest first); on ties
        the best/worst month is the first one in that order.
        """
        earning = [m for m in monthly if m.income > 0]
        if not earning:
            return {}

        incomes = [m.income for m in earning]
        return {
            "average_monthly_income": sum(incomes, ZERO) / len(incomes),
            "max_monthly_income": max(incomes),
            "min_monthly_income": min(incomes),
            "best_income_month": max(earning, key=lambda m: m.income),
            "worst_income_month": min(earning, key=lambda m: m.income),
        }
