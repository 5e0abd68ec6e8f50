"""
Analysis Result Models

These models hold the output of one analysis run. They are built fresh for
every call and handed to the caller; nothing here is stored.

DESIGN DECISION: Derived figures (averages, net values, labels) are computed
fields. They are never stored separately, so they can never disagree with
the totals they are derived from, yet they still serialize with the model.
"""

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from transaction_analyzer.models.currency import Currency
from transaction_analyzer.models.transaction import Transaction


ZERO = Decimal("0")


class MonthlyAnalysis(BaseModel):
    """Income and expenses for one calendar month."""

    year: int
    month: int = Field(ge=1, le=12)
    income: Decimal = ZERO
    expenses: Decimal = ZERO
    transaction_count: int = Field(default=0, ge=0)

    @computed_field
    @property
    def month_name(self) -> str:
        """Short label such as 'Sep 2023'."""
        return date(self.year, self.month, 1).strftime("%b %Y")

    @computed_field
    @property
    def net_income(self) -> Decimal:
        return self.income - self.expenses

    @computed_field
    @property
    def average_transaction_size(self) -> Decimal:
        if self.transaction_count == 0:
            return ZERO
        return (self.income + self.expenses) / self.transaction_count


class YearlyAnalysis(BaseModel):
    """Income and expenses for one calendar year."""

    year: int
    income: Decimal = ZERO
    expenses: Decimal = ZERO
    transaction_count: int = Field(default=0, ge=0)

    @computed_field
    @property
    def net_income(self) -> Decimal:
        return self.income - self.expenses


class BalancePoint(BaseModel):
    """Account balance at a point in time."""

    timestamp: datetime
    balance: Decimal

    @computed_field
    @property
    def formatted_date(self) -> str:
        return self.timestamp.strftime("%Y-%m-%d")


class TransactionTypeAnalysis(BaseModel):
    """Aggregates for one transaction category code."""

    transaction_type: str
    count: int = Field(default=0, ge=0)
    total_amount: Decimal = ZERO
    largest_amount: Decimal = ZERO
    largest_transaction: Optional[Transaction] = None

    @computed_field
    @property
    def average_amount(self) -> Decimal:
        if self.count == 0:
            return ZERO
        return self.total_amount / self.count


class CounterpartyAnalysis(BaseModel):
    """Money sent to and received from one counterparty."""

    counterparty: str
    transaction_count: int = Field(default=0, ge=0)
    total_amount: Decimal = ZERO
    amount_sent: Decimal = Field(default=ZERO, ge=0)
    amount_received: Decimal = Field(default=ZERO, ge=0)

    @computed_field
    @property
    def average_amount(self) -> Decimal:
        if self.transaction_count == 0:
            return ZERO
        return self.total_amount / self.transaction_count

    @computed_field
    @property
    def net_amount(self) -> Decimal:
        return self.amount_received - self.amount_sent


class CounterpartyTransactionTypeAnalysis(BaseModel):
    """One counterparty within one transaction category."""

    counterparty: str
    transaction_type: str
    count: int = Field(default=0, ge=0)
    total_amount: Decimal = ZERO

    @computed_field
    @property
    def average_amount(self) -> Decimal:
        if self.count == 0:
            return ZERO
        return self.total_amount / self.count


class StatusAnalysis(BaseModel):
    """Number of transactions carrying one status."""

    status: str
    count: int = Field(default=0, ge=0)


class IncomeTrend(BaseModel):
    """Month-over-month change in income."""

    current_month: MonthlyAnalysis
    previous_month: MonthlyAnalysis
    change: Decimal
    change_percent: Decimal


class CurrencyAnalysis(BaseModel):
    """
    All aggregates for the transactions of a single currency.

    Currencies are never mixed or converted: each partition is analyzed
    on its own.
    """

    currency: Currency
    transaction_count: int = Field(default=0, ge=0)

    # Cash flow
    total_inflow: Decimal = ZERO
    total_outflow: Decimal = ZERO
    net_amount: Decimal = ZERO
    total_fees: Decimal = ZERO

    # Time series
    monthly_analyses: list[MonthlyAnalysis] = Field(default_factory=list)
    yearly_analyses: list[YearlyAnalysis] = Field(default_factory=list)
    balance_history: list[BalancePoint] = Field(default_factory=list)
    income_trends: list[IncomeTrend] = Field(default_factory=list)

    # Breakdowns
    transaction_type_analyses: list[TransactionTypeAnalysis] = Field(default_factory=list)
    largest_transactions_by_type: list[TransactionTypeAnalysis] = Field(default_factory=list)
    top_counterparties: list[CounterpartyAnalysis] = Field(default_factory=list)
    counterparties_by_transaction_type: dict[str, list[CounterpartyTransactionTypeAnalysis]] = Field(
        default_factory=dict
    )
    status_analyses: list[StatusAnalysis] = Field(default_factory=list)
    largest_transactions: list[Transaction] = Field(default_factory=list)

    # Income statistics (months with positive income only)
    average_monthly_income: Decimal = ZERO
    max_monthly_income: Decimal = ZERO
    min_monthly_income: Decimal = ZERO
    best_income_month: Optional[MonthlyAnalysis] = None
    worst_income_month: Optional[MonthlyAnalysis] = None


class TransactionAnalysisResult(BaseModel):
    """Top-level result of one analysis run."""

    currency_analyses: dict[Currency, CurrencyAnalysis] = Field(
        default_factory=dict,
        description="One entry per currency present after filtering, in first-seen order"
    )
    total_transaction_count: int = Field(
        default=0,
        ge=0,
        description="Number of transactions before filtering"
    )
    filtered_transaction_count: int = Field(
        default=0,
        ge=0,
        description="Number of transactions after filtering"
    )
    date_from: date = date.min
    date_to: date = date.max
    ignore_internal_transactions: bool = False
    recent_transactions: list[Transaction] = Field(
        default_factory=list,
        description="Most recent filtered transactions, newest first"
    )
    analyzed_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the analysis was run (UTC)"
    )

    @property
    def currencies(self) -> list[Currency]:
        return list(self.currency_analyses)

    @property
    def excluded_transaction_count(self) -> int:
        return self.total_transaction_count - self.filtered_transaction_count
