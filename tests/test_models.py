"""
Tests for the Transaction Analyzer models

Test strategy:
1. Unit tests for individual components (models, parsers, reader)
2. Integration tests for flows (real files under tmp_path)
3. No network and no persisted state
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from transaction_analyzer.exceptions import UnknownCurrencyError
from transaction_analyzer.models import (
    CURRENCY_INFO,
    NIL_ID,
    UNSET_DATE,
    ZERO_TIME,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    BalancePoint,
    CounterpartyAnalysis,
    Currency,
    MonetaryValue,
    MonthlyAnalysis,
    Transaction,
    TransactionAnalysisResult,
    TransactionTypeAnalysis,
    currency_from_code,
)


class TestCurrency:
    """Tests for the currency enum and code mapper."""

    def test_codes(self):
        """Test that every currency maps to its ISO code."""
        assert Currency.USD.code == "USD"
        assert Currency.EUR.code == "EUR"
        assert Currency.IQD.code == "IQD"

    def test_every_currency_has_display_info(self):
        """Test that the display table covers the whole enum."""
        assert set(CURRENCY_INFO) == set(Currency)
        assert Currency.USD.symbol == "$"
        assert Currency.EUR.culture == "de-DE"

    @pytest.mark.parametrize("code,expected", [
        ("USD", Currency.USD),
        ("EUR", Currency.EUR),
        ("IQD", Currency.IQD),
        ("usd", Currency.USD),
        ("eur", Currency.EUR),
        (" iqd ", Currency.IQD),
    ])
    def test_from_code(self, code, expected):
        """Test that codes map case-insensitively."""
        assert currency_from_code(code) == expected

    @pytest.mark.parametrize("code", [None, "", "   "])
    def test_from_empty_code_is_iqd(self, code):
        """Test that an absent code resolves to IQD."""
        assert currency_from_code(code) == Currency.IQD

    def test_unknown_code_is_rejected(self):
        """Test that unsupported codes raise, naming the code."""
        with pytest.raises(UnknownCurrencyError) as exc_info:
            currency_from_code("GBP")
        assert exc_info.value.code == "GBP"
        assert "GBP" in str(exc_info.value)


class TestMonetaryValue:
    """Tests for the MonetaryValue model."""

    def test_default_is_zero_iqd(self):
        """Test that the default value is zero IQD."""
        value = MonetaryValue()
        assert value.amount == 0
        assert value.currency == Currency.IQD
        assert value.is_zero

    def test_zero_in_currency(self):
        """Test MonetaryValue.zero with an explicit currency."""
        value = MonetaryValue.zero(Currency.EUR)
        assert value.is_zero
        assert value.currency == Currency.EUR

    def test_structural_equality(self):
        """Test that equality needs both amount and currency to match."""
        a = MonetaryValue(amount=Decimal("100.50"), currency=Currency.USD)
        b = MonetaryValue(amount=Decimal("100.50"), currency=Currency.USD)
        c = MonetaryValue(amount=Decimal("100.50"), currency=Currency.EUR)
        assert a == b
        assert hash(a) == hash(b)
        assert a != c

    def test_is_immutable(self):
        """Test that values cannot be modified after creation."""
        value = MonetaryValue(amount=Decimal("1"), currency=Currency.USD)
        with pytest.raises(ValueError):
            value.amount = Decimal("2")

    @pytest.mark.parametrize("amount,currency,expected", [
        ("100.50", Currency.USD, "100.50 USD"),
        ("0", Currency.EUR, "0.00 EUR"),
        ("-50.25", Currency.IQD, "-50.25 IQD"),
        ("2.345", Currency.USD, "2.35 USD"),
        ("-0.001", Currency.USD, "0.00 USD"),
    ])
    def test_to_string(self, amount, currency, expected):
        """Test the canonical two-decimal text form."""
        assert str(MonetaryValue(amount=Decimal(amount), currency=currency)) == expected

    def test_to_string_with_grouping(self):
        """Test thousands grouping."""
        value = MonetaryValue(amount=Decimal("1234567.891"), currency=Currency.USD)
        assert value.to_string(grouping=True) == "1,234,567.89 USD"

    def test_display_string_uses_symbol(self):
        """Test the symbol-prefixed display form."""
        value = MonetaryValue(amount=Decimal("100.5"), currency=Currency.USD)
        assert value.to_display_string() == "$100.50"

    def test_format_spec(self):
        """Test that format specs apply to the amount."""
        value = MonetaryValue(amount=Decimal("1234.5"), currency=Currency.EUR)
        assert f"{value:,.1f}" == "1,234.5 EUR"
        assert f"{value}" == "1234.50 EUR"

    def test_to_string_beyond_default_precision(self):
        """Test that amounts wider than the decimal context still format."""
        value = MonetaryValue(amount=Decimal("123456789012345678901234567890"), currency=Currency.USD)
        assert str(value) == "123456789012345678901234567890.00 USD"
        assert value.to_display_string() == "$123456789012345678901234567890.00"


class TestTransaction:
    """Tests for the Transaction model."""

    def test_defaults_use_sentinels(self):
        """Test that an empty transaction carries the sentinel values."""
        transaction = Transaction()
        assert transaction.id == NIL_ID
        assert transaction.date == UNSET_DATE
        assert transaction.time == ZERO_TIME
        assert transaction.amount == MonetaryValue.zero()
        assert transaction.transaction_id is None
        assert not transaction.has_date

    def test_strips_whitespace(self):
        """Test that text fields are trimmed."""
        transaction = Transaction(counterparty="  Alice  ", status=" COMPLETED ")
        assert transaction.counterparty == "Alice"
        assert transaction.status == "COMPLETED"

    def test_timestamp_combines_date_and_time(self):
        """Test the combined timestamp."""
        transaction = Transaction(
            date=date(2023, 9, 5),
            time=timedelta(hours=11, minutes=6, seconds=44),
        )
        assert transaction.timestamp == datetime(2023, 9, 5, 11, 6, 44)

    def test_timestamp_past_last_date_is_rejected(self):
        """Test that a time offset carrying the date past the datetime range is refused."""
        with pytest.raises(ValueError):
            Transaction(date=date.max, time=timedelta(days=1))

    def test_timestamp_at_last_instant(self):
        """Test that the last representable instant is still accepted."""
        transaction = Transaction(date=date.max, time=timedelta(hours=23, minutes=59, seconds=59))
        assert transaction.timestamp == datetime(9999, 12, 31, 23, 59, 59)

    def test_direction(self):
        """Test inflow/outflow flags."""
        inflow = Transaction(amount=MonetaryValue(amount=Decimal("10")))
        outflow = Transaction(amount=MonetaryValue(amount=Decimal("-10")))
        assert inflow.is_inflow and not inflow.is_outflow
        assert outflow.is_outflow and not outflow.is_inflow
        assert not Transaction().is_inflow
        assert not Transaction().is_outflow

    def test_to_row(self):
        """Test conversion to an export row."""
        row_id = uuid4()
        transaction = Transaction(
            id=row_id,
            counterparty="Alice",
            amount=MonetaryValue(amount=Decimal("-50.25"), currency=Currency.USD),
            transaction_type="PAYMENT",
            date=date(2023, 12, 25),
            time=timedelta(hours=13, minutes=30, seconds=15),
            status="COMPLETED",
        )
        row = transaction.to_row()
        assert row["ID"] == str(row_id)
        assert row["AMOUNT"] == "-50.25 USD"
        assert row["FEE"] == "0.00 IQD"
        assert row["DATE"] == "25/12/2023"
        assert row["TIME"] == "1:30:15 PM"
        assert row["TRANSACTION ID"] == ""

    def test_to_row_leaves_sentinels_empty(self):
        """Test that sentinel values are written as empty fields."""
        row = Transaction().to_row()
        assert row["ID"] == ""
        assert row["DATE"] == ""
        assert row["TIME"] == ""


class TestAnalysisModels:
    """Tests for derived values on analysis models."""

    def test_monthly_derived_values(self):
        """Test month label, net income and average size."""
        month = MonthlyAnalysis(
            year=2023,
            month=9,
            income=Decimal("300"),
            expenses=Decimal("100"),
            transaction_count=4,
        )
        assert month.month_name == "Sep 2023"
        assert month.net_income == Decimal("200")
        assert month.average_transaction_size == Decimal("100")

    def test_monthly_rejects_invalid_month(self):
        """Test that months outside 1-12 are rejected."""
        with pytest.raises(ValueError):
            MonthlyAnalysis(year=2023, month=13)

    def test_empty_averages_are_zero(self):
        """Test that averages over nothing are zero, not an error."""
        assert MonthlyAnalysis(year=2023, month=1).average_transaction_size == 0
        assert TransactionTypeAnalysis(transaction_type="X").average_amount == 0
        assert CounterpartyAnalysis(counterparty="Bob").average_amount == 0

    def test_counterparty_net_amount(self):
        """Test that net = received - sent."""
        counterparty = CounterpartyAnalysis(
            counterparty="Bob",
            transaction_count=2,
            total_amount=Decimal("150"),
            amount_sent=Decimal("50"),
            amount_received=Decimal("100"),
        )
        assert counterparty.net_amount == Decimal("50")
        assert counterparty.average_amount == Decimal("75")

    def test_counterparty_rejects_negative_amounts(self):
        """Test that sent/received are magnitudes."""
        with pytest.raises(ValueError):
            CounterpartyAnalysis(counterparty="Bob", amount_sent=Decimal("-1"))

    def test_balance_point_formatted_date(self):
        """Test the ISO date label."""
        point = BalancePoint(timestamp=datetime(2023, 9, 5, 10, 0), balance=Decimal("1"))
        assert point.formatted_date == "2023-09-05"

    def test_computed_fields_serialize(self):
        """Test that derived values are part of the dumped model."""
        dumped = MonthlyAnalysis(year=2023, month=9).model_dump()
        assert dumped["month_name"] == "Sep 2023"
        assert "net_income" in dumped

    def test_result_defaults(self):
        """Test the empty analysis result."""
        result = TransactionAnalysisResult()
        assert result.currencies == []
        assert result.date_from == date.min
        assert result.date_to == date.max
        assert result.excluded_transaction_count == 0

    def test_analyzed_at_is_utc_aware(self):
        """Test that the run time carries the UTC zone."""
        assert TransactionAnalysisResult().analyzed_at.tzinfo == timezone.utc


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.FILE_READ_STARTED,
            description="Reading export.csv",
        )
        assert event.event_type == AuditEventType.FILE_READ_STARTED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_timestamp_is_utc_aware(self):
        """Test that event timestamps carry the UTC zone."""
        event = AuditEvent(event_type=AuditEventType.SYSTEM_ERROR, description="x")
        assert event.timestamp.tzinfo == timezone.utc
        assert event.to_log_dict()["timestamp"].endswith("+00:00")

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_READ,
            description="Read 3 transactions",
            details={"source": "export.csv", "transaction_count": 3},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "transactions_read"
        assert log_dict["details"]["transaction_count"] == 3
        assert log_dict["correlation_id"] is None

    def test_audit_event_builder_read_failed(self):
        """Test AuditEventBuilder.read_failed."""
        correlation_id = uuid4()

        event = AuditEventBuilder.read_failed(
            source="export.csv",
            error=ValueError("bad amount"),
            correlation_id=correlation_id,
        )

        assert event.event_type == AuditEventType.READ_FAILED
        assert event.severity == AuditSeverity.ERROR
        assert event.correlation_id == correlation_id
        assert event.error_type == "ValueError"
        assert event.error_message == "bad amount"

    def test_audit_event_builder_analysis_started(self):
        """Test AuditEventBuilder.analysis_started records the filters."""
        event = AuditEventBuilder.analysis_started(
            transaction_count=10,
            ignore_internal_transactions=True,
            date_from=date(2023, 1, 1),
            date_to=date(2023, 12, 31),
            correlation_id=uuid4(),
        )

        assert event.event_type == AuditEventType.ANALYSIS_STARTED
        assert event.details["ignore_internal_transactions"] is True
        assert event.details["date_from"] == "2023-01-01"
        assert event.details["date_to"] == "2023-12-31"

    def test_audit_event_builder_analysis_completed(self):
        """Test AuditEventBuilder.analysis_completed."""
        event = AuditEventBuilder.analysis_completed(
            total_count=10,
            filtered_count=7,
            currencies=["USD", "IQD"],
            correlation_id=uuid4(),
        )

        assert event.event_type == AuditEventType.ANALYSIS_COMPLETED
        assert event.details["currencies"] == ["USD", "IQD"]
        assert "7 of 10" in event.description


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
