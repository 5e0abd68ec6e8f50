"""
Transaction Model

One Transaction is built per row of a bank export. It is immutable and lives
only for the duration of one analysis run; nothing is persisted.

DESIGN DECISION: Fields that are required by the record shape but may be
empty in the export use sentinels instead of None:
- date: UNSET_DATE (the minimum representable date)
- time: ZERO_TIME (a zero duration)
- id: NIL_ID (the all-zero UUID)
- money fields: zero in the default currency (IQD)
Only the external transaction id is truly optional.
"""

import datetime as dt
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from transaction_analyzer.models.money import MonetaryValue


UNSET_DATE = dt.date.min
ZERO_TIME = dt.timedelta(0)
NIL_ID = UUID(int=0)

# Category code of a same-owner transfer (e.g. into a savings sub-account)
INTERNAL_TRANSFER_TYPE = "MONEY_BOX_TRANSFER"


def timestamp_in_range(day: dt.date, offset: dt.timedelta) -> bool:
    """Whether day + offset is a representable datetime."""
    midnight = dt.datetime.combine(day, dt.time())
    return dt.datetime.min - midnight <= offset <= dt.datetime.max - midnight


class Transaction(BaseModel):
    """A single decoded row of a bank transaction export."""
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    id: UUID = Field(
        default=NIL_ID,
        description="Row identifier (nil UUID when empty)"
    )
    counterparty: str = Field(
        default="",
        description="Other party of the transaction"
    )
    amount: MonetaryValue = Field(
        default_factory=MonetaryValue.zero,
        description="Signed transaction amount"
    )
    fee: MonetaryValue = Field(
        default_factory=MonetaryValue.zero,
        description="Fee charged for the transaction"
    )
    balance_after: MonetaryValue = Field(
        default_factory=MonetaryValue.zero,
        description="Account balance after the transaction (zero when unknown)"
    )
    transaction_type: str = Field(
        default="",
        description="Category code, e.g. MONEY_BOX_TRANSFER"
    )
    date: dt.date = Field(
        default=UNSET_DATE,
        description="Booking date (UNSET_DATE when empty)"
    )
    time: dt.timedelta = Field(
        default=ZERO_TIME,
        description="Time of day as an offset from midnight (zero when empty)"
    )
    status: str = Field(
        default="",
        description="Processing status as reported by the bank"
    )
    transaction_id: Optional[UUID] = Field(
        default=None,
        description="External transaction identifier"
    )
    note: str = Field(
        default="",
        description="Free-text note"
    )

    @model_validator(mode='after')
    def validate_timestamp(self) -> 'Transaction':
        """The time offset must not carry the date past the datetime range."""
        if not timestamp_in_range(self.date, self.time):
            raise ValueError(
                f"Time {self.time} on {self.date.isoformat()} is outside the representable range"
            )
        return self

    @property
    def has_date(self) -> bool:
        return self.date != UNSET_DATE

    @property
    def timestamp(self) -> dt.datetime:
        """Date and time combined into a single point in time."""
        return dt.datetime.combine(self.date, dt.time()) + self.time

    @property
    def is_inflow(self) -> bool:
        return self.amount.amount > 0

    @property
    def is_outflow(self) -> bool:
        return self.amount.amount < 0

    def to_row(self) -> dict[str, str]:
        """
        Convert to a row keyed by export column header.

        Uses the same text formats the reader accepts, so a written row
        reads back to an equal Transaction.
        """
        # Local import: the formatters depend on this module
        from transaction_analyzer.parsing.values import (
            format_date,
            format_identifier,
            format_money,
            format_time,
        )

        return {
            "ID": format_identifier(self.id),
            "COUNTERPARTY": self.counterparty,
            "AMOUNT": format_money(self.amount),
            "FEE": format_money(self.fee),
            "BALANCE AFTER": format_money(self.balance_after),
            "TRANSACTION TYPE": self.transaction_type,
            "DATE": format_date(self.date),
            "TIME": format_time(self.time),
            "STATUS": self.status,
            "TRANSACTION ID": format_identifier(self.transaction_id),
            "NOTE": self.note,
        }
