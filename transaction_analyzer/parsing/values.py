"""
Field Value Parsers

Pure functions that turn one raw text field of a bank export into a typed
value, plus the inverse formatters used when writing rows back out.

DESIGN DECISION: Every parser is a stateless function.
- Empty or whitespace-only input is NOT an error. It maps to the field's
  sentinel (zero money in IQD, UNSET_DATE, zero time, no identifier).
- Anything else that does not match the grammar raises FormatError naming
  the offending literal and the expected pattern.
- No parser ever guesses. "05/09/2023" is always 5 September.
"""

import calendar
import re
from datetime import date, timedelta
from decimal import Decimal
from typing import Callable, Optional
from uuid import UUID

from transaction_analyzer.exceptions import FormatError
from transaction_analyzer.models.currency import DEFAULT_CURRENCY, currency_from_code
from transaction_analyzer.models.money import MonetaryValue
from transaction_analyzer.models.transaction import NIL_ID, UNSET_DATE, ZERO_TIME


DATE_PATTERN = "dd/MM/yyyy"
TIME_PATTERN = "h:mm:ss tt (e.g., 11:06:44 AM)"
IDENTIFIER_PATTERN = "xxxxxxxx-xxxx-xxxx-xxxx-xxxxxxxxxxxx"

_MONEY_RE = re.compile(r"^(-?\d+(?:[,.]\d+)*)\s*([A-Z]{3})?$")
_PLAIN_DECIMAL_RE = re.compile(r"^-?\d+(?:\.\d+)?$")
_DATE_RE = re.compile(r"^(\d{2})/(\d{2})/(\d{4})$")
_IDENTIFIER_RE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)

_TIME_12H_SECONDS_RE = re.compile(
    r"^(\d{1,2}):(\d{2}):(\d{2})\s+([AaPp][Mm])$"
)
_TIME_12H_RE = re.compile(r"^(\d{1,2}):(\d{2})\s+([AaPp][Mm])$")
_TIME_24H_RE = re.compile(r"^(\d{1,2}):(\d{2}):(\d{2})$")
_DURATION_RE = re.compile(
    r"^(?:(\d+)\.)?(\d{1,2}):(\d{1,2})(?::(\d{1,2})(?:\.(\d{1,7}))?)?$"
)
_DAYS_RE = re.compile(r"^\d+$")

# Largest day count a timedelta can hold
MAX_DURATION_DAYS = timedelta.max.days


# =============================================================================
# MONEY
# =============================================================================

def _normalize_amount(literal: str) -> str:
    """
    Resolve ',' vs '.' in a numeric literal.

    A single ',' with no '.' and at most two digits after it is a decimal
    separator ("123,45"). Every other ',' is a thousands separator.
    """
    if "," in literal and "." not in literal:
        head, _, tail = literal.rpartition(",")
        if "," not in head and len(tail) <= 2:
            return f"{head}.{tail}"
    return literal.replace(",", "")


def parse_money(text: Optional[str]) -> MonetaryValue:
    """
    Parse a money field such as "100.50 USD", "-1,234.56EUR" or "123,45".

    A missing currency code means IQD.

    Raises:
        FormatError: If the amount or the currency code cannot be parsed
    """
    if text is None or not text.strip():
        return MonetaryValue.zero(DEFAULT_CURRENCY)

    value = text.strip()
    match = _MONEY_RE.match(value)
    if not match:
        raise FormatError(
            f"Unable to parse monetary value: '{value}'",
            value=value,
            expected="<number>[ ]<3-letter currency code>",
        )

    literal, code = match.groups()
    normalized = _normalize_amount(literal)
    if not _PLAIN_DECIMAL_RE.match(normalized):
        raise FormatError(
            f"Unable to parse amount: '{literal}'",
            value=value,
            expected="<number>[ ]<3-letter currency code>",
        )

    return MonetaryValue(
        amount=Decimal(normalized),
        currency=currency_from_code(code),
    )


def format_money(value: MonetaryValue) -> str:
    """'{amount with 2 decimals} {CODE}', e.g. '-50.25 IQD'."""
    return value.to_string(places=2)


# =============================================================================
# DATE
# =============================================================================

def parse_date(text: Optional[str]) -> date:
    """
    Parse a dd/MM/yyyy date.

    Raises:
        FormatError: For any other shape, or an impossible day/month
    """
    if text is None or not text.strip():
        return UNSET_DATE

    match = _DATE_RE.match(text.strip())
    if match:
        day, month, year = (int(part) for part in match.groups())
        if (
            year >= 1
            and 1 <= month <= 12
            and 1 <= day <= calendar.monthrange(year, month)[1]
        ):
            return date(year, month, day)

    raise FormatError(
        f"Unable to parse '{text}' as a valid date. Expected format: {DATE_PATTERN}",
        value=text,
        expected=DATE_PATTERN,
    )


def format_date(value: date) -> str:
    if value == UNSET_DATE:
        return ""
    return f"{value.day:02d}/{value.month:02d}/{value.year:04d}"


# =============================================================================
# TIME
# =============================================================================

def _to_24_hour(hour: int, meridiem: str) -> Optional[int]:
    """12 AM -> 0, 12 PM -> 12, other PM hours + 12."""
    if not 1 <= hour <= 12:
        return None
    if meridiem.upper() == "AM":
        return 0 if hour == 12 else hour
    return 12 if hour == 12 else hour + 12


def _clock(hours: int, minutes: int, seconds: int = 0) -> Optional[timedelta]:
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    return timedelta(hours=hours, minutes=minutes, seconds=seconds)


def _match_12_hour_with_seconds(text: str) -> Optional[timedelta]:
    match = _TIME_12H_SECONDS_RE.match(text)
    if not match:
        return None
    hour = _to_24_hour(int(match.group(1)), match.group(4))
    if hour is None:
        return None
    return _clock(hour, int(match.group(2)), int(match.group(3)))


def _match_12_hour(text: str) -> Optional[timedelta]:
    match = _TIME_12H_RE.match(text)
    if not match:
        return None
    hour = _to_24_hour(int(match.group(1)), match.group(3))
    if hour is None:
        return None
    return _clock(hour, int(match.group(2)))


def _match_24_hour(text: str) -> Optional[timedelta]:
    match = _TIME_24H_RE.match(text)
    if not match:
        return None
    return _clock(*(int(part) for part in match.groups()))


def _match_duration(text: str) -> Optional[timedelta]:
    """[d.]hh:mm[:ss[.fffffff]], or a bare day count."""
    if _DAYS_RE.match(text):
        days = int(text)
        return timedelta(days=days) if days <= MAX_DURATION_DAYS else None

    match = _DURATION_RE.match(text)
    if not match:
        return None

    days, hours, minutes, seconds, fraction = match.groups()
    days = int(days or 0)
    if days > MAX_DURATION_DAYS:
        return None

    clock = _clock(int(hours), int(minutes), int(seconds or 0))
    if clock is None:
        return None

    # Fraction digits are ticks of 100ns; timedelta resolution is 1us
    microseconds = int((fraction or "0").ljust(7, "0")) // 10
    return timedelta(days=days, microseconds=microseconds) + clock


# Tried in order; the first grammar that matches wins
TIME_GRAMMARS: tuple[Callable[[str], Optional[timedelta]], ...] = (
    _match_12_hour_with_seconds,
    _match_12_hour,
    _match_24_hour,
    _match_duration,
)


def parse_time(text: Optional[str]) -> timedelta:
    """
    Parse a time-of-day field into an offset from midnight.

    Accepts "11:06:44 AM", "2:30 PM", "14:30:45" and duration literals
    such as "1.02:30:45".

    Raises:
        FormatError: If no grammar matches
    """
    if text is None or not text.strip():
        return ZERO_TIME

    value = text.strip()
    for grammar in TIME_GRAMMARS:
        result = grammar(value)
        if result is not None:
            return result

    raise FormatError(
        f"Unable to parse '{text}' as a valid time. Expected format: {TIME_PATTERN}",
        value=text,
        expected=TIME_PATTERN,
    )


def format_time(value: timedelta) -> str:
    """h:mm:ss AM/PM of the time of day, or '' for the zero sentinel."""
    if value == ZERO_TIME:
        return ""

    seconds = int(value.total_seconds()) % 86400
    hours, remainder = divmod(seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    meridiem = "AM" if hours < 12 else "PM"
    return f"{hours % 12 or 12}:{minutes:02d}:{seconds:02d} {meridiem}"


# =============================================================================
# IDENTIFIERS
# =============================================================================

def parse_identifier(text: Optional[str]) -> Optional[UUID]:
    """
    Parse an 8-4-4-4-12 hyphenated hex identifier. Empty input gives None.

    Raises:
        FormatError: If the text is not a hyphenated UUID
    """
    if text is None or not text.strip():
        return None

    value = text.strip()
    if not _IDENTIFIER_RE.match(value):
        raise FormatError(
            f"Unable to convert '{value}' to an identifier. "
            f"Expected format: {IDENTIFIER_PATTERN}",
            value=value,
            expected=IDENTIFIER_PATTERN,
        )
    return UUID(value)


def format_identifier(value: Optional[UUID]) -> str:
    if value is None or value == NIL_ID:
        return ""
    return str(value)
