"""
Supported Currencies

DESIGN DECISION: The set of currencies is CLOSED.
Bank exports only ever contain USD, EUR and IQD, so the currency list and
its display table are static. Anything else is rejected loudly rather than
passed through as free text.
"""

from enum import Enum
from typing import NamedTuple, Optional

from transaction_analyzer.exceptions import UnknownCurrencyError


class Currency(str, Enum):
    """Currencies that can appear in a transaction export."""
    USD = "USD"
    EUR = "EUR"
    IQD = "IQD"

    @property
    def code(self) -> str:
        return self.value

    @property
    def symbol(self) -> str:
        return CURRENCY_INFO[self].symbol

    @property
    def culture(self) -> str:
        return CURRENCY_INFO[self].culture


DEFAULT_CURRENCY = Currency.IQD


class CurrencyInfo(NamedTuple):
    """Presentation data for a currency. Not used by any computation."""
    code: str
    symbol: str
    culture: str


CURRENCY_INFO: dict[Currency, CurrencyInfo] = {
    Currency.USD: CurrencyInfo(code="USD", symbol="$", culture="en-US"),
    Currency.EUR: CurrencyInfo(code="EUR", symbol="€", culture="de-DE"),
    Currency.IQD: CurrencyInfo(code="IQD", symbol="د.ع", culture="ar-IQ"),
}


def currency_from_code(code: Optional[str]) -> Currency:
    """
    Map a currency code to a Currency.

    Matching is case-insensitive and ignores surrounding whitespace.
    An empty code resolves to the default currency (IQD).

    Raises:
        UnknownCurrencyError: If the code is not a supported currency
    """
    if code is None or not code.strip():
        return DEFAULT_CURRENCY

    currency = Currency.__members__.get(code.strip().upper())
    if currency is None:
        raise UnknownCurrencyError(
            f"Unknown currency code: '{code}'",
            value=code,
            expected=", ".join(c.value for c in Currency),
        )
    return currency
