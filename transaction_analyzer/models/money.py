"""
Monetary Value Type

A MonetaryValue is an amount plus the currency it is denominated in.
Sign convention: positive = money in, negative = money out.

DESIGN DECISION: MonetaryValue is frozen. Two values are equal when both the
amount and the currency match, and equal values hash equally, so they can be
used as dict keys and set members.
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext

from pydantic import BaseModel, ConfigDict, Field

from transaction_analyzer.models.currency import DEFAULT_CURRENCY, Currency


def _quantize(amount: Decimal, places: int) -> Decimal:
    exponent = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        # Every integer digit plus the requested decimals must fit
        ctx.prec = max(ctx.prec, amount.adjusted() + places + 2)
        rounded = amount.quantize(exponent, rounding=ROUND_HALF_UP)
        # Avoid rendering "-0.00"
        if rounded == 0:
            rounded = abs(rounded)
    return rounded


class MonetaryValue(BaseModel):
    """An amount of money in one of the supported currencies."""
    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(
        default=Decimal("0"),
        description="Signed amount (positive = inflow, negative = outflow)"
    )
    currency: Currency = Field(
        default=DEFAULT_CURRENCY,
        description="Currency the amount is denominated in"
    )

    @classmethod
    def zero(cls, currency: Currency = DEFAULT_CURRENCY) -> "MonetaryValue":
        return cls(amount=Decimal("0"), currency=currency)

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    def to_string(self, places: int = 2, grouping: bool = False) -> str:
        """
        Format the amount with a fixed number of decimals, followed by the code.

        Rounding is half-up (ties away from zero).
        """
        rounded = _quantize(self.amount, places)
        number = f"{rounded:,}" if grouping else f"{rounded}"
        return f"{number} {self.currency.code}"

    def to_display_string(self) -> str:
        """Symbol-prefixed form for the UI, e.g. '$100.50'."""
        return f"{self.currency.symbol}{_quantize(self.amount, 2)}"

    def __str__(self) -> str:
        return self.to_string()

    def __format__(self, format_spec: str) -> str:
        """Apply a Decimal format spec to the amount, e.g. f"{value:,.2f}"."""
        if not format_spec:
            return self.to_string()
        return f"{format(self.amount, format_spec)} {self.currency.code}"
