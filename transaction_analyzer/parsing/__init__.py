"""Field value parsing package."""

from transaction_analyzer.parsing.values import (
    DATE_PATTERN,
    TIME_GRAMMARS,
    TIME_PATTERN,
    format_date,
    format_identifier,
    format_money,
    format_time,
    parse_date,
    parse_identifier,
    parse_money,
    parse_time,
)

__all__ = [
    "DATE_PATTERN",
    "TIME_GRAMMARS",
    "TIME_PATTERN",
    "format_date",
    "format_identifier",
    "format_money",
    "format_time",
    "parse_date",
    "parse_identifier",
    "parse_money",
    "parse_time",
]
