"""Money coercion and currency formatting utilities"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from odysseus_gateway.config import settings
from odysseus_gateway.domain.exceptions import InvalidAmountError

Money = Decimal

_NON_NUMERIC = re.compile(r"[^0-9.\-]")


def to_money(value) -> Decimal:
    """
    Coerce a number to a finite Decimal.

    Floats go through str() so 0.1 stays 0.1 instead of its binary expansion.

    Raises:
        InvalidAmountError: For booleans, NaN, infinities or non-numeric input
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Not a monetary amount: {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise InvalidAmountError(f"Not a monetary amount: {value!r}") from e
    if not amount.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {amount}")
    return amount


def format_number(value, decimals: int = 0) -> str:
    """Format a number with thousand separators and a fixed number of decimals"""
    quantum = Decimal(1).scaleb(-decimals)
    rounded = to_money(value).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{rounded:,.{decimals}f}"


def format_currency(value, show_symbol: bool = True, decimals: int = 2) -> str:
    """Format an amount as currency, e.g. "RM 1,234.56" """
    formatted = format_number(value, decimals)
    return f"{settings.currency_symbol} {formatted}" if show_symbol else formatted


def format_compact_currency(value, show_symbol: bool = True) -> str:
    """Compact currency for tight layouts: 1.2K, 1.5M"""
    amount = to_money(value)
    magnitude = abs(amount)

    if magnitude >= 1_000_000:
        formatted = f"{format_number(amount / 1_000_000, 1)}M"
    elif magnitude >= 1_000:
        formatted = f"{format_number(amount / 1_000, 1)}K"
    else:
        formatted = format_number(amount, 2)

    return f"{settings.currency_symbol} {formatted}" if show_symbol else formatted


def parse_currency(value: str) -> Decimal:
    """Parse a display string such as "RM 1,234.56" back to an amount (0 on garbage)"""
    cleaned = _NON_NUMERIC.sub("", value or "")
    try:
        amount = Decimal(cleaned)
    except InvalidOperation:
        return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")
