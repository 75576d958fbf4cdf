"""Display formatting shared by the view models."""

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Union

from renovation.config import get_settings


Number = Union[Decimal, float, int]


def format_currency(amount: Number, symbol: Optional[str] = None) -> str:
    """
    Format an amount with the configured currency symbol.

    Negative amounts keep the sign in front of the symbol: -¥1,200.00
    """
    if symbol is None:
        symbol = get_settings().app.currency_symbol
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def format_percentage(fraction: float, decimals: int = 1) -> str:
    """0.705 -> '70.5%'"""
    return f"{fraction * 100:.{decimals}f}%"


def format_date(value: Optional[date]) -> str:
    return value.isoformat() if value else "-"


def format_month(year: int, month: int) -> str:
    """(2024, 3) -> 'March 2024'"""
    return date(year, month, 1).strftime("%B %Y")


def parse_amount(text: Optional[str]) -> Optional[Decimal]:
    """
    Parse user-typed amount text.

    Thousands separators, spaces and the currency symbol are ignored.
    Returns None when the text is not a finite number.
    """
    if text is None:
        return None
    cleaned = str(text).strip().replace(",", "").replace(" ", "")
    symbol = get_settings().app.currency_symbol
    if symbol:
        cleaned = cleaned.replace(symbol, "")
    if not cleaned:
        return None
    try:
        value = Decimal(cleaned)
    except InvalidOperation:
        return None
    return value if value.is_finite() else None
