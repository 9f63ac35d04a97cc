"""Currency formatting utilities"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

UNKNOWN_AMOUNT = "—"


def format_currency(amount: Optional[Decimal]) -> str:
    """Format as US dollars, e.g. $1,234.50; unknown amounts render as an em dash"""
    if amount is None:
        return UNKNOWN_AMOUNT
    rounded = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if rounded < 0 else ""
    return f"{sign}${abs(rounded):,.2f}"


def to_minor_units(amount: Decimal) -> int:
    """Convert a cent-rounded dollar amount to integer cents"""
    return int((amount * 100).to_integral_value(rounding=ROUND_HALF_UP))
