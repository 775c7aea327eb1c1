"""
Currency formatting.
"""
from typing import Optional

from grocerypos.core.config import settings


def format_currency(amount: float, symbol: Optional[str] = None) -> str:
    """Format an amount as en-US grouped currency text, e.g. ``₱1,234.50``."""
    symbol = settings.currency_symbol if symbol is None else symbol
    value = round(float(amount), 2)
    if value < 0:
        return f"-{symbol}{abs(value):,.2f}"
    return f"{symbol}{value:,.2f}"
