from decimal import Decimal
from typing import Optional

from config.settings import CURRENCY_SYMBOL


def fmt_amount(value: Decimal) -> str:
    """Currency amount: 1234.5 -> ₹1,234.50"""
    return f"{CURRENCY_SYMBOL}{value:,.2f}"


def fmt_overdue_range(start: int, end: Optional[int]) -> str:
    """Overdue day range: Day 1 / Day 2-7 / Day 31+"""
    if end is None:
        return f"Day {start}+"
    if end == start:
        return f"Day {start}"
    return f"Day {start}-{end}"
