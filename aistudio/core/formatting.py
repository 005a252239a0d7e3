"""
Text formatting helpers shared by prompts, context blocks and insights.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

Number = Union[int, float, Decimal, None]


def _group_indian(whole: str) -> str:
    """Group digits the Indian way: last three, then pairs (12,34,567)."""
    if len(whole) <= 3:
        return whole
    head, tail = whole[:-3], whole[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_inr(amount: Number, decimals: Optional[int] = None) -> str:
    """
    Format an amount with Indian digit grouping, without the currency sign.

    Args:
        amount: The number to format (None is treated as 0)
        decimals: Fixed number of decimals. None prints up to three
                  significant decimals and drops trailing zeros.

    Examples:
        format_inr(100000)       -> "1,00,000"
        format_inr(5000.5)       -> "5,000.5"
        format_inr(1234567, 2)   -> "12,34,567.00"
    """
    value = float(amount or 0)
    negative = value < 0
    value = abs(value)

    if decimals is None:
        text = f"{value:.3f}".rstrip("0").rstrip(".")
    else:
        text = f"{value:.{decimals}f}"

    whole, _, fraction = text.partition(".")
    result = _group_indian(whole)
    if fraction:
        result = f"{result}.{fraction}"
    return f"-{result}" if negative else result


def rupees(amount: Number, decimals: Optional[int] = None) -> str:
    """format_inr with the rupee sign: rupees(100000) -> "₹1,00,000"."""
    return f"₹{format_inr(amount, decimals)}"


def format_day(value: Union[date, datetime, None], default: str = "N/A") -> str:
    """Render a date as YYYY-MM-DD, or `default` when missing."""
    if value is None:
        return default
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()
