"""Formatting utilities for currency and text display.

Amounts are shown in Indian Rupees with Indian digit grouping, where the
last three digits form one group and the rest are grouped in pairs
(``₹12,34,567``).
"""

from __future__ import annotations

from typing import Union

CURRENCY_SYMBOL = '₹'
CURRENCY_CODE = 'INR'

Number = Union[float, int]


def _group_indian(integer_digits: str) -> str:
    if len(integer_digits) <= 3:
        return integer_digits
    head, tail = integer_digits[:-3], integer_digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ','.join(pairs + [tail])


def format_currency(amount: Number, show_decimals: bool = False) -> str:
    """Format an amount with the rupee symbol.

    Whole numbers are shown without decimals unless ``show_decimals`` is set;
    fractional amounts always get two decimals.

    Example:
        >>> format_currency(150000)
        '₹1,50,000'
        >>> format_currency(1234.5)
        '₹1,234.50'
    """
    value = float(amount)
    sign = '-' if value < 0 else ''
    value = abs(value)
    if show_decimals or not value.is_integer():
        whole, _, fraction = f"{value:.2f}".partition('.')
        body = f"{_group_indian(whole)}.{fraction}"
    else:
        body = _group_indian(str(int(value)))
    return f"{sign}{CURRENCY_SYMBOL}{body}"


def format_currency_with_sign(amount: Number, txn_type: str) -> str:
    """Prefix ``+`` for income and ``-`` for expenses."""
    formatted = format_currency(amount)
    return f"+{formatted}" if getattr(txn_type, 'value', txn_type) == 'income' else f"-{formatted}"


def format_compact_currency(amount: Number) -> str:
    """Compact form: ``₹1.2K``, ``₹5.5L`` (lakh), ``₹2.0Cr`` (crore)."""
    value = float(amount)
    if value >= 10_000_000:
        return f"{CURRENCY_SYMBOL}{value / 10_000_000:.1f}Cr"
    if value >= 100_000:
        return f"{CURRENCY_SYMBOL}{value / 100_000:.1f}L"
    if value >= 1_000:
        return f"{CURRENCY_SYMBOL}{value / 1_000:.1f}K"
    return format_currency(value)


def format_percent(value: Number, digits: int = 1) -> str:
    return f"{float(value):.{digits}f}%"


def initials(name: str) -> str:
    """Up to two uppercase initials for an avatar placeholder."""
    parts = [part for part in (name or '').split() if part]
    if not parts:
        return 'U'
    return ''.join(part[0] for part in parts).upper()[:2]
