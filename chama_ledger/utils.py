"""
utils.py
Display formatting and JSON serialization helpers.
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum

from chama_ledger.records import to_decimal

CURRENCY_PREFIX = "Ksh. "


def format_currency(amount) -> str:
    """
    Kenyan shilling display string, the way en-KE toLocaleString shows it:
    thousands separators, at most 3 decimals, no trailing zeros.
    2000 -> 'Ksh. 2,000', 416.67 -> 'Ksh. 416.67', None -> 'Ksh. 0'
    """
    if amount is None:
        return f"{CURRENCY_PREFIX}0"
    value = to_decimal(amount).quantize(Decimal("0.001"), rounding=ROUND_HALF_UP)
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return f"{CURRENCY_PREFIX}{text}"


def format_date(value) -> str:
    """'15 Dec 2025', or 'N/A' when there is no date."""
    if value is None or value == "":
        return "N/A"
    if isinstance(value, str):
        value = date.fromisoformat(value[:10])
    return f"{value.day} {value.strftime('%b %Y')}"


def to_json(value):
    """Make ledger results JSON-safe. Money stays exact as a string."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_json(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, dict):
        return {k: to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value
