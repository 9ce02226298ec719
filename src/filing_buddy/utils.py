"""Utility functions shared across the filing pipeline."""

from enum import Enum
from typing import Any


def get_enum_value(value: Any) -> str:
    """
    Get string value from an enum or return as-is if already a string.

    Args:
        value: An enum instance or string

    Returns:
        The string value
    """
    if isinstance(value, Enum):
        return value.value
    return str(value) if value is not None else ""


def format_currency(amount: float) -> str:
    """Format a dollar amount, e.g. ``$1,234.56`` or ``-$500.00``."""
    if amount < 0:
        return f"-${abs(amount):,.2f}"
    return f"${amount:,.2f}"


def format_percent(rate: float) -> str:
    """Format a percentage given in percent units, e.g. ``12.34%``."""
    return f"{rate:.2f}%"


def format_status(value: Any) -> str:
    """Human-readable filing status, e.g. ``head_of_household`` -> ``Head Of Household``."""
    return get_enum_value(value).replace("_", " ").title()
