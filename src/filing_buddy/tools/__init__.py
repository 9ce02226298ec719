"""Tax calculation helpers."""

from filing_buddy.tools.tax_calculations import (
    calculate_tax,
    get_filing_deadline,
    get_standard_deduction,
    get_tax_brackets,
    resolve_filing_status,
)

__all__ = [
    "calculate_tax",
    "get_filing_deadline",
    "get_standard_deduction",
    "get_tax_brackets",
    "resolve_filing_status",
]
