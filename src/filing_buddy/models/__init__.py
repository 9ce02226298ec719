"""Data models for tax documents, filing status, and filing results."""

from filing_buddy.models.documents import DocumentType, TaxDocument
from filing_buddy.models.filing import (
    CalculatedTax,
    ExtractedFilingData,
    FilingSummary,
    GeneratedForm,
    OutputFormat,
    TaxFilingResult,
)
from filing_buddy.models.taxpayer import FILING_STATUSES, FilingStatus
from filing_buddy.models.validation import ValidationResult

__all__ = [
    "DocumentType",
    "TaxDocument",
    "FilingStatus",
    "FILING_STATUSES",
    "ExtractedFilingData",
    "CalculatedTax",
    "GeneratedForm",
    "FilingSummary",
    "TaxFilingResult",
    "OutputFormat",
    "ValidationResult",
]
