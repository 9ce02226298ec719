"""Exception hierarchy for the filing pipeline.

Input errors (bad documents, unknown ids) are reported to the caller as-is.
Extraction errors wrap the underlying adapter failure. Validation findings are
not exceptions unless strict validation is requested.
"""

from typing import Any

from filing_buddy.models.validation import ValidationResult


class FilingBuddyError(Exception):
    """Base class for all filing pipeline errors."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class InputError(FilingBuddyError):
    """Raised for malformed or missing caller input."""


class DocumentNotFoundError(InputError):
    """Raised when none of the referenced documents exist."""

    def __init__(self, message: str, *, document_ids: list[str] | None = None) -> None:
        super().__init__(message, details={"document_ids": list(document_ids or [])})
        self.document_ids = list(document_ids or [])


class DocumentValidationError(InputError):
    """Raised when strict validation rejects a document batch."""

    def __init__(self, message: str, *, result: ValidationResult) -> None:
        super().__init__(message, details={"errors": result.errors})
        self.result = result


class ExtractionError(FilingBuddyError):
    """Raised when the extraction service fails or returns an invalid payload."""

    def __init__(
        self,
        message: str,
        *,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.source = source
        if source:
            self.details["source"] = source


class ConfigurationError(FilingBuddyError):
    """Raised when required configuration (e.g. an API key) is missing."""


__all__ = [
    "FilingBuddyError",
    "InputError",
    "DocumentNotFoundError",
    "DocumentValidationError",
    "ExtractionError",
    "ConfigurationError",
]
