"""Validation result model."""

from pydantic import BaseModel, Field


class ValidationResult(BaseModel):
    """Outcome of validating one or more documents.

    Errors block processing, warnings are informational.
    """

    is_valid: bool = True
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_findings(cls, errors: list[str], warnings: list[str]) -> "ValidationResult":
        """Build a result whose validity follows from the error list."""
        return cls(is_valid=not errors, errors=list(errors), warnings=list(warnings))
