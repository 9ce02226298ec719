"""Rule-based validation of uploaded tax documents."""

import logging
import re
from collections.abc import Callable, Sequence
from datetime import date

from filing_buddy.models.documents import DOCUMENT_TYPE_LABELS, DocumentType, TaxDocument
from filing_buddy.models.validation import ValidationResult

logger = logging.getLogger(__name__)

MIN_CONTENT_LENGTH = 10
MAX_CONTENT_LENGTH = 50000
SHORT_CONTENT_WARNING_LENGTH = 100
MAX_CURRENCY_AMOUNT = 999_999_999

# Every keyword must appear
REQUIRED_KEYWORDS: dict[DocumentType, tuple[str, ...]] = {
    DocumentType.W2: ("w-2", "wage", "employer", "employee"),
    DocumentType.FORM_1099: ("1099", "payer", "recipient"),
    DocumentType.FORM_1095: ("1095", "health", "coverage", "employer"),
    DocumentType.FORM_1040: ("1040",),
}

# At least one keyword must appear
ANY_KEYWORDS: dict[DocumentType, tuple[tuple[str, ...], str]] = {
    DocumentType.SCHEDULE_C: (
        ("business", "self-employment"),
        "Schedule C should contain business or self-employment information",
    ),
    DocumentType.SCHEDULE_D: (
        ("capital", "gain", "loss"),
        "Schedule D should contain capital gains/losses information",
    ),
    DocumentType.SCHEDULE_E: (
        ("rental", "royalty"),
        "Schedule E should contain rental or royalty income information",
    ),
}

SSN_PATTERN = re.compile(r"\b\d{3}-\d{2}-\d{4}\b|\b\d{9}\b")
SSN_MASK_MARKERS = ("***", "XXX")

# (pattern, group order as (month, day, year) indexes)
DATE_PATTERNS: list[tuple[re.Pattern, tuple[int, int, int]]] = [
    (re.compile(r"\b(\d{1,2})/(\d{1,2})/(\d{4})\b"), (0, 1, 2)),  # MM/DD/YYYY
    (re.compile(r"\b(\d{4})-(\d{2})-(\d{2})\b"), (1, 2, 0)),  # YYYY-MM-DD
    (re.compile(r"\b(\d{1,2})-(\d{1,2})-(\d{4})\b"), (0, 1, 2)),  # MM-DD-YYYY
]

CURRENCY_PATTERN = re.compile(r"\$\s*(?:\d{1,3}(?:,\d{3})+|\d+)(?:\.\d{2})?")
TAX_YEAR_PATTERN = re.compile(r"\b20\d{2}\b")


def parse_calendar_date(match: re.Match, order: tuple[int, int, int]) -> date | None:
    """Build a date from a regex match, or None if it is not a real calendar date."""
    groups = match.groups()
    month, day, year = (int(groups[i]) for i in order)
    try:
        return date(year, month, day)
    except ValueError:
        return None


class DocumentValidator:
    """Checks tax documents against a fixed, ordered set of rules.

    Validation never raises: every problem is reported as an error or a
    warning in the returned ValidationResult.
    """

    def __init__(self) -> None:
        self.rules: list[tuple[str, Callable[[TaxDocument], list[str]]]] = [
            ("Required Fields", self._validate_required_fields),
            ("Content Length", self._validate_content_length),
            ("Document Type Specific", self._validate_document_type_specific),
            ("SSN Format", self._validate_ssn_format),
            ("Date Formats", self._validate_date_formats),
            ("Currency Values", self._validate_currency_values),
        ]

    def validate_document(self, document: TaxDocument) -> ValidationResult:
        """
        Validate a single document.

        Args:
            document: The document to check

        Returns:
            ValidationResult; ``is_valid`` is False if any rule produced an error
        """
        errors: list[str] = []
        for name, rule in self.rules:
            rule_errors = rule(document)
            if rule_errors:
                logger.debug(f"Rule '{name}' failed for {document.filename}: {rule_errors}")
            errors.extend(rule_errors)

        return ValidationResult.from_findings(errors, self._generate_warnings(document))

    def validate_multiple_documents(self, documents: Sequence[TaxDocument]) -> ValidationResult:
        """
        Validate a batch of documents and check them against each other.

        Per-document findings are prefixed with the source filename.

        Args:
            documents: Documents submitted together for one filing

        Returns:
            Combined ValidationResult
        """
        errors: list[str] = []
        warnings: list[str] = []

        for document in documents:
            result = self.validate_document(document)
            errors.extend(f"{document.filename}: {err}" for err in result.errors)
            warnings.extend(f"{document.filename}: {warn}" for warn in result.warnings)

        errors.extend(self._validate_cross_document_consistency(documents))

        result = ValidationResult.from_findings(errors, warnings)
        if not result.is_valid:
            logger.warning(f"Validation found {len(errors)} error(s) across {len(documents)} document(s)")
        return result

    # -- rules ----------------------------------------------------------------

    def _validate_required_fields(self, document: TaxDocument) -> list[str]:
        errors = []
        if not document.filename.strip():
            errors.append("Document filename is required")
        if not document.content.strip():
            errors.append("Document content is required")
        if document.document_type is None:
            errors.append("Document type is required")
        return errors

    def _validate_content_length(self, document: TaxDocument) -> list[str]:
        length = len(document.content)
        if length < MIN_CONTENT_LENGTH:
            return [f"Document content is too short (minimum {MIN_CONTENT_LENGTH} characters)"]
        if length > MAX_CONTENT_LENGTH:
            return [f"Document content is too long (maximum {MAX_CONTENT_LENGTH:,} characters)"]
        return []

    def _validate_document_type_specific(self, document: TaxDocument) -> list[str]:
        content = document.content.lower()
        doc_type = document.document_type
        label = DOCUMENT_TYPE_LABELS.get(doc_type, str(doc_type))

        if doc_type in REQUIRED_KEYWORDS:
            return [
                f"{label} document should contain '{keyword}' information"
                for keyword in REQUIRED_KEYWORDS[doc_type]
                if keyword not in content
            ]

        if doc_type in ANY_KEYWORDS:
            keywords, message = ANY_KEYWORDS[doc_type]
            if not any(keyword in content for keyword in keywords):
                return [message]

        return []

    def _validate_ssn_format(self, document: TaxDocument) -> list[str]:
        errors = []
        for match in SSN_PATTERN.finditer(document.content):
            if not any(marker in match.group() for marker in SSN_MASK_MARKERS):
                errors.append("SSN should be masked (e.g., ***-**-1234) for security")
        return errors

    def _validate_date_formats(self, document: TaxDocument) -> list[str]:
        errors = []
        for pattern, order in DATE_PATTERNS:
            for match in pattern.finditer(document.content):
                parsed = parse_calendar_date(match, order)
                if parsed is None or not (1900 < parsed.year < 2100):
                    errors.append(f"Invalid date format: {match.group()}")
        return errors

    def _validate_currency_values(self, document: TaxDocument) -> list[str]:
        errors = []
        for match in CURRENCY_PATTERN.finditer(document.content):
            text = match.group()
            try:
                amount = float(text.replace("$", "").replace(",", "").strip())
            except ValueError:
                errors.append(f"Invalid currency amount: {text}")
                continue

            if amount < 0:
                errors.append(f"Invalid currency amount: {text}")
            elif amount > MAX_CURRENCY_AMOUNT:
                errors.append(f"Suspiciously large amount: {text}")
        return errors

    def _generate_warnings(self, document: TaxDocument) -> list[str]:
        warnings = []
        content = document.content.lower()

        if "test" in content or "sample" in content:
            warnings.append("Document appears to contain test/sample data")
        if "placeholder" in content or "example" in content:
            warnings.append("Document contains placeholder or example data")
        if len(content) < SHORT_CONTENT_WARNING_LENGTH:
            warnings.append("Document content seems unusually short")

        return warnings

    def _validate_cross_document_consistency(self, documents: Sequence[TaxDocument]) -> list[str]:
        errors = []

        doc_types = [document.document_type for document in documents if document.document_type is not None]
        if len(doc_types) != len(set(doc_types)):
            errors.append("Duplicate document types detected")

        tax_years: set[int] = set()
        for document in documents:
            tax_years.update(int(y) for y in TAX_YEAR_PATTERN.findall(document.content))
        if len(tax_years) > 1:
            years = ", ".join(str(y) for y in sorted(tax_years))
            errors.append(f"Multiple tax years detected across documents ({years})")

        return errors
