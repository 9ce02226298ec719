"""Tests for document validation rules."""

from datetime import datetime

import pytest

from filing_buddy.models.documents import DocumentType, TaxDocument
from filing_buddy.reviewers.document_validator import (
    DATE_PATTERNS,
    DocumentValidator,
    parse_calendar_date,
)


def make_document(content, document_type=DocumentType.OTHER, filename="doc.txt", doc_id="doc_1"):
    return TaxDocument(
        id=doc_id,
        document_type=document_type,
        filename=filename,
        content=content,
        uploaded_at=datetime(2025, 2, 1),
    )


@pytest.fixture
def validator():
    return DocumentValidator()


# Long enough to avoid the short-content warning and free of keywords
FILLER = "Statement of annual amounts reported for the tax year, prepared for the records of the filer. " * 2


class TestValidateDocument:
    """Tests for DocumentValidator.validate_document()."""

    def test_clean_w2_is_valid(self, validator, sample_w2_text):
        result = validator.validate_document(make_document(sample_w2_text, DocumentType.W2, "w2.txt"))
        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_clean_1099_is_valid(self, validator, sample_1099_int_text):
        result = validator.validate_document(make_document(sample_1099_int_text, DocumentType.FORM_1099))
        assert result.is_valid

    def test_unmasked_ssn_is_error(self, validator, sample_w2_text):
        content = sample_w2_text.replace("XXX-XX-1234", "123-45-6789")
        result = validator.validate_document(make_document(content, DocumentType.W2))
        assert not result.is_valid
        assert any("SSN" in error for error in result.errors)

    def test_nine_digit_ssn_is_error(self, validator):
        result = validator.validate_document(make_document(FILLER + " SSN 123456789"))
        assert any("SSN" in error for error in result.errors)

    def test_masked_ssn_is_fine(self, validator):
        result = validator.validate_document(make_document(FILLER + " SSN ***-**-1234"))
        assert result.is_valid

    def test_content_too_short(self, validator):
        result = validator.validate_document(make_document("tiny"))
        assert "Document content is too short (minimum 10 characters)" in result.errors

    def test_content_too_long(self, validator):
        result = validator.validate_document(make_document("a" * 50001))
        assert "Document content is too long (maximum 50,000 characters)" in result.errors

    def test_length_bounds_are_inclusive(self, validator):
        assert validator.validate_document(make_document("a" * 10)).is_valid
        assert validator.validate_document(make_document("a " * 25000)).is_valid

    def test_whitespace_content_is_required_error(self, validator):
        result = validator.validate_document(make_document(" " * 20))
        assert "Document content is required" in result.errors

    def test_empty_filename_is_error(self, validator):
        result = validator.validate_document(make_document(FILLER, filename="   "))
        assert "Document filename is required" in result.errors

    def test_missing_type_is_error(self, validator):
        result = validator.validate_document(make_document(FILLER, document_type=None))
        assert result.errors == ["Document type is required"]

    def test_w2_missing_keywords(self, validator):
        result = validator.validate_document(make_document(FILLER, DocumentType.W2))
        assert "W-2 document should contain 'w-2' information" in result.errors
        assert "W-2 document should contain 'employee' information" in result.errors
        assert len(result.errors) == 4

    def test_keywords_are_case_insensitive(self, validator):
        content = FILLER + " FORM 1099 PAYER RECIPIENT"
        assert validator.validate_document(make_document(content, DocumentType.FORM_1099)).is_valid

    def test_1095_keywords(self, validator):
        content = FILLER + " Form 1095-C health coverage offered by employer"
        assert validator.validate_document(make_document(content, DocumentType.FORM_1095)).is_valid

    def test_schedule_c_needs_any_keyword(self, validator):
        result = validator.validate_document(make_document(FILLER, DocumentType.SCHEDULE_C))
        assert result.errors == ["Schedule C should contain business or self-employment information"]

        ok = validator.validate_document(make_document(FILLER + " business", DocumentType.SCHEDULE_C))
        assert ok.is_valid

    def test_other_has_no_keywords(self, validator):
        assert validator.validate_document(make_document(FILLER, DocumentType.OTHER)).is_valid

    @pytest.mark.parametrize("text", ["02/30/2024", "13/01/2024", "2024-02-30", "01/01/1899"])
    def test_invalid_dates(self, validator, text):
        result = validator.validate_document(make_document(FILLER + " Date: " + text))
        assert f"Invalid date format: {text}" in result.errors

    @pytest.mark.parametrize("text", ["02/29/2024", "2024-12-31", "12-31-2024"])
    def test_valid_dates(self, validator, text):
        assert validator.validate_document(make_document(FILLER + " Date: " + text)).is_valid

    def test_suspiciously_large_amount(self, validator):
        result = validator.validate_document(make_document(FILLER + " Total: $1,000,000,000"))
        assert "Suspiciously large amount: $1,000,000,000" in result.errors

    def test_currency_with_cents_is_fine(self, validator):
        result = validator.validate_document(make_document(FILLER + " Total: $999,999,999.00 and $12.50"))
        assert result.is_valid

    def test_warnings_do_not_invalidate(self, validator):
        result = validator.validate_document(make_document("This is a sample placeholder"))
        assert result.is_valid
        assert "Document appears to contain test/sample data" in result.warnings
        assert "Document contains placeholder or example data" in result.warnings
        assert "Document content seems unusually short" in result.warnings

    def test_rules_run_in_order(self, validator):
        assert [name for name, _ in validator.rules] == [
            "Required Fields",
            "Content Length",
            "Document Type Specific",
            "SSN Format",
            "Date Formats",
            "Currency Values",
        ]


class TestValidateMultipleDocuments:
    """Tests for DocumentValidator.validate_multiple_documents()."""

    def test_clean_batch_is_valid(self, validator, sample_w2_text, sample_1099_int_text):
        docs = [
            make_document(sample_w2_text, DocumentType.W2, "w2.txt", "doc_1"),
            make_document(sample_1099_int_text, DocumentType.FORM_1099, "int.txt", "doc_2"),
        ]
        result = validator.validate_multiple_documents(docs)
        assert result.is_valid

    def test_errors_are_prefixed_with_filename(self, validator):
        result = validator.validate_multiple_documents([make_document("tiny", filename="a.txt")])
        assert "a.txt: Document content is too short (minimum 10 characters)" in result.errors
        assert "a.txt: Document content seems unusually short" in result.warnings

    def test_duplicate_types(self, validator, sample_w2_text):
        docs = [
            make_document(sample_w2_text, DocumentType.W2, "a.txt", "doc_1"),
            make_document(sample_w2_text, DocumentType.W2, "b.txt", "doc_2"),
        ]
        result = validator.validate_multiple_documents(docs)
        assert "Duplicate document types detected" in result.errors

    def test_untyped_documents_are_not_duplicates(self, validator):
        docs = [
            make_document(FILLER, None, "a.txt", "doc_1"),
            make_document(FILLER, None, "b.txt", "doc_2"),
        ]
        result = validator.validate_multiple_documents(docs)
        assert "Duplicate document types detected" not in result.errors

    def test_multiple_tax_years(self, validator, sample_w2_text, sample_1099_int_text):
        docs = [
            make_document(sample_w2_text, DocumentType.W2, "w2.txt", "doc_1"),
            make_document(sample_1099_int_text.replace("2024", "2023"), DocumentType.FORM_1099, "int.txt", "doc_2"),
        ]
        result = validator.validate_multiple_documents(docs)
        assert "Multiple tax years detected across documents (2023, 2024)" in result.errors

    def test_empty_batch_is_valid(self, validator):
        assert validator.validate_multiple_documents([]).is_valid


class TestParseCalendarDate:
    """Tests for parse_calendar_date()."""

    def test_iso_order(self):
        pattern, order = DATE_PATTERNS[1]
        parsed = parse_calendar_date(pattern.search("2024-06-15"), order)
        assert (parsed.year, parsed.month, parsed.day) == (2024, 6, 15)

    def test_impossible_date(self):
        pattern, order = DATE_PATTERNS[0]
        assert parse_calendar_date(pattern.search("04/31/2024"), order) is None
