"""Filing session: owns the document store and runs the filing pipeline."""

import logging
from collections.abc import Sequence

from filing_buddy.analyzers.filing_calculator import FilingCalculator
from filing_buddy.assembler import FilingAssembler
from filing_buddy.collectors.extraction import ExtractionAdapter, get_extractor
from filing_buddy.config import Config, get_config
from filing_buddy.exceptions import DocumentNotFoundError, DocumentValidationError, ExtractionError
from filing_buddy.models.documents import DocumentType
from filing_buddy.models.filing import ExtractedFilingData, OutputFormat, TaxFilingResult
from filing_buddy.models.taxpayer import FilingStatus
from filing_buddy.models.validation import ValidationResult
from filing_buddy.reviewers.document_validator import DocumentValidator
from filing_buddy.storage.document_store import DocumentStore
from filing_buddy.tools.tax_calculations import resolve_filing_status

logger = logging.getLogger(__name__)


class FilingSession:
    """One upload / process / generate session.

    Documents live only as long as the session. Collaborators can be passed
    in; otherwise they are built from the configuration.
    """

    def __init__(
        self,
        config: Config | None = None,
        store: DocumentStore | None = None,
        extractor: ExtractionAdapter | None = None,
        validator: DocumentValidator | None = None,
        calculator: FilingCalculator | None = None,
        assembler: FilingAssembler | None = None,
    ):
        self.config = config or get_config()
        self.store = store or DocumentStore()
        self.validator = validator or DocumentValidator()
        self.calculator = calculator or FilingCalculator()
        self.assembler = assembler or FilingAssembler()
        self._extractor = extractor

    @property
    def extractor(self) -> ExtractionAdapter:
        """The extraction adapter, built on first use."""
        if self._extractor is None:
            self._extractor = get_extractor(self.config)
        return self._extractor

    def upload_document(
        self,
        filename: str,
        content: str,
        document_type: DocumentType | str | None = None,
    ) -> str:
        """Store a document and return its id."""
        return self.store.put(filename, content, document_type)

    def validate_documents(self, document_ids: Sequence[str]) -> ValidationResult:
        """Validate the referenced documents individually and as a batch."""
        documents = self.store.get_many(document_ids)
        if not documents:
            raise DocumentNotFoundError("No documents found for validation", document_ids=list(document_ids))

        result = self.validator.validate_multiple_documents(documents)
        if not result.is_valid:
            logger.warning(f"Validation failed for {len(documents)} document(s): {len(result.errors)} error(s)")
        return result

    def process_documents(
        self,
        document_ids: Sequence[str],
        filing_status: FilingStatus | str | None = None,
        tax_year: int | None = None,
    ) -> ExtractedFilingData:
        """
        Extract structured filing data from stored documents.

        Args:
            document_ids: Ids of previously uploaded documents
            filing_status: Filing status (defaults to the configured one)
            tax_year: Tax year (defaults to the configured one)

        Returns:
            ExtractedFilingData with recomputed totals

        Raises:
            DocumentNotFoundError: If none of the ids exist
            DocumentValidationError: If strict validation is on and fails
            ExtractionError: If the extraction adapter fails
        """
        documents = self.store.get_many(document_ids)
        if not documents:
            raise DocumentNotFoundError("No documents found for processing", document_ids=list(document_ids))

        if self.config.strict_validation:
            result = self.validator.validate_multiple_documents(documents)
            if not result.is_valid:
                logger.warning(f"Strict validation rejected batch: {'; '.join(result.errors)}")
                raise DocumentValidationError(
                    f"Document validation failed: {'; '.join(result.errors)}",
                    result=result,
                )

        status = resolve_filing_status(filing_status or self.config.get("filing_status"))
        year = tax_year or self.config.tax_year

        logger.info(f"Extracting filing data from {len(documents)} document(s) for {year}")
        try:
            extracted = self.extractor.extract(documents, status, year)
        except (ExtractionError, TimeoutError, ConnectionError) as e:
            raise ExtractionError(
                f"Failed to process documents: {e}",
                source=getattr(e, "source", None),
            ) from e

        logger.info(f"Extraction complete: total income {extracted.income.total_income}")
        return extracted

    def generate_filing(
        self,
        document_ids: Sequence[str],
        filing_status: FilingStatus | str | None = None,
        tax_year: int | None = None,
        output_format: OutputFormat | str | None = None,
    ) -> TaxFilingResult:
        """Run extraction, calculation and form assembly for a document batch."""
        year = tax_year or self.config.tax_year
        extracted = self.process_documents(document_ids, filing_status, year)
        calculated = self.calculator.compute(extracted, filing_status)

        fmt = OutputFormat.parse(output_format or self.config.get("output_format"))
        result = self.assembler.assemble(extracted, calculated, fmt, year)
        logger.info(
            f"Generated filing with {len(result.forms)} form(s) as {fmt.value}; "
            f"tax owed {result.summary.tax_owed}"
        )
        return result
