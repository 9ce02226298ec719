"""Extraction of structured filing data from raw document text.

The pipeline only depends on the ExtractionAdapter protocol. Two
implementations are provided: a deterministic stub for demos and tests,
and a Claude-backed adapter that calls the Anthropic API (directly or
through AWS Bedrock).
"""

import json
import logging
import re
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError

from filing_buddy.config import AI_PROVIDER_AWS_BEDROCK, EXTRACTOR_CLAUDE, Config, get_config
from filing_buddy.exceptions import ConfigurationError, ExtractionError
from filing_buddy.models.documents import TaxDocument
from filing_buddy.models.filing import ExtractedFilingData
from filing_buddy.models.taxpayer import FilingStatus
from filing_buddy.storage.redaction import redact_sensitive_data
from filing_buddy.utils import get_enum_value

logger = logging.getLogger(__name__)

ANTHROPIC_MODELS = {
    "claude-sonnet-4-5": "claude-sonnet-4-5-20250929",
    "claude-3-5-sonnet": "claude-3-5-sonnet-20241022",
}

BEDROCK_MODELS = {
    "claude-sonnet-4-5": "anthropic.claude-sonnet-4-5-20250929-v1:0",
    "claude-3-5-sonnet": "anthropic.claude-3-5-sonnet-20241022-v2:0",
}

# Every path must be present in an extraction payload
REQUIRED_FIELDS = [
    "personalInfo.firstName",
    "personalInfo.lastName",
    "personalInfo.ssn",
    "personalInfo.address.street",
    "personalInfo.address.city",
    "personalInfo.address.state",
    "personalInfo.address.zipCode",
    "personalInfo.dateOfBirth",
    "income.wages",
    "income.selfEmployment",
    "income.interest",
    "income.dividends",
    "income.capitalGains",
    "income.rentalIncome",
    "income.otherIncome",
    "deductions.itemizedDeductions",
    "deductions.businessExpenses",
    "deductions.retirementContributions",
    "deductions.healthSavingsAccount",
    "credits.childTaxCredit",
    "credits.earnedIncomeCredit",
    "credits.educationCredits",
    "credits.otherCredits",
]

_MISSING = object()

EXTRACTION_SCHEMA_TEXT = """{
  "personalInfo": {
    "firstName": "string",
    "lastName": "string",
    "ssn": "string (masked)",
    "address": {
      "street": "string",
      "city": "string",
      "state": "string",
      "zipCode": "string"
    },
    "dateOfBirth": "YYYY-MM-DD"
  },
  "income": {
    "wages": number,
    "selfEmployment": number,
    "interest": number,
    "dividends": number,
    "capitalGains": number,
    "rentalIncome": number,
    "otherIncome": number
  },
  "deductions": {
    "itemizedDeductions": number,
    "businessExpenses": number,
    "retirementContributions": number,
    "healthSavingsAccount": number
  },
  "credits": {
    "childTaxCredit": number,
    "earnedIncomeCredit": number,
    "educationCredits": number,
    "otherCredits": number
  }
}"""


@runtime_checkable
class ExtractionAdapter(Protocol):
    """Turns an ordered batch of documents into ExtractedFilingData."""

    def extract(
        self,
        documents: Sequence[TaxDocument],
        filing_status: FilingStatus,
        tax_year: int,
    ) -> ExtractedFilingData:
        ...


def _get_nested(payload: Any, path: str) -> Any:
    current = payload
    for key in path.split("."):
        if not isinstance(current, dict) or key not in current:
            return _MISSING
        current = current[key]
    return current


def validate_extraction_payload(payload: Any) -> None:
    """
    Check that every required path is present in an extraction payload.

    Raises:
        ExtractionError: Naming the first missing field
    """
    if not isinstance(payload, dict):
        raise ExtractionError("Extraction response is not a JSON object")

    for path in REQUIRED_FIELDS:
        if _get_nested(payload, path) is _MISSING:
            raise ExtractionError(f"Missing required field: {path}", details={"field": path})


def to_filing_data(
    payload: dict[str, Any],
    filing_status: FilingStatus,
    tax_year: int,
) -> ExtractedFilingData:
    """
    Validate a raw payload and build the immutable filing record from it.

    Totals in the payload are ignored and recomputed.

    Raises:
        ExtractionError: If a field is missing or has the wrong type
    """
    validate_extraction_payload(payload)
    try:
        return ExtractedFilingData.model_validate({
            "personalInfo": payload["personalInfo"],
            "income": {k: v for k, v in payload["income"].items() if k != "totalIncome"},
            "deductions": {k: v for k, v in payload["deductions"].items() if k != "totalDeductions"},
            "credits": {k: v for k, v in payload["credits"].items() if k != "totalCredits"},
            "filingStatus": filing_status,
            "taxYear": tax_year,
        })
    except ValidationError as e:
        raise ExtractionError(f"Invalid extraction response: {e.error_count()} field error(s)") from e


def parse_extraction_response(text: str) -> dict[str, Any]:
    """
    Pull the JSON object out of a model response.

    Raises:
        ExtractionError: If no JSON object can be parsed
    """
    match = re.search(r"\{[\s\S]*\}", text)
    if not match:
        raise ExtractionError("No JSON found in extraction response")
    try:
        return json.loads(match.group())
    except json.JSONDecodeError as e:
        raise ExtractionError(f"Malformed JSON in extraction response: {e.msg}") from e


def build_extraction_prompt(
    documents: Sequence[TaxDocument],
    filing_status: FilingStatus,
    tax_year: int,
    redact: bool = True,
) -> str:
    """Build the extraction prompt for a batch of documents."""
    sections = []
    for doc in documents:
        content = redact_sensitive_data(doc.content) if redact else doc.content
        sections.append(
            f"Document: {doc.filename} ({get_enum_value(doc.document_type)})\nContent:\n{content}"
        )
    document_texts = "\n\n".join(sections)

    return f"""Please process the following tax documents for {tax_year} tax filing as {get_enum_value(filing_status)}:

{document_texts}

Extract the following information in JSON format:
{EXTRACTION_SCHEMA_TEXT}

Please be accurate and only include information that is clearly stated in the documents. If information is not available, use 0 for numeric fields and empty strings for text fields."""


# Deterministic payload returned by the stub extractor
STUB_PAYLOAD: dict[str, Any] = {
    "personalInfo": {
        "firstName": "John",
        "lastName": "Doe",
        "ssn": "***-**-1234",
        "address": {
            "street": "123 Main St",
            "city": "Anytown",
            "state": "CA",
            "zipCode": "12345",
        },
        "dateOfBirth": "1985-06-15",
    },
    "income": {
        "wages": 75000,
        "selfEmployment": 0,
        "interest": 500,
        "dividends": 200,
        "capitalGains": 0,
        "rentalIncome": 0,
        "otherIncome": 0,
    },
    "deductions": {
        "itemizedDeductions": 0,
        "businessExpenses": 0,
        "retirementContributions": 6000,
        "healthSavingsAccount": 0,
    },
    "credits": {
        "childTaxCredit": 0,
        "earnedIncomeCredit": 0,
        "educationCredits": 0,
        "otherCredits": 0,
    },
}


class StubExtractionAdapter:
    """Returns a fixed payload regardless of document content.

    The payload still goes through the same schema checks as a live
    response, so a malformed stub fails the same way.
    """

    def __init__(self, payload: dict[str, Any] | None = None):
        self.payload = payload if payload is not None else STUB_PAYLOAD
        self.calls: list[list[str]] = []

    def extract(
        self,
        documents: Sequence[TaxDocument],
        filing_status: FilingStatus,
        tax_year: int,
    ) -> ExtractedFilingData:
        self.calls.append([doc.id for doc in documents])
        logger.debug(f"Stub extraction for {len(documents)} document(s)")
        return to_filing_data(self.payload, filing_status, tax_year)


class ClaudeExtractionAdapter:
    """Extracts filing data with Claude.

    Supports both the Anthropic API and AWS Bedrock. Calls are made with an
    explicit timeout and no automatic retries; any failure is raised as an
    ExtractionError.
    """

    def __init__(self, config: Config | None = None, client: Any = None, model: str | None = None):
        """
        Initialize the adapter.

        Args:
            config: Configuration (defaults to the global config)
            client: Pre-built Anthropic client, mainly for tests
            model: Model name override
        """
        self.config = config or get_config()
        self.provider = self.config.ai_provider
        self.timeout = self.config.extraction_timeout
        self.redact = self.config.auto_redact_ssn
        base_model = model or self.config.get("model", "claude-sonnet-4-5")

        if client is not None:
            self.client = client
            self.model = ANTHROPIC_MODELS.get(base_model, base_model)
        elif self.provider == AI_PROVIDER_AWS_BEDROCK:
            self._init_bedrock(base_model)
        else:
            self._init_anthropic(base_model)

    def _init_anthropic(self, base_model: str) -> None:
        """Initialize with the Anthropic API."""
        from anthropic import Anthropic

        api_key = self.config.get_api_key()
        if not api_key:
            raise ConfigurationError(
                "Anthropic API key not configured. Set ANTHROPIC_API_KEY or run 'filing-buddy config api-key'."
            )

        self.client = Anthropic(api_key=api_key, timeout=self.timeout, max_retries=0)
        self.model = ANTHROPIC_MODELS.get(base_model, base_model)

    def _init_bedrock(self, base_model: str) -> None:
        """Initialize with AWS Bedrock using the default AWS credential chain."""
        from anthropic import AnthropicBedrock

        self.client = AnthropicBedrock(
            aws_region=self.config.aws_region,
            timeout=self.timeout,
            max_retries=0,
        )
        self.model = BEDROCK_MODELS.get(base_model, f"anthropic.{base_model}-v1:0")

    def _call(self, prompt: str) -> str:
        """Send the prompt and return the text of the first content block."""
        import anthropic

        try:
            message = self.client.messages.create(
                model=self.model,
                max_tokens=4000,
                temperature=0.1,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise ExtractionError(f"Extraction service error: {e}", source=self.provider) from e

        block = message.content[0] if message.content else None
        if block is None or getattr(block, "type", None) != "text":
            raise ExtractionError("Unexpected response type from extraction service", source=self.provider)
        return block.text

    def extract(
        self,
        documents: Sequence[TaxDocument],
        filing_status: FilingStatus,
        tax_year: int,
    ) -> ExtractedFilingData:
        prompt = build_extraction_prompt(documents, filing_status, tax_year, redact=self.redact)
        logger.info(f"Requesting extraction for {len(documents)} document(s) from {self.model}")
        payload = parse_extraction_response(self._call(prompt))
        return to_filing_data(payload, filing_status, tax_year)


def get_extractor(config: Config | None = None) -> ExtractionAdapter:
    """Build the extraction adapter selected in the configuration."""
    config = config or get_config()
    if config.extractor == EXTRACTOR_CLAUDE:
        return ClaudeExtractionAdapter(config)
    return StubExtractionAdapter()
