"""Tests for extraction adapters and payload handling."""

import copy
import json
from datetime import datetime
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from filing_buddy.collectors.extraction import (
    REQUIRED_FIELDS,
    STUB_PAYLOAD,
    ClaudeExtractionAdapter,
    ExtractionAdapter,
    StubExtractionAdapter,
    build_extraction_prompt,
    get_extractor,
    parse_extraction_response,
    to_filing_data,
    validate_extraction_payload,
)
from filing_buddy.exceptions import ConfigurationError, ExtractionError
from filing_buddy.models.documents import DocumentType, TaxDocument
from filing_buddy.models.taxpayer import FilingStatus


@pytest.fixture
def documents(sample_w2_text):
    return [
        TaxDocument(
            id="doc_1",
            document_type=DocumentType.W2,
            filename="w2.txt",
            content=sample_w2_text + "\nEmployee SSN 123-45-6789",
            uploaded_at=datetime(2025, 2, 1),
        )
    ]


def text_message(text):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


class TestValidateExtractionPayload:
    """Tests for validate_extraction_payload()."""

    def test_stub_payload_is_complete(self):
        validate_extraction_payload(STUB_PAYLOAD)

    def test_missing_field_is_named(self):
        payload = copy.deepcopy(STUB_PAYLOAD)
        del payload["income"]["wages"]
        with pytest.raises(ExtractionError, match="Missing required field: income.wages"):
            validate_extraction_payload(payload)

    def test_missing_nested_group(self):
        payload = copy.deepcopy(STUB_PAYLOAD)
        del payload["personalInfo"]["address"]
        with pytest.raises(ExtractionError, match="personalInfo.address.street"):
            validate_extraction_payload(payload)

    def test_not_an_object(self):
        with pytest.raises(ExtractionError):
            validate_extraction_payload(["not", "a", "dict"])

    def test_required_fields_cover_schema(self):
        assert len(REQUIRED_FIELDS) == 23


class TestToFilingData:
    """Tests for to_filing_data()."""

    def test_totals_are_recomputed(self):
        payload = copy.deepcopy(STUB_PAYLOAD)
        payload["income"]["totalIncome"] = 1
        payload["credits"]["totalCredits"] = 999
        data = to_filing_data(payload, FilingStatus.MARRIED, 2024)
        assert data.income.total_income == 75700
        assert data.deductions.total_deductions == 6000
        assert data.credits.total_credits == 0
        assert data.filing_status == FilingStatus.MARRIED

    def test_wrong_type_is_extraction_error(self):
        payload = copy.deepcopy(STUB_PAYLOAD)
        payload["income"]["wages"] = "lots"
        with pytest.raises(ExtractionError, match="Invalid extraction response"):
            to_filing_data(payload, FilingStatus.SINGLE, 2024)

    def test_negative_retirement_rejected(self):
        payload = copy.deepcopy(STUB_PAYLOAD)
        payload["deductions"]["retirementContributions"] = -1
        with pytest.raises(ExtractionError):
            to_filing_data(payload, FilingStatus.SINGLE, 2024)


class TestParseExtractionResponse:
    """Tests for parse_extraction_response()."""

    def test_json_embedded_in_prose(self):
        text = 'Here is the data:\n```json\n{"a": {"b": 1}}\n```\nDone.'
        assert parse_extraction_response(text) == {"a": {"b": 1}}

    def test_no_json(self):
        with pytest.raises(ExtractionError, match="No JSON found"):
            parse_extraction_response("I could not read the documents.")

    def test_malformed_json(self):
        with pytest.raises(ExtractionError, match="Malformed JSON"):
            parse_extraction_response("{not json}")


class TestBuildExtractionPrompt:
    """Tests for build_extraction_prompt()."""

    def test_redacts_by_default(self, documents):
        prompt = build_extraction_prompt(documents, FilingStatus.SINGLE, 2024)
        assert "123-45-6789" not in prompt
        assert "[SSN REDACTED]" in prompt
        assert "2024 tax filing as single" in prompt
        assert "w2.txt (w2)" in prompt

    def test_no_redaction(self, documents):
        prompt = build_extraction_prompt(documents, FilingStatus.SINGLE, 2024, redact=False)
        assert "123-45-6789" in prompt


class TestStubExtractionAdapter:
    """Tests for StubExtractionAdapter."""

    def test_is_an_adapter(self):
        assert isinstance(StubExtractionAdapter(), ExtractionAdapter)

    def test_returns_stub_data_and_records_calls(self, documents):
        adapter = StubExtractionAdapter()
        data = adapter.extract(documents, FilingStatus.SINGLE, 2024)
        assert data.personal_info.full_name == "John Doe"
        assert data.income.total_income == 75700
        assert adapter.calls == [["doc_1"]]

    def test_malformed_payload_fails_like_live(self, documents):
        adapter = StubExtractionAdapter(payload={"income": {}})
        with pytest.raises(ExtractionError, match="Missing required field"):
            adapter.extract(documents, FilingStatus.SINGLE, 2024)


class TestClaudeExtractionAdapter:
    """Tests for ClaudeExtractionAdapter with a mocked client."""

    def test_extracts_from_response(self, config, documents):
        client = MagicMock()
        client.messages.create.return_value = text_message(
            "Extracted:\n" + json.dumps(STUB_PAYLOAD)
        )

        adapter = ClaudeExtractionAdapter(config, client=client)
        data = adapter.extract(documents, FilingStatus.SINGLE, 2024)

        assert data.income.wages == 75000
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["model"] == "claude-sonnet-4-5-20250929"
        assert kwargs["max_tokens"] == 4000
        assert "123-45-6789" not in kwargs["messages"][0]["content"]

    def test_missing_field_in_response(self, config, documents):
        payload = copy.deepcopy(STUB_PAYLOAD)
        del payload["credits"]
        client = MagicMock()
        client.messages.create.return_value = text_message(json.dumps(payload))

        adapter = ClaudeExtractionAdapter(config, client=client)
        with pytest.raises(ExtractionError, match="Missing required field: credits.childTaxCredit"):
            adapter.extract(documents, FilingStatus.SINGLE, 2024)

    def test_api_error_is_wrapped(self, config, documents):
        import anthropic
        import httpx

        client = MagicMock()
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        client.messages.create.side_effect = anthropic.APITimeoutError(request=request)

        adapter = ClaudeExtractionAdapter(config, client=client)
        with pytest.raises(ExtractionError) as exc_info:
            adapter.extract(documents, FilingStatus.SINGLE, 2024)
        assert isinstance(exc_info.value.__cause__, anthropic.APITimeoutError)
        assert exc_info.value.source == "anthropic"

    def test_non_text_block(self, config, documents):
        client = MagicMock()
        client.messages.create.return_value = SimpleNamespace(content=[SimpleNamespace(type="tool_use")])

        adapter = ClaudeExtractionAdapter(config, client=client)
        with pytest.raises(ExtractionError, match="Unexpected response type"):
            adapter.extract(documents, FilingStatus.SINGLE, 2024)

    def test_missing_api_key(self, config):
        with patch("filing_buddy.config.keyring.get_password", return_value=None):
            with pytest.raises(ConfigurationError, match="API key not configured"):
                ClaudeExtractionAdapter(config)

    def test_client_built_with_timeout_and_no_retries(self, config, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-key")
        config.set("extraction_timeout", 12.5)

        with patch("anthropic.Anthropic") as mock_anthropic:
            adapter = ClaudeExtractionAdapter(config)

        mock_anthropic.assert_called_once_with(api_key="sk-ant-key", timeout=12.5, max_retries=0)
        assert adapter.client is mock_anthropic.return_value

    def test_bedrock_client(self, config):
        config.ai_provider = "aws_bedrock"

        with patch("anthropic.AnthropicBedrock") as mock_bedrock:
            adapter = ClaudeExtractionAdapter(config)

        mock_bedrock.assert_called_once_with(aws_region="us-east-1", timeout=60.0, max_retries=0)
        assert adapter.model == "anthropic.claude-sonnet-4-5-20250929-v1:0"


class TestGetExtractor:
    """Tests for get_extractor()."""

    def test_stub_by_default(self, config):
        assert isinstance(get_extractor(config), StubExtractionAdapter)

    def test_claude_when_configured(self, config, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-key")
        config.extractor = "claude"
        with patch("anthropic.Anthropic"):
            assert isinstance(get_extractor(config), ClaudeExtractionAdapter)
