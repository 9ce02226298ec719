"""Pytest configuration and fixtures."""

import tempfile
from pathlib import Path

import pytest

from filing_buddy.analyzers.filing_calculator import FilingCalculator
from filing_buddy.collectors.extraction import STUB_PAYLOAD, StubExtractionAdapter, to_filing_data
from filing_buddy.config import Config, reset_config
from filing_buddy.models.taxpayer import FilingStatus
from filing_buddy.session import FilingSession


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_w2_text():
    """W-2 text that passes every validation rule."""
    return """
    Form W-2 Wage and Tax Statement 2024

    Employer Information:
    Acme Corporation
    123 Main Street
    Anytown, ST 12345
    EIN: 12-3456789

    Employee Information:
    John Doe
    456 Oak Avenue
    Somewhere, ST 67890
    SSN: XXX-XX-1234

    Box 1: Wages, tips, other compensation: $75,000.00
    Box 2: Federal income tax withheld: $12,500.00
    Box 3: Social security wages: $75,000.00
    Box 4: Social security tax withheld: $4,650.00
    """


@pytest.fixture
def sample_1099_int_text():
    """1099-INT text that passes every validation rule."""
    return """
    Form 1099-INT Interest Income 2024

    PAYER'S name: First National Bank
    PAYER'S TIN: 98-7654321

    RECIPIENT'S name: John Doe
    RECIPIENT'S TIN: XXX-XX-1234

    Box 1: Interest income: $1,234.56
    Box 4: Federal income tax withheld: $0.00
    """


@pytest.fixture
def config(temp_dir, monkeypatch):
    """Configuration stored in a temporary directory."""
    config_dir = temp_dir / ".filing-buddy"
    monkeypatch.setenv("FILING_BUDDY_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    reset_config()
    yield Config(config_dir)
    reset_config()


@pytest.fixture
def stub_extractor():
    """Deterministic extractor that records its calls."""
    return StubExtractionAdapter()


@pytest.fixture
def session(config, stub_extractor):
    """Filing session using the stub extractor."""
    return FilingSession(config=config, extractor=stub_extractor)


@pytest.fixture
def stub_filing_data():
    """ExtractedFilingData built from the stub payload (single, 2024)."""
    return to_filing_data(STUB_PAYLOAD, FilingStatus.SINGLE, 2024)


@pytest.fixture
def make_filing_data():
    """Factory for ExtractedFilingData with selected fields overridden."""

    def _make(income=None, deductions=None, credits=None, filing_status=FilingStatus.SINGLE, tax_year=2024):
        payload = {
            "personalInfo": STUB_PAYLOAD["personalInfo"],
            "income": {**STUB_PAYLOAD["income"], **(income or {})},
            "deductions": {**STUB_PAYLOAD["deductions"], **(deductions or {})},
            "credits": {**STUB_PAYLOAD["credits"], **(credits or {})},
        }
        return to_filing_data(payload, filing_status, tax_year)

    return _make


@pytest.fixture
def calculator():
    return FilingCalculator()
