"""Tests for the complete filing tax computation."""

import pytest
from pydantic import ValidationError

from filing_buddy.models.filing import DeductionType
from filing_buddy.models.taxpayer import FilingStatus


class TestFilingCalculator:
    """Tests for FilingCalculator.compute()."""

    def test_stub_single(self, calculator, stub_filing_data):
        tax = calculator.compute(stub_filing_data)

        assert tax.gross_income == 75700
        assert tax.adjusted_gross_income == 69700
        assert tax.deduction_type == DeductionType.STANDARD
        assert tax.deduction_used == 14600
        assert tax.taxable_income == 55100
        assert tax.federal_tax == pytest.approx(7175)
        assert tax.credits == 0
        assert tax.final_tax == pytest.approx(7175)
        assert tax.effective_rate == pytest.approx(7175 / 55100 * 100)

    def test_status_override(self, calculator, stub_filing_data):
        tax = calculator.compute(stub_filing_data, FilingStatus.MARRIED)
        assert tax.deduction_used == 29200
        assert tax.taxable_income == 40500
        assert tax.federal_tax == pytest.approx(4396)

    def test_status_from_extracted_data(self, calculator, make_filing_data):
        data = make_filing_data(filing_status=FilingStatus.HEAD_OF_HOUSEHOLD)
        assert calculator.compute(data).deduction_used == 21900

    def test_itemized_wins_when_larger(self, calculator, make_filing_data):
        data = make_filing_data(deductions={"itemizedDeductions": 20000})
        tax = calculator.compute(data)
        assert tax.deduction_type == DeductionType.ITEMIZED
        assert tax.deduction_used == 20000
        assert tax.taxable_income == 49700
        assert tax.federal_tax == pytest.approx(5987)

    def test_standard_wins_when_itemized_smaller(self, calculator, make_filing_data):
        data = make_filing_data(deductions={"itemizedDeductions": 5000})
        tax = calculator.compute(data)
        assert tax.deduction_type == DeductionType.STANDARD
        assert tax.taxable_income == 55100

    def test_hsa_reduces_agi(self, calculator, make_filing_data):
        data = make_filing_data(deductions={"healthSavingsAccount": 3000})
        assert calculator.compute(data).adjusted_gross_income == 66700

    def test_credits_reduce_final_tax(self, calculator, make_filing_data):
        data = make_filing_data(credits={"childTaxCredit": 2000})
        tax = calculator.compute(data)
        assert tax.credits == 2000
        assert tax.final_tax == pytest.approx(5175)

    def test_credits_never_make_tax_negative(self, calculator, make_filing_data):
        data = make_filing_data(credits={"childTaxCredit": 5000, "earnedIncomeCredit": 5000})
        tax = calculator.compute(data)
        assert tax.final_tax == 0

    def test_negative_agi(self, calculator, make_filing_data):
        data = make_filing_data(income={"wages": 0, "interest": 0, "dividends": 0})
        tax = calculator.compute(data)
        assert tax.adjusted_gross_income == -6000
        assert tax.taxable_income == 0
        assert tax.federal_tax == 0
        assert tax.effective_rate == 0

    def test_result_is_frozen(self, calculator, stub_filing_data):
        tax = calculator.compute(stub_filing_data)
        with pytest.raises(ValidationError):
            tax.final_tax = 0
