"""Complete tax computation from extracted filing data."""

import logging

from filing_buddy.models.filing import CalculatedTax, DeductionType, ExtractedFilingData
from filing_buddy.models.taxpayer import FilingStatus
from filing_buddy.tools.tax_calculations import (
    get_standard_deduction,
    resolve_filing_status,
    tax_on_taxable_income,
)

logger = logging.getLogger(__name__)


class FilingCalculator:
    """
    Computes AGI, deductions, bracket tax and credits for one filing.

    The larger of the standard and itemized deduction is always used, and
    the bracket table is applied to the resulting taxable income so the
    deduction is only subtracted once. Credits are non-refundable.
    """

    def compute(
        self,
        extracted: ExtractedFilingData,
        filing_status: FilingStatus | str | None = None,
    ) -> CalculatedTax:
        """
        Calculate the tax for extracted filing data.

        Args:
            extracted: Data produced by an extraction adapter
            filing_status: Overrides the status recorded on ``extracted``

        Returns:
            CalculatedTax snapshot
        """
        status = resolve_filing_status(filing_status or extracted.filing_status)
        income = extracted.income
        deductions = extracted.deductions

        # Step 1: adjusted gross income (may go negative, clamped below)
        agi = (
            income.total_income
            - deductions.retirement_contributions
            - deductions.health_savings_account
        )
        logger.debug(f"AGI: {income.total_income} - adjustments = {agi}")

        # Step 2: better of standard vs itemized
        standard = get_standard_deduction(status)
        if deductions.itemized_deductions > standard:
            deduction_used, deduction_type = deductions.itemized_deductions, DeductionType.ITEMIZED
        else:
            deduction_used, deduction_type = standard, DeductionType.STANDARD
        logger.debug(f"Deduction: {deduction_type.value} {deduction_used}")

        # Step 3: taxable income
        taxable_income = max(0.0, agi - deduction_used)

        # Step 4: bracket tax on the taxable income
        federal_tax, bracket = tax_on_taxable_income(taxable_income, status)
        logger.debug(f"Bracket tax on {taxable_income}: {federal_tax} (marginal {bracket.label})")

        # Steps 5-6: credits and effective rate
        total_credits = extracted.credits.total_credits
        final_tax = max(0.0, federal_tax - total_credits)
        effective_rate = (final_tax / taxable_income * 100) if taxable_income > 0 else 0.0

        return CalculatedTax(
            gross_income=income.total_income,
            adjusted_gross_income=agi,
            taxable_income=taxable_income,
            deduction_used=deduction_used,
            deduction_type=deduction_type,
            federal_tax=federal_tax,
            credits=total_credits,
            final_tax=final_tax,
            effective_rate=effective_rate,
        )
