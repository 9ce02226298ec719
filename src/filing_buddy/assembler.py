"""Assembly of the forms and bottom-line summary for a filing."""

import logging

from filing_buddy.forms import render_form_1040, render_schedule, schedule_c_lines, schedule_d_lines
from filing_buddy.models.filing import (
    CalculatedTax,
    ExtractedFilingData,
    FilingSummary,
    GeneratedForm,
    OutputFormat,
    TaxFilingResult,
)
from filing_buddy.tools.tax_calculations import get_filing_deadline

logger = logging.getLogger(__name__)

PROCESSING_TIME = "3-6 weeks for refunds, 4-6 weeks for payments"


class FilingAssembler:
    """
    Builds Form 1040 and any supporting schedules, plus the filing summary.

    Form 1040 is always produced. Schedule C is added when there is
    self-employment income and Schedule D when there are capital gains.
    All forms of one filing share the requested output format.
    """

    def build_forms(
        self,
        extracted: ExtractedFilingData,
        calculated_tax: CalculatedTax,
        output_format: OutputFormat | str,
        tax_year: int | None = None,
    ) -> list[GeneratedForm]:
        """Render every form this filing needs."""
        fmt = OutputFormat.parse(output_format)
        deadline = get_filing_deadline((tax_year or extracted.tax_year) + 1)

        forms = [
            GeneratedForm(
                form_type="Individual Income Tax Return",
                form_number="1040",
                content=render_form_1040(extracted, calculated_tax, fmt),
                instructions=f"File this form with the IRS by {deadline}.",
            )
        ]

        if extracted.income.self_employment > 0:
            forms.append(
                GeneratedForm(
                    form_type="Profit or Loss From Business",
                    form_number="Schedule C",
                    content=render_schedule(
                        "Schedule C", "Profit or Loss From Business",
                        schedule_c_lines(extracted), extracted, fmt,
                    ),
                    instructions="Attach to Form 1040 to report self-employment income.",
                )
            )

        if extracted.income.capital_gains > 0:
            forms.append(
                GeneratedForm(
                    form_type="Capital Gains and Losses",
                    form_number="Schedule D",
                    content=render_schedule(
                        "Schedule D", "Capital Gains and Losses",
                        schedule_d_lines(extracted), extracted, fmt,
                    ),
                    instructions="Attach to Form 1040 to report capital gains.",
                )
            )

        logger.debug(f"Rendered {len(forms)} form(s) as {fmt.value}")
        return forms

    def build_summary(
        self,
        extracted: ExtractedFilingData,
        calculated_tax: CalculatedTax,
        tax_year: int | None = None,
        payments: float = 0.0,
    ) -> FilingSummary:
        """
        Summarize the filing.

        Args:
            extracted: Extracted filing data
            calculated_tax: Result of the tax computation
            tax_year: Year being filed (defaults to the extracted tax year)
            payments: Tax already paid (withholding, estimates)

        Returns:
            FilingSummary where at most one of tax owed and refund is non-zero
        """
        balance = calculated_tax.final_tax - payments
        return FilingSummary(
            total_income=extracted.income.total_income,
            total_deductions=extracted.deductions.total_deductions,
            total_credits=calculated_tax.credits,
            tax_owed=max(0.0, balance),
            refund_amount=max(0.0, -balance),
            filing_deadline=get_filing_deadline((tax_year or extracted.tax_year) + 1),
            estimated_processing_time=PROCESSING_TIME,
        )

    def assemble(
        self,
        extracted: ExtractedFilingData,
        calculated_tax: CalculatedTax,
        output_format: OutputFormat | str = OutputFormat.TEXT,
        tax_year: int | None = None,
    ) -> TaxFilingResult:
        """Build the complete filing result."""
        fmt = OutputFormat.parse(output_format)
        return TaxFilingResult(
            filing_data=extracted,
            calculated_tax=calculated_tax,
            forms=self.build_forms(extracted, calculated_tax, fmt, tax_year),
            summary=self.build_summary(extracted, calculated_tax, tax_year),
            output_format=fmt,
        )
