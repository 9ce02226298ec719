"""Rendering of tax forms into the supported output formats.

Every renderer is a pure projection of the same ExtractedFilingData and
CalculatedTax; no figures are recomputed here.
"""

import json
import xml.etree.ElementTree as ET
from dataclasses import dataclass

from filing_buddy.models.filing import CalculatedTax, ExtractedFilingData, OutputFormat
from filing_buddy.utils import format_currency, format_percent, format_status, get_enum_value


@dataclass(frozen=True)
class FormLine:
    """One labelled amount on a form."""

    label: str
    tag: str  # XML element / JSON key
    value: float


def _xml_number(value: float) -> str:
    """Exact text form of a number, so XML and JSON carry identical figures."""
    return repr(float(value))


def _add_element(parent: ET.Element, tag: str, text: str) -> ET.Element:
    element = ET.SubElement(parent, tag)
    element.text = text
    return element


def _to_xml(root: ET.Element) -> str:
    ET.indent(root, space="  ")
    return ET.tostring(root, encoding="unicode")


def _signature_block() -> list[str]:
    return [
        "",
        "Under penalties of perjury, I declare that I have examined this return",
        "and to the best of my knowledge and belief it is true, correct, and complete.",
        "",
        "SIGNATURE: _____________________________",
        "DATE: _____________________________",
    ]


# -- Form 1040 ---------------------------------------------------------------


def _form_1040_income_lines(data: ExtractedFilingData) -> list[FormLine]:
    income = data.income
    return [
        FormLine("Wages", "Wages", income.wages),
        FormLine("Self-Employment Income", "SelfEmploymentIncome", income.self_employment),
        FormLine("Interest", "Interest", income.interest),
        FormLine("Dividends", "Dividends", income.dividends),
        FormLine("Capital Gains", "CapitalGains", income.capital_gains),
        FormLine("Rental Income", "RentalIncome", income.rental_income),
        FormLine("Other Income", "OtherIncome", income.other_income),
        FormLine("Total Income", "TotalIncome", income.total_income),
    ]


def _form_1040_tax_lines(tax: CalculatedTax) -> list[FormLine]:
    return [
        FormLine("Adjusted Gross Income", "AdjustedGrossIncome", tax.adjusted_gross_income),
        FormLine("Deduction", "Deduction", tax.deduction_used),
        FormLine("Taxable Income", "TaxableIncome", tax.taxable_income),
        FormLine("Federal Tax", "FederalTax", tax.federal_tax),
        FormLine("Credits", "Credits", tax.credits),
        FormLine("Final Tax", "FinalTax", tax.final_tax),
    ]


def form_1040_json(data: ExtractedFilingData, tax: CalculatedTax) -> str:
    """Pretty-printed JSON dump of the full filing."""
    payload = {
        "form": "1040",
        "tax_year": data.tax_year,
        "filing_status": get_enum_value(data.filing_status),
        "personal_info": data.personal_info.model_dump(mode="json"),
        "income": data.income.model_dump(mode="json"),
        "deductions": data.deductions.model_dump(mode="json"),
        "credits": data.credits.model_dump(mode="json"),
        "calculated_tax": tax.model_dump(mode="json"),
    }
    return json.dumps(payload, indent=2)


def form_1040_xml(data: ExtractedFilingData, tax: CalculatedTax) -> str:
    """XML with the fixed ``Form1040 > PersonalInfo|Income|TaxCalculation`` hierarchy."""
    person = data.personal_info
    root = ET.Element("Form1040")

    personal = ET.SubElement(root, "PersonalInfo")
    _add_element(personal, "FirstName", person.first_name)
    _add_element(personal, "LastName", person.last_name)
    _add_element(personal, "SSN", person.ssn)
    _add_element(personal, "FilingStatus", get_enum_value(data.filing_status))
    _add_element(personal, "TaxYear", str(data.tax_year))

    income = ET.SubElement(root, "Income")
    for line in _form_1040_income_lines(data):
        _add_element(income, line.tag, _xml_number(line.value))

    calculation = ET.SubElement(root, "TaxCalculation")
    for line in _form_1040_tax_lines(tax):
        _add_element(calculation, line.tag, _xml_number(line.value))
    _add_element(calculation, "EffectiveRate", _xml_number(tax.effective_rate))

    return _to_xml(root)


def form_1040_efile(data: ExtractedFilingData, tax: CalculatedTax) -> str:
    """Newline-delimited flat record in a fixed field order."""
    person = data.personal_info
    fields = [
        "IRS_EFILE_FORMAT",
        "1040",
        person.first_name,
        person.last_name,
        person.ssn,
        f"{data.income.total_income:.2f}",
        f"{tax.final_tax:.2f}",
        get_enum_value(data.filing_status),
        str(data.tax_year),
    ]
    return "\n".join(fields)


def form_1040_mail_ready(data: ExtractedFilingData, tax: CalculatedTax) -> str:
    """Labelled paper form ready to print and sign."""
    person = data.personal_info
    address = person.address
    lines = [
        "FORM 1040 - U.S. INDIVIDUAL INCOME TAX RETURN",
        f"Tax Year: {data.tax_year}",
        "",
        f"Name: {person.full_name}",
        f"SSN: {person.ssn}",
        f"Address: {address.street}, {address.city}, {address.state} {address.zip_code}",
        "",
        f"Filing Status: {format_status(data.filing_status)}",
        "",
        "INCOME:",
    ]
    lines.extend(f"{line.label}: {format_currency(line.value)}" for line in _form_1040_income_lines(data))
    lines.extend([
        "",
        "DEDUCTIONS:",
        f"{get_enum_value(tax.deduction_type).title()} Deduction: {format_currency(tax.deduction_used)}",
        "",
        "TAX CALCULATION:",
    ])
    lines.extend(f"{line.label}: {format_currency(line.value)}" for line in _form_1040_tax_lines(tax))
    lines.extend(_signature_block())
    return "\n".join(lines)


def form_1040_text(data: ExtractedFilingData, tax: CalculatedTax) -> str:
    """Short plain-text summary (the default format)."""
    return "\n".join([
        "Form 1040 Summary:",
        f"- Name: {data.personal_info.full_name}",
        f"- Filing Status: {format_status(data.filing_status)}",
        f"- Total Income: {format_currency(data.income.total_income)}",
        f"- Adjusted Gross Income: {format_currency(tax.adjusted_gross_income)}",
        f"- Taxable Income: {format_currency(tax.taxable_income)}",
        f"- Federal Tax: {format_currency(tax.final_tax)}",
        f"- Effective Tax Rate: {format_percent(tax.effective_rate)}",
    ])


_FORM_1040_RENDERERS = {
    OutputFormat.JSON: form_1040_json,
    OutputFormat.XML: form_1040_xml,
    OutputFormat.IRS_EFILE: form_1040_efile,
    OutputFormat.MAIL_READY: form_1040_mail_ready,
    OutputFormat.TEXT: form_1040_text,
}


def render_form_1040(data: ExtractedFilingData, tax: CalculatedTax, output_format: OutputFormat | str) -> str:
    """Render Form 1040 in the requested format (unknown formats use plain text)."""
    return _FORM_1040_RENDERERS[OutputFormat.parse(output_format)](data, tax)


# -- Schedules ---------------------------------------------------------------


def schedule_c_lines(data: ExtractedFilingData) -> list[FormLine]:
    """Profit or loss from business."""
    gross = data.income.self_employment
    expenses = data.deductions.business_expenses
    return [
        FormLine("Gross Receipts", "GrossReceipts", gross),
        FormLine("Business Expenses", "BusinessExpenses", expenses),
        FormLine("Net Profit", "NetProfit", gross - expenses),
    ]


def schedule_d_lines(data: ExtractedFilingData) -> list[FormLine]:
    """Capital gains and losses."""
    return [
        FormLine("Net Capital Gain", "NetCapitalGain", data.income.capital_gains),
    ]


def render_schedule(
    form_number: str,
    title: str,
    lines: list[FormLine],
    data: ExtractedFilingData,
    output_format: OutputFormat | str,
) -> str:
    """Render a supporting schedule in the requested format."""
    fmt = OutputFormat.parse(output_format)
    person = data.personal_info

    if fmt == OutputFormat.JSON:
        payload = {
            "form": form_number,
            "title": title,
            "tax_year": data.tax_year,
            "taxpayer": person.full_name,
            "ssn": person.ssn,
        }
        payload.update({line.tag: line.value for line in lines})
        return json.dumps(payload, indent=2)

    if fmt == OutputFormat.XML:
        root = ET.Element(form_number.replace(" ", ""))
        _add_element(root, "TaxYear", str(data.tax_year))
        _add_element(root, "SSN", person.ssn)
        for line in lines:
            _add_element(root, line.tag, _xml_number(line.value))
        return _to_xml(root)

    if fmt == OutputFormat.IRS_EFILE:
        fields = ["IRS_EFILE_FORMAT", form_number.upper().replace(" ", "_"), person.ssn]
        fields.extend(f"{line.value:.2f}" for line in lines)
        fields.append(str(data.tax_year))
        return "\n".join(fields)

    if fmt == OutputFormat.MAIL_READY:
        out = [
            f"{form_number.upper()} - {title.upper()}",
            f"Tax Year: {data.tax_year}",
            "",
            f"Name: {person.full_name}",
            f"SSN: {person.ssn}",
            "",
        ]
        out.extend(f"{line.label}: {format_currency(line.value)}" for line in lines)
        out.extend(_signature_block())
        return "\n".join(out)

    out = [f"{form_number} Summary ({title}):"]
    out.extend(f"- {line.label}: {format_currency(line.value)}" for line in lines)
    return "\n".join(out)
