"""Callable tool surface for the filing pipeline.

Each tool returns a ToolResponse carrying human-readable text. Pipeline
errors are reported as error responses instead of being raised.
"""

import functools
import inspect
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Any

from filing_buddy.exceptions import FilingBuddyError
from filing_buddy.models.documents import DOCUMENT_TYPE_LABELS
from filing_buddy.models.filing import TaxFilingResult
from filing_buddy.models.taxpayer import FILING_STATUSES
from filing_buddy.session import FilingSession
from filing_buddy.tools.tax_calculations import (
    calculate_tax,
    days_until_deadline,
    get_filing_deadline,
    get_tax_brackets,
    is_known_filing_status,
    resolve_filing_status,
)
from filing_buddy.utils import format_currency, format_percent

logger = logging.getLogger(__name__)

FILING_STATUS_ENUM = [status.value for status in FILING_STATUSES]


@dataclass(frozen=True)
class ToolResponse:
    """Text result of a tool call."""

    text: str
    is_error: bool = False

    @classmethod
    def error(cls, message: str) -> "ToolResponse":
        return cls(text=f"Error: {message}", is_error=True)


def calculate_tax_tool(income: float, filing_status: str = "single") -> ToolResponse:
    """Calculate federal income tax for a gross income."""
    status = resolve_filing_status(filing_status)
    info = FILING_STATUSES[status]
    result = calculate_tax(income, status)

    lines = ["Tax Calculation Results:", ""]
    if not is_known_filing_status(filing_status):
        lines.append(f"Note: unknown filing status '{filing_status}', using {info.description}")
    lines.extend([
        f"Filing Status: {info.description}",
        f"Gross Income: {format_currency(income)}",
        f"Standard Deduction: {format_currency(info.standard_deduction)}",
        f"Taxable Income: {format_currency(result.taxable_income)}",
        f"Tax Amount: {format_currency(result.tax_amount)}",
        f"Effective Tax Rate: {format_percent(result.effective_rate)}",
        f"Tax Bracket: {result.bracket.label}",
    ])
    return ToolResponse("\n".join(lines))


def get_filing_status_info(status: str | None = None) -> ToolResponse:
    """Describe one filing status with its brackets, or list all statuses."""
    if status:
        if not is_known_filing_status(status):
            return ToolResponse.error(f"Unknown filing status: {status}")
        resolved = resolve_filing_status(status)
        info = FILING_STATUSES[resolved]
        brackets = []
        for bracket in get_tax_brackets(resolved):
            upper = format_currency(bracket.max_income) if bracket.max_income is not None else "unlimited"
            brackets.append(f"• {format_currency(bracket.min_income)} - {upper}: {bracket.rate:.0%}")
        text = (
            f"Filing Status: {info.description}\n"
            f"Standard Deduction (2024): {format_currency(info.standard_deduction)}\n\n"
            f"Tax Brackets:\n" + "\n".join(brackets)
        )
        return ToolResponse(text)

    statuses = "\n".join(
        f"• {info.description}: {format_currency(info.standard_deduction)}"
        for info in FILING_STATUSES.values()
    )
    return ToolResponse(
        "Available Filing Statuses and Standard Deductions (2024):\n\n"
        f"{statuses}\n\n"
        "Use the 'status' parameter to get detailed information about a specific filing status."
    )


def get_filing_deadline_tool(year: int | None = None, today: date | None = None) -> ToolResponse:
    """Report the filing deadline for a year, with a countdown for the current year."""
    today = today or date.today()
    year = today.year if year is None else year
    deadline = get_filing_deadline(year)

    extra = ""
    if year == today.year:
        days = days_until_deadline(year, today)
        if days > 0:
            extra = f"\n\nYou have {days} days until the deadline."
        elif days == 0:
            extra = "\n\nToday is the deadline!"
        else:
            extra = "\n\nThe deadline has passed. Consider filing for an extension if needed."

    return ToolResponse(f"Tax Filing Deadline for {year}:\n{deadline}{extra}")


def upload_tax_document(
    session: FilingSession,
    filename: str,
    content: str,
    document_type: str = "other",
) -> ToolResponse:
    """Store a document and run the single-document validation checks."""
    try:
        document_id = session.upload_document(filename, content, document_type)
    except FilingBuddyError as e:
        logger.warning(f"Upload failed: {e}")
        return ToolResponse.error(str(e))
    document = session.store.get(document_id)
    result = session.validator.validate_document(document)

    label = DOCUMENT_TYPE_LABELS.get(document.document_type, "Not specified")
    lines = [
        "Document uploaded successfully!",
        "",
        f"Document ID: {document_id}",
        f"Filename: {filename}",
        f"Type: {label}",
    ]
    if result.errors:
        lines.extend(["", "Validation errors:"])
        lines.extend(f"• {error}" for error in result.errors)
    if result.warnings:
        lines.extend(["", "Warnings:"])
        lines.extend(f"• {warning}" for warning in result.warnings)
    return ToolResponse("\n".join(lines))


def process_tax_documents(
    session: FilingSession,
    document_ids: Sequence[str],
    filing_status: str = "single",
    tax_year: int | None = None,
) -> ToolResponse:
    """Extract structured filing data from uploaded documents."""
    try:
        data = session.process_documents(document_ids, filing_status, tax_year)
    except FilingBuddyError as e:
        logger.warning(f"Processing failed: {e}")
        return ToolResponse.error(str(e))

    income = data.income
    deductions = data.deductions
    text = "\n".join([
        "Documents processed successfully!",
        "",
        f"Name: {data.personal_info.full_name}",
        f"Tax Year: {data.tax_year}",
        "",
        "Income:",
        f"• Wages: {format_currency(income.wages)}",
        f"• Self-Employment: {format_currency(income.self_employment)}",
        f"• Interest: {format_currency(income.interest)}",
        f"• Dividends: {format_currency(income.dividends)}",
        f"• Capital Gains: {format_currency(income.capital_gains)}",
        f"• Rental Income: {format_currency(income.rental_income)}",
        f"• Other Income: {format_currency(income.other_income)}",
        f"• Total Income: {format_currency(income.total_income)}",
        "",
        "Deductions:",
        f"• Itemized: {format_currency(deductions.itemized_deductions)}",
        f"• Retirement Contributions: {format_currency(deductions.retirement_contributions)}",
        f"• Health Savings Account: {format_currency(deductions.health_savings_account)}",
        "",
        f"Total Credits: {format_currency(data.credits.total_credits)}",
    ])
    return ToolResponse(text)


def format_filing_result(result: TaxFilingResult) -> str:
    """Render a filing result as tool text: summary then every form."""
    summary = result.summary
    tax = result.calculated_tax
    lines = [
        "Tax Filing Generated!",
        "",
        "Summary:",
        f"• Total Income: {format_currency(summary.total_income)}",
        f"• Deduction Used ({tax.deduction_type.value}): {format_currency(tax.deduction_used)}",
        f"• Taxable Income: {format_currency(tax.taxable_income)}",
        f"• Total Credits: {format_currency(summary.total_credits)}",
        f"• Tax Owed: {format_currency(summary.tax_owed)}",
        f"• Refund: {format_currency(summary.refund_amount)}",
        f"• Effective Rate: {format_percent(tax.effective_rate)}",
        f"• Filing Deadline: {summary.filing_deadline}",
        f"• Processing Time: {summary.estimated_processing_time}",
    ]
    for form in result.forms:
        lines.extend([
            "",
            f"=== Form {form.form_number}: {form.form_type} ===",
            form.content,
            "",
            f"Instructions: {form.instructions}",
        ])
    return "\n".join(lines)


def generate_tax_filing(
    session: FilingSession,
    document_ids: Sequence[str],
    filing_status: str = "single",
    tax_year: int | None = None,
    output_format: str = "text",
) -> ToolResponse:
    """Run the full pipeline and return the forms and summary."""
    try:
        result = session.generate_filing(document_ids, filing_status, tax_year, output_format)
    except FilingBuddyError as e:
        logger.warning(f"Filing generation failed: {e}")
        return ToolResponse.error(str(e))
    return ToolResponse(format_filing_result(result))


# Guidance snippets keyed by the words that trigger them
_ASSISTANCE_TOPICS: list[tuple[tuple[str, ...], str]] = [
    (
        ("deduction", "deduct"),
        "Common deductions include:\n"
        "• Standard deduction (varies by filing status)\n"
        "• State and local taxes (SALT)\n"
        "• Mortgage interest\n"
        "• Charitable contributions\n"
        "• Medical expenses (if over 7.5% of AGI)\n"
        "• Business expenses (if self-employed)",
    ),
    (
        ("credit", "refund"),
        "Common tax credits include:\n"
        "• Child Tax Credit\n"
        "• Earned Income Tax Credit (EITC)\n"
        "• American Opportunity Credit (education)\n"
        "• Lifetime Learning Credit\n"
        "• Child and Dependent Care Credit",
    ),
    (
        ("extension", "deadline"),
        "If you need more time to file:\n"
        "• File Form 4868 for an automatic 6-month extension\n"
        "• Extension must be filed by the original deadline\n"
        "• Extension gives you time to file, not to pay\n"
        "• You may still owe penalties and interest on unpaid taxes",
    ),
    (
        ("payment", "owe"),
        "Payment options if you owe taxes:\n"
        "• Installment Agreement (Form 9465)\n"
        "• Offer in Compromise\n"
        "• Currently Not Collectible status\n"
        "• Pay with credit card (fees apply)\n"
        "• Set up automatic payments",
    ),
]

COMMON_TOPICS = [
    "deductions", "credits", "extensions", "refunds", "payment plans",
    "business expenses", "home office", "charitable donations", "retirement accounts",
]


def get_tax_assistance(question: str) -> ToolResponse:
    """Canned guidance for common tax questions."""
    lowered = question.lower()
    response = f'As your IRS Tax Filing Buddy, I\'m here to help with: "{question}"\n\n'
    for triggers, guidance in _ASSISTANCE_TOPICS:
        if any(trigger in lowered for trigger in triggers):
            return ToolResponse(response + guidance)
    return ToolResponse(
        response
        + "Please provide more specific details about your tax situation so I can give you "
        + "the best guidance possible. Common topics I can help with include: "
        + ", ".join(COMMON_TOPICS)
    )


# Tool schemas for a tool-calling client
TOOL_DEFINITIONS = [
    {
        "name": "calculate_tax",
        "description": "Calculate federal income tax based on income and filing status",
        "input_schema": {
            "type": "object",
            "properties": {
                "income": {"type": "number", "description": "Annual gross income in USD"},
                "filing_status": {
                    "type": "string",
                    "enum": FILING_STATUS_ENUM,
                    "description": "Filing status",
                },
            },
            "required": ["income", "filing_status"],
        },
    },
    {
        "name": "get_filing_status_info",
        "description": "Get information about filing statuses and their standard deductions",
        "input_schema": {
            "type": "object",
            "properties": {
                "status": {
                    "type": "string",
                    "enum": FILING_STATUS_ENUM,
                    "description": "Specific filing status to get info for (optional)",
                },
            },
        },
    },
    {
        "name": "get_filing_deadline",
        "description": "Get the tax filing deadline for a specific year",
        "input_schema": {
            "type": "object",
            "properties": {
                "year": {"type": "integer", "description": "Year (defaults to current year)"},
            },
        },
    },
    {
        "name": "upload_tax_document",
        "description": "Upload a tax document's text for later processing",
        "input_schema": {
            "type": "object",
            "properties": {
                "filename": {"type": "string"},
                "content": {"type": "string", "description": "Document text"},
                "document_type": {
                    "type": "string",
                    "enum": [t.value for t in DOCUMENT_TYPE_LABELS],
                },
            },
            "required": ["filename", "content", "document_type"],
        },
    },
    {
        "name": "process_tax_documents",
        "description": "Extract income, deductions and credits from uploaded documents",
        "input_schema": {
            "type": "object",
            "properties": {
                "document_ids": {"type": "array", "items": {"type": "string"}},
                "filing_status": {"type": "string", "enum": FILING_STATUS_ENUM},
                "tax_year": {"type": "integer"},
            },
            "required": ["document_ids", "filing_status", "tax_year"],
        },
    },
    {
        "name": "generate_tax_filing",
        "description": "Generate tax forms and a filing summary from uploaded documents",
        "input_schema": {
            "type": "object",
            "properties": {
                "document_ids": {"type": "array", "items": {"type": "string"}},
                "filing_status": {"type": "string", "enum": FILING_STATUS_ENUM},
                "tax_year": {"type": "integer"},
                "output_format": {
                    "type": "string",
                    "enum": ["json", "xml", "irs_efile", "mail_ready", "text"],
                },
            },
            "required": ["document_ids", "filing_status", "tax_year"],
        },
    },
    {
        "name": "get_tax_assistance",
        "description": "Get general guidance for a tax-related question",
        "input_schema": {
            "type": "object",
            "properties": {
                "question": {"type": "string"},
            },
            "required": ["question"],
        },
    },
]

_STATELESS_TOOLS: dict[str, Callable[..., ToolResponse]] = {
    "calculate_tax": calculate_tax_tool,
    "get_filing_status_info": get_filing_status_info,
    "get_filing_deadline": get_filing_deadline_tool,
    "get_tax_assistance": get_tax_assistance,
}

_SESSION_TOOLS: dict[str, Callable[..., ToolResponse]] = {
    "upload_tax_document": upload_tax_document,
    "process_tax_documents": process_tax_documents,
    "generate_tax_filing": generate_tax_filing,
}


def dispatch_tool(session: FilingSession, name: str, arguments: dict[str, Any]) -> ToolResponse:
    """Invoke a tool by its schema name. Bad arguments become an error response."""
    if name in _STATELESS_TOOLS:
        tool = _STATELESS_TOOLS[name]
    elif name in _SESSION_TOOLS:
        tool = functools.partial(_SESSION_TOOLS[name], session)
    else:
        return ToolResponse.error(f"Unknown tool: {name}")

    try:
        inspect.signature(tool).bind(**arguments)
    except TypeError as e:
        return ToolResponse.error(f"Invalid arguments for {name}: {e}")
    return tool(**arguments)
