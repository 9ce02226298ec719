"""Export generated filings to Markdown, plain text or PDF."""

from datetime import datetime
from pathlib import Path

from filing_buddy.models.filing import OutputFormat, TaxFilingResult
from filing_buddy.utils import format_currency, format_percent, format_status

# File suffix for each rendered form format
FORMAT_SUFFIXES = {
    OutputFormat.JSON: ".json",
    OutputFormat.XML: ".xml",
    OutputFormat.IRS_EFILE: ".txt",
    OutputFormat.MAIL_READY: ".txt",
    OutputFormat.TEXT: ".txt",
}


def export_filing_markdown(result: TaxFilingResult) -> str:
    """Export a filing result as a Markdown report."""
    data = result.filing_data
    tax = result.calculated_tax
    summary = result.summary
    lines = []

    lines.append(f"# Tax Filing - {data.tax_year}")
    lines.append("")
    lines.append(f"**Taxpayer:** {data.personal_info.full_name}")
    lines.append(f"**Filing Status:** {format_status(data.filing_status)}")
    lines.append(f"**Output Format:** {result.output_format.value}")
    lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.append(f"- **Total Income:** {format_currency(summary.total_income)}")
    lines.append(f"- **Adjusted Gross Income:** {format_currency(tax.adjusted_gross_income)}")
    lines.append(
        f"- **{tax.deduction_type.value.title()} Deduction:** {format_currency(tax.deduction_used)}"
    )
    lines.append(f"- **Taxable Income:** {format_currency(tax.taxable_income)}")
    lines.append(f"- **Federal Tax:** {format_currency(tax.federal_tax)}")
    if summary.total_credits:
        lines.append(f"- **Total Credits:** {format_currency(summary.total_credits)}")
    lines.append(f"- **Tax Owed:** {format_currency(summary.tax_owed)}")
    if summary.refund_amount:
        lines.append(f"- **Refund Due:** {format_currency(summary.refund_amount)}")
    lines.append(f"- **Effective Rate:** {format_percent(tax.effective_rate)}")
    lines.append(f"- **Filing Deadline:** {summary.filing_deadline}")
    lines.append(f"- **Processing Time:** {summary.estimated_processing_time}")
    lines.append("")

    lines.append("## Forms")
    lines.append("")
    for form in result.forms:
        lines.append(f"### Form {form.form_number}: {form.form_type}")
        lines.append("")
        lines.append("```")
        lines.extend(form.content.splitlines())
        lines.append("```")
        lines.append("")
        lines.append(f"*{form.instructions}*")
        lines.append("")

    lines.append("---")
    lines.append(f"*Generated by Filing Buddy on {datetime.now().strftime('%Y-%m-%d %H:%M')}*")

    return "\n".join(lines)


def markdown_to_pdf(markdown_content: str, output_path: Path) -> None:
    """Convert markdown content to PDF. Fenced blocks are set in a monospace font."""
    from fpdf import FPDF
    from fpdf.enums import XPos, YPos

    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=20)
    pdf.add_page()
    pdf.set_left_margin(20)
    pdf.set_right_margin(20)

    in_code_block = False
    for line in markdown_content.split("\n"):
        line = line.rstrip()

        if line.startswith("```"):
            in_code_block = not in_code_block
            pdf.ln(2)
            continue

        pdf.set_x(pdf.l_margin)

        if in_code_block:
            pdf.set_font("Courier", "", 9)
            pdf.multi_cell(w=0, h=4, text=line or " ", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            continue

        if not line:
            pdf.ln(4)
            continue

        clean_line = line.replace("**", "").replace("*", "")

        if line.startswith("# "):
            pdf.ln(4)
            pdf.set_font("Helvetica", "B", 16)
            pdf.multi_cell(w=0, h=8, text=clean_line[2:], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            pdf.ln(2)
        elif line.startswith("## "):
            pdf.ln(3)
            pdf.set_font("Helvetica", "B", 14)
            pdf.multi_cell(w=0, h=7, text=clean_line[3:], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            pdf.ln(2)
        elif line.startswith("### "):
            pdf.ln(2)
            pdf.set_font("Helvetica", "B", 12)
            pdf.multi_cell(w=0, h=6, text=clean_line[4:], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            pdf.ln(1)
        elif line.startswith("---"):
            pdf.ln(4)
            y = pdf.get_y()
            pdf.line(20, y, 190, y)
            pdf.ln(4)
        elif line.startswith("- "):
            pdf.set_font("Helvetica", "", 10)
            pdf.multi_cell(w=0, h=5, text="  * " + clean_line[2:], new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        else:
            pdf.set_font("Helvetica", "", 10)
            pdf.multi_cell(w=0, h=5, text=clean_line, new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    pdf.output(str(output_path))


def export_to_file(content: str, output_path: Path, format: str = "md") -> Path:
    """
    Write content to a file in the given format.

    ``pdf`` renders the content (treated as Markdown) with fpdf2. Any other
    format is written as text; ``md`` forces a ``.md`` suffix.

    Returns:
        The path actually written
    """
    output_path = Path(output_path)
    fmt = format.lower()
    if fmt == "pdf":
        if output_path.suffix.lower() != ".pdf":
            output_path = output_path.with_suffix(".pdf")
        markdown_to_pdf(content, output_path)
    else:
        if fmt == "md" and output_path.suffix.lower() != ".md":
            output_path = output_path.with_suffix(".md")
        output_path.write_text(content)

    return output_path


def export_forms(result: TaxFilingResult, output_dir: Path) -> list[Path]:
    """Write each rendered form to its own file in ``output_dir``."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    suffix = FORMAT_SUFFIXES[result.output_format]

    written = []
    for form in result.forms:
        stem = f"{form.form_number.lower().replace(' ', '_')}_{result.filing_data.tax_year}"
        path = output_dir / f"{stem}{suffix}"
        path.write_text(form.content)
        written.append(path)
    return written
