"""CLI commands for the filing buddy."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from filing_buddy.config import AI_PROVIDER_AWS_BEDROCK, get_config
from filing_buddy.env import load_env
from filing_buddy.exceptions import FilingBuddyError
from filing_buddy.models.documents import DocumentType
from filing_buddy.models.taxpayer import FILING_STATUSES
from filing_buddy.tools.tax_calculations import (
    calculate_tax,
    get_standard_deduction,
    get_tax_brackets,
    is_known_filing_status,
    resolve_filing_status,
)
from filing_buddy.utils import format_currency, format_percent

# Load .env file early so all env vars are available
load_env()

app = typer.Typer(
    name="filing-buddy",
    help="Federal tax calculator and mock filing pipeline.",
    invoke_without_command=True,
)
config_app = typer.Typer(help="Manage configuration")
app.add_typer(config_app, name="config")
console = Console()

# Filename fragments used to guess a document's type
_TYPE_HINTS = [
    ("w2", DocumentType.W2),
    ("w-2", DocumentType.W2),
    ("1099", DocumentType.FORM_1099),
    ("1095", DocumentType.FORM_1095),
    ("1040", DocumentType.FORM_1040),
    ("schedule_c", DocumentType.SCHEDULE_C),
    ("schedule_d", DocumentType.SCHEDULE_D),
    ("schedule_e", DocumentType.SCHEDULE_E),
]


def guess_document_type(path: Path) -> DocumentType:
    """Guess a document type from its filename."""
    name = path.name.lower()
    for hint, document_type in _TYPE_HINTS:
        if hint in name:
            return document_type
    return DocumentType.OTHER


def _upload_files(session, files: list[Path], document_type: str | None) -> list[str]:
    """Read and upload files into a session, returning their ids."""
    ids = []
    for path in files:
        if not path.exists():
            rprint(f"[red]File not found: {path}[/red]")
            raise typer.Exit(1)
        doc_type = document_type or guess_document_type(path)
        ids.append(session.upload_document(path.name, path.read_text(), doc_type))
    return ids


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[bool, typer.Option("--version", help="Show version")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
) -> None:
    """
    Filing Buddy - federal tax estimates and filing generation.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if version:
        rprint("filing-buddy version 0.1.0")
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command()
def calculate(
    income: Annotated[float, typer.Argument(help="Annual gross income in USD")],
    status: Annotated[str, typer.Option("--status", "-s", help="Filing status")] = "single",
) -> None:
    """Calculate federal income tax for a gross income."""
    if not is_known_filing_status(status):
        rprint(f"[yellow]Unknown filing status '{status}', using single.[/yellow]")
    resolved = resolve_filing_status(status)
    result = calculate_tax(income, resolved)

    table = Table(title="Tax Calculation")
    table.add_column("Item", style="cyan")
    table.add_column("Amount", style="green", justify="right")
    table.add_row("Filing Status", FILING_STATUSES[resolved].description)
    table.add_row("Gross Income", format_currency(income))
    table.add_row("Standard Deduction", format_currency(get_standard_deduction(resolved)))
    table.add_row("Taxable Income", format_currency(result.taxable_income))
    table.add_row("Tax Amount", format_currency(result.tax_amount))
    table.add_row("Effective Rate", format_percent(result.effective_rate))
    table.add_row("Marginal Bracket", result.bracket.label)
    console.print(table)


@app.command("filing-status")
def filing_status(
    status: Annotated[Optional[str], typer.Argument(help="Filing status to describe")] = None,
) -> None:
    """Show filing statuses, or the brackets for one status."""
    if status is None:
        table = Table(title="Filing Statuses (2024)")
        table.add_column("Status", style="cyan")
        table.add_column("Description")
        table.add_column("Standard Deduction", style="green", justify="right")
        for key, info in FILING_STATUSES.items():
            table.add_row(key.value, info.description, format_currency(info.standard_deduction))
        console.print(table)
        return

    if not is_known_filing_status(status):
        rprint(f"[red]Unknown filing status: {status}[/red]")
        raise typer.Exit(1)

    resolved = resolve_filing_status(status)
    info = FILING_STATUSES[resolved]
    table = Table(title=f"{info.description} - Standard Deduction {format_currency(info.standard_deduction)}")
    table.add_column("Bracket", style="cyan")
    table.add_column("From", justify="right")
    table.add_column("To", justify="right")
    for bracket in get_tax_brackets(resolved):
        upper = format_currency(bracket.max_income) if bracket.max_income is not None else "unlimited"
        table.add_row(bracket.label, format_currency(bracket.min_income), upper)
    console.print(table)


@app.command()
def deadline(
    year: Annotated[Optional[int], typer.Option("--year", "-y", help="Calendar year")] = None,
) -> None:
    """Show the filing deadline for a year."""
    from filing_buddy.tools.filing_tools import get_filing_deadline_tool

    response = get_filing_deadline_tool(year)
    if response.is_error:
        rprint(f"[red]{response.text}[/red]")
        raise typer.Exit(1)
    rprint(response.text)


@app.command()
def assist(
    question: Annotated[str, typer.Argument(help="Tax question or topic")],
) -> None:
    """Get general guidance on a tax topic."""
    from filing_buddy.tools.filing_tools import get_tax_assistance

    rprint(Panel(get_tax_assistance(question).text, title="Tax Assistance", border_style="blue"))


@app.command()
def validate(
    files: Annotated[list[Path], typer.Argument(help="Document text files")],
    document_type: Annotated[
        Optional[str], typer.Option("--type", "-t", help="Document type for all files (guessed if omitted)")
    ] = None,
) -> None:
    """Validate tax documents without processing them."""
    from filing_buddy.session import FilingSession

    session = FilingSession()
    ids = _upload_files(session, files, document_type)
    result = session.validate_documents(ids)

    for error in result.errors:
        rprint(f"[red]✗ {error}[/red]")
    for warning in result.warnings:
        rprint(f"[yellow]! {warning}[/yellow]")

    if result.is_valid:
        rprint(f"[green]{len(ids)} document(s) passed validation.[/green]")
    else:
        raise typer.Exit(1)


@app.command(name="file")
def file_return(
    files: Annotated[list[Path], typer.Argument(help="Document text files")],
    status: Annotated[Optional[str], typer.Option("--status", "-s", help="Filing status")] = None,
    year: Annotated[Optional[int], typer.Option("--year", "-y", help="Tax year")] = None,
    output_format: Annotated[
        Optional[str], typer.Option("--format", "-f", help="json, xml, irs_efile, mail_ready or text")
    ] = None,
    document_type: Annotated[
        Optional[str], typer.Option("--type", "-t", help="Document type for all files (guessed if omitted)")
    ] = None,
    output: Annotated[Optional[Path], typer.Option("--output", "-o", help="Write a report (.md or .pdf)")] = None,
    forms_dir: Annotated[Optional[Path], typer.Option("--forms-dir", help="Write each form to this directory")] = None,
) -> None:
    """Generate a tax filing from document text files.

    Examples:
        filing-buddy file w2_2024.txt 1099_int_2024.txt
        filing-buddy file w2_2024.txt -f xml --forms-dir out/
        filing-buddy file w2_2024.txt -o filing.pdf
    """
    from filing_buddy.exporters import export_filing_markdown, export_forms, export_to_file
    from filing_buddy.session import FilingSession
    from filing_buddy.tools.filing_tools import format_filing_result

    session = FilingSession()
    ids = _upload_files(session, files, document_type)

    validation = session.validate_documents(ids)
    for warning in validation.warnings:
        rprint(f"[yellow]! {warning}[/yellow]")
    for error in validation.errors:
        rprint(f"[red]✗ {error}[/red]")

    try:
        with console.status("[bold green]Generating filing..."):
            result = session.generate_filing(ids, status, year, output_format)
    except FilingBuddyError as e:
        rprint(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(format_filing_result(result), markup=False, highlight=False)

    if forms_dir:
        for path in export_forms(result, forms_dir):
            rprint(f"[green]Wrote {path}[/green]")

    if output:
        fmt = "pdf" if output.suffix.lower() == ".pdf" else "md"
        path = export_to_file(export_filing_markdown(result), output, fmt)
        rprint(f"[green]Exported to: {path}[/green]")


@config_app.command("set")
def config_set(
    key: Annotated[str, typer.Argument(help="Configuration key")],
    value: Annotated[str, typer.Argument(help="Configuration value")],
) -> None:
    """Set a configuration value."""
    config = get_config()

    key_lower = key.lower()
    valid_keys = [
        "tax_year", "filing_status", "output_format", "extractor", "ai_provider",
        "model", "aws_region", "extraction_timeout", "auto_redact_ssn", "strict_validation",
    ]
    if key_lower not in valid_keys:
        rprint(f"[red]Unknown configuration key: {key}[/red]")
        rprint(f"Valid keys: {', '.join(valid_keys)}")
        raise typer.Exit(1)

    try:
        if key_lower == "tax_year":
            config.tax_year = int(value)
        elif key_lower == "extraction_timeout":
            config.set(key_lower, float(value))
        elif key_lower in ("auto_redact_ssn", "strict_validation"):
            config.set(key_lower, value.lower() in ("true", "1", "yes"))
        elif key_lower == "ai_provider":
            config.ai_provider = value.lower()
        elif key_lower == "extractor":
            config.extractor = value.lower()
        else:
            config.set(key_lower, value)
    except ValueError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    rprint(f"[green]Set {key_lower} = {config.get(key_lower)}[/green]")


@config_app.command("get")
def config_get(
    key: Annotated[Optional[str], typer.Argument(help="Configuration key")] = None,
) -> None:
    """Get configuration value(s)."""
    config = get_config()

    if key:
        value = config.get(key.lower())
        if value is None:
            rprint(f"[yellow]{key} is not set[/yellow]")
        else:
            rprint(f"{key} = {value}")
        return

    table = Table(title="Configuration")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    for k, v in config.to_dict().items():
        table.add_row(k, str(v) if v is not None else "[dim]Not set[/dim]")

    if config.ai_provider == AI_PROVIDER_AWS_BEDROCK:
        table.add_row("credentials", "AWS default chain")
    else:
        table.add_row("api_key", "Configured" if config.get_api_key() else "[red]Not set[/red]")
    console.print(table)


@config_app.command("api-key")
def config_api_key() -> None:
    """Store the Anthropic API key in the system keyring."""
    config = get_config()

    api_key = Prompt.ask("[bold]Enter your Anthropic API key[/bold]", password=True)
    if not api_key.strip():
        rprint("[yellow]No key entered. API key unchanged.[/yellow]")
        return

    config.set_api_key(api_key.strip())
    rprint("[green]API key updated successfully.[/green]")


if __name__ == "__main__":
    app()
