"""Federal tax bracket and filing deadline calculations.

These are pure functions shared by the filing pipeline, the tool layer,
and the CLI.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime

from filing_buddy.models.taxpayer import FILING_STATUSES, FilingStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TaxBracket:
    """One marginal bracket. ``max_income`` of None means unbounded."""

    min_income: float
    max_income: float | None
    rate: float
    label: str


@dataclass(frozen=True)
class TaxCalculationResult:
    """Result of running the bracket engine on a gross income."""

    taxable_income: float
    tax_amount: float
    effective_rate: float
    bracket: TaxBracket


def _build_brackets(thresholds: list[tuple[float, float]]) -> list[TaxBracket]:
    """Turn (upper threshold, rate) pairs into contiguous brackets from zero."""
    brackets = []
    lower = 0.0
    for upper, rate in thresholds:
        max_income = None if upper == float("inf") else float(upper)
        brackets.append(TaxBracket(lower, max_income, rate, f"{rate:.0%} bracket"))
        if max_income is None:
            break
        lower = max_income
    return brackets


# 2024 Tax Brackets (Federal)
_SINGLE_2024 = _build_brackets([
    (11600, 0.10),
    (47150, 0.12),
    (100525, 0.22),
    (191950, 0.24),
    (243725, 0.32),
    (609350, 0.35),
    (float("inf"), 0.37),
])

_MARRIED_2024 = _build_brackets([
    (23200, 0.10),
    (94300, 0.12),
    (201050, 0.22),
    (383900, 0.24),
    (487450, 0.32),
    (731200, 0.35),
    (float("inf"), 0.37),
])

_HEAD_OF_HOUSEHOLD_2024 = _build_brackets([
    (16550, 0.10),
    (63100, 0.12),
    (100500, 0.22),
    (191950, 0.24),
    (243700, 0.32),
    (609350, 0.35),
    (float("inf"), 0.37),
])

TAX_BRACKETS: dict[FilingStatus, list[TaxBracket]] = {
    FilingStatus.SINGLE: _SINGLE_2024,
    FilingStatus.MARRIED: _MARRIED_2024,
    FilingStatus.HEAD_OF_HOUSEHOLD: _HEAD_OF_HOUSEHOLD_2024,
    # Qualifying surviving spouses use the joint rate schedule
    FilingStatus.QUALIFYING_WIDOW: _MARRIED_2024,
}

_STATUS_ALIASES = {
    "married_filing_jointly": FilingStatus.MARRIED,
    "mfj": FilingStatus.MARRIED,
    "hoh": FilingStatus.HEAD_OF_HOUSEHOLD,
    "qualifying_surviving_spouse": FilingStatus.QUALIFYING_WIDOW,
    "qualifying_widower": FilingStatus.QUALIFYING_WIDOW,
}

_WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def resolve_filing_status(filing_status: FilingStatus | str | None) -> FilingStatus:
    """
    Map a filing status string to a FilingStatus.

    Case, spaces and dashes are normalized. Anything unrecognized falls back
    to SINGLE, and the fallback is logged.

    Args:
        filing_status: Filing status value or name

    Returns:
        The resolved FilingStatus
    """
    if isinstance(filing_status, FilingStatus):
        return filing_status

    status = str(filing_status or "").strip().lower().replace(" ", "_").replace("-", "_")
    if status in _STATUS_ALIASES:
        return _STATUS_ALIASES[status]
    try:
        return FilingStatus(status)
    except ValueError:
        logger.warning(f"Unknown filing status {filing_status!r}, falling back to single")
        return FilingStatus.SINGLE


def is_known_filing_status(filing_status: FilingStatus | str | None) -> bool:
    """Check whether a filing status resolves without falling back to single."""
    if isinstance(filing_status, FilingStatus):
        return True
    status = str(filing_status or "").strip().lower().replace(" ", "_").replace("-", "_")
    return status in _STATUS_ALIASES or status in {s.value for s in FilingStatus}


def get_tax_brackets(filing_status: FilingStatus | str = FilingStatus.SINGLE) -> list[TaxBracket]:
    """Get the 2024 bracket table for a filing status (single for unknown statuses)."""
    return TAX_BRACKETS[resolve_filing_status(filing_status)]


def get_standard_deduction(filing_status: FilingStatus | str = FilingStatus.SINGLE) -> float:
    """Get the 2024 standard deduction for a filing status (single for unknown statuses)."""
    return FILING_STATUSES[resolve_filing_status(filing_status)].standard_deduction


def tax_on_taxable_income(
    taxable_income: float,
    filing_status: FilingStatus | str = FilingStatus.SINGLE,
) -> tuple[float, TaxBracket]:
    """
    Apply the bracket table to an amount that is already net of deductions.

    Args:
        taxable_income: Income after deductions
        filing_status: Filing status

    Returns:
        Tuple of (tax, marginal bracket). The lowest bracket is returned
        when no income is taxed.
    """
    brackets = get_tax_brackets(filing_status)
    taxable_income = max(0.0, taxable_income)

    tax = 0.0
    marginal: TaxBracket | None = None

    for bracket in brackets:
        if taxable_income <= bracket.min_income:
            break

        upper = taxable_income if bracket.max_income is None else min(taxable_income, bracket.max_income)
        tax += (upper - bracket.min_income) * bracket.rate
        marginal = bracket

    return tax, marginal or brackets[0]


def calculate_tax(
    income: float,
    filing_status: FilingStatus | str = FilingStatus.SINGLE,
) -> TaxCalculationResult:
    """
    Calculate federal income tax on gross income.

    The standard deduction for the filing status is subtracted first,
    then the progressive brackets are applied.

    Args:
        income: Annual gross income
        filing_status: Filing status (unknown statuses use single)

    Returns:
        TaxCalculationResult with taxable income, tax, effective rate and
        marginal bracket
    """
    status = resolve_filing_status(filing_status)
    taxable_income = max(0.0, income - get_standard_deduction(status))
    tax, bracket = tax_on_taxable_income(taxable_income, status)
    effective_rate = (tax / taxable_income * 100) if taxable_income > 0 else 0.0

    return TaxCalculationResult(
        taxable_income=taxable_income,
        tax_amount=tax,
        effective_rate=effective_rate,
        bracket=bracket,
    )


def _weekday(year: int, month: int, day: int) -> int:
    """Day of week (Monday=0) in the proleptic Gregorian calendar, for any year."""
    offsets = [0, 3, 2, 5, 0, 3, 5, 1, 4, 6, 2, 4]
    y = year - 1 if month < 3 else year
    sunday_based = (y + y // 4 - y // 100 + y // 400 + offsets[month - 1] + day) % 7
    return (sunday_based - 1) % 7


def _deadline_day(year: int) -> int:
    """Day in April of the weekend-adjusted deadline."""
    day = 15
    while _weekday(year, 4, day) >= 5:
        day += 1
    return day


def get_filing_deadline_date(year: int) -> date:
    """
    Get the filing deadline for a year as a date.

    April 15, moved forward to Monday when it falls on a weekend.

    Raises:
        ValueError: If the year is outside what ``datetime.date`` supports
    """
    return date(year, 4, _deadline_day(year))


def get_filing_deadline(year: int | None = None) -> str:
    """
    Get the filing deadline for a year as display text.

    Works for any integer year, e.g. ``"Tuesday, April 15, 2025"``.

    Args:
        year: Calendar year of the deadline (defaults to current year)

    Returns:
        Formatted deadline with weekday name
    """
    year = datetime.now().year if year is None else year
    day = _deadline_day(year)
    return f"{_WEEKDAYS[_weekday(year, 4, day)]}, April {day}, {year}"


def days_until_deadline(year: int, today: date | None = None) -> int:
    """Days from ``today`` to the year's deadline (negative once it has passed)."""
    today = today or date.today()
    return (get_filing_deadline_date(year) - today).days
