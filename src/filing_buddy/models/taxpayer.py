"""Filing status reference data."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FilingStatus(str, Enum):
    """IRS filing status options."""

    SINGLE = "single"
    MARRIED = "married"  # Married filing jointly
    HEAD_OF_HOUSEHOLD = "head_of_household"
    QUALIFYING_WIDOW = "qualifying_widow"


class FilingStatusInfo(BaseModel):
    """Description and standard deduction for one filing status."""

    status: FilingStatus
    description: str
    standard_deduction: float = Field(ge=0)

    model_config = ConfigDict(frozen=True)


# 2024 standard deductions
FILING_STATUSES: dict[FilingStatus, FilingStatusInfo] = {
    FilingStatus.SINGLE: FilingStatusInfo(
        status=FilingStatus.SINGLE,
        description="Single filer",
        standard_deduction=14600,
    ),
    FilingStatus.MARRIED: FilingStatusInfo(
        status=FilingStatus.MARRIED,
        description="Married filing jointly",
        standard_deduction=29200,
    ),
    FilingStatus.HEAD_OF_HOUSEHOLD: FilingStatusInfo(
        status=FilingStatus.HEAD_OF_HOUSEHOLD,
        description="Head of household",
        standard_deduction=21900,
    ),
    FilingStatus.QUALIFYING_WIDOW: FilingStatusInfo(
        status=FilingStatus.QUALIFYING_WIDOW,
        description="Qualifying widow(er)",
        standard_deduction=29200,
    ),
}
