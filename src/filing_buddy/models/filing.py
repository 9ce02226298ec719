"""Models for extracted filing data, calculated tax and generated output."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from filing_buddy.models.taxpayer import FilingStatus


class OutputFormat(str, Enum):
    """Rendering formats for generated forms."""

    JSON = "json"
    XML = "xml"
    IRS_EFILE = "irs_efile"
    MAIL_READY = "mail_ready"
    TEXT = "text"

    @classmethod
    def parse(cls, value: "OutputFormat | str | None") -> "OutputFormat":
        """Resolve a format name; unknown names fall back to plain text."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.TEXT


class Address(BaseModel):
    """Mailing address."""

    street: str
    city: str
    state: str
    zip_code: str = Field(alias="zipCode")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class PersonalInfo(BaseModel):
    """Taxpayer identity as extracted from documents. SSN is always masked."""

    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    ssn: str = Field(description="Masked SSN, e.g. ***-**-1234")
    address: Address
    date_of_birth: str = Field(alias="dateOfBirth", description="YYYY-MM-DD")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class IncomeData(BaseModel):
    """Income breakdown. ``total_income`` is always recomputed from the fields."""

    wages: float
    self_employment: float = Field(alias="selfEmployment")
    interest: float
    dividends: float
    capital_gains: float = Field(alias="capitalGains")
    rental_income: float = Field(alias="rentalIncome")
    other_income: float = Field(alias="otherIncome")
    total_income: float = Field(default=0.0, alias="totalIncome")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="after")
    def _recompute_total(self) -> "IncomeData":
        total = (
            self.wages + self.self_employment + self.interest + self.dividends
            + self.capital_gains + self.rental_income + self.other_income
        )
        object.__setattr__(self, "total_income", total)
        return self


class DeductionData(BaseModel):
    """Deduction breakdown. ``total_deductions`` is always recomputed."""

    itemized_deductions: float = Field(alias="itemizedDeductions")
    business_expenses: float = Field(alias="businessExpenses")
    retirement_contributions: float = Field(alias="retirementContributions", ge=0)
    health_savings_account: float = Field(alias="healthSavingsAccount", ge=0)
    total_deductions: float = Field(default=0.0, alias="totalDeductions")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="after")
    def _recompute_total(self) -> "DeductionData":
        total = (
            self.itemized_deductions + self.business_expenses
            + self.retirement_contributions + self.health_savings_account
        )
        object.__setattr__(self, "total_deductions", total)
        return self


class CreditData(BaseModel):
    """Credit breakdown. ``total_credits`` is always recomputed."""

    child_tax_credit: float = Field(alias="childTaxCredit")
    earned_income_credit: float = Field(alias="earnedIncomeCredit")
    education_credits: float = Field(alias="educationCredits")
    other_credits: float = Field(alias="otherCredits")
    total_credits: float = Field(default=0.0, alias="totalCredits")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @model_validator(mode="after")
    def _recompute_total(self) -> "CreditData":
        total = (
            self.child_tax_credit + self.earned_income_credit
            + self.education_credits + self.other_credits
        )
        object.__setattr__(self, "total_credits", total)
        return self


class ExtractedFilingData(BaseModel):
    """Structured data produced once per processing request by an extractor."""

    personal_info: PersonalInfo = Field(alias="personalInfo")
    income: IncomeData
    deductions: DeductionData
    credits: CreditData
    filing_status: FilingStatus = Field(default=FilingStatus.SINGLE, alias="filingStatus")
    tax_year: int = Field(default=2024, alias="taxYear")

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class DeductionType(str, Enum):
    """Which deduction was applied."""

    STANDARD = "standard"
    ITEMIZED = "itemized"


class CalculatedTax(BaseModel):
    """Snapshot of a complete tax computation."""

    gross_income: float
    adjusted_gross_income: float
    taxable_income: float
    deduction_used: float
    deduction_type: DeductionType
    federal_tax: float
    credits: float
    final_tax: float
    effective_rate: float

    model_config = ConfigDict(frozen=True)


class GeneratedForm(BaseModel):
    """A rendered tax form."""

    form_type: str
    form_number: str
    content: str
    instructions: str

    model_config = ConfigDict(frozen=True)


class FilingSummary(BaseModel):
    """Bottom line of a filing."""

    total_income: float
    total_deductions: float
    total_credits: float
    tax_owed: float
    refund_amount: float
    filing_deadline: str
    estimated_processing_time: str

    model_config = ConfigDict(frozen=True)


class TaxFilingResult(BaseModel):
    """Complete output of a filing request."""

    filing_data: ExtractedFilingData
    calculated_tax: CalculatedTax
    forms: list[GeneratedForm] = Field(min_length=1)
    summary: FilingSummary
    output_format: OutputFormat = OutputFormat.TEXT

    model_config = ConfigDict(frozen=True)

    def get_form(self, form_number: str) -> GeneratedForm | None:
        """Look up a generated form by its number (e.g. ``"1040"``)."""
        for form in self.forms:
            if form.form_number == form_number:
                return form
        return None
