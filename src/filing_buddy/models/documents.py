"""Tax document models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DocumentType(str, Enum):
    """Types of tax documents accepted for upload."""

    W2 = "w2"
    FORM_1099 = "1099"
    FORM_1095 = "1095"  # Health coverage
    SCHEDULE_C = "schedule_c"  # Business income
    SCHEDULE_D = "schedule_d"  # Capital gains
    SCHEDULE_E = "schedule_e"  # Rental/royalty income
    FORM_1040 = "form_1040"
    OTHER = "other"


DOCUMENT_TYPE_LABELS: dict[DocumentType, str] = {
    DocumentType.W2: "W-2",
    DocumentType.FORM_1099: "1099",
    DocumentType.FORM_1095: "1095",
    DocumentType.SCHEDULE_C: "Schedule C",
    DocumentType.SCHEDULE_D: "Schedule D",
    DocumentType.SCHEDULE_E: "Schedule E",
    DocumentType.FORM_1040: "Form 1040",
    DocumentType.OTHER: "Other",
}


def parse_document_type(value: DocumentType | str | None) -> DocumentType | None:
    """Coerce a user-supplied document type.

    Blank values yield None so validation can report the missing type;
    any other unknown value maps to OTHER.
    """
    if isinstance(value, DocumentType):
        return value
    if value is None or not str(value).strip():
        return None
    normalized = str(value).strip().lower().replace("-", "").replace(" ", "_")
    aliases = {"w2": "w2", "1040": "form_1040"}
    normalized = aliases.get(normalized, normalized)
    try:
        return DocumentType(normalized)
    except ValueError:
        return DocumentType.OTHER


class TaxDocument(BaseModel):
    """An uploaded tax document. Immutable once stored."""

    id: str = Field(description="Unique identifier for the document")
    document_type: DocumentType | None = Field(description="Type of tax document, None when not given")
    filename: str = Field(description="Original filename")
    content: str = Field(description="Raw text content of the document")
    content_hash: str = Field(default="", description="SHA-256 hash of the content")
    uploaded_at: datetime = Field(default_factory=datetime.now)

    model_config = ConfigDict(frozen=True)
