"""Pydantic request/response schemas for the FastAPI endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from formfill.documents.models import DocumentClass, DocumentStatus, ExtractedRecord
from formfill.extraction.modes import ExtractionMode


class RecordSchema(BaseModel):
    """Identity profile on the wire, using camelCase field names."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    father_name: str | None = Field(default=None, alias="fatherName")
    date_of_birth: str | None = Field(default=None, alias="dateOfBirth")
    gender: str | None = None
    address: str | None = None
    district: str | None = None
    state: str | None = None
    pincode: str | None = None
    aadhaar_number: str | None = Field(default=None, alias="aadhaarNumber")
    pan_number: str | None = Field(default=None, alias="panNumber")
    voter_id_number: str | None = Field(default=None, alias="voterIdNumber")
    driving_license_number: str | None = Field(
        default=None, alias="drivingLicenseNumber"
    )
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)

    @classmethod
    def from_record(cls, record: ExtractedRecord) -> "RecordSchema":
        return cls.model_validate(record.to_payload())

    def to_record(self) -> ExtractedRecord:
        return ExtractedRecord.from_payload(self.model_dump(by_alias=True))


class DocumentOutcomeResponse(BaseModel):
    """Processing outcome for one uploaded document."""

    document_id: str
    filename: str
    document_class: DocumentClass
    status: DocumentStatus
    mode: ExtractionMode | None = None
    error: str | None = None
    error_kind: str | None = None


class MergeResponse(BaseModel):
    """Response schema for a multi-document extraction request."""

    success: bool
    empty: bool
    message: str
    extracted: RecordSchema
    working: RecordSchema
    documents: list[DocumentOutcomeResponse]
    extraction_calls: int
    fallback_used: bool
    processing_time_ms: float


class ValidateRequest(BaseModel):
    field: str
    value: str | None = None


class ValidateResponse(BaseModel):
    """Result of validating one identifier value."""

    field: str
    sanitized: str | None
    is_valid: bool
    canonical_form: str | None = None
    error_message: str | None = None


class DocumentTypeInfo(BaseModel):
    """A recognised document class and how it is detected and scanned."""

    document_class: DocumentClass
    filename_aliases: list[str]
    secondary_mode: ExtractionMode


class DocumentTypesResponse(BaseModel):
    document_types: list[DocumentTypeInfo]


class HealthResponse(BaseModel):
    """Response schema for the health check endpoint."""

    status: str
    version: str
    gateway_configured: bool
