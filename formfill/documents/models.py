"""Core data model: uploaded documents and extracted identity records.

``ExtractedRecord`` is the unit that flows between the extraction client,
the merge engine, the review session and the exporter. Every field is
optional; wire payloads use the camelCase names the vision model returns.
"""

import math
import uuid
from dataclasses import dataclass, field, fields, replace
from enum import StrEnum
from typing import Any


class DocumentClass(StrEnum):
    """Identity document types recognised from upload filenames."""

    AADHAAR = "aadhaar"
    PAN = "pan"
    VOTER_ID = "voterId"
    DRIVING_LICENSE = "drivingLicense"
    OTHER = "other"


class DocumentStatus(StrEnum):
    """Lifecycle of an uploaded document."""

    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class Gender(StrEnum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


_TRANSITIONS: dict[DocumentStatus, set[DocumentStatus]] = {
    DocumentStatus.UPLOADING: {DocumentStatus.PROCESSING, DocumentStatus.ERROR},
    DocumentStatus.PROCESSING: {DocumentStatus.COMPLETED, DocumentStatus.ERROR},
    DocumentStatus.COMPLETED: set(),
    DocumentStatus.ERROR: set(),
}

# Checked in order; the first class with a matching alias wins.
FILENAME_ALIASES: list[tuple[DocumentClass, tuple[str, ...]]] = [
    (
        DocumentClass.AADHAAR,
        ("aadhaar", "aadhar", "addhar", "adhar", "aadhr", "uidai"),
    ),
    (DocumentClass.PAN, ("pan",)),
    (DocumentClass.VOTER_ID, ("voter", "epic")),
    (DocumentClass.DRIVING_LICENSE, ("license", "dl")),
]

_GENDER_ALIASES: dict[str, Gender] = {
    "m": Gender.MALE,
    "male": Gender.MALE,
    "f": Gender.FEMALE,
    "female": Gender.FEMALE,
    "t": Gender.OTHER,
    "other": Gender.OTHER,
    "transgender": Gender.OTHER,
}


def classify_filename(filename: str) -> DocumentClass:
    """Infer the document class from keywords in a filename.

    Args:
        filename: Original upload filename.

    Returns:
        The first class whose alias occurs in the lowercased name,
        or ``DocumentClass.OTHER``.
    """
    lower = filename.lower()
    for document_class, aliases in FILENAME_ALIASES:
        if any(alias in lower for alias in aliases):
            return document_class
    return DocumentClass.OTHER


def _new_document_id() -> str:
    return f"doc-{uuid.uuid4().hex}"


@dataclass
class UploadedDocument:
    """A single uploaded file awaiting or undergoing extraction."""

    filename: str
    content: bytes
    mime_type: str
    document_class: DocumentClass
    status: DocumentStatus = DocumentStatus.UPLOADING
    document_id: str = field(default_factory=_new_document_id)

    def advance(self, status: DocumentStatus) -> None:
        """Move the document to the next lifecycle status.

        Raises:
            ValueError: If the transition is not allowed.
        """
        if status not in _TRANSITIONS[self.status]:
            raise ValueError(
                f"Cannot move document {self.document_id} "
                f"from {self.status} to {status}"
            )
        self.status = status


# Record attribute name -> wire (camelCase) name.
WIRE_NAMES: dict[str, str] = {
    "name": "name",
    "father_name": "fatherName",
    "date_of_birth": "dateOfBirth",
    "gender": "gender",
    "address": "address",
    "district": "district",
    "state": "state",
    "pincode": "pincode",
    "aadhaar_number": "aadhaarNumber",
    "pan_number": "panNumber",
    "voter_id_number": "voterIdNumber",
    "driving_license_number": "drivingLicenseNumber",
    "confidence": "confidence",
}


def record_field_name(name: str) -> str:
    """Record attribute for a wire (camelCase) field name; other names pass through."""
    for attr, wire in WIRE_NAMES.items():
        if wire == name:
            return attr
    return name


@dataclass
class ExtractedRecord:
    """Identity details extracted from one or more documents."""

    name: str | None = None
    father_name: str | None = None
    date_of_birth: str | None = None
    gender: Gender | None = None
    address: str | None = None
    district: str | None = None
    state: str | None = None
    pincode: str | None = None
    aadhaar_number: str | None = None
    pan_number: str | None = None
    voter_id_number: str | None = None
    driving_license_number: str | None = None
    confidence: float | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ExtractedRecord":
        """Build a record from a model or API JSON object.

        Accepts camelCase or snake_case keys. Blank strings become absent,
        numbers are stringified, gender is normalised and confidence is
        clamped to ``[0, 1]``. Unknown keys are ignored.
        """
        values: dict[str, Any] = {}
        for attr, wire in WIRE_NAMES.items():
            raw = payload.get(wire, payload.get(attr))
            if attr == "confidence":
                values[attr] = _coerce_confidence(raw)
            elif attr == "gender":
                values[attr] = _coerce_gender(raw)
            else:
                values[attr] = _coerce_text(raw)
        return cls(**values)

    def to_payload(self) -> dict[str, Any]:
        """Return the present fields keyed by their wire names."""
        payload: dict[str, Any] = {}
        for attr, wire in WIRE_NAMES.items():
            value = getattr(self, attr)
            if value is not None:
                payload[wire] = str(value) if attr == "gender" else value
        return payload

    def copy(self) -> "ExtractedRecord":
        return replace(self)

    def present_fields(self) -> list[str]:
        """Names of fields holding a value, in declaration order."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def is_empty(self) -> bool:
        """True when nothing but (at most) a confidence score is present."""
        return all(name == "confidence" for name in self.present_fields())


def _coerce_text(raw: Any) -> str | None:
    if raw is None or isinstance(raw, (dict, list, bool)):
        return None
    text = str(raw).strip()
    return text or None


def _coerce_gender(raw: Any) -> Gender | None:
    text = _coerce_text(raw)
    if text is None:
        return None
    return _GENDER_ALIASES.get(text.lower())


def _coerce_confidence(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(value):
        return None
    return max(0.0, min(1.0, value))
