"""Multi-document merge engine.

Reconciles independent per-document extractions into one profile.
Aadhaar cards are the canonical identity source and are processed first,
so every Aadhaar image (front and back) gets a full scan. Other documents
only contribute their own identifier unless no Aadhaar was uploaded.

The planning step and the fold are pure functions. ``MergeEngine`` wires
them to an extraction client and runs the documents strictly in sequence,
since the fold depends on processing order.
"""

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import StrEnum

from formfill.documents.models import (
    DocumentClass,
    DocumentStatus,
    ExtractedRecord,
    UploadedDocument,
)
from formfill.extraction.client import ExtractionClient
from formfill.extraction.errors import ExtractionError
from formfill.extraction.modes import ExtractionMode, mode_for
from formfill.utils.logger import get_logger
from formfill.validation.identifiers import FieldValidator

logger = get_logger(__name__)

# Fields an Aadhaar scan fills first-come-first-served.
PERSONAL_FIELDS: tuple[str, ...] = (
    "name",
    "father_name",
    "date_of_birth",
    "gender",
    "address",
    "district",
    "state",
    "pincode",
    "aadhaar_number",
)
DOCUMENT_NUMBER_FIELDS: tuple[str, ...] = (
    "pan_number",
    "voter_id_number",
    "driving_license_number",
)
IDENTIFIER_FIELDS: dict[DocumentClass, str] = {
    DocumentClass.PAN: "pan_number",
    DocumentClass.VOTER_ID: "voter_id_number",
    DocumentClass.DRIVING_LICENSE: "driving_license_number",
}

# A PAN father's name replaces the current one only when it has at least
# this many words and more words than the current one.
MIN_PAN_FATHER_NAME_TOKENS = 3


class NoDocumentsError(ValueError):
    """Raised when a merge is requested without any uploaded document."""


class DocumentRole(StrEnum):
    """How a document's extraction is folded into the profile."""

    AADHAAR = "aadhaar"
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class PlannedExtraction:
    """One step of the processing order."""

    position: int
    document: UploadedDocument
    role: DocumentRole
    mode: ExtractionMode


@dataclass
class DocumentOutcome:
    """Result of one extraction call made during a merge."""

    document_id: str
    document_class: DocumentClass
    mode: ExtractionMode
    role: DocumentRole
    succeeded: bool
    error: str | None = None
    error_kind: str | None = None
    fallback: bool = False


@dataclass
class MergeResult:
    """Merged profile plus a trace of every extraction call."""

    extracted: ExtractedRecord
    working: ExtractedRecord
    outcomes: list[DocumentOutcome] = field(default_factory=list)
    fallback_used: bool = False

    @property
    def extraction_calls(self) -> int:
        return len(self.outcomes)

    @property
    def is_empty(self) -> bool:
        """True when the run completed but nothing usable was extracted."""
        return self.extracted.is_empty()

    def status_for(self, document_id: str) -> DocumentStatus:
        """Final lifecycle status for a document of this run."""
        if any(o.succeeded for o in self.outcomes if o.document_id == document_id):
            return DocumentStatus.COMPLETED
        return DocumentStatus.ERROR


def is_primary_position(position: int, classes: Sequence[DocumentClass]) -> bool:
    """Whether the document at ``position`` of the processing order is primary.

    Only the first document can be primary, and only when it is an Aadhaar
    card or when no Aadhaar card is present at all.
    """
    if position != 0 or not classes:
        return False
    return classes[0] == DocumentClass.AADHAAR or DocumentClass.AADHAAR not in classes


def plan_processing_order(
    documents: Sequence[UploadedDocument],
) -> list[PlannedExtraction]:
    """Order documents for processing and assign each a role and mode.

    All Aadhaar documents come first in upload order, followed by the
    rest in upload order. Without Aadhaar the upload order is kept.
    """
    aadhaar_docs = [d for d in documents if d.document_class == DocumentClass.AADHAAR]
    other_docs = [d for d in documents if d.document_class != DocumentClass.AADHAAR]
    ordered = [*aadhaar_docs, *other_docs] if aadhaar_docs else list(documents)
    classes = [d.document_class for d in ordered]

    plan: list[PlannedExtraction] = []
    for position, document in enumerate(ordered):
        if document.document_class == DocumentClass.AADHAAR:
            role, mode = DocumentRole.AADHAAR, ExtractionMode.FULL
        else:
            is_primary = is_primary_position(position, classes)
            role = DocumentRole.PRIMARY if is_primary else DocumentRole.SECONDARY
            mode = mode_for(document.document_class, is_primary)
        plan.append(PlannedExtraction(position, document, role, mode))
    return plan


def token_count(text: str | None) -> int:
    """Number of whitespace-separated words in ``text``."""
    return len(text.split()) if text else 0


def _has_value(value: object) -> bool:
    if isinstance(value, str):
        return bool(value.strip())
    return value is not None


def _without_blanks(record: ExtractedRecord) -> ExtractedRecord:
    """Copy of ``record`` with blank strings treated as absent."""
    cleaned = record.copy()
    for name in cleaned.present_fields():
        if not _has_value(getattr(cleaned, name)):
            setattr(cleaned, name, None)
    return cleaned


def fold(
    accumulator: ExtractedRecord,
    role: DocumentRole,
    document_class: DocumentClass,
    extracted: ExtractedRecord,
    aadhaar_present: bool,
) -> ExtractedRecord:
    """Fold one extraction into the accumulated profile.

    Args:
        accumulator: Profile built from earlier documents. Not modified.
        role: Role of the document in the processing order.
        document_class: Class of the document the extraction came from.
        extracted: Fields returned for the document.
        aadhaar_present: Whether the batch contains any Aadhaar document.

    Returns:
        A new accumulated profile.
    """
    extracted = _without_blanks(extracted)
    if role is DocumentRole.AADHAAR:
        return _fold_aadhaar(accumulator, extracted)
    if role is DocumentRole.PRIMARY and not aadhaar_present:
        return _take_fields(extracted, (*PERSONAL_FIELDS, "confidence"))
    return _fold_secondary(accumulator, document_class, extracted, aadhaar_present)


def _fold_aadhaar(
    accumulator: ExtractedRecord, extracted: ExtractedRecord
) -> ExtractedRecord:
    merged = accumulator.copy()
    for name in PERSONAL_FIELDS:
        if not _has_value(getattr(merged, name)):
            setattr(merged, name, getattr(extracted, name))
    if extracted.confidence is not None:
        merged.confidence = extracted.confidence
    return merged


def _fold_secondary(
    accumulator: ExtractedRecord,
    document_class: DocumentClass,
    extracted: ExtractedRecord,
    aadhaar_present: bool,
) -> ExtractedRecord:
    merged = accumulator.copy()

    identifier = IDENTIFIER_FIELDS.get(document_class)
    if identifier is not None:
        value = getattr(extracted, identifier)
        if value is not None:
            setattr(merged, identifier, value)

        # PAN cards often print the father's full name where Aadhaar abbreviates.
        if document_class == DocumentClass.PAN and extracted.father_name:
            pan_tokens = token_count(extracted.father_name)
            if (
                pan_tokens >= MIN_PAN_FATHER_NAME_TOKENS
                and pan_tokens > token_count(merged.father_name)
            ):
                logger.info("Using PAN father name (more complete)")
                merged.father_name = extracted.father_name
        return merged

    if not aadhaar_present and not _has_value(merged.name):
        for name in extracted.present_fields():
            setattr(merged, name, getattr(extracted, name))
    return merged


def _take_fields(source: ExtractedRecord, names: Sequence[str]) -> ExtractedRecord:
    return ExtractedRecord(**{name: getattr(source, name) for name in names})


class MergeEngine:
    """Extracts a batch of documents and merges them into one profile.

    Args:
        client: Extraction capability used for every call.
        validator: Identifier validator used to canonicalise the Aadhaar
            number of the merged profile.
    """

    def __init__(
        self, client: ExtractionClient, validator: FieldValidator | None = None
    ) -> None:
        self.client = client
        self.validator = validator or FieldValidator()

    async def merge(self, documents: Sequence[UploadedDocument]) -> MergeResult:
        """Extract every document in processing order and merge the results.

        Per-document failures are logged and skipped. If every call fails
        the result is empty, not an error.

        Args:
            documents: Uploaded documents in upload order.

        Returns:
            The merged profile and a trace of extraction calls.

        Raises:
            NoDocumentsError: If ``documents`` is empty.
        """
        if not documents:
            raise NoDocumentsError("Please upload at least one document first")

        plan = plan_processing_order(documents)
        aadhaar_present = any(p.role is DocumentRole.AADHAAR for p in plan)
        outcomes: list[DocumentOutcome] = []
        accumulator = ExtractedRecord()

        for step in plan:
            logger.info(
                "Processing document %d/%d: %s (%s, role=%s, mode=%s)",
                step.position + 1,
                len(plan),
                step.document.filename,
                step.document.document_class,
                step.role,
                step.mode,
            )
            extracted = await self._extract(step.document, step.mode, step.role, outcomes)
            if extracted is None:
                continue
            accumulator = fold(
                accumulator,
                step.role,
                step.document.document_class,
                extracted,
                aadhaar_present,
            )

        fallback_used = False
        if not aadhaar_present and not _has_value(accumulator.name):
            # Re-scans the first upload even if the loop already scanned it.
            first = documents[0]
            logger.warning(
                "No name extracted; re-extracting %s in full mode", first.filename
            )
            fallback_used = True
            extracted = await self._extract(
                first, ExtractionMode.FULL, DocumentRole.PRIMARY, outcomes, fallback=True
            )
            if extracted is not None:
                accumulator = _take_fields(
                    _without_blanks(extracted),
                    (*PERSONAL_FIELDS, *DOCUMENT_NUMBER_FIELDS, "confidence"),
                )

        accumulator = self._canonicalise_aadhaar(accumulator)
        logger.info(
            "Merged %d documents into fields: %s",
            len(documents),
            ", ".join(accumulator.present_fields()) or "none",
        )
        return MergeResult(
            extracted=accumulator,
            working=accumulator.copy(),
            outcomes=outcomes,
            fallback_used=fallback_used,
        )

    async def _extract(
        self,
        document: UploadedDocument,
        mode: ExtractionMode,
        role: DocumentRole,
        outcomes: list[DocumentOutcome],
        fallback: bool = False,
    ) -> ExtractedRecord | None:
        """Run one extraction, recording the outcome; ``None`` on failure."""
        try:
            extracted = await self.client.extract(
                document.content, document.document_class, document.mime_type, mode
            )
        except (ExtractionError, asyncio.TimeoutError) as exc:
            kind = getattr(exc, "kind", "timeout")
            message = str(exc) or "Extraction timed out"
            logger.error(
                "Extraction failed for %s (%s): %s",
                document.document_id,
                document.document_class,
                message,
            )
            outcomes.append(
                DocumentOutcome(
                    document.document_id,
                    document.document_class,
                    mode,
                    role,
                    succeeded=False,
                    error=message,
                    error_kind=kind,
                    fallback=fallback,
                )
            )
            return None

        outcomes.append(
            DocumentOutcome(
                document.document_id,
                document.document_class,
                mode,
                role,
                succeeded=True,
                fallback=fallback,
            )
        )
        return extracted

    def _canonicalise_aadhaar(self, record: ExtractedRecord) -> ExtractedRecord:
        if not _has_value(record.aadhaar_number):
            return record
        result = self.validator.validate("aadhaar_number", record.aadhaar_number)
        if result.is_valid and result.canonical_form:
            record.aadhaar_number = result.canonical_form
        else:
            logger.warning("Merged Aadhaar number failed validation; kept as extracted")
        return record
