"""Extraction modes and the rule that picks one per document."""

from enum import StrEnum

from formfill.documents.models import DocumentClass


class ExtractionMode(StrEnum):
    """Which fields the vision model is asked to return."""

    FULL = "full"
    PAN_ONLY = "pan_only"
    VOTER_ONLY = "voter_only"
    DL_ONLY = "dl_only"


_NARROW_MODES: dict[DocumentClass, ExtractionMode] = {
    DocumentClass.PAN: ExtractionMode.PAN_ONLY,
    DocumentClass.VOTER_ID: ExtractionMode.VOTER_ONLY,
    DocumentClass.DRIVING_LICENSE: ExtractionMode.DL_ONLY,
}


def mode_for(document_class: DocumentClass, is_primary: bool) -> ExtractionMode:
    """Select the extraction mode for a document.

    Primary documents get a full scan. Secondary documents are only
    scanned for their own identifier, except unrecognised documents,
    which always get a full scan.
    """
    if is_primary:
        return ExtractionMode.FULL
    return _NARROW_MODES.get(document_class, ExtractionMode.FULL)


def narrow_mode(document_class: DocumentClass) -> ExtractionMode:
    """Mode used when the document is scanned as a secondary source."""
    return mode_for(document_class, is_primary=False)
