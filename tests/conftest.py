"""Shared test fixtures for the form-fill test suite."""

from collections.abc import Callable
from pathlib import Path

import pytest

from formfill.documents.models import (
    DocumentClass,
    ExtractedRecord,
    UploadedDocument,
    classify_filename,
)
from formfill.extraction.errors import GatewayError
from formfill.extraction.modes import ExtractionMode

ScriptedOutcome = ExtractedRecord | Exception


class FakeExtractionClient:
    """In-memory extraction client scripted per document content.

    Each document's content maps to a list of outcomes consumed in call
    order; the last outcome repeats once the list is exhausted.
    """

    def __init__(self, responses: dict[bytes, list[ScriptedOutcome]]) -> None:
        self.responses = {key: list(value) for key, value in responses.items()}
        self.calls: list[tuple[bytes, DocumentClass, str, ExtractionMode]] = []

    async def extract(
        self,
        image: bytes,
        document_class: DocumentClass,
        mime_type: str,
        mode: ExtractionMode,
    ) -> ExtractedRecord:
        self.calls.append((image, document_class, mime_type, mode))
        script = self.responses.get(image)
        if not script:
            raise GatewayError(f"No scripted response for {image!r}")
        outcome = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome.copy()

    @property
    def modes(self) -> list[ExtractionMode]:
        return [call[3] for call in self.calls]

    @property
    def images(self) -> list[bytes]:
        return [call[0] for call in self.calls]


@pytest.fixture
def make_document() -> Callable[..., UploadedDocument]:
    """Factory for uploaded documents whose content is the filename."""

    def _make(filename: str, mime_type: str = "image/jpeg") -> UploadedDocument:
        return UploadedDocument(
            filename=filename,
            content=filename.encode(),
            mime_type=mime_type,
            document_class=classify_filename(filename),
        )

    return _make


@pytest.fixture
def aadhaar_front() -> ExtractedRecord:
    return ExtractedRecord(
        name="Sita Devi",
        father_name="Ramesh",
        date_of_birth="1990-04-12",
        gender="female",
        aadhaar_number="123456789012",
        confidence=0.8,
    )


@pytest.fixture
def aadhaar_back() -> ExtractedRecord:
    return ExtractedRecord(
        address="12 MG Road, Shivaji Nagar",
        district="Pune",
        state="Maharashtra",
        pincode="411001",
        confidence=0.9,
    )


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def scripted_client() -> type[FakeExtractionClient]:
    """The scripted fake client class, for building per-test instances."""
    return FakeExtractionClient
