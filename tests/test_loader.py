"""Tests for the upload loader."""

from pathlib import Path

import pytest

from formfill.documents.loader import (
    UnsupportedDocumentError,
    document_from_bytes,
    document_from_path,
    find_documents,
    resolve_content_type,
)
from formfill.documents.models import DocumentClass, DocumentStatus


class TestResolveContentType:
    """Tests for MIME type resolution."""

    def test_reported_type_kept(self) -> None:
        assert resolve_content_type("scan.bin", "application/pdf") == "application/pdf"

    def test_parameters_stripped(self) -> None:
        assert resolve_content_type("a.png", "image/png; charset=binary") == "image/png"

    @pytest.mark.parametrize("reported", [None, "", "application/octet-stream"])
    def test_generic_type_guessed_from_extension(self, reported) -> None:
        assert resolve_content_type("pan.JPG", reported) == "image/jpeg"

    def test_jpg_alias(self) -> None:
        assert resolve_content_type("pan", "image/jpg") == "image/jpeg"

    def test_unsupported(self) -> None:
        with pytest.raises(UnsupportedDocumentError, match="notes.txt"):
            resolve_content_type("notes.txt", "text/plain")

    def test_unknown_extension(self) -> None:
        with pytest.raises(UnsupportedDocumentError, match="unknown"):
            resolve_content_type("scan", None)

    def test_custom_allow_list(self) -> None:
        with pytest.raises(UnsupportedDocumentError):
            resolve_content_type("a.png", "image/png", allowed=("application/pdf",))


class TestDocumentFromBytes:
    """Tests for building documents from upload bytes."""

    def test_classified_and_uploading(self) -> None:
        doc = document_from_bytes("Aadhar_front.png", b"data", "image/png")
        assert doc.document_class == DocumentClass.AADHAAR
        assert doc.mime_type == "image/png"
        assert doc.status == DocumentStatus.UPLOADING
        assert doc.content == b"data"


class TestDocumentFromPath:
    """Tests for reading documents from disk."""

    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "voter_card.pdf"
        path.write_bytes(b"%PDF-1.4")
        doc = document_from_path(path)
        assert doc.filename == "voter_card.pdf"
        assert doc.mime_type == "application/pdf"
        assert doc.document_class == DocumentClass.VOTER_ID

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            document_from_path(tmp_path / "missing.jpg")


class TestFindDocuments:
    """Tests for directory discovery."""

    def test_finds_supported_files_sorted(self, tmp_path: Path) -> None:
        for name in ("b_pan.jpg", "a_aadhaar.pdf", "c.png", "notes.txt"):
            (tmp_path / name).write_bytes(b"x")
        found = [p.name for p in find_documents(tmp_path)]
        assert found == ["a_aadhaar.pdf", "b_pan.jpg", "c.png"]

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert find_documents(tmp_path) == []
