"""Turn uploaded files into ``UploadedDocument`` instances.

Handles content-type resolution for PDF, JPEG and PNG uploads coming
from either the filesystem (CLI) or multipart form data (API).
"""

import mimetypes
from pathlib import Path

from formfill.utils.logger import get_logger

from .models import UploadedDocument, classify_filename

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPES: tuple[str, ...] = ("application/pdf", "image/jpeg", "image/png")
SUPPORTED_EXTENSIONS: tuple[str, ...] = ("*.pdf", "*.jpg", "*.jpeg", "*.png")

_GENERIC_CONTENT_TYPES = {"", "application/octet-stream"}


class UnsupportedDocumentError(ValueError):
    """Raised when an upload is not a PDF, JPEG or PNG file."""


def resolve_content_type(
    filename: str,
    content_type: str | None = None,
    allowed: tuple[str, ...] = DEFAULT_CONTENT_TYPES,
) -> str:
    """Determine the MIME type of an upload.

    Generic content types are replaced by a guess from the file extension.

    Args:
        filename: Upload filename.
        content_type: Content type reported by the client, if any.
        allowed: Accepted MIME types.

    Returns:
        The resolved MIME type.

    Raises:
        UnsupportedDocumentError: If the type is not in ``allowed``.
    """
    resolved = (content_type or "").split(";")[0].strip().lower()
    if resolved in _GENERIC_CONTENT_TYPES:
        resolved = mimetypes.guess_type(filename)[0] or ""
    if resolved == "image/jpg":
        resolved = "image/jpeg"
    if resolved not in allowed:
        raise UnsupportedDocumentError(
            f"Unsupported file type for {filename}: {resolved or 'unknown'}"
        )
    return resolved


def document_from_bytes(
    filename: str,
    content: bytes,
    content_type: str | None = None,
    allowed: tuple[str, ...] = DEFAULT_CONTENT_TYPES,
) -> UploadedDocument:
    """Create a document from raw upload bytes, classified by filename."""
    mime_type = resolve_content_type(filename, content_type, allowed)
    document = UploadedDocument(
        filename=filename,
        content=content,
        mime_type=mime_type,
        document_class=classify_filename(filename),
    )
    logger.debug(
        "Accepted %s as %s (%s)", filename, document.document_class, mime_type
    )
    return document


def document_from_path(
    path: Path, allowed: tuple[str, ...] = DEFAULT_CONTENT_TYPES
) -> UploadedDocument:
    """Read a document file from disk.

    Raises:
        FileNotFoundError: If the path does not exist.
        UnsupportedDocumentError: If the extension is not supported.
    """
    if not path.exists():
        raise FileNotFoundError(f"Document not found: {path}")
    return document_from_bytes(path.name, path.read_bytes(), None, allowed)


def find_documents(input_dir: Path) -> list[Path]:
    """Find all supported document files in a directory, sorted by name."""
    files: list[Path] = []
    for ext in SUPPORTED_EXTENSIONS:
        files.extend(input_dir.glob(ext))
        files.extend(input_dir.glob(ext.upper()))
    return sorted(set(files))
