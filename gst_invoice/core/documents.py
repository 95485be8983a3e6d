"""Intake checks for uploaded invoice documents.

Documents are passed to Gemini as-is; nothing here extracts content. PDFs
are opened with PyMuPDF only to reject corrupted files before an API call is
spent on them.
"""

import logging
from pathlib import Path

import fitz  # PyMuPDF

from .exceptions import (
    DocumentTooLargeError,
    EmptyDocumentError,
    InvalidDocumentError,
    UnsupportedDocumentError,
)
from .models import UploadedDocument
from .security import validate_safe_path

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"

SUPPORTED_MIME_TYPES: dict[str, str] = {
    ".pdf": PDF_MIME_TYPE,
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".csv": "text/csv",
}

SUPPORTED_EXTENSIONS: tuple[str, ...] = tuple(SUPPORTED_MIME_TYPES)


def resolve_mime_type(file_name: str, declared: str | None = None) -> str:
    """Return the MIME type to send for a file.

    The uploader's declared type is kept when it is one of the supported
    types; otherwise the type is looked up from the extension. Browsers
    report CSV files as "application/vnd.ms-excel" on some platforms.

    Raises:
        UnsupportedDocumentError: If the extension is not supported
    """
    extension = Path(file_name).suffix.lower()
    if extension not in SUPPORTED_MIME_TYPES:
        raise UnsupportedDocumentError(file_name, extension, SUPPORTED_EXTENSIONS)
    declared = (declared or "").split(";")[0].strip().lower()
    if declared in SUPPORTED_MIME_TYPES.values():
        return declared
    return SUPPORTED_MIME_TYPES[extension]


def check_document_size(document: UploadedDocument, max_size_mb: float) -> float:
    """Check that a document is non-empty and within the upload limit.

    Returns:
        Size of the document in MB

    Raises:
        EmptyDocumentError: If the document has no bytes
        DocumentTooLargeError: If the document exceeds max_size_mb
    """
    if document.size_bytes == 0:
        raise EmptyDocumentError(document.name)

    size_mb = document.size_bytes / (1024 * 1024)
    logger.debug(f"Document size check: {document.name} = {size_mb:.2f}MB")

    if size_mb > max_size_mb:
        raise DocumentTooLargeError(document.name, size_mb, max_size_mb)
    return size_mb


def inspect_pdf(document: UploadedDocument) -> int:
    """Open a PDF in memory and return its page count.

    Raises:
        InvalidDocumentError: If the PDF is corrupted or has no pages
    """
    try:
        doc = fitz.open(stream=document.data, filetype="pdf")
    except Exception as e:
        raise InvalidDocumentError(document.name, "PDF file is corrupted", e) from e

    try:
        page_count = doc.page_count
    finally:
        doc.close()

    if page_count == 0:
        raise InvalidDocumentError(document.name, "PDF has no pages")
    return page_count


def prepare_document(document: UploadedDocument, max_size_mb: float) -> UploadedDocument:
    """Validate a document and return it with its resolved MIME type."""
    mime_type = resolve_mime_type(document.name, document.mime_type)
    size_mb = check_document_size(document, max_size_mb)

    prepared = document.model_copy(update={"mime_type": mime_type})
    if mime_type == PDF_MIME_TYPE:
        pages = inspect_pdf(prepared)
        logger.debug(f"[INTAKE] {document.name} - PDF with {pages} page(s), {size_mb:.2f}MB")
    else:
        logger.debug(f"[INTAKE] {document.name} - {mime_type}, {size_mb:.2f}MB")
    return prepared


def load_document(path: str | Path) -> UploadedDocument:
    """Read a local invoice file into an UploadedDocument.

    Raises:
        SecurityError: If the path is unsafe or the extension unsupported
        FileNotFoundError: If the file does not exist
    """
    safe_path = validate_safe_path(path, allowed_extensions=SUPPORTED_EXTENSIONS)
    if not safe_path.is_file():
        raise FileNotFoundError(f"Invoice file not found: {safe_path}")

    return UploadedDocument(
        name=safe_path.name,
        mime_type=SUPPORTED_MIME_TYPES[safe_path.suffix.lower()],
        data=safe_path.read_bytes(),
    )
