"""Exception hierarchy for GST invoice extraction."""

from typing import Any, Optional

BATCH_FAILURE_MESSAGE = (
    "Failed to analyze one or more documents. Some documents might be corrupted "
    "or in an unsupported format. Please review your selection and try again."
)
NO_DOCUMENTS_MESSAGE = "Please select one or more files first."
UNEXPECTED_FORMAT_MESSAGE = (
    "Could not parse the analysis result. The AI model returned an unexpected format."
)


class GSTInvoiceError(Exception):
    """Base exception for all GST invoice extraction errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DocumentError(GSTInvoiceError):
    """Base class for problems with an uploaded document."""

    def __init__(
        self,
        file_name: str,
        message: str,
        original_error: Optional[Exception] = None,
        details: Optional[dict[str, Any]] = None
    ) -> None:
        self.file_name = file_name
        self.original_error = original_error

        full_message = f"Document '{file_name}' rejected: {message}"
        if original_error:
            full_message += f" (Original error: {original_error})"

        super().__init__(full_message, {"file_name": file_name, **(details or {})})


class UnsupportedDocumentError(DocumentError):
    """Raised when a document's type is not one the extractor accepts."""

    def __init__(self, file_name: str, extension: str, allowed: tuple[str, ...]) -> None:
        message = f"File type '{extension or 'none'}' not supported. Allowed: {', '.join(allowed)}"
        super().__init__(file_name, message, details={"extension": extension})
        self.extension = extension


class DocumentTooLargeError(DocumentError):
    """Raised when a document exceeds the maximum upload size."""

    def __init__(self, file_name: str, file_size_mb: float, max_size_mb: float) -> None:
        message = f"size ({file_size_mb:.1f}MB) exceeds maximum allowed size ({max_size_mb}MB)"
        super().__init__(
            file_name,
            message,
            details={"file_size_mb": file_size_mb, "max_size_mb": max_size_mb}
        )


class EmptyDocumentError(DocumentError):
    """Raised when a document has no content."""

    def __init__(self, file_name: str) -> None:
        super().__init__(file_name, "file is empty")


class InvalidDocumentError(DocumentError):
    """Raised when a document is corrupted or unreadable."""

    def __init__(
        self,
        file_name: str,
        reason: str = "file is corrupted or invalid",
        original_error: Optional[Exception] = None
    ) -> None:
        super().__init__(file_name, reason, original_error)


class ExtractionError(GSTInvoiceError):
    """Base class for failures while extracting data from a document."""

    def __init__(
        self,
        file_name: str,
        message: str,
        model_used: Optional[str] = None,
        original_error: Optional[Exception] = None
    ) -> None:
        self.file_name = file_name
        self.model_used = model_used
        self.original_error = original_error

        full_message = f"Extraction failed for {file_name}: {message}"
        if model_used:
            full_message += f" (Model: {model_used})"
        if original_error:
            full_message += f" (Original error: {original_error})"

        details = {"file_name": file_name}
        if model_used:
            details["model_used"] = model_used

        super().__init__(full_message, details)


class APIError(ExtractionError):
    """Raised when the call to Gemini fails."""

    def __init__(
        self,
        file_name: str,
        api_error: Exception,
        model_used: Optional[str] = None,
        attempts: int = 1
    ) -> None:
        message = f"API call failed after {attempts} attempt{'s' if attempts != 1 else ''}"
        super().__init__(file_name, message, model_used, api_error)
        self.attempts = attempts


class InvalidAPIResponseError(ExtractionError):
    """Raised when Gemini returns a response that does not match the schema."""

    def __init__(
        self,
        file_name: str,
        response_text: str,
        model_used: Optional[str] = None,
        parsing_error: Optional[Exception] = None
    ) -> None:
        super().__init__(file_name, UNEXPECTED_FORMAT_MESSAGE, model_used, parsing_error)
        self.response_text = response_text


class BatchExtractionError(GSTInvoiceError):
    """Raised when any document in an analysis batch fails.

    The message is the user-facing one; the failing file and the underlying
    error are kept on the instance for logs.
    """

    def __init__(self, file_name: str, original_error: Exception) -> None:
        self.file_name = file_name
        self.original_error = original_error
        super().__init__(
            BATCH_FAILURE_MESSAGE,
            {"file_name": file_name, "original_error": str(original_error)}
        )


class NoDocumentsError(GSTInvoiceError):
    """Raised when analysis is requested without any documents."""

    def __init__(self) -> None:
        super().__init__(NO_DOCUMENTS_MESSAGE)


class SecurityError(GSTInvoiceError):
    """Base class for security-related errors."""

    def __init__(
        self,
        message: str,
        security_check: str,
        file_path: Optional[str] = None
    ) -> None:
        self.security_check = security_check
        self.file_path = file_path

        full_message = f"Security check failed ({security_check}): {message}"
        details = {"security_check": security_check}
        if file_path:
            details["file_path"] = str(file_path)

        super().__init__(full_message, details)


class PathTraversalError(SecurityError):
    """Raised when path traversal attack is detected."""

    def __init__(self, attempted_path: str) -> None:
        message = f"Path traversal attempt detected: {attempted_path}"
        super().__init__(message, "path_traversal", attempted_path)
        self.attempted_path = attempted_path


class ConfigurationError(GSTInvoiceError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, setting_name: str, issue: str) -> None:
        message = f"Configuration error for '{setting_name}': {issue}"
        super().__init__(message, {"setting_name": setting_name, "issue": issue})
        self.setting_name = setting_name
        self.issue = issue


__all__ = [
    "BATCH_FAILURE_MESSAGE",
    "NO_DOCUMENTS_MESSAGE",
    "UNEXPECTED_FORMAT_MESSAGE",
    "GSTInvoiceError",
    "DocumentError",
    "UnsupportedDocumentError",
    "DocumentTooLargeError",
    "EmptyDocumentError",
    "InvalidDocumentError",
    "ExtractionError",
    "APIError",
    "InvalidAPIResponseError",
    "BatchExtractionError",
    "NoDocumentsError",
    "SecurityError",
    "PathTraversalError",
    "ConfigurationError",
]
