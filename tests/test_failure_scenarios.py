"""Test failure scenarios and error handling paths."""

import pytest
from pydantic import ValidationError

from gst_invoice import config
from gst_invoice.config import Settings, load_settings, reset_settings
from gst_invoice.core.exceptions import (
    BATCH_FAILURE_MESSAGE,
    APIError,
    BatchExtractionError,
    ConfigurationError,
    DocumentError,
    DocumentTooLargeError,
    ExtractionError,
    GSTInvoiceError,
    InvalidAPIResponseError,
    InvalidDocumentError,
    PathTraversalError,
    SecurityError,
    UnsupportedDocumentError,
)
from gst_invoice.core.security import sanitize_filename, validate_safe_path


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run without API keys in the environment or a .env file in reach."""
    for name in (
        "GEMINI_API_KEY", "API_KEY", "GOOGLE_GENAI_USE_VERTEXAI", "USE_VERTEX_AI",
        "GOOGLE_CLOUD_PROJECT", "GOOGLE_CLOUD_LOCATION", "DEBUG_RESPONSES", "QUOTA_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    reset_settings()
    yield monkeypatch
    reset_settings()


def test_path_traversal_detection(tmp_path):
    """Test detection of paths escaping the base directory."""
    base = tmp_path / "json_responses"
    base.mkdir()

    for dangerous_path in (base / ".." / ".." / "etc" / "passwd.txt", base / "sub" / ".." / ".." / "x.txt"):
        with pytest.raises(PathTraversalError) as exc_info:
            validate_safe_path(dangerous_path, base_dir=base)
        assert "path traversal" in str(exc_info.value).lower()

    inside = validate_safe_path(base / "a" / ".." / "ok.txt", (".txt",), base_dir=base)
    assert inside == (base / "ok.txt").resolve()


def test_security_extension_validation(tmp_path):
    """Test extension and character checks."""
    with pytest.raises(SecurityError) as exc_info:
        validate_safe_path(tmp_path / "invoice.exe", (".pdf", ".csv"))
    assert exc_info.value.security_check == "invalid_extension"

    with pytest.raises(SecurityError) as exc_info:
        validate_safe_path("invoice\x00.pdf", (".pdf",))
    assert exc_info.value.security_check == "invalid_characters"

    assert validate_safe_path(tmp_path / "INVOICE.PDF", (".pdf",)).name == "INVOICE.PDF"


def test_filename_sanitization():
    """Test filename sanitization for security."""
    dangerous_filenames = {
        'file<>:"|?*.pdf': "file_______.pdf",
        "invoice\x00null.pdf": "invoice_null.pdf",
        "../../traverse.pdf": "_._traverse.pdf",  # Leading dots get replaced
        "CON.pdf": "safe_CON.pdf",  # Windows reserved name
        "file" + "x" * 300 + ".pdf": True,  # Long filename (check truncation)
        "...dangerous.pdf": "dangerous.pdf",
        "Sales Register (March).csv": "Sales Register _March_.csv",
    }

    for dangerous, expected in dangerous_filenames.items():
        sanitized = sanitize_filename(dangerous)

        if expected is True:
            assert len(sanitized) == 255
            assert sanitized.endswith(".pdf")
        else:
            assert sanitized == expected

        assert "<" not in sanitized
        assert ">" not in sanitized
        assert '"' not in sanitized
        assert "|" not in sanitized

    for unusable in ("", "   ", "..."):
        with pytest.raises(SecurityError):
            sanitize_filename(unusable)


def test_exception_hierarchy():
    """Test that exception hierarchy works correctly."""
    document_errors = [
        UnsupportedDocumentError("a.png", ".png", (".pdf",)),
        DocumentTooLargeError("a.pdf", 30.0, 20.0),
        InvalidDocumentError("a.pdf"),
    ]
    for error in document_errors:
        assert isinstance(error, DocumentError)
        assert isinstance(error, GSTInvoiceError)
        assert error.file_name in str(error)

    assert issubclass(APIError, ExtractionError)
    assert issubclass(InvalidAPIResponseError, ExtractionError)
    assert issubclass(PathTraversalError, SecurityError)
    assert issubclass(BatchExtractionError, GSTInvoiceError)
    assert issubclass(ConfigurationError, GSTInvoiceError)


def test_error_message_formatting():
    """Test that error messages contain useful information."""
    error = DocumentTooLargeError("big_scan.pdf", 150.0, 100.0)
    error_str = str(error)

    assert "big_scan.pdf" in error_str
    assert "150.0" in error_str
    assert "100.0" in error_str
    assert "MB" in error_str

    api_error = APIError("invoice.pdf", Exception("Network timeout"), "gemini-2.5-flash", 3)
    api_error_str = str(api_error)

    assert "invoice.pdf" in api_error_str
    assert "gemini-2.5-flash" in api_error_str
    assert "3 attempts" in api_error_str
    assert "Network timeout" in api_error_str
    assert "after 1 attempt (" in str(APIError("invoice.pdf", Exception("x"), None, 1))


def test_batch_error_hides_details_from_message():
    """The batch message is generic; the cause is kept for logs."""
    cause = InvalidDocumentError("broken.pdf", "PDF file is corrupted")
    error = BatchExtractionError("broken.pdf", cause)

    assert str(error) == BATCH_FAILURE_MESSAGE
    assert "broken.pdf" not in str(error)
    assert error.original_error is cause
    assert error.details["file_name"] == "broken.pdf"
    assert "corrupted" in error.details["original_error"]


def test_configuration_validation(clean_env):
    """Test configuration validation catches invalid settings."""
    with pytest.raises(ValidationError):
        Settings()

    with pytest.raises(ValidationError):
        Settings(gemini_api_key="   ")

    with pytest.raises(ValidationError):
        Settings(gemini_api_key="key", quota_limit=0)


def test_load_settings_reports_configuration_error(clean_env):
    with pytest.raises(ConfigurationError) as exc_info:
        load_settings()

    assert "gemini_api_key" in exc_info.value.setting_name
    assert config._settings is None


def test_settings_from_environment(clean_env):
    clean_env.setenv("API_KEY", "  env-key  ")
    clean_env.setenv("DEBUG_RESPONSES", "1")
    clean_env.setenv("QUOTA_LIMIT", "3")

    settings = load_settings()

    assert settings.gemini_api_key == "env-key"
    assert settings.debug_responses is True
    assert settings.quota_limit == 3
    assert settings.extraction_model == "gemini-2.5-flash"
    assert settings.retry_max_attempts == 1
    assert load_settings() is settings


def test_settings_from_dotenv(clean_env, tmp_path):
    (tmp_path / ".env").write_text("GEMINI_API_KEY=dotenv-key\nGOOGLE_GENAI_USE_VERTEXAI=true\n")

    settings = load_settings()

    assert settings.gemini_api_key == "dotenv-key"
    assert settings.use_vertex_ai is True
    assert settings.api_client_kwargs == {"vertexai": True, "project": "not-set", "location": "not-set"}


def test_api_client_kwargs_for_api_key(clean_env):
    settings = Settings(gemini_api_key="abc")

    assert settings.api_client_kwargs == {"api_key": "abc"}
