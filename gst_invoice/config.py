"""Configuration management for GST invoice extraction."""
from pathlib import Path

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """Centralized configuration for GST invoice extraction."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # API Configuration
    gemini_api_key: str = Field(
        ...,
        validation_alias=AliasChoices("gemini_api_key", "api_key"),
        description="Gemini API key for document extraction"
    )
    use_vertex_ai: bool = Field(
        default=False,
        validation_alias=AliasChoices("use_vertex_ai", "google_genai_use_vertexai"),
        description="Use Vertex AI instead of standard Gemini API"
    )
    google_cloud_project: str = Field(default="not-set", description="Google Cloud project for Vertex AI")
    google_cloud_location: str = Field(default="not-set", description="Google Cloud location for Vertex AI")

    # Model Configuration
    extraction_model: str = Field(default="gemini-2.5-flash", description="Model for invoice extraction")

    # Concurrency and Retry Configuration
    quota_limit: int = Field(default=10, ge=1, description="Maximum concurrent extraction calls")
    retry_max_attempts: int = Field(default=1, ge=1, description="Attempts per document, 1 disables retries")
    retry_base_delay: float = Field(default=2.0, description="Base delay for exponential backoff")
    retry_max_delay: float = Field(default=10.0, description="Maximum delay between retries")
    retry_jitter_range: float = Field(default=3.0, description="Jitter range for retry delays")

    # Upload Limits
    max_file_size_mb: float = Field(default=20.0, gt=0, description="Maximum size of a single upload")

    # Debug Configuration
    debug_responses: bool = Field(default=False, description="Save raw API responses for debugging")
    json_responses_dir: Path = Field(default=Path("json_responses"), description="Folder for raw API responses")
    logs_dir: Path = Field(default=Path("logs"), description="Folder for log files")

    @field_validator("gemini_api_key")
    @classmethod
    def api_key_must_not_be_empty(cls, v):
        """Ensure API key is provided."""
        if not v or v.strip() == "":
            raise ValueError("GEMINI_API_KEY must be provided")
        return v.strip()

    @field_validator("use_vertex_ai", mode="before")
    @classmethod
    def parse_vertex_ai_flag(cls, v):
        """Parse vertex AI flag from string."""
        if isinstance(v, str):
            return v.lower() == "true"
        return v

    @field_validator("debug_responses", mode="before")
    @classmethod
    def parse_debug_flag(cls, v):
        """Parse debug flag from string."""
        if isinstance(v, str):
            return v == "1" or v.lower() == "true"
        return v

    @property
    def api_client_kwargs(self) -> dict:
        """Get genai.Client keyword arguments."""
        if self.use_vertex_ai:
            return {
                "vertexai": True,
                "project": self.google_cloud_project,
                "location": self.google_cloud_location,
            }
        return {"api_key": self.gemini_api_key}


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process-wide Settings instance, loading it on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def load_settings() -> Settings:
    """Like get_settings, but reports invalid configuration as ConfigurationError."""
    try:
        return get_settings()
    except ValidationError as e:
        error = e.errors()[0]
        setting_name = ".".join(str(part) for part in error.get("loc", ())) or "settings"
        raise ConfigurationError(setting_name, error.get("msg", str(e))) from e


def reset_settings() -> None:
    """Forget the cached Settings so the next call reloads the environment."""
    global _settings
    _settings = None
