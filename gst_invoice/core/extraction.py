"""Gemini-backed invoice extraction, one API call per document."""
import asyncio
import json
import logging
from pathlib import Path

from google import genai
from google.genai import errors, types
from pydantic import ValidationError

from ..config import Settings
from ..prompts import EXTRACTION_INSTRUCTION, EXTRACTION_RESPONSE_SCHEMA
from .documents import prepare_document
from .exceptions import APIError, ConfigurationError, InvalidAPIResponseError
from .models import ExtractedData, UploadedDocument
from .rate_limit import RateLimitedExecutor, RetryError, create_gemini_executor
from .security import sanitize_filename, validate_safe_path

logger = logging.getLogger(__name__)

# Only server-side failures are worth another attempt when retries are enabled
RETRYABLE_ERRORS = (errors.ServerError,)


def create_client(settings: Settings) -> genai.Client:
    """Create a Gemini client for the API key or Vertex AI, per settings.

    Raises:
        ConfigurationError: If the client cannot be built from the settings
    """
    if settings.use_vertex_ai:
        logger.info(
            f"Using Vertex AI - Project: {settings.google_cloud_project}, "
            f"Location: {settings.google_cloud_location}"
        )
    try:
        return genai.Client(**settings.api_client_kwargs)
    except Exception as e:
        raise ConfigurationError("gemini client", str(e)) from e


def parse_extraction_response(response_text: str | None, file_name: str, model: str) -> ExtractedData:
    """Parse and validate the JSON text returned by Gemini.

    Raises:
        InvalidAPIResponseError: If the text is not a JSON object with both
            invoiceSummary and invoiceItems
    """
    resp_txt = (response_text or "").strip()
    json_start = resp_txt.find("{")
    json_end = resp_txt.rfind("}") + 1

    try:
        if json_start == -1 or json_end == 0:
            raise ValueError("No JSON object found in response")
        payload = json.loads(resp_txt[json_start:json_end])
        return ExtractedData.model_validate(payload)
    except (ValueError, ValidationError) as e:
        # json.JSONDecodeError is a ValueError
        logger.error(f"[EXTRACT] {file_name} - Failed to parse Gemini response as JSON: {e}")
        logger.error(f"[EXTRACT] {file_name} - Raw response text: {resp_txt[:2000]}")
        raise InvalidAPIResponseError(file_name, resp_txt, model, e) from e


class InvoiceExtractor:
    """Sends documents to Gemini and returns structured invoice data."""

    def __init__(
        self,
        client: genai.Client,
        settings: Settings,
        executor: RateLimitedExecutor | None = None
    ):
        self.client = client
        self.settings = settings
        self.model = settings.extraction_model
        self.executor = executor or create_gemini_executor(settings)
        self.config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=EXTRACTION_RESPONSE_SCHEMA,
        )

    async def analyze_document(self, document: UploadedDocument) -> ExtractedData:
        """Extract invoice summaries and line items from one document.

        Raises:
            DocumentError: If the document fails intake checks
            APIError: If the Gemini call fails
            InvalidAPIResponseError: If the response does not match the schema
        """
        document = await asyncio.to_thread(prepare_document, document, self.settings.max_file_size_mb)

        contents = [
            types.Part.from_bytes(data=document.data, mime_type=document.mime_type),
            EXTRACTION_INSTRUCTION,
        ]

        async def call_gemini():
            return await self.client.aio.models.generate_content(
                model=self.model,
                contents=contents,
                config=self.config,
            )

        logger.info(f"[EXTRACT] {document.name} - Sending {document.mime_type} to {self.model}")
        try:
            response = await self.executor.execute(
                call_gemini,
                operation_name=f"extract {document.name}",
                retry_exceptions=RETRYABLE_ERRORS,
            )
        except RetryError as e:
            raise APIError(document.name, e.last_exception, self.model, e.attempts) from e

        if self.settings.debug_responses:
            self._save_response(document.name, response.text)

        data = parse_extraction_response(response.text, document.name, self.model)
        logger.info(
            f"[EXTRACT] {document.name} - Success: {len(data.invoice_summary)} invoice(s), "
            f"{len(data.invoice_items)} line item(s)"
        )
        return data

    def _save_response(self, file_name: str, response_text: str | None) -> Path:
        """Write a raw response to the debug folder."""
        folder = self.settings.json_responses_dir
        folder.mkdir(parents=True, exist_ok=True)
        stem = Path(sanitize_filename(file_name)).stem
        target = validate_safe_path(folder / f"{stem}_response.txt", (".txt",), base_dir=folder)
        target.write_text(response_text or "", encoding="utf-8")
        logger.debug(f"[EXTRACT] {file_name} - Raw response saved to {target}")
        return target
