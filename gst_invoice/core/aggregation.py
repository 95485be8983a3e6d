"""Fan-out of extraction calls over a batch of documents and merging of results.

A batch is all-or-nothing: either every document is extracted and the
results are merged in upload order, or the whole batch fails.
"""
import asyncio
import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Optional, Protocol

from google import genai

from ..config import Settings
from .exceptions import BatchExtractionError, NoDocumentsError
from .extraction import InvoiceExtractor, create_client
from .models import ExtractedData, UploadedDocument

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[UploadedDocument, int, int], None]


class DocumentAnalyzer(Protocol):
    async def analyze_document(self, document: UploadedDocument) -> ExtractedData: ...


def merge_results(results: Iterable[Optional[ExtractedData]]) -> ExtractedData:
    """Concatenate per-document results into one, preserving order."""
    merged = ExtractedData.empty()
    for result in results:
        if result is None:
            continue
        merged.invoice_summary.extend(result.invoice_summary)
        merged.invoice_items.extend(result.invoice_items)
    return merged


async def analyze_documents(
    documents: Sequence[UploadedDocument],
    analyzer: DocumentAnalyzer,
    on_progress: ProgressCallback | None = None
) -> ExtractedData:
    """Analyze every document concurrently and merge the results.

    Args:
        documents: Documents to analyze, in upload order
        analyzer: Object performing the per-document extraction
        on_progress: Called as (document, completed, total) after each success

    Returns:
        Merged ExtractedData in upload order

    Raises:
        NoDocumentsError: If documents is empty
        BatchExtractionError: If any document fails; no partial result is kept
    """
    if not documents:
        raise NoDocumentsError()

    total = len(documents)
    completed = 0
    logger.info(f"[BATCH] Analyzing {total} document(s)")

    async def run_one(document: UploadedDocument) -> ExtractedData:
        nonlocal completed
        try:
            result = await analyzer.analyze_document(document)
            completed += 1
            if on_progress is not None:
                on_progress(document, completed, total)
        except Exception as e:
            raise BatchExtractionError(document.name, e) from e
        return result

    tasks = [asyncio.create_task(run_one(document)) for document in documents]
    try:
        results = await asyncio.gather(*tasks)
    except BaseException as e:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if isinstance(e, BatchExtractionError):
            logger.error(f"[BATCH] Failed on {e.file_name}: {e.original_error}")
        raise

    merged = merge_results(results)
    logger.info(
        f"[BATCH] Completed {total} document(s): {len(merged.invoice_summary)} invoice(s), "
        f"{len(merged.invoice_items)} line item(s)"
    )
    return merged


async def extract_invoices(
    documents: Sequence[UploadedDocument],
    settings: Settings,
    on_progress: ProgressCallback | None = None,
    client: genai.Client | None = None
) -> ExtractedData:
    """Analyze a batch with a Gemini extractor built from settings.

    The extractor and its capacity limiter are created inside the running
    event loop, so each asyncio.run() gets fresh ones.
    """
    extractor = InvoiceExtractor(client or create_client(settings), settings)
    return await analyze_documents(documents, extractor, on_progress)
