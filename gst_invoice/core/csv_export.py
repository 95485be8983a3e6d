"""CSV export of extraction results.

The export is a single document with two labeled sections:

    Invoice Summary
    <summary header and rows>

    Invoice Items
    <item header and rows>
"""

import csv
import io
import logging
from collections.abc import Sequence
from pathlib import Path

from pydantic import BaseModel

from .models import ExtractedData

logger = logging.getLogger(__name__)

DEFAULT_CSV_FILENAME = "gst_invoice_data.csv"
SUMMARY_SECTION_TITLE = "Invoice Summary"
ITEMS_SECTION_TITLE = "Invoice Items"


def records_to_csv(records: Sequence[BaseModel]) -> str:
    """Serialize records to CSV text with a header row.

    Columns are the records' JSON field names in model order. Missing values
    become empty cells. Returns "" for no records; the text never ends with
    a newline.
    """
    if not records:
        return ""

    rows = [record.model_dump(by_alias=True) for record in records]
    fieldnames = list(rows[0].keys())

    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=fieldnames, lineterminator="\n", extrasaction="ignore")
    writer.writeheader()
    writer.writerows(rows)
    return buffer.getvalue().rstrip("\n")


def build_combined_csv(data: ExtractedData) -> str:
    """Build the two-section CSV document for a merged result."""
    summary_csv = records_to_csv(data.invoice_summary)
    items_csv = records_to_csv(data.invoice_items)
    return f"{SUMMARY_SECTION_TITLE}\n{summary_csv}\n\n{ITEMS_SECTION_TITLE}\n{items_csv}"


def write_csv(data: ExtractedData, output_file: str | Path = DEFAULT_CSV_FILENAME) -> Path:
    """Write the combined CSV document to disk as UTF-8."""
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(build_combined_csv(data), encoding="utf-8", newline="")
    logger.info(
        f"[EXPORT] CSV saved to {output_path} ({len(data.invoice_summary)} invoice(s), "
        f"{len(data.invoice_items)} line item(s))"
    )
    return output_path
