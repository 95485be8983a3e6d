"""Excel workbook export of extraction results."""

import io
import logging

import openpyxl
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from .models import ITEM_COLUMNS, SUMMARY_COLUMNS, ExtractedData
from .tables import table_rows

logger = logging.getLogger(__name__)

DEFAULT_XLSX_FILENAME = "gst_invoice_data.xlsx"
XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def create_worksheet(workbook, sheet_name: str, headers: list[str], data_rows: list[list], header_color: str = "366092"):
    """
    Helper function to create a worksheet with headers and data.

    Args:
        workbook: openpyxl workbook object
        sheet_name: Name of the worksheet
        headers: List of header strings
        data_rows: List of lists, each containing row data
        header_color: Hex color for header background (default: blue)
    """
    ws = workbook.create_sheet(sheet_name)

    for col, header in enumerate(headers, 1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill(start_color=header_color, end_color=header_color, fill_type="solid")

    for row_idx, row_data in enumerate(data_rows, 2):
        for col, value in enumerate(row_data, 1):
            ws.cell(row=row_idx, column=col, value=value)

    # Rough auto-width; openpyxl has no built-in fit
    for col, header in enumerate(headers, 1):
        width = max([len(str(header))] + [len(str(row[col - 1])) for row in data_rows if row[col - 1] is not None])
        ws.column_dimensions[get_column_letter(col)].width = min(width + 2, 60)

    return ws


def build_workbook(data: ExtractedData) -> bytes:
    """Build an XLSX workbook with an "Invoice Summary" and an "Invoice Items" sheet."""
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)

    create_worksheet(
        workbook,
        "Invoice Summary",
        [column.label for column in SUMMARY_COLUMNS],
        table_rows(data.invoice_summary, SUMMARY_COLUMNS),
        "366092"
    )
    create_worksheet(
        workbook,
        "Invoice Items",
        [column.label for column in ITEM_COLUMNS],
        table_rows(data.invoice_items, ITEM_COLUMNS),
        "2E7D32"
    )

    buffer = io.BytesIO()
    workbook.save(buffer)
    logger.info(
        f"[EXPORT] Workbook built ({len(data.invoice_summary)} invoice(s), "
        f"{len(data.invoice_items)} line item(s))"
    )
    return buffer.getvalue()
