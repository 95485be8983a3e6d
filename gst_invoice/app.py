"""
GST Invoice Extractor - browser UI.

Upload PDF, DOC/DOCX or CSV invoices, extract them with Gemini, review the
summary and line-item tables and download them as CSV or Excel.

Run with:  streamlit run gst_invoice/app.py
"""
import asyncio
import logging

import streamlit as st

from gst_invoice.config import load_settings
from gst_invoice.core.aggregation import extract_invoices
from gst_invoice.core.csv_export import DEFAULT_CSV_FILENAME, build_combined_csv
from gst_invoice.core.documents import SUPPORTED_EXTENSIONS
from gst_invoice.core.exceptions import ConfigurationError, GSTInvoiceError
from gst_invoice.core.excel_export import DEFAULT_XLSX_FILENAME, XLSX_MIME_TYPE, build_workbook
from gst_invoice.core.models import ITEM_COLUMNS, SUMMARY_COLUMNS, UploadedDocument
from gst_invoice.core.tables import EMPTY_TABLE_MESSAGE, to_dataframe
from gst_invoice.logging_config import setup_logging

logger = logging.getLogger("gst_invoice.app")

RESULT_KEY = "extracted_data"
ERROR_KEY = "error"
SELECTION_KEY = "selection"


def to_documents(uploaded_files) -> list[UploadedDocument]:
    """Convert Streamlit UploadedFile objects into UploadedDocuments."""
    return [
        UploadedDocument(name=f.name, mime_type=f.type or "", data=f.getvalue())
        for f in uploaded_files
    ]


def selection_signature(uploaded_files) -> tuple:
    return tuple((f.name, f.size) for f in uploaded_files)


def render_table(records, columns) -> None:
    if not records:
        st.info(EMPTY_TABLE_MESSAGE)
        return
    st.dataframe(to_dataframe(records, columns), width="stretch", hide_index=True)


st.set_page_config(page_title="GST Invoice Extractor AI", page_icon="🧾", layout="wide")

try:
    settings = load_settings()
except ConfigurationError as e:
    st.error(f"⚠️ {e}. Set GEMINI_API_KEY in the environment or a .env file.")
    st.stop()

if "logging_ready" not in st.session_state:
    setup_logging(settings.logs_dir)
    st.session_state["logging_ready"] = True

st.session_state.setdefault(RESULT_KEY, None)
st.session_state.setdefault(ERROR_KEY, None)

st.title("🧾 GST Invoice Extractor AI")
st.caption(
    "Upload your PDF, DOCX, or CSV invoices, and let our AI instantly extract "
    "and organize key data for you."
)

uploaded_files = st.file_uploader(
    "Click to upload or drag and drop - PDF, DOCX, or CSV (Multiple files supported)",
    type=[ext.lstrip(".") for ext in SUPPORTED_EXTENSIONS],
    accept_multiple_files=True,
) or []

# A new selection invalidates the previous result
signature = selection_signature(uploaded_files)
if st.session_state.get(SELECTION_KEY) != signature:
    st.session_state[SELECTION_KEY] = signature
    st.session_state[RESULT_KEY] = None
    st.session_state[ERROR_KEY] = None

if uploaded_files:
    count = len(uploaded_files)
    st.write(f"**{count} file{'s' if count > 1 else ''} selected:** {', '.join(f.name for f in uploaded_files)}")

if st.button("Analyze Documents", type="primary", disabled=not uploaded_files):
    st.session_state[RESULT_KEY] = None
    st.session_state[ERROR_KEY] = None
    with st.spinner("Analyzing..."):
        try:
            st.session_state[RESULT_KEY] = asyncio.run(
                extract_invoices(to_documents(uploaded_files), settings)
            )
        except GSTInvoiceError as e:
            logger.error(f"Analysis failed: {e.details or e.message}")
            st.session_state[ERROR_KEY] = e.message

if st.session_state[ERROR_KEY]:
    st.error(st.session_state[ERROR_KEY])

data = st.session_state[RESULT_KEY]
if data is not None:
    st.divider()
    col_title, col_csv, col_xlsx = st.columns([4, 1, 1])
    col_title.subheader("Extraction Results")
    col_csv.download_button(
        "Download CSV",
        data=build_combined_csv(data).encode("utf-8"),
        file_name=DEFAULT_CSV_FILENAME,
        mime="text/csv",
    )
    col_xlsx.download_button(
        "Download Excel",
        data=build_workbook(data),
        file_name=DEFAULT_XLSX_FILENAME,
        mime=XLSX_MIME_TYPE,
    )

    st.markdown("#### Invoice Summary")
    render_table(data.invoice_summary, SUMMARY_COLUMNS)

    st.markdown("#### Invoice Line Items")
    render_table(data.invoice_items, ITEM_COLUMNS)

st.caption("Powered by Google Gemini")
