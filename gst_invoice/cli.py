"""Command-line front end: extract GST invoice data from local files into CSV."""
import argparse
import asyncio
import logging
import sys
import time
from pathlib import Path

from tqdm import tqdm

from .config import load_settings
from .core.aggregation import extract_invoices
from .core.csv_export import DEFAULT_CSV_FILENAME, write_csv
from .core.documents import SUPPORTED_EXTENSIONS, load_document
from .core.exceptions import BatchExtractionError, ConfigurationError, GSTInvoiceError
from .core.excel_export import build_workbook
from .logging_config import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gst-invoice",
        description="Extract GST invoice summaries and line items with Gemini and export them to CSV.",
    )
    parser.add_argument("files", nargs="+", type=Path,
                        help=f"Invoice files to analyze ({', '.join(SUPPORTED_EXTENSIONS)})")
    parser.add_argument("--output", "-o", type=Path, default=Path(DEFAULT_CSV_FILENAME),
                        help=f"CSV file to write (default: {DEFAULT_CSV_FILENAME})")
    parser.add_argument("--xlsx", type=Path, default=None,
                        help="Also write an Excel workbook to this path")
    parser.add_argument("--logs", type=Path, default=None,
                        help="Logs folder (default: LOGS_DIR setting)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logging(args.logs or settings.logs_dir)

    try:
        documents = [load_document(path) for path in args.files]
    except (GSTInvoiceError, OSError) as e:
        logger.error(f"Cannot load input files: {e}")
        return 1

    start_time = time.time()
    with tqdm(total=len(documents), desc="Analyzing invoices", unit="file") as pbar:
        def on_progress(document, completed, total):
            pbar.set_postfix_str(document.name)
            pbar.update(1)

        try:
            data = asyncio.run(extract_invoices(documents, settings, on_progress))
        except BatchExtractionError as e:
            logger.error(f"{e.message} (first failure: {e.file_name}: {e.original_error})")
            return 1
        except ConfigurationError as e:
            logger.error(str(e))
            return 1

    try:
        write_csv(data, args.output)
        if args.xlsx:
            args.xlsx.parent.mkdir(parents=True, exist_ok=True)
            args.xlsx.write_bytes(build_workbook(data))
            logger.info(f"[EXPORT] Workbook saved to {args.xlsx}")
    except OSError as e:
        logger.error(f"Cannot write output: {e}")
        return 1

    logger.info(f"Total execution time: {time.time() - start_time:.2f} seconds")
    return 0


if __name__ == "__main__":
    sys.exit(main())
