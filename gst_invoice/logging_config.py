"""Logging configuration for GST invoice extraction."""
import logging
import logging.config
from pathlib import Path
from typing import Dict, Any

DEFAULT_LOG_FILENAME = "gst_invoice.log"


def get_logging_config(logs_folder: Path, log_filename: str = DEFAULT_LOG_FILENAME) -> Dict[str, Any]:
    """Get logging configuration dictionary."""
    logs_folder.mkdir(parents=True, exist_ok=True)
    log_file_path = logs_folder / log_filename

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(levelname)s - %(message)s"
            },
            "detailed": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": "INFO",
                "formatter": "standard",
                "stream": "ext://sys.stdout"
            },
            "file": {
                "class": "logging.FileHandler",
                "level": "DEBUG",
                "formatter": "detailed",
                "filename": str(log_file_path),
                "mode": "a",
                "encoding": "utf-8"
            }
        },
        "root": {
            "level": "WARNING",
            "handlers": ["console"]
        },
        "loggers": {
            "gst_invoice": {
                "level": "DEBUG",
                "handlers": ["console", "file"],
                "propagate": False
            }
        }
    }


def setup_logging(logs_folder: Path, log_filename: str = DEFAULT_LOG_FILENAME) -> None:
    """Set up logging with the specified configuration."""
    config = get_logging_config(Path(logs_folder), log_filename)

    # Clear any existing handlers to prevent duplicate logs on re-runs
    for name in (None, "gst_invoice"):
        target = logging.getLogger(name)
        for handler in target.handlers[:]:
            target.removeHandler(handler)
            handler.close()

    logging.config.dictConfig(config)
