"""Security utilities for safe file and path operations."""

import re
from pathlib import Path

from .exceptions import PathTraversalError, SecurityError


def validate_safe_path(
    file_path: str | Path,
    allowed_extensions: tuple[str, ...] = (),
    base_dir: str | Path | None = None
) -> Path:
    """Validate that a file path is safe to read or write.

    Args:
        file_path: Path to validate
        allowed_extensions: Allowed file extensions; empty allows any
        base_dir: If given, the resolved path must stay inside this directory

    Returns:
        Resolved Path object

    Raises:
        PathTraversalError: If the path escapes base_dir
        SecurityError: If the path has invalid characters or extension
    """
    path_str = str(file_path)

    if re.search(r'[<>"|?*\x00-\x1f]', path_str):
        raise SecurityError(f"Invalid characters in path: {path_str!r}", "invalid_characters", path_str)

    path = Path(file_path).expanduser().resolve()

    if allowed_extensions and path.suffix.lower() not in [ext.lower() for ext in allowed_extensions]:
        raise SecurityError(
            f"File extension '{path.suffix}' not allowed. Allowed: {allowed_extensions}",
            "invalid_extension",
            path_str
        )

    if base_dir is not None:
        base = Path(base_dir).expanduser().resolve()
        if not path.is_relative_to(base):
            raise PathTraversalError(path_str)

    return path


def sanitize_filename(filename: str, max_length: int = 255) -> str:
    """Sanitize a filename for safe filesystem operations.

    Args:
        filename: Original filename
        max_length: Maximum allowed filename length

    Returns:
        Sanitized filename safe for filesystem operations

    Raises:
        SecurityError: If filename cannot be safely sanitized
    """
    if not filename or not filename.strip():
        raise SecurityError("Empty filename provided", "empty_filename")

    # Keep alphanumeric, dots, hyphens, underscores, and spaces
    sanitized = re.sub(r"[^a-zA-Z0-9._\-\s]", "_", filename)

    # Remove multiple consecutive dots (potential traversal)
    sanitized = re.sub(r"\.{2,}", ".", sanitized)

    sanitized = sanitized.strip(". ")

    if len(sanitized) > max_length:
        # Preserve extension if present
        path = Path(sanitized)
        stem = path.stem[:max_length - len(path.suffix)]
        sanitized = f"{stem}{path.suffix}"

    # Windows reserved names
    reserved_names = {
        "CON", "PRN", "AUX", "NUL",
        "COM1", "COM2", "COM3", "COM4", "COM5", "COM6", "COM7", "COM8", "COM9",
        "LPT1", "LPT2", "LPT3", "LPT4", "LPT5", "LPT6", "LPT7", "LPT8", "LPT9"
    }

    if Path(sanitized).stem.upper() in reserved_names:
        sanitized = f"safe_{sanitized}"

    if not sanitized:
        raise SecurityError("Filename could not be sanitized safely", "unsanitizable_filename")

    return sanitized


__all__ = [
    "sanitize_filename",
    "validate_safe_path",
]
