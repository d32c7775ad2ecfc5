"""
Path generation and sanitization for saved exports
"""

import os
import re
from pathlib import Path
from typing import Optional, Union

# Maximum length for a sanitized file name (excluding extension)
MAX_FILENAME_LENGTH = 100


def sanitize_filename(filename: str, extension: Optional[str] = None, default: str = "document") -> str:
    """
    Sanitize a file name to prevent directory traversal and ensure filesystem compatibility.

    Args:
        filename: Requested file name, e.g. "Quarterly report.pdf"
        extension: Extension to enforce, without the dot. A name already
            ending in it keeps a single copy ("report.pdf" stays "report.pdf").
        default: Base name used when nothing usable is left

    Returns:
        Sanitized file name safe for filesystem storage and download headers
    """
    # Drop any directory part, including Windows separators
    filename = os.path.basename((filename or "").replace("\\", "/"))

    if extension:
        suffix = f".{extension}"
        if filename.lower().endswith(suffix.lower()):
            filename = filename[:-len(suffix)]
        name, ext = filename, suffix.lower()
    else:
        name_parts = filename.rsplit(".", 1)
        name = name_parts[0]
        ext = f".{name_parts[1]}" if len(name_parts) > 1 else ""

    # Keep alphanumeric, dash, underscore; runs of anything else become one underscore
    name = re.sub(r"[^a-zA-Z0-9\-_ ]", "_", name)
    name = re.sub(r"[_\s]+", "_", name).strip("_")

    name = (name or default)[:MAX_FILENAME_LENGTH]
    return f"{name}{ext}"


def get_output_path(output_dir: Union[str, Path], filename: str) -> Path:
    """
    Build the absolute path an export is written to.

    Args:
        output_dir: Directory exports are saved in
        filename: Requested file name (sanitized here)

    Returns:
        Absolute Path inside output_dir

    Raises:
        ValueError: If the resolved path escapes output_dir
    """
    output_dir = Path(output_dir)
    abs_path = (output_dir / sanitize_filename(filename)).resolve()

    try:
        abs_path.relative_to(output_dir.resolve())
    except ValueError:
        raise ValueError(f"Path traversal detected: {filename}")

    return abs_path
