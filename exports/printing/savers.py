"""
File Savers

Deliver finished exports to the filesystem.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from .dto import ExportResult
from .interfaces import IFileSaver
from .paths import get_output_path


logger = logging.getLogger(__name__)


class DirectoryFileSaver(IFileSaver):
    """
    Saves exports into a directory.

    The file is written in one go from the assembled result, so a failed
    export never leaves a partial file behind.
    """

    def __init__(self, directory: Optional[Union[str, Path]] = None):
        """
        Initialize the saver.

        Args:
            directory: Target directory (defaults to DOCUMENT_EXPORT['OUTPUT_DIR'],
                then the current working directory)
        """
        if directory is None:
            # Import here to avoid circular imports
            from exports.services.config import get_export_settings
            directory = get_export_settings()['OUTPUT_DIR'] or Path.cwd()

        self.directory = Path(directory)

    def save(self, result: ExportResult) -> str:
        """
        Write an export into the directory.

        Args:
            result: The assembled export

        Returns:
            Absolute path of the written file

        Raises:
            ValueError: If the file name would escape the directory
            OSError: If the file cannot be written
        """
        self.directory.mkdir(parents=True, exist_ok=True)
        path = get_output_path(self.directory, result.filename)
        path.write_bytes(result.content)

        logger.info(f"Saved export to {path} ({len(result)} bytes)")
        return str(path)
