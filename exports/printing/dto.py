"""
Data Transfer Objects for the Printing Framework
"""

from dataclasses import dataclass


@dataclass
class ExportResult:
    """
    Result of an export operation.

    Contains the file content and metadata for HTTP responses and savers.
    """

    content: bytes
    filename: str
    content_type: str = "application/pdf"

    def __len__(self) -> int:
        """Return the size of the content in bytes"""
        return len(self.content)

    @property
    def extension(self) -> str:
        """File extension without the dot"""
        return self.filename.rsplit('.', 1)[-1] if '.' in self.filename else ''
