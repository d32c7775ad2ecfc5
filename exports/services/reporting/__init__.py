"""
Document Export Reporting

Capture, pagination and PDF writing for document exports, plus the
tabular export and the export entry points.
"""

from .options import ExportOptions, Margins, Orientation, PageSize
from .service import DocumentExportService

__all__ = [
    'DocumentExportService',
    'ExportOptions',
    'Margins',
    'Orientation',
    'PageSize',
]
