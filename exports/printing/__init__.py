"""
Printing Framework

Engine adapters used by the export pipeline: rasterization of document
trees with Pillow and delivery of finished exports.
"""

from .dto import ExportResult
from .interfaces import IFileSaver, IRasterizer
from .pillow_rasterizer import PillowRasterizer
from .savers import DirectoryFileSaver

__all__ = [
    'ExportResult',
    'IFileSaver',
    'IRasterizer',
    'PillowRasterizer',
    'DirectoryFileSaver',
]
