"""
Interfaces for the Printing Framework

Defines the engines the export pipeline talks to: the rasterizer that turns
a normalized document tree into a bitmap, and the saver that delivers a
finished export.
"""

from abc import ABC, abstractmethod

from .dto import ExportResult


class IRasterizer(ABC):
    """
    Interface for rasterization engines.

    Implementations lay out a normalized document tree at a given width and
    draw it into a bitmap.
    """

    @abstractmethod
    def measure(self, node, width: int) -> tuple[int, int]:
        """
        Measure the laid out size of a node.

        Args:
            node: Normalized document node
            width: Layout width in CSS pixels

        Returns:
            (width, height) in CSS pixels, (0, 0) if nothing is drawable
        """
        pass

    @abstractmethod
    def rasterize(self, node, width: int, scale: float, background: str):
        """
        Draw a node into a bitmap.

        Args:
            node: Normalized document node
            width: Layout width in CSS pixels
            scale: Oversampling factor applied to the whole layout
            background: Fill colour of the bitmap

        Returns:
            PIL.Image.Image in RGB mode

        Raises:
            Exception: If drawing fails
        """
        pass


class IFileSaver(ABC):
    """
    Interface for delivering a finished export.

    Savers are only called once the whole document has been assembled.
    """

    @abstractmethod
    def save(self, result: ExportResult) -> str:
        """
        Save an export.

        Args:
            result: The assembled export

        Returns:
            Location the file was saved to
        """
        pass
