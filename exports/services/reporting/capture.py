"""
Raster Capture

Turns a normalized, off-screen mounted document clone into a bitmap.
"""

import logging
from dataclasses import dataclass

from asgiref.sync import sync_to_async

from exports.services.exceptions import CaptureError, EmptyContentError
from exports.services.document.nodes import DocumentNode, describe


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RasterImage:
    """Captured bitmap. The wrapped Pillow image is never modified."""

    image: object

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self) -> tuple[int, int]:
        return self.image.size


class RasterCapture:
    """
    Captures document nodes through a rasterization engine.

    The oversampling factor multiplies the laid out size, so a clone that
    measures 794x1000 CSS pixels becomes a 3176x4000 bitmap at scale 4.
    """

    def __init__(self, rasterizer, scale: float = 4, background: str = '#ffffff'):
        """
        Initialize the capture step.

        Args:
            rasterizer: IRasterizer implementation
            scale: Oversampling factor
            background: Fill colour behind the content
        """
        self.rasterizer = rasterizer
        self.scale = scale
        self.background = background

    async def capture(self, clone: DocumentNode, surface) -> RasterImage:
        """
        Rasterize a mounted clone.

        Args:
            clone: Normalized node, mounted on the surface
            surface: RenderSurface the clone is mounted on

        Returns:
            RasterImage of the clone

        Raises:
            DetachedNodeError: If the clone is not mounted
            EmptyContentError: If the clone measures zero width or height
            CaptureError: If the rasterizer fails
        """
        width, height = surface.measure(clone)
        logger.debug(f"Measured {width}x{height} px for {describe(clone)}")
        if width <= 0 or height <= 0:
            raise EmptyContentError(
                f"Nothing to capture: {clone.kind.value} node measured {width}x{height} px"
            )

        try:
            image = await sync_to_async(self.rasterizer.rasterize, thread_sensitive=False)(
                clone, surface.width, self.scale, self.background
            )
        except Exception as e:
            logger.error(f"Rasterization failed for {describe(clone)}: {e}", exc_info=True)
            raise CaptureError(f"Could not rasterize content: {e}") from e

        if not image.width or not image.height:
            raise CaptureError("Rasterizer returned an empty image")

        logger.debug(f"Captured {image.width}x{image.height} px bitmap at scale {self.scale}")
        return RasterImage(image)
