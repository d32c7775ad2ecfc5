"""
Render Surface

The surface a document lives on while it is being edited. Nodes have to be
mounted on a surface before they can be measured or captured. Export clones
are mounted off-screen for the duration of a capture only.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from exports.services.exceptions import DetachedNodeError
from .nodes import DocumentNode, describe


logger = logging.getLogger(__name__)


class RenderSurface:
    """
    Surface holding mounted document roots.

    Live roots are mounted with attach()/detach(). Export clones go through
    offscreen(), which always unmounts them again, whatever happens inside
    the ``with`` block.
    """

    def __init__(self, width: Optional[int] = None, layout_engine=None):
        """
        Initialize the surface.

        Args:
            width: Layout width in CSS pixels (defaults to SURFACE_WIDTH setting)
            layout_engine: IRasterizer used for measuring. If None, uses the
                default Pillow rasterizer.
        """
        if width is None:
            # Import here to avoid circular imports
            from exports.services.config import get_surface_width
            width = get_surface_width()
        if layout_engine is None:
            from exports.printing.pillow_rasterizer import PillowRasterizer
            layout_engine = PillowRasterizer()

        self.width = width
        self.layout_engine = layout_engine
        self._live: list[DocumentNode] = []
        self._offscreen: list[DocumentNode] = []
        self._lock = threading.Lock()

    def attach(self, root: DocumentNode) -> DocumentNode:
        """Mount a live document root."""
        with self._lock:
            if not any(root is mounted for mounted in self._live):
                self._live.append(root)
        return root

    def detach(self, root: DocumentNode) -> None:
        """Unmount a live document root. Unknown roots are ignored."""
        with self._lock:
            self._live = [mounted for mounted in self._live if mounted is not root]

    def is_attached(self, node: DocumentNode) -> bool:
        """True if the node is a mounted root or lies inside one."""
        with self._lock:
            roots = self._live + self._offscreen
        return any(node is candidate for root in roots for candidate in root.iter())

    @property
    def offscreen_count(self) -> int:
        """Number of clones currently mounted off-screen."""
        with self._lock:
            return len(self._offscreen)

    @contextmanager
    def offscreen(self, node: DocumentNode) -> Iterator[DocumentNode]:
        """
        Mount a node off-screen for the duration of the ``with`` block.

        The node is unmounted on every exit path, including exceptions
        raised while it is mounted.
        """
        with self._lock:
            self._offscreen.append(node)
        logger.debug(f"Mounted off-screen clone {describe(node)}")
        try:
            yield node
        finally:
            with self._lock:
                self._offscreen = [mounted for mounted in self._offscreen if mounted is not node]
            logger.debug("Unmounted off-screen clone")

    def measure(self, node: DocumentNode) -> tuple[int, int]:
        """
        Measure a mounted node at the surface width.

        Returns:
            (width, height) in CSS pixels; (0, 0) when nothing is drawable

        Raises:
            DetachedNodeError: If the node is not mounted on this surface
        """
        if not self.is_attached(node):
            raise DetachedNodeError(
                f"Cannot measure a {node.kind.value} node that is not attached to the surface"
            )
        return self.layout_engine.measure(node, self.width)
