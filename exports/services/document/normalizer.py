"""
Style Normalizer

Clones a mounted document subtree and replaces its live, theme dependent
styling with absolute values from a StyleTable, so that captures look the
same regardless of the editor's theme or zoom level.
"""

import logging
from contextlib import contextmanager
from dataclasses import replace
from types import MappingProxyType
from typing import Iterator, Optional

from exports.services.exceptions import DetachedNodeError
from .nodes import DocumentNode, NodeKind, Table, TableCell, TableRow, describe
from .style_table import DEFAULT_STYLE_TABLE, StyleTable
from .surface import RenderSurface


logger = logging.getLogger(__name__)

# Live style properties that survive normalization
KEPT_PROPERTIES = ('font_weight',)

# Nodes that take their size from the enclosing block
INLINE_KINDS = (NodeKind.TEXT, NodeKind.LINE_BREAK)


class StyleNormalizer:
    """
    Produces detached, normalized clones of mounted document nodes.

    The source tree is never modified.
    """

    def __init__(
        self,
        surface: RenderSurface,
        style_table: StyleTable = DEFAULT_STYLE_TABLE,
        base_font_size: Optional[float] = None,
    ):
        """
        Initialize the normalizer.

        Args:
            surface: Surface the source nodes are mounted on
            style_table: Absolute style overrides per node kind
            base_font_size: Font size of text without an explicit size
                (defaults to the BASE_FONT_SIZE setting)
        """
        if base_font_size is None:
            # Import here to avoid circular imports
            from exports.services.config import get_export_settings
            base_font_size = get_export_settings()['BASE_FONT_SIZE']

        self.surface = surface
        self.style_table = style_table
        self.base_font_size = base_font_size

    def normalize(self, node: DocumentNode) -> DocumentNode:
        """
        Create a normalized clone of a mounted node.

        Args:
            node: Root of the subtree to normalize

        Returns:
            Detached clone with absolute styles on every node

        Raises:
            DetachedNodeError: If the node is not mounted on the surface
        """
        if not self.surface.is_attached(node):
            raise DetachedNodeError(
                f"Cannot export a {node.kind.value} node that is not attached to a rendered surface"
            )

        clone = self._clone(node, self.base_font_size, is_root=True)
        logger.debug(f"Normalized subtree {describe(node)}")
        return clone

    @contextmanager
    def staged(self, node: DocumentNode) -> Iterator[DocumentNode]:
        """
        Normalize a node and keep the clone mounted off-screen while in use.

        The clone is unmounted and dropped when the block exits, whether it
        exits normally or with an exception.
        """
        clone = self.normalize(node)
        with self.surface.offscreen(clone):
            yield clone

    def _clone(self, node: DocumentNode, inherited_size: float, is_root: bool = False) -> DocumentNode:
        current_size = node.style.get('font_size', inherited_size)
        style = {key: node.style[key] for key in KEPT_PROPERTIES if key in node.style}

        if node.kind == NodeKind.HEADING:
            style['font_size'] = self.style_table.heading_size(node.level)
            style['font_weight'] = 'bold'
            style.update(self.style_table.heading_styles.get(node.level, {}))
        elif node.kind not in INLINE_KINDS:
            fixed = self.style_table.fixed_size(node)
            style['font_size'] = fixed if fixed is not None else self.style_table.text_size(current_size)
            style.update(self.style_table.blocks.get(node.kind, {}))

        if is_root:
            style.update(self.style_table.root)
            style.setdefault('font_size', self.style_table.text_size(current_size))

        changes = {
            'style': MappingProxyType(style),
            'children': tuple(self._clone(child, current_size) for child in node.children),
        }
        if isinstance(node, Table):
            changes['rows'] = tuple(
                TableRow(cells=tuple(
                    TableCell(
                        children=tuple(self._clone(child, current_size) for child in cell.children),
                        header=cell.header,
                    )
                    for cell in row.cells
                ))
                for row in node.rows
            )
        return replace(node, **changes)
