"""
Capture Style Table

Absolute style overrides applied to document clones before rasterizing.
The table is plain immutable data handed to the normalizer.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from .nodes import NodeKind


def _frozen(**values) -> MappingProxyType:
    return MappingProxyType(values)


@dataclass(frozen=True)
class StyleTable:
    """
    Absolute style overrides applied when normalizing content for capture.

    Sizes are CSS pixels. Heading sizes are fixed per level, paragraphs and
    list items have one fixed size each, and every other text node gets
    ``max(current * text_scale, min_text_size)``.
    """

    heading_sizes: Mapping = field(default_factory=lambda: MappingProxyType(
        {1: 32, 2: 28, 3: 24, 4: 20, 5: 20, 6: 20}
    ))
    heading_styles: Mapping = field(default_factory=lambda: MappingProxyType({
        1: _frozen(margin_top=0, margin_bottom=16, padding_bottom=8,
                   border_bottom_color='#dddddd', color='#111111'),
        2: _frozen(margin_top=20, margin_bottom=12, color='#222222'),
        3: _frozen(margin_top=16, margin_bottom=10, color='#333333'),
        4: _frozen(margin_top=14, margin_bottom=8, color='#444444'),
        5: _frozen(margin_top=14, margin_bottom=8, color='#444444'),
        6: _frozen(margin_top=14, margin_bottom=8, color='#444444'),
    }))
    paragraph_size: float = 16
    list_item_size: float = 16
    text_scale: float = 1.5
    min_text_size: float = 16
    root: Mapping = field(default_factory=lambda: _frozen(
        padding=20, background='#ffffff', color='#000000', font_family='sans',
    ))
    blocks: Mapping = field(default_factory=lambda: MappingProxyType({
        NodeKind.PARAGRAPH: _frozen(line_height=1.5, margin_bottom=10),
        NodeKind.UNORDERED_LIST: _frozen(margin_bottom=16, padding_left=30, item_spacing=6,
                                         line_height=1.5),
        NodeKind.ORDERED_LIST: _frozen(margin_bottom=16, padding_left=30, item_spacing=6,
                                       line_height=1.5),
        NodeKind.TABLE: _frozen(margin_bottom=16, cell_padding=8, border_width=1,
                                border_color='#dddddd', header_background='#f2f2f2',
                                line_height=1.3),
        NodeKind.BLOCKQUOTE: _frozen(margin_bottom=10, padding_left=16, border_width=4,
                                     border_color='#cccccc', color='#333333', line_height=1.5),
        NodeKind.CODE_BLOCK: _frozen(margin_bottom=10, padding=8, font_family='mono',
                                     background='#f5f5f5', line_height=1.4),
        NodeKind.HORIZONTAL_RULE: _frozen(margin_top=12, margin_bottom=12, border_width=1,
                                          border_color='#cccccc'),
        NodeKind.CONTAINER: _frozen(line_height=1.5),
    }))

    def heading_size(self, level: int) -> float:
        return self.heading_sizes[level]

    def fixed_size(self, node) -> Optional[float]:
        """Fixed font size for paragraphs and list items, None for other nodes."""
        if node.kind == NodeKind.PARAGRAPH:
            return self.paragraph_size
        if node.kind == NodeKind.CONTAINER and getattr(node, 'tag', None) == 'li':
            return self.list_item_size
        return None

    def text_size(self, current: float) -> float:
        return max(current * self.text_scale, self.min_text_size)


DEFAULT_STYLE_TABLE = StyleTable()


