"""
Pillow Rasterizer Implementation

Adapter for laying out and drawing normalized document trees with Pillow.

Layout is a single top-to-bottom block flow. Text is wrapped word by word
using measured glyph widths, lists get markers in their left padding,
tables are split into equal-width columns and code blocks keep their lines
verbatim.
"""

import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Mapping, Optional

from PIL import Image, ImageDraw, ImageFont

from exports.services.document.nodes import (
    Blockquote, CodeBlock, DocumentNode, Heading, HorizontalRule, LineBreak,
    NodeKind, NodeVisitor, OrderedList, Paragraph, Table, TextRun, UnorderedList,
)
from .interfaces import IRasterizer


logger = logging.getLogger(__name__)

# Containers laid out inside the surrounding text flow
INLINE_TAGS = {'span', 'strong', 'b', 'em', 'i', 'u', 's', 'strike', 'a', 'code'}

LINE_BREAK = None
MARKER_GAP = 0.4  # gap between list marker and item text, in em


@dataclass(frozen=True)
class _Context:
    """Inherited style and horizontal extent of the block being laid out."""

    font_size: float
    bold: bool
    color: str
    family: str
    line_height: float
    left: float
    right: float

    @property
    def width(self) -> float:
        return max(self.right - self.left, 1)


@dataclass
class _TextOp:
    x: float
    y: float
    text: str
    font: object
    fill: str


@dataclass
class _RectOp:
    box: tuple
    fill: Optional[str] = None
    outline: Optional[str] = None
    width: int = 1


@dataclass
class _LineOp:
    points: tuple
    fill: str
    width: int = 1


class FontCache:
    """Loads fonts once per (variant, size)."""

    def __init__(self, font_files: Mapping[str, str]):
        self.font_files = dict(font_files)
        self._fonts = {}

    def get(self, size: float, bold: bool = False, family: str = 'sans'):
        variant = 'mono' if family == 'mono' else ('bold' if bold else 'regular')
        size = max(1, int(round(size)))
        key = (variant, size)
        if key not in self._fonts:
            self._fonts[key] = self._load(variant, size)
        return self._fonts[key]

    def _load(self, variant: str, size: int):
        path = self.font_files.get(variant)
        if path:
            try:
                return ImageFont.truetype(path, size)
            except OSError:
                logger.debug(f"Font {path} not available, using the bundled default font")
        return ImageFont.load_default(size=size)


class _LayoutPass(NodeVisitor):
    """
    Computes draw operations for a document tree.

    All coordinates are device pixels, i.e. CSS pixels times ``scale``.
    """

    def __init__(self, width: float, scale: float, fonts: FontCache):
        self.scale = scale
        self.fonts = fonts
        self.ops: list = []
        self.y = 0.0
        self.ctx = _Context(
            font_size=16, bold=False, color='#000000', family='sans',
            line_height=1.5, left=0.0, right=width * scale,
        )

    # -- helpers -----------------------------------------------------------

    def px(self, value) -> float:
        return float(value or 0) * self.scale

    def derive(self, node_style: Mapping, **extent) -> _Context:
        weight = node_style.get('font_weight')
        return replace(
            self.ctx,
            font_size=node_style.get('font_size', self.ctx.font_size),
            bold=self.ctx.bold if weight is None else weight == 'bold',
            color=node_style.get('color', self.ctx.color),
            family=node_style.get('font_family', self.ctx.family),
            line_height=node_style.get('line_height', self.ctx.line_height),
            **extent,
        )

    @contextmanager
    def using(self, ctx: _Context):
        saved = self.ctx
        self.ctx = ctx
        try:
            yield ctx
        finally:
            self.ctx = saved

    def line_px(self, ctx: _Context) -> float:
        return self.px(ctx.font_size) * ctx.line_height

    def font(self, ctx: _Context, bold: Optional[bool] = None):
        return self.fonts.get(self.px(ctx.font_size), ctx.bold if bold is None else bold, ctx.family)

    def is_inline(self, node: DocumentNode) -> bool:
        if node.kind in (NodeKind.TEXT, NodeKind.LINE_BREAK):
            return True
        return node.kind == NodeKind.CONTAINER and getattr(node, 'tag', '') in INLINE_TAGS

    def tokens(self, nodes, bold: bool) -> list:
        """Flatten inline content into (word, bold) tokens and line breaks."""
        result = []
        for node in nodes:
            if node.kind == NodeKind.TEXT:
                result.extend((word, bold) for word in node.text.split())
            elif node.kind == NodeKind.LINE_BREAK:
                result.append(LINE_BREAK)
            elif node.kind == NodeKind.CONTAINER:
                weight = node.style.get('font_weight')
                result.extend(self.tokens(node.children, bold if weight is None else weight == 'bold'))
            else:
                result.extend((word, bold) for word in node.text_content().split())
        return result

    def wrap(self, tokens: list, ctx: _Context) -> list:
        """Break tokens into lines that fit the context width."""
        lines, line, x = [], [], 0.0
        space = self.font(ctx, bold=False).getlength(' ')
        for token in tokens:
            if token is LINE_BREAK:
                lines.append(line)
                line, x = [], 0.0
                continue
            word, bold = token
            font = self.font(ctx, bold)
            word_width = font.getlength(word)
            start = x + space if line else 0.0
            if line and start + word_width > ctx.width:
                lines.append(line)
                line, start = [], 0.0
            line.append((start, word, font))
            x = start + word_width
        if line:
            lines.append(line)
        return lines

    def emit_lines(self, lines: list, ctx: _Context, left: float, top: float) -> float:
        """Queue text for wrapped lines and return their total height."""
        line_height = self.line_px(ctx)
        offset = (line_height - self.px(ctx.font_size)) / 2
        for index, line in enumerate(lines):
            for x, word, font in line:
                self.ops.append(_TextOp(left + x, top + index * line_height + offset, word, font, ctx.color))
        return len(lines) * line_height

    def flow(self, nodes, ctx: _Context) -> None:
        lines = self.wrap(self.tokens(nodes, ctx.bold), ctx)
        self.y += self.emit_lines(lines, ctx, ctx.left, self.y)

    def layout_children(self, children) -> None:
        """Lay out block children, grouping runs of inline nodes into flows."""
        pending = []
        for child in children:
            if self.is_inline(child):
                pending.append(child)
                continue
            if pending:
                self.flow(pending, self.ctx)
                pending = []
            child.accept(self)
        if pending:
            self.flow(pending, self.ctx)

    # -- visitor -----------------------------------------------------------

    def visit_heading(self, node: Heading):
        style = node.style
        ctx = self.derive(style)
        self.y += self.px(style.get('margin_top'))
        with self.using(ctx):
            self.flow(node.children, ctx)
        self.y += self.px(style.get('padding_bottom'))
        if style.get('border_bottom_color'):
            self.ops.append(_LineOp((ctx.left, self.y, ctx.right, self.y), style['border_bottom_color'],
                                    max(1, round(self.px(1)))))
            self.y += self.px(1)
        self.y += self.px(style.get('margin_bottom'))

    def visit_paragraph(self, node: Paragraph):
        ctx = self.derive(node.style)
        self.y += self.px(node.style.get('margin_top'))
        with self.using(ctx):
            self.flow(node.children, ctx)
        self.y += self.px(node.style.get('margin_bottom'))

    def _list(self, node: DocumentNode, numbered: bool):
        style = node.style
        ctx = self.derive(style)
        item_left = ctx.left + self.px(style.get('padding_left', 30))
        self.y += self.px(style.get('margin_top'))
        for index, item in enumerate(node.children, start=1):
            marker = f"{index}." if numbered else '•'
            item_ctx = replace(self.derive(item.style), left=item_left)
            font = self.font(item_ctx, bold=False)
            marker_x = item_left - font.getlength(marker) - self.px(item_ctx.font_size) * MARKER_GAP
            start = self.y
            self.emit_lines([[(0.0, marker, font)]], item_ctx, marker_x, start)
            with self.using(item_ctx):
                self.layout_children(item.children)
            self.y = max(self.y, start + self.line_px(item_ctx))
            self.y += self.px(style.get('item_spacing'))
        self.y += self.px(style.get('margin_bottom'))

    def visit_unordered_list(self, node: UnorderedList):
        self._list(node, numbered=False)

    def visit_ordered_list(self, node: OrderedList):
        self._list(node, numbered=True)

    def visit_table(self, node: Table):
        style = node.style
        columns = max((len(row.cells) for row in node.rows), default=0)
        if not columns:
            return
        ctx = self.derive(style)
        padding = self.px(style.get('cell_padding', 8))
        border = max(1, round(self.px(style.get('border_width', 1))))
        border_color = style.get('border_color', '#dddddd')
        column_width = ctx.width / columns

        self.y += self.px(style.get('margin_top'))
        for row in node.rows:
            laid_out = []
            for cell in row.cells:
                cell_ctx = replace(ctx, bold=ctx.bold or cell.header,
                                   left=0.0, right=column_width - 2 * padding)
                lines = self.wrap(self.tokens(cell.children, cell_ctx.bold), cell_ctx)
                laid_out.append((cell, cell_ctx, lines))
            content = max((len(lines) for _, _, lines in laid_out), default=0)
            row_height = max(content, 1) * self.line_px(ctx) + 2 * padding

            for column in range(columns):
                x0 = ctx.left + column * column_width
                box = (x0, self.y, x0 + column_width, self.y + row_height)
                is_header = column < len(laid_out) and laid_out[column][0].header
                fill = style.get('header_background') if is_header else None
                self.ops.append(_RectOp(box, fill=fill, outline=border_color, width=border))
            for column, (cell, cell_ctx, lines) in enumerate(laid_out):
                x0 = ctx.left + column * column_width + padding
                self.emit_lines(lines, cell_ctx, x0, self.y + padding)
            self.y += row_height
        self.y += self.px(style.get('margin_bottom'))

    def visit_blockquote(self, node: Blockquote):
        style = node.style
        indent = self.px(style.get('padding_left', 16))
        ctx = self.derive(style, left=self.ctx.left + indent)
        self.y += self.px(style.get('margin_top'))
        start = self.y
        with self.using(ctx):
            self.layout_children(node.children)
        bar = self.px(style.get('border_width', 4))
        if self.y > start:
            self.ops.append(_RectOp((ctx.left - indent, start, ctx.left - indent + bar, self.y),
                                    fill=style.get('border_color', '#cccccc')))
        self.y += self.px(style.get('margin_bottom'))

    def visit_code_block(self, node: CodeBlock):
        style = node.style
        code = node.text_content().strip('\n').expandtabs(4)
        if not code.strip():
            return
        ctx = self.derive(style)
        padding = self.px(style.get('padding', 8))
        font = self.font(ctx, bold=False)
        lines = [[(0.0, line, font)] if line else [] for line in code.split('\n')]

        self.y += self.px(style.get('margin_top'))
        height = len(lines) * self.line_px(ctx) + 2 * padding
        self.ops.append(_RectOp((ctx.left, self.y, ctx.right, self.y + height),
                                fill=style.get('background', '#f5f5f5')))
        self.emit_lines(lines, ctx, ctx.left + padding, self.y + padding)
        self.y += height + self.px(style.get('margin_bottom'))

    def visit_horizontal_rule(self, node: HorizontalRule):
        style = node.style
        width = max(1, round(self.px(style.get('border_width', 1))))
        self.y += self.px(style.get('margin_top', 12))
        self.ops.append(_LineOp((self.ctx.left, self.y, self.ctx.right, self.y),
                                style.get('border_color', '#cccccc'), width))
        self.y += width + self.px(style.get('margin_bottom', 12))

    def visit_line_break(self, node: LineBreak):
        self.y += self.line_px(self.ctx)

    def visit_text(self, node: TextRun):
        self.flow([node], self.ctx)

    def visit_container(self, node: DocumentNode):
        style = node.style
        padding = self.px(style.get('padding'))
        ctx = self.derive(style, left=self.ctx.left + padding, right=self.ctx.right - padding)
        self.y += padding + self.px(style.get('margin_top'))
        with self.using(ctx):
            self.layout_children(node.children)
        self.y += padding + self.px(style.get('margin_bottom'))


class PillowRasterizer(IRasterizer):
    """
    Rasterizer using Pillow.

    Supports:
    - Configured TrueType fonts with the bundled default font as fallback
    - Oversampled output for sharper text after JPEG re-encoding
    - A pixel budget guarding against runaway bitmap sizes
    """

    def __init__(self, font_files: Optional[Mapping[str, str]] = None, max_pixels: Optional[int] = None):
        """
        Initialize the rasterizer.

        Args:
            font_files: Font file per variant ('regular', 'bold', 'mono').
                Defaults to DOCUMENT_EXPORT['FONTS'].
            max_pixels: Largest bitmap allowed (defaults to MAX_CAPTURE_PIXELS)
        """
        if font_files is None or max_pixels is None:
            # Import here to avoid circular imports
            from exports.services.config import get_export_settings
            config = get_export_settings()
            font_files = config['FONTS'] if font_files is None else font_files
            max_pixels = config['MAX_CAPTURE_PIXELS'] if max_pixels is None else max_pixels

        self.fonts = FontCache(font_files)
        self.max_pixels = max_pixels

    def _layout(self, node: DocumentNode, width: int, scale: float) -> _LayoutPass:
        layout = _LayoutPass(width, scale, self.fonts)
        node.accept(layout)
        return layout

    def measure(self, node, width: int) -> tuple[int, int]:
        if width <= 0:
            return 0, 0
        layout = self._layout(node, width, 1)
        if not layout.ops:
            return 0, 0
        return width, math.ceil(layout.y)

    def rasterize(self, node, width: int, scale: float, background: str):
        layout = self._layout(node, width, scale)
        size = (max(1, round(width * scale)), max(1, math.ceil(layout.y)))
        if size[0] * size[1] > self.max_pixels:
            raise MemoryError(
                f"Bitmap of {size[0]}x{size[1]} pixels exceeds the limit of {self.max_pixels} pixels"
            )

        image = Image.new('RGB', size, background)
        draw = ImageDraw.Draw(image)
        for op in layout.ops:
            if isinstance(op, _RectOp):
                draw.rectangle(op.box, fill=op.fill, outline=op.outline, width=op.width)
            elif isinstance(op, _LineOp):
                draw.line(op.points, fill=op.fill, width=op.width)
            else:
                draw.text((op.x, op.y), op.text, font=op.font, fill=op.fill)

        logger.debug(f"Rasterized {len(layout.ops)} draw operations into {size[0]}x{size[1]} bitmap")
        return image
