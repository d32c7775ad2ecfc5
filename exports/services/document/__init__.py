"""
Document Tree Services

Parses editor content into an immutable document tree, mounts it on a render
surface, normalizes clones for capture and formats trees as plain text.
"""

from .nodes import (
    Blockquote, CodeBlock, Container, DocumentNode, Heading, HorizontalRule,
    LineBreak, NodeKind, NodeVisitor, OrderedList, Paragraph, Table, TableCell,
    TableRow, TextRun, UnorderedList,
)
from .parser import parse_html, parse_markdown
from .surface import RenderSurface
from .normalizer import StyleNormalizer
from .style_table import DEFAULT_STYLE_TABLE, StyleTable
from .text_formatter import TreeTextFormatter, format_document

__all__ = [
    'Blockquote',
    'CodeBlock',
    'Container',
    'DocumentNode',
    'Heading',
    'HorizontalRule',
    'LineBreak',
    'NodeKind',
    'NodeVisitor',
    'OrderedList',
    'Paragraph',
    'Table',
    'TableCell',
    'TableRow',
    'TextRun',
    'UnorderedList',
    'parse_html',
    'parse_markdown',
    'RenderSurface',
    'StyleNormalizer',
    'DEFAULT_STYLE_TABLE',
    'StyleTable',
    'TreeTextFormatter',
    'format_document',
]
