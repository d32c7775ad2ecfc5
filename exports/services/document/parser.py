"""
HTML to document tree conversion.

Editor content arrives as HTML (or Markdown converted to HTML). It is
sanitized, parsed with BeautifulSoup and turned into immutable document
nodes. Text is kept verbatim, whitespace included, so that
``text_content()`` matches what the editor shows.
"""

import logging
import re
from types import MappingProxyType
from typing import Optional

from bs4 import BeautifulSoup, Comment, NavigableString, Tag

from exports.utils.html_sanitization import render_markdown_to_html, sanitize_document_html
from .nodes import (
    Blockquote, CodeBlock, Container, DocumentNode, Heading, HorizontalRule,
    LineBreak, OrderedList, Paragraph, Table, TableCell, TableRow, TextRun,
    UnorderedList,
)


logger = logging.getLogger(__name__)

HEADING_LEVELS = {f'h{level}': level for level in range(1, 7)}
BOLD_TAGS = {'strong', 'b'}

# Parents in which a bare <code> element is a code block rather than inline code
BLOCK_PARENTS = {'[document]', 'div', 'blockquote'}

FONT_SIZE_RE = re.compile(r'^\s*([\d.]+)\s*(px|pt)?\s*$', re.IGNORECASE)
PX_PER_INCH = 96
PT_PER_INCH = 72


def parse_html(html: str, *, sanitize: bool = True) -> Container:
    """
    Parse editor HTML into a document tree.

    Args:
        html: HTML fragment produced by the editor
        sanitize: Run the HTML through the sanitizer first

    Returns:
        Root Container holding the top-level nodes
    """
    if sanitize:
        html = sanitize_document_html(html)
    soup = BeautifulSoup(html or '', 'html.parser')
    root = Container(children=_convert_children(soup), tag='root')
    logger.debug(f"Parsed document with {len(root.children)} top-level nodes")
    return root


def parse_markdown(text: str) -> Container:
    """Parse Markdown into a document tree via its HTML rendering."""
    return parse_html(render_markdown_to_html(text), sanitize=False)


def _convert_children(elem) -> tuple:
    nodes = (_convert(child) for child in elem.children)
    return tuple(node for node in nodes if node is not None)


def _convert(elem) -> Optional[DocumentNode]:
    if isinstance(elem, Comment):
        return None
    if isinstance(elem, NavigableString):
        return TextRun(text=str(elem))
    if not isinstance(elem, Tag):
        return None

    name = elem.name
    style = parse_inline_style(elem.get('style'))

    if name in HEADING_LEVELS:
        return Heading(level=HEADING_LEVELS[name], children=_convert_children(elem), style=style)
    if name == 'p':
        return Paragraph(children=_convert_children(elem), style=style)
    if name == 'ul':
        return UnorderedList(children=_list_items(elem), style=style)
    if name == 'ol':
        return OrderedList(children=_list_items(elem), style=style)
    if name == 'table':
        return Table(rows=_table_rows(elem), style=style)
    if name == 'blockquote':
        return Blockquote(children=_convert_children(elem), style=style)
    if name == 'pre' or (name == 'code' and elem.parent is not None and elem.parent.name in BLOCK_PARENTS):
        return CodeBlock(children=(TextRun(text=elem.get_text()),), style=style)
    if name == 'hr':
        return HorizontalRule(style=style)
    if name == 'br':
        return LineBreak()
    if name in BOLD_TAGS:
        style = MappingProxyType({**style, 'font_weight': 'bold'})
    return Container(children=_convert_children(elem), style=style, tag=name)


def _list_items(elem: Tag) -> tuple:
    return tuple(
        Container(children=_convert_children(li), style=parse_inline_style(li.get('style')), tag='li')
        for li in elem.find_all('li', recursive=False)
    )


def _table_rows(elem: Tag) -> tuple:
    rows = []
    for tr in elem.find_all('tr'):
        # Rows of nested tables belong to those tables
        if tr.find_parent('table') is not elem:
            continue
        cells = tuple(
            TableCell(children=_convert_children(cell), header=cell.name == 'th')
            for cell in tr.find_all(['td', 'th'], recursive=False)
        )
        rows.append(TableRow(cells=cells))
    return tuple(rows)


def parse_inline_style(value: Optional[str]) -> MappingProxyType:
    """
    Extract the style properties the exporter uses from a style attribute.

    Only ``font-size`` (px or pt), ``font-weight`` and ``color`` are kept.
    """
    style = {}
    for declaration in (value or '').split(';'):
        prop, _, raw = declaration.partition(':')
        prop = prop.strip().lower()
        raw = raw.strip()
        if not raw:
            continue
        if prop == 'font-size':
            match = FONT_SIZE_RE.match(raw)
            if match:
                size = float(match.group(1))
                if (match.group(2) or 'px').lower() == 'pt':
                    size = size * PX_PER_INCH / PT_PER_INCH
                style['font_size'] = size
        elif prop == 'font-weight':
            if raw.lower() in ('bold', 'bolder') or (raw.isdigit() and int(raw) >= 600):
                style['font_weight'] = 'bold'
        elif prop == 'color':
            style['color'] = raw
    return MappingProxyType(style)
