"""
Plain Text Formatter

Walks a document tree and rebuilds its content as structured plain text:
underlined headings, wrapped paragraphs, bulleted and numbered lists,
fixed-width tables, quoted blocks and fenced code.
"""

from .nodes import (
    Blockquote, CodeBlock, DocumentNode, Heading, HorizontalRule, LineBreak,
    NodeKind, NodeVisitor, OrderedList, Paragraph, Table, TextRun, UnorderedList,
)


LINE_WIDTH = 80
BULLET = '•'
LIST_INDENT = '  '
LIST_KINDS = (NodeKind.UNORDERED_LIST, NodeKind.ORDERED_LIST)

# Table column widths, in characters
MIN_COLUMN_WIDTH = 10
MAX_COLUMN_WIDTH = 30
DEFAULT_COLUMN_WIDTH = 15


def wrap_words(text: str, width: int = LINE_WIDTH) -> list[str]:
    """
    Greedy word wrap.

    Words are added to the current line until the next word, with its
    separating space, would push the line past ``width``. A single word
    longer than ``width`` gets a line of its own.
    """
    lines = []
    line = ''
    for word in text.split():
        candidate = f"{line} {word}" if line else word
        if line and len(candidate) > width:
            lines.append(line)
            line = word
        else:
            line = candidate
    if line:
        lines.append(line)
    return lines


def column_width(header: str) -> int:
    return min(MAX_COLUMN_WIDTH, max(MIN_COLUMN_WIDTH, len(header) + 2))


def format_row(cells: list[str], widths: list[int]) -> str:
    """Render one table row as ``| cell | cell |`` with padded cells."""
    row = '| '
    for index, cell in enumerate(cells):
        width = widths[index] if index < len(widths) else DEFAULT_COLUMN_WIDTH
        row += cell.ljust(width - 2) + ' | '
    return row.rstrip()


def _collapse(text: str) -> str:
    return ' '.join(text.split())


def _nested_lists(node: DocumentNode):
    """Lists below a node, not descending into the lists themselves."""
    for child in node.children:
        if child.kind in LIST_KINDS:
            yield child
        else:
            yield from _nested_lists(child)


def _own_text(node: DocumentNode) -> str:
    """Text of a node without the text of any nested list."""
    parts = []
    for child in node.children:
        if child.kind in LIST_KINDS:
            continue
        if any(_nested_lists(child)):
            parts.append(_own_text(child))
        else:
            parts.append(child.text_content())
    return ''.join(parts)


class TreeTextFormatter(NodeVisitor):
    """
    Formats a document tree as plain text.

    One instance can format several trees; each call to format() starts
    with an empty buffer and returns the complete text.
    """

    def __init__(self, line_width: int = LINE_WIDTH):
        self.line_width = line_width
        self._parts: list[str] = []

    def format(self, root: DocumentNode) -> str:
        self._parts = []
        root.accept(self)
        text = ''.join(self._parts)
        self._parts = []
        return text

    def _emit(self, text: str) -> None:
        self._parts.append(text)

    def visit_heading(self, node: Heading):
        text = _collapse(node.text_content())
        if not text:
            return
        if node.level == 1:
            self._emit(f"{text.upper()}\n{'=' * min(len(text), self.line_width)}\n\n")
        elif node.level == 2:
            self._emit(f"{text.upper()}\n{'-' * min(len(text), self.line_width)}\n\n")
        else:
            self._emit(f"{'#' * node.level} {text}\n\n")

    def visit_paragraph(self, node: Paragraph):
        lines = wrap_words(node.text_content(), self.line_width)
        if lines:
            self._emit('\n'.join(lines) + '\n\n')

    def _list_lines(self, node, depth: int = 0) -> list[str]:
        """
        One line per list item, nested items indented under their parent.

        Numbers count every item of a list, including empty ones that
        produce no line.
        """
        lines = []
        for index, item in enumerate(node.children, start=1):
            text = _collapse(_own_text(item))
            if text:
                marker = f"{index}." if node.kind == NodeKind.ORDERED_LIST else BULLET
                lines.append(f"{LIST_INDENT * depth}{marker} {text}\n")
            for nested in _nested_lists(item):
                lines.extend(self._list_lines(nested, depth + 1))
        return lines

    def visit_unordered_list(self, node: UnorderedList):
        lines = self._list_lines(node)
        if lines:
            self._emit(''.join(lines) + '\n')

    def visit_ordered_list(self, node: OrderedList):
        lines = self._list_lines(node)
        if lines:
            self._emit(''.join(lines) + '\n')

    def visit_table(self, node: Table):
        headers = [cell.text_content().strip() for cell in node.header_cells]
        widths = [column_width(header) for header in headers]
        lines = []

        if headers:
            lines.append(format_row(headers, widths))
            lines.append(format_row(['-' * (width - 2) for width in widths], widths))

        for row in node.rows:
            if row.is_header:
                continue
            cells = [cell.text_content().strip() for cell in row.cells]
            if not any(cells):
                continue
            lines.append(format_row(cells, widths))

        if lines:
            self._emit('\n'.join(lines) + '\n\n')

    def visit_blockquote(self, node: Blockquote):
        text = node.text_content().strip()
        if not text:
            return
        quoted = [f"> {line.strip()}" for line in text.split('\n')]
        self._emit('\n'.join(quoted) + '\n\n')

    def visit_code_block(self, node: CodeBlock):
        code = node.text_content().strip('\n')
        if not code.strip():
            return
        self._emit(f"```\n{code}\n```\n\n")

    def visit_horizontal_rule(self, node: HorizontalRule):
        self._emit('-' * self.line_width + '\n\n')

    def visit_line_break(self, node: LineBreak):
        self._emit('\n')

    def visit_text(self, node: TextRun):
        text = node.text.strip()
        if text:
            self._emit(text + '\n')

    def visit_container(self, node: DocumentNode):
        for child in node.children:
            child.accept(self)


def format_document(
    root: DocumentNode,
    *,
    title: str = '',
    generator: str = '',
    generated_on: str = '',
    footer_text: str = '',
) -> str:
    """
    Format a document tree with an optional title banner and footer.

    Args:
        root: Document tree to format
        title: Title printed uppercased and underlined above the body
        generator: Product name for the "Document generated by" line
        generated_on: Date text for the "Generated on" line
        footer_text: Text printed below a separator after the body

    Returns:
        The complete text document
    """
    separator = '-' * LINE_WIDTH
    parts = []

    if title:
        parts.append(f"{title.upper()}\n{'=' * min(len(title), LINE_WIDTH)}\n\n")
    if generator:
        parts.append(f"Document generated by {generator}\n")
    if generated_on:
        parts.append(f"Generated on: {generated_on}\n")
    if title or generator or generated_on:
        parts.append(f"{separator}\n\n")

    parts.append(TreeTextFormatter().format(root))

    if footer_text:
        parts.append(f"\n{separator}\n{footer_text}\n")

    return ''.join(parts)
