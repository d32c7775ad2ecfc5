"""
Document Tree

Immutable node types for the formatted content being exported, and the
visitor interface used to walk them.

Every node kind has exactly one ``visit_*`` method on NodeVisitor. Adding a
kind without teaching every visitor about it fails at instantiation time,
because the visitor methods are abstract.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Iterator, Mapping


class NodeKind(str, Enum):
    HEADING = 'heading'
    PARAGRAPH = 'paragraph'
    UNORDERED_LIST = 'unordered_list'
    ORDERED_LIST = 'ordered_list'
    TABLE = 'table'
    BLOCKQUOTE = 'blockquote'
    CODE_BLOCK = 'code_block'
    HORIZONTAL_RULE = 'horizontal_rule'
    LINE_BREAK = 'line_break'
    TEXT = 'text'
    CONTAINER = 'container'


EMPTY_STYLE = MappingProxyType({})


@dataclass(frozen=True, eq=False)
class DocumentNode:
    """
    Base node.

    Nodes compare by identity so that a surface can tell whether a given
    node object is mounted. ``style`` holds the node's own computed style
    (``font_size`` in px, ``font_weight``, colours, spacing).
    """

    children: tuple = ()
    style: Mapping = field(default_factory=lambda: EMPTY_STYLE)

    kind = NodeKind.CONTAINER

    def iter(self) -> Iterator['DocumentNode']:
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.iter()

    def text_content(self) -> str:
        """Concatenated text of all descendant text runs."""
        return ''.join(child.text_content() for child in self.children)

    def accept(self, visitor: 'NodeVisitor'):
        return visitor.visit_container(self)


@dataclass(frozen=True, eq=False)
class Container(DocumentNode):
    """Generic or unrecognized element; only its children carry meaning."""

    tag: str = 'div'

    def accept(self, visitor):
        return visitor.visit_container(self)


@dataclass(frozen=True, eq=False)
class Heading(DocumentNode):
    level: int = 1

    kind = NodeKind.HEADING

    def __post_init__(self):
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level must be between 1 and 6, got {self.level}")

    def accept(self, visitor):
        return visitor.visit_heading(self)


@dataclass(frozen=True, eq=False)
class Paragraph(DocumentNode):
    kind = NodeKind.PARAGRAPH

    def accept(self, visitor):
        return visitor.visit_paragraph(self)


@dataclass(frozen=True, eq=False)
class UnorderedList(DocumentNode):
    """Bulleted list. Each child is one list item."""

    kind = NodeKind.UNORDERED_LIST

    def accept(self, visitor):
        return visitor.visit_unordered_list(self)


@dataclass(frozen=True, eq=False)
class OrderedList(DocumentNode):
    """Numbered list. Each child is one list item."""

    kind = NodeKind.ORDERED_LIST

    def accept(self, visitor):
        return visitor.visit_ordered_list(self)


@dataclass(frozen=True, eq=False)
class TableCell:
    children: tuple = ()
    header: bool = False

    def text_content(self) -> str:
        return ''.join(child.text_content() for child in self.children)


@dataclass(frozen=True, eq=False)
class TableRow:
    cells: tuple = ()

    @property
    def is_header(self) -> bool:
        """A row is a header row when it contains at least one header cell."""
        return any(cell.header for cell in self.cells)


@dataclass(frozen=True, eq=False)
class Table(DocumentNode):
    """
    Table with its rows in document order.

    Cell contents are kept on the rows rather than as children so that
    tables stay a single node for visitors; ``iter`` still reaches them.
    """

    rows: tuple = ()

    kind = NodeKind.TABLE

    def iter(self):
        yield self
        for row in self.rows:
            for cell in row.cells:
                for child in cell.children:
                    yield from child.iter()

    def text_content(self) -> str:
        return ''.join(cell.text_content() for row in self.rows for cell in row.cells)

    @property
    def header_cells(self) -> list:
        """All header cells of the table, in document order."""
        return [cell for row in self.rows for cell in row.cells if cell.header]

    def accept(self, visitor):
        return visitor.visit_table(self)


@dataclass(frozen=True, eq=False)
class Blockquote(DocumentNode):
    kind = NodeKind.BLOCKQUOTE

    def accept(self, visitor):
        return visitor.visit_blockquote(self)


@dataclass(frozen=True, eq=False)
class CodeBlock(DocumentNode):
    kind = NodeKind.CODE_BLOCK

    def accept(self, visitor):
        return visitor.visit_code_block(self)


@dataclass(frozen=True, eq=False)
class HorizontalRule(DocumentNode):
    kind = NodeKind.HORIZONTAL_RULE

    def accept(self, visitor):
        return visitor.visit_horizontal_rule(self)


@dataclass(frozen=True, eq=False)
class LineBreak(DocumentNode):
    kind = NodeKind.LINE_BREAK

    def text_content(self) -> str:
        return '\n'

    def accept(self, visitor):
        return visitor.visit_line_break(self)


@dataclass(frozen=True, eq=False)
class TextRun(DocumentNode):
    text: str = ''

    kind = NodeKind.TEXT

    def text_content(self) -> str:
        return self.text

    def accept(self, visitor):
        return visitor.visit_text(self)


class NodeVisitor(ABC):
    """
    Visitor over the closed set of node kinds.

    ``visit_container`` is the generic case: unrecognized elements recurse
    into their children without contributing anything of their own.
    """

    @abstractmethod
    def visit_heading(self, node: Heading): ...

    @abstractmethod
    def visit_paragraph(self, node: Paragraph): ...

    @abstractmethod
    def visit_unordered_list(self, node: UnorderedList): ...

    @abstractmethod
    def visit_ordered_list(self, node: OrderedList): ...

    @abstractmethod
    def visit_table(self, node: Table): ...

    @abstractmethod
    def visit_blockquote(self, node: Blockquote): ...

    @abstractmethod
    def visit_code_block(self, node: CodeBlock): ...

    @abstractmethod
    def visit_horizontal_rule(self, node: HorizontalRule): ...

    @abstractmethod
    def visit_line_break(self, node: LineBreak): ...

    @abstractmethod
    def visit_text(self, node: TextRun): ...

    @abstractmethod
    def visit_container(self, node: DocumentNode): ...


def describe(node: DocumentNode) -> dict:
    """Diagnostic summary of a node for log messages."""
    return {
        'kind': node.kind.value,
        'children': len(node.children),
        'text_length': len(node.text_content()),
    }
