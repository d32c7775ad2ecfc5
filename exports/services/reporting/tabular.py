"""
Tabular Composer

Builds a paginated PDF table directly from row/column data with ReportLab
Platypus. The table header repeats on every page; title and generation
date appear once, at the top of the first page.
"""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Mapping, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Table

from exports.services.exceptions import MissingDataError, SerializationError
from .canvas import create_numbered_canvas_class, create_page_background_function
from .composer import Decorations
from .options import ExportOptions
from .styles import get_report_styles, get_table_style


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Column:
    """Table column: printed header label and the row key it reads."""

    header: str
    key: str

    @classmethod
    def coerce(cls, value) -> 'Column':
        """
        Build a Column from a Column or a mapping.

        Mappings use ``header`` plus ``key`` or ``dataKey``.

        Raises:
            MissingDataError: If the header or key is missing
        """
        if isinstance(value, Column):
            return value
        if isinstance(value, Mapping):
            key = value.get('key', value.get('dataKey'))
            header = value.get('header', key)
            if key is not None:
                return cls(header=str(header), key=str(key))
        raise MissingDataError(f"Invalid table column definition: {value!r}")


def normalize_columns(columns) -> list[Column]:
    """
    Validate column definitions.

    Raises:
        MissingDataError: If columns are absent or empty
    """
    if not columns:
        raise MissingDataError("Table export requires at least one column")
    return [Column.coerce(column) for column in columns]


def cell_text(value) -> str:
    """Printed text of a cell value; None prints as empty."""
    if value is None:
        return ''
    return str(value)


def build_table_data(rows: Sequence[Mapping], columns: Sequence[Column], styles) -> list[list]:
    """Header row followed by one row of wrapped cell paragraphs per data row."""
    data = [[Paragraph(escape(column.header), styles['TableHeader']) for column in columns]]
    for row in rows:
        data.append([
            Paragraph(escape(cell_text(row.get(column.key))), styles['TableCell'])
            for column in columns
        ])
    return data


def compose_table(
    rows: Optional[Sequence[Mapping]],
    columns,
    options: ExportOptions,
    date_text: str = '',
    creator: str = '',
) -> bytes:
    """
    Render row/column data as a paginated PDF table.

    Args:
        rows: Data rows, each mapping column keys to cell values
        columns: Column definitions (Column or {'header', 'key'/'dataKey'})
        options: Export options
        date_text: Formatted generation date
        creator: PDF creator metadata

    Returns:
        PDF content as bytes

    Raises:
        MissingDataError: If rows or columns are missing
        SerializationError: If the PDF cannot be built
    """
    if rows is None:
        raise MissingDataError("Table export requires row data")
    columns = normalize_columns(columns)

    page_size = options.page_size_points
    margins = options.margins
    styles = get_report_styles()

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=page_size,
        leftMargin=margins.left * mm,
        rightMargin=margins.right * mm,
        topMargin=margins.top * mm,
        bottomMargin=margins.bottom * mm,
        title=options.title,
        author=options.author,
        subject=options.subject,
        creator=creator,
    )

    story = []
    if options.title:
        story.append(Paragraph(escape(options.title), styles['ReportTitle']))
    if options.include_date and date_text:
        story.append(Paragraph(f"Generated on: {escape(date_text)}", styles['ReportMeta']))

    column_width = doc.width / len(columns)
    table = Table(
        build_table_data(rows, columns, styles),
        colWidths=[column_width] * len(columns),
        repeatRows=1,
    )
    table.setStyle(get_table_style())
    story.append(table)

    decorations = Decorations.from_options(options, date_text)
    on_page = create_page_background_function(decorations, margins.left * mm)

    try:
        doc.build(
            story,
            onFirstPage=on_page,
            onLaterPages=on_page,
            canvasmaker=create_numbered_canvas_class(decorations, margins.left * mm),
        )
    except Exception as e:
        raise SerializationError(f"Could not build table PDF: {e}") from e

    pdf_bytes = buffer.getvalue()
    buffer.close()

    logger.debug(f"Built table PDF with {len(rows)} row(s) and {len(columns)} column(s), {len(pdf_bytes)} bytes")
    return pdf_bytes
