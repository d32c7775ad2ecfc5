"""
Document Export Service

Entry points for the three exports:
- PDF: normalize, capture, paginate and write a mounted document subtree
- Text: format a document tree as structured plain text
- Table: write row/column data as a paginated PDF table

Every entry point logs internal failures with diagnostic context and
raises a single ExportFailed. The optional file saver only runs once the
complete result is assembled.
"""

import logging
from typing import Mapping, Optional, Sequence, Union

from exports.printing.dto import ExportResult
from exports.printing.interfaces import IFileSaver, IRasterizer
from exports.services.config import format_export_date, get_capture_scale, get_product_name
from exports.services.document.nodes import DocumentNode, describe
from exports.services.document.normalizer import StyleNormalizer
from exports.services.document.style_table import DEFAULT_STYLE_TABLE, StyleTable
from exports.services.document.text_formatter import format_document
from exports.services.exceptions import ExportFailed, MissingDataError
from .capture import RasterCapture
from .composer import Decorations, PageGeometry, compose
from .options import ExportOptions
from .tabular import compose_table
from .writer import DocumentMetadata, produce


logger = logging.getLogger(__name__)

OptionsInput = Optional[Union[ExportOptions, Mapping]]

TEXT_CONTENT_TYPE = 'text/plain; charset=utf-8'
PDF_CONTENT_TYPE = 'application/pdf'


class DocumentExportService:
    """
    Service for exporting documents.

    Usage:
        service = DocumentExportService()
        result = await service.export_pdf(root, surface, {'title': 'Report'})
        text = service.export_text(root, {'filename': 'report'})
        table = service.export_table(rows, columns)
    """

    def __init__(
        self,
        rasterizer: Optional[IRasterizer] = None,
        saver: Optional[IFileSaver] = None,
        style_table: Optional[StyleTable] = None,
        capture_scale: Optional[float] = None,
    ):
        """
        Initialize the service.

        Args:
            rasterizer: Rasterization engine. If None, the surface's layout
                engine is used, so measuring and drawing agree.
            saver: Optional file saver called with every finished export
            style_table: Style overrides for normalization
            capture_scale: Oversampling factor (defaults to CAPTURE_SCALE setting)
        """
        self.rasterizer = rasterizer
        self.saver = saver
        self.style_table = style_table or DEFAULT_STYLE_TABLE
        self.capture_scale = capture_scale or get_capture_scale()

    async def export_pdf(self, root: DocumentNode, surface, options: OptionsInput = None) -> ExportResult:
        """
        Export a mounted document subtree as a paginated PDF.

        Args:
            root: Subtree to export; must be mounted on the surface
            surface: RenderSurface the subtree is mounted on
            options: ExportOptions or mapping of overrides

        Returns:
            ExportResult with the PDF bytes

        Raises:
            ExportFailed: If any step of the export fails
        """
        diagnostics = describe(root)
        logger.info(f"Starting PDF export of {diagnostics}")

        try:
            options = ExportOptions.from_overrides(options)
            rasterizer = self.rasterizer or surface.layout_engine
            capture = RasterCapture(rasterizer, scale=self.capture_scale)
            normalizer = StyleNormalizer(surface, self.style_table)

            with normalizer.staged(root) as clone:
                raster = await capture.capture(clone, surface)
            diagnostics['measured'] = f"{raster.width}x{raster.height}"

            date_text = format_export_date()
            composition = compose(
                raster,
                PageGeometry.from_options(options),
                Decorations.from_options(options, date_text),
            )
            diagnostics['pages'] = composition.page_count

            metadata = DocumentMetadata(
                title=options.title,
                author=options.author,
                subject=options.subject,
                creator=get_product_name(),
                page_size=options.page_size_points,
                image_quality=options.image_quality,
            )
            pdf_bytes = produce(composition.pages, composition.decorations, metadata)

            result = ExportResult(
                content=pdf_bytes,
                filename=options.output_filename('pdf'),
                content_type=PDF_CONTENT_TYPE,
            )
            self._deliver(result)

        except Exception as e:
            logger.error(f"PDF export failed for {diagnostics}: {e}", exc_info=True)
            raise ExportFailed("Failed to generate PDF. Please try again.", format='pdf') from e

        logger.info(
            f"Successfully generated PDF: {result.filename} "
            f"({composition.page_count} page(s), {len(result)} bytes)"
        )
        return result

    def export_text(self, root: DocumentNode, options: OptionsInput = None) -> ExportResult:
        """
        Export a document tree as structured plain text.

        Args:
            root: Document tree to format (mounting is not required)
            options: ExportOptions or mapping of overrides

        Returns:
            ExportResult with the UTF-8 encoded text

        Raises:
            ExportFailed: If formatting or saving fails
        """
        diagnostics = describe(root)
        logger.info(f"Starting text export of {diagnostics}")

        try:
            options = ExportOptions.from_overrides(options)
            text = format_document(
                root,
                title=options.title,
                generator=get_product_name(),
                generated_on=format_export_date() if options.include_date else '',
                footer_text=options.footer_text,
            )
            result = ExportResult(
                content=text.encode('utf-8'),
                filename=options.output_filename('txt'),
                content_type=TEXT_CONTENT_TYPE,
            )
            self._deliver(result)

        except Exception as e:
            logger.error(f"Text export failed for {diagnostics}: {e}", exc_info=True)
            raise ExportFailed("Failed to generate text document. Please try again.", format='txt') from e

        logger.info(f"Successfully generated text export: {result.filename} ({len(result)} bytes)")
        return result

    def export_table(
        self,
        rows: Optional[Sequence[Mapping]],
        columns,
        options: OptionsInput = None,
    ) -> ExportResult:
        """
        Export row/column data as a paginated PDF table.

        Args:
            rows: Data rows mapping column keys to values
            columns: Column definitions ({'header', 'key'} or {'header', 'dataKey'})
            options: ExportOptions or mapping of overrides

        Returns:
            ExportResult with the PDF bytes

        Raises:
            ExportFailed: If data is missing or the PDF cannot be built
        """
        diagnostics = {
            'rows': None if rows is None else len(rows),
            'columns': len(columns) if columns else 0,
        }
        logger.info(f"Starting table export of {diagnostics}")

        try:
            options = ExportOptions.from_overrides(options)
            pdf_bytes = compose_table(
                rows,
                columns,
                options,
                date_text=format_export_date(),
                creator=get_product_name(),
            )
            result = ExportResult(
                content=pdf_bytes,
                filename=options.output_filename('pdf'),
                content_type=PDF_CONTENT_TYPE,
            )
            self._deliver(result)

        except MissingDataError as e:
            logger.error(f"Table export rejected for {diagnostics}: {e}")
            raise ExportFailed("Missing table data or columns for PDF export.", format='pdf') from e
        except Exception as e:
            logger.error(f"Table export failed for {diagnostics}: {e}", exc_info=True)
            raise ExportFailed("Failed to generate PDF. Please try again.", format='pdf') from e

        logger.info(f"Successfully generated table PDF: {result.filename} ({len(result)} bytes)")
        return result

    def _deliver(self, result: ExportResult) -> None:
        if self.saver is not None:
            location = self.saver.save(result)
            logger.debug(f"Delivered {result.filename} to {location}")
