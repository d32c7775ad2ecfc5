"""
PDF Document Writer

Serializes composed pages, their decorations and the document metadata
into PDF bytes with ReportLab.
"""

import logging
from dataclasses import dataclass
from io import BytesIO

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas as pdfcanvas

from exports.services.exceptions import SerializationError
from .canvas import draw_footer, draw_header, draw_watermark


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentMetadata:
    """PDF metadata and output settings."""

    title: str
    author: str
    subject: str
    creator: str
    page_size: tuple  # (width, height) in points
    image_quality: float = 0.95

    @property
    def jpeg_quality(self) -> int:
        return round(self.image_quality * 100)


def encode_segment(segment, quality: int) -> bytes:
    """
    JPEG-encode one page segment.

    Raises:
        SerializationError: If Pillow cannot encode the image
    """
    buffer = BytesIO()
    try:
        segment.convert('RGB').save(buffer, format='JPEG', quality=quality)
    except Exception as e:
        raise SerializationError(f"Could not encode page image: {e}") from e
    return buffer.getvalue()


def produce(pages, decorations, metadata: DocumentMetadata) -> bytes:
    """
    Write a PDF with one composed page per PDF page.

    The watermark is drawn first so that the opaque page image covers it;
    it only shows through the margins. Header and footer are drawn last.

    Args:
        pages: ComposedPage sequence in page order
        decorations: PageDecoration per page, same order
        metadata: Document metadata and page size

    Returns:
        PDF content as bytes

    Raises:
        SerializationError: If a page image cannot be encoded or the PDF
            cannot be written
    """
    if len(pages) != len(decorations):
        raise SerializationError(
            f"Got {len(pages)} page(s) but {len(decorations)} decoration(s)"
        )

    page_width, page_height = metadata.page_size
    buffer = BytesIO()
    pdf = pdfcanvas.Canvas(buffer, pagesize=metadata.page_size)
    pdf.setTitle(metadata.title)
    pdf.setAuthor(metadata.author)
    pdf.setSubject(metadata.subject)
    pdf.setCreator(metadata.creator)

    for page, decoration in zip(pages, decorations):
        descriptor = page.descriptor
        image_data = encode_segment(page.segment, metadata.jpeg_quality)
        margin = descriptor.x * mm

        draw_watermark(pdf, metadata.page_size, decoration)
        try:
            pdf.drawImage(
                ImageReader(BytesIO(image_data)),
                descriptor.x * mm,
                page_height - (descriptor.y + descriptor.height) * mm,
                width=descriptor.width * mm,
                height=descriptor.height * mm,
            )
        except Exception as e:
            raise SerializationError(f"Could not embed image for page {descriptor.index}: {e}") from e
        draw_header(pdf, metadata.page_size, margin, decoration)
        draw_footer(pdf, metadata.page_size, margin, decoration)
        pdf.showPage()

    try:
        pdf.save()
    except Exception as e:
        raise SerializationError(f"Could not write PDF: {e}") from e

    pdf_bytes = buffer.getvalue()
    buffer.close()

    logger.debug(f"Wrote {len(pages)} page(s), {len(pdf_bytes)} bytes, {page_width:.0f}x{page_height:.0f} pt")
    return pdf_bytes
