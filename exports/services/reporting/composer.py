"""
Page Composer

Slices one captured bitmap across fixed-size pages.

The bitmap is scaled uniformly to the content width of the page. When the
scaled height fits the content area, the whole bitmap goes on one page.
Otherwise the scaled height is cut into consecutive slices of at most the
content height, each mapped back to a proportional band of source rows.

Pagination runs to completion before any decoration is computed, because
footers print the final page count.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .options import ExportOptions


logger = logging.getLogger(__name__)

# Remaining heights below this (in mm) count as nothing left to place
EPSILON = 1e-6

# Footer baseline sits this far (mm) below the content area, but never lower than MIN_FOOTER_Y
FOOTER_GAP = 5
MIN_FOOTER_Y = 5


@dataclass(frozen=True)
class PageGeometry:
    """
    Physical page layout in millimetres.

    Content is placed ``margin`` from the left edge with the same margin on
    the right, starting ``start_y`` below the top edge and ending
    ``bottom_margin`` above the bottom edge.
    """

    width: float
    height: float
    margin: float
    start_y: float
    bottom_margin: float

    @classmethod
    def from_options(cls, options: ExportOptions) -> 'PageGeometry':
        width, height = options.page_size_mm
        return cls(
            width=width,
            height=height,
            margin=options.margins.left,
            start_y=options.margins.top,
            bottom_margin=options.margins.bottom,
        )

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def max_content_height(self) -> float:
        return self.height - self.start_y - self.bottom_margin


@dataclass(frozen=True)
class PageDescriptor:
    """
    One page of a sliced bitmap.

    ``source_top`` and ``source_bottom`` are the (fractional) band of source
    rows shown on the page; consecutive pages share their boundary. The
    placement ``x, y, width, height`` is in millimetres from the top-left
    corner of the page.
    """

    index: int
    source_top: float
    source_bottom: float
    x: float
    y: float
    width: float
    height: float

    @property
    def source_height(self) -> float:
        return self.source_bottom - self.source_top

    def crop_box(self, image_width: int, image_height: int) -> tuple[int, int, int, int]:
        """Whole-pixel crop box for the band, never empty."""
        top = min(round(self.source_top), image_height - 1)
        bottom = min(max(round(self.source_bottom), top + 1), image_height)
        return 0, top, image_width, bottom


@dataclass(frozen=True)
class Decorations:
    """Decoration settings shared by every page of a document."""

    header_text: str = ''
    footer_text: str = ''
    date_text: str = ''
    watermark: Optional[str] = None
    bottom_margin: float = 15

    @classmethod
    def from_options(cls, options: ExportOptions, date_text: str = '') -> 'Decorations':
        return cls(
            header_text=options.header_text,
            footer_text=options.footer_text,
            date_text=date_text if options.include_date else '',
            watermark=options.watermark,
            bottom_margin=options.margins.bottom,
        )

    def for_page(self, index: int, total: int) -> 'PageDecoration':
        return PageDecoration(
            index=index,
            total=total,
            header_text=self.header_text,
            footer_text=self.footer_text,
            date_text=self.date_text,
            watermark=self.watermark,
            bottom_margin=self.bottom_margin,
        )


@dataclass(frozen=True)
class PageDecoration:
    """Decorations of one page, including its position in the document."""

    index: int
    total: int
    header_text: str = ''
    footer_text: str = ''
    date_text: str = ''
    watermark: Optional[str] = None
    bottom_margin: float = 15

    @property
    def page_label(self) -> str:
        return f"Page {self.index} of {self.total}"

    @property
    def footer_y(self) -> float:
        """Footer baseline in mm above the bottom edge; follows the bottom margin."""
        return max(self.bottom_margin - FOOTER_GAP, MIN_FOOTER_Y)


@dataclass(frozen=True)
class ComposedPage:
    """A page descriptor with the bitmap segment it shows."""

    descriptor: PageDescriptor
    segment: object


@dataclass(frozen=True)
class Composition:
    pages: tuple
    decorations: tuple
    geometry: PageGeometry

    @property
    def page_count(self) -> int:
        return len(self.pages)


def paginate(image_width: int, image_height: int, geometry: PageGeometry) -> list[PageDescriptor]:
    """
    Compute the page descriptors for a bitmap.

    Args:
        image_width: Bitmap width in pixels
        image_height: Bitmap height in pixels
        geometry: Target page geometry

    Returns:
        Descriptors in page order. Their placement heights sum to the
        scaled bitmap height and their source bands cover every row once.

    Raises:
        ValueError: If the image or the content area has no extent
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Cannot paginate an image of {image_width}x{image_height} px")
    content_width = geometry.content_width
    max_height = geometry.max_content_height
    if content_width <= 0 or max_height <= 0:
        raise ValueError(
            f"Margins leave no content area on a {geometry.width:.1f}x{geometry.height:.1f} mm page"
        )

    scaled_height = image_height * content_width / image_width

    if scaled_height <= max_height:
        return [PageDescriptor(
            index=1,
            source_top=0.0,
            source_bottom=float(image_height),
            x=geometry.margin,
            y=geometry.start_y,
            width=content_width,
            height=scaled_height,
        )]

    descriptors = []
    remaining = scaled_height
    source_y = 0.0
    index = 1
    while remaining > EPSILON:
        # A remainder within rounding noise of a full page belongs to this page
        take = remaining if remaining <= max_height + EPSILON else max_height
        take_px = take / scaled_height * image_height
        remaining -= take
        source_bottom = float(image_height) if remaining <= EPSILON else source_y + take_px

        descriptors.append(PageDescriptor(
            index=index,
            source_top=source_y,
            source_bottom=source_bottom,
            x=geometry.margin,
            y=geometry.start_y,
            width=content_width,
            height=take,
        ))
        source_y = source_bottom
        index += 1

    return descriptors


def compose(raster, geometry: PageGeometry, decorations: Decorations) -> Composition:
    """
    Slice a captured bitmap into decorated pages.

    Args:
        raster: RasterImage to slice
        geometry: Target page geometry
        decorations: Header, footer and watermark settings

    Returns:
        Composition with one segment and one decoration per page
    """
    descriptors = paginate(raster.width, raster.height, geometry)

    if len(descriptors) == 1:
        pages = [ComposedPage(descriptors[0], raster.image)]
    else:
        pages = [
            ComposedPage(descriptor, raster.image.crop(descriptor.crop_box(raster.width, raster.height)))
            for descriptor in descriptors
        ]

    total = len(pages)
    page_decorations = [decorations.for_page(page.descriptor.index, total) for page in pages]

    logger.debug(
        f"Composed {raster.width}x{raster.height} px bitmap into {total} page(s) "
        f"of {geometry.width:.1f}x{geometry.height:.1f} mm"
    )
    return Composition(pages=tuple(pages), decorations=tuple(page_decorations), geometry=geometry)
