"""
Canvas Helpers

Provides helper functions for drawing headers, footers, page numbers and
watermarks on every page of an export.
"""

from reportlab.lib import colors
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas as pdfcanvas


HEADER_COLOR = colors.Color(100 / 255, 100 / 255, 100 / 255)
FOOTER_COLOR = colors.Color(150 / 255, 150 / 255, 150 / 255)
RULE_COLOR = colors.Color(200 / 255, 200 / 255, 200 / 255)
WATERMARK_COLOR = colors.Color(230 / 255, 230 / 255, 230 / 255)

WATERMARK_FONT_SIZE = 60
WATERMARK_ALPHA = 0.3


def draw_header(canvas, page_size, margin, decoration):
    """
    Draw the header label, the optional date and a light rule.

    Args:
        canvas: ReportLab canvas object
        page_size: (width, height) of the page in points
        margin: Horizontal margin in points
        decoration: PageDecoration of the page
    """
    width, height = page_size
    if not decoration.header_text and not decoration.date_text:
        return

    canvas.saveState()
    canvas.setFillColor(HEADER_COLOR)

    if decoration.header_text:
        canvas.setFont('Helvetica', 11)
        canvas.drawString(margin, height - 10 * mm, decoration.header_text)

    if decoration.date_text:
        canvas.setFont('Helvetica', 9)
        canvas.drawRightString(width - margin, height - 10 * mm, decoration.date_text)

    canvas.setStrokeColor(RULE_COLOR)
    canvas.setLineWidth(0.5)
    canvas.line(margin, height - 12 * mm, width - margin, height - 12 * mm)

    canvas.restoreState()


def draw_page_number(canvas, page_size, margin, decoration):
    """
    Draw the page number in the format 'Page X of Y'.

    Args:
        canvas: ReportLab canvas object
        page_size: (width, height) of the page in points
        margin: Horizontal margin in points
        decoration: PageDecoration of the page
    """
    canvas.saveState()
    canvas.setFont('Helvetica', 9)
    canvas.setFillColor(FOOTER_COLOR)
    canvas.drawRightString(page_size[0] - margin, decoration.footer_y * mm, decoration.page_label)
    canvas.restoreState()


def draw_footer(canvas, page_size, margin, decoration):
    """
    Draw a light rule, the footer label and the page number.

    The footer follows the bottom margin, 3 mm of rule clearance above it.

    Args:
        canvas: ReportLab canvas object
        page_size: (width, height) of the page in points
        margin: Horizontal margin in points
        decoration: PageDecoration of the page
    """
    width = page_size[0]
    footer_y = decoration.footer_y * mm
    canvas.saveState()

    canvas.setStrokeColor(RULE_COLOR)
    canvas.setLineWidth(0.5)
    canvas.line(margin, footer_y + 3 * mm, width - margin, footer_y + 3 * mm)

    if decoration.footer_text:
        canvas.setFont('Helvetica', 9)
        canvas.setFillColor(FOOTER_COLOR)
        canvas.drawString(margin, footer_y, decoration.footer_text)

    draw_page_number(canvas, page_size, margin, decoration)

    canvas.restoreState()


def draw_watermark(canvas, page_size, decoration):
    """
    Draw the watermark text diagonally across the page centre.

    Args:
        canvas: ReportLab canvas object
        page_size: (width, height) of the page in points
        decoration: PageDecoration of the page
    """
    if not decoration.watermark:
        return

    width, height = page_size
    canvas.saveState()
    canvas.setFillColor(WATERMARK_COLOR)
    canvas.setFillAlpha(WATERMARK_ALPHA)
    canvas.setFont('Helvetica', WATERMARK_FONT_SIZE)
    canvas.translate(width / 2, height / 2)
    canvas.rotate(45)
    canvas.drawCentredString(0, 0, decoration.watermark)
    canvas.restoreState()


def create_page_background_function(decorations, margin):
    """
    Create an onPage function for SimpleDocTemplate drawing the watermark
    and header before the page content.

    Args:
        decorations: Decorations shared by every page
        margin: Horizontal margin in points

    Returns:
        Function drawing the page background
    """
    def page_background(canvas, doc):
        decoration = decorations.for_page(canvas.getPageNumber(), 0)
        draw_watermark(canvas, doc.pagesize, decoration)
        draw_header(canvas, doc.pagesize, margin, decoration)

    return page_background


def create_numbered_canvas_class(decorations, margin):
    """
    Create a canvas class that draws footers once the page count is known.

    Platypus lays pages out one by one, so the total is only known when the
    document is saved. The returned class keeps every page's state and
    draws the footers in save().

    Args:
        decorations: Decorations shared by every page
        margin: Horizontal margin in points

    Returns:
        Canvas subclass for SimpleDocTemplate.build(canvasmaker=...)
    """
    class NumberedCanvas(pdfcanvas.Canvas):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            self._saved_page_states = []

        def showPage(self):
            self._saved_page_states.append(dict(self.__dict__))
            self._startPage()

        def save(self):
            total = len(self._saved_page_states)
            for state in self._saved_page_states:
                self.__dict__.update(state)
                decoration = decorations.for_page(self._pageNumber, total)
                draw_footer(self, self._pagesize, margin, decoration)
                super().showPage()
            super().save()

    return NumberedCanvas
