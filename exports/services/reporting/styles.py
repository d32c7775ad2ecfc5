"""
PDF Styling

Provides paragraph and table styles for the tabular PDF export.
"""

from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_LEFT
from reportlab.lib import colors
from reportlab.platypus import TableStyle


def get_report_styles():
    """
    Get the paragraph styles used by the tabular export.

    Returns:
        Dictionary of ParagraphStyle objects
    """
    styles = getSampleStyleSheet()

    custom_styles = {
        'ReportTitle': ParagraphStyle(
            'ReportTitle',
            parent=styles['Heading1'],
            fontSize=18,
            leading=22,
            textColor=colors.Color(40 / 255, 40 / 255, 40 / 255),
            spaceAfter=4,
            alignment=TA_LEFT,
            fontName='Helvetica-Bold'
        ),
        'ReportMeta': ParagraphStyle(
            'ReportMeta',
            parent=styles['Normal'],
            fontSize=10,
            textColor=colors.Color(100 / 255, 100 / 255, 100 / 255),
            spaceAfter=10,
            alignment=TA_LEFT,
            fontName='Helvetica'
        ),
        'TableHeader': ParagraphStyle(
            'TableHeader',
            parent=styles['Normal'],
            fontSize=9,
            textColor=colors.white,
            alignment=TA_LEFT,
            fontName='Helvetica-Bold'
        ),
        'TableCell': ParagraphStyle(
            'TableCell',
            parent=styles['Normal'],
            fontSize=9,
            textColor=colors.black,
            alignment=TA_LEFT,
            fontName='Helvetica'
        ),
    }

    return custom_styles


def get_table_style():
    """
    Get the table style for the tabular export.

    Returns:
        TableStyle with header fill, alternating rows and a thin grid
    """
    return TableStyle([
        # Header row styling
        ('BACKGROUND', (0, 0), (-1, 0), colors.Color(61 / 255, 90 / 255, 254 / 255)),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 6),
        ('TOPPADDING', (0, 0), (-1, 0), 6),

        # Data rows styling
        ('TEXTCOLOR', (0, 1), (-1, -1), colors.black),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('BOTTOMPADDING', (0, 1), (-1, -1), 4),
        ('TOPPADDING', (0, 1), (-1, -1), 4),

        # Grid
        ('GRID', (0, 0), (-1, -1), 0.1, colors.Color(200 / 255, 200 / 255, 200 / 255)),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),

        # Alternating row colors
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.Color(245 / 255, 246 / 255, 250 / 255)]),
    ])
