"""
Core configuration service for document exports.

This module provides a centralized configuration layer that:
- Merges the DOCUMENT_EXPORT Django setting over built-in defaults
- Validates values once, close to where they are read
- Builds the default ExportOptions used by every entry point

All export services (capture, composer, writer, formatter) should use this
module to read their configuration instead of touching settings directly.
"""

from datetime import date
from typing import Optional

from django.conf import settings
from django.utils import timezone

from .exceptions import ServiceNotConfigured


DEFAULT_EXPORT_SETTINGS = {
    'PRODUCT_NAME': 'DocExport',
    'TITLE': 'Exported Document',
    'FILENAME': 'document',
    'AUTHOR': 'DocExport',
    'SUBJECT': 'Exported Document',
    'HEADER_TEXT': 'DocExport',
    'FOOTER_TEXT': 'Generated with DocExport',
    'INCLUDE_DATE': True,
    'ORIENTATION': 'portrait',
    'PAGE_SIZE': 'a4',
    'MARGINS': {'top': 15, 'right': 15, 'bottom': 15, 'left': 15},
    'WATERMARK': None,
    'IMAGE_QUALITY': 0.95,
    'CAPTURE_SCALE': 4,
    'SURFACE_WIDTH': 794,  # A4 width at 96 dpi
    'BASE_FONT_SIZE': 14,
    'MAX_CAPTURE_PIXELS': 250_000_000,
    'DATE_FORMAT': '%Y-%m-%d',
    'FONTS': {
        'regular': 'DejaVuSans.ttf',
        'bold': 'DejaVuSans-Bold.ttf',
        'mono': 'DejaVuSansMono.ttf',
    },
    'OUTPUT_DIR': None,
}

# Keys whose values are dicts merged field by field
NESTED_KEYS = ('MARGINS', 'FONTS')


def get_export_settings() -> dict:
    """
    Get the effective export configuration.

    Values from settings.DOCUMENT_EXPORT override the built-in defaults.
    Nested dictionaries (margins, fonts) are merged per field so that a
    partial override keeps the remaining defaults.

    Returns:
        Dictionary with every key of DEFAULT_EXPORT_SETTINGS

    Raises:
        ServiceNotConfigured: If a value is out of range
    """
    overrides = getattr(settings, 'DOCUMENT_EXPORT', None) or {}
    merged = {}
    for key, default in DEFAULT_EXPORT_SETTINGS.items():
        value = overrides.get(key, default)
        if key in NESTED_KEYS:
            value = {**default, **(value or {})}
        merged[key] = value

    _validate(merged)
    return merged


def _validate(config: dict) -> None:
    """Raise ServiceNotConfigured for values the pipeline cannot work with."""
    if config['CAPTURE_SCALE'] <= 0:
        raise ServiceNotConfigured("DOCUMENT_EXPORT['CAPTURE_SCALE'] must be positive")
    if config['SURFACE_WIDTH'] <= 0:
        raise ServiceNotConfigured("DOCUMENT_EXPORT['SURFACE_WIDTH'] must be positive")
    if config['BASE_FONT_SIZE'] <= 0:
        raise ServiceNotConfigured("DOCUMENT_EXPORT['BASE_FONT_SIZE'] must be positive")
    if not 0 <= config['IMAGE_QUALITY'] <= 1:
        raise ServiceNotConfigured("DOCUMENT_EXPORT['IMAGE_QUALITY'] must be within [0, 1]")
    for side in ('top', 'right', 'bottom', 'left'):
        if config['MARGINS'][side] < 0:
            raise ServiceNotConfigured(f"DOCUMENT_EXPORT['MARGINS']['{side}'] must not be negative")


def get_default_options():
    """
    Build the default export options from configuration.

    Returns:
        ExportOptions instance

    Raises:
        ServiceNotConfigured: If the page size or orientation is unknown
    """
    # Import here to avoid circular imports
    from .reporting.options import ExportOptions

    config = get_export_settings()
    try:
        return ExportOptions.from_settings(config)
    except ValueError as e:
        raise ServiceNotConfigured(f"Invalid export defaults: {e}") from e


def get_capture_scale() -> int:
    """Oversampling factor used when rasterizing content."""
    return get_export_settings()['CAPTURE_SCALE']


def get_surface_width() -> int:
    """Default width in CSS pixels of the off-screen render surface."""
    return get_export_settings()['SURFACE_WIDTH']


def get_product_name() -> str:
    """Name used as PDF creator and in the text export banner."""
    return get_export_settings()['PRODUCT_NAME']


def format_export_date(value: Optional[date] = None) -> str:
    """
    Format a date for headers and banners.

    Args:
        value: Date to format (defaults to today in the active timezone)

    Returns:
        Date formatted with DOCUMENT_EXPORT['DATE_FORMAT']
    """
    value = value or timezone.localdate()
    return value.strftime(get_export_settings()['DATE_FORMAT'])
