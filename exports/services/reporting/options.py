"""
Export Options

Immutable option objects shared by the PDF, text and table exports.
"""

import logging
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Mapping, Optional

from reportlab.lib.pagesizes import A4, LEGAL, LETTER, landscape, portrait
from reportlab.lib.units import mm

from exports.printing.paths import sanitize_filename


logger = logging.getLogger(__name__)


class PageSize(str, Enum):
    A4 = 'a4'
    LETTER = 'letter'
    LEGAL = 'legal'


class Orientation(str, Enum):
    PORTRAIT = 'portrait'
    LANDSCAPE = 'landscape'


# Paper sizes in points, as reportlab defines them
PAGE_SIZES = {
    PageSize.A4: A4,
    PageSize.LETTER: LETTER,
    PageSize.LEGAL: LEGAL,
}

# camelCase names accepted from JSON callers
OPTION_ALIASES = {
    'headerText': 'header_text',
    'footerText': 'footer_text',
    'includeDate': 'include_date',
    'pageSize': 'page_size',
    'imageQuality': 'image_quality',
}


@dataclass(frozen=True)
class Margins:
    """Page margins in millimetres."""

    top: float = 15
    right: float = 15
    bottom: float = 15
    left: float = 15

    def merged(self, overrides: Optional[Mapping]) -> 'Margins':
        """Return a copy with the given fields replaced, keeping the rest."""
        if not overrides:
            return self
        if not isinstance(overrides, Mapping):
            raise TypeError(f"Margins must be a mapping, got {type(overrides).__name__}")
        known = {f.name for f in fields(self)}
        changes = {k: float(v) for k, v in overrides.items() if k in known and v is not None}
        return replace(self, **changes)


@dataclass(frozen=True)
class ExportOptions:
    """
    Options for a single export call.

    Instances are created once at the start of a call by merging caller
    values over the configured defaults and are never changed afterwards.
    """

    title: str = 'Exported Document'
    filename: str = 'document'
    author: str = ''
    subject: str = ''
    header_text: str = ''
    footer_text: str = ''
    include_date: bool = True
    orientation: Orientation = Orientation.PORTRAIT
    page_size: PageSize = PageSize.A4
    margins: Margins = field(default_factory=Margins)
    watermark: Optional[str] = None
    image_quality: float = 0.95

    @classmethod
    def from_settings(cls, config: Mapping) -> 'ExportOptions':
        """
        Build options from a DOCUMENT_EXPORT style mapping.

        Raises:
            ValueError: If the page size or orientation is unknown
        """
        margins = config.get('MARGINS') or {}
        return cls(
            title=config.get('TITLE') or '',
            filename=config.get('FILENAME') or 'document',
            author=config.get('AUTHOR') or '',
            subject=config.get('SUBJECT') or '',
            header_text=config.get('HEADER_TEXT') or '',
            footer_text=config.get('FOOTER_TEXT') or '',
            include_date=bool(config.get('INCLUDE_DATE', True)),
            orientation=Orientation(str(config.get('ORIENTATION', 'portrait')).lower()),
            page_size=PageSize(str(config.get('PAGE_SIZE', 'a4')).lower()),
            margins=Margins().merged(margins),
            watermark=config.get('WATERMARK') or None,
            image_quality=_clamp_quality(config.get('IMAGE_QUALITY', 0.95)),
        )

    @classmethod
    def from_overrides(
        cls,
        overrides: Optional[Mapping] = None,
        defaults: Optional['ExportOptions'] = None,
    ) -> 'ExportOptions':
        """
        Merge caller supplied values over the defaults.

        Margins are merged field by field: overriding only ``top`` keeps the
        default right, bottom and left margins. Unknown keys are ignored.

        Args:
            overrides: Mapping of option names (snake_case or camelCase)
            defaults: Base options (defaults to the configured options)

        Returns:
            New ExportOptions instance

        Raises:
            ValueError: If page size or orientation is not recognised
        """
        if defaults is None:
            # Import here to avoid circular imports
            from exports.services.config import get_default_options
            defaults = get_default_options()

        if isinstance(overrides, ExportOptions):
            return overrides
        if not overrides:
            return defaults

        known = {f.name for f in fields(cls)}
        changes = {}
        for key, value in overrides.items():
            name = OPTION_ALIASES.get(key, key)
            if name not in known:
                logger.warning(f"Ignoring unknown export option: {key}")
                continue
            if value is None and name != 'watermark':
                continue
            changes[name] = value

        if 'margins' in changes:
            margins = changes['margins']
            if not isinstance(margins, Margins):
                margins = defaults.margins.merged(margins)
            changes['margins'] = margins
        if 'orientation' in changes:
            changes['orientation'] = Orientation(str(changes['orientation']).lower())
        if 'page_size' in changes:
            changes['page_size'] = PageSize(str(changes['page_size']).lower())
        if 'image_quality' in changes:
            changes['image_quality'] = _clamp_quality(changes['image_quality'])
        if 'include_date' in changes:
            changes['include_date'] = bool(changes['include_date'])
        if 'watermark' in changes:
            changes['watermark'] = changes['watermark'] or None

        return replace(defaults, **changes)

    @property
    def page_size_points(self) -> tuple[float, float]:
        """Page (width, height) in points, oriented."""
        size = PAGE_SIZES[self.page_size]
        if self.orientation == Orientation.LANDSCAPE:
            return landscape(size)
        return portrait(size)

    @property
    def page_size_mm(self) -> tuple[float, float]:
        """Page (width, height) in millimetres, oriented."""
        width, height = self.page_size_points
        return width / mm, height / mm

    def output_filename(self, extension: str) -> str:
        """Sanitized file name for the export, without doubling the extension."""
        return sanitize_filename(self.filename, extension)


def _clamp_quality(value) -> float:
    return min(1.0, max(0.0, float(value)))
