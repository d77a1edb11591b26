"""
Page geometry, fonts and colours for the API reference PDF.

This module handles:
- Page size and margins (PageSpec)
- Font selection per text role (FontSpec)
- Font registration, with optional DejaVu TTF fonts for non-Latin text
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from reportlab.lib.colors import Color, HexColor, black
from reportlab.lib.pagesizes import A4, LETTER
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont


logger = logging.getLogger(__name__)


@dataclass
class PageSpec:
    """Page layout specification (points)"""
    width: float
    height: float
    top_margin: float
    right_margin: float
    bottom_margin: float
    left_margin: float

    @property
    def size(self) -> Tuple[float, float]:
        return (self.width, self.height)

    @property
    def content_width(self) -> float:
        return self.width - self.left_margin - self.right_margin

    @property
    def page_break_trigger(self) -> float:
        """Lowest y (top-down) content may reach"""
        return self.height - self.bottom_margin

    @classmethod
    def a4(cls) -> 'PageSpec':
        """Standard A4 (210 x 297 mm), 10 mm sides, 20 mm bottom"""
        return cls(
            width=A4[0], height=A4[1],
            top_margin=10*mm, right_margin=10*mm,
            bottom_margin=20*mm, left_margin=10*mm,
        )

    @classmethod
    def us_letter(cls) -> 'PageSpec':
        """US Letter (8.5 x 11 in)"""
        return cls(
            width=LETTER[0], height=LETTER[1],
            top_margin=10*mm, right_margin=10*mm,
            bottom_margin=20*mm, left_margin=10*mm,
        )

    @classmethod
    def named(cls, name: str) -> 'PageSpec':
        sizes = {'a4': cls.a4, 'letter': cls.us_letter}
        factory = sizes.get(name.lower())
        if not factory:
            raise ValueError(f"Unknown page size: {name}. Available: {list(sizes.keys())}")
        return factory()


@dataclass
class FontSpec:
    """Font for one text role"""
    family: str          # 'sans' or 'mono'
    size: float          # points
    bold: bool = False
    italic: bool = False
    color: Color = field(default_factory=lambda: black)


# Colours
GREY_TEXT = HexColor('#646464')
DARK_TEXT = HexColor('#3C3C3C')
MUTED_TEXT = HexColor('#808080')
LINK_TEXT = HexColor('#0066CC')
WHITE_TEXT = HexColor('#FFFFFF')

BORDER = HexColor('#B4B4B4')
SEPARATOR = HexColor('#DCDCDC')
TABLE_HEADER_FILL = HexColor('#F5F5F5')
TAG_HEADER_FILL = HexColor('#F0F0F0')
EXAMPLE_FILL = HexColor('#FAFAFA')

METHOD_COLORS: Dict[str, Color] = {
    'GET': HexColor('#61AFFE'),
    'POST': HexColor('#49CC90'),
    'PUT': HexColor('#FCA130'),
    'DELETE': HexColor('#F93E3E'),
    'PATCH': HexColor('#50E3C2'),
    'HEAD': HexColor('#9061F9'),
    'OPTIONS': HexColor('#808080'),
}
DEFAULT_METHOD_COLOR = HexColor('#808080')


# Text roles
STYLES: Dict[str, FontSpec] = {
    'title': FontSpec('sans', 28, bold=True),
    'version': FontSpec('sans', 14, color=GREY_TEXT),
    'title_description': FontSpec('sans', 11),
    'title_footer': FontSpec('sans', 10, color=MUTED_TEXT),
    'toc_title': FontSpec('sans', 20, bold=True),
    'toc_1': FontSpec('sans', 12, bold=True),
    'toc_2': FontSpec('sans', 10, bold=True),
    'toc_3': FontSpec('sans', 9),
    'section_header': FontSpec('sans', 18, bold=True),
    'tag_header': FontSpec('sans', 14, bold=True),
    'sub_header': FontSpec('sans', 10, bold=True, color=DARK_TEXT),
    'section_label': FontSpec('sans', 11, bold=True),
    'objects_header': FontSpec('sans', 11, bold=True, color=DARK_TEXT),
    'body': FontSpec('sans', 10),
    'small': FontSpec('sans', 9),
    'small_muted': FontSpec('sans', 9, color=GREY_TEXT),
    'server_url': FontSpec('sans', 10, bold=True, color=LINK_TEXT),
    'method_badge': FontSpec('sans', 11, bold=True, color=WHITE_TEXT),
    'endpoint_path': FontSpec('sans', 11, bold=True),
    'operation_id': FontSpec('sans', 8, color=MUTED_TEXT),
    'summary': FontSpec('sans', 10, bold=True),
    'required_marker': FontSpec('sans', 9, italic=True, color=DARK_TEXT),
    'table_header': FontSpec('sans', 8, bold=True),
    'table_cell': FontSpec('sans', 8),
    'summary_header': FontSpec('sans', 9, bold=True),
    'summary_cell': FontSpec('sans', 9),
    'component_name': FontSpec('sans', 12, bold=True),
    'component_table_title': FontSpec('sans', 9, bold=True),
    'schema_info': FontSpec('sans', 8),
    'example_title': FontSpec('sans', 9, italic=True, color=DARK_TEXT),
    'example': FontSpec('mono', 8),
}


class FontManager:
    """
    Maps text roles to registered ReportLab fonts.

    The 14 standard PDF fonts are always available. With unicode fonts
    enabled, DejaVu TTF files are registered when found on the search path
    so that text outside Latin-1 renders correctly.
    """

    DEFAULT_SEARCH_PATHS = [
        '/usr/share/fonts/truetype/dejavu/',
        '/usr/share/fonts/TTF/',
        '/usr/local/share/fonts/',
        os.path.expanduser('~/.fonts/'),
        os.path.expanduser('~/.local/share/fonts/'),
        '/Library/Fonts/',
        os.path.expanduser('~/Library/Fonts/'),
        str(Path.cwd() / 'fonts'),
    ]

    STANDARD_FONTS = {
        'sans': ('Helvetica', 'Helvetica-Bold', 'Helvetica-Oblique', 'Helvetica-BoldOblique'),
        'mono': ('Courier', 'Courier-Bold', 'Courier-Oblique', 'Courier-BoldOblique'),
    }

    DEJAVU_FONTS = {
        'sans': (
            ('DejaVuSans', 'DejaVuSans.ttf'),
            ('DejaVuSans-Bold', 'DejaVuSans-Bold.ttf'),
            ('DejaVuSans-Oblique', 'DejaVuSans-Oblique.ttf'),
            ('DejaVuSans-BoldOblique', 'DejaVuSans-BoldOblique.ttf'),
        ),
        'mono': (
            ('DejaVuSansMono', 'DejaVuSansMono.ttf'),
            ('DejaVuSansMono-Bold', 'DejaVuSansMono-Bold.ttf'),
            ('DejaVuSansMono-Oblique', 'DejaVuSansMono-Oblique.ttf'),
            ('DejaVuSansMono-BoldOblique', 'DejaVuSansMono-BoldOblique.ttf'),
        ),
    }

    def __init__(self, unicode_fonts: bool = False, additional_paths: Optional[List[str]] = None):
        """
        Initialize FontManager.

        Args:
            unicode_fonts: Try to register DejaVu TTF fonts
            additional_paths: Extra paths to search for fonts
        """
        self.search_paths = list(additional_paths or []) + list(self.DEFAULT_SEARCH_PATHS)
        self.families: Dict[str, Tuple[str, ...]] = dict(self.STANDARD_FONTS)

        if unicode_fonts:
            for family in self.DEJAVU_FONTS:
                if self._register_family(family):
                    self.families[family] = tuple(name for name, _ in self.DEJAVU_FONTS[family])
                else:
                    logger.warning(f"DejaVu '{family}' fonts not found, using standard fonts")

    def find_font_file(self, filename: str) -> Optional[str]:
        for search_path in self.search_paths:
            path = Path(search_path) / filename
            if path.exists():
                return str(path)
        return None

    def _register_family(self, family: str) -> bool:
        variants = self.DEJAVU_FONTS[family]
        paths = [self.find_font_file(filename) for _, filename in variants]
        if not all(paths):
            return False

        registered = set(pdfmetrics.getRegisteredFontNames())
        for (name, _), path in zip(variants, paths):
            if name in registered:
                continue
            try:
                pdfmetrics.registerFont(TTFont(name, path))
            except Exception as e:  # reportlab raises TTFError and plain errors for bad files
                logger.error(f"Failed to register font {name}: {e}")
                return False
            logger.debug(f"Registered font: {name} from {path}")
        return True

    def get_font_name(self, spec: FontSpec) -> str:
        """Get the ReportLab font name for a FontSpec"""
        regular, bold, italic, bold_italic = self.families.get(spec.family, self.STANDARD_FONTS['sans'])
        if spec.bold and spec.italic:
            return bold_italic
        if spec.bold:
            return bold
        if spec.italic:
            return italic
        return regular
