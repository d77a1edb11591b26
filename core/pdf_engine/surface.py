"""
Drawing surface over a ReportLab canvas.

Provides the primitives the page layout engine draws with: a top-down
cursor, font and colour state, text measurement and wrapping, cells,
wrapped multi-line cells, rectangles, lines, page creation, named
destinations and clickable link regions.

Coordinates are in points with ``y`` measured from the top edge of the
page; conversion to PDF user space happens here and nowhere else.
"""

import io
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from reportlab.lib.colors import Color, black, white
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from core.exceptions import SurfaceInitError, OutputError
from .style import PageSpec, FontSpec, FontManager, BORDER


logger = logging.getLogger(__name__)

CELL_MARGIN = 1*mm
LINE_WIDTH = 0.2*mm


@dataclass
class Cursor:
    """Current drawing position"""
    x: float
    y: float
    page: int = 0


class DrawingSurface:
    """
    Stateful canvas for one conversion.

    Usage:
        surface = DrawingSurface(PageSpec.a4(), FontManager())
        surface.add_page()
        surface.set_font(FontSpec('sans', 10))
        surface.cell(0, 5*mm, "Hello", ln=True)
        pdf_bytes = surface.finish()
    """

    def __init__(
        self,
        page: PageSpec,
        fonts: FontManager,
        title: str = "",
        author: str = "",
    ):
        """
        Create the canvas.

        Args:
            page: Page size and margins
            fonts: Font manager resolving FontSpecs to font names
            title: PDF metadata title
            author: PDF metadata author

        Raises:
            SurfaceInitError: If the canvas cannot be created
        """
        self.page = page
        self.fonts = fonts
        self._buffer = io.BytesIO()

        try:
            self._canvas = canvas.Canvas(self._buffer, pagesize=page.size)
            self._canvas.setTitle(title)
            self._canvas.setAuthor(author)
        except Exception as e:  # reportlab surfaces setup failures as plain errors
            raise SurfaceInitError("pdf", f"failed to create PDF canvas: {e}") from e

        self.cursor = Cursor(x=page.left_margin, y=page.top_margin)
        self.auto_page_break = True
        self._last_height = 0.0

        self._font_name = fonts.get_font_name(FontSpec('sans', 10))
        self._font_size = 10.0
        self._text_color: Color = black
        self._fill_color: Color = white
        self._draw_color: Color = BORDER

    # ------------------------------------------------------------------
    # Pages and cursor

    @property
    def x(self) -> float:
        return self.cursor.x

    @property
    def y(self) -> float:
        return self.cursor.y

    @property
    def page_number(self) -> int:
        return self.cursor.page

    def add_page(self):
        """Start a new page and reset the cursor to the top margin."""
        if self.cursor.page > 0:
            self._canvas.showPage()
        self.cursor.page += 1
        self.cursor.x = self.page.left_margin
        self.cursor.y = self.page.top_margin
        logger.debug(f"Page {self.cursor.page} started")

    def set_xy(self, x: float, y: float):
        self.cursor.x = x
        self.cursor.y = y

    def set_x(self, x: float):
        self.cursor.x = x

    def ln(self, height: Optional[float] = None):
        """Move to the start of the next line (default: last cell height)."""
        self.cursor.x = self.page.left_margin
        self.cursor.y += self._last_height if height is None else height

    def fits(self, height: float, slack: float = 0.0) -> bool:
        """Whether a block of ``height`` fits above the bottom margin."""
        return self.cursor.y + height <= self.page.page_break_trigger - slack

    # ------------------------------------------------------------------
    # Style state

    def set_font(self, spec: FontSpec):
        self._font_name = self.fonts.get_font_name(spec)
        self._font_size = spec.size
        self._text_color = spec.color

    @property
    def text_color(self) -> Color:
        return self._text_color

    def set_text_color(self, color: Color):
        self._text_color = color

    def set_fill_color(self, color: Color):
        self._fill_color = color

    def set_draw_color(self, color: Color):
        self._draw_color = color

    # ------------------------------------------------------------------
    # Measurement

    def string_width(self, text: str) -> float:
        return pdfmetrics.stringWidth(text, self._font_name, self._font_size)

    def split_lines(self, text: str, width: float) -> List[str]:
        """
        Wrap text to fit a cell of ``width``.

        Explicit newlines are kept; blank lines survive as empty strings.
        Always returns at least one line.
        """
        available = max(width - 2 * CELL_MARGIN, 1.0)
        lines: List[str] = []
        for paragraph in text.split('\n'):
            wrapped = simpleSplit(paragraph, self._font_name, self._font_size, available)
            lines.extend(wrapped or [''])
        return lines or ['']

    # ------------------------------------------------------------------
    # Drawing

    def cell(
        self,
        width: float,
        height: float,
        text: str = "",
        border: bool = False,
        ln: bool = False,
        align: str = 'L',
        fill: bool = False,
        link: Optional[str] = None,
    ):
        """
        Draw a single-line cell at the cursor.

        Args:
            width: Cell width (0 extends to the right margin)
            height: Cell height
            text: Text, not wrapped
            border: Stroke the cell rectangle
            ln: Move to the next line afterwards instead of to the right
            align: 'L', 'C' or 'R'
            fill: Fill the cell with the fill colour
            link: Destination name to attach to the cell area
        """
        if self.auto_page_break and not self.fits(height) and self.cursor.y > self.page.top_margin:
            x = self.cursor.x
            self.add_page()
            self.cursor.x = x

        if width == 0:
            width = self.page.width - self.page.right_margin - self.cursor.x

        x, y = self.cursor.x, self.cursor.y

        if fill or border:
            self.rect(x, y, width, height, fill=fill, stroke=border)

        if text:
            self._draw_text(x, y, width, height, text, align)

        if link:
            self.link_region(x, y, width, height, link)

        self._last_height = height
        if ln:
            self.cursor.x = self.page.left_margin
            self.cursor.y = y + height
        else:
            self.cursor.x = x + width

    def multi_cell(
        self,
        width: float,
        line_height: float,
        text: str,
        border: bool = False,
        align: str = 'L',
        fill: bool = False,
    ) -> int:
        """
        Draw wrapped text as a column of cells starting at the cursor.

        Breaks pages between lines when needed. The cursor ends at the left
        margin below the block.

        Returns:
            Number of lines drawn
        """
        if width == 0:
            width = self.page.width - self.page.right_margin - self.cursor.x

        x = self.cursor.x
        lines = self.split_lines(text, width)
        block_top = self.cursor.y

        for line in lines:
            if self.auto_page_break and not self.fits(line_height) and self.cursor.y > self.page.top_margin:
                if border:
                    self.rect(x, block_top, width, self.cursor.y - block_top)
                self.add_page()
                block_top = self.cursor.y

            self.cursor.x = x
            self.cell(width, line_height, line, align=align, fill=fill)
            self.cursor.y += line_height

        if border:
            self.rect(x, block_top, width, self.cursor.y - block_top)

        self.cursor.x = self.page.left_margin
        self._last_height = line_height
        return len(lines)

    def rect(self, x: float, y: float, width: float, height: float, fill: bool = False, stroke: bool = True):
        c = self._canvas
        c.setLineWidth(LINE_WIDTH)
        c.setStrokeColor(self._draw_color)
        c.setFillColor(self._fill_color)
        c.rect(x, self._pdf_y(y + height), width, height, stroke=int(stroke), fill=int(fill))

    def line(self, x1: float, y1: float, x2: float, y2: float):
        c = self._canvas
        c.setLineWidth(LINE_WIDTH)
        c.setStrokeColor(self._draw_color)
        c.line(x1, self._pdf_y(y1), x2, self._pdf_y(y2))

    # ------------------------------------------------------------------
    # Links

    def add_destination(self, name: str) -> Tuple[int, float]:
        """
        Bind a named destination to the cursor position on the current page.

        Returns:
            (page number, y)
        """
        self._canvas.bookmarkPage(name, fit='XYZ', left=0, top=self._pdf_y(self.cursor.y))
        return self.cursor.page, self.cursor.y

    def link_region(self, x: float, y: float, width: float, height: float, name: str):
        """Overlay a clickable region jumping to destination ``name``."""
        rect = (x, self._pdf_y(y + height), x + width, self._pdf_y(y))
        self._canvas.linkRect("", name, rect, thickness=0)

    # ------------------------------------------------------------------
    # Output

    def finish(self) -> bytes:
        """
        Close the document and return the PDF bytes.

        Raises:
            OutputError: If the document cannot be written
        """
        try:
            self._canvas.save()
        except Exception as e:  # reportlab raises ValueError, IOError and others on save
            raise OutputError("pdf", f"failed to write PDF: {e}") from e
        return self._buffer.getvalue()

    # ------------------------------------------------------------------
    # Internal

    def _pdf_y(self, y: float) -> float:
        return self.page.height - y

    def _draw_text(self, x: float, y: float, width: float, height: float, text: str, align: str):
        c = self._canvas
        c.setFont(self._font_name, self._font_size)
        c.setFillColor(self._text_color)

        baseline = y + height / 2 + 0.3 * self._font_size
        if align == 'C':
            tx = x + (width - self.string_width(text)) / 2
        elif align == 'R':
            tx = x + width - CELL_MARGIN - self.string_width(text)
        else:
            tx = x + CELL_MARGIN

        c.drawString(tx, self._pdf_y(baseline), text)
