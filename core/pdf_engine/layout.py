"""
Page layout engine - pagination and block drawing.

Every block is drawn through a PageLayout bound to a LayoutContext that is
created fresh for each conversion. Before a block of estimated height is
drawn the layout checks the remaining space and starts a new page when the
block would cross the bottom margin. Table rows are measured before they
are drawn so that the page break, the row border and any link overlay all
use the final row height.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from reportlab.lib.units import mm

from core.openapi.models import Schema
from core.utils.text import strip_html, format_example
from .links import LinkRegistry, LinkTarget
from .style import (
    STYLES, BORDER, SEPARATOR, LINK_TEXT, TABLE_HEADER_FILL, EXAMPLE_FILL,
)
from .surface import DrawingSurface
from .toc import TableOfContents


logger = logging.getLogger(__name__)

# Extra space kept free above the bottom margin by explicit break checks
BREAK_SLACK = 10*mm

# Column widths are specified for a 190 mm content width and scaled
REFERENCE_WIDTH = 190*mm

ROW_LINE_HEIGHT = 5*mm
HEADER_ROW_HEIGHT = 6*mm
SCHEMA_LINE_HEIGHT = 4*mm
EXAMPLE_LINE_HEIGHT = 4*mm
EXAMPLE_TITLE_HEIGHT = 6*mm


@dataclass
class LayoutContext:
    """All mutable layout state of one conversion"""
    surface: DrawingSurface
    links: LinkRegistry
    toc: TableOfContents
    current_tag: str = ""


class PageLayout:
    """
    Drawing operations with automatic pagination.

    Usage:
        layout = PageLayout(LayoutContext(surface, registry, toc))
        layout.check_page_break(50*mm)
        layout.table_row(widths, ["id", "integer"], links=[None, target])
    """

    def __init__(self, context: LayoutContext):
        self.ctx = context
        self.surface = context.surface

    @property
    def width(self) -> float:
        return self.surface.page.content_width

    @property
    def left(self) -> float:
        return self.surface.page.left_margin

    def columns(self, *widths_mm: float) -> List[float]:
        """Scale reference column widths (mm) to the content width."""
        scale = self.width / REFERENCE_WIDTH
        return [w * mm * scale for w in widths_mm]

    def use(self, role: str):
        self.surface.set_font(STYLES[role])

    # ------------------------------------------------------------------
    # Pagination and links

    def check_page_break(self, height: float) -> bool:
        """
        Start a new page if a block of ``height`` does not fit.

        No page is added when the cursor is already at the top margin; a
        block taller than a page is paginated by whoever draws it.

        Returns:
            True if a page break was emitted
        """
        if self.surface.fits(height, slack=BREAK_SLACK):
            return False
        if self.surface.y <= self.surface.page.top_margin:
            return False
        logger.debug(f"Page break before block of {height:.1f}pt at y={self.surface.y:.1f}")
        self.surface.add_page()
        return True

    @property
    def page_capacity(self) -> float:
        """Height a block may take on an empty page"""
        page = self.surface.page
        return page.page_break_trigger - page.top_margin - BREAK_SLACK

    def bind(self, target: LinkTarget):
        """Bind a pre-allocated target to the cursor position."""
        name = self.ctx.links.destination_name(target)
        page, y = self.surface.add_destination(name)
        self.ctx.links.bind(target, page, y)

    def destination(self, target: Optional[LinkTarget]) -> Optional[str]:
        return self.ctx.links.destination_name(target) if target else None

    def component_target(self, schema_name: str) -> Optional[LinkTarget]:
        """Link target of a component within the current tag section."""
        if not schema_name:
            return None
        return self.ctx.links.component_link(self.ctx.current_tag, schema_name)

    # ------------------------------------------------------------------
    # Text blocks

    def section_header(self, title: str):
        self.use('section_header')
        self.surface.cell(self.width, 10*mm, title, ln=True)
        self.surface.ln(4*mm)

    def sub_header(self, title: str):
        self.use('sub_header')
        self.surface.cell(self.width, 6*mm, title, ln=True)

    def paragraph(self, text: str, role: str = 'body', line_height: float = 5*mm, align: str = 'L'):
        text = strip_html(text)
        if not text:
            return
        self.use(role)
        self.surface.multi_cell(self.width, line_height, text, align=align)

    def separator(self, color=SEPARATOR):
        self.surface.set_draw_color(color)
        y = self.surface.y
        self.surface.line(self.left, y, self.left + self.width, y)
        self.surface.set_draw_color(BORDER)

    # ------------------------------------------------------------------
    # Tables

    def table_header(self, widths: Sequence[float], headers: Sequence[str],
                     role: str = 'table_header', height: float = HEADER_ROW_HEIGHT):
        self.check_page_break(height + ROW_LINE_HEIGHT)
        self.use(role)
        self.surface.set_fill_color(TABLE_HEADER_FILL)
        for width, header in zip(widths, headers):
            self.surface.cell(width, height, header, border=True, fill=True)
        self.surface.ln(height)

    def measure_row(self, widths: Sequence[float], contents: Sequence[str]) -> float:
        """Height of a row: tallest wrapped cell times the line height."""
        return self._line_count(self._wrap_cells(widths, contents)) * ROW_LINE_HEIGHT

    def table_row(
        self,
        widths: Sequence[float],
        contents: Sequence[str],
        aligns: Optional[Sequence[str]] = None,
        links: Optional[Sequence[Optional[LinkTarget]]] = None,
        role: str = 'table_cell',
    ) -> float:
        """
        Draw one bordered table row.

        Cells with a link target are drawn in the link colour and covered
        by a clickable region of exactly the cell rectangle. A row taller
        than the space left on an empty page is split into one bordered
        segment per page; every cell of the row shares the segments.

        Returns:
            Row height
        """
        self.use(role)
        wrapped = self._wrap_cells(widths, contents)
        total = self._line_count(wrapped)
        row_height = total * ROW_LINE_HEIGHT
        self.check_page_break(row_height)

        surface = self.surface
        drawn = segments = 0
        while drawn < total:
            if drawn:
                surface.add_page()
            free = surface.page.page_break_trigger - surface.y
            count = min(total - drawn, max(1, int(free // ROW_LINE_HEIGHT)))
            self._row_segment(widths, wrapped, drawn, count, aligns, links, role)
            drawn += count
            segments += 1

        if segments > 1:
            logger.debug(f"Table row of {total} lines split into {segments} page segments")
        return row_height

    def _wrap_cells(self, widths: Sequence[float], contents: Sequence[str]) -> List[List[str]]:
        return [self.surface.split_lines(content, width) for width, content in zip(widths, contents)]

    @staticmethod
    def _line_count(wrapped: Sequence[Sequence[str]]) -> int:
        return max([1] + [len(lines) for lines in wrapped])

    def _row_segment(self, widths, wrapped, first: int, count: int, aligns, links, role: str):
        """Draw lines ``first .. first + count`` of every cell on the current page."""
        surface = self.surface
        x, y = self.left, surface.y
        height = count * ROW_LINE_HEIGHT

        # Lines are already fitted to the page; no automatic break inside a segment
        surface.auto_page_break = False
        try:
            for i, (width, lines) in enumerate(zip(widths, wrapped)):
                align = aligns[i] if aligns and i < len(aligns) else 'L'
                target = links[i] if links and i < len(links) else None

                self.use(role)
                if target:
                    surface.set_text_color(LINK_TEXT)

                for offset, line in enumerate(lines[first:first + count]):
                    surface.set_xy(x, y + offset * ROW_LINE_HEIGHT)
                    surface.cell(width, ROW_LINE_HEIGHT, line, align=align)

                if target:
                    surface.link_region(x, y, width, height, self.destination(target))

                surface.rect(x, y, width, height)
                x += width
        finally:
            surface.auto_page_break = True

        surface.set_xy(self.left, y + height)

    # ------------------------------------------------------------------
    # Examples and schemas

    def example(self, title: str, value):
        """Draw an example payload in a bordered monospaced block."""
        self.check_page_break(30*mm)

        self.use('example')
        content = format_example(value)
        height = len(self.surface.split_lines(content, self.width)) * EXAMPLE_LINE_HEIGHT

        # Keep the title with the block, or with its first line when the block spans pages
        block = EXAMPLE_TITLE_HEIGHT + height + 2*mm
        if block > self.page_capacity:
            block = EXAMPLE_TITLE_HEIGHT + EXAMPLE_LINE_HEIGHT
        self.check_page_break(block)

        self.use('example_title')
        self.surface.cell(self.width, EXAMPLE_TITLE_HEIGHT, f"Example ({title}):", ln=True)

        self.use('example')

        self.surface.set_fill_color(EXAMPLE_FILL)
        self.surface.multi_cell(self.width, EXAMPLE_LINE_HEIGHT, content, border=True, fill=True)
        self.surface.ln(4*mm)

    def describe_schema(self, schema: Schema, indent: int = 0):
        """
        Describe a schema as indented lines.

        Object properties and array items are described recursively. A named
        reference is printed as a link to the component and not expanded.
        """
        self.use('schema_info')
        pad = '  ' * indent
        surface = self.surface

        if schema.ref:
            self._linked_line(f"{pad}Object: {schema.ref_name}", self.component_target(schema.ref_name))
            return

        type_label = schema.type_label
        if type_label and type_label != 'object':
            surface.cell(self.width, SCHEMA_LINE_HEIGHT, f"{pad}Type: {type_label}", ln=True)

        description = strip_html(schema.description)
        if description:
            offset = surface.string_width(pad)
            surface.set_x(self.left + offset)
            surface.multi_cell(self.width - offset, SCHEMA_LINE_HEIGHT, description)

        if schema.properties:
            surface.cell(self.width, SCHEMA_LINE_HEIGHT, f"{pad}Properties:", ln=True)
            for name in sorted(schema.properties):
                prop = schema.properties[name]
                label = prop.ref_name or prop.type_label
                self._linked_line(f"{pad}  - {name}: {label}", self.component_target(prop.ref_name))
                if not prop.ref and (prop.properties or prop.items is not None):
                    self.describe_schema(prop, indent + 2)
                    self.use('schema_info')

        if schema.items is not None:
            surface.cell(self.width, SCHEMA_LINE_HEIGHT, f"{pad}Items:", ln=True)
            self.describe_schema(schema.items, indent + 1)

    def _linked_line(self, text: str, target: Optional[LinkTarget]):
        self.use('schema_info')
        if target:
            self.surface.set_text_color(LINK_TEXT)
        self.surface.cell(self.width, SCHEMA_LINE_HEIGHT, text, ln=True, link=self.destination(target))
        self.use('schema_info')
