"""Tests for core/pdf_engine/layout.py and surface.py - pagination and tables."""

import pytest

pytest.importorskip("reportlab")

from reportlab.lib.units import mm

from core.exceptions import LinkOrderError
from core.openapi import Schema
from core.pdf_engine import (
    DrawingSurface, FontManager, LayoutContext, LinkRegistry, PageLayout, PageSpec, TableOfContents,
)
from core.pdf_engine.layout import BREAK_SLACK, ROW_LINE_HEIGHT
from core.pdf_engine.style import LINK_TEXT


@pytest.fixture
def layout():
    surface = DrawingSurface(PageSpec.a4(), FontManager(), title="Test")
    surface.add_page()
    return PageLayout(LayoutContext(surface=surface, links=LinkRegistry(), toc=TableOfContents()))


@pytest.fixture
def drawn(layout, monkeypatch):
    """Records rectangles, link regions and text cells with the page they land on."""
    surface = layout.surface
    calls = {"rect": [], "link": [], "cell": []}
    rect, link_region, cell = surface.rect, surface.link_region, surface.cell

    def record_rect(x, y, width, height, **kwargs):
        calls["rect"].append((surface.page_number, x, y, width, height))
        return rect(x, y, width, height, **kwargs)

    def record_link(x, y, width, height, name):
        calls["link"].append((surface.page_number, x, y, width, height, name))
        return link_region(x, y, width, height, name)

    def record_cell(width, height, text="", **kwargs):
        calls["cell"].append((surface.page_number, text, surface.text_color))
        return cell(width, height, text, **kwargs)

    monkeypatch.setattr(surface, "rect", record_rect)
    monkeypatch.setattr(surface, "link_region", record_link)
    monkeypatch.setattr(surface, "cell", record_cell)
    return calls


# ==================== PageSpec ====================


class TestPageSpec:
    def test_a4_margins(self):
        page = PageSpec.a4()
        assert page.content_width == pytest.approx(190*mm)
        assert page.page_break_trigger == pytest.approx(277*mm)

    def test_named(self):
        assert PageSpec.named("letter").width == pytest.approx(612)
        with pytest.raises(ValueError, match="Unknown page size"):
            PageSpec.named("A5")


# ==================== Pagination ====================


class TestCheckPageBreak:
    """Explicit page-break checks."""

    def test_fits(self, layout):
        assert layout.check_page_break(50*mm) is False
        assert layout.surface.page_number == 1

    def test_breaks_near_bottom(self, layout):
        surface = layout.surface
        surface.set_xy(layout.left, surface.page.page_break_trigger - BREAK_SLACK - 20*mm)

        assert layout.check_page_break(30*mm) is True
        assert surface.page_number == 2
        assert surface.y == pytest.approx(surface.page.top_margin)

    def test_fits_just_above_slack(self, layout):
        surface = layout.surface
        surface.set_xy(layout.left, surface.page.page_break_trigger - BREAK_SLACK - 30*mm)
        assert layout.check_page_break(29*mm) is False
        assert surface.page_number == 1

    def test_no_break_at_top_of_page(self, layout):
        surface = layout.surface
        assert surface.y == pytest.approx(surface.page.top_margin)
        assert layout.check_page_break(400*mm) is False
        assert surface.page_number == 1


class TestTableRow:
    """Measured table rows."""

    def test_row_near_bottom_moves_to_next_page(self, layout):
        surface = layout.surface
        surface.set_xy(layout.left, surface.page.page_break_trigger - 12*mm)
        widths = layout.columns(95, 95)

        height = layout.table_row(widths, ["name", "string"])

        assert height == pytest.approx(ROW_LINE_HEIGHT)
        assert surface.page_number == 2
        assert surface.y == pytest.approx(surface.page.top_margin + ROW_LINE_HEIGHT)
        assert surface.x == pytest.approx(layout.left)

    def test_row_height_from_tallest_cell(self, layout):
        widths = layout.columns(20, 170)
        layout.use('table_cell')
        long_text = "word " * 40
        expected = len(layout.surface.split_lines(long_text, widths[0])) * ROW_LINE_HEIGHT

        start = layout.surface.y
        height = layout.table_row(widths, [long_text, "short"])

        assert height == pytest.approx(expected)
        assert height > ROW_LINE_HEIGHT
        assert layout.surface.y == pytest.approx(start + height)

    def test_row_with_link(self, layout, drawn):
        target = layout.ctx.links.new_link()
        widths = layout.columns(95, 95)
        start_y = layout.surface.y

        height = layout.table_row(widths, ["Widget", "object"], links=[target, None])

        assert drawn["link"] == [(1, layout.left, start_y, widths[0], height, "link-1")]
        colors = {text: color for _, text, color in drawn["cell"]}
        assert colors["Widget"] is LINK_TEXT
        assert colors["object"] is not LINK_TEXT

        layout.bind(target)
        assert layout.surface.finish().startswith(b"%PDF-")

    def test_columns_scale_to_letter(self):
        surface = DrawingSurface(PageSpec.us_letter(), FontManager())
        layout = PageLayout(LayoutContext(surface=surface, links=LinkRegistry(), toc=TableOfContents()))
        assert sum(layout.columns(100, 75, 15)) == pytest.approx(layout.width)


class TestTallRows:
    """Rows taller than a page are split into per-page segments."""

    def test_row_split_across_pages(self, layout, drawn):
        surface = layout.surface
        bottom = surface.page.page_break_trigger
        target = layout.ctx.links.new_link()
        widths = layout.columns(35, 155)
        long_cell = "\n".join(f"line {i}" for i in range(70))

        height = layout.table_row(widths, ["name", long_cell], links=[None, target])

        assert height == pytest.approx(70 * ROW_LINE_HEIGHT)
        assert [r[0] for r in drawn["rect"]] == [1, 1, 2, 2]
        for page, x, y, width, rect_height in drawn["rect"]:
            assert y + rect_height <= bottom + 0.01

        first, second = drawn["rect"][0::2], drawn["rect"][1::2]
        assert [(r[2], r[4]) for r in first] == [(r[2], r[4]) for r in second]
        assert sum(r[4] for r in first) == pytest.approx(height)

        assert [(l[0], l[4]) for l in drawn["link"]] == [(r[0], r[4]) for r in second]
        pages = {text: page for page, text, _ in drawn["cell"]}
        assert pages["name"] == 1
        assert pages["line 0"] == 1
        assert pages["line 69"] == 2

        assert surface.page_number == 2
        assert surface.y == pytest.approx(surface.page.top_margin + first[1][4])

    def test_row_that_fits_is_one_segment(self, layout, drawn):
        layout.table_row(layout.columns(95, 95), ["a\nb\nc", "d"])
        assert len(drawn["rect"]) == 2
        assert {r[4] for r in drawn["rect"]} == {3 * ROW_LINE_HEIGHT}


class TestSurface:
    def test_split_lines_keeps_blank_lines(self, layout):
        layout.use('example')
        assert layout.surface.split_lines("a\n\nb", 100*mm) == ["a", "", "b"]
        assert layout.surface.split_lines("", 100*mm) == [""]

    def test_multi_cell_breaks_pages(self, layout):
        surface = layout.surface
        layout.use('body')
        lines = surface.multi_cell(layout.width, 5*mm, "\n".join(["line"] * 80))
        assert lines == 80
        assert surface.page_number == 2

    def test_finish_returns_pdf(self, layout):
        assert layout.surface.finish().startswith(b"%PDF-")


class TestBinding:
    def test_bind_records_page(self, layout):
        registry = layout.ctx.links
        target = registry.new_link()
        layout.surface.add_page()
        layout.bind(target)
        assert registry.binding(target).page == 2

    def test_bind_out_of_order(self, layout):
        registry = layout.ctx.links
        registry.new_link()
        second = registry.new_link()
        with pytest.raises(LinkOrderError):
            layout.bind(second)


class TestDescribeSchema:
    def test_nested_schema(self, layout):
        schema = Schema(type="object", properties={
            "items": Schema(type="array", items=Schema(type="object", properties={"id": Schema(type="integer")})),
            "owner": Schema(ref="#/components/schemas/User"),
        })
        start = layout.surface.y
        layout.describe_schema(schema)
        assert layout.surface.y > start

    def test_reference_not_expanded(self, layout):
        start = layout.surface.y
        layout.describe_schema(Schema(ref="#/components/schemas/User"))
        assert layout.surface.y == pytest.approx(start + 4*mm)

    def test_example_block(self, layout):
        start = layout.surface.y
        layout.example("application/json", {"id": 1, "name": "Widget"})
        assert layout.surface.y > start + 4 * 4*mm


class TestExamplePlacement:
    """Example titles stay on the page of their block."""

    def test_title_moves_with_block(self, layout, drawn):
        surface = layout.surface
        surface.set_xy(layout.left, surface.page.page_break_trigger - BREAK_SLACK - 40*mm)

        layout.example("application/json", {f"field{i}": i for i in range(20)})

        pages = {text: page for page, text, _ in drawn["cell"]}
        assert pages["Example (application/json):"] == 2
        assert pages["{"] == 2

    def test_long_example_starts_under_its_title(self, layout, drawn):
        surface = layout.surface
        surface.set_xy(layout.left, surface.page.page_break_trigger - BREAK_SLACK - 40*mm)

        layout.example("list", list(range(100)))

        pages = {text: page for page, text, _ in drawn["cell"]}
        assert pages["Example (list):"] == 1
        assert pages["["] == 1
        assert surface.page_number >= 2
