"""
PDF Engine - OpenAPI document rendering using ReportLab.

This module provides:
- Link registry with pre-allocated internal link targets
- Table-of-contents planning in render order
- Page layout with automatic pagination and linked tables
- PdfConverter, the section-by-section renderer

Usage:
    from core.pdf_engine import PdfConverter

    converter = PdfConverter(page_size="A4")
    pdf_bytes = converter.convert(document)

Key components:
- PdfConverter: Main converter class
- LinkRegistry: Link target allocation and binding
- TableOfContents / plan_table_of_contents: TOC planner
- PageLayout / LayoutContext: Pagination and block drawing
- DrawingSurface: ReportLab canvas adapter
- FontManager: Font registration
"""

from .renderer import PdfConverter, RenderResult
from .links import LinkRegistry, LinkTarget, ComponentKey, Binding
from .toc import TableOfContents, TocEntry, plan_table_of_contents
from .layout import LayoutContext, PageLayout
from .surface import DrawingSurface, Cursor
from .style import PageSpec, FontSpec, FontManager, STYLES


__all__ = [
    # Main converter
    'PdfConverter',
    'RenderResult',

    # Links and TOC
    'LinkRegistry',
    'LinkTarget',
    'ComponentKey',
    'Binding',
    'TableOfContents',
    'TocEntry',
    'plan_table_of_contents',

    # Layout
    'LayoutContext',
    'PageLayout',
    'DrawingSurface',
    'Cursor',

    # Style
    'PageSpec',
    'FontSpec',
    'FontManager',
    'STYLES',
]


__version__ = '1.0.0'
