"""
PDF converter using ReportLab.

Converts an OpenAPIDocument to a navigable PDF: title page, table of
contents, overview, servers, then one section per tag with an endpoint
summary table, the endpoint blocks and the component schemas the tag uses.

Section order:
    TitlePage -> TableOfContents -> Overview -> Servers (optional)
    -> API Endpoints -> TagSection*

Every link target is allocated by the TOC planner before the first page
is drawn. The render pass walks the same RenderPlan and binds targets in
allocation order.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from reportlab.lib.units import mm

from core.converters import Converter
from core.openapi.models import MediaType, OpenAPIDocument, Operation, RequestBody, Response, Schema
from core.openapi.plan import RenderPlan, TagSection, compute_render_plan
from core.utils.text import strip_html, truncate

from .layout import LayoutContext, PageLayout, ROW_LINE_HEIGHT
from .links import LinkRegistry, LinkTarget
from .style import (
    PageSpec, FontManager, METHOD_COLORS, DEFAULT_METHOD_COLOR,
    TABLE_HEADER_FILL, TAG_HEADER_FILL, BORDER,
)
from .surface import DrawingSurface
from .toc import TableOfContents, plan_table_of_contents, OVERVIEW, SERVERS, API_ENDPOINTS


logger = logging.getLogger(__name__)

TOC_LINE_HEIGHT = 5*mm
TOC_INDENT = 8*mm
TOC_PAGE_COLUMN = 15*mm


@dataclass
class RenderResult:
    """Output of one layout pass"""
    data: bytes
    pages: Dict[LinkTarget, int]
    page_count: int
    links: LinkRegistry


class PdfConverter(Converter):
    """
    PDF converter.

    Usage:
        converter = PdfConverter(page_size="A4")
        pdf_bytes = converter.convert(document)
    """

    format_name = "pdf"

    def __init__(
        self,
        page_size: str = "A4",
        toc_page_numbers: bool = True,
        max_layout_passes: int = 3,
        unicode_fonts: bool = False,
        font_search_paths: Optional[List[str]] = None,
    ):
        """
        Initialize PDF converter.

        Args:
            page_size: 'A4' or 'LETTER'
            toc_page_numbers: Print resolved page numbers in the TOC
            max_layout_passes: Upper bound on layout passes for TOC page numbers
            unicode_fonts: Register DejaVu fonts for non-Latin text
            font_search_paths: Extra directories searched for font files
        """
        self.page = PageSpec.named(page_size)
        self.toc_page_numbers = toc_page_numbers
        self.max_layout_passes = max(1, max_layout_passes)
        self.unicode_fonts = unicode_fonts
        self.font_search_paths = list(font_search_paths or [])

    def convert(self, document: OpenAPIDocument) -> bytes:
        """
        Render a document to PDF bytes.

        With TOC page numbers enabled the document is laid out again with the
        page numbers learned from the previous pass until they stop changing.

        Raises:
            SurfaceInitError: If the PDF canvas cannot be created
            OutputError: If the PDF cannot be written
            LinkRegistryError: If link bookkeeping is inconsistent
        """
        plan = compute_render_plan(document)
        fonts = FontManager(unicode_fonts=self.unicode_fonts, additional_paths=self.font_search_paths)

        logger.info(
            f"Rendering PDF: {len(plan.tags)} tags, {plan.endpoint_count()} endpoints"
        )

        pages: Optional[Dict[LinkTarget, int]] = None
        result = self.render_pass(plan, fonts)
        passes = 1

        while self.toc_page_numbers and result.pages != pages and passes < self.max_layout_passes:
            pages = result.pages
            result = self.render_pass(plan, fonts, pages)
            passes += 1
            logger.debug(f"Layout pass {passes} finished ({result.page_count} pages)")

        if self.toc_page_numbers and result.pages != pages:
            logger.warning(f"TOC page numbers did not stabilise after {passes} layout passes")

        logger.info(f"PDF rendered: {result.page_count} pages")
        return result.data

    def render_pass(
        self,
        plan: RenderPlan,
        fonts: FontManager,
        pages: Optional[Dict[LinkTarget, int]] = None,
    ) -> RenderResult:
        """
        Run one planning and layout pass.

        Args:
            plan: Render plan of the document
            fonts: Font manager
            pages: Page numbers to print in the TOC, if known

        Returns:
            RenderResult with the PDF bytes, the TOC pages and the bound registry
        """
        document = plan.document
        registry = LinkRegistry()
        toc = plan_table_of_contents(plan, registry)
        if pages:
            toc.apply_pages(pages)

        surface = DrawingSurface(self.page, fonts, title=document.title)
        layout = PageLayout(LayoutContext(surface=surface, links=registry, toc=toc))

        self._add_title_page(layout, document)
        self._add_table_of_contents(layout, toc)
        self._add_overview(layout, document, toc)
        if plan.has_servers:
            self._add_servers(layout, document, toc)
        self._add_endpoints_header(layout, toc)
        for section in plan.tags:
            self._add_tag_section(layout, plan, section)

        registry.verify_complete()
        resolved = toc.resolve_pages(registry)
        page_count = surface.page_number
        return RenderResult(data=surface.finish(), pages=resolved, page_count=page_count, links=registry)

    # ------------------------------------------------------------------
    # Front matter

    def _add_title_page(self, layout: PageLayout, document: OpenAPIDocument):
        surface = layout.surface
        surface.add_page()

        layout.use('title')
        surface.ln(40*mm)
        surface.multi_cell(layout.width, 15*mm, document.title, align='C')
        surface.ln(5*mm)

        layout.use('version')
        surface.cell(layout.width, 8*mm, f"Version {document.version}", ln=True, align='C')
        surface.ln(20*mm)

        if document.description:
            layout.paragraph(document.description, role='title_description', line_height=6*mm, align='C')

        surface.ln(30*mm)
        layout.use('title_footer')
        surface.cell(layout.width, 6*mm, "OpenAPI Specification Document", ln=True, align='C')

    def _add_table_of_contents(self, layout: PageLayout, toc: TableOfContents):
        surface = layout.surface
        surface.add_page()

        layout.use('toc_title')
        surface.cell(layout.width, 10*mm, "Table of Contents", ln=True)
        surface.ln(8*mm)

        number_width = TOC_PAGE_COLUMN if self.toc_page_numbers else 0
        for entry in toc:
            indent = (entry.level - 1) * TOC_INDENT
            role = f"toc_{min(entry.level, 3)}"
            destination = layout.destination(entry.target)

            layout.use(role)
            surface.set_x(layout.left + indent)
            title_width = layout.width - indent - number_width
            if not number_width:
                surface.cell(title_width, TOC_LINE_HEIGHT, entry.display_title, ln=True, link=destination)
                continue

            surface.cell(title_width, TOC_LINE_HEIGHT, entry.display_title, link=destination)
            page_label = str(entry.resolved_page) if entry.resolved_page else ""
            surface.cell(number_width, TOC_LINE_HEIGHT, page_label, ln=True, align='R', link=destination)

    def _add_overview(self, layout: PageLayout, document: OpenAPIDocument, toc: TableOfContents):
        layout.surface.add_page()
        layout.bind(toc.sections[OVERVIEW].target)
        layout.section_header(OVERVIEW)

        if document.description:
            layout.paragraph(document.description)
            layout.surface.ln(4*mm)

        if document.security_schemes or document.security:
            self._add_security(layout, document)

    def _add_security(self, layout: PageLayout, document: OpenAPIDocument):
        layout.sub_header("Security")

        if document.security_schemes:
            widths = layout.columns(45, 30, 45, 70)
            layout.table_header(widths, ["Name", "Type", "Scheme", "Description"])
            for name in sorted(document.security_schemes):
                scheme = document.security_schemes[name]
                layout.table_row(widths, [name, scheme.type, scheme.detail, strip_html(scheme.description)])

        requirements = document.security_requirements()
        if requirements:
            layout.surface.ln(2*mm)
            layout.paragraph("Required: " + " or ".join(requirements), role='small', line_height=4*mm)
        layout.surface.ln(4*mm)

    def _add_servers(self, layout: PageLayout, document: OpenAPIDocument, toc: TableOfContents):
        surface = layout.surface
        layout.check_page_break(40*mm)
        layout.bind(toc.sections[SERVERS].target)
        layout.section_header(SERVERS)

        for server in document.servers:
            layout.use('server_url')
            surface.cell(layout.width, 6*mm, server.url, ln=True)
            if server.description:
                layout.paragraph(server.description, role='small_muted', line_height=4*mm)
            surface.ln(2*mm)
        surface.ln(4*mm)

    def _add_endpoints_header(self, layout: PageLayout, toc: TableOfContents):
        layout.surface.add_page()
        layout.bind(toc.sections[API_ENDPOINTS].target)
        layout.section_header(API_ENDPOINTS)
        layout.surface.ln(4*mm)

    # ------------------------------------------------------------------
    # Tag sections

    def _add_tag_section(self, layout: PageLayout, plan: RenderPlan, section: TagSection):
        ctx = layout.ctx
        surface = layout.surface

        surface.add_page()
        layout.bind(ctx.toc.tags[section.name].target)
        ctx.current_tag = section.name

        layout.use('tag_header')
        surface.set_fill_color(TAG_HEADER_FILL)
        surface.cell(layout.width, 8*mm, section.name, ln=True, fill=True)
        surface.ln(4*mm)

        if section.description:
            layout.paragraph(section.description)
            surface.ln(4*mm)

        entries = ctx.toc.endpoints[section.name]
        self._add_endpoints_summary(layout, section, [e.target for e in entries])
        surface.ln(6*mm)

        for endpoint, entry in zip(section.endpoints, entries):
            layout.check_page_break(50*mm)
            layout.bind(entry.target)
            self._add_endpoint(layout, endpoint.path, endpoint.method, endpoint.operation)

        if section.components:
            surface.ln(6*mm)
            layout.separator(BORDER)
            surface.ln(6*mm)
            self._add_tag_components(layout, plan, section)

        surface.ln(4*mm)
        logger.debug(f"Tag section '{section.name}' rendered ({len(section.endpoints)} endpoints)")

    def _add_endpoints_summary(self, layout: PageLayout, section: TagSection, targets: List[LinkTarget]):
        if not section.endpoints:
            return

        layout.use('section_label')
        layout.surface.cell(layout.width, 6*mm, "Endpoints in this section", ln=True)
        layout.surface.ln(2*mm)

        widths = layout.columns(100, 75, 15)
        layout.table_header(widths, ["Summary", "Path", "Method"], role='summary_header')

        for endpoint, target in zip(section.endpoints, targets):
            summary = truncate(strip_html(endpoint.operation.summary))
            layout.table_row(
                widths,
                [summary, endpoint.path, endpoint.method],
                aligns=['L', 'L', 'C'],
                links=[target, target, target],
                role='summary_cell',
            )

    def _add_endpoint(self, layout: PageLayout, path: str, method: str, operation: Operation):
        surface = layout.surface

        layout.use('method_badge')
        surface.set_fill_color(METHOD_COLORS.get(method, DEFAULT_METHOD_COLOR))
        badge_width = (len(method) * 3 + 8) * mm
        surface.cell(badge_width, 7*mm, method, align='C', fill=True)

        layout.use('endpoint_path')
        surface.cell(layout.width - badge_width, 7*mm, f" {path}", ln=True)
        surface.ln(2*mm)

        if operation.operation_id:
            layout.use('operation_id')
            surface.cell(layout.width, 4*mm, f"Operation ID: {operation.operation_id}", ln=True)

        layout.paragraph(operation.summary, role='summary')
        layout.paragraph(operation.description, role='small', line_height=4*mm)
        surface.ln(2*mm)

        if operation.parameters:
            layout.sub_header("Parameters")
            self._add_parameter_table(layout, operation)

        if operation.request_body is not None:
            layout.sub_header("Request Body")
            self._add_request_body(layout, operation.request_body)

        if operation.responses:
            layout.sub_header("Responses")
            self._add_response_table(layout, operation.responses)

        surface.ln(2*mm)
        layout.separator()
        surface.ln(6*mm)

    def _add_parameter_table(self, layout: PageLayout, operation: Operation):
        widths = layout.columns(35, 20, 15, 60, 60)
        layout.table_header(widths, ["Name", "In", "Required", "Type", "Description"])

        for param in operation.parameters:
            layout.table_row(
                widths,
                [
                    param.name,
                    param.location,
                    "Yes" if param.required else "No",
                    param.schema.ref_name or param.schema.type_label,
                    strip_html(param.description),
                ],
                aligns=['L', 'L', 'C', 'L', 'L'],
            )
        layout.surface.ln(3*mm)

    def _add_request_body(self, layout: PageLayout, body: RequestBody):
        surface = layout.surface

        if body.required:
            layout.use('required_marker')
            surface.cell(layout.width, 5*mm, "Required", ln=True)

        layout.paragraph(body.description, role='small', line_height=4*mm)

        if body.content:
            surface.ln(2*mm)
            widths = layout.columns(60, 130)
            layout.table_header(widths, ["Content-Type", "Object"])

            examples = []
            inline = []
            for content_type in sorted(body.content):
                media = body.content[content_type]
                label, target = self._object_label(layout, media.schema)
                layout.table_row(widths, [content_type, label], links=[None, target])

                examples.extend(self._media_examples(content_type, media))
                if not media.schema.ref and (media.schema.properties or media.schema.items is not None):
                    inline.append((content_type, media.schema))

            for content_type, schema in inline:
                surface.ln(2*mm)
                layout.use('sub_header')
                surface.cell(layout.width, 5*mm, f"Schema ({content_type}):", ln=True)
                layout.describe_schema(schema)

            if examples:
                surface.ln(4*mm)
                layout.sub_header("Request Examples")
                for title, value in examples:
                    layout.example(title, value)

        surface.ln(2*mm)

    def _add_response_table(self, layout: PageLayout, responses: List[Response]):
        ordered = sorted(responses, key=lambda r: r.status_code)

        widths = layout.columns(25, 95, 70)
        layout.table_header(widths, ["Status", "Description", "Object"])

        for response in ordered:
            label, target = "", None
            for media_type in sorted(response.content):
                schema = response.content[media_type].schema
                label, target = self._object_label(layout, schema, empty="")
                if schema.ref:
                    break
            layout.table_row(
                widths,
                [response.status_code, strip_html(response.description), label],
                aligns=['C', 'L', 'L'],
                links=[None, None, target],
            )

        examples = []
        for response in ordered:
            for media_type in sorted(response.content):
                prefix = f"{response.status_code} - {media_type}"
                examples.extend(self._media_examples(prefix, response.content[media_type]))

        if examples:
            layout.surface.ln(4*mm)
            layout.sub_header("Response Examples")
            for title, value in examples:
                layout.example(title, value)

        layout.surface.ln(3*mm)

    # ------------------------------------------------------------------
    # Components

    def _add_tag_components(self, layout: PageLayout, plan: RenderPlan, section: TagSection):
        surface = layout.surface
        registry = layout.ctx.links

        layout.use('objects_header')
        surface.cell(layout.width, 6*mm, "Objects Used", ln=True)
        surface.ln(2*mm)

        for name in section.components:
            layout.check_page_break(30*mm)
            layout.bind(registry.component_link(section.name, name))
            self._add_component_schema(layout, name, plan.document.components[name])

        surface.ln(2*mm)
        layout.separator(BORDER)
        surface.ln(6*mm)

    def _add_component_schema(self, layout: PageLayout, name: str, schema: Schema):
        surface = layout.surface

        layout.use('component_name')
        surface.cell(layout.width, 7*mm, name, ln=True)

        type_label = schema.type_label
        if type_label and type_label != 'object':
            layout.use('small')
            surface.cell(layout.width, 5*mm, f"Type: {type_label}", ln=True)

        layout.paragraph(schema.description, role='small_muted', line_height=4*mm)

        if schema.properties:
            surface.ln(2*mm)
            layout.check_page_break(6*mm + 5*mm + ROW_LINE_HEIGHT)

            layout.use('component_table_title')
            surface.set_fill_color(TABLE_HEADER_FILL)
            surface.cell(layout.width, 6*mm, name, border=True, ln=True, align='C', fill=True)

            widths = layout.columns(50, 50, 90)
            layout.table_header(widths, ["Name", "Type", "Description"], height=5*mm)

            for prop_name in sorted(schema.properties):
                prop = schema.properties[prop_name]
                target = layout.component_target(prop.ref_name)
                layout.table_row(
                    widths,
                    [prop_name, prop.ref_name or prop.type_label, strip_html(prop.description)],
                    links=[None, target, None],
                )

        surface.ln(6*mm)

    # ------------------------------------------------------------------
    # Helpers

    def _object_label(self, layout: PageLayout, schema: Schema, empty: str = "Object") -> Tuple[str, Optional[LinkTarget]]:
        """Display label and link target for a body schema."""
        if schema.ref:
            return schema.ref_name, layout.component_target(schema.ref_name)

        label = schema.type_label
        if schema.type == 'array' and schema.items is not None:
            item = schema.items
            if item.ref:
                return f"[]{item.ref_name}", layout.component_target(item.ref_name)
            label = f"[]{item.type}"

        return label or empty, None

    @staticmethod
    def _media_examples(prefix: str, media: MediaType) -> List[Tuple[str, object]]:
        examples = []
        if media.example is not None:
            examples.append((prefix, media.example))
        for name in sorted(media.examples):
            examples.append((f"{prefix} ({name})", media.examples[name]))
        return examples
