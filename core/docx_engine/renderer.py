"""
DOCX converter - Word output of an OpenAPI document.

Single pass over the render plan: title, description, servers, then one
heading per tag followed by the schemas the tag uses and its endpoints.
"""

import io
import logging

from docx import Document
from docx.shared import Pt

from core.converters import Converter
from core.exceptions import OutputError, SurfaceInitError
from core.openapi.models import OpenAPIDocument, Operation, Schema
from core.openapi.plan import RenderPlan, TagSection, compute_render_plan
from core.utils.text import strip_html

logger = logging.getLogger(__name__)

BULLET_STYLE = 'List Bullet'


class DocxConverter(Converter):
    """
    Word converter built on python-docx.

    Usage:
        docx_bytes = DocxConverter().convert(document)
    """

    format_name = "docx"

    def convert(self, document: OpenAPIDocument) -> bytes:
        plan = compute_render_plan(document)

        try:
            docx = Document()
        except Exception as e:  # python-docx raises on a broken default template
            raise SurfaceInitError(self.format_name, f"failed to create document: {e}") from e

        docx.core_properties.title = document.title

        self._add_title(docx, document)
        self._add_description(docx, document)
        self._add_servers(docx, document)
        self._add_security(docx, document)
        self._add_tags(docx, plan)

        buffer = io.BytesIO()
        try:
            docx.save(buffer)
        except Exception as e:  # zip and XML serialisation errors
            raise OutputError(self.format_name, f"failed to write document: {e}") from e

        logger.info(f"DOCX rendered: {len(plan.tags)} tags, {plan.endpoint_count()} endpoints")
        return buffer.getvalue()

    def _add_title(self, docx: Document, document: OpenAPIDocument):
        docx.add_heading(document.title, level=0)
        docx.add_paragraph(f"Version: {document.version}")

    def _add_description(self, docx: Document, document: OpenAPIDocument):
        if not document.description:
            return
        docx.add_heading("Description", level=1)
        docx.add_paragraph(strip_html(document.description))

    def _add_servers(self, docx: Document, document: OpenAPIDocument):
        if not document.servers:
            return

        docx.add_heading("Servers", level=1)
        for server in document.servers:
            text = server.url
            if server.description:
                text = f"{server.url} - {server.description}"
            docx.add_paragraph(text, style=BULLET_STYLE)

    def _add_security(self, docx: Document, document: OpenAPIDocument):
        if not document.security_schemes and not document.security:
            return

        docx.add_heading("Security", level=1)
        for name in sorted(document.security_schemes):
            scheme = document.security_schemes[name]
            text = f"{name} ({scheme.type})"
            if scheme.detail:
                text += f": {scheme.detail}"
            if scheme.description:
                text += f" - {strip_html(scheme.description)}"
            docx.add_paragraph(text, style=BULLET_STYLE)

        requirements = document.security_requirements()
        if requirements:
            docx.add_paragraph("Required: " + " or ".join(requirements))

    def _add_tags(self, docx: Document, plan: RenderPlan):
        if not plan.tags:
            return

        docx.add_heading("API Endpoints", level=1)
        for section in plan.tags:
            docx.add_heading(section.name, level=2)
            if section.description:
                docx.add_paragraph(strip_html(section.description))

            if section.components:
                self._add_tag_components(docx, plan, section)

            for endpoint in section.endpoints:
                self._add_operation(docx, endpoint.path, endpoint.operation)

    def _add_tag_components(self, docx: Document, plan: RenderPlan, section: TagSection):
        docx.add_heading("Schemas Used", level=3)
        for name in section.components:
            self._add_component_schema(docx, name, plan.document.components[name])

    def _add_component_schema(self, docx: Document, name: str, schema: Schema):
        docx.add_heading(name, level=4)

        if schema.type:
            docx.add_paragraph(f"Type: {schema.type_label}")

        if schema.description:
            docx.add_paragraph(strip_html(schema.description))

        if not schema.properties:
            return

        docx.add_paragraph("Properties:")
        for prop_name in sorted(schema.properties):
            prop = schema.properties[prop_name]
            text = f"{prop_name} ({prop.ref_name or prop.type_label})"
            if prop.description:
                text += f" - {strip_html(prop.description)}"
            docx.add_paragraph(text, style=BULLET_STYLE)

    def _add_operation(self, docx: Document, path: str, operation: Operation):
        docx.add_heading(f"{operation.method} {path}", level=3)

        if operation.summary:
            para = docx.add_paragraph()
            run = para.add_run(strip_html(operation.summary))
            run.bold = True

        if operation.description:
            docx.add_paragraph(strip_html(operation.description))

        if operation.parameters:
            docx.add_heading("Parameters", level=4)
            for param in operation.parameters:
                para = docx.add_paragraph(style=BULLET_STYLE)
                code = para.add_run(param.name)
                code.font.name = 'Courier New'
                code.font.size = Pt(9)
                suffix = " (required)" if param.required else ""
                para.add_run(f" ({param.location}): {strip_html(param.description)}{suffix}")

        if operation.responses:
            docx.add_heading("Responses", level=4)
            for response in sorted(operation.responses, key=lambda r: r.status_code):
                docx.add_paragraph(
                    f"{response.status_code}: {strip_html(response.description)}",
                    style=BULLET_STYLE,
                )
