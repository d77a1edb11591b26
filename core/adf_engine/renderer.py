"""
ADF converter - Atlassian Document Format for Confluence.

Produces a JSON document tree:

    {"version": 1, "type": "doc", "content": [...]}

Endpoints follow the document's path order; every operation gets a level 3
heading and a rule after it.
"""

import json
import logging
from typing import Any, Dict, List

from core.converters import Converter
from core.exceptions import OutputError
from core.openapi.models import OpenAPIDocument, Operation, Parameter, Response, Server

logger = logging.getLogger(__name__)

Node = Dict[str, Any]


def text(value: str, *marks: str) -> Node:
    node: Node = {"type": "text", "text": value}
    if marks:
        node["marks"] = [{"type": mark} for mark in marks]
    return node


def heading(value: str, level: int) -> Node:
    return {
        "type": "heading",
        "attrs": {"level": level},
        "content": [text(value)] if value else [],
    }


def paragraph(*parts: Node) -> Node:
    return {"type": "paragraph", "content": [part for part in parts if part["text"]]}


def bullet_list(paragraphs: List[Node]) -> Node:
    return {
        "type": "bulletList",
        "content": [{"type": "listItem", "content": [p]} for p in paragraphs],
    }


def rule() -> Node:
    return {"type": "rule"}


class AdfConverter(Converter):
    """
    Confluence (ADF) converter.

    Usage:
        adf_bytes = AdfConverter().convert(document)
    """

    format_name = "confluence"

    def convert(self, document: OpenAPIDocument) -> bytes:
        adf = self.build(document)
        try:
            payload = json.dumps(adf, indent=2, ensure_ascii=False) + "\n"
        except (TypeError, ValueError) as e:
            raise OutputError(self.format_name, f"failed to encode ADF: {e}") from e

        logger.info(f"ADF rendered: {len(adf['content'])} top-level nodes")
        return payload.encode('utf-8')

    def build(self, document: OpenAPIDocument) -> Node:
        """Build the ADF document tree."""
        content: List[Node] = [
            heading(document.title, 1),
            paragraph(text(f"Version: {document.version}")),
        ]

        if document.description:
            content.append(heading("Description", 2))
            content.append(paragraph(text(document.description)))

        if document.servers:
            content.append(heading("Servers", 2))
            content.append(self._server_list(document.servers))

        if document.security_schemes or document.security:
            content.append(heading("Security", 2))
            content.extend(self._security_nodes(document))

        if document.paths:
            content.append(heading("API Endpoints", 2))
            for path in document.paths:
                for operation in path.operations:
                    content.extend(self._operation_nodes(path.path, operation))

        return {"version": 1, "type": "doc", "content": content}

    def _server_list(self, servers: List[Server]) -> Node:
        items = []
        for server in servers:
            value = server.url
            if server.description:
                value = f"{server.url} - {server.description}"
            items.append(paragraph(text(value)))
        return bullet_list(items)

    def _security_nodes(self, document: OpenAPIDocument) -> List[Node]:
        nodes = []
        if document.security_schemes:
            items = []
            for name in sorted(document.security_schemes):
                scheme = document.security_schemes[name]
                value = f" ({scheme.type})"
                if scheme.detail:
                    value += f": {scheme.detail}"
                if scheme.description:
                    value += f" - {scheme.description}"
                items.append(paragraph(text(name, "code"), text(value)))
            nodes.append(bullet_list(items))

        requirements = document.security_requirements()
        if requirements:
            nodes.append(paragraph(text("Required: " + " or ".join(requirements))))
        return nodes

    def _operation_nodes(self, path: str, operation: Operation) -> List[Node]:
        nodes = [heading(f"{operation.method} {path}", 3)]

        if operation.summary:
            nodes.append(paragraph(text(operation.summary, "strong")))

        if operation.description:
            nodes.append(paragraph(text(operation.description)))

        if operation.parameters:
            nodes.append(heading("Parameters", 4))
            nodes.append(self._parameter_list(operation.parameters))

        if operation.responses:
            nodes.append(heading("Responses", 4))
            nodes.append(self._response_list(operation.responses))

        nodes.append(rule())
        return nodes

    def _parameter_list(self, parameters: List[Parameter]) -> Node:
        items = []
        for param in parameters:
            required = " (required)" if param.required else ""
            items.append(paragraph(
                text(param.name, "code"),
                text(f" ({param.location}): {param.description}{required}"),
            ))
        return bullet_list(items)

    def _response_list(self, responses: List[Response]) -> Node:
        return bullet_list([
            paragraph(text(response.status_code, "code"), text(f": {response.description}"))
            for response in responses
        ])
