"""
OpenAPI loader - maps a YAML/JSON specification onto the document model.

This is a thin mapping layer, not a validator: unknown keys are ignored
and missing sections become empty collections. Local ``$ref``s for
parameters, request bodies and responses are resolved through the root
mapping; schema ``$ref``s are kept as name-only references.
"""

import logging
from pathlib import Path as FilePath
from typing import Any, Dict, List, Optional, Union

import yaml

from core.exceptions import DocumentLoadError
from .models import (
    OpenAPIDocument, Server, Tag, Path, Operation, Parameter,
    RequestBody, MediaType, Response, Schema, SecurityScheme,
)


logger = logging.getLogger(__name__)

# Fixed method order (OpenAPI path item keys)
HTTP_METHODS = ('get', 'post', 'put', 'delete', 'patch', 'head', 'options')


def load_document(path: Union[str, FilePath]) -> OpenAPIDocument:
    """
    Load an OpenAPI specification file.

    Args:
        path: YAML or JSON file

    Returns:
        OpenAPIDocument

    Raises:
        DocumentLoadError: If the file cannot be read or is not a mapping
    """
    source = FilePath(path)
    try:
        text = source.read_text(encoding='utf-8')
    except OSError as e:
        raise DocumentLoadError(str(source), str(e)) from e

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise DocumentLoadError(str(source), f"invalid YAML/JSON: {e}") from e

    if not isinstance(data, dict):
        raise DocumentLoadError(str(source), "top-level value is not a mapping")

    document = document_from_dict(data)
    logger.debug(f"Loaded {len(document.paths)} paths from {source}")
    return document


def document_from_dict(data: Dict[str, Any]) -> OpenAPIDocument:
    """Map an already-parsed OpenAPI mapping onto the document model."""
    return _DocumentMapper(data).build()


class _DocumentMapper:
    """Walks one specification mapping; holds the root for ``$ref`` lookups."""

    def __init__(self, root: Dict[str, Any]):
        self.root = root

    def build(self) -> OpenAPIDocument:
        info = self._mapping(self.root.get('info'))
        components = self._mapping(self.root.get('components'))

        return OpenAPIDocument(
            title=self._text(info.get('title')),
            version=self._text(info.get('version')),
            description=self._text(info.get('description')),
            servers=[
                Server(url=self._text(s.get('url')), description=self._text(s.get('description')))
                for s in self._list_of_mappings(self.root.get('servers'))
            ],
            tags=[
                Tag(name=self._text(t.get('name')), description=self._text(t.get('description')))
                for t in self._list_of_mappings(self.root.get('tags'))
            ],
            paths=[
                self._path(name, item)
                for name, item in self._mapping(self.root.get('paths')).items()
            ],
            components={
                str(name): self._schema(schema)
                for name, schema in self._mapping(components.get('schemas')).items()
            },
            security_schemes={
                str(name): self._security_scheme(self._resolve(scheme))
                for name, scheme in self._mapping(components.get('securitySchemes')).items()
            },
            security=[
                {str(k): list(v or []) for k, v in req.items()}
                for req in self._list_of_mappings(self.root.get('security'))
            ],
        )

    # ------------------------------------------------------------------
    # Structure

    def _path(self, name: str, item: Any) -> Path:
        item = self._resolve(item)
        shared = [self._resolve(p) for p in self._list(item.get('parameters'))]

        operations = []
        for method in HTTP_METHODS:
            op = item.get(method)
            if isinstance(op, dict):
                operations.append(self._operation(method.upper(), op, shared))

        return Path(path=str(name), operations=operations)

    def _operation(self, method: str, op: Dict[str, Any], shared: List[Dict[str, Any]]) -> Operation:
        own = [self._resolve(p) for p in self._list(op.get('parameters'))]

        # Operation-level parameters override path-level ones with the same (name, in)
        overridden = {(p.get('name'), p.get('in')) for p in own}
        merged = [p for p in shared if (p.get('name'), p.get('in')) not in overridden] + own

        request_body = None
        if isinstance(op.get('requestBody'), dict):
            body = self._resolve(op['requestBody'])
            request_body = RequestBody(
                description=self._text(body.get('description')),
                required=bool(body.get('required', False)),
                content=self._content(body.get('content')),
            )

        responses = []
        for status, resp in self._mapping(op.get('responses')).items():
            resp = self._resolve(resp)
            responses.append(Response(
                status_code=str(status),
                description=self._text(resp.get('description')),
                content=self._content(resp.get('content')),
            ))

        return Operation(
            method=method,
            summary=self._text(op.get('summary')),
            description=self._text(op.get('description')),
            operation_id=self._text(op.get('operationId')),
            tags=[str(t) for t in self._list(op.get('tags'))],
            parameters=[self._parameter(p) for p in merged if p],
            request_body=request_body,
            responses=responses,
        )

    def _parameter(self, param: Dict[str, Any]) -> Parameter:
        return Parameter(
            name=self._text(param.get('name')),
            location=self._text(param.get('in')),
            description=self._text(param.get('description')),
            required=bool(param.get('required', False)),
            schema=self._schema(param.get('schema')),
        )

    def _content(self, content: Any) -> Dict[str, MediaType]:
        result = {}
        for media_type, media in self._mapping(content).items():
            media = self._mapping(media)
            examples = {
                str(name): (ex.get('value') if isinstance(ex, dict) and 'value' in ex else ex)
                for name, ex in self._mapping(media.get('examples')).items()
            }
            result[str(media_type)] = MediaType(
                schema=self._schema(media.get('schema')),
                example=media.get('example'),
                examples=examples,
            )
        return result

    def _schema(self, schema: Any) -> Schema:
        if not isinstance(schema, dict):
            return Schema()

        if '$ref' in schema:
            return Schema(ref=str(schema['$ref']), description=self._text(schema.get('description')))

        schema_type = schema.get('type', '')
        if isinstance(schema_type, list):
            # OpenAPI 3.1 type arrays: first non-null entry
            schema_type = next((t for t in schema_type if t != 'null'), '')

        items = schema.get('items')
        return Schema(
            type=self._text(schema_type),
            format=self._text(schema.get('format')),
            description=self._text(schema.get('description')),
            properties={
                str(name): self._schema(prop)
                for name, prop in self._mapping(schema.get('properties')).items()
            },
            items=self._schema(items) if isinstance(items, dict) else None,
        )

    def _security_scheme(self, scheme: Dict[str, Any]) -> SecurityScheme:
        return SecurityScheme(
            type=self._text(scheme.get('type')),
            name=self._text(scheme.get('name')),
            description=self._text(scheme.get('description')),
            location=self._text(scheme.get('in')),
            scheme=self._text(scheme.get('scheme')),
        )

    # ------------------------------------------------------------------
    # Helpers

    def _resolve(self, node: Any) -> Dict[str, Any]:
        """Follow local ``$ref`` pointers (non-schema objects)."""
        seen = set()
        while isinstance(node, dict) and '$ref' in node:
            ref = node['$ref']
            if not isinstance(ref, str) or not ref.startswith('#/') or ref in seen:
                logger.debug(f"Unresolvable reference: {ref}")
                return {}
            seen.add(ref)
            node = self._lookup(ref)
        return node if isinstance(node, dict) else {}

    def _lookup(self, ref: str) -> Optional[Any]:
        node: Any = self.root
        for part in ref[2:].split('/'):
            part = part.replace('~1', '/').replace('~0', '~')
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return node

    @staticmethod
    def _mapping(value: Any) -> Dict[Any, Any]:
        return value if isinstance(value, dict) else {}

    @staticmethod
    def _list(value: Any) -> List[Any]:
        return value if isinstance(value, list) else []

    def _list_of_mappings(self, value: Any) -> List[Dict[str, Any]]:
        return [v for v in self._list(value) if isinstance(v, dict)]

    @staticmethod
    def _text(value: Any) -> str:
        return "" if value is None else str(value)
