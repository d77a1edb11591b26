"""
Component reference collection.

Finds every named component schema touched by a group of endpoints:
request bodies, responses and parameters, descending into object
properties and array items. With the component map available, references
are followed into the referenced schemas as well, guarded by a visited-set
keyed by reference name so that cyclic component graphs terminate.
"""

from typing import Dict, Iterable, List, Optional, Set

from .grouping import EndpointRef
from .models import Schema


def _walk(
    schema: Optional[Schema],
    refs: Set[str],
    components: Optional[Dict[str, Schema]],
) -> None:
    pending = [schema] if schema is not None else []

    while pending:
        current = pending.pop()

        if current.ref:
            name = current.ref_name
            if name not in refs:
                refs.add(name)
                if components is not None and name in components:
                    pending.append(components[name])

        pending.extend(current.properties.values())

        if current.items is not None:
            pending.append(current.items)


def endpoint_schemas(endpoint: EndpointRef) -> List[Schema]:
    """All top-level schemas used by an endpoint."""
    op = endpoint.operation
    schemas: List[Schema] = []

    if op.request_body is not None:
        schemas.extend(media.schema for media in op.request_body.content.values())

    for response in op.responses:
        schemas.extend(media.schema for media in response.content.values())

    schemas.extend(param.schema for param in op.parameters)
    return schemas


def collect_component_refs(
    endpoints: Iterable[EndpointRef],
    components: Optional[Dict[str, Schema]] = None,
) -> Set[str]:
    """
    Collect the names of component schemas referenced by endpoints.

    Args:
        endpoints: Endpoints of one tag grouping
        components: Optional component map; when given, references are
            followed transitively

    Returns:
        Deduplicated, case-sensitive set of schema names
    """
    refs: Set[str] = set()
    for endpoint in endpoints:
        for schema in endpoint_schemas(endpoint):
            _walk(schema, refs, components)
    return refs


def sorted_component_refs(
    endpoints: Iterable[EndpointRef],
    components: Optional[Dict[str, Schema]] = None,
) -> List[str]:
    return sorted(collect_component_refs(endpoints, components))
