"""
Render plan: the single ordered traversal of a document.

The plan fixes the order of tags, endpoints and component schemas once.
Link allocation, the table of contents and the render pass all walk the
same plan, so link identifiers and their destinations always agree.
"""

from dataclasses import dataclass
from typing import Tuple

from .grouping import EndpointRef, group_by_tag, sorted_tags
from .models import OpenAPIDocument
from .references import sorted_component_refs


@dataclass(frozen=True)
class TagSection:
    """One tag section of the rendered document"""
    name: str
    description: str
    endpoints: Tuple[EndpointRef, ...]
    components: Tuple[str, ...]  # Sorted, present in document.components


@dataclass(frozen=True)
class RenderPlan:
    """Ordered, read-only view of a document"""
    document: OpenAPIDocument
    tags: Tuple[TagSection, ...]

    @property
    def has_servers(self) -> bool:
        return bool(self.document.servers)

    def endpoint_count(self) -> int:
        return sum(len(section.endpoints) for section in self.tags)


def compute_render_plan(document: OpenAPIDocument) -> RenderPlan:
    """
    Build the render plan for a document.

    Args:
        document: Parsed OpenAPI document

    Returns:
        RenderPlan with tags in lexicographic order
    """
    groups = group_by_tag(document.paths)
    descriptions = document.tag_descriptions()

    sections = []
    for tag in sorted_tags(groups):
        endpoints = groups[tag]
        names = sorted_component_refs(endpoints, document.components)
        sections.append(TagSection(
            name=tag,
            description=descriptions.get(tag, ""),
            endpoints=tuple(endpoints),
            components=tuple(n for n in names if n in document.components),
        ))

    return RenderPlan(document=document, tags=tuple(sections))
