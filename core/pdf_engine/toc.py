"""
Table-of-contents planner.

Builds the ordered outline of the document from the render plan and
allocates every link target in render order:

    Overview (1)
    Servers (1, only when the document has servers)
    API Endpoints (1)
    <tag> (2)
        <METHOD> <path> (3)
        ... component schemas of the tag (link targets only)
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

from core.openapi.plan import RenderPlan
from core.utils.text import truncate
from .links import LinkRegistry, LinkTarget


OVERVIEW = "Overview"
SERVERS = "Servers"
API_ENDPOINTS = "API Endpoints"


@dataclass
class TocEntry:
    """Table of contents entry"""
    title: str
    level: int  # 1 = section, 2 = tag, 3 = endpoint
    target: LinkTarget
    resolved_page: Optional[int] = None  # Filled after layout

    @property
    def display_title(self) -> str:
        return truncate(self.title)


class TableOfContents:
    """Ordered TOC entries with lookups for the render pass"""

    def __init__(self):
        self.entries: List[TocEntry] = []
        self.sections: Dict[str, TocEntry] = {}
        self.tags: Dict[str, TocEntry] = {}
        self.endpoints: Dict[str, List[TocEntry]] = {}

    def add(self, entry: TocEntry) -> TocEntry:
        self.entries.append(entry)
        return entry

    def resolve_pages(self, registry: LinkRegistry) -> Dict[LinkTarget, int]:
        """
        Copy bound page numbers into the entries.

        Returns:
            Mapping of link target to page number
        """
        pages = {}
        for entry in self.entries:
            binding = registry.binding(entry.target)
            entry.resolved_page = binding.page if binding else None
            if binding:
                pages[entry.target] = binding.page
        return pages

    def apply_pages(self, pages: Dict[LinkTarget, int]):
        """Pre-fill page numbers learned from an earlier layout pass."""
        for entry in self.entries:
            entry.resolved_page = pages.get(entry.target)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)


def plan_table_of_contents(plan: RenderPlan, registry: LinkRegistry) -> TableOfContents:
    """
    Build the TOC and allocate all link targets.

    Args:
        plan: Render plan shared with the render pass
        registry: Fresh link registry for this conversion

    Returns:
        TableOfContents in final rendering order
    """
    toc = TableOfContents()

    def section(title: str) -> None:
        toc.sections[title] = toc.add(TocEntry(title=title, level=1, target=registry.new_link()))

    section(OVERVIEW)
    if plan.has_servers:
        section(SERVERS)
    section(API_ENDPOINTS)

    for tag in plan.tags:
        toc.tags[tag.name] = toc.add(TocEntry(title=tag.name, level=2, target=registry.new_link()))
        toc.endpoints[tag.name] = [
            toc.add(TocEntry(title=endpoint.title, level=3, target=registry.new_link()))
            for endpoint in tag.endpoints
        ]
        for name in tag.components:
            registry.register_component(tag.name, name)

    return toc
