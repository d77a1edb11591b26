"""
Link registry: pre-allocated internal link targets.

Targets are allocated during planning, before any page exists, and bound
to a page position during rendering. Allocation follows render order, so
the render pass must bind targets in exactly the order they were
allocated; any deviation means a link would land on the wrong
destination and is reported immediately.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional

from core.exceptions import LinkRegistryError, LinkOrderError


logger = logging.getLogger(__name__)

LinkTarget = int


class ComponentKey(NamedTuple):
    """Tag-scoped component schema"""
    tag: str
    schema: str


@dataclass(frozen=True)
class Binding:
    """Resolved position of a link target"""
    page: int
    y: float


class LinkRegistry:
    """
    Allocates and tracks link targets for one conversion.

    Usage:
        registry = LinkRegistry()
        target = registry.new_link()           # planning pass
        ...
        registry.bind(target, page=3, y=120)   # render pass
        registry.verify_complete()
    """

    def __init__(self):
        self._allocated: List[LinkTarget] = []
        self._bindings: Dict[LinkTarget, Binding] = {}
        self._components: Dict[ComponentKey, LinkTarget] = {}

    def new_link(self) -> LinkTarget:
        target = len(self._allocated) + 1
        self._allocated.append(target)
        return target

    def register_component(self, tag: str, schema: str) -> LinkTarget:
        """Allocate the target for a schema rendered in a tag section."""
        key = ComponentKey(tag, schema)
        if key in self._components:
            raise LinkRegistryError(f"Component link already allocated: {tag}:{schema}")
        target = self.new_link()
        self._components[key] = target
        return target

    def component_link(self, tag: str, schema: str) -> Optional[LinkTarget]:
        return self._components.get(ComponentKey(tag, schema))

    @staticmethod
    def destination_name(target: LinkTarget) -> str:
        """PDF named-destination key for a target."""
        return f"link-{target}"

    # ------------------------------------------------------------------
    # Render pass

    @property
    def next_expected(self) -> Optional[LinkTarget]:
        index = len(self._bindings)
        return self._allocated[index] if index < len(self._allocated) else None

    def bind(self, target: LinkTarget, page: int, y: float):
        """
        Record the position of a target.

        Raises:
            LinkOrderError: If the target is not the next one in allocation order
        """
        expected = self.next_expected
        if target != expected:
            raise LinkOrderError(target, expected if expected is not None else -1)
        self._bindings[target] = Binding(page=page, y=y)
        logger.debug(f"Link {target} bound to page {page}")

    def binding(self, target: LinkTarget) -> Optional[Binding]:
        return self._bindings.get(target)

    def verify_complete(self):
        """
        Raises:
            LinkRegistryError: If any allocated target was never bound
        """
        unbound = [t for t in self._allocated if t not in self._bindings]
        if unbound:
            raise LinkRegistryError(f"{len(unbound)} link targets never bound: {unbound[:10]}")

    @property
    def allocated_count(self) -> int:
        return len(self._allocated)

    @property
    def bound_count(self) -> int:
        return len(self._bindings)

    def allocation_order(self) -> List[LinkTarget]:
        return list(self._allocated)

    def binding_order(self) -> List[LinkTarget]:
        return list(self._bindings)
