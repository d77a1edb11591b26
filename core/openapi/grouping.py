"""
Endpoint grouping and deterministic ordering.

Every operation is filed once under each of its tags (or under
``Default`` when it has none). Each filed copy carries the full operation
payload so that a tag section is self-contained.
"""

import copy
from dataclasses import dataclass
from typing import Dict, Iterable, List

from .models import Operation, Path


DEFAULT_TAG = "Default"


@dataclass(frozen=True)
class EndpointRef:
    """One HTTP operation within one tag grouping"""
    path: str
    method: str
    operation: Operation

    @property
    def title(self) -> str:
        return f"{self.method} {self.path}"


def effective_tags(operation: Operation) -> List[str]:
    """Declared tags, or the default tag when none are declared."""
    return list(operation.tags) if operation.tags else [DEFAULT_TAG]


def group_by_tag(paths: Iterable[Path]) -> Dict[str, List[EndpointRef]]:
    """
    Group endpoints by tag.

    Within each tag, endpoints are sorted by ``(path, method)`` using plain
    string ordering.

    Args:
        paths: Document paths

    Returns:
        Mapping of tag name to sorted endpoint list
    """
    result: Dict[str, List[EndpointRef]] = {}

    for path in paths:
        for op in path.operations:
            for tag in effective_tags(op):
                result.setdefault(tag, []).append(EndpointRef(
                    path=path.path,
                    method=op.method,
                    operation=copy.deepcopy(op),
                ))

    for endpoints in result.values():
        endpoints.sort(key=lambda ep: (ep.path, ep.method))

    return result


def sorted_tags(groups: Dict[str, List[EndpointRef]]) -> List[str]:
    return sorted(groups)
