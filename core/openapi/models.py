"""
Data models for OpenAPI documents.
All models use dataclasses for simplicity.

This is the contract between the loader and every converter: a fully
mapped document tree in which schema references are kept as name-only
``$ref`` strings (``#/components/schemas/Name``).
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any


def extract_ref_name(ref: str) -> str:
    """Return the trailing path segment of a ``$ref`` pointer."""
    return ref.rsplit('/', 1)[-1]


@dataclass
class Schema:
    """JSON schema for parameters and request/response bodies"""
    type: str = ""
    format: str = ""
    description: str = ""
    properties: Dict[str, 'Schema'] = field(default_factory=dict)
    items: Optional['Schema'] = None
    ref: str = ""  # Name-only reference, resolved by trailing segment

    @property
    def ref_name(self) -> str:
        return extract_ref_name(self.ref) if self.ref else ""

    @property
    def type_label(self) -> str:
        """Type with format, e.g. ``integer (int64)``"""
        if self.format:
            return f"{self.type} ({self.format})"
        return self.type


@dataclass
class MediaType:
    """Content type payload"""
    schema: Schema = field(default_factory=Schema)
    example: Any = None
    examples: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Parameter:
    """Request parameter"""
    name: str
    location: str = ""  # query, path, header, cookie
    description: str = ""
    required: bool = False
    schema: Schema = field(default_factory=Schema)


@dataclass
class RequestBody:
    """Request body"""
    description: str = ""
    required: bool = False
    content: Dict[str, MediaType] = field(default_factory=dict)


@dataclass
class Response:
    """Response for one status code"""
    status_code: str
    description: str = ""
    content: Dict[str, MediaType] = field(default_factory=dict)


@dataclass
class Operation:
    """HTTP operation on a path"""
    method: str
    summary: str = ""
    description: str = ""
    operation_id: str = ""
    tags: List[str] = field(default_factory=list)
    parameters: List[Parameter] = field(default_factory=list)
    request_body: Optional[RequestBody] = None
    responses: List[Response] = field(default_factory=list)


@dataclass
class Path:
    """API endpoint path"""
    path: str
    operations: List[Operation] = field(default_factory=list)


@dataclass
class Server:
    """API server"""
    url: str
    description: str = ""


@dataclass
class Tag:
    """OpenAPI tag"""
    name: str
    description: str = ""


@dataclass
class SecurityScheme:
    """Security scheme"""
    type: str = ""
    name: str = ""
    description: str = ""
    location: str = ""
    scheme: str = ""

    @property
    def detail(self) -> str:
        """HTTP scheme, or the key name and its location for API keys"""
        if self.scheme:
            return self.scheme
        if self.name and self.location:
            return f"{self.name} in {self.location}"
        return self.name or self.location


@dataclass
class OpenAPIDocument:
    """
    Parsed OpenAPI specification.
    Consumed read-only by all converters.
    """
    title: str = ""
    version: str = ""
    description: str = ""
    servers: List[Server] = field(default_factory=list)
    tags: List[Tag] = field(default_factory=list)
    paths: List[Path] = field(default_factory=list)
    components: Dict[str, Schema] = field(default_factory=dict)
    security_schemes: Dict[str, SecurityScheme] = field(default_factory=dict)
    security: List[Dict[str, List[str]]] = field(default_factory=list)

    def tag_descriptions(self) -> Dict[str, str]:
        return {tag.name: tag.description for tag in self.tags}

    def security_requirements(self) -> List[str]:
        """
        Top-level security requirements as text.

        Each entry is one alternative; schemes required together are joined
        with " + " and scopes are listed in parentheses. An empty requirement
        (anonymous access) reads "none".
        """
        result = []
        for requirement in self.security:
            parts = [
                f"{name} ({', '.join(scopes)})" if scopes else name
                for name, scopes in requirement.items()
            ]
            result.append(" + ".join(parts) if parts else "none")
        return result
