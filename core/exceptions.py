"""
OpenAPI Docs Custom Exceptions
"""

from typing import Sequence


class OpenAPIDocsError(Exception):
    """Base exception for the document generator"""
    pass


class DocumentLoadError(OpenAPIDocsError):
    """OpenAPI specification could not be loaded"""
    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to load OpenAPI specification {path}: {message}")


class UnsupportedFormatError(OpenAPIDocsError):
    """Requested output format has no converter"""
    def __init__(self, format_name: str, supported: Sequence[str]):
        self.format_name = format_name
        self.supported = list(supported)
        super().__init__(
            f"Unsupported format: {format_name} (supported: {', '.join(self.supported)})"
        )


class ConversionError(OpenAPIDocsError):
    """Conversion to an output format failed"""
    def __init__(self, format_name: str, message: str):
        self.format_name = format_name
        super().__init__(f"[{format_name}] {message}")


class SurfaceInitError(ConversionError):
    """Drawing surface could not be created"""
    pass


class OutputError(ConversionError):
    """Final byte stream could not be produced"""
    pass


class LinkRegistryError(ConversionError):
    """Link bookkeeping invariant broken"""
    def __init__(self, message: str):
        super().__init__("pdf", message)


class LinkOrderError(LinkRegistryError):
    """Link target bound out of allocation order"""
    def __init__(self, target: int, expected: int):
        self.target = target
        self.expected = expected
        super().__init__(f"Link target {target} bound out of order (expected {expected})")
