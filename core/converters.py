"""
Converter interface and factory.

Every output format implements ``Converter.convert(document) -> bytes``.
Converters hold only their options; all per-document state is created
inside ``convert``.
"""

from abc import ABC, abstractmethod
from typing import List

from core.exceptions import UnsupportedFormatError
from core.openapi.models import OpenAPIDocument


SUPPORTED_FORMATS: List[str] = ['pdf', 'docx', 'confluence']


class Converter(ABC):
    """Abstract base class for output formats"""

    format_name: str = ""

    @property
    def format(self) -> str:
        return self.format_name

    @abstractmethod
    def convert(self, document: OpenAPIDocument) -> bytes:
        """
        Render a document.

        Args:
            document: Parsed OpenAPI document

        Returns:
            Output file contents

        Raises:
            ConversionError: If the output cannot be produced
        """
        pass


def create_converter(format_name: str, **options) -> Converter:
    """
    Factory function to create a converter by format name.

    Args:
        format_name: 'pdf', 'docx' (or 'word'), 'confluence' (or 'adf')
        **options: Converter-specific options, e.g. ``page_size`` for PDF

    Returns:
        Converter instance

    Raises:
        UnsupportedFormatError: If no converter handles the format
    """
    from core.pdf_engine import PdfConverter
    from core.docx_engine import DocxConverter
    from core.adf_engine import AdfConverter

    converters = {
        'pdf': PdfConverter,
        'docx': DocxConverter,
        'word': DocxConverter,
        'confluence': AdfConverter,
        'adf': AdfConverter,
    }

    converter_class = converters.get(format_name.lower())
    if not converter_class:
        raise UnsupportedFormatError(format_name, SUPPORTED_FORMATS)

    return converter_class(**options)
