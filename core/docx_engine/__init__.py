"""
DOCX Engine for the OpenAPI document generator.

Word output built with python-docx.
"""

from .renderer import DocxConverter

__version__ = "1.0.0"

__all__ = [
    'DocxConverter',
]
