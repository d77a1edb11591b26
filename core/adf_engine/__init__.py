"""
ADF Engine - Confluence output of OpenAPI documents.
"""

from .renderer import AdfConverter

__all__ = [
    'AdfConverter',
]
