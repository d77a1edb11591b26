"""
Text helpers shared by the converters.

Examples:
- strip_html("<p>Fish &amp; chips</p>") → "Fish & chips"
- truncate("x" * 70) → 57 characters + "..."
- format_example({"id": 1}) → indented JSON
"""

import html
import json
import logging
import re
from typing import Any


logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r'<[^>]*>')

DISPLAY_LIMIT = 60


def strip_html(text: str) -> str:
    """Remove HTML tags and decode entities."""
    if not text:
        return ""
    result = _TAG_RE.sub('', text)
    result = html.unescape(result)
    result = result.replace('\n\n', '\n')
    return result.strip()


def truncate(text: str, limit: int = DISPLAY_LIMIT) -> str:
    """Shorten text longer than ``limit`` characters, ending with '...'."""
    if len(text) <= limit:
        return text
    return text[:limit - 3] + '...'


def format_example(value: Any) -> str:
    """
    Serialize an example payload as indented JSON.

    Non-JSON scalars (dates from YAML) are written as text. Falls back to
    a plain textual representation when serialization fails, e.g. for
    circular structures.
    """
    try:
        return json.dumps(value, indent=2, ensure_ascii=False, default=str)
    except (TypeError, ValueError) as e:
        logger.debug(f"Example not JSON serializable, using text fallback: {e}")
        return str(value)
