"""
OpenAPI document model, loader and ordering utilities.
"""

from .models import (
    OpenAPIDocument,
    Server,
    Tag,
    Path,
    Operation,
    Parameter,
    RequestBody,
    MediaType,
    Response,
    Schema,
    SecurityScheme,
    extract_ref_name,
)
from .grouping import EndpointRef, DEFAULT_TAG, group_by_tag, sorted_tags
from .references import collect_component_refs, sorted_component_refs
from .plan import RenderPlan, TagSection, compute_render_plan
from .loader import load_document, document_from_dict
