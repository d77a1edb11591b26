"""
Shared test fixtures.

SAMPLE_SPEC is a small store API:
- Billing: GET /invoices, POST /invoices, GET /widgets/{id}
- Default: GET /health (no tags)
- Shipping: GET /widgets/{id}
Widget is used by both Billing and Shipping; Widget and Part reference
each other.
"""

import copy

import pytest
import yaml

from core.openapi import document_from_dict


SAMPLE_SPEC = {
    "openapi": "3.0.3",
    "info": {
        "title": "Store API",
        "version": "1.2.0",
        "description": "<p>Store &amp; shipping</p>",
    },
    "servers": [
        {"url": "https://api.example.com", "description": "Production"},
    ],
    "tags": [
        {"name": "Billing", "description": "Invoices and payments"},
        {"name": "Shipping"},
    ],
    "paths": {
        "/invoices": {
            "get": {
                "tags": ["Billing"],
                "summary": "List invoices",
                "operationId": "listInvoices",
                "parameters": [
                    {"name": "limit", "in": "query", "description": "Page size",
                     "schema": {"type": "integer", "format": "int32"}},
                ],
                "responses": {
                    "200": {
                        "description": "OK",
                        "content": {
                            "application/json": {
                                "schema": {"type": "array", "items": {"$ref": "#/components/schemas/Invoice"}},
                                "example": [{"id": 1}],
                            },
                        },
                    },
                },
            },
            "post": {
                "tags": ["Billing"],
                "summary": "Create invoice",
                "requestBody": {
                    "required": True,
                    "content": {
                        "application/json": {
                            "schema": {"$ref": "#/components/schemas/Invoice"},
                            "examples": {"basic": {"value": {"id": 2}}},
                        },
                    },
                },
                "responses": {
                    "400": {"$ref": "#/components/responses/BadRequest"},
                    "201": {"description": "Created"},
                },
            },
        },
        "/widgets/{id}": {
            "parameters": [
                {"name": "id", "in": "path", "required": True, "schema": {"type": "string"}},
            ],
            "get": {
                "tags": ["Billing", "Shipping"],
                "summary": "Get widget",
                "responses": {
                    "200": {
                        "description": "OK",
                        "content": {"application/json": {"schema": {"$ref": "#/components/schemas/Widget"}}},
                    },
                },
            },
        },
        "/health": {
            "get": {
                "summary": "Health check",
                "responses": {"200": {"description": "OK"}},
            },
        },
    },
    "components": {
        "schemas": {
            "Invoice": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer", "format": "int64"},
                    "widget": {"$ref": "#/components/schemas/Widget"},
                },
            },
            "Widget": {
                "type": "object",
                "description": "A widget",
                "properties": {
                    "name": {"type": "string"},
                    "parts": {"type": "array", "items": {"$ref": "#/components/schemas/Part"}},
                },
            },
            "Part": {
                "type": "object",
                "properties": {
                    "sku": {"type": "string"},
                    "parent": {"$ref": "#/components/schemas/Widget"},
                },
            },
        },
        "responses": {
            "BadRequest": {"description": "Bad request"},
        },
    },
}


@pytest.fixture
def sample_spec():
    """Fresh copy of the sample specification mapping"""
    return copy.deepcopy(SAMPLE_SPEC)


@pytest.fixture
def sample_document(sample_spec):
    return document_from_dict(sample_spec)


@pytest.fixture
def no_servers_document(sample_spec):
    sample_spec.pop("servers")
    return document_from_dict(sample_spec)


@pytest.fixture
def secured_document(sample_spec):
    """Sample document with security schemes and top-level requirements"""
    sample_spec["components"]["securitySchemes"] = {
        "apiKey": {"type": "apiKey", "name": "X-API-Key", "in": "header", "description": "<b>Key</b> from the console"},
        "bearer": {"type": "http", "scheme": "bearer"},
    }
    sample_spec["security"] = [{"apiKey": []}, {"bearer": ["read", "write"]}]
    return document_from_dict(sample_spec)


@pytest.fixture
def spec_file(tmp_path, sample_spec):
    """Sample specification written as YAML"""
    path = tmp_path / "openapi.yaml"
    path.write_text(yaml.safe_dump(sample_spec), encoding="utf-8")
    return path
