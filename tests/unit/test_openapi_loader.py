"""Tests for core/openapi/loader.py - mapping specifications onto the document model."""

import json

import pytest

from core.exceptions import DocumentLoadError
from core.openapi import OpenAPIDocument, SecurityScheme, document_from_dict, load_document


# ==================== Document info ====================


class TestDocumentInfo:
    """info, servers, tags and components."""

    def test_info(self, sample_document):
        assert sample_document.title == "Store API"
        assert sample_document.version == "1.2.0"
        # HTML is stripped at render time, not by the loader
        assert sample_document.description == "<p>Store &amp; shipping</p>"

    def test_servers(self, sample_document):
        assert len(sample_document.servers) == 1
        assert sample_document.servers[0].url == "https://api.example.com"
        assert sample_document.servers[0].description == "Production"

    def test_tags(self, sample_document):
        assert sample_document.tag_descriptions() == {
            "Billing": "Invoices and payments",
            "Shipping": "",
        }

    def test_components(self, sample_document):
        assert set(sample_document.components) == {"Invoice", "Widget", "Part"}
        widget = sample_document.components["Widget"]
        assert widget.description == "A widget"
        assert widget.properties["parts"].type == "array"
        assert widget.properties["parts"].items.ref_name == "Part"

    def test_missing_sections_are_empty(self):
        doc = document_from_dict({"openapi": "3.0.0"})
        assert doc.title == ""
        assert doc.servers == []
        assert doc.paths == []
        assert doc.components == {}


# ==================== Paths and operations ====================


class TestPaths:
    """Path order, method order and parameters."""

    def test_path_order_preserved(self, sample_document):
        assert [p.path for p in sample_document.paths] == ["/invoices", "/widgets/{id}", "/health"]

    def test_methods_upper_case_in_fixed_order(self):
        doc = document_from_dict({"paths": {"/x": {
            "delete": {}, "get": {}, "options": {}, "post": {},
        }}})
        assert [op.method for op in doc.paths[0].operations] == ["GET", "POST", "DELETE", "OPTIONS"]

    def test_operation_fields(self, sample_document):
        op = sample_document.paths[0].operations[0]
        assert op.summary == "List invoices"
        assert op.operation_id == "listInvoices"
        assert op.tags == ["Billing"]
        assert op.parameters[0].name == "limit"
        assert op.parameters[0].location == "query"
        assert op.parameters[0].schema.type_label == "integer (int32)"

    def test_path_level_parameters_merged(self, sample_document):
        op = sample_document.paths[1].operations[0]
        assert [p.name for p in op.parameters] == ["id"]
        assert op.parameters[0].required is True

    def test_operation_parameter_overrides_path_parameter(self, sample_spec):
        item = sample_spec["paths"]["/widgets/{id}"]
        item["get"]["parameters"] = [
            {"name": "id", "in": "path", "required": True, "description": "Widget ID"},
        ]
        doc = document_from_dict(sample_spec)
        params = doc.paths[1].operations[0].parameters
        assert len(params) == 1
        assert params[0].description == "Widget ID"

    def test_untagged_operation_has_no_tags(self, sample_document):
        assert sample_document.paths[2].operations[0].tags == []


# ==================== References and examples ====================


class TestReferences:
    """$ref handling."""

    def test_response_ref_resolved(self, sample_document):
        post = sample_document.paths[0].operations[1]
        codes = {r.status_code: r.description for r in post.responses}
        assert codes == {"400": "Bad request", "201": "Created"}

    def test_response_order_preserved(self, sample_document):
        post = sample_document.paths[0].operations[1]
        assert [r.status_code for r in post.responses] == ["400", "201"]

    def test_schema_ref_kept_name_only(self, sample_document):
        body = sample_document.paths[0].operations[1].request_body
        schema = body.content["application/json"].schema
        assert schema.ref == "#/components/schemas/Invoice"
        assert schema.ref_name == "Invoice"
        assert schema.properties == {}

    def test_parameter_ref_resolved(self):
        doc = document_from_dict({
            "paths": {"/x": {"get": {"parameters": [{"$ref": "#/components/parameters/Limit"}]}}},
            "components": {"parameters": {"Limit": {"name": "limit", "in": "query"}}},
        })
        assert doc.paths[0].operations[0].parameters[0].name == "limit"

    def test_reference_loop_is_dropped(self):
        doc = document_from_dict({
            "paths": {"/x": {"get": {"parameters": [{"$ref": "#/components/parameters/A"}]}}},
            "components": {"parameters": {
                "A": {"$ref": "#/components/parameters/B"},
                "B": {"$ref": "#/components/parameters/A"},
            }},
        })
        assert doc.paths[0].operations[0].parameters == []

    def test_escaped_pointer(self):
        doc = document_from_dict({
            "paths": {"/x": {"get": {"responses": {"200": {"$ref": "#/x-shared/a~1b"}}}}},
            "x-shared": {"a/b": {"description": "Escaped"}},
        })
        assert doc.paths[0].operations[0].responses[0].description == "Escaped"

    def test_examples(self, sample_document):
        get_media = sample_document.paths[0].operations[0].responses[0].content["application/json"]
        assert get_media.example == [{"id": 1}]

        post_media = sample_document.paths[0].operations[1].request_body.content["application/json"]
        assert post_media.example is None
        assert post_media.examples == {"basic": {"id": 2}}

    def test_type_array(self):
        doc = document_from_dict({"components": {"schemas": {
            "Name": {"type": ["null", "string"]},
        }}})
        assert doc.components["Name"].type == "string"


# ==================== Security ====================


class TestSecurity:
    def test_security_schemes(self):
        doc = document_from_dict({
            "components": {"securitySchemes": {
                "apiKey": {"type": "apiKey", "name": "X-API-Key", "in": "header"},
                "bearer": {"type": "http", "scheme": "bearer"},
            }},
            "security": [{"apiKey": []}, {"bearer": None}],
        })
        assert doc.security_schemes["apiKey"].location == "header"
        assert doc.security_schemes["bearer"].scheme == "bearer"
        assert doc.security == [{"apiKey": []}, {"bearer": []}]

    def test_scheme_detail(self, secured_document):
        schemes = secured_document.security_schemes
        assert schemes["apiKey"].detail == "X-API-Key in header"
        assert schemes["bearer"].detail == "bearer"
        assert SecurityScheme(type="oauth2").detail == ""

    def test_requirements_as_text(self, secured_document):
        assert secured_document.security_requirements() == ["apiKey", "bearer (read, write)"]

    def test_combined_and_anonymous_requirements(self):
        doc = OpenAPIDocument(security=[{"apiKey": [], "bearer": []}, {}])
        assert doc.security_requirements() == ["apiKey + bearer", "none"]


# ==================== load_document ====================


class TestLoadDocument:
    """File loading and errors."""

    def test_yaml_file(self, spec_file):
        doc = load_document(spec_file)
        assert doc.title == "Store API"
        assert len(doc.paths) == 3

    def test_json_file(self, tmp_path, sample_spec):
        path = tmp_path / "openapi.json"
        path.write_text(json.dumps(sample_spec), encoding="utf-8")
        assert load_document(str(path)).version == "1.2.0"

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentLoadError) as exc_info:
            load_document(tmp_path / "missing.yaml")
        assert "missing.yaml" in str(exc_info.value)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("info: [unclosed", encoding="utf-8")
        with pytest.raises(DocumentLoadError):
            load_document(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(DocumentLoadError, match="not a mapping"):
            load_document(path)
