"""
Integration tests for the DOCX converter.

Reads the generated document back with python-docx.
"""

import io

import pytest

# Skip if python-docx not available
docx = pytest.importorskip("docx")

from core.openapi import OpenAPIDocument
from core.docx_engine import DocxConverter


def read_back(data: bytes):
    return docx.Document(io.BytesIO(data))


def headings(document, level):
    style = "Title" if level == 0 else f"Heading {level}"
    return [p.text for p in document.paragraphs if p.style.name == style]


class TestDocxConverter:
    """Document structure."""

    @pytest.fixture
    def output(self, sample_document):
        return read_back(DocxConverter().convert(sample_document))

    def test_title_and_version(self, output, sample_document):
        assert headings(output, 0) == ["Store API"]
        texts = [p.text for p in output.paragraphs]
        assert "Version: 1.2.0" in texts
        assert output.core_properties.title == "Store API"

    def test_description_stripped(self, output):
        assert "Description" in headings(output, 1)
        assert "Store & shipping" in [p.text for p in output.paragraphs]

    def test_servers_bullets(self, output):
        bullets = [p.text for p in output.paragraphs if p.style.name == "List Bullet"]
        assert "https://api.example.com - Production" in bullets

    def test_tags_sorted(self, output):
        assert headings(output, 1)[-1] == "API Endpoints"
        assert headings(output, 2) == ["Billing", "Default", "Shipping"]

    def test_schemas_before_operations(self, output):
        level3 = headings(output, 3)
        assert level3[:4] == ["Schemas Used", "GET /invoices", "POST /invoices", "GET /widgets/{id}"]
        assert headings(output, 4)[:3] == ["Invoice", "Part", "Widget"]

    def test_properties_and_parameters(self, output):
        bullets = [p.text for p in output.paragraphs if p.style.name == "List Bullet"]
        assert "id (integer (int64))" in bullets
        assert "parts (array)" in bullets
        assert "widget (Widget)" in bullets
        assert "limit (query): Page size" in bullets
        assert "id (path):  (required)" in bullets

    def test_responses_sorted(self, output):
        bullets = [p.text for p in output.paragraphs if p.style.name == "List Bullet"]
        assert bullets.index("201: Created") < bullets.index("400: Bad request")

    def test_security_section(self, secured_document):
        output = read_back(DocxConverter().convert(secured_document))
        assert headings(output, 1) == ["Description", "Servers", "Security", "API Endpoints"]

        bullets = [p.text for p in output.paragraphs if p.style.name == "List Bullet"]
        assert "apiKey (apiKey): X-API-Key in header - Key from the console" in bullets
        assert "bearer (http): bearer" in bullets
        assert "Required: apiKey or bearer (read, write)" in [p.text for p in output.paragraphs]

    def test_empty_document(self):
        output = read_back(DocxConverter().convert(OpenAPIDocument(title="Empty", version="0")))
        assert headings(output, 1) == []

    def test_format(self):
        assert DocxConverter().format == "docx"
