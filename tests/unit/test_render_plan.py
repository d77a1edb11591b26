"""Tests for core/openapi/plan.py - the shared render plan."""

import dataclasses

import pytest

from core.openapi import Operation, Parameter, Path, OpenAPIDocument, Schema, compute_render_plan


class TestComputeRenderPlan:
    """Tag sections, components and flags."""

    def test_tag_order(self, sample_document):
        plan = compute_render_plan(sample_document)
        assert [t.name for t in plan.tags] == ["Billing", "Default", "Shipping"]

    def test_tag_descriptions(self, sample_document):
        plan = compute_render_plan(sample_document)
        descriptions = {t.name: t.description for t in plan.tags}
        assert descriptions == {"Billing": "Invoices and payments", "Default": "", "Shipping": ""}

    def test_components_per_tag(self, sample_document):
        plan = compute_render_plan(sample_document)
        components = {t.name: t.components for t in plan.tags}
        assert components == {
            "Billing": ("Invoice", "Part", "Widget"),
            "Default": (),
            "Shipping": ("Part", "Widget"),
        }

    def test_counts_and_flags(self, sample_document, no_servers_document):
        assert compute_render_plan(sample_document).endpoint_count() == 5
        assert compute_render_plan(sample_document).has_servers is True
        assert compute_render_plan(no_servers_document).has_servers is False

    def test_unknown_components_skipped(self):
        doc = OpenAPIDocument(paths=[Path("/x", [Operation(
            "GET", parameters=[Parameter("q", schema=Schema(ref="#/components/schemas/Ghost"))],
        )])])
        plan = compute_render_plan(doc)
        assert plan.tags[0].components == ()

    def test_empty_document(self):
        plan = compute_render_plan(OpenAPIDocument())
        assert plan.tags == ()
        assert plan.endpoint_count() == 0

    def test_plan_is_frozen(self, sample_document):
        plan = compute_render_plan(sample_document)
        with pytest.raises(dataclasses.FrozenInstanceError):
            plan.tags = ()
        with pytest.raises(dataclasses.FrozenInstanceError):
            plan.tags[0].name = "Other"

    def test_deterministic(self, sample_document):
        assert compute_render_plan(sample_document) == compute_render_plan(sample_document)
