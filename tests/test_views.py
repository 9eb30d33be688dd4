"""Tests for views.py: direction resolution, overview / scope / scenario views, JSON output."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from archlayout import views
from archlayout.errors import ModelError
from archlayout.model import Architecture, load_architecture
from archlayout.renderers import JsonRenderer, Renderer, diagram_to_dict
from archlayout.types import Direction, External, Known, Point
from archlayout.views import (
    all_views,
    overview,
    resolve_direction,
    scenario_view,
    scope_view,
    view,
    view_names,
)

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"

# ─── Helpers ──────────────────────────────────────────────────────────────────


@pytest.fixture
def arch() -> Architecture:
    return load_architecture(EXAMPLES_DIR / "ecommerce.json")


def edge_map(diagram):
    return {(e.source.id, e.target.id): e for e in diagram.edges}


# ─── Direction Resolution Tests ───────────────────────────────────────────────


class TestResolveDirection:
    def test_metadata_beats_style(self, arch):
        assert resolve_direction(arch) is Direction.TB

    def test_override_beats_metadata(self, arch):
        assert resolve_direction(arch, "rl") is Direction.RL
        assert resolve_direction(arch, Direction.BT) is Direction.BT

    def test_style_used_without_metadata(self):
        assert resolve_direction(Architecture(style={"svg_direction": "bt"})) is Direction.BT

    def test_keys_case_insensitive(self):
        assert resolve_direction(Architecture(metadata={"SVG_Direction": "Rl"})) is Direction.RL

    def test_default_lr(self):
        assert resolve_direction(Architecture()) is Direction.LR

    def test_invalid_value_logged_and_skipped(self, caplog):
        arch = Architecture(metadata={"direction": "sideways"}, style={"direction": "TB"})
        with caplog.at_level(logging.WARNING, logger="archlayout.views"):
            assert resolve_direction(arch) is Direction.TB
        assert "sideways" in caplog.text


# ─── Overview Tests ───────────────────────────────────────────────────────────


class TestOverview:
    def test_every_element_placed_once(self, arch):
        diagram = overview(arch)
        ids = [n.id for n in diagram.nodes]
        assert sorted(ids) == sorted(
            ["Customer", "Shop", "Warehouse", "Stripe", "Web", "Api", "Db", "Orders", "Payments"]
        )
        assert diagram.direction is Direction.TB
        assert diagram.name == "overview"

    def test_nesting_metadata(self, arch):
        diagram = overview(arch)
        assert diagram.node("Customer").parent is None
        assert diagram.node("Web").parent == "Shop"
        assert diagram.node("Orders").parent == "Shop.Api"
        assert diagram.node("Orders").depth == 2
        assert diagram.node("Shop").container
        assert diagram.node("Shop").label == "Online Shop"

    def test_external_endpoint_tagged(self, arch):
        diagram = overview(arch)
        stripe = diagram.node("Stripe")
        assert stripe.external and stripe.kind == "external"
        edge = edge_map(diagram)[("Shop", "Stripe")]
        assert edge.source == Known("Shop")
        assert edge.target == External("Stripe")
        assert edge.label == "charges"

    def test_edges_per_scope(self, arch):
        pairs = set(edge_map(overview(arch)))
        assert pairs == {
            ("Customer", "Shop"),
            ("Shop", "Stripe"),
            ("Warehouse", "Shop"),
            ("Shop", "Warehouse"),
            ("Shop.Web", "Shop.Api"),
            ("Shop.Api", "Shop.Db"),
            ("Shop.Api.Orders", "Shop.Api.Payments"),
        }

    def test_lr_anchors(self, arch):
        diagram = overview(arch, "LR")
        customer, shop = diagram.node("Customer"), diagram.node("Shop")
        edge = edge_map(diagram)[("Customer", "Shop")]
        assert edge.start == Point(customer.x + customer.width, customer.y + customer.height // 2)
        assert edge.end == Point(shop.x, shop.y + shop.height // 2)
        assert edge.controls is None
        assert edge.label_point == Point((edge.start.x + edge.end.x) // 2, (edge.start.y + edge.end.y) // 2)

    def test_tb_anchors(self, arch):
        diagram = overview(arch)
        web, api = diagram.node("Web"), diagram.node("Api")
        edge = edge_map(diagram)[("Shop.Web", "Shop.Api")]
        assert edge.start == Point(web.x + web.width // 2, web.y + web.height)
        assert edge.end == Point(api.x + api.width // 2, api.y)

    def test_curved_edges(self, arch):
        diagram = overview(arch, "LR", curved=True)
        for edge in diagram.edges:
            first, second = edge.controls
            assert first == Point(edge.start.x + 40, edge.start.y)
            assert second == Point(edge.end.x - 40, edge.end.y)

    def test_none_architecture(self):
        with pytest.raises(ModelError, match="nil"):
            overview(None)


# ─── Scope and Scenario View Tests ────────────────────────────────────────────


class TestScopeView:
    def test_only_scope_nodes(self, arch):
        diagram = scope_view(arch, "Shop")
        assert {n.id for n in diagram.nodes} == {"Web", "Api", "Db", "Orders", "Payments"}
        assert diagram.node("Web").parent is None and diagram.node("Web").depth == 0
        assert diagram.node("Orders").parent == "Shop.Api" and diagram.node("Orders").depth == 1
        assert set(edge_map(diagram)) == {
            ("Shop.Web", "Shop.Api"),
            ("Shop.Api", "Shop.Db"),
            ("Shop.Api.Orders", "Shop.Api.Payments"),
        }
        assert not any(e.source.external or e.target.external for e in diagram.edges)

    def test_nodes_start_inside_padding(self, arch):
        diagram = scope_view(arch, "Api", "LR")
        assert diagram.node("Orders").x == 40
        assert diagram.width == 40 + 200 + 80 + 200 + 40

    def test_leaf_entity_rejected(self, arch):
        with pytest.raises(ModelError, match="Customer"):
            scope_view(arch, "Customer")

    def test_unknown_scope(self, arch):
        with pytest.raises(ModelError, match="Nope"):
            scope_view(arch, "Nope")


class TestScenarioView:
    def test_participants(self, arch):
        diagram = scenario_view(arch, "Checkout")
        assert diagram.name == "scenario:Checkout"
        assert [n.id for n in diagram.nodes] == ["Customer", "Web", "Orders", "Payments", "Stripe"]
        assert diagram.node("Stripe").external
        assert not diagram.node("Orders").external

    def test_steps_become_labelled_edges(self, arch):
        edges = edge_map(scenario_view(arch, "Checkout"))
        assert edges[("Customer", "Shop.Web")].label == "submits cart"
        assert edges[("Shop.Api.Payments", "Stripe")].target == External("Stripe")
        assert len(edges) == 4

    def test_chain_follows_direction(self, arch):
        diagram = scenario_view(arch, "Checkout", "TB")
        ys = [diagram.node(i).y for i in ("Customer", "Web", "Orders", "Payments", "Stripe")]
        assert ys == sorted(ys) and len(set(ys)) == 5

    def test_unknown_scenario(self, arch):
        with pytest.raises(ModelError, match="Refund"):
            scenario_view(arch, "Refund")


class TestViewDispatch:
    def test_view_names(self, arch):
        assert view_names(arch) == ["overview", "Shop", "Shop.Api", "scenario:Checkout"]

    def test_view_dispatch(self, arch):
        assert view(arch, "overview").name == "overview"
        assert view(arch, "Api").name == "Shop.Api"
        assert view(arch, "Shop.Api").name == "Shop.Api"
        assert view(arch, "scenario:Checkout").name == "scenario:Checkout"

    def test_all_views_parallel_matches_sequential(self, arch):
        sequential = all_views(arch)
        parallel = all_views(arch, max_workers=3)
        assert list(parallel) == view_names(arch)
        assert {k: diagram_to_dict(v) for k, v in sequential.items()} == {
            k: diagram_to_dict(v) for k, v in parallel.items()
        }

    def test_view_forwards_workers(self, arch, monkeypatch):
        seen = []
        compose = views.compose_scope

        def recording(*args, **kwargs):
            seen.append(kwargs.get("max_workers"))
            return compose(*args, **kwargs)

        monkeypatch.setattr(views, "compose_scope", recording)
        parallel = view(arch, "overview", max_workers=4)
        view(arch, "Shop", max_workers=4)
        assert seen == [4, 4]

        monkeypatch.undo()
        assert diagram_to_dict(parallel) == diagram_to_dict(view(arch, "overview"))


# ─── Repeated Child Id Tests ──────────────────────────────────────────────────


@pytest.fixture
def twins() -> Architecture:
    """Shop { Api → Db } and Billing { Worker → Db }, plus Shop.Api → Billing.Db."""
    return Architecture.from_dict(
        {
            "name": "twins",
            "entities": [
                {
                    "id": "Shop",
                    "kind": "system",
                    "children": [{"id": "Api"}, {"id": "Db", "kind": "database"}],
                    "relations": [{"from": "Api", "to": "Db"}],
                },
                {
                    "id": "Billing",
                    "kind": "system",
                    "children": [{"id": "Worker"}, {"id": "Db", "kind": "ledger"}],
                    "relations": [{"from": "Worker", "to": "Db", "label": "books"}],
                },
            ],
            "relations": [{"from": "Shop.Api", "to": "Billing.Db", "label": "bills"}],
        }
    )


class TestRepeatedChildIds:
    def test_overview_edges(self, twins):
        edges = edge_map(overview(twins, "LR"))
        assert set(edges) == {("Shop", "Billing"), ("Shop.Api", "Shop.Db"), ("Billing.Worker", "Billing.Db")}
        assert edges[("Shop", "Billing")].label == "bills"
        assert edges[("Billing.Worker", "Billing.Db")].label == "books"
        assert edges[("Shop.Api", "Shop.Db")].label is None

    def test_each_node_has_own_box(self, twins):
        diagram = overview(twins, "LR")
        assert sorted(n.path for n in diagram.nodes) == [
            "Billing",
            "Billing.Db",
            "Billing.Worker",
            "Shop",
            "Shop.Api",
            "Shop.Db",
        ]
        shop_db, billing_db = diagram.node("Shop.Db"), diagram.node("Billing.Db")
        assert shop_db.kind == "database" and billing_db.kind == "ledger"
        assert shop_db.parent == "Shop" and billing_db.parent == "Billing"
        assert (shop_db.x, shop_db.y) != (billing_db.x, billing_db.y)

    def test_scope_view_keeps_own_edges(self, twins):
        diagram = scope_view(twins, "Billing", "LR")
        assert {n.path for n in diagram.nodes} == {"Billing.Worker", "Billing.Db"}
        assert set(edge_map(diagram)) == {("Billing.Worker", "Billing.Db")}
        assert diagram.node("Db").kind == "ledger"

    def test_bare_id_node_lookup_takes_first(self, twins):
        assert overview(twins, "LR").node("Db").path == "Shop.Db"


# ─── JSON Renderer Tests ──────────────────────────────────────────────────────


class TestJsonRenderer:
    def test_document_structure(self, arch):
        data = json.loads(JsonRenderer().render(overview(arch)))
        assert data["direction"] == "TB"
        assert data["width"] > 0 and data["height"] > 0
        assert len(data["nodes"]) == 9
        orders = next(n for n in data["nodes"] if n["id"] == "Orders")
        assert orders["path"] == "Shop.Api.Orders" and orders["parent"] == "Shop.Api"
        stripe_edges = [e for e in data["edges"] if e["to"]["id"] == "Stripe"]
        assert stripe_edges[0]["to"]["external"] is True
        assert stripe_edges[0]["from"] == {"id": "Shop", "external": False}
        assert set(stripe_edges[0]["start"]) == {"x", "y"}

    def test_render_many(self, arch):
        data = json.loads(JsonRenderer(indent=None).render_many(all_views(arch)))
        assert list(data) == view_names(arch)

    def test_satisfies_renderer_protocol(self):
        assert isinstance(JsonRenderer(), Renderer)
