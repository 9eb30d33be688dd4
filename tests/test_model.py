"""Tests for model.py: JSON loading and the ModelIndex lookups."""

from __future__ import annotations

from pathlib import Path

import pytest

from archlayout.errors import ModelError
from archlayout.model import Architecture, Entity, ModelIndex, load_architecture

EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


@pytest.fixture
def arch() -> Architecture:
    return load_architecture(EXAMPLES_DIR / "ecommerce.json")


class TestLoading:
    def test_example_model(self, arch):
        assert arch.name == "Ecommerce"
        assert [e.id for e in arch.entities] == ["Customer", "Shop", "Warehouse"]
        assert arch.metadata["svg_direction"] == "tb"
        assert arch.style == {"direction": "LR"}
        assert arch.scenarios[0].title == "Checkout"
        assert len(arch.scenarios[0].steps) == 4

    def test_metadata_as_mapping(self):
        arch = Architecture.from_dict({"metadata": {"direction": "BT", "skip": None}})
        assert arch.metadata == {"direction": "BT"}

    def test_label_falls_back_to_id(self):
        assert Entity("Orders").display_label == "Orders"
        assert Entity("Orders", label="Order service").display_label == "Order service"

    @pytest.mark.parametrize(
        "document",
        [
            ["not", "an", "object"],
            {"entities": [{"kind": "system"}]},
            {"relations": [{"from": "A"}]},
            {"scenarios": [{"steps": []}]},
            {"metadata": [{"value": "tb"}]},
        ],
    )
    def test_malformed_documents(self, document):
        with pytest.raises(ModelError):
            Architecture.from_dict(document)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ModelError, match="cannot read"):
            load_architecture(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ModelError, match="not valid JSON") as excinfo:
            load_architecture(path)
        assert excinfo.value.__cause__ is not None


class TestModelIndex:
    def test_ancestry_and_depth(self, arch):
        index = ModelIndex(arch)
        assert index.ancestry("Shop.Api.Orders") == ("Shop", "Api", "Orders")
        assert index.ancestry(None) == ()
        assert index.depth("Shop.Api.Orders") == 2
        assert index.depth("Customer") == 0

    def test_children_per_scope(self, arch):
        index = ModelIndex(arch)
        assert [e.id for e in index.children(None)] == ["Customer", "Shop", "Warehouse"]
        assert [e.id for e in index.children("Shop")] == ["Web", "Api", "Db"]
        assert [e.id for e in index.children("Shop.Api")] == ["Orders", "Payments"]
        assert index.children("Customer") == []

    def test_locate(self, arch):
        index = ModelIndex(arch)
        assert index.locate("Shop.Api.Orders") == "Shop.Api.Orders"
        assert index.locate("Api.Orders") == "Shop.Api.Orders"
        assert index.locate("Orders") == "Shop.Api.Orders"
        assert index.locate("Shop.Api") == "Shop.Api"
        assert index.locate("Stripe") is None

    def test_locate_relative_to_context(self, arch):
        index = ModelIndex(arch)
        assert index.locate("Api.Orders", "Shop") == "Shop.Api.Orders"
        assert index.locate("Db", "Shop.Api") == "Shop.Db"
        assert index.locate("Customer", "Shop.Api") == "Customer"

    def test_key_accepts_bare_id(self, arch):
        index = ModelIndex(arch)
        assert index.key("Payments") == "Shop.Api.Payments"
        assert index.entity("Payments").kind == "component"

    def test_relations_top_level_first(self, arch):
        relations = ModelIndex(arch).relations()
        assert len(relations) == 7
        assert relations[0].label == "browses"
        assert [r.label for r in relations[4:]] == ["calls", "reads/writes", "pays"]

    def test_scoped_relations_carry_declaring_scope(self, arch):
        owners = [owner for owner, _ in ModelIndex(arch).scoped_relations()]
        assert owners == [None, None, None, None, "Shop", "Shop", "Shop.Api"]

    def test_unknown_entity(self, arch):
        index = ModelIndex(arch)
        assert "Nope" not in index
        with pytest.raises(ModelError, match="Nope"):
            index.entity("Nope")


class TestRepeatedIds:
    """The same bare id declared in two systems stays two distinct entities."""

    @pytest.fixture
    def index(self) -> ModelIndex:
        return ModelIndex(
            Architecture(
                entities=[
                    Entity("Shop", children=[Entity("Api"), Entity("Db", kind="database")]),
                    Entity("Billing", children=[Entity("Worker"), Entity("Db", kind="ledger")]),
                ]
            )
        )

    def test_both_indexed(self, index):
        assert "Shop.Db" in index and "Billing.Db" in index
        assert index.entity("Shop.Db").kind == "database"
        assert index.entity("Billing.Db").kind == "ledger"
        assert index.ancestry("Billing.Db") == ("Billing", "Db")

    def test_bare_id_prefers_declaring_scope(self, index):
        assert index.locate("Db", "Billing") == "Billing.Db"
        assert index.locate("Db", "Shop") == "Shop.Db"

    def test_bare_id_without_context_takes_first_declaration(self, index):
        assert index.locate("Db") == "Shop.Db"
