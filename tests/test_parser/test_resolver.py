"""Tests for spectools.parser.resolver."""

from __future__ import annotations

import pytest

from spectools.exceptions import CyclicReferenceOrExcessiveSizeError, InvalidReferenceError
from spectools.parser.resolver import ComponentTable, component_ref, is_reference


# ---------------------------------------------------------------------------
# Table construction
# ---------------------------------------------------------------------------


class TestFromComponents:
    """Test building the table from a components object."""

    def test_registers_every_group_and_entry(self) -> None:
        table = ComponentTable.from_components(
            {
                "schemas": {"Pet": {"type": "object"}, "Tag": {"type": "string"}},
                "parameters": {"Limit": {"name": "limit", "in": "query"}},
                "requestBodies": {"PetBody": {"content": {}}},
            }
        )
        assert len(table) == 4
        assert "#/components/schemas/Pet" in table
        assert "#/components/schemas/Tag" in table
        assert "#/components/parameters/Limit" in table
        assert "#/components/requestBodies/PetBody" in table

    def test_skips_non_mapping_groups(self) -> None:
        table = ComponentTable.from_components(
            {"schemas": {"Pet": {"type": "object"}}, "x-weird": ["a", "b"], "other": 3}
        )
        assert len(table) == 1

    def test_none_components_gives_empty_table(self) -> None:
        assert len(ComponentTable.from_components(None)) == 0

    def test_escapes_names_like_json_pointer(self) -> None:
        assert component_ref("schemas", "a/b~c") == "#/components/schemas/a~1b~0c"
        table = ComponentTable.from_components({"schemas": {"a/b": {"type": "string"}}})
        assert table.resolve("#/components/schemas/a~1b") == {"type": "string"}


# ---------------------------------------------------------------------------
# resolve
# ---------------------------------------------------------------------------


class TestResolve:
    """Test reference lookup and chain following."""

    def test_resolves_direct_reference(self) -> None:
        table = ComponentTable.from_components({"schemas": {"Pet": {"type": "object"}}})
        assert table.resolve("#/components/schemas/Pet") == {"type": "object"}

    def test_follows_reference_chain(self) -> None:
        table = ComponentTable.from_components(
            {
                "schemas": {
                    "A": {"$ref": "#/components/schemas/B"},
                    "B": {"$ref": "#/components/schemas/C"},
                    "C": {"type": "integer"},
                }
            }
        )
        assert table.resolve("#/components/schemas/A") == {"type": "integer"}

    def test_missing_reference_raises(self) -> None:
        table = ComponentTable.from_components({"schemas": {}})
        with pytest.raises(InvalidReferenceError) as exc_info:
            table.resolve("#/components/schemas/Nope")
        assert exc_info.value.ref == "#/components/schemas/Nope"

    def test_missing_link_in_chain_names_that_link(self) -> None:
        table = ComponentTable.from_components(
            {"schemas": {"A": {"$ref": "#/components/schemas/Gone"}}}
        )
        with pytest.raises(InvalidReferenceError) as exc_info:
            table.resolve("#/components/schemas/A")
        assert exc_info.value.ref == "#/components/schemas/Gone"

    def test_external_reference_is_not_registered(self) -> None:
        table = ComponentTable.from_components({"schemas": {"Pet": {}}})
        with pytest.raises(InvalidReferenceError):
            table.resolve("other.yaml#/components/schemas/Pet")

    def test_cyclic_chain_raises(self) -> None:
        table = ComponentTable.from_components(
            {
                "schemas": {
                    "A": {"$ref": "#/components/schemas/B"},
                    "B": {"$ref": "#/components/schemas/A"},
                }
            }
        )
        with pytest.raises(CyclicReferenceOrExcessiveSizeError, match="A -> "):
            table.resolve("#/components/schemas/A")

    def test_self_reference_raises(self) -> None:
        table = ComponentTable.from_components(
            {"schemas": {"A": {"$ref": "#/components/schemas/A"}}}
        )
        with pytest.raises(CyclicReferenceOrExcessiveSizeError):
            table.resolve("#/components/schemas/A")


# ---------------------------------------------------------------------------
# resolve_node / is_reference
# ---------------------------------------------------------------------------


class TestResolveNode:
    def test_non_reference_passes_through(self) -> None:
        table = ComponentTable({})
        node = {"type": "string"}
        assert table.resolve_node(node) is node

    def test_reference_is_resolved(self) -> None:
        table = ComponentTable({"#/components/schemas/S": {"type": "string"}})
        assert table.resolve_node({"$ref": "#/components/schemas/S"}) == {"type": "string"}

    def test_is_reference(self) -> None:
        assert is_reference({"$ref": "#/components/schemas/S"})
        assert not is_reference({"$ref": 42})
        assert not is_reference({"type": "string"})
        assert not is_reference("#/components/schemas/S")
