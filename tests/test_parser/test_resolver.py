"""Tests for apicatalog.parser.resolver."""

from __future__ import annotations

import pytest

from apicatalog.exceptions import ResolutionError
from apicatalog.parser.resolver import _lookup, resolve_refs


class TestResolveRefs:
    def test_inlines_parameter_ref(self) -> None:
        spec = {
            "paths": {"/me": {"get": {"parameters": [{"$ref": "#/components/parameters/page"}]}}},
            "components": {"parameters": {"page": {"name": "page", "in": "query"}}},
        }

        resolved = resolve_refs(spec)

        assert resolved["paths"]["/me"]["get"]["parameters"] == [{"name": "page", "in": "query"}]

    def test_does_not_mutate_original(self) -> None:
        spec = {
            "paths": {"/x": {"get": {"schema": {"$ref": "#/components/schemas/X"}}}},
            "components": {"schemas": {"X": {"type": "string"}}},
        }

        resolve_refs(spec)

        assert spec["paths"]["/x"]["get"]["schema"] == {"$ref": "#/components/schemas/X"}

    def test_nested_refs_resolve_transitively(self) -> None:
        spec = {
            "a": {"$ref": "#/components/schemas/List"},
            "components": {
                "schemas": {
                    "List": {"type": "array", "items": {"$ref": "#/components/schemas/Item"}},
                    "Item": {"type": "integer"},
                }
            },
        }

        resolved = resolve_refs(spec)

        assert resolved["a"] == {"type": "array", "items": {"type": "integer"}}

    def test_same_target_expanded_in_sibling_branches(self) -> None:
        spec = {
            "left": {"$ref": "#/components/schemas/Item"},
            "right": {"$ref": "#/components/schemas/Item"},
            "components": {"schemas": {"Item": {"type": "string"}}},
        }

        resolved = resolve_refs(spec)

        assert resolved["left"] == resolved["right"] == {"type": "string"}

    def test_circular_ref_left_at_cycle_point(self) -> None:
        spec = {
            "root": {"$ref": "#/components/schemas/Node"},
            "components": {
                "schemas": {
                    "Node": {
                        "type": "object",
                        "properties": {"child": {"$ref": "#/components/schemas/Node"}},
                    }
                }
            },
        }

        resolved = resolve_refs(spec)

        assert resolved["root"]["type"] == "object"
        assert resolved["root"]["properties"]["child"] == {"$ref": "#/components/schemas/Node"}

    def test_sibling_keys_override_target(self) -> None:
        spec = {
            "p": {"$ref": "#/components/parameters/page", "description": "Page to fetch"},
            "components": {"parameters": {"page": {"name": "page", "description": "Page"}}},
        }

        resolved = resolve_refs(spec)

        assert resolved["p"] == {"name": "page", "description": "Page to fetch"}

    def test_missing_target_raises(self) -> None:
        spec = {"a": {"$ref": "#/components/schemas/Missing"}, "components": {"schemas": {}}}

        with pytest.raises(ResolutionError, match="Missing"):
            resolve_refs(spec)

    def test_external_ref_raises(self) -> None:
        with pytest.raises(ResolutionError, match="External"):
            resolve_refs({"a": {"$ref": "other.yaml#/Thing"}})

    def test_non_string_ref_raises(self) -> None:
        with pytest.raises(ResolutionError, match="Invalid \\$ref"):
            resolve_refs({"a": {"$ref": 42}})


class TestLookup:
    def test_json_pointer_escaping(self) -> None:
        root = {"paths": {"/me/addresses": {"get": {"operationId": "Me.ListAddresses"}}}}

        result = _lookup("#/paths/~1me~1addresses/get", root)

        assert result == {"operationId": "Me.ListAddresses"}

    def test_array_index(self) -> None:
        root = {"servers": [{"url": "a"}, {"url": "b"}]}
        assert _lookup("#/servers/1", root) == {"url": "b"}

    def test_bad_array_index(self) -> None:
        with pytest.raises(ResolutionError, match="invalid array index"):
            _lookup("#/servers/seven", {"servers": []})

    def test_cannot_navigate_into_scalar(self) -> None:
        with pytest.raises(ResolutionError, match="cannot navigate"):
            _lookup("#/info/title/x", {"info": {"title": "API"}})
