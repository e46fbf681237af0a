"""Tests for specref.resolver.rewriter."""

from __future__ import annotations

import copy
from typing import Any

import pytest

from specref.exceptions import PointerNotFoundError, UnresolvableReferenceError
from specref.resolver.context import ReferenceContext
from specref.resolver.rewriter import RelativeReferenceRewriter

FILE_URI = "file:///x/y/b.yaml"


def _rewrite(document: Any, caller: str = "/x/a.yaml", **kwargs: Any) -> Any:
    context = ReferenceContext(None, caller, **kwargs)
    return RelativeReferenceRewriter(FILE_URI, context).rewrite(document)


# ---------------------------------------------------------------------------
# In-file fragments
# ---------------------------------------------------------------------------


class TestInlining:
    """``#/...`` references of the fetched file are replaced by their targets."""

    def test_fragment_inlined_from_fetched_root(self) -> None:
        doc = {"Pet": {"properties": {"tag": {"$ref": "#/Tag"}}}, "Tag": {"type": "string"}}
        result = _rewrite(doc)
        assert result["Pet"]["properties"]["tag"] == {"type": "string"}

    def test_siblings_of_inlined_reference_are_dropped(self) -> None:
        doc = {"Pet": {"$ref": "#/Tag", "description": "ignored"}, "Tag": {"type": "string"}}
        assert _rewrite(doc)["Pet"] == {"type": "string"}

    def test_inlined_subtree_is_rewritten(self) -> None:
        doc = {"Pet": {"$ref": "#/Wrapper"}, "Wrapper": {"items": {"$ref": "./c.yaml#/Item"}}}
        assert _rewrite(doc)["Pet"] == {"items": {"$ref": "./y/c.yaml#/Item"}}

    def test_recursive_schema_expands_once(self) -> None:
        doc = {
            "Node": {"type": "object", "properties": {"next": {"$ref": "#/Node"}}},
            "Root": {"$ref": "#/Node"},
        }
        result = _rewrite(doc)
        inner = result["Node"]["properties"]["next"]
        assert inner["type"] == "object"
        assert inner["properties"]["next"] == {"$ref": "file:///x/y/b.yaml#/Node"}
        assert result["Root"] == inner

    def test_repeated_fragment_is_reused(self) -> None:
        doc = {"a": {"$ref": "#/Tag"}, "b": {"$ref": "#/Tag"}, "Tag": {"type": "string"}}
        result = _rewrite(doc)
        assert result["a"] is result["b"]

    def test_fragments_in_lists(self) -> None:
        doc = {"allOf": [{"$ref": "#/Tag"}, {"$ref": "./c.yaml"}], "Tag": {"type": "string"}}
        assert _rewrite(doc)["allOf"] == [{"type": "string"}, {"$ref": "./y/c.yaml"}]

    def test_invalid_fragment(self) -> None:
        with pytest.raises(UnresolvableReferenceError, match="Invalid reference '#Tag'"):
            _rewrite({"Pet": {"$ref": "#Tag"}})

    def test_missing_fragment(self) -> None:
        with pytest.raises(PointerNotFoundError):
            _rewrite({"Pet": {"$ref": "#/Nope"}})


# ---------------------------------------------------------------------------
# Relocated references
# ---------------------------------------------------------------------------


class TestRelocation:
    """References to other files are re-expressed relative to the caller."""

    def test_sibling_file_becomes_caller_relative(self) -> None:
        result = _rewrite({"owner": {"$ref": "./c.yaml"}})
        assert result["owner"] == {"$ref": "./y/c.yaml"}

    def test_fragment_is_kept(self) -> None:
        result = _rewrite({"owner": {"$ref": "c.yaml#/Owner"}})
        assert result["owner"] == {"$ref": "./y/c.yaml#/Owner"}

    def test_reference_into_caller_becomes_fragment(self) -> None:
        result = _rewrite({"pet": {"$ref": "../a.yaml#/components/schemas/Pet"}})
        assert result["pet"] == {"$ref": "#/components/schemas/Pet"}

    def test_reference_to_caller_root(self) -> None:
        assert _rewrite({"root": {"$ref": "../a.yaml"}})["root"] == {"$ref": "#"}

    def test_outside_caller_directory(self) -> None:
        result = _rewrite({"owner": {"$ref": "./c.yaml"}}, caller="/x/z/a.yaml")
        assert result["owner"] == {"$ref": "../y/c.yaml"}

    def test_absolute_uri_untouched(self) -> None:
        target = "https://example.com/schemas/pet.yaml#/Pet"
        assert _rewrite({"pet": {"$ref": target}})["pet"] == {"$ref": target}

    def test_external_value(self) -> None:
        result = _rewrite({"example": {"externalValue": "examples/pet.json"}})
        assert result["example"] == {"externalValue": "./y/examples/pet.json"}

    def test_other_fields_untouched(self) -> None:
        doc = {"description": "./c.yaml", "properties": {"$ref": {"type": "string"}}, "count": 3}
        assert _rewrite(doc) == doc


# ---------------------------------------------------------------------------
# Safety
# ---------------------------------------------------------------------------


class TestSafety:
    def test_input_is_not_modified(self) -> None:
        doc = {
            "Pet": {"properties": {"tag": {"$ref": "#/Tag"}, "owner": {"$ref": "./c.yaml"}}},
            "Tag": {"type": "string"},
        }
        original = copy.deepcopy(doc)
        _rewrite(doc)
        assert doc == original

    def test_nesting_depth_is_bounded(self) -> None:
        with pytest.raises(UnresolvableReferenceError, match="Maximum nesting depth of 2"):
            _rewrite({"a": {"b": {"c": {"d": 1}}}}, max_depth=2)
