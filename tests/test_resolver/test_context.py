"""Tests for specref.resolver.context."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from specref.exceptions import PointerNotFoundError, UnresolvableReferenceError
from specref.jsonref.pointer import JsonPointer
from specref.loader import FileFetcher
from specref.models import ResolveMode, ResolverConfig, TargetType
from specref.objects import SpecObject
from specref.resolver.cache import ResolutionCache
from specref.resolver.context import FILE_CONTENT, ReferenceContext
from specref.resolver.reference import Reference


class CountingFetcher:
    def __init__(self, document: Any) -> None:
        self.document = document
        self.calls = 0

    def fetch(self, uri: str) -> Any:
        self.calls += 1
        return self.document


class TestConstruction:
    def test_defaults(self) -> None:
        ctx = ReferenceContext()
        assert ctx.uri == ""
        assert ctx.base_spec is None
        assert ctx.mode is ResolveMode.ALL
        assert ctx.throw_on_error is True
        assert isinstance(ctx.fetcher, FileFetcher)
        assert isinstance(ctx.cache, ResolutionCache)

    def test_path_uri_is_normalized(self, tmp_path: Path) -> None:
        ctx = ReferenceContext(None, tmp_path / "api" / ".." / "openapi.yaml")
        assert ctx.uri == "file://" + (tmp_path / "openapi.yaml").resolve().as_posix()

    def test_mode_from_string(self) -> None:
        assert ReferenceContext(mode="inline").mode is ResolveMode.INLINE

    def test_relative_path_rejected(self) -> None:
        with pytest.raises(UnresolvableReferenceError):
            ReferenceContext(None, "specs/openapi.yaml")

    def test_shared_cache(self) -> None:
        cache = ResolutionCache()
        assert ReferenceContext(cache=cache).cache is cache

    def test_from_config(self) -> None:
        config = ResolverConfig(mode="inline", throw_on_error=False, max_depth=12)
        ctx = ReferenceContext.from_config(config, {"a": 1}, "/srv/openapi.yaml")
        assert ctx.mode is ResolveMode.INLINE
        assert ctx.throw_on_error is False
        assert ctx.max_depth == 12
        assert ctx.base_spec == {"a": 1}
        assert ctx.uri == "file:///srv/openapi.yaml"

    def test_narrow(self) -> None:
        fetcher = CountingFetcher({})
        ctx = ReferenceContext({"a": 1}, "/x/a.yaml", fetcher=fetcher, max_depth=7)
        narrowed = ctx.narrow("file:///x/y/b.yaml")
        assert narrowed.uri == "file:///x/y/b.yaml"
        assert narrowed.base_spec is None
        assert narrowed.fetcher is fetcher
        assert narrowed.max_depth == 7
        assert narrowed.cache is not ctx.cache

    def test_repr(self) -> None:
        assert "file:///x/a.yaml" in repr(ReferenceContext(None, "/x/a.yaml"))


class TestFetch:
    def test_resolve_relative_uri(self) -> None:
        ctx = ReferenceContext(None, "/x/a.yaml")
        assert ctx.resolve_relative_uri("y/b.yaml#/Pet") == "file:///x/y/b.yaml#/Pet"

    def test_file_fetched_once(self) -> None:
        fetcher = CountingFetcher({"Pet": {"type": "object"}})
        ctx = ReferenceContext(None, "/x/a.yaml", fetcher=fetcher)
        first = ctx.fetch_referenced_file("file:///x/b.yaml")
        second = ctx.fetch_referenced_file("file:///x/b.yaml")
        assert first is second
        assert fetcher.calls == 1
        assert ctx.cache.get("file:///x/b.yaml", FILE_CONTENT) is first


class TestResolveReferenceData:
    DATA = {
        "Pet": {"type": "object"},
        "Alias": {"$ref": "#/Pet"},
        "Tags": [{"name": "a"}, "b"],
        "Count": 3,
        "Nothing": None,
    }

    def _resolve(self, pointer: str, target_type: Any = None) -> Any:
        ctx = ReferenceContext(None, "/x/a.yaml")
        return ctx.resolve_reference_data("file:///x/b.yaml", JsonPointer(pointer), self.DATA, target_type)

    def test_mapping_becomes_typed_object(self) -> None:
        pet = self._resolve("/Pet", TargetType.SCHEMA)
        assert isinstance(pet, SpecObject)
        assert pet.kind is TargetType.SCHEMA
        assert dict(pet) == {"type": "object"}

    def test_untyped_mapping(self) -> None:
        pet = self._resolve("/Pet")
        assert isinstance(pet, SpecObject)
        assert pet.kind is None

    def test_reference_keeps_target_type(self) -> None:
        alias = self._resolve("/Alias", TargetType.SCHEMA)
        assert isinstance(alias, Reference)
        assert alias.target_type is TargetType.SCHEMA

    def test_list_is_built(self) -> None:
        tags = self._resolve("/Tags")
        assert isinstance(tags[0], SpecObject)
        assert tags[1] == "b"

    def test_scalars(self) -> None:
        assert self._resolve("/Count") == 3
        assert self._resolve("/Nothing") is None

    def test_missing_pointer(self) -> None:
        with pytest.raises(PointerNotFoundError):
            self._resolve("/Missing")
