"""Resolution context shared by every Reference of one resolution pass.

A :class:`ReferenceContext` carries the resolution mode, the base document,
the base URI that relative references are resolved against, the pass cache,
the fetcher used for external files, and the error policy.  It is created
once per top-level pass and shared, not owned, by the references it
resolves.  External files get a narrowed context that carries only their
own URI (see :meth:`ReferenceContext.narrow`).
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any, Optional, Union

from specref.interfaces import DocumentFetcher
from specref.jsonref.pointer import JsonPointer
from specref.loader import FileFetcher, stringify_keys
from specref.models import DEFAULT_MAX_DEPTH, ResolveMode, ResolverConfig, TargetType
from specref.resolver.cache import ResolutionCache
from specref.resolver.reference import Reference
from specref.resolver.uri import normalize_uri, resolve_relative_uri

logger = logging.getLogger(__name__)

FILE_CONTENT = "FILE_CONTENT"
"""Cache namespace for decoded file contents."""


class ReferenceContext:
    """State of one resolution pass.

    Args:
        base_spec: Root of the document same-document fragments are
            evaluated against.  Without it, ``#/...`` references cannot be
            resolved.
        uri: Location of the base document: an absolute URI, an absolute
            path, or a path-like object.  Empty when unknown.
        mode: :attr:`~specref.models.ResolveMode.ALL` or
            :attr:`~specref.models.ResolveMode.INLINE`.
        throw_on_error: Raise on resolution failures instead of recording
            them on the failing Reference.
        cache: Cache to share; a fresh one is created by default.
        fetcher: Fetcher for external documents; defaults to
            :class:`~specref.loader.FileFetcher`.
        max_depth: Bound on transitive reference hops and on the nesting
            depth walked when rewriting fetched documents.

    Raises:
        UnresolvableReferenceError: If *uri* is a relative path string.
    """

    def __init__(
        self,
        base_spec: Any = None,
        uri: Union[str, os.PathLike] = "",
        *,
        mode: Union[ResolveMode, str] = ResolveMode.ALL,
        throw_on_error: bool = True,
        cache: Optional[ResolutionCache] = None,
        fetcher: Optional[DocumentFetcher] = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.base_spec = base_spec
        self._uri = normalize_uri(uri)
        self.mode = ResolveMode(mode)
        self.throw_on_error = throw_on_error
        self._cache = cache if cache is not None else ResolutionCache()
        self.fetcher: DocumentFetcher = fetcher if fetcher is not None else FileFetcher()
        self.max_depth = max_depth

    @classmethod
    def from_config(
        cls,
        config: ResolverConfig,
        base_spec: Any = None,
        uri: Union[str, os.PathLike] = "",
        *,
        fetcher: Optional[DocumentFetcher] = None,
    ) -> ReferenceContext:
        """Build a context from a :class:`~specref.models.ResolverConfig`."""
        return cls(
            base_spec,
            uri,
            mode=config.mode,
            throw_on_error=config.throw_on_error,
            fetcher=fetcher,
            max_depth=config.max_depth,
        )

    @property
    def uri(self) -> str:
        """The normalized base URI."""
        return self._uri

    @property
    def cache(self) -> ResolutionCache:
        return self._cache

    def narrow(self, uri: str) -> ReferenceContext:
        """Return a fresh context that carries only *uri* as its base."""
        return ReferenceContext(None, uri, fetcher=self.fetcher, max_depth=self.max_depth)

    def resolve_relative_uri(self, uri: str) -> str:
        """Resolve *uri* against this context's base URI."""
        return resolve_relative_uri(uri, self._uri)

    def fetch_referenced_file(self, uri: str) -> Any:
        """Fetch and decode the document at the absolute *uri*, once per pass."""
        if self._cache.has(uri, FILE_CONTENT):
            return self._cache.get(uri, FILE_CONTENT)
        logger.debug("Fetching referenced document %s", uri)
        document = stringify_keys(self.fetcher.fetch(uri))
        self._cache.set(uri, FILE_CONTENT, document)
        return document

    def resolve_reference_data(
        self,
        uri: str,
        pointer: JsonPointer,
        data: Any,
        target_type: Optional[TargetType],
    ) -> Any:
        """Evaluate *pointer* inside the decoded document *data* fetched from *uri*.

        Returns:
            A new :class:`~specref.resolver.reference.Reference` when the
            target is itself a reference, a
            :class:`~specref.objects.SpecObject` of kind *target_type* for
            other mappings, built elements for lists, and scalars as-is.

        Raises:
            PointerNotFoundError: If *pointer* does not exist in *data*.
        """
        from specref.objects import SpecObject, build_tree

        referenced = pointer.evaluate(data)
        logger.debug("Resolved %s#%s", uri, pointer)
        if referenced is None:
            return None
        if isinstance(referenced, Mapping) and "$ref" in referenced:
            return Reference(referenced, target_type)
        if isinstance(referenced, Mapping):
            return SpecObject(referenced, target_type)
        return build_tree(referenced)

    def __repr__(self) -> str:
        return (
            f"ReferenceContext(uri={self._uri!r}, mode={self.mode.value!r}, "
            f"throw_on_error={self.throw_on_error!r})"
        )
