"""Rewrite the relative references of a fetched document for its new location.

When ``b.yaml`` is pulled into ``a.yaml`` its ``$ref`` and ``externalValue``
fields are still relative to ``b.yaml``.  :class:`RelativeReferenceRewriter`
walks the fetched tree and produces a copy in which:

* in-file fragments (``{"$ref": "#/Foo"}``) are replaced by the subtree
  they point to, taken from ``b.yaml``'s own root;
* a fragment met while already inlining one is kept as an absolute
  ``file:///.../b.yaml#/Foo`` reference instead, which stops a
  self-referential schema from expanding forever;
* other references are resolved against ``b.yaml`` and re-expressed
  relative to ``a.yaml`` (``#/...`` when they land inside ``a.yaml``).

The fetched tree itself is never modified.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from specref.exceptions import InvalidPointerSyntaxError, UnresolvableReferenceError
from specref.jsonref.pointer import JsonPointer
from specref.resolver.cache import ResolutionCache
from specref.resolver.uri import is_within, make_relative_path

if TYPE_CHECKING:
    from specref.resolver.context import ReferenceContext

logger = logging.getLogger(__name__)

REFERENCE_KEYS = ("$ref", "externalValue")
"""Keys whose string values are URIs relative to the containing file."""

_CACHE_TYPE = "relativeReference"


class RelativeReferenceRewriter:
    """Rewrites one fetched document for the context that requested it.

    Args:
        file_uri: Absolute URI of the fetched document.
        context: The requesting context; its URI is the caller's location
            and its ``max_depth`` bounds the walk.

    Example::

        rewriter = RelativeReferenceRewriter("file:///x/y/b.yaml", context)
        embedded = rewriter.rewrite(fetched)
    """

    def __init__(self, file_uri: str, context: "ReferenceContext") -> None:
        self._file_uri = file_uri
        self._caller_uri = context.uri
        self._max_depth = context.max_depth
        self._file_context = context.narrow(file_uri)
        self._inlined = ResolutionCache()

    def rewrite(self, document: Any) -> Any:
        """Return a rewritten copy of *document*."""
        logger.debug("Rewriting references of %s for %s", self._file_uri, self._caller_uri)
        return self._rewrite(document, document, inlining=False, depth=0)

    def _rewrite(self, node: Any, root: Any, inlining: bool, depth: int) -> Any:
        if depth > self._max_depth:
            raise UnresolvableReferenceError(
                f"Maximum nesting depth of {self._max_depth} exceeded in {self._file_uri}."
            )
        if isinstance(node, Mapping):
            return self._rewrite_mapping(node, root, inlining, depth)
        if isinstance(node, list):
            return [self._rewrite(item, root, inlining, depth + 1) for item in node]
        return node

    def _rewrite_mapping(self, node: Mapping[str, Any], root: Any, inlining: bool, depth: int) -> Any:
        result: dict[str, Any] = {}
        for key, value in node.items():
            if isinstance(value, (Mapping, list)):
                result[key] = self._rewrite(value, root, inlining, depth + 1)
                continue
            if not isinstance(value, str) or key not in REFERENCE_KEYS:
                result[key] = value
                continue

            full_path = self._file_uri + value
            if self._inlined.has(full_path, _CACHE_TYPE):
                return self._inlined.get(full_path, _CACHE_TYPE)

            if key == "$ref" and value.startswith("#"):
                # The whole mapping is replaced; sibling keys do not survive.
                return self._inline_fragment(value, full_path, root, inlining, depth)

            result[key] = self._relocate(key, value)
        return result

    def _inline_fragment(self, value: str, full_path: str, root: Any, inlining: bool, depth: int) -> Any:
        try:
            pointer = JsonPointer(value[1:])
        except InvalidPointerSyntaxError as exc:
            raise UnresolvableReferenceError(
                f"Invalid reference '{value}' in {self._file_uri}: {exc}"
            ) from exc
        inline_document = pointer.evaluate(root)

        if inlining:
            return {"$ref": full_path}

        inlined = self._rewrite(inline_document, root, inlining=True, depth=depth + 1)
        self._inlined.set(full_path, _CACHE_TYPE, inlined)
        return inlined

    def _relocate(self, key: str, value: str) -> str:
        resolved = self._file_context.resolve_relative_uri(value)
        if key == "$ref" and is_within(resolved, self._caller_uri):
            return resolved[len(self._caller_uri):] or "#"
        return make_relative_path(self._caller_uri, resolved)
