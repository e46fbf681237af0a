"""Structural interfaces between the resolver and its collaborators.

The resolver never imports a concrete document model or fetcher; it talks
to them through these protocols:

* :class:`DocumentFetcher` -- turns an absolute URI into a decoded tree.
* :class:`ReferenceContextAware` -- objects whose nested references can
  receive a resolution context and be resolved in place.
* :class:`DocumentContextAware` -- objects that can carry their position in
  a base document for diagnostics.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

if TYPE_CHECKING:
    from specref.jsonref.pointer import JsonPointer
    from specref.resolver.context import ReferenceContext


@runtime_checkable
class DocumentFetcher(Protocol):
    """Fetches and decodes the document at an absolute URI.

    Implementations raise :class:`~specref.exceptions.DocumentLoadError`
    (or :class:`OSError`) when the document cannot be read or decoded.
    """

    def fetch(self, uri: str) -> Any: ...


@runtime_checkable
class ReferenceContextAware(Protocol):
    """An object holding nested references that can be given a context."""

    def set_reference_context(self, context: "ReferenceContext") -> None: ...

    def resolve_references(self, context: Optional["ReferenceContext"] = None) -> None: ...


@runtime_checkable
class DocumentContextAware(Protocol):
    """An object that knows where it lives inside a base document."""

    def set_document_context(self, base_document: Any, pointer: "JsonPointer") -> None: ...

    def get_document_position(self) -> Optional["JsonPointer"]: ...
