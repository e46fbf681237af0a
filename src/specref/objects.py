"""Generic spec-object tree holding Reference nodes.

The decoder produces plain dicts and lists; :func:`build_tree` turns them
into the model the resolver works on:

* a mapping with a ``$ref`` key becomes a
  :class:`~specref.resolver.reference.Reference`;
* any other mapping becomes a :class:`SpecObject`;
* lists are built element-wise and scalars pass through.

:class:`SpecObject` is a read-only :class:`~collections.abc.Mapping`, so
JSON Pointers evaluate through it exactly as through a dict.  Its only
mutation is :meth:`SpecObject.resolve_references`, which replaces nested
Reference nodes with what they resolve to.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, Optional

from specref.exceptions import CyclicReferenceError
from specref.jsonref.pointer import JsonPointer
from specref.models import TargetType
from specref.resolver.reference import Reference

if TYPE_CHECKING:
    from specref.resolver.context import ReferenceContext


def build_tree(value: Any) -> Any:
    """Build the spec-object form of a decoded value.

    Raises:
        InvalidReferenceError: If a mapping holds a malformed ``$ref``.
    """
    if isinstance(value, (Reference, SpecObject)):
        return value
    if isinstance(value, Mapping):
        if "$ref" in value:
            return Reference(value)
        return SpecObject(value)
    if isinstance(value, (list, tuple)):
        return [build_tree(item) for item in value]
    return value


class SpecObject(Mapping[str, Any]):
    """A spec object of a given kind (or an untyped nested object).

    Args:
        data: Decoded mapping.  Children are built with :func:`build_tree`.
        kind: The :class:`~specref.models.TargetType` this object was
            created as, if any.

    Example::

        doc = SpecObject(yaml.safe_load(text))
        doc.set_document_context(doc, JsonPointer(""))
        doc.resolve_references(ReferenceContext(doc, "/srv/api/openapi.yaml"))
    """

    def __init__(self, data: Mapping[str, Any], kind: Optional[TargetType] = None) -> None:
        self._kind = kind
        self._properties: dict[str, Any] = {
            str(key): build_tree(value) for key, value in data.items()
        }
        self._reference_context: Optional["ReferenceContext"] = None
        self._base_document: Any = None
        self._position: Optional[JsonPointer] = None

    @property
    def kind(self) -> Optional[TargetType]:
        return self._kind

    def __getitem__(self, key: str) -> Any:
        return self._properties[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        kind = self._kind.value if self._kind is not None else "Object"
        return f"SpecObject<{kind}>({list(self._properties)!r})"

    # ------------------------------------------------------------------ #
    # Reference handling
    # ------------------------------------------------------------------ #

    def get_reference_context(self) -> Optional["ReferenceContext"]:
        return self._reference_context

    def set_reference_context(
        self,
        context: "ReferenceContext",
        _visited: Optional[set[int]] = None,
    ) -> None:
        """Attach *context* to this object and every nested Reference."""
        visited = set() if _visited is None else _visited
        if id(self) in visited:
            return
        visited.add(id(self))

        self._reference_context = context
        for value in self._properties.values():
            _set_context(value, context, visited)

    def resolve_references(
        self,
        context: Optional["ReferenceContext"] = None,
        _visited: Optional[set[int]] = None,
    ) -> None:
        """Replace nested Reference nodes with their resolution, recursively.

        References are resolved in *context*, or in the context attached by
        :meth:`set_reference_context` when none is given.  Each object is
        walked once per call, so cyclic object graphs terminate.
        """
        visited = set() if _visited is None else _visited
        if id(self) in visited:
            return
        visited.add(id(self))

        if context is None:
            context = self._reference_context
        for key, value in self._properties.items():
            self._properties[key] = _resolve_value(value, context, visited)

    # ------------------------------------------------------------------ #
    # Document position
    # ------------------------------------------------------------------ #

    def set_document_context(
        self,
        base_document: Any,
        pointer: JsonPointer,
        _visited: Optional[set[int]] = None,
    ) -> None:
        """Record where this object lives, and propagate positions to its children."""
        visited = set() if _visited is None else _visited
        if id(self) in visited:
            return
        visited.add(id(self))

        self._base_document = base_document
        self._position = pointer
        for key, value in self._properties.items():
            _set_position(value, base_document, pointer.append(key), visited)

    def get_base_document(self) -> Any:
        return self._base_document

    def get_document_position(self) -> Optional[JsonPointer]:
        return self._position

    # ------------------------------------------------------------------ #
    # Validation and serialization
    # ------------------------------------------------------------------ #

    def validate(self) -> bool:
        return not self.get_errors()

    def get_errors(self) -> list[str]:
        """Errors recorded on every Reference reachable from this object."""
        errors: list[str] = []
        _collect_errors(self, errors, set())
        return errors

    def get_serializable_data(self) -> dict[str, Any]:
        """Return plain dicts and lists; References serialize as ``{"$ref": ...}``.

        An object met again inside itself is written as a reference to its
        document position.

        Raises:
            CyclicReferenceError: If such an object has no known position.
        """
        return _serialize(self, [])


def _set_context(value: Any, context: "ReferenceContext", visited: set[int]) -> None:
    if isinstance(value, Reference):
        value.set_context(context)
    elif isinstance(value, SpecObject):
        value.set_reference_context(context, visited)
    elif isinstance(value, list):
        for item in value:
            _set_context(item, context, visited)


def _resolve_value(value: Any, context: Optional["ReferenceContext"], visited: set[int]) -> Any:
    if isinstance(value, Reference):
        resolved = value.resolve(context)
        if not isinstance(resolved, Reference):
            _resolve_value(resolved, context, visited)
        return resolved
    if isinstance(value, SpecObject):
        value.resolve_references(context, visited)
    elif isinstance(value, list):
        value[:] = [_resolve_value(item, context, visited) for item in value]
    return value


def _set_position(value: Any, base_document: Any, pointer: JsonPointer, visited: set[int]) -> None:
    if isinstance(value, Reference):
        value.set_document_context(base_document, pointer)
    elif isinstance(value, SpecObject):
        value.set_document_context(base_document, pointer, visited)
    elif isinstance(value, list):
        for index, item in enumerate(value):
            _set_position(item, base_document, pointer.append(index), visited)


def _collect_errors(value: Any, errors: list[str], visited: set[int]) -> None:
    if isinstance(value, Reference):
        errors.extend(value.get_errors())
    elif isinstance(value, SpecObject):
        if id(value) in visited:
            return
        visited.add(id(value))
        for child in value.values():
            _collect_errors(child, errors, visited)
    elif isinstance(value, list):
        for item in value:
            _collect_errors(item, errors, visited)


def _serialize(value: Any, stack: list[int]) -> Any:
    if isinstance(value, Reference):
        return value.get_serializable_data()
    if isinstance(value, SpecObject):
        if id(value) in stack:
            position = value.get_document_position()
            if position is None:
                raise CyclicReferenceError(
                    "Cannot serialize a cyclic object graph: object has no document position."
                )
            return {"$ref": f"#{position}"}
        stack.append(id(value))
        try:
            return {key: _serialize(child, stack) for key, child in value.items()}
        finally:
            stack.pop()
    if isinstance(value, list):
        return [_serialize(item, stack) for item in value]
    return value
