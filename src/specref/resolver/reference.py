"""The Reference Object: a ``{"$ref": ...}`` node that can resolve itself.

A :class:`Reference` holds the raw ``$ref`` string, its parsed
:class:`~specref.jsonref.reference.JsonReference`, an optional
:class:`~specref.models.TargetType` hint, and the errors recorded while
validating or resolving it.  It never owns the object it resolves to:
resolution returns a value shared with the base document, the pass cache,
or an externally fetched tree.

Resolution order (see :meth:`Reference.resolve`):

1. A reference whose ``$ref`` failed to parse resolves to itself, or raises
   when errors are thrown.
2. In ``INLINE`` mode same-document fragments are left as they are.
3. Same-document fragments are evaluated against the base document and
   cached under the raw ``$ref`` string.
4. References into other files are cached under the ``$ref`` resolved
   against the context URI; the file is fetched, its relative references
   are rewritten for the caller's location, and the pointer is evaluated
   inside it.
5. Failures either propagate (``throw_on_error``) or are recorded on the
   node, which then stays unresolved for the rest of the pass.

Cycles are caught two ways: a cache key met again while still pending, and
the pairwise identity checks of :meth:`Reference._resolve_transitive`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional, Union

from specref.exceptions import (
    CyclicReferenceError,
    DocumentLoadError,
    InvalidPointerSyntaxError,
    InvalidReferenceError,
    PointerNotFoundError,
    UnresolvableReferenceError,
)
from specref.interfaces import DocumentContextAware, ReferenceContextAware
from specref.jsonref.pointer import JsonPointer
from specref.jsonref.reference import JsonReference
from specref.models import ResolveMode, TargetType
from specref.resolver.rewriter import RelativeReferenceRewriter

if TYPE_CHECKING:
    from specref.resolver.context import ReferenceContext

logger = logging.getLogger(__name__)


def _coerce_target_type(target_type: Union[TargetType, str, None]) -> Optional[TargetType]:
    if target_type is None or isinstance(target_type, TargetType):
        return target_type
    if isinstance(target_type, str):
        try:
            return TargetType(target_type)
        except ValueError:
            pass
    raise InvalidReferenceError(
        "Unable to instantiate Reference Object, referenced type must be one of "
        f"{', '.join(t.value for t in TargetType)}; got {target_type!r}."
    )


class Reference:
    """A Reference Object.

    Args:
        data: Decoded mapping that must hold a non-empty string under
            ``$ref``.  Any other key is recorded as a validation error.
        target_type: Kind of object the reference must resolve to, as a
            :class:`~specref.models.TargetType` member or its string value.

    Raises:
        InvalidReferenceError: If ``$ref`` is missing, empty, or not a
            string, or *target_type* is not a known target type.

    Example::

        ref = Reference({"$ref": "#/components/schemas/Pet"}, TargetType.SCHEMA)
        pet = ref.resolve(ReferenceContext(document, "/srv/api/openapi.yaml"))
    """

    def __init__(
        self,
        data: Mapping[str, Any],
        target_type: Union[TargetType, str, None] = None,
    ) -> None:
        if not isinstance(data, Mapping) or data.get("$ref") in (None, ""):
            raise InvalidReferenceError(
                "Reference Object requires field '$ref' with a non-empty value. "
                f"Data given: {data!r}."
            )
        if not isinstance(data["$ref"], str):
            raise InvalidReferenceError(
                "Unable to instantiate Reference Object, value of $ref must be a string."
            )

        self._target_type = _coerce_target_type(target_type)
        self._ref: str = data["$ref"]
        self._json_reference: Optional[JsonReference] = None
        self._context: Optional["ReferenceContext"] = None
        self._base_document: Any = None
        self._position: Optional[JsonPointer] = None
        self._errors: list[str] = []

        try:
            self._json_reference = JsonReference.from_reference(self._ref)
        except InvalidPointerSyntaxError as exc:
            self._errors.append(f"Reference: value of $ref is not a valid JSON pointer: {exc}")
        if len(data) != 1:
            self._errors.append(
                "Reference: additional properties are given. "
                "Only $ref should be set in a Reference Object."
            )

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #

    @property
    def raw_ref(self) -> str:
        """The ``$ref`` string exactly as written."""
        return self._ref

    @property
    def target_type(self) -> Optional[TargetType]:
        return self._target_type

    @property
    def json_reference(self) -> Optional[JsonReference]:
        """The parsed reference, or ``None`` once the node is marked unresolved."""
        return self._json_reference

    def get_serializable_data(self) -> dict[str, str]:
        """Return ``{"$ref": raw_ref}``; resolution never changes it."""
        return {"$ref": self._ref}

    def validate(self) -> bool:
        """Whether no validation or resolution error was recorded."""
        return not self._errors

    def get_errors(self) -> list[str]:
        """Recorded errors, each prefixed with ``[pointer]`` when the position is known."""
        position = self.get_document_position()
        if position is not None:
            return [f"[{position}] {message}" for message in self._errors]
        return list(self._errors)

    def set_context(self, context: "ReferenceContext") -> None:
        self._context = context

    def get_context(self) -> Optional["ReferenceContext"]:
        return self._context

    def set_document_context(self, base_document: Any, pointer: JsonPointer) -> None:
        """Record where this node lives; used for diagnostics only."""
        self._base_document = base_document
        self._position = pointer

    def get_base_document(self) -> Any:
        return self._base_document

    def get_document_position(self) -> Optional[JsonPointer]:
        return self._position

    def resolve_references(self, context: Optional["ReferenceContext"] = None) -> None:
        """Always fails: replace the Reference with its resolution first."""
        raise CyclicReferenceError(
            "Cyclic reference detected, resolve_references() called on a Reference Object."
        )

    def set_reference_context(self, context: "ReferenceContext") -> None:
        """Always fails: replace the Reference with its resolution first."""
        raise CyclicReferenceError(
            "Cyclic reference detected, set_reference_context() called on a Reference Object."
        )

    # ------------------------------------------------------------------ #
    # Resolution
    # ------------------------------------------------------------------ #

    def resolve(
        self,
        context: Optional["ReferenceContext"] = None,
        *,
        throw_on_error: Optional[bool] = None,
    ) -> Any:
        """Resolve this reference.

        The result is not resolved recursively: call ``resolve_references()``
        on it afterwards, once it has replaced this Reference in its parent.

        Args:
            context: Context to resolve in.  Defaults to the one previously
                attached with :meth:`set_context`.
            throw_on_error: Raise on failure instead of recording the error
                on this node.  Defaults to ``context.throw_on_error``.

        Returns:
            The referenced object, or this Reference itself when it is left
            unresolved (inline mode, or a recorded failure).

        Raises:
            UnresolvableReferenceError: If no context is available, or
                resolution fails while errors are thrown.
            CyclicReferenceError: If the reference leads back to itself
                while errors are thrown.
        """
        if context is None:
            context = self._context
        if context is None:
            raise UnresolvableReferenceError(
                "No context given for resolving reference.",
                position=self.get_document_position(),
            )
        if throw_on_error is None:
            throw_on_error = context.throw_on_error
        return self._resolve(context, throw_on_error, depth=0)

    def _resolve(self, context: "ReferenceContext", throw_on_error: bool, depth: int) -> Any:
        json_reference = self._json_reference
        if json_reference is None:
            if throw_on_error:
                raise UnresolvableReferenceError(
                    "\n".join(self.get_errors()), position=self.get_document_position()
                )
            return self

        if json_reference.is_fragment and context.mode is ResolveMode.INLINE:
            return self

        try:
            if depth > context.max_depth:
                raise UnresolvableReferenceError(
                    f"Maximum reference depth of {context.max_depth} exceeded "
                    f"while resolving '{self._ref}'."
                )
            if json_reference.is_fragment and context.base_spec is not None:
                return self._resolve_in_document(json_reference, context, throw_on_error, depth)
            return self._resolve_external(json_reference, context, throw_on_error, depth)

        except PointerNotFoundError as exc:
            message = f"Failed to resolve Reference '{self._ref}' to {self._target_name} Object: {exc}"
            if throw_on_error:
                raise UnresolvableReferenceError(
                    message, position=self.get_document_position()
                ) from exc
            self._record_failure(message)
            return self
        except UnresolvableReferenceError as exc:
            if exc.position is None:
                exc.position = self.get_document_position()
            if throw_on_error:
                raise
            # A re-entrant resolve of this node may already have recorded the cycle.
            if self._json_reference is not None:
                self._record_failure(str(exc))
            return self

    def _resolve_in_document(
        self,
        json_reference: JsonReference,
        context: "ReferenceContext",
        throw_on_error: bool,
        depth: int,
    ) -> Any:
        cache = context.cache
        cache_pointer = self._ref
        cache_type = self._target_type

        if cache.has(cache_pointer, cache_type):
            return self._cached(context, cache_pointer, cache_type)

        cache.mark_pending(cache_pointer, cache_type)
        try:
            referenced = json_reference.json_pointer.evaluate(context.base_spec)
            if isinstance(referenced, Reference):
                referenced = self._resolve_transitive(referenced, context, throw_on_error, depth)
            _attach_context(referenced, context)
        except BaseException:
            cache.discard(cache_pointer, cache_type)
            raise

        cache.set(cache_pointer, cache_type, referenced)
        return referenced

    def _resolve_external(
        self,
        json_reference: JsonReference,
        context: "ReferenceContext",
        throw_on_error: bool,
        depth: int,
    ) -> Any:
        cache = context.cache
        # The same relative $ref means different things in different files.
        cache_pointer = context.resolve_relative_uri(json_reference.reference)
        cache_type = self._target_type

        if cache.has(cache_pointer, cache_type):
            return self._cached(context, cache_pointer, cache_type)

        cache.mark_pending(cache_pointer, cache_type)
        try:
            referenced = self._load_external(json_reference, context)

            if isinstance(referenced, DocumentContextAware):
                if referenced.get_document_position() is None and self.get_document_position() is not None:
                    referenced.set_document_context(context.base_spec, self.get_document_position())

            if isinstance(referenced, Reference):
                if context.mode is ResolveMode.INLINE and referenced.raw_ref.startswith("#"):
                    referenced.set_context(context)
                else:
                    referenced = self._resolve_transitive(referenced, context, throw_on_error, depth)
            _attach_context(referenced, context)
        except BaseException:
            cache.discard(cache_pointer, cache_type)
            raise

        cache.set(cache_pointer, cache_type, referenced)
        return referenced

    def _load_external(self, json_reference: JsonReference, context: "ReferenceContext") -> Any:
        file_uri = context.resolve_relative_uri(json_reference.document_uri)
        try:
            document = context.fetch_referenced_file(file_uri)
        except (DocumentLoadError, OSError) as exc:
            raise UnresolvableReferenceError(
                f"Failed to resolve Reference '{self._ref}' to {self._target_name} Object: {exc}",
                position=self.get_document_position(),
            ) from exc

        rewritten = RelativeReferenceRewriter(file_uri, context).rewrite(document)
        return context.resolve_reference_data(
            file_uri, json_reference.json_pointer, rewritten, self._target_type
        )

    def _resolve_transitive(
        self,
        referenced: Reference,
        context: "ReferenceContext",
        throw_on_error: bool,
        depth: int,
    ) -> Any:
        if referenced._target_type is None:
            referenced._target_type = self._target_type
        referenced.set_context(context)

        if referenced is self:
            raise CyclicReferenceError("Cyclic reference detected on a Reference Object.")

        result = referenced._resolve(context, throw_on_error, depth + 1)

        if result is self:
            raise CyclicReferenceError("Cyclic reference detected on a Reference Object.")
        return result

    def _cached(self, context: "ReferenceContext", pointer: str, type_tag: Optional[TargetType]) -> Any:
        if context.cache.is_pending(pointer, type_tag):
            raise CyclicReferenceError(
                f"Cyclic reference detected: '{self._ref}' is already being resolved."
            )
        return context.cache.get(pointer, type_tag)

    def _record_failure(self, message: str) -> None:
        logger.debug("Recording unresolved reference '%s': %s", self._ref, message)
        self._errors.append(message)
        self._json_reference = None

    @property
    def _target_name(self) -> str:
        return self._target_type.value if self._target_type is not None else "any"

    def __repr__(self) -> str:
        return f"Reference({self._ref!r})"


def _attach_context(value: Any, context: "ReferenceContext") -> None:
    """Give a resolved object the context its own nested references resolve in."""
    if isinstance(value, Reference):
        return
    if isinstance(value, ReferenceContextAware):
        value.set_reference_context(context)
    elif isinstance(value, list):
        for item in value:
            if isinstance(item, Reference):
                item.set_context(context)
            else:
                _attach_context(item, context)
