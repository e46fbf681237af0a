"""JSON Reference: a ``document-uri#pointer`` string split into its parts."""

from __future__ import annotations

from urllib.parse import unquote

from specref.jsonref.pointer import JsonPointer


class JsonReference:
    """Immutable ``(document_uri, json_pointer)`` pair.

    An empty ``document_uri`` means the reference targets the document that
    contains it.

    Example::

        ref = JsonReference.from_reference("common.yaml#/components/schemas/Pet")
        ref.document_uri         # 'common.yaml'
        ref.json_pointer.tokens  # ('components', 'schemas', 'Pet')
    """

    __slots__ = ("_document_uri", "_json_pointer")

    def __init__(self, document_uri: str, json_pointer: JsonPointer) -> None:
        self._document_uri = document_uri
        self._json_pointer = json_pointer

    @classmethod
    def from_reference(cls, reference: str) -> JsonReference:
        """Parse a ``$ref`` string.

        The string is split on the first ``#``.  Without a ``#`` the whole
        string is the document URI and the pointer addresses its root.  The
        fragment is percent-decoded before it is parsed as a pointer.

        Raises:
            InvalidPointerSyntaxError: If the fragment is not a valid JSON
                Pointer.
        """
        if "#" not in reference:
            return cls(reference, JsonPointer(""))
        uri, fragment = reference.split("#", 1)
        return cls(uri, JsonPointer(unquote(fragment)))

    @property
    def document_uri(self) -> str:
        return self._document_uri

    @property
    def json_pointer(self) -> JsonPointer:
        return self._json_pointer

    @property
    def is_fragment(self) -> bool:
        """Whether this reference targets the containing document."""
        return self._document_uri == ""

    @property
    def reference(self) -> str:
        """The reference in ``uri#pointer`` form."""
        return f"{self._document_uri}#{self._json_pointer.pointer}"

    def __str__(self) -> str:
        return self.reference

    def __repr__(self) -> str:
        return f"JsonReference({self.reference!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JsonReference):
            return NotImplemented
        return self.reference == other.reference

    def __hash__(self) -> int:
        return hash(self.reference)
