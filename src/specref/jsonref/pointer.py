"""RFC 6901 JSON Pointer.

A pointer such as ``/components/schemas/Pet`` addresses a node inside a
document tree by a sequence of key/index tokens.  Inside a token ``~1``
encodes ``/`` and ``~0`` encodes ``~``.

Evaluation walks any :class:`~collections.abc.Mapping` (plain dicts and
:class:`~specref.objects.SpecObject` alike) by key and any list or tuple by
index.  Failures raise :class:`~specref.exceptions.PointerNotFoundError`.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any, Optional

from specref.exceptions import InvalidPointerSyntaxError, PointerNotFoundError

_POINTER_RE = re.compile(r"^(/([^/~]|~[01])*)*$")
_INDEX_RE = re.compile(r"^(0|[1-9][0-9]*)$")


class JsonPointer:
    """Immutable RFC 6901 JSON Pointer.

    Args:
        pointer: The escaped pointer string.  The empty string addresses the
            whole document.

    Raises:
        InvalidPointerSyntaxError: If *pointer* is neither empty nor starts
            with ``/``, or contains a ``~`` not followed by ``0`` or ``1``.

    Example::

        ptr = JsonPointer("/paths/~1pets/get")
        ptr.tokens        # ('paths', '/pets', 'get')
        ptr.evaluate(doc) # the GET operation of /pets
    """

    __slots__ = ("_pointer", "_tokens")

    def __init__(self, pointer: str = "") -> None:
        if not isinstance(pointer, str) or not _POINTER_RE.match(pointer):
            raise InvalidPointerSyntaxError(
                f"Invalid JSON Pointer syntax: {pointer!r}"
            )
        self._pointer = pointer
        if pointer == "":
            self._tokens: tuple[str, ...] = ()
        else:
            self._tokens = tuple(
                self.decode_token(token) for token in pointer[1:].split("/")
            )

    @classmethod
    def from_tokens(cls, tokens: Iterable[Any]) -> JsonPointer:
        """Build a pointer from unescaped tokens (ints are stringified)."""
        return cls("".join("/" + cls.encode_token(str(t)) for t in tokens))

    @staticmethod
    def encode_token(token: str) -> str:
        """Escape a single token: ``~`` -> ``~0``, then ``/`` -> ``~1``."""
        return token.replace("~", "~0").replace("/", "~1")

    @staticmethod
    def decode_token(token: str) -> str:
        """Unescape a single token: ``~1`` -> ``/``, then ``~0`` -> ``~``."""
        return token.replace("~1", "/").replace("~0", "~")

    @property
    def pointer(self) -> str:
        """The escaped string form of this pointer."""
        return self._pointer

    @property
    def tokens(self) -> tuple[str, ...]:
        """The unescaped path tokens."""
        return self._tokens

    def append(self, token: Any) -> JsonPointer:
        """Return a new pointer with *token* appended."""
        return JsonPointer(self._pointer + "/" + self.encode_token(str(token)))

    def parent(self) -> Optional[JsonPointer]:
        """Return the pointer to the parent node, or ``None`` for the root."""
        if not self._tokens:
            return None
        return JsonPointer.from_tokens(self._tokens[:-1])

    def evaluate(self, document: Any) -> Any:
        """Return the node this pointer addresses inside *document*.

        Raises:
            PointerNotFoundError: If any token is missing from the mapping
                it addresses, is not a valid index into a sequence, or the
                walk reaches a value that has no children.
        """
        current = document
        walked = ""
        for token in self._tokens:
            if isinstance(current, Mapping):
                if token not in current:
                    raise PointerNotFoundError(
                        f"Failed to evaluate pointer '{self._pointer}'. "
                        f"Object has no member '{token}' at path '{walked}'."
                    )
                current = current[token]
            elif isinstance(current, (list, tuple)):
                if not _INDEX_RE.match(token) or int(token) >= len(current):
                    raise PointerNotFoundError(
                        f"Failed to evaluate pointer '{self._pointer}'. "
                        f"Array has no member {token} at path '{walked}'."
                    )
                current = current[int(token)]
            else:
                raise PointerNotFoundError(
                    f"Failed to evaluate pointer '{self._pointer}'. "
                    f"Value at path '{walked}' is a {type(current).__name__}, "
                    "not an object or array."
                )
            walked += "/" + self.encode_token(token)
        return current

    def __str__(self) -> str:
        return self._pointer

    def __repr__(self) -> str:
        return f"JsonPointer({self._pointer!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, JsonPointer):
            return NotImplemented
        return self._pointer == other._pointer

    def __hash__(self) -> int:
        return hash(self._pointer)
