"""Per-pass memoization of resolved references.

Entries are keyed by ``(pointer, type_tag)``: the normalized reference
string and the kind of object it was resolved as.  A key is written at most
once per context lifetime.  Before a resolution starts, the key is marked
*pending*; presence of a key, pending or complete, therefore means
"resolution in progress or complete", and meeting a pending key again on
the same call stack means the reference chain has looped back on itself.
"""

from __future__ import annotations

import logging
from collections.abc import Hashable
from typing import Any, Optional

logger = logging.getLogger(__name__)

_PENDING = object()

CacheKey = tuple[str, Optional[Hashable]]


class ResolutionCache:
    """In-memory cache of resolved values for one resolution pass.

    Shared (not owned) by every Reference reached while resolving one
    document tree.  Not safe for concurrent use: "check, compute, write"
    must run as one unit per key.

    Example::

        cache = ResolutionCache()
        if not cache.has("#/components/schemas/Pet", TargetType.SCHEMA):
            cache.mark_pending("#/components/schemas/Pet", TargetType.SCHEMA)
            ...
            cache.set("#/components/schemas/Pet", TargetType.SCHEMA, pet)
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}

    def has(self, pointer: str, type_tag: Optional[Hashable]) -> bool:
        """Whether resolution of this key is in progress or complete."""
        return (pointer, type_tag) in self._entries

    def is_pending(self, pointer: str, type_tag: Optional[Hashable]) -> bool:
        """Whether resolution of this key has started but not completed."""
        return self._entries.get((pointer, type_tag)) is _PENDING

    def get(self, pointer: str, type_tag: Optional[Hashable]) -> Any:
        """Return the completed value for a key.

        Raises:
            KeyError: If the key is absent or still pending.
        """
        value = self._entries[(pointer, type_tag)]
        if value is _PENDING:
            raise KeyError((pointer, type_tag))
        logger.debug("Cache hit for %s (%s)", pointer, type_tag)
        return value

    def mark_pending(self, pointer: str, type_tag: Optional[Hashable]) -> None:
        """Record that resolution of a key has started."""
        key = (pointer, type_tag)
        if key in self._entries:
            raise ValueError(f"Cache entry {key!r} already exists")
        self._entries[key] = _PENDING

    def discard(self, pointer: str, type_tag: Optional[Hashable]) -> None:
        """Drop a pending marker after a failed resolution.

        Completed entries are left untouched.
        """
        key = (pointer, type_tag)
        if self._entries.get(key) is _PENDING:
            del self._entries[key]

    def set(self, pointer: str, type_tag: Optional[Hashable], value: Any) -> None:
        """Store the resolved value for a key.

        Raises:
            ValueError: If the key already holds a completed value.
        """
        key = (pointer, type_tag)
        existing = self._entries.get(key, _PENDING)
        if existing is not _PENDING:
            raise ValueError(f"Cache entry {key!r} is already resolved")
        self._entries[key] = value

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def __len__(self) -> int:
        return sum(1 for value in self._entries.values() if value is not _PENDING)

    def __contains__(self, key: object) -> bool:
        return key in self._entries
