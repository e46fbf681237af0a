"""RFC 6901 JSON Pointer and JSON Reference values.

* :class:`~specref.jsonref.pointer.JsonPointer` -- an immutable sequence of
  path tokens that can be evaluated against a document tree.
* :class:`~specref.jsonref.reference.JsonReference` -- a
  ``document-uri#pointer`` pair parsed from a ``$ref`` string.
"""

from specref.jsonref.pointer import JsonPointer
from specref.jsonref.reference import JsonReference

__all__ = ["JsonPointer", "JsonReference"]
