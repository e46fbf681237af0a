"""Exception hierarchy for specref.

All exceptions inherit from :class:`SpecrefError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specref.exit_codes`.
The top-level error handler in :func:`specref.app.main` catches
``SpecrefError`` and exits with the appropriate code.

Subclass hierarchy::

    SpecrefError (exit 1)
    +-- InvalidUsageError             (exit 2)
    +-- DocumentLoadError             (exit 7)
    +-- InvalidReferenceError         (exit 8)
    +-- InvalidPointerSyntaxError     (exit 8)
    +-- PointerNotFoundError          (exit 9)
    +-- UnresolvableReferenceError    (exit 9)
    |   +-- CyclicReferenceError      (exit 9)
    +-- ConfigError                   (exit 1)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from specref.exit_codes import (
    EXIT_DOCUMENT_LOAD_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_REFERENCE,
    EXIT_INVALID_USAGE,
    EXIT_UNRESOLVABLE_REFERENCE,
)

if TYPE_CHECKING:
    from specref.jsonref.pointer import JsonPointer


class SpecrefError(Exception):
    """Base exception for all specref errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specref.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecrefError):
    """Raised for invalid CLI arguments."""

    exit_code = EXIT_INVALID_USAGE


class DocumentLoadError(SpecrefError):
    """Raised when a document cannot be read, fetched, or decoded."""

    exit_code = EXIT_DOCUMENT_LOAD_ERROR


class InvalidReferenceError(SpecrefError):
    """Raised when a Reference Object is malformed (missing, empty, or non-string ``$ref``).

    Construction-time malformation always fails hard, regardless of the
    active error policy.
    """

    exit_code = EXIT_INVALID_REFERENCE


class InvalidPointerSyntaxError(SpecrefError):
    """Raised when a string is not a syntactically valid RFC 6901 JSON Pointer."""

    exit_code = EXIT_INVALID_REFERENCE


class PointerNotFoundError(SpecrefError):
    """Raised when a JSON Pointer segment does not exist in the target document."""

    exit_code = EXIT_UNRESOLVABLE_REFERENCE


class UnresolvableReferenceError(SpecrefError):
    """Raised when a reference cannot be resolved.

    Covers a missing resolution context, a failed file fetch, and wrapped
    lower-level failures.

    Attributes:
        position: JSON Pointer to the location of the offending Reference
            in its base document, when known.
    """

    exit_code = EXIT_UNRESOLVABLE_REFERENCE

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        position: Optional["JsonPointer"] = None,
    ):
        super().__init__(message, exit_code)
        self.position = position


class CyclicReferenceError(UnresolvableReferenceError):
    """Raised when a reference resolves, directly or indirectly, back to itself."""


class ConfigError(SpecrefError):
    """Raised for configuration problems (invalid project config or environment values)."""

    exit_code = EXIT_GENERIC_FAILURE
