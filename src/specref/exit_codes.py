"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specref.exceptions.SpecrefError` subclass.
CI scripts can inspect the exit code to tell a broken document from a
broken link without parsing stderr.

Example::

    $ specref validate openapi.yaml
    $ echo $?
    9   # EXIT_UNRESOLVABLE_REFERENCE -- at least one $ref could not be resolved
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or options."""

EXIT_DOCUMENT_LOAD_ERROR = 7
"""A document could not be read or decoded."""

EXIT_INVALID_REFERENCE = 8
"""A Reference Object or JSON Pointer is structurally malformed."""

EXIT_UNRESOLVABLE_REFERENCE = 9
"""A reference could not be resolved (missing target, fetch failure, or cycle)."""
