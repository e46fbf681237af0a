"""Canonical models and enumerations shared across specref modules.

The models fall into two groups:

**Resolution vocabulary** -- closed enumerations used by the resolver:
    :class:`TargetType` (the kinds of spec object a ``$ref`` may point to)
    and :class:`ResolveMode` (which references a pass resolves).

**Configuration models** -- loaded from ``./specref.json``, the
environment, and CLI flags:
    :class:`ResolverConfig`.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_MAX_DEPTH = 256
"""Default bound on transitive reference hops and document nesting depth."""


class TargetType(str, enum.Enum):
    """Kinds of OpenAPI object a Reference Object may resolve to.

    The set is closed: a Reference constructed with any other type tag is
    rejected with :class:`~specref.exceptions.InvalidReferenceError`.
    """

    SCHEMA = "Schema"
    RESPONSE = "Response"
    PARAMETER = "Parameter"
    EXAMPLE = "Example"
    REQUEST_BODY = "RequestBody"
    HEADER = "Header"
    SECURITY_SCHEME = "SecurityScheme"
    LINK = "Link"
    CALLBACK = "Callback"
    PATH_ITEM = "PathItem"


class ResolveMode(str, enum.Enum):
    """Which references a resolution pass resolves.

    ``ALL`` resolves every reference. ``INLINE`` resolves only references
    into external documents and leaves same-document fragments (``#/...``)
    as Reference nodes.
    """

    ALL = "all"
    INLINE = "inline"


class ResolverConfig(BaseModel):
    """Settings for a resolution pass.

    Example::

        ResolverConfig(mode="inline", throw_on_error=False, max_depth=64)
    """

    model_config = ConfigDict(extra="forbid")

    mode: ResolveMode = Field(
        default=ResolveMode.ALL, description="Resolution mode: all or inline"
    )
    throw_on_error: bool = Field(
        default=True,
        description="Raise on the first unresolvable reference instead of "
        "recording it on the Reference node",
    )
    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        ge=1,
        description="Maximum transitive reference hops and nesting depth",
    )
