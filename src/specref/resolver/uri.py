"""URI algebra for reference resolution.

References are resolved against absolute base URIs.  Filesystem paths are
represented as ``file://`` URIs so that local files and any other absolute
URI go through the same joining rules.  Only the path component takes part
in relative resolution; query and fragment always come from the reference
being resolved.
"""

from __future__ import annotations

import os
import posixpath
from pathlib import Path
from typing import Union
from urllib.parse import urlsplit, urlunsplit

from specref.exceptions import UnresolvableReferenceError


def _has_scheme(uri: str) -> bool:
    # A one-letter scheme is a Windows drive letter, not a URI scheme.
    return len(urlsplit(uri).scheme) > 1


def dirname(path: str) -> str:
    """Return everything before the last ``/`` of *path* (``""`` if there is none)."""
    if "/" not in path:
        return ""
    return path.rpartition("/")[0]


def reduce_dots(path: str) -> str:
    """Collapse ``.`` and ``..`` segments of a URI path.

    ``..`` never climbs above the root of an absolute path; in a relative
    path leading ``..`` segments are kept.
    """
    absolute_root = [""]
    reduced: list[str] = []
    for segment in path.split("/"):
        if segment == ".":
            continue
        if segment == "..":
            if reduced == absolute_root:
                continue
            if reduced and reduced[-1] != "..":
                reduced.pop()
            else:
                reduced.append(segment)
            continue
        reduced.append(segment)
    result = "/".join(reduced)
    if path.startswith("/") and not result.startswith("/"):
        result = "/" + result
    return result


def normalize_uri(uri: Union[str, os.PathLike]) -> str:
    """Turn a document location into an absolute base URI.

    Args:
        uri: An absolute URI, an absolute filesystem path, a path-like
            object (made absolute against the working directory), or ``""``
            for "no base URI".

    Returns:
        The normalized URI, with dot segments of its path reduced.

    Raises:
        UnresolvableReferenceError: If *uri* is a relative path string.
    """
    if isinstance(uri, os.PathLike):
        posix = Path(uri).resolve().as_posix()
        if not posix.startswith("/"):
            posix = "/" + posix
        return "file://" + posix
    if uri == "":
        return ""
    if "://" in uri and _has_scheme(uri):
        parts = urlsplit(uri)
        return urlunsplit(parts._replace(path=reduce_dots(parts.path)))
    if uri.startswith("/"):
        return "file://" + reduce_dots(uri)
    raise UnresolvableReferenceError(
        f"Can not resolve references for a document given as a relative path: '{uri}'."
    )


def resolve_relative_uri(uri: str, base: str) -> str:
    """Resolve *uri* against the absolute *base* URI.

    Raises:
        UnresolvableReferenceError: If *uri* has no path component (for
            example a pure ``#fragment``) or there is no base to resolve a
            relative path against.
    """
    parts = urlsplit(uri)
    if _has_scheme(uri):
        return urlunsplit(parts._replace(path=reduce_dots(parts.path)))

    if not parts.path:
        raise UnresolvableReferenceError(f"Invalid URI: '{uri}'")
    if not base:
        raise UnresolvableReferenceError(
            f"Invalid URI: '{uri}' (no base URI to resolve it against)"
        )

    base_parts = urlsplit(base)
    if parts.path.startswith("/"):
        path = reduce_dots(parts.path)
    else:
        path = reduce_dots(dirname(base_parts.path).rstrip("/") + "/" + parts.path)
    return urlunsplit(
        (base_parts.scheme, base_parts.netloc, path, parts.query, parts.fragment)
    )


def is_within(target: str, base: str) -> bool:
    """Whether *target* is *base* itself or a fragment inside it."""
    return target == base or target.startswith(base + "#")


def make_relative_path(base: str, target: str) -> str:
    """Express the absolute *target* relative to the document at *base*.

    Targets under the base document's directory become ``./rest``; other
    targets on the same scheme and authority become a ``../`` path.  When no
    relative form exists, *target* is returned unchanged.
    """
    base_parts = urlsplit(base)
    target_parts = urlsplit(target)
    if (base_parts.scheme, base_parts.netloc) != (target_parts.scheme, target_parts.netloc):
        return target
    if not target_parts.path.startswith("/"):
        return target

    base_dir = dirname(base_parts.path)
    if target_parts.path.startswith(base_dir + "/"):
        relative = "./" + target_parts.path[len(base_dir) + 1:]
    else:
        relative = posixpath.relpath(target_parts.path, base_dir or "/")
    return urlunsplit(("", "", relative, target_parts.query, target_parts.fragment))
