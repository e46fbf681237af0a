"""Read and decode JSON or YAML documents from local files or stdin.

This module is the default decoder and file fetcher of the resolver.  It
turns document text into plain dicts and lists; building the spec-object
tree on top of them is done by :mod:`specref.document`.

The public entry points are:

* :func:`read_source` -- read and decode a file path or ``-`` (stdin).
* :func:`decode_content` -- decode a string as JSON, falling back to YAML.
* :func:`stringify_keys` -- convert non-string mapping keys with ``str()``.
* :class:`FileFetcher` -- the :class:`~specref.interfaces.DocumentFetcher`
  used for ``file://`` references.

Only local documents are supported; other URI schemes raise
:class:`~specref.exceptions.DocumentLoadError`.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit
from urllib.request import url2pathname

import yaml

from specref.exceptions import DocumentLoadError

logger = logging.getLogger(__name__)


def read_source(source: str) -> Any:
    """Read and decode a document from a file path, or stdin when *source* is ``-``.

    Raises:
        DocumentLoadError: If the source cannot be read or decoded.
    """
    if source == "-":
        return _load_from_stdin()
    return load_file(Path(source))


def _load_from_stdin() -> Any:
    try:
        content = sys.stdin.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentLoadError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise DocumentLoadError("No input received from stdin")

    return decode_content(content, hint="stdin")


def load_file(path: Path) -> Any:
    """Load a document from a local file.

    ``.json``, ``.yaml`` and ``.yml`` extensions pick the decoder; any
    other extension falls back to content-based detection.

    Raises:
        DocumentLoadError: If the file is missing, unreadable, empty, or
            cannot be decoded.
    """
    if not path.is_file():
        raise DocumentLoadError(f"Document not found: {path}")

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DocumentLoadError(f"Failed to read document {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise DocumentLoadError(f"Document is not valid UTF-8: {path}: {exc}") from exc

    if not content.strip():
        raise DocumentLoadError(f"Document is empty: {path}")

    suffix = path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    try:
        return decode_content(content, hint=hint)
    except DocumentLoadError as exc:
        raise DocumentLoadError(f"{path}: {exc}") from exc


def decode_content(content: str, hint: str = "") -> Any:
    """Decode content as JSON or YAML.

    Tries JSON first (unless *hint* is ``"yaml"``), then falls back to
    YAML.  Valid JSON is also valid YAML, but JSON parsing is stricter and
    faster.  YAML mapping keys that are not strings (``200:``, ``true:``)
    are converted with ``str()`` so JSON Pointer tokens can address them.

    Args:
        content: The raw document text.
        hint: Optional format hint (``"json"`` or ``"yaml"``).

    Returns:
        The decoded mapping or list.

    Raises:
        DocumentLoadError: If the content cannot be decoded, or decodes to
            a scalar.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            return _require_container(json.loads(content))
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise DocumentLoadError(f"Invalid JSON: {exc}") from exc

    try:
        return stringify_keys(_require_container(yaml.safe_load(content)))
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to decode document as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise DocumentLoadError(msg)


def _require_container(result: Any) -> Any:
    if not isinstance(result, (dict, list)):
        raise DocumentLoadError(
            "Document must be a JSON/YAML object or array (got "
            f"{type(result).__name__ if result is not None else 'empty document'})"
        )
    return result


def stringify_keys(value: Any) -> Any:
    """Return a copy of *value* whose mapping keys are all strings."""
    return _stringify_keys(value, {})


def _stringify_keys(value: Any, seen: dict[int, Any]) -> Any:
    # Anchors and aliases may share or nest nodes; keep that shape.
    if not isinstance(value, (dict, list)):
        return value
    if id(value) in seen:
        return seen[id(value)]

    if isinstance(value, dict):
        converted: Any = {}
        seen[id(value)] = converted
        for key, item in value.items():
            converted[key if isinstance(key, str) else str(key)] = _stringify_keys(item, seen)
    else:
        converted = []
        seen[id(value)] = converted
        converted.extend(_stringify_keys(item, seen) for item in value)
    return converted


class FileFetcher:
    """Fetches ``file://`` documents for external references.

    Example::

        FileFetcher().fetch("file:///srv/api/schemas/pet.yaml")
    """

    def fetch(self, uri: str) -> Any:
        """Read and decode the local document at *uri*.

        Raises:
            DocumentLoadError: If *uri* is not a ``file://`` URI or the
                document cannot be loaded.
        """
        parts = urlsplit(uri)
        if parts.scheme != "file":
            raise DocumentLoadError(
                f"Cannot fetch '{uri}': only local file:// documents are supported."
            )
        path = Path(url2pathname(parts.path))
        logger.debug("Reading %s", path)
        return load_file(path)
