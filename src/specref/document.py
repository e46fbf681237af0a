"""Whole-document entry points: load a spec tree and resolve every reference in it.

Typical usage::

    from specref.document import load_document, resolve_document
    from specref.models import ResolverConfig

    document = load_document("openapi.yaml")
    resolve_document(document, "openapi.yaml", ResolverConfig(throw_on_error=False))
    for message in document.get_errors():
        print(message)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

from specref.interfaces import DocumentFetcher
from specref.jsonref.pointer import JsonPointer
from specref.loader import read_source
from specref.models import ResolverConfig
from specref.objects import SpecObject, build_tree
from specref.resolver.context import ReferenceContext
from specref.resolver.reference import Reference

logger = logging.getLogger(__name__)


def load_document(source: str) -> Any:
    """Load *source* (a path, or ``-`` for stdin) as a spec-object tree.

    Every node of the returned tree knows its position in the document.

    Raises:
        DocumentLoadError: If the source cannot be read or decoded.
        InvalidReferenceError: If the document holds a malformed ``$ref``.
    """
    document = build_tree(read_source(source))
    if isinstance(document, (SpecObject, Reference)):
        document.set_document_context(document, JsonPointer(""))
    return document


def resolve_document(
    document: SpecObject,
    uri: Union[str, os.PathLike],
    config: Optional[ResolverConfig] = None,
    *,
    fetcher: Optional[DocumentFetcher] = None,
) -> SpecObject:
    """Resolve every reference inside *document*, in place.

    Args:
        document: Root spec object, as returned by :func:`load_document`.
        uri: Location of *document*; relative references are resolved
            against it.  Plain strings without a scheme are treated as paths.
        config: Resolution settings; defaults to :class:`ResolverConfig()`.
        fetcher: Fetcher for external documents.

    Returns:
        *document*, with references replaced by their resolution.

    Raises:
        UnresolvableReferenceError: On the first failure when
            ``config.throw_on_error`` is set.
    """
    config = config or ResolverConfig()
    if isinstance(uri, str) and uri and "://" not in uri:
        uri = Path(uri)
    context = ReferenceContext.from_config(config, document, uri, fetcher=fetcher)
    logger.debug("Resolving references of %s in %s mode", context.uri, config.mode.value)
    document.set_reference_context(context)
    document.resolve_references(context)
    return document
