"""``$ref`` resolution engine.

This sub-package turns Reference nodes into the objects they point to:

* :mod:`~specref.resolver.reference` -- :class:`Reference`, the resolvable
  node, with transitive resolution and cycle detection.
* :mod:`~specref.resolver.context` -- :class:`ReferenceContext`, the
  mode, base document, base URI, cache, and error policy of one pass.
* :mod:`~specref.resolver.cache` -- :class:`ResolutionCache`, per-pass
  memoization keyed by ``(pointer, type)``.
* :mod:`~specref.resolver.rewriter` -- :class:`RelativeReferenceRewriter`,
  which re-targets the relative references of fetched files.
* :mod:`~specref.resolver.uri` -- URI normalization and relative-path
  algebra.

Typical usage::

    from specref.resolver import Reference, ReferenceContext

    context = ReferenceContext(document, "/srv/api/openapi.yaml")
    pet = Reference({"$ref": "schemas/pet.yaml#/Pet"}).resolve(context)
"""

from specref.resolver.cache import ResolutionCache
from specref.resolver.context import ReferenceContext
from specref.resolver.reference import Reference
from specref.resolver.rewriter import RelativeReferenceRewriter

__all__ = [
    "Reference",
    "ReferenceContext",
    "RelativeReferenceRewriter",
    "ResolutionCache",
]
