"""specref -- resolve ``$ref`` pointers in OpenAPI / JSON Schema documents.

This package locates the object a JSON Reference points to, follows
transitive references, detects cycles, memoizes results per resolution
pass, and rewrites the relative references of externally fetched files so
they stay valid once embedded in the calling document.

Typical usage::

    from specref.document import load_document, resolve_document

    document = load_document("openapi.yaml")
    resolve_document(document, "openapi.yaml")
    errors = document.get_errors()

Modules:
    jsonref: RFC 6901 JSON Pointer and JSON Reference values.
    resolver: Reference nodes, resolution context, cache, and rewriter.
    objects: Generic spec-object tree that holds Reference nodes.
    loader: Default JSON/YAML decoder and local file fetcher.
    document: Load-and-resolve entry points for whole documents.
    output: Stdout/stderr output manager for the CLI.
    models: Pydantic configuration model and enumerations.
    config: Configuration precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    app: Typer command-line interface.
"""

__version__ = "0.1.0"
