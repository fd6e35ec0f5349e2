"""spectools -- Turn OpenAPI 3.0 documents into flat lists of tool descriptors.

This package walks an OpenAPI 3.0.x document and produces one self-contained
*tool descriptor* per HTTP operation: its name, description, path, method,
path/query parameter schemas and request-body schema.  Every ``$ref`` is
resolved and every schema is normalised into a small closed set of shapes so
that a tool-invocation layer can validate and route calls without re-reading
the original document.

Typical usage::

    from spectools.parser import load_spec, visit_spec

    raw = load_spec("petstore.yaml")
    api = visit_spec(raw)
    for tool in api.tools:
        print(tool.method.value, tool.path, tool.name)

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware resolution of the extraction flags.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
    parser: Loading, reference resolution and the document visitor.
"""

__version__ = "0.1.0"
