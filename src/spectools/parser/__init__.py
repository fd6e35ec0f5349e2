"""OpenAPI document parser -- load, gate on version, and visit.

This sub-package turns a raw OpenAPI 3.0.x document (JSON or YAML, local file
or remote URL) into an :class:`~spectools.models.ApiSpecification`.

Typical usage::

    from spectools.parser import load_spec, visit_spec

    raw = load_spec("https://petstore3.swagger.io/api/v3/openapi.json")
    api = visit_spec(raw)

Sub-modules:

* :mod:`~spectools.parser.loader` -- I/O layer (URL, file, stdin), decoding
  and the version gate.
* :mod:`~spectools.parser.resolver` -- The component table and ``$ref``
  resolution.
* :mod:`~spectools.parser.schema` -- Schema normalisation into the closed
  shape union.
* :mod:`~spectools.parser.content` -- Media-type negotiation.
* :mod:`~spectools.parser.parameters` -- Path/query parameter groups.
* :mod:`~spectools.parser.request_body` -- Request-body schemas.
* :mod:`~spectools.parser.visitor` -- The operation walk and orchestration.
"""

from spectools.parser.loader import load_spec, parse_raw_spec, validate_openapi_version
from spectools.parser.visitor import SpecVisitor, visit_spec

__all__ = [
    "load_spec",
    "parse_raw_spec",
    "validate_openapi_version",
    "SpecVisitor",
    "visit_spec",
]
