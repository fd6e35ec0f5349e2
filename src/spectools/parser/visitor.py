"""Walk an OpenAPI document and assemble one tool descriptor per operation.

:class:`SpecVisitor` is the orchestrator of a visit.  It resolves the service
URL, builds the :class:`~spectools.parser.resolver.ComponentTable`, and walks
``paths`` x HTTP methods, delegating to
:class:`~spectools.parser.parameters.ParameterExtractor` and
:class:`~spectools.parser.request_body.RequestBodyExtractor`, which in turn
use the visit's :class:`~spectools.parser.schema.SchemaNormalizer`.

Tools are emitted in path declaration order; within a path the method order is
fixed (see :class:`~spectools.models.HTTPMethod`) regardless of the order in
the document.  The first error aborts the visit and no partial result is
returned.

Typical usage::

    from spectools.parser import load_spec, visit_spec

    api = visit_spec(load_spec("petstore.json"))
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ValidationError

from spectools.exceptions import (
    CyclicReferenceOrExcessiveSizeError,
    MissingDescriptionError,
    MissingOperationIdError,
    SpecError,
    SpecParsingError,
)
from spectools.models import (
    ApiSpecification,
    HTTPMethod,
    RawOperation,
    RawSpec,
    ToolDescriptor,
    VisitorConfig,
)
from spectools.parser.loader import parse_raw_spec
from spectools.parser.parameters import (
    ExtractedParameters,
    ParameterExtractor,
    merge_parameters,
)
from spectools.parser.request_body import RequestBodyExtractor
from spectools.parser.resolver import ComponentTable
from spectools.parser.schema import SchemaNormalizer

logger = logging.getLogger(__name__)


def visit_spec(
    raw_spec: dict[str, Any], config: Optional[VisitorConfig] = None
) -> ApiSpecification:
    """Convert a decoded OpenAPI document into an :class:`ApiSpecification`.

    Runs the version gate and skeleton validation, then a fresh
    :class:`SpecVisitor`.

    Args:
        raw_spec: The decoded document, as returned by
            :func:`~spectools.parser.loader.load_spec`.
        config: Extraction flags; both off when omitted.

    Returns:
        The immutable visit result.

    Raises:
        SpecError: Any of its subclasses, see :mod:`spectools.exceptions`.
    """
    return SpecVisitor(parse_raw_spec(raw_spec), config).visit()


class SpecVisitor:
    """Single-use visitor over one validated document.

    Args:
        spec: The document skeleton returned by
            :func:`~spectools.parser.loader.parse_raw_spec`.
        config: Extraction flags; both off when omitted.
    """

    def __init__(self, spec: RawSpec, config: Optional[VisitorConfig] = None) -> None:
        self._spec = spec
        self._config = config or VisitorConfig()
        self._visited = False

    def visit(self) -> ApiSpecification:
        """Run the visit.

        Raises:
            RuntimeError: If the visitor has already been used.
            CyclicReferenceOrExcessiveSizeError: If the interpreter's
                recursion limit is hit while walking the document.
        """
        if self._visited:
            raise RuntimeError("SpecVisitor instances are single-use")
        self._visited = True

        service_url = self._service_url()
        table = ComponentTable.from_components(self._spec.components)
        normalizer = SchemaNormalizer(table, self._config)
        walker = _OperationWalker(
            table,
            ParameterExtractor(table, normalizer),
            RequestBodyExtractor(table, normalizer),
        )

        try:
            tools = walker.walk(self._spec.paths or {})
        except RecursionError as exc:
            raise CyclicReferenceOrExcessiveSizeError(
                "Recursion limit exceeded while visiting the document; "
                "it contains a $ref cycle or is nested too deeply"
            ) from exc

        logger.debug("Visited %d operations", len(tools))
        return ApiSpecification(service_url=service_url, tools=tuple(tools))

    def _service_url(self) -> Optional[str]:
        servers = self._spec.servers
        if not servers:
            return None
        if len(servers) > 1:
            logger.warning(
                "Document declares %d servers; using the first one (%s)",
                len(servers),
                servers[0].url,
            )
        return servers[0].url


class _OperationWalker:
    def __init__(
        self,
        table: ComponentTable,
        parameters: ParameterExtractor,
        request_bodies: RequestBodyExtractor,
    ) -> None:
        self._table = table
        self._parameters = parameters
        self._request_bodies = request_bodies

    def walk(self, paths: dict[str, Any]) -> list[ToolDescriptor]:
        tools: list[ToolDescriptor] = []
        for path, path_item in paths.items():
            item = self._table.resolve_node(path_item)
            if not isinstance(item, dict):
                raise SpecParsingError(f"Path item for '{path}' must be an object")

            path_params = item.get("parameters") or []
            if not isinstance(path_params, list):
                raise SpecParsingError(f"Path-level 'parameters' of '{path}' must be a list")

            for method in HTTPMethod:
                operation = item.get(method.value)
                if operation is None:
                    continue
                try:
                    tools.append(self._visit_operation(path, method, operation, path_params))
                except SpecError as exc:
                    exc.set_operation(method.value, path)
                    raise
        return tools

    def _visit_operation(
        self,
        path: str,
        method: HTTPMethod,
        operation: Any,
        path_params: list[Any],
    ) -> ToolDescriptor:
        try:
            op = RawOperation.model_validate(operation)
        except ValidationError as exc:
            raise SpecParsingError(f"Invalid operation object: {exc}") from exc

        if not op.operation_id:
            raise MissingOperationIdError(method.value, path)
        description = op.description or op.summary
        if not description:
            raise MissingDescriptionError(method.value, path)

        params = merge_parameters(self._table, path_params, op.parameters or [])
        extracted = self._parameters.extract(params) if params else ExtractedParameters()

        request_body = None
        if op.request_body is not None:
            request_body = self._request_bodies.extract(op.request_body)

        return ToolDescriptor(
            name=op.operation_id,
            description=description,
            path=path,
            method=method,
            path_parameters=extracted.path,
            query_parameters=extracted.query,
            request_body=request_body,
        )
