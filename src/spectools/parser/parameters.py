"""Split an operation's ``parameters`` into path and query parameter groups.

Each parameter is resolved (it may be a ``$ref`` to
``#/components/parameters/...``), its schema is taken from ``content`` (via
media-type negotiation) or from ``schema``, and the normalised schema must be
a primitive or an array of primitives.

Only one serialisation per location is supported:

======== ========== ===========
location style      explode
======== ========== ===========
query    ``form``   ``true``
path     ``simple`` ``false``
======== ========== ===========

``style`` and ``explode`` may be omitted, in which case these defaults apply
anyway.  Header and cookie parameters are ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from pydantic import ValidationError

from spectools.exceptions import (
    SpecParsingError,
    UnsupportedDefaultValueError,
    UnsupportedParameterExplodeError,
    UnsupportedParameterStyleError,
    UnsupportedParameterTypeError,
)
from spectools.models import (
    ArraySchema,
    NormalizedSchema,
    ParameterGroup,
    PrimitiveSchema,
    RawParameter,
)
from spectools.parser.content import select_media_type
from spectools.parser.resolver import ComponentTable
from spectools.parser.schema import SchemaNormalizer

logger = logging.getLogger(__name__)

# location -> (supported style, required explode value)
_LOCATION_RULES = {
    "query": ("form", True),
    "path": ("simple", False),
}

_SCALARS = (str, int, float, bool)


@dataclass(frozen=True)
class ExtractedParameters:
    """Path and query groups of one operation; ``None`` when a group is empty."""

    path: Optional[ParameterGroup] = None
    query: Optional[ParameterGroup] = None


def merge_parameters(
    table: ComponentTable,
    path_params: list[Any],
    op_params: list[Any],
) -> list[Any]:
    """Merge path-level and operation-level parameters.

    Operation-level parameters override path-level parameters with the same
    ``name`` and ``in``, as OpenAPI requires.  References are resolved only
    to read the key; the returned list keeps the original nodes.
    """

    def _key(param: Any) -> tuple[Any, Any]:
        resolved = table.resolve_node(param)
        if not isinstance(resolved, dict):
            return (None, None)
        return (resolved.get("name"), resolved.get("in"))

    op_keys = {_key(param) for param in op_params}
    merged = [param for param in path_params if _key(param) not in op_keys]
    merged.extend(op_params)
    return merged


class ParameterExtractor:
    """Build :class:`ExtractedParameters` from raw parameter lists.

    Args:
        table: Component table used to resolve parameter references.
        normalizer: The visit's schema normaliser.
    """

    def __init__(self, table: ComponentTable, normalizer: SchemaNormalizer) -> None:
        self._table = table
        self._normalizer = normalizer

    def extract(self, parameters: list[Any]) -> ExtractedParameters:
        """Route every parameter into the path or query group.

        Raises:
            SpecParsingError: If a parameter is structurally invalid.
            UnsupportedParameterTypeError: If a schema is not a primitive or
                an array of primitives.
            UnsupportedDefaultValueError: If an array parameter has a
                non-primitive default.
            ParameterStyleMismatchError: If ``style``/``explode`` is not the
                supported combination for the location.
            UnsupportedContentTypeError: If a ``content`` map has no
                JSON-compatible media type.
        """
        properties: dict[str, dict[str, NormalizedSchema]] = {"path": {}, "query": {}}
        required: dict[str, set[str]] = {"path": set(), "query": set()}

        for raw in parameters:
            param = self._parse(self._table.resolve_node(raw))

            if param.location not in _LOCATION_RULES:
                logger.debug(
                    "Ignoring %s parameter '%s'", param.location, param.name
                )
                continue

            raw_schema = self._parameter_schema(param)
            if raw_schema is None:
                logger.debug("Parameter '%s' declares no schema, skipping", param.name)
                continue

            schema = self._normalizer.normalize(raw_schema)
            self._check_type(param.name, schema)
            if isinstance(schema, ArraySchema):
                self._check_default(param.name, raw_schema)

            self._check_style(param)
            properties[param.location][param.name] = schema
            if param.required:
                required[param.location].add(param.name)

        return ExtractedParameters(
            path=_build_group(properties["path"], required["path"]),
            query=_build_group(properties["query"], required["query"]),
        )

    @staticmethod
    def _parse(node: Any) -> RawParameter:
        try:
            return RawParameter.model_validate(node)
        except ValidationError as exc:
            raise SpecParsingError(f"Invalid parameter object: {exc}") from exc

    @staticmethod
    def _parameter_schema(param: RawParameter) -> Optional[Any]:
        if param.content is not None:
            _, media = select_media_type(param.content)
            return media.get("schema")
        return param.schema_

    @staticmethod
    def _check_type(name: str, schema: NormalizedSchema) -> None:
        if isinstance(schema, PrimitiveSchema):
            return
        if isinstance(schema, ArraySchema):
            if isinstance(schema.items, PrimitiveSchema):
                return
            raise UnsupportedParameterTypeError(name, f"array of {schema.items.kind}")
        raise UnsupportedParameterTypeError(name, schema.kind)

    def _check_default(self, name: str, raw_schema: Any) -> None:
        resolved = self._table.resolve_node(raw_schema)
        if not isinstance(resolved, dict) or "default" not in resolved:
            return
        default = resolved["default"]
        if default is None or isinstance(default, _SCALARS):
            return
        if isinstance(default, list) and all(
            item is None or isinstance(item, _SCALARS) for item in default
        ):
            return
        raise UnsupportedDefaultValueError(name, default)

    @staticmethod
    def _check_style(param: RawParameter) -> None:
        style, explode = _LOCATION_RULES[param.location]
        if param.style is not None and param.style != style:
            raise UnsupportedParameterStyleError(
                param.name, param.location, param.style, style
            )
        if param.explode is not None and param.explode != explode:
            raise UnsupportedParameterExplodeError(
                param.name, param.location, param.explode, explode
            )


def _build_group(
    properties: dict[str, NormalizedSchema], required: set[str]
) -> Optional[ParameterGroup]:
    if not properties:
        return None
    return ParameterGroup(
        properties=properties,
        required=frozenset(required) if required else None,
    )
