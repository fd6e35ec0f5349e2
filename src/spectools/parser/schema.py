"""Normalise raw JSON-Schema nodes into the closed :data:`NormalizedSchema` union.

A raw schema node can look like several shapes at once (a node with
``properties`` and ``anyOf``, say).  :class:`SchemaNormalizer` settles this
with a fixed priority order, the first matching shape wins:

1. object (``properties`` present or ``type: object``)
2. array (``type: array``, or ``items`` without a ``type``)
3. primitive (``type`` is ``string``, ``integer``, ``boolean`` or ``number``)
4. ``anyOf`` / ``oneOf`` / ``allOf``
5. ``not``
6. ``$ref``

Only shape and a handful of annotations survive normalisation; everything
else (``additionalProperties``, numeric bounds, ...) is dropped.

Malformed keywords are rejected rather than ignored: a ``type`` that is not a
string, an object ``required`` that is not a list of strings, or composite
members that are not a list all raise :class:`SchemaParsingError`.
"""

from __future__ import annotations

import logging
from typing import Any

from spectools.exceptions import CyclicReferenceOrExcessiveSizeError, SchemaParsingError
from spectools.models import (
    AllOfSchema,
    AnyOfSchema,
    ArraySchema,
    NormalizedSchema,
    NotSchema,
    ObjectSchema,
    OneOfSchema,
    PrimitiveSchema,
    PrimitiveType,
    VisitorConfig,
)
from spectools.parser.resolver import ComponentTable, is_reference

logger = logging.getLogger(__name__)

_PRIMITIVE_TYPES = {
    "string": PrimitiveType.STRING,
    "integer": PrimitiveType.INTEGER,
    "boolean": PrimitiveType.BOOLEAN,
    "number": PrimitiveType.FLOAT,
}

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
DATE_TIME_PATTERN = (
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})$"
)

_FORMAT_PATTERNS = {
    "date": DATE_PATTERN,
    "date-time": DATE_TIME_PATTERN,
}

_COMPOSITES = (
    ("anyOf", AnyOfSchema),
    ("oneOf", OneOfSchema),
    ("allOf", AllOfSchema),
)


class SchemaNormalizer:
    """Recursive schema normaliser bound to one visit.

    The normaliser keeps a stack of the ``$ref`` strings it is currently
    expanding.  Meeting one of them again means the schema contains itself,
    which is reported as a cycle instead of recursing forever.

    Args:
        table: Component table used to resolve ``$ref`` nodes.
        config: Extraction flags for descriptions and defaults.
    """

    def __init__(self, table: ComponentTable, config: VisitorConfig) -> None:
        self._table = table
        self._config = config
        self._active: list[str] = []

    def normalize(self, schema: Any) -> NormalizedSchema:
        """Normalise one raw schema node.

        Raises:
            SchemaParsingError: If the node matches none of the known shapes
                or a recognised shape is malformed.
            InvalidReferenceError: If a ``$ref`` cannot be resolved.
            CyclicReferenceOrExcessiveSizeError: If a ``$ref`` is reached
                again while it is still being expanded.
        """
        if not isinstance(schema, dict):
            raise SchemaParsingError(
                f"Schema must be an object, got {type(schema).__name__}"
            )

        schema_type = schema.get("type")
        if schema_type is not None and not isinstance(schema_type, str):
            raise SchemaParsingError(
                f"Schema 'type' must be a string, got {schema_type!r}"
            )

        if "properties" in schema or schema_type == "object":
            return self._normalize_object(schema)

        if schema_type == "array" or (schema_type is None and "items" in schema):
            return self._normalize_array(schema)

        if schema_type in _PRIMITIVE_TYPES:
            return self._normalize_primitive(schema, schema_type)

        for keyword, model in _COMPOSITES:
            if keyword in schema:
                return model(variants=self._normalize_members(schema[keyword], keyword))

        if "not" in schema:
            return NotSchema(inner=self.normalize(schema["not"]))

        if is_reference(schema):
            return self._normalize_reference(schema["$ref"])

        raise SchemaParsingError(
            f"Unsupported schema shape (type={schema_type!r}, "
            f"keys={sorted(schema)})"
        )

    def _normalize_object(self, schema: dict[str, Any]) -> ObjectSchema:
        raw_properties = schema.get("properties") or {}
        if not isinstance(raw_properties, dict):
            raise SchemaParsingError("Object 'properties' must be a mapping")

        properties = {
            name: self.normalize(prop) for name, prop in raw_properties.items()
        }

        required = schema.get("required")
        if required is None:
            return ObjectSchema(properties=properties)
        if not isinstance(required, list) or not all(isinstance(r, str) for r in required):
            raise SchemaParsingError(
                f"Object 'required' must be a list of strings, got {required!r}"
            )
        return ObjectSchema(properties=properties, required=frozenset(required))

    def _normalize_array(self, schema: dict[str, Any]) -> ArraySchema:
        if "items" not in schema:
            raise SchemaParsingError("Array schema is missing required field 'items'")
        return ArraySchema(items=self.normalize(schema["items"]))

    def _normalize_primitive(self, schema: dict[str, Any], schema_type: str) -> PrimitiveSchema:
        fields: dict[str, Any] = {"type": _PRIMITIVE_TYPES[schema_type]}

        if self._config.extract_description and isinstance(schema.get("description"), str):
            fields["description"] = schema["description"]
        if self._config.extract_default and "default" in schema:
            fields["default"] = schema["default"]

        if schema_type == "string":
            if "enum" in schema:
                fields["enum"] = schema["enum"]
            fmt = schema.get("format")
            if isinstance(fmt, str):
                fields["format"] = fmt
            # An explicit pattern always wins over the one implied by the format
            pattern = schema.get("pattern")
            if isinstance(pattern, str):
                fields["pattern"] = pattern
            elif fmt in _FORMAT_PATTERNS:
                fields["pattern"] = _FORMAT_PATTERNS[fmt]

        return PrimitiveSchema(**fields)

    def _normalize_members(self, members: Any, keyword: str) -> tuple[NormalizedSchema, ...]:
        if not isinstance(members, list):
            raise SchemaParsingError(f"'{keyword}' must be a list of schemas")
        return tuple(self.normalize(member) for member in members)

    def _normalize_reference(self, ref: str) -> NormalizedSchema:
        if ref in self._active:
            chain = " -> ".join([*self._active, ref])
            raise CyclicReferenceOrExcessiveSizeError(
                f"Schema refers to itself: {chain}", ref=ref
            )
        target = self._table.resolve(ref)
        logger.debug("Expanding %s", ref)
        self._active.append(ref)
        try:
            return self.normalize(target)
        finally:
            self._active.pop()
