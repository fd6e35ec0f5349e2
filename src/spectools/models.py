"""Canonical Pydantic models shared across all spectools modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- read from JSON config files and the environment:
    :class:`VisitorConfig`, :class:`OutputConfig` and :class:`GlobalConfig`.

**Raw document models** -- a thin, permissive skeleton of the OpenAPI grammar
used to reject structurally broken documents early:
    :class:`RawSpec`, :class:`RawServer`, :class:`RawOperation`,
    :class:`RawParameter` and :class:`RawRequestBody`.  Unknown keys are
    preserved; only the fields the visitor reads are typed.

**Visitor output models** -- the immutable result of a visit:
    the :data:`NormalizedSchema` tagged union (:class:`ObjectSchema`,
    :class:`ArraySchema`, :class:`PrimitiveSchema`, :class:`AnyOfSchema`,
    :class:`OneOfSchema`, :class:`AllOfSchema`, :class:`NotSchema`),
    :class:`ParameterGroup`, :class:`ToolDescriptor` and
    :class:`ApiSpecification`.

Output models are frozen and serialise with camelCase aliases. Sets are
rendered as sorted lists so that JSON output is deterministic.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_serializer,
    model_serializer,
)
from pydantic.alias_generators import to_camel


# --- Config ---


class VisitorConfig(BaseModel):
    """Extraction flags passed explicitly into every visit.

    Both flags default to off so that emitted schemas stay small unless the
    caller opts in.
    """

    model_config = ConfigDict(frozen=True)

    extract_description: bool = Field(
        default=False, description="Copy primitive schema descriptions"
    )
    extract_default: bool = Field(
        default=False, description="Copy primitive schema default values"
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`.

    Applied by the CLI when neither ``--json`` nor ``--plain`` is given.
    """

    format: Literal["auto", "json", "plain", "rich"] = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """Shape of both the user config file and the project ``spectools.json``.

    Loaded by :func:`~spectools.config.load_global_config` and
    :func:`~spectools.config.load_project_config`. See
    :func:`~spectools.config.resolve_visitor_config` for the precedence chain.
    """

    extraction: VisitorConfig = Field(default_factory=VisitorConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Raw document skeleton ---


class _RawModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class RawServer(_RawModel):
    """An entry of the document's ``servers`` array."""

    url: str
    description: Optional[str] = None


class RawSpec(_RawModel):
    """Top-level OpenAPI document after the version gate."""

    openapi: str
    servers: Optional[list[RawServer]] = None
    paths: Optional[dict[str, dict[str, Any]]] = None
    components: Optional[dict[str, Any]] = None


class RawOperation(_RawModel):
    """The fields of an *Operation Object* the visitor reads."""

    operation_id: Optional[str] = Field(default=None, alias="operationId")
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: Optional[list[dict[str, Any]]] = None
    request_body: Optional[dict[str, Any]] = Field(default=None, alias="requestBody")


class RawParameter(_RawModel):
    """A concrete (non-reference) *Parameter Object*."""

    name: str
    location: str = Field(alias="in")
    required: bool = False
    style: Optional[str] = None
    explode: Optional[bool] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    content: Optional[dict[str, dict[str, Any]]] = None


class RawRequestBody(_RawModel):
    """A concrete (non-reference) *Request Body Object*."""

    content: dict[str, dict[str, Any]]
    description: Optional[str] = None
    required: bool = False


# --- Visitor output ---


class _OutputModel(BaseModel):
    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )


class PrimitiveType(str, enum.Enum):
    """Primitive type tags. OpenAPI ``number`` is reported as ``float``."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    FLOAT = "float"


class ObjectSchema(_OutputModel):
    """An object with ordered, normalised properties."""

    kind: Literal["object"] = "object"
    properties: dict[str, NormalizedSchema] = Field(default_factory=dict)
    required: frozenset[str] = Field(default_factory=frozenset)

    @field_serializer("required")
    def _serialize_required(self, required: frozenset[str]) -> list[str]:
        return sorted(required)


class ArraySchema(_OutputModel):
    kind: Literal["array"] = "array"
    items: NormalizedSchema


class PrimitiveSchema(_OutputModel):
    """A scalar value with the restricted set of annotations kept by the normalizer.

    An explicit ``default: null`` is told apart from an absent default by
    ``model_fields_set`` and survives ``exclude_none`` serialisation.
    """

    kind: Literal["primitive"] = "primitive"
    type: PrimitiveType
    description: Optional[str] = None
    default: Any = None
    format: Optional[str] = None
    pattern: Optional[str] = None
    enum: Optional[list[Any]] = None

    @model_serializer(mode="wrap")
    def _keep_explicit_null_default(
        self, handler: SerializerFunctionWrapHandler
    ) -> dict[str, Any]:
        data = handler(self)
        if "default" in self.model_fields_set and "default" not in data:
            data["default"] = None
        return data


class AnyOfSchema(_OutputModel):
    kind: Literal["anyOf"] = "anyOf"
    variants: tuple[NormalizedSchema, ...]


class OneOfSchema(_OutputModel):
    kind: Literal["oneOf"] = "oneOf"
    variants: tuple[NormalizedSchema, ...]


class AllOfSchema(_OutputModel):
    kind: Literal["allOf"] = "allOf"
    variants: tuple[NormalizedSchema, ...]


class NotSchema(_OutputModel):
    kind: Literal["not"] = "not"
    inner: NormalizedSchema


NormalizedSchema = Annotated[
    Union[
        ObjectSchema,
        ArraySchema,
        PrimitiveSchema,
        AnyOfSchema,
        OneOfSchema,
        AllOfSchema,
        NotSchema,
    ],
    Field(discriminator="kind"),
]
"""Closed tagged union of normalised schema shapes, discriminated on ``kind``."""

ParameterSchema = Annotated[
    Union[PrimitiveSchema, ArraySchema],
    Field(discriminator="kind"),
]
"""The shapes a parameter may take: a primitive or an array of primitives."""

for _model in (ObjectSchema, ArraySchema, AnyOfSchema, OneOfSchema, AllOfSchema, NotSchema):
    _model.model_rebuild()


class ParameterGroup(_OutputModel):
    """Path or query parameters of one operation, keyed by parameter name.

    ``required`` is ``None`` rather than empty when no parameter is required.
    """

    properties: dict[str, ParameterSchema]
    required: Optional[frozenset[str]] = None

    @field_serializer("required")
    def _serialize_required(self, required: Optional[frozenset[str]]) -> Optional[list[str]]:
        return sorted(required) if required is not None else None


class HTTPMethod(str, enum.Enum):
    """HTTP methods visited, in the fixed order tools are emitted for one path."""

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"


class ToolDescriptor(_OutputModel):
    """One invocable HTTP operation, self-contained and reference-free.

    ``name`` comes from the operation's ``operationId``. Uniqueness across a
    document is left to the consumer.
    """

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    path: str
    method: HTTPMethod
    path_parameters: Optional[ParameterGroup] = None
    query_parameters: Optional[ParameterGroup] = None
    request_body: Optional[NormalizedSchema] = None


class ApiSpecification(_OutputModel):
    """Result of visiting one OpenAPI document.

    See Also:
        :func:`~spectools.parser.visitor.visit_spec`: Produces this model.
    """

    service_url: Optional[str] = None
    tools: tuple[ToolDescriptor, ...] = ()
