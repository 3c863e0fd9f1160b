"""Canonical Pydantic models shared across all apicol modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into four groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OperationOrder`, :class:`ImportSettings`, :class:`OutputConfig`
    and :class:`GlobalConfig`.

**Schema nodes** -- a closed set of JSON Schema variants discriminated by
``kind``: :class:`ScalarSchema`, :class:`ObjectSchema`, :class:`ArraySchema`,
:class:`RefSchema` and :class:`CompositeSchema`. Built by
:func:`~apicol.parser.schema.parse_schema`.

**Intermediate representation** -- the version-neutral output of the
normalizer: :class:`SpecVersion`, :class:`ServerEntry`,
:class:`ParameterSpec`, :class:`BodyCandidate`, :class:`OperationSpec`,
:class:`SkippedOperation` and :class:`NormalizedSpec`.

**Collection models** -- the immutable result handed to callers:
:class:`Collection`, :class:`Environment`, :class:`Variable`,
:class:`Folder`, :class:`Request`, :class:`Body` and :class:`KeyValueParam`.

Collection models are frozen and use tuples for every ordered sequence, so a
built collection cannot be modified after import. Their aliases are camelCase,
which is the shape written by :mod:`apicol.export`.
"""

from __future__ import annotations

import enum
from typing import Annotated, Any, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


# --- Config ---


class OperationOrder(str, enum.Enum):
    """How operations inside one path item are ordered.

    ``PRIORITY`` walks a fixed method order (GET, PUT, POST, DELETE, OPTIONS,
    HEAD, PATCH, TRACE); ``DOCUMENT`` keeps the order in which the methods are
    written in the path item.
    """

    PRIORITY = "priority"
    DOCUMENT = "document"


class ImportSettings(BaseModel):
    """Knobs for a single import call.

    The import core never reads configuration files itself; callers resolve
    an instance via :func:`~apicol.config.resolve_settings` (or construct
    one directly) and pass it in.
    """

    model_config = ConfigDict(frozen=True)

    base_url_variable: str = Field(
        default="BaseUrl", description="Environment variable holding the server URL"
    )
    operation_order: OperationOrder = Field(
        default=OperationOrder.DOCUMENT,
        description="Operation order inside a path item: document or priority",
    )
    synthesize_examples: bool = Field(
        default=True,
        description="Build a minimal JSON/XML instance when a schema has no example",
    )
    env_name_prefix: str = Field(
        default="env", description="Prefix for servers without a description"
    )


class OutputConfig(BaseModel):
    """Serialisation preferences for ``convert`` stored in :class:`GlobalConfig`."""

    collection_format: str = Field(
        default="json", description="Serialisation used by convert: json or yaml"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/apicol/config.json``.

    Loaded and saved by :func:`~apicol.config.load_global_config` and
    :func:`~apicol.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~apicol.config.resolve_settings`.
    """

    import_settings: ImportSettings = Field(default_factory=ImportSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)


# --- Schema nodes ---


class _SchemaBase(BaseModel):
    model_config = ConfigDict(frozen=True)

    example: Any = None
    default: Any = None
    xml_name: Optional[str] = None


class ScalarSchema(_SchemaBase):
    """A ``string``, ``integer``, ``number``, ``boolean`` or ``null`` schema."""

    kind: Literal["scalar"] = "scalar"
    type: str = "string"
    format: Optional[str] = None
    enum_values: Optional[tuple[Any, ...]] = None


class SchemaProperty(BaseModel):
    """One named property of an :class:`ObjectSchema`, in declaration order."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    schema_: SchemaNode = Field(alias="schema")


class ObjectSchema(_SchemaBase):
    """An ``object`` schema with ordered properties."""

    kind: Literal["object"] = "object"
    properties: tuple[SchemaProperty, ...] = ()


class ArraySchema(_SchemaBase):
    """An ``array`` schema; ``items`` is ``None`` when undeclared."""

    kind: Literal["array"] = "array"
    items: Optional[SchemaNode] = None


class RefSchema(_SchemaBase):
    """An unresolved internal ``$ref``, looked up through a ``RefTable``."""

    kind: Literal["ref"] = "ref"
    pointer: str


class CompositeSchema(_SchemaBase):
    """An ``allOf``, ``oneOf`` or ``anyOf`` combination of variants."""

    kind: Literal["composite"] = "composite"
    combinator: Literal["allOf", "oneOf", "anyOf"]
    variants: tuple[SchemaNode, ...] = ()


SchemaNode = Annotated[
    Union[ScalarSchema, ObjectSchema, ArraySchema, RefSchema, CompositeSchema],
    Field(discriminator="kind"),
]


# --- Intermediate representation ---


class SpecVersion(str, enum.Enum):
    """OpenAPI generations understood by the normalizer."""

    SWAGGER_2 = "swagger2"
    OPENAPI_3 = "openapi3"


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised in OpenAPI path-item objects.

    Declaration order is the fixed priority used by
    :attr:`OperationOrder.PRIORITY`.
    """

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class ServerEntry(BaseModel):
    """A server URL declared by (or synthesised from) the document."""

    model_config = ConfigDict(frozen=True)

    url_template: str
    name: Optional[str] = None


class ParameterSpec(BaseModel):
    """A non-body parameter of an operation, after path/operation merging."""

    model_config = ConfigDict(frozen=True)

    name: str
    location: ParameterLocation
    example: Any = None


class BodyCandidate(BaseModel):
    """One media type an operation accepts as request body."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    content_type: str
    schema_: Optional[SchemaNode] = Field(default=None, alias="schema")
    example: Any = None
    has_example: bool = False


class OperationSpec(BaseModel):
    """A version-neutral operation: one method on one path."""

    model_config = ConfigDict(frozen=True)

    method: HTTPMethod
    path: str
    summary: Optional[str] = None
    tags: tuple[str, ...] = ()
    parameters: tuple[ParameterSpec, ...] = ()
    body_candidates: tuple[BodyCandidate, ...] = ()


class SkippedOperation(BaseModel):
    """An operation dropped during normalization, with the reason why."""

    model_config = ConfigDict(frozen=True)

    method: str
    path: str
    reason: str


class NormalizedSpec(BaseModel):
    """Version-neutral view of a whole document.

    ``operations`` interleaves successfully normalized operations and the
    ones that were skipped, in walk order. ``refs`` is the document's
    :class:`~apicol.parser.resolver.RefTable`, needed later to synthesise
    examples from referenced schemas.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    version: SpecVersion
    title: str
    servers: tuple[ServerEntry, ...] = ()
    operations: tuple[Union[OperationSpec, SkippedOperation], ...] = ()
    refs: Any = None


# --- Collection ---


class _CollectionModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class BodyMode(str, enum.Enum):
    """How a request body is encoded."""

    NONE = "none"
    RAW = "raw"
    URL_ENCODED = "urlEncoded"
    FILE = "file"
    MULTIPART = "multipart"


class KeyValueParam(_CollectionModel):
    """An (enabled, key, value) entry of a URL-encoded or multipart body."""

    enabled: bool = True
    key: str
    value: str = ""


class Body(_CollectionModel):
    """A request body.

    Exactly one of ``raw_content`` and ``encoded_values`` is populated, as
    dictated by ``mode``; ``none`` and ``file`` modes carry neither.
    """

    mode: BodyMode
    content_type: Optional[str] = None
    raw_content: Optional[str] = None
    encoded_values: Optional[tuple[KeyValueParam, ...]] = None

    @model_validator(mode="after")
    def _check_payload_matches_mode(self) -> Body:
        has_raw = self.raw_content is not None
        has_values = self.encoded_values is not None
        if self.mode == BodyMode.RAW:
            valid = has_raw and not has_values
        elif self.mode in (BodyMode.URL_ENCODED, BodyMode.MULTIPART):
            valid = has_values and not has_raw
        else:
            valid = not has_raw and not has_values
        if not valid:
            raise ValueError(
                f"Body in '{self.mode.value}' mode has mismatched payload "
                f"(raw_content set: {has_raw}, encoded_values set: {has_values})"
            )
        return self


class Request(_CollectionModel):
    """A single HTTP request of a collection."""

    request_type: Literal["http"] = "http"
    name: str
    http_method: str
    url: str
    body: Optional[Body] = None


class Folder(_CollectionModel):
    """A named group of requests. OpenAPI import produces one per tag."""

    name: str
    requests: tuple[Request, ...] = ()
    folders: tuple[Folder, ...] = ()


class Variable(_CollectionModel):
    """An environment variable."""

    enabled: bool = True
    key: str
    value: str
    secret: bool = False


class Environment(_CollectionModel):
    """A named set of variables; one is created per declared server."""

    name: str
    variables: tuple[Variable, ...] = ()


class Collection(_CollectionModel):
    """The imported request collection.

    Folder and request names need not be unique. Every sequence keeps the
    declaration order of the source document.
    """

    name: str
    environments: tuple[Environment, ...] = ()
    folders: tuple[Folder, ...] = ()
    requests: tuple[Request, ...] = ()

    def iter_requests(self) -> Iterator[tuple[Optional[str], Request]]:
        """Yield ``(folder_name_or_None, request)`` for every request, folders first."""
        for folder in self.folders:
            for request in folder.requests:
                yield folder.name, request
        for request in self.requests:
            yield None, request


class ImportResult(BaseModel):
    """Outcome of :func:`~apicol.importer.import_collection`."""

    model_config = ConfigDict(frozen=True)

    collection: Collection
    version: SpecVersion
    skipped: tuple[SkippedOperation, ...] = ()


SchemaProperty.model_rebuild()
ObjectSchema.model_rebuild()
ArraySchema.model_rebuild()
CompositeSchema.model_rebuild()
BodyCandidate.model_rebuild()
Folder.model_rebuild()
