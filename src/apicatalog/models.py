"""Canonical Pydantic models shared across all apicatalog modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into three groups:

**Configuration models** -- resolved from flags, environment and JSON files:
    :class:`CatalogConfig` and :class:`SubsectionRule`.

**Description models** -- produced by the description loader from a dereferenced
OpenAPI document:
    :class:`Tag`, :class:`ApiDescription`.

**Catalog models** -- produced by the flattener and index builder and read by
presentation code:
    :class:`HTTPMethod`, :class:`ParameterKind`, :class:`OperationParameter`,
    :class:`Operation`, :class:`Section`, :class:`Resource` and
    :class:`RulesetInconsistency`.

All models use Pydantic v2. Models mirroring OpenAPI objects accept the
document's own key spelling (``in``, ``schema``, ``x-id``...) through aliases
and can also be populated by field name.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


# --- Configuration ---


class CatalogConfig(BaseModel):
    """Effective configuration for building a catalog.

    Resolved by :func:`~apicatalog.config.resolve_config` from CLI flags,
    ``APICATALOG_*`` environment variables, ``./apicatalog.json`` and the
    user config file, in that order of precedence.
    """

    spec: Optional[str] = Field(
        default=None, description="URL, file path or '-' for the API description"
    )
    umbrella: str = Field(
        default="Me", description="Category split into subsections by the ruleset"
    )
    ruleset: Optional[str] = Field(
        default=None, description="Path to a JSON/YAML ruleset file (built-in rules if unset)"
    )
    strict_ruleset: bool = Field(
        default=False,
        description="Fail the build when an umbrella route matches no subsection rule",
    )


class SubsectionRule(BaseModel):
    """A hand-authored rule filing a group of paths under a named subsection.

    ``paths`` are literal path strings compared byte-for-byte; templated
    segments such as ``{addressID}`` must match the description's spelling.
    Ruleset files may spell the parent as ``parentSectionId`` or
    ``x-section-id``.

    Example::

        SubsectionRule(
            name="My Addresses",
            parent_section_id="MeAndMyStuff",
            paths=("/me/addresses", "/me/addresses/{addressID}"),
        )
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    parent_section_id: str = Field(
        validation_alias=AliasChoices(
            "parent_section_id", "parentSectionId", "x-section-id"
        )
    )
    paths: tuple[str, ...] = ()
    description: Optional[str] = None

    def matches(self, path: str) -> bool:
        """Return ``True`` if *path* is one of this rule's literal paths."""
        return path in self.paths

    def to_resource(self) -> Resource:
        """Materialize the rule as a synthetic :class:`Resource`."""
        return Resource(
            name=self.name,
            description=self.description,
            section_id=self.parent_section_id,
        )


# --- Description ---


class Tag(BaseModel):
    """An OpenAPI *Tag Object* with the navigation extensions.

    ``x-id`` marks a section (a root of the navigation tree); ``x-section-id``
    marks a resource and names its parent section. The two are mutually
    exclusive. Tags declaring neither are plain tags.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str
    description: Optional[str] = None
    section_key: Optional[str] = Field(default=None, alias="x-id")
    parent_section_key: Optional[str] = Field(default=None, alias="x-section-id")

    @model_validator(mode="after")
    def _check_exclusive(self) -> Tag:
        if self.section_key is not None and self.parent_section_key is not None:
            raise ValueError(
                f"tag '{self.name}' declares both x-id and x-section-id"
            )
        return self

    def as_category(self) -> Optional[CategoryRecord]:
        """Return the tag as a :class:`Section` or :class:`Resource`, if it is one."""
        if self.section_key is not None:
            return Section(
                name=self.name, description=self.description, id=self.section_key
            )
        if self.parent_section_key is not None:
            return Resource(
                name=self.name,
                description=self.description,
                section_id=self.parent_section_key,
            )
        return None


class ApiDescription(BaseModel):
    """A fully dereferenced OpenAPI 3.x document.

    Produced by :func:`~apicatalog.parser.parse_description`. ``paths`` keeps
    the document's insertion order for both paths and verbs; that order is the
    default display order of operations within a category.
    """

    model_config = ConfigDict(frozen=True)

    openapi: str
    info: dict[str, Any] = Field(default_factory=dict)
    servers: list[dict[str, Any]] = Field(default_factory=list)
    paths: dict[str, dict[str, Any]] = Field(default_factory=dict)
    tags: list[Tag] = Field(default_factory=list)
    components: dict[str, Any] = Field(default_factory=dict)
    security: list[dict[str, list[str]]] = Field(default_factory=list)

    @property
    def title(self) -> str:
        return self.info.get("title", "Untitled API")


# --- Catalog ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterKind(str, enum.Enum):
    """Scalar parameter kinds that receive an initial editable value.

    ``OTHER`` covers every schema type without a default rule (numbers,
    arrays, objects, missing schemas); parameters of that kind are left
    untouched by :meth:`OperationParameter.apply_default`.
    """

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    OTHER = "other"

    @classmethod
    def from_schema(cls, schema: Any) -> ParameterKind:
        """Derive the kind from a parameter's JSON Schema.

        OpenAPI 3.1 type arrays (``["integer", "null"]``) use their first
        non-null entry.
        """
        if not isinstance(schema, dict):
            return cls.OTHER
        type_value = schema.get("type")
        if isinstance(type_value, list):
            non_null = [t for t in type_value if t != "null"]
            type_value = non_null[0] if non_null else None
        try:
            return cls(type_value)
        except ValueError:
            return cls.OTHER


class OperationParameter(BaseModel):
    """A parameter of an :class:`Operation`, with its editable ``value``.

    ``value`` stays ``None`` until :meth:`apply_default` runs; an optional
    integer keeps ``None`` afterwards, meaning "absent".
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    location: str = Field(default="query", alias="in")
    required: bool = False
    description: Optional[str] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    kind: ParameterKind = ParameterKind.OTHER
    value: Any = None

    def apply_default(self) -> None:
        if self.kind is ParameterKind.STRING:
            self.value = ""
        elif self.kind is ParameterKind.INTEGER:
            self.value = 0 if self.required else None
        elif self.kind is ParameterKind.BOOLEAN:
            self.value = False


class Operation(BaseModel):
    """A single API operation (one path + verb pair) in the catalog.

    ``categories`` is ordered; the first entry is the primary (owning)
    category, which may differ from the description's ``tags[0]`` when the
    subsection classifier reassigned an umbrella route.
    """

    verb: HTTPMethod
    path: str
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    parameters: list[OperationParameter] = Field(default_factory=list)
    request_body: Optional[dict[str, Any]] = None
    responses: dict[str, Any] = Field(default_factory=dict)
    security: Optional[list[dict[str, list[str]]]] = None
    deprecated: bool = False
    categories: list[str] = Field(default_factory=list)
    defaults_applied: bool = Field(default=False, exclude=True)

    @property
    def primary_category(self) -> Optional[str]:
        return self.categories[0] if self.categories else None

    def apply_defaults(self) -> Operation:
        """Give every parameter its initial value, once.

        Later calls are no-ops, so values edited after the first call are
        preserved.

        Returns:
            The operation itself.
        """
        if not self.defaults_applied:
            for param in self.parameters:
                param.apply_default()
            self.defaults_applied = True
        return self


class Section(BaseModel):
    """A top-level navigation group (a tag declaring ``x-id``)."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: Optional[str] = None
    id: str


class Resource(BaseModel):
    """A navigation group nested under a :class:`Section`."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: Optional[str] = None
    section_id: str


CategoryRecord = Union[Section, Resource]


class RulesetInconsistency(BaseModel):
    """An umbrella-category operation whose path matched no subsection rule."""

    model_config = ConfigDict(frozen=True)

    umbrella: str
    path: str
    verb: HTTPMethod
    operation_id: Optional[str] = None

    def __str__(self) -> str:
        op = self.operation_id or "<no operationId>"
        return (
            f"{self.verb.value.upper()} {self.path} ({op}) is tagged "
            f"'{self.umbrella}' but matches no subsection rule"
        )
