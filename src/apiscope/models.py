"""Canonical Pydantic models shared across all apiscope modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`OutputConfig`, :class:`CacheConfig`, :class:`AnalysisConfig` and
    :class:`AppConfig`.

**Document models** -- produced by the parser subsystem:
    :class:`SpecDocument` (the normalized OpenAPI 3 document) and
    :class:`EndpointRecord` (one per path + method pair).

**Analysis results** -- returned by :mod:`apiscope.analysis`:
    dependency reports, unused-schema reports, evolution reports, property
    matches, example violations, auth patterns, analytics and lint reports.

Result models dump with camelCase keys (``model_dump(by_alias=True)``) so
that JSON output reads like the OpenAPI documents it describes, while Python
code uses snake_case attributes.
"""

from __future__ import annotations

import enum
from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from apiscope.exceptions import UnsupportedOptionError


class _CamelModel(BaseModel):
    """Base for result models: snake_case attributes, camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Configuration ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`AppConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class CacheConfig(BaseModel):
    """Cache settings for specs fetched over HTTP."""

    enabled: bool = Field(default=True, description="Cache fetched spec text")
    ttl_seconds: int = Field(default=3600, description="Cache TTL in seconds")


class AnalysisConfig(BaseModel):
    """Defaults for analysis commands when the CLI flag is omitted."""

    dependency_depth: int = Field(
        default=5, description="Maximum depth for dependency traversal"
    )
    mock_count: int = Field(default=3, description="Number of mock items to generate")
    realistic_mock: bool = Field(
        default=True, description="Use field-name heuristics for mock strings"
    )
    search_limit: int = Field(
        default=20, description="Maximum endpoints shown by search results"
    )


class AppConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/apiscope/config.json``.

    Loaded and saved by :func:`~apiscope.config.load_app_config` and
    :func:`~apiscope.config.save_app_config`. See
    :func:`~apiscope.config.resolve_config` for the precedence chain.
    """

    default_spec: Optional[str] = Field(
        default=None, description="Spec source used when --spec is omitted"
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)


# --- Document ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised on a path item, in extraction order."""

    GET = "get"
    POST = "post"
    PUT = "put"
    DELETE = "delete"
    PATCH = "patch"
    OPTIONS = "options"
    HEAD = "head"
    TRACE = "trace"


class Complexity(str, enum.Enum):
    """Heuristic complexity bucket of an endpoint."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ResponseTime(str, enum.Enum):
    """Heuristic response-time bucket of an endpoint."""

    FAST = "fast"
    MEDIUM = "medium"
    SLOW = "slow"


class SpecDocument(BaseModel):
    """A loaded document in canonical OpenAPI 3 shape.

    Swagger 2.0 input is converted by
    :func:`~apiscope.parser.normalizer.normalize_swagger2` before this model
    is built, so every consumer sees the same layout. ``source_version``
    keeps the version string the document declared originally.
    """

    model_config = ConfigDict(frozen=True)

    openapi: str
    info: dict[str, Any] = Field(default_factory=dict)
    servers: list[dict[str, Any]] = Field(default_factory=list)
    paths: dict[str, Any] = Field(default_factory=dict)
    components: dict[str, Any] = Field(default_factory=dict)
    security: list[dict[str, Any]] = Field(default_factory=list)
    tags: list[dict[str, Any]] = Field(default_factory=list)
    source_version: Optional[str] = None

    @property
    def title(self) -> str:
        return self.info.get("title") or "API"

    @property
    def version(self) -> str:
        return str(self.info.get("version", ""))

    @property
    def schemas(self) -> dict[str, Any]:
        """The ``components.schemas`` mapping (empty when absent)."""
        return self.components.get("schemas") or {}

    @property
    def security_schemes(self) -> dict[str, Any]:
        """The ``components.securitySchemes`` mapping (empty when absent)."""
        return self.components.get("securitySchemes") or {}


class EndpointRecord(_CamelModel):
    """A single path + HTTP method pair with its derived metrics.

    Built by :func:`~apiscope.parser.extractor.extract_endpoints` and never
    modified afterwards. ``parameters`` holds path-level parameters first,
    followed by operation-level ones, without de-duplication.
    """

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    id: str
    path: str
    method: HTTPMethod
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    parameters: list[dict[str, Any]] = Field(default_factory=list)
    request_body: Optional[dict[str, Any]] = None
    responses: dict[str, dict[str, Any]] = Field(default_factory=dict)
    security: list[dict[str, Any]] = Field(
        default_factory=list, description="Effective security requirements"
    )
    deprecated: bool = False
    path_segments: list[str] = Field(default_factory=list)
    has_path_params: bool = False
    has_query_params: bool = False
    has_request_body: bool = False
    response_types: list[str] = Field(default_factory=list)
    complexity: Complexity = Complexity.LOW
    estimated_response_time: ResponseTime = ResponseTime.MEDIUM
    business_context: str = ""
    ai_suggestions: list[str] = Field(default_factory=list)

    @property
    def label(self) -> str:
        """``"GET /pets/{id}"`` style display label."""
        return f"{self.method.value.upper()} {self.path}"


# --- Search ---


class EndpointFilters(BaseModel):
    """Endpoint search criteria. Unset fields do not filter; set ones are ANDed."""

    query: Optional[str] = None
    methods: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    complexity: list[Complexity] = Field(default_factory=list)
    deprecated: Optional[bool] = None
    has_parameters: Optional[bool] = None
    has_request_body: Optional[bool] = None


# --- Schema graph ---


class Direction(str, enum.Enum):
    """Which side of the reference graph a dependency trace follows."""

    DEPENDENCIES = "dependencies"
    DEPENDENTS = "dependents"
    BOTH = "both"


class DependencyNode(_CamelModel):
    """One node of a dependency tree.

    ``circular`` marks a name already present on the path from the root;
    such nodes are leaves. ``missing`` marks a reference to a schema that is
    not defined in ``components.schemas``.
    """

    name: str
    circular: bool = False
    missing: bool = False
    dependencies: Optional[list[DependencyNode]] = None


class DependencyReport(_CamelModel):
    """Result of :func:`~apiscope.analysis.graph.trace_dependencies`."""

    schema_name: str
    direction: Direction
    dependencies: Optional[list[str]] = None
    dependents: Optional[list[str]] = None
    tree: Optional[DependencyNode] = None


class UnusedSchemaReport(_CamelModel):
    """Result of :func:`~apiscope.analysis.graph.find_unused_schemas`."""

    total: int
    used: list[str] = Field(default_factory=list)
    unused: list[str] = Field(default_factory=list)
    usage_percentage: int = 0
    missing_references: list[str] = Field(default_factory=list)

    @property
    def unused_count(self) -> int:
        return len(self.unused)


class VersioningStrategy(_CamelModel):
    strategy: str
    recommendations: list[str] = Field(default_factory=list)


class SchemaEvolution(_CamelModel):
    """Advisory evolution heuristics for one schema. Not a validation result."""

    schema_name: str
    extensibility: str
    breaking_change_risk: str
    versioning_strategy: Optional[VersioningStrategy] = None
    evolution_recommendations: list[str] = Field(default_factory=list)


class EvolutionReport(_CamelModel):
    total_schemas: int
    high_risk_schemas: int
    recommendations_count: int
    analyses: list[SchemaEvolution] = Field(default_factory=list)


# --- Property search ---


class PropertyCriteria(BaseModel):
    """Deep property search filters; every supplied filter must match."""

    name: Optional[str] = Field(default=None, description="Case-insensitive substring")
    type: Optional[str] = Field(default=None, description="Exact declared type")
    pattern: Optional[str] = Field(
        default=None, description="Regex matched against description or name"
    )
    required: Optional[bool] = None
    methods: list[str] = Field(default_factory=list)


class PropertyMatch(_CamelModel):
    endpoint: str
    media_type: str
    property_name: str
    property_type: str
    path: str
    required: bool = False
    description: Optional[str] = None
    format: Optional[str] = None
    example: Any = None
    enum: Optional[list[Any]] = None
    ref: Optional[str] = None


# --- Example validation ---


class Violation(_CamelModel):
    """One discrete mismatch between an example value and its schema."""

    path: str
    message: str
    expected: Optional[str] = None
    actual: Optional[str] = None


class ExampleViolation(Violation):
    """A :class:`Violation` located at a specific endpoint media type."""

    endpoint: str
    source: str = Field(description="request or response")
    media_type: str
    status_code: Optional[str] = None
    example_name: Optional[str] = None


# --- Security patterns ---


class SecuritySchemeSummary(_CamelModel):
    name: str
    type: str
    description: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)


class EndpointSecurity(_CamelModel):
    endpoint: str
    security: list[dict[str, Any]] = Field(default_factory=list)
    auth_required: bool = False
    auth_options: list[str] = Field(default_factory=list)


class ScopeAnalysis(_CamelModel):
    total_scopes: int
    scope_usage: dict[str, list[str]] = Field(default_factory=dict)
    unused_scopes: list[str] = Field(default_factory=list)


class AuthPatternReport(_CamelModel):
    security_schemes: list[SecuritySchemeSummary] = Field(default_factory=list)
    global_security: list[dict[str, Any]] = Field(default_factory=list)
    endpoint_security: Optional[list[EndpointSecurity]] = None
    scope_analysis: Optional[ScopeAnalysis] = None
    recommendations: list[str] = Field(default_factory=list)


# --- Analytics ---


class ApiAnalytics(_CamelModel):
    total_endpoints: int = 0
    method_distribution: dict[str, int] = Field(default_factory=dict)
    tag_distribution: dict[str, int] = Field(default_factory=dict)
    complexity_distribution: dict[str, int] = Field(default_factory=dict)
    response_code_distribution: dict[str, int] = Field(default_factory=dict)
    deprecated_count: int = 0
    security_schemes: list[str] = Field(default_factory=list)
    average_parameters_per_endpoint: float = 0.0
    path_patterns: list[str] = Field(default_factory=list)


class ApiOverview(_CamelModel):
    title: str
    version: str
    openapi_version: str
    description: Optional[str] = None
    servers: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    methods: list[str] = Field(default_factory=list)
    status_codes: list[str] = Field(default_factory=list)
    analytics: ApiAnalytics


class DesignFocus(str, enum.Enum):
    SECURITY = "security"
    PERFORMANCE = "performance"
    DESIGN = "design"
    DOCUMENTATION = "documentation"
    ALL = "all"


class DesignReport(_CamelModel):
    focus: DesignFocus
    recommendations: list[str] = Field(default_factory=list)
    total_endpoints: int = 0
    security_coverage: float = 0.0
    documentation_coverage: float = 0.0
    tag_coverage: float = 0.0


# --- Generators ---


class CodeLanguage(str, enum.Enum):
    CURL = "curl"
    JAVASCRIPT = "javascript"
    PYTHON = "python"
    TYPESCRIPT = "typescript"


class DocFormat(str, enum.Enum):
    MARKDOWN = "markdown"
    JSON = "json"
    SUMMARY = "summary"


class MockFormat(str, enum.Enum):
    JSON = "json"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"


class TypeExportFormat(str, enum.Enum):
    INDIVIDUAL = "individual"
    MERGED = "merged"


DependencyNode.model_rebuild()


_E = TypeVar("_E", bound=enum.Enum)


def coerce_option(enum_cls: type[_E], value: Any, option: str) -> _E:
    """Convert *value* to a member of *enum_cls*.

    Members pass through unchanged; strings are matched case-insensitively
    against member values.

    Raises:
        UnsupportedOptionError: If *value* is not one of the enum's values.
    """
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        for member in enum_cls:
            if member.value == value.lower():
                return member
    raise UnsupportedOptionError(option, value, [m.value for m in enum_cls])
