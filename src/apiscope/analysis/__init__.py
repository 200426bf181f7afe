"""Queries over a loaded document.

Every function here takes the :class:`~apiscope.models.SpecDocument` and/or
its endpoint records explicitly and returns plain data (pydantic models,
lists, strings). None of them touch the session, the filesystem or the
network.

Sub-modules:

* :mod:`~apiscope.analysis.search` -- endpoint filters.
* :mod:`~apiscope.analysis.graph` -- schema dependencies and unused schemas.
* :mod:`~apiscope.analysis.evolution` -- extensibility and breaking-change risk.
* :mod:`~apiscope.analysis.properties` -- request-body property search.
* :mod:`~apiscope.analysis.examples` -- example validation.
* :mod:`~apiscope.analysis.mock` -- mock data.
* :mod:`~apiscope.analysis.security` -- auth patterns.
* :mod:`~apiscope.analysis.analytics` -- statistics, overview, design lint.
* :mod:`~apiscope.analysis.codegen` -- code examples and TypeScript types.
* :mod:`~apiscope.analysis.export` -- documentation export.
"""

from apiscope.analysis.analytics import build_overview, generate_analytics, validate_design
from apiscope.analysis.codegen import generate_code_example, generate_typescript_types
from apiscope.analysis.evolution import assess_evolution
from apiscope.analysis.examples import validate_example, validate_examples
from apiscope.analysis.export import export_documentation
from apiscope.analysis.graph import find_unused_schemas, trace_dependencies
from apiscope.analysis.mock import generate_mock, render_mock
from apiscope.analysis.properties import search_properties
from apiscope.analysis.search import find_endpoint, parse_endpoint_ref, search_endpoints
from apiscope.analysis.security import extract_auth_patterns

__all__ = [
    "assess_evolution",
    "build_overview",
    "export_documentation",
    "extract_auth_patterns",
    "find_endpoint",
    "find_unused_schemas",
    "generate_analytics",
    "generate_code_example",
    "generate_mock",
    "generate_typescript_types",
    "parse_endpoint_ref",
    "render_mock",
    "search_endpoints",
    "search_properties",
    "trace_dependencies",
    "validate_design",
    "validate_example",
    "validate_examples",
]
