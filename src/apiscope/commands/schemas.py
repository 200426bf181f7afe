"""Schema commands -- ``apiscope schemas ...``.

Dependency tracing, unused-schema detection, evolution heuristics, request
property search, example validation, mock data and TypeScript types.
"""

from __future__ import annotations

import random
from typing import List, Optional

import typer

from apiscope.analysis.codegen import generate_typescript_types
from apiscope.analysis.evolution import assess_evolution
from apiscope.analysis.examples import validate_examples
from apiscope.analysis.graph import find_unused_schemas, trace_dependencies
from apiscope.analysis.mock import generate_mock, render_mock
from apiscope.analysis.properties import search_properties
from apiscope.commands import load_session, spec_option
from apiscope.models import MockFormat, PropertyCriteria, coerce_option
from apiscope.output import OutputFormat, get_output, info, success, warning

schemas_app = typer.Typer(no_args_is_help=True)


@schemas_app.command("deps")
def schema_deps(
    name: str = typer.Argument(help="Schema name in components.schemas."),
    spec: Optional[str] = spec_option(),
    direction: str = typer.Option(
        "both", "--direction", "-d", help="dependencies, dependents or both."
    ),
    depth: Optional[int] = typer.Option(
        None, "--depth", help="$ref hop budget (default from config)."
    ),
) -> None:
    """Trace what a schema references and what references it."""
    session, config = load_session(spec)
    get_output().emit(
        trace_dependencies(
            session.document,
            name,
            direction=direction,
            depth=depth if depth is not None else config.analysis.dependency_depth,
        )
    )


@schemas_app.command("unused")
def schema_unused(
    spec: Optional[str] = spec_option(),
    indirect: bool = typer.Option(
        True, "--indirect/--direct-only", help="Count schemas reached through other schemas."
    ),
) -> None:
    """List component schemas nothing references."""
    session, _ = load_session(spec)
    report = find_unused_schemas(session.document, include_indirect=indirect)
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.emit(report)
        return
    for name in report.unused:
        output.print_data(name)
    info(
        f"{report.unused_count} of {report.total} schemas unused "
        f"({report.usage_percentage}% used)"
    )
    if report.missing_references:
        warning(f"Undefined schemas referenced: {', '.join(report.missing_references)}")


@schemas_app.command("evolution")
def schema_evolution(
    name: Optional[str] = typer.Argument(None, help="Schema name; all schemas when omitted."),
    spec: Optional[str] = spec_option(),
    versioning: bool = typer.Option(
        True, "--versioning/--no-versioning", help="Suggest a versioning strategy."
    ),
) -> None:
    """Rate extensibility and breaking-change risk of schemas."""
    session, _ = load_session(spec)
    get_output().emit(
        assess_evolution(session.document, schema_name=name, suggest_versioning=versioning)
    )


@schemas_app.command("properties")
def schema_properties(
    spec: Optional[str] = spec_option(),
    name: Optional[str] = typer.Option(None, "--name", help="Substring of the property name."),
    type_: Optional[str] = typer.Option(None, "--type", help="Exact property type."),
    pattern: Optional[str] = typer.Option(
        None, "--pattern", help="Regex over description or name."
    ),
    required: Optional[bool] = typer.Option(
        None, "--required/--optional", help="Filter on requiredness."
    ),
    methods: Optional[List[str]] = typer.Option(
        None, "--method", "-m", help="Restrict to HTTP method (repeatable)."
    ),
) -> None:
    """Search request-body properties across all endpoints."""
    session, _ = load_session(spec)
    criteria = PropertyCriteria(
        name=name, type=type_, pattern=pattern, required=required, methods=methods or []
    )
    matches = search_properties(session.document, session.endpoints, criteria)
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.emit(matches)
        return
    output.print_table(
        ["Endpoint", "Path", "Type", "Required", "Description"],
        [
            [m.endpoint, m.path, m.property_type, "yes" if m.required else "", m.description]
            for m in matches
        ],
        title=f"Properties ({len(matches)})",
    )


@schemas_app.command("examples")
def schema_examples(
    spec: Optional[str] = spec_option(),
    endpoint: Optional[str] = typer.Option(
        None, "--endpoint", "-e", help="Only this endpoint (METHOD:/path)."
    ),
    strict: bool = typer.Option(False, "--strict", help="Flag undeclared properties."),
) -> None:
    """Validate request and response examples against their schemas."""
    session, _ = load_session(spec)
    violations = validate_examples(
        session.document, session.endpoints, endpoint=endpoint, strict=strict
    )
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.emit(violations)
        return
    if not violations:
        success("All examples match their schemas.")
        return
    output.print_table(
        ["Endpoint", "Source", "Status", "Path", "Message"],
        [
            [v.endpoint, v.source, v.status_code, v.path, v.message]
            for v in violations
        ],
        title=f"Example violations ({len(violations)})",
    )


@schemas_app.command("mock")
def schema_mock(
    name: Optional[str] = typer.Argument(None, help="Schema name."),
    spec: Optional[str] = spec_option(),
    endpoint: Optional[str] = typer.Option(
        None, "--endpoint", "-e", help="Use this endpoint's request body (METHOD:/path)."
    ),
    count: Optional[int] = typer.Option(
        None, "--count", "-c", min=1, help="Number of items (default from config)."
    ),
    fmt: str = typer.Option(
        MockFormat.JSON.value, "--format", "-f", help="json, javascript or typescript."
    ),
    realistic: Optional[bool] = typer.Option(
        None, "--realistic/--no-realistic", help="Field-name based strings."
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for repeatable output."),
) -> None:
    """Generate mock data for a schema or an endpoint's request body."""
    session, config = load_session(spec)
    fmt = coerce_option(MockFormat, fmt, "format")
    data = generate_mock(
        session.document,
        session.endpoints,
        schema_name=name,
        endpoint=endpoint,
        count=count if count is not None else config.analysis.mock_count,
        realistic=realistic if realistic is not None else config.analysis.realistic_mock,
        rng=random.Random(seed) if seed is not None else None,
    )
    output = get_output()
    if fmt is MockFormat.JSON and output.format == OutputFormat.JSON:
        output.emit(data)
        return
    language = "json" if fmt is MockFormat.JSON else fmt.value
    output.print_text(render_mock(data, fmt, type_name=name or "MockData"), language)


@schemas_app.command("types")
def schema_types(
    name: Optional[str] = typer.Argument(None, help="Only this component schema."),
    spec: Optional[str] = spec_option(),
    export_format: str = typer.Option(
        "individual", "--format", "-f", help="individual or merged."
    ),
    requests: bool = typer.Option(
        True, "--requests/--no-requests", help="Include inline request bodies."
    ),
    responses: bool = typer.Option(
        True, "--responses/--no-responses", help="Include inline responses."
    ),
    validation: bool = typer.Option(
        False, "--validation", help="Add class-validator decorators."
    ),
) -> None:
    """Generate TypeScript declarations from the schemas."""
    session, _ = load_session(spec)
    text = generate_typescript_types(
        session.document,
        session.endpoints,
        schema_name=name,
        include_request_bodies=requests,
        include_responses=responses,
        export_format=export_format,
        add_validation=validation,
    )
    get_output().print_text(text, "typescript")
