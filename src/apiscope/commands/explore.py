"""Endpoint-level commands registered directly on the root app.

``overview``, ``endpoints``, ``endpoint``, ``analytics``, ``lint``, ``auth``,
``code`` and ``export``. Each one loads the spec named by ``--spec`` (or the
configured default), runs one analysis and renders the result.
"""

from __future__ import annotations

from typing import List, Optional

import typer

from apiscope.analysis.analytics import build_overview, generate_analytics, validate_design
from apiscope.analysis.codegen import generate_code_example
from apiscope.analysis.export import export_documentation
from apiscope.analysis.search import search_endpoints
from apiscope.analysis.security import extract_auth_patterns
from apiscope.commands import load_session, spec_option
from apiscope.models import (
    CodeLanguage,
    Complexity,
    DesignFocus,
    DocFormat,
    EndpointFilters,
    coerce_option,
)
from apiscope.output import OutputFormat, get_output, info

_SYNTAX = {
    CodeLanguage.CURL: "bash",
    CodeLanguage.JAVASCRIPT: "javascript",
    CodeLanguage.PYTHON: "python",
    CodeLanguage.TYPESCRIPT: "typescript",
}


def overview(spec: Optional[str] = spec_option()) -> None:
    """Show title, version, servers, tags and endpoint statistics."""
    session, _ = load_session(spec)
    get_output().emit(build_overview(session.document, session.endpoints))


def endpoints(
    spec: Optional[str] = spec_option(),
    query: Optional[str] = typer.Option(
        None, "--query", help="Substring of path, summary, description or tag."
    ),
    methods: Optional[List[str]] = typer.Option(
        None, "--method", "-m", help="HTTP method (repeatable)."
    ),
    tags: Optional[List[str]] = typer.Option(None, "--tag", "-t", help="Tag (repeatable)."),
    complexity: Optional[List[str]] = typer.Option(
        None, "--complexity", help="low, medium or high (repeatable)."
    ),
    deprecated: Optional[bool] = typer.Option(
        None, "--deprecated/--not-deprecated", help="Filter on deprecation."
    ),
    has_params: Optional[bool] = typer.Option(
        None, "--with-params/--without-params", help="Filter on parameter presence."
    ),
    has_body: Optional[bool] = typer.Option(
        None, "--with-body/--without-body", help="Filter on request body presence."
    ),
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", help="Maximum rows (default from config)."
    ),
) -> None:
    """Search endpoints. All given filters must match.

    Example::

        apiscope endpoints --spec petstore.yaml --method post --tag pets
    """
    session, config = load_session(spec)
    filters = EndpointFilters(
        query=query,
        methods=methods or [],
        tags=tags or [],
        complexity=[coerce_option(Complexity, c, "complexity") for c in complexity or []],
        deprecated=deprecated,
        has_parameters=has_params,
        has_request_body=has_body,
    )
    results = search_endpoints(session.endpoints, filters)
    total = len(results)
    results = results[: limit if limit is not None else config.analysis.search_limit]

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.emit(results)
    else:
        output.print_table(
            ["Method", "Path", "Summary", "Complexity", "Tags"],
            [
                [
                    r.method.value.upper(),
                    r.path,
                    r.summary or "-",
                    r.complexity.value,
                    ", ".join(r.tags),
                ]
                for r in results
            ],
            title=f"{session.document.title} -- Endpoints ({len(results)}/{total})",
        )
    if len(results) < total:
        info(f"Showing {len(results)} of {total} matches. Use --limit to see more.")


def endpoint(
    ref: str = typer.Argument(help="Endpoint as METHOD:/path, e.g. GET:/pets/{petId}."),
    spec: Optional[str] = spec_option(),
) -> None:
    """Show one endpoint with its parameters, body, responses and metrics."""
    session, _ = load_session(spec)
    get_output().emit(session.endpoint_by_ref(ref))


def analytics(spec: Optional[str] = spec_option()) -> None:
    """Show method, tag, complexity and status-code distributions."""
    session, _ = load_session(spec)
    get_output().emit(generate_analytics(session.endpoints))


def lint(
    spec: Optional[str] = spec_option(),
    focus: str = typer.Option(
        DesignFocus.ALL.value,
        "--focus",
        help="security, performance, design, documentation or all.",
    ),
) -> None:
    """Review the API design and print recommendations."""
    session, _ = load_session(spec)
    report = validate_design(session.endpoints, focus)
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.emit(report)
        return
    for recommendation in report.recommendations:
        output.print_data(f"- {recommendation}")
    info(
        f"Coverage: security {report.security_coverage}%, "
        f"documentation {report.documentation_coverage}%, tags {report.tag_coverage}%"
    )


def auth(
    spec: Optional[str] = spec_option(),
    endpoint_mapping: bool = typer.Option(
        True, "--endpoints/--no-endpoints", help="Include per-endpoint requirements."
    ),
    scopes: bool = typer.Option(
        True, "--scopes/--no-scopes", help="Include OAuth2 scope usage."
    ),
) -> None:
    """Summarize security schemes, endpoint requirements and scope usage."""
    session, _ = load_session(spec)
    get_output().emit(
        extract_auth_patterns(
            session.document,
            session.endpoints,
            include_endpoint_mapping=endpoint_mapping,
            analyze_scopes=scopes,
        )
    )


def code(
    ref: str = typer.Argument(help="Endpoint as METHOD:/path."),
    spec: Optional[str] = spec_option(),
    language: str = typer.Option(
        CodeLanguage.CURL.value,
        "--language",
        "-l",
        help="curl, javascript, python or typescript.",
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="Prefix for the path (default: first server URL)."
    ),
) -> None:
    """Print a request example for one endpoint."""
    session, _ = load_session(spec)
    record = session.endpoint_by_ref(ref)
    language = coerce_option(CodeLanguage, language, "language")
    if base_url is None and session.document.servers:
        base_url = session.document.servers[0].get("url")
    get_output().print_text(
        generate_code_example(record, language, base_url=base_url), _SYNTAX[language]
    )


def export(
    spec: Optional[str] = spec_option(),
    fmt: str = typer.Option(
        DocFormat.MARKDOWN.value, "--format", "-f", help="markdown, json or summary."
    ),
    examples: bool = typer.Option(
        True, "--examples/--no-examples", help="Include curl examples (markdown)."
    ),
    include_analytics: bool = typer.Option(
        False, "--analytics", help="Append analytics."
    ),
) -> None:
    """Export documentation for the whole API."""
    session, _ = load_session(spec)
    fmt = coerce_option(DocFormat, fmt, "format")
    text = export_documentation(
        session.document,
        session.endpoints,
        fmt=fmt,
        include_examples=examples,
        include_analytics=include_analytics,
    )
    output = get_output()
    if fmt is DocFormat.JSON:
        output.print_data(text)
    else:
        output.print_text(text, "markdown")


def register(app: typer.Typer) -> None:
    """Attach the endpoint commands to *app*."""
    for command in (overview, endpoints, endpoint, analytics, lint, auth, code, export):
        app.command(command.__name__)(command)
