"""Documentation export in markdown, JSON or a short summary.

Markdown and summary output is rendered from the Jinja2 templates in
``analysis/templates/``; JSON is built directly.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from jinja2 import Environment, FileSystemLoader, select_autoescape

from apiscope.analysis.analytics import generate_analytics
from apiscope.analysis.codegen import generate_code_example
from apiscope.models import DocFormat, EndpointRecord, SpecDocument, coerce_option

TEMPLATE_DIR = Path(__file__).parent / "templates"


def _create_jinja_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(disabled_extensions=("md.j2",)),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _summary(document: SpecDocument, records: list[EndpointRecord]) -> str:
    template = _create_jinja_env().get_template("summary.md.j2")
    return template.render(
        document=document, endpoints=records, analytics=generate_analytics(records)
    )


def _json(document: SpecDocument, records: list[EndpointRecord], include_analytics: bool) -> str:
    data: dict[str, Any] = {
        "api": {
            "title": document.title,
            "version": document.version,
            "description": document.info.get("description"),
        },
        "endpoints": [
            {
                "method": record.method.value.upper(),
                "path": record.path,
                "summary": record.summary,
                "description": record.description,
                "tags": record.tags,
                "deprecated": record.deprecated,
                "complexity": record.complexity.value,
                "parameters": len(record.parameters),
                "hasRequestBody": record.has_request_body,
                "responseCodes": list(record.responses),
            }
            for record in records
        ],
    }
    if include_analytics:
        data["analytics"] = generate_analytics(records).model_dump(by_alias=True)
    return json.dumps(data, indent=2)


def _markdown(
    document: SpecDocument,
    records: list[EndpointRecord],
    include_examples: bool,
    include_analytics: bool,
) -> str:
    examples = []
    if include_examples:
        examples = [generate_code_example(record, "curl") for record in records]
    template = _create_jinja_env().get_template("reference.md.j2")
    return template.render(
        document=document,
        description=document.info.get("description"),
        endpoints=records,
        examples=examples,
        analytics=generate_analytics(records) if include_analytics else None,
    )


def export_documentation(
    document: SpecDocument,
    records: Iterable[EndpointRecord],
    fmt: DocFormat | str = DocFormat.MARKDOWN,
    include_examples: bool = True,
    include_analytics: bool = False,
) -> str:
    """Render documentation for the whole API.

    ``summary`` ignores both include flags; ``json`` ignores
    *include_examples*.

    Raises:
        UnsupportedOptionError: If *fmt* is not a known format.
    """
    fmt = coerce_option(DocFormat, fmt, "format")
    records = list(records)
    if fmt is DocFormat.SUMMARY:
        return _summary(document, records)
    if fmt is DocFormat.JSON:
        return _json(document, records, include_analytics)
    return _markdown(document, records, include_examples, include_analytics)
