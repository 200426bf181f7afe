"""Schema evolution heuristics.

Scores how easily a component schema can grow (``extensibility``) and how
likely a change to it breaks clients (``breaking_change_risk``). These are
advisory signals computed from a handful of keywords on the top-level schema
node; they say nothing about whether the schema is valid.
"""

from __future__ import annotations

from typing import Any, Optional

from apiscope.exceptions import NotFoundError
from apiscope.models import (
    EvolutionReport,
    SchemaEvolution,
    SpecDocument,
    VersioningStrategy,
)
from apiscope.schema import required_names

LOW, MEDIUM, HIGH = "low", "medium", "high"


def assess_extensibility(schema: dict[str, Any]) -> str:
    """``additionalProperties: true`` +2, schema-valued +1, ``oneOf``/``anyOf`` +2,
    ``allOf`` +1. Three or more is high, one or more medium."""
    score = 0
    additional = schema.get("additionalProperties")
    if additional is True:
        score += 2
    elif isinstance(additional, dict):
        score += 1
    if schema.get("oneOf") or schema.get("anyOf"):
        score += 2
    if schema.get("allOf"):
        score += 1

    if score >= 3:
        return HIGH
    if score >= 1:
        return MEDIUM
    return LOW


def assess_breaking_change_risk(schema: dict[str, Any]) -> str:
    """Non-empty ``required`` +2, ``additionalProperties: false`` +2, ``enum`` +1,
    ``pattern`` +1, any numeric bound +1. Four or more is high, two or more
    medium."""
    risk = 0
    if required_names(schema):
        risk += 2
    if schema.get("additionalProperties") is False:
        risk += 2
    if schema.get("enum"):
        risk += 1
    if schema.get("pattern"):
        risk += 1
    if schema.get("minimum") is not None or schema.get("maximum") is not None:
        risk += 1

    if risk >= 4:
        return HIGH
    if risk >= 2:
        return MEDIUM
    return LOW


def suggest_versioning_strategy(schema: dict[str, Any]) -> VersioningStrategy:
    recommendations = []
    if required_names(schema):
        recommendations.append(
            "Consider making new fields optional to maintain backward compatibility"
        )
    if schema.get("additionalProperties") is False:
        recommendations.append(
            "Strict schema - consider versioning when adding new properties"
        )
    if schema.get("enum"):
        recommendations.append(
            "Enum values - additions are usually safe, removals require major version"
        )

    strategy = (
        "minor-version-friendly"
        if assess_extensibility(schema) == HIGH
        else "requires-careful-versioning"
    )
    return VersioningStrategy(strategy=strategy, recommendations=recommendations)


def evolution_recommendations(schema: dict[str, Any]) -> list[str]:
    recommendations = []
    if not schema.get("description"):
        recommendations.append("Add comprehensive description for better documentation")
    if schema.get("type") == "object" and not schema.get("additionalProperties"):
        recommendations.append(
            "Consider allowing additionalProperties for future extensibility"
        )
    if len(required_names(schema)) > 3:
        recommendations.append(
            "High number of required fields may make evolution difficult"
        )
    if "example" not in schema and "examples" not in schema:
        recommendations.append("Add examples to help with testing and documentation")
    return recommendations


def analyze_schema(
    name: str, schema: dict[str, Any], suggest_versioning: bool = True
) -> SchemaEvolution:
    return SchemaEvolution(
        schema_name=name,
        extensibility=assess_extensibility(schema),
        breaking_change_risk=assess_breaking_change_risk(schema),
        versioning_strategy=(
            suggest_versioning_strategy(schema) if suggest_versioning else None
        ),
        evolution_recommendations=evolution_recommendations(schema),
    )


def assess_evolution(
    document: SpecDocument,
    schema_name: Optional[str] = None,
    suggest_versioning: bool = True,
) -> EvolutionReport:
    """Analyze one named schema, or every component schema.

    Raises:
        NotFoundError: If *schema_name* is given but not defined.
    """
    schemas = document.schemas
    if schema_name is not None:
        if schema_name not in schemas:
            raise NotFoundError(f"Schema '{schema_name}' not found.")
        targets = {schema_name: schemas[schema_name]}
    else:
        targets = schemas

    analyses = [
        analyze_schema(name, schema if isinstance(schema, dict) else {}, suggest_versioning)
        for name, schema in targets.items()
    ]
    return EvolutionReport(
        total_schemas=len(analyses),
        high_risk_schemas=sum(1 for a in analyses if a.breaking_change_risk == HIGH),
        recommendations_count=sum(len(a.evolution_recommendations) for a in analyses),
        analyses=analyses,
    )
