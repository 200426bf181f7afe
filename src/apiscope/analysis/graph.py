"""Schema reference graph: dependency traces, dependency trees, unused schemas.

Edges are ``$ref`` pointers into ``#/components/schemas``. All functions are
read-only over the document and terminate on cyclic graphs: closures track
which names were already expanded, trees mark a name that reappears on its
own branch as ``circular``, and every walk is bounded by a depth budget.
"""

from __future__ import annotations

import logging
from typing import Any

from apiscope.exceptions import NotFoundError
from apiscope.models import (
    DependencyNode,
    DependencyReport,
    Direction,
    SpecDocument,
    UnusedSchemaReport,
    coerce_option,
)
from apiscope.schema import DEFAULT_REF_DEPTH, direct_refs, iter_refs

logger = logging.getLogger(__name__)


def dependency_closure(
    schemas: dict[str, Any], name: str, depth: int = DEFAULT_REF_DEPTH
) -> list[str]:
    """Names reachable from schema *name* in at most *depth* ``$ref`` hops.

    Names are listed in breadth-first discovery order. A reference to an
    undefined schema is listed but not expanded. A schema that references
    itself, directly or through others, lists its own name.
    """
    found: dict[str, None] = {}
    expanded = {name}
    frontier = [schemas.get(name)]
    for _ in range(depth):
        next_frontier = []
        for body in frontier:
            for ref in direct_refs(body):
                found.setdefault(ref)
                if ref in schemas and ref not in expanded:
                    expanded.add(ref)
                    next_frontier.append(schemas[ref])
        if not next_frontier:
            break
        frontier = next_frontier
    return list(found)


def find_dependents(
    schemas: dict[str, Any], name: str, depth: int = DEFAULT_REF_DEPTH
) -> list[str]:
    """Other schemas whose dependency closure contains *name*.

    Each candidate's closure is recomputed on every call.
    """
    return [
        other
        for other in schemas
        if other != name and name in dependency_closure(schemas, other, depth)
    ]


def build_dependency_tree(
    schemas: dict[str, Any],
    name: str,
    max_depth: int = DEFAULT_REF_DEPTH,
    visited: frozenset[str] = frozenset(),
    depth: int = 0,
) -> DependencyNode:
    """Recursive ``{name, dependencies}`` tree rooted at *name*.

    A name already on the path from the root becomes a ``circular`` leaf, an
    undefined name a ``missing`` leaf. Nodes at *max_depth* are leaves
    without ``dependencies``.
    """
    if name in visited:
        return DependencyNode(name=name, circular=True)
    if name not in schemas:
        return DependencyNode(name=name, missing=True)
    if depth >= max_depth:
        return DependencyNode(name=name)

    branch = visited | {name}
    return DependencyNode(
        name=name,
        dependencies=[
            build_dependency_tree(schemas, ref, max_depth, branch, depth + 1)
            for ref in direct_refs(schemas[name])
        ],
    )


def trace_dependencies(
    document: SpecDocument,
    schema_name: str,
    direction: Direction | str = Direction.BOTH,
    depth: int = DEFAULT_REF_DEPTH,
) -> DependencyReport:
    """Trace what *schema_name* references and what references it.

    Args:
        document: The loaded document.
        schema_name: A key of ``components.schemas``.
        direction: ``dependencies``, ``dependents`` or ``both``.
        depth: ``$ref`` hop budget for closures and the tree.

    Returns:
        A :class:`DependencyReport`. ``dependencies`` and ``tree`` are set
        unless *direction* is ``dependents``; ``dependents`` is set unless
        *direction* is ``dependencies``.

    Raises:
        UnsupportedOptionError: If *direction* is not a known value.
        NotFoundError: If *schema_name* is not defined.
    """
    direction = coerce_option(Direction, direction, "direction")
    schemas = document.schemas
    if schema_name not in schemas:
        raise NotFoundError(f"Schema '{schema_name}' not found.")

    report = DependencyReport(schema_name=schema_name, direction=direction)
    if direction is not Direction.DEPENDENTS:
        report.dependencies = dependency_closure(schemas, schema_name, depth)
        report.tree = build_dependency_tree(schemas, schema_name, depth)
    if direction is not Direction.DEPENDENCIES:
        report.dependents = find_dependents(schemas, schema_name, depth)
    return report


def find_unused_schemas(
    document: SpecDocument, include_indirect: bool = True
) -> UnusedSchemaReport:
    """Report component schemas that nothing references.

    Every schema ``$ref`` under ``paths`` and ``components`` counts as a use.
    With *include_indirect*, bodies of referenced schemas are re-scanned
    until no new names appear.

    ``usage_percentage`` is ``used / total * 100`` rounded half up; a
    document without schemas reports 0.
    """
    schemas = document.schemas
    referenced = set(iter_refs(document.paths))
    referenced.update(iter_refs(document.components))

    if include_indirect:
        scanned: set[str] = set()
        pending = referenced - scanned
        while pending:
            for name in pending:
                scanned.add(name)
                if name in schemas:
                    referenced.update(iter_refs(schemas[name]))
            pending = referenced - scanned

    used = sorted(name for name in schemas if name in referenced)
    unused = sorted(name for name in schemas if name not in referenced)
    missing = sorted(referenced - set(schemas))
    total = len(schemas)
    percentage = (200 * len(used) + total) // (2 * total) if total else 0

    if missing:
        logger.debug("References to undefined schemas: %s", ", ".join(missing))

    return UnusedSchemaReport(
        total=total,
        used=used,
        unused=unused,
        usage_percentage=percentage,
        missing_references=missing,
    )
