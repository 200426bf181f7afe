"""Resolve ``$ref`` pointers and walk schema trees without looping forever.

Schema nodes are plain dicts exactly as parsed from the document. Each node
is classified into a :class:`SchemaKind` and walkers dispatch on that kind
through :meth:`SchemaWalker.visit`, so cycle and depth handling lives in one
place instead of being repeated by every analysis.

Only local references into ``#/components/<section>/<Name>`` are followed.
A reference whose target does not exist is *not* an error: resolution yields
an empty node flagged as ``missing`` so that batch analyses can report it and
carry on.

Cycle policy: every traversal carries the set of schema names already entered
on the current branch. Re-entering one of them yields an empty node flagged
as ``circular``. Independently, a budget of ``$ref`` hops (default
:data:`DEFAULT_REF_DEPTH`) bounds every walk.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional

logger = logging.getLogger(__name__)

DEFAULT_REF_DEPTH = 5
"""Default number of ``$ref`` hops a traversal may follow on one branch."""

SCHEMA_REF_PREFIX = "#/components/schemas/"

COMPOSITION_KEYWORDS = ("oneOf", "anyOf", "allOf")


class SchemaKind(str, enum.Enum):
    """The structural variant of a schema node."""

    REFERENCE = "reference"
    OBJECT = "object"
    ARRAY = "array"
    COMPOSITION = "composition"
    PRIMITIVE = "primitive"
    UNKNOWN = "unknown"


def schema_type(node: Any) -> Optional[str]:
    """Return the declared ``type`` of *node*, or ``None``.

    Type arrays (``["string", "null"]``) yield their first non-null entry.
    """
    if not isinstance(node, dict):
        return None
    value = node.get("type")
    if isinstance(value, list):
        non_null = [t for t in value if t != "null"]
        return non_null[0] if non_null else None
    return value if isinstance(value, str) else None


def required_names(node: Any) -> list[str]:
    """Return the property names listed in ``required`` on *node*.

    Anything other than a list (Swagger authors sometimes write
    ``required: true`` on a property) yields no names.
    """
    if not isinstance(node, dict):
        return []
    value = node.get("required")
    if not isinstance(value, list):
        return []
    return [name for name in value if isinstance(name, str)]


def schema_kind(node: Any) -> SchemaKind:
    """Classify *node*. Missing ``type`` is inferred from ``properties``/``items``."""
    if not isinstance(node, dict):
        return SchemaKind.UNKNOWN
    if isinstance(node.get("$ref"), str):
        return SchemaKind.REFERENCE
    declared = schema_type(node)
    if declared == "object" or (declared is None and "properties" in node):
        return SchemaKind.OBJECT
    if declared == "array" or (declared is None and "items" in node):
        return SchemaKind.ARRAY
    if any(keyword in node for keyword in COMPOSITION_KEYWORDS):
        return SchemaKind.COMPOSITION
    if declared is not None:
        return SchemaKind.PRIMITIVE
    return SchemaKind.UNKNOWN


def ref_name(ref: str) -> str:
    """Return the trailing segment of a ``$ref`` pointer, JSON-Pointer unescaped."""
    segment = ref.rsplit("/", 1)[-1]
    return segment.replace("~1", "/").replace("~0", "~")


def is_reference(node: Any) -> bool:
    return isinstance(node, dict) and isinstance(node.get("$ref"), str)


@dataclass(frozen=True)
class Resolution:
    """Outcome of resolving one node.

    Attributes:
        node: The target schema, the input itself when it was not a
            reference, or ``{}`` when the reference could not be followed.
        name: The referenced schema name, if the input was a reference.
        circular: The name was already entered on this branch, or the hop
            budget is spent.
        missing: The name does not exist in the component map.
    """

    node: dict[str, Any]
    name: Optional[str] = None
    circular: bool = False
    missing: bool = False

    @property
    def resolved(self) -> bool:
        return not (self.circular or self.missing)


def resolve_schema(
    node: Any,
    schemas: dict[str, Any],
    visited: Optional[frozenset[str]] = None,
    depth: int = DEFAULT_REF_DEPTH,
) -> Resolution:
    """Resolve one level of ``$ref`` against *schemas*.

    Args:
        node: A schema node or a ``{"$ref": ...}`` reference.
        schemas: The document's ``components.schemas`` mapping.
        visited: Names already entered on the current traversal branch.
        depth: Remaining ``$ref`` hop budget.

    Returns:
        A :class:`Resolution`. Never raises for absent or circular targets.
    """
    if not is_reference(node):
        return Resolution(node if isinstance(node, dict) else {})

    name = ref_name(node["$ref"])
    if (visited is not None and name in visited) or depth <= 0:
        return Resolution({}, name=name, circular=True)
    target = schemas.get(name)
    if not isinstance(target, dict):
        logger.debug("Unresolved schema reference: %s", node["$ref"])
        return Resolution({}, name=name, missing=True)
    return Resolution(target, name=name)


def dereference(
    node: Any,
    schemas: dict[str, Any],
    visited: frozenset[str] = frozenset(),
    depth: int = DEFAULT_REF_DEPTH,
) -> tuple[Resolution, frozenset[str], int]:
    """Follow a chain of references until a non-reference node is reached.

    Returns:
        ``(resolution, visited, depth)`` where *visited* and *depth* have been
        updated for every hop taken, ready to pass to nested traversals.
        ``resolution.name`` is the last name followed.
    """
    resolution = Resolution(node if isinstance(node, dict) else {})
    current = node
    while is_reference(current):
        step = resolve_schema(current, schemas, visited, depth)
        if not step.resolved:
            return step, visited, depth
        visited = visited | {step.name}
        depth -= 1
        resolution = step
        current = step.node
    return resolution, visited, depth


def resolve_component(
    node: Any, components: dict[str, Any], section: str
) -> Any:
    """Dereference a parameter/response/request-body ``$ref``.

    Follows ``#/components/<section>/<Name>`` chains. When a target is
    missing, or the chain loops, the last node reached is returned as-is.
    """
    targets = components.get(section) or {}
    seen: set[str] = set()
    current = node
    while is_reference(current):
        name = ref_name(current["$ref"])
        if name in seen or not isinstance(targets.get(name), dict):
            if name not in seen:
                logger.debug("Unresolved %s reference: %s", section, current["$ref"])
            return current
        seen.add(name)
        current = targets[name]
    return current


def iter_refs(obj: Any) -> Iterator[str]:
    """Yield the target name of every schema ``$ref`` anywhere inside *obj*."""
    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str) and ref.startswith(SCHEMA_REF_PREFIX):
            yield ref_name(ref)
        for value in obj.values():
            yield from iter_refs(value)
    elif isinstance(obj, list):
        for item in obj:
            yield from iter_refs(item)


def direct_refs(obj: Any) -> list[str]:
    """Unique schema names referenced directly inside *obj*, in first-seen order."""
    return list(dict.fromkeys(iter_refs(obj)))


def _items_path(path: tuple[str, ...]) -> tuple[str, ...]:
    if not path:
        return ("[items]",)
    return path[:-1] + (f"{path[-1]}[items]",)


class SchemaWalker:
    """Depth-first, cycle-aware walk over a schema tree.

    :meth:`visit` classifies a node and hands it to the matching
    ``visit_<kind>`` method. The default methods descend into references,
    ``properties``, ``items`` and composition members while keeping the
    route as a tuple of path segments:

    * a property contributes its name,
    * array items turn the last segment ``tags`` into ``tags[items]``,
    * a reference contributes the referenced schema name,
    * a composition member contributes ``oneOf[0]`` style segments.

    Subclasses override the hooks they care about.

    Args:
        schemas: The document's ``components.schemas`` mapping.
        max_ref_depth: ``$ref`` hop budget per branch.
    """

    def __init__(
        self, schemas: dict[str, Any], max_ref_depth: int = DEFAULT_REF_DEPTH
    ) -> None:
        self.schemas = schemas
        self.max_ref_depth = max_ref_depth

    def walk(self, node: Any, path: tuple[str, ...] = ()) -> None:
        self.visit(node, path, frozenset(), self.max_ref_depth)

    def visit(
        self,
        node: Any,
        path: tuple[str, ...],
        visited: frozenset[str],
        depth: int,
    ) -> None:
        kind = schema_kind(node)
        getattr(self, f"visit_{kind.value}")(node, path, visited, depth)

    def visit_reference(self, node, path, visited, depth) -> None:
        resolution = resolve_schema(node, self.schemas, visited, depth)
        if not resolution.resolved:
            self.on_unresolved(resolution, path)
            return
        self.visit(
            resolution.node,
            path + (resolution.name,),
            visited | {resolution.name},
            depth - 1,
        )

    def visit_object(self, node, path, visited, depth) -> None:
        required = set(required_names(node))
        properties = node.get("properties") or {}
        for name, prop in properties.items():
            self.visit_property(name, prop, name in required, path, visited, depth)
        self.visit_members(node, path, visited, depth)

    def visit_property(self, name, prop, required, path, visited, depth) -> None:
        self.visit(prop, path + (name,), visited, depth)

    def visit_array(self, node, path, visited, depth) -> None:
        items = node.get("items")
        if isinstance(items, dict):
            self.visit(items, _items_path(path), visited, depth)
        self.visit_members(node, path, visited, depth)

    def visit_composition(self, node, path, visited, depth) -> None:
        self.visit_members(node, path, visited, depth)

    def visit_members(self, node, path, visited, depth) -> None:
        for keyword in COMPOSITION_KEYWORDS:
            members = node.get(keyword)
            if not isinstance(members, list):
                continue
            for index, member in enumerate(members):
                self.visit(member, path + (f"{keyword}[{index}]",), visited, depth)

    def visit_primitive(self, node, path, visited, depth) -> None:
        pass

    def visit_unknown(self, node, path, visited, depth) -> None:
        pass

    def on_unresolved(self, resolution: Resolution, path: tuple[str, ...]) -> None:
        logger.debug(
            "Skipping %s reference %s at %s",
            "circular" if resolution.circular else "missing",
            resolution.name,
            ".".join(path) or "<root>",
        )
