"""Load OpenAPI and Swagger documents from a URL, local file, or stdin.

This module handles all I/O for fetching raw documents and converting them
into Python dictionaries. It supports both JSON and YAML with automatic
format detection, and checks that the document carries an ``openapi`` or
``swagger`` discriminator.

The public functions are:

* :func:`read_source` -- Read raw text and a format hint from any source.
* :func:`parse_content` -- Parse text as JSON, falling back to YAML.
* :func:`detect_version` -- Return the declared version and whether the
  document is Swagger 2.0.
* :func:`load_spec` -- ``read_source`` followed by ``parse_content``.

After loading, the raw dict is passed to
:meth:`~apiscope.session.Session.load_document`, which normalizes Swagger
input and extracts the endpoint records.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx
import yaml

from apiscope.exceptions import FetchError, SpecParseError, SpecValidationError

if TYPE_CHECKING:
    from apiscope.cache import SpecCache

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 30.0

_TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"


class _JsonCompatibleLoader(yaml.SafeLoader):
    """SafeLoader that keeps unquoted dates and timestamps as strings."""


_JsonCompatibleLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != _TIMESTAMP_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_spec(source: str, cache: SpecCache | None = None) -> dict[str, Any]:
    """Load a document from URL, file path, or stdin ('-').

    Args:
        source: A URL (http/https), file path, or '-' for stdin.
        cache: Optional cache consulted for URL sources.

    Returns:
        The parsed document as a dictionary.

    Raises:
        FetchError: If the source cannot be read.
        SpecParseError: If the content cannot be parsed.
    """
    content, hint = read_source(source, cache=cache)
    return parse_content(content, hint=hint)


def read_source(source: str, cache: SpecCache | None = None) -> tuple[str, str]:
    """Return ``(text, hint)`` for *source*.

    *hint* is ``"json"``, ``"yaml"`` or ``""`` and only steers which parser
    is tried first.
    """
    if source == "-":
        return _read_stdin(), ""
    if source.startswith(("http://", "https://")):
        return _read_url(source, cache)
    return _read_file(source)


def _read_stdin() -> str:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise FetchError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return content


def _read_url(url: str, cache: SpecCache | None) -> tuple[str, str]:
    """Fetch spec text from *url*, consulting *cache* first.

    Raises:
        FetchError: On HTTP error statuses and transport failures.
    """
    if cache is not None:
        hit = cache.get(url)
        if hit is not None:
            text, content_type = hit
            return text, _hint_from_content_type(content_type)

    logger.debug("Fetching spec from %s", url)
    try:
        response = httpx.get(url, timeout=FETCH_TIMEOUT, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise FetchError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise FetchError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if cache is not None:
        cache.set(url, response.text, content_type)
    return response.text, _hint_from_content_type(content_type)


def _hint_from_content_type(content_type: str) -> str:
    if "json" in content_type:
        return "json"
    if "yaml" in content_type or "yml" in content_type:
        return "yaml"
    return ""


def _read_file(path: str) -> tuple[str, str]:
    """Read spec text from a local file; the suffix provides the hint."""
    file_path = Path(path)
    if not file_path.is_file():
        raise FetchError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise FetchError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"
    return content, hint


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.
    YAML dates and timestamps stay strings, as they would in JSON.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Returns:
        The parsed dictionary.

    Raises:
        SpecParseError: If the content cannot be parsed as either format.
        SpecValidationError: If the parsed document is not a mapping, so it
            cannot carry an ``openapi`` or ``swagger`` field.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            return _require_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc

    try:
        return _require_mapping(yaml.load(content, Loader=_JsonCompatibleLoader))
    except yaml.YAMLError as exc:
        yaml_error = exc

    msg = "Failed to parse spec as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        got = type(result).__name__ if result is not None else "empty document"
        raise SpecValidationError(
            f"Spec must be a JSON/YAML object with an 'openapi' or 'swagger' field "
            f"(got {got})"
        )
    return result


def detect_version(raw: dict[str, Any]) -> tuple[str, bool]:
    """Return ``(version, is_swagger2)`` for a parsed document.

    An ``openapi`` field wins over ``swagger`` when both are present.

    Raises:
        SpecValidationError: If neither discriminator is present, or the
            ``swagger`` version is not 2.x.
    """
    openapi_version = raw.get("openapi")
    if openapi_version is not None:
        return str(openapi_version), False

    swagger_version = raw.get("swagger")
    if swagger_version is not None:
        version_str = str(swagger_version)
        if version_str.startswith("2"):
            return version_str, True
        raise SpecValidationError(
            f"Unsupported Swagger version: {version_str}. Only Swagger 2.0 "
            "and OpenAPI 3.x documents are supported."
        )

    raise SpecValidationError(
        "Invalid OpenAPI specification: missing 'openapi' or 'swagger' field"
    )
