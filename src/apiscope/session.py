"""The analysis session: one loaded document and its endpoint records.

A :class:`Session` starts empty. A successful load replaces the document and
endpoint list together; a failed load raises and leaves whatever was loaded
before untouched. Queries against an empty session raise
:class:`~apiscope.exceptions.NotLoadedError`.

Sessions are plain objects passed to whoever needs them; there is no
module-level current session. A host that shares one session between threads
must serialize loads against queries itself.

Example::

    session = Session()
    session.load_source("petstore.yaml")
    for record in session.endpoints:
        print(record.label, record.complexity.value)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Optional

from pydantic import ValidationError

from apiscope.analysis.search import find_endpoint, parse_endpoint_ref
from apiscope.exceptions import NotFoundError, NotLoadedError, SpecValidationError
from apiscope.models import EndpointRecord, SpecDocument
from apiscope.parser.extractor import extract_endpoints
from apiscope.parser.loader import detect_version, parse_content, read_source
from apiscope.parser.normalizer import normalize_swagger2

if TYPE_CHECKING:
    from apiscope.cache import SpecCache

logger = logging.getLogger(__name__)


def build_document(raw: dict[str, Any]) -> SpecDocument:
    """Validate, normalize and wrap a parsed document.

    Swagger 2.0 input is converted with
    :func:`~apiscope.parser.normalizer.normalize_swagger2`; OpenAPI 3 input
    passes through unchanged.

    Raises:
        SpecValidationError: If the discriminator is missing or unsupported,
            or top-level sections have the wrong shape.
    """
    version, is_swagger2 = detect_version(raw)
    normalized = normalize_swagger2(raw) if is_swagger2 else raw
    try:
        return SpecDocument(
            openapi=str(normalized["openapi"]),
            info=normalized.get("info") or {},
            servers=normalized.get("servers") or [],
            paths=normalized.get("paths") or {},
            components=normalized.get("components") or {},
            security=normalized.get("security") or [],
            tags=normalized.get("tags") or [],
            source_version=version,
        )
    except ValidationError as exc:
        raise SpecValidationError(f"Invalid OpenAPI specification: {exc}") from exc


class Session:
    """Holds at most one :class:`SpecDocument` and its endpoint records."""

    def __init__(self) -> None:
        self._document: Optional[SpecDocument] = None
        self._endpoints: list[EndpointRecord] = []
        self.source: Optional[str] = None

    @property
    def is_loaded(self) -> bool:
        return self._document is not None

    @property
    def document(self) -> SpecDocument:
        """The loaded document.

        Raises:
            NotLoadedError: If nothing has been loaded yet.
        """
        return self.require()[0]

    @property
    def endpoints(self) -> list[EndpointRecord]:
        return list(self.require()[1])

    def require(self) -> tuple[SpecDocument, list[EndpointRecord]]:
        """Return ``(document, endpoints)`` or raise :class:`NotLoadedError`."""
        if self._document is None:
            raise NotLoadedError()
        return self._document, self._endpoints

    def load_document(self, raw: dict[str, Any], source: Optional[str] = None) -> SpecDocument:
        """Replace the session state with the parsed document *raw*.

        Everything is built before anything is assigned, so a failure leaves
        the previous state intact.
        """
        document = build_document(raw)
        try:
            endpoints = extract_endpoints(document)
        except ValidationError as exc:
            raise SpecValidationError(f"Invalid operation definition: {exc}") from exc
        self._document, self._endpoints = document, endpoints
        self.source = source
        logger.debug(
            "Loaded %s %s (%s): %d endpoints, %d schemas",
            document.title,
            document.version,
            document.source_version,
            len(endpoints),
            len(document.schemas),
        )
        return document

    def load(self, text: str, hint: str = "") -> SpecDocument:
        """Parse and load document text (JSON or YAML).

        Raises:
            SpecParseError: If *text* is neither JSON nor YAML.
            SpecValidationError: If the document lacks ``openapi``/``swagger``.
        """
        return self.load_document(parse_content(text, hint=hint))

    def load_source(self, source: str, cache: SpecCache | None = None) -> SpecDocument:
        """Read *source* (file path, URL, or ``-``) and load it.

        Raises:
            FetchError: If the source cannot be read.
            SpecParseError: If the content cannot be parsed.
            SpecValidationError: If the document lacks ``openapi``/``swagger``.
        """
        text, hint = read_source(source, cache=cache)
        return self.load_document(parse_content(text, hint=hint), source=source)

    def find_endpoint(self, method: str, path: str) -> EndpointRecord:
        """Return the record for *method* + *path*.

        Raises:
            NotLoadedError: If nothing has been loaded yet.
            NotFoundError: If no record matches.
        """
        record = find_endpoint(self.require()[1], method, path)
        if record is None:
            raise NotFoundError(f"Endpoint not found: {method.upper()} {path}")
        return record

    def endpoint_by_ref(self, ref: str) -> EndpointRecord:
        """Look up an endpoint written as ``METHOD:/path``."""
        method, path = parse_endpoint_ref(ref)
        return self.find_endpoint(method, path)
