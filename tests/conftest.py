"""Shared test fixtures for apiscope.

Provides the raw fixture documents, loaded sessions, an isolated config
environment, and resets the global output state between tests.
"""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

import pytest

from apiscope.models import EndpointRecord, SpecDocument
from apiscope.output import reset_output
from apiscope.session import Session

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _load_fixture(name: str) -> dict[str, Any]:
    with open(FIXTURES_DIR / name, encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Drop the global OutputManager and the CLI logging setup after each test.

    The manager holds consoles bound to the streams that were current when
    it was created; CliRunner swaps those streams per invocation. The CLI
    also stops ``apiscope`` records from propagating, which hides them from
    ``caplog``.
    """
    yield
    reset_output()
    logger = logging.getLogger("apiscope")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


# ---------------------------------------------------------------------------
# Raw documents
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_raw() -> dict[str, Any]:
    return _load_fixture("petstore_3.0.json")


@pytest.fixture
def swagger2_raw() -> dict[str, Any]:
    return _load_fixture("swagger_2.0.json")


@pytest.fixture
def graph_raw() -> dict[str, Any]:
    return _load_fixture("schema_graph.json")


@pytest.fixture
def petstore_path() -> Path:
    return FIXTURES_DIR / "petstore_3.0.json"


@pytest.fixture
def swagger2_path() -> Path:
    return FIXTURES_DIR / "swagger_2.0.json"


# ---------------------------------------------------------------------------
# Loaded sessions
# ---------------------------------------------------------------------------


@pytest.fixture
def petstore_session(petstore_raw: dict[str, Any]) -> Session:
    session = Session()
    session.load_document(copy.deepcopy(petstore_raw))
    return session


@pytest.fixture
def petstore_doc(petstore_session: Session) -> SpecDocument:
    return petstore_session.document


@pytest.fixture
def petstore_endpoints(petstore_session: Session) -> list[EndpointRecord]:
    return petstore_session.endpoints


@pytest.fixture
def graph_doc(graph_raw: dict[str, Any]) -> SpecDocument:
    session = Session()
    return session.load_document(graph_raw)


@pytest.fixture
def make_document():
    """Build a loaded ``(document, endpoints)`` pair from a partial OpenAPI dict."""

    def _make(
        paths: dict[str, Any] | None = None,
        schemas: dict[str, Any] | None = None,
        **extra: Any,
    ) -> tuple[SpecDocument, list[EndpointRecord]]:
        raw: dict[str, Any] = {
            "openapi": "3.0.0",
            "info": {"title": "Test", "version": "1"},
            "paths": paths or {},
            "components": {"schemas": schemas or {}},
        }
        raw.update(extra)
        session = Session()
        session.load_document(raw)
        return session.require()

    return _make


@pytest.fixture
def boolean_required_document() -> tuple[SpecDocument, list[EndpointRecord]]:
    """Swagger 2.0 input whose ``Pet.owner`` carries ``required: true``."""
    raw = {
        "swagger": "2.0",
        "info": {"title": "Loose", "version": "1"},
        "paths": {
            "/pets": {
                "post": {
                    "parameters": [
                        {"name": "body", "in": "body", "schema": {"$ref": "#/definitions/Pet"}}
                    ],
                    "responses": {"201": {"description": "created"}},
                }
            }
        },
        "definitions": {
            "Pet": {
                "type": "object",
                "required": ["name"],
                "properties": {
                    "name": {"type": "string"},
                    "owner": {
                        "type": "object",
                        "required": True,
                        "properties": {"email": {"type": "string", "format": "email"}},
                    },
                },
            }
        },
    }
    session = Session()
    session.load_document(raw)
    return session.require()


# ---------------------------------------------------------------------------
# Isolated config environment
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every XDG directory and the working directory at *tmp_path*.

    Forces the XDG layout regardless of the host platform, clears
    ``APISCOPE_SPEC`` and ``NO_COLOR``.
    """
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("APISCOPE_SPEC", raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)
    monkeypatch.setattr("apiscope.config._is_xdg_platform", lambda: True)
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return tmp_path
