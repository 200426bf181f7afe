"""apiscope -- Explore and analyze OpenAPI 3.x and Swagger 2.0 specifications.

A document is loaded once into a :class:`~apiscope.session.Session`, which
normalizes Swagger 2.0 input to OpenAPI 3.0 and derives a flat list of
endpoint records. Every query afterwards (endpoint search, schema dependency
tracing, unused-schema detection, property search, example validation, mock
data, evolution heuristics, security patterns, documentation export) reads
that state without modifying it.

Typical workflow::

    apiscope overview --spec petstore.yaml
    apiscope schemas deps Pet --spec petstore.yaml
    apiscope schemas mock --schema Pet --count 2 --spec petstore.yaml

Modules:
    app: Typer application and CLI entry point.
    session: Loaded document and endpoint state.
    schema: ``$ref`` resolution and cycle-aware schema walking.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
