"""Document parser -- load, normalize, and extract endpoints.

This sub-package is responsible for the first half of the apiscope pipeline:
turning a raw OpenAPI 3.x or Swagger 2.0 document (JSON or YAML, local file,
remote URL or stdin) into a :class:`~apiscope.models.SpecDocument` and its
list of :class:`~apiscope.models.EndpointRecord` objects.

Typical usage::

    from apiscope.parser import load_spec, detect_version, normalize_swagger2

    raw = load_spec("petstore.yaml")
    version, is_swagger2 = detect_version(raw)
    if is_swagger2:
        raw = normalize_swagger2(raw)

Most callers go through :class:`~apiscope.session.Session` instead, which
runs the whole pipeline and keeps the result.

Sub-modules:

* :mod:`~apiscope.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and the ``openapi``/``swagger`` discriminator check.
* :mod:`~apiscope.parser.normalizer` -- Swagger 2.0 to OpenAPI 3.0.0.
* :mod:`~apiscope.parser.extractor` -- Endpoint records and their heuristic
  metrics.
"""

from apiscope.parser.extractor import extract_endpoints
from apiscope.parser.loader import detect_version, load_spec, parse_content
from apiscope.parser.normalizer import normalize_swagger2

__all__ = [
    "load_spec",
    "parse_content",
    "detect_version",
    "normalize_swagger2",
    "extract_endpoints",
]
