"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apiscope.exceptions.ApiscopeError` subclass.
Shell wrappers can inspect the exit code to tell a broken document from a
typo in a schema name without parsing stderr.

Example::

    $ apiscope schemas deps Missing --spec petstore.yaml
    $ echo $?
    4   # EXIT_NOT_FOUND -- no schema with that name
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, or an option value outside its allowed set."""

EXIT_NOT_FOUND = 4
"""The requested endpoint or schema does not exist in the loaded document."""

EXIT_CONNECTION_ERROR = 6
"""The spec could not be fetched (timeout, DNS failure, HTTP error)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The spec text is neither valid JSON nor valid YAML."""

EXIT_SPEC_VALIDATION_ERROR = 8
"""The parsed document has no usable ``openapi`` or ``swagger`` field."""

EXIT_NOT_LOADED = 9
"""A query was issued before any document was loaded."""
