"""Exception hierarchy for apiscope.

All exceptions inherit from :class:`ApiscopeError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apiscope.exit_codes`.
The top-level error handler in :func:`apiscope.app.main` catches
``ApiscopeError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Irregularities found *inside* a document (an unresolved ``$ref``, an example
that does not match its schema) are never raised; they are reported as data
by the analysis functions.

Subclass hierarchy::

    ApiscopeError (exit 1)
    +-- InvalidUsageError       (exit 2)
    |   +-- UnsupportedOptionError (exit 2)
    +-- NotFoundError           (exit 4)
    +-- FetchError              (exit 6)
    +-- SpecParseError          (exit 7)
    +-- SpecValidationError     (exit 8)
    +-- NotLoadedError          (exit 9)
    +-- ConfigError             (exit 1)
"""

from __future__ import annotations

from typing import Iterable

from apiscope.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_NOT_LOADED,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_SPEC_VALIDATION_ERROR,
)


class ApiscopeError(Exception):
    """Base exception for all apiscope errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ApiscopeError):
    """Raised for invalid arguments or missing required options."""

    exit_code = EXIT_INVALID_USAGE


class UnsupportedOptionError(InvalidUsageError):
    """Raised when an enum-valued argument is outside its closed set.

    Args:
        option: Name of the offending argument (e.g. ``"language"``).
        value: The value that was supplied.
        choices: The accepted values, listed in the message.
    """

    def __init__(self, option: str, value: object, choices: Iterable[str]):
        self.option = option
        self.value = value
        self.choices = list(choices)
        super().__init__(
            f"Unsupported {option}: {value!r}. "
            f"Expected one of: {', '.join(self.choices)}"
        )


class NotFoundError(ApiscopeError):
    """Raised when a named schema or a METHOD + path endpoint does not exist."""

    exit_code = EXIT_NOT_FOUND


class FetchError(ApiscopeError):
    """Raised on network-level failures while fetching a remote spec."""

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(ApiscopeError):
    """Raised when the source text is neither valid JSON nor valid YAML."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class SpecValidationError(ApiscopeError):
    """Raised when a parsed document lacks a usable ``openapi``/``swagger`` field."""

    exit_code = EXIT_SPEC_VALIDATION_ERROR


class NotLoadedError(ApiscopeError):
    """Raised when a query runs against a session with no loaded document."""

    exit_code = EXIT_NOT_LOADED

    def __init__(self, message: str = "No OpenAPI specification loaded. Load a spec first."):
        super().__init__(message)


class ConfigError(ApiscopeError):
    """Raised for configuration problems (invalid JSON, bad keys)."""

    exit_code = EXIT_GENERIC_FAILURE
