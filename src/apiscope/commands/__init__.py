"""Typer sub-apps for the apiscope CLI.

* :mod:`~apiscope.commands.explore` -- endpoint-level commands registered on
  the root app (``overview``, ``endpoints``, ``lint``, ``code`` ...).
* :mod:`~apiscope.commands.schemas` -- the ``schemas`` group.
* :mod:`~apiscope.commands.config` -- the ``config`` group.

Every analysis command loads one document per invocation through
:func:`load_session`.
"""

from __future__ import annotations

from typing import Optional

import typer

from apiscope.cache import SpecCache
from apiscope.config import get_cache_dir, resolve_config
from apiscope.exceptions import InvalidUsageError
from apiscope.models import AppConfig
from apiscope.output import debug
from apiscope.session import Session

SPEC_OPTION_HELP = "Spec source: file path, http(s) URL, or '-' for stdin."


def spec_option() -> Optional[str]:
    return typer.Option(None, "--spec", "-s", help=SPEC_OPTION_HELP)


def load_session(spec: Optional[str]) -> tuple[Session, AppConfig]:
    """Resolve the spec source, load it, and return the session and config.

    Remote sources go through the spec cache unless caching is disabled.

    Raises:
        InvalidUsageError: If no source is given and none is configured.
    """
    config = resolve_config(cli_spec=spec)
    source = config.default_spec
    if not source:
        raise InvalidUsageError(
            "No spec given. Pass --spec, set APISCOPE_SPEC, "
            "or run: apiscope config set default_spec <source>"
        )

    session = Session()
    cache: Optional[SpecCache] = None
    if source.startswith(("http://", "https://")) and config.cache.enabled:
        cache = SpecCache(get_cache_dir(), config.cache)
    try:
        debug(f"Loading spec from {source}")
        session.load_source(source, cache=cache)
    finally:
        if cache is not None:
            cache.close()
    return session, config
