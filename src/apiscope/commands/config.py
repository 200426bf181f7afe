"""Config commands -- view and modify the user configuration.

``apiscope config show|set|path|reset|clear-cache``. Settings live in the
apiscope config directory (:func:`~apiscope.config.get_config_dir`) and
supply defaults such as the spec source, output format, cache TTL and
analysis limits.
"""

from __future__ import annotations

import typer

from apiscope.cache import SpecCache
from apiscope.config import (
    config_path,
    get_cache_dir,
    load_app_config,
    save_app_config,
    set_config_value,
)
from apiscope.models import AppConfig
from apiscope.output import emit, info, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the stored user configuration.

    Example::

        apiscope config show --json
    """
    info(f"Config file: {config_path()}")
    emit(load_app_config().model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Dotted key, e.g. 'analysis.mock_count'."),
    value: str = typer.Argument(help="New value; an empty string clears optional keys."),
) -> None:
    """Set one configuration value.

    Example::

        apiscope config set default_spec ./openapi.yaml
        apiscope config set cache.ttl_seconds 600
    """
    config = set_config_value(load_app_config(), key, value)
    path = save_app_config(config)
    success(f"Set {key} = {value} ({path})")


@config_app.command("path")
def config_path_command() -> None:
    """Print the config file location."""
    emit(str(config_path()))


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset the configuration to defaults."""
    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()
    save_app_config(AppConfig())
    success("Configuration reset to defaults.")


@config_app.command("clear-cache")
def config_clear_cache() -> None:
    """Drop every cached remote spec."""
    config = load_app_config()
    cache = SpecCache(get_cache_dir(), config.cache)
    try:
        stats = cache.stats()
        cache.clear()
    finally:
        cache.close()
    if stats["enabled"]:
        success(f"Removed {stats['size']} cached spec(s) from {stats['directory']}")
    else:
        info("Spec caching is disabled.")
