"""Typer application and CLI entry point for apiscope.

The root app carries the global output flags, the endpoint commands from
:mod:`apiscope.commands.explore`, and the ``schemas`` and ``config`` groups.
:func:`main` is the console-script entry point declared in
``pyproject.toml``: :class:`~apiscope.exceptions.ApiscopeError` exits with
the error's code, anything else writes a crash log under the data directory
and exits with :data:`~apiscope.exit_codes.EXIT_GENERIC_FAILURE`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler

from apiscope import __version__
from apiscope.commands import explore
from apiscope.commands.config import config_app
from apiscope.commands.schemas import schemas_app
from apiscope.config import get_data_dir
from apiscope.exceptions import ApiscopeError
from apiscope.exit_codes import EXIT_GENERIC_FAILURE
from apiscope.output import OutputFormat, OutputManager, error, set_output

app = typer.Typer(
    name="apiscope",
    help="Explore and analyze OpenAPI 3.x and Swagger 2.0 documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

explore.register(app)
app.add_typer(schemas_app, name="schemas", help="Schema graph, examples, mocks and types.")
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"apiscope {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool, no_color: bool = False) -> None:
    """Route ``apiscope.*`` loggers to stderr through rich.

    ``--verbose`` shows DEBUG records; otherwise only warnings and above.
    """
    logger = logging.getLogger("apiscope")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True, no_color=no_color),
        show_path=False,
        rich_tracebacks=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Install the output manager and logging for this invocation."""
    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    configure_logging(verbose, no_color=no_color)


def _setup_signal_handlers() -> None:
    def _handler(signum: int, frame: Any) -> None:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Write the current traceback under the data directory and return its path."""
    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now().strftime('%Y%m%d-%H%M%S')}.log"
    log_path.write_text(traceback.format_exc(), encoding="utf-8")
    return str(log_path)


def main() -> None:
    """Console-script entry point."""
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except ApiscopeError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception:
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
