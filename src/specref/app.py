"""Typer application and CLI entry point for specref.

Two commands sit on top of :mod:`specref.document`:

* ``specref resolve SOURCE`` -- load a JSON/YAML document, resolve every
  ``$ref`` in it, and print the result as JSON (or YAML with ``--yaml``).
* ``specref validate SOURCE`` -- resolve leniently and report every
  reference that failed, exiting non-zero when there is at least one.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  Unhandled :class:`~specref.exceptions.SpecrefError`
instances exit with their ``exit_code``; anything else is written to a
crash log under the data directory.

See Also:
    :mod:`specref.config`: Resolver settings precedence.
    :mod:`specref.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from specref import __version__
from specref.exit_codes import EXIT_GENERIC_FAILURE, EXIT_UNRESOLVABLE_REFERENCE


app = typer.Typer(
    name="specref",
    help="Resolve $ref references in OpenAPI and JSON Schema documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specref {__version__}")
        raise typer.Exit()


def _setup_logging(verbose: bool) -> None:
    """Route the ``specref`` loggers to stderr through Rich."""
    package_logger = logging.getLogger("specref")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    package_logger.addHandler(handler)
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    package_logger.propagate = False


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~specref.output.OutputManager` and the
    package logging from CLI flags.

    Args:
        version: If ``True``, print the version string and exit.
        json_output: Force JSON output format.
        plain_output: Force plain-text output format.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
        output_file: Redirect primary data output to a file path.
    """
    from specref.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)
    _setup_logging(verbose)


def _load_and_resolve(
    source: str,
    mode: Optional[str],
    throw_on_error: Optional[bool],
    max_depth: Optional[int],
) -> Any:
    """Load *source* and resolve it with the effective configuration.

    Raises:
        SpecrefError: On configuration, loading, or (strict) resolution
            failures.
    """
    from specref.config import resolve_config
    from specref.document import load_document, resolve_document
    from specref.exceptions import DocumentLoadError, InvalidUsageError
    from specref.models import ResolveMode
    from specref.objects import SpecObject
    from specref.output import debug

    if mode is not None:
        mode = mode.strip().lower()
        if mode not in {m.value for m in ResolveMode}:
            raise InvalidUsageError(f"Invalid --mode '{mode}': expected 'all' or 'inline'.")

    config = resolve_config(
        cli_mode=mode,
        cli_throw_on_error=throw_on_error,
        cli_max_depth=max_depth,
    )
    debug(
        f"mode={config.mode.value} throw_on_error={config.throw_on_error} "
        f"max_depth={config.max_depth}"
    )

    document = load_document(source)
    if not isinstance(document, SpecObject):
        raise DocumentLoadError(f"{source}: document root must be an object")

    # Relative references in stdin input resolve against the working directory.
    uri = Path.cwd() / "stdin" if source == "-" else Path(source)
    return resolve_document(document, uri, config)


_MODE_HELP = "Resolution mode: 'all' or 'inline' (keep same-document references)."


@app.command("resolve")
def resolve_command(
    source: str = typer.Argument(..., help="Document path, or '-' for stdin."),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help=_MODE_HELP),
    strict: Optional[bool] = typer.Option(
        None,
        "--strict/--lenient",
        help="Fail on the first unresolvable reference, or keep it in place.",
    ),
    max_depth: Optional[int] = typer.Option(
        None, "--max-depth", help="Maximum number of chained reference hops."
    ),
    as_yaml: bool = typer.Option(False, "--yaml", help="Emit YAML instead of JSON."),
) -> None:
    """Resolve every $ref in SOURCE and print the resulting document.

    Example::

        specref resolve openapi.yaml --mode inline --yaml
    """
    from specref.exceptions import SpecrefError
    from specref.output import error, format_document, warning

    try:
        document = _load_and_resolve(source, mode, strict, max_depth)
        data = document.get_serializable_data()
    except SpecrefError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    for message in document.get_errors():
        warning(message)
    format_document(data, as_yaml=as_yaml)


@app.command("validate")
def validate_command(
    source: str = typer.Argument(..., help="Document path, or '-' for stdin."),
    mode: Optional[str] = typer.Option(None, "--mode", "-m", help=_MODE_HELP),
    max_depth: Optional[int] = typer.Option(
        None, "--max-depth", help="Maximum number of chained reference hops."
    ),
) -> None:
    """Check that every $ref in SOURCE resolves.

    All failures are collected and listed; the command exits with code 9
    when there is at least one.
    """
    from specref.exceptions import SpecrefError
    from specref.output import error, print_table, success

    try:
        document = _load_and_resolve(source, mode, False, max_depth)
    except SpecrefError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    errors = document.get_errors()
    if not errors:
        success(f"{source}: all references resolve.")
        return

    rows = [[str(index), message] for index, message in enumerate(errors, start=1)]
    print_table(["#", "Error"], rows, title=f"Unresolved references in {source}")
    error(f"{len(errors)} reference error(s) found.")
    raise typer.Exit(code=EXIT_UNRESOLVABLE_REFERENCE)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from specref.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specref`` console script.

    Unhandled :class:`~specref.exceptions.SpecrefError` instances cause a
    clean exit with the error's ``exit_code``.  All other exceptions produce
    a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from specref.exceptions import SpecrefError
        from specref.output import error

        if isinstance(exc, SpecrefError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
