"""Typer application and CLI entry point for spectools.

Commands:

* ``spectools convert SOURCE`` -- visit a document and print the resulting
  :class:`~spectools.models.ApiSpecification` as JSON.
* ``spectools tools SOURCE`` -- print a table summarising the tools.

``SOURCE`` is a ``.json``/``.yaml``/``.yml`` file, an ``http(s)://`` URL, or
``-`` for stdin.  Errors are printed on stderr and the process exits with the
error's exit code (see :mod:`spectools.exit_codes`).

See Also:
    :mod:`spectools.config`: Resolution of the extraction flags.
    :mod:`spectools.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
from typing import Any, Optional

import typer

from spectools import __version__
from spectools.exceptions import SpectoolsError
from spectools.models import ApiSpecification, ToolDescriptor
from spectools.output import (
    OutputFormat,
    OutputManager,
    configure_logging,
    debug,
    error,
    print_json,
    print_table,
    set_output,
    success,
)


app = typer.Typer(
    name="spectools",
    help="Convert OpenAPI 3.0 documents into flat lists of tool descriptors.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"spectools {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
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
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write primary output to this file."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~spectools.output.OutputManager` and routes
    log records to stderr.  Without ``--json`` or ``--plain`` the format comes
    from ``output.format`` in the config files.
    """
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN
    else:
        from spectools.config import resolve_output_format

        try:
            fmt = OutputFormat(resolve_output_format())
        except SpectoolsError as exc:
            OutputManager(no_color=no_color).error(str(exc))
            raise typer.Exit(code=exc.exit_code) from None

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
        output_file=output_file,
    )
    set_output(output)
    configure_logging(output)

    ctx.ensure_object(dict)
    ctx.obj["output_file"] = output_file


def _visit(
    source: str,
    extract_description: Optional[bool] = None,
    extract_default: Optional[bool] = None,
) -> ApiSpecification:
    """Load *source* and visit it, turning failures into a clean exit.

    Raises:
        typer.Exit: With the error's exit code on any spectools error.
    """
    from spectools.config import resolve_visitor_config
    from spectools.parser import load_spec, visit_spec

    try:
        config = resolve_visitor_config(
            cli_extract_description=extract_description,
            cli_extract_default=extract_default,
        )
        debug(f"Loading document from {source}")
        raw = load_spec(source)
        return visit_spec(raw, config)
    except SpectoolsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@app.command("convert")
def convert_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Document path, URL, or '-' for stdin."),
    extract_description: Optional[bool] = typer.Option(
        None,
        "--extract-description/--no-extract-description",
        help="Copy primitive schema descriptions.",
    ),
    extract_default: Optional[bool] = typer.Option(
        None,
        "--extract-default/--no-extract-default",
        help="Copy primitive schema default values.",
    ),
) -> None:
    """Print the tool descriptors of an OpenAPI document as JSON.

    Example::

        spectools convert petstore.yaml --extract-description
    """
    api = _visit(source, extract_description, extract_default)
    print_json(api.model_dump(mode="json", by_alias=True, exclude_none=True))

    output_file = (ctx.obj or {}).get("output_file")
    if output_file:
        success(f"Wrote {len(api.tools)} tools to {output_file}")


def _tool_row(tool: ToolDescriptor) -> list[str]:
    def _count(group: Any) -> str:
        return str(len(group.properties)) if group is not None else "-"

    return [
        tool.method.value.upper(),
        tool.path,
        tool.name,
        _count(tool.path_parameters),
        _count(tool.query_parameters),
        tool.request_body.kind if tool.request_body is not None else "-",
    ]


@app.command("tools")
def tools_command(
    source: str = typer.Argument(..., help="Document path, URL, or '-' for stdin."),
) -> None:
    """List the tools of an OpenAPI document.

    Shows method, path, tool name, the number of path and query
    parameters, and the shape of the request body.
    """
    api = _visit(source)
    headers = ["Method", "Path", "Tool", "Path params", "Query params", "Body"]
    rows = [_tool_row(tool) for tool in api.tools]
    title = f"Tools ({len(rows)})"
    if api.service_url:
        title += f" -- {api.service_url}"
    print_table(headers, rows, title=title)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``spectools`` console script."""
    _setup_signal_handlers()
    app()
