"""CLI entry point for volt-jdtls.

Running `volt-jdtls` without a subcommand starts the stdio plugin loop the
host talks to.
"""

import json
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from .. import __version__
from ..core.environment import PluginSettings
from ..core.errors import VoltError
from ..runtime.logging import bootstrap_logging
from ..util.error import format_error

app = typer.Typer(
    name="volt-jdtls",
    help="Eclipse JDT language server bootstrap for volt plugin hosts",
    no_args_is_help=False,
    add_completion=False,
    invoke_without_command=True,
)

console = Console(stderr=True)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"volt-jdtls {__version__}")
        raise typer.Exit()


def _settings() -> PluginSettings:
    try:
        return PluginSettings.from_env()
    except VoltError as e:
        console.print(f"[red]Error:[/red] {format_error(e)}")
        raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """Eclipse JDT language server bootstrap.

    Running without a subcommand serves the host over stdio.
    """
    if ctx.invoked_subcommand is not None:
        return
    serve(log_level=None, log_file=False)


@app.command()
def serve(
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Minimum log level (debug, info, warn, error)",
    ),
    log_file: bool = typer.Option(
        False,
        "--log-file",
        help="Also write logs to the user data directory",
    ),
):
    """Serve the host's plugin requests over stdio."""
    from ..plugin import InitializationHandler, stdio_plugin

    settings = _settings()
    bootstrap_logging(settings, level=log_level, file=log_file)
    plugin = stdio_plugin(lambda rpc: InitializationHandler(rpc, settings))
    plugin.serve()


class _PrintingHost:
    """Host stand-in that records the launch instead of starting it."""

    def __init__(self) -> None:
        self.launched: Optional[dict] = None

    def start_lsp(self, server_uri, server_args, document_selector, options) -> None:
        self.launched = {
            "server_uri": server_uri,
            "server_args": server_args,
            "document_selector": document_selector,
            "options": options,
        }

    def stderr(self, message: str) -> None:
        console.print(f"[dim]{message}[/dim]")


@app.command()
def provision(
    directory: Path = typer.Option(
        Path("."),
        "--dir",
        "-d",
        help="Plugin directory to provision into",
    ),
    lombok: bool = typer.Option(
        False,
        "--lombok",
        help="Also provision the lombok javaagent",
    ),
    options: Optional[str] = typer.Option(
        None,
        "--options",
        help="Initialization options as a JSON object",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Minimum log level (debug, info, warn, error)",
    ),
):
    """Provision the backend into a directory and print the launch descriptor."""
    from ..plugin import InitializationHandler

    settings = _settings()
    bootstrap_logging(settings, level=log_level)

    try:
        init_options = json.loads(options) if options else {}
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] --options is not valid JSON: {e}")
        raise typer.Exit(1)
    if lombok and isinstance(init_options, dict):
        init_options = {**init_options, "lombok": True}

    root = directory.resolve()
    root.mkdir(parents=True, exist_ok=True)
    if not settings.volt_uri:
        settings = settings.model_copy(update={"volt_uri": root.as_uri() + "/"})

    host = _PrintingHost()
    handler = InitializationHandler(host, settings, root=root)
    try:
        handler.initialize(init_options)
    except VoltError as e:
        console.print(f"[red]Error:[/red] {format_error(e)}")
        raise typer.Exit(1)

    typer.echo(json.dumps(host.launched, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    app()
