"""
Main entry point for the cargo-tasks CLI.

This module wires the Typer front-end to the dispatcher. An invocation:
- Applies the log level
- Runs the environment precondition (cargo must be on the path)
- Changes into the entry point's own directory
- Dispatches the command token and exits with the handler's status
"""

import os
import pathlib
from typing import Annotated

import typer

from cargo_tasks import config, tasks
from cargo_tasks.errors import ToolNotFoundError, UsageError
from cargo_tasks.utils import logger, set_log_level

LOG = logger(__file__)

app = typer.Typer(
    add_completion=False,
    help="Run development tasks for a Rust crate.",
)


@app.command(
    context_settings={
        "ignore_unknown_options": True,
        "allow_interspersed_args": False,
    },
)
def run(
    ctx: typer.Context,
    command: Annotated[
        str,
        typer.Argument(
            help="Command to run: " + ", ".join(c.token for c in tasks.Command),
            show_default=False,
        ),
    ] = None,
    args: Annotated[
        list[str],
        typer.Argument(
            help="Arguments passed through to the command unchanged.",
            show_default=False,
        ),
    ] = None,
    root: Annotated[
        pathlib.Path,
        typer.Option(
            "--root",
            envvar=config.ROOT_ENV,
            exists=True,
            file_okay=False,
            dir_okay=True,
            resolve_path=True,
            help=(
                "Directory the tasks run in. "
                "Defaults to the entry-point script's directory when it holds a "
                "Cargo.toml, otherwise the current directory."
            ),
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            envvar="LOG_LEVEL",
            help="Log level for diagnostic output.",
        ),
    ] = "INFO",
):
    """
    Dispatch a single task command.

    The cargo precondition is checked before the command is looked at, so a
    missing toolchain is reported even for an unknown command.
    """
    set_log_level(log_level)
    try:
        context = config.load_context(root=root)
    except ToolNotFoundError as e:
        LOG.error("%s", e)
        raise typer.Exit(e.exit_code)

    os.chdir(context.root)

    tokens = [command, *(args or [])] if command else []
    try:
        code = tasks.dispatch(tokens, context)
    except UsageError as e:
        if e.token is not None:
            LOG.error("%s", e)
        typer.echo(tasks.usage(ctx.find_root().info_name or "x.py"), err=True)
        raise typer.Exit(e.exit_code)
    raise typer.Exit(code)


def main():
    """
    Execute the Typer application.
    """
    app()


if __name__ == "__main__":
    main()
