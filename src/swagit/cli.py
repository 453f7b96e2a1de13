"""Command line interface for swagit."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.markup import escape

from swagit import __version__, messages
from swagit.config import DEFAULT_REMOTE, Config
from swagit.prompts import Prompter, TextualPrompter
from swagit.workflow import Outcome, OutcomeKind, run

logger = logging.getLogger(__name__)

app = typer.Typer(help="A swag tool to use git with interactive cli", add_completion=False)


def version_callback(value: bool) -> None:
    if value:
        print(f"swagit {__version__}")
        raise typer.Exit()


def report(outcome: Outcome) -> None:
    """Print the outcome with the marker that matches its kind."""
    if not outcome.message:
        return
    message = escape(outcome.message)
    if outcome.kind == OutcomeKind.SUCCESS:
        messages.success(message)
    elif outcome.kind == OutcomeKind.ABORTED:
        messages.warning(message)
    else:
        messages.error(message)


@app.command()
def main(
    ctx: typer.Context,
    delete: Annotated[bool, typer.Option("--delete", "-d", help="Select branches which you want to delete")] = False,
    sync: Annotated[
        bool, typer.Option("--sync", "-s", help="Fetch, report branch status and clean up merged branches")
    ] = False,
    remote: Annotated[str, typer.Option(envvar="SWAGIT_REMOTE", help="Remote used by --sync")] = DEFAULT_REMOTE,
    path: Annotated[Path, typer.Option(help="Path to git repository")] = Path("."),
    debug: Annotated[bool, typer.Option("--debug", help="Enable debug logging")] = False,
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show the version and exit"),
    ] = None,
) -> None:
    """Checkout or delete branches by picking them from a list."""
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s - %(levelname)s - %(message)s")

    config = Config.from_options(path, delete=delete, sync=sync, remote=remote, debug=debug)
    logger.debug("running with %s", config)

    # Tests provide their own prompter
    prompter: Prompter = ctx.obj if isinstance(ctx.obj, Prompter) else TextualPrompter()

    outcome = run(config, prompter)
    logger.debug("outcome %s", outcome.kind.value)
    report(outcome)
    raise typer.Exit(code=outcome.exit_code)


if __name__ == "__main__":
    app()
