"""
Main Typer application for the rolecall CLI.

Defines the root application, global options, and registers the command
groups.
"""

import logging
from typing import Annotated

import typer

from rolecall import __version__
from rolecall.cli.commands import ask, auth, chat, config, resolve, tools
from rolecall.cli.output import print_error, print_info
from rolecall.config import ConfigurationError, load_config, set_config

app = typer.Typer(
    name="rolecall",
    help="Chat assistant for directory users, applications and app roles.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=True,
    pretty_exceptions_show_locals=False,
)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        print_info(f"rolecall version [green]{__version__}[/green]")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Route library logging to stderr at the given level."""
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    # litellm and httpx are chatty below WARNING
    for noisy in ("LiteLLM", "litellm", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(max(logging.WARNING, logging.getLevelName(level)))


# noinspection PyUnusedLocal
@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    config_profile: Annotated[
        str | None,
        typer.Option(
            "--profile",
            "-p",
            help="Use specific config profile.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log debug output to stderr.",
        ),
    ] = False,
) -> None:
    """
    [bold blue]rolecall[/bold blue] - directory management assistant

    Ask about users, applications and app roles in plain language.
    Use [bold]rolecall chat[/bold] for an interactive session.
    """
    try:
        loaded = load_config(profile=config_profile)
    except ConfigurationError as e:
        print_error(f"Configuration error: {e}")
        raise typer.Exit(1)

    set_config(loaded)
    configure_logging("DEBUG" if verbose else loaded.logging.level)


# Register command groups
app.add_typer(chat.app, name="chat")
app.add_typer(ask.app, name="ask")
app.add_typer(resolve.app, name="resolve")
app.add_typer(tools.app, name="tools")
app.add_typer(auth.app, name="auth")
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
