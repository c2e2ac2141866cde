"""
rolecall ask - One-shot question.

Usage:
    rolecall ask "Get all users"
    rolecall ask "Show roles for app MyApp" --plain
"""

import asyncio
from typing import Annotated

import typer

from rolecall.cli.commands.chat import DEFAULT_SESSION, build_orchestrator
from rolecall.cli.output import console, print_error, print_reply

app = typer.Typer(
    name="ask",
    help="Ask a single question and print the reply.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def ask(
    utterance: Annotated[
        str | None,
        typer.Argument(help="What to ask."),
    ] = None,
    plain: Annotated[
        bool,
        typer.Option(
            "--plain",
            help="Print the reply as plain text.",
        ),
    ] = False,
) -> None:
    """Run one conversation turn."""
    if not utterance or not utterance.strip():
        print_error("A question is required.")
        raise typer.Exit(1)

    orchestrator = build_orchestrator()
    reply = asyncio.run(orchestrator.respond(DEFAULT_SESSION, utterance))

    if plain:
        console.print(reply, markup=False, highlight=False)
    else:
        print_reply(reply)
