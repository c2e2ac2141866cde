"""
rolecall chat - Interactive conversation.

Usage:
    rolecall chat
    rolecall chat --session support

Inside the session:
    /reset   clear the conversation
    /count   show how many messages the conversation holds
    /exit    quit
"""

import asyncio
from typing import Annotated

import typer

from rolecall.agent import Orchestrator
from rolecall.auth import session_from_config
from rolecall.cli.output import console, print_info, print_reply, print_success
from rolecall.config import get_config

app = typer.Typer(
    name="chat",
    help="Start an interactive conversation.",
    invoke_without_command=True,
)

DEFAULT_SESSION = "cli"
EXIT_COMMANDS = frozenset({"/exit", "/quit"})


def build_orchestrator() -> Orchestrator:
    """Wire an orchestrator from the loaded configuration."""
    config = get_config()
    return Orchestrator.from_config(
        config,
        auth_factory=lambda session_id: session_from_config(config.auth),
    )


async def _chat_loop(orchestrator: Orchestrator, session_id: str) -> None:
    while True:
        try:
            line = console.input("[bold green]you>[/bold green] ")
        except (EOFError, KeyboardInterrupt):
            console.print()
            break

        utterance = line.strip()
        if not utterance:
            continue

        command = utterance.lower()
        if command in EXIT_COMMANDS:
            break
        if command == "/reset":
            orchestrator.reset(session_id)
            print_success("Conversation cleared.")
            continue
        if command == "/count":
            print_info(f"Messages in conversation: {orchestrator.message_count(session_id)}")
            continue

        with console.status("[dim]Thinking...[/dim]"):
            reply = await orchestrator.respond(session_id, utterance)
        print_reply(reply)


@app.callback(invoke_without_command=True)
def chat(
    session_id: Annotated[
        str,
        typer.Option(
            "--session",
            "-s",
            help="Conversation id.",
        ),
    ] = DEFAULT_SESSION,
) -> None:
    """Chat about users, applications and roles."""
    orchestrator = build_orchestrator()
    console.print(
        "[bold blue]rolecall[/bold blue] [dim]- /reset clears, /count counts, /exit quits[/dim]"
    )
    asyncio.run(_chat_loop(orchestrator, session_id))
