"""
rolecall resolve - Show how a request would be routed.

Nothing is invoked; this only runs intent resolution.

Usage:
    rolecall resolve "Assign role Admin to user john@example.com in app MyApp"
    rolecall resolve "Get all users" --rules-only
"""

import asyncio
from typing import Annotated

import typer
from rich.table import Table

from rolecall.agent import IntentResolver, RuleBasedResolver, ToolInvocationRequest
from rolecall.cli.output import console, print_error, print_info
from rolecall.config import get_config
from rolecall.tools import get_tool_catalog

app = typer.Typer(
    name="resolve",
    help="Show the tool a request resolves to, without calling it.",
    invoke_without_command=True,
)


async def _resolve(utterance: str, rules_only: bool) -> ToolInvocationRequest | None:
    if rules_only:
        return RuleBasedResolver().resolve(utterance)

    from rolecall.providers import get_provider_manager

    config = get_config()
    resolver = IntentResolver(
        get_tool_catalog(),
        complete=get_provider_manager().complete_text,
        config=config.resolver,
    )
    return await resolver.resolve(utterance)


@app.callback(invoke_without_command=True)
def resolve(
    utterance: Annotated[
        str | None,
        typer.Argument(help="Request to resolve."),
    ] = None,
    rules_only: Annotated[
        bool,
        typer.Option(
            "--rules-only",
            help="Use only the keyword rules, no LLM call.",
        ),
    ] = False,
) -> None:
    """Resolve a request and print the routing decision."""
    if not utterance or not utterance.strip():
        print_error("A request is required.")
        raise typer.Exit(1)

    request = asyncio.run(_resolve(utterance, rules_only))

    if request is None:
        print_info("No tool call: the request would be answered conversationally.")
        return

    catalog = get_tool_catalog()
    tool = catalog.get(request.tool_name)
    params = tool.with_defaults(request.parameters) if tool else request.parameters
    missing = tool.missing_slots(params) if tool else []
    threshold = get_config().resolver.confidence_threshold

    table = Table(title="Resolution", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Tool", request.tool_name)
    for name, value in params.items():
        table.add_row(f"  {name}", value)
    table.add_row("Confidence", f"{request.confidence:.2f}")
    table.add_row("Source", request.source.value)
    table.add_row("Missing slots", ", ".join(missing) if missing else "-")
    table.add_row(
        "Would run",
        "[green]yes[/green]"
        if request.should_execute(threshold) and not missing
        else "[yellow]no[/yellow]",
    )
    console.print(table)
