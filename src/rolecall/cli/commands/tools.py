"""
rolecall tools - Inspect the remote tool catalog.

Usage:
    rolecall tools list
    rolecall tools info <tool-name>
"""

from typing import Annotated

import typer
from rich.table import Table

from rolecall.cli.output import console
from rolecall.config import get_config
from rolecall.invoker import build_url
from rolecall.tools import get_tool_catalog

app = typer.Typer(
    name="tools",
    help="Inspect the remote tools the assistant can call.",
)


@app.command("list")
def list_tools() -> None:
    """List all catalog tools."""
    catalog = get_tool_catalog()

    table = Table(title="Remote Tools")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Route", style="magenta")
    table.add_column("Kind")
    table.add_column("Timeout")
    table.add_column("Description")

    for tool in catalog:
        kind = "[yellow]mutating[/yellow]" if tool.mutating else "read"
        if not tool.mutating and any(a.mutating for a in tool.actions):
            kind = "mixed"
        desc = tool.description[:70] + "..." if len(tool.description) > 70 else tool.description
        table.add_row(tool.name, tool.route, kind, tool.timeout_class, desc)

    console.print(table)
    console.print(f"\n[dim]Total: {len(catalog)} tool(s)[/dim]")


@app.command("info")
def tool_info(
    tool_name: Annotated[
        str,
        typer.Argument(help="Tool name to get info about"),
    ],
) -> None:
    """Show detailed information about a tool."""
    catalog = get_tool_catalog()
    tool = catalog.get(tool_name)

    if tool is None:
        console.print(f"[red]Error:[/red] Tool not found: {tool_name}")
        console.print(f"\n[dim]Available tools: {', '.join(catalog.names())}[/dim]")
        raise typer.Exit(1)

    config = get_config()
    console.print(f"\n[bold cyan]{tool.name}[/bold cyan]")
    console.print(f"Endpoint: GET {build_url(config.remote.base_url, tool, {})}")
    console.print(f"Timeout: {config.timeout_for(tool.timeout_class):g}s ({tool.timeout_class})")
    console.print(f"\n[bold]Description:[/bold]\n{tool.description}")

    if tool.parameters:
        console.print("\n[bold]Parameters:[/bold]")
        for param in tool.parameters:
            required = "[red]*[/red]" if param.required else ""
            console.print(f"  • {param.name}{required}: {param.description}")

    if tool.actions:
        console.print("\n[bold]Actions:[/bold]")
        for action in tool.actions:
            flag = " [yellow](mutating)[/yellow]" if action.mutating else ""
            needs = ", ".join(action.required) or "nothing"
            console.print(f"  • {action.name}{flag}: {action.description}")
            console.print(f"    [dim]requires: {needs}[/dim]")
