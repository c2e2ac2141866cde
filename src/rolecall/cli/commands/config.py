"""
rolecall config - Show the effective configuration.

Usage:
    rolecall config show
    rolecall config show remote
    rolecall config show --json
"""

import json
from typing import Annotated

import typer
import yaml
from rich.panel import Panel
from rich.syntax import Syntax

from rolecall.cli.output import console, mask_secrets
from rolecall.config import get_config, get_nested_value

app = typer.Typer(
    name="config",
    help="Configuration inspection.",
)


@app.command()
def show(
    section: Annotated[
        str | None,
        typer.Argument(
            help="Config section to show (e.g., 'remote', 'auth.scopes').",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Output as JSON.",
        ),
    ] = False,
) -> None:
    """Show merged configuration values with secrets masked."""
    config_dict = mask_secrets(get_config().model_dump())

    if section:
        value = get_nested_value(config_dict, section)
        if value is None:
            console.print(f"[red]Section '{section}' not found in configuration.[/red]")
            raise typer.Exit(1)
        config_dict = value

    if json_output:
        output = json.dumps(config_dict, indent=2, default=str)
        console.print(Syntax(output, "json", theme="monokai"))
        return

    output = yaml.dump(
        config_dict,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    if section:
        console.print(Panel(Syntax(output, "yaml", theme="monokai"), title=f"[cyan]{section}[/cyan]"))
    else:
        console.print(Syntax(output, "yaml", theme="monokai"))
