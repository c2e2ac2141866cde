"""
Output helpers shared by the CLI commands.
"""

from typing import Any

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

# Keys whose values are never printed in full
SECRET_KEYS = frozenset({"client_secret", "access_token", "refresh_token", "api_key"})

console = Console()


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]✗[/red] {message}")


def print_info(message: str) -> None:
    console.print(f"[blue]i[/blue] {message}")


def print_reply(text: str, title: str = "rolecall") -> None:
    """Render an assistant reply as markdown inside a panel."""
    console.print(Panel(Markdown(text), title=f"[cyan]{title}[/cyan]", border_style="cyan"))


def mask_value(value: str) -> str:
    """Mask a secret, keeping only its last four characters."""
    if len(value) <= 8:
        return "****"
    return f"****{value[-4:]}"


def mask_secrets(data: Any) -> Any:
    """Copy of a config structure with secret values masked."""
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if key in SECRET_KEYS and isinstance(value, str) and value:
                masked[key] = mask_value(value)
            else:
                masked[key] = mask_secrets(value)
        return masked
    if isinstance(data, list):
        return [mask_secrets(item) for item in data]
    return data
