"""
rolecall auth - Inspect the configured bearer credential.

Usage:
    rolecall auth status
"""

from datetime import datetime, timedelta, timezone

import typer
from rich.table import Table

from rolecall.auth import RefreshTokenSource, build_token_source, is_token_valid, token_expiry
from rolecall.cli.output import console, mask_value
from rolecall.config import get_config

app = typer.Typer(
    name="auth",
    help="Credential status.",
)


def _describe_expiry(expires_at: datetime | None) -> str:
    if expires_at is None:
        return "unknown (treated as valid)"
    remaining = expires_at - datetime.now(timezone.utc)
    if remaining.total_seconds() <= 0:
        return f"{expires_at:%Y-%m-%d %H:%M:%S} UTC (expired)"
    minutes = int(remaining.total_seconds() // 60)
    return f"{expires_at:%Y-%m-%d %H:%M:%S} UTC (in {minutes} min)"


@app.command("status")
def status() -> None:
    """Show whether a usable token is configured."""
    config = get_config().auth
    source = build_token_source(config)
    margin = timedelta(minutes=config.refresh_margin_minutes)

    table = Table(title="Credential Status", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("User", config.user_id)
    if isinstance(source, RefreshTokenSource):
        table.add_row("Token source", f"refresh grant ({source.token_url})")
    else:
        table.add_row("Token source", "static token")
    table.add_row("Scopes", " ".join(config.scopes))
    table.add_row("Refresh token", "configured" if config.refresh_token else "[dim]none[/dim]")

    token = config.access_token
    if not token:
        table.add_row("Access token", "[yellow]not configured[/yellow]")
    else:
        valid = is_token_valid(token, margin=margin)
        table.add_row("Access token", mask_value(token))
        table.add_row("Expires", _describe_expiry(token_expiry(token)))
        table.add_row(
            "Usable",
            "[green]yes[/green]" if valid else f"[red]no[/red] (expires within {margin})",
        )

    console.print(table)
