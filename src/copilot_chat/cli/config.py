"""CLI: copilot-chat configure|status"""

import click
from rich.console import Console
from rich.table import Table

from copilot_chat.config import AgentConfig, validate_config

console = Console()

FIELDS = [
    ("client_id", "Client ID"),
    ("tenant_id", "Tenant ID"),
    ("bot_identifier", "Bot Identifier"),
    ("environment_id", "Environment ID"),
]


def _load_config() -> dict:
    from copilot_chat.cli.main import _load_config
    return _load_config()


def _save_config(cfg: dict) -> None:
    from copilot_chat.cli.main import _save_config
    _save_config(cfg)


def _agent_config() -> AgentConfig:
    from copilot_chat.cli.main import _agent_config
    return _agent_config()


@click.command("configure")
def configure():
    """Save the agent configuration."""
    current = AgentConfig.model_validate(_load_config())
    values = {
        field: click.prompt(label, default=getattr(current, field) or None)
        for field, label in FIELDS
    }
    config = AgentConfig(**values)

    validation = validate_config(config)
    if not validation.is_valid:
        for error in validation.errors:
            console.print(f"[red]{error}[/red]")
        raise SystemExit(1)

    _save_config(config.model_dump(by_alias=True))
    console.print("[green]Configuration saved.[/green]")


@click.command("status")
def status():
    """Show the active configuration."""
    config = _agent_config()
    table = Table(title="Agent configuration")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    for field, label in FIELDS:
        table.add_row(label, getattr(config, field) or "[dim]-[/dim]")
    console.print(table)

    validation = validate_config(config)
    if validation.is_valid:
        console.print("[green]Configuration valid.[/green]")
    else:
        for error in validation.errors:
            console.print(f"[yellow]{error}[/yellow]")
