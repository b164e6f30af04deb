"""
copilot-chat CLI — `copilot-chat` command.

Commands:
  copilot-chat configure        Save agent configuration
  copilot-chat status           Show configuration and validation errors
  copilot-chat chat             Interactive REPL chat
  copilot-chat send <message>   One-shot message
"""

import asyncio
import json
import logging
from pathlib import Path

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install copilot-chat[cli]")

from copilot_chat.client import create_client
from copilot_chat.config import ENV_VARS, AgentConfig
from copilot_chat.conversation import ConversationClient

console = Console()
CONFIG_FILE = Path.home() / ".copilot-chat" / "config.json"


def _load_config() -> dict:
    try:
        return json.loads(CONFIG_FILE.read_text())
    except (FileNotFoundError, json.JSONDecodeError):
        return {}


def _save_config(cfg: dict) -> None:
    CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE.write_text(json.dumps(cfg, indent=2))


def _agent_config() -> AgentConfig:
    """Saved config, with COPILOT_* environment variables taking precedence."""
    saved = AgentConfig.model_validate(_load_config())
    env = AgentConfig.from_env()
    overrides = {field: getattr(env, field) for field in ENV_VARS if getattr(env, field)}
    return saved.model_copy(update=overrides)


def _get_client() -> ConversationClient:
    return create_client(_agent_config())


def _run(coro):
    return asyncio.run(coro)


def _configure_logging(verbose: bool) -> None:
    if not verbose:
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(name)s: %(message)s",
        handlers=[RichHandler(console=console, show_time=False, show_path=False, markup=False)],
    )
    # httpx logs every request at INFO; keep our own loggers the loud ones.
    logging.getLogger("httpx").setLevel(logging.WARNING)


@click.group()
@click.version_option("0.1.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """copilot-chat CLI — chat with a Copilot Studio agent."""
    _configure_logging(verbose)


# Register subcommands from separate modules
from copilot_chat.cli.config import configure, status
from copilot_chat.cli.chat import chat_cmd, send_cmd

main.add_command(configure)
main.add_command(status)
main.add_command(chat_cmd)
main.add_command(send_cmd)


if __name__ == "__main__":
    main()
