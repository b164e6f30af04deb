"""CLI: copilot-chat chat, copilot-chat send"""

import json

import click
from rich.console import Console
from rich.markup import escape

from copilot_chat.models.auth import AuthStatus
from copilot_chat.models.response import ResponseEnvelope

console = Console()


def _get_client():
    from copilot_chat.cli.main import _get_client
    return _get_client()


def _run(coro):
    from copilot_chat.cli.main import _run
    return _run(coro)


def _print_status(status: AuthStatus) -> None:
    if status.is_authenticated:
        console.print("[dim](signed in)[/dim]")
    elif status.error:
        console.print(f"[red]Authentication failed:[/red] {escape(status.error.message)}")


def _print_response(response: ResponseEnvelope) -> None:
    meta = response.metadata
    if not response.success:
        console.print(f"[red]{escape(response.message_text)}[/red]")
        return
    if meta.has_text:
        console.print(f"[green]Agent:[/green] {escape(response.message_text)}")
    for card in meta.adaptive_cards:
        console.print(f"[yellow]Card:[/yellow] {escape(card.name)}")
    if meta.has_suggested_actions:
        titles = ", ".join(action.title or str(action.value) for action in meta.suggested_actions)
        console.print(f"[cyan]Suggestions:[/cyan] {escape(titles)}")
    if not meta.has_text and not meta.has_adaptive_cards:
        console.print("[dim](no response from agent)[/dim]")
    console.print(f"[dim]{meta.duration} ms · conversation {response.conversation_id}[/dim]")


@click.command("chat")
def chat_cmd():
    """Interactive chat with the agent."""

    async def _chat():
        client = _get_client()
        client.authenticator.on_status_change(_print_status)
        console.print("[cyan]Type your message (/reset, /new, /quit)[/cyan]\n")
        continue_conversation = True
        try:
            while True:
                msg = click.prompt("You", prompt_suffix=": ")
                command = msg.strip().lower()
                if command in ("/quit", "/exit"):
                    break
                if command == "/reset":
                    client.reset_conversation_context()
                    console.print("[dim](conversation reset)[/dim]")
                    continue
                if command == "/new":
                    continue_conversation = False
                    console.print("[dim](next message starts a new conversation)[/dim]")
                    continue
                with console.status("Waiting for agent..."):
                    response = await client.send_message(msg, continue_conversation)
                continue_conversation = True
                _print_response(response)
        except (KeyboardInterrupt, EOFError, click.Abort):
            pass
        finally:
            await client.aclose()

    _run(_chat())


@click.command("send")
@click.argument("message")
@click.option("--new", "new_conversation", is_flag=True, help="Start a new conversation")
@click.option("--json-output", "--json", is_flag=True)
def send_cmd(message: str, new_conversation: bool, json_output: bool):
    """Send a one-shot message."""

    async def _send():
        async with _get_client() as client:
            if not json_output:
                client.authenticator.on_status_change(_print_status)
            response = await client.send_message(message, not new_conversation)
        if json_output:
            click.echo(json.dumps(response.model_dump(mode="json", by_alias=True), indent=2))
        else:
            _print_response(response)
        if not response.success:
            raise SystemExit(1)

    _run(_send())
