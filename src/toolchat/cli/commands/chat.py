"""toolchat chat -- interactive conversation with the agent."""

from __future__ import annotations

import click

from toolchat.cli.formatting import format_error, format_history, format_reply, get_console
from toolchat.exceptions import TurnError

_EXIT_COMMANDS = {"/exit", "/quit"}


@click.command()
@click.option("-m", "--message", default=None, help="Send one message and exit.")
@click.option("--system-prompt", default=None, help="Override the default system prompt.")
@click.pass_context
def chat(ctx: click.Context, message: str | None, system_prompt: str | None) -> None:
    """Chat with the assistant. Type /history to show the log, /exit to quit."""
    from toolchat.cli import _open_agent

    console = get_console()
    try:
        agent = _open_agent(ctx, system_prompt)
    except Exception as e:
        format_error(str(e), console)
        raise SystemExit(1) from None

    with agent:
        if message is not None:
            try:
                format_reply(agent.turn(message), console)
            except TurnError as e:
                format_error(str(e), console)
                raise SystemExit(1) from None
            return

        while True:
            try:
                text = click.prompt("you", prompt_suffix="> ")
            except click.Abort:
                console.print()
                break

            command = text.strip()
            if command in _EXIT_COMMANDS:
                break
            if command == "/history":
                format_history(agent.messages, console)
                continue
            if not command:
                continue

            try:
                format_reply(agent.turn(text), console)
            except TurnError as e:
                # The session survives a failed turn; the user may retry.
                format_error(str(e), console)
