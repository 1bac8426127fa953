"""Rich formatting helpers for the toolchat CLI.

Provides functions that format agent data structures for terminal display.
Rich auto-detects TTY and degrades gracefully when piped (no ANSI codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from toolchat.protocols import Role

if TYPE_CHECKING:
    from collections.abc import Sequence

    from toolchat.protocols import Message
    from toolchat.toolkit.registry import ToolRegistry

_ROLE_STYLES = {
    Role.SYSTEM: "magenta",
    Role.USER: "cyan",
    Role.ASSISTANT: "green",
    Role.TOOL: "yellow",
}


def get_console() -> Console:
    """Create a Rich Console that auto-detects TTY for graceful pipe degradation."""
    return Console(stderr=False)


def format_reply(text: str, console: Console) -> None:
    """Display an assistant reply."""
    if not text:
        console.print("[dim](no content)[/dim]")
        return
    console.print(f"[green]assistant:[/green] {escape(text)}", highlight=False)


def format_history(messages: Sequence[Message], console: Console) -> None:
    """Display the conversation log, one row per message."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Role", width=9)
    table.add_column("Content")

    for idx, message in enumerate(messages):
        style = _ROLE_STYLES[message.role]
        role = message.role.value
        if message.tool_name:
            role = f"{role}:{message.tool_name}"
        content = message.content or ""
        if message.role is Role.SYSTEM:
            content = content.strip().splitlines()[0] if content.strip() else ""
        table.add_row(str(idx), f"[{style}]{escape(role)}[/{style}]", escape(content))

    console.print(table)


def format_tools(registry: ToolRegistry, console: Console) -> None:
    """Display registered tools with their parameters."""
    if not len(registry):
        console.print("[dim]No tools registered.[/dim]")
        return

    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Tool", style="cyan")
    table.add_column("Parameters")
    table.add_column("Description")

    for tool in registry:
        required = set(tool.parameters.get("required", []))
        params = []
        for name in tool.parameters.get("properties", {}):
            params.append(f"{name}*" if name in required else name)
        table.add_row(tool.name, escape(", ".join(params)), escape(tool.description))

    console.print(table)


def format_error(message: str, console: Console) -> None:
    """Display an error message."""
    console.print(f"[red]Error:[/red] {escape(message)}", highlight=False)
