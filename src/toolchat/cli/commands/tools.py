"""toolchat tools -- list the tools the model may call."""

from __future__ import annotations

import json

import click

from toolchat.cli.formatting import format_tools, get_console


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Print the OpenAI tools payload.")
def tools(as_json: bool) -> None:
    """Show the built-in tools and their parameters."""
    from toolchat.toolkit.definitions import default_registry

    registry = default_registry()
    if as_json:
        click.echo(json.dumps(registry.to_openai(), indent=2))
        return
    format_tools(registry, get_console())
