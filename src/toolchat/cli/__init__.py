"""toolchat CLI -- terminal front end for the tool-calling agent.

This module is NEVER imported from toolchat/__init__.py.
It is only loaded via the ``toolchat`` entry point defined in pyproject.toml.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import click

from toolchat.llm.client import API_KEY_ENV, BASE_URL_ENV

if TYPE_CHECKING:
    from toolchat.orchestrator.agent import Agent


@click.group()
@click.option(
    "--api-key",
    default=None,
    envvar=API_KEY_ENV,
    help="API key for the completion service.",
)
@click.option(
    "--base-url",
    default=None,
    envvar=BASE_URL_ENV,
    help="Base URL of an OpenAI-compatible API.",
)
@click.option(
    "--model",
    default=None,
    envvar="TOOLCHAT_MODEL",
    help="Model identifier (client default if omitted).",
)
@click.option(
    "--max-tokens",
    default=512,
    show_default=True,
    type=click.IntRange(min=1),
    help="Maximum tokens per completion round.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output.")
@click.pass_context
def cli(
    ctx: click.Context,
    api_key: str | None,
    base_url: str | None,
    model: str | None,
    max_tokens: int,
    verbose: bool,
) -> None:
    """toolchat: chat with a model that can call local tools."""
    ctx.ensure_object(dict)
    ctx.obj["api_key"] = api_key
    ctx.obj["base_url"] = base_url
    ctx.obj["model"] = model
    ctx.obj["max_tokens"] = max_tokens
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _open_agent(ctx: click.Context, system_prompt: str | None = None) -> Agent:
    """Build an Agent from Click context.

    A completion client placed in ``ctx.obj["client"]`` is used as-is;
    otherwise an OpenAIClient is created from the CLI options.
    """
    from toolchat.orchestrator.agent import Agent
    from toolchat.orchestrator.config import AgentConfig
    from toolchat.prompts.assistant import DEFAULT_SYSTEM_PROMPT
    from toolchat.toolkit.definitions import default_registry

    config = AgentConfig(model=ctx.obj["model"], max_tokens=ctx.obj["max_tokens"])
    client = ctx.obj.get("client")
    if client is not None:
        return Agent(
            system_prompt or DEFAULT_SYSTEM_PROMPT,
            default_registry(),
            client=client,
            config=config,
        )
    return Agent.open(
        system_prompt,
        api_key=ctx.obj["api_key"],
        base_url=ctx.obj["base_url"],
        model=ctx.obj["model"],
        config=config,
    )


# Register subcommands after cli group is defined
from toolchat.cli.commands.chat import chat  # noqa: E402
from toolchat.cli.commands.tools import tools  # noqa: E402

cli.add_command(chat)
cli.add_command(tools)
