"""Custom Tools

Register your own tool alongside the built-ins. Arguments are declared as
a pydantic model; the JSON schema the model sees is derived from it, and
the handler receives a validated instance.

Demonstrates: ToolDefinition.from_model(), ToolRegistry, get_all_tools(),
              Agent(client=...), ToolDispatchFailedError
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from toolchat import (
    Agent,
    OpenAIClient,
    ToolDefinition,
    ToolDispatchFailedError,
    ToolRegistry,
    get_all_tools,
)

load_dotenv()

TOOLCHAT_OPENAI_API_KEY = os.environ["TOOLCHAT_OPENAI_API_KEY"]
TOOLCHAT_OPENAI_BASE_URL = os.environ.get("TOOLCHAT_OPENAI_BASE_URL")
MODEL_ID = "gpt-4o-mini"


class ConvertArguments(BaseModel):
    amount: float = Field(description="Amount to convert")
    source: str = Field(description="ISO currency code to convert from, e.g. USD")
    target: str = Field(description="ISO currency code to convert to, e.g. EUR")


RATES = {("USD", "EUR"): 0.92, ("EUR", "USD"): 1.09}


def convert_currency(args: ConvertArguments) -> dict:
    rate = RATES.get((args.source.upper(), args.target.upper()))
    if rate is None:
        raise ValueError(f"no rate for {args.source}->{args.target}")
    return {"amount": round(args.amount * rate, 2), "currency": args.target.upper()}


def main():
    registry = ToolRegistry([
        *get_all_tools(),
        ToolDefinition.from_model(
            name="convert_currency",
            description="Convert an amount between two currencies",
            arguments_model=ConvertArguments,
            handler=convert_currency,
        ),
    ])
    print(f"Tools: {registry.names()}")

    client = OpenAIClient(
        api_key=TOOLCHAT_OPENAI_API_KEY,
        base_url=TOOLCHAT_OPENAI_BASE_URL,
        default_model=MODEL_ID,
    )
    with Agent("You are a helpful travel assistant.", registry, client=client, owns_client=True) as agent:
        for prompt in ["How much is 120 USD in EUR?", "And 50 GBP in JPY?"]:
            print(f"you> {prompt}")
            try:
                print(f"assistant> {agent.turn(prompt)}")
            except ToolDispatchFailedError as e:
                # Nothing was recorded for the failed turn.
                print(f"tool {e.tool_name} failed: {e}")
            print(f"  log length: {len(agent.messages)}")


if __name__ == "__main__":
    main()
