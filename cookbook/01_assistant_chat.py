"""Personal Assistant Chat

Open an agent with the built-in tools and run a few turns: one the model
answers directly, one that saves a task through persist_data, and one that
looks up the weather. The log is printed after each turn so you can see
which turns produced a tool message.

Demonstrates: Agent.open(), turn(), messages, TurnError handling
"""

import os

from dotenv import load_dotenv

from toolchat import Agent, AgentConfig, Role, TurnError

load_dotenv()

TOOLCHAT_OPENAI_API_KEY = os.environ["TOOLCHAT_OPENAI_API_KEY"]
TOOLCHAT_OPENAI_BASE_URL = os.environ.get("TOOLCHAT_OPENAI_BASE_URL")
MODEL_ID = "gpt-4o-mini"

PROMPTS = [
    "Hi! What can you help me with?",
    "Remember to buy milk on the way home.",
    "What's the weather like in Boston?",
]


def show_log(agent):
    for message in agent.messages[1:]:
        label = message.role.value
        if message.role is Role.TOOL:
            label = f"tool:{message.tool_name}"
        print(f"  [{label}] {message.content}")


def main():
    with Agent.open(
        api_key=TOOLCHAT_OPENAI_API_KEY,
        base_url=TOOLCHAT_OPENAI_BASE_URL,
        model=MODEL_ID,
        config=AgentConfig(max_tokens=512),
    ) as agent:
        for prompt in PROMPTS:
            print("=" * 60)
            print(f"you> {prompt}")
            try:
                print(f"assistant> {agent.turn(prompt)}")
            except TurnError as e:
                print(f"turn failed: {e}")
            print()
            show_log(agent)
            print()


if __name__ == "__main__":
    main()
