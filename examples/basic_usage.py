"""
Basic usage example for the qai ReAct agent.
"""

import logging
import os
import sys

from qai import Agent, AgentConfig, create_chat_completion_client
from qai.chat import start_reply
from qai.config import load_api_token


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    provider = os.getenv("QAI_PROVIDER", "ollama")
    token = load_api_token()

    agent = Agent(AgentConfig(provider=provider, api_token=token, max_steps=8))
    task = " ".join(sys.argv[1:]) or "List the Python files in this directory and summarize what they do."
    run = agent.start(task)
    for line in run.iter_output():
        print(line, end="", flush=True)
    result = run.join()
    print()
    print("Status:", result.status if result else "unknown")

    client = create_chat_completion_client(provider, api_key=token)
    reply = start_reply(client, "You are concise.", [("user", "Say hello in five words.")])
    for token_text in iter(reply.channel.get, None):
        print(token_text, end="", flush=True)
    print()


if __name__ == "__main__":
    main()
