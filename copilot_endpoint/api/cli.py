"""
Minimal interactive CLI entrypoint for Copilot Studio endpoints.

Architectural role:
- Provides a terminal-only chat over a weighted-selected endpoint.
- Keeps the message history locally and sends all of it on each turn.

Request lifecycle (per user turn):
1. Read a single line from stdin.
2. Handle local control commands (`exit`/`quit`, `empty chat`/`clear chat`).
3. Append the question to history and invoke the selected endpoint.
4. Print fragments as they arrive; store the terminal text as the reply.

Error handling strategy:
- Handles EOF and keyboard interrupts without traceback output.
- Adapter failures are printed and the loop continues; a failed turn is
  removed from history.
"""

import logging
import sys

from copilot_endpoint.core.selection import build_endpoints, select_endpoint
from copilot_endpoint.llm.errors import DirectLineError
from copilot_endpoint.llm.provider_config import LOG_LEVEL

logger = logging.getLogger(__name__)


def run_turn(endpoint, history, out=None):
    """Invoke `endpoint` with `history`, echo fragments to `out`, return the reply text."""
    if out is None:
        out = sys.stdout
    reply = ""
    for unit in endpoint.generate(history):
        if unit.is_final:
            reply = unit.generated_text
        else:
            print(unit.token.text, end="", flush=True, file=out)
    print(file=out)
    return reply


def main(endpoints=None):
    """
    Run the interactive terminal session.

    Error handling strategy:
    - Endpoint configuration failure aborts startup with message.
    - EOF and keyboard interrupts are handled gracefully.
    """
    logging.basicConfig(level=LOG_LEVEL)

    if endpoints is None:
        try:
            endpoints = build_endpoints()
        except ValueError as e:
            print(f"Endpoint configuration error: {e}")
            return

    history = []

    print("Copilot chat started. (Type 'exit' to quit)")
    print(f"Configured endpoints: {', '.join(e.name for e in endpoints) or 'none'}")
    print("-" * 60)

    while True:

        try:
            question = input("Question: ").strip()

        except EOFError:
            print("\nSession ended (EOF received).")
            break

        except KeyboardInterrupt:
            print("\nOperation cancelled by user.")
            break

        if not question:
            continue

        if question.lower() in ("exit", "quit"):
            print("Shutting down.")
            break

        if question.lower() in ("empty chat", "clear chat"):
            history = []
            print("Chat cleared.")
            continue

        history.append({"role": "user", "content": question})

        print("\nResponse:\n")

        try:
            endpoint = select_endpoint(endpoints)
            reply = run_turn(endpoint, history)
        except DirectLineError as e:
            logger.debug("Turn failed", exc_info=True)
            print(f"\nError: {e}")
            history.pop()
            continue

        history.append({"role": "assistant", "content": reply})

        print("\n" + "-" * 60 + "\n")


if __name__ == "__main__":
    main()
