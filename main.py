"""Soundcheck - music news assistant

Simple CLI standing in for the chat front end.
"""

import argparse
import asyncio
import sys

from soundcheck.agents.assistant import Assistant
from soundcheck.config import settings

STAGE_LABELS = {
    "planning": "Thinking...",
    "searching": "Searching for articles...",
    "analyzing": "Analyzing what was found...",
}


async def render(events) -> str:
    """Print progress lines and return the final text."""
    final_text = ""
    async for event in events:
        event_type = event.event.value
        data = event.data

        if event_type == "status":
            label = STAGE_LABELS.get(data.get("stage"), data.get("stage"))
            queries = data.get("queries")
            if isinstance(queries, list) and queries:
                print(f"[~] {label} ({len(queries)} queries)")
            else:
                print(f"[~] {label}")

        elif event_type == "sources_found":
            print(f"  [+] {data.get('count')} articles")

        elif event_type == "error":
            print(f"[!] Error: {data.get('message', 'Unknown error')}", file=sys.stderr)

        elif event_type == "complete":
            final_text = data.get("text", "")

    return final_text


async def run_ask(question: str) -> None:
    assistant = Assistant()
    text = await render(assistant.answer_stream(question))
    print(f"\n{text}")


async def run_news(top_n: int | None) -> None:
    assistant = Assistant()
    text = await render(assistant.digest_stream(top_n))
    print(f"\n{text}")


async def run_chat() -> None:
    assistant = Assistant()
    print(settings.greeting_message)
    print()
    while True:
        try:
            line = await asyncio.to_thread(input, "> ")
        except EOFError:
            break
        line = line.strip()
        if not line:
            continue
        if line in ("/quit", "/exit"):
            break
        if line == "/start":
            print(settings.greeting_message)
            continue
        if line == "/news":
            text = await render(assistant.digest_stream())
        else:
            text = await render(assistant.answer_stream(line))
        print(f"\n{text}\n")


def main():
    parser = argparse.ArgumentParser(description="Soundcheck music news assistant")
    subparsers = parser.add_subparsers(dest="command", required=True)

    ask_parser = subparsers.add_parser("ask", help="Answer one question")
    ask_parser.add_argument("question", help="Question about music")

    news_parser = subparsers.add_parser("news", help="Weekly digest of the top music stories")
    news_parser.add_argument("--top", "-n", type=int, default=None, help="Number of stories (default: from config)")

    subparsers.add_parser("chat", help="Interactive session (/news, /start, /quit)")

    args = parser.parse_args()

    if args.command == "ask":
        asyncio.run(run_ask(args.question))
    elif args.command == "news":
        asyncio.run(run_news(args.top))
    else:
        try:
            asyncio.run(run_chat())
        except KeyboardInterrupt:
            pass


if __name__ == "__main__":
    main()
