"""
Command-line entry point: run the enrichment pipeline from the terminal.

    python main.py "Summarize https://example.com"   # one prompt, then exit
    python main.py                                    # interactive session
"""

import argparse
import asyncio
import sys
import threading
import time

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from api.factory import create_generator_from_env
from config.config import Config
from jobs.enrichment import run_inline
from models.errors import EnrichError
from tools.web.factory import create_scrape_service_from_env
from utils.token_tracker import TokenTracker


def show_loading_animation(stop_event: threading.Event) -> None:
    """Spin until stop_event is set."""
    while not stop_event.is_set():
        for char in "|/-\\":
            if stop_event.is_set():
                break
            sys.stdout.write(f"\r\033[93mEnriching {char}\033[0m")
            sys.stdout.flush()
            time.sleep(0.1)
    sys.stdout.write("\r" + " " * 20 + "\r")
    sys.stdout.flush()


def enrich_once(prompt: str, scraper, generator, token_tracker: TokenTracker) -> None:
    stop_animation = threading.Event()
    loading_thread = threading.Thread(target=show_loading_animation, args=(stop_animation,))
    loading_thread.daemon = True
    loading_thread.start()

    try:
        result = asyncio.run(run_inline(prompt, scraper=scraper, generator=generator))
    finally:
        stop_animation.set()
        loading_thread.join()

    token_tracker.update(result.token_usage)
    print(f"\nAI: {result.text}")
    print(f"[Tokens used: {result.token_usage.total_tokens}]\n")


def main() -> int:
    parser = argparse.ArgumentParser(description="PromptEnrich CLI")
    parser.add_argument("prompt", nargs="?", help="Prompt to enrich (omit for interactive mode)")
    args = parser.parse_args()

    config = Config()
    try:
        scraper = create_scrape_service_from_env(config)
        generator = create_generator_from_env(config)
    except EnrichError as e:
        print(f"Error initializing clients: {e}")
        return 1

    token_tracker = TokenTracker()

    if args.prompt:
        try:
            enrich_once(args.prompt, scraper, generator, token_tracker)
        except EnrichError as e:
            print(f"\nError: {e}")
            return 1
        return 0

    print(f"\n=== PromptEnrich ({config.get_model_info()}) ===")
    print("Type 'exit' to quit, 'stats' to see token usage, or 'help' for commands\n")

    try:
        while True:
            try:
                user_input = input("You: ").strip()
            except (KeyboardInterrupt, EOFError):
                print("\nExiting...")
                break

            if not user_input:
                continue
            if user_input.lower() in ("exit", "quit"):
                print("\nGoodbye!")
                break
            if user_input.lower() == "stats":
                print("\n=== Token Usage ===")
                print(token_tracker.format_summary() + "\n")
                continue
            if user_input.lower() == "help":
                print("\n=== Available Commands ===")
                print("help      - Show this help message")
                print("stats     - Show token usage statistics")
                print("exit/quit - Exit the program")
                print("Any other input is sent as a prompt; URLs in it are scraped as context.\n")
                continue

            try:
                enrich_once(user_input, scraper, generator, token_tracker)
            except EnrichError as e:
                print(f"\nError: {e}\n")
    finally:
        if token_tracker.requests > 0:
            print("\n=== Final Token Usage ===")
            print(token_tracker.format_summary())

    return 0


if __name__ == "__main__":
    sys.exit(main())
