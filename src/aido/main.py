"""
aido entry point.

This file handles startup concerns (arg-parsing, settings, logging), loads the requested recipe
and runs one conversation, streaming the answer to stdout.
"""

import argparse
import logging
import sys
from typing import (
    List,
    Optional,
)

from aido import recipe as recipes
from aido.agent.agent_loop import run_conversation
from aido.common import (
    AnsiColors,
    StreamPrinter,
    colored_print,
)
from aido.config import (
    Settings,
    load_settings,
)
from aido.core.errors import AidoError
from aido.core.schema import (
    Message,
    SystemMessage,
    UserMessage,
)
from aido.recipe import Recipe
from aido.tools import select_tools

logger = logging.getLogger(__name__)

LOG_LEVELS = ["debug", "info", "warning", "error", "critical"]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def _init_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        stream=sys.stderr,
    )
    # Keep HTTP client chatter out of debug output
    for name in ("httpx", "httpcore", "openai"):
        logging.getLogger(name).setLevel(logging.WARNING)


def _build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aido", description="Do things with AI in your terminal")
    parser.add_argument("input", nargs="*", help="Request for the assistant (default: stdin)")
    parser.add_argument(
        "-c",
        "--config-file",
        default=None,
        help="Settings file in dotenv format (default: %s)" % settings.CONFIG_FILE,
    )
    parser.add_argument("-r", "--recipe", default=None, help="Name of the recipe to use")
    parser.add_argument(
        "--list-recipes", action="store_true", help="List available recipes and exit"
    )
    parser.add_argument(
        "--config-path", action="store_true", help="Print the settings file path and exit"
    )
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Give up after this many requests without a final answer",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.lower,
        default=None,
        help="Logging level (default from settings: %s)" % settings.LOG_LEVEL,
    )
    return parser


def _read_input(words: List[str]) -> str:
    if words:
        return " ".join(words)
    if not sys.stdin.isatty():
        return sys.stdin.read().strip()
    return ""


def build_history(user_input: str, recipe: Optional[Recipe] = None) -> List[Message]:
    """Seed the conversation: the recipe body as system prompt, then the user's request."""
    history: List[Message] = []
    if recipe is not None and recipe.body:
        history.append(SystemMessage(content=recipe.body))
    if user_input:
        history.append(UserMessage(content=user_input))
    return history


def _print_recipes(settings: Settings) -> None:
    recipes_dir = recipes.get_recipes_dir(settings.CONFIG_FILE)
    found = recipes.list_recipes(recipes_dir)
    if not found:
        colored_print(f"No recipes found in {recipes_dir}", AnsiColors.YELLOW)
        return
    for info in found:
        if info.display_name != info.name:
            print(f"{info.name}\t{info.display_name}")
        else:
            print(info.name)


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------
def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for aido.

    Exits with status 1 when the conversation fails and 2 on usage errors.
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser(load_settings())
    args = parser.parse_args(argv)
    settings = load_settings(args.config_file)

    # Command-line arguments override settings
    if args.verbose:
        settings.LOG_LEVEL = "debug"
    elif args.log_level:
        settings.LOG_LEVEL = args.log_level
    if args.max_iterations is not None:
        settings.MAX_ITERATIONS = args.max_iterations

    _init_logging(settings.LOG_LEVEL)
    logger.debug("Settings: %s", settings.model_dump(exclude={"API_KEY"}))

    if args.config_path:
        print(settings.CONFIG_FILE)
        return
    if args.list_recipes:
        _print_recipes(settings)
        return

    try:
        recipe = None
        if args.recipe:
            recipe = recipes.get(recipes.get_recipes_dir(settings.CONFIG_FILE), args.recipe)
        user_input = _read_input(args.input)
        history = build_history(user_input, recipe)
        if not history:
            parser.error("nothing to do: give a request or a recipe")

        allowed = list(recipe.header.allowed_tools) if recipe is not None else None
        tools = select_tools(allowed)
        logger.info("Available tools: %s", [tool.name for tool in tools])

        printer = StreamPrinter()
        response = run_conversation(history, tools, settings, on_chunk=printer)
        printer.finish()
        if not printer.printed and response.text:
            print(response.text)
    except AidoError as exc:
        colored_print(f"⚠️ {exc}", AnsiColors.RED, file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
