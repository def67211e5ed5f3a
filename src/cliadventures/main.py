"""CLI entrypoint for the shell treasure-hunt game."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable

from . import markup
from .commands import GOODBYE_MESSAGE, WELCOME_MESSAGE
from .models import CommandResponse
from .service import GameSession

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


class QuitApp(Exception):
    """Signal immediate app exit from the play loop."""


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    parser = argparse.ArgumentParser(prog="cliadventures", description="Learn shell commands on a treasure hunt")
    parser.add_argument("command", nargs="?", default="play", choices=["play"])
    parser.add_argument("--no-color", action="store_true", help="print plain text without ANSI colors")
    parser.add_argument("--log-level", default="WARNING", choices=LOG_LEVELS, help="diagnostic log level")
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    return play_shell(color=not args.no_color)


def play_shell(
    input_fn: InputFn = input,
    print_fn: PrintFn = print,
    *,
    color: bool = True,
    session: GameSession | None = None,
) -> int:
    """Run the interactive prompt until `exit`, end of input or Ctrl-C."""
    game = session if session is not None else GameSession()
    show = _renderer(color)
    view = game.current()
    print_fn(show(markup.success("=== CLI Adventures ===")))
    print_fn(WELCOME_MESSAGE)
    _print_challenge(view, print_fn)
    try:
        while True:
            try:
                line = input_fn(f"{view.prompt} ")
            except (EOFError, KeyboardInterrupt):
                raise QuitApp() from None

            previous = view
            view = game.process(line)
            text = show(view.result)
            if text:
                print_fn(text)
            if view.result == GOODBYE_MESSAGE:
                return 0
            if view.challenge != previous.challenge:
                _print_challenge(view, print_fn)
    except QuitApp:
        print_fn(GOODBYE_MESSAGE)
        return 0


def _renderer(color: bool) -> Callable[[str], str]:
    """Return a function that prepares result text for this terminal."""
    if color:
        return lambda text: text
    return markup.strip


def _print_challenge(view: CommandResponse, print_fn: PrintFn) -> None:
    """Print the current challenge and its hint."""
    print_fn(f"\nChallenge: {view.challenge}")
    if view.challenge_hint:
        print_fn(f"Hint: {view.challenge_hint}")


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
