"""Command parsing and per-verb handlers for the virtual shell."""

from __future__ import annotations

import logging
import shlex
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from . import markup
from .errors import (
    CommandError,
    KindMismatchError,
    NotFoundError,
    PreconditionError,
    UnknownCommandError,
    UsageError,
)
from .world import World

if TYPE_CHECKING:
    from .service import GameSession

logger = logging.getLogger(__name__)

TREASURE_FILE = "treasure.json"
VAULT = "hidden_vault"
ARCHIVE_DIR = "archive"
RELICS_DIR = "relics"
RELICS_DESCRIPTION = "A secure directory for storing valuable treasures"
PROTECTED_FILES = frozenset({TREASURE_FILE, "mission.txt"})
RESERVED_NAMES = frozenset({".", "..", "~"})

GOODBYE_MESSAGE = "Thanks for playing CLI Adventures!"
WELCOME_MESSAGE = "Welcome to CLI Adventures! Type 'help' to see available commands."

Handler = Callable[["GameSession", list[str]], str]


@dataclass(frozen=True)
class Command:
    """One supported verb with its arity rules and help text."""

    name: str
    usage: str
    summary: str
    handler: Handler
    min_args: int = 0
    max_args: int | None = None
    missing: str = "Missing arguments."

    def check_arity(self, args: list[str]) -> None:
        """Reject argument counts this command cannot take."""
        if len(args) < self.min_args:
            raise UsageError(f"{self.missing} Usage: '{self.usage}'.")
        if self.max_args is not None and len(args) > self.max_args:
            raise UsageError(f"Too many arguments provided. Usage: '{self.usage}'.")


def parse_command(line: str) -> tuple[str, list[str]]:
    """Split a command line into a lowercase verb and case-sensitive arguments."""
    try:
        tokens = shlex.split(line.strip(), posix=True)
    except ValueError:
        raise UsageError("Unbalanced quotes in command. Close the quote and try again.") from None
    if not tokens or not tokens[0]:
        raise UsageError("No command entered. Type 'help' for a list of available commands.")
    return (tokens[0].lower(), tokens[1:])


def dispatch(session: GameSession, verb: str, args: list[str]) -> str:
    """Run one parsed command against the session and return its display text."""
    command = COMMANDS.get(verb)
    if command is None:
        raise _unknown_command(session, verb)
    command.check_arity(args)
    logger.debug("dispatch %s %s at %s", verb, args, session.location)
    return command.handler(session, args)


def suggest_command(typed: str, candidates: list[str] | None = None) -> str | None:
    """Return the closest known verb for a typo, if any.

    A candidate qualifies when at least half of the typed characters occur in
    it; among those, the smallest length difference wins and earlier
    candidates win ties.
    """
    if len(typed) <= 1:
        return None
    best: str | None = None
    best_distance: int | None = None
    for candidate in candidates if candidates is not None else list(COMMANDS):
        distance = abs(len(candidate) - len(typed))
        matching = sum(1 for char in typed if char in candidate)
        if matching >= len(typed) / 2 and (best_distance is None or distance < best_distance):
            best = candidate
            best_distance = distance
    if best == typed:
        return None
    return best


def _unknown_command(session: GameSession, verb: str) -> CommandError:
    """Build the error for a verb that is not a command."""
    if session.world.has_item(session.location, verb):
        return KindMismatchError(f"Cannot execute '{verb}'. To view this file, type 'cat {verb}' instead.")
    suggestion = suggest_command(verb)
    if suggestion is not None:
        return UnknownCommandError(f"Command '{verb}' not recognized. Did you mean '{suggestion}'?")
    return UnknownCommandError("Command not recognized. Type 'help' for a list of valid commands.")


def _help(session: GameSession, args: list[str]) -> str:
    if args:
        command = COMMANDS.get(args[0].lower())
        if command is None:
            raise NotFoundError(f"No help available for '{args[0]}'. Type 'help' for a list of available commands.")
        return f"{command.usage}: {command.summary}"
    lines = ["Available commands:"]
    lines.extend(f"- {command.usage}: {command.summary}" for command in COMMANDS.values())
    return "\n".join(lines)


def _ls(session: GameSession, args: list[str]) -> str:
    world = session.world
    here = session.location
    if args:
        target = args[0]
        if world.has_exit(here, target):
            raise UsageError(f"To view contents of '{target}', first use 'cd {target}', then 'ls'.")
        if world.has_item(here, target):
            raise KindMismatchError(f"'{target}' is a file. 'ls' only lists the current directory.")
        if world.find_by_name(target) is not None:
            raise PreconditionError(
                f"Cannot access '{target}' from current location. Use 'cd' to navigate there first."
            )
        raise NotFoundError(f"No such directory: '{target}'.")

    files = " ".join(world[here].items)
    dirs = " ".join(markup.directory(location.name) for location in world.visible_exits(here))
    return files + (" " if files and dirs else "") + dirs


def _cd(session: GameSession, args: list[str]) -> str:
    world = session.world
    if not args:
        session.location = world.root
        return f"Changed directory to {world[world.root].name}"

    path = args[0]
    if "/" in path:
        current = world.root if path.startswith("/") else session.location
        for segment in (part for part in path.split("/") if part):
            try:
                current = _step(world, current, segment)
            except NotFoundError:
                raise NotFoundError(f"Directory '{segment}' not found in the path {path}.") from None
        session.location = current
        return f"Changed directory to {path}"

    session.location = _step(world, session.location, path)
    return f"Changed directory to {world[session.location].name}"


def _step(world: World, current: str, segment: str) -> str:
    """Resolve one path segment from `current` to a location key."""
    if world.has_item(current, segment):
        raise KindMismatchError(f"'{segment}' is a file. You can only 'cd' into directories.")
    if segment == "..":
        parent = world.parent_of(current)
        if parent is None:
            raise PreconditionError("Already at the root directory; you cannot go any higher.")
        return parent
    if segment == "~":
        return world.root

    target = world.child(current, segment)
    if target is None:
        if world.find_by_name(segment) is not None:
            raise PreconditionError(f"No direct path to '{segment}' from current location.")
        raise NotFoundError(
            f"Directory '{segment}' not found here. Check your spelling or use 'ls' to verify available directories."
        )
    if target.key == world.root:
        raise PreconditionError("Cannot access home directory directly from subdirectories. Use 'cd ~' instead.")
    if target.key == world.parent_of(current):
        raise PreconditionError(
            f"Cannot directly access parent directory '{segment}' from '{world[current].name}'. Use 'cd ..' instead."
        )
    return target.key


def _cat(session: GameSession, args: list[str]) -> str:
    world = session.world
    name = args[0]
    if world.has_exit(session.location, name):
        raise KindMismatchError(f"'{name}' is a directory. You can only use 'cat' to view file contents.")
    if not world.has_item(session.location, name):
        raise NotFoundError(f"File '{name}' does not exist here. Use 'ls' to verify available files.")
    if name not in world.files:
        raise NotFoundError(f"Cannot display contents of '{name}'.")

    text = world.files[name]
    # Nudge players who keep reading the treasure instead of moving it.
    if name == TREASURE_FILE and sum(1 for line in session.history if line.startswith("cat treasure")) > 2:
        text += f"\n\nHint: '{TREASURE_FILE}' seems like something you'd want to move, not just read."
    return text


def _pwd(session: GameSession, args: list[str]) -> str:
    world = session.world
    if session.location == world.root:
        return "~"
    return f"/{world[session.location].name}"


def _check_new_name(name: str, kind: str) -> None:
    if "/" in name:
        raise UsageError(f"Cannot create {kind} '{name}'. Names cannot contain '/'; create it from inside its parent.")
    if name in RESERVED_NAMES:
        raise UsageError(f"Cannot create {kind} '{name}'. That name is reserved.")


def _mkdir(session: GameSession, args: list[str]) -> str:
    world = session.world
    here = session.location
    name = args[0]
    _check_new_name(name, "directory")
    if world.has_exit(here, name):
        raise PreconditionError(f"Directory '{name}' already exists.")
    if world.has_item(here, name):
        raise KindMismatchError(f"Cannot create directory '{name}'. A file with that name already exists.")

    mission_relics = name == RELICS_DIR and here == world.archive_key
    world.add_directory(here, name, RELICS_DESCRIPTION if mission_relics else None)
    if mission_relics and world.has_item(VAULT, TREASURE_FILE):
        return (
            f"Created directory: {name}\n\n"
            f"Hint: Now you can move the {TREASURE_FILE} from {VAULT} to archive/relics!"
        )
    return f"Created directory: {name}"


def _touch(session: GameSession, args: list[str]) -> str:
    world = session.world
    name = args[0]
    _check_new_name(name, "file")
    if world.has_exit(session.location, name):
        raise KindMismatchError(f"Cannot create file '{name}'. A directory with that name already exists.")
    if world.has_item(session.location, name):
        return f"Updated timestamp of {name}"
    world.add_file(session.location, name)
    return f"Created file: {name}"


def _rm(session: GameSession, args: list[str]) -> str:
    world = session.world
    name = args[0]
    if world.has_exit(session.location, name):
        raise KindMismatchError(f"'{name}' is a directory. Current permissions do not allow directory removal.")
    if not world.has_item(session.location, name):
        raise NotFoundError(f"Cannot remove '{name}': File does not exist.")
    if name in PROTECTED_FILES and not _repeated(session):
        return markup.error(
            f"Warning: You're attempting to remove a crucial file '{name}'. "
            "This action may impact your mission progress. Confirm by running the command again."
        )
    world.remove_file(session.location, name)
    return f"Removed: {name}"


def _repeated(session: GameSession) -> bool:
    """Whether the command being run is identical to the one before it."""
    history = session.history
    return len(history) >= 2 and history[-1] == history[-2]


def _check_source(session: GameSession, source: str, verb: str, destination: str) -> None:
    world = session.world
    if "/" in source:
        if f"{VAULT}/{TREASURE_FILE}" in source:
            raise PreconditionError(
                f"Cannot {verb} '{source}': File does not exist here.",
                hint=(
                    "To access this file, you need to navigate to it first:\n"
                    f"cd projects\ncd {VAULT}\n{verb} {TREASURE_FILE} {destination}"
                ),
            )
        first = source.split("/")[0]
        if first in {"", "~", world.root} or world.has_exit(session.location, first):
            raise PreconditionError(
                f"Cannot {verb} '{source}': You must first navigate to the directory containing the file."
            )
        raise NotFoundError(f"Cannot {verb} '{source}': File does not exist here.")
    if world.has_exit(session.location, source):
        raise KindMismatchError(f"'{source}' is a directory. Only files can be used with '{verb}'.")
    if not world.has_item(session.location, source):
        raise NotFoundError(f"Cannot {verb} '{source}': File does not exist here.")


def _check_same_directory(session: GameSession, destination: str, verb: str) -> None:
    crosses = (
        "/" in destination
        or destination.startswith("~")
        or destination in RESERVED_NAMES
        or session.world.has_exit(session.location, destination)
    )
    if crosses:
        raise PreconditionError(
            f"Cannot {verb} files between directories. Navigate to the directory containing the file "
            f"and {verb} it there.",
            hint=(
                f"Only the mission objective (moving {TREASURE_FILE} to archive/relics) "
                "supports cross-directory moves."
            ),
        )


def _mv(session: GameSession, args: list[str]) -> str:
    world = session.world
    source, destination = args
    _check_source(session, source, "mv", destination)
    if source == destination:
        raise UsageError(f"Invalid operation. Cannot move '{source}' into itself.")
    if source == TREASURE_FILE and session.location == VAULT and ARCHIVE_DIR in destination:
        return _return_treasure(session)
    _check_same_directory(session, destination, "mv")
    world.rename_file(session.location, source, destination)
    return f"Moved {source} to {destination}"


def _return_treasure(session: GameSession) -> str:
    """Move the treasure from the vault into archive/relics and finish the mission."""
    world = session.world
    archive = world.archive
    if archive is None:
        raise PreconditionError(
            f"Cannot move '{TREASURE_FILE}': Destination 'archive' not found.",
            hint="You need to extract archive.zip first using 'unzip archive.zip' in the downloads directory.",
        )
    relics = world.child(archive.key, RELICS_DIR)
    if relics is None:
        raise PreconditionError(
            "Cannot move to 'relics': Directory not found.",
            hint="You need to create the relics directory inside archive using 'mkdir relics'.",
        )
    world.move_item(VAULT, relics.key, TREASURE_FILE)
    session.mission_complete = True
    logger.info("mission complete: %s moved to %s", TREASURE_FILE, relics.key)
    return (
        markup.success("🎉 MISSION ACCOMPLISHED! 🎉")
        + "\nYou've successfully returned the treasure to its rightful place in archive/relics!"
    )


def _cp(session: GameSession, args: list[str]) -> str:
    source, destination = args
    _check_source(session, source, "cp", destination)
    _check_same_directory(session, destination, "cp")
    session.world.copy_file(session.location, source, destination)
    return f"Copied {source} to {destination}"


def _clear(session: GameSession, args: list[str]) -> str:
    return markup.CLEAR_SCREEN


def _reset(session: GameSession, args: list[str]) -> str:
    session.reset()
    return f"{markup.CLEAR_SCREEN}\n{markup.success('=== Game Reset ===')}\n{WELCOME_MESSAGE}"


def _unzip(session: GameSession, args: list[str]) -> str:
    world = session.world
    name = args[0]
    if world.has_exit(session.location, name):
        raise KindMismatchError(f"'{name}' is a directory, not a zip archive.")
    if not world.has_item(session.location, name):
        raise NotFoundError(f"Zip archive '{name}' not found.")
    if not name.endswith(".zip"):
        raise UsageError(f"'{name}' is not a zip file. Use 'ls' to check available files.")

    bundled = world.content.archive
    if session.location != bundled.into or name != bundled.file:
        raise PreconditionError(f"'{name}' is not a valid zip archive for this mission.")
    if world.archive is not None:
        return (
            markup.error("Warning: Archive already extracted. Files already exist here.")
            + "\n\nHint: Archive is already extracted. Continue with your mission!"
        )
    if world.has_exit(session.location, bundled.location.key):
        raise PreconditionError(
            f"Cannot extract '{name}': a directory named '{bundled.location.key}' already exists here."
        )
    world.extract_archive()
    return f"Archive extracted successfully. You can now access the '{bundled.location.key}' directory."


def _exit(session: GameSession, args: list[str]) -> str:
    return GOODBYE_MESSAGE


COMMANDS: dict[str, Command] = {
    command.name: command
    for command in (
        Command("help", "help", "Show this help message", _help, max_args=1),
        Command("ls", "ls", "List contents of current directory", _ls),
        Command(
            "cd",
            "cd [directory]",
            "Change to specified directory (use .. to go up one level, ~ to go home)",
            _cd,
            max_args=1,
        ),
        Command(
            "cat",
            "cat [file]",
            "View contents of a file",
            _cat,
            min_args=1,
            max_args=1,
            missing="Specify a file to view its contents.",
        ),
        Command("pwd", "pwd", "Print working directory", _pwd, max_args=0),
        Command(
            "mkdir",
            "mkdir [directory]",
            "Create a new directory",
            _mkdir,
            min_args=1,
            max_args=1,
            missing="Specify a name.",
        ),
        Command(
            "touch",
            "touch [file]",
            "Create a new empty file",
            _touch,
            min_args=1,
            max_args=1,
            missing="Specify a name.",
        ),
        Command(
            "rm",
            "rm [file]",
            "Remove a file",
            _rm,
            min_args=1,
            max_args=1,
            missing="Specify a file to remove.",
        ),
        Command("mv", "mv [source] [destination]", "Move or rename a file", _mv, min_args=2, max_args=2),
        Command("cp", "cp [source] [destination]", "Copy a file", _cp, min_args=2, max_args=2),
        Command("clear", "clear", "Clear the terminal", _clear, max_args=0),
        Command("reset", "reset", "Reset the game to its initial state", _reset, max_args=0),
        Command(
            "unzip",
            "unzip [file.zip]",
            "Extract contents of a zip file",
            _unzip,
            min_args=1,
            max_args=1,
            missing="Specify a file to unzip.",
        ),
        Command("exit", "exit", "Exit the game", _exit, max_args=0),
    )
}


def render_error(exc: CommandError) -> str:
    """Format a rejected command for display."""
    text = markup.error(f"Error: {exc.message}")
    if exc.hint:
        text += f"\n\nHint: {exc.hint}"
    return text
