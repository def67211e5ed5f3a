"""Game session: owns the world, progress and history for one player."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .commands import dispatch, parse_command, render_error
from .content_loader import load_lessons, load_world
from .errors import CommandError, UsageError
from .markup import CLEAR_SCREEN
from .models import CommandResponse, Lesson, WorldContent
from .progress import LessonTracker, SessionSnapshot
from .world import World

logger = logging.getLogger(__name__)


class GameSession:
    """Coordinates one player's world state, lesson progress and command history.

    Commands are processed strictly one at a time; every call to `process`
    runs to completion and returns the fields a renderer needs.
    """

    def __init__(self, content: WorldContent | None = None, lessons: Iterable[Lesson] | None = None) -> None:
        """Initialize a fresh session from bundled or supplied content."""
        self.content = content if content is not None else load_world()
        self.tracker = LessonTracker(lessons if lessons is not None else load_lessons())
        self.world = World(self.content)
        self.location = self.world.root
        self.history: list[str] = []
        # Kept for save-data compatibility; no command reads or writes it.
        self.inventory: list[str] = []
        self.mission_complete = False

    def process(self, command: str) -> CommandResponse:
        """Run one raw command line and return the updated view."""
        line = command.strip()
        if not line:
            empty = UsageError("No command entered. Type 'help' for a list of available commands.")
            return self.current(render_error(empty))

        self.history.append(line)
        try:
            verb, args = parse_command(line)
        except CommandError as exc:
            return self.current(render_error(exc))

        try:
            output = dispatch(self, verb, args)
        except CommandError as exc:
            logger.debug("rejected %r: %s (%s)", line, exc.message, exc.category)
            output = render_error(exc)

        # Rejected commands still count toward the current lesson; their state is unchanged.
        lesson = self.tracker.evaluate(verb, args, self.snapshot())
        if lesson is not None:
            output = _announce(lesson, output)
        return self.current(output)

    def current(self, result: str = "") -> CommandResponse:
        """Return the session view with the given display text."""
        description, hint = self.tracker.challenge()
        return CommandResponse(
            result=result,
            location=self.location,
            challenge=description,
            challenge_hint=hint,
            location_name=self.world[self.location].name,
            root=self.world.root,
        )

    def snapshot(self) -> SessionSnapshot:
        """Return the state lesson rules are evaluated against."""
        here = self.world[self.location]
        return SessionSnapshot(
            location=here.key,
            items=tuple(here.items),
            readable=frozenset(item for item in here.items if item in self.world.files),
            mission_complete=self.mission_complete,
        )

    def reset(self) -> None:
        """Restore the starting world and forget all progress."""
        self.world = World(self.content)
        self.location = self.world.root
        self.history.clear()
        self.inventory.clear()
        self.mission_complete = False
        self.tracker.reset()
        logger.info("session reset")


def _announce(lesson: Lesson, output: str) -> str:
    """Prefix command output with a lesson completion banner."""
    banner = f"🎉 Challenge completed: {lesson.description}"
    if output.startswith(CLEAR_SCREEN):
        return f"{CLEAR_SCREEN}{banner}\n{output[len(CLEAR_SCREEN):]}"
    return f"{banner}\n{output}"
