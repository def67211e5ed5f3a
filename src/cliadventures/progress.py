"""Lesson completion rules and the sequential lesson tracker."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from .models import Lesson, LessonKind

logger = logging.getLogger(__name__)

FREE_EXPLORE_MESSAGE = "All challenges completed! Explore freely!"


@dataclass(frozen=True)
class SessionSnapshot:
    """What a lesson rule may look at after a command has run.

    `location` is the current location key, so user-made directories that
    share a display name never satisfy a location rule.
    """

    location: str
    items: tuple[str, ...]
    readable: frozenset[str]
    mission_complete: bool


def lesson_satisfied(lesson: Lesson, verb: str, args: list[str], snapshot: SessionSnapshot) -> bool:
    """Return whether one command satisfies a lesson's rule."""
    if lesson.kind is LessonKind.MISSION:
        return snapshot.mission_complete

    if lesson.kind is LessonKind.READ_FILE:
        return verb == "cat" and bool(args) and args[0] in snapshot.items and args[0] in snapshot.readable

    if lesson.kind is LessonKind.VISIT:
        if snapshot.location != lesson.location:
            return False
        return verb == "ls" or (verb == "cd" and bool(args))

    if verb != lesson.verb:
        return False
    if lesson.no_args and args:
        return False
    if lesson.args and (not args or args[0] not in lesson.args):
        return False
    if lesson.location is not None and snapshot.location != lesson.location:
        return False
    return True


class LessonTracker:
    """Ordered lessons where only the earliest pending one can complete."""

    def __init__(self, lessons: Iterable[Lesson]) -> None:
        """Initialize tracker with nothing completed."""
        self.lessons = tuple(lessons)
        self.completed: set[str] = set()

    def current(self) -> Lesson | None:
        """Return the earliest lesson not yet completed."""
        for lesson in self.lessons:
            if lesson.id not in self.completed:
                return lesson
        return None

    @property
    def all_complete(self) -> bool:
        """Whether every lesson has been completed."""
        return self.current() is None

    def evaluate(self, verb: str, args: list[str], snapshot: SessionSnapshot) -> Lesson | None:
        """Complete and return the current lesson if this command satisfies it."""
        lesson = self.current()
        if lesson is None or not lesson_satisfied(lesson, verb, args, snapshot):
            return None
        self.completed.add(lesson.id)
        logger.info("lesson completed: %s (%d/%d)", lesson.id, len(self.completed), len(self.lessons))
        return lesson

    def challenge(self) -> tuple[str, str]:
        """Return (description, hint) for the current lesson."""
        lesson = self.current()
        if lesson is None:
            return (FREE_EXPLORE_MESSAGE, "")
        return (lesson.description, lesson.hint)

    def reset(self) -> None:
        """Forget all completed lessons."""
        self.completed.clear()
