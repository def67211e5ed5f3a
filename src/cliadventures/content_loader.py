"""Load declarative world and lesson content from bundled JSON resources."""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

from .models import ArchiveSpec, Lesson, LessonKind, LocationSpec, WorldContent

CONTENT_PACKAGE = "cliadventures.content"
WORLD_FILE = "world.json"
LESSONS_FILE = "lessons.json"


def _location_from_dict(raw: dict[str, Any]) -> LocationSpec:
    """Build a directory node from raw JSON content."""
    key = str(raw["key"]).strip()
    if not key:
        raise ValueError("Location has an empty key.")
    items = tuple(str(item) for item in raw.get("items", []))
    if len(set(items)) != len(items):
        raise ValueError(f"Location '{key}' lists the same item twice.")
    return LocationSpec(
        key=key,
        description=str(raw.get("description", "")),
        items=items,
        exits=tuple(str(item) for item in raw.get("exits", [])),
    )


def _archive_from_dict(raw: dict[str, Any]) -> ArchiveSpec:
    """Build the scripted archive sub-world from raw JSON content."""
    return ArchiveSpec(
        file=str(raw["file"]),
        into=str(raw["into"]),
        location=_location_from_dict(raw["location"]),
        files={str(name): str(text) for name, text in raw.get("files", {}).items()},
    )


def _world_from_dict(raw: dict[str, Any]) -> WorldContent:
    """Build world content from raw JSON content."""
    return WorldContent(
        root=str(raw.get("root", "home")),
        locations=tuple(_location_from_dict(item) for item in raw.get("locations", [])),
        files={str(name): str(text) for name, text in raw.get("files", {}).items()},
        parents={str(child): str(parent) for child, parent in raw.get("parents", {}).items()},
        archive=_archive_from_dict(raw["archive"]),
    )


def _lesson_from_dict(raw: dict[str, Any]) -> Lesson:
    """Build a lesson from raw JSON content."""
    lesson_id = str(raw["id"])
    try:
        kind = LessonKind(str(raw["kind"]))
    except ValueError:
        raise ValueError(f"Lesson '{lesson_id}' has unknown kind '{raw['kind']}'.") from None

    verb = raw.get("verb")
    location = raw.get("location")
    lesson = Lesson(
        id=lesson_id,
        description=str(raw["description"]),
        kind=kind,
        hint=str(raw.get("hint", "")),
        verb=str(verb).lower() if verb else None,
        args=tuple(str(value) for value in raw.get("args", [])),
        no_args=bool(raw.get("no_args", False)),
        location=str(location) if location else None,
    )
    if lesson.kind is LessonKind.COMMAND and lesson.verb is None:
        raise ValueError(f"Lesson '{lesson_id}' needs a verb.")
    if lesson.kind is LessonKind.VISIT and lesson.location is None:
        raise ValueError(f"Lesson '{lesson_id}' needs a location.")
    if lesson.no_args and lesson.args:
        raise ValueError(f"Lesson '{lesson_id}' cannot both require and forbid arguments.")
    return lesson


def load_world() -> WorldContent:
    """Load the bundled starting world."""
    raw = json.loads(resources.files(CONTENT_PACKAGE).joinpath(WORLD_FILE).read_text(encoding="utf-8-sig"))
    content = _world_from_dict(raw)
    _validate_world(content)
    return content


def load_lessons() -> tuple[Lesson, ...]:
    """Load the bundled lesson sequence."""
    raw = json.loads(resources.files(CONTENT_PACKAGE).joinpath(LESSONS_FILE).read_text(encoding="utf-8-sig"))
    lessons = tuple(_lesson_from_dict(item) for item in raw.get("lessons", []))
    _validate_unique_lesson_ids(lessons)
    return lessons


def load_world_from_dir(path: Path) -> WorldContent:
    """Load world content from a directory for tests/tools."""
    raw = json.loads((path / WORLD_FILE).read_text(encoding="utf-8-sig"))
    content = _world_from_dict(raw)
    _validate_world(content)
    return content


def load_lessons_from_dir(path: Path) -> tuple[Lesson, ...]:
    """Load lessons from a directory for tests/tools."""
    raw = json.loads((path / LESSONS_FILE).read_text(encoding="utf-8-sig"))
    lessons = tuple(_lesson_from_dict(item) for item in raw.get("lessons", []))
    _validate_unique_lesson_ids(lessons)
    return lessons


def _validate_world(content: WorldContent) -> None:
    """Validate keys, exits and the parent table against each other."""
    keys: set[str] = set()
    for location in content.locations:
        if location.key in keys:
            raise ValueError(f"Duplicate location key: {location.key}")
        keys.add(location.key)

    if content.root not in keys:
        raise ValueError(f"Root location '{content.root}' is not defined.")

    archive_key = content.archive.location.key
    if archive_key in keys:
        raise ValueError(f"Archive location '{archive_key}' must not exist before extraction.")

    for location in content.locations:
        for target in location.exits:
            if target not in keys:
                raise ValueError(f"Location '{location.key}' has an exit to unknown location '{target}'.")

    known = keys | {archive_key}
    for child, parent in content.parents.items():
        if child not in known or parent not in known:
            raise ValueError(f"Parent entry '{child} -> {parent}' references an unknown location.")
    if content.root in content.parents:
        raise ValueError(f"Root location '{content.root}' cannot have a parent.")

    if content.archive.into not in keys:
        raise ValueError(f"Archive target '{content.archive.into}' is not defined.")
    holder = next(location for location in content.locations if location.key == content.archive.into)
    if content.archive.file not in holder.items:
        raise ValueError(f"Archive file '{content.archive.file}' is not in '{content.archive.into}'.")
    for target in content.archive.location.exits:
        if target not in keys:
            raise ValueError(f"Archive has an exit to unknown location '{target}'.")

    _validate_reachable(content)


def _validate_reachable(content: WorldContent) -> None:
    """Validate that every location can be reached from the root."""
    exits = {location.key: location.exits for location in content.locations}
    seen: set[str] = set()
    pending = [content.root]
    while pending:
        current = pending.pop()
        if current in seen:
            continue
        seen.add(current)
        pending.extend(exits[current])
    unreachable = sorted(set(exits) - seen)
    if unreachable:
        raise ValueError(f"Unreachable locations: {', '.join(unreachable)}")


def _validate_unique_lesson_ids(lessons: tuple[Lesson, ...]) -> None:
    """Validate that lesson IDs are unique."""
    seen: set[str] = set()
    for lesson in lessons:
        if lesson.id in seen:
            raise ValueError(f"Duplicate lesson id: {lesson.id}")
        seen.add(lesson.id)
