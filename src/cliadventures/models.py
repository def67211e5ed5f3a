"""Core domain models for the virtual shell game."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .markup import CLEAR_SCREEN


class LessonKind(str, Enum):
    """Shape of a lesson's completion rule."""

    COMMAND = "command"
    READ_FILE = "read_file"
    VISIT = "visit"
    MISSION = "mission"


@dataclass(frozen=True)
class Lesson:
    """One teachable step with a completion rule and hint."""

    id: str
    description: str
    kind: LessonKind
    hint: str
    verb: str | None = None
    args: tuple[str, ...] = ()
    no_args: bool = False
    location: str | None = None


@dataclass(frozen=True)
class LocationSpec:
    """Declarative directory node from bundled content."""

    key: str
    description: str
    items: tuple[str, ...]
    exits: tuple[str, ...]


@dataclass(frozen=True)
class ArchiveSpec:
    """Scripted sub-world revealed by extracting one zip file."""

    file: str
    into: str
    location: LocationSpec
    files: dict[str, str]


@dataclass(frozen=True)
class WorldContent:
    """Starting topology, file contents and the fixed parent table."""

    root: str
    locations: tuple[LocationSpec, ...]
    files: dict[str, str]
    parents: dict[str, str]
    archive: ArchiveSpec


@dataclass(frozen=True)
class CommandResponse:
    """Result record handed to whatever renders the game."""

    result: str
    location: str
    challenge: str
    challenge_hint: str
    location_name: str = field(default="")
    root: str = field(default="home")

    @property
    def clears_screen(self) -> bool:
        """Whether the renderer should wipe its scrollback before showing `result`."""
        return self.result.startswith(CLEAR_SCREEN)

    @property
    def prompt(self) -> str:
        """Shell prompt for the current location."""
        if self.location == self.root:
            return "~$"
        return f"/{self.location_name or self.location}$"

    def as_dict(self) -> dict[str, str]:
        """Return the relay payload shape."""
        return {
            "result": self.result,
            "location": self.location,
            "challenge": self.challenge,
            "challenge_hint": self.challenge_hint,
        }
