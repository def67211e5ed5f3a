"""In-memory directory graph and global file table."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .models import LocationSpec, WorldContent

logger = logging.getLogger(__name__)


@dataclass
class Location:
    """One directory node.

    `key` is the stable identifier used in exits; `name` is what players see
    and type. They differ only for directories created under a name that was
    already taken by another key or reserved for the archive.
    """

    key: str
    name: str
    description: str
    items: list[str] = field(default_factory=list)
    exits: list[str] = field(default_factory=list)


def _location_from_spec(spec: LocationSpec) -> Location:
    return Location(
        key=spec.key,
        name=spec.key,
        description=spec.description,
        items=list(spec.items),
        exits=list(spec.exits),
    )


class World:
    """Directory graph plus the flat file-content table shared by all directories."""

    def __init__(self, content: WorldContent) -> None:
        """Build a fresh mutable world from immutable content."""
        self.content = content
        self.root = content.root
        self.locations: dict[str, Location] = {spec.key: _location_from_spec(spec) for spec in content.locations}
        self.files: dict[str, str] = dict(content.files)
        self._parents = dict(content.parents)
        self.archive_key: str | None = None
        # Keys that only bundled content may claim.
        self._reserved = {content.archive.location.key}

    def __contains__(self, key: object) -> bool:
        return key in self.locations

    def __getitem__(self, key: str) -> Location:
        return self.locations[key]

    def keys(self) -> list[str]:
        """Return location keys in creation order."""
        return list(self.locations)

    def child(self, key: str, name: str) -> Location | None:
        """Return the exit of `key` that players know as `name`."""
        for target in self.locations[key].exits:
            location = self.locations.get(target)
            if location is not None and location.name == name:
                return location
        return None

    def has_exit(self, key: str, name: str) -> bool:
        """Return whether `key` has an exit named `name`."""
        return self.child(key, name) is not None

    def has_item(self, key: str, name: str) -> bool:
        """Return whether `key` lists a file called `name`."""
        return name in self.locations[key].items

    def find_by_name(self, name: str) -> Location | None:
        """Return the first location anywhere in the world called `name`."""
        for location in self.locations.values():
            if location.name == name:
                return location
        return None

    def parent_of(self, key: str) -> str | None:
        """Return the parent key of `key`, or None for the root.

        The fixed parent table wins when the listed parent really links to the
        node; otherwise the first location whose exits contain `key` is used.
        """
        if key == self.root:
            return None
        mapped = self._parents.get(key)
        if mapped is not None and mapped in self.locations and key in self.locations[mapped].exits:
            return mapped
        for location in self.locations.values():
            if key in location.exits:
                return location.key
        return None

    def visible_exits(self, key: str) -> list[Location]:
        """Return exits of `key` as shown by `ls`, without the way back up."""
        parent = self.parent_of(key)
        return [self.locations[target] for target in self.locations[key].exits if target != parent]

    def add_directory(self, parent_key: str, name: str, description: str | None = None) -> Location:
        """Create a directory under `parent_key` linked both ways."""
        key = name
        if key in self.locations or key in self._reserved:
            key = f"{parent_key}_{name}"
            suffix = 2
            while key in self.locations:
                key = f"{parent_key}_{name}_{suffix}"
                suffix += 1
        location = Location(
            key=key,
            name=name,
            description=description or f"A directory you created named {name}.",
            exits=[parent_key],
        )
        self.locations[key] = location
        self.locations[parent_key].exits.append(key)
        logger.debug("created directory %s (key=%s) under %s", name, key, parent_key)
        return location

    def add_file(self, key: str, name: str, text: str = "") -> None:
        """Add a file to a directory and register its content."""
        self.locations[key].items.append(name)
        self.files[name] = text

    def remove_file(self, key: str, name: str) -> None:
        """Remove a file from a directory and forget its content."""
        self.locations[key].items.remove(name)
        self.files.pop(name, None)

    def rename_file(self, key: str, source: str, destination: str) -> None:
        """Rename a file within one directory, replacing any existing destination."""
        items = self.locations[key].items
        items.remove(source)
        if destination in items:
            items.remove(destination)
        items.append(destination)
        if source in self.files:
            self.files[destination] = self.files.pop(source)
        else:
            self.files.pop(destination, None)

    def copy_file(self, key: str, source: str, destination: str) -> None:
        """Copy a file within one directory, replacing any existing destination."""
        items = self.locations[key].items
        if destination not in items:
            items.append(destination)
        if source in self.files:
            self.files[destination] = self.files[source]
        else:
            self.files.pop(destination, None)

    def move_item(self, source_key: str, destination_key: str, name: str) -> None:
        """Move a file between two directories."""
        self.locations[source_key].items.remove(name)
        target = self.locations[destination_key].items
        if name not in target:
            target.append(name)

    @property
    def archive(self) -> Location | None:
        """Return the extracted archive directory, if any."""
        if self.archive_key is None:
            return None
        return self.locations[self.archive_key]

    def extract_archive(self) -> Location:
        """Merge the scripted archive contents into the world."""
        bundled = self.content.archive
        key = bundled.location.key
        location = Location(
            key=key,
            name=bundled.location.key,
            description=bundled.location.description,
            items=list(bundled.location.items),
            exits=list(bundled.location.exits),
        )
        self.locations[key] = location
        self.locations[bundled.into].exits.append(key)
        self.files.update(bundled.files)
        self.archive_key = key
        logger.info("extracted %s into %s", bundled.file, bundled.into)
        return location
