"""cliadventures package: a virtual shell for learning command-line basics."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from .models import CommandResponse
from .service import GameSession

__all__ = ["CommandResponse", "GameSession", "__version__"]


def _version_from_pyproject() -> str | None:
    """Best-effort version lookup from a local pyproject.toml for source runs."""
    for base in Path(__file__).resolve().parents:
        pyproject = base / "pyproject.toml"
        if not pyproject.exists():
            continue
        with pyproject.open("rb") as handle:
            project = tomllib.load(handle).get("project", {})
        if project.get("name") == "cliadventures" and "version" in project:
            return str(project["version"])
    return None


_project_version = _version_from_pyproject()
if _project_version is not None:
    __version__ = _project_version
else:
    try:
        __version__ = version("cliadventures")
    except PackageNotFoundError:
        __version__ = "0+unknown"
