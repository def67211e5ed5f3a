from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from cliadventures import markup  # noqa: E402
from cliadventures.service import GameSession  # noqa: E402


@pytest.fixture
def session() -> GameSession:
    """Fresh game session on the bundled world and lessons."""
    return GameSession()


@pytest.fixture
def shell(session: GameSession) -> Callable[..., str]:
    """Process lines in order and return the last result without color codes."""

    def _run(*lines: str) -> str:
        text = ""
        for line in lines:
            text = markup.strip(session.process(line).result)
        return text

    return _run
