"""Start a game with `python -m cliadventures`."""

from __future__ import annotations

from .main import run


def main(argv: list[str] | None = None) -> int:
    """Parse `argv` and play until the player leaves; return the exit status."""
    return run(argv)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
