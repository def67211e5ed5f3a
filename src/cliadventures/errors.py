"""User-facing command failures.

Every failure is recoverable within the same turn: the session renders the
message and leaves its state untouched.
"""

from __future__ import annotations


class CommandError(Exception):
    """Base class for a rejected command."""

    category = "error"

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.hint = hint


class UsageError(CommandError):
    """Wrong argument count or malformed input."""

    category = "usage"


class NotFoundError(CommandError):
    """A named file or directory does not exist here."""

    category = "not_found"


class KindMismatchError(CommandError):
    """A file was used as a directory or the other way round."""

    category = "kind_mismatch"


class PreconditionError(CommandError):
    """The operation is valid but not in the current state of the world."""

    category = "precondition"


class UnknownCommandError(CommandError):
    """The verb is not a supported command."""

    category = "unknown_command"
