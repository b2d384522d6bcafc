"""Exceptions raised by wslreclaim."""


class ReclaimError(Exception):
    """Base class for wslreclaim errors."""


class PreconditionError(ReclaimError):
    """A prerequisite is missing; nothing has been changed."""


class UserCancelled(ReclaimError):
    """The user declined a confirmation prompt."""


class CommandError(ReclaimError):
    """An external command could not be run or failed."""

    def __init__(self, command: list[str], message: str, returncode: int | None = None):
        self.command = command
        self.returncode = returncode
        super().__init__(message)
