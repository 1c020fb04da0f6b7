from __future__ import annotations


class PomobotError(Exception):
    """Base class for errors raised by the bot's services."""


class UserInputError(PomobotError):
    """Bad input from the chat user; reported back as a normal reply."""


class EmptyTaskDescriptionError(UserInputError):
    def __init__(self) -> None:
        super().__init__("Task description cannot be empty.")


class TaskDescriptionTooLongError(UserInputError):
    def __init__(self, limit: int) -> None:
        self.limit = limit
        super().__init__(f"Task description is too long. Maximum {limit} characters.")


class InvalidTaskIndexError(UserInputError):
    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"'{raw}' is not a task number.")


class TaskIndexOutOfRangeError(UserInputError):
    def __init__(self, index: int, total: int) -> None:
        self.index = index
        self.total = total
        if total == 0:
            message = "You have no pending tasks to remove."
        else:
            message = f"There is no task #{index}. You have {total} pending task(s)."
        super().__init__(message)


class StoreUnavailableError(PomobotError):
    """The task store could not complete an operation."""


class ClockUnderflowError(ValueError):
    """Raised when a clock already at 00:00 is decremented."""
