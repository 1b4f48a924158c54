"""Exceptions raised by the weekboard store and commands."""


class WeekboardError(Exception):
    """Base exception for weekboard errors."""

    pass


class InvalidShorthandError(WeekboardError):
    """Raised when a string cannot be parsed as project::title shorthand."""

    pass


class InvalidStatusError(WeekboardError):
    """Raised for a status outside todo/in-progress/done/archived."""

    pass


class InvalidWeekIdError(WeekboardError):
    """Raised when a week id is not of the form YYYY-Www."""

    pass


class TaskNotFoundError(WeekboardError):
    """Raised when a task id does not exist."""

    pass


class ProjectInUseError(WeekboardError):
    """Raised when deleting a project that still owns tasks."""

    pass
