"""Error taxonomy for the task tracker.

Every error raised by the store, the persistence layer or the id parser
derives from TaskTrackerError and carries an ErrorKind, so the CLI can
report and branch on the kind instead of the message text.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from pathlib import Path


class ErrorKind(enum.StrEnum):
    INVALID_INPUT = "invalid-input"
    INVALID_STATUS = "invalid-status"
    NOT_FOUND = "not-found"
    EMPTY_STORE = "empty-store"
    CORRUPT_STORE = "corrupt-store"
    PERSISTENCE = "persistence"
    PARSE = "parse"


class TaskTrackerError(Exception):
    """Base class for every error the tracker reports to the user."""

    kind: ErrorKind


class InvalidInputError(TaskTrackerError):
    """A description was empty or whitespace-only."""

    kind = ErrorKind.INVALID_INPUT

    def __init__(self, message: str = "Task description must not be empty") -> None:
        super().__init__(message)


class InvalidStatusError(TaskTrackerError):
    kind = ErrorKind.INVALID_STATUS

    def __init__(self, status: object, valid: Iterable[str] = ()) -> None:
        self.status = status
        message = f"Invalid status '{status}'"
        if valid:
            message += f". Valid statuses: {', '.join(valid)}"
        super().__init__(message)


class TaskNotFoundError(TaskTrackerError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, task_id: int) -> None:
        self.task_id = task_id
        super().__init__(f"Task {task_id} not found")


class EmptyStoreError(TaskNotFoundError):
    """The store holds no tasks at all.

    Subclasses TaskNotFoundError: any id lookup on an empty store is also a
    miss, so callers that only care about "not found" can catch the parent.
    """

    kind = ErrorKind.EMPTY_STORE

    def __init__(self, task_id: int | None = None) -> None:
        self.task_id = task_id
        TaskTrackerError.__init__(self, "There are no tasks, start working!")


class CorruptStoreError(TaskTrackerError):
    kind = ErrorKind.CORRUPT_STORE

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Task file {path} is corrupt: {reason}")


class PersistenceError(TaskTrackerError):
    kind = ErrorKind.PERSISTENCE

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Could not access task file {path}: {reason}")


class ParseError(TaskTrackerError):
    kind = ErrorKind.PARSE

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"Invalid task id '{raw}': expected a positive integer")
