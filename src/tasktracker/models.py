"""Task model and status definitions."""

from __future__ import annotations

import enum
from dataclasses import dataclass

from tasktracker.errors import InvalidStatusError


class TaskStatus(enum.StrEnum):
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


def parse_status(value: str) -> TaskStatus:
    """Validate a status string and return the matching TaskStatus.

    Surrounding whitespace is ignored; the comparison itself is case-sensitive.
    This is the only place statuses are validated.
    """
    try:
        return TaskStatus(str(value).strip())
    except ValueError:
        raise InvalidStatusError(value, [s.value for s in TaskStatus]) from None


@dataclass
class Task:
    """A single tracked task."""

    id: int
    description: str
    created_at: int
    updated_at: int
    status: TaskStatus = TaskStatus.TODO

    def touch(self, now: int) -> None:
        # updated_at never goes below created_at, even if the clock went backwards
        self.updated_at = max(now, self.created_at)

    def row(self) -> tuple[int, str, TaskStatus, int, int]:
        """Raw fields for display: (id, description, status, created_at, updated_at)."""
        return (self.id, self.description, self.status, self.created_at, self.updated_at)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "description": self.description,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, d: dict) -> Task:
        return cls(
            id=d["id"],
            description=d["description"],
            created_at=d["createdAt"],
            updated_at=d["updatedAt"],
            status=parse_status(d["status"]),
        )
